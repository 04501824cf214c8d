import sys


def pause_before_exit(prompt: str = "Press Enter to close") -> None:
    """Keep a double-clicked console window open until the user reads it."""
    if not (sys.stdin and sys.stdin.isatty()):
        return
    print("")
    print(prompt)
    try:
        sys.stdin.readline()
    except (EOFError, KeyboardInterrupt):
        pass
