# mod_updater/log.py
from __future__ import annotations
import io, os, sys
from typing import Callable

from tqdm import tqdm

# Report sink signature used everywhere in the updater:
#   report(message: str) -> None
Reporter = Callable[[str], None]


def log(msg: str) -> None:
    """
    Default report sink:
    - Prefer tqdm.write so lines don't tear an active progress bar.
    - Fallback to plain print, even if sys.stderr is None.
    """
    try:
        tqdm.write(msg, file=sys.stdout)
        return
    except Exception:
        pass
    if getattr(sys, "stdout", None) is not None:
        print(msg)
    elif getattr(sys, "stderr", None) is not None:
        print(msg, file=sys.stderr)


def progress(total: int | None, desc: str, unit: str = "file") -> tqdm:
    return tqdm(total=total, desc=desc, unit=unit, leave=False,
                file=_tqdm_file(), disable=_tqdm_disable())


def _tqdm_file():
    """
    Return a file-like object for tqdm to write to.
    In windowed builds, sys.stderr may be None; fall back to a sink.
    """
    f = getattr(sys, "stderr", None)
    return f if (f is not None and hasattr(f, "write")) else io.StringIO()


def _tqdm_disable() -> bool:
    """
    Disable tqdm when there is no real stderr or when explicitly requested.
    Env override: MOD_UPDATER_TQDM=0 forces enable, =1 forces disable.
    """
    env = os.environ.get("MOD_UPDATER_TQDM")
    if env == "0":
        return False
    if env == "1":
        return True
    f = getattr(sys, "stderr", None)
    return not (f is not None and hasattr(f, "write"))
