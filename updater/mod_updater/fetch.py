from __future__ import annotations
from http.client import HTTPException
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.parse import unquote, urlparse
from urllib.request import Request, urlopen

USER_AGENT = "mod-updater/1.0"


class TransportError(OSError):
    """Connection-level failure: nothing usable came back."""


def fetch_bytes(url: str, timeout: float = 60.0) -> tuple[int, bytes]:
    """GET ``url`` and return ``(status, body)``.

    Error statuses are returned, not raised, with an empty body. Responses are
    always closed before returning.
    ``file://`` URLs are read from disk so a local mirror works as a repository.
    """
    parsed = urlparse(url)
    if parsed.scheme == "file":
        src = Path(unquote(parsed.path))
        try:
            return 200, src.read_bytes()
        except OSError as e:
            raise TransportError(f"{url}: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise TransportError(f"Unsupported URL scheme: {parsed.scheme!r}")

    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(req, timeout=timeout) as resp:
            return resp.status, resp.read()
    except HTTPError as e:
        e.close()
        return e.code, b""
    except (URLError, HTTPException, OSError) as e:
        raise TransportError(f"{url}: {getattr(e, 'reason', e)}") from e
