"""HTTP transport for scraping exposition bodies."""

from __future__ import annotations

import logging
from collections.abc import Callable
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..metrics.constants import METRICS_PATH, SCRAPE_TIMEOUT_SECONDS
from ..metrics.exposition import ingest
from ..metrics.store import SeriesStore

logger = logging.getLogger(__name__)

_CLIENT_USER_AGENT = "podviz/1.0"
_ACCEPT = "text/plain;version=0.0.4;q=0.9,*/*;q=0.1"
_MAX_RESPONSE_BYTES = 16 * 1024 * 1024  # 16 MiB cap per scrape body.

FetchFn = Callable[[str, float], "str | None"]


def metrics_url(target: str, path: str = METRICS_PATH) -> str:
    """``host:port`` -> ``http://host:port/metrics``; full URLs pass through."""

    target = target.strip()
    if urlparse(target).scheme in {"http", "https"}:
        return target
    if not path.startswith("/"):
        path = "/" + path
    return f"http://{target.rstrip('/')}{path}"


def _charset_from_content_type(content_type: str) -> str | None:
    if not content_type:
        return None
    for part in content_type.split(";"):
        part = part.strip()
        if part.lower().startswith("charset="):
            charset = part.split("=", 1)[1].strip().strip('"').strip("'")
            if charset:
                return charset
    return None


def _decode_body(response: Any) -> str | None:
    payload = response.read(_MAX_RESPONSE_BYTES + 1)
    if not isinstance(payload, bytes | bytearray):
        return None
    if len(payload) > _MAX_RESPONSE_BYTES:
        logger.debug("Dropping oversized scrape body (%d bytes)", len(payload))
        return None
    headers = getattr(response, "headers", None)
    content_type = headers.get("Content-Type", "") if headers is not None else ""
    encoding = _charset_from_content_type(content_type or "") or "utf-8"
    try:
        return bytes(payload).decode(encoding, errors="replace")
    except LookupError:
        return bytes(payload).decode("utf-8", errors="replace")


def fetch_exposition(
    target: str, timeout: float = SCRAPE_TIMEOUT_SECONDS, *, path: str = METRICS_PATH
) -> str | None:
    """Return the exposition body for ``target`` or ``None`` on transport failure.

    Error statuses still carry a body and it is returned like any other.
    """

    url = metrics_url(target, path)
    try:
        request = Request(  # noqa: S310
            url, headers={"Accept": _ACCEPT, "User-Agent": _CLIENT_USER_AGENT}
        )
        with urlopen(request, timeout=timeout) as response:  # nosec B310  # noqa: S310
            return _decode_body(response)
    except HTTPError as exc:
        logger.debug("Scrape of %s returned HTTP %s", url, exc.code)
        try:
            return _decode_body(exc)
        except (HTTPException, OSError) as read_exc:
            logger.debug("Reading error body from %s failed: %s", url, read_exc)
            return None
        finally:
            exc.close()
    except (URLError, HTTPException, OSError, ValueError) as exc:
        # ValueError covers malformed targets (InvalidURL, unknown url type).
        logger.debug("Scrape of %s failed: %s", url, exc)
        return None


def scrape_target(
    target: str,
    store: SeriesStore,
    *,
    timeout: float = SCRAPE_TIMEOUT_SECONDS,
    fetch: FetchFn = fetch_exposition,
) -> int | None:
    """Fetch and ingest one target; ``None`` means the target was skipped this cycle."""

    body = fetch(target, timeout)
    if body is None:
        return None
    return ingest(body, store)


__all__ = ["FetchFn", "fetch_exposition", "metrics_url", "scrape_target"]
