from __future__ import annotations

import http.client
import logging
import urllib.error
from dataclasses import dataclass

from research_metadata.core.config import settings
from research_metadata.infra.network import open_url

logger = logging.getLogger(__name__)


class PageFetchError(Exception):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(slots=True)
class FetchedPage:
    document: str
    resolved_url: str
    status: int


def fetch_page(source_url: str) -> FetchedPage:
    headers = {
        "User-Agent": settings.metadata_user_agent,
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    }
    try:
        with open_url(source_url, headers=headers, timeout=settings.metadata_fetch_timeout_seconds) as response:
            status = int(getattr(response, "status", None) or response.getcode() or 200)
            if not 200 <= status < 300:
                raise PageFetchError(code="page_http_status", message=f"HTTP {status}")
            raw = response.read(settings.metadata_fetch_max_bytes)
            encoding = response.headers.get_content_charset() or "utf-8"
            resolved_url = response.geturl() or source_url
    except urllib.error.HTTPError as exc:
        raise PageFetchError(code="page_http_status", message=f"HTTP {exc.code}") from exc
    except urllib.error.URLError as exc:
        raise PageFetchError(code="page_unreachable", message=str(exc.reason)) from exc
    except (TimeoutError, OSError, http.client.HTTPException) as exc:
        raise PageFetchError(code="page_network_error", message=str(exc) or exc.__class__.__name__) from exc
    except ValueError as exc:
        raise PageFetchError(code="page_invalid_url", message=str(exc)) from exc

    try:
        document = raw.decode(encoding, errors="ignore")
    except LookupError:
        document = raw.decode("utf-8", errors="ignore")

    logger.debug(
        "page fetched",
        extra={"source_url": source_url, "resolved_url": resolved_url, "status": status, "bytes": len(raw)},
    )
    return FetchedPage(document=document, resolved_url=resolved_url, status=status)
