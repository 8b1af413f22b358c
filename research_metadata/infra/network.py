from __future__ import annotations

from functools import lru_cache
from typing import Any
import urllib.error
import urllib.parse
import urllib.request

from research_metadata.core.config import settings
from research_metadata.core.url_utils import ensure_public_host


class PublicHostRedirectHandler(urllib.request.HTTPRedirectHandler):
    """Refuse redirects that land on loopback, link-local or private hosts."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        target = urllib.parse.urljoin(req.full_url, newurl)
        try:
            host = urllib.parse.urlsplit(target).hostname or ""
            ensure_public_host(host.strip().lower())
        except ValueError as exc:
            raise urllib.error.HTTPError(target, code, f"redirect blocked: {exc}", headers, fp) from exc
        return super().redirect_request(req, fp, code, msg, headers, newurl)


@lru_cache(maxsize=4)
def _build_opener(proxy_url: str | None) -> urllib.request.OpenerDirector:
    handlers: list[urllib.request.BaseHandler] = [PublicHostRedirectHandler()]
    if proxy_url:
        handlers.append(
            urllib.request.ProxyHandler(
                {
                    "http": proxy_url,
                    "https": proxy_url,
                }
            )
        )
    return urllib.request.build_opener(*handlers)


def configured_proxy_url() -> str | None:
    proxy_url = (settings.network_proxy_url or "").strip()
    return proxy_url or None


def open_url(url: str, *, headers: dict[str, str], timeout: float) -> Any:
    """GET ``url`` through the configured proxy, if any. Caller closes the response."""
    request = urllib.request.Request(url, headers=headers, method="GET")
    return _build_opener(configured_proxy_url()).open(request, timeout=timeout)
