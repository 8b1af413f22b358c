from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from research_metadata.core.config import settings
from research_metadata.core.providers import OEmbedProvider, match_oembed_provider
from research_metadata.infra.network import configured_proxy_url

logger = logging.getLogger(__name__)


class OEmbedError(Exception):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(slots=True)
class OEmbedData:
    title: str | None
    author_name: str | None
    provider_name: str | None
    media_type: str | None
    thumbnail_url: str | None
    description: str | None
    published_date: str | None


class OEmbedClient:
    def fetch(self, url: str) -> OEmbedData:
        provider = match_oembed_provider(url)
        if provider is None:
            raise OEmbedError(code="oembed_provider_not_supported", message=f"no oEmbed provider for {url}")

        payload = self._request(provider=provider, url=url)
        return OEmbedData(
            title=_string_field(payload, "title"),
            author_name=_string_field(payload, "author_name"),
            provider_name=_string_field(payload, "provider_name"),
            media_type=_string_field(payload, "type"),
            thumbnail_url=_string_field(payload, "thumbnail_url"),
            description=_string_field(payload, "description"),
            published_date=_string_field(payload, "published_date") or _string_field(payload, "upload_date"),
        )

    def _request(self, *, provider: OEmbedProvider, url: str) -> dict[str, Any]:
        try:
            with httpx.Client(
                timeout=settings.oembed_timeout_seconds,
                follow_redirects=True,
                proxy=configured_proxy_url(),
                headers={"User-Agent": settings.metadata_user_agent, "Accept": "application/json"},
            ) as client:
                res = client.get(provider.endpoint, params={"url": url, "format": "json"})
        except httpx.TimeoutException as exc:
            raise OEmbedError(code="oembed_timeout", message=f"{provider.domain} oEmbed timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise OEmbedError(code="oembed_network_error", message=f"{provider.domain} oEmbed failed: {exc}") from exc

        if not res.is_success:
            raise OEmbedError(
                code="oembed_http_status",
                message=f"{provider.domain} oEmbed returned HTTP {res.status_code}",
            )
        try:
            payload = res.json()
        except ValueError as exc:
            raise OEmbedError(code="oembed_invalid_json", message=f"{provider.domain} oEmbed returned non-JSON") from exc
        if not isinstance(payload, dict):
            raise OEmbedError(code="oembed_invalid_payload", message=f"{provider.domain} oEmbed payload is not an object")
        return payload


def fetch_oembed(url: str, *, client: OEmbedClient | None = None) -> OEmbedData | None:
    try:
        return (client or OEmbedClient()).fetch(url)
    except OEmbedError as exc:
        logger.info("oembed unavailable", extra={"source_url": url, "error_code": exc.code, "reason": exc.message})
        return None


def _string_field(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
