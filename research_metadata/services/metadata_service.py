import logging
from collections.abc import Callable
from datetime import date

from research_metadata.core.html_meta import extract_html_metadata
from research_metadata.core.providers import is_oembed_supported, is_social_url
from research_metadata.core.published_at import parse_flexible_date, today_utc
from research_metadata.core.url_utils import canonicalize_url, fallback_title, hostname_of
from research_metadata.infra.oembed_client import OEmbedClient, OEmbedData, fetch_oembed
from research_metadata.infra.page_fetcher import FetchedPage, PageFetchError, fetch_page
from research_metadata.schemas.metadata import LinkPreview, ResolvedMetadata, SourceType

logger = logging.getLogger(__name__)

FAVICON_SERVICE_URL = "https://www.google.com/s2/favicons?domain={host}&sz=64"


def resolve_metadata(url: str) -> ResolvedMetadata:
    return MetadataService().resolve(url)


def minimal_metadata(url: str) -> ResolvedMetadata:
    return ResolvedMetadata(url=url, title=fallback_title(url), type="other")


def build_link_preview(metadata: ResolvedMetadata) -> LinkPreview:
    host = hostname_of(metadata.url)
    return LinkPreview(
        title=metadata.title,
        description=metadata.description or "",
        image=metadata.thumbnail or "",
        favicon=FAVICON_SERVICE_URL.format(host=host) if host else "",
        type=metadata.type,
    )


class MetadataService:
    """Best-effort URL metadata: oEmbed where a provider exists, HTML parsing otherwise.

    ``resolve`` never raises. Unreachable pages give the minimal fallback
    (hostname title, type ``other``); every other failure degrades to whatever
    partial data was gathered.
    """

    def __init__(
        self,
        *,
        oembed_client: OEmbedClient | None = None,
        page_fetcher: Callable[[str], FetchedPage] = fetch_page,
    ) -> None:
        self.oembed_client = oembed_client or OEmbedClient()
        self.page_fetcher = page_fetcher

    def resolve(self, url: str, *, today: date | None = None) -> ResolvedMetadata:
        source_url = canonicalize_url(url)
        try:
            return self._resolve(source_url, today=today or today_utc())
        except Exception:  # noqa: BLE001
            logger.exception("metadata resolution crashed", extra={"source_url": source_url})
            return minimal_metadata(source_url)

    def _resolve(self, source_url: str, *, today: date) -> ResolvedMetadata:
        oembed_eligible = is_oembed_supported(source_url)
        oembed = fetch_oembed(source_url, client=self.oembed_client) if oembed_eligible else None
        if oembed is not None:
            published_at = parse_flexible_date(oembed.published_date, today=today)
            if published_at:
                return self._from_oembed(source_url, oembed, published_at=published_at)
            logger.info("oembed data has no publish date, parsing html", extra={"source_url": source_url})

        try:
            page = self.page_fetcher(source_url)
        except PageFetchError as exc:
            logger.warning(
                "page fetch failed, returning minimal metadata",
                extra={"source_url": source_url, "error_code": exc.code, "reason": exc.message},
            )
            return minimal_metadata(source_url)

        html_metadata = extract_html_metadata(page.document, source_url, today=today)
        if not oembed_eligible:
            return html_metadata

        if oembed is None:
            oembed = fetch_oembed(source_url, client=self.oembed_client)
        if oembed is None:
            return html_metadata
        return self._merge(html_metadata, oembed, today=today)

    def _from_oembed(self, source_url: str, oembed: OEmbedData, *, published_at: str) -> ResolvedMetadata:
        return ResolvedMetadata(
            url=source_url,
            title=oembed.title or fallback_title(source_url),
            author=oembed.author_name,
            published_at=published_at,
            type=self._oembed_type(oembed) or ("social" if is_social_url(source_url) else "article"),
            description=oembed.description,
            thumbnail=oembed.thumbnail_url,
        )

    def _merge(self, html_metadata: ResolvedMetadata, oembed: OEmbedData, *, today: date) -> ResolvedMetadata:
        return ResolvedMetadata(
            url=html_metadata.url,
            title=oembed.title or html_metadata.title,
            author=html_metadata.author or oembed.author_name,
            published_at=html_metadata.published_at or parse_flexible_date(oembed.published_date, today=today),
            type=self._oembed_type(oembed) or html_metadata.type,
            description=html_metadata.description or oembed.description,
            thumbnail=oembed.thumbnail_url or html_metadata.thumbnail,
        )

    def _oembed_type(self, oembed: OEmbedData) -> SourceType | None:
        if (oembed.media_type or "").lower() == "video":
            return "video"
        return None
