from __future__ import annotations

import urllib.parse
from datetime import date
from typing import Any

from research_metadata.core.date_evidence import infer_published_at
from research_metadata.core.html_scan import (
    collect_meta_tags,
    collapse_whitespace,
    extract_title_element,
    first_meta_value,
    iter_json_ld_documents,
    json_ld_nodes,
)
from research_metadata.core.providers import is_social_url
from research_metadata.core.url_utils import fallback_title
from research_metadata.schemas.metadata import ResolvedMetadata, SourceType

TITLE_META_KEYS = ("og:title", "twitter:title")
AUTHOR_META_KEYS = ("author", "article:author", "twitter:creator")
DESCRIPTION_META_KEYS = ("og:description", "description", "twitter:description")
THUMBNAIL_META_KEYS = ("og:image", "twitter:image")


def extract_html_metadata(document: str, source_url: str, *, today: date | None = None) -> ResolvedMetadata:
    tags = collect_meta_tags(document)

    title = first_meta_value(tags, TITLE_META_KEYS) or extract_title_element(document)
    return ResolvedMetadata(
        url=source_url,
        title=title or fallback_title(source_url),
        author=_extract_author(document, tags),
        published_at=infer_published_at(source_url=source_url, document=document, today=today),
        type=_detect_type(tags, source_url),
        description=first_meta_value(tags, DESCRIPTION_META_KEYS),
        thumbnail=_extract_thumbnail(tags, source_url),
    )


def _extract_author(document: str, tags: dict[str, str]) -> str | None:
    for data in iter_json_ld_documents(document):
        for node in json_ld_nodes(data):
            author = _json_ld_author_name(node.get("author"))
            if author:
                return author
    return first_meta_value(tags, AUTHOR_META_KEYS)


def _json_ld_author_name(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("name")
    if isinstance(value, str):
        name = collapse_whitespace(value)
        return name or None
    return None


def _extract_thumbnail(tags: dict[str, str], source_url: str) -> str | None:
    image = first_meta_value(tags, THUMBNAIL_META_KEYS)
    if not image:
        return None
    return urllib.parse.urljoin(source_url, image)


def _detect_type(tags: dict[str, str], source_url: str) -> SourceType:
    if is_social_url(source_url):
        return "social"
    og_type = (tags.get("og:type") or "").lower()
    if "video" in og_type:
        return "video"
    return "article"
