"""Publish-date evidence collectors.

Each collector looks at one kind of evidence (platform markup, JSON-LD,
meta tags, the URL, visible text) and yields raw candidates. Candidates only
count once :func:`parse_flexible_date` accepts them, so a date-shaped match
with an impossible year falls through to the next candidate or collector.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import date

from research_metadata.core.html_scan import (
    collect_meta_tags,
    extract_visible_text,
    iter_json_ld_documents,
    json_ld_nodes,
    parse_html_attrs,
)
from research_metadata.core.providers import host_matches_any
from research_metadata.core.published_at import parse_flexible_date, today_utc

logger = logging.getLogger(__name__)

PLATFORM_DATE_HOSTS = ("youtube.com", "youtu.be")
YOUTUBE_DATE_PATTERNS = (
    re.compile(r'"publishDate"\s*:\s*"([^"]+)"'),
    re.compile(r'"publishedTimeText"\s*:\s*\{\s*"simpleText"\s*:\s*"([^"]+)"'),
    re.compile(r'"uploadDate"\s*:\s*"([^"]+)"'),
    re.compile(r'"dateText"\s*:\s*\{\s*"simpleText"\s*:\s*"([^"]+)"'),
)

JSON_LD_DATE_FIELDS = ("datePublished", "dateCreated", "uploadDate", "dateModified", "publishedDate")

META_DATE_KEYS = (
    "article:published_time",
    "og:published_time",
    "publish_date",
    "publication_date",
    "date",
    "article:published",
    "pubdate",
    "dc.date",
    "sailthru.date",
    "book:release_date",
    "datepublished",
    "article:modified_time",
    "parsely-pub-date",
    "byl",
    "timestamp",
    "publish-time",
    "og:updated_time",
)
# Bylines carry free text; only an embedded ISO date is trusted.
EMBEDDED_DATE_ONLY_KEYS = {"byl"}
EMBEDDED_ISO_DATE_RE = re.compile(r"(?<!\d)(\d{4}-\d{2}-\d{2})(?!\d)")
TIME_TAG_RE = re.compile(r"(?is)<time\b[^>]*>")

URL_PATH_DATE_PATTERNS = (
    re.compile(r"/(\d{4})/(\d{1,2})/(\d{1,2})(?=/|$)"),
    re.compile(r"/(\d{4})/(\d{1,2})/"),
    re.compile(r"/(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)"),
    re.compile(r"/(\d{4})-(\d{1,2})(?![\d-])"),
)
URL_QUERY_DATE_KEYS = ("date", "published")
URL_QUERY_DATE_VALUE_RE = re.compile(r"^[\d-]+$")

CONTENT_DATE_PATTERNS = (
    re.compile(r"\bPublished\s+on\s+([A-Za-z]+\.?\s+\d{1,2},?\s+\d{4})", re.IGNORECASE),
    re.compile(r"\bPublished:\s*([A-Za-z]+\.?\s+\d{1,2},?\s+\d{4})", re.IGNORECASE),
    re.compile(r"\bPosted:?\s*(\d[\d/-]*\d)", re.IGNORECASE),
    re.compile(r"\bDate:?\s*([A-Za-z]+\.?\s+\d{1,2},?\s+\d{4})", re.IGNORECASE),
    re.compile(r"(?<![\d/])(\d{1,2}/\d{1,2}/\d{4})(?!\d)"),
    re.compile(r"\bUpdated:?\s*(\d[\d-]*\d)", re.IGNORECASE),
)


@dataclass(frozen=True, slots=True)
class DateEvidence:
    collector: str
    published_at: str


@dataclass(frozen=True, slots=True)
class DateCollector:
    name: str
    candidates: Callable[[str, str], Iterable[str]]


def infer_published_at(*, source_url: str, document: str, today: date | None = None) -> str | None:
    evidence = find_date_evidence(source_url=source_url, document=document, today=today)
    if evidence is None:
        return None
    return evidence.published_at


def find_date_evidence(*, source_url: str, document: str, today: date | None = None) -> DateEvidence | None:
    today = today or today_utc()
    for collector in DATE_COLLECTORS:
        for candidate in collector.candidates(document, source_url):
            published_at = parse_flexible_date(candidate, today=today)
            if published_at:
                logger.debug(
                    "published date resolved",
                    extra={"collector": collector.name, "published_at": published_at, "source_url": source_url},
                )
                return DateEvidence(collector=collector.name, published_at=published_at)
    return None


def _platform_candidates(document: str, source_url: str) -> Iterator[str]:
    if not host_matches_any(source_url, PLATFORM_DATE_HOSTS):
        return
    for pattern in YOUTUBE_DATE_PATTERNS:
        match = pattern.search(document)
        if match:
            yield match.group(1)


def _json_ld_candidates(document: str, source_url: str) -> Iterator[str]:
    for data in iter_json_ld_documents(document):
        for node in json_ld_nodes(data):
            for field_name in JSON_LD_DATE_FIELDS:
                value = node.get(field_name)
                if isinstance(value, str) and value.strip():
                    yield value


def _meta_tag_candidates(document: str, source_url: str) -> Iterator[str]:
    tags = collect_meta_tags(document)
    for key in META_DATE_KEYS:
        value = tags.get(key)
        if not value:
            continue
        if key in EMBEDDED_DATE_ONLY_KEYS:
            match = EMBEDDED_ISO_DATE_RE.search(value)
            if match:
                yield match.group(1)
            continue
        yield value

    for raw_tag in TIME_TAG_RE.findall(document):
        value = parse_html_attrs(raw_tag).get("datetime")
        if value:
            yield value


def _url_candidates(document: str, source_url: str) -> Iterator[str]:
    try:
        parsed = urllib.parse.urlsplit(source_url)
    except ValueError:
        return
    path = urllib.parse.unquote(parsed.path)

    for pattern in URL_PATH_DATE_PATTERNS:
        for match in pattern.finditer(path):
            groups = match.groups()
            day = groups[2] if len(groups) > 2 else "1"
            try:
                yield date(int(groups[0]), int(groups[1]), int(day)).isoformat()
            except ValueError:
                continue

    query = urllib.parse.parse_qs(parsed.query)
    for key in URL_QUERY_DATE_KEYS:
        for value in query.get(key, []):
            value = value.strip()
            if URL_QUERY_DATE_VALUE_RE.match(value):
                yield value


def _content_candidates(document: str, source_url: str) -> Iterator[str]:
    text = extract_visible_text(document)
    for pattern in CONTENT_DATE_PATTERNS:
        for match in pattern.finditer(text):
            yield match.group(1)


DATE_COLLECTORS = (
    DateCollector(name="platform", candidates=_platform_candidates),
    DateCollector(name="json_ld", candidates=_json_ld_candidates),
    DateCollector(name="meta_tags", candidates=_meta_tag_candidates),
    DateCollector(name="url", candidates=_url_candidates),
    DateCollector(name="content", candidates=_content_candidates),
)
