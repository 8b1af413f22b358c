from __future__ import annotations

import html
import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

WHITESPACE_RE = re.compile(r"\s+")
META_TAG_RE = re.compile(r"(?is)<meta\b[^>]*>")
TITLE_RE = re.compile(r"(?is)<title[^>]*>(.*?)</title>")
SCRIPT_STYLE_RE = re.compile(r"(?is)<(script|style|noscript)\b.*?>.*?</\1\s*>")
HTML_TAG_RE = re.compile(r"(?is)<[^>]+>")
HTML_ATTR_RE = re.compile(r'(?is)\b([a-zA-Z_:.-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s>]+))')
JSON_LD_RE = re.compile(
    r"""(?is)<script\b[^>]*\btype\s*=\s*["']?application/ld\+json["']?[^>]*>(.*?)</script\s*>"""
)
JSON_LD_WRAPPER_RE = re.compile(r"^\s*(?:<!--|<!\[CDATA\[)|(?:-->|\]\]>)\s*$")


def parse_html_attrs(raw_tag: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for match in HTML_ATTR_RE.finditer(raw_tag):
        key = match.group(1).strip().lower()
        value = (match.group(2) or match.group(3) or match.group(4) or "").strip()
        attrs.setdefault(key, html.unescape(value))
    return attrs


def collect_meta_tags(document: str) -> dict[str, str]:
    """Map lowercased ``property``/``name``/``itemprop`` keys to the first non-empty content."""
    tags: dict[str, str] = {}
    for raw_tag in META_TAG_RE.findall(document):
        attrs = parse_html_attrs(raw_tag)
        content = (attrs.get("content") or "").strip()
        if not content:
            continue
        for attr_name in ("property", "name", "itemprop"):
            key = (attrs.get(attr_name) or "").strip().lower()
            if key:
                tags.setdefault(key, content)
    return tags


def first_meta_value(tags: dict[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = collapse_whitespace(tags.get(key) or "")
        if value:
            return value
    return None


def extract_title_element(document: str) -> str | None:
    match = TITLE_RE.search(document)
    if not match:
        return None
    title = normalize_plain_text(match.group(1))
    return title or None


def iter_json_ld_documents(document: str) -> list[Any]:
    parsed_documents: list[Any] = []
    for match in JSON_LD_RE.finditer(document):
        raw = JSON_LD_WRAPPER_RE.sub("", match.group(1)).strip()
        if not raw:
            continue
        try:
            parsed_documents.append(json.loads(raw, strict=False))
        except (ValueError, RecursionError):
            logger.debug("skip invalid json-ld block", extra={"block_length": len(raw)})
    return parsed_documents


def json_ld_nodes(data: Any) -> list[dict[str, Any]]:
    """Flatten a JSON-LD document into its top-level, array and ``@graph`` nodes."""
    candidates = data if isinstance(data, list) else [data]
    nodes: list[dict[str, Any]] = []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        nodes.append(candidate)
        graph = candidate.get("@graph")
        if isinstance(graph, list):
            nodes.extend(item for item in graph if isinstance(item, dict))
    return nodes


def extract_visible_text(document: str) -> str:
    cleaned = SCRIPT_STYLE_RE.sub(" ", document)
    plain = HTML_TAG_RE.sub(" ", cleaned)
    return normalize_plain_text(plain)


def normalize_plain_text(value: str) -> str:
    return collapse_whitespace(html.unescape(value))


def collapse_whitespace(value: str) -> str:
    return WHITESPACE_RE.sub(" ", value).strip()
