from __future__ import annotations

import ipaddress
import urllib.parse

TRACKING_QUERY_KEYS = {"fbclid", "gclid", "igshid", "mc_cid", "mc_eid"}
DEFAULT_PORTS = {"http": 80, "https": 443}


def hostname_of(url: str) -> str | None:
    try:
        host = urllib.parse.urlsplit(url.strip()).hostname
    except ValueError:
        return None
    host = (host or "").strip().lower().strip(".")
    return host or None


def fallback_title(url: str) -> str:
    return hostname_of(url) or url.strip() or "unknown"


def canonicalize_url(raw_url: str) -> str:
    """Lowercase scheme and host, drop default ports, fragments and tracking keys.

    Inputs that do not parse as an absolute http(s) URL come back stripped but
    otherwise untouched, so resolution can still degrade to a fallback.
    """
    source_url = raw_url.strip()
    try:
        parsed = urllib.parse.urlsplit(source_url)
        port = parsed.port
    except ValueError:
        return source_url

    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").strip().lower()
    if scheme not in DEFAULT_PORTS or not host:
        return source_url

    host_for_netloc = f"[{host}]" if ":" in host else host
    netloc = host_for_netloc
    if port and port != DEFAULT_PORTS[scheme]:
        netloc = f"{host_for_netloc}:{port}"
    path = parsed.path or "/"
    query = _strip_tracking_query(parsed.query)
    return urllib.parse.urlunsplit((scheme, netloc, path, query, ""))


def validate_source_url(raw_url: str) -> str:
    """Reject URLs the preview endpoints must not fetch. Returns the stripped URL."""
    source_url = raw_url.strip()
    parsed = urllib.parse.urlsplit(source_url)
    if parsed.scheme.lower() not in DEFAULT_PORTS:
        raise ValueError("Only http and https URLs are supported")
    if parsed.username or parsed.password:
        raise ValueError("Invalid URL format")
    try:
        parsed.port
    except ValueError as exc:
        raise ValueError("Invalid URL format") from exc

    host = (parsed.hostname or "").strip().lower()
    if not host:
        raise ValueError("Invalid URL format")
    ensure_public_host(host)
    return source_url


def _strip_tracking_query(query: str) -> str:
    if not query:
        return ""
    # Untouched segments keep their original encoding and bare flags such as "?print".
    kept: list[str] = []
    for segment in query.split("&"):
        if not segment:
            continue
        key = urllib.parse.unquote_plus(segment.partition("=")[0]).strip().lower()
        if key.startswith("utm_") or key in TRACKING_QUERY_KEYS:
            continue
        kept.append(segment)
    return "&".join(kept)


def ensure_public_host(host: str) -> None:
    if host == "localhost" or host.endswith(".local") or host.endswith(".localhost"):
        raise ValueError("Local and private network URLs are not supported")
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return
    if (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    ):
        raise ValueError("Local and private network URLs are not supported")
