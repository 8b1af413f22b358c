from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from research_metadata.core.url_utils import hostname_of


@dataclass(frozen=True, slots=True)
class OEmbedProvider:
    domain: str
    endpoint: str


PROVIDERS_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "providers.json"


def match_oembed_provider(url: str) -> OEmbedProvider | None:
    host = _normalize_host(hostname_of(url))
    if not host:
        return None

    for domain, endpoint in _load_provider_rules()["oembed"]:
        if _domain_matches(host, domain):
            return OEmbedProvider(domain=domain, endpoint=endpoint)
    return None


def is_oembed_supported(url: str) -> bool:
    return match_oembed_provider(url) is not None


def is_social_url(url: str) -> bool:
    host = _normalize_host(hostname_of(url))
    if not host:
        return False
    return any(_domain_matches(host, rule) for rule in _load_provider_rules()["social"])


def host_matches_any(url: str, domains: tuple[str, ...]) -> bool:
    host = _normalize_host(hostname_of(url))
    if not host:
        return False
    return any(_domain_matches(host, rule) for rule in domains)


@lru_cache(maxsize=1)
def _load_provider_rules() -> dict[str, tuple[Any, ...]]:
    config_data = _load_config_json(PROVIDERS_CONFIG_PATH)
    return {
        "oembed": _normalize_endpoint_map(config_data.get("oembed")),
        "social": _normalize_rule_list(config_data.get("social")),
    }


def _load_config_json(path: Path) -> dict[str, Any]:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"cannot read provider config file: {path}") from exc

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"provider config file is not valid JSON: {path}") from exc

    if not isinstance(data, dict):
        raise RuntimeError(f"provider config root must be an object: {path}")

    return data


def _normalize_endpoint_map(raw_map: Any) -> tuple[tuple[str, str], ...]:
    if not isinstance(raw_map, dict):
        return ()

    entries: list[tuple[str, str]] = []
    for raw_domain, raw_endpoint in raw_map.items():
        if not isinstance(raw_domain, str) or not isinstance(raw_endpoint, str):
            continue
        domain = _normalize_host(raw_domain)
        endpoint = raw_endpoint.strip()
        if domain and endpoint:
            entries.append((domain, endpoint))
    return tuple(entries)


def _normalize_rule_list(raw_rules: Any) -> tuple[str, ...]:
    if not isinstance(raw_rules, list):
        return ()

    rules: list[str] = []
    seen: set[str] = set()
    for item in raw_rules:
        if not isinstance(item, str):
            continue
        rule = _normalize_host(item)
        if not rule or rule in seen:
            continue
        seen.add(rule)
        rules.append(rule)

    return tuple(rules)


def _normalize_host(host: str | None) -> str:
    normalized = (host or "").strip().lower().strip(".")
    if normalized.startswith("www."):
        normalized = normalized[4:]
    return normalized


def _domain_matches(host: str, rule: str) -> bool:
    if not rule:
        return False
    return host == rule or host.endswith(f".{rule}")
