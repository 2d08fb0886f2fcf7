"""JSON-LD normalisation for page-level schema nodes."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

PAGE_TYPES = frozenset({"WebPage", "Article", "FAQPage", "CollectionPage", "NewsArticle", "BlogPosting"})
URL_KEYS = ("url", "@id")


def type_list(raw_type: Any) -> list[str]:
    if isinstance(raw_type, list):
        return [str(item) for item in raw_type]
    if raw_type is None:
        return []
    return [str(raw_type)]


def walk(value: Any, visit: Callable[[dict[str, Any]], None]) -> None:
    """Call ``visit`` on every mapping node, parents before children."""
    if isinstance(value, dict):
        visit(value)
        for child in list(value.values()):
            walk(child, visit)
    elif isinstance(value, list):
        for child in value:
            walk(child, visit)


def same_host_matcher(canonical_url: str) -> re.Pattern[str] | None:
    host = urlparse(canonical_url).hostname
    if not host:
        return None
    return re.compile(r"^https?://" + re.escape(host) + r"(?:/|\?|$)", re.IGNORECASE)


class PageNodeNormalizer:
    """Visitor that pins page-like nodes to the page's locale and canonical URL."""

    def __init__(self, locale: str, canonical_url: str) -> None:
        self.locale = locale
        self.canonical_url = canonical_url
        self.same_host = same_host_matcher(canonical_url)
        self.changed = False

    def is_page_like(self, node: dict[str, Any]) -> bool:
        return bool(PAGE_TYPES.intersection(type_list(node.get("@type"))))

    def points_here(self, value: Any) -> bool:
        return isinstance(value, str) and self.same_host is not None and bool(self.same_host.match(value))

    def pin(self, node: dict[str, Any], key: str) -> None:
        if self.points_here(node.get(key)) and node[key] != self.canonical_url:
            node[key] = self.canonical_url
            self.changed = True

    def __call__(self, node: dict[str, Any]) -> None:
        if not self.is_page_like(node):
            return
        if not node.get("inLanguage"):
            node["inLanguage"] = self.locale
            self.changed = True
        for key in URL_KEYS:
            self.pin(node, key)

        main_entity = node.get("mainEntityOfPage")
        if isinstance(main_entity, str):
            self.pin(node, "mainEntityOfPage")
        elif isinstance(main_entity, dict):
            self.pin(main_entity, "@id")


def dump_jsonld(data: Any) -> str:
    text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return text.replace("</", "<\\/")


def normalize_payload(raw: str, locale: str, canonical_url: str) -> str | None:
    """Return the re-serialised payload, or ``None`` when nothing changed or it is not JSON."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Leaving malformed JSON-LD block untouched: %s", exc)
        return None
    if not isinstance(data, (dict, list)):
        return None

    normalizer = PageNodeNormalizer(locale, canonical_url)
    walk(data, normalizer)
    if not normalizer.changed:
        return None
    return dump_jsonld(data)
