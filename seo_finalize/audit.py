"""Read-only verification of a finalized export tree."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

from seo_finalize.config import BASE_URL_PLACEHOLDER
from seo_finalize.locales import check_locale
from seo_finalize.scanner import Page, PageModel
from seo_finalize.urls import X_DEFAULT, UrlResolver

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {"Critical": 0, "High": 1, "Medium": 2, "Low": 3, "Info": 4}


@dataclass
class PageRecord:
    page: Page
    expected_url: str
    canonical_urls: list[str] = field(default_factory=list)
    alternates: dict[str, list[str]] = field(default_factory=dict)
    has_placeholder: bool = False


def rel_values(node: Any) -> list[str]:
    rel_attr = node.get("rel") or []
    if isinstance(rel_attr, list):
        return [str(item).lower() for item in rel_attr]
    return str(rel_attr).lower().split()


def parse_page_html(html: str, page: Page, expected_url: str) -> PageRecord:
    soup = BeautifulSoup(html, "lxml")
    record = PageRecord(page=page, expected_url=expected_url, has_placeholder=BASE_URL_PLACEHOLDER in html)
    alternates: dict[str, list[str]] = defaultdict(list)
    for node in soup.find_all("link", href=True):
        values = rel_values(node)
        href = str(node.get("href") or "").strip()
        if "canonical" in values:
            record.canonical_urls.append(href)
        elif "alternate" in values and node.get("hreflang"):
            alternates[str(node.get("hreflang")).strip()].append(href)
    record.alternates = dict(alternates)
    return record


def issue(issues: list[dict[str, str]], severity: str, page: str, check: str, detail: str) -> None:
    issues.append({"severity": severity, "page": page, "check": check, "detail": detail})


def load_records(model: PageModel, resolver: UrlResolver) -> dict[str, PageRecord]:
    records: dict[str, PageRecord] = {}
    root = resolver.config.export_dir
    for page in model.iter_pages():
        path = root / page.rel_path.lstrip("/")
        try:
            html = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot audit %s: %s", path, exc)
            continue
        expected = resolver.url_for(page.slug, page.locale, page.is_home)
        records[page.rel_path] = parse_page_html(html, page, expected)
    return records


def check_record(record: PageRecord, model: PageModel, records: dict[str, PageRecord]) -> list[dict[str, str]]:
    issues: list[dict[str, str]] = []
    page = record.page
    where = page.rel_path

    if len(record.canonical_urls) != 1:
        issue(issues, "High", where, "Canonical", f"Expected one canonical link, found {len(record.canonical_urls)}.")
    elif record.canonical_urls[0] != record.expected_url:
        issue(
            issues,
            "High",
            where,
            "Canonical",
            f"Canonical points to {record.canonical_urls[0]}, expected {record.expected_url}.",
        )

    for code, targets in record.alternates.items():
        if len(targets) > 1:
            issue(issues, "High", where, "Duplicate code", f"hreflang '{code}' appears {len(targets)} times.")

    if record.expected_url not in record.alternates.get(page.locale, []):
        issue(issues, "Critical", where, "Self-reference", "Missing self-referencing hreflang URL for this page.")

    x_default_count = len(record.alternates.get(X_DEFAULT, []))
    if x_default_count != 1:
        issue(issues, "High", where, "x-default", f"Expected one x-default hreflang tag, found {x_default_count}.")

    for code, targets in record.alternates.items():
        if code in (X_DEFAULT, page.locale):
            continue
        peer_page = model.get(page.slug, code)
        peer = records.get(peer_page.rel_path) if peer_page else None
        if peer is None:
            issue(issues, "Medium", where, "Return tags", f"hreflang '{code}' target is not an exported page.")
            continue
        if record.expected_url not in peer.alternates.get(page.locale, []):
            issue(
                issues,
                "High",
                where,
                "Return tags",
                f"{peer_page.rel_path} does not link back with hreflang '{page.locale}'.",
            )

    if record.has_placeholder:
        issue(issues, "High", where, "Placeholder", f"Unresolved {BASE_URL_PLACEHOLDER} token left in page.")
    return issues


def audit_export(model: PageModel, resolver: UrlResolver) -> tuple[list[dict[str, str]], dict[str, Any]]:
    records = load_records(model, resolver)
    issues: list[dict[str, str]] = []
    for locale in model.locales:
        for note in check_locale(locale):
            issue(issues, "Low", "*", "Locale code", note)
    for rel_path in sorted(records):
        issues.extend(check_record(records[rel_path], model, records))

    issues.sort(key=lambda item: (SEVERITY_ORDER.get(item["severity"], 99), item["page"], item["check"]))
    counts = Counter(item["severity"] for item in issues)
    summary = {
        "pages_audited": len(records),
        "issues_total": len(issues),
        "issues_by_severity": {name: counts.get(name, 0) for name in SEVERITY_ORDER},
    }
    return issues, summary
