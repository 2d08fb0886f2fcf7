"""Static sitemap.xml with xhtml:link hreflang alternates."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from pathlib import Path

from seo_finalize.scanner import Page, PageModel
from seo_finalize.urls import UrlResolver

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"
SITEMAP_NAME = "sitemap.xml"


def changefreq(page: Page) -> str:
    return "daily" if page.is_home else "weekly"


def priority(page: Page, primary_locale: str) -> str:
    is_primary = page.locale == primary_locale
    if page.is_home:
        return "1.0" if is_primary else "0.9"
    return "0.8" if is_primary else "0.7"


def format_lastmod(mtime: float | None, now: datetime) -> str:
    stamp = datetime.fromtimestamp(mtime, tz=UTC) if mtime is not None else now
    return stamp.replace(microsecond=0).isoformat()


def build_sitemap(model: PageModel, resolver: UrlResolver, now: datetime | None = None) -> ET.Element:
    generated_at = now or datetime.now(UTC)
    ET.register_namespace("", SITEMAP_NS)
    ET.register_namespace("xhtml", XHTML_NS)

    urlset = ET.Element(f"{{{SITEMAP_NS}}}urlset")
    for page in model.iter_pages():
        url_node = ET.SubElement(urlset, f"{{{SITEMAP_NS}}}url")
        ET.SubElement(url_node, f"{{{SITEMAP_NS}}}loc").text = resolver.url_for(page.slug, page.locale, page.is_home)
        ET.SubElement(url_node, f"{{{SITEMAP_NS}}}lastmod").text = format_lastmod(page.lastmod, generated_at)
        ET.SubElement(url_node, f"{{{SITEMAP_NS}}}changefreq").text = changefreq(page)
        ET.SubElement(url_node, f"{{{SITEMAP_NS}}}priority").text = priority(page, resolver.primary)
        for code, href in resolver.alternates(model, page.slug, page.locale, page.is_home):
            link = ET.SubElement(url_node, f"{{{XHTML_NS}}}link")
            link.set("rel", "alternate")
            link.set("hreflang", code)
            link.set("href", href)
    return urlset


def serialize_xml(root: ET.Element) -> bytes:
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def write_sitemap(model: PageModel, resolver: UrlResolver, now: datetime | None = None) -> Path:
    path = Path(resolver.config.export_dir) / SITEMAP_NAME
    path.write_bytes(serialize_xml(build_sitemap(model, resolver, now)))
    return path
