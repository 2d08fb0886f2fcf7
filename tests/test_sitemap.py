"""Tests for sitemap.xml generation."""

import xml.etree.ElementTree as ET
from datetime import UTC, datetime

from seo_finalize.scanner import scan_export
from seo_finalize.sitemap import SITEMAP_NS, XHTML_NS, build_sitemap, serialize_xml, write_sitemap
from tests.helpers import make_model, make_resolver

NS = {"sm": SITEMAP_NS, "xhtml": XHTML_NS}
FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


def entries_by_loc(root):
    result = {}
    for url in root.findall("sm:url", NS):
        loc = url.findtext("sm:loc", namespaces=NS)
        result[loc] = {
            "lastmod": url.findtext("sm:lastmod", namespaces=NS),
            "changefreq": url.findtext("sm:changefreq", namespaces=NS),
            "priority": url.findtext("sm:priority", namespaces=NS),
            "links": {link.get("hreflang"): link.get("href") for link in url.findall("xhtml:link", NS)},
        }
    return result


class TestBuildSitemap:
    def test_scenario_with_extension_stripping(self, export_dir):
        (export_dir / "nginx.conf").write_text("location ~ \\.html$ { return 301 $1; }\n", encoding="utf-8")
        resolver = make_resolver(export_dir, strip_html=True)
        model = scan_export(export_dir, "ru")

        path = write_sitemap(model, resolver, now=FIXED_NOW)
        entries = entries_by_loc(ET.parse(path).getroot())

        assert set(entries) == {
            "https://example.com/",
            "https://example.com/index-en",
            "https://example.com/about",
            "https://example.com/about-en",
        }
        assert entries["https://example.com/about"]["links"] == {
            "ru": "https://example.com/about",
            "en": "https://example.com/about-en",
            "x-default": "https://example.com/about",
        }
        assert entries["https://example.com/"]["changefreq"] == "daily"
        assert entries["https://example.com/index-en"]["changefreq"] == "daily"
        assert entries["https://example.com/about"]["changefreq"] == "weekly"
        assert not any(loc.endswith(".html") for loc in entries)

    def test_priorities(self, tmp_path):
        resolver = make_resolver(tmp_path)
        model = make_model({"index": ["ru", "en"], "about": ["ru", "en"]})
        entries = entries_by_loc(build_sitemap(model, resolver, now=FIXED_NOW))

        assert entries["https://example.com/"]["priority"] == "1.0"
        assert entries["https://example.com/index-en.html"]["priority"] == "0.9"
        assert entries["https://example.com/about.html"]["priority"] == "0.8"
        assert entries["https://example.com/about-en.html"]["priority"] == "0.7"

    def test_lastmod_falls_back_to_generation_time(self, tmp_path):
        resolver = make_resolver(tmp_path)
        model = make_model({"about": ["ru"]})
        entries = entries_by_loc(build_sitemap(model, resolver, now=FIXED_NOW))
        assert entries["https://example.com/about.html"]["lastmod"] == "2026-01-02T03:04:05+00:00"

    def test_lastmod_uses_recorded_mtime(self, export_dir):
        resolver = make_resolver(export_dir)
        model = scan_export(export_dir, "ru")
        mtime = model.pages["about"]["ru"].lastmod
        entries = entries_by_loc(build_sitemap(model, resolver, now=FIXED_NOW))
        expected = datetime.fromtimestamp(mtime, tz=UTC).replace(microsecond=0).isoformat()
        assert entries["https://example.com/about.html"]["lastmod"] == expected

    def test_relative_urls_without_domain(self, tmp_path):
        resolver = make_resolver(tmp_path, domain=None)
        model = make_model({"about": ["ru", "en"]})
        entries = entries_by_loc(build_sitemap(model, resolver, now=FIXED_NOW))
        assert set(entries) == {"/about.html", "/about-en.html"}

    def test_serialized_namespaces(self, tmp_path):
        resolver = make_resolver(tmp_path)
        model = make_model({"about": ["ru", "en"]})
        text = serialize_xml(build_sitemap(model, resolver, now=FIXED_NOW)).decode("utf-8")
        assert text.startswith("<?xml")
        assert f'xmlns="{SITEMAP_NS}"' in text
        assert f'xmlns:xhtml="{XHTML_NS}"' in text
        assert text.count("<url>") == 2
