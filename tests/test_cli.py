"""End-to-end tests for the seo-finalize command line."""

import json
import xml.etree.ElementTree as ET

from seo_finalize.cli import main
from seo_finalize.sitemap import SITEMAP_NS

LOC_TAG = f"{{{SITEMAP_NS}}}loc"


class TestFinalizeCommand:
    def test_scenario(self, export_dir, capsys):
        (export_dir / ".htaccess").write_text(r"RewriteRule ^(.*\.html$) $1 [R=301,L]" + "\n", encoding="utf-8")
        summary_path = export_dir.parent / "out" / "SUMMARY.json"

        code = main(
            [
                "finalize",
                "--export-dir",
                str(export_dir),
                "--domain",
                "example.com",
                "--verify",
                "--summary-file",
                str(summary_path),
            ]
        )

        assert code == 0
        about = (export_dir / "about.html").read_text(encoding="utf-8")
        assert '<link rel="canonical" href="https://example.com/about">' in about
        assert '<link rel="alternate" hreflang="en" href="https://example.com/about-en">' in about
        assert '<link rel="alternate" hreflang="x-default" href="https://example.com/about">' in about

        locs = [node.text for node in ET.parse(export_dir / "sitemap.xml").getroot().iter(LOC_TAG)]
        assert sorted(locs) == [
            "https://example.com/",
            "https://example.com/about",
            "https://example.com/about-en",
            "https://example.com/index-en",
        ]
        assert "Sitemap: https://example.com/sitemap.xml" in (export_dir / "robots.txt").read_text(encoding="utf-8")

        summary = json.loads(summary_path.read_text(encoding="utf-8"))
        assert summary["pages_total"] == 4
        assert summary["pages_updated"] == 4
        assert summary["strip_html"] is True
        assert summary["audit"]["issues_total"] == 0

        out = capsys.readouterr().out
        assert "Pages: 4 (updated=4, skipped=0)" in out
        assert "Strip .html: yes" in out

    def test_second_run_changes_nothing(self, export_dir, capsys):
        args = ["finalize", "--export-dir", str(export_dir), "--domain", "example.com", "--no-robots"]
        assert main(args) == 0
        snapshot = {path.name: path.read_bytes() for path in export_dir.glob("*.html")}

        assert main(args) == 0

        assert {path.name: path.read_bytes() for path in export_dir.glob("*.html")} == snapshot
        assert "updated=0" in capsys.readouterr().out
        assert not (export_dir / "robots.txt").exists()

    def test_without_domain_emits_relative_urls(self, export_dir):
        assert main(["finalize", "--export-dir", str(export_dir)]) == 0
        for path in export_dir.glob("*.html"):
            text = path.read_text(encoding="utf-8")
            assert "{{BASE_URL}}" not in text
            assert "https://" not in text
        sitemap = (export_dir / "sitemap.xml").read_text(encoding="utf-8")
        assert "<loc>/about.html</loc>" in sitemap

    def test_missing_export_dir(self, tmp_path, capsys):
        assert main(["finalize", "--export-dir", str(tmp_path / "missing")]) == 2
        assert "Export dir not found" in capsys.readouterr().err

    def test_no_pages(self, tmp_path, capsys):
        assert main(["finalize", "--export-dir", str(tmp_path)]) == 2
        assert "No HTML pages" in capsys.readouterr().err


class TestScanCommand:
    def test_prints_page_map(self, export_dir, capsys):
        assert main(["scan", "--export-dir", str(export_dir), "--primary-locale", "ru"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["locales"] == ["ru", "en"]
        assert data["pages"]["about"] == {"en": "/about-en.html", "ru": "/about.html"}
