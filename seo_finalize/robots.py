"""robots.txt pointing crawlers at the generated sitemap."""

from __future__ import annotations

from pathlib import Path

from seo_finalize.sitemap import SITEMAP_NAME
from seo_finalize.urls import UrlResolver

DISALLOWED_PATHS = ("/editor/", "/data/")


def render_robots(resolver: UrlResolver) -> str:
    lines = ["User-agent: *", "Allow: /", ""]
    lines.extend(f"Disallow: {path}" for path in DISALLOWED_PATHS)
    lines.append("")
    lines.append(f"Sitemap: {resolver.resolve('/' + SITEMAP_NAME)}")
    return "\n".join(lines) + "\n"


def write_robots(resolver: UrlResolver) -> Path:
    path = Path(resolver.config.export_dir) / "robots.txt"
    path.write_text(render_robots(resolver), encoding="utf-8")
    return path
