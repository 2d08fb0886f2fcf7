"""Builders for page models, resolvers and export trees used across tests."""

from __future__ import annotations

from pathlib import Path

from seo_finalize.config import BASE_URL_PLACEHOLDER, ResolvedConfig
from seo_finalize.scanner import Page, PageModel
from seo_finalize.urls import UrlResolver

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="utf-8">
<title>{title}</title>
<meta name="description" content="About the team">
</head>
<body>
<h1>{title}</h1>
</body>
</html>
"""


def make_resolver(
    root: Path,
    domain: str | None = "https://example.com",
    primary: str = "ru",
    strip_html: bool = False,
) -> UrlResolver:
    host = domain.split("://", 1)[1] if domain else ""
    config = ResolvedConfig(
        export_dir=root,
        primary_locale=primary,
        base_url=domain or BASE_URL_PLACEHOLDER,
        scheme="https",
        host=host,
        strip_html=strip_html,
    )
    return UrlResolver(config)


def make_model(entries: dict[str, list[str]], primary: str = "ru") -> PageModel:
    """Build a page model from ``{slug: [locale, ...]}`` using the export naming convention."""
    model = PageModel(primary_locale=primary, locales=[primary])
    for slug, locales in entries.items():
        for locale in locales:
            is_home = slug == "index"
            if is_home:
                name = "index" if locale == primary else f"index-{locale}"
            else:
                name = slug if locale == primary else f"{slug}-{locale}"
            model.pages.setdefault(slug, {})[locale] = Page(
                slug=slug, locale=locale, is_home=is_home, rel_path=f"/{name}.html"
            )
            if locale not in model.locales:
                model.locales.append(locale)
    return model


def write_pages(root: Path, names: list[str]) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(PAGE_TEMPLATE.format(lang="ru", title=path.stem), encoding="utf-8")
