"""Canonical and alternate URL resolution."""

from __future__ import annotations

from seo_finalize.config import BASE_URL_PLACEHOLDER, ResolvedConfig
from seo_finalize.scanner import HOME_SLUG, PageModel

X_DEFAULT = "x-default"


class UrlResolver:
    """Inverse of the filename convention used by :func:`seo_finalize.scanner.classify`."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config

    @property
    def primary(self) -> str:
        return self.config.primary_locale

    @property
    def absolute(self) -> bool:
        return self.config.absolute

    def base(self) -> str:
        return self.config.base_url.rstrip("/")

    def path_for(self, slug: str, locale: str, is_home: bool) -> str:
        if slug == HOME_SLUG and is_home:
            return "/" if locale == self.primary else f"/index-{locale}.html"
        if locale == self.primary:
            return f"/{slug}.html"
        return f"/{slug}-{locale}.html"

    def public_path(self, path: str) -> str:
        if self.config.strip_html and path.endswith(".html"):
            return path[: -len(".html")]
        return path

    def abs(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        if not self.absolute:
            return BASE_URL_PLACEHOLDER + path
        return self.base() + path

    def resolve(self, path: str) -> str:
        """Absolute URL when a domain is configured, site-relative path otherwise."""
        return self.abs(path) if self.absolute else path

    def url_for(self, slug: str, locale: str, is_home: bool) -> str:
        return self.resolve(self.public_path(self.path_for(slug, locale, is_home)))

    def alternates(self, model: PageModel, slug: str, locale: str, is_home: bool) -> list[tuple[str, str]]:
        """hreflang entries for one page: mapped locales, self if absent, then x-default."""
        by_locale = model.pages.get(slug, {})
        entries = [(alt, self.url_for(slug, alt, page.is_home)) for alt, page in by_locale.items()]
        if locale not in by_locale:
            entries.append((locale, self.url_for(slug, locale, is_home)))

        default_page = by_locale.get(self.primary)
        default_home = default_page.is_home if default_page is not None else is_home
        entries.append((X_DEFAULT, self.url_for(slug, self.primary, default_home)))
        return entries

    def home_destinations(self, model: PageModel, slug: str) -> dict[str, str]:
        destinations: dict[str, str] = {}
        for alt, page in model.pages.get(slug, {}).items():
            path = "/" if alt == self.primary else self.path_for(slug, alt, page.is_home)
            destinations[alt] = self.resolve(self.public_path(path))
        destinations.setdefault(self.primary, self.resolve("/"))
        return destinations
