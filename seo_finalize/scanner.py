"""Page model built purely from export filenames."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from seo_finalize.config import ExportError
from seo_finalize.locales import is_known_language

logger = logging.getLogger(__name__)

HOME_SLUG = "index"
HOME_LOCALE_RE = re.compile(r"^index-([A-Za-z\-]+)$")
LOCALE_SUFFIX_RE = re.compile(r"^(.+)-([A-Za-z\-]+)$")
# Region (pt-BR) or script (zh-Hans) subtags split off by the greedy slug match.
# Merged back only when the preceding piece is a known language.
SUBTAG_RE = re.compile(r"^(?:[A-Z]{2}|[A-Z][a-z]{3})$")
LANGUAGE_TAIL_RE = re.compile(r"^(.+)-([a-z]{2,3})$")


@dataclass(frozen=True)
class Page:
    slug: str
    locale: str
    is_home: bool
    rel_path: str
    lastmod: float | None = None


@dataclass
class PageModel:
    primary_locale: str
    pages: dict[str, dict[str, Page]] = field(default_factory=dict)
    locales: list[str] = field(default_factory=list)

    def iter_pages(self) -> Iterator[Page]:
        for slug in sorted(self.pages):
            by_locale = self.pages[slug]
            for locale in sorted(by_locale):
                yield by_locale[locale]

    def locales_for(self, slug: str) -> list[str]:
        return list(self.pages.get(slug, {}))

    def get(self, slug: str, locale: str) -> Page | None:
        return self.pages.get(slug, {}).get(locale)

    def __len__(self) -> int:
        return sum(len(by_locale) for by_locale in self.pages.values())

    def summary(self) -> dict[str, Any]:
        return {
            "primary_locale": self.primary_locale,
            "locales": list(self.locales),
            "total_pages": len(self),
            "pages": {
                slug: {locale: page.rel_path for locale, page in by_locale.items()}
                for slug, by_locale in sorted(self.pages.items())
            },
        }


def classify(basename: str, primary_locale: str) -> tuple[str, str, bool]:
    """Map an extension-less filename to ``(slug, locale, is_home)``."""
    if basename == HOME_SLUG:
        return HOME_SLUG, primary_locale, True

    match = HOME_LOCALE_RE.match(basename)
    if match:
        return HOME_SLUG, match.group(1), True

    match = LOCALE_SUFFIX_RE.match(basename)
    if match:
        slug, locale = match.group(1), match.group(2)
        if SUBTAG_RE.match(locale):
            tail = LANGUAGE_TAIL_RE.match(slug)
            if tail and is_known_language(tail.group(2)):
                slug, locale = tail.group(1), f"{tail.group(2)}-{locale}"
        return slug, locale, False

    return basename, primary_locale, False


def iter_html_files(root: Path) -> list[Path]:
    found = [path for path in root.rglob("*") if path.suffix.lower() == ".html" and path.is_file()]
    return sorted(found, key=lambda path: path.relative_to(root).as_posix())


def scan_export(root: str | Path, primary_locale: str) -> PageModel:
    """Build the slug -> locale -> Page map for every HTML file under ``root``.

    Files are visited in lexical relative-path order, so when two filenames
    resolve to the same slug and locale the later path wins.
    """
    root = Path(root)
    model = PageModel(primary_locale=primary_locale, locales=[primary_locale])

    for path in iter_html_files(root):
        rel = path.relative_to(root).as_posix()
        base = path.name[: -len(path.suffix)]
        slug, locale, is_home = classify(base, primary_locale)

        try:
            lastmod: float | None = path.stat().st_mtime
        except OSError:
            lastmod = None

        by_locale = model.pages.setdefault(slug, {})
        previous = by_locale.get(locale)
        if previous is not None:
            logger.warning(
                "Duplicate page %s/%s: %s replaces %s", slug, locale, "/" + rel, previous.rel_path
            )
        by_locale[locale] = Page(slug=slug, locale=locale, is_home=is_home, rel_path="/" + rel, lastmod=lastmod)
        if locale not in model.locales:
            model.locales.append(locale)

    if not model.pages:
        raise ExportError(f"No HTML pages were found in export dir: {root}")
    return model
