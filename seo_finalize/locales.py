"""Locale tables: site locale to Open Graph locale, plus tag sanity checks."""

from __future__ import annotations

import re
from functools import lru_cache

DEFAULT_OG_LOCALE = "en_US"

OG_LOCALES: dict[str, str] = {
    "en": "en_US",
    "en-US": "en_US",
    "en-GB": "en_GB",
    "fr": "fr_FR",
    "es": "es_ES",
    "de": "de_DE",
    "it": "it_IT",
    "nl": "nl_NL",
    "pt": "pt_PT",
    "pt-BR": "pt_BR",
    "pl": "pl_PL",
    "cs": "cs_CZ",
    "da": "da_DK",
    "fi": "fi_FI",
    "sv": "sv_SE",
    "nb": "nb_NO",
    "no": "nb_NO",
    "sk": "sk_SK",
    "sl": "sl_SI",
    "el": "el_GR",
    "ro": "ro_RO",
    "bg": "bg_BG",
    "hu": "hu_HU",
    "lt": "lt_LT",
    "lv": "lv_LV",
    "et": "et_EE",
    "tr": "tr_TR",
    "uk": "uk_UA",
    "ru": "ru_RU",
    "id": "id_ID",
    "ja": "ja_JP",
    "ko": "ko_KR",
    "zh": "zh_CN",
    "zh-Hans": "zh_CN",
    "zh-CN": "zh_CN",
    "zh-TW": "zh_TW",
    "ar": "ar_AR",
}

LOCALE_TAG_RE = re.compile(r"^[A-Za-z]{2,3}(?:-[A-Za-z]{2}|-[A-Za-z]{4}|-[A-Za-z]{4}-[A-Za-z]{2})?$")


def og_locale(tag: str) -> str:
    return OG_LOCALES.get(tag, DEFAULT_OG_LOCALE)


def is_mapped(tag: str) -> bool:
    return tag in OG_LOCALES


KNOWN_LANGUAGES = frozenset(tag.split("-")[0] for tag in OG_LOCALES)


def is_known_language(code: str) -> bool:
    return code in KNOWN_LANGUAGES


@lru_cache(maxsize=1)
def load_iso_sets() -> tuple[frozenset[str], frozenset[str], bool]:
    try:
        import pycountry  # type: ignore
    except ImportError:
        return frozenset(), frozenset(), False

    lang_codes = frozenset(
        str(item.alpha_2).lower() for item in pycountry.languages if getattr(item, "alpha_2", "")
    )
    region_codes = frozenset(
        str(item.alpha_2).upper() for item in pycountry.countries if getattr(item, "alpha_2", "")
    )
    return lang_codes, region_codes, True


def check_locale(tag: str) -> list[str]:
    """Return notes for a locale tag that would make a poor hreflang value."""
    if not LOCALE_TAG_RE.fullmatch(tag):
        return [f"Locale '{tag}' is not a language or language-region/script tag"]

    notes: list[str] = []
    lang_codes, region_codes, has_pycountry = load_iso_sets()
    parts = tag.split("-")
    language = parts[0].lower()
    if has_pycountry and len(language) == 2 and language not in lang_codes:
        notes.append(f"Unknown ISO 639-1 language code '{language}' in '{tag}'")

    region = next((part for part in parts[1:] if len(part) == 2), None)
    if region and has_pycountry and region.upper() not in region_codes:
        notes.append(f"Unknown ISO 3166-1 region code '{region}' in '{tag}'")
    if region and region != region.upper():
        notes.append(f"Prefer upper-case region '{region.upper()}' in '{tag}'")
    return notes
