"""Resolved run configuration for seo-finalize."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

BASE_URL_PLACEHOLDER = "{{BASE_URL}}"
DEFAULT_PRIMARY_LOCALE = "ru"
WWW_MODES = ("keep", "www", "non-www")

HTACCESS_STRIP_RE = re.compile(r"RewriteRule\s+\^\(.*\\\.html\$\)\s+\$1")
NGINX_STRIP_RE = re.compile(r"return\s+301\s+\$1;")
SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class ExportError(RuntimeError):
    """Fatal condition that aborts the whole run."""


@dataclass(frozen=True)
class ResolvedConfig:
    export_dir: Path
    primary_locale: str
    base_url: str
    scheme: str
    host: str
    www_mode: str = "keep"
    strip_html: bool = False

    @property
    def absolute(self) -> bool:
        return self.base_url != BASE_URL_PLACEHOLDER


def idna_host(host: str) -> str:
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError:
        return host


def normalize_domain(raw: str, https: bool = True, www_mode: str = "keep") -> tuple[str, str, str]:
    """Return ``(base_url, scheme, host)`` for a user-supplied domain.

    A blank domain yields the placeholder base URL, which keeps every emitted
    URL site-relative.
    """
    value = (raw or "").strip()
    if not value:
        return BASE_URL_PLACEHOLDER, "https" if https else "http", ""
    if not SCHEME_RE.match(value):
        value = ("https://" if https else "http://") + value

    parsed = urlparse(value)
    host = (parsed.hostname or "").lower()
    if not host:
        raise ExportError("Invalid domain provided")
    host = idna_host(host)

    if www_mode == "www" and not host.startswith("www."):
        host = "www." + host
    elif www_mode == "non-www" and host.startswith("www."):
        host = host[4:]

    scheme = "https" if https else (parsed.scheme.lower() or "https")
    return f"{scheme}://{host}", scheme, host


def read_side_file(path: Path) -> str:
    if not path.is_file():
        return ""
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return ""


def detect_strip_policy(export_dir: Path) -> bool:
    """True when previously generated redirect configs hide the ``.html`` suffix."""
    if HTACCESS_STRIP_RE.search(read_side_file(export_dir / ".htaccess")):
        return True
    return bool(NGINX_STRIP_RE.search(read_side_file(export_dir / "nginx.conf")))


def resolve_config(
    export_dir: str | Path,
    domain: str = "",
    https: bool = True,
    www_mode: str = "keep",
    primary_locale: str = DEFAULT_PRIMARY_LOCALE,
) -> ResolvedConfig:
    root = Path(export_dir)
    if not str(export_dir).strip():
        raise ExportError("Option export_dir is required")
    if not root.is_dir():
        raise ExportError(f"Export dir not found: {root}")

    mode = www_mode if www_mode in WWW_MODES else "keep"
    base_url, scheme, host = normalize_domain(domain, https, mode)
    primary = (primary_locale or "").strip() or DEFAULT_PRIMARY_LOCALE

    return ResolvedConfig(
        export_dir=root,
        primary_locale=primary,
        base_url=base_url,
        scheme=scheme,
        host=host,
        www_mode=mode,
        strip_html=detect_strip_policy(root),
    )
