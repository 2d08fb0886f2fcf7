"""In-place SEO head rewriting for exported pages.

Every step is a pure ``(html, ctx) -> html`` rewrite and the pipeline runs
them in a fixed order. Running the pipeline over its own output yields the
same bytes.
"""

from __future__ import annotations

import html as html_lib
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from seo_finalize.config import BASE_URL_PLACEHOLDER
from seo_finalize.jsonld import normalize_payload
from seo_finalize.locales import is_mapped, og_locale
from seo_finalize.scanner import Page, PageModel
from seo_finalize.urls import UrlResolver

logger = logging.getLogger(__name__)

BLOCK_OPEN = "<!-- SEO (export-generated) -->"
BLOCK_CLOSE = "<!-- /SEO -->"
REDIRECT_MARKER = 'data-seo-finalize="locale-redirect"'
PREF_COOKIE = "pref_lang"
PREF_COOKIE_MAX_AGE = 60 * 60 * 24 * 30

DOUBLE_AMP = "&amp;amp;"
ATTR_START = r"(?<![\w-])"
TITLE_RE = re.compile(r"(<title\b[^>]*>)([\s\S]*?)(</title>)", re.IGNORECASE)
ESCAPED_META_RE = re.compile(
    r"(<meta\b[^>]*?" + ATTR_START + r"(?:name|property)=[\"']"
    r"(?:description|og:title|og:description|twitter:title|twitter:description)[\"']"
    r"[^>]*\scontent=([\"']))([\s\S]*?)(\2[^>]*>)",
    re.IGNORECASE,
)

GENERATED_BLOCK_RE = re.compile(
    r"\n?" + re.escape(BLOCK_OPEN) + r"\n[\s\S]*?\n" + re.escape(BLOCK_CLOSE) + r"\n?",
)
STALE_TAG_RES = (
    re.compile(re.escape(BLOCK_OPEN) + r"\s*"),
    re.compile(re.escape(BLOCK_CLOSE) + r"\s*"),
    re.compile(r"<link\b(?=[^>]*" + ATTR_START + r"rel=[\"']canonical[\"'])[^>]*>\s*", re.IGNORECASE),
    re.compile(
        r"<link\b(?=[^>]*" + ATTR_START + r"rel=[\"']alternate[\"'])(?=[^>]*" + ATTR_START + r"hreflang=)[^>]*>\s*",
        re.IGNORECASE,
    ),
    re.compile(r"<meta\b(?=[^>]*" + ATTR_START + r"property=[\"']og:url[\"'])[^>]*>\s*", re.IGNORECASE),
    re.compile(
        r"<meta\b(?=[^>]*" + ATTR_START + r"(?:name|property)=[\"']twitter:url[\"'])[^>]*>\s*", re.IGNORECASE
    ),
    re.compile(
        r"<meta\b(?=[^>]*" + ATTR_START + r"property=[\"']og:locale(?::alternate)?[\"'])[^>]*>\s*", re.IGNORECASE
    ),
)
REDIRECT_SCRIPT_RE = re.compile(r"<script\b[^>]*" + re.escape(REDIRECT_MARKER) + r"[^>]*>[\s\S]*?</script>")

HEAD_OPEN_RE = re.compile(r"<head\b[^>]*>", re.IGNORECASE)
HEAD_CLOSE_RE = re.compile(r"</head>", re.IGNORECASE)
META_TAG_RE = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
IMAGE_META_RE = re.compile(ATTR_START + r"(?:name|property)=[\"'](?:og:image|twitter:image)[\"']", re.IGNORECASE)
CONTENT_ATTR_RE = re.compile(r"(" + ATTR_START + r"content=)([\"'])(.*?)\2", re.IGNORECASE | re.DOTALL)
HAS_SCHEME_RE = re.compile(r"^(?:[a-z][a-z0-9+.\-]*:|//)", re.IGNORECASE)

SCRIPT_RE = re.compile(r"<script\b([^>]*)>([\s\S]*?)</script>", re.IGNORECASE)
JSONLD_ATTR_RE = re.compile(ATTR_START + r"type=[\"']application/ld\+json[\"']", re.IGNORECASE)
LEGACY_SCRIPT_RE = re.compile(
    r"\{\{BASE_URL\}\}|JS[\s\-]*fallback|link\[rel=[\"']canonical[\"']|hreflang|og:url|twitter:url",
    re.IGNORECASE,
)
# Unmarked locale redirect written by earlier export runs.
LEGACY_REDIRECT_RE = re.compile(r"cookieName\s*=\s*[\"']" + PREF_COOKIE + r"[\"'][\s\S]*?location\.replace\(")
SCRIPT_OR_TOKEN_RE = re.compile(
    r"(?P<script>(?i:<script\b[^>]*>[\s\S]*?</script>))|(?P<token>" + re.escape(BASE_URL_PLACEHOLDER) + r"/?)",
)

CRAWLER_UA_RE = (
    "bot|crawl|spider|slurp|baiduspider|bingpreview|facebookexternalhit|twitterbot|"
    "embedly|pinterest|vkshare|whatsapp|telegram|discord|linkbot"
)
REDIRECT_JS = (
    "(function(){"
    "var isBot=/%(crawlers)s/i.test(navigator.userAgent);if(isBot)return;"
    "try{var cookieName='%(cookie)s';"
    "if(document.cookie.indexOf(cookieName+'=')!==-1)return;"
    "var PRIMARY=%(primary)s;var DEST=%(dest)s;var href=DEST[PRIMARY]||'/';"
    "if(location.pathname==='/'||/\\/index(-[a-z0-9\\-]+)?(\\.html)?$/i.test(location.pathname)){"
    "var targetPath=(new URL(href,location.origin)).pathname;"
    "if(location.pathname!==targetPath){"
    "document.cookie=cookieName+'='+PRIMARY+'; max-age=%(max_age)d; path=/; SameSite=Lax';"
    "location.replace(href);}}}catch(e){}})();"
)


@dataclass
class PageContext:
    page: Page
    resolver: UrlResolver
    canonical_url: str
    alternates: list[tuple[str, str]]
    slug_locales: list[str]
    home_destinations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, page: Page, model: PageModel, resolver: UrlResolver) -> "PageContext":
        return cls(
            page=page,
            resolver=resolver,
            canonical_url=resolver.url_for(page.slug, page.locale, page.is_home),
            alternates=resolver.alternates(model, page.slug, page.locale, page.is_home),
            slug_locales=model.locales_for(page.slug),
            home_destinations=resolver.home_destinations(model, page.slug) if page.is_home else {},
        )


@dataclass
class InjectionResult:
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def attr(value: str) -> str:
    return html_lib.escape(value, quote=True)


def collapse_double_amp(text: str) -> str:
    while DOUBLE_AMP in text:
        text = text.replace(DOUBLE_AMP, "&amp;")
    return text


def unescape_double_entities(html: str, ctx: PageContext) -> str:
    html = TITLE_RE.sub(lambda m: m.group(1) + collapse_double_amp(m.group(2)) + m.group(3), html)
    return ESCAPED_META_RE.sub(lambda m: m.group(1) + collapse_double_amp(m.group(3)) + m.group(4), html)


def strip_generated_tags(html: str, ctx: PageContext) -> str:
    html = GENERATED_BLOCK_RE.sub("", html)
    html = REDIRECT_SCRIPT_RE.sub("", html)
    for pattern in STALE_TAG_RES:
        html = pattern.sub("", html)
    return html


def og_locale_tags(ctx: PageContext) -> list[str]:
    current = og_locale(ctx.page.locale)
    tags = [f'<meta property="og:locale" content="{attr(current)}">']
    seen = {current}
    for locale in ctx.slug_locales:
        if locale == ctx.page.locale or not is_mapped(locale):
            continue
        mapped = og_locale(locale)
        if mapped in seen:
            continue
        seen.add(mapped)
        tags.append(f'<meta property="og:locale:alternate" content="{attr(mapped)}">')
    return tags


def render_seo_block(ctx: PageContext) -> str:
    canonical = attr(ctx.canonical_url)
    lines = [
        f'<link rel="canonical" href="{canonical}">',
        f'<meta property="og:url" content="{canonical}">',
        f'<meta name="twitter:url" content="{canonical}">',
    ]
    lines.extend(og_locale_tags(ctx))
    lines.extend(
        f'<link rel="alternate" hreflang="{attr(code)}" href="{attr(href)}">' for code, href in ctx.alternates
    )
    return "\n" + BLOCK_OPEN + "\n" + "\n".join(lines) + "\n" + BLOCK_CLOSE + "\n"


def insert_seo_block(html: str, ctx: PageContext) -> str:
    block = render_seo_block(ctx)
    head_close = HEAD_CLOSE_RE.search(html)
    if not head_close:
        logger.debug("No </head> in %s; appending SEO block", ctx.page.rel_path)
        return html + block
    return html[: head_close.start()] + block + html[head_close.start() :]


def absolutize_images(html: str, ctx: PageContext) -> str:
    if not ctx.resolver.absolute:
        return html
    base = ctx.resolver.base()

    def fix_content(match: re.Match[str]) -> str:
        value = match.group(3)
        if HAS_SCHEME_RE.match(value) or value.startswith(BASE_URL_PLACEHOLDER) or not value.strip():
            return match.group(0)
        return f"{match.group(1)}{match.group(2)}{base}/{value.lstrip('/')}{match.group(2)}"

    def fix_tag(match: re.Match[str]) -> str:
        tag = match.group(0)
        if not IMAGE_META_RE.search(tag):
            return tag
        return CONTENT_ATTR_RE.sub(fix_content, tag, count=1)

    return META_TAG_RE.sub(fix_tag, html)


def is_legacy_script(attrs: str, body: str) -> bool:
    if JSONLD_ATTR_RE.search(attrs) or REDIRECT_MARKER in attrs:
        return False
    return bool(LEGACY_SCRIPT_RE.search(body) or LEGACY_REDIRECT_RE.search(body))


def substitute_placeholder(html: str, ctx: PageContext) -> str:
    base = ctx.resolver.base() if ctx.resolver.absolute else ""

    def replace_token(token: str) -> str:
        return base + "/" if token.endswith("/") else base

    def repl(match: re.Match[str]) -> str:
        script = match.group("script")
        if script is None:
            return replace_token(match.group("token"))
        inner = SCRIPT_RE.match(script)
        if inner and is_legacy_script(inner.group(1), inner.group(2)):
            # removed wholesale by remove_legacy_scripts
            return script
        return re.sub(
            re.escape(BASE_URL_PLACEHOLDER) + "/?", lambda m: replace_token(m.group(0)), script
        )

    return SCRIPT_OR_TOKEN_RE.sub(repl, html)


def remove_legacy_scripts(html: str, ctx: PageContext) -> str:
    def repl(match: re.Match[str]) -> str:
        if is_legacy_script(match.group(1), match.group(2)):
            return ""
        return match.group(0)

    return SCRIPT_RE.sub(repl, html)


def normalize_jsonld(html: str, ctx: PageContext) -> str:
    def repl(match: re.Match[str]) -> str:
        attrs, body = match.group(1), match.group(2)
        if not JSONLD_ATTR_RE.search(attrs):
            return match.group(0)
        payload = normalize_payload(body.strip(), ctx.page.locale, ctx.canonical_url)
        if payload is None:
            return match.group(0)
        return f"<script{attrs}>{payload}</script>"

    return SCRIPT_RE.sub(repl, html)


def render_redirect_script(ctx: PageContext) -> str:
    primary = ctx.resolver.primary
    dest = json.dumps(ctx.home_destinations, ensure_ascii=False).replace("</", "<\\/")
    body = REDIRECT_JS % {
        "crawlers": CRAWLER_UA_RE,
        "cookie": PREF_COOKIE,
        "primary": json.dumps(primary),
        "dest": dest,
        "max_age": PREF_COOKIE_MAX_AGE,
    }
    return f"<script {REDIRECT_MARKER}>{body}</script>"


def inject_home_redirect(html: str, ctx: PageContext) -> str:
    if not ctx.page.is_home:
        return html
    head_open = HEAD_OPEN_RE.search(html)
    if not head_open:
        logger.debug("No <head> in %s; skipping locale redirect", ctx.page.rel_path)
        return html
    return html[: head_open.end()] + render_redirect_script(ctx) + html[head_open.end() :]


PIPELINE = (
    unescape_double_entities,
    strip_generated_tags,
    insert_seo_block,
    absolutize_images,
    substitute_placeholder,
    remove_legacy_scripts,
    normalize_jsonld,
    inject_home_redirect,
)


def rewrite_html(html: str, ctx: PageContext) -> str:
    for step in PIPELINE:
        html = step(html, ctx)
    return html


def process_page(path: Path, ctx: PageContext) -> bool | None:
    """Rewrite one file in place.

    Returns ``True`` when the file changed, ``False`` when it was already
    current and ``None`` when it could not be read or written.
    """
    try:
        original = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable page %s: %s", path, exc)
        return None

    rewritten = rewrite_html(original, ctx)
    if rewritten == original:
        return False
    try:
        path.write_bytes(rewritten.encode("utf-8"))
    except OSError as exc:
        logger.warning("Cannot write page %s: %s", path, exc)
        return None
    return True


def inject_all(model: PageModel, resolver: UrlResolver) -> InjectionResult:
    result = InjectionResult()
    root = resolver.config.export_dir
    for page in model.iter_pages():
        ctx = PageContext.build(page, model, resolver)
        status = process_page(root / page.rel_path.lstrip("/"), ctx)
        if status is None:
            result.skipped.append(page.rel_path)
        elif status:
            result.updated.append(page.rel_path)
        else:
            result.unchanged.append(page.rel_path)
    logger.info(
        "Injected SEO metadata: %d updated, %d unchanged, %d skipped",
        len(result.updated),
        len(result.unchanged),
        len(result.skipped),
    )
    return result
