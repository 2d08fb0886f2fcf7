"""Command-line entry point for seo-finalize."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from seo_finalize.audit import audit_export
from seo_finalize.config import WWW_MODES, ExportError, resolve_config
from seo_finalize.inject import inject_all
from seo_finalize.robots import write_robots
from seo_finalize.scanner import scan_export
from seo_finalize.sitemap import write_sitemap
from seo_finalize.urls import UrlResolver


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run_finalize(args: argparse.Namespace) -> int:
    try:
        config = resolve_config(
            args.export_dir,
            domain=args.domain,
            https=not args.http,
            www_mode=args.www_mode,
            primary_locale=args.primary_locale,
        )
        model = scan_export(config.export_dir, config.primary_locale)
    except ExportError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    resolver = UrlResolver(config)
    result = inject_all(model, resolver)
    sitemap_path = write_sitemap(model, resolver)
    robots_path = None if args.no_robots else write_robots(resolver)

    summary: dict[str, Any] = {
        "mode": "finalize",
        "export_dir": str(config.export_dir),
        "base_url": config.base_url if config.absolute else None,
        "primary_locale": config.primary_locale,
        "strip_html": config.strip_html,
        "locales": list(model.locales),
        "pages_total": len(model),
        "pages_updated": len(result.updated),
        "pages_unchanged": len(result.unchanged),
        "pages_skipped": result.skipped,
        "sitemap": str(sitemap_path),
        "robots": str(robots_path) if robots_path else None,
    }

    if args.verify:
        issues, audit_summary = audit_export(model, resolver)
        summary["audit"] = audit_summary
        summary["issues"] = issues

    if args.summary_file:
        summary_path = Path(args.summary_file).resolve()
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")

    print(f"Base URL: {config.base_url if config.absolute else '(site-relative)'}")
    print(f"Locales: {', '.join(model.locales)}")
    print(f"Pages: {len(model)} (updated={len(result.updated)}, skipped={len(result.skipped)})")
    print(f"Strip .html: {'yes' if config.strip_html else 'no'}")
    print(f"Sitemap: {sitemap_path}")
    if robots_path:
        print(f"Robots: {robots_path}")
    if args.verify:
        by_severity = summary["audit"]["issues_by_severity"]
        print(
            "Issues: "
            f"{summary['audit']['issues_total']} "
            f"(Critical={by_severity['Critical']}, High={by_severity['High']}, "
            f"Medium={by_severity['Medium']}, Low={by_severity['Low']})"
        )
    if args.summary_file:
        print(f"Summary: {Path(args.summary_file).resolve()}")
    return 0


def run_scan(args: argparse.Namespace) -> int:
    try:
        config = resolve_config(args.export_dir, primary_locale=args.primary_locale)
        model = scan_export(config.export_dir, config.primary_locale)
    except ExportError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(model.summary(), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Finalize a multilingual static export for search engines")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-page details")
    sub = parser.add_subparsers(dest="command", required=True)

    p_finalize = sub.add_parser("finalize", help="Rewrite canonical/hreflang metadata and write sitemap.xml")
    p_finalize.add_argument("--export-dir", required=True, help="Root of the exported HTML tree")
    p_finalize.add_argument("--domain", default="", help="Site domain; omit for site-relative URLs")
    p_finalize.add_argument("--http", action="store_true", help="Use http:// instead of https://")
    p_finalize.add_argument("--www-mode", choices=WWW_MODES, default="keep")
    p_finalize.add_argument("--primary-locale", default="ru", help="Locale served at the site root")
    p_finalize.add_argument("--no-robots", action="store_true", help="Do not write robots.txt")
    p_finalize.add_argument("--verify", action="store_true", help="Audit the processed pages afterwards")
    p_finalize.add_argument("--summary-file", default="", help="Write a JSON run summary to this path")
    p_finalize.set_defaults(func=run_finalize)

    p_scan = sub.add_parser("scan", help="Print the page/locale map inferred from filenames")
    p_scan.add_argument("--export-dir", required=True, help="Root of the exported HTML tree")
    p_scan.add_argument("--primary-locale", default="ru", help="Locale served at the site root")
    p_scan.set_defaults(func=run_scan)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
