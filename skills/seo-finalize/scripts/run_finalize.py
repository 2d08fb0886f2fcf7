#!/usr/bin/env python3
"""Post-export canonical/hreflang finalizer runner for seo-finalize."""

from __future__ import annotations

from seo_finalize.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
