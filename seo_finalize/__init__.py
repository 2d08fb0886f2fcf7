"""Post-export SEO finalizer for multilingual static sites."""

from __future__ import annotations

__version__ = "1.0.0"
