from __future__ import annotations


class ForestDataError(ValueError):
    """Raised when a record is malformed (missing bound, inverted interval, ...)."""


class LayoutConfigError(ValueError):
    """Raised when a layout is misconfigured; always before any rendering."""
