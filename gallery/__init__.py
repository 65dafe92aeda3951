"""
Narrated forest-plot tutorials.

This package is the documentation site: each page in `pages` loads one of
the CSVs under `data/`, shapes it with `forestkit`, and saves a PNG.
`generate_all` renders every page and writes a Markdown index:

    python -m gallery.generate_all --output-dir site
"""

from .style import PlotStyle

__all__ = ["PlotStyle"]
