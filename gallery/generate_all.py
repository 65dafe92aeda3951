from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from forestkit.utils.config import load_config

from .data_access import resolve_data_dir
from .pages import PAGES, Page, get_page
from .style import PlotStyle, style_from_args, style_from_config

logger = logging.getLogger("gallery.generate_all")


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Render the forest-plot gallery pages and write the site index.",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config.yaml (default: ./config.yaml; missing file uses defaults)",
    )
    p.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding the gallery CSVs (default: DATA_DIR from config, else the bundled data)",
    )
    p.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Site output directory (default: OUTPUT_DIR from config)",
    )
    p.add_argument(
        "--page",
        action="append",
        default=None,
        help="Render only this page slug (repeatable)",
    )
    p.add_argument(
        "--figure-dpi",
        type=int,
        default=None,
        help="DPI for generated figures (default: FIGURE.dpi from config)",
    )
    p.add_argument(
        "--font-size",
        type=float,
        default=None,
        help="Base font size for figures (default: STYLE.font_size from config)",
    )
    p.add_argument(
        "--line-width",
        type=float,
        default=None,
        help="Line width for intervals (default: STYLE.line_width from config)",
    )
    p.add_argument(
        "--marker-size",
        type=float,
        default=None,
        help="Marker size for point estimates (default: STYLE.marker_size from config)",
    )
    return p.parse_args(argv)


def write_index(site_dir: Path, rendered: Sequence[Tuple[Page, Path]]) -> Path:
    """Write the Markdown landing page: one section per page, narrative then image."""
    lines = ["# Forest plot gallery", ""]
    for page, image in rendered:
        lines.append(f"## {page.title}")
        lines.append("")
        if page.body:
            lines.append(page.body)
            lines.append("")
        lines.append(f"![{page.title}]({image.relative_to(site_dir).as_posix()})")
        lines.append("")
    index = site_dir / "index.md"
    index.write_text("\n".join(lines), encoding="utf-8")
    print(f"[OK] Saved: {index.name}")
    return index


def generate_all_pages(
    data_dir: Optional[Path],
    site_dir: Path,
    style: PlotStyle,
    cfg: Dict,
    *,
    slugs: Optional[Sequence[str]] = None,
) -> List[Tuple[Page, Path]]:
    """Render every (or every selected) page into `site_dir/figures`."""
    pages = [get_page(s) for s in slugs] if slugs else list(PAGES)
    figures_dir = site_dir / "figures"
    figures_dir.mkdir(parents=True, exist_ok=True)
    rendered = []
    for page in pages:
        print(f"Generating page '{page.slug}'...")
        out = figures_dir / page.filename
        page.build(data_dir, out, style, cfg)
        rendered.append((page, out))
    return rendered


def main(argv=None):
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    cfg = load_config(args.config)

    data_dir = resolve_data_dir(args.data_dir or cfg.get("DATA_DIR"))
    site_dir = Path(args.output_dir or cfg.get("OUTPUT_DIR") or "site")
    style = style_from_args(args, base=style_from_config(cfg))
    logger.info("Rendering gallery from %s into %s", data_dir, site_dir)

    rendered = generate_all_pages(data_dir, site_dir, style, cfg, slugs=args.page)
    write_index(site_dir, rendered)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
