"""Centralized helper for loading `config.yaml` and deriving commonly used values.

`load_config()` returns the YAML content merged over built-in defaults and
overridden from `FORESTKIT_*` environment variables. The `get_*` helpers turn
sections into the option objects the core modules accept as explicit
parameters.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import LayoutConfigError
from ..formatting import FormatOptions
from ..types import StripeSpec
from .config_env import override_config_from_env

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path("config.yaml")

DEFAULTS: Dict[str, Any] = {
    "OUTPUT_DIR": "site",
    "DATA_DIR": None,
    "FIGURE": {"dpi": 200, "width": None, "height": None, "format": "png"},
    "STYLE": {"font_size": 9.0, "line_width": 1.2, "marker_size": 5.0},
    "FORMAT": {
        "indent": "  ",
        "ratio_decimals": 2,
        "difference_decimals": 1,
        "ref_marker": "(ref)",
        "percent": False,
    },
    "STRIPES": {"parity": 1, "color": "#eff3f8", "alt_color": None},
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: str | Path = DEFAULT_PATH, *, use_env: bool = True) -> Dict[str, Any]:
    """Load YAML config from `path` merged over DEFAULTS.

    A missing file yields the defaults; a file that is not valid YAML or not
    a mapping raises LayoutConfigError.
    """
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        try:
            with p.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise LayoutConfigError(f"Could not parse {p}: {e}") from e
        if not isinstance(raw, dict):
            raise LayoutConfigError(f"{p} must contain a mapping, got {type(raw).__name__}")
    else:
        logger.debug("Config file not found: %s; using defaults", p)
    cfg = _merge(DEFAULTS, raw)
    if use_env:
        cfg = override_config_from_env(cfg)
    return cfg


def get_format_options(cfg: Dict[str, Any], kind: str = "ratio") -> FormatOptions:
    """FormatOptions for 'ratio' (e.g. risk ratios) or 'difference' columns."""
    fmt = (cfg or {}).get("FORMAT") or {}
    key = f"{kind}_decimals"
    if key not in fmt:
        raise LayoutConfigError(f"FORMAT has no '{key}' entry")
    return FormatOptions(
        decimals=int(fmt[key]),
        percent=bool(fmt.get("percent", False)),
        indent=str(fmt.get("indent", "  ")),
        ref_marker=str(fmt.get("ref_marker", "(ref)")),
    )


def get_stripe_spec(cfg: Dict[str, Any]) -> StripeSpec:
    stripes = (cfg or {}).get("STRIPES") or {}
    parity = stripes.get("parity", 1)
    if parity is not None:
        parity = int(parity)
    return StripeSpec(parity=parity, color=stripes.get("color", "#eff3f8"), alt_color=stripes.get("alt_color"))


def get_figure_size(cfg: Dict[str, Any]):
    fig = (cfg or {}).get("FIGURE") or {}
    width, height = fig.get("width"), fig.get("height")
    if width is None or height is None:
        return None
    return float(width), float(height)
