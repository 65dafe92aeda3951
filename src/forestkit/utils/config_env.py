"""Environment-variable overrides for the YAML configuration.

`FORESTKIT_FIGURE_DPI=150` sets `cfg["FIGURE"]["dpi"] = 150`; nested keys are
matched against existing top-level sections first, values are parsed into
bool/int/float/JSON where possible.
"""
from __future__ import annotations

import json
import os
import re

PREFIX = "FORESTKIT_"


def _sanitize_key(k: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in k).upper()


def _parse_env_value(v: str):
    if v is None:
        return None
    if not isinstance(v, str):
        return v
    s = v.strip()
    if (s.startswith("[") and s.endswith("]")) or (s.startswith("{") and s.endswith("}")):
        try:
            return json.loads(s)
        except ValueError:
            pass
    low = s.lower()
    if low in {"true", "yes", "y"}:
        return True
    if low in {"false", "no", "n"}:
        return False
    if low in {"none", "null"}:
        return None
    try:
        if "." in s:
            return float(s)
        return int(s)
    except ValueError:
        pass
    # plain strings keep their whitespace (e.g. FORMAT indent)
    return v


def override_config_from_env(cfg: dict, prefix: str = PREFIX, environ=None) -> dict:
    if not isinstance(cfg, dict):
        return cfg
    environ = os.environ if environ is None else environ
    cfg_top_keys = {_sanitize_key(k): k for k in cfg.keys() if isinstance(k, str)}
    pat = re.compile(rf"^{re.escape(prefix)}(?P<rest>.+)$")
    for k, v in environ.items():
        m = pat.match(k)
        if not m:
            continue
        rest_upper = m.group("rest").upper()
        matched = None
        for top in sorted(cfg_top_keys.keys(), key=lambda x: -len(x)):
            if rest_upper == top or rest_upper.startswith(top + "_"):
                matched = top
                break
        if matched is None:
            cfg[rest_upper] = _parse_env_value(v)
            continue
        top_key = cfg_top_keys[matched]
        tail = rest_upper[len(matched):].lstrip("_")
        if not tail or not isinstance(cfg.get(top_key), dict):
            cfg[top_key] = _parse_env_value(v)
            continue
        section = cfg[top_key]
        # nested keys may themselves contain underscores (e.g. RATIO_DECIMALS)
        existing = {_sanitize_key(sk): sk for sk in section.keys() if isinstance(sk, str)}
        section[existing.get(tail, tail.lower())] = _parse_env_value(v)
    return cfg
