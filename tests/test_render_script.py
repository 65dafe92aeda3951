import importlib.util
import json
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def render_script():
    spec = importlib.util.spec_from_file_location("render_forest", ROOT / "scripts" / "render_forest.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_script_honours_figure_config(tmp_path, render_script, monkeypatch):
    monkeypatch.delenv("FORESTKIT_FIGURE_FORMAT", raising=False)
    config = tmp_path / "config.yaml"
    config.write_text("FIGURE:\n  dpi: 40\n  width: 6\n  height: 2\n  format: svg\n", encoding="utf-8")
    out = tmp_path / "out" / "truncation.svg"
    argv = [
        "--input", str(ROOT / "gallery" / "data" / "truncation.csv"),
        "--output", str(out),
        "--config", str(config),
        "--axis", "0.5", "1.5",
    ]
    assert render_script.main(argv) == 0
    assert out.read_text(encoding="utf-8").lstrip().startswith("<?xml")
    meta = json.loads((tmp_path / "out" / "truncation.svg.metadata.json").read_text(encoding="utf-8"))
    assert meta["source"].endswith("truncation.csv")
