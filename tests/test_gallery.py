import pytest

from forestkit.utils.config import load_config
from gallery.generate_all import generate_all_pages, main, write_index
from gallery.pages import PAGES, get_page
from gallery.style import PlotStyle


@pytest.fixture
def cfg(tmp_path):
    return load_config(tmp_path / "absent.yaml", use_env=False)


def test_every_page_has_a_narrative():
    slugs = [p.slug for p in PAGES]
    assert len(slugs) == len(set(slugs))
    for page in PAGES:
        assert page.title
        assert page.body


def test_unknown_page():
    with pytest.raises(KeyError):
        get_page("nope")


def test_truncation_page(tmp_path, cfg):
    page = get_page("truncation")
    out = tmp_path / "truncation.png"
    composed = page.build(None, out, PlotStyle(dpi=40), cfg)
    assert out.exists()
    female = [r for r in composed.rows if r.label.strip() == "Female"][0]
    glyph = [g for g in composed.glyphs[2] if g.y == female.index][0]
    assert glyph.arrow_high and glyph.upper == 1.5


def test_ratio_and_difference_page_marks_reference(tmp_path, cfg):
    composed = get_page("ratio_and_difference").build(None, tmp_path / "rd.png", PlotStyle(dpi=40), cfg)
    ref = [r for r in composed.rows if r.label.strip() == "Standard dose"][0]
    assert ref.cell("estimate") == "(ref)"
    assert ref.cell("rd") == "(ref)"
    low = [r for r in composed.rows if r.label.strip() == "Low dose"][0]
    assert low.cell("rd") == "-11.2 (-17.4 - -5.0)"


def test_generate_all_and_index(tmp_path, cfg):
    site = tmp_path / "site"
    rendered = generate_all_pages(None, site, PlotStyle(dpi=40), cfg)
    assert len(rendered) == len(PAGES)
    for _, image in rendered:
        assert image.exists()
    index = write_index(site, rendered).read_text(encoding="utf-8")
    assert "# Forest plot gallery" in index
    assert "![Intervals wider than the axis](figures/truncation.png)" in index


def test_cli_renders_selected_page(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["--output-dir", "out", "--page", "basic", "--figure-dpi", "40"]) == 0
    assert (tmp_path / "out" / "figures" / "basic.png").exists()
    assert (tmp_path / "out" / "index.md").exists()


def test_two_series_page_shows_both_estimates(tmp_path, cfg):
    composed = get_page("two_series").build(None, tmp_path / "two.png", PlotStyle(dpi=40), cfg)
    overall = composed.rows[0]
    assert overall.cell("estimate") == "0.82 (0.71 - 0.95)"
    assert overall.cell("estimate_pp") == "0.77 (0.65 - 0.91)"
    pp_texts = [c.text for c in composed.cells[2]]
    assert pp_texts[0] == "0.77 (0.65 - 0.91)"
