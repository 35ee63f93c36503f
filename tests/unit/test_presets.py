"""Unit tests for switch presets."""

import pytest

from wkpdf.contexts.document import Document, apply_presets, load_presets


@pytest.mark.unit
def test_load_presets_flattens_categories():
    """Test category.name becomes category_name."""
    presets = load_presets()

    assert presets["page_letter_landscape"] == {"page-size": "Letter", "orientation": "Landscape"}
    assert "margins_narrow" in presets
    assert "quality_draft" in presets


@pytest.mark.unit
def test_later_presets_override_earlier():
    """Test presets apply in order."""
    doc = Document.from_string("<p/>")

    apply_presets(doc, ["margins_wide", "margins_narrow", "page_a4_landscape"])

    assert doc.get("margin-top") == "10mm"
    assert doc.get("orientation") == "Landscape"


@pytest.mark.unit
def test_unknown_preset():
    """Test unknown names list the available presets."""
    with pytest.raises(ValueError, match="Available presets"):
        apply_presets(Document(), ["spacing_tight"])


@pytest.mark.unit
def test_custom_presets_file(tmp_path):
    """Test presets load from an explicit YAML file."""
    config = tmp_path / "presets.yaml"
    config.write_text("house:\n  style:\n    grayscale: true\n    dpi: 150\n")

    doc = apply_presets(Document.from_string("<p/>"), ["house_style"], config_path=config)

    assert "--grayscale" in doc.arguments()
    assert doc.get("dpi") == 150
