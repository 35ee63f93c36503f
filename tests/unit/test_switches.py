"""Unit tests for the SwitchSet store."""

import pytest

from wkpdf.contexts.document.switches import SwitchSet


@pytest.mark.unit
def test_aliases_share_one_slot():
    """Test any spelling of a name resolves to the same slot, last write wins."""
    switches = SwitchSet()
    switches.set("pageSize", "A4")
    switches.set("Page-size", "Letter")
    switches["page-size"] = "A3"

    assert switches.as_dict() == {"page-size": "A3"}
    assert switches.get("PageSize") == "A3"


@pytest.mark.unit
def test_initial_values_are_normalized():
    """Test constructor values go through normalization."""
    switches = SwitchSet({"marginTop": "10mm"})

    assert list(switches) == ["margin-top"]


@pytest.mark.unit
def test_every_mutation_notifies():
    """Test set/remove/update each call on_change."""
    calls = []
    switches = SwitchSet(on_change=lambda: calls.append(1))

    switches.set("dpi", 96)
    switches.update({"grayscale": True})
    del switches["dpi"]

    assert len(calls) == 3


@pytest.mark.unit
def test_removing_missing_switch_is_silent():
    """Test removing an unknown switch neither fails nor notifies."""
    calls = []
    switches = SwitchSet(on_change=lambda: calls.append(1))

    switches.remove("never-set")

    assert calls == []


@pytest.mark.unit
def test_contains_ignores_none_values():
    """Test membership means 'set to something other than None'."""
    switches = SwitchSet({"title": None, "grayscale": False})

    assert "title" not in switches
    assert "grayscale" in switches
    assert "Grayscale" in switches
    assert len(switches) == 2


@pytest.mark.unit
def test_get_default():
    """Test get falls back to the default for unknown names."""
    assert SwitchSet().get("dpi", 72) == 72
    assert SwitchSet()["dpi"] is None
