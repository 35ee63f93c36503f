"""Unit tests for the render event log and timestamp helpers."""

from datetime import datetime, timedelta

import pytest

from wkpdf.utils.event_logging import get_recent_events, log_render_event
from wkpdf.utils.timestamp import format_timestamp


@pytest.mark.unit
def test_disabled_without_env(tmp_path):
    """Test nothing is written when RENDER_EVENTS_FILE is unset."""
    log_render_event("render_completed", "test")

    assert get_recent_events() == []
    assert list(tmp_path.glob("*.log")) == []


@pytest.mark.unit
def test_events_appended_and_filtered(tmp_path, monkeypatch):
    """Test events are appended as JSON lines and read back most recent last."""
    events_file = tmp_path / "logs" / "events.log"
    monkeypatch.setenv("RENDER_EVENTS_FILE", str(events_file))

    for i in range(3):
        log_render_event("render_completed", "test", index=i)
    log_render_event("render_failed", "test", exit_code=1)

    assert len(events_file.read_text().splitlines()) == 4
    assert [e["index"] for e in get_recent_events(2, event_type="render_completed")] == [1, 2]
    assert get_recent_events(1)[0]["exit_code"] == 1


@pytest.mark.unit
def test_malformed_lines_skipped(tmp_path, monkeypatch):
    """Test a corrupt line does not hide the rest of the log."""
    events_file = tmp_path / "events.log"
    events_file.write_text('not json\n{"event_type": "render_completed"}\n')
    monkeypatch.setenv("RENDER_EVENTS_FILE", str(events_file))

    assert get_recent_events() == [{"event_type": "render_completed"}]


@pytest.mark.unit
def test_format_timestamp():
    """Test absolute and relative formatting, with passthrough on bad input."""
    assert format_timestamp("2025-11-13T18:45:40.572549") == "2025-11-13 18:45:40"
    assert format_timestamp("garbage") == "garbage"

    two_hours_ago = (datetime.now() - timedelta(hours=2, minutes=1)).isoformat()
    assert format_timestamp(two_hours_ago, relative=True) == "2h ago"
