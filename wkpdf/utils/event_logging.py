"""
Render event logging (JSON Lines).

Appends one JSON object per render to RENDER_EVENTS_FILE so renders can be
audited after the fact. Logging is skipped when the variable is unset.

For detailed per-session logging, use wkpdf.utils.logger instead.

Usage:
    from wkpdf.utils.event_logging import log_render_event

    log_render_event(
        event_type="render_completed",
        source="document",
        exit_code=0,
        pdf_bytes=48213,
    )
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from wkpdf.utils.timestamp import now_exact

load_dotenv()


def get_events_file() -> Optional[Path]:
    """Configured event log path, or None when event logging is disabled."""
    value = os.getenv("RENDER_EVENTS_FILE")
    return Path(value) if value else None


def log_render_event(event_type: str, source: str, **extra_fields) -> None:
    """
    Append an event to the render event log.

    Args:
        event_type: Type of event (e.g., "render_completed", "render_failed")
        source: Event source (e.g., "document", "cli")
        **extra_fields: Additional event-specific fields (must be JSON serializable)
    """
    events_file = get_events_file()
    if events_file is None:
        return

    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(n: int = 10, event_type: Optional[str] = None) -> List[dict]:
    """
    Get the last n events from the render log, optionally filtered by type.

    Returns:
        List of event dicts (most recent last)
    """
    events_file = get_events_file()
    if events_file is None or not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:]
