"""
Shared utilities for wkpdf.

Common functionality used across contexts:
- Logger setup
- Render event log
- Timestamps
- PDF inspection
"""

from wkpdf.utils.timestamp import format_timestamp, now, now_exact

__all__ = ["format_timestamp", "now", "now_exact"]
