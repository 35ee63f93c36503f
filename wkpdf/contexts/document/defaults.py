"""
Default values for new documents.

Every Document starts from these switches; callers override or remove them
through the builder.
"""

from typing import Any, Dict

DEFAULT_MARGIN = "18mm"

DEFAULT_SWITCHES = {
    "encoding": "utf-8",
    "dpi": 300,
    "disable-javascript": True,
    "no-outline": True,
    "margin-top": DEFAULT_MARGIN,
    "margin-bottom": DEFAULT_MARGIN,
    "margin-left": DEFAULT_MARGIN,
    "margin-right": DEFAULT_MARGIN,
}

DEFAULT_DPI = 300
DEFAULT_PAGE_SIZE = "A4"
DEFAULT_ENCODING = "utf-8"

# Header/footer font used when font() is called without arguments
DEFAULT_FONT_NAME = "Arial"
DEFAULT_FONT_SIZE = 12


def get_default_switches() -> Dict[str, Any]:
    """Fresh copy of the default switch mapping."""
    return DEFAULT_SWITCHES.copy()
