"""
Document Context

Responsibilities:
- Holds the HTML source (string or file) of a single document
- Manages wkhtmltopdf switches with normalized names
- Provides fluent helpers for margins, page setup, headers/footers and CSS
- Caches the rendered PDF and drops it whenever the configuration changes

Owns: Switch bookkeeping, source handling, temp files, data URIs, presets
Never: Spawns processes directly (delegates to the rendering context)
"""

from wkpdf.contexts.document.config_resolver import apply_presets, load_presets
from wkpdf.contexts.document.data_uri import make_data_uri
from wkpdf.contexts.document.document import Document
from wkpdf.contexts.document.header_footer import HeaderOrFooter
from wkpdf.contexts.document.switches import SwitchSet
from wkpdf.contexts.document.temp_files import TempFile

__all__ = [
    # Builder
    "Document",
    "HeaderOrFooter",
    "SwitchSet",
    # Helpers
    "make_data_uri",
    "TempFile",
    # Presets
    "apply_presets",
    "load_presets",
]
