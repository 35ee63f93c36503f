"""
Rendering Context

Responsibilities:
- Resolves and verifies the wkhtmltopdf binary
- Serializes switches and replacements into a command line
- Runs wkhtmltopdf, feeding stdin and draining stdout/stderr concurrently
- Maps the exit status to a RenderResult or a typed error

Owns: Command-line construction, process lifecycle, render diagnostics
Never: Decides which switches a document uses
"""

from wkpdf.contexts.rendering.arguments import (
    build_arguments,
    build_command,
    escape_value,
    format_command,
    normalize_switch_name,
)
from wkpdf.contexts.rendering.binary import default_binary, resolve_binary
from wkpdf.contexts.rendering.exceptions import (
    ExecutableNotExecutable,
    ExecutableNotFound,
    OutputLimitExceeded,
    ProcessSpawnFailure,
    RenderFailure,
    RenderTimeout,
    SourceUnreadable,
    WKPDFError,
)
from wkpdf.contexts.rendering.pipeline import RenderResult, RenderState, run_render

__all__ = [
    # Command-line construction
    "normalize_switch_name",
    "build_arguments",
    "build_command",
    "escape_value",
    "format_command",
    # Binary resolution
    "resolve_binary",
    "default_binary",
    # Process pipeline
    "run_render",
    "RenderResult",
    "RenderState",
    # Errors
    "WKPDFError",
    "ExecutableNotFound",
    "ExecutableNotExecutable",
    "SourceUnreadable",
    "ProcessSpawnFailure",
    "RenderFailure",
    "RenderTimeout",
    "OutputLimitExceeded",
]
