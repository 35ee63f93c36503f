"""
wkhtmltopdf Document

Fluent builder around the rendering pipeline. A Document holds the HTML
source, the switch set and the header/footer replacements; render() runs
wkhtmltopdf once and caches the PDF until any of those change.

Example:
    pdf = (
        Document.from_string("<h1>Invoice</h1>")
        .page_size("Letter")
        .margins("10 15")
        .header().right("[page] / [topage]").line().end()
        .render()
    )
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from wkpdf.contexts.document.data_uri import make_data_uri
from wkpdf.contexts.document.defaults import (
    DEFAULT_DPI,
    DEFAULT_ENCODING,
    DEFAULT_PAGE_SIZE,
    get_default_switches,
)
from wkpdf.contexts.document.files import readable_file
from wkpdf.contexts.document.header_footer import HeaderOrFooter
from wkpdf.contexts.document.switches import SwitchSet
from wkpdf.contexts.document.temp_files import TempFile
from wkpdf.contexts.rendering.arguments import (
    STDIO_TOKEN,
    build_arguments,
    format_command,
)
from wkpdf.contexts.rendering.binary import default_binary, resolve_binary
from wkpdf.contexts.rendering.exceptions import (
    OutputLimitExceeded,
    ProcessSpawnFailure,
    RenderTimeout,
    SourceUnreadable,
)
from wkpdf.contexts.rendering.pipeline import (
    DEFAULT_MAX_OUTPUT_BYTES,
    DEFAULT_TIMEOUT_S,
    RenderResult,
    run_render,
)
from wkpdf.utils.event_logging import log_render_event

MARGIN_SIDES = ("top", "right", "bottom", "left")

MarginValue = Union[int, float, str, bool, None]


class Document:
    """
    A single HTML document to be converted to PDF.

    Attributes:
        switches: SwitchSet of wkhtmltopdf options (starts from DEFAULT_SWITCHES)
        binary_path: Explicit wkhtmltopdf path; None uses the process-wide default
        timeout: Seconds before a render is killed (None disables)
        max_output_bytes: Per-stream output cap (None disables)
        verbose: Log wkhtmltopdf stderr even on success
        last_result: RenderResult of the most recent pipeline run
    """

    def __init__(
        self,
        source: Union[str, bytes, Path, None] = None,
        binary_path: Union[str, Path, None] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_S,
        max_output_bytes: Optional[int] = DEFAULT_MAX_OUTPUT_BYTES,
        verbose: bool = False,
    ):
        """
        Create a document, optionally with a source.

        Args:
            source: HTML (bytes, or a str starting with "<") or the path of an
                HTML file
            binary_path: wkhtmltopdf path or command name
            timeout: Render deadline in seconds
            max_output_bytes: Per-stream output cap in bytes
            verbose: Log wkhtmltopdf stderr even on success

        Raises:
            SourceUnreadable: If source is a path that cannot be read
        """
        self._result: Optional[bytes] = None
        self.last_result: Optional[RenderResult] = None

        self.switches = SwitchSet(get_default_switches(), on_change=self._clear_result)
        self._replacements: Dict[str, str] = {}
        self._headers: Dict[Tuple[str, ...], HeaderOrFooter] = {}

        self._source_file: Optional[Path] = None
        self._source_data: Union[str, bytes, None] = None

        self.binary_path = binary_path
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self.verbose = verbose

        if isinstance(source, bytes) or (isinstance(source, str) and source.startswith("<")):
            self.set_source_string(source)
        elif isinstance(source, (str, Path)) and str(source):
            self.set_source_file(source)

    @classmethod
    def from_string(cls, html: Union[str, bytes], **kwargs) -> "Document":
        """Create a document rendered from an HTML string."""
        return cls(**kwargs).set_source_string(html)

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> "Document":
        """Create a document rendered from an HTML file."""
        return cls(**kwargs).set_source_file(path)

    def _clear_result(self) -> None:
        self._result = None

    # Source

    def set_source_string(self, html: Union[str, bytes]) -> "Document":
        """Replace the source with an HTML string, piped to wkhtmltopdf on stdin."""
        self._source_file = None
        self._source_data = html
        self._clear_result()
        return self

    def set_source_file(self, path: Union[str, Path]) -> "Document":
        """
        Replace the source with an HTML file.

        Raises:
            SourceUnreadable: If the file is missing or not readable
        """
        self._source_file = readable_file(path)
        self._source_data = None
        self._clear_result()
        return self

    @property
    def source(self) -> str:
        """Source token: "-" for stdin or the absolute path of the source file."""
        if self._source_file is not None:
            return str(self._source_file)
        if self._source_data is not None:
            return STDIO_TOKEN
        raise ValueError("Document has no source; use set_source_string() or set_source_file()")

    @property
    def payload(self) -> Optional[bytes]:
        """Bytes written to stdin, encoded with the document's encoding switch."""
        if self._source_file is not None or self._source_data is None:
            return None
        if isinstance(self._source_data, bytes):
            return self._source_data
        return self._source_data.encode(self.switches.get("encoding") or DEFAULT_ENCODING)

    # Switches

    def set(self, name: str, value: Any) -> "Document":
        """
        Set a switch. Use True/False for value-less switches, None to omit.

        Returns:
            The document, for chaining
        """
        self.switches.set(name, value)
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self.switches.get(name, default)

    def remove(self, name: str) -> "Document":
        self.switches.remove(name)
        return self

    def __getitem__(self, name: str) -> Any:
        return self.switches.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.switches.set(name, value)

    def __delitem__(self, name: str) -> None:
        self.switches.remove(name)

    def __contains__(self, name: object) -> bool:
        return name in self.switches

    def _toggle(self, positive: str, negative: str, include: bool) -> "Document":
        self.set(negative, not include)
        self.set(positive, bool(include))
        return self

    # Fluent helpers

    def margins(
        self,
        top: Union[MarginValue, Sequence[MarginValue]],
        right: MarginValue = None,
        bottom: MarginValue = None,
        left: MarginValue = None,
    ) -> "Document":
        """
        Set margins using CSS shorthand.

        Numbers (or numeric strings) are millimeters; other strings are passed
        through (e.g. "0.5in"); booleans leave that side untouched. A
        whitespace-separated string or a sequence is expanded like CSS.

        Examples:
            doc.margins(10)                 # 10mm all round
            doc.margins("10 20")            # 10mm top/bottom, 20mm left/right
            doc.margins(5, True, 5, True)   # only top and bottom
        """
        if isinstance(top, str) and len(top.split()) > 1:
            top = top.split()
        if isinstance(top, (list, tuple)):
            return self.margins(*top)

        if right is None:
            right = top
        if bottom is None:
            bottom = top
        if left is None:
            left = right

        for side, value in zip(MARGIN_SIDES, (top, right, bottom, left)):
            if isinstance(value, bool) or value is None:
                continue
            if isinstance(value, (int, float)):
                self.set(f"margin-{side}", f"{value}mm")
            elif _is_numeric(value):
                self.set(f"margin-{side}", f"{value}mm")
            else:
                self.set(f"margin-{side}", value)

        return self

    def outline(self, include: bool = True) -> "Document":
        return self._toggle("outline", "no-outline", include)

    def background(self, include: bool = True) -> "Document":
        return self._toggle("background", "no-background", include)

    def images(self, include: bool = True) -> "Document":
        return self._toggle("images", "no-images", include)

    def smart_shrinking(self, use: bool = True) -> "Document":
        return self._toggle("enable-smart-shrinking", "disable-smart-shrinking", use)

    def external_links(self, use: bool = True) -> "Document":
        return self._toggle("enable-external-links", "disable-external-links", use)

    def orientation(self, orientation: str = "Portrait") -> "Document":
        """Portrait when the value starts with "p" (any case), otherwise Landscape."""
        value = "Portrait" if orientation and orientation[0].lower() == "p" else "Landscape"
        return self.set("orientation", value)

    def page_size(self, page_size: str = DEFAULT_PAGE_SIZE) -> "Document":
        return self.set("page-size", page_size)

    def dpi(self, resolution: Optional[int] = None) -> "Document":
        """Change the DPI explicitly; a missing or zero value restores the default."""
        return self.set("dpi", int(resolution or 0) or DEFAULT_DPI)

    def title(self, title: Union[str, bool, None] = False) -> "Document":
        return self.set("title", title)

    def css_string(
        self, css: str, charset: str = "utf-8", use_temp_file: bool = False
    ) -> "Document":
        """
        Apply extra CSS given as a string.

        Args:
            css: CSS rules
            charset: Character set of the CSS (data URI only)
            use_temp_file: Pass a pooled temp file instead of a data URI (better
                for large stylesheets)
        """
        if use_temp_file:
            return self.set("user-style-sheet", TempFile.create(css, "css"))
        return self.set("user-style-sheet", make_data_uri(css, "text/css", charset))

    def css_file(self, path: Union[str, Path]) -> "Document":
        """Apply an extra CSS file. Raises SourceUnreadable if it cannot be read."""
        return self.set("user-style-sheet", readable_file(path))

    def replace(self, name: str, value: Optional[str]) -> "Document":
        """
        Add a header/footer replacement: "[name]" is replaced by value.

        Passing None removes the replacement; an empty string is kept.
        """
        if value is None:
            self._replacements.pop(name, None)
        else:
            self._replacements[name] = value
        self._clear_result()
        return self

    @property
    def replacements(self) -> Dict[str, str]:
        return dict(self._replacements)

    def _header_or_footer(self, *sides: str) -> HeaderOrFooter:
        if sides not in self._headers:
            self._headers[sides] = HeaderOrFooter(self, sides)
        return self._headers[sides]

    def header(self) -> HeaderOrFooter:
        """Methods to modify the page headers."""
        return self._header_or_footer("header")

    def footer(self) -> HeaderOrFooter:
        """Methods to modify the page footers."""
        return self._header_or_footer("footer")

    def header_and_footer(self) -> HeaderOrFooter:
        """Methods to modify headers and footers simultaneously."""
        return self._header_or_footer("header", "footer")

    # Rendering

    def resolve_binary(self) -> Path:
        if self.binary_path is None:
            return default_binary()
        return resolve_binary(self.binary_path)

    def arguments(self) -> List[str]:
        """Tokens following the binary path for the current configuration."""
        return build_arguments(self.switches.as_dict(), self._replacements, self.source)

    def command(self) -> List[str]:
        """Full command token list, binary included."""
        return [str(self.resolve_binary())] + self.arguments()

    def command_line(self) -> str:
        """Shell-escaped command line, suitable for reproducing a render by hand."""
        return format_command(self.command())

    @property
    def is_rendered(self) -> bool:
        return self._result is not None

    def render(self) -> bytes:
        """
        Get the document's PDF data, running wkhtmltopdf only if nothing is cached.

        Returns:
            PDF bytes

        Raises:
            ValueError: If no source has been set
            SourceUnreadable: If the source file disappeared since it was set
            ExecutableNotFound / ExecutableNotExecutable: Binary check failed
            ProcessSpawnFailure: wkhtmltopdf could not be started
            RenderFailure: wkhtmltopdf exited non-zero (stderr attached)
            RenderTimeout / OutputLimitExceeded: The child was killed
        """
        if self._result is not None:
            return self._result

        if self._source_file is not None and not self._source_file.is_file():
            raise SourceUnreadable(self._source_file)

        binary = self.resolve_binary()
        try:
            result = run_render(
                binary,
                self.arguments(),
                self.payload,
                timeout=self.timeout,
                max_output_bytes=self.max_output_bytes,
                verbose=self.verbose,
            )
        except (ProcessSpawnFailure, RenderTimeout, OutputLimitExceeded) as e:
            log_render_event(
                "render_aborted", "document", document_source=self.source, error=str(e)
            )
            raise

        self.last_result = result

        if not result.success:
            log_render_event(
                "render_failed",
                "document",
                document_source=self.source,
                exit_code=result.exit_code,
                elapsed_s=round(result.elapsed_s, 3),
            )
            result.raise_for_status()

        log_render_event(
            "render_completed",
            "document",
            document_source=self.source,
            pdf_bytes=len(result.pdf),
            elapsed_s=round(result.elapsed_s, 3),
        )
        self._result = result.pdf
        return self._result

    def __bytes__(self) -> bytes:
        return self.render()

    def save(self, path: Union[str, Path]) -> "Document":
        """Render (if needed) and write the PDF to path."""
        Path(path).write_bytes(self.render())
        return self


def _is_numeric(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True
