"""Builder for page header and footer switches."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from wkpdf.contexts.document.data_uri import make_data_uri
from wkpdf.contexts.document.defaults import DEFAULT_FONT_NAME, DEFAULT_FONT_SIZE
from wkpdf.contexts.document.files import readable_file
from wkpdf.contexts.document.temp_files import TempFile

if TYPE_CHECKING:
    from wkpdf.contexts.document.document import Document

# wkhtmltopdf appends "?page=..&topage=.." to header/footer URLs; an open
# comment keeps that suffix out of the rendered data-URI body
_DATA_URI_TRAILER = "<!--<![CDATA["


class HeaderOrFooter:
    """
    Sets header-*, footer-* (or both) switches on a parent Document.

    Obtain through Document.header(), Document.footer() or
    Document.header_and_footer(); end() returns to the document.
    """

    def __init__(self, parent: "Document", sides: Sequence[str]):
        self.parent = parent
        self.sides = tuple(sides)

    def _set(self, prop: str, value: Any) -> "HeaderOrFooter":
        for side in self.sides:
            self.parent.set(f"{side}-{prop}", value)
        return self

    def end(self) -> "Document":
        return self.parent

    def left(self, text: Optional[str] = None) -> "HeaderOrFooter":
        return self._set("left", text)

    def center(self, text: Optional[str] = None) -> "HeaderOrFooter":
        return self._set("center", text)

    def right(self, text: Optional[str] = None) -> "HeaderOrFooter":
        return self._set("right", text)

    def text(
        self,
        left: Optional[str] = None,
        center: Optional[str] = None,
        right: Optional[str] = None,
    ) -> "HeaderOrFooter":
        """Set all three text slots at once; None clears a slot."""
        return self.left(left).center(center).right(right)

    def line(self, include: bool = True) -> "HeaderOrFooter":
        return self._set("line", bool(include))

    def spacing(self, millimeters: float = 0) -> "HeaderOrFooter":
        return self._set("spacing", millimeters)

    def font(
        self, name: Optional[str] = DEFAULT_FONT_NAME, size: Optional[int] = DEFAULT_FONT_SIZE
    ) -> "HeaderOrFooter":
        """Set font name and size; a None argument leaves that property untouched."""
        if name is not None:
            self._set("font-name", name)
        if size is not None:
            self._set("font-size", size)
        return self

    def html_string(
        self, html: str, use_temp_file: bool = True, charset: Optional[str] = None
    ) -> "HeaderOrFooter":
        """
        Use an HTML string as the header/footer.

        Args:
            html: Header/footer markup
            use_temp_file: Write it to a pooled temp file (default) instead of a data URI
            charset: Charset parameter for the data URI
        """
        if use_temp_file:
            return self._set("html", TempFile.create(html, "html"))
        return self._set("html", make_data_uri(html + _DATA_URI_TRAILER, "text/html", charset))

    def html_file(self, path: Union[str, Path]) -> "HeaderOrFooter":
        return self._set("html", readable_file(path))
