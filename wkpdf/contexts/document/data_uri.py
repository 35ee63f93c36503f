"""Data URI helpers for inlining CSS and header/footer HTML into switch values."""

import base64 as b64
from typing import Optional, Union
from urllib.parse import quote


def make_data_uri(
    contents: Union[str, bytes],
    mime_type: Optional[str] = "text/html",
    charset: Optional[str] = None,
    base64: bool = True,
) -> str:
    """
    Build a data URI.

    Args:
        contents: Payload; str is encoded as UTF-8 (or charset when given)
        mime_type: Content type, or None to omit it
        charset: Character encoding parameter, or None to omit it
        base64: Base64-encode the payload instead of percent-encoding it

    Returns:
        The complete data URI

    Example:
        >>> make_data_uri("body{}", "text/css", "utf-8")
        'data:text/css;charset=utf-8;base64,Ym9keXt9'
    """
    if isinstance(contents, str):
        contents = contents.encode(charset or "utf-8")

    payload = b64.b64encode(contents).decode("ascii") if base64 else quote(contents, safe="")

    return "data:{}{}{},{}".format(
        mime_type or "",
        f";charset={charset}" if charset else "",
        ";base64" if base64 else "",
        payload,
    )
