"""Configuration-time checks for files handed to wkhtmltopdf."""

import os
from pathlib import Path
from typing import Union

from wkpdf.contexts.rendering.exceptions import SourceUnreadable


def readable_file(path: Union[str, Path]) -> Path:
    """
    Verify path is an existing, readable file and return it as an absolute path.

    Raises:
        SourceUnreadable: If the file is missing or lacks read permission
    """
    path = Path(path)
    if not path.is_file():
        raise SourceUnreadable(path, "not found")
    if not os.access(path, os.R_OK):
        raise SourceUnreadable(path, "not readable")
    return path.resolve()
