"""
Resolution of the wkhtmltopdf executable.

The binary is configured explicitly (argument or WKHTMLTOPDF_BINARY env var)
and verified before any process is spawned. default_binary() resolves it once
per process; callers inject the result into Document / run_render.
"""

import os
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from wkpdf.contexts.rendering.exceptions import ExecutableNotExecutable, ExecutableNotFound

load_dotenv()

DEFAULT_BINARY_NAME = "wkhtmltopdf"


def verify_binary(path: Union[str, Path]) -> Path:
    """
    Check that path names an existing, executable file.

    Raises:
        ExecutableNotFound: If nothing exists at path (or it is a directory)
        ExecutableNotExecutable: If the file lacks execute permission
    """
    path = Path(path)
    if not path.is_file():
        raise ExecutableNotFound(str(path))
    if not os.access(path, os.X_OK):
        raise ExecutableNotExecutable(path)
    return path


def resolve_binary(path: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve the wkhtmltopdf binary to an absolute, verified path.

    Args:
        path: Explicit path or command name. Defaults to the WKHTMLTOPDF_BINARY
            env variable, then to "wkhtmltopdf". Bare command names are looked
            up on PATH.

    Returns:
        Absolute path to the executable

    Raises:
        ExecutableNotFound: If the binary cannot be located
        ExecutableNotExecutable: If the located file is not executable
    """
    if path is None:
        path = os.getenv("WKHTMLTOPDF_BINARY") or DEFAULT_BINARY_NAME

    candidate = str(path)
    if os.sep not in candidate and not Path(candidate).is_file():
        found = shutil.which(candidate)
        if found is None:
            raise ExecutableNotFound(candidate)
        candidate = found

    return verify_binary(Path(candidate).resolve())


@lru_cache(maxsize=1)
def default_binary() -> Path:
    """Process-wide binary resolution, performed once and then reused."""
    return resolve_binary()
