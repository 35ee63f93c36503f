"""
Content-addressed temp-file pool.

Large CSS or header/footer HTML is handed to wkhtmltopdf as a file path
instead of a data URI. Files are named after the SHA-1 of their contents, so
identical content shares one file, and are only written when their path is
first requested.
"""

import atexit
import hashlib
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import load_dotenv

load_dotenv()

_pool: Dict[str, "TempFile"] = {}
_pool_lock = threading.Lock()
_temp_dir: Optional[Path] = None


def get_temp_dir() -> Path:
    """
    Directory used for pooled files, resolved once per process.

    Uses WKPDF_TEMP_DIR when set, otherwise the system temp directory.

    Raises:
        OSError: If the chosen directory is not writable
    """
    global _temp_dir
    with _pool_lock:
        if _temp_dir is None:
            candidate = Path(os.getenv("WKPDF_TEMP_DIR") or tempfile.gettempdir()).resolve()
            candidate.mkdir(parents=True, exist_ok=True)
            if not os.access(candidate, os.W_OK):
                raise OSError(f"Unable to write to temp dir: {candidate}")
            _temp_dir = candidate
        return _temp_dir


class TempFile:
    """A pooled temporary file, usable anywhere a path is accepted."""

    def __init__(self, contents: bytes, file_name: str):
        self.contents = contents
        self.file_name = file_name
        self._path: Optional[Path] = None

    @classmethod
    def create(cls, contents: Union[str, bytes], extension: str = "html") -> "TempFile":
        """Return the pooled TempFile for these contents, creating it if needed."""
        if isinstance(contents, str):
            contents = contents.encode("utf-8")

        file_name = f"{hashlib.sha1(contents).hexdigest()}.{extension}"

        with _pool_lock:
            if file_name not in _pool:
                _pool[file_name] = cls(contents, file_name)
            return _pool[file_name]

    def path(self) -> Path:
        """Write the file on first use and return its absolute path."""
        if self._path is None or not self._path.exists():
            path = get_temp_dir() / self.file_name
            path.write_bytes(self.contents)
            self._path = path
        return self._path

    def cleanup(self) -> None:
        if self._path is not None:
            self._path.unlink(missing_ok=True)
            self._path = None

    @staticmethod
    def cleanup_all() -> None:
        """Remove every pooled file and empty the pool."""
        with _pool_lock:
            entries = list(_pool.values())
            _pool.clear()
        for entry in entries:
            entry.cleanup()

    def __fspath__(self) -> str:
        return str(self.path())

    def __str__(self) -> str:
        return str(self.path())

    def __repr__(self) -> str:
        return f"TempFile({self.file_name!r})"


atexit.register(TempFile.cleanup_all)
