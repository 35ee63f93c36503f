"""Custom exceptions for the rendering context."""

from pathlib import Path
from typing import List, Optional


class WKPDFError(Exception):
    """Base class for every error raised by wkpdf."""


class ExecutableNotFound(WKPDFError):
    """
    Exception raised when the wkhtmltopdf binary cannot be located.

    Attributes:
        path: The path or command name that was looked up
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"wkhtmltopdf binary not found: {path}")


class ExecutableNotExecutable(WKPDFError):
    """
    Exception raised when the binary exists but lacks execute permission.

    Attributes:
        path: Resolved path of the binary
    """

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"File '{path}' is not executable.")


class SourceUnreadable(WKPDFError):
    """
    Exception raised when an input file (HTML source, CSS, header) cannot be read.

    Attributes:
        path: Path that failed the check
        reason: Short description ("not found", "not readable")
    """

    def __init__(self, path: Path, reason: str = "not found"):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read file '{path}': {reason}")


class ProcessSpawnFailure(WKPDFError):
    """
    Exception raised when the OS refuses to create the child process.

    Attributes:
        command: Token list that was being executed
        original_error: The OSError raised by subprocess
    """

    def __init__(self, command: List[str], original_error: Optional[OSError] = None):
        self.command = command
        self.original_error = original_error

        parts = [f"Failed to start {command[0] if command else 'wkhtmltopdf'}"]
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class RenderFailure(WKPDFError):
    """
    Exception raised when wkhtmltopdf runs but exits with a non-zero code.

    The complete stderr text is kept on the exception; it is the only
    diagnostic signal for malformed HTML or unsupported switches.

    Attributes:
        exit_code: Exit status of the child process
        stderr: Everything the child wrote to stderr
        command: Token list that was executed (optional)
    """

    def __init__(self, exit_code: int, stderr: str, command: Optional[List[str]] = None):
        self.exit_code = exit_code
        self.stderr = stderr
        self.command = command

        parts = [f"wkhtmltopdf exited with code {exit_code}"]
        if stderr:
            parts.append(f"\nstderr:\n{stderr}")

        super().__init__("\n".join(parts))


class RenderTimeout(WKPDFError):
    """
    Exception raised when a render exceeds its deadline.

    The child process has already been killed and reaped when this is raised.

    Attributes:
        timeout: Deadline in seconds
        stderr: Diagnostic text captured before the deadline
    """

    def __init__(self, timeout: float, stderr: str = ""):
        self.timeout = timeout
        self.stderr = stderr
        super().__init__(f"wkhtmltopdf did not finish within {timeout:g}s and was killed")


class OutputLimitExceeded(WKPDFError):
    """
    Exception raised when the child writes more than the allowed number of bytes.

    Attributes:
        stream: "stdout" or "stderr"
        limit: Byte limit that was exceeded
    """

    def __init__(self, stream: str, limit: int):
        self.stream = stream
        self.limit = limit
        super().__init__(f"wkhtmltopdf {stream} exceeded {limit} bytes and was killed")
