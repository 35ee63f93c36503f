"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from wkpdf.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, verbose: bool = False) -> Path:
    """
    Setup logger for rendering context.

    Args:
        log_dir: Directory for this rendering session
        verbose: Show DEBUG messages on the console as well

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"wkhtmltopdf": os.getenv("WKHTMLTOPDF_BINARY", "wkhtmltopdf")},
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(command_line: str, payload_size: int) -> None:
    """Log start of a wkhtmltopdf run."""
    _log_info("Starting render")
    _log_debug(f"  Command: {command_line}")
    _log_debug(f"  Payload: {payload_size} bytes on stdin")


def log_render_result(
    result,  # RenderResult
    verbose: bool = False,
) -> None:
    """
    Log render result with diagnostics.

    Args:
        result: RenderResult from run_render()
        verbose: Dump stderr even on success (default: False)
    """
    if result.success:
        _log_success(f"Render succeeded: {len(result.pdf)} bytes ({result.elapsed_s:.2f}s)")
    else:
        _log_error(f"Render failed with exit code {result.exit_code} ({result.elapsed_s:.2f}s)")
        last_line = result.stderr.strip().splitlines()[-1:] if result.stderr else []
        for line in last_line:
            _log_error(f"  {line}")

    # Raw output keeps multi-line wkhtmltopdf progress text readable
    if (verbose or not result.success) and result.stderr:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nWKHTMLTOPDF STDERR:\n{'=' * 80}\n{result.stderr}\n"
        )
