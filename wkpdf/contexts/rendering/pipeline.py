"""
wkhtmltopdf Process Render Pipeline

Runs one wkhtmltopdf child process per render:

    NOT_STARTED -> SPAWNED -> STREAMS_DRAINING -> CHILD_EXITED -> SUCCEEDED | FAILED

The HTML payload is fed to stdin while stdout (PDF bytes) and stderr
(diagnostics) are drained through a single selectors readiness loop, so a
full stderr pipe can never stall the stdout reader or the other way round.
Requires POSIX pipes (selectors cannot wait on Windows pipes).
"""

import os
import selectors
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from dotenv import load_dotenv

from wkpdf.contexts.rendering.arguments import format_command
from wkpdf.contexts.rendering.binary import verify_binary
from wkpdf.contexts.rendering.exceptions import (
    OutputLimitExceeded,
    ProcessSpawnFailure,
    RenderFailure,
    RenderTimeout,
)
from wkpdf.contexts.rendering.logger import (
    _log_debug,
    _log_error,
    _log_warning,
    log_render_result,
    log_render_start,
)

load_dotenv()

DEFAULT_TIMEOUT_S = float(os.getenv("WKPDF_TIMEOUT_S", "120"))
DEFAULT_MAX_OUTPUT_BYTES = int(os.getenv("WKPDF_MAX_OUTPUT_BYTES", str(256 * 1024 * 1024)))

# Idle backoff between poll cycles that yield no bytes
INITIAL_DELAY_S = 0.010
MAX_DELAY_S = 0.160

# Minimum wait for the child to exit once both streams hit EOF
REAP_GRACE_S = 0.1

READ_CHUNK_SIZE = 65536
WRITE_CHUNK_SIZE = 65536


class RenderState(Enum):
    """Lifecycle of a single render invocation."""

    NOT_STARTED = "not_started"
    SPAWNED = "spawned"
    STREAMS_DRAINING = "streams_draining"
    CHILD_EXITED = "child_exited"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RenderResult:
    """
    Result of one wkhtmltopdf run.

    Attributes:
        success: Whether the child exited with code 0
        pdf: Complete stdout payload (empty on failure)
        exit_code: Exit status of the child (negative if killed by a signal)
        stderr: Diagnostic text written by the child, decoded as UTF-8
        command: Token list that was executed
        elapsed_s: Wall-clock duration of the run
        states: Lifecycle states visited, in order
    """

    success: bool
    pdf: bytes = b""
    exit_code: Optional[int] = None
    stderr: str = ""
    command: List[str] = field(default_factory=list)
    elapsed_s: float = 0.0
    states: List[RenderState] = field(default_factory=list)

    def raise_for_status(self) -> "RenderResult":
        """Raise RenderFailure for a failed run, otherwise return self."""
        if not self.success:
            raise RenderFailure(self.exit_code, self.stderr, self.command)
        return self


def _advance(states: List[RenderState], state: RenderState) -> None:
    _log_debug(f"State: {states[-1].name} -> {state.name}")
    states.append(state)


def _close_stdin(proc: subprocess.Popen) -> None:
    try:
        proc.stdin.close()
    except BrokenPipeError:
        # Child stopped reading; EOF is implied
        pass


def _kill(proc: subprocess.Popen) -> None:
    """Forcibly terminate the child and release its pipes."""
    if proc.poll() is None:
        proc.kill()
    proc.wait()
    _close_stdin(proc)
    for stream in (proc.stdout, proc.stderr):
        if stream is not None:
            stream.close()


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return deadline - time.monotonic()


def _exchange(
    proc: subprocess.Popen,
    payload: bytes,
    deadline: Optional[float],
    timeout: Optional[float],
    max_output_bytes: Optional[int],
    states: List[RenderState],
) -> Dict[str, bytearray]:
    """
    Feed stdin and drain stdout/stderr until both streams reach EOF.

    Returns:
        {"stdout": bytearray, "stderr": bytearray}
    """
    buffers = {"stdout": bytearray(), "stderr": bytearray()}
    view = memoryview(payload)
    written = 0

    with selectors.DefaultSelector() as selector:
        selector.register(proc.stdout, selectors.EVENT_READ, "stdout")
        selector.register(proc.stderr, selectors.EVENT_READ, "stderr")

        if view:
            os.set_blocking(proc.stdin.fileno(), False)
            selector.register(proc.stdin, selectors.EVENT_WRITE, "stdin")
        else:
            _close_stdin(proc)
            _advance(states, RenderState.STREAMS_DRAINING)

        delay = INITIAL_DELAY_S

        while selector.get_map():
            remaining = _remaining(deadline)
            if remaining is not None and remaining <= 0:
                raise RenderTimeout(timeout, buffers["stderr"].decode("utf-8", errors="replace"))

            wait = delay if remaining is None else min(delay, remaining)
            got_bytes = False

            for key, _ in selector.select(wait):
                if key.data == "stdin":
                    try:
                        written += os.write(
                            key.fd, view[written : written + WRITE_CHUNK_SIZE]
                        )
                    except BlockingIOError:
                        continue
                    except BrokenPipeError:
                        # Child closed stdin early; it will report its own error
                        _log_warning(
                            f"wkhtmltopdf closed stdin after {written} of {len(view)} bytes"
                        )
                        written = len(view)

                    if written >= len(view):
                        selector.unregister(key.fileobj)
                        _close_stdin(proc)
                        _advance(states, RenderState.STREAMS_DRAINING)
                    continue

                chunk = os.read(key.fd, READ_CHUNK_SIZE)
                if not chunk:
                    selector.unregister(key.fileobj)
                    continue

                got_bytes = True
                buffer = buffers[key.data]
                buffer.extend(chunk)
                if max_output_bytes is not None and len(buffer) > max_output_bytes:
                    raise OutputLimitExceeded(key.data, max_output_bytes)

            delay = INITIAL_DELAY_S if got_bytes else min(delay * 2, MAX_DELAY_S)

    proc.stdout.close()
    proc.stderr.close()
    return buffers


def run_render(
    binary: Union[str, Path],
    arguments: Sequence[str],
    payload: Optional[bytes] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_S,
    max_output_bytes: Optional[int] = DEFAULT_MAX_OUTPUT_BYTES,
    verbose: bool = False,
) -> RenderResult:
    """
    Execute wkhtmltopdf once and capture its output.

    A non-zero exit is not raised here: it comes back as a failed
    RenderResult carrying the exit code and full stderr text. Use
    RenderResult.raise_for_status() to turn it into RenderFailure.

    Args:
        binary: Path to the wkhtmltopdf executable
        arguments: Tokens following the binary (see arguments.build_arguments)
        payload: HTML bytes for stdin; None or empty closes stdin immediately
        timeout: Seconds before the child is killed (None disables)
        max_output_bytes: Per-stream byte cap before the child is killed (None disables)
        verbose: Log stderr even for successful runs

    Returns:
        RenderResult with success status and captured output

    Raises:
        ExecutableNotFound / ExecutableNotExecutable: Binary check failed (nothing spawned)
        ProcessSpawnFailure: The OS could not start the child
        RenderTimeout: Deadline passed; the child has been killed
        OutputLimitExceeded: Output cap hit; the child has been killed
    """
    binary = verify_binary(binary)
    command = [str(binary)] + [str(token) for token in arguments]
    payload = payload or b""
    states = [RenderState.NOT_STARTED]

    log_render_start(format_command(command), len(payload))

    start_time = time.monotonic()
    deadline = None if timeout is None else start_time + timeout

    try:
        proc = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        _log_error(f"Could not start {binary}: {e}")
        raise ProcessSpawnFailure(command, e) from e

    _advance(states, RenderState.SPAWNED)

    try:
        buffers = _exchange(proc, payload, deadline, timeout, max_output_bytes, states)
        try:
            remaining = _remaining(deadline)
            if remaining is not None:
                remaining = max(remaining, REAP_GRACE_S)
            exit_code = proc.wait(timeout=remaining)
        except subprocess.TimeoutExpired as e:
            raise RenderTimeout(timeout, buffers["stderr"].decode("utf-8", errors="replace")) from e
    except (RenderTimeout, OutputLimitExceeded) as e:
        _kill(proc)
        _log_error(str(e))
        raise
    except BaseException:
        _kill(proc)
        raise

    _advance(states, RenderState.CHILD_EXITED)

    stderr = buffers["stderr"].decode("utf-8", errors="replace")
    success = exit_code == 0
    _advance(states, RenderState.SUCCEEDED if success else RenderState.FAILED)

    result = RenderResult(
        success=success,
        pdf=bytes(buffers["stdout"]) if success else b"",
        exit_code=exit_code,
        stderr=stderr,
        command=command,
        elapsed_s=time.monotonic() - start_time,
        states=states,
    )

    log_render_result(result, verbose=verbose)
    return result
