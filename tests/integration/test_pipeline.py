"""
Integration tests for the render pipeline against harness child processes.
"""

import os
import selectors
import time

import pytest
from loguru import logger

from wkpdf.contexts.rendering import pipeline
from wkpdf.contexts.rendering.exceptions import (
    ExecutableNotExecutable,
    ExecutableNotFound,
    OutputLimitExceeded,
    ProcessSpawnFailure,
    RenderFailure,
    RenderTimeout,
)
from wkpdf.contexts.rendering.pipeline import (
    INITIAL_DELAY_S,
    MAX_DELAY_S,
    RenderState,
    run_render,
)


@pytest.mark.integration
def test_success_returns_stdout(pdf_harness):
    """Test exit code 0 maps to success carrying the stdout bytes."""
    result = run_render(pdf_harness, ["-", "-"], b"<p>hi</p>", timeout=30)

    assert result.success
    assert result.exit_code == 0
    assert result.pdf == bytes([0x25, 0x50, 0x44, 0x46])
    assert result.raise_for_status() is result


@pytest.mark.integration
def test_failure_carries_exit_code_and_stderr(failing_harness):
    """Test a non-zero exit maps to failure with the full stderr text."""
    result = run_render(failing_harness, ["-", "-"], b"<p>hi</p>", timeout=30)

    assert not result.success
    assert result.exit_code == 1
    assert result.stderr == "boom"
    assert result.pdf == b""

    with pytest.raises(RenderFailure) as exc_info:
        result.raise_for_status()
    assert exc_info.value.exit_code == 1
    assert "boom" in str(exc_info.value)


@pytest.mark.integration
def test_failure_discards_stdout(make_harness):
    """Test stdout written before a failing exit is not returned."""
    harness = make_harness(
        """
        import sys
        sys.stdout.write("partial")
        sys.stderr.write("broken")
        sys.exit(3)
        """
    )

    result = run_render(harness, ["-", "-"], timeout=30)

    assert result.exit_code == 3
    assert result.pdf == b""
    assert result.stderr == "broken"


@pytest.mark.integration
def test_state_sequence(pdf_harness):
    """Test the lifecycle visits every state in order."""
    result = run_render(pdf_harness, ["-", "-"], b"<p/>", timeout=30)

    assert result.states == [
        RenderState.NOT_STARTED,
        RenderState.SPAWNED,
        RenderState.STREAMS_DRAINING,
        RenderState.CHILD_EXITED,
        RenderState.SUCCEEDED,
    ]


@pytest.mark.integration
def test_large_stderr_does_not_deadlock(make_harness):
    """Test 1MB of stderr alongside a small stdout completes."""
    harness = make_harness(
        """
        import sys
        sys.stdin.buffer.read()
        for _ in range(1024):
            sys.stderr.write("x" * 1024)
        sys.stderr.flush()
        sys.stdout.write("0123456789")
        """
    )

    result = run_render(harness, ["-", "-"], b"<p/>", timeout=30)

    assert result.success
    assert result.pdf == b"0123456789"
    assert len(result.stderr) == 1024 * 1024


@pytest.mark.integration
def test_interleaved_large_streams(make_harness):
    """Test both streams filling their pipe buffers in alternation."""
    harness = make_harness(
        """
        import sys
        for _ in range(256):
            sys.stdout.buffer.write(b"o" * 4096)
            sys.stdout.flush()
            sys.stderr.buffer.write(b"e" * 4096)
            sys.stderr.flush()
        """
    )

    result = run_render(harness, ["-", "-"], timeout=30)

    assert result.success
    assert result.pdf == b"o" * 4096 * 256
    assert result.stderr == "e" * 4096 * 256


@pytest.mark.integration
def test_large_payload_reaches_child(make_harness):
    """Test payloads larger than a pipe buffer are fully delivered."""
    harness = make_harness(
        """
        import sys
        data = sys.stdin.buffer.read()
        sys.stdout.buffer.write(data[::-1])
        """
    )
    payload = os.urandom(2 * 1024 * 1024)

    result = run_render(harness, ["-", "-"], payload, timeout=30)

    assert result.success
    assert result.pdf == payload[::-1]


@pytest.mark.integration
@pytest.mark.parametrize("payload", [None, b""])
def test_stdin_closed_promptly_for_empty_payload(pdf_harness, payload):
    """Test a child reading stdin to EOF is not left waiting."""
    start = time.monotonic()

    result = run_render(pdf_harness, ["-", "-"], payload, timeout=10)

    assert result.success
    assert time.monotonic() - start < 5


@pytest.mark.integration
def test_child_ignoring_stdin(make_harness):
    """Test a child that exits without reading stdin does not break the write."""
    harness = make_harness(
        """
        import sys
        sys.stdout.write("done")
        """
    )

    warnings = []
    sink_id = logger.add(warnings.append, level="WARNING", format="{message}")
    try:
        result = run_render(harness, ["-", "-"], b"x" * (1024 * 1024), timeout=30)
    finally:
        logger.remove(sink_id)

    assert result.success
    assert result.pdf == b"done"
    assert any("closed stdin" in message for message in warnings)


@pytest.mark.integration
def test_arguments_passed_verbatim(make_harness):
    """Test tokens reach the child unmodified, shell metacharacters included."""
    harness = make_harness(
        """
        import sys
        sys.stdout.write("\\0".join(sys.argv[1:]))
        """
    )
    tokens = ["--title", """it's "quoted"; rm -rf /""", "-", "-"]

    result = run_render(harness, tokens, timeout=30)

    assert result.pdf.decode().split("\0") == tokens


@pytest.mark.integration
def test_timeout_kills_child(make_harness, tmp_path):
    """Test an overdue child is killed before RenderTimeout is raised."""
    pid_file = tmp_path / "pid"
    harness = make_harness(
        f"""
        import os
        import sys
        import time
        with open({str(pid_file)!r}, "w") as f:
            f.write(str(os.getpid()))
        sys.stderr.write("loading")
        sys.stderr.flush()
        time.sleep(60)
        """
    )

    start = time.monotonic()
    with pytest.raises(RenderTimeout) as exc_info:
        run_render(harness, ["-", "-"], timeout=1.0)

    assert time.monotonic() - start < 10
    assert exc_info.value.timeout == 1.0
    with pytest.raises(ProcessLookupError):
        os.kill(int(pid_file.read_text()), 0)


@pytest.mark.integration
def test_output_limit(make_harness):
    """Test runaway output is cut off."""
    harness = make_harness(
        """
        import sys
        while True:
            sys.stdout.buffer.write(b"x" * 65536)
        """
    )

    with pytest.raises(OutputLimitExceeded) as exc_info:
        run_render(harness, ["-", "-"], timeout=30, max_output_bytes=100_000)

    assert exc_info.value.stream == "stdout"
    assert exc_info.value.limit == 100_000


@pytest.mark.integration
def test_missing_binary_spawns_nothing(tmp_path):
    """Test binary checks run before any process is spawned."""
    with pytest.raises(ExecutableNotFound):
        run_render(tmp_path / "wkhtmltopdf", ["-", "-"])

    plain = tmp_path / "plain"
    plain.write_text("")
    plain.chmod(0o644)
    with pytest.raises(ExecutableNotExecutable):
        run_render(plain, ["-", "-"])


@pytest.mark.integration
def test_spawn_failure(tmp_path):
    """Test an exec failure surfaces as ProcessSpawnFailure."""
    broken = tmp_path / "broken"
    broken.write_text("#!/nonexistent/interpreter\n")
    broken.chmod(0o755)

    with pytest.raises(ProcessSpawnFailure) as exc_info:
        run_render(broken, ["-", "-"], timeout=10)

    assert isinstance(exc_info.value.original_error, OSError)
    assert exc_info.value.command[0] == str(broken)


@pytest.mark.integration
def test_idle_backoff_doubles_and_resets(make_harness, monkeypatch):
    """Test idle waits double from 10 ms to a 160 ms ceiling and reset once bytes arrive."""
    waits = []

    class RecordingSelector(selectors.DefaultSelector):
        def select(self, timeout=None):
            waits.append(timeout)
            return super().select(timeout)

    monkeypatch.setattr(selectors, "DefaultSelector", RecordingSelector)
    harness = make_harness(
        """
        import sys
        import time
        time.sleep(0.5)
        sys.stderr.write("loading")
        sys.stderr.flush()
        time.sleep(0.5)
        sys.stdout.buffer.write(b"%PDF")
        """
    )

    result = run_render(harness, ["-", "-"], timeout=30)

    assert result.success
    assert waits[0] == INITIAL_DELAY_S
    assert min(waits) == INITIAL_DELAY_S
    assert max(waits) == MAX_DELAY_S
    for previous, current in zip(waits, waits[1:]):
        assert current in (INITIAL_DELAY_S, min(previous * 2, MAX_DELAY_S))

    resets = [
        i for i, (previous, current) in enumerate(zip(waits, waits[1:]))
        if previous == MAX_DELAY_S and current == INITIAL_DELAY_S
    ]
    assert resets


@pytest.mark.integration
def test_deadline_passing_after_eof_still_reaps(pdf_harness, monkeypatch):
    """Test a child that already closed its streams is reaped, not reported as a timeout."""
    exchange = pipeline._exchange

    def slow_exchange(*args, **kwargs):
        buffers = exchange(*args, **kwargs)
        time.sleep(2.0)
        return buffers

    monkeypatch.setattr(pipeline, "_exchange", slow_exchange)

    result = run_render(pdf_harness, ["-", "-"], b"<p/>", timeout=2.0)

    assert result.success
    assert result.pdf == b"%PDF"
    assert result.states[-2:] == [RenderState.CHILD_EXITED, RenderState.SUCCEEDED]
