"""
Shared fixtures: harness executables that stand in for wkhtmltopdf.

Each harness is a small Python script with a shebang pointing at the running
interpreter, so tests exercise the real subprocess path without needing
wkhtmltopdf installed.
"""

import stat
import sys
import textwrap

import pytest

from wkpdf.contexts.document import temp_files
from wkpdf.contexts.rendering.binary import default_binary

# Reads stdin to EOF, then writes a minimal PDF marker
PDF_HARNESS = """
import sys
sys.stdin.buffer.read()
sys.stdout.buffer.write(b"%PDF")
"""

# Echoes argv and stdin back as JSON; counts invocations when HARNESS_COUNTER is set
ECHO_HARNESS = """
import json
import os
import sys

data = sys.stdin.buffer.read()
counter = os.environ.get("HARNESS_COUNTER")
if counter:
    with open(counter, "a") as f:
        f.write("x")
sys.stdout.write(json.dumps({"args": sys.argv[1:], "stdin": data.decode("utf-8")}))
"""

FAILING_HARNESS = """
import sys
sys.stdin.buffer.read()
sys.stderr.write("boom")
sys.exit(1)
"""


@pytest.fixture
def make_harness(tmp_path):
    """Factory writing an executable Python script and returning its path."""

    def _make(body: str, name: str = "fake-wkhtmltopdf"):
        path = tmp_path / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def pdf_harness(make_harness):
    return make_harness(PDF_HARNESS, "pdf-harness")


@pytest.fixture
def echo_harness(make_harness):
    return make_harness(ECHO_HARNESS, "echo-harness")


@pytest.fixture
def failing_harness(make_harness):
    return make_harness(FAILING_HARNESS, "failing-harness")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep process-wide state (binary cache, temp dir, event log) per test."""
    monkeypatch.delenv("RENDER_EVENTS_FILE", raising=False)
    monkeypatch.setattr(temp_files, "_temp_dir", tmp_path / "pool")
    (tmp_path / "pool").mkdir()
    default_binary.cache_clear()
    yield
    temp_files.TempFile.cleanup_all()
    default_binary.cache_clear()
