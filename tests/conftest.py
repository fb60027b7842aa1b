"""Shared fixtures: a fake FreeLing share directory and fake analyzer binaries."""

import json
import sys
from pathlib import Path

import pytest

from freeling_analyzer.analysis import AnalyzerOptions

# Copies stdin to stdout line by line and records each invocation.
ECHO_ANALYZER = """
import json
import os
import sys

with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), "calls.jsonl"), "a") as log:
    log.write(json.dumps({"argv": sys.argv[1:], "share": os.environ.get("FREELINGSHARE")}) + "\\n")

for line in sys.stdin.buffer:
    sys.stdout.buffer.write(line)
    sys.stdout.buffer.flush()
"""

# Echoes like ECHO_ANALYZER but floods stderr with warnings for every line.
CHATTY_ANALYZER = """
import sys

for line in sys.stdin.buffer:
    for i in range(50):
        sys.stderr.write("warning: unknown word in dictionary lookup, number %d\\n" % i)
    sys.stdout.buffer.write(line)
    sys.stdout.buffer.flush()
"""

# Dies before reading any input, like the real binary does on a bad config.
FAILING_ANALYZER = """
import sys

sys.stderr.write("analyzer: cannot open configuration file\\n")
sys.stderr.flush()
sys.exit(3)
"""


def _install_fake_binary(directory: Path, name: str, source: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    script = directory / f"{name}.py"
    script.write_text(source, encoding="utf-8")
    binary = directory / name
    binary.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n', encoding="utf-8")
    binary.chmod(0o755)
    return binary


@pytest.fixture
def share_dir(tmp_path):
    share = tmp_path / "share"
    (share / "config").mkdir(parents=True)
    (share / "config" / "es.cfg").write_text("# fake config\n", encoding="utf-8")
    return share


@pytest.fixture
def echo_analyzer(tmp_path):
    return _install_fake_binary(tmp_path / "bin", "analyzer", ECHO_ANALYZER)


@pytest.fixture
def failing_analyzer(tmp_path):
    return _install_fake_binary(tmp_path / "bin-failing", "analyzer", FAILING_ANALYZER)


@pytest.fixture
def chatty_analyzer(tmp_path):
    return _install_fake_binary(tmp_path / "bin-chatty", "analyzer", CHATTY_ANALYZER)


@pytest.fixture
def options(share_dir, echo_analyzer):
    return AnalyzerOptions(share_path=share_dir, analyzer_path=echo_analyzer)


@pytest.fixture
def failing_options(share_dir, failing_analyzer):
    return AnalyzerOptions(share_path=share_dir, analyzer_path=failing_analyzer)


@pytest.fixture
def chatty_options(share_dir, chatty_analyzer):
    return AnalyzerOptions(share_path=share_dir, analyzer_path=chatty_analyzer)


@pytest.fixture
def recorded_calls(echo_analyzer):
    """Return a callable listing the invocations of the echo analyzer so far."""

    log = echo_analyzer.parent / "calls.jsonl"

    def read():
        if not log.exists():
            return []
        return [json.loads(line) for line in log.read_text(encoding="utf-8").splitlines() if line]

    return read


@pytest.fixture
def large_document():
    """A document well past the size of an OS pipe buffer."""

    return "".join(f"w{i} w{i} NCMS000 0.5\n" for i in range(100_000))
