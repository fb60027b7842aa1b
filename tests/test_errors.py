"""Tests for the exception hierarchy and the shared error register."""

import threading

from freeling_analyzer.analysis.errors import (
    AnalyzerError,
    ConfigurationError,
    ErrorCapture,
    ProcessCommunicationError,
    UsageError,
)


class TestExceptions:
    def test_hierarchy(self):
        for exc_cls in (ConfigurationError, UsageError, ProcessCommunicationError):
            assert issubclass(exc_cls, AnalyzerError)

    def test_configuration_error_carries_path(self, tmp_path):
        exc = ConfigurationError("missing", kind="share_path", path=tmp_path)
        assert exc.kind == "share_path"
        assert exc.path == tmp_path
        assert str(exc) == "missing"

    def test_process_communication_error_carries_stderr(self):
        exc = ProcessCommunicationError("bad config")
        assert exc.stderr == "bad config"
        assert "bad config" in str(exc)


class TestErrorCapture:
    def test_starts_empty(self):
        assert ErrorCapture().get() is None

    def test_set_get_clear(self):
        capture = ErrorCapture()
        capture.set("boom")
        assert capture.get() == "boom"
        capture.clear()
        assert capture.get() is None

    def test_shared_between_threads(self):
        capture = ErrorCapture()
        thread = threading.Thread(target=capture.set, args=("from writer",))
        thread.start()
        thread.join()
        assert capture.get() == "from writer"
