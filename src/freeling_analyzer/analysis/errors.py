from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional


class AnalyzerError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(AnalyzerError):
    """A required path is missing or an option value is not recognised."""

    def __init__(self, message: str, *, kind: Optional[str] = None, path: Optional[Path] = None):
        self.kind = kind
        self.path = path
        super().__init__(message)


class UsageError(AnalyzerError):
    """The request cannot be served under the current configuration."""


class ProcessCommunicationError(AnalyzerError):
    """The analyzer process went away before it accepted the whole document."""

    def __init__(self, stderr: str):
        self.stderr = stderr
        super().__init__(f"analyzer process failed: {stderr}" if stderr else "analyzer process failed")


class ErrorCapture:
    """Diagnostic register shared between the writer thread and readers.

    Every access takes the same lock and releases it as soon as the value
    has been read or replaced.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._message: Optional[str] = None

    def get(self) -> Optional[str]:
        with self._lock:
            return self._message

    def set(self, message: Optional[str]) -> None:
        with self._lock:
            self._message = message

    def clear(self) -> None:
        self.set(None)
