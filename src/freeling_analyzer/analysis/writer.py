from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from .document import Document
from .errors import ErrorCapture

if TYPE_CHECKING:
    from .process import ProcessHandle

logger = logging.getLogger(__name__)


def _close_quietly(stream) -> None:
    try:
        stream.close()
    except (OSError, ValueError):
        pass


class Writer:
    """Feeds the whole document into the analyzer's stdin from its own thread.

    The analyzer blocks on stdout once its pipe buffer fills, so writing and
    reading have to happen in different threads.
    """

    def __init__(self, errors: ErrorCapture):
        self.errors = errors

    def spawn(self, handle: "ProcessHandle", document: Document) -> threading.Thread:
        thread = threading.Thread(
            target=self.run,
            args=(handle, document),
            name=f"analyzer-writer-{handle.pid}",
            daemon=True,
        )
        thread.start()
        return thread

    def run(self, handle: "ProcessHandle", document: Document) -> None:
        try:
            data = document.content()
        except Exception as exc:
            logger.exception("could not read document for analyzer (pid=%s)", handle.pid)
            self.errors.set(f"failed to read document: {exc}")
            _close_quietly(handle.stdin)
            return

        try:
            handle.stdin.write(data)
            handle.stdin.close()
        except BrokenPipeError:
            if handle.cancelled.is_set():
                return
            self._capture_stderr(handle)
        except (OSError, ValueError) as exc:
            # stdin torn down by a forced close
            if handle.cancelled.is_set():
                return
            logger.error("writing document to analyzer (pid=%s) failed: %s", handle.pid, exc)
            self.errors.set(f"failed to write document: {exc}")
            _close_quietly(handle.stdin)

    def _capture_stderr(self, handle: "ProcessHandle") -> None:
        # Wait for exit so the diagnostic text is complete.
        handle.process.wait()
        try:
            message = handle.read_diagnostics()
        except (OSError, ValueError):
            message = ""
        if not message:
            message = f"analyzer exited with status {handle.process.returncode} before reading its input"
        self.errors.set(message)
        logger.warning("analyzer (pid=%s) closed its input early: %s", handle.pid, message)
        _close_quietly(handle.stdin)
