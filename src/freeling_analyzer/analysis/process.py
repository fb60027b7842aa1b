from __future__ import annotations

import logging
import subprocess
import tempfile
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Iterator, Optional

from .config import AnalyzerOptions
from .document import Document
from .errors import ConfigurationError, ErrorCapture
from .writer import Writer

logger = logging.getLogger(__name__)


class ProcessState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    DRAINING = "draining"
    CLOSED = "closed"


@dataclass
class ProcessHandle:
    """Pipes, wait primitive and writer thread of one analyzer run."""

    process: subprocess.Popen
    encoding: str = "utf-8"
    writer: Optional[threading.Thread] = None
    stderr_file: Optional[IO[bytes]] = None
    cancelled: threading.Event = field(default_factory=threading.Event)
    closed: bool = False

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def stdin(self) -> IO[bytes]:
        return self.process.stdin

    @property
    def stdout(self) -> IO[bytes]:
        return self.process.stdout

    @property
    def stderr(self) -> Optional[IO[bytes]]:
        return self.stderr_file

    @property
    def state(self) -> ProcessState:
        if self.closed:
            return ProcessState.CLOSED
        if self.stdin is None or self.stdin.closed:
            return ProcessState.DRAINING
        return ProcessState.RUNNING

    def wait(self) -> int:
        return self.process.wait()

    def iter_lines(self) -> Iterator[str]:
        """Yield decoded stdout lines without their line terminator."""

        while not self.closed:
            try:
                raw = self.stdout.readline()
            except ValueError:
                # stdout closed underneath us by close()
                if self.closed:
                    return
                raise
            if not raw:
                return
            yield raw.decode(self.encoding, errors="replace").rstrip("\r\n")

    def read_diagnostics(self) -> str:
        """Return everything the analyzer wrote to stderr so far."""

        self.stderr.seek(0)
        return self.stderr.read().decode(self.encoding, errors="replace").strip()

    def close_pipes(self) -> None:
        for stream in (self.stdin, self.stdout, self.stderr):
            if stream is None or stream.closed:
                continue
            try:
                stream.close()
            except BrokenPipeError:
                # unflushed input for a process that is already gone
                pass


class ProcessSupervisor:
    """Spawns the analyzer binary and owns the teardown of its handles."""

    def __init__(self, options: AnalyzerOptions, errors: Optional[ErrorCapture] = None):
        options.validate()
        self.options = options
        self.errors = errors if errors is not None else ErrorCapture()
        self.writer = Writer(self.errors)

    def start(self, document: Document) -> ProcessHandle:
        cmd = self.options.build_command()
        logger.debug("spawning analyzer: %s", " ".join(cmd))
        # stderr goes to an unbounded file; a full pipe would stall the analyzer.
        stderr_file = tempfile.TemporaryFile(prefix="freeling_stderr_")
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
                env=self.options.build_env(),
            )
        except OSError as exc:
            stderr_file.close()
            raise ConfigurationError(
                f"could not start {self.options.analyzer_path}: {exc}",
                kind="analyzer_path",
                path=self.options.analyzer_path,
            ) from exc

        handle = ProcessHandle(process=process, encoding=self.options.encoding, stderr_file=stderr_file)
        handle.writer = self.writer.spawn(handle, document)
        logger.info("analyzer started (pid=%s)", handle.pid)
        return handle

    def finish(self, handle: ProcessHandle) -> None:
        """Tear down a handle whose output has been fully read."""

        if handle.closed:
            return
        if handle.writer is not None:
            handle.writer.join()
        returncode = handle.process.wait()
        handle.close_pipes()
        handle.closed = True
        logger.info("analyzer finished (pid=%s, returncode=%s)", handle.pid, returncode)

    def close(self, handle: ProcessHandle) -> None:
        """Kill a still-running process, join its writer and close every pipe."""

        if handle.closed:
            return
        handle.cancelled.set()
        if handle.process.poll() is None:
            handle.process.kill()
        if handle.writer is not None and handle.writer.is_alive():
            handle.writer.join()
        handle.process.wait()
        handle.close_pipes()
        handle.closed = True
        logger.info("analyzer closed (pid=%s)", handle.pid)
