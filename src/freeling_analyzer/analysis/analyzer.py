from __future__ import annotations

import itertools
import logging
from contextlib import closing
from typing import Any, Iterator, List, Optional, Tuple

from .config import AnalyzerOptions
from .document import DocumentInput, resolve_document
from .errors import ProcessCommunicationError, UsageError
from .parser import SENTENCE_BOUNDARY, ParsedLine, Sentence, Token, parse_line
from .process import ProcessHandle, ProcessState, ProcessSupervisor

logger = logging.getLogger(__name__)


class _Run:
    """Parsed output of one analyzer process.

    ``completed`` is only set once stdout reached EOF without the handle
    having been cancelled, i.e. when the output is known to be whole.
    """

    def __init__(self, analyzer: "Analyzer"):
        self.analyzer = analyzer
        self.handle: Optional[ProcessHandle] = None
        self.completed = False

    def lines(self) -> Iterator[ParsedLine]:
        supervisor = self.analyzer.supervisor
        self.handle = handle = self.analyzer._start()
        try:
            for line in handle.iter_lines():
                yield parse_line(line)
            self.completed = not handle.cancelled.is_set()
        finally:
            if self.completed:
                supervisor.finish(handle)
            else:
                supervisor.close(handle)


class Analyzer:
    """Lazy token and sentence streams over the FreeLing analyzer binary.

    The process is started on the first pull from :meth:`tokens` or
    :meth:`sentences`. With ``memoize`` enabled, a fully read run is cached
    and replayed until ``run_again=True`` forces a new process. Failures of
    the writer thread never surface while iterating: inspect
    :attr:`last_error` (or call :meth:`check`) once a stream is exhausted.
    """

    def __init__(
        self,
        document: DocumentInput,
        options: Optional[AnalyzerOptions] = None,
        *,
        supervisor: Optional[ProcessSupervisor] = None,
        **overrides: Any,
    ):
        if supervisor is not None:
            if options is not None or overrides:
                raise TypeError("pass either a supervisor or options, not both")
            options = supervisor.options
        options = options or AnalyzerOptions()
        if overrides:
            options = options.with_overrides(**overrides)

        self.options = options
        self.supervisor = supervisor or ProcessSupervisor(options)
        self.document = resolve_document(document, options.encoding)

        self._handle: Optional[ProcessHandle] = None
        self._tokens: Optional[Tuple[Token, ...]] = None
        self._sentences: Optional[Tuple[Sentence, ...]] = None

    def __enter__(self) -> "Analyzer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def last_error(self) -> Optional[str]:
        return self.supervisor.errors.get()

    @property
    def state(self) -> ProcessState:
        if self._handle is None:
            return ProcessState.NOT_STARTED
        return self._handle.state

    def check(self) -> None:
        """Raise ProcessCommunicationError if the last run lost its input."""

        message = self.last_error
        if message is not None:
            raise ProcessCommunicationError(message)

    def tokens(self, run_again: bool = False) -> Iterator[Token]:
        if run_again:
            self._invalidate()
        elif self._tokens is not None:
            return iter(self._tokens)
        elif self._sentences is not None:
            return itertools.chain.from_iterable(self._sentences)
        return self._stream_tokens()

    def sentences(self, run_again: bool = False) -> Iterator[Sentence]:
        if not self.options.output_format.has_sentence_boundaries:
            raise UsageError(
                f"sentence splitting is not available with output format "
                f"{self.options.output_format.value!r}"
            )
        if run_again:
            self._invalidate()
        elif self._sentences is not None:
            return iter(self._sentences)
        return self._stream_sentences()

    def close(self) -> None:
        if self._handle is not None:
            self.supervisor.close(self._handle)

    def _start(self) -> ProcessHandle:
        if self._handle is not None and not self._handle.closed:
            logger.debug("discarding unfinished analyzer run (pid=%s)", self._handle.pid)
            self.supervisor.close(self._handle)
        self.supervisor.errors.clear()
        self._handle = self.supervisor.start(self.document)
        return self._handle

    def _invalidate(self) -> None:
        self.close()
        self._tokens = None
        self._sentences = None

    def _stream_tokens(self) -> Iterator[Token]:
        run = _Run(self)
        produced: List[Token] = []
        with closing(run.lines()) as lines:
            for item in lines:
                if item is SENTENCE_BOUNDARY:
                    continue
                produced.append(item)
                yield item

        if run.completed and self.options.memoize:
            self._tokens = tuple(produced)

    def _stream_sentences(self) -> Iterator[Sentence]:
        run = _Run(self)
        produced: List[Sentence] = []
        current: List[Token] = []
        with closing(run.lines()) as lines:
            for item in lines:
                if item is not SENTENCE_BOUNDARY:
                    current.append(item)
                    continue
                sentence = tuple(current)
                current = []
                produced.append(sentence)
                yield sentence

        if current and run.completed:
            # output ended without a closing blank line
            sentence = tuple(current)
            produced.append(sentence)
            yield sentence

        if run.completed and self.options.memoize:
            self._sentences = tuple(produced)
