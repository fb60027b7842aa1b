"""Analyzer process supervision and token/sentence streaming."""

from .analyzer import Analyzer
from .config import AnalyzerOptions, InputFormat, OutputFormat
from .document import InlineDocument, StreamDocument, resolve_document
from .errors import (
    AnalyzerError,
    ConfigurationError,
    ErrorCapture,
    ProcessCommunicationError,
    UsageError,
)
from .parser import SENTENCE_BOUNDARY, Sentence, SentenceBoundary, Token, parse_line
from .pipeline import AnalysisResult, analyze_file, batch_analyze
from .process import ProcessHandle, ProcessState, ProcessSupervisor
from .writer import Writer

__all__ = [
    "Analyzer",
    "AnalyzerOptions",
    "InputFormat",
    "OutputFormat",
    "InlineDocument",
    "StreamDocument",
    "resolve_document",
    "AnalyzerError",
    "ConfigurationError",
    "ErrorCapture",
    "ProcessCommunicationError",
    "UsageError",
    "SENTENCE_BOUNDARY",
    "Sentence",
    "SentenceBoundary",
    "Token",
    "parse_line",
    "AnalysisResult",
    "analyze_file",
    "batch_analyze",
    "ProcessHandle",
    "ProcessState",
    "ProcessSupervisor",
    "Writer",
]
