"""Streaming Python interface to the FreeLing ``analyzer`` binary."""

from .analysis import (
    Analyzer,
    AnalyzerError,
    AnalyzerOptions,
    ConfigurationError,
    ProcessCommunicationError,
    Sentence,
    Token,
    UsageError,
)

__version__ = "0.1.0"

__all__ = [
    "Analyzer",
    "AnalyzerError",
    "AnalyzerOptions",
    "ConfigurationError",
    "ProcessCommunicationError",
    "Sentence",
    "Token",
    "UsageError",
    "__version__",
]
