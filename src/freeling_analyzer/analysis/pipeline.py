from __future__ import annotations

import csv
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, TextIO

from tqdm import tqdm

from .analyzer import Analyzer
from .config import AnalyzerOptions
from .errors import AnalyzerError
from .parser import format_token

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    document_path: Path
    output_path: Path
    token_count: int
    sentence_count: int
    ok: bool
    skipped: bool = False
    error: Optional[str] = None


def write_analysis(analyzer: Analyzer, handle: TextIO) -> tuple[int, int]:
    """Write tokens one per line, sentences separated by a blank line.

    Returns (token_count, sentence_count). Sentence count is 0 when the
    output format does not split sentences.
    """

    tokens = 0
    sentences = 0
    if analyzer.options.output_format.has_sentence_boundaries:
        for sentence in analyzer.sentences():
            for token in sentence:
                handle.write(format_token(token) + "\n")
            handle.write("\n")
            tokens += len(sentence)
            sentences += 1
    else:
        for token in analyzer.tokens():
            handle.write(format_token(token) + "\n")
            tokens += 1
    return tokens, sentences


def _collect_documents(input_dir: Path, recursive: bool, pattern: str) -> list[Path]:
    pattern_iter: Iterable[Path]
    if recursive:
        pattern_iter = input_dir.rglob(pattern)
    else:
        pattern_iter = input_dir.glob(pattern)
    return sorted(path for path in pattern_iter if path.is_file())


def _target_path(document_path: Path, input_dir: Path, output_dir: Path) -> Path:
    try:
        rel = document_path.relative_to(input_dir)
    except ValueError:
        rel = Path(document_path.name)
    return output_dir / rel.with_suffix(".tsv")


def analyze_file(document_path: Path, output_path: Path, options: AnalyzerOptions) -> AnalysisResult:
    """Analyze one document file into a TSV file."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with document_path.open("rb") as source, Analyzer(source, options) as analyzer:
        with output_path.open("w", encoding="utf-8") as handle:
            token_count, sentence_count = write_analysis(analyzer, handle)
        error = analyzer.last_error

    if error is not None:
        logger.warning("analysis of %s incomplete: %s", document_path, error)
    return AnalysisResult(
        document_path=document_path,
        output_path=output_path,
        token_count=token_count,
        sentence_count=sentence_count,
        ok=error is None,
        error=error,
    )


def _analyze_and_write(
    document_path: Path,
    input_dir: Path,
    output_dir: Path,
    options: AnalyzerOptions,
    overwrite: bool,
) -> AnalysisResult:
    out_path = _target_path(document_path, input_dir, output_dir)

    if out_path.exists() and not overwrite:
        return AnalysisResult(
            document_path=document_path,
            output_path=out_path,
            token_count=0,
            sentence_count=0,
            ok=True,
            skipped=True,
        )

    try:
        return analyze_file(document_path, out_path, options)
    except (AnalyzerError, OSError) as exc:
        logger.error("analysis of %s failed: %s", document_path, exc)
        return AnalysisResult(
            document_path=document_path,
            output_path=out_path,
            token_count=0,
            sentence_count=0,
            ok=False,
            error=str(exc),
        )


def write_failures_csv(results: Iterable[AnalysisResult], failures_csv: Path) -> None:
    failed = [item for item in results if not item.ok]
    if not failed:
        return
    failures_csv.parent.mkdir(parents=True, exist_ok=True)
    with failures_csv.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["document_path", "output_path", "error"])
        for item in failed:
            writer.writerow([item.document_path, item.output_path, item.error or ""])


def batch_analyze(
    input_dir: Path,
    output_dir: Path,
    *,
    options: Optional[AnalyzerOptions] = None,
    pattern: str = "*.txt",
    recursive: bool = True,
    workers: int = 1,
    overwrite: bool = False,
    failures_csv: Optional[Path] = None,
    progress: bool = True,
) -> list[AnalysisResult]:
    """Analyze every document under input_dir, one analyzer process each."""

    input_dir = input_dir.resolve()
    output_dir = output_dir.resolve()
    options = options or AnalyzerOptions()
    options.validate()

    documents = _collect_documents(input_dir, recursive=recursive, pattern=pattern)
    if not documents:
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    results: list[AnalysisResult] = []

    if workers <= 1:
        for document_path in tqdm(documents, desc="analyze", unit="doc", disable=not progress):
            results.append(_analyze_and_write(document_path, input_dir, output_dir, options, overwrite))
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(_analyze_and_write, document_path, input_dir, output_dir, options, overwrite)
                for document_path in documents
            ]
            with tqdm(total=len(futures), desc="analyze", unit="doc", disable=not progress) as bar:
                for future in as_completed(futures):
                    results.append(future.result())
                    bar.update(1)

    results.sort(key=lambda item: str(item.document_path))

    if failures_csv is not None:
        write_failures_csv(results, failures_csv)

    return results
