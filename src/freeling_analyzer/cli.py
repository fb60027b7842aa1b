from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .analysis import Analyzer, AnalyzerError, AnalyzerOptions, InputFormat, OutputFormat, batch_analyze
from .analysis.config import DEFAULT_ANALYZER_PATH, DEFAULT_SHARE_PATH
from .analysis.parser import format_token

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level.upper())
    err_h = logging.StreamHandler(sys.stderr)
    err_h.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(err_h)


def _add_analyzer_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--share-path", type=Path, default=DEFAULT_SHARE_PATH)
    parser.add_argument("--analyzer-path", type=Path, default=DEFAULT_ANALYZER_PATH)
    parser.add_argument("--input-format", choices=[x.value for x in InputFormat], default="plain")
    parser.add_argument("--output-format", choices=[x.value for x in OutputFormat], default="tagged")
    parser.add_argument("--language", type=str, default="es")
    parser.add_argument("--config-path", type=Path)
    parser.add_argument("--encoding", type=str, default="utf-8")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")


def _options_from_args(args: argparse.Namespace) -> AnalyzerOptions:
    return AnalyzerOptions(
        share_path=args.share_path,
        analyzer_path=args.analyzer_path,
        input_format=args.input_format,
        output_format=args.output_format,
        language=args.language,
        config_path=args.config_path,
        encoding=args.encoding,
        memoize=False,
    )


def _add_tokens_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("tokens", help="Print one analyzed token per line")
    parser.add_argument("input", type=str, help="document to analyze, '-' for stdin")
    parser.add_argument("--json", action="store_true", help="emit JSON lines instead of TSV")
    _add_analyzer_options(parser)
    parser.set_defaults(handler=_handle_tokens)


def _add_sentences_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("sentences", help="Print analyzed tokens grouped by sentence")
    parser.add_argument("input", type=str, help="document to analyze, '-' for stdin")
    parser.add_argument("--json", action="store_true", help="emit one JSON array per sentence")
    _add_analyzer_options(parser)
    parser.set_defaults(handler=_handle_sentences)


def _add_batch_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("batch", help="Analyze every document under a directory")
    parser.add_argument("--input-dir", type=Path, required=True)
    parser.add_argument("--output-dir", type=Path, required=True)
    parser.add_argument("--pattern", type=str, default="*.txt")
    parser.add_argument("--recursive", action=argparse.BooleanOptionalAction, default=True)
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--overwrite", action="store_true")
    parser.add_argument("--failures-csv", type=Path)
    parser.add_argument("--no-progress", action="store_true")
    _add_analyzer_options(parser)
    parser.set_defaults(handler=_handle_batch)


def _open_input(path: str):
    if path == "-":
        return sys.stdin.buffer
    return open(path, "rb")


def _report_last_error(analyzer: Analyzer) -> int:
    if analyzer.last_error is not None:
        print(f"analyzer error: {analyzer.last_error}", file=sys.stderr)
        return 1
    return 0


def _handle_tokens(args: argparse.Namespace) -> int:
    options = _options_from_args(args)
    source = _open_input(args.input)
    try:
        with Analyzer(source, options) as analyzer:
            for token in analyzer.tokens():
                if args.json:
                    print(json.dumps(token.to_dict(), ensure_ascii=False))
                else:
                    print(format_token(token))
            return _report_last_error(analyzer)
    finally:
        if source is not sys.stdin.buffer:
            source.close()


def _handle_sentences(args: argparse.Namespace) -> int:
    options = _options_from_args(args)
    source = _open_input(args.input)
    try:
        with Analyzer(source, options) as analyzer:
            for sentence in analyzer.sentences():
                if args.json:
                    print(json.dumps([token.to_dict() for token in sentence], ensure_ascii=False))
                    continue
                for token in sentence:
                    print(format_token(token))
                print()
            return _report_last_error(analyzer)
    finally:
        if source is not sys.stdin.buffer:
            source.close()


def _handle_batch(args: argparse.Namespace) -> int:
    results = batch_analyze(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        options=_options_from_args(args),
        pattern=args.pattern,
        recursive=args.recursive,
        workers=max(1, args.workers),
        overwrite=args.overwrite,
        failures_csv=args.failures_csv,
        progress=not args.no_progress,
    )

    if not results:
        print("No documents found.")
        return 0

    ok = sum(1 for item in results if item.ok and not item.skipped)
    skipped = sum(1 for item in results if item.skipped)
    failed = sum(1 for item in results if not item.ok)

    print(f"Completed: ok={ok}, skipped={skipped}, failed={failed}, total={len(results)}")
    if failed:
        print("Failed files:")
        for item in results:
            if not item.ok:
                print(f"- {item.document_path}: {item.error}")
        return 1

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="freeling-analyzer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_tokens_parser(subparsers)
    _add_sentences_parser(subparsers)
    _add_batch_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    try:
        return args.handler(args)
    except AnalyzerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
