import json
import logging

import pytest

from freeling_analyzer.cli import build_parser, main

DOC = "El el DA0MS0 1\ngato gato NCMS000\n\nDuerme dormir VMIP3S0 0.9\n\n"


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def analyzer_args(share_dir, echo_analyzer):
    return ["--share-path", str(share_dir), "--analyzer-path", str(echo_analyzer), "--log-level", "ERROR"]


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_text(DOC, encoding="utf-8")
    return path


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_tokens_tsv(document, analyzer_args, capsys):
    assert main(["tokens", str(document), *analyzer_args]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["El\tel\tDA0MS0\t1.0", "gato\tgato\tNCMS000", "Duerme\tdormir\tVMIP3S0\t0.9"]


def test_tokens_json(document, analyzer_args, capsys):
    assert main(["tokens", str(document), "--json", *analyzer_args]) == 0
    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert rows[1] == {"form": "gato", "lemma": "gato", "tag": "NCMS000"}


def test_sentences_json(document, analyzer_args, capsys):
    assert main(["sentences", str(document), "--json", *analyzer_args]) == 0
    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [[t["form"] for t in sentence] for sentence in rows] == [["El", "gato"], ["Duerme"]]


def test_sentences_tsv(document, analyzer_args, capsys):
    assert main(["sentences", str(document), *analyzer_args]) == 0
    assert capsys.readouterr().out.split("\n\n")[0] == "El\tel\tDA0MS0\t1.0\ngato\tgato\tNCMS000"


def test_sentences_with_token_output_is_an_error(document, analyzer_args, capsys):
    assert main(["sentences", str(document), "--output-format", "token", *analyzer_args]) == 1
    assert "sentence splitting is not available" in capsys.readouterr().err


def test_missing_analyzer_is_an_error(document, share_dir, tmp_path, capsys):
    argv = ["tokens", str(document), "--share-path", str(share_dir), "--analyzer-path", str(tmp_path / "missing")]
    assert main(argv) == 1
    assert "not found" in capsys.readouterr().err


def test_process_failure_sets_exit_status(tmp_path, share_dir, failing_analyzer, large_document, capsys):
    doc = tmp_path / "big.txt"
    doc.write_text(large_document, encoding="utf-8")
    argv = ["tokens", str(doc), "--share-path", str(share_dir), "--analyzer-path", str(failing_analyzer)]
    assert main([*argv, "--log-level", "ERROR"]) == 1
    assert "cannot open configuration file" in capsys.readouterr().err


def test_batch(tmp_path, analyzer_args, capsys):
    corpus = tmp_path / "corpus"
    corpus.mkdir()
    (corpus / "one.txt").write_text(DOC, encoding="utf-8")
    out = tmp_path / "out"

    code = main(["batch", "--input-dir", str(corpus), "--output-dir", str(out), "--no-progress", *analyzer_args])

    assert code == 0
    assert "Completed: ok=1, skipped=0, failed=0, total=1" in capsys.readouterr().out
    assert (out / "one.tsv").exists()


def test_batch_without_documents(tmp_path, analyzer_args, capsys):
    corpus = tmp_path / "corpus"
    corpus.mkdir()
    code = main(["batch", "--input-dir", str(corpus), "--output-dir", str(tmp_path / "out"), *analyzer_args])
    assert code == 0
    assert "No documents found." in capsys.readouterr().out
