from __future__ import annotations

import io
from pathlib import Path

import pytest

import yomi.cli as cli
from yomi.lookup import LookupOutcome

_READINGS = {"日本": "にほん", "食べる": "たべる"}


class _FakeLookup:
    configs: list[object] = []

    def __init__(self, config, fetch=None) -> None:
        type(self).configs.append(config)

    def lookup(self, word: str) -> LookupOutcome:
        if word == "故障":
            return LookupOutcome(word=word, error="timed out")
        return LookupOutcome(word=word, reading=_READINGS.get(word))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        pass


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("YOMI_CONFIG", raising=False)
    monkeypatch.delenv("YOMI_URL_TEMPLATE", raising=False)
    monkeypatch.delenv("YOMI_TIMEOUT", raising=False)
    _FakeLookup.configs = []
    monkeypatch.setattr(cli, "ReadingLookup", _FakeLookup)


def test_lookup_prints_word_with_reading(capsys) -> None:
    assert cli.main(["日本", "食べる"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["日本(にほん)", "食べる(たべる)"]


def test_lookup_plain_output(capsys) -> None:
    assert cli.main(["--plain", "日本"]) == 0
    assert capsys.readouterr().out == "にほん\n"


def test_lookup_failure_sets_exit_code(capsys) -> None:
    assert cli.main(["米国", "故障"]) == 1
    captured = capsys.readouterr()
    assert "No reading found for: 米国" in captured.err
    assert "Error fetching data: timed out" in captured.err
    assert captured.out == ""


def test_lookup_passes_url_template_override(capsys) -> None:
    cli.main(["--url-template", "https://mirror.test/{}", "日本"])
    assert _FakeLookup.configs[0].url_template == "https://mirror.test/{}"


def test_invalid_url_template_exits() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--url-template", "https://mirror.test/", "日本"])
    assert "placeholder" in str(excinfo.value)


def test_no_arguments_prints_help(capsys) -> None:
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_annotate_span_from_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("私は日本が好き"))
    assert cli.main(["annotate", "--span", "2:4"]) == 0
    assert capsys.readouterr().out == "私は日本(にほん)が好き"


def test_annotate_file_in_place(tmp_path: Path, capsys) -> None:
    target = tmp_path / "note.txt"
    target.write_text("食べる物\n", encoding="utf-8")
    assert cli.main(["annotate", str(target), "--span", "0:3", "--in-place"]) == 0
    assert target.read_text(encoding="utf-8") == "食べる(たべる)物\n"
    assert capsys.readouterr().out == ""


def test_annotate_word_at_without_reading_echoes_text(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("米国へ"))
    assert cli.main(["annotate", "--at", "0"]) == 1
    captured = capsys.readouterr()
    assert captured.out == "米国へ"
    assert "No reading found for: 米国" in captured.err


def test_annotate_rejects_malformed_span(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("日本"))
    with pytest.raises(SystemExit):
        cli.main(["annotate", "--span", "2-4"])


def test_annotate_in_place_needs_file(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("日本"))
    with pytest.raises(SystemExit):
        cli.main(["annotate", "--at", "0", "--in-place"])


def test_serve_runs_uvicorn_with_lookup_formatter(monkeypatch, capsys) -> None:
    calls: dict[str, object] = {}

    def _fake_run(app, host, port, log_config):
        calls["app"] = app
        calls["host"] = host
        calls["port"] = port
        calls["log_config"] = log_config

    monkeypatch.setattr(cli.uvicorn, "run", _fake_run)
    assert cli.main(["serve", "--port", "9000"]) == 0
    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 9000
    assert calls["log_config"]["formatters"]["access"]["()"] == "yomi.logging_utils.LookupAccessFormatter"
    assert calls["app"].state.config.lookup.url_template == "https://jisho.org/word/{}"
