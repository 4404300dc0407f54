"""Tests for the llmtxt-check command line."""

import json

import pytest
from typer.testing import CliRunner

from llmtxt_check import __version__
from llmtxt_check.cli import EXIT_FAILED, EXIT_OK, EXIT_USAGE, app
from llmtxt_check.config import ENV_ACCEPTED_LANGUAGES, ENV_ALLOWLIST, ENV_STRICT_ORDER
from llmtxt_check.schemas import DIAGNOSTIC_CATALOG

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in (ENV_ACCEPTED_LANGUAGES, ENV_ALLOWLIST, ENV_STRICT_ORDER):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def broken_path(isolated, minimal_text):
    path = isolated / "broken" / "llm.txt"
    path.parent.mkdir()
    path.write_text(minimal_text.replace("#### Function: make_widget(name)\n", ""), encoding="utf-8")
    return path


class TestCheckCommand:

    def test_conforming_document(self, geopy_path):
        result = runner.invoke(app, ["check", str(geopy_path)])
        assert result.exit_code == EXIT_OK
        assert "1/1 documents passed" in result.stdout

    def test_document_with_errors(self, broken_path):
        result = runner.invoke(app, ["check", str(broken_path)])
        assert result.exit_code == EXIT_FAILED
        assert "UndocumentedSymbol" in result.stdout

    def test_directory_scan(self, isolated, broken_path, geopy_text):
        (isolated / "llm.txt").write_text(geopy_text, encoding="utf-8")
        result = runner.invoke(app, ["check", str(isolated), "--format", "json"])
        assert result.exit_code == EXIT_FAILED
        data = json.loads(result.stdout)
        assert len(data["reports"]) == 2
        assert data["ok"] is False

    def test_json_output(self, geopy_path):
        result = runner.invoke(app, ["check", str(geopy_path), "--format", "json"])
        assert result.exit_code == EXIT_OK
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["reports"][0]["diagnostics"] == []
        assert data["reports"][0]["source"] == str(geopy_path.resolve())

    def test_language_option(self, geopy_path):
        result = runner.invoke(app, ["check", str(geopy_path), "-L", "rust", "-f", "json"])
        assert result.exit_code == EXIT_OK
        codes = [d["code"] for d in json.loads(result.stdout)["reports"][0]["diagnostics"]]
        assert codes == ["UnexpectedLanguage"]

    def test_missing_path(self, isolated):
        result = runner.invoke(app, ["check", str(isolated / "missing.txt")])
        assert result.exit_code == EXIT_USAGE

    def test_no_documents_found(self, isolated):
        (isolated / "empty").mkdir()
        result = runner.invoke(app, ["check", str(isolated / "empty")])
        assert result.exit_code == EXIT_USAGE
        assert "No llm.txt files found" in result.stdout

    def test_bad_config_file(self, isolated, geopy_path):
        config = isolated / "bad.yaml"
        config.write_text("unknown_key: 1\n")
        result = runner.invoke(app, ["check", str(geopy_path), "--config", str(config)])
        assert result.exit_code == EXIT_USAGE


class TestOtherCommands:

    def test_codes(self):
        result = runner.invoke(app, ["codes"])
        assert result.exit_code == 0
        assert "UndocumentedSymbol" in result.stdout
        assert len(DIAGNOSTIC_CATALOG) >= 20

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout
