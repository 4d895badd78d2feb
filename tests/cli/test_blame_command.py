"""Tests for the ``blamekit blame`` command."""

import json
import logging

from typer.testing import CliRunner

from blamekit import __version__
from blamekit.cli import app

runner = CliRunner()


def _write_findings(path, findings):
    path.write_text(json.dumps(findings))
    return path


class TestBlameCommand:
    def test_json_output(self, git_repo, tmp_path, monkeypatch):
        repo, shas = git_repo
        monkeypatch.delenv("GIT_COMMIT", raising=False)
        findings = _write_findings(
            tmp_path / "findings.json",
            [
                {"file_name": "lib.txt", "primary_line_number": 3, "finding_type": "style"},
                {"file_name": "src/App.txt", "line": 10},
            ],
        )

        result = runner.invoke(app, ["blame", str(findings), "--repo", str(repo), "--json", "--quiet"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["reference_commit"] == shas["bob"]
        assert data["attributed"] == 2
        by_file = {f["file_name"]: f for f in data["findings"]}
        assert by_file["lib.txt"]["author_name"] == "Bob"
        assert by_file["src/App.txt"]["commit_id"] == shas["ada"]

    def test_commit_option(self, git_repo, tmp_path):
        repo, shas = git_repo
        findings = _write_findings(tmp_path / "f.json", {"findings": [{"file_name": "lib.txt", "line": 3}]})
        out = tmp_path / "attributed.json"

        result = runner.invoke(
            app, ["blame", str(findings), "--repo", str(repo), "--commit", shas["ada"], "-o", str(out), "-q"]
        )

        assert result.exit_code == 0, result.output
        written = json.loads(out.read_text())
        assert written[0]["author_name"] == "Ada"

    def test_malformed_findings(self, tmp_path):
        findings = tmp_path / "bad.json"
        findings.write_text('[{"primary_line_number": 1}]')
        result = runner.invoke(app, ["blame", str(findings), "--repo", str(tmp_path), "-q"])
        assert result.exit_code == 1
        assert "Malformed finding" in result.output

    def test_table_output_outside_git(self, tmp_path):
        findings = _write_findings(tmp_path / "f.json", [{"file_name": "a.py", "line": 1}])
        result = runner.invoke(app, ["blame", str(findings), "--repo", str(tmp_path), "-q"])
        assert result.exit_code == 0, result.output
        assert "Attributed 0 of 1 findings" in result.output


class TestVerbosity:
    def test_verbosity_from_environment_enables_debug(self, git_repo, tmp_path, monkeypatch, caplog):
        repo, _ = git_repo
        monkeypatch.delenv("GIT_COMMIT", raising=False)
        monkeypatch.setenv("BLAMEKIT_VERBOSITY", "verbose")
        findings = _write_findings(tmp_path / "f.json", [{"file_name": "lib.txt", "line": 3}])

        result = runner.invoke(app, ["blame", str(findings), "--repo", str(repo), "--json"])

        assert result.exit_code == 0, result.output
        assert logging.getLogger("blamekit").level == logging.DEBUG
        debug = [r for r in caplog.records if r.levelno == logging.DEBUG and r.name.startswith("blamekit")]
        assert any("Attributed 1 of 1 findings" in r.getMessage() for r in debug)

    def test_quiet_flag_overrides_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BLAMEKIT_VERBOSITY", "verbose")
        findings = _write_findings(tmp_path / "f.json", [{"file_name": "a.py", "line": 1}])

        result = runner.invoke(app, ["blame", str(findings), "--repo", str(tmp_path), "-q"])

        assert result.exit_code == 0, result.output
        assert logging.getLogger("blamekit").level == logging.ERROR

    def test_invalid_verbosity_is_reported(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BLAMEKIT_VERBOSITY", "chatty")
        findings = _write_findings(tmp_path / "f.json", [{"file_name": "a.py", "line": 1}])

        result = runner.invoke(app, ["blame", str(findings), "--repo", str(tmp_path)])

        assert result.exit_code == 1
        assert "verbosity" in result.output

def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
