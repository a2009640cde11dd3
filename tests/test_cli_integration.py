"""End-to-end CLI integration tests.

Invokes mstep as a subprocess to verify real command execution, plus a
few in-process checks through ``main(argv)``.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from mstep.cli import main

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "graphs"


def _run_mstep(*args: str, cwd: str | Path | None = None) -> subprocess.CompletedProcess:
    """Run mstep as a subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "mstep", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        timeout=120,
    )


class TestCLIHelp:
    """Test --help works for main and subcommands."""

    def test_main_help(self):
        result = _run_mstep("--help")
        assert result.returncode == 0
        assert "mstep" in result.stdout

    @pytest.mark.parametrize("command", ["validate", "trace", "serve"])
    def test_subcommand_help(self, command):
        assert _run_mstep(command, "--help").returncode == 0

    def test_version(self):
        result = _run_mstep("version")
        assert result.returncode == 0
        assert result.stdout.startswith("mstep ")

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestValidateCommand:
    """Test validate command runs end-to-end."""

    def test_valid_graph(self, tmp_path):
        result = _run_mstep("validate", str(FIXTURES_DIR / "triangle.json"), cwd=tmp_path)
        assert result.returncode == 0
        assert "valid" in result.stdout

    def test_disconnected_graph(self, tmp_path):
        result = _run_mstep("validate", str(FIXTURES_DIR / "disconnected.json"), cwd=tmp_path)
        assert result.returncode == 1
        assert "disconnected" in result.stderr

    def test_json_output(self, capsys):
        code = main(["validate", str(FIXTURES_DIR / "self_loop.json"), "-j"])
        assert code == 1
        data = json.loads(capsys.readouterr().out)
        assert data["valid"] is False
        assert [e["type"] for e in data["errors"]] == ["self_loop"]

    def test_legacy_document_accepted(self, capsys):
        assert main(["-q", "validate", str(FIXTURES_DIR / "triangle_legacy.json")]) == 0
        assert capsys.readouterr().out == ""

    def test_malformed_document(self, capsys):
        assert main(["validate", str(FIXTURES_DIR / "malformed.json")]) == 1
        assert "Invalid graph document" in capsys.readouterr().err

    def test_missing_file(self, capsys, tmp_path):
        assert main(["validate", str(tmp_path / "nope.json")]) == 1
        assert "File not found" in capsys.readouterr().err


class TestTraceCommand:
    """Test trace command output."""

    def test_text_trace(self, tmp_path):
        result = _run_mstep("trace", str(FIXTURES_DIR / "triangle.json"), cwd=tmp_path)
        assert result.returncode == 0
        lines = result.stdout.splitlines()
        assert "DELETE" in lines[2]
        assert "total weight 7" in result.stdout

    def test_json_trace(self, capsys):
        assert main(["trace", str(FIXTURES_DIR / "triangle.json"), "-j"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data["steps"]) == 8
        assert data["mst"]["total_weight"] == 7
        assert {(e["u"], e["v"]) for e in data["mst"]["edges"]} == {("A", "B"), ("B", "C")}

    def test_single_step(self, capsys):
        assert main(["trace", str(FIXTURES_DIR / "triangle.json"), "--step", "4", "-j"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["type"] == "keep"
        assert data["stepNumber"] == 4

    def test_step_out_of_range(self, capsys):
        assert main(["trace", str(FIXTURES_DIR / "triangle.json"), "--step", "99"]) == 1
        assert "out of range" in capsys.readouterr().err

    def test_invalid_graph_refused(self, capsys):
        assert main(["trace", str(FIXTURES_DIR / "disconnected.json")]) == 1
        assert "Cannot run Reverse-Delete" in capsys.readouterr().err


class TestGlobalOptions:
    def test_missing_config_file(self, capsys, tmp_path):
        code = main(["--config", str(tmp_path / "none.toml"), "version"])
        assert code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_invalid_config_file(self, capsys, tmp_path):
        bad = tmp_path / ".mstep.toml"
        bad.write_text("[server\n")
        assert main(["--config", str(bad), "version"]) == 1
        assert "Invalid TOML" in capsys.readouterr().err

    def test_verbose_reraises_unexpected_errors(self, tmp_path):
        bad = tmp_path / ".mstep.toml"
        bad.write_text("[server\n")
        with pytest.raises(ValueError):
            main(["-v", "--config", str(bad), "version"])
