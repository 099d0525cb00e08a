"""Tests for the refinetrace command line."""

import json

import pytest
import yaml
from click.testing import CliRunner

from refinetrace import __version__
from refinetrace.cli import main


@pytest.fixture
def runner(monkeypatch):
    for name in ("CONFLICT_POLICY", "OUTPUT_FORMAT", "LOG_LEVEL", "CHECK_INVARIANTS", "LOG_FILE"):
        monkeypatch.delenv(f"REFINETRACE_{name}", raising=False)
    return CliRunner()


class TestDefaultRun:
    """Running with no arguments prints the demonstration report."""
    
    def test_no_arguments(self, runner, expected_demo_report):
        with runner.isolated_filesystem():
            result = runner.invoke(main, [])
        
        assert result.exit_code == 0
        assert result.output == expected_demo_report
    
    def test_run_subcommand(self, runner, expected_demo_report):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run"])
        
        assert result.exit_code == 0
        assert result.output == expected_demo_report
    
    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        
        assert result.exit_code == 0
        assert __version__ in result.output


class TestRunOptions:
    """Options of the run command."""
    
    def test_explicit_order(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run", "--order", "P3,P1,P2"])
        
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "( P2 P3 ): [ D ]",
            "( P2 P1 ): [ A B ]",
            "( P1 P3 ): [ C ]",
            "( P3 ): [ E ]",
        ]
    
    def test_unknown_pattern_in_order(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run", "--order", "P1,P9"])
        
        assert result.exit_code == 2
        assert "P9" in result.output
    
    def test_repeated_pattern_in_order(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run", "--order", "P1,P1"])
        
        assert result.exit_code == 1
        assert "more than once" in result.output
    
    def test_json_format(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run", "--format", "json"])
        
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total_rows"] == 4
        assert data["rows"][0]["trace"] == ["P3"]
    
    def test_table_format(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["run", "--format", "table"])
        
        assert result.exit_code == 0
        assert "Split Traces" in result.output
    
    def test_format_from_config_file(self, runner):
        with runner.isolated_filesystem():
            with open("custom.yml", "w") as f:
                yaml.dump({"output_format": "yaml"}, f)
            result = runner.invoke(main, ["--config", "custom.yml"])
        
        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["total_rows"] == 4
    
    def test_non_mapping_config_uses_defaults(self, runner, expected_demo_report):
        with runner.isolated_filesystem():
            with open("bad.yml", "w") as f:
                f.write("- a\n- b\n")
            result = runner.invoke(main, ["run", "--config", "bad.yml"])
        
        assert result.exit_code == 0
        assert result.output.endswith(expected_demo_report)
    
    def test_invalid_config_fails(self, runner):
        with runner.isolated_filesystem():
            with open(".refinetrace.yml", "w") as f:
                yaml.dump({"conflict_policy": "merge"}, f)
            result = runner.invoke(main, ["run"])
        
        assert result.exit_code == 1
        assert "invalid configuration" in result.output


class TestCheckCommand:
    """The check command validates every processing order."""
    
    def test_check_passes(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["check"])
        
        assert result.exit_code == 0
        assert "6 processing orders" in result.output


class TestConfigCommands:
    """config init / show / validate."""
    
    def test_init_creates_file(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["config", "init", "--path", "rt.yml"])
            
            assert result.exit_code == 0
            with open("rt.yml") as f:
                assert yaml.safe_load(f)["conflict_policy"] == "warn"
    
    def test_init_declines_overwrite(self, runner):
        with runner.isolated_filesystem():
            with open("rt.yml", "w") as f:
                f.write("output_format: json\n")
            result = runner.invoke(main, ["config", "init", "--path", "rt.yml"], input="n\n")
            
            assert "Aborted" in result.output
            with open("rt.yml") as f:
                assert yaml.safe_load(f) == {"output_format": "json"}
    
    def test_show(self, runner):
        with runner.isolated_filesystem():
            runner.invoke(main, ["config", "init", "--path", "rt.yml"])
            result = runner.invoke(main, ["config", "show", "--path", "rt.yml"])
        
        assert result.exit_code == 0
        assert "check_invariants" in result.output
    
    def test_validate_reports_errors(self, runner):
        with runner.isolated_filesystem():
            with open("rt.yml", "w") as f:
                yaml.dump({"output_format": "html"}, f)
            result = runner.invoke(main, ["config", "validate", "--path", "rt.yml"])
        
        assert result.exit_code == 1
        assert "output_format must be one of" in result.output
