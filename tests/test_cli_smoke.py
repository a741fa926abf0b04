"""
Minimal smoke tests for the coach-engine CLI.

Tests basic functionality:
- App runs and lists its commands
- Scenarios are listed and simulated (table, JSON, file output)
- Session previews render
- Bad input exits with status 1
"""

import json
from pathlib import Path

from typer.testing import CliRunner

from coach_engine.cli.main import app


runner = CliRunner()


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "simulate" in result.output
        assert "sessions" in result.output

    def test_scenarios_lists_bundled(self):
        """Test scenarios prints the bundled library."""
        result = runner.invoke(app, ["scenarios"])
        assert result.exit_code == 0
        assert "Perfect Adherence" in result.output
        assert "Underfueling Pattern" in result.output

    def test_simulate_table(self):
        """Test simulate renders the weekly table."""
        result = runner.invoke(app, ["simulate", "Perfect Adherence"])
        assert result.exit_code == 0
        assert "Final state" in result.output

    def test_simulate_json(self):
        """Test simulate --json emits parseable JSON."""
        result = runner.invoke(app, ["simulate", "three-week gap", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["scenario_name"] == "Three-Week Gap"
        assert data["simulation_metadata"]["total_weeks"] == len(data["weeks"])
        assert data["weeks"][0]["week_start_iso"] == "2026-01-05"

    def test_simulate_writes_output_file(self, tmp_path: Path):
        """Test simulate --output writes the JSON result."""
        out = tmp_path / "run.json"
        result = runner.invoke(app, ["simulate", "Moderate Adherence", "--output", str(out)])
        assert result.exit_code == 0
        assert out.exists()
        assert json.loads(out.read_text())["scenario_name"] == "Moderate Adherence"

    def test_simulate_unknown_scenario(self):
        """Test an unknown scenario name fails cleanly."""
        result = runner.invoke(app, ["simulate", "Marathon Block"])
        assert result.exit_code == 1
        assert "Unknown scenario" in result.output

    def test_simulate_missing_settings_file(self, tmp_path: Path):
        """Test a missing --settings file fails cleanly."""
        result = runner.invoke(
            app, ["simulate", "Perfect Adherence", "--settings", str(tmp_path / "nope.yaml")]
        )
        assert result.exit_code == 1

    def test_simulate_bad_settings_value(self, tmp_path: Path):
        """Test a non-numeric setting is reported, not raised."""
        settings = tmp_path / "engine.yaml"
        settings.write_text("evaluator:\n  fatigue_maintain: high\n")
        result = runner.invoke(app, ["simulate", "Perfect Adherence", "--settings", str(settings)])
        assert result.exit_code == 1
        assert "fatigue_maintain" in result.output

    def test_sessions_preview(self):
        """Test sessions renders one table per session."""
        result = runner.invoke(app, ["sessions", "--per-week", "2"])
        assert result.exit_code == 0
        assert "Program: 2/week" in result.output

    def test_sessions_json_minimum_viable(self):
        """Test sessions --json --minimum-viable."""
        result = runner.invoke(app, ["sessions", "--json", "--minimum-viable", "-i", "moderate"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data["sessions"]) == 3
        assert all(s["is_minimum_viable"] for s in data["sessions"])
        assert all(s["intensity_tier"] == "moderate" for s in data["sessions"])

    def test_sessions_bad_start_date(self):
        """Test an invalid --start date exits 1."""
        result = runner.invoke(app, ["sessions", "--start", "05/01/2026"])
        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_sessions_out_of_range_program(self):
        """Test an out-of-range program exits 1."""
        result = runner.invoke(app, ["sessions", "--per-week", "7"])
        assert result.exit_code == 1
