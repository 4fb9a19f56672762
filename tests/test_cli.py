"""End-to-end tests for the ``pulse`` command line."""

from __future__ import annotations

import pytest
import yaml
from click.testing import CliRunner

from pulse.cli.main import cli


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "pulse.yaml"
    path.write_text(yaml.safe_dump({"database": {"path": str(tmp_path / "cli.db")}}))
    return path


@pytest.fixture
def run(config_file):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--config", str(config_file), *args])

    return invoke


@pytest.fixture
def project(run):
    """Users 1-3 and a zero-length project 1, so expected progress is always 100."""
    run("user", "add", "Ada Admin", "ada@example.com", "--role", "ADMIN")
    run("user", "add", "Eve Employee", "eve@example.com", "--role", "EMPLOYEE")
    run("user", "add", "Carl Client", "carl@example.com", "--role", "CLIENT")
    result = run("project", "add", "Apollo", "--admin", "1", "--client", "3",
                 "--start", "2026-01-01", "--end", "2026-01-01")
    assert result.exit_code == 0, result.output
    return 1


class TestSetup:
    def test_init(self, run, tmp_path):
        result = run("init")
        assert result.exit_code == 0, result.output
        assert "initialized successfully" in result.output
        assert (tmp_path / "cli.db").exists()

    def test_config_show(self, run):
        result = run("config", "show")
        assert result.exit_code == 0
        assert "signal_window: 4" in result.output

    def test_config_validate(self, run):
        result = run("config", "validate")
        assert result.exit_code == 0
        assert "Config is valid." in result.output

    def test_config_validate_rejects_bad_weights(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"scoring": {"weights": {"risk": 0.9}}}))
        result = CliRunner().invoke(cli, ["--config", str(path), "config", "validate"])
        assert result.exit_code == 1
        assert "Config validation failed" in result.output

    def test_duplicate_user(self, run):
        run("user", "add", "Ada", "ada@example.com")
        result = run("user", "add", "Ada Again", "ada@example.com")
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestWorkflow:
    def test_checkin_updates_health(self, run, project):
        result = run("checkin", "1", "--employee", "2", "--confidence", "4",
                     "--completion", "100", "--summary", "Done")
        assert result.exit_code == 0, result.output
        assert "Health score: 82 (ON_TRACK)" in result.output

    def test_duplicate_checkin(self, run, project):
        args = ("checkin", "1", "--employee", "2", "--confidence", "4",
                "--completion", "100", "--summary", "Done")
        run(*args)
        result = run(*args)
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_confidence_out_of_range(self, run, project):
        result = run("checkin", "1", "--employee", "2", "--confidence", "9",
                     "--completion", "10", "--summary", "x")
        assert result.exit_code == 2

    def test_risk_lifecycle(self, run, project):
        run("checkin", "1", "--employee", "2", "--confidence", "4",
            "--completion", "100", "--summary", "Done")

        result = run("risk", "add", "1", "Vendor delay", "--severity", "high")
        assert result.exit_code == 0, result.output
        assert "Health score: 79 (AT_RISK)" in result.output
        assert "[was ON_TRACK]" in result.output

        result = run("project", "show", "1")
        assert "Open risks (1)" in result.output
        assert "[HIGH]" in result.output

        result = run("risk", "update", "1", "1", "--status", "RESOLVED")
        assert result.exit_code == 0, result.output
        assert "Health score: 82 (ON_TRACK)" in result.output

        result = run("project", "activity", "1")
        assert "RISK_RESOLVED" in result.output
        assert "PROJECT_STATUS_CHANGED" in result.output

        result = run("risk", "delete", "1", "1")
        assert result.exit_code == 0
        assert run("risk", "delete", "1", "1").exit_code == 1

    def test_feedback_flag(self, run, project):
        result = run("feedback", "1", "--client", "3", "--satisfaction", "2",
                     "--communication", "3", "--flag")
        assert result.exit_code == 0, result.output
        result = run("notifications", "list", "1")
        assert "ISSUE_FLAGGED" in result.output

    def test_notifications(self, run, project):
        run("risk", "add", "1", "Vendor delay", "--severity", "HIGH")
        result = run("notifications", "list", "1")
        assert "2 unread" in result.output
        assert "HIGH_RISK" in result.output
        assert "STATUS_CHANGE" in result.output

        assert run("notifications", "read", "1", "1").exit_code == 0
        assert "1 unread" in run("notifications", "list", "1").output
        assert "Marked 1 notification(s) read." in run("notifications", "read-all", "1").output
        assert run("notifications", "read", "2", "1").exit_code == 1

    def test_recalc_and_complete(self, run, project):
        result = run("project", "recalc", "1")
        assert result.exit_code == 0
        assert "health 66 (AT_RISK)" in result.output

        assert "marked COMPLETED" in run("project", "complete", "1").output
        assert "already COMPLETED" in run("project", "complete", "1").output
        assert "health 66 (COMPLETED)" in run("project", "recalc", "1").output

    def test_recalc_missing_project(self, run, project):
        result = run("project", "recalc", "999")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_project_list(self, run, project):
        result = run("project", "list")
        assert "Apollo" in result.output
        assert "ON_TRACK" in result.output
