"""Unit tests for the check CLI command."""

import json

import pytest
from typer.testing import CliRunner

from confcheck import __version__
from confcheck.cli import app

VALID_YAML = """\
name: billing
db:
  kind: postgres
  host: db.internal
  port: 5432
"""

INVALID_YAML = """\
db:
  kind: mysql
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory so no settings file is discovered."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write(path, content):
    path.write_text(content, encoding="utf-8")
    return path


class TestCheckCLI:
    """Test the check command."""

    def test_version(self, runner):
        """Test the version option."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_passing_document(self, runner, isolated):
        """Test a document satisfying every rule."""
        document = write(isolated / "app.yaml", VALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
            "--scheme", "yaml",
        ])
        assert result.exit_code == 0
        assert "Configuration Status: PASS" in result.stdout

    def test_violations_json(self, runner, isolated):
        """Test that violations are reported with yaml paths."""
        document = write(isolated / "app.yaml", INVALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
            "--scheme", "yaml",
            "--format", "json",
        ])
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["passed"] is False
        assert report["rules_evaluated"] == 4
        assert report["messages"] == [
            "name is mandatory",
            "db.kind is mandatory and value of db.kind must be in ['postgres', 'sqlite']",
            "db.port is mandatory",
        ]

    def test_json_scheme(self, runner, isolated):
        """Test reading keys and naming fields with json tags."""
        document = write(isolated / "app.json", json.dumps({"database": {"kind": "sqlite", "port": 0}}))
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
            "--format", "json",
        ])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["messages"] == ["appName is mandatory"]

    def test_pydantic_model(self, runner, isolated):
        """Test a pydantic model document."""
        document = write(isolated / "service.json", json.dumps({"server": {"maxConnections": 0}, "mode": "idle"}))
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:ServiceModel",
            "--rules", "sample_app:register_service",
            "--format", "json",
        ])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["messages"] == [
            "server.listen is mandatory",
            "value of mode must be in ['active', 'passive']",
        ]

    def test_settings_file_selects_scheme(self, runner, isolated):
        """Test that the discovered settings file provides the scheme and format."""
        write(isolated / ".confcheck.json", json.dumps({
            "scheme": {"tagKey": "yaml"},
            "output": {"format": "json"},
        }))
        document = write(isolated / "app.yaml", VALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
        ])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["passed"] is True

    def test_invalid_pattern_is_warned(self, runner, isolated):
        """Test that rules failing to register are reported but not fatal."""
        document = write(isolated / "app.yaml", "name: billing\n")
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register_with_bad_pattern",
            "--scheme", "yaml",
        ])
        assert result.exit_code == 0
        assert "Rules Evaluated: 1" in result.stdout
        assert "rule not registered" in result.output

    def test_markdown_format(self, runner, isolated):
        """Test markdown output."""
        document = write(isolated / "app.yaml", INVALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
            "--scheme", "yaml",
            "--format", "markdown",
        ])
        assert result.exit_code == 1
        assert "# Configuration Report" in result.stdout
        assert "- name is mandatory" in result.stdout

    def test_missing_document(self, runner, isolated):
        """Test that a missing document is a usage error."""
        result = runner.invoke(app, [
            "check", str(isolated / "missing.yaml"),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
        ])
        assert result.exit_code == 2

    def test_bad_model_spec(self, runner, isolated):
        """Test that an unimportable model is a usage error."""
        document = write(isolated / "app.yaml", VALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:Missing",
            "--rules", "sample_app:register",
        ])
        assert result.exit_code == 2

    @pytest.mark.parametrize("option,value", [
        ("--format", "xml"),
        ("--scheme", "toml"),
        ("--log-level", "loud"),
    ])
    def test_invalid_options(self, runner, isolated, option, value):
        """Test that invalid option values are rejected."""
        document = write(isolated / "app.yaml", VALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
            option, value,
        ])
        assert result.exit_code == 2

    def test_undecodable_document(self, runner, isolated):
        """Test that a document that is not UTF-8 is a loading error."""
        document = isolated / "app.yaml"
        document.write_bytes(b"name: \xff\xfe\n")
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
        ])
        assert result.exit_code == 2
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_missing_settings_file(self, runner, isolated):
        """Test that an explicit settings path must exist."""
        document = write(isolated / "app.yaml", VALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register",
            "--settings", str(isolated / "missing.json"),
        ])
        assert result.exit_code == 2
        assert "Settings file not found" in result.stdout

    def test_rules_returning_non_iterable(self, runner, isolated):
        """Test that an unexpected return value from the rules is ignored."""
        document = write(isolated / "app.yaml", VALID_YAML)
        result = runner.invoke(app, [
            "check", str(document),
            "--model", "sample_app:AppConfig",
            "--rules", "sample_app:register_returning_flag",
            "--scheme", "yaml",
            "--format", "json",
        ])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["rules_evaluated"] == 1
