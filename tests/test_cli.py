"""Tests for the command-line interface."""

from datetime import datetime

import pytest
from typer.testing import CliRunner

from pgsac import __version__
from pgsac import cli
from pgsac.models.results import ExportResult, RunResult
from pgsac.utils.yaml_parser import load_yaml

runner = CliRunner()

PROJECT_YAML = """
version: 1
backend: sql
output: ./from-file
schemas: [public]
connection:
  host: file-host
  database: filedb
  user: file_user
  password: from-file
"""


class RecordingRunner:
    """ExtractRunner stand-in that records the project it receives."""

    projects = []
    success = True

    def run(self, project):
        RecordingRunner.projects.append(project)
        now = datetime.now()
        if not RecordingRunner.success:
            return RunResult(
                success=False,
                backend=project.backend,
                started_at=now,
                completed_at=now,
                error_message="error extracting tables from schema app: boom",
            )
        return RunResult(
            success=True,
            backend=project.backend,
            schemas_extracted=len(project.schemas),
            objects_extracted=3,
            export_result=ExportResult(
                output_dir=project.output,
                schemas_exported=len(project.schemas),
                files_written=[f"{project.output}/app/table/users.sql"],
                started_at=now,
                completed_at=now,
            ),
            started_at=now,
            completed_at=now,
        )


@pytest.fixture
def recording_runner(monkeypatch):
    RecordingRunner.projects = []
    RecordingRunner.success = True
    monkeypatch.setattr(cli, "ExtractRunner", RecordingRunner)
    monkeypatch.delenv("PGPASSWORD", raising=False)
    return RecordingRunner


@pytest.fixture
def project_file(tmp_path):
    path = tmp_path / "pgsac.yaml"
    path.write_text(PROJECT_YAML, encoding="utf-8")
    return path


class TestVersion:
    def test_version(self):
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert f"pgsac version {__version__}" in result.output


class TestExtractCommand:
    """Test `pgsac extract`."""

    def test_flags_only(self, recording_runner):
        result = runner.invoke(
            cli.app,
            ["extract", "--dbname", "appdb", "--user", "reader", "--schemas", "public, app", "--output", "out"],
        )

        assert result.exit_code == 0, result.output
        project = recording_runner.projects[0]
        assert project.connection.database == "appdb"
        assert project.schemas == ["public", "app"]
        assert project.output == "out"
        assert "Extraction succeeded!" in result.output
        assert "Objects extracted: 3" in result.output

    def test_flags_override_project_file(self, recording_runner, project_file):
        result = runner.invoke(
            cli.app,
            [
                "extract",
                str(project_file),
                "--host",
                "flag-host",
                "--backend",
                "psql",
                "--extended",
                "--no-disambiguate",
            ],
        )

        assert result.exit_code == 0, result.output
        project = recording_runner.projects[0]
        assert project.connection.host == "flag-host"
        assert project.connection.database == "filedb"
        assert project.connection.password == "from-file"
        assert project.backend == "psql"
        assert project.psql.extended is True
        assert project.disambiguate_overloads is False
        assert project.output == "./from-file"

    def test_password_defaults_to_pgpassword(self, recording_runner, monkeypatch):
        monkeypatch.setenv("PGPASSWORD", "from-env")

        result = runner.invoke(cli.app, ["extract", "-d", "appdb", "-U", "reader"])

        assert result.exit_code == 0, result.output
        assert recording_runner.projects[0].connection.password == "from-env"

    def test_password_flag_wins(self, recording_runner, monkeypatch):
        monkeypatch.setenv("PGPASSWORD", "from-env")

        runner.invoke(cli.app, ["extract", "-d", "appdb", "-U", "reader", "--password", "from-flag"])

        assert recording_runner.projects[0].connection.password == "from-flag"

    def test_missing_database_is_validation_error(self, recording_runner):
        result = runner.invoke(cli.app, ["extract", "--user", "reader"])

        assert result.exit_code == 1
        assert recording_runner.projects == []

    def test_failed_run_exits_1(self, recording_runner):
        recording_runner.success = False

        result = runner.invoke(cli.app, ["extract", "-d", "appdb", "-U", "reader"])

        assert result.exit_code == 1
        assert "Extraction failed!" in result.output
        assert "boom" in result.output


class TestValidateCommand:
    """Test `pgsac validate`."""

    def test_valid_project(self, project_file):
        result = runner.invoke(cli.app, ["validate", str(project_file)])

        assert result.exit_code == 0
        assert "Project is valid!" in result.output
        assert "file_user@file-host:5432/filedb" in result.output
        assert "Password: set" in result.output
        assert "from-file" not in result.output.replace("./from-file", "")

    def test_invalid_project(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("backend: odbc\nconnection: {database: appdb, user: reader}\n", encoding="utf-8")

        result = runner.invoke(cli.app, ["validate", str(path)])

        assert result.exit_code == 1


class TestInitCommand:
    """Test `pgsac init`."""

    def test_creates_template(self, tmp_path):
        path = tmp_path / "pgsac.yaml"

        result = runner.invoke(cli.app, ["init", "appdb", "--output", str(path)])

        assert result.exit_code == 0
        data = load_yaml(path)
        assert data["connection"]["database"] == "appdb"
        assert data["backend"] == "sql"

    def test_refuses_to_overwrite(self, project_file):
        result = runner.invoke(cli.app, ["init", "appdb", "--output", str(project_file)])

        assert result.exit_code == 1
        assert "file_user" in project_file.read_text(encoding="utf-8")

    def test_force_overwrites(self, project_file):
        result = runner.invoke(cli.app, ["init", "appdb", "--output", str(project_file), "--force"])

        assert result.exit_code == 0
        assert load_yaml(project_file)["connection"]["database"] == "appdb"
