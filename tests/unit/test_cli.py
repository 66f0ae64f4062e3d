"""Tests for CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from sdlbake._version import _source_version, get_version
from sdlbake.cli import app


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_project(tmp_path: Path, monkeypatch):
    """Create a temporary project with schema files, bindings and a config file."""
    schema_dir = tmp_path / "schema"
    schema_dir.mkdir()
    (schema_dir / "query.graphql").write_text(
        """
type Query {
  hero: Hero
}
"""
    )
    (schema_dir / "hero.graphql").write_text(
        """
type Hero {
  name: String!
}

type Query {
  heroes: [Hero!]!
}
"""
    )

    resolvers = tmp_path / "app" / "resolvers"
    resolvers.mkdir(parents=True)
    (resolvers / "Query.py").write_text(
        """
def hero(obj, info):
    return {"name": "Ada"}
"""
    )

    (tmp_path / "sdlbake.toml").write_text(
        """
[generate]
schema = ["schema"]
out = "app/schema_gen.py"

[bindings]
resolvers = "app/resolvers"
"""
    )

    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_generate_command(cli_runner: CliRunner, test_project: Path):
    """Test generate command with a discovered config file."""
    result = cli_runner.invoke(app, ["generate"])

    assert result.exit_code == 0, result.output
    assert "Wrote" in result.stdout
    content = (test_project / "app" / "schema_gen.py").read_text()
    assert "from resolvers.Query import hero" in content


def test_generate_dry_run(cli_runner: CliRunner, test_project: Path):
    """Test that a dry run prints the module without writing it."""
    result = cli_runner.invoke(app, ["generate", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "# Code generated by sdlbake. DO NOT EDIT." in result.stdout
    assert not (test_project / "app" / "schema_gen.py").exists()


def test_generate_options_override_config(cli_runner: CliRunner, test_project: Path):
    """Test that command line options win over the config file."""
    result = cli_runner.invoke(
        app, ["generate", "--out", "gen/schema.py", "--split-types", "--import-root", "."]
    )

    assert result.exit_code == 0, result.output
    schema_source = (test_project / "gen" / "schema.py").read_text()
    assert "from app.resolvers.Query import hero" in schema_source
    assert (test_project / "gen" / "types_gen.py").exists()


def test_generate_without_schema(cli_runner: CliRunner, tmp_path: Path, monkeypatch):
    """Test generate command exits with an error when nothing is found."""
    monkeypatch.chdir(tmp_path)

    result = cli_runner.invoke(app, ["generate", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "No schema files found" in result.output


def test_generate_invalid_schema(cli_runner: CliRunner, test_project: Path):
    """Test that validation errors are listed."""
    (test_project / "schema" / "broken.graphql").write_text("type Broken { x: Missing }\n")

    result = cli_runner.invoke(app, ["generate"])

    assert result.exit_code == 1
    assert "Schema is invalid" in result.output
    assert "Missing" in result.output


def test_merge_command(cli_runner: CliRunner, test_project: Path):
    """Test merge command prints one merged SDL document."""
    result = cli_runner.invoke(app, ["merge", "schema"])

    assert result.exit_code == 0, result.output
    assert result.stdout.count("type Query") == 1
    assert "heroes: [Hero!]!" in result.stdout


def test_merge_command_to_file(cli_runner: CliRunner, test_project: Path):
    """Test merge command writes the merged SDL with --out."""
    result = cli_runner.invoke(app, ["merge", "schema", "--out", "merged.graphql"])

    assert result.exit_code == 0, result.output
    assert "type Hero" in (test_project / "merged.graphql").read_text()


def test_version(cli_runner: CliRunner):
    """Test --version prints version information."""
    result = cli_runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"sdlbake {get_version()}" in result.stdout
    assert "graphql-core" in result.stdout


def test_version_from_source_checkout(tmp_path: Path):
    """Test the pyproject fallback only trusts sdlbake's own project table."""
    ours = tmp_path / "pyproject.toml"
    ours.write_text('[project]\nname = "sdlbake"\nversion = "9.1.0"\n')
    other = tmp_path / "other.toml"
    other.write_text('[project]\nname = "app"\nversion = "1.0.0"\n')

    assert _source_version(ours) == "9.1.0"
    assert _source_version(other) is None
    assert _source_version(tmp_path / "missing.toml") is None
