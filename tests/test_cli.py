"""Tests for the schemaorder CLI."""

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from schemaorder._cli.main import app

SCHEMA_TOML = """
[[new_tables]]
name = "purchase"
primary_key = ["id"]
columns = [
    { name = "id", type = "integer" },
    { name = "customer_id", type = "integer" },
    { name = "buyer_id", type = "integer" },
]
foreign_keys = [
    { local_columns = ["customer_id"], foreign_table = "customer", foreign_columns = ["id"] },
    { local_columns = ["buyer_id"], foreign_table = "account", foreign_columns = ["id"] },
]

[[new_tables]]
name = "customer"
primary_key = ["id"]
columns = [{ name = "id", type = "integer" }]

[[removed_tables]]
name = "legacy"
"""

runner = CliRunner()


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A working directory with a schema file and a config-less pyproject.toml."""
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'app'\n")
    (tmp_path / "schema.toml").write_text(SCHEMA_TOML)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestOrderCommand:
    def test_exports_order(self, project_dir: Path) -> None:
        output = project_dir / "order.toml"

        result = runner.invoke(app, ["order", "schema.toml", "-o", str(output)])

        assert result.exit_code == 0, result.output
        with output.open("rb") as f:
            assert tomllib.load(f) == {"order": ["customer", "purchase"]}

    def test_schema_path_from_config(self, project_dir: Path) -> None:
        (project_dir / "pyproject.toml").write_text('[tool.schemaorder]\nschema = "schema.toml"\n')
        output = project_dir / "order.toml"

        result = runner.invoke(app, ["order", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_missing_schema_path(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["order"])

        assert result.exit_code == 1
        assert "Schema file required" in result.output

    def test_missing_file(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["order", str(project_dir / "nope.toml")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_schema(self, project_dir: Path) -> None:
        (project_dir / "bad.toml").write_text('[[new_tables]]\ncolumns = "x"\n')

        result = runner.invoke(app, ["order", "bad.toml"])

        assert result.exit_code == 1
        assert "Invalid schema diff" in result.output

    def test_weight_options_are_validated(self, project_dir: Path) -> None:
        (project_dir / "pyproject.toml").write_text("[tool.schemaorder]\nhard_weight = 1\nsoft_weight = 0\n")

        result = runner.invoke(app, ["order", "schema.toml", "--hard-weight", "2", "--soft-weight", "3"])

        assert result.exit_code == 1
        assert "Soft weight (3) must not exceed hard weight (2)" in result.output

    def test_invalid_config(self, project_dir: Path) -> None:
        (project_dir / "pyproject.toml").write_text('[tool.schemaorder]\nplatform = "oracle"\n')

        result = runner.invoke(app, ["order", "schema.toml"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestSqlCommand:
    def test_writes_sql_file(self, project_dir: Path) -> None:
        output = project_dir / "out.sql"

        result = runner.invoke(app, ["sql", "schema.toml", "--platform", "postgresql", "-o", str(output)])

        assert result.exit_code == 0, result.output
        statements = output.read_text().splitlines()
        assert statements[0].startswith("CREATE TABLE customer ")
        assert statements[1].startswith("CREATE TABLE purchase ")
        assert statements[-1] == "DROP TABLE legacy;"

    def test_save_mode(self, project_dir: Path) -> None:
        output = project_dir / "out.sql"

        result = runner.invoke(app, ["sql", "schema.toml", "--save", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "DROP" not in output.read_text()

    def test_prints_to_stdout(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["sql", "schema.toml", "--platform", "sqlite"])

        assert result.exit_code == 0, result.output
        assert "CREATE TABLE customer (id INTEGER NOT NULL, PRIMARY KEY (id));" in result.output

    def test_platform_from_config(self, project_dir: Path) -> None:
        (project_dir / "pyproject.toml").write_text('[tool.schemaorder]\nplatform = "sqlite"\noutput = "out.sql"\n')

        result = runner.invoke(app, ["sql", "schema.toml"])

        assert result.exit_code == 0, result.output
        # sqlite inlines foreign keys instead of altering tables
        assert "ALTER TABLE" not in (project_dir / "out.sql").read_text()

    def test_unknown_platform(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["sql", "schema.toml", "--platform", "oracle"])

        assert result.exit_code == 1
        assert "Unknown platform" in result.output

    def test_soft_weight_above_hard_weight(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["sql", "schema.toml", "--soft-weight", "5"])

        assert result.exit_code == 1
        assert "must not exceed hard weight" in result.output


class TestCheckCommand:
    def test_reports_external_references(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["check", "schema.toml"])

        assert result.exit_code == 0, result.output
        assert "account" in result.output
        assert "Schema diff is valid" in result.output
