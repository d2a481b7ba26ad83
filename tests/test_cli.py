"""Tests for the budgetplan command line."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from budgetplan.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("BUDGETPLAN_TOKEN", raising=False)
    return tmp_path / "config" / "budgetplan" / "config.toml"


class TestInit:
    """Tests for the init command."""

    def test_creates_config(self, isolated_config: Path) -> None:
        """Should write the config file once."""
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert isolated_config.exists()

    def test_refuses_overwrite(self, isolated_config: Path) -> None:
        """Should need --force when a config exists."""
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert runner.invoke(app, ["init", "--force"]).exit_code == 0


class TestConfig:
    """Tests for the config command."""

    def test_shows_settings(self, isolated_config: Path) -> None:
        """Should print the effective settings."""
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "strict_amounts" in result.output

    def test_bad_strict_amounts(self, fake_api, isolated_config: Path) -> None:
        """Should exit with a config error instead of reading "false" as true."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text('strict_amounts = "false"\n', encoding="utf-8")

        result = runner.invoke(app, ["show", "--year", "2025"])

        assert result.exit_code == 1
        assert "Could not read config" in result.output
        assert fake_api.fetches == []


class TestShow:
    """Tests for the show command."""

    def test_show_year(self, fake_api) -> None:
        """Should fetch and render the requested year."""
        result = runner.invoke(app, ["show", "--year", "2025"])
        assert result.exit_code == 0
        assert fake_api.fetches == [2025]

    def test_show_api_down(self, fake_api) -> None:
        """Should exit with an error when the API is unreachable."""
        fake_api.fail.add("fetch")
        result = runner.invoke(app, ["show", "--year", "2025"])
        assert result.exit_code == 1


class TestSet:
    """Tests for the set command."""

    def test_set_and_save(self, fake_api) -> None:
        """Should set the cell, print totals and save."""
        result = runner.invoke(app, ["set", "Eventos", "1", "1,000", "--year", "2025"])

        assert result.exit_code == 0
        assert "Neto anual" in result.output
        assert fake_api.saves[0]["projections"][0] == {"categoryId": 1, "month": 1, "projectedAmount": 1000.0}

    def test_month_name(self, fake_api) -> None:
        """Should accept a month name."""
        result = runner.invoke(app, ["set", "nómina", "marzo", "50", "--year", "2025"])
        assert result.exit_code == 0
        assert {"categoryId": 3, "month": 3, "projectedAmount": 50.0} in fake_api.saves[0]["projections"]

    def test_no_save(self, fake_api) -> None:
        """Should leave the server alone with --no-save."""
        result = runner.invoke(app, ["set", "Eventos", "1", "10", "--year", "2025", "--no-save"])
        assert result.exit_code == 0
        assert fake_api.saves == []

    def test_coerced_value_reported(self, fake_api) -> None:
        """Should warn when the value was not a number."""
        result = runner.invoke(app, ["set", "Eventos", "2", "abc", "--year", "2025", "--no-save"])
        assert result.exit_code == 0
        assert "not a number" in result.output

    def test_unknown_category(self, fake_api) -> None:
        """Should exit when the category does not exist."""
        result = runner.invoke(app, ["set", "Fuentes", "1", "10", "--year", "2025"])
        assert result.exit_code == 1
        assert fake_api.saves == []

    def test_invalid_month(self, fake_api) -> None:
        """Should exit before contacting the API."""
        result = runner.invoke(app, ["set", "Eventos", "13", "10", "--year", "2025"])
        assert result.exit_code == 1
        assert fake_api.fetches == []

    def test_save_failure(self, fake_api) -> None:
        """Should exit with an error when the save fails."""
        fake_api.fail.add("save")
        result = runner.invoke(app, ["set", "Eventos", "1", "10", "--year", "2025"])
        assert result.exit_code == 1


class TestEdit:
    """Tests for the interactive edit command."""

    def test_edit_save_quit(self, fake_api) -> None:
        """Should edit a cell, save and quit."""
        result = runner.invoke(app, ["edit", "--year", "2025"], input="Eventos\n1\n2000\ns\nq\n")

        assert result.exit_code == 0
        assert fake_api.saves[0]["projections"][0]["projectedAmount"] == 2000.0

    def test_quit_with_unsaved_changes(self, fake_api) -> None:
        """Should ask before discarding edits."""
        result = runner.invoke(app, ["edit", "--year", "2025"], input="Eventos\n1\n2000\nq\ny\n")

        assert result.exit_code == 0
        assert "Discard unsaved changes?" in result.output
        assert fake_api.saves == []


    def test_conflict_suggests_reload(self, fake_api) -> None:
        """Should point to a reload instead of another save after a conflict."""
        fake_api.conflict = True
        result = runner.invoke(app, ["edit", "--year", "2025"], input="Eventos\n1\n2000\ns\nq\ny\n")

        assert result.exit_code == 0
        assert "Reload with 'y'" in result.output
        assert "try again with 's'" not in result.output


class TestImport:
    """Tests for the import command."""

    def test_import_confirmed(self, fake_api, budget_csv: Path) -> None:
        """Should upload after --yes and show the refreshed matrix."""
        result = runner.invoke(app, ["import", str(budget_csv), "--year", "2025", "--yes"])

        assert result.exit_code == 0
        assert fake_api.uploads == [("presupuesto.csv", 2025)]
        assert fake_api.fetches == [2025, 2025]

    def test_import_declined(self, fake_api, budget_csv: Path) -> None:
        """Should not upload when the user says no."""
        result = runner.invoke(app, ["import", str(budget_csv), "--year", "2025"], input="n\n")

        assert result.exit_code == 0
        assert "Import cancelled" in result.output
        assert fake_api.uploads == []

    def test_wrong_file_type(self, fake_api, tmp_path: Path) -> None:
        """Should reject non-CSV files."""
        path = tmp_path / "budget.txt"
        path.write_text("hello", encoding="utf-8")

        result = runner.invoke(app, ["import", str(path), "--year", "2025", "--yes"])

        assert result.exit_code == 1
        assert fake_api.uploads == []
        assert fake_api.fetches == []

    def test_wrong_file_type_with_api_down(self, fake_api, tmp_path: Path) -> None:
        """Should report the file problem, not the unreachable API."""
        path = tmp_path / "budget.txt"
        path.write_text("hello", encoding="utf-8")
        fake_api.fail.add("fetch")

        result = runner.invoke(app, ["import", str(path), "--year", "2025", "--yes"])

        assert result.exit_code == 1
        assert "valid CSV file" in result.output
        assert fake_api.fetches == []

    def test_server_rejects(self, fake_api, budget_csv: Path) -> None:
        """Should exit with an error when the server rejects the file."""
        fake_api.fail.add("import")
        result = runner.invoke(app, ["import", str(budget_csv), "--year", "2025", "--yes"])
        assert result.exit_code == 1


class TestExport:
    """Tests for the export command."""

    def test_export_to_directory(self, fake_api, tmp_path: Path) -> None:
        """Should write presupuesto_<year>.csv into the output directory."""
        out = tmp_path / "exports"
        result = runner.invoke(app, ["export", "--year", "2025", "--output", str(out)])

        assert result.exit_code == 0
        assert (out / "presupuesto_2025.csv").read_text(encoding="utf-8") == fake_api.export_text
        assert fake_api.fetches == []

    def test_export_failure(self, fake_api, tmp_path: Path) -> None:
        """Should exit with an error when the download fails."""
        fake_api.fail.add("export")
        result = runner.invoke(app, ["export", "--year", "2025", "--output", str(tmp_path)])
        assert result.exit_code == 1
