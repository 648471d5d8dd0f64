"""Tests for the command line."""

import pytest
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every command from an empty folder so no .env is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("DATA_ROOT", "OUTPUT_ROOT", "PROJECTS_ROOT", "TEMPLATE_PATH", "EXPORT_FORMAT"):
        monkeypatch.delenv(f"ANALYST_KIT_{name}", raising=False)
    return tmp_path


class TestPeriodCommands:
    """Test period and quarter lookups."""

    def test_period(self):
        result = runner.invoke(app, ["period", "2025_Q1"])

        assert result.exit_code == 0
        assert "2025-01-01" in result.output
        assert "2025-03-31" in result.output

    def test_invalid_period(self):
        result = runner.invoke(app, ["period", "2025-Q1"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_quarter(self):
        result = runner.invoke(app, ["quarter", "3/15/2025", "45839", "nope"])

        assert result.exit_code == 0
        assert "2025 Q1" in result.output
        assert "2025 Q3" in result.output
        assert "unparsed" in result.output


class TestFolderCommands:
    """Test folder creation commands."""

    def test_setup_folders(self, tmp_path):
        result = runner.invoke(
            app,
            ["setup-folders", "2025_01", "--data-root", str(tmp_path / "d"), "--output-root", str(tmp_path / "o")],
        )

        assert result.exit_code == 0
        assert (tmp_path / "d" / "2025_01" / "raw").is_dir()
        assert (tmp_path / "o" / "2025_01").is_dir()

    def test_setup_folders_uses_configured_roots(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ANALYST_KIT_DATA_ROOT", str(tmp_path / "env_data"))

        result = runner.invoke(app, ["setup-folders", "2025_Q2"])

        assert result.exit_code == 0
        assert (tmp_path / "env_data" / "2025_Q2" / "processed").is_dir()
        assert (tmp_path / "output" / "2025_Q2").is_dir()

    def test_run_folder(self, tmp_path):
        result = runner.invoke(
            app,
            ["run-folder", "2025_Q1", "--run-date", "2025-09-23", "--data-root", str(tmp_path / "d")],
        )

        assert result.exit_code == 0
        assert (tmp_path / "d" / "2025_Q1" / "processed" / "2025-09-23").is_dir()

    def test_run_folder_bad_date(self, tmp_path):
        result = runner.invoke(app, ["run-folder", "2025_Q1", "--run-date", "23/09/2025"])

        assert result.exit_code != 0
        assert not (tmp_path / "data").exists()


class TestNewProject:
    """Test the scaffolding command."""

    def test_new_project(self, tmp_path):
        result = runner.invoke(app, ["new-project", "r_1.2_demo", "--base", str(tmp_path / "projects")])

        assert result.exit_code == 0
        assert (tmp_path / "projects" / "r_1.2_demo" / "code" / "r_1.2_demo.py").is_file()

    def test_new_project_existing_folder(self, tmp_path):
        (tmp_path / "r_1.2_demo").mkdir()
        result = runner.invoke(app, ["new-project", "r_1.2_demo", "--base", str(tmp_path)])

        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_new_project_missing_template(self, tmp_path):
        result = runner.invoke(
            app,
            ["new-project", "r_1.2_demo", "--base", str(tmp_path), "--template", str(tmp_path / "none.py")],
        )

        assert result.exit_code == 1
        assert "Template not found" in result.output

    def test_new_project_from_parts(self, tmp_path):
        result = runner.invoke(
            app,
            [
                "new-project", "--state", "MS", "--project", "mdcps", "--commitment", "1.3.a",
                "-d", "Suspension period analysis", "--base", str(tmp_path),
            ],
        )

        assert result.exit_code == 0
        script = tmp_path / "ms-mdcps-1-3-a" / "code" / "1_3_a.py"
        assert script.is_file()
        assert 'commitment_description = "Suspension period analysis"' in script.read_text(encoding="utf-8")

    @pytest.mark.parametrize(
        "args",
        [
            ["new-project"],
            ["new-project", "--state", "ms", "--project", "mdcps"],
            ["new-project", "r_1.2_demo", "--state", "ms", "--project", "mdcps", "--commitment", "1.3.a"],
        ],
    )
    def test_new_project_needs_name_or_all_parts(self, tmp_path, args):
        """Test that NAME and the naming parts are mutually exclusive and one is required."""
        result = runner.invoke(app, [*args, "--base", str(tmp_path / "projects")])

        assert result.exit_code != 0
        assert not (tmp_path / "projects").exists()


class TestFindCommand:
    """Test the file preview command."""

    def test_find_previews_rows(self, tmp_path):
        raw = tmp_path / "data" / "2025_Q1" / "raw"
        raw.mkdir(parents=True)
        (raw / "children.csv").write_text("id,name\n1,Ana\n2,Ben\n", encoding="utf-8")

        result = runner.invoke(app, ["find", "child", "--folder-date", "2025_Q1"])

        assert result.exit_code == 0
        assert "Ana" in result.output
        assert "Ben" in result.output

    def test_find_missing_file(self):
        result = runner.invoke(app, ["find", "child", "--folder-date", "2025_Q1"])

        assert result.exit_code == 1
        assert "No file with keyword" in result.output


class TestDoctor:
    """Test the diagnostics commands."""

    def test_doctor_run(self):
        result = runner.invoke(app, ["doctor", "run"])

        assert result.exit_code == 0
        assert "XLSX engine" in result.output
        assert "Starter template" in result.output

    def test_set_config_writes_user_env(self, tmp_path):
        projects = tmp_path / "projects"
        result = runner.invoke(app, ["doctor", "set-config"], input=f"{projects}\n\ncsv\n")

        assert result.exit_code == 0
        env_text = (tmp_path / "config" / "analyst-kit" / ".env").read_text(encoding="utf-8")
        assert f"ANALYST_KIT_PROJECTS_ROOT={projects}" in env_text
        assert "ANALYST_KIT_EXPORT_FORMAT=csv" in env_text
        assert "ANALYST_KIT_TEMPLATE_PATH" not in env_text
