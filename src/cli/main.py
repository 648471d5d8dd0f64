"""analyst-kit command line.

Thin layer over the core helpers: parse options, call the helper, render the
result with Rich. Domain errors are printed and exit with code 1.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from adapters.scaffold import create_project, create_project_from_parts, project_folder_name
from cli import doctor
from cli.ui_components import (
    build_folders_table,
    build_frame_table,
    build_period_table,
    build_quarter_table,
    build_scaffold_panel,
    print_banner,
    print_error,
)
from core.config import AppSettings
from core.dates import date_to_reporting_quarter, parse_date_value
from core.domain.enums import DirectoryType, FileType
from core.logging_config import setup_logging
from core.periods import InvalidFolderDateError, parse_folder_date
from core.services.session import AnalysisSession, SessionError

app = typer.Typer(
    no_args_is_help=True,
    help="Scaffold analysis projects, set up period folders and inspect data files.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()

# Errors the helpers raise for bad input or missing files.
_DOMAIN_ERRORS = (InvalidFolderDateError, SessionError, FileNotFoundError, ValueError, KeyError)


def _parse_run_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter(f"run date must look like YYYY-MM-DD, got {value!r}") from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level)


@app.command(name="new-project")
def new_project(
    name: Optional[str] = typer.Argument(None, help="Project folder name, e.g. r_2.9.a_mic_review."),
    state: Optional[str] = typer.Option(None, "--state", help="State abbreviation, e.g. ms (with --project/--commitment)."),
    project: Optional[str] = typer.Option(None, "--project", help="Project name, e.g. mdcps."),
    commitment: Optional[str] = typer.Option(None, "--commitment", help="Commitment id, e.g. 1.3.a."),
    description: str = typer.Option("", "--description", "-d", help="Commitment description for the script."),
    base: Optional[Path] = typer.Option(None, "--base", help="Parent folder (default: configured projects root or cwd)."),
    template: Optional[Path] = typer.Option(None, "--template", help="Starter-script template to copy."),
) -> None:
    """Create a new analysis project folder with a starter script.

    Either pass NAME, or --state, --project and --commitment to get a
    <state>-<project>-<commitment> folder (e.g. ms-mdcps-1-3-a).
    """

    parts = (state, project, commitment)
    if name is not None and any(parts):
        raise typer.BadParameter("pass either NAME or --state/--project/--commitment, not both")
    if name is None and not all(parts):
        raise typer.BadParameter("pass NAME, or all of --state, --project and --commitment")

    settings = AppSettings()
    print_banner(_console)
    base_path = base or settings.projects_root or Path.cwd()
    try:
        if name is not None:
            result = create_project(base_path, name, template, settings=settings, commitment_description=description)
            target = base_path / name
        else:
            result = create_project_from_parts(
                base_path,
                state,
                project,
                commitment,
                commitment_description=description,
                template_path=template,
                settings=settings,
            )
            target = base_path / project_folder_name(state, project, commitment)
    except _DOMAIN_ERRORS as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc

    if result is None:
        _console.print(f"[yellow]Folder already exists:[/yellow] {target}")
        return
    _console.print(build_scaffold_panel(result))


@app.command()
def period(folder_date: str = typer.Argument(..., help="e.g. 2025_Q1, 2025_01 or 2025_CY.")) -> None:
    """Show the reporting period behind a folder date."""

    try:
        info = parse_folder_date(folder_date)
    except _DOMAIN_ERRORS as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    _console.print(build_period_table(info))


@app.command()
def quarter(values: List[str] = typer.Argument(..., help="Dates in any supported format.")) -> None:
    """Reporting quarter (YYYY Q#) of each date."""

    rows = []
    for raw in values:
        parsed = parse_date_value(raw)
        rows.append((raw, parsed, date_to_reporting_quarter(parsed)))
    _console.print(build_quarter_table(rows))


@app.command(name="setup-folders")
def setup_folders_command(
    folder_date: str = typer.Argument(..., help="e.g. 2025_Q1, 2025_01 or 2025_CY."),
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Default: configured data root."),
    output_root: Optional[Path] = typer.Option(None, "--output-root", help="Default: configured output root."),
) -> None:
    """Create data/<period>/{raw,processed} and output/<period>."""

    session = AnalysisSession(data_root=data_root, output_root=output_root)
    try:
        folders = session.setup_folders(folder_date)
    except _DOMAIN_ERRORS as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    _console.print(build_folders_table(folders))


@app.command(name="run-folder")
def run_folder(
    folder_date: str = typer.Argument(..., help="e.g. 2025_Q1."),
    run_date: Optional[str] = typer.Option(None, "--run-date", help="YYYY-MM-DD (default: today)."),
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Default: configured data root."),
) -> None:
    """Create data/<period>/processed/<run date> for today's exports."""

    day = _parse_run_date(run_date)
    session = AnalysisSession(data_root=data_root)
    try:
        parse_folder_date(folder_date)
        folder = session.make_data_run_folder(folder_date, run_date=day)
    except _DOMAIN_ERRORS as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    _console.print(f"[green]Run folder:[/green] {folder}")


@app.command()
def find(
    keyword: str = typer.Argument(..., help="Case-insensitive regex matched against file names."),
    folder_date: str = typer.Option(..., "--folder-date", "-f", help="Period whose folders are searched."),
    directory_type: DirectoryType = typer.Option(DirectoryType.RAW, "--dir", help="raw or processed."),
    file_type: FileType = typer.Option(FileType.CSV, "--type", help="csv or excel."),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Excel sheet (default: first)."),
    skip: int = typer.Option(0, "--skip", min=0, help="Leading rows to skip."),
    rows: int = typer.Option(5, "--rows", min=0, help="Rows to preview."),
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Default: configured data root."),
) -> None:
    """Find a file by keyword in a period folder and preview it."""

    session = AnalysisSession(data_root=data_root)
    try:
        session.setup_folders(folder_date)
        df = session.find_file(keyword, directory_type, file_type, sheet_name=sheet, skip=skip)
    except _DOMAIN_ERRORS as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    _console.print(build_frame_table(df, rows=rows))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
