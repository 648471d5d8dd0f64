"""Doctor command for environment diagnostics."""

from __future__ import annotations

import importlib.util
import os
import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.scaffold import build_template_context, render_template
from core.config import AppSettings, write_user_env_vars
from core.domain.enums import ExportFormat
from core.resources_loader import resolve_template_path

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_xlsx_engine() -> tuple[bool, str]:
    if importlib.util.find_spec("openpyxl") is None:
        return False, "openpyxl is not installed; XLSX export will fail"
    return True, "openpyxl available"


def _check_template(settings: AppSettings) -> tuple[bool, str]:
    """Resolve the starter template and, for jinja2 templates, try a render."""

    try:
        path = resolve_template_path(settings=settings)
    except FileNotFoundError as exc:
        return False, str(exc)
    if path.suffix != ".j2":
        return True, f"{path} (plain template, patched on copy)"
    try:
        render_template(path, build_template_context("doctor", Path("doctor"), "0.0"))
    except Exception as exc:
        return False, f"{path}: {exc}"
    return True, str(path)


def _check_writable(path: Path) -> tuple[bool, str]:
    """A root is usable when it exists and is writable, or its parent is."""

    target = path if path.exists() else path.resolve().parent
    if not target.exists():
        return False, f"{path} (parent folder missing)"
    if not os.access(target, os.W_OK):
        return False, f"{path} (not writable)"
    try:
        with tempfile.TemporaryFile(dir=target):
            pass
    except OSError as exc:
        return False, f"{path} ({exc})"
    return True, f"{path}" + ("" if path.exists() else " (will be created)")


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="analyst-kit Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_xlsx, detail_xlsx = _check_xlsx_engine()
    table.add_row("XLSX engine", "OK" if ok_xlsx else "FAIL", detail_xlsx)

    ok_template, detail_template = _check_template(settings)
    table.add_row("Starter template", "OK" if ok_template else "FAIL", detail_template)

    for label, root in (("Data root", settings.data_root), ("Output root", settings.output_root)):
        ok_root, detail_root = _check_writable(root)
        table.add_row(label, "OK" if ok_root else "FAIL", detail_root)

    if settings.projects_root is None:
        table.add_row("Projects root", "OPTIONAL", "Not set -> new projects go to the current folder")
    else:
        ok_projects, detail_projects = _check_writable(settings.projects_root)
        table.add_row("Projects root", "OK" if ok_projects else "FAIL", detail_projects)

    table.add_row("Export format", "OK", settings.export_format.value)

    _console.print(table)

    if not ok_xlsx:
        _console.print(
            "\n[yellow]Note:[/yellow] Install openpyxl, or set ANALYST_KIT_EXPORT_FORMAT=csv."
        )


@app.command(name="set-config")
def set_config() -> None:
    """Interactive setup stored in the user config .env (no manual editing)."""

    settings = AppSettings()

    projects_root = typer.prompt(
        "Projects root (parent folder for new projects)",
        default=str(settings.projects_root or Path.cwd()),
        show_default=True,
    ).strip()
    template_path = typer.prompt(
        "Starter template (blank for the bundled one)",
        default=str(settings.template_path or ""),
        show_default=False,
    ).strip()
    export_format = typer.prompt(
        "Default export format (xlsx/csv)",
        default=settings.export_format.value,
        show_default=True,
    ).strip()

    try:
        fmt = ExportFormat.parse(export_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if template_path and not Path(template_path).is_file():
        raise typer.BadParameter(f"Template not found: {template_path}")
    if not projects_root:
        raise typer.BadParameter("projects root is required")

    env_path = write_user_env_vars(
        {
            "ANALYST_KIT_PROJECTS_ROOT": projects_root,
            "ANALYST_KIT_TEMPLATE_PATH": template_path or None,
            "ANALYST_KIT_EXPORT_FORMAT": fmt.value,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
