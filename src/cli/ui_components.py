"""Rich UI components for the CLI.

Why here:
- Keeps rich rendering out of ``core`` and ``adapters``.
- Commands only decide what to show; tables and panels are built here.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

import pandas as pd
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import PeriodInfo, ProjectFolders, ScaffoldResult


def print_banner(console: Console) -> None:
    """Print the welcome banner (interactive commands only)."""

    title = Text("analyst-kit", style="bold cyan")
    subtitle = Text("Project scaffolding • Period folders • Data helpers", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_error(console: Console, exc: BaseException) -> None:
    console.print(Text.assemble(("Error: ", "bold red"), str(exc)))


def build_period_table(period: PeriodInfo) -> Table:
    table = Table(title=f"Period {period.folder_date}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Readable", period.folder_date_readable)
    table.add_row("Quarter", period.folder_date_quarter or "-")
    table.add_row("Period start", period.period_start.isoformat())
    table.add_row("Period end", period.period_end.isoformat())
    table.add_row("CY start", period.cy_start.isoformat())
    return table


def build_folders_table(folders: ProjectFolders) -> Table:
    table = Table(title=f"Folders for {folders.folder_date}")
    table.add_column("Folder", style="cyan", no_wrap=True)
    table.add_column("Path", style="magenta")
    table.add_row("Data", str(folders.folder_data))
    table.add_row("Raw", str(folders.folder_raw))
    table.add_row("Processed", str(folders.folder_processed))
    table.add_row("Output", str(folders.folder_output))
    return table


def build_quarter_table(rows: Iterable[tuple[str, date | None, str | None]]) -> Table:
    table = Table(title="Reporting quarters")
    table.add_column("Input", style="white")
    table.add_column("Date", style="cyan")
    table.add_column("Quarter", style="green")
    for raw, parsed, quarter in rows:
        table.add_row(
            raw,
            parsed.isoformat() if parsed else Text("unparsed", style="red"),
            quarter or "-",
        )
    return table


def build_scaffold_panel(result: ScaffoldResult) -> Panel:
    body = Text()
    body.append("Project: ", style="bold")
    body.append(f"{result.project_path}\n")
    body.append("Script:  ", style="bold")
    body.append(f"{result.script_path}\n")
    body.append("Commitment: ", style="bold")
    body.append(result.commitment or "-")
    if result.commitment_description:
        body.append(f"\nDescription: {result.commitment_description}")
    return Panel(body, title=Text("Project created", style="bold green"), border_style="green")


def build_frame_table(df: pd.DataFrame, rows: int = 5, title: str | None = None) -> Table:
    """Preview of the first ``rows`` rows of a DataFrame."""

    table = Table(title=title or f"{len(df)} rows × {len(df.columns)} columns")
    for column in df.columns:
        table.add_column(str(column), overflow="fold")
    for record in df.head(rows).itertuples(index=False):
        table.add_row(*(_cell(v) for v in record))
    return table


def _cell(value: object) -> str:
    if value is None or value is pd.NaT or value is pd.NA:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value)
