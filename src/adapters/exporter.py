"""Spreadsheet export (CSV and XLSX).

CSV and XLSX are infrastructure details (pandas + openpyxl); the session
service only decides *where* and *under which name* a frame is written.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from core.domain.enums import ExportFormat

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
MAX_COLUMN_WIDTH = 80

_FILENAME_FORBIDDEN_RE = re.compile(r'[/\\:*?"<>|]+')
_SHEETNAME_FORBIDDEN_RE = re.compile(r"[/\\:*?\[\]]+")
_WHITESPACE_RE = re.compile(r"\s+")


def build_export_basename(
    folder_date: str | None = None,
    commitment: str | None = None,
    commitment_description: str | None = None,
    run_date: date | None = None,
    *,
    sep: str = " - ",
    now: datetime | None = None,
) -> str:
    """File name (without extension) for an export.

    ``2025_01 - 2.9.a - MIC Manual Review - 2025-09-23``: blank parts are
    dropped, characters Windows rejects become ``-`` and whitespace is
    collapsed.
    """

    now = now or datetime.now()
    day = run_date or now.date()
    parts = [folder_date, commitment, commitment_description, day.strftime("%Y-%m-%d")]
    kept = [str(p) for p in parts if p is not None and str(p).strip()]

    name = sep.join(kept)
    name = _FILENAME_FORBIDDEN_RE.sub("-", name)
    name = _WHITESPACE_RE.sub(" ", name).strip()
    if not name:
        name = now.strftime("export-%Y%m%d-%H%M%S")
    return name


def clean_sheet_name(name: str) -> str:
    """Excel sheet names: no ``/\\:*?[]`` and at most 31 characters."""

    return _SHEETNAME_FORBIDDEN_RE.sub("-", str(name))[:MAX_SHEET_NAME_LENGTH]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, datetime) and value == datetime.combine(value.date(), datetime.min.time()):
        return value.strftime("%Y-%m-%d")
    return str(value)


def _style_sheet(ws: Worksheet, df: pd.DataFrame, header_align: str) -> None:
    font = Font(bold=True)
    alignment = Alignment(horizontal=header_align, vertical="top")
    no_border = Border()

    for index, column in enumerate(df.columns, start=1):
        cell = ws.cell(row=1, column=index)
        cell.font = font
        cell.alignment = alignment
        cell.border = no_border

        lengths = [len(str(column))]
        lengths.extend(len(_cell_text(v)) for v in df[column].tolist())
        width = min(max(lengths) + 2, MAX_COLUMN_WIDTH)
        ws.column_dimensions[get_column_letter(index)].width = width


def write_workbook(
    sheets: Mapping[str, pd.DataFrame],
    output_path: Path,
    *,
    header_align: str = "left",
) -> Path:
    """Write already-validated sheets to one workbook with styled headers."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            _style_sheet(writer.sheets[sheet_name], df, header_align)
    return output_path


def save_frame(
    df: pd.DataFrame,
    folder: Path,
    basename: str,
    *,
    ext: ExportFormat | str = ExportFormat.XLSX,
    na_rep: str = "",
    header_align: str = "left",
) -> Path:
    """Save one DataFrame as ``<folder>/<basename>.<ext>``.

    CSV is written as UTF-8 with a BOM so Excel opens accents correctly.
    """

    fmt = ExportFormat.parse(ext)
    folder.mkdir(parents=True, exist_ok=True)
    output_path = folder / f"{basename}.{fmt.value}"

    if fmt is ExportFormat.CSV:
        df.to_csv(output_path, index=False, na_rep=na_rep, encoding="utf-8-sig")
    else:
        write_workbook({"Sheet1": df}, output_path, header_align=header_align)

    logger.info("Saved: %s", output_path)
    return output_path


def validate_sheets(sheets: Any) -> dict[str, pd.DataFrame]:
    """Check a sheet mapping and return it keyed by cleaned sheet names."""

    if not isinstance(sheets, Mapping) or not sheets:
        raise ValueError("sheets must be a non-empty mapping of sheet names to DataFrames.")
    if any(not isinstance(name, str) or not name.strip() for name in sheets):
        raise ValueError("Every sheet needs a non-blank name.")
    if not all(isinstance(df, pd.DataFrame) for df in sheets.values()):
        raise TypeError("All values in sheets must be DataFrames.")

    cleaned: dict[str, pd.DataFrame] = {}
    for name, df in sheets.items():
        sheet = clean_sheet_name(name)
        if sheet in cleaned:
            raise ValueError(f"Duplicate sheet name after cleaning: {sheet!r}")
        cleaned[sheet] = df
    return cleaned


def save_workbook(
    sheets: Mapping[str, pd.DataFrame],
    folder: Path,
    basename: str,
    *,
    header_align: str = "left",
) -> Path:
    """Save a mapping of sheet name to DataFrame as one multi-sheet workbook.

    Usage::

        save_workbook(
            {"Population Details": children, "Quarter Summary": quarterly},
            folder_run,
            "2025_Q1 - 2.9.a - 2025-09-23",
        )
    """

    cleaned = validate_sheets(sheets)
    output_path = write_workbook(cleaned, folder / f"{basename}.xlsx", header_align=header_align)
    logger.info("Saved workbook with %d sheet(s): %s", len(cleaned), output_path)
    return output_path
