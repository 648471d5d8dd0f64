"""Locate input files by keyword or pattern and read them into DataFrames.

Usage::

    df = find_file(
        "BASE",
        raw_dir=folders.folder_raw,
        processed_dir=folders.folder_processed,
        file_type="excel",
        sheet_name="Sheet1",
        col_types={"EBP_Reason": "character"},
    )
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

import pandas as pd

from adapters.readers import CsvReader, ExcelReader, read_table
from core.domain.enums import DirectoryType, FileType

logger = logging.getLogger(__name__)


def is_office_lock_file(path: Path) -> bool:
    """Office leaves ``~$name.xlsx`` lock files next to open workbooks."""

    return "~$" in Path(path).name


def list_candidate_files(directory: Path, file_type: FileType | str) -> list[Path]:
    """Files of ``file_type`` directly inside ``directory`` (no recursion), sorted."""

    kind = FileType.parse(file_type)
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Folder does not exist: {directory}")
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in kind.suffixes() and not is_office_lock_file(p)
    )


def _most_recent(paths: Sequence[Path]) -> Path:
    # max() keeps the first of equal mtimes, so ties resolve alphabetically.
    return max(paths, key=lambda p: p.stat().st_mtime)


def locate_file(
    keyword: str,
    directory: Path,
    *,
    file_type: FileType | str = FileType.CSV,
    directory_label: str | None = None,
) -> Path:
    """Return the file in ``directory`` whose name matches ``keyword``.

    ``keyword`` is a case-insensitive regular expression searched in the file
    name. With several matches, the most recently modified file wins.
    """

    candidates = list_candidate_files(directory, file_type)
    pattern = re.compile(keyword, flags=re.IGNORECASE)
    matches = [p for p in candidates if pattern.search(p.name)]

    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        selected = _most_recent(matches)
        logger.info(
            "Multiple matches; using most recently modified: %s. All matches: %s",
            selected.name,
            ", ".join(p.name for p in matches),
        )
        return selected

    label = directory_label or str(directory)
    raise FileNotFoundError(f"No file with keyword '{keyword}' found in {label} folder.")


def find_file(
    keyword: str,
    raw_dir: Path | None,
    processed_dir: Path | None,
    directory_type: DirectoryType | str = DirectoryType.RAW,
    file_type: FileType | str = FileType.CSV,
    sheet_name: str | int | None = None,
    col_types: Mapping[str, str] | None = None,
    skip: int = 0,
) -> pd.DataFrame:
    """Find a CSV or Excel file by keyword in the raw or processed folder and read it.

    Args:
        keyword: Regular expression matched (case-insensitively) against file names.
        raw_dir: The period's ``raw`` folder.
        processed_dir: The period's ``processed`` folder.
        directory_type: ``"raw"`` (default) or ``"processed"``.
        file_type: ``"csv"`` (default) or ``"excel"`` (``.xlsx``/``.xlsm``).
        sheet_name: Excel sheet to read; the first sheet when omitted.
        col_types: For CSV, column name to type name (``character``,
            ``numeric``, ``integer``, ``logical``, ``date``). For Excel, the
            named columns are forced to text.
        skip: Leading rows to skip.

    Raises:
        ValueError: unknown ``directory_type`` / ``file_type``, or folders not set.
        FileNotFoundError: no file name matches ``keyword``.
    """

    where = DirectoryType.parse(directory_type)
    kind = FileType.parse(file_type)
    if raw_dir is None or processed_dir is None:
        raise ValueError("Raw and/or processed folders are not defined; set up the period folders first.")

    directory = Path(raw_dir if where is DirectoryType.RAW else processed_dir)
    path = locate_file(keyword, directory, file_type=kind, directory_label=where.value)
    logger.info("Reading: %s", path.name)

    if kind is FileType.EXCEL:
        return ExcelReader().read(
            path,
            sheet_name=sheet_name,
            text_columns=list(col_types or ()),
            skip=skip,
        )
    return CsvReader().read(path, skip=skip, col_types=col_types)


def get_subfolder_path(base_path: Path, folder_date: str) -> Path:
    """Find the period sub-folder for ``folder_date`` and return its ``raw`` folder.

    ``2023_q1`` matches sub-folders named ``2023_q1``, ``2023 Q1``, ``2023q1``,
    ``q1_2023`` or ``Q1 2023`` (case-insensitive).
    """

    text = str(folder_date)
    year = text.split("_", 1)[0]
    quarter = text.rsplit("_", 1)[-1]
    pattern = re.compile(
        rf"^({re.escape(year)}[ _]?{re.escape(quarter)}|{re.escape(quarter)}[ _]?{re.escape(year)})$",
        flags=re.IGNORECASE,
    )

    base = Path(base_path)
    subfolders = sorted(p.name for p in base.iterdir() if p.is_dir()) if base.is_dir() else []
    matching = [name for name in subfolders if pattern.match(name)]

    if not matching:
        raise FileNotFoundError(f"No matching folder found for: {folder_date}")
    if len(matching) > 1:
        logger.warning("Multiple folders match the date pattern. Using the first: %s", matching[0])

    return base / matching[0] / "raw"


def get_and_read_files(folder: Path, patterns: Sequence[str]) -> dict[str, pd.DataFrame]:
    """Read the first file matching each regex pattern.

    Returns ``{"df1": ..., "df2": ...}`` in pattern order. Supported files:
    ``.csv``, ``.xlsx``, ``.xls`` and ``.json``.

    Example::

        frames = get_and_read_files(
            Path("data/2024_Q1"),
            [r"_expanded_population_details\\.csv$", r"_placements_expanded_2\\.csv$"],
        )
        custody_df = frames["df1"]
    """

    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(f"Folder does not exist: {folder}")
    names = sorted(p.name for p in folder.iterdir() if p.is_file())

    frames: dict[str, pd.DataFrame] = {}
    for index, pattern in enumerate(patterns, start=1):
        regex = re.compile(pattern)
        matching = [name for name in names if regex.search(name)]
        if not matching:
            raise FileNotFoundError(f"No matching file found for pattern: {pattern}")
        if len(matching) > 1:
            logger.warning(
                "Multiple matching files found for pattern: %s. The first one will be used: %s",
                pattern,
                matching[0],
            )
        frames[f"df{index}"] = read_table(folder / matching[0])
    return frames
