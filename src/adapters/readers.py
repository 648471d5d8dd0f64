"""Concrete table readers (CSV, Excel, JSON) backed by pandas."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pandas as pd
from pandas.api.types import is_object_dtype, is_string_dtype

from core.dates import to_date_safe
from core.interfaces import TableReader

logger = logging.getLogger(__name__)

_MDY_RE = r"^[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}$"

# Column type names accepted in ``col_types`` (long names and one-letter
# shorthands as used by readr).
_CSV_TYPES: dict[str, Any] = {
    "character": str,
    "text": str,
    "c": str,
    "numeric": float,
    "double": float,
    "n": float,
    "d": float,
    "integer": "Int64",
    "i": "Int64",
    "logical": "boolean",
    "l": "boolean",
}
_DATE_TYPES = {"date", "D"}


def _csv_dtypes(col_types: Mapping[str, str]) -> tuple[dict[str, Any], list[str]]:
    dtypes: dict[str, Any] = {}
    date_cols: list[str] = []
    for column, type_name in col_types.items():
        key = type_name if type_name in _DATE_TYPES else str(type_name).strip().lower()
        if key in _DATE_TYPES:
            dtypes[column] = str
            date_cols.append(column)
        elif key in _CSV_TYPES:
            dtypes[column] = _CSV_TYPES[key]
        else:
            raise ValueError(
                f"Unsupported column type {type_name!r} for {column!r}; "
                f"use one of: {', '.join(sorted(_CSV_TYPES) + ['date'])}."
            )
    return dtypes, date_cols


def mdy_like_columns(df: pd.DataFrame, skip: Iterable[str] = ()) -> list[str]:
    """Text columns whose non-missing values all look like ``M/D/YYYY``."""

    skipped = set(skip)
    out: list[str] = []
    for col in df.columns:
        if col in skipped:
            continue
        series = df[col]
        if not (is_object_dtype(series) or is_string_dtype(series)):
            continue
        values = series.dropna()
        if values.empty or not all(isinstance(v, str) for v in values):
            continue
        if values.str.match(_MDY_RE).all():
            out.append(col)
    return out


class CsvReader:
    """CSV reader with optional column types and M/D/YYYY auto-detection."""

    suffixes: tuple[str, ...] = (".csv",)

    def read(
        self,
        path: Path,
        *,
        skip: int = 0,
        col_types: Mapping[str, str] | None = None,
        detect_dates: bool = True,
        **_: Any,
    ) -> pd.DataFrame:
        dtypes, date_cols = _csv_dtypes(col_types or {})
        df = pd.read_csv(path, skiprows=skip or None, dtype=dtypes or None)

        for col in date_cols:
            if col in df.columns:
                df[col] = to_date_safe(df[col])

        if detect_dates:
            detected = mdy_like_columns(df, skip=dtypes.keys())
            if detected:
                logger.info("Auto-parsing these columns as dates: %s", ", ".join(map(str, detected)))
                for col in detected:
                    df[col] = to_date_safe(df[col])
        return df


class ExcelReader:
    """Excel reader; ``text_columns`` are forced to text after reading."""

    suffixes: tuple[str, ...] = (".xlsx", ".xlsm", ".xls")

    def read(
        self,
        path: Path,
        *,
        sheet_name: str | int | None = None,
        text_columns: Iterable[str] | None = None,
        skip: int = 0,
        **_: Any,
    ) -> pd.DataFrame:
        df = pd.read_excel(
            path,
            sheet_name=0 if sheet_name is None else sheet_name,
            skiprows=skip or None,
        )
        for col in text_columns or ():
            if col not in df.columns:
                logger.warning("Column %s not found; cannot force to text.", col)
                continue
            df[col] = df[col].map(lambda v: v if pd.isna(v) else str(v)).astype(object)
        return df


class JsonReader:
    suffixes: tuple[str, ...] = (".json",)

    def read(self, path: Path, **_: Any) -> pd.DataFrame:
        return pd.read_json(path)


_READERS: tuple[TableReader, ...] = (CsvReader(), ExcelReader(), JsonReader())


def reader_for_path(path: Path) -> TableReader:
    """Pick the reader for a file by its (case-insensitive) suffix."""

    suffix = Path(path).suffix.lower()
    for reader in _READERS:
        if suffix in reader.suffixes:
            return reader
    raise ValueError(f"Unsupported file type for file: {path}")


def read_table(path: Path, **options: Any) -> pd.DataFrame:
    return reader_for_path(path).read(Path(path), **options)
