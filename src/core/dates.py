"""Date coercion helpers for columns read in as text or numbers.

Typical inputs: ``"10/06/2025"``, ``"2025-10-06"``, ``"2025-10-06 14:22:00"``
or ``"45743"`` (an Excel serial, even when stored as text). All of them end
up as proper dates.

Usage::

    for col in ("custody_end", "narr_date", "case_begin_date"):
        df[col] = to_date_safe(df[col])
"""

from __future__ import annotations

import logging
import math
import numbers
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from typing import Any

import numpy as np
import pandas as pd
from pandas.api.types import (
    is_datetime64_any_dtype,
    is_list_like,
    is_object_dtype,
    is_string_dtype,
)

logger = logging.getLogger(__name__)

EXCEL_EPOCH = date(1899, 12, 30)
# 9999-12-31, the last day Excel can represent.
MAX_EXCEL_SERIAL = 2_958_465

_SERIAL_RE = re.compile(r"^[0-9][0-9,.]*$")
_ISO_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_TIMESTAMP_RE = re.compile(r"^([0-9]{4}-[0-9]{2}-[0-9]{2})[ T]([0-9]{2}:[0-9]{2}(?::[0-9]{2})?)$")
_MDY_RE = re.compile(r"^[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}$")
_MDY_SHORT_RE = re.compile(r"^[0-9]{1,2}/[0-9]{1,2}/[0-9]{2}$")
_COMPACT_RE = re.compile(r"^[0-9]{8}$")


def _strptime(text: str, fmt: str) -> date | None:
    try:
        return datetime.strptime(text, fmt).date()
    except ValueError:
        return None


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def excel_serial_to_date(serial: float) -> date | None:
    """Convert an Excel serial day number (1900 system) to a date.

    Fractional parts (times of day) are dropped. Values that cannot be Excel
    serials return None.
    """

    if serial is None or math.isnan(serial) or not 0 <= serial <= MAX_EXCEL_SERIAL:
        return None
    return EXCEL_EPOCH + timedelta(days=math.floor(serial))


def _parse_text(text: str) -> date | None:
    # 1) Excel serial written as text ("45,688", "45688.0")
    if _SERIAL_RE.match(text):
        try:
            serial = float(text.replace(",", ""))
        except ValueError:
            serial = None
        if serial is not None:
            parsed = excel_serial_to_date(serial)
            if parsed is not None:
                return parsed

    # 2) ISO
    if _ISO_RE.match(text):
        return _strptime(text, "%Y-%m-%d")

    # 3) Timestamp, keep the date part
    match = _TIMESTAMP_RE.match(text)
    if match:
        day, clock = match.groups()
        fmt = "%Y-%m-%d %H:%M:%S" if clock.count(":") == 2 else "%Y-%m-%d %H:%M"
        return _strptime(f"{day} {clock}", fmt)

    # 4) M/D/YYYY
    if _MDY_RE.match(text):
        return _strptime(text, "%m/%d/%Y")

    # 5) M/D/YY
    if _MDY_SHORT_RE.match(text):
        return _strptime(text, "%m/%d/%y")

    # 6) YYYYMMDD
    if _COMPACT_RE.match(text):
        return _strptime(text, "%Y%m%d")

    return None


def parse_date_value(value: Any) -> date | None:
    """Parse one value into a ``date``; None when it is missing or unrecognised."""

    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, np.datetime64):
        return pd.Timestamp(value).date()
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, numbers.Real):
        return excel_serial_to_date(float(value))

    text = str(value).strip()
    if not text:
        return None
    return _parse_text(text)


def dates_to_series(days: Iterable[date | None], index: Any = None, name: Any = None) -> pd.Series:
    """Build a ``datetime64[s]`` Series from dates (None becomes ``NaT``).

    Second resolution covers years 1 to 9999, so open-ended sentinels such as
    9999-12-31 survive where nanosecond timestamps stop at 2262.
    """

    values = np.array(
        [np.datetime64("NaT") if day is None else np.datetime64(day, "D") for day in days],
        dtype="datetime64[s]",
    )
    return pd.Series(values, index=index, name=name)


def to_date_safe(values: Any) -> Any:
    """Coerce values to dates unless they already are dates.

    List-likes (including Series) return a ``datetime64`` Series aligned with
    the input; unparseable entries become ``NaT``. Series that already hold
    datetimes are returned untouched. A scalar returns ``date | None``.
    """

    if not is_list_like(values) or isinstance(values, (str, bytes)):
        return parse_date_value(values)

    series = values if isinstance(values, pd.Series) else pd.Series(list(values))
    if is_datetime64_any_dtype(series):
        return series
    if isinstance(series.dtype, pd.CategoricalDtype):
        series = series.astype(object)

    parsed = [parse_date_value(value) for value in series.tolist()]
    return dates_to_series(parsed, index=series.index, name=series.name)


def _quarter_label(day: date) -> str:
    return f"{day.year:04d} Q{(day.month - 1) // 3 + 1}"


def date_to_reporting_quarter(value: Any) -> Any:
    """Reporting quarter label ``"YYYY Q#"`` for a date.

    Examples::

        date_to_reporting_quarter(date(2025, 3, 15))  # "2025 Q1"
        date_to_reporting_quarter(date(2025, 7, 1))   # "2025 Q3"

    Missing values give None. A Series (or list) gives a Series of labels.
    """

    if is_list_like(value) and not isinstance(value, (str, bytes)):
        dates = to_date_safe(value)
        return dates.map(lambda ts: None if pd.isna(ts) else _quarter_label(ts)).astype(object)

    day = parse_date_value(value)
    if day is None:
        return None
    return _quarter_label(day)


def _is_text_column(series: pd.Series) -> bool:
    return is_object_dtype(series) or is_string_dtype(series)


def _convert_frame(
    df: pd.DataFrame,
    *,
    exclude: set[str],
    max_length_threshold: int,
    parse_threshold: float,
) -> pd.DataFrame:
    out = df.copy()
    converted: list[str] = []

    for col in out.columns:
        if col in exclude:
            continue
        data = out[col]

        if is_datetime64_any_dtype(data):
            if isinstance(data.dtype, pd.DatetimeTZDtype):
                data = data.dt.tz_convert("UTC").dt.tz_localize(None)
            out[col] = data.dt.normalize()
            converted.append(str(col))
            continue

        if not _is_text_column(data):
            continue

        trimmed = data.map(lambda v: v.strip() if isinstance(v, str) else v)
        out[col] = trimmed
        non_missing = trimmed.dropna()
        if non_missing.empty:
            continue
        if non_missing.astype(str).str.len().max() > max_length_threshold:
            continue

        parsed = dates_to_series(
            [_strptime(v, "%Y-%m-%d") if isinstance(v, str) and _ISO_RE.match(v) else None for v in trimmed],
            index=trimmed.index,
            name=trimmed.name,
        )
        parsed_count = int(parsed.notna().sum())
        ratio = parsed_count / len(non_missing)
        if parsed_count > 0 and ratio >= parse_threshold:
            out[col] = parsed
            converted.append(str(col))

    if converted:
        logger.debug("Converted to dates: %s", ", ".join(converted))
    return out


def convert_dates(
    frames: pd.DataFrame | Mapping[str, pd.DataFrame],
    exclude: Iterable[str] = (),
    max_length_threshold: int = 30,
    parse_threshold: float = 0.8,
) -> pd.DataFrame | dict[str, pd.DataFrame]:
    """Convert datetime columns to dates and parse short ISO text columns.

    A text column is converted only when its longest value is at most
    ``max_length_threshold`` characters and at least ``parse_threshold`` of
    its non-missing values parse as ``YYYY-MM-DD``. Columns in ``exclude``
    are left alone.

    Pass one DataFrame to get one back, or a mapping of name to DataFrame to
    get a new dict with the same keys. Inputs are never modified.

    Example::

        frames = convert_dates(
            {"custody": custody_df, "placements": placements_df},
            exclude=["updateon"],
            max_length_threshold=40,
            parse_threshold=0.9,
        )
    """

    excluded = set(exclude)
    options = {
        "exclude": excluded,
        "max_length_threshold": max_length_threshold,
        "parse_threshold": parse_threshold,
    }

    if isinstance(frames, pd.DataFrame):
        return _convert_frame(frames, **options)

    if not isinstance(frames, Mapping):
        raise TypeError("frames must be a DataFrame or a mapping of names to DataFrames.")
    bad = [name for name, df in frames.items() if not isinstance(df, pd.DataFrame)]
    if bad:
        raise TypeError(f"All frames must be DataFrames; not DataFrames: {', '.join(map(str, bad))}")

    return {name: _convert_frame(df, **options) for name, df in frames.items()}
