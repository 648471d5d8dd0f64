"""Derived analysis fields: length of stay and reporting years.

Both helpers return a new DataFrame with the extra columns and log a short
diagnostic summary. Consider renaming the generic output columns for the
dataset at hand, e.g.::

    df = calculate_los(df, "removal_date", "discharge_date").rename(
        columns={"los_days": "removal_los_days"}
    )
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from core.dates import to_date_safe
from core.domain.models import LosSummary, YearSummary

logger = logging.getLogger(__name__)

LOS_COLUMNS = ("los_days", "los_months", "los_years")
YEAR_COLUMNS = ("event_cy", "event_sfy", "event_ffy")


def _require_columns(df: pd.DataFrame, *columns: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Column(s) not found: {', '.join(missing)}")


def _is_plain_numeric(series: pd.Series) -> bool:
    return is_numeric_dtype(series) and not is_bool_dtype(series)


def _as_dates(series: pd.Series) -> pd.Series:
    # One resolution for every column so arithmetic never overflows past 2262.
    return to_date_safe(series).dt.as_unit("s")


def _whole_months(start: pd.Timestamp, end: pd.Timestamp) -> int:
    delta = relativedelta(end.date(), start.date())
    return delta.years * 12 + delta.months


def calculate_los(
    df: pd.DataFrame,
    start_col: str,
    end_col: str,
    censor_col: str | None = None,
) -> pd.DataFrame:
    """Add ``los_days``, ``los_months`` and ``los_years`` between two dates.

    When the end date is missing and ``censor_col`` names an existing column,
    the censor date stands in for the end. LOS is missing when either date is
    missing or the start falls after the end. Two numeric columns are simply
    subtracted into ``los_days``.
    """

    _require_columns(df, start_col, end_col)
    out = df.copy()
    days_col, months_col, years_col = LOS_COLUMNS

    use_censor = censor_col is not None and censor_col in out.columns
    if censor_col is not None and not use_censor:
        logger.warning("Censor column %r not found; ignoring it.", censor_col)

    if _is_plain_numeric(out[start_col]) and _is_plain_numeric(out[end_col]):
        start = out[start_col].astype(float)
        end = out[end_col].astype(float)
        if use_censor and _is_plain_numeric(out[censor_col]):
            end = end.fillna(out[censor_col].astype(float))
        valid = start.notna() & end.notna() & (start <= end)
        days = np.trunc(end - start).where(valid)
        out[days_col] = days.astype("Int64")
        out[months_col] = pd.Series(pd.NA, index=out.index, dtype="Int64")
        out[years_col] = pd.Series(pd.NA, index=out.index, dtype="Int64")
    else:
        start = _as_dates(out[start_col])
        end = _as_dates(out[end_col])
        out[start_col] = start
        out[end_col] = end

        effective_end = end
        if use_censor:
            censor = _as_dates(out[censor_col])
            out[censor_col] = censor
            effective_end = end.where(end.notna(), censor)

        valid = (start.notna() & effective_end.notna() & (start <= effective_end)).fillna(False)
        out[days_col] = (effective_end - start).dt.days.where(valid).astype("Int64")

        months = [
            _whole_months(s, e) if ok else pd.NA
            for s, e, ok in zip(start, effective_end, valid)
        ]
        months_series = pd.Series(months, index=out.index, dtype="Int64")
        out[months_col] = months_series
        out[years_col] = months_series // 12

    summary = summarize_los(out, start_col, end_col, censor_col if use_censor else None)
    _log_los_summary(summary)
    return out


def summarize_los(
    df: pd.DataFrame,
    start_col: str,
    end_col: str,
    censor_col: str | None = None,
) -> LosSummary:
    """Diagnostics for a frame that already went through ``calculate_los``."""

    _require_columns(df, start_col, end_col, LOS_COLUMNS[0])
    start, end = df[start_col], df[end_col]

    censor_used = None
    if censor_col is not None and censor_col in df.columns:
        censor_used = int((start.notna() & end.isna() & df[censor_col].notna()).sum())

    los = df[LOS_COLUMNS[0]].dropna()
    stats: dict[str, float | None] = {"min": None, "max": None, "mean": None, "median": None}
    if not los.empty:
        values = los.astype(float)
        stats = {
            "min": float(values.min()),
            "max": float(values.max()),
            "mean": float(values.mean()),
            "median": float(values.median()),
        }

    return LosSummary(
        start_without_end=int((start.notna() & end.isna()).sum()),
        end_without_start=int((start.isna() & end.notna()).sum()),
        both_missing=int((start.isna() & end.isna()).sum()),
        start_after_end=int((start > end).fillna(False).sum()),
        los_missing=int(df[LOS_COLUMNS[0]].isna().sum()),
        censor_used=censor_used,
        min_days=stats["min"],
        max_days=stats["max"],
        mean_days=stats["mean"],
        median_days=stats["median"],
    )


def _log_los_summary(summary: LosSummary) -> None:
    logger.info(
        "Records with start date but missing end date (NA unless a censor date was provided): %d",
        summary.start_without_end,
    )
    logger.info("Records with end date but missing start date (NA): %d", summary.end_without_start)
    logger.info("Records missing both dates (NA): %d", summary.both_missing)
    logger.info("Records where start date is > end date (NA): %d", summary.start_after_end)
    logger.info("Records where LOS couldn't be calculated: %d", summary.los_missing)
    if summary.censor_used is None:
        logger.info("Censor date not provided or not used for any records.")
    else:
        logger.info("Records where LOS was calculated using the censor date: %d", summary.censor_used)
    if summary.min_days is not None:
        logger.info(
            "LOS in days: min %s, max %s, mean %.2f, median %s",
            summary.min_days,
            summary.max_days,
            summary.mean_days,
            summary.median_days,
        )


def calculate_year(df: pd.DataFrame, date_col: str) -> pd.DataFrame:
    """Tag the calendar, state fiscal and federal fiscal year of a date.

    * ``event_cy``: January to December.
    * ``event_sfy``: July to June, named after the year it ends in.
    * ``event_ffy``: October to September, named after the year it ends in.

    Missing dates leave all three missing.
    """

    _require_columns(df, date_col)
    out = df.copy()

    dates = to_date_safe(out[date_col])
    year = dates.dt.year.astype("Int64")
    month = dates.dt.month.astype("Int64")

    out["event_cy"] = year
    out["event_sfy"] = year + (month >= 7).astype("Int64")
    out["event_ffy"] = year + (month >= 10).astype("Int64")

    summary = summarize_years(out, date_col)
    logger.info("Records with event date missing (NA): %d", summary.missing_dates)
    logger.info("Records per calendar year: %s", summary.calendar_years)
    logger.info("Records per state fiscal year: %s", summary.state_fiscal_years)
    logger.info("Records per federal fiscal year: %s", summary.federal_fiscal_years)
    return out


def _value_counts(series: pd.Series) -> dict[str, int]:
    counts = series.value_counts(dropna=False)
    out: dict[str, int] = {}
    for key, count in counts.items():
        label = "NA" if pd.isna(key) else str(int(key))
        out[label] = int(count)
    return dict(sorted(out.items()))


def summarize_years(df: pd.DataFrame, date_col: str) -> YearSummary:
    """Counts per year column for a frame that went through ``calculate_year``."""

    _require_columns(df, date_col, *YEAR_COLUMNS)
    return YearSummary(
        missing_dates=int(to_date_safe(df[date_col]).isna().sum()),
        calendar_years=_value_counts(df["event_cy"]),
        state_fiscal_years=_value_counts(df["event_sfy"]),
        federal_fiscal_years=_value_counts(df["event_ffy"]),
    )
