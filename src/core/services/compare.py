"""Compare which IDs are present in two data frames."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Union

import pandas as pd

from adapters.exporter import validate_sheets, write_workbook

logger = logging.getLogger(__name__)

# A metric filter is a boolean-mask callable or a ``DataFrame.query`` string.
MetricFilter = Union[Callable[[pd.DataFrame], "pd.Series"], str]


def _as_list(id_cols: str | Sequence[str]) -> list[str]:
    return [id_cols] if isinstance(id_cols, str) else list(id_cols)


def compare_files(
    df1: pd.DataFrame,
    df2: pd.DataFrame,
    id_cols: str | Sequence[str],
    df1_label: str = "df1",
    df2_label: str = "df2",
) -> pd.DataFrame:
    """One row per distinct ID with ``in_<df1_label>``, ``in_<df2_label>`` and ``in_both``."""

    keys = _as_list(id_cols)
    col1, col2 = f"in_{df1_label}", f"in_{df2_label}"
    if col1 == col2:
        raise ValueError("df1_label and df2_label must differ.")

    pres1 = df1[keys].drop_duplicates().assign(**{col1: True})
    pres2 = df2[keys].drop_duplicates().assign(**{col2: True})

    cmp = pres1.merge(pres2, on=keys, how="outer")
    cmp[col1] = cmp[col1].eq(True)
    cmp[col2] = cmp[col2].eq(True)
    cmp["in_both"] = cmp[col1] & cmp[col2]
    return cmp.sort_values(keys).reset_index(drop=True)


def _apply_filter(df: pd.DataFrame, metric_filter: MetricFilter) -> pd.DataFrame:
    if isinstance(metric_filter, str):
        return df.query(metric_filter)
    if callable(metric_filter):
        return df[metric_filter(df)]
    raise TypeError("Metric filters must be callables returning a boolean mask or query strings.")


def compare_metrics(
    df1: pd.DataFrame,
    df2: pd.DataFrame,
    id_cols: str | Sequence[str],
    metrics: Mapping[str, MetricFilter],
    df1_label: str = "df1",
    df2_label: str = "df2",
) -> tuple[dict[str, pd.DataFrame], pd.DataFrame]:
    """Per-metric comparisons plus a summary of counts per metric."""

    keys = _as_list(id_cols)
    base1 = df1.drop_duplicates(subset=keys, keep="first")
    base2 = df2.drop_duplicates(subset=keys, keep="first")
    col1, col2 = f"in_{df1_label}", f"in_{df2_label}"

    sheets: dict[str, pd.DataFrame] = {}
    rows: list[dict[str, object]] = []
    for metric_name, metric_filter in metrics.items():
        cmp = compare_files(
            _apply_filter(base1, metric_filter),
            _apply_filter(base2, metric_filter),
            keys,
            df1_label,
            df2_label,
        )
        sheets[metric_name] = cmp
        rows.append({"metric": metric_name, col1: int(cmp[col1].sum()), col2: int(cmp[col2].sum())})

    summary = pd.DataFrame(rows, columns=["metric", col1, col2])
    return sheets, summary


def write_comparisons(
    df1: pd.DataFrame,
    df2: pd.DataFrame,
    id_cols: str | Sequence[str],
    metrics: Mapping[str, MetricFilter],
    out_path: Path | str,
    df1_label: str = "df1",
    df2_label: str = "df2",
) -> pd.DataFrame:
    """Write one comparison sheet per metric to ``out_path`` and return the summary.

    Example::

        summary = write_comparisons(
            ours, theirs, ["child_id"],
            {"entries": "entry_flag == 1", "exits": lambda d: d["exit_date"].notna()},
            "output/2025_Q1/comparison.xlsx",
            df1_label="ours", df2_label="state",
        )
    """

    sheets, summary = compare_metrics(df1, df2, id_cols, metrics, df1_label, df2_label)
    path = write_workbook(validate_sheets(sheets), Path(out_path))
    logger.info("Saved comparison workbook: %s", path)
    return summary
