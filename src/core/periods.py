"""Reporting periods derived from folder date tokens.

A folder date names the period a data/output sub-folder belongs to:
``2025_Q1`` (quarter), ``2025_01`` (month) or ``2025_CY`` (calendar year).
"""

from __future__ import annotations

import calendar
import re
from datetime import date

from core.domain.models import PeriodInfo

_QUARTER_RE = re.compile(r"^([1-9][0-9]{3})_Q([1-4])$")
_MONTH_RE = re.compile(r"^([1-9][0-9]{3})_(0[1-9]|1[0-2])$")
_YEAR_RE = re.compile(r"^([1-9][0-9]{3})_CY$")


class InvalidFolderDateError(ValueError):
    """Raised when a folder date token matches none of the supported formats."""

    def __init__(self, folder_date: object) -> None:
        super().__init__(
            f"Invalid folder date {folder_date!r}: must be in the format "
            "'YYYY_QX' (e.g., '2024_Q2'), 'YYYY_MM' (e.g., '2024_04'), "
            "or 'YYYY_CY' (e.g., '2024_CY')."
        )
        self.folder_date = folder_date


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def normalize_folder_date(folder_date: object) -> str:
    return str(folder_date).strip().upper()


def parse_folder_date(folder_date: object) -> PeriodInfo:
    """Resolve a folder date token into its period boundaries and labels."""

    token = normalize_folder_date(folder_date)

    match = _QUARTER_RE.match(token)
    if match:
        year, quarter = int(match.group(1)), int(match.group(2))
        first_month = (quarter - 1) * 3 + 1
        readable = f"{year:04d} Q{quarter}"
        return PeriodInfo(
            folder_date=token,
            period_start=date(year, first_month, 1),
            period_end=_month_end(year, first_month + 2),
            cy_start=date(year, 1, 1),
            folder_date_readable=readable,
            folder_date_quarter=readable,
        )

    match = _MONTH_RE.match(token)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        quarter = (month - 1) // 3 + 1
        return PeriodInfo(
            folder_date=token,
            period_start=date(year, month, 1),
            period_end=_month_end(year, month),
            cy_start=date(year, 1, 1),
            folder_date_readable=f"{year:04d} {month:02d}",
            folder_date_quarter=f"{year:04d} Q{quarter}",
        )

    match = _YEAR_RE.match(token)
    if match:
        year = int(match.group(1))
        return PeriodInfo(
            folder_date=token,
            period_start=date(year, 1, 1),
            period_end=date(year, 12, 31),
            cy_start=date(year, 1, 1),
            folder_date_readable=f"{year:04d} CY",
            folder_date_quarter=None,
        )

    raise InvalidFolderDateError(folder_date)
