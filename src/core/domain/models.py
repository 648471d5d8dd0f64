"""Domain models (Pydantic v2).

Why here:
- Describe *what* a reporting period, a project layout or a summary is, not
  how it is computed or written to disk.
- The CLI renders them and tests assert on them without touching pandas.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class PeriodInfo(BaseModel):
    """A reporting period derived from a folder date token."""

    model_config = ConfigDict(frozen=True)

    folder_date: str = Field(
        ...,
        min_length=7,
        description="Normalised token, e.g. '2025_Q1', '2025_01' or '2025_CY'.",
    )
    period_start: date = Field(..., description="First day of the period.")
    period_end: date = Field(..., description="Last day of the period (inclusive).")
    cy_start: date = Field(..., description="January 1 of the period's year.")
    folder_date_readable: str = Field(
        ...,
        description="Human label, e.g. '2025 Q1', '2025 01' or '2025 CY'.",
    )
    folder_date_quarter: str | None = Field(
        default=None,
        description="Quarter label 'YYYY Q#'; None for calendar-year periods.",
    )

    @property
    def year(self) -> int:
        return self.cy_start.year


class ProjectFolders(BaseModel):
    """Paths and period values established for one reporting period."""

    folder_data: Path = Field(..., description="Project data root (e.g. 'data').")
    folder_date: str = Field(..., description="Normalised folder date token.")
    reporting_period_start: date
    reporting_period_end: date
    folder_date_readable: str
    folder_date_quarter: str | None = None
    cy_start: date
    folder_raw: Path = Field(..., description="data/<folder_date>/raw")
    folder_processed: Path = Field(..., description="data/<folder_date>/processed")
    folder_output: Path = Field(..., description="output/<folder_date>")


class LosSummary(BaseModel):
    """Diagnostics gathered while computing length of stay."""

    start_without_end: int = 0
    end_without_start: int = 0
    both_missing: int = 0
    start_after_end: int = 0
    los_missing: int = 0
    censor_used: int | None = Field(
        default=None,
        description="Records whose LOS used the censor date; None when no censor column.",
    )
    min_days: float | None = None
    max_days: float | None = None
    mean_days: float | None = None
    median_days: float | None = None


class YearSummary(BaseModel):
    """Record counts per calendar, state fiscal and federal fiscal year."""

    missing_dates: int = 0
    calendar_years: dict[str, int] = Field(default_factory=dict)
    state_fiscal_years: dict[str, int] = Field(default_factory=dict)
    federal_fiscal_years: dict[str, int] = Field(default_factory=dict)


class ScaffoldResult(BaseModel):
    """Paths created by the project scaffolder."""

    project_path: Path
    code_folder: Path
    data_folder: Path
    output_folder: Path
    docs_folder: Path
    script_path: Path
    gitignore_path: Path
    commitment: str = Field(
        default="",
        description="Commitment id, e.g. '1.3.a' (may be empty).",
    )
    commitment_description: str = Field(
        default="",
        description="Human-readable description written into the starter script.",
    )
