"""Analysis session: period folders, run folders and exports.

An ``AnalysisSession`` carries what an interactive script would otherwise
keep in global variables (folder date, commitment, run folder), and hands
it to the folder, finder and exporter helpers.

Usage::

    session = AnalysisSession(commitment="2.9.a", commitment_description="MIC Manual Review")
    session.setup_folders("2025_Q1")
    data_df = session.find_file("my file", file_type="excel")
    session.save(data_df)  # data/2025_Q1/processed/<today>/2025_Q1 - 2.9.a - ... .xlsx
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from adapters import exporter, file_finder
from core.config import AppSettings
from core.dates import convert_dates
from core.domain.enums import DirectoryType, ExportFormat, FileType
from core.domain.models import PeriodInfo, ProjectFolders
from core.periods import normalize_folder_date, parse_folder_date

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    """Raised when a session step runs before the steps it depends on."""


def setup_folders(
    folder_date: str,
    data_root: Path | str = "data",
    output_root: Path | str = "output",
) -> ProjectFolders:
    """Create the period folders and return their paths and period values.

    Creates (idempotently)::

        <data_root>/<FOLDER_DATE>/raw
        <data_root>/<FOLDER_DATE>/processed
        <output_root>/<FOLDER_DATE>
    """

    period = parse_folder_date(folder_date)
    folder_data = Path(data_root)
    folders = ProjectFolders(
        folder_data=folder_data,
        folder_date=period.folder_date,
        reporting_period_start=period.period_start,
        reporting_period_end=period.period_end,
        folder_date_readable=period.folder_date_readable,
        folder_date_quarter=period.folder_date_quarter,
        cy_start=period.cy_start,
        folder_raw=folder_data / period.folder_date / "raw",
        folder_processed=folder_data / period.folder_date / "processed",
        folder_output=Path(output_root) / period.folder_date,
    )

    for path in (folders.folder_data, folders.folder_output, folders.folder_raw, folders.folder_processed):
        path.mkdir(parents=True, exist_ok=True)

    logger.debug("Period folders ready for %s", period.folder_date)
    return folders


def make_data_run_folder(
    folder_date: str | None,
    run_date: date | None = None,
    data_root: Path | str = "data",
) -> Path:
    """Create ``<data_root>/<folder_date>/processed/<YYYY-MM-DD>`` and return it.

    One folder per run date keeps repeated runs for the same period apart.
    """

    if folder_date is None or not str(folder_date).strip():
        raise SessionError("folder_date not found. Set folder_date like '2025_09' first.")

    processed_path = Path(data_root) / normalize_folder_date(folder_date) / "processed"
    if not processed_path.is_dir():
        processed_path.mkdir(parents=True, exist_ok=True)
        logger.info("Created processed folder: %s", processed_path)

    run_date = run_date or date.today()
    folder_run = processed_path / run_date.strftime("%Y-%m-%d")
    if folder_run.is_dir():
        logger.info("Run folder already exists: %s", folder_run)
    else:
        folder_run.mkdir(parents=True, exist_ok=True)
        logger.info("Created run folder: %s", folder_run)
    return folder_run


@dataclass
class AnalysisSession:
    """State of one analysis script run."""

    commitment: str = ""
    commitment_description: str = ""
    data_root: Path | None = None
    output_root: Path | None = None
    settings: AppSettings = field(default_factory=AppSettings)
    folders: ProjectFolders | None = None
    run_date: date | None = None
    folder_run: Path | None = None

    def __post_init__(self) -> None:
        self.data_root = Path(self.data_root) if self.data_root is not None else self.settings.data_root
        self.output_root = Path(self.output_root) if self.output_root is not None else self.settings.output_root

    @property
    def folder_date(self) -> str | None:
        return self.folders.folder_date if self.folders else None

    @property
    def period(self) -> PeriodInfo | None:
        if self.folders is None:
            return None
        return parse_folder_date(self.folders.folder_date)

    def setup_folders(self, folder_date: str) -> ProjectFolders:
        self.folders = setup_folders(folder_date, self.data_root, self.output_root)
        return self.folders

    def make_data_run_folder(
        self,
        folder_date: str | None = None,
        run_date: date | None = None,
    ) -> Path:
        self.folder_run = make_data_run_folder(
            folder_date or self.folder_date,
            run_date=run_date,
            data_root=self.data_root,
        )
        self.run_date = run_date or date.today()
        return self.folder_run

    def path_in_run(self, filename: str) -> Path:
        if self.folder_run is None:
            raise SessionError("folder_run not set. Call make_data_run_folder() first.")
        return self.folder_run / filename

    def export_basename(self, now: datetime | None = None) -> str:
        return exporter.build_export_basename(
            self.folder_date,
            self.commitment,
            self.commitment_description,
            self.run_date,
            sep=self.settings.filename_separator,
            now=now,
        )

    def _ensure_run_folder(self) -> Path:
        if self.folder_run is None:
            self.make_data_run_folder()
        assert self.folder_run is not None
        self.folder_run.mkdir(parents=True, exist_ok=True)
        return self.folder_run

    def save(self, df: pd.DataFrame, ext: ExportFormat | str | None = None) -> Path:
        """Save ``df`` into the run folder, named after the session.

        ``ext`` defaults to the configured export format (xlsx).
        """

        folder = self._ensure_run_folder()
        return exporter.save_frame(
            df,
            folder,
            self.export_basename(),
            ext=ext or self.settings.export_format,
            na_rep=self.settings.csv_na_rep,
            header_align=self.settings.header_align,
        )

    def save_workbook(self, sheets: Mapping[str, pd.DataFrame]) -> Path:
        """Save several frames as sheets of one workbook in the run folder."""

        exporter.validate_sheets(sheets)
        folder = self._ensure_run_folder()
        return exporter.save_workbook(
            sheets,
            folder,
            self.export_basename(),
            header_align=self.settings.header_align,
        )

    def find_file(
        self,
        keyword: str,
        directory_type: DirectoryType | str = DirectoryType.RAW,
        file_type: FileType | str = FileType.CSV,
        sheet_name: str | int | None = None,
        col_types: Mapping[str, str] | None = None,
        skip: int = 0,
    ) -> pd.DataFrame:
        if self.folders is None:
            raise SessionError("Period folders are not set. Call setup_folders() first.")
        return file_finder.find_file(
            keyword,
            self.folders.folder_raw,
            self.folders.folder_processed,
            directory_type=directory_type,
            file_type=file_type,
            sheet_name=sheet_name,
            col_types=col_types,
            skip=skip,
        )

    def convert_dates(
        self,
        frames: pd.DataFrame | Mapping[str, pd.DataFrame],
        exclude: Iterable[str] = (),
    ) -> pd.DataFrame | dict[str, pd.DataFrame]:
        """``core.dates.convert_dates`` with the configured thresholds."""

        return convert_dates(
            frames,
            exclude=exclude,
            max_length_threshold=self.settings.date_length_threshold,
            parse_threshold=self.settings.date_parse_threshold,
        )
