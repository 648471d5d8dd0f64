"""Option enums shared by the CLI, the session service and the adapters.

Keeping them in the domain layer lets every layer import a single source of
truth without circular imports.
"""

from __future__ import annotations

from enum import Enum


class DirectoryType(str, Enum):
    """Which period sub-folder a file lookup searches."""

    RAW = "raw"
    PROCESSED = "processed"

    @classmethod
    def parse(cls, value: "str | DirectoryType") -> "DirectoryType":
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            raise ValueError(
                "Invalid directory_type. Supported types are 'raw' and 'processed'."
            ) from None


class FileType(str, Enum):
    """Kinds of input files the finder understands."""

    CSV = "csv"
    EXCEL = "excel"

    @classmethod
    def parse(cls, value: "str | FileType") -> "FileType":
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            raise ValueError(
                "Invalid file_type. Supported types are 'excel' and 'csv'."
            ) from None

    def suffixes(self) -> tuple[str, ...]:
        """Lower-case file suffixes accepted for this type."""

        if self is FileType.EXCEL:
            return (".xlsx", ".xlsm")
        return (".csv",)


class ExportFormat(str, Enum):
    """Output formats for single-frame exports."""

    CSV = "csv"
    XLSX = "xlsx"

    @classmethod
    def parse(cls, value: "str | ExportFormat") -> "ExportFormat":
        try:
            return cls(str(getattr(value, "value", value)).strip().lower().lstrip("."))
        except ValueError:
            raise ValueError(f"Unsupported ext: {value} (use 'csv' or 'xlsx').") from None
