"""Core configuration.

Why here:
- Centralises environment variables (pydantic-settings) without cluttering the CLI.
- The session service, the scaffolder and the doctor command read the same
  defaults (roots, template, export format, date thresholds).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.enums import ExportFormat


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "analyst-kit"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "analyst-kit"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "analyst-kit"
    return Path.home() / ".config" / "analyst-kit"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write or update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# analyst-kit user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application-wide settings.

    Every value can be overridden with an ``ANALYST_KIT_*`` environment
    variable, the project ``.env`` or the user ``.env`` (in that order).
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYST_KIT_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    data_root: Path = Field(
        default=Path("data"),
        description="Project data root; period folders live below it.",
    )
    output_root: Path = Field(
        default=Path("output"),
        description="Project output root; one folder per reporting period.",
    )
    projects_root: Path | None = Field(
        default=None,
        description="Parent folder where `new-project` creates projects.",
    )
    template_path: Path | None = Field(
        default=None,
        description="Custom starter-script template for new projects.",
    )

    export_format: ExportFormat = Field(
        default=ExportFormat.XLSX,
        description="Default format for `save` when no extension is given.",
    )
    filename_separator: str = Field(
        default=" - ",
        min_length=1,
        description="Separator between export filename parts.",
    )
    csv_na_rep: str = Field(
        default="",
        description="Text written for missing values in CSV exports.",
    )
    header_align: Literal["left", "center", "right"] = Field(
        default="left",
        description="Horizontal alignment of XLSX header cells.",
    )

    log_level: str = Field(
        default="INFO",
        min_length=1,
        description="Level for the package loggers (DEBUG, INFO, WARNING...).",
    )

    date_length_threshold: int = Field(
        default=30,
        ge=1,
        description="Skip text columns longer than this when converting dates.",
    )
    date_parse_threshold: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Share of values that must parse before a column becomes dates.",
    )
