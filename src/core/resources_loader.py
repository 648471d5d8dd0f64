"""Locate bundled and user-provided resources (starter-script templates).

Why here:
- The CLI, the doctor command and the scaffolder share one lookup order.
- Works the same from a source checkout and from an installed wheel.
"""

from __future__ import annotations

from pathlib import Path

from core.config import AppSettings, get_user_config_dir

DEFAULT_TEMPLATE_NAME = "analysis_script.py.j2"


def _project_root() -> Path:
    # core/resources_loader.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


def bundled_templates_dir() -> Path:
    """Directory holding the templates shipped with the package."""

    return Path(__file__).resolve().parents[1] / "adapters" / "templates"


def get_default_template_path(filename: str = DEFAULT_TEMPLATE_NAME) -> Path | None:
    """Find a starter template in the usual places.

    Order:
    1) <user config dir>/templates/<filename>
    2) <project root>/templates/<filename>
    3) the bundled adapters/templates/<filename>
    """

    candidates = [
        get_user_config_dir() / "templates" / filename,
        _project_root() / "templates" / filename,
        bundled_templates_dir() / filename,
    ]
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None


def resolve_template_path(
    template_path: Path | str | None = None,
    settings: AppSettings | None = None,
) -> Path:
    """Pick the template for a new project.

    An explicit ``template_path`` must exist; otherwise the configured
    template, then the default lookup, is used.
    """

    if template_path is not None:
        path = Path(template_path)
        if not path.is_file():
            raise FileNotFoundError(f"Template not found: {path}")
        return path

    settings = settings or AppSettings()
    if settings.template_path is not None:
        if not settings.template_path.is_file():
            raise FileNotFoundError(f"Template not found: {settings.template_path}")
        return settings.template_path

    default = get_default_template_path()
    if default is None:
        raise FileNotFoundError(f"Template not found: {DEFAULT_TEMPLATE_NAME}")
    return default
