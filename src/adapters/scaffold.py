"""New analysis project scaffolding.

Creates the folder skeleton, a starter script patched with the project's
paths and commitment, and a ``.gitignore`` for analyst projects.

Two naming schemes are supported:

- ``create_project(base, "r_2.9.a_mic_review")``: the folder and script are
  named after the project, the commitment is parsed from the name.
- ``create_project_from_parts(base, "ms", "mdcps", "1.3.a")``: folder
  ``ms-mdcps-1-3-a`` (kebab-case) with script ``code/1_3_a.py`` (snake_case).
"""

from __future__ import annotations

import logging
import re
import shutil
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from core.config import AppSettings
from core.domain.models import ScaffoldResult
from core.resources_loader import resolve_template_path

logger = logging.getLogger(__name__)

PROJECT_SUBFOLDERS = ("code", "data", "output", "docs")

GITIGNORE_PATTERNS = (
    "*.csv", "*.xlsx", "*.xlsm", "*.docx", "*.pdf", "*.pptx", "*.accdb",
    "*.png", "*.jpg", "*.jpeg", "*.bmp",
    "*.log", "*.tmp", "*.bak", "*.swp", "*~", ".DS_Store", "Thumbs.db",
    "*.sav", "*.txt", "*.html", "*.axx",
    "__pycache__/", "*.py[cod]", ".ipynb_checkpoints/", ".venv/", ".env",
    "data/", "code/old/",
)

_COMMITMENT_RE = re.compile(r"^[A-Za-z]+_([^_]+)")
_BASE_FOLDER_LINE_RE = re.compile(r"^\s*base_folder\s*=.*$")
_COMMITMENT_LINE_RE = re.compile(r"^\s*commitment\s*=.*$")
_DESCRIPTION_LINE_RE = re.compile(r"^\s*commitment_description\s*=")
_TODAY_LINE_RE = re.compile(r"^\s*today_date\s*=.*$")


def commitment_from_project_name(project_name: str) -> str:
    """``r_0.0_hotel`` -> ``0.0``; names without a ``<prefix>_<id>`` shape give ``""``."""

    match = _COMMITMENT_RE.match(project_name)
    return match.group(1) if match else ""


def current_folder_date(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year}_Q{(today.month - 1) // 3 + 1}"


def project_folder_name(state: str, project: str, commitment: str) -> str:
    """``("ms", "mdcps", "1.3.a")`` -> ``ms-mdcps-1-3-a`` (kebab-case)."""

    parts = {"state": state, "project": project, "commitment": commitment}
    missing = [name for name, value in parts.items() if not value or not str(value).strip()]
    if missing:
        raise ValueError(f"Missing required arguments: {', '.join(missing)}")
    return "-".join(str(value).strip().lower().replace(".", "-") for value in parts.values())


def script_stem(commitment: str) -> str:
    """``1.3.a`` -> ``1_3_a`` (snake_case script name without suffix)."""

    return commitment.strip().lower().replace(".", "_")


def build_template_context(
    project_name: str,
    project_path: Path,
    commitment: str,
    commitment_description: str = "",
    today: date | None = None,
) -> dict[str, object]:
    """Variables available to jinja2 starter templates."""

    today = today or date.today()
    return {
        "project_name": project_name,
        "project_path": project_path.as_posix(),
        "data_folder": (project_path / "data").as_posix(),
        "output_folder": (project_path / "output").as_posix(),
        "commitment": commitment,
        "commitment_description": commitment_description,
        "folder_date": current_folder_date(today),
        "created": today.isoformat(),
        "today_date": today.strftime("%Y%m%d"),
    }


def render_template(template_path: Path, context: dict[str, object]) -> str:
    env = Environment(
        loader=FileSystemLoader(str(template_path.parent)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    return env.get_template(template_path.name).render(**context)


def patch_script_lines(
    lines: list[str],
    *,
    data_folder: str,
    commitment: str,
    commitment_description: str = "",
    today: date | None = None,
) -> list[str]:
    """Point a copied plain template at the new project.

    Rewrites the ``base_folder = ...``, ``commitment = ...`` and
    ``today_date = ...`` assignments. When the template has no
    ``commitment_description`` line, one is added after the commitment line,
    holding ``commitment_description`` or an empty placeholder.
    """

    today = today or date.today()
    has_description = any(_DESCRIPTION_LINE_RE.match(line) for line in lines)
    if commitment_description:
        description_line = f'commitment_description = "{commitment_description}"'
    else:
        description_line = 'commitment_description = ""  # e.g. "Hotel analysis"'

    out: list[str] = []
    inserted = False
    for line in lines:
        if _BASE_FOLDER_LINE_RE.match(line):
            out.append(f'base_folder = "{data_folder}"')
        elif _COMMITMENT_LINE_RE.match(line):
            out.append(f'commitment = "{commitment}"')
            if not has_description and not inserted:
                out.append(description_line)
                inserted = True
        elif _TODAY_LINE_RE.match(line):
            out.append(f'today_date = "{today:%Y%m%d}"')
        else:
            out.append(line)
    return out


def write_gitignore(path: Path) -> Path:
    path.write_text("\n".join(GITIGNORE_PATTERNS) + "\n", encoding="utf-8")
    return path


def _build_project(
    project_path: Path,
    script_name: str,
    commitment: str,
    commitment_description: str,
    template_path: Path | str | None,
    settings: AppSettings | None,
) -> ScaffoldResult | None:
    if project_path.exists():
        logger.warning("Folder already exists at: %s", project_path)
        return None

    template = resolve_template_path(template_path, settings)
    logger.info("Creating project: %s (script %s)", project_path.name, script_name)

    folders = {name: project_path / name for name in PROJECT_SUBFOLDERS}
    for folder in folders.values():
        folder.mkdir(parents=True, exist_ok=False)

    script_path = folders["code"] / script_name

    if template.suffix == ".j2":
        context = build_template_context(project_path.name, project_path, commitment, commitment_description)
        script_path.write_text(render_template(template, context), encoding="utf-8")
    else:
        shutil.copyfile(template, script_path)
        lines = script_path.read_text(encoding="utf-8").splitlines()
        patched = patch_script_lines(
            lines,
            data_folder=folders["data"].as_posix(),
            commitment=commitment,
            commitment_description=commitment_description,
        )
        script_path.write_text("\n".join(patched) + "\n", encoding="utf-8")

    gitignore_path = write_gitignore(project_path / ".gitignore")

    logger.info("Project successfully created at: %s", project_path)
    return ScaffoldResult(
        project_path=project_path,
        code_folder=folders["code"],
        data_folder=folders["data"],
        output_folder=folders["output"],
        docs_folder=folders["docs"],
        script_path=script_path,
        gitignore_path=gitignore_path,
        commitment=commitment,
        commitment_description=commitment_description,
    )


def create_project(
    base_path: Path | str,
    project_name: str,
    template_path: Path | str | None = None,
    settings: AppSettings | None = None,
    commitment_description: str = "",
) -> ScaffoldResult | None:
    """Create ``<base_path>/<project_name>`` with a starter script named after it.

    The commitment is parsed from the name (``r_0.0_hotel`` -> ``0.0``).
    Returns None (and changes nothing) when the project folder already exists.

    Raises:
        ValueError: blank ``project_name``.
        FileNotFoundError: the template does not exist.
    """

    if not project_name or not project_name.strip():
        raise ValueError("project_name must not be blank.")
    project_name = project_name.strip()

    return _build_project(
        Path(base_path) / project_name,
        f"{project_name}.py",
        commitment_from_project_name(project_name),
        commitment_description,
        template_path,
        settings,
    )


def create_project_from_parts(
    base_path: Path | str,
    state: str,
    project: str,
    commitment: str,
    commitment_description: str = "",
    template_path: Path | str | None = None,
    settings: AppSettings | None = None,
) -> ScaffoldResult | None:
    """Create a project following the ``<state>-<project>-<commitment>`` convention.

    Example::

        create_project_from_parts("D:/repo_mdcps", "ms", "mdcps", "1.3.a", "Suspension period analysis")
        # D:/repo_mdcps/ms-mdcps-1-3-a/code/1_3_a.py

    Raises:
        ValueError: blank ``state``, ``project`` or ``commitment``.
        FileNotFoundError: the template does not exist.
    """

    folder_name = project_folder_name(state, project, commitment)
    return _build_project(
        Path(base_path) / folder_name,
        f"{script_stem(commitment)}.py",
        commitment.strip(),
        commitment_description.strip(),
        template_path,
        settings,
    )
