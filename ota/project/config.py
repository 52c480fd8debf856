"""Local project configuration (app.json / package.json)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_str_dict, get_path
from ota.project.errors import ProjectError

APP_JSON = "app.json"
PACKAGE_JSON = "package.json"


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """The resolved `expo` config of the project being published.

    Attributes:
        project_dir: Directory holding app.json
        exp: The `expo` object from app.json
        project_id: Server-side app id (exp.extra.eas.projectId)
    """

    project_dir: Path
    exp: StrDict
    project_id: str


def _read_json_object(path: Path) -> Result[StrDict, ProjectError]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(
            ProjectError(
                kind="config_missing",
                message=f"{path.name} not found in {path.parent}",
                hint="Run the command from the project root or pass --project-dir.",
                path=path,
            )
        )
    except OSError as e:
        return Err(
            ProjectError(kind="file_unreadable", message=f"cannot read {path}: {e}", path=path)
        )
    except UnicodeDecodeError as e:
        return Err(
            ProjectError(kind="config_invalid", message=f"{path} is not UTF-8: {e}", path=path)
        )

    try:
        obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(
            ProjectError(kind="config_invalid", message=f"invalid JSON in {path}: {e}", path=path)
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ProjectError(
                kind="config_invalid", message=f"{path.name} must contain an object", path=path
            )
        )
    return Ok(data)


def load_project_config(project_dir: Path) -> Result[ProjectConfig, ProjectError]:
    """Read app.json and resolve the project id.

    app.json may wrap the config in an `expo` key or be the bare object.
    package.json must exist (its contents are not needed here).
    """
    package_json = project_dir / PACKAGE_JSON
    if not package_json.is_file():
        return Err(
            ProjectError(
                kind="config_missing",
                message=f"{PACKAGE_JSON} not found in {project_dir}",
                hint="Run the command from the project root or pass --project-dir.",
                path=package_json,
            )
        )

    app_json = project_dir / APP_JSON
    data = _read_json_object(app_json)
    if isinstance(data, Err):
        return data

    exp = as_str_dict(data.value.get("expo")) if "expo" in data.value else data.value
    if exp is None:
        return Err(
            ProjectError(
                kind="config_invalid",
                message="`expo` in app.json must be an object",
                path=app_json,
            )
        )

    project_id = get_path(exp, "extra", "eas", "projectId")
    if not isinstance(project_id, str) or not project_id.strip():
        return Err(
            ProjectError(
                kind="config_invalid",
                message="project id is not configured",
                hint='Set "extra": {"eas": {"projectId": "..."}} in app.json.',
                path=app_json,
            )
        )

    return Ok(ProjectConfig(project_dir=project_dir, exp=exp, project_id=project_id.strip()))
