"""Local project: config, runtime version, export and assets."""

from .config import ProjectConfig, load_project_config
from .errors import ProjectError
from .runtime import resolve_runtime_version

__all__ = [
    "ProjectConfig",
    "ProjectError",
    "load_project_config",
    "resolve_runtime_version",
]
