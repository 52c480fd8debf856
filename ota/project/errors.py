from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

ProjectErrorKind = Literal[
    "config_missing",
    "config_invalid",
    "runtime_version",
    "export_failed",
    "export_invalid",
    "asset_upload",
    "asset_limit",
    "file_unreadable",
]


@dataclass(frozen=True, slots=True)
class ProjectError:
    kind: ProjectErrorKind
    message: str
    hint: str | None = None
    path: Path | None = None
