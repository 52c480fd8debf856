from __future__ import annotations

from pathlib import Path

import pytest

from ota.core.errors import ErrorCode
from ota.output.errors import update_error_exit_code
from ota.project.errors import ProjectError, ProjectErrorKind
from ota.services.update.errors import UpdateErrorKind, from_project_error


@pytest.mark.parametrize(
    ("project_kind", "update_kind"),
    [
        ("config_missing", "project_config"),
        ("config_invalid", "project_config"),
        ("runtime_version", "project_config"),
        ("export_failed", "export_failed"),
        ("export_invalid", "export_failed"),
        ("asset_limit", "asset_limit"),
        ("asset_upload", "network"),
        ("file_unreadable", "io_failed"),
    ],
)
def test_from_project_error_kind(
    project_kind: ProjectErrorKind, update_kind: UpdateErrorKind
) -> None:
    err = from_project_error(ProjectError(kind=project_kind, message="x", hint="h"))
    assert err.kind == update_kind
    assert err.message == "x"
    assert err.hint == "h"


def test_unreadable_file_exits_with_io_error() -> None:
    error = ProjectError(kind="file_unreadable", message="cannot read", path=Path("app.json"))
    assert update_error_exit_code(from_project_error(error)) == int(ErrorCode.IO_ERROR)
