"""Bundler export: building it and reading what it produced.

`npx expo export` writes bundles and assets into the input directory along
with a metadata.json index:

    {
      "version": 0,
      "bundler": "metro",
      "fileMetadata": {
        "ios": {"bundle": "bundles/ios-4fe3.js", "assets": [{"path": "assets/9ab1", "ext": "png"}]}
      }
    }
"""

from __future__ import annotations

import json
import mimetypes
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ota.api.model import UpdatePlatform
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_obj_list, as_str_dict, get_str, get_table
from ota.platform.process import run_silent
from ota.project.errors import ProjectError

ExportPlatform = Literal["all", "ios", "android"]

ALL_PLATFORMS: tuple[UpdatePlatform, ...] = ("android", "ios")
EXPORT_PLATFORMS: tuple[ExportPlatform, ...] = ("all", "ios", "android")
METADATA_FILE = "metadata.json"
LAUNCH_ASSET_CONTENT_TYPE = "application/javascript"
LAUNCH_ASSET_EXTENSION = ".bundle"


@dataclass(frozen=True, slots=True)
class RawAsset:
    path: Path
    content_type: str
    file_extension: str


@dataclass(frozen=True, slots=True)
class CollectedAssets:
    launch_asset: RawAsset
    assets: tuple[RawAsset, ...]


def parse_export_platform(value: str) -> ExportPlatform | None:
    normalized = value.strip().lower()
    for platform in EXPORT_PLATFORMS:
        if normalized == platform:
            return platform
    return None


def requested_platforms(platform: ExportPlatform) -> tuple[UpdatePlatform, ...]:
    if platform == "all":
        return ALL_PLATFORMS
    return (platform,)


def build_bundles(
    *, project_dir: Path, input_dir: str, platform: ExportPlatform
) -> Result[None, ProjectError]:
    """Run the bundler export into `input_dir` (relative to the project)."""
    if shutil.which("npx") is None:
        return Err(
            ProjectError(
                kind="export_failed",
                message="npx: missing",
                hint="Install Node.js, or export yourself and pass --skip-bundler.",
            )
        )

    cmd = ["npx", "expo", "export", "--output-dir", input_dir]
    if platform != "all":
        cmd += ["--platform", platform]

    result = run_silent(cmd, cwd=project_dir)
    if isinstance(result, Err):
        return Err(
            ProjectError(
                kind="export_failed",
                message=f"bundler export failed (exit {result.error.returncode})",
                hint=result.error.stderr.strip() or " ".join(cmd),
            )
        )
    return Ok(None)


def resolve_input_directory(*, project_dir: Path, input_dir: str) -> Result[Path, ProjectError]:
    path = (project_dir / input_dir).resolve()
    if not path.is_dir():
        return Err(
            ProjectError(
                kind="export_invalid",
                message=f"input directory not found: {path}",
                hint="Run the export first, or drop --skip-bundler.",
                path=path,
            )
        )
    return Ok(path)


def _asset_content_type(ext: str) -> str:
    guessed, _ = mimetypes.guess_type(f"asset.{ext}")
    return guessed or "application/octet-stream"


def _read_metadata(input_dir: Path) -> Result[StrDict, ProjectError]:
    path = input_dir / METADATA_FILE
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(
            ProjectError(
                kind="export_invalid",
                message=f"{METADATA_FILE} not found in {input_dir}",
                hint="The input directory must contain a bundler export.",
                path=path,
            )
        )
    except OSError as e:
        return Err(
            ProjectError(kind="file_unreadable", message=f"cannot read {path}: {e}", path=path)
        )
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(
            ProjectError(kind="export_invalid", message=f"invalid {METADATA_FILE}: {e}", path=path)
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ProjectError(kind="export_invalid", message=f"{path} is not an object", path=path)
        )
    return Ok(data)


def _collect_platform(
    input_dir: Path, platform: UpdatePlatform, meta: StrDict
) -> Result[CollectedAssets, ProjectError]:
    bundle = get_str(meta, "bundle")
    if bundle is None:
        return Err(
            ProjectError(kind="export_invalid", message=f"no bundle listed for {platform}")
        )
    bundle_path = input_dir / bundle
    if not bundle_path.is_file():
        return Err(
            ProjectError(
                kind="export_invalid",
                message=f"bundle not found: {bundle_path}",
                path=bundle_path,
            )
        )

    assets: list[RawAsset] = []
    for item in as_obj_list(meta.get("assets")) or []:
        entry = as_str_dict(item) or {}
        rel = get_str(entry, "path")
        ext = get_str(entry, "ext")
        if rel is None or ext is None:
            return Err(
                ProjectError(kind="export_invalid", message=f"malformed asset entry for {platform}")
            )
        asset_path = input_dir / rel
        if not asset_path.is_file():
            return Err(
                ProjectError(
                    kind="export_invalid", message=f"asset not found: {asset_path}", path=asset_path
                )
            )
        assets.append(
            RawAsset(
                path=asset_path,
                content_type=_asset_content_type(ext),
                file_extension=f".{ext}",
            )
        )

    return Ok(
        CollectedAssets(
            launch_asset=RawAsset(
                path=bundle_path,
                content_type=LAUNCH_ASSET_CONTENT_TYPE,
                file_extension=LAUNCH_ASSET_EXTENSION,
            ),
            assets=tuple(assets),
        )
    )


def collect_assets(
    *, input_dir: Path, platform: ExportPlatform
) -> Result[dict[UpdatePlatform, CollectedAssets], ProjectError]:
    """Read the export's launch asset and assets per platform.

    With `all`, platforms missing from the export are skipped; an explicitly
    requested platform must be present.
    """
    metadata = _read_metadata(input_dir)
    if isinstance(metadata, Err):
        return metadata

    file_metadata = get_table(metadata.value, "fileMetadata")
    if file_metadata is None:
        return Err(
            ProjectError(kind="export_invalid", message=f"{METADATA_FILE} has no fileMetadata")
        )

    collected: dict[UpdatePlatform, CollectedAssets] = {}
    for p in requested_platforms(platform):
        meta = get_table(file_metadata, p)
        if meta is None:
            if platform == "all":
                continue
            return Err(
                ProjectError(kind="export_invalid", message=f"the export does not include {p}")
            )
        result = _collect_platform(input_dir, p, meta)
        if isinstance(result, Err):
            return result
        collected[p] = result.value

    if not collected:
        return Err(
            ProjectError(kind="export_invalid", message="the export does not include any platform")
        )
    return Ok(collected)
