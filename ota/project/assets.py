"""Content-addressed asset upload.

Every asset is identified by a storage key derived from its content type
and SHA-256, so an asset already stored by an earlier publish is never
uploaded again. Uploading is three round trips: ask which keys are missing,
fetch signed upload specifications for those, upload them. The storage
backend processes uploads asynchronously, so the metadata query is then
polled until every key reports EXISTS.
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass
from pathlib import Path
from time import sleep

from ota.api.client import GraphqlClient
from ota.api.model import UpdatePlatform
from ota.api.queries import asset_metadata
from ota.api.mutations import signed_upload_specifications
from ota.api.upload import AssetUploader
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict
from ota.project.errors import ProjectError
from ota.project.export import CollectedAssets, RawAsset

ASSET_POLL_ATTEMPTS = 10
ASSET_POLL_DELAY_SECONDS = 1.0


@dataclass(frozen=True, slots=True)
class Asset:
    path: Path
    content_type: str
    file_extension: str
    content_hash: str  # base64url SHA-256, unpadded
    storage_key: str

    @property
    def bundle_key(self) -> str:
        return self.path.stem


@dataclass(frozen=True, slots=True)
class PreparedAssets:
    launch_asset: Asset
    assets: tuple[Asset, ...]

    def all(self) -> tuple[Asset, ...]:
        return (self.launch_asset, *self.assets)


@dataclass(frozen=True, slots=True)
class UploadStats:
    asset_count: int
    unique_asset_count: int
    unique_uploaded_asset_count: int
    asset_limit_per_update_group: int


def content_hash(data: bytes) -> str:
    digest = hashlib.sha256(data).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def storage_key(content_type: str, file_hash: str) -> str:
    return hashlib.sha256(f"{content_type}:{file_hash}".encode("utf-8")).hexdigest()


def _prepare(raw: RawAsset) -> Result[Asset, ProjectError]:
    try:
        data = raw.path.read_bytes()
    except OSError as e:
        return Err(
            ProjectError(
                kind="file_unreadable", message=f"cannot read {raw.path}: {e}", path=raw.path
            )
        )

    file_hash = content_hash(data)
    return Ok(
        Asset(
            path=raw.path,
            content_type=raw.content_type,
            file_extension=raw.file_extension,
            content_hash=file_hash,
            storage_key=storage_key(raw.content_type, file_hash),
        )
    )


def prepare_assets(
    collected: dict[UpdatePlatform, CollectedAssets],
) -> Result[dict[UpdatePlatform, PreparedAssets], ProjectError]:
    """Hash every collected file."""
    prepared: dict[UpdatePlatform, PreparedAssets] = {}
    for platform, platform_assets in collected.items():
        launch = _prepare(platform_assets.launch_asset)
        if isinstance(launch, Err):
            return launch

        assets: list[Asset] = []
        for raw in platform_assets.assets:
            asset = _prepare(raw)
            if isinstance(asset, Err):
                return asset
            assets.append(asset.value)

        prepared[platform] = PreparedAssets(launch_asset=launch.value, assets=tuple(assets))
    return Ok(prepared)


def _unique_assets(prepared: dict[UpdatePlatform, PreparedAssets]) -> dict[str, Asset]:
    unique: dict[str, Asset] = {}
    for platform_assets in prepared.values():
        for asset in platform_assets.all():
            unique.setdefault(asset.storage_key, asset)
    return unique


def _missing_keys(client: GraphqlClient, keys: list[str]) -> Result[set[str], ProjectError]:
    result = asset_metadata(client, storage_keys=keys)
    if isinstance(result, Err):
        return Err(
            ProjectError(
                kind="asset_upload", message=f"asset metadata query failed: {result.error}"
            )
        )
    existing = {m.storage_key for m in result.value if m.status == "EXISTS"}
    return Ok({k for k in keys if k not in existing})


def _wait_until_stored(client: GraphqlClient, keys: list[str]) -> Result[None, ProjectError]:
    for attempt in range(ASSET_POLL_ATTEMPTS):
        missing = _missing_keys(client, keys)
        if isinstance(missing, Err):
            return missing
        if not missing.value:
            return Ok(None)
        if attempt < ASSET_POLL_ATTEMPTS - 1:
            sleep(ASSET_POLL_DELAY_SECONDS)

    return Err(
        ProjectError(
            kind="asset_upload",
            message="uploaded assets were not processed in time",
            hint="Publish again; assets already stored are not re-uploaded.",
        )
    )


def upload_assets(
    *,
    client: GraphqlClient,
    uploader: AssetUploader,
    prepared: dict[UpdatePlatform, PreparedAssets],
    asset_limit: int,
) -> Result[UploadStats, ProjectError]:
    """Upload every asset the server does not already store."""
    asset_count = sum(len(p.all()) for p in prepared.values())
    unique = _unique_assets(prepared)

    if len(unique) > asset_limit:
        return Err(
            ProjectError(
                kind="asset_limit",
                message=(
                    f"update group has {len(unique)} unique assets, "
                    f"the limit is {asset_limit}"
                ),
                hint="Remove unused assets from the bundle.",
            )
        )

    keys = list(unique)
    missing = _missing_keys(client, keys)
    if isinstance(missing, Err):
        return missing

    to_upload = [unique[k] for k in keys if k in missing.value]
    if to_upload:
        specs = signed_upload_specifications(
            client, content_types=[a.content_type for a in to_upload]
        )
        if isinstance(specs, Err):
            return Err(
                ProjectError(
                    kind="asset_upload", message=f"cannot get upload URLs: {specs.error}"
                )
            )

        for asset, spec in zip(to_upload, specs.value, strict=True):
            uploaded = uploader.upload(spec, asset.path, asset.content_type)
            if isinstance(uploaded, Err):
                return Err(
                    ProjectError(
                        kind="asset_upload",
                        message=f"asset upload failed: {uploaded.error}",
                        path=asset.path,
                    )
                )

        stored = _wait_until_stored(client, [a.storage_key for a in to_upload])
        if isinstance(stored, Err):
            return stored

    return Ok(
        UploadStats(
            asset_count=asset_count,
            unique_asset_count=len(unique),
            unique_uploaded_asset_count=len(to_upload),
            asset_limit_per_update_group=asset_limit,
        )
    )


def _asset_input(asset: Asset) -> StrDict:
    return {
        "fileSHA256": asset.content_hash,
        "bundleKey": asset.bundle_key,
        "contentType": asset.content_type,
        "fileExtension": asset.file_extension,
        "storageKey": asset.storage_key,
    }


def build_update_info_group(
    prepared: dict[UpdatePlatform, PreparedAssets],
) -> dict[UpdatePlatform, StrDict]:
    """Per-platform asset input of the publish mutation."""
    return {
        platform: {
            "launchAsset": _asset_input(p.launch_asset),
            "assets": [_asset_input(a) for a in p.assets],
        }
        for platform, p in prepared.items()
    }
