"""Runtime version resolution.

An update only reaches builds with the same runtime version. The version is
either a literal string or a policy evaluated against the app config:

    "runtimeVersion": "1.0.0"
    "runtimeVersion": {"policy": "sdkVersion"}     -> exposdk:<sdkVersion>
    "runtimeVersion": {"policy": "appVersion"}     -> <version>
    "runtimeVersion": {"policy": "nativeVersion"}  -> <version>(<build number>)

`ios.runtimeVersion` / `android.runtimeVersion` override the top level.
"""

from __future__ import annotations

from ota.api.model import UpdatePlatform
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_str_dict, get_int, get_str, get_table
from ota.project.errors import ProjectError

RUNTIME_POLICIES = ("sdkVersion", "appVersion", "nativeVersion")


def _error(message: str, hint: str | None = None) -> Err[ProjectError]:
    return Err(ProjectError(kind="runtime_version", message=message, hint=hint))


def _build_number(exp: StrDict, platform: UpdatePlatform) -> str:
    platform_cfg = get_table(exp, platform) or {}
    if platform == "ios":
        return get_str(platform_cfg, "buildNumber") or "1"
    code = get_int(platform_cfg, "versionCode")
    return str(code) if code is not None else "1"


def _apply_policy(exp: StrDict, platform: UpdatePlatform, policy: str) -> Result[str, ProjectError]:
    if policy == "sdkVersion":
        sdk = get_str(exp, "sdkVersion")
        if sdk is None:
            return _error("runtime version policy sdkVersion requires sdkVersion in app.json")
        return Ok(f"exposdk:{sdk}")

    version = get_str(exp, "version")
    if version is None:
        return _error(f"runtime version policy {policy} requires version in app.json")

    if policy == "appVersion":
        return Ok(version)
    if policy == "nativeVersion":
        return Ok(f"{version}({_build_number(exp, platform)})")

    return _error(
        f"unknown runtime version policy: {policy}",
        hint=f"Use one of: {', '.join(RUNTIME_POLICIES)}",
    )


def resolve_runtime_version(
    exp: StrDict, platform: UpdatePlatform
) -> Result[str, ProjectError]:
    """Runtime version of `platform` builds of this app."""
    platform_cfg = get_table(exp, platform) or {}
    raw = platform_cfg.get("runtimeVersion", exp.get("runtimeVersion"))

    if raw is None:
        sdk = get_str(exp, "sdkVersion")
        if sdk is not None:
            return Ok(f"exposdk:{sdk}")
        return _error(
            f"no runtime version configured for {platform}",
            hint='Set "runtimeVersion" in app.json.',
        )

    if isinstance(raw, str):
        value = raw.strip()
        if not value:
            return _error(f"runtime version for {platform} is empty")
        return Ok(value)

    policy_cfg = as_str_dict(raw)
    policy = get_str(policy_cfg, "policy") if policy_cfg is not None else None
    if policy is None:
        return _error(
            f"runtimeVersion for {platform} must be a string or a policy object",
            hint='e.g. "runtimeVersion": {"policy": "appVersion"}',
        )
    return _apply_policy(exp, platform, policy)
