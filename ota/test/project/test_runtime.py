from __future__ import annotations

import pytest

from ota.core.result import Err, Ok
from ota.core.structured import StrDict
from ota.project.runtime import resolve_runtime_version


def _exp(**fields: object) -> StrDict:
    exp: StrDict = {"version": "1.2.0", "sdkVersion": "51.0.0"}
    exp.update(fields)
    return exp


class TestResolveRuntimeVersion:
    def test_literal(self) -> None:
        assert resolve_runtime_version(_exp(runtimeVersion="3.0"), "ios") == Ok("3.0")

    def test_platform_override(self) -> None:
        exp = _exp(runtimeVersion="3.0", android={"runtimeVersion": "4.0"})
        assert resolve_runtime_version(exp, "android") == Ok("4.0")
        assert resolve_runtime_version(exp, "ios") == Ok("3.0")

    def test_defaults_to_sdk_version(self) -> None:
        assert resolve_runtime_version(_exp(), "ios") == Ok("exposdk:51.0.0")

    @pytest.mark.parametrize(
        ("policy", "expected"),
        [
            ("sdkVersion", "exposdk:51.0.0"),
            ("appVersion", "1.2.0"),
        ],
    )
    def test_policies(self, policy: str, expected: str) -> None:
        exp = _exp(runtimeVersion={"policy": policy})
        assert resolve_runtime_version(exp, "android") == Ok(expected)

    def test_native_version_policy(self) -> None:
        exp = _exp(
            runtimeVersion={"policy": "nativeVersion"},
            ios={"buildNumber": "7"},
            android={"versionCode": 12},
        )
        assert resolve_runtime_version(exp, "ios") == Ok("1.2.0(7)")
        assert resolve_runtime_version(exp, "android") == Ok("1.2.0(12)")

    def test_native_version_default_build_number(self) -> None:
        exp = _exp(runtimeVersion={"policy": "nativeVersion"})
        assert resolve_runtime_version(exp, "ios") == Ok("1.2.0(1)")

    def test_unknown_policy(self) -> None:
        result = resolve_runtime_version(_exp(runtimeVersion={"policy": "fingerprint"}), "ios")
        assert isinstance(result, Err)
        assert result.error.kind == "runtime_version"
        assert "fingerprint" in result.error.message

    def test_missing(self) -> None:
        result = resolve_runtime_version({"version": "1.0.0"}, "android")
        assert isinstance(result, Err)
        assert result.error.kind == "runtime_version"

    def test_wrong_type(self) -> None:
        result = resolve_runtime_version(_exp(runtimeVersion=3), "android")
        assert isinstance(result, Err)
