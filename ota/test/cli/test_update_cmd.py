from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer

from ota.cli.commands import update_cmd
from ota.cli.context import CLIContext
from ota.core.config import Config
from ota.core.errors import ErrorCode
from ota.core.result import Ok
from ota.output.console import MockConsole
from ota.services.update.target import BRANCH_AND_CHANNEL_MESSAGE, DEPRECATED_FLAGS_MESSAGE
from ota.test._fakes import FakeRepository, FakeServer, StoringUploader, write_export, write_project


def _publish(project_dir: Path, **overrides: object) -> None:
    kwargs: dict[str, object] = {
        "branch": None,
        "channel": None,
        "message": None,
        "auto": False,
        "non_interactive": False,
        "platform": "all",
        "input_dir": "dist",
        "skip_bundler": True,
        "json_output": False,
        "project_dir": project_dir,
        "group": None,
        "republish": False,
    }
    kwargs.update(overrides)
    update_cmd.publish(**kwargs)  # type: ignore[arg-type]


class _Env:
    def __init__(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        self.server = FakeServer()
        self.console = MockConsole()
        self.uploader = StoringUploader(server=self.server)
        self.project_dir = write_project(tmp_path / "app")
        write_export(self.project_dir)

        ctx = CLIContext(config=Config(), console=self.console)
        monkeypatch.setattr(update_cmd, "build_context", lambda **_: ctx)
        client = Ok(self.server.client)
        monkeypatch.setattr(update_cmd, "create_graphql_client", lambda _ctx: client)
        monkeypatch.setattr(update_cmd, "create_asset_uploader", lambda _ctx: self.uploader)
        monkeypatch.setattr(update_cmd, "Repository", lambda path: FakeRepository(path))


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> _Env:
    return _Env(monkeypatch, tmp_path)


def _forbid_context(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(**_: object) -> CLIContext:
        raise AssertionError("flag errors must be reported before loading config")

    monkeypatch.setattr(update_cmd, "build_context", fail)


@pytest.mark.parametrize("overrides", [{"group": "abc123"}, {"republish": True}])
def test_deprecated_flags_exit_early(
    overrides: dict[str, object],
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _forbid_context(monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        _publish(tmp_path, branch="main", message="abc", **overrides)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert DEPRECATED_FLAGS_MESSAGE in capsys.readouterr().err


def test_branch_and_channel_exit_early(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _forbid_context(monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        _publish(
            tmp_path,
            branch="branch123",
            channel="channel123",
            message="abc",
            non_interactive=True,
        )

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert BRANCH_AND_CHANNEL_MESSAGE in capsys.readouterr().err


def test_non_interactive_without_target_exits(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _forbid_context(monkeypatch)

    with pytest.raises(typer.Exit) as exc:
        _publish(tmp_path, message="abc", non_interactive=True)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_publish_to_branch(env: _Env) -> None:
    _publish(env.project_dir, branch="branch123", message="abc", non_interactive=True)

    assert len(env.server.client.calls_for("UpdatePublishMutation")) == 1
    (group,) = env.server.published
    assert group["branchId"] == env.server.branches["branch123"]
    assert group["message"] == "abc"
    assert env.console.find("Update group ID: group-1")
    assert not env.console.has_error()


def test_publish_to_channel(env: _Env) -> None:
    _publish(env.project_dir, channel="channel123", message="abc", non_interactive=True)

    assert len(env.server.client.calls_for("UpdatePublishMutation")) == 1
    branch_id = env.server.branches["channel123"]
    assert env.server.channels == {"channel123": [(branch_id, "true")]}
    (group,) = env.server.published
    assert group["branchId"] == branch_id


def test_publish_to_existing_channel_uses_its_branch(env: _Env) -> None:
    branch_id = env.server.add_branch("release-1.0")
    env.server.add_channel("production", "release-1.0")

    _publish(env.project_dir, channel="production", message="abc", non_interactive=True)

    (group,) = env.server.published
    assert group["branchId"] == branch_id
    assert "production" not in env.server.branches


def test_publish_auto(env: _Env) -> None:
    _publish(env.project_dir, auto=True, non_interactive=True)

    (group,) = env.server.published
    assert group["branchId"] == env.server.branches["main"]
    assert group["message"] == "Fix the login screen"
    assert group["gitCommitHash"] == "abc123"


def test_publish_json_output(env: _Env, capsys: pytest.CaptureFixture[str]) -> None:
    _publish(
        env.project_dir,
        branch="branch123",
        message="abc",
        non_interactive=True,
        json_output=True,
    )

    updates = json.loads(capsys.readouterr().out)
    assert [u["platform"] for u in updates] == ["android", "ios"]
    assert all(u["branch"]["name"] == "branch123" for u in updates)


def test_interactive_prompts_for_branch_and_message(
    env: _Env, monkeypatch: pytest.MonkeyPatch
) -> None:
    answers = {"Branch to publish to": "prompted", "Update message": "from prompt"}
    monkeypatch.setattr(update_cmd.typer, "prompt", lambda text, **_: answers[text])

    _publish(env.project_dir)

    (group,) = env.server.published
    assert group["branchId"] == env.server.branches["prompted"]
    assert group["message"] == "from prompt"


def test_missing_message_in_non_interactive_mode(env: _Env) -> None:
    with pytest.raises(typer.Exit) as exc:
        _publish(env.project_dir, branch="branch123", non_interactive=True)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert env.console.has_error()
    assert env.server.client.calls == []


def test_missing_project_config(env: _Env, tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()

    with pytest.raises(typer.Exit) as exc:
        _publish(empty, branch="branch123", message="abc", non_interactive=True)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert env.console.find("package.json")


def test_not_logged_in(env: _Env, monkeypatch: pytest.MonkeyPatch) -> None:
    from ota.cli.context import create_graphql_client

    monkeypatch.setattr(update_cmd, "create_graphql_client", create_graphql_client)
    monkeypatch.delenv("OTA_TOKEN", raising=False)

    with pytest.raises(typer.Exit) as exc:
        _publish(env.project_dir, branch="branch123", message="abc", non_interactive=True)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert env.console.find("not logged in")


def test_asset_limit_is_build_error(env: _Env) -> None:
    env.server.asset_limit = 1

    with pytest.raises(typer.Exit) as exc:
        _publish(env.project_dir, branch="branch123", message="abc", non_interactive=True)

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)
    assert env.server.published == []
