"""`update publish`: target resolution, export upload and publishing."""

from .branch import ensure_branch_exists
from .channel import ensure_channel_exists, get_branch_name_from_channel_name
from .errors import UpdateError
from .model import BranchRef, ByAuto, ByBranch, ByChannel, PublishFlags, PublishSummary
from .publish import PublishRequest, publish_update
from .target import resolve_publish_target, resolve_update_message, validate_publish_flags

__all__ = [
    "BranchRef",
    "ByAuto",
    "ByBranch",
    "ByChannel",
    "PublishFlags",
    "PublishRequest",
    "PublishSummary",
    "UpdateError",
    "ensure_branch_exists",
    "ensure_channel_exists",
    "get_branch_name_from_channel_name",
    "publish_update",
    "resolve_publish_target",
    "resolve_update_message",
    "validate_publish_flags",
]
