"""Exit codes for the ota CLI.

Every command failure ends in one of these codes. Scripts that wrap
`ota update publish` in CI rely on them, so the numeric values are stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: User error (conflicting or deprecated flags, missing message)
    - 2: Environment error (no project config, not logged in)
    - 3: Build error (bundler export failed, export output unusable)
    - 4: Network error (API unreachable, GraphQL errors, upload failed)
    - 5: I/O error (unreadable files)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
