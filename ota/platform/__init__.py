"""Platform abstraction layer."""

from .paths import (
    home,
    user_config_dir,
    user_config_path,
)
from .process import (
    ProcessError,
    run,
    run_silent,
)

__all__ = [
    # paths
    "home",
    "user_config_dir",
    "user_config_path",
    # process
    "ProcessError",
    "run",
    "run_silent",
]
