"""git-branch-diff: Compare the working tree against its merge-base with a parent branch."""

__version__ = "0.1.0"

from .cli import branch_diff, cli
from .compare import build_compare_cmd, run_compare
from .config import Settings, resolve_settings, split_command
from .errors import BranchDiffError, CompareError, ConfigError, GitError
from .git import (
    Change,
    get_changes,
    get_config,
    get_file_content,
    get_file_mode,
    get_merge_base,
    get_toplevel,
    parse_name_status,
    unquote_path,
)
from .stage import StageError, StagingArea, stage_changes

__all__ = [
    "cli",
    "branch_diff",
    "build_compare_cmd",
    "run_compare",
    "Settings",
    "resolve_settings",
    "split_command",
    "BranchDiffError",
    "CompareError",
    "ConfigError",
    "GitError",
    "Change",
    "get_changes",
    "get_config",
    "get_file_content",
    "get_file_mode",
    "get_merge_base",
    "get_toplevel",
    "parse_name_status",
    "unquote_path",
    "StageError",
    "StagingArea",
    "stage_changes",
]
