"""Resolve the parent branch and compare command for a run.

Each setting is looked up, in order, from: the command line, an environment
variable, a git config key, and a built-in default. Blank values are treated
as unset.
"""

import shlex
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .errors import ConfigError

DEFAULT_PARENT = 'master'
DEFAULT_COMPARE_CMD = 'diff -r'

PARENT_ENV = 'GIT_BRANCH_DIFF_PARENT'
COMPARE_ENV = 'GIT_BRANCH_DIFF_CMP'

PARENT_CONFIG_KEY = 'branchdiff.parent'
COMPARE_CONFIG_KEY = 'branchdiff.cmd'


@dataclass(frozen=True)
class Settings:
    parent: str
    compare_cmd: list[str]


def first_set(*values: Optional[str]) -> Optional[str]:
    """Return the first value that isn't `None` or whitespace-only."""
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def split_command(cmd: str) -> list[str]:
    """Split a compare command string into an argument list (POSIX shell rules)."""
    try:
        argv = shlex.split(cmd)
    except ValueError as e:
        raise ConfigError(f"Can't parse compare command {cmd!r}: {e}")
    if not argv:
        argv = shlex.split(DEFAULT_COMPARE_CMD)
    return argv


def resolve_settings(
    parent: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    get_config: Optional[Callable[[str], Optional[str]]] = None,
) -> Settings:
    """Build `Settings` from explicit sources.

    Args:
        parent: Parent branch given on the command line, if any
        environ: Environment variables to consult (none if omitted)
        get_config: Lookup for git config keys (none if omitted)
    """
    environ = environ or {}

    def config(key: str) -> Optional[str]:
        return get_config(key) if get_config else None

    # git config is only read when nothing earlier is set
    parent = first_set(parent, environ.get(PARENT_ENV))
    if parent is None:
        parent = first_set(config(PARENT_CONFIG_KEY)) or DEFAULT_PARENT

    compare_cmd = first_set(environ.get(COMPARE_ENV))
    if compare_cmd is None:
        compare_cmd = first_set(config(COMPARE_CONFIG_KEY)) or DEFAULT_COMPARE_CMD

    return Settings(
        parent=parent.strip(),
        compare_cmd=split_command(compare_cmd),
    )
