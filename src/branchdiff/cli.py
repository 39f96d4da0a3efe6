#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "click",
#     "utz",
# ]
# ///
"""Open a directory-compare tool on everything changed since a parent branch.

Stages two temporary trees:
- old/: each changed file as of the merge-base with the parent branch
- new/: each changed file as it is in the working tree (uncommitted edits
  included)

and runs the compare command on them, e.g.:

    git branch-diff              # vs. merge-base with master, using `diff -r`
    git branch-diff main
    GIT_BRANCH_DIFF_CMP='meld' git branch-diff main

The compare command is taken from $GIT_BRANCH_DIFF_CMP, then the
`branchdiff.cmd` git config key, then `diff -r`. The parent branch defaults to
$GIT_BRANCH_DIFF_PARENT, then `branchdiff.parent`, then `master`.

The staged trees are deleted when the compare command exits.
"""

import sys
from os import environ

from click import command
from utz import err
from utz.cli import arg

from .compare import run_compare
from .config import Settings, resolve_settings
from .errors import BranchDiffError
from .git import get_changes, get_config, get_merge_base, get_toplevel
from .stage import StageError, StagingArea, stage_changes


def branch_diff(settings: Settings, worktree: str, tmpdir: str = None) -> list[StageError]:
    """Stage the changes since the merge-base and run the compare command.

    Raises `BranchDiffError` if git or the compare command fail outright; files
    that couldn't be staged are returned instead.
    """
    base = get_merge_base(settings.parent, cwd=worktree)
    changes = get_changes(base, cwd=worktree)
    if not changes:
        err(f"No changes since merge-base with {settings.parent} ({base[:12]})")

    with StagingArea(dir=tmpdir) as area:
        errors = stage_changes(changes, base, area.old, area.new, worktree)
        # Non-zero just means "trees differ" for most tools
        run_compare(settings.compare_cmd, area.old, area.new)

    return errors


@command('git-branch-diff', context_settings=dict(help_option_names=['-h', '--help']))
@arg('parent', required=False)
def cli(parent: str | None) -> None:
    """Compare the working tree against its merge-base with PARENT (default: master)."""
    try:
        settings = resolve_settings(parent, environ, get_config)
        worktree = get_toplevel()
        errors = branch_diff(settings, worktree)
    except BranchDiffError as e:
        err(f"Error: {e}")
        sys.exit(1)

    if errors:
        err(f"{len(errors)} file(s) could not be staged")
        sys.exit(1)


if __name__ == '__main__':
    cli()
