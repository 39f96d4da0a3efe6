import os
import shutil
import tempfile
from dataclasses import dataclass
from os.path import isabs, normpath
from pathlib import Path
from typing import Callable, Iterable

from utz import err

from .errors import BranchDiffError
from .git import SYMLINK_MODE, Change, get_file_content, get_file_mode


@dataclass(frozen=True)
class StageError:
    """A file that couldn't be staged on one side."""
    path: str
    side: str
    reason: str

    def __str__(self):
        return f"{self.path} ({self.side}): {self.reason}"


class StagingArea:
    """Context manager for a private temp dir holding `old/` and `new/` trees.

    The directory gets a random name, and is removed on exit no matter how the
    `with` block ends.
    """

    def __init__(self, prefix: str = 'git-branch-diff.', dir: str = None):
        """Initialize staging area settings.

        Args:
            prefix: Name prefix for the temp dir (a random suffix is appended)
            dir: Parent dir for the temp dir (system default if omitted)
        """
        self.prefix = prefix
        self.dir = dir
        self.root = None

    @property
    def old(self) -> Path:
        return self.root / 'old'

    @property
    def new(self) -> Path:
        return self.root / 'new'

    def __enter__(self):
        self.root = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.dir))
        self.old.mkdir()
        self.new.mkdir()
        return self

    def cleanup(self) -> None:
        """Recursively remove the staging dir; safe to call more than once."""
        if self.root is None or not self.root.exists():
            return
        try:
            shutil.rmtree(self.root)
        except OSError as e:
            err(f"Warning: failed to remove {self.root}: {e}")

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()


def is_safe_path(path: str) -> bool:
    """Whether `path` stays inside whatever root it's joined onto."""
    if not path or isabs(path):
        return False
    norm = normpath(path)
    return norm != '..' and not norm.startswith('../')


def stage_changes(
    changes: Iterable[Change],
    base: str,
    old_root: Path,
    new_root: Path,
    worktree: str,
    show: Callable[[str, str], bytes] = None,
    mode: Callable[[str, str], str | None] = None,
) -> list[StageError]:
    """Populate `old_root` and `new_root` with the two sides of each change.

    Files are written at the merge-base (`base`) into `old_root` unless they
    were added, and copied from `worktree` into `new_root` unless they were
    deleted. Symlinks are staged as symlinks on both sides. A failure on one
    side of one file is reported and collected, and everything else is still
    staged.

    Returns:
        The per-file failures (empty if everything was staged)
    """
    if show is None:
        def show(rev, path):
            return get_file_content(rev, path, cwd=worktree)
    if mode is None:
        def mode(rev, path):
            return get_file_mode(rev, path, cwd=worktree)

    old_root = Path(old_root)
    new_root = Path(new_root)
    worktree = Path(worktree)

    errors = []

    def fail(path: str, side: str, reason: str):
        error = StageError(path, side, reason)
        err(f"Error staging {error}")
        errors.append(error)

    for change in changes:
        path = change.path
        if not is_safe_path(path):
            fail(path, 'both', "path escapes the repository")
            continue

        if change.in_old:
            dst = old_root / path
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                content = show(base, path)
                if mode(base, path) == SYMLINK_MODE:
                    os.symlink(os.fsdecode(content), dst)
                else:
                    dst.write_bytes(content)
            except (BranchDiffError, OSError) as e:
                fail(path, 'old', str(e))

        if change.in_new:
            src = worktree / path
            dst = new_root / path
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, dst, follow_symlinks=False)
            except OSError as e:
                fail(path, 'new', str(e))

    return errors
