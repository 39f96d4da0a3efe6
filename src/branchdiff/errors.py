class BranchDiffError(Exception):
    """Base class for errors that abort a git-branch-diff run."""


class ConfigError(BranchDiffError):
    pass


class GitError(BranchDiffError):
    """A git command exited non-zero."""

    def __init__(self, cmd: list[str], stderr: str = ''):
        self.cmd = cmd
        self.stderr = stderr.strip()
        msg = f"`{' '.join(cmd)}` failed"
        if self.stderr:
            msg = f"{msg}: {self.stderr}"
        super().__init__(msg)


class CompareError(BranchDiffError):
    pass
