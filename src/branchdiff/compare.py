from pathlib import Path
from subprocess import run

from .errors import CompareError


def build_compare_cmd(cmd: list[str], old_root: str | Path, new_root: str | Path) -> list[str]:
    """Append the two staged trees to the compare command."""
    return [*cmd, str(old_root), str(new_root)]


def run_compare(cmd: list[str], old_root: str | Path, new_root: str | Path) -> int:
    """Run the compare tool on the staged trees, returning its exit code.

    The tool shares our stdin/stdout/stderr, so its output (and any
    interaction) goes straight to the user. Most directory-diff tools exit
    non-zero when the trees differ; that's left for the caller to interpret.
    """
    full_cmd = build_compare_cmd(cmd, old_root, new_root)
    try:
        result = run(full_cmd)
    except FileNotFoundError:
        raise CompareError(f"Compare command not found: {full_cmd[0]}")
    except PermissionError:
        raise CompareError(f"Compare command not executable: {full_cmd[0]}")
    return result.returncode
