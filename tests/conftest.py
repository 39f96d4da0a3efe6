"""Fixtures building throwaway git repos."""

import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which('git') is None, reason="git not installed")


def git(repo: Path, *args: str) -> str:
    """Run git in `repo`."""
    return subprocess.run(
        ['git', *args], cwd=repo, check=True, capture_output=True, text=True,
    ).stdout


def write(repo: Path, path: str, text: str) -> None:
    file = repo / path
    file.parent.mkdir(parents=True, exist_ok=True)
    file.write_text(text)


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's own config."""
    home = tmp_path / 'home'
    home.mkdir()
    monkeypatch.setenv('HOME', str(home))
    monkeypatch.setenv('GIT_CONFIG_NOSYSTEM', '1')
    monkeypatch.setenv('GIT_CONFIG_GLOBAL', str(home / '.gitconfig'))
    monkeypatch.setenv('GIT_AUTHOR_NAME', 'Test')
    monkeypatch.setenv('GIT_AUTHOR_EMAIL', 'test@example.com')
    monkeypatch.setenv('GIT_COMMITTER_NAME', 'Test')
    monkeypatch.setenv('GIT_COMMITTER_EMAIL', 'test@example.com')
    monkeypatch.delenv('GIT_BRANCH_DIFF_CMP', raising=False)
    monkeypatch.delenv('GIT_BRANCH_DIFF_PARENT', raising=False)
    return home


@pytest.fixture
def git_repo(tmp_path, git_env) -> Path:
    """Repo on branch `feature`, forked from `master`, with uncommitted changes.

    Relative to the merge-base with `master`:
    - src/a.txt: modified (committed on `feature`)
    - src/b.txt: added (in the index only)
    - src/c.txt: deleted (from the working tree only)
    - docs/x y.txt: modified (working tree only)

    `master` has moved on since the fork (src/c.txt changed, src/upstream.txt
    added); neither change should show up.
    """
    repo = tmp_path / 'repo'
    repo.mkdir()
    git(repo, 'init', '-q')
    git(repo, 'symbolic-ref', 'HEAD', 'refs/heads/master')

    write(repo, 'src/a.txt', 'a1\n')
    write(repo, 'src/c.txt', 'c1\n')
    write(repo, 'docs/x y.txt', 'xy1\n')
    write(repo, 'README.md', 'unchanged\n')
    git(repo, 'add', '.')
    git(repo, 'commit', '-q', '-m', 'Initial commit')

    git(repo, 'checkout', '-q', '-b', 'feature')
    write(repo, 'src/a.txt', 'a2\n')
    git(repo, 'commit', '-q', '-am', 'Update a')

    git(repo, 'checkout', '-q', 'master')
    write(repo, 'src/c.txt', 'c-master\n')
    write(repo, 'src/upstream.txt', 'upstream\n')
    git(repo, 'add', '.')
    git(repo, 'commit', '-q', '-m', 'Upstream work')

    git(repo, 'checkout', '-q', 'feature')
    write(repo, 'src/b.txt', 'b\n')
    git(repo, 'add', 'src/b.txt')
    (repo / 'src/c.txt').unlink()
    write(repo, 'docs/x y.txt', 'xy2\n')
    return repo


def read_tree(root: Path) -> dict[str, str]:
    """Map each file under `root` (relative path) to its text."""
    return {
        str(p.relative_to(root)): p.read_text()
        for p in sorted(root.rglob('*'))
        if p.is_file()
    }
