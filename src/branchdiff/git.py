from dataclasses import dataclass
from subprocess import run

from utz import err

from .errors import GitError


@dataclass(frozen=True)
class Change:
    """One entry of `git diff --name-status` output."""
    status: str
    path: str

    @property
    def added(self) -> bool:
        return self.status.startswith('A')

    @property
    def deleted(self) -> bool:
        return self.status.startswith('D')

    @property
    def in_old(self) -> bool:
        """Whether the file exists at the merge-base."""
        return not self.added

    @property
    def in_new(self) -> bool:
        """Whether the file exists in the working tree."""
        return not self.deleted


def run_git(cmd: list[str], **kwargs):
    """`subprocess.run` for git, raising `GitError` if git itself is missing."""
    try:
        return run(cmd, capture_output=True, **kwargs)
    except FileNotFoundError:
        raise GitError(cmd, "git not found on PATH")


def git(*args: str, cwd: str = None) -> str:
    """Run a git command, returning its stdout; raise `GitError` on failure."""
    cmd = ['git', *args]
    result = run_git(cmd, text=True, errors='surrogateescape', cwd=cwd)
    if result.returncode != 0:
        raise GitError(cmd, result.stderr)
    return result.stdout


def get_toplevel(cwd: str = None) -> str:
    """Absolute path of the current worktree's root."""
    return git('rev-parse', '--show-toplevel', cwd=cwd).strip()


def get_merge_base(parent: str, head: str = 'HEAD', cwd: str = None) -> str:
    """Get the best common ancestor of `parent` and `head`.

    Fails (with git's own message) if `parent` doesn't resolve or the two have
    no common history.
    """
    cmd = ['merge-base', parent, head]
    # Anything starting with "-" would be parsed as an option, not a revision
    if parent.startswith('-'):
        raise GitError(['git', *cmd], f"invalid parent branch {parent!r}")
    sha = git(*cmd, cwd=cwd).strip()
    if not sha:
        raise GitError(['git', *cmd], f"no merge base between {parent} and {head}")
    return sha


def get_config(key: str, cwd: str = None) -> str | None:
    """Read a git config value; `None` if unset or unreadable."""
    cmd = ['git', 'config', '--get', key]
    result = run_git(cmd, text=True, errors='surrogateescape', cwd=cwd)
    if result.returncode == 0:
        return result.stdout.rstrip('\n')
    # 1 means "key not set"; anything else is a broken config, which we ignore
    if result.returncode != 1:
        err(f"Warning: ignoring git config {key}: {result.stderr.strip()}")
    return None


_ESCAPES = {
    'a': '\a',
    'b': '\b',
    't': '\t',
    'n': '\n',
    'v': '\v',
    'f': '\f',
    'r': '\r',
    '"': '"',
    '\\': '\\',
}


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of "unusual" paths.

    git wraps such paths in double quotes, backslash-escaping control
    characters, quotes and backslashes, and octal-escaping raw bytes.
    Unquoted paths are returned as-is.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        c = body[i]
        if c == '\\' and i + 1 < len(body):
            nxt = body[i + 1]
            if nxt in _ESCAPES:
                out += _ESCAPES[nxt].encode()
                i += 2
                continue
            octal = body[i + 1:i + 4]
            if len(octal) == 3 and all(ch in '01234567' for ch in octal):
                out.append(int(octal, 8))
                i += 4
                continue
        out += c.encode('utf-8', 'surrogateescape')
        i += 1
    return out.decode('utf-8', 'surrogateescape')


def parse_name_status(text: str) -> list[Change]:
    """Parse `git diff --name-status` output into `Change`s.

    Each line is split on its first run of whitespace into a status token and
    a path (which may itself contain whitespace). Lines with no separator are
    skipped, as are repeats of an already-seen path.
    """
    changes = []
    seen = set()
    for line in text.split('\n'):
        parts = line.split(None, 1)
        if len(parts) < 2:
            continue
        status, path = parts
        path = unquote_path(path)
        if not path or path in seen:
            continue
        seen.add(path)
        changes.append(Change(status, path))
    return changes


def get_changes(base: str, cwd: str = None) -> list[Change]:
    """List files that differ between `base` and the working tree.

    Renames are reported as a deletion plus an addition, so that every record
    names exactly one path.
    """
    stdout = git(
        '-c', 'core.quotepath=true',
        'diff', '--name-status', '--no-renames', base, '--',
        cwd=cwd,
    )
    return parse_name_status(stdout)


SYMLINK_MODE = '120000'


def get_file_mode(rev: str, path: str, cwd: str = None) -> str | None:
    """Get the git file mode of `path` as of `rev` (e.g. `100644`, `120000`).

    Returns `None` if `path` doesn't exist at `rev`.
    """
    stdout = git('--literal-pathspecs', 'ls-tree', rev, '--', path, cwd=cwd)
    for line in stdout.split('\n'):
        meta, _, _ = line.partition('\t')
        if meta:
            return meta.split()[0]
    return None


def get_file_content(rev: str, path: str, cwd: str = None) -> bytes:
    """Get the raw content of `path` as of `rev`."""
    cmd = ['git', 'show', f'{rev}:{path}']
    result = run_git(cmd, cwd=cwd)
    if result.returncode != 0:
        raise GitError(cmd, result.stderr.decode(errors='replace'))
    return result.stdout
