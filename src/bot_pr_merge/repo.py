"""Discovery of the GitHub repository behind a local work tree."""

import os
import re
import subprocess
from pathlib import Path

from .auto_merger.errors import TransportError
from .auto_merger.github_client import GitHubClient
from .auto_merger.models import RemoteRepository

_GITHUB_REMOTE_RE = re.compile(
    r"^(?:https://(?:[^@/]+@)?github\.com/|(?:ssh://)?git@github\.com[:/])"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


class RepositoryError(Exception):
    """Raised when the local repository or its GitHub remote cannot be resolved."""


def git_executable() -> str:
    """Return the git executable, preferring the one running a git extension.

    ``GIT_EXEC_PATH`` is set when this tool runs as ``git <subcommand>``.
    """
    exec_path = os.environ.get("GIT_EXEC_PATH")
    if exec_path:
        return str(Path(exec_path) / "git")
    return "git"


def _run_git(cwd: str | Path, *args: str) -> str:
    """Run a git command in ``cwd`` and return its stripped stdout.

    Raises
    ------
    RepositoryError
        If git is missing or the command fails.

    """
    cmd = [git_executable(), *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise RepositoryError("git is not installed") from e
    except subprocess.CalledProcessError as e:
        raise RepositoryError(
            f"git {' '.join(args)} failed: {(e.stderr or '').strip()}"
        ) from e
    return result.stdout.strip()


def find_work_tree(cwd: str | Path) -> Path:
    """Return the top level directory of the work tree containing ``cwd``."""
    return Path(_run_git(cwd, "rev-parse", "--show-toplevel"))


def get_remote_url(work_tree: str | Path, remote: str = "origin") -> str:
    """Return the URL of ``remote``."""
    url = _run_git(work_tree, "config", "--get", f"remote.{remote}.url")
    if not url:
        raise RepositoryError(f"No URL configured for remote {remote!r}")
    return url


def parse_github_remote(url: str) -> tuple[str, str]:
    """Extract ``(owner, name)`` from a GitHub remote URL.

    Both HTTPS (``https://github.com/o/r.git``) and SSH
    (``git@github.com:o/r.git``) forms are accepted.

    Raises
    ------
    RepositoryError
        If ``url`` does not point at github.com.

    """
    match = _GITHUB_REMOTE_RE.match(url.strip())
    if not match:
        raise RepositoryError(f"Remote {url!r} is not a GitHub repository")
    return match.group("owner"), match.group("name")


def open_repository(
    cwd: str | Path, client: GitHubClient, remote: str = "origin"
) -> RemoteRepository:
    """Resolve the GitHub repository of the work tree at ``cwd``.

    Parameters
    ----------
    cwd : str or Path
        Any directory inside the work tree.
    client : GitHubClient
        Client used to look up the default branch.
    remote : str, optional
        Name of the git remote pointing at GitHub (default="origin").

    Returns
    -------
    RemoteRepository
        Owner, name and default branch.

    Raises
    ------
    RepositoryError
        If the work tree, the remote or the GitHub repository cannot be
        resolved.

    """
    work_tree = find_work_tree(cwd)
    owner, name = parse_github_remote(get_remote_url(work_tree, remote))
    try:
        return client.get_repository(owner, name)
    except TransportError as e:
        raise RepositoryError(f"Error retrieving GitHub repo {owner}/{name}: {e}") from e
