"""
Version-control engine adapter built on GitPython.

Every helper reopens the repository by path; nothing keeps a Repo handle
between calls.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import git
from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from wt.exceptions import RemoteExistsError, TransportError, WTError
from wt.utils.remote import extract_host

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

HOST_KEY_MARKERS = (
    "Host key verification failed",
    "REMOTE HOST IDENTIFICATION HAS CHANGED",
    "knownhosts: key mismatch",
)

LEFTOVER_SECTION = 'wt-leftover "{}"'


def _stderr(error: GitCommandError) -> str:
    return (error.stderr or "").strip() or str(error)


def open_repo(path: PathLike) -> Repo:
    """Open the repository store at path."""
    try:
        return Repo(str(path))
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise WTError(f"Not a Git repository: {path}") from e


def clone_bare(url: str, path: PathLike, env: Optional[Mapping[str, str]] = None) -> None:
    """Clone url as a bare repository into path."""
    logger.debug("cloning %s into %s", url, path)
    try:
        Repo.clone_from(url, str(path), bare=True, env=dict(env) if env else None)
    except GitCommandError as e:
        stderr = _stderr(e)
        if any(marker in stderr for marker in HOST_KEY_MARKERS):
            host = extract_host(url)
            raise TransportError(
                f"SSH host key verification failed. Run: ssh-keyscan {host} >> ~/.ssh/known_hosts"
            ) from e
        raise TransportError(f"Failed to clone {url}: {stderr}") from e


def get_remotes(path: PathLike) -> Dict[str, str]:
    """Map remote names to their first URL."""
    repo = open_repo(path)
    remotes = {}
    for remote in repo.remotes:
        url = next(iter(remote.urls), None)
        if url:
            remotes[remote.name] = url
    return remotes


def add_remote(path: PathLike, name: str, url: str) -> None:
    """Add a named remote to the repository at path."""
    if name in get_remotes(path):
        raise RemoteExistsError(name)

    repo = open_repo(path)
    try:
        repo.create_remote(name, url)
    except GitCommandError as e:
        raise TransportError(f"Failed to add remote '{name}' ({url}): {_stderr(e)}") from e


def _find_head(repo: Repo, name: str) -> Optional[git.Head]:
    for head in repo.heads:
        if head.name == name:
            return head
    return None


def branch_exists(path: PathLike, name: str) -> bool:
    """Check whether refs/heads/<name> exists."""
    return _find_head(open_repo(path), name) is not None


def create_branch(path: PathLike, name: str, base: Optional[str] = None) -> None:
    """Create a branch pointing at base (or HEAD when base is empty)."""
    repo = open_repo(path)
    if base:
        head = _find_head(repo, base)
        if head is None:
            raise WTError(f"base branch {base} not found")
        commit = head.commit
    else:
        commit = repo.head.commit

    try:
        repo.create_head(name, commit)
    except GitCommandError as e:
        raise WTError(f"Failed to create branch {name}: {_stderr(e)}") from e


def delete_branch(path: PathLike, name: str) -> None:
    """Delete refs/heads/<name> without checking whether it is merged."""
    repo = open_repo(path)
    head = _find_head(repo, name)
    if head is None:
        raise WTError(f"branch {name} not found")

    try:
        repo.delete_head(head, force=True)
    except GitCommandError as e:
        raise WTError(f"Failed to delete branch {name}: {_stderr(e)}") from e


def worktree_add(
    path: PathLike,
    target: PathLike,
    branch: Optional[str] = None,
    base: Optional[str] = None,
    new_branch: bool = False,
    force: bool = False,
) -> None:
    """Run ``git worktree add`` against the store at path."""
    args = ['add']
    if force:
        args.append('--force')
    if new_branch and branch:
        args.extend(['-b', branch])
    args.append(str(target))
    if new_branch:
        if base:
            args.append(base)
    elif branch:
        args.append(branch)

    repo = open_repo(path)
    try:
        repo.git.worktree(*args)
    except GitCommandError as e:
        raise WTError(f"Failed to create worktree at {target}: {_stderr(e)}") from e


def worktree_remove(path: PathLike, target: PathLike, force: bool = True) -> None:
    """Run ``git worktree remove`` against the store at path."""
    args = ['remove']
    if force:
        args.append('--force')
    args.append(str(target))

    repo = open_repo(path)
    try:
        repo.git.worktree(*args)
    except GitCommandError as e:
        raise WTError(f"Failed to remove worktree {target}: {_stderr(e)}") from e


def worktree_prune(path: PathLike) -> None:
    """Drop administrative entries for worktrees whose directory is gone."""
    try:
        open_repo(path).git.worktree('prune')
    except GitCommandError as e:
        raise WTError(f"Failed to prune worktrees: {_stderr(e)}") from e


def discover_repo(start: PathLike) -> Repo:
    """Find the repository containing start, searching parent directories."""
    try:
        return git.Repo(str(start), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise WTError(f"not in a git repository: {start}") from e


def worktree_paths(path: PathLike) -> List[Path]:
    """Paths recorded by ``git worktree list``, including ones whose directory is gone."""
    try:
        output = open_repo(path).git.worktree('list', '--porcelain')
    except GitCommandError as e:
        raise WTError(f"Failed to list worktrees: {_stderr(e)}") from e

    return [
        Path(line[len('worktree '):])
        for line in output.splitlines()
        if line.startswith('worktree ')
    ]


def mark_leftover_branch(path: PathLike, name: str, branch: str) -> None:
    """Record that the worktree called name is gone but its branch is not."""
    repo = open_repo(path)
    try:
        with repo.config_writer(config_level='repository') as writer:
            writer.set_value(LEFTOVER_SECTION.format(name), 'branch', branch)
    except OSError as e:
        raise WTError(f"Failed to record leftover branch {branch}: {e}") from e


def leftover_branch(path: PathLike, name: str) -> Optional[str]:
    reader = open_repo(path).config_reader(config_level='repository')
    section = LEFTOVER_SECTION.format(name)
    if not reader.has_section(section):
        return None
    return reader.get(section, 'branch')


def clear_leftover_branch(path: PathLike, name: str) -> None:
    repo = open_repo(path)
    section = LEFTOVER_SECTION.format(name)
    try:
        with repo.config_writer(config_level='repository') as writer:
            if writer.has_section(section):
                writer.remove_section(section)
    except OSError as e:
        raise WTError(f"Failed to update {path} config: {e}") from e
