"""
Core wt functionality - repository root discovery and worktree management.
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from wt.exceptions import (
    HookError,
    NotInRepositoryError,
    PartialRemovalError,
    WorktreeExistsError,
    WorktreeNotFoundError,
    WTError,
)
from wt.utils import git as gitutil
from wt.utils.hooks import write_post_add_hook

logger = logging.getLogger(__name__)

BARE_DIR = '.bare'
HOOKS_DIR = '.hooks'
POST_ADD_HOOK = 'post-add.sh'
DEFAULT_BASE_BRANCH = 'main'
REVIEW_WORKTREE = 'review'

PROTECTED_NAMES = frozenset({'main', 'master', 'review'})


@dataclass(frozen=True)
class Worktree:
    """A worktree directory and the branch checked out in it."""

    name: str
    branch: str
    path: Path

    @classmethod
    def from_path(cls, path: Path) -> 'Worktree':
        path = Path(path)
        return cls(name=path.name, branch=path.name, path=path)

    @property
    def protected(self) -> bool:
        return self.name in PROTECTED_NAMES


@dataclass
class RemovalOutcome:
    """Result of removing one worktree during a bulk operation."""

    name: str
    succeeded: bool
    reason: Optional[str] = None


@dataclass
class ClearResult:
    """Per-worktree outcomes of clear()."""

    outcomes: List[RemovalOutcome] = field(default_factory=list)
    needs_chdir: bool = False

    @property
    def succeeded(self) -> List[RemovalOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[RemovalOutcome]:
        return [o for o in self.outcomes if not o.succeeded]


def find_repository_root(start: Optional[Path] = None) -> Path:
    """Locate the directory that holds the worktrees.

    A directory containing ``.bare`` is a root on its own. Otherwise the
    parent of the nearest directory (walking upward) that contains ``.git``
    is the root.
    """
    start = Path(start) if start else Path.cwd()
    start = start.resolve()

    if (start / BARE_DIR).is_dir():
        return start

    try:
        gitutil.discover_repo(start)
    except WTError as e:
        raise NotInRepositoryError(f"not in a git repository: {start}") from e

    for directory in [start, *start.parents]:
        if (directory / BARE_DIR).is_dir():
            return directory
        if (directory / '.git').exists():
            return directory.parent

    raise NotInRepositoryError(f"git repository root not found from {start}")


class WorktreeManager:
    """Create, remove and enumerate worktrees under a repository root."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    @classmethod
    def discover(cls, start: Optional[Path] = None) -> 'WorktreeManager':
        return cls(find_repository_root(start))

    @property
    def store_path(self) -> Path:
        """Path GitPython opens for repository-level operations."""
        bare = self.root / BARE_DIR
        return bare if bare.is_dir() else self.root

    @property
    def hooks_dir(self) -> Path:
        return self.root / HOOKS_DIR

    @property
    def post_add_hook(self) -> Path:
        return self.hooks_dir / POST_ADD_HOOK

    def path_for(self, name: str) -> Path:
        return self.root / name

    def list_all(self) -> List[Worktree]:
        """Every non-hidden directory directly under the root."""
        try:
            entries = list(os.scandir(self.root))
        except OSError as e:
            raise WTError(f"Failed to read worktrees in {self.root}: {e}") from e

        return [
            Worktree.from_path(Path(entry.path))
            for entry in entries
            if entry.is_dir() and not entry.name.startswith('.')
        ]

    def list_removable(self) -> List[Worktree]:
        """Worktrees that bulk and interactive removal may offer."""
        return [wt for wt in self.list_all() if not wt.protected]

    def get(self, name: str) -> Worktree:
        for worktree in self.list_all():
            if worktree.name == name:
                return worktree
        raise WorktreeNotFoundError(name)

    def create_hooks(self, base: str, branch: str) -> Path:
        """(Re)generate the post-add hook for this root."""
        write_post_add_hook(self.post_add_hook, base, branch)
        return self.post_add_hook

    def run_post_add_hook(self, worktree_path: Path) -> None:
        """Run the post-add hook inside worktree_path, if one is configured."""
        hook = self.post_add_hook
        if not hook.exists():
            return

        try:
            result = subprocess.run(['sh', str(hook)], cwd=worktree_path)
        except OSError as e:
            raise HookError(worktree_path, str(e)) from e
        if result.returncode != 0:
            raise HookError(worktree_path, f"{hook} exited with status {result.returncode}")

    def add(self, branch: str, base: Optional[str] = None) -> Worktree:
        """Create branch from base and check it out in <root>/<branch>."""
        base = base or DEFAULT_BASE_BRANCH
        worktree = Worktree.from_path(self.path_for(branch))

        if worktree.path.exists():
            raise WorktreeExistsError(branch, worktree.path)

        gitutil.worktree_add(
            self.store_path,
            worktree.path,
            branch=branch,
            base=base,
            new_branch=True,
        )
        gitutil.clear_leftover_branch(self.store_path, worktree.name)
        self.run_post_add_hook(worktree.path)
        return worktree

    def _remember_leftover(self, worktree: Worktree) -> None:
        try:
            gitutil.mark_leftover_branch(self.store_path, worktree.name, worktree.branch)
        except WTError as e:
            logger.warning("could not record leftover branch %s: %s", worktree.branch, e)

    def _has_leftover_branch(self, worktree: Worktree) -> bool:
        """True when a worktree called name was removed but its branch was kept.

        Either an earlier removal recorded the branch, or git still lists the
        worktree although its directory is gone.
        """
        store = self.store_path
        if not gitutil.branch_exists(store, worktree.branch):
            return False
        if gitutil.leftover_branch(store, worktree.name) == worktree.branch:
            return True
        recorded = {p.resolve() for p in gitutil.worktree_paths(store)}
        return worktree.path.resolve() in recorded

    def _remove_one(self, worktree: Worktree) -> None:
        gitutil.worktree_remove(self.store_path, worktree.path, force=True)
        try:
            gitutil.delete_branch(self.store_path, worktree.branch)
        except WTError as e:
            self._remember_leftover(worktree)
            raise PartialRemovalError(worktree.name, str(e)) from e

    def remove(self, name: str) -> Worktree:
        """Remove the worktree called name and delete its branch.

        If only the branch is left over from an earlier partial removal,
        just the branch is deleted. A branch that never had a worktree here
        is not touched.
        """
        worktree = Worktree.from_path(self.path_for(name))

        if worktree.path.is_dir():
            self._remove_one(worktree)
            return worktree

        if not self._has_leftover_branch(worktree):
            raise WorktreeNotFoundError(name)

        gitutil.worktree_prune(self.store_path)
        try:
            gitutil.delete_branch(self.store_path, worktree.branch)
        except WTError as e:
            raise PartialRemovalError(worktree.name, str(e)) from e
        gitutil.clear_leftover_branch(self.store_path, worktree.name)
        return worktree

    def clear(self) -> ClearResult:
        """Remove every removable worktree, continuing past failures."""
        result = ClearResult()
        worktrees = self.list_removable()
        if not worktrees:
            return result

        cwd = _current_dir()
        for worktree in worktrees:
            print(f"Removing worktree: {worktree.name}")
            try:
                gitutil.worktree_remove(self.store_path, worktree.path, force=True)
            except WTError as e:
                logger.warning("failed to remove worktree %s: %s", worktree.name, e)
                result.outcomes.append(RemovalOutcome(worktree.name, False, str(e)))
                continue

            if cwd is not None and _is_within(cwd, worktree.path):
                result.needs_chdir = True

            try:
                gitutil.delete_branch(self.store_path, worktree.branch)
            except WTError as e:
                logger.warning("failed to delete branch %s: %s", worktree.branch, e)
                self._remember_leftover(worktree)
                result.outcomes.append(
                    RemovalOutcome(worktree.name, False, f"branch not deleted: {e}")
                )
                continue

            result.outcomes.append(RemovalOutcome(worktree.name, True))

        return result

    def switch_to(self, name: str) -> Path:
        """Change this process's working directory into the named worktree."""
        path = self.get(name).path
        if not path.is_dir():
            raise WorktreeNotFoundError(name)
        os.chdir(path)
        return path


def _current_dir() -> Optional[Path]:
    try:
        return Path.cwd().resolve()
    except OSError:
        return None


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent.resolve())
        return True
    except ValueError:
        return False
