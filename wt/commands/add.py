"""
Command for adding a worktree on a new branch.
"""

from pathlib import Path
from typing import Optional

from wt.core import WorktreeManager
from wt.exceptions import HookError
from wt.utils.chdir import emit_chdir


def add_worktree(name: str, base: Optional[str] = None, start: Optional[Path] = None) -> int:
    """Create worktree and branch name from base, then move into it."""
    manager = WorktreeManager.discover(start)
    base = base or 'main'

    print(f"Creating worktree and branch: {name} from base: {base}")
    try:
        worktree = manager.add(name, base)
    except HookError as e:
        # The worktree exists, so still take the user there
        emit_chdir(e.path)
        raise

    emit_chdir(worktree.path)
    return 0
