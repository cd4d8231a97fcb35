"""
Command for removing a single worktree and its branch.
"""

from pathlib import Path
from typing import Callable, Optional

from wt import selector
from wt.core import WorktreeManager


def remove_worktree(
    name: Optional[str] = None,
    start: Optional[Path] = None,
    select: Callable = selector.select,
) -> int:
    """Remove the named worktree, or one picked interactively."""
    manager = WorktreeManager.discover(start)

    if name is None:
        removable = manager.list_removable()
        if not removable:
            print("No worktrees available to remove")
            return 0

        chosen = select("Select a worktree to remove:", [wt.path for wt in removable])
        if not chosen:
            print("No worktree selected, no action taken")
            return 0
        name = Path(chosen).name

    print(f"Removing worktree: {name}")
    manager.remove(name)
    return 0
