"""
Command for switching to another worktree.
"""

from pathlib import Path
from typing import Callable, Optional

from wt import selector
from wt.core import WorktreeManager
from wt.utils.chdir import emit_chdir


def switch_worktree(
    name: Optional[str] = None,
    start: Optional[Path] = None,
    select: Callable = selector.select,
) -> int:
    """Move to the named worktree, or one picked interactively."""
    manager = WorktreeManager.discover(start)

    worktrees = manager.list_all()
    if not worktrees:
        print("No worktrees available")
        return 0

    if name is None:
        chosen = select("Select a worktree to switch to:", sorted(wt.path for wt in worktrees))
        if not chosen:
            print("No worktree selected, staying where we are")
            return 0
        name = Path(chosen).name

    path = manager.switch_to(name)
    print(f"Switched to worktree: {path}")
    emit_chdir(path)
    return 0
