"""
Command for removing every worktree except main, master and review.
"""

from pathlib import Path
from typing import Optional

from wt.core import WorktreeManager
from wt.utils.chdir import emit_chdir


def clear_worktrees(start: Optional[Path] = None) -> int:
    """Remove all removable worktrees, reporting each failure."""
    manager = WorktreeManager.discover(start)

    if not manager.list_removable():
        print("No worktrees to clear")
        return 0

    print("Removing all worktrees except main, master and review")
    result = manager.clear()

    if result.failed:
        print(f"Removed {len(result.succeeded)} worktree(s), {len(result.failed)} failed:")
        for outcome in result.failed:
            print(f"  {outcome.name}: {outcome.reason}")
    else:
        print(f"Removed {len(result.succeeded)} worktree(s)")

    if result.needs_chdir:
        emit_chdir(manager.root)
    return 0
