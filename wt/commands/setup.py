"""
Command for bootstrapping a repository into the bare-store layout.
"""

from pathlib import Path
from typing import Optional

from wt.bootstrap import RepoIdentifier, setup_repository
from wt.config import load_config
from wt.utils.chdir import emit_chdir


def setup_repo(
    repository: str,
    config_path: Path,
    branch: Optional[str] = None,
    parent: Optional[Path] = None,
) -> int:
    """Clone repository and create its base and review worktrees."""
    repo = RepoIdentifier.parse(repository, branch or 'main')
    config = load_config(config_path)

    root = setup_repository(repo, config, parent=parent)

    print(f"Repository ready at {root}")
    emit_chdir(root)
    return 0
