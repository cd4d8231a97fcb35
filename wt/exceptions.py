"""
Error hierarchy for wt.

Every failure the tool reports derives from WTError so the CLI can turn it
into a single "Error: ..." line.
"""

from pathlib import Path
from typing import Optional


class WTError(Exception):
    """Base exception for wt operations."""
    pass


class InvalidRepositoryError(WTError):
    """Raised when a repository identifier cannot be parsed."""
    pass


class NotInRepositoryError(WTError):
    """Raised when no repository root can be found from a directory."""
    pass


class WorktreeNotFoundError(WTError):
    """Raised when a worktree targeted by name does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"worktree '{name}' not found")


class WorktreeExistsError(WTError):
    """Raised when adding a worktree whose directory is already present."""

    def __init__(self, name: str, path: Path):
        self.name = name
        self.path = path
        super().__init__(f"worktree '{name}' already exists at {path}")


class ConfigError(WTError):
    """Raised for missing or invalid configuration."""
    pass


class TransportError(WTError):
    """Raised when cloning or talking to a remote fails."""
    pass


class SSHAuthError(TransportError):
    """Raised when no SSH credential could be resolved for a clone."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "no SSH authentication method available "
               "(tried SSH agent and common key locations)"
        )


class RemoteExistsError(WTError):
    """Raised when a remote with the same name is already configured."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"remote '{name}' already exists")


class HookError(WTError):
    """Raised when the post-add hook fails after the worktree was created.

    The worktree at ``path`` is left in place.
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"worktree created at {path} but post-add hook failed: {reason}"
        )


class PartialRemovalError(WTError):
    """Raised when a worktree directory was removed but its branch was not.

    Running the removal again deletes only the remaining branch.
    """

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(
            f"worktree '{name}' was removed but deleting branch '{name}' failed: {reason}"
        )
