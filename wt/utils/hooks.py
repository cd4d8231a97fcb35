"""
Post-add hook generation.
"""

import os
from pathlib import Path

from wt.exceptions import WTError

POST_ADD_TEMPLATE = (
    "#!/bin/sh\n"
    "\n"
    "# Anything here will be ran in the root of a newly created worktree\n"
    "git pull {base} {branch}"
)


def render_post_add_hook(base: str, branch: str) -> bytes:
    """Render the post-add script that pulls branch from the base remote."""
    return POST_ADD_TEMPLATE.format(base=base, branch=branch).encode()


def write_post_add_hook(path: Path, base: str, branch: str) -> None:
    """Write the rendered hook to path, replacing any previous content."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(render_post_add_hook(base, branch))
        os.chmod(path, 0o755)
    except OSError as e:
        raise WTError(f"Failed to write post-add hook {path}: {e}") from e
