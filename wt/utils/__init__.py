"""
Utility modules for wt.
"""

from .chdir import (
    CHDIR_PREFIX,
    SHELL_WRAPPER,
    emit_chdir
)

from .hooks import (
    render_post_add_hook,
    write_post_add_hook
)

from .remote import (
    DEFAULT_HOST,
    SSHAuth,
    build_repository_url,
    extract_host,
    is_ssh_url,
    resolve_ssh_auth
)

__all__ = [
    # directory-change signaling
    'CHDIR_PREFIX',
    'SHELL_WRAPPER',
    'emit_chdir',

    # post-add hook
    'render_post_add_hook',
    'write_post_add_hook',

    # remotes and SSH auth
    'DEFAULT_HOST',
    'SSHAuth',
    'build_repository_url',
    'extract_host',
    'is_ssh_url',
    'resolve_ssh_auth'
]
