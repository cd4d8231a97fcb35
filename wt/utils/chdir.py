"""
Directory-change signaling between wt and its shell wrapper.

A child process cannot change its parent's working directory, so commands
that move the user print a ``WT_CHDIR:<path>`` line on stderr. The shell
function in SHELL_WRAPPER picks it up and performs the ``cd``.
"""

import sys
from pathlib import Path
from typing import Optional, TextIO, Union

CHDIR_PREFIX = 'WT_CHDIR:'

SHELL_WRAPPER = r'''# wt shell integration. Add to your shell profile:
#   eval "$(command wt shell-init)"
wt() {
    local stderr_file
    stderr_file=$(mktemp) || return 1

    command wt "$@" 2>"$stderr_file"
    local exit_code=$?

    grep -v '^WT_CHDIR:' "$stderr_file" >&2

    local target_dir
    target_dir=$(sed -n 's/^WT_CHDIR://p' "$stderr_file" | head -n 1)
    rm -f "$stderr_file"

    if [ -n "$target_dir" ]; then
        if [ -d "$target_dir" ]; then
            cd "$target_dir" || echo "Warning: Failed to change to directory: $target_dir" >&2
        else
            echo "Warning: Directory does not exist: $target_dir" >&2
        fi
    fi

    return $exit_code
}
'''


def format_chdir(path: Union[str, Path]) -> str:
    return f"{CHDIR_PREFIX}{path}"


def emit_chdir(path: Union[str, Path], stream: Optional[TextIO] = None) -> None:
    """Ask the wrapping shell to change into path."""
    stream = stream or sys.stderr
    stream.write(format_chdir(path) + '\n')
    stream.flush()
