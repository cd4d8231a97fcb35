"""
wt - A Python CLI tool for managing Git worktrees around a bare repository.

wt keeps every branch of a repository checked out side by side under one
directory, backed by a single bare store, and cooperates with a small shell
wrapper so commands can move the user between worktrees.
"""

__version__ = "0.1.0"
