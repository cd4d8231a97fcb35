"""
Interactive selection of a worktree.
"""

from pathlib import Path
from typing import Optional, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice


def select(prompt: str, options: Sequence[Path]) -> Optional[Path]:
    """Let the user pick one of options; None when they decline."""
    if not options:
        return None

    choices = [Choice(value=option, name=Path(option).name) for option in options]
    choices.append(Choice(value=None, name="(cancel)"))
    try:
        return inquirer.select(
            message=prompt,
            choices=choices,
            qmark="›",
            mandatory=False,
        ).execute()
    except KeyboardInterrupt:
        return None
