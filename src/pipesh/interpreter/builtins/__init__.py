"""Builtins that act on interpreter state (working directory, session)."""

from .cd import handle_cd
from .control import handle_exit

BUILTINS = {
    "cd": handle_cd,
    "exit": handle_exit,
}

__all__ = ["BUILTINS", "handle_cd", "handle_exit"]
