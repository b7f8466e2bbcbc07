"""Stream builtins: commands that read stdin and write stdout in-process."""

from ..types import Command
from .grep.grep import GrepCommand
from .ls.ls import LsCommand
from .pwd.pwd import PwdCommand


def create_command_registry() -> dict[str, Command]:
    """Create the default registry of stream builtins, keyed by name."""
    commands: list[Command] = [GrepCommand(), LsCommand(), PwdCommand()]
    return {command.name: command for command in commands}


__all__ = [
    "GrepCommand",
    "LsCommand",
    "PwdCommand",
    "create_command_registry",
]
