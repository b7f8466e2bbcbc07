"""pipesh - a line-oriented command interpreter with pipelines.

Example usage:
    from pipesh import Shell

    shell = Shell()
    result = shell.run("ls -a | grep -c .")
    print(result.stdout)
"""

from .errors import (
    ExitError,
    ExpansionError,
    LexError,
    ParseError,
    RedirectionError,
    ShellError,
    SpawnError,
)
from .interpreter import Environment, Interpreter
from .parser import parse, tokenize
from .shell import Shell
from .types import (
    EXIT_COMMAND_NOT_FOUND,
    EXIT_NOT_EXECUTABLE,
    EXIT_SYNTAX_ERROR,
    Command,
    CommandContext,
    ExecResult,
    ExecutionLimits,
)

__version__ = "0.1.0"

__all__ = [
    "Command",
    "CommandContext",
    "EXIT_COMMAND_NOT_FOUND",
    "EXIT_NOT_EXECUTABLE",
    "EXIT_SYNTAX_ERROR",
    "Environment",
    "ExecResult",
    "ExecutionLimits",
    "ExitError",
    "ExpansionError",
    "Interpreter",
    "LexError",
    "ParseError",
    "RedirectionError",
    "Shell",
    "ShellError",
    "SpawnError",
    "parse",
    "tokenize",
]
