"""Core types shared across pipesh."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Protocol


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_SYNTAX_ERROR = 2
"""A line rejected by the lexer or parser."""

EXIT_NOT_EXECUTABLE = 126
"""The program was found but could not be started."""

EXIT_COMMAND_NOT_FOUND = 127
"""Neither a builtin nor an executable on the search path."""

SIGNAL_EXIT_BASE = 128
"""A child killed by signal N reports SIGNAL_EXIT_BASE + N."""


@dataclass
class ExecResult:
    """Result of running a command or a whole line."""

    stdout: str
    stderr: str
    exit_code: int
    env: Optional[dict[str, str]] = None
    """Snapshot of the ambient variables after a top-level line, if requested."""


@dataclass
class CommandContext:
    """Context handed to stream builtins (pwd, ls, grep)."""

    cwd: str
    """Working directory of the interpreter."""

    env: Mapping[str, str]
    """Variables visible to this command, including its own assignments."""

    stdin: str = ""
    """Complete standard input of the command."""

    inherited_stdin: Optional[Callable[[], str]] = None
    """Reads the interpreter's own stdin; set when nothing is piped in."""

    def read_stdin(self) -> str:
        """Input of the command, reading the inherited stream on demand."""
        if self.inherited_stdin is not None:
            return self.inherited_stdin()
        return self.stdin


class Command(Protocol):
    """A builtin implemented as a class with an async execute method."""

    name: str

    async def execute(self, args: list[str], ctx: CommandContext) -> ExecResult:
        ...


@dataclass
class ExecutionLimits:
    """Safety limits applied to each input line."""

    max_input_size: int = 1_000_000
    """Maximum number of characters in one line."""

    max_tokens: int = 100_000
    """Maximum number of tokens produced for one line."""

    max_substitution_depth: int = 64
    """Maximum nesting of command substitutions being executed."""


@dataclass
class StageResult:
    """Raw outcome of one pipeline stage."""

    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int = 0


@dataclass
class CommandOutput:
    """Captured output of a line run through Interpreter.run."""

    stdout: bytes
    exit_code: int
    stderr: bytes = field(default=b"")
