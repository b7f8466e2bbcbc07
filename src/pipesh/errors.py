"""Exception taxonomy for pipesh.

Lex and parse errors reject a whole input line before anything runs.
Expansion and spawn errors are raised while a command is being prepared
and are turned into exit codes by the interpreter. ExitError is control
flow, raised by the exit builtin.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .types import EXIT_NOT_EXECUTABLE

if TYPE_CHECKING:
    from .parser.lexer import Token


class ShellError(Exception):
    """Base class for all pipesh errors."""


class LexError(ShellError):
    """Unterminated quote or substitution at end of input."""

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        return f"{self.message} (at position {self.position})"


class ParseError(ShellError):
    """The token stream does not match the line grammar."""

    def __init__(
        self,
        message: str,
        token: Optional["Token"] = None,
        position: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.token = token
        if position is None and token is not None:
            position = token.pos
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


class ExpansionError(ShellError):
    """A word could not be expanded (nested command substitution failed to start)."""


class RedirectionError(ShellError):
    """A redirection target could not be opened."""


class SpawnError(ShellError):
    """The operating system refused to start an external program."""

    def __init__(self, message: str, exit_code: int = EXIT_NOT_EXECUTABLE):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class ExitError(ShellError):
    """Raised by the exit builtin to terminate the interpreter."""

    def __init__(self, exit_code: int, stdout: str = "", stderr: str = ""):
        super().__init__(f"exit {exit_code}")
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    def prepend_output(self, stdout: str, stderr: str) -> None:
        """Prepend output produced before the exit was raised."""
        self.stdout = stdout + self.stdout
        self.stderr = stderr + self.stderr
