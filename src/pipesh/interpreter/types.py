"""Interpreter types for pipesh."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from .environment import Environment

if TYPE_CHECKING:
    from ..ast.types import LineNode
    from ..types import Command, CommandOutput, ExecutionLimits


@dataclass
class InterpreterState:
    """Mutable state maintained by the interpreter."""

    env: Environment = field(default_factory=Environment)
    """Variables. Top-level lines see the ambient store; subshells
    (command substitutions, pipeline stages) see a throwaway overlay."""

    cwd: str = "/"
    """Current working directory."""

    previous_dir: str = ""
    """Previous directory (for cd -)."""

    last_exit_code: int = 0
    """Exit code of the last line (default for a bare exit)."""

    substitution_depth: int = 0
    """Number of command substitutions currently executing."""

    expansion_stderr: bytearray = field(default_factory=bytearray)
    """Diagnostics from command substitutions of the command being prepared."""

    pipe_status: list[int] = field(default_factory=list)
    """Exit code of every stage of the last pipeline, for diagnostics."""


@dataclass
class InterpreterContext:
    """Context provided to builtins and the expander."""

    state: InterpreterState
    """Mutable interpreter state."""

    commands: dict[str, "Command"]
    """Stream builtins by name."""

    limits: "ExecutionLimits"
    """Execution limits."""

    capture: Callable[["LineNode", Environment], Awaitable["CommandOutput"]]
    """Run a parsed line as a command substitution and capture its output."""
