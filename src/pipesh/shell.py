"""Main Shell class - the primary API for pipesh.

Example usage:
    from pipesh import Shell

    # Synchronous usage (for scripts)
    shell = Shell()
    result = shell.run("printf 'b\\na\\n' | grep a")
    print(result.stdout)  # "a\n"

    # Async usage (for async applications)
    shell = Shell()
    result = await shell.exec("A=1")
    result = await shell.exec("ls | grep -c .")

    # With a startup mapping instead of the process environment
    shell = Shell(env={"PATH": "/usr/bin:/bin"}, inherit_environ=False)
"""

import asyncio
import logging
import os
from typing import Mapping, Optional

import nest_asyncio  # type: ignore[import-untyped]

from .commands import create_command_registry
from .errors import ExitError, LexError, ParseError
from .interpreter import Environment, Interpreter, InterpreterState
from .parser import parse
from .types import EXIT_SUCCESS, EXIT_SYNTAX_ERROR, Command, ExecResult, ExecutionLimits

logger = logging.getLogger(__name__)


class Shell:
    """Main shell interpreter class.

    Holds one session: the variable store, the working directory and the
    exit status of the last line. Every line is lexed, parsed and executed
    independently against that state.
    """

    def __init__(
        self,
        *,
        env: Optional[Mapping[str, str]] = None,
        inherit_environ: bool = True,
        cwd: Optional[str] = None,
        limits: Optional[ExecutionLimits] = None,
        commands: Optional[dict[str, Command]] = None,
    ):
        """Initialize the shell.

        Args:
            env: Startup variables, layered over the process environment.
            inherit_environ: Seed the store from os.environ first.
            cwd: Initial working directory (defaults to the process cwd).
            limits: Execution limits applied to every line.
            commands: Stream builtin registry. If not provided, uses pwd, ls and grep.
        """
        self._limits = limits or ExecutionLimits()
        self._commands = commands if commands is not None else create_command_registry()

        initial_env: dict[str, str] = dict(os.environ) if inherit_environ else {}
        if env:
            initial_env.update(env)

        self._initial_cwd = os.path.abspath(cwd or os.getcwd())
        initial_env["PWD"] = self._initial_cwd
        self._initial_env = initial_env

        self._should_exit = False
        self._interpreter = self._create_interpreter()

    def _create_interpreter(self) -> Interpreter:
        return Interpreter(
            commands=self._commands,
            limits=self._limits,
            state=InterpreterState(
                env=Environment(dict(self._initial_env)),
                cwd=self._initial_cwd,
            ),
        )

    @property
    def cwd(self) -> str:
        """Get the current working directory."""
        return self._interpreter.state.cwd

    @property
    def env(self) -> Environment:
        """Get the variable store."""
        return self._interpreter.state.env

    @property
    def limits(self) -> ExecutionLimits:
        return self._limits

    @property
    def last_exit_code(self) -> int:
        """Exit code of the most recent line."""
        return self._interpreter.state.last_exit_code

    @property
    def should_exit(self) -> bool:
        """True once the exit builtin has run at top level."""
        return self._should_exit

    @property
    def interpreter(self) -> Interpreter:
        return self._interpreter

    def _syntax_error(self, error: Exception) -> ExecResult:
        logger.debug("line rejected: %s", error)
        self._interpreter.state.last_exit_code = EXIT_SYNTAX_ERROR
        return ExecResult(
            stdout="",
            stderr=f"pipesh: {error}\n",
            exit_code=EXIT_SYNTAX_ERROR,
            env=dict(self.env),
        )

    async def exec(self, line: str, *, stdin: Optional[bytes] = None) -> ExecResult:
        """Execute one line and capture its output.

        Args:
            line: The input line.
            stdin: Bytes fed to the first stage, if any.

        Returns:
            ExecResult with stdout, stderr, exit_code, and final env.
        """
        if not line.strip():
            return ExecResult(stdout="", stderr="", exit_code=EXIT_SUCCESS, env=dict(self.env))

        try:
            node = parse(line, self._limits)
        except (LexError, ParseError) as e:
            return self._syntax_error(e)

        try:
            result = await self._interpreter.execute_line(node, capture=True, stdin=stdin)
        except ExitError as error:
            self._should_exit = True
            return ExecResult(
                stdout=error.stdout,
                stderr=error.stderr,
                exit_code=error.exit_code,
                env=dict(self.env),
            )

        return ExecResult(
            stdout=result.stdout.decode("utf-8", errors="replace"),
            stderr=result.stderr.decode("utf-8", errors="replace"),
            exit_code=result.exit_code,
            env=dict(self.env),
        )

    def run(self, line: str, *, stdin: Optional[bytes] = None) -> ExecResult:
        """Execute one line synchronously.

        This is a convenience wrapper around exec() that works in any context,
        including Jupyter notebooks and async frameworks.

        Example:
            >>> shell = Shell()
            >>> result = shell.run("pwd")
            >>> result.exit_code
            0
        """
        try:
            asyncio.get_running_loop()
            # We're in an existing event loop (Jupyter, async framework, etc.)
            # Apply nest_asyncio to allow nested event loops
            nest_asyncio.apply()
        except RuntimeError:
            # No running event loop, asyncio.run() will work fine
            pass
        return asyncio.run(self.exec(line, stdin=stdin))

    async def run_line(self, line: str) -> int:
        """Execute one line interactively and return its exit code.

        Output goes to the real standard streams as it is produced; external
        programs inherit the terminal.
        """
        if not line.strip():
            return self.last_exit_code

        try:
            node = parse(line, self._limits)
        except (LexError, ParseError) as e:
            rejected = self._syntax_error(e)
            self._interpreter.report(rejected.stderr.encode("utf-8"))
            return rejected.exit_code

        try:
            result = await self._interpreter.execute_line(node, capture=False)
        except ExitError as error:
            self._should_exit = True
            self._interpreter.report(error.stderr.encode("utf-8"), error.stdout.encode("utf-8"))
            return error.exit_code
        return result.exit_code

    def reset(self) -> None:
        """Reset the shell state to its initial values."""
        self._should_exit = False
        self._interpreter = self._create_interpreter()
