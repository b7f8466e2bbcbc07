"""Interpreter - line execution engine.

Executes a parsed line (a bare command or a pipeline) against builtins
and external programs. Delegates to:
- word expansion (expansion.py)
- redirections (redirections.py)
- stage execution (stages.py)
- builtins (builtins/ and ..commands)

Pipelines run stage by stage: each stage gets the complete output of the
previous one as its input, and the line reports the exit code of the last
stage. Failures inside a stage (unknown command, spawn error, bad
redirection) become exit codes; only ExitError from the exit builtin
escapes a top-level line.

Two output modes:
- capture: everything the line writes is collected and returned
- interactive: the last stage writes to the interpreter's real stdout and
  external programs inherit stdin/stderr
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager, nullcontext
from typing import Iterator, Optional, TextIO

from ..ast.types import LineNode, SimpleCommandNode, pipeline_commands
from ..errors import ExitError, ExpansionError, RedirectionError, SpawnError
from ..parser import parse
from ..types import (
    EXIT_COMMAND_NOT_FOUND,
    EXIT_FAILURE,
    EXIT_SUCCESS,
    Command,
    CommandContext,
    CommandOutput,
    ExecResult,
    ExecutionLimits,
    StageResult,
)
from .builtins import BUILTINS
from .environment import Environment
from .expansion import expand_word
from .redirections import StageRedirections, open_redirections
from .stages import PIPE, BuiltinStage, ExternalStage, Stage, StreamTarget, read_process_stdin
from .types import InterpreterContext, InterpreterState

logger = logging.getLogger(__name__)


def _diagnostic(message: str) -> bytes:
    return f"pipesh: {message}\n".encode("utf-8")


def _write_through(stream: TextIO, data: bytes) -> None:
    """Write raw bytes to a text stream, keeping ordering with earlier text."""
    if not data:
        return
    stream.flush()
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        buffer.write(data)
        buffer.flush()
    else:
        stream.write(data.decode("utf-8", errors="replace"))
        stream.flush()


class Interpreter:
    """Executor for parsed lines."""

    def __init__(
        self,
        commands: dict[str, Command],
        limits: Optional[ExecutionLimits] = None,
        state: Optional[InterpreterState] = None,
    ):
        """Initialize the interpreter.

        Args:
            commands: Stream builtins by name
            limits: Execution limits
            state: Optional initial state (defaults to the process environment
                and working directory)
        """
        self._commands = commands
        self._limits = limits or ExecutionLimits()
        self._state = state or InterpreterState(
            env=Environment(dict(os.environ)),
            cwd=os.getcwd(),
        )
        self._ctx = InterpreterContext(
            state=self._state,
            commands=commands,
            limits=self._limits,
            capture=self.capture,
        )

    @property
    def state(self) -> InterpreterState:
        """Get the interpreter state."""
        return self._state

    @property
    def limits(self) -> ExecutionLimits:
        return self._limits

    def report(self, stderr: bytes, stdout: bytes = b"") -> None:
        """Write output produced outside a stage to the real streams."""
        _write_through(sys.stdout, stdout)
        _write_through(sys.stderr, stderr)

    async def run(self, line: str, env: Optional[Environment] = None) -> CommandOutput:
        """Lex, parse and run ``line`` in a subshell, capturing its output.

        Nothing the line does (assignments, cd) outlives the call; ``env``
        defaults to the ambient store.

        Raises:
            LexError, ParseError: the line is malformed.
        """
        node = parse(line, self._limits)
        state = self._state
        saved_stderr = state.expansion_stderr
        state.expansion_stderr = bytearray()
        try:
            return await self.capture(node, env if env is not None else state.env)
        finally:
            state.expansion_stderr = saved_stderr

    async def capture(self, node: LineNode, env: Environment) -> CommandOutput:
        """Run a parsed line as a command substitution.

        Raises:
            ExpansionError: a program could not be spawned, or substitutions
                are nested deeper than the configured limit.
        """
        state = self._state
        if state.substitution_depth >= self._limits.max_substitution_depth:
            raise ExpansionError(
                f"command substitution nested too deeply (>{self._limits.max_substitution_depth})"
            )

        state.substitution_depth += 1
        try:
            with self._subshell(env):
                try:
                    result = await self.execute(node, capture=True, strict=True)
                except ExitError as e:
                    result = StageResult(
                        stdout=e.stdout.encode("utf-8"),
                        stderr=e.stderr.encode("utf-8"),
                        exit_code=e.exit_code,
                    )
        finally:
            state.substitution_depth -= 1

        state.expansion_stderr += result.stderr
        return CommandOutput(stdout=result.stdout, exit_code=result.exit_code, stderr=result.stderr)

    async def execute_line(
        self,
        node: LineNode,
        *,
        capture: bool = True,
        stdin: Optional[bytes] = None,
    ) -> StageResult:
        """Execute a top-level line and record its exit code.

        Raises:
            ExitError: the exit builtin ran outside a pipeline.
        """
        try:
            result = await self.execute(node, capture=capture, stdin=stdin)
        except ExitError as e:
            self._state.last_exit_code = e.exit_code
            raise
        self._state.last_exit_code = result.exit_code
        return result

    async def execute(
        self,
        node: LineNode,
        *,
        capture: bool = True,
        stdin: Optional[bytes] = None,
        strict: bool = False,
    ) -> StageResult:
        """Execute a command or pipeline.

        Args:
            node: Parsed line
            capture: Collect output instead of writing to the real streams
            stdin: Input for the first stage; None means no piped input
            strict: Raise ExpansionError on spawn failure (command substitution)
        """
        commands = pipeline_commands(node)
        in_pipeline = len(commands) > 1
        data = stdin
        stderr = bytearray()
        exit_codes: list[int] = []
        result = StageResult()

        for index, command in enumerate(commands):
            is_last = index == len(commands) - 1

            # Each stage of a real pipeline runs in a subshell
            scope = self._subshell(self._state.env) if in_pipeline else nullcontext()
            try:
                with scope:
                    result = await self._execute_command(
                        command,
                        data,
                        is_last=is_last,
                        capture=capture,
                        strict=strict,
                    )
            except ExitError as error:
                if not in_pipeline:
                    raise
                result = StageResult(
                    stdout=error.stdout.encode("utf-8"),
                    stderr=error.stderr.encode("utf-8"),
                    exit_code=error.exit_code,
                )

            exit_codes.append(result.exit_code)
            if capture:
                stderr += result.stderr
            else:
                _write_through(sys.stderr, result.stderr)

            if is_last and not capture:
                _write_through(sys.stdout, result.stdout)
                result.stdout = b""
            data = result.stdout

        self._state.pipe_status = exit_codes
        if in_pipeline:
            logger.debug("pipeline exit codes: %s", exit_codes)

        return StageResult(stdout=result.stdout, stderr=bytes(stderr), exit_code=exit_codes[-1])

    async def _execute_command(
        self,
        node: SimpleCommandNode,
        stdin: Optional[bytes],
        *,
        is_last: bool,
        capture: bool,
        strict: bool,
    ) -> StageResult:
        """Expand, set up and run one command."""
        state = self._state
        saved_stderr = state.expansion_stderr
        state.expansion_stderr = bytearray()
        try:
            try:
                argv, scope, redirections = await self._prepare(node)
            finally:
                expansion_stderr = bytes(state.expansion_stderr)
                state.expansion_stderr = saved_stderr
        except (ExpansionError, RedirectionError) as e:
            logger.debug("command aborted before running: %s", e)
            return StageResult(
                stderr=expansion_stderr + _diagnostic(str(e)),
                exit_code=EXIT_FAILURE,
            )

        try:
            result = await self._dispatch(
                argv,
                scope,
                redirections,
                stdin,
                is_last=is_last,
                capture=capture,
                strict=strict,
            )
        except ExitError as error:
            error.prepend_output("", expansion_stderr.decode("utf-8", errors="replace"))
            raise
        finally:
            redirections.close()

        result.stderr = expansion_stderr + result.stderr
        return result

    async def _prepare(
        self, node: SimpleCommandNode
    ) -> tuple[list[str], Environment, StageRedirections]:
        """Expand words, apply assignments and open redirections.

        Words and redirection targets see the environment as it was before
        this command's assignments. The assignments go to an overlay; a
        command that is nothing but assignments copies it into the current
        store once every value has expanded, otherwise the overlay lives
        only as long as the command.
        """
        env = self._state.env
        argv = []
        for word in node.argv:
            argv.append(await expand_word(self._ctx, word, env))

        scope = env.overlay()
        for assignment in node.assignments:
            value = ""
            if assignment.value is not None:
                value = await expand_word(self._ctx, assignment.value, scope)
            scope.set(assignment.name, value)

        redirections = await open_redirections(self._ctx, node.redirections, env)
        if not node.argv:
            for name, value in scope.maps[0].items():
                env.set(name, value)
            scope = env
        return argv, scope, redirections

    async def _dispatch(
        self,
        argv: list[str],
        scope: Environment,
        redirections: StageRedirections,
        stdin: Optional[bytes],
        *,
        is_last: bool,
        capture: bool,
        strict: bool,
    ) -> StageResult:
        if not argv:
            return StageResult(exit_code=EXIT_SUCCESS)

        name, args = argv[0], argv[1:]
        stage = self._resolve(name, args, scope, redirections, is_last=is_last, capture=capture)
        if stage is None:
            logger.debug("command not found: %s", name)
            return StageResult(
                stderr=_diagnostic(f"{name}: command not found"),
                exit_code=EXIT_COMMAND_NOT_FOUND,
            )

        if redirections.stdin is not None:
            stdin = redirections.stdin

        if not capture and isinstance(stage, ExternalStage):
            # The child writes straight to the inherited descriptors
            sys.stdout.flush()
            sys.stderr.flush()

        try:
            result = await stage.run(stdin, scope)
        except SpawnError as e:
            if strict:
                raise ExpansionError(f"cannot run {e.message}") from e
            logger.debug("spawn failed: %s", e.message)
            return StageResult(stderr=_diagnostic(e.message), exit_code=e.exit_code)

        if isinstance(stage, BuiltinStage) and redirections.stdout is not None:
            redirections.write(result.stdout)
            result.stdout = b""
        return result

    def _resolve(
        self,
        name: str,
        args: list[str],
        scope: Environment,
        redirections: StageRedirections,
        *,
        is_last: bool,
        capture: bool,
    ) -> Optional[Stage]:
        """Builtins first, then the search path."""
        builtin = BUILTINS.get(name)
        if builtin is not None:
            ctx = self._ctx

            async def run_builtin(args: list[str], stdin: Optional[str], env: Environment) -> ExecResult:
                return await builtin(ctx, args, env)

            return BuiltinStage(name, args, run_builtin, inherit_stdin=not capture)

        command = self._commands.get(name)
        if command is not None:
            cwd = self._state.cwd

            async def run_command(args: list[str], stdin: Optional[str], env: Environment) -> ExecResult:
                ctx = CommandContext(
                    cwd=cwd,
                    env=env,
                    stdin=stdin or "",
                    inherited_stdin=read_process_stdin if stdin is None else None,
                )
                return await command.execute(args, ctx)

            return BuiltinStage(name, args, run_command, inherit_stdin=not capture)

        path = scope.resolve_executable(name, self._state.cwd)
        if path is None:
            return None
        logger.debug("resolved %s -> %s", name, path)

        stdout: StreamTarget
        if redirections.stdout is not None:
            stdout = redirections.stdout
        elif is_last and not capture:
            stdout = None
        else:
            stdout = PIPE

        return ExternalStage(
            name,
            path,
            args,
            self._state.cwd,
            stdout=stdout,
            stderr=PIPE if capture else None,
            inherit_stdin=not capture,
        )

    @contextmanager
    def _subshell(self, env: Environment) -> Iterator[None]:
        """Run with a throwaway view of the variables and directory state."""
        state = self._state
        saved = (state.env, state.cwd, state.previous_dir)
        state.env = env.overlay()
        try:
            yield
        finally:
            state.env, state.cwd, state.previous_dir = saved
