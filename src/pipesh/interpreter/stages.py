"""Pipeline stages.

A stage is anything with ``run(stdin, env) -> StageResult``. Builtins run
in-process over in-memory text; external programs are spawned with
asyncio subprocesses. The interpreter drives both the same way: feed the
previous stage's complete output in, take this stage's output out.

``stdin=None`` means the stage has no piped input: an external program
then inherits the interpreter's stdin (interactive use) or gets
/dev/null (captured runs). A builtin likewise reads the interpreter's
stdin on demand when interactive, and sees empty input when captured.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import IO, Awaitable, Callable, Optional, Protocol, Union

from ..errors import SpawnError
from ..types import (
    EXIT_COMMAND_NOT_FOUND,
    EXIT_NOT_EXECUTABLE,
    SIGNAL_EXIT_BASE,
    ExecResult,
    StageResult,
)
from .environment import Environment

logger = logging.getLogger(__name__)

# A handler receives None as stdin when it should read the inherited stream
BuiltinHandler = Callable[[list[str], Optional[str], Environment], Awaitable[ExecResult]]

# Where an external stage's output goes: PIPE to capture it, None to
# inherit the interpreter's stream, or an open file.
StreamTarget = Union[int, IO[bytes], None]
PIPE = asyncio.subprocess.PIPE
DEVNULL = asyncio.subprocess.DEVNULL


class Stage(Protocol):
    """Uniform contract shared by builtin and external stages."""

    name: str

    async def run(self, stdin: Optional[bytes], env: Environment) -> StageResult:
        ...


def read_process_stdin() -> str:
    """Read the interpreter's own standard input to end of file."""
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        return sys.stdin.read()
    return buffer.read().decode("utf-8", errors="replace")


def exit_status(returncode: int) -> int:
    """Map a subprocess return code to a shell exit status."""
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


class BuiltinStage:
    """A builtin invoked in-process."""

    def __init__(
        self,
        name: str,
        args: list[str],
        handler: BuiltinHandler,
        *,
        inherit_stdin: bool = False,
    ):
        self.name = name
        self.args = args
        self.handler = handler
        self.inherit_stdin = inherit_stdin

    async def run(self, stdin: Optional[bytes], env: Environment) -> StageResult:
        text: Optional[str]
        if stdin is not None:
            text = stdin.decode("utf-8", errors="replace")
        else:
            text = None if self.inherit_stdin else ""
        result = await self.handler(self.args, text, env)
        return StageResult(
            stdout=result.stdout.encode("utf-8"),
            stderr=result.stderr.encode("utf-8"),
            exit_code=result.exit_code,
        )


class ExternalStage:
    """An external program spawned as a child process."""

    def __init__(
        self,
        name: str,
        path: str,
        args: list[str],
        cwd: str,
        *,
        stdout: StreamTarget = PIPE,
        stderr: StreamTarget = PIPE,
        inherit_stdin: bool = False,
    ):
        self.name = name
        self.path = path
        self.args = args
        self.cwd = cwd
        self.stdout = stdout
        self.stderr = stderr
        self.inherit_stdin = inherit_stdin

    async def run(self, stdin: Optional[bytes], env: Environment) -> StageResult:
        if stdin is not None:
            stdin_target: StreamTarget = PIPE
        else:
            stdin_target = None if self.inherit_stdin else DEVNULL

        logger.debug("spawn %s %r (cwd=%s)", self.path, self.args, self.cwd)
        try:
            process = await asyncio.create_subprocess_exec(
                self.path,
                *self.args,
                stdin=stdin_target,
                stdout=self.stdout,
                stderr=self.stderr,
                env=env.to_dict(),
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise SpawnError(f"{self.name}: {e.strerror or e}", EXIT_COMMAND_NOT_FOUND) from e
        except OSError as e:
            raise SpawnError(f"{self.name}: {e.strerror or e}", EXIT_NOT_EXECUTABLE) from e

        stdout, stderr = await process.communicate(stdin)
        code = exit_status(process.returncode)
        logger.debug("%s exited with %d", self.name, code)
        return StageResult(stdout=stdout or b"", stderr=stderr or b"", exit_code=code)
