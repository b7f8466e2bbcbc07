"""Control builtin: exit."""

from typing import TYPE_CHECKING, Mapping

from ...errors import ExitError
from ...types import ExecResult

if TYPE_CHECKING:
    from ..types import InterpreterContext


async def handle_exit(
    ctx: "InterpreterContext", args: list[str], env: Mapping[str, str]
) -> ExecResult:
    """Execute the exit builtin.

    Usage: exit [n]

    Exit the shell with status n. If n is omitted, the exit status is
    that of the last command executed.
    """
    if len(args) > 1:
        return ExecResult(stdout="", stderr="pipesh: exit: too many arguments\n", exit_code=1)

    exit_code = ctx.state.last_exit_code
    if args:
        try:
            exit_code = int(args[0]) & 255  # Mask to 0-255
        except ValueError:
            return ExecResult(
                stdout="",
                stderr=f"pipesh: exit: {args[0]}: numeric argument required\n",
                exit_code=1,
            )

    raise ExitError(exit_code)
