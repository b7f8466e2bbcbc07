"""Pwd command implementation.

Usage: pwd [-LP]

Print the name of the current working directory.

Options:
  -L    Print the logical working directory (default)
  -P    Print the physical directory, without any symbolic links
"""

import os

from ...types import CommandContext, ExecResult


class PwdCommand:
    """The pwd command."""

    name = "pwd"

    async def execute(self, args: list[str], ctx: CommandContext) -> ExecResult:
        """Execute the pwd command."""
        physical = False

        for arg in args:
            if not arg.startswith("-") or arg == "-":
                return ExecResult(stdout="", stderr="pwd: too many arguments\n", exit_code=1)
            # Combined flags like -LP or -PL: the last one wins
            for c in arg[1:]:
                if c == "P":
                    physical = True
                elif c == "L":
                    physical = False
                else:
                    return ExecResult(
                        stdout="",
                        stderr=f"pwd: invalid option -- '{c}'\n",
                        exit_code=2,
                    )

        cwd = os.path.realpath(ctx.cwd) if physical else ctx.cwd
        return ExecResult(stdout=f"{cwd}\n", stderr="", exit_code=0)
