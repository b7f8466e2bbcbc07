"""Cd builtin implementation.

Usage: cd [-L|-P] [dir]
       cd -

Change the current working directory to dir. If dir is not specified,
change to $HOME. If dir is -, change to $OLDPWD and print it.
"""

import os
from typing import TYPE_CHECKING, Mapping

from ...types import ExecResult

if TYPE_CHECKING:
    from ..types import InterpreterContext


def _error(message: str, exit_code: int = 1) -> ExecResult:
    return ExecResult(stdout="", stderr=f"pipesh: cd: {message}\n", exit_code=exit_code)


async def handle_cd(
    ctx: "InterpreterContext", args: list[str], env: Mapping[str, str]
) -> ExecResult:
    """Execute the cd builtin."""
    physical = False
    positional: list[str] = []
    end_of_opts = False
    for a in args:
        if end_of_opts:
            positional.append(a)
        elif a == "--":
            end_of_opts = True
        elif a == "-L":
            physical = False
        elif a == "-P":
            physical = True
        elif a.startswith("-") and len(a) > 1:
            return _error(f"{a}: invalid option", exit_code=2)
        else:
            positional.append(a)

    if len(positional) > 1:
        return _error("too many arguments")

    if not positional:
        target = env.get("HOME", "")
        if not target:
            return _error("HOME not set")
    elif positional[0] == "-":
        target = ctx.state.previous_dir or env.get("OLDPWD", "")
        if not target:
            return _error("OLDPWD not set")
    else:
        target = positional[0]

    new_dir = os.path.normpath(os.path.join(ctx.state.cwd, target))
    if physical:
        new_dir = os.path.realpath(new_dir)

    if not os.path.exists(new_dir):
        return _error(f"{target}: No such file or directory")
    if not os.path.isdir(new_dir):
        return _error(f"{target}: Not a directory")
    if not os.access(new_dir, os.X_OK):
        return _error(f"{target}: Permission denied")

    old_dir = ctx.state.cwd
    ctx.state.previous_dir = old_dir
    ctx.state.cwd = new_dir
    ctx.state.env.set("OLDPWD", old_dir)
    ctx.state.env.set("PWD", new_dir)

    stdout = ""
    if positional and positional[0] == "-":
        stdout = new_dir + "\n"
    return ExecResult(stdout=stdout, stderr="", exit_code=0)
