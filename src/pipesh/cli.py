"""
pipesh - a line-oriented shell with pipelines.

Usage:
    pipesh                      Read lines from stdin (prompting on a terminal)
    pipesh -c "ls | grep py"    Run one line and exit with its status
    pipesh -e NAME=VALUE ...    Seed the variable store
    pipesh --no-inherit-env     Start from an empty store instead of os.environ
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import List, Optional

import typer

from .shell import Shell

logger = logging.getLogger(__name__)

PROMPT = "pipesh$ "

app = typer.Typer(
    name="pipesh",
    help="A line-oriented shell with pipelines.",
    add_completion=False,
)


def _parse_assignments(values: List[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for value in values:
        name, sep, rest = value.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"expected NAME=VALUE, got {value!r}", param_hint="--env")
        env[name] = rest
    return env


def _repl(shell: Shell) -> int:
    """Read and run lines until end of input or exit."""
    interactive = sys.stdin.isatty()
    while not shell.should_exit:
        try:
            line = input(PROMPT if interactive else "")
        except EOFError:
            if interactive:
                print()
            break
        except KeyboardInterrupt:
            print()
            continue
        asyncio.run(shell.run_line(line))
    return shell.last_exit_code


@app.callback(invoke_without_command=True)
def run(
    command: Optional[str] = typer.Option(None, "-c", "--command", help="Run LINE and exit"),
    env: List[str] = typer.Option([], "-e", "--env", help="Startup variable NAME=VALUE (repeatable)"),
    no_inherit_env: bool = typer.Option(False, "--no-inherit-env", help="Do not seed variables from the process environment"),
    cwd: Optional[str] = typer.Option(None, "--cwd", help="Initial working directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log interpreter internals to stderr"),
):
    """
    Run pipesh.

    Examples:
        pipesh -c "pwd"
        pipesh -e GREETING=hi -c "printf '%s\\n' $GREETING"
        printf 'ls\\n' | pipesh
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    startup = _parse_assignments(env)
    shell = Shell(env=startup, inherit_environ=not no_inherit_env, cwd=cwd)
    logger.debug("session started in %s", shell.cwd)

    if command is not None:
        exit_code = asyncio.run(shell.run_line(command))
    else:
        exit_code = _repl(shell)

    raise typer.Exit(exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
