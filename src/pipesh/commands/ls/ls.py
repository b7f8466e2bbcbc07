"""Ls command implementation.

Usage: ls [-a] [-1] [FILE]...

List directory contents, one entry per line, sorted by name.
With no FILE, list the current directory.

Options:
  -a, --all   do not ignore entries starting with .
  -1          one entry per line (always the case)
"""

import os

from ...types import CommandContext, ExecResult


class LsCommand:
    """The ls command."""

    name = "ls"

    async def execute(self, args: list[str], ctx: CommandContext) -> ExecResult:
        """Execute the ls command."""
        show_all = False
        paths: list[str] = []
        end_of_opts = False

        for arg in args:
            if end_of_opts or not arg.startswith("-") or arg == "-":
                paths.append(arg)
            elif arg == "--":
                end_of_opts = True
            elif arg == "--all":
                show_all = True
            elif arg.startswith("--"):
                return ExecResult(
                    stdout="",
                    stderr=f"ls: unrecognized option '{arg}'\n",
                    exit_code=2,
                )
            else:
                for c in arg[1:]:
                    if c == "a":
                        show_all = True
                    elif c == "1":
                        pass
                    else:
                        return ExecResult(
                            stdout="",
                            stderr=f"ls: invalid option -- '{c}'\n",
                            exit_code=2,
                        )

        if not paths:
            paths = ["."]

        stderr = ""
        exit_code = 0
        files: list[str] = []
        directories: list[tuple[str, list[str]]] = []

        for path in paths:
            full_path = os.path.join(ctx.cwd, path)
            if not os.path.exists(full_path):
                stderr += f"ls: cannot access '{path}': No such file or directory\n"
                exit_code = 2
                continue
            if not os.path.isdir(full_path):
                files.append(path)
                continue
            try:
                entries = os.listdir(full_path)
            except OSError as e:
                stderr += f"ls: cannot open directory '{path}': {e.strerror or e}\n"
                exit_code = 2
                continue
            if show_all:
                entries.extend([".", ".."])
            else:
                entries = [name for name in entries if not name.startswith(".")]
            directories.append((path, sorted(entries)))

        sections: list[str] = []
        if files:
            sections.append("".join(f"{name}\n" for name in sorted(files)))

        with_headers = len(paths) > 1
        for path, entries in directories:
            listing = "".join(f"{name}\n" for name in entries)
            if with_headers:
                listing = f"{path}:\n{listing}"
            sections.append(listing)

        return ExecResult(stdout="\n".join(sections), stderr=stderr, exit_code=exit_code)
