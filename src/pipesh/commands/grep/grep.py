"""Grep command implementation.

Usage: grep [OPTION]... PATTERN [FILE]...

Search for PATTERN (a Python regular expression) in each FILE.
With no FILE, or when FILE is -, read standard input.

Options:
  -i, --ignore-case        ignore case distinctions
  -v, --invert-match       select non-matching lines
  -w, --word-regexp        match only whole words
  -x, --line-regexp        match only whole lines
  -n, --line-number        print line number with output lines
  -c, --count              print only a count of selected lines per FILE
  -H, --with-filename      print the file name for each match
  -h, --no-filename        suppress the file name prefix on output
  -A NUM, --after-context=NUM
                           print NUM lines of trailing context
"""

import os
import re
from dataclasses import dataclass
from typing import Optional

from ...types import CommandContext, ExecResult

_LONG_FLAGS = {
    "--ignore-case": "i",
    "--invert-match": "v",
    "--word-regexp": "w",
    "--line-regexp": "x",
    "--line-number": "n",
    "--count": "c",
    "--with-filename": "H",
    "--no-filename": "h",
}


@dataclass
class GrepOptions:
    ignore_case: bool = False
    invert_match: bool = False
    word_regexp: bool = False
    line_regexp: bool = False
    line_numbers: bool = False
    count_only: bool = False
    with_filename: Optional[bool] = None  # None: only when several files
    after_context: int = 0


def _usage_error(message: str) -> ExecResult:
    return ExecResult(stdout="", stderr=f"grep: {message}\n", exit_code=2)


def _parse_context(value: str) -> int:
    number = int(value)
    if number < 0:
        raise ValueError(value)
    return number


class GrepCommand:
    """The grep command."""

    name = "grep"

    async def execute(self, args: list[str], ctx: CommandContext) -> ExecResult:
        """Execute the grep command."""
        opts = GrepOptions()
        pattern: Optional[str] = None
        files: list[str] = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "--":
                rest = args[i + 1:]
                if pattern is None and rest:
                    pattern, rest = rest[0], rest[1:]
                files.extend(rest)
                break
            elif arg.startswith("--after-context="):
                try:
                    opts.after_context = _parse_context(arg.split("=", 1)[1])
                except ValueError:
                    return _usage_error(f"{arg.split('=', 1)[1]}: invalid context length argument")
            elif arg.startswith("--"):
                flag = _LONG_FLAGS.get(arg)
                if flag is None:
                    return _usage_error(f"unrecognized option '{arg}'")
                self._set_flag(opts, flag)
            elif arg.startswith("-") and arg != "-":
                j = 1
                while j < len(arg):
                    c = arg[j]
                    if c == "A":
                        # -A3 or -A 3
                        value = arg[j + 1:]
                        if not value:
                            i += 1
                            if i >= len(args):
                                return _usage_error("option requires an argument -- 'A'")
                            value = args[i]
                        try:
                            opts.after_context = _parse_context(value)
                        except ValueError:
                            return _usage_error(f"{value}: invalid context length argument")
                        break
                    if c not in "ivwxncHh":
                        return _usage_error(f"invalid option -- '{c}'")
                    self._set_flag(opts, c)
                    j += 1
            elif pattern is None:
                pattern = arg
            else:
                files.append(arg)
            i += 1

        if pattern is None:
            return _usage_error("pattern not specified")

        if not files:
            files = ["-"]
        if opts.with_filename is None:
            opts.with_filename = len(files) > 1

        regex_source = pattern
        if opts.word_regexp:
            regex_source = rf"\b(?:{regex_source})\b"
        if opts.line_regexp:
            regex_source = rf"^(?:{regex_source})$"
        try:
            regex = re.compile(regex_source, re.IGNORECASE if opts.ignore_case else 0)
        except re.error as e:
            return _usage_error(f"invalid pattern '{pattern}': {e}")

        stdout: list[str] = []
        stderr = ""
        found_match = False
        had_error = False

        for file in files:
            label = "(standard input)" if file == "-" else file
            if file == "-":
                content = ctx.read_stdin()
            else:
                try:
                    with open(os.path.join(ctx.cwd, file), encoding="utf-8", errors="replace") as f:
                        content = f.read()
                except IsADirectoryError:
                    stderr += f"grep: {file}: Is a directory\n"
                    had_error = True
                    continue
                except OSError as e:
                    stderr += f"grep: {file}: {e.strerror or e}\n"
                    had_error = True
                    continue

            selected = self._search(content, regex, opts, label, stdout)
            found_match = found_match or selected > 0

        if had_error:
            exit_code = 2
        else:
            exit_code = 0 if found_match else 1
        return ExecResult(stdout="".join(stdout), stderr=stderr, exit_code=exit_code)

    @staticmethod
    def _set_flag(opts: GrepOptions, flag: str) -> None:
        if flag == "i":
            opts.ignore_case = True
        elif flag == "v":
            opts.invert_match = True
        elif flag == "w":
            opts.word_regexp = True
        elif flag == "x":
            opts.line_regexp = True
        elif flag == "n":
            opts.line_numbers = True
        elif flag == "c":
            opts.count_only = True
        elif flag == "H":
            opts.with_filename = True
        elif flag == "h":
            opts.with_filename = False

    @staticmethod
    def _search(
        content: str,
        regex: "re.Pattern[str]",
        opts: GrepOptions,
        label: str,
        out: list[str],
    ) -> int:
        """Append the output for one input to ``out``; return the number of selected lines."""
        lines = content.split("\n")
        if lines and lines[-1] == "":
            lines = lines[:-1]

        selected = [bool(regex.search(line)) != opts.invert_match for line in lines]
        count = sum(selected)

        if opts.count_only:
            prefix = f"{label}:" if opts.with_filename else ""
            out.append(f"{prefix}{count}\n")
            return count

        # Lines to print: each selected line plus up to after_context lines after it
        printed = [False] * len(lines)
        is_context = [False] * len(lines)
        remaining = 0
        for index, hit in enumerate(selected):
            if hit:
                printed[index] = True
                remaining = opts.after_context
            elif remaining > 0:
                printed[index] = True
                is_context[index] = True
                remaining -= 1

        last_printed: Optional[int] = None
        for index, line in enumerate(lines):
            if not printed[index]:
                continue
            if opts.after_context and last_printed is not None and index > last_printed + 1:
                out.append("--\n")
            separator = "-" if is_context[index] else ":"
            parts = []
            if opts.with_filename:
                parts.append(f"{label}{separator}")
            if opts.line_numbers:
                parts.append(f"{index + 1}{separator}")
            parts.append(line)
            out.append("".join(parts) + "\n")
            last_printed = index
        return count
