"""Word expansion.

A word is rendered by concatenating its parts in order:

- literal text verbatim
- ``$name`` / ``${name}``: the variable's value, or "" when unset
- ``$(...)``: the captured standard output of running the nested line,
  minus one trailing newline

There is no field splitting and no globbing: one word always expands to
exactly one argument.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional

from ..ast.types import (
    LineNode,
    LiteralNode,
    SubstitutionKind,
    SubstitutionNode,
    WordNode,
    WordPartNode,
)

if TYPE_CHECKING:
    from .environment import Environment
    from .types import InterpreterContext


def get_variable(env: Mapping[str, str], name: str) -> str:
    """Look up a variable, treating unset as empty."""
    return env.get(name, "")


def strip_trailing_newline(text: str) -> str:
    """Remove exactly one trailing newline sequence, if present."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


async def expand_command_substitution(
    ctx: "InterpreterContext", node: Optional[LineNode], env: "Environment"
) -> str:
    """Run a nested line and return its output as text."""
    if node is None:
        return ""
    output = await ctx.capture(node, env)
    return strip_trailing_newline(output.stdout.decode("utf-8", errors="replace"))


async def expand_part(
    ctx: "InterpreterContext", part: WordPartNode, env: "Environment"
) -> str:
    """Expand a single word part."""
    if isinstance(part, LiteralNode):
        return part.value
    if isinstance(part, SubstitutionNode):
        if part.kind is SubstitutionKind.PARAMETER:
            return get_variable(env, part.content)  # type: ignore[arg-type]
        return await expand_command_substitution(ctx, part.content, env)  # type: ignore[arg-type]
    return ""


async def expand_word(ctx: "InterpreterContext", word: WordNode, env: "Environment") -> str:
    """Expand a word to the single string it stands for.

    Raises:
        ExpansionError: a nested command substitution could not be started.
    """
    if word.is_literal:
        return word.parts[0].value  # type: ignore[union-attr]
    parts = []
    for part in word.parts:
        parts.append(await expand_part(ctx, part, env))
    return "".join(parts)
