"""AST node types for pipesh.

Every node is a frozen dataclass with a ``type`` tag. A parsed line is a
``LineNode``: a bare ``SimpleCommandNode`` for a single command, or a
``PipelineNode`` holding two or more commands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Union


class RedirectKind(Enum):
    """Direction of a redirection."""

    INPUT = "<"
    OUTPUT = ">"
    APPEND = ">>"


class SubstitutionKind(Enum):
    """What a ``SubstitutionNode`` substitutes."""

    COMMAND = "command"
    PARAMETER = "parameter"


@dataclass(frozen=True)
class LiteralNode:
    """Literal text inside a word."""

    value: str
    type: Literal["Literal"] = field(default="Literal", init=False)


@dataclass(frozen=True)
class SubstitutionNode:
    """A substitution inside a word.

    For ``SubstitutionKind.COMMAND`` the content is the parsed line to run,
    or None for an empty ``$()``. For ``SubstitutionKind.PARAMETER`` it is the
    variable name.
    """

    kind: SubstitutionKind
    content: Union["LineNode", str, None]
    type: Literal["Substitution"] = field(default="Substitution", init=False)


WordPartNode = Union[LiteralNode, SubstitutionNode]


@dataclass(frozen=True)
class WordNode:
    """A word: literal text and substitutions concatenated in order."""

    parts: tuple[WordPartNode, ...]
    type: Literal["Word"] = field(default="Word", init=False)

    @property
    def is_literal(self) -> bool:
        return len(self.parts) == 1 and isinstance(self.parts[0], LiteralNode)

    @property
    def literal_value(self) -> Optional[str]:
        """The text of a single-literal word, else None."""
        if self.is_literal:
            return self.parts[0].value  # type: ignore[union-attr]
        return None


@dataclass(frozen=True)
class AssignmentNode:
    """``NAME=value``; a missing value means the empty string."""

    name: str
    value: Optional[WordNode] = None
    type: Literal["Assignment"] = field(default="Assignment", init=False)


@dataclass(frozen=True)
class RedirectionNode:
    """``< target``, ``> target`` or ``>> target``."""

    kind: RedirectKind
    target: WordNode
    type: Literal["Redirection"] = field(default="Redirection", init=False)


@dataclass(frozen=True)
class SimpleCommandNode:
    """One command: prefix assignments, argument words and redirections."""

    argv: tuple[WordNode, ...] = ()
    assignments: tuple[AssignmentNode, ...] = ()
    redirections: tuple[RedirectionNode, ...] = ()
    type: Literal["SimpleCommand"] = field(default="SimpleCommand", init=False)


@dataclass(frozen=True)
class PipelineNode:
    """Two or more commands connected by ``|``."""

    commands: tuple[SimpleCommandNode, ...]
    type: Literal["Pipeline"] = field(default="Pipeline", init=False)

    def __post_init__(self) -> None:
        if not self.commands:
            raise ValueError("a pipeline needs at least one command")


LineNode = Union[SimpleCommandNode, PipelineNode]


def pipeline_commands(node: LineNode) -> tuple[SimpleCommandNode, ...]:
    """Commands of a line, treating a bare command as a one-stage pipeline."""
    if isinstance(node, PipelineNode):
        return node.commands
    return (node,)
