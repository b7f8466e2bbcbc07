"""AST types for pipesh."""

from .types import (
    AssignmentNode,
    LineNode,
    LiteralNode,
    PipelineNode,
    RedirectKind,
    RedirectionNode,
    SimpleCommandNode,
    SubstitutionKind,
    SubstitutionNode,
    WordNode,
    WordPartNode,
    pipeline_commands,
)

__all__ = [
    "AssignmentNode",
    "LineNode",
    "LiteralNode",
    "PipelineNode",
    "RedirectKind",
    "RedirectionNode",
    "SimpleCommandNode",
    "SubstitutionKind",
    "SubstitutionNode",
    "WordNode",
    "WordPartNode",
    "pipeline_commands",
]
