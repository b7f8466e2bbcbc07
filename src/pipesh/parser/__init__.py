"""Parser module for pipesh."""

from .lexer import (
    CommandSubstitutionPart,
    Lexer,
    LexState,
    LiteralPart,
    ParameterSubstitutionPart,
    Token,
    TokenType,
    WordPart,
    is_valid_name,
    tokenize,
)
from .parser import (
    MAX_INPUT_SIZE,
    MAX_TOKENS,
    Parser,
    parse,
    parse_tokens,
)

__all__ = [
    # Lexer
    "CommandSubstitutionPart",
    "Lexer",
    "LexState",
    "LiteralPart",
    "ParameterSubstitutionPart",
    "Token",
    "TokenType",
    "WordPart",
    "is_valid_name",
    "tokenize",
    # Parser
    "MAX_INPUT_SIZE",
    "MAX_TOKENS",
    "Parser",
    "parse",
    "parse_tokens",
]
