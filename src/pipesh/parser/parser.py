"""Recursive-descent parser for pipesh.

Grammar (one input line):

    line        := pipeline
    pipeline    := command ('|' command)*
    command     := (assignment | word | redirection)+
    assignment  := NAME '=' word?          only before the first word
    redirection := ('<' | '>' | '>>') word
    word        := a run of WORD, '/' and '=' tokens with no whitespace
                   between them, so ./bin/run and --opt=value are one word

A pipeline of one command collapses to the bare command node.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..ast.types import (
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
)
from ..errors import LexError, ParseError
from ..types import ExecutionLimits
from .lexer import (
    CommandSubstitutionPart,
    LiteralPart,
    ParameterSubstitutionPart,
    Token,
    TokenType,
    is_valid_name,
    tokenize,
)

logger = logging.getLogger(__name__)

MAX_INPUT_SIZE = ExecutionLimits.max_input_size
MAX_TOKENS = ExecutionLimits.max_tokens

WORD_TOKENS = frozenset({TokenType.WORD, TokenType.SLASH, TokenType.EQUAL})

REDIRECT_KINDS = {
    TokenType.REDIRECT_IN: RedirectKind.INPUT,
    TokenType.REDIRECT_OUT: RedirectKind.OUTPUT,
    TokenType.REDIRECT_APPEND: RedirectKind.APPEND,
}


class Parser:
    """Builds an AST from the tokens of one line."""

    def __init__(self, tokens: Sequence[Token], limits: Optional[ExecutionLimits] = None):
        self.tokens = list(tokens)
        self.pos = 0
        self.limits = limits or ExecutionLimits()

    def parse(self) -> LineNode:
        """Parse the whole token stream."""
        if len(self.tokens) > self.limits.max_tokens:
            raise ParseError(
                f"too many tokens ({len(self.tokens)} > {self.limits.max_tokens})"
            )
        node = self.parse_pipeline()
        if self.pos < len(self.tokens):
            raise self._unexpected(self.tokens[self.pos])
        return node

    def parse_pipeline(self) -> LineNode:
        """pipeline := command ('|' command)*"""
        commands = [self.parse_command()]
        while self._check(TokenType.PIPE):
            self._advance()
            commands.append(self.parse_command())
        if len(commands) == 1:
            return commands[0]
        return PipelineNode(tuple(commands))

    def parse_command(self) -> SimpleCommandNode:
        """Collect assignments, words and redirections up to a pipe or the end."""
        assignments: list[AssignmentNode] = []
        argv: list[WordNode] = []
        redirections: list[RedirectionNode] = []

        while (token := self._peek()) is not None and token.type is not TokenType.PIPE:
            if token.type in REDIRECT_KINDS:
                redirections.append(self.parse_redirection())
            elif not argv and self._at_assignment():
                assignments.append(self.parse_assignment())
            else:
                argv.append(self.parse_word())

        if not (assignments or argv or redirections):
            raise self._unexpected(self._peek())

        return SimpleCommandNode(
            argv=tuple(argv),
            assignments=tuple(assignments),
            redirections=tuple(redirections),
        )

    def parse_assignment(self) -> AssignmentNode:
        """assignment := NAME '=' word?"""
        name_token = self._advance()
        equal = self._advance()
        name = name_token.parts[0].value  # type: ignore[union-attr]

        value = None
        nxt = self._peek()
        if nxt is not None and nxt.type in WORD_TOKENS and nxt.pos == equal.end:
            value = self.parse_word()
        return AssignmentNode(name=name, value=value)

    def parse_redirection(self) -> RedirectionNode:
        """redirection := ('<' | '>' | '>>') word"""
        operator = self._advance()
        target = self._peek()
        if target is None or target.type not in WORD_TOKENS:
            raise self._unexpected(
                target, f"syntax error: expected redirection target after `{operator.text}'"
            )
        return RedirectionNode(kind=REDIRECT_KINDS[operator.type], target=self.parse_word())

    def parse_word(self) -> WordNode:
        """Join a run of adjacent WORD, '/' and '=' tokens into one word."""
        first = self._peek()
        if first is None or first.type not in WORD_TOKENS:
            raise self._unexpected(first)

        parts: list[WordPartNode] = []
        previous: Optional[Token] = None
        while (token := self._peek()) is not None and token.type in WORD_TOKENS:
            if previous is not None and token.pos != previous.end:
                break
            self._advance()
            if token.type is TokenType.WORD:
                for part in token.parts:
                    _append_part(parts, self._convert_part(part, token))
            else:
                _append_part(parts, LiteralNode(token.type.value))
            previous = token
        return WordNode(tuple(parts))

    def _convert_part(self, part, token: Token) -> WordPartNode:
        if isinstance(part, LiteralPart):
            return LiteralNode(part.value)
        if isinstance(part, ParameterSubstitutionPart):
            return SubstitutionNode(SubstitutionKind.PARAMETER, part.name)
        if isinstance(part, CommandSubstitutionPart):
            return SubstitutionNode(
                SubstitutionKind.COMMAND, self._parse_substitution(part.body, token)
            )
        raise ParseError(f"unknown word part {part!r}", token)

    def _parse_substitution(self, body: str, token: Token) -> Optional[LineNode]:
        if not body.strip():
            return None
        try:
            return parse(body, self.limits)
        except LexError as e:
            raise LexError(f"{e.message} in command substitution", token.pos) from e
        except ParseError as e:
            raise ParseError(f"{e.message} in command substitution", token) from e

    def _at_assignment(self) -> bool:
        token = self._peek()
        nxt = self._peek(1)
        return (
            token is not None
            and token.is_literal
            and is_valid_name(token.parts[0].value)  # type: ignore[union-attr]
            and nxt is not None
            and nxt.type is TokenType.EQUAL
            and nxt.pos == token.end
        )

    def _peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def _check(self, token_type: TokenType) -> bool:
        token = self._peek()
        return token is not None and token.type is token_type

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _unexpected(self, token: Optional[Token], message: Optional[str] = None) -> ParseError:
        if token is None:
            end = self.tokens[-1].end if self.tokens else 0
            return ParseError(message or "syntax error: unexpected end of input", position=end)
        return ParseError(message or f"syntax error near unexpected token `{token.text}'", token)


def _append_part(parts: list[WordPartNode], part: WordPartNode) -> None:
    if isinstance(part, LiteralNode) and parts and isinstance(parts[-1], LiteralNode):
        parts[-1] = LiteralNode(parts[-1].value + part.value)
    else:
        parts.append(part)


def parse_tokens(tokens: Sequence[Token], limits: Optional[ExecutionLimits] = None) -> LineNode:
    """Parse an already tokenized line."""
    return Parser(tokens, limits).parse()


def parse(line: str, limits: Optional[ExecutionLimits] = None) -> LineNode:
    """Tokenize and parse one input line.

    Raises:
        LexError: unterminated quote or substitution.
        ParseError: grammar violation or a size limit exceeded.
    """
    limits = limits or ExecutionLimits()
    if len(line) > limits.max_input_size:
        raise ParseError(
            f"input too large ({len(line)} > {limits.max_input_size} characters)"
        )
    tokens = tokenize(line)
    try:
        return Parser(tokens, limits).parse()
    except ParseError as e:
        logger.debug("parse error in %r: %s", line, e)
        raise
