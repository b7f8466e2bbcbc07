"""Lexer for pipesh.

Turns one input line into a flat list of tokens. The lexer is an explicit
finite-state machine: ``Lexer.state`` names what is being read and every
character is dispatched to the handler for the current state. Quoting and
substitution nesting live entirely in the state (plus a depth counter for
the two substitution states), so a command substitution inside a double
quoted string inside another command substitution needs no special casing.

Token kinds:
    WORD             a word made of literal and substitution parts
    PIPE             |
    EQUAL            =
    SLASH            /
    REDIRECT_IN      <
    REDIRECT_OUT     >
    REDIRECT_APPEND  >>   (lexed greedily as one token)

Operators are only recognized outside quotes and substitutions. Tokens
record their character offsets so the parser can tell ``./run`` (three
adjacent tokens) from ``. / run``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..errors import LexError

logger = logging.getLogger(__name__)


class LexState(Enum):
    """States of the lexer automaton."""

    START = "start"
    READING_WORD = "word"
    READING_SINGLE_QUOTE = "single_quote"
    READING_DOUBLE_QUOTE = "double_quote"
    READING_COMMAND_SUBSTITUTION = "command_substitution"
    READING_PARAMETER_SUBSTITUTION = "parameter_substitution"
    READING_VARIABLE_NAME = "variable_name"


class TokenType(Enum):
    """Kinds of token produced by the lexer."""

    WORD = "word"
    PIPE = "|"
    EQUAL = "="
    SLASH = "/"
    REDIRECT_IN = "<"
    REDIRECT_OUT = ">"
    REDIRECT_APPEND = ">>"


@dataclass(frozen=True)
class LiteralPart:
    """Literal text, already stripped of quotes."""

    value: str


@dataclass(frozen=True)
class CommandSubstitutionPart:
    """``$(...)``: the raw text between the parentheses."""

    body: str


@dataclass(frozen=True)
class ParameterSubstitutionPart:
    """``${name}`` or ``$name``: the raw text naming the variable."""

    name: str


WordPart = Union[LiteralPart, CommandSubstitutionPart, ParameterSubstitutionPart]


@dataclass(frozen=True)
class Token:
    """A lexical token with its character span in the input line."""

    type: TokenType
    parts: tuple[WordPart, ...] = ()
    pos: int = 0
    end: int = 0

    @property
    def is_literal(self) -> bool:
        """True for a word consisting of exactly one literal part."""
        return (
            self.type is TokenType.WORD
            and len(self.parts) == 1
            and isinstance(self.parts[0], LiteralPart)
        )

    @property
    def text(self) -> str:
        """Source-like rendering used in error messages."""
        if self.type is not TokenType.WORD:
            return self.type.value
        return "".join(_render_part(part) for part in self.parts)


def _render_part(part: WordPart) -> str:
    if isinstance(part, LiteralPart):
        return part.value
    if isinstance(part, CommandSubstitutionPart):
        return f"$({part.body})"
    return f"${{{part.name}}}"


WHITESPACE = frozenset(" \t\r\n")

OPERATORS: dict[str, TokenType] = {
    "|": TokenType.PIPE,
    "=": TokenType.EQUAL,
    "/": TokenType.SLASH,
    "<": TokenType.REDIRECT_IN,
    ">": TokenType.REDIRECT_OUT,
}

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_name(name: str) -> bool:
    """Check whether ``name`` is a valid variable name (ASCII identifier)."""
    return bool(_NAME_RE.match(name))


def _is_name_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_name_char(ch: str) -> bool:
    return _is_name_start(ch) or ("0" <= ch <= "9")


class Lexer:
    """Finite-state tokenizer for one input line."""

    def __init__(self, line: str):
        self.line = line
        self.pos = 0
        self.state = LexState.START
        self.tokens: list[Token] = []

        # Word under construction
        self._parts: list[WordPart] = []
        self._buffer: list[str] = []
        self._word_start = 0

        # Substitution bookkeeping: depth only matters in the two
        # substitution states, _resume is where to go when they close.
        self._depth = 0
        self._resume = LexState.READING_WORD
        self._quote_start = 0
        self._substitution_start = 0

        self._handlers: dict[LexState, Callable[[str], None]] = {
            LexState.START: self._on_start,
            LexState.READING_WORD: self._on_word,
            LexState.READING_SINGLE_QUOTE: self._on_single_quote,
            LexState.READING_DOUBLE_QUOTE: self._on_double_quote,
            LexState.READING_COMMAND_SUBSTITUTION: self._on_command_substitution,
            LexState.READING_PARAMETER_SUBSTITUTION: self._on_parameter_substitution,
            LexState.READING_VARIABLE_NAME: self._on_variable_name,
        }

    @property
    def depth(self) -> int:
        """Nesting depth of the substitution being read (0 outside one)."""
        if self.state in (
            LexState.READING_COMMAND_SUBSTITUTION,
            LexState.READING_PARAMETER_SUBSTITUTION,
        ):
            return self._depth
        return 0

    def tokenize(self) -> list[Token]:
        """Run the automaton over the whole line."""
        while self.pos < len(self.line):
            self.advance()
        self._finish()
        return self.tokens

    def advance(self) -> LexState:
        """Consume one character and return the resulting state."""
        ch = self.line[self.pos]
        self.pos += 1
        self._handlers[self.state](ch)
        return self.state

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.line):
            return self.line[self.pos]
        return None

    # -- state handlers ---------------------------------------------------

    def _on_start(self, ch: str) -> None:
        if ch in WHITESPACE:
            return
        if ch in OPERATORS:
            self._emit_operator(ch)
            return
        self._word_start = self.pos - 1
        self.state = LexState.READING_WORD
        self._on_word(ch)

    def _on_word(self, ch: str) -> None:
        if ch in WHITESPACE:
            self._flush_word(self.pos - 1)
            self.state = LexState.START
        elif ch in OPERATORS:
            self._flush_word(self.pos - 1)
            self._emit_operator(ch)
            self.state = LexState.START
        elif ch == "'":
            self._quote_start = self.pos - 1
            self.state = LexState.READING_SINGLE_QUOTE
        elif ch == '"':
            self._quote_start = self.pos - 1
            self.state = LexState.READING_DOUBLE_QUOTE
        elif ch == "$":
            self._on_dollar(LexState.READING_WORD)
        else:
            self._buffer.append(ch)

    def _on_single_quote(self, ch: str) -> None:
        if ch == "'":
            self._close_quote()
        else:
            self._buffer.append(ch)

    def _on_double_quote(self, ch: str) -> None:
        if ch == '"':
            self._close_quote()
        elif ch == "$":
            self._on_dollar(LexState.READING_DOUBLE_QUOTE)
        else:
            self._buffer.append(ch)

    def _on_command_substitution(self, ch: str) -> None:
        if ch == "(":
            self._depth += 1
        elif ch == ")":
            self._depth -= 1
            if self._depth == 0:
                self._push_part(CommandSubstitutionPart(self._take_buffer()))
                self.state = self._resume
                return
        self._buffer.append(ch)

    def _on_parameter_substitution(self, ch: str) -> None:
        if ch == "{":
            self._depth += 1
        elif ch == "}":
            self._depth -= 1
            if self._depth == 0:
                self._push_part(ParameterSubstitutionPart(self._take_buffer()))
                self.state = self._resume
                return
        self._buffer.append(ch)

    def _on_variable_name(self, ch: str) -> None:
        if _is_name_char(ch):
            self._buffer.append(ch)
            return
        self._push_part(ParameterSubstitutionPart(self._take_buffer()))
        self.state = self._resume
        # The terminating character belongs to the enclosing state
        self._handlers[self.state](ch)

    # -- helpers ----------------------------------------------------------

    def _on_dollar(self, resume: LexState) -> None:
        nxt = self._peek()
        if nxt == "(" or nxt == "{":
            self.pos += 1
            self._flush_fragment()
            self._depth = 1
            self._resume = resume
            self._substitution_start = self.pos - 2
            if nxt == "(":
                self.state = LexState.READING_COMMAND_SUBSTITUTION
            else:
                self.state = LexState.READING_PARAMETER_SUBSTITUTION
        elif nxt is not None and _is_name_start(nxt):
            self._flush_fragment()
            self._resume = resume
            self.state = LexState.READING_VARIABLE_NAME
        else:
            # Not a substitution: the dollar sign is plain text
            self._buffer.append("$")

    def _emit_operator(self, ch: str) -> None:
        start = self.pos - 1
        if ch == ">" and self._peek() == ">":
            self.pos += 1
            self.tokens.append(Token(TokenType.REDIRECT_APPEND, pos=start, end=self.pos))
            return
        self.tokens.append(Token(OPERATORS[ch], pos=start, end=self.pos))

    def _close_quote(self) -> None:
        self._flush_fragment()
        if not self._parts:
            # "" and '' still produce an (empty) argument
            self._parts.append(LiteralPart(""))
        self.state = LexState.READING_WORD

    def _take_buffer(self) -> str:
        text = "".join(self._buffer)
        self._buffer = []
        return text

    def _push_part(self, part: WordPart) -> None:
        if (
            isinstance(part, LiteralPart)
            and self._parts
            and isinstance(self._parts[-1], LiteralPart)
        ):
            self._parts[-1] = LiteralPart(self._parts[-1].value + part.value)
        else:
            self._parts.append(part)

    def _flush_fragment(self) -> None:
        if self._buffer:
            self._push_part(LiteralPart(self._take_buffer()))

    def _flush_word(self, end: int) -> None:
        self._flush_fragment()
        if self._parts:
            self.tokens.append(
                Token(TokenType.WORD, tuple(self._parts), self._word_start, end)
            )
        self._parts = []

    def _finish(self) -> None:
        if self.state is LexState.READING_VARIABLE_NAME:
            self._push_part(ParameterSubstitutionPart(self._take_buffer()))
            self.state = self._resume

        if self.state in (LexState.READING_SINGLE_QUOTE, LexState.READING_DOUBLE_QUOTE):
            raise LexError("unterminated quoted string", self._quote_start)
        if self.state is LexState.READING_COMMAND_SUBSTITUTION:
            raise LexError("unterminated command substitution", self._substitution_start)
        if self.state is LexState.READING_PARAMETER_SUBSTITUTION:
            raise LexError("unterminated parameter substitution", self._substitution_start)

        if self.state is LexState.READING_WORD:
            self._flush_word(len(self.line))
            self.state = LexState.START


def tokenize(line: str) -> list[Token]:
    """Tokenize an input line.

    Raises:
        LexError: if a quote or substitution is still open at end of input.
    """
    try:
        return Lexer(line).tokenize()
    except LexError as e:
        logger.debug("lex error in %r: %s", line, e)
        raise
