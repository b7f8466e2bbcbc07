"""Tests for the lexer."""

import pytest
from pipesh.errors import LexError
from pipesh.parser import (
    CommandSubstitutionPart,
    Lexer,
    LexState,
    LiteralPart,
    ParameterSubstitutionPart,
    TokenType,
    tokenize,
)


def types(line):
    return [token.type for token in tokenize(line)]


class TestWords:
    """Test plain words and whitespace."""

    def test_words_split_on_whitespace(self):
        tokens = tokenize("ls  -a\tdir\n")
        assert [t.parts for t in tokens] == [
            (LiteralPart("ls"),),
            (LiteralPart("-a"),),
            (LiteralPart("dir"),),
        ]

    def test_empty_line(self):
        assert tokenize("") == []
        assert tokenize("   ") == []

    def test_offsets(self):
        tokens = tokenize("./run x")
        assert [(t.type, t.pos, t.end) for t in tokens] == [
            (TokenType.WORD, 0, 1),
            (TokenType.SLASH, 1, 2),
            (TokenType.WORD, 2, 5),
            (TokenType.WORD, 6, 7),
        ]

    def test_is_literal(self):
        tokens = tokenize("plain $VAR")
        assert tokens[0].is_literal
        assert not tokens[1].is_literal


class TestQuoting:
    """Test single and double quotes."""

    def test_single_quotes_are_literal(self):
        tokens = tokenize("grep '$x \"y\" | z > w'")
        assert len(tokens) == 2
        assert tokens[1].parts == (LiteralPart('$x "y" | z > w'),)

    def test_single_quoted_substitution_is_literal(self):
        tokens = tokenize("printf '$(ls) ${HOME}'")
        assert tokens[1].parts == (LiteralPart("$(ls) ${HOME}"),)

    def test_double_quotes_keep_operators(self):
        tokens = tokenize('printf "a | b > c"')
        assert len(tokens) == 2
        assert tokens[1].parts == (LiteralPart("a | b > c"),)

    def test_double_quotes_expand_variables(self):
        tokens = tokenize('printf "a $X b"')
        assert tokens[1].parts == (
            LiteralPart("a "),
            ParameterSubstitutionPart("X"),
            LiteralPart(" b"),
        )

    def test_adjacent_fragments_merge(self):
        tokens = tokenize("'ab'cd\"ef\"")
        assert tokens[0].parts == (LiteralPart("abcdef"),)

    def test_empty_quotes_make_empty_word(self):
        tokens = tokenize("printf '' \"\"")
        assert len(tokens) == 3
        assert tokens[1].parts == (LiteralPart(""),)
        assert tokens[2].parts == (LiteralPart(""),)

    def test_unterminated_single_quote(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("echo 'unterminated)")
        assert exc_info.value.position == 5
        assert "unterminated quoted string" in str(exc_info.value)

    def test_unterminated_double_quote(self):
        with pytest.raises(LexError):
            tokenize('printf "abc')


class TestSubstitutions:
    """Test $(...), ${...} and $name."""

    def test_command_substitution_in_double_quotes(self):
        tokens = tokenize('echo "$(echo hi)"')
        assert tokens[0].parts == (LiteralPart("echo"),)
        assert tokens[1].parts == (CommandSubstitutionPart("echo hi"),)

    def test_nested_command_substitution(self):
        tokens = tokenize("echo $(echo $(date))")
        assert len(tokens) == 2
        assert tokens[1].parts == (CommandSubstitutionPart("echo $(date)"),)

    def test_command_substitution_keeps_inner_operators(self):
        tokens = tokenize("printf $(ls | grep a > /dev/null)")
        assert types("printf $(ls | grep a > /dev/null)") == [TokenType.WORD, TokenType.WORD]
        assert tokens[1].parts == (CommandSubstitutionPart("ls | grep a > /dev/null"),)

    def test_unterminated_command_substitution(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("printf $(ls $(pwd)")
        assert "command substitution" in exc_info.value.message
        assert exc_info.value.position == 7

    def test_braced_parameter(self):
        tokens = tokenize("${HOME}/bin")
        assert tokens[0].parts == (ParameterSubstitutionPart("HOME"),)
        assert tokens[1].type is TokenType.SLASH

    def test_unterminated_parameter_substitution(self):
        with pytest.raises(LexError):
            tokenize("printf ${HOME")

    def test_bare_variable_ends_at_non_identifier(self):
        tokens = tokenize("$NAME.txt")
        assert tokens[0].parts == (ParameterSubstitutionPart("NAME"), LiteralPart(".txt"))

    def test_invalid_identifier_is_literal(self):
        tokens = tokenize("printf $1abc")
        assert tokens[1].parts == (LiteralPart("$1abc"),)

    def test_lone_dollar_is_literal(self):
        tokens = tokenize("printf $ a$")
        assert tokens[1].parts == (LiteralPart("$"),)
        assert tokens[2].parts == (LiteralPart("a$"),)

    def test_variable_at_end_of_input(self):
        tokens = tokenize("printf $X")
        assert tokens[1].parts == (ParameterSubstitutionPart("X"),)

    def test_variable_before_closing_quote(self):
        tokens = tokenize('"$X"y')
        assert tokens[0].parts == (ParameterSubstitutionPart("X"), LiteralPart("y"))


class TestOperators:
    """Test operator tokens."""

    def test_pipeline_operators(self):
        assert types("a|b | c") == [
            TokenType.WORD,
            TokenType.PIPE,
            TokenType.WORD,
            TokenType.PIPE,
            TokenType.WORD,
        ]

    def test_append_is_one_token(self):
        assert types("a >> b") == [TokenType.WORD, TokenType.REDIRECT_APPEND, TokenType.WORD]
        assert types("a>>b") == [TokenType.WORD, TokenType.REDIRECT_APPEND, TokenType.WORD]

    def test_redirections(self):
        assert types("a<b>c") == [
            TokenType.WORD,
            TokenType.REDIRECT_IN,
            TokenType.WORD,
            TokenType.REDIRECT_OUT,
            TokenType.WORD,
        ]

    def test_equal_is_an_operator(self):
        assert types("A=1") == [TokenType.WORD, TokenType.EQUAL, TokenType.WORD]

    def test_token_text(self):
        tokens = tokenize("a >> $(b) ${c}")
        assert [t.text for t in tokens] == ["a", ">>", "$(b)", "${c}"]


class TestStateMachine:
    """Step the automaton one character at a time."""

    def test_depth_tracks_matching_pair(self):
        lexer = Lexer("$(a(b))")
        assert lexer.advance() is LexState.READING_COMMAND_SUBSTITUTION
        assert lexer.depth == 1
        lexer.advance()  # a
        lexer.advance()  # (
        assert lexer.depth == 2
        lexer.advance()  # b
        lexer.advance()  # )
        assert lexer.state is LexState.READING_COMMAND_SUBSTITUTION
        assert lexer.depth == 1
        assert lexer.advance() is LexState.READING_WORD
        assert lexer.depth == 0

    def test_quote_states(self):
        lexer = Lexer("a'b'\"c\" ")
        assert lexer.advance() is LexState.READING_WORD
        assert lexer.advance() is LexState.READING_SINGLE_QUOTE
        assert lexer.advance() is LexState.READING_SINGLE_QUOTE
        assert lexer.advance() is LexState.READING_WORD
        assert lexer.advance() is LexState.READING_DOUBLE_QUOTE
        lexer.advance()
        assert lexer.advance() is LexState.READING_WORD
        assert lexer.advance() is LexState.START
        assert lexer.tokens[0].parts == (LiteralPart("abc"),)

    def test_variable_name_state_returns_to_double_quote(self):
        lexer = Lexer('"$AB c"')
        lexer.advance()  # "
        assert lexer.advance() is LexState.READING_VARIABLE_NAME
        lexer.advance()  # A
        lexer.advance()  # B
        assert lexer.advance() is LexState.READING_DOUBLE_QUOTE

    def test_other_pair_does_not_change_depth(self):
        lexer = Lexer("${a(b}")
        lexer.advance()
        assert lexer.state is LexState.READING_PARAMETER_SUBSTITUTION
        lexer.advance()  # a
        lexer.advance()  # (
        assert lexer.depth == 1
        lexer.advance()  # b
        assert lexer.advance() is LexState.READING_WORD
