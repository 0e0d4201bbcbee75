import pytest

from tinyshell import messages
from tinyshell.lexer import (
    LexerError,
    classify,
    delimiter_length,
    is_forbidden,
    skip_quotes,
    text_length,
    token_length,
    tokenize,
)
from tinyshell.status import get_exit_code, set_exit_code
from tinyshell.tokens import Token, TokenType


def contents(tokens):
    return [token.content for token in tokens]


def types(tokens):
    return [token.type for token in tokens]


def test_simple_words():
    assert tokenize("echo hi") == [
        Token("echo", TokenType.WORD),
        Token("hi", TokenType.WORD),
    ]


def test_whitespace_only_gives_no_tokens():
    assert tokenize(" \t  ") == []


def test_redirections_and_filenames():
    tokens = tokenize("cat < in > out")
    assert contents(tokens) == ["cat", "<", "in", ">", "out"]
    assert types(tokens) == [
        TokenType.WORD,
        TokenType.REDIRECT,
        TokenType.FILENAME,
        TokenType.REDIRECT,
        TokenType.FILENAME,
    ]


def test_heredoc_and_limiter():
    tokens = tokenize("cat << EOF")
    assert types(tokens) == [TokenType.WORD, TokenType.HEREDOC, TokenType.LIMITER]


def test_pipe_without_spaces():
    tokens = tokenize("a|b")
    assert contents(tokens) == ["a", "|", "b"]
    assert tokens[1].type == TokenType.PIPE


def test_append_redirect_attached():
    tokens = tokenize(">>out")
    assert contents(tokens) == [">>", "out"]
    assert types(tokens) == [TokenType.REDIRECT, TokenType.FILENAME]


def test_quotes_are_kept_in_token():
    tokens = tokenize('echo "a b"')
    assert contents(tokens) == ["echo", '"a b"']


def test_quoted_part_inside_word():
    line = "x'a b'y"
    assert contents(tokenize(line)) == [line]


def test_unclosed_quote_raises():
    set_exit_code(0)
    with pytest.raises(LexerError) as info:
        tokenize('echo "abc')
    assert info.value.message == "unexpected EOF while looking for matching `\"'"
    assert get_exit_code() == 1


def test_forbidden_character():
    set_exit_code(0)
    with pytest.raises(LexerError) as info:
        tokenize("echo a;b")
    assert info.value.message == messages.forbidden_character(";b")
    assert get_exit_code() == 1


def test_forbidden_sequence_reports_rest_of_line():
    with pytest.raises(LexerError) as info:
        tokenize("a && b")
    assert info.value.message == messages.forbidden_sequence("&& b")


def test_lone_open_paren_rejected_silently():
    set_exit_code(0)
    with pytest.raises(LexerError) as info:
        tokenize("(")
    assert info.value.message == ""
    assert get_exit_code() == 0


def test_ambiguous_redirect():
    set_exit_code(0)
    with pytest.raises(LexerError) as info:
        tokenize("cat < $HOME")
    assert info.value.message == "$HOME: ambiguous redirect"
    assert get_exit_code() == 1


def test_is_forbidden():
    assert is_forbidden("abc") is None
    assert is_forbidden("") is None
    assert is_forbidden("#x") == messages.forbidden_character("#x")
    assert is_forbidden("||x") == messages.forbidden_sequence("||x")
    assert is_forbidden("$(ls)") == messages.forbidden_sequence("$(ls)")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("((", 1),
        (")", 1),
        ("<<", 2),
        (">>", 2),
        ("&&", 2),
        ("<a", 1),
        ("|x", 1),
        ("<", 0),
        ("&a", 0),
        ("ab", 0),
        ("", 0),
    ],
)
def test_delimiter_length(text, expected):
    assert delimiter_length(text) == expected


@pytest.mark.parametrize("text", ['"abc"d', "'x y'", "''"])
def test_skip_quotes_finds_closing_quote(text):
    offset = skip_quotes(text)
    assert offset > 0
    assert text[offset] == text[0]


def test_skip_quotes_unclosed_reaches_end():
    text = "'abc"
    assert skip_quotes(text) == len(text)


def test_skip_quotes_unquoted_stops_before_quote():
    text = "ab'c"
    assert text[skip_quotes(text) + 1] == "'"


def test_text_length_stops_at_space_and_delimiter():
    assert text_length("abc def") == len("abc")
    assert text_length("abc|def") == len("abc")
    assert text_length('a"b c"d e') == len('a"b c"d')


def test_text_length_raises_on_unclosed_quote():
    with pytest.raises(LexerError):
        text_length("ab'cd")


def test_token_length():
    assert token_length(")") == 1
    assert token_length("(") == 0
    assert token_length("<<x") == 2
    assert token_length("word rest") == len("word")


@pytest.mark.parametrize(
    "content, previous, expected",
    [
        ("<", None, TokenType.REDIRECT),
        (">", None, TokenType.REDIRECT),
        (">>", None, TokenType.REDIRECT),
        ("<<", None, TokenType.HEREDOC),
        ("|", None, TokenType.PIPE),
        ("&a", None, TokenType.OPERATOR),
        ("(", None, TokenType.PAREN),
        ("x", Token("<<", TokenType.HEREDOC), TokenType.LIMITER),
        ("x", Token("<", TokenType.REDIRECT), TokenType.FILENAME),
        ("x", Token("ls", TokenType.WORD), TokenType.WORD),
        ("x", None, TokenType.WORD),
    ],
)
def test_classify(content, previous, expected):
    assert classify(content, previous) == expected