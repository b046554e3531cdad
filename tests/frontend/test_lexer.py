import pytest

from irbridge.frontend.lexer import LexError, Token, serialize_tokens, strip_comments, tokenize


def test_tokenize_simple_main():
    tokens = tokenize("int main() { return 42; }")

    assert [t.type for t in tokens] == [
        "KEYWORD", "IDENTIFIER", "SYMBOL", "SYMBOL", "SYMBOL",
        "KEYWORD", "INTEGER", "SYMBOL", "SYMBOL",
    ]
    assert tokens[1].value == "main"
    assert tokens[6].value == "42"


def test_multi_char_symbols_and_literals():
    tokens = tokenize("a == b != 'x' 3.5")

    assert [(t.type, t.value) for t in tokens] == [
        ("IDENTIFIER", "a"),
        ("SYMBOL", "=="),
        ("IDENTIFIER", "b"),
        ("SYMBOL", "!="),
        ("CHAR", "'x'"),
        ("FLOAT", "3.5"),
    ]


def test_comments_are_removed_but_lines_kept():
    src = "int a; // trailing\n/* block\ncomment */ int b;"

    assert "trailing" not in strip_comments(src)
    b = [t for t in tokenize(src) if t.value == "b"][0]
    assert b.line == 3


def test_unterminated_block_comment():
    with pytest.raises(LexError):
        tokenize("int a; /* never closed")


def test_unexpected_character():
    with pytest.raises(LexError, match="'@'"):
        tokenize("int a = 1 @ 2;")


def test_serialize_tokens_listing():
    listing = serialize_tokens([Token("KEYWORD", "int"), Token("IDENTIFIER", "x")])

    assert listing == 'TOKEN(KEYWORD, "int")\nTOKEN(IDENTIFIER, "x")\n'


def test_empty_source_is_empty_listing():
    assert serialize_tokens(tokenize("")) == ""
