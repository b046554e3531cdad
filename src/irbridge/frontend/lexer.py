"""
Lexer
=====

Purpose:
- Strip comments
- Split C-like source into typed tokens
- Render the token listing shown in the editor

This module:
- DOES NOT build syntax trees
- DOES NOT know about IR
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List


KEYWORDS = {"int", "float", "char", "return", "if", "else", "while", "for"}

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<symbol2>==|!=|<=|>=)
  | (?P<char>'[^']')
  | (?P<float>\d+\.\d+)
  | (?P<integer>\d+)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<symbol>[+\-*/%=<>(){};,])
    """,
    re.VERBOSE,
)


class LexError(Exception):
    pass


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    line: int = 1

    def __str__(self) -> str:
        return f'TOKEN({self.type}, "{self.value}")'


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def strip_comments(source: str) -> str:
    """
    Remove // and /* */ comments.

    Newlines inside comments are kept so token line numbers stay correct.
    """

    out: List[str] = []
    i = 0
    n = len(source)
    while i < n:
        two = source[i:i + 2]
        if two == "//":
            end = source.find("\n", i)
            if end == -1:
                break
            i = end
            continue
        if two == "/*":
            end = source.find("*/", i + 2)
            if end == -1:
                raise LexError("unterminated block comment")
            out.append("\n" * source.count("\n", i, end))
            i = end + 2
            continue
        out.append(source[i])
        i += 1
    return "".join(out)


def tokenize(source: str) -> List[Token]:
    clean = strip_comments(source)
    tokens: List[Token] = []
    line = 1
    pos = 0

    while pos < len(clean):
        m = _TOKEN_RE.match(clean, pos)
        if m is None:
            raise LexError(f"unexpected character {clean[pos]!r} on line {line}")

        kind = m.lastgroup
        text = m.group()
        pos = m.end()

        if kind == "ws":
            line += text.count("\n")
            continue

        if kind == "ident":
            tokens.append(Token("KEYWORD" if text in KEYWORDS else "IDENTIFIER", text, line))
        elif kind == "integer":
            tokens.append(Token("INTEGER", text, line))
        elif kind == "float":
            tokens.append(Token("FLOAT", text, line))
        elif kind == "char":
            tokens.append(Token("CHAR", text, line))
        else:
            tokens.append(Token("SYMBOL", text, line))

    return tokens


def serialize_tokens(tokens: List[Token]) -> str:
    return "".join(f"{tok}\n" for tok in tokens)
