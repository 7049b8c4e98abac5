"""Lexer for OGC Well-Known-Text.

Numbers are matched as a whole literal (mantissa plus an optional signed
exponent) and converted with ``float()``, so ``6.12303176911189E-17`` and
``5.235E+4`` decode to the exact IEEE-754 value.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import ParseError


class TokenType(Enum):
    WORD = "word"
    NUMBER = "number"
    STRING = "string"
    OPEN = "open"
    CLOSE = "close"
    COMMA = "comma"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int
    value: object = None


_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<number>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<string>"(?:[^"]|"")*")
    | (?P<word>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<open>[\[(])
    | (?P<close>[\])])
    | (?P<comma>,)
    """,
    re.VERBOSE,
)

CLOSERS = {"[": "]", "(": ")"}


def fragment_at(text: str, position: int, width: int = 40) -> str:
    return text[position : position + width]


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    n = len(text)
    while pos < n:
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ParseError("Unexpected character", fragment_at(text, pos), pos)
        kind = m.lastgroup
        raw = m.group()
        if kind == "number":
            tokens.append(Token(TokenType.NUMBER, raw, pos, float(raw)))
        elif kind == "string":
            tokens.append(Token(TokenType.STRING, raw, pos, raw[1:-1].replace('""', '"')))
        elif kind == "word":
            tokens.append(Token(TokenType.WORD, raw, pos, raw))
        elif kind == "open":
            tokens.append(Token(TokenType.OPEN, raw, pos))
        elif kind == "close":
            tokens.append(Token(TokenType.CLOSE, raw, pos))
        elif kind == "comma":
            tokens.append(Token(TokenType.COMMA, raw, pos))
        pos = m.end()
    tokens.append(Token(TokenType.EOF, "", n))
    return tokens


class TokenStream:
    """Cursor over the token list with expectation helpers."""

    def __init__(self, text: str):
        self.text = text
        self._tokens = tokenize(text)
        self._i = 0

    def peek(self, offset: int = 0) -> Token:
        return self._tokens[min(self._i + offset, len(self._tokens) - 1)]

    def next(self) -> Token:
        tok = self._tokens[self._i]
        if tok.type is not TokenType.EOF:
            self._i += 1
        return tok

    def expect(self, kind: TokenType, what: Optional[str] = None) -> Token:
        tok = self.next()
        if tok.type is not kind:
            self.fail(f"Expected {what or kind.value}", tok)
        return tok

    def fail(self, message: str, tok: Optional[Token] = None) -> None:
        tok = tok or self.peek()
        raise ParseError(message, fragment_at(self.text, tok.position), tok.position)


__all__ = ["TokenType", "Token", "tokenize", "TokenStream", "CLOSERS", "fragment_at"]
