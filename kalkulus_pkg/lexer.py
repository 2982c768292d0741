"""Tokenizer for infix expressions.

The lexer never raises: characters it does not recognize become INVALID
tokens and are reported by the parser, which knows the context.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum

from .config import FUNCTION_NAMES

_WHITESPACE = frozenset(" \t\n\r\f\v")
_DIGITS = frozenset(string.digits)
_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = _IDENT_START | _DIGITS


class TokenType(Enum):
    NUMBER = "number"
    VARIABLE = "variable"
    FUNCTION = "function"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    CARET = "^"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    END = "end of input"
    INVALID = "invalid"


_SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int

    def describe(self) -> str:
        """Human-readable name used in parser error messages."""
        if self.type is TokenType.END:
            return "end of input"
        return f"'{self.text}'"


class Lexer:
    """Single-pass scanner producing one token per call to next_token()."""

    def __init__(self, text: str, function_names: frozenset = FUNCTION_NAMES):
        self.text = text
        self.function_names = function_names
        self.position = 0
        self.length = len(text)

    def reset(self) -> None:
        """Rewind to the start of the input for a fresh scan."""
        self.position = 0

    def next_token(self) -> Token:
        self._skip_whitespace()
        if self.position >= self.length:
            return Token(TokenType.END, "", self.position)

        current = self.text[self.position]
        if current in _DIGITS or current == ".":
            return self._read_number()
        if current in _IDENT_START:
            return self._read_identifier()

        start = self.position
        self.position += 1
        token_type = _SINGLE_CHAR_TOKENS.get(current, TokenType.INVALID)
        return Token(token_type, current, start)

    def _skip_whitespace(self) -> None:
        while self.position < self.length and self.text[self.position] in _WHITESPACE:
            self.position += 1

    def _read_number(self) -> Token:
        start = self.position
        seen_decimal = False
        while self.position < self.length:
            char = self.text[self.position]
            if char in _DIGITS:
                self.position += 1
            elif char == "." and not seen_decimal:
                seen_decimal = True
                self.position += 1
            elif char in "eE":
                # Exponent: consumed greedily, digits are optional
                self.position += 1
                if self.position < self.length and self.text[self.position] in "+-":
                    self.position += 1
                while self.position < self.length and self.text[self.position] in _DIGITS:
                    self.position += 1
                break
            else:
                break
        return Token(TokenType.NUMBER, self.text[start : self.position], start)

    def _read_identifier(self) -> Token:
        start = self.position
        while self.position < self.length and self.text[self.position] in _IDENT_CHARS:
            self.position += 1
        identifier = self.text[start : self.position]
        token_type = (
            TokenType.FUNCTION if identifier in self.function_names else TokenType.VARIABLE
        )
        return Token(token_type, identifier, start)


def tokenize(text: str, function_names: frozenset = FUNCTION_NAMES) -> list[Token]:
    """Scan the whole input; the returned list always ends with an END token."""
    lexer = Lexer(text, function_names)
    tokens = [lexer.next_token()]
    while tokens[-1].type is not TokenType.END:
        tokens.append(lexer.next_token())
    return tokens
