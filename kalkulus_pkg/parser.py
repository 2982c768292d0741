"""Recursive-descent parser building the numeric expression tree.

This module handles:
- Input validation (length, nesting depth)
- Operator precedence and associativity (``^`` is right-associative)
- Implicit multiplication (``2x``, ``3(x+1)``, ``x sin(x)``)
- Numeric result formatting for display

Grammar, lowest precedence first::

    term    := factor (('+' | '-') factor)*
    factor  := power ((('*' | '/') power) | power)*   # juxtaposition multiplies
    power   := primary ('^' power)?
    primary := NUMBER | VARIABLE | FUNCTION '(' args? ')' | '(' term ')'
             | ('+' | '-') primary
"""

from __future__ import annotations

import math
from contextlib import ExitStack, contextmanager
from typing import Any, Iterator

from .ast_nodes import (
    ASTNode,
    BinaryOpNode,
    FunctionNode,
    NumberNode,
    UnaryOpNode,
    VariableNode,
)
from .config import (
    FUNCTION_NAMES,
    MAX_EXPRESSION_DEPTH,
    MAX_INPUT_LENGTH,
    NUMBER_PREFIX_RE,
)
from .lexer import Lexer, Token, TokenType
from .operators import BinaryOperator, UnaryOperator
from .types import ParseError

# Tokens that may begin a factor, triggering implicit multiplication
_FACTOR_START = frozenset(
    {TokenType.NUMBER, TokenType.VARIABLE, TokenType.FUNCTION, TokenType.LPAREN}
)

_BINARY_OPS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUBTRACT,
    TokenType.STAR: BinaryOperator.MULTIPLY,
    TokenType.SLASH: BinaryOperator.DIVIDE,
    TokenType.CARET: BinaryOperator.POWER,
}


class Parser:
    """Parses a single expression; create a new Parser per input."""

    def __init__(
        self,
        expression: str,
        function_names: frozenset = FUNCTION_NAMES,
        max_depth: int = MAX_EXPRESSION_DEPTH,
    ):
        self.lexer = Lexer(expression, function_names)
        self.max_depth = max_depth
        self._depth = 0
        self.current: Token = self.lexer.next_token()

    def parse(self) -> ASTNode:
        """Parse the whole input, which must be consumed through END."""
        result = self._parse_term()
        self._expect(TokenType.END, "Expected end of input")
        return result

    def _advance(self) -> Token:
        token = self.current
        self.current = self.lexer.next_token()
        return token

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self.current.type is not token_type:
            raise ParseError(
                f"{message}, found {self.current.describe()} "
                f"at position {self.current.position}",
                "UNEXPECTED_TOKEN",
                self.current.position,
            )
        return self._advance()

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise ParseError(
                    f"Expression nested too deeply (>{self.max_depth} levels)",
                    "TOO_DEEP",
                    self.current.position,
                )
            yield
        finally:
            self._depth -= 1

    def _parse_term(self) -> ASTNode:
        left = self._parse_factor()
        # Each link of a left-leaning chain adds one level to the tree
        with ExitStack() as chain:
            while self.current.type in (TokenType.PLUS, TokenType.MINUS):
                chain.enter_context(self._nested())
                op = _BINARY_OPS[self._advance().type]
                right = self._parse_factor()
                left = BinaryOpNode(op, left, right)
        return left

    def _parse_factor(self) -> ASTNode:
        left = self._parse_power()
        with ExitStack() as chain:
            while (
                self.current.type in (TokenType.STAR, TokenType.SLASH)
                or self.current.type in _FACTOR_START
            ):
                chain.enter_context(self._nested())
                if self.current.type in _FACTOR_START:
                    op = BinaryOperator.MULTIPLY
                else:
                    op = _BINARY_OPS[self._advance().type]
                right = self._parse_power()
                left = BinaryOpNode(op, left, right)
        return left

    def _parse_power(self) -> ASTNode:
        base = self._parse_primary()
        if self.current.type is TokenType.CARET:
            self._advance()
            with self._nested():
                exponent = self._parse_power()
            return BinaryOpNode(BinaryOperator.POWER, base, exponent)
        return base

    def _parse_primary(self) -> ASTNode:
        token = self.current
        if token.type is TokenType.NUMBER:
            self._advance()
            return NumberNode(_number_value(token))
        if token.type is TokenType.VARIABLE:
            self._advance()
            return VariableNode(token.text)
        if token.type is TokenType.FUNCTION:
            return self._parse_function()
        if token.type is TokenType.LPAREN:
            self._advance()
            with self._nested():
                inner = self._parse_term()
            self._expect(TokenType.RPAREN, "Expected closing parenthesis")
            return inner
        if token.type in (TokenType.PLUS, TokenType.MINUS):
            self._advance()
            op = (
                UnaryOperator.POSITIVE
                if token.type is TokenType.PLUS
                else UnaryOperator.NEGATIVE
            )
            with self._nested():
                operand = self._parse_primary()
            return UnaryOpNode(op, operand)
        if token.type is TokenType.END:
            raise ParseError(
                f"Unexpected end of input at position {token.position}",
                "UNEXPECTED_END",
                token.position,
            )
        raise ParseError(
            f"Unexpected token {token.describe()} at position {token.position}",
            "UNEXPECTED_TOKEN",
            token.position,
        )

    def _parse_function(self) -> ASTNode:
        name = self._advance().text
        self._expect(TokenType.LPAREN, f"Expected '(' after function name '{name}'")
        arguments: list[ASTNode] = []
        with self._nested():
            if self.current.type is not TokenType.RPAREN:
                arguments.append(self._parse_term())
                while self.current.type is TokenType.COMMA:
                    self._advance()
                    arguments.append(self._parse_term())
        self._expect(TokenType.RPAREN, "Expected closing parenthesis")
        return FunctionNode(name, tuple(arguments))


def _number_value(token: Token) -> float:
    """Convert a NUMBER token, ignoring a trailing malformed exponent (``2e`` -> 2)."""
    match = NUMBER_PREFIX_RE.match(token.text)
    if not any(char.isdigit() for char in match.group("mantissa")):
        raise ParseError(
            f"Invalid number literal '{token.text}' at position {token.position}",
            "INVALID_NUMBER",
            token.position,
        )
    value = float(match.group(0))
    if not math.isfinite(value):
        raise ParseError(
            f"Number literal '{token.text}' out of range at position {token.position}",
            "INVALID_NUMBER",
            token.position,
        )
    return value


def parse_expression(expression: str, function_names: frozenset = FUNCTION_NAMES) -> ASTNode:
    """Parse an infix expression string into an AST.

    Args:
        expression: Expression text (e.g., "2x^2 + sin(x)")
        function_names: Identifiers to treat as function names

    Returns:
        Root node of the parsed tree

    Raises:
        ParseError: If the input is too long, malformed, or nested too deeply
    """
    if len(expression) > MAX_INPUT_LENGTH:
        raise ParseError(
            f"Input too long (>{MAX_INPUT_LENGTH} characters)", "TOO_LONG", 0
        )
    return Parser(expression, function_names).parse()


def format_number(val: Any, precision: int | None = None) -> str:
    """Format a numeric value with specified precision.

    Args:
        val: Numeric value to format
        precision: Number of significant digits (default: OUTPUT_PRECISION)

    Returns:
        Formatted string representation of the number
    """
    if precision is None:
        # Read at call time so CLI overrides of config take effect
        from . import config

        precision = config.OUTPUT_PRECISION
    try:
        fmt = "{:." + str(int(precision)) + "g}"
        return fmt.format(float(val))
    except (ValueError, TypeError, OverflowError):
        # Fallback for non-numeric or invalid values
        return str(val)
