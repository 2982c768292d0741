"""Operator kinds shared by both expression trees, and their numeric kernels.

Every numeric failure is reported as an ``EvaluationError`` carrying one of
the codes ``DIVISION_BY_ZERO``, ``DOMAIN_ERROR``, ``OVERFLOW``,
``ARITY_ERROR`` or ``UNKNOWN_FUNCTION``.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Sequence

from .config import FUNCTION_NAMES
from .types import EvaluationError


class BinaryOperator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


class UnaryOperator(Enum):
    POSITIVE = "+"
    NEGATIVE = "-"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LOG = "log"
    LN = "ln"
    SQRT = "sqrt"
    ABS = "abs"

    @property
    def is_sign(self) -> bool:
        return self in (UnaryOperator.POSITIVE, UnaryOperator.NEGATIVE)


# Function name -> the unary operator computing it
FUNCTION_OPERATORS = {op.value: op for op in UnaryOperator if not op.is_sign}


def apply_binary(op: BinaryOperator, left: float, right: float) -> float:
    if op is BinaryOperator.ADD:
        return left + right
    if op is BinaryOperator.SUBTRACT:
        return left - right
    if op is BinaryOperator.MULTIPLY:
        return left * right
    if op is BinaryOperator.DIVIDE:
        if right == 0:
            raise EvaluationError("Division by zero", "DIVISION_BY_ZERO")
        return left / right
    if op is BinaryOperator.POWER:
        try:
            return math.pow(left, right)
        except ValueError:
            raise EvaluationError(
                f"Power {left:g}^{right:g} is not a real number", "DOMAIN_ERROR"
            ) from None
        except OverflowError:
            raise EvaluationError(
                f"Power {left:g}^{right:g} is too large", "OVERFLOW"
            ) from None
    raise EvaluationError(f"Unknown binary operation: {op!r}")


def apply_unary(op: UnaryOperator, value: float) -> float:
    if op is UnaryOperator.POSITIVE:
        return value
    if op is UnaryOperator.NEGATIVE:
        return -value
    if op is UnaryOperator.LOG:
        if value <= 0:
            raise EvaluationError("Log of non-positive number", "DOMAIN_ERROR")
        return math.log10(value)
    if op is UnaryOperator.LN:
        if value <= 0:
            raise EvaluationError("Natural log of non-positive number", "DOMAIN_ERROR")
        return math.log(value)
    if op is UnaryOperator.SQRT:
        if value < 0:
            raise EvaluationError("Square root of negative number", "DOMAIN_ERROR")
        return math.sqrt(value)
    if op is UnaryOperator.ABS:
        return abs(value)
    # sin/cos/tan reject infinities with ValueError
    try:
        if op is UnaryOperator.SIN:
            return math.sin(value)
        if op is UnaryOperator.COS:
            return math.cos(value)
        if op is UnaryOperator.TAN:
            return math.tan(value)
    except ValueError:
        raise EvaluationError(
            f"{op.value}({value:g}) is undefined", "DOMAIN_ERROR"
        ) from None
    raise EvaluationError(f"Unknown unary operation: {op!r}")


def apply_function(
    name: str, args: Sequence[float], function_names: frozenset = FUNCTION_NAMES
) -> float:
    """Apply a registered single-argument function by name."""
    if len(args) != 1:
        raise EvaluationError(f"Function {name} expects 1 argument", "ARITY_ERROR")
    op = FUNCTION_OPERATORS.get(name)
    if op is None or name not in function_names:
        raise EvaluationError(f"Unknown function: {name}", "UNKNOWN_FUNCTION")
    return apply_unary(op, args[0])


def format_literal(value: float) -> str:
    """Render a float so that the lexer reads back exactly the same value.

    Integral values print without a fractional part (``2.0`` -> ``"2"``).
    """
    if math.isfinite(value) and value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(value)
