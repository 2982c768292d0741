"""Symbolic expression tree and its rewrite rules.

Every node kind implements differentiation, integration, simplification,
evaluation and printing. Operations build new trees and never modify the
receiver; operands reused in a result are cloned.

Shapes without a differentiation or integration rule raise
``TransformError`` (code ``NOT_IMPLEMENTED``).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

import sympy as sp

from .config import SYMPY_FUNCTIONS
from .operators import (
    FUNCTION_OPERATORS,
    BinaryOperator,
    UnaryOperator,
    apply_binary,
    apply_function,
    apply_unary,
    format_literal,
)
from .types import EvaluationError, TransformError

Variables = Optional[Mapping[str, float]]

ADD = BinaryOperator.ADD
SUBTRACT = BinaryOperator.SUBTRACT
MULTIPLY = BinaryOperator.MULTIPLY
DIVIDE = BinaryOperator.DIVIDE
POWER = BinaryOperator.POWER

NEGATIVE = UnaryOperator.NEGATIVE
POSITIVE = UnaryOperator.POSITIVE


class SymbolicExpression(ABC):
    """Base class of every symbolic expression node."""

    @abstractmethod
    def to_string(self) -> str:
        pass

    @abstractmethod
    def differentiate(self, variable: str) -> SymbolicExpression:
        pass

    @abstractmethod
    def integrate(self, variable: str) -> SymbolicExpression:
        pass

    @abstractmethod
    def simplify(self) -> SymbolicExpression:
        pass

    @abstractmethod
    def clone(self) -> SymbolicExpression:
        pass

    @abstractmethod
    def evaluate(self, variables: Variables = None) -> float:
        pass

    @abstractmethod
    def is_constant(self) -> bool:
        """True when no variable occurs anywhere in the subtree."""

    def is_zero(self) -> bool:
        return False

    def is_one(self) -> bool:
        return False

    @abstractmethod
    def to_sympy(self) -> sp.Expr:
        pass

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class SymbolicNumber(SymbolicExpression):
    value: float

    def to_string(self) -> str:
        return format_literal(self.value)

    def differentiate(self, variable: str) -> SymbolicExpression:
        return SymbolicNumber(0.0)

    def integrate(self, variable: str) -> SymbolicExpression:
        return SymbolicBinaryOp(MULTIPLY, SymbolicNumber(self.value), SymbolicVariable(variable))

    def simplify(self) -> SymbolicExpression:
        return SymbolicNumber(self.value)

    def clone(self) -> SymbolicNumber:
        return SymbolicNumber(self.value)

    def evaluate(self, variables: Variables = None) -> float:
        return self.value

    def is_constant(self) -> bool:
        return True

    def is_zero(self) -> bool:
        return self.value == 0.0

    def is_one(self) -> bool:
        return self.value == 1.0

    def to_sympy(self) -> sp.Expr:
        if math.isfinite(self.value) and self.value == int(self.value):
            return sp.Integer(int(self.value))
        return sp.Float(self.value)


@dataclass(frozen=True)
class SymbolicVariable(SymbolicExpression):
    name: str

    def to_string(self) -> str:
        return self.name

    def differentiate(self, variable: str) -> SymbolicExpression:
        return SymbolicNumber(1.0 if self.name == variable else 0.0)

    def integrate(self, variable: str) -> SymbolicExpression:
        if self.name == variable:
            # x -> x^2/2
            return SymbolicBinaryOp(
                DIVIDE,
                SymbolicBinaryOp(POWER, SymbolicVariable(variable), SymbolicNumber(2.0)),
                SymbolicNumber(2.0),
            )
        # Other variables are treated as constants: y -> y*x
        return SymbolicBinaryOp(MULTIPLY, SymbolicVariable(self.name), SymbolicVariable(variable))

    def simplify(self) -> SymbolicExpression:
        return SymbolicVariable(self.name)

    def clone(self) -> SymbolicVariable:
        return SymbolicVariable(self.name)

    def evaluate(self, variables: Variables = None) -> float:
        if not variables or self.name not in variables:
            raise EvaluationError(
                f"Undefined variable: {self.name}", "UNDEFINED_VARIABLE"
            )
        return float(variables[self.name])

    def is_constant(self) -> bool:
        return False

    def to_sympy(self) -> sp.Expr:
        return sp.Symbol(self.name)


@dataclass(frozen=True)
class SymbolicBinaryOp(SymbolicExpression):
    op: BinaryOperator
    left: SymbolicExpression
    right: SymbolicExpression

    def to_string(self) -> str:
        if self.op is MULTIPLY:
            return _multiplication_to_string(self.left, self.right)
        return f"({self.left.to_string()} {self.op.value} {self.right.to_string()})"

    def differentiate(self, variable: str) -> SymbolicExpression:
        left, right = self.left, self.right
        if self.op in (ADD, SUBTRACT):
            return SymbolicBinaryOp(
                self.op, left.differentiate(variable), right.differentiate(variable)
            )
        if self.op is MULTIPLY:
            # Product rule: u*dv + v*du
            return SymbolicBinaryOp(
                ADD,
                SymbolicBinaryOp(MULTIPLY, left.clone(), right.differentiate(variable)),
                SymbolicBinaryOp(MULTIPLY, right.clone(), left.differentiate(variable)),
            )
        if self.op is DIVIDE:
            # Quotient rule: (v*du - u*dv) / v^2
            numerator = SymbolicBinaryOp(
                SUBTRACT,
                SymbolicBinaryOp(MULTIPLY, right.clone(), left.differentiate(variable)),
                SymbolicBinaryOp(MULTIPLY, left.clone(), right.differentiate(variable)),
            )
            return SymbolicBinaryOp(
                DIVIDE,
                numerator,
                SymbolicBinaryOp(POWER, right.clone(), SymbolicNumber(2.0)),
            )
        if self.op is POWER:
            if not right.is_constant():
                raise TransformError(
                    "Differentiation of variable exponents not implemented"
                )
            exponent = _constant_value(right)
            # Power rule with the chain rule folded in: n * u^(n-1) * du
            return SymbolicBinaryOp(
                MULTIPLY,
                SymbolicBinaryOp(
                    MULTIPLY,
                    SymbolicNumber(exponent),
                    SymbolicBinaryOp(POWER, left.clone(), SymbolicNumber(exponent - 1.0)),
                ),
                left.differentiate(variable),
            )
        raise TransformError(f"Unknown binary operation in differentiation: {self.op!r}")

    def integrate(self, variable: str) -> SymbolicExpression:
        left, right = self.left, self.right
        if self.op in (ADD, SUBTRACT):
            return SymbolicBinaryOp(self.op, left.integrate(variable), right.integrate(variable))
        if self.op is MULTIPLY:
            if left.is_constant():
                return SymbolicBinaryOp(MULTIPLY, left.clone(), right.integrate(variable))
            if right.is_constant():
                return SymbolicBinaryOp(MULTIPLY, left.integrate(variable), right.clone())
            raise TransformError(
                "Integration by parts not implemented for general multiplication"
            )
        if self.op is DIVIDE:
            if left.is_constant() and right.to_string() == variable:
                # c/x -> c*ln(x)
                return SymbolicBinaryOp(
                    MULTIPLY, left.clone(), SymbolicUnaryOp(UnaryOperator.LN, SymbolicVariable(variable))
                )
            raise TransformError("Complex division integration not implemented")
        if self.op is POWER:
            if left.to_string() == variable and right.is_constant():
                exponent = _constant_value(right)
                if exponent == -1.0:
                    return SymbolicUnaryOp(UnaryOperator.LN, SymbolicVariable(variable))
                # x^n -> x^(n+1)/(n+1)
                return SymbolicBinaryOp(
                    DIVIDE,
                    SymbolicBinaryOp(POWER, SymbolicVariable(variable), SymbolicNumber(exponent + 1.0)),
                    SymbolicNumber(exponent + 1.0),
                )
            raise TransformError("Complex power integration not implemented")
        raise TransformError(f"Integration not implemented for binary operation {self.op!r}")

    def simplify(self) -> SymbolicExpression:
        return _simplify_binary(self.op, self.left.simplify(), self.right.simplify())

    def clone(self) -> SymbolicBinaryOp:
        return SymbolicBinaryOp(self.op, self.left.clone(), self.right.clone())

    def evaluate(self, variables: Variables = None) -> float:
        left_val = self.left.evaluate(variables)
        right_val = self.right.evaluate(variables)
        return apply_binary(self.op, left_val, right_val)

    def is_constant(self) -> bool:
        return self.left.is_constant() and self.right.is_constant()

    def to_sympy(self) -> sp.Expr:
        left, right = self.left.to_sympy(), self.right.to_sympy()
        if self.op is ADD:
            return left + right
        if self.op is SUBTRACT:
            return left - right
        if self.op is MULTIPLY:
            return left * right
        if self.op is DIVIDE:
            return left / right
        return left**right


@dataclass(frozen=True)
class SymbolicUnaryOp(SymbolicExpression):
    op: UnaryOperator
    operand: SymbolicExpression

    def to_string(self) -> str:
        if self.op.is_sign:
            return f"{self.op.value}{self.operand.to_string()}"
        return f"{self.op.value}({self.operand.to_string()})"

    def differentiate(self, variable: str) -> SymbolicExpression:
        d_operand = self.operand.differentiate(variable)
        if self.op is POSITIVE:
            return d_operand
        if self.op is NEGATIVE:
            return SymbolicUnaryOp(NEGATIVE, d_operand)
        return _differentiate_function(self.op, self.operand, d_operand)

    def integrate(self, variable: str) -> SymbolicExpression:
        if self.op is POSITIVE:
            return self.operand.integrate(variable)
        if self.op is NEGATIVE:
            return SymbolicUnaryOp(NEGATIVE, self.operand.integrate(variable))
        return _integrate_function(self.op, self.operand, variable)

    def simplify(self) -> SymbolicExpression:
        return _simplify_unary(self.op, self.operand.simplify())

    def clone(self) -> SymbolicUnaryOp:
        return SymbolicUnaryOp(self.op, self.operand.clone())

    def evaluate(self, variables: Variables = None) -> float:
        return apply_unary(self.op, self.operand.evaluate(variables))

    def is_constant(self) -> bool:
        return self.operand.is_constant()

    def to_sympy(self) -> sp.Expr:
        operand = self.operand.to_sympy()
        if self.op is POSITIVE:
            return operand
        if self.op is NEGATIVE:
            return -operand
        return SYMPY_FUNCTIONS[self.op.value](operand)


@dataclass(frozen=True)
class SymbolicFunction(SymbolicExpression):
    name: str
    arguments: tuple[SymbolicExpression, ...]

    def to_string(self) -> str:
        args = ", ".join(arg.to_string() for arg in self.arguments)
        return f"{self.name}({args})"

    def differentiate(self, variable: str) -> SymbolicExpression:
        if len(self.arguments) != 1:
            raise TransformError(
                "Differentiation not implemented for multi-argument functions"
            )
        op = FUNCTION_OPERATORS.get(self.name)
        if op is None:
            raise TransformError(
                f"Differentiation not implemented for function: {self.name}"
            )
        argument = self.arguments[0]
        return _differentiate_function(op, argument, argument.differentiate(variable))

    def integrate(self, variable: str) -> SymbolicExpression:
        if len(self.arguments) != 1:
            raise TransformError(
                "Integration not implemented for multi-argument functions"
            )
        op = FUNCTION_OPERATORS.get(self.name)
        if op is None:
            raise TransformError(f"Integration not implemented for function: {self.name}")
        return _integrate_function(op, self.arguments[0], variable)

    def simplify(self) -> SymbolicExpression:
        arguments = tuple(arg.simplify() for arg in self.arguments)
        if arguments and all(isinstance(arg, SymbolicNumber) for arg in arguments):
            return SymbolicNumber(
                _fold(apply_function, self.name, [arg.value for arg in arguments])
            )
        return SymbolicFunction(self.name, arguments)

    def clone(self) -> SymbolicFunction:
        return SymbolicFunction(self.name, tuple(arg.clone() for arg in self.arguments))

    def evaluate(self, variables: Variables = None) -> float:
        if len(self.arguments) != 1:
            raise EvaluationError(
                f"Function {self.name} expects 1 argument", "ARITY_ERROR"
            )
        return apply_function(self.name, [self.arguments[0].evaluate(variables)])

    def is_constant(self) -> bool:
        return all(arg.is_constant() for arg in self.arguments)

    def to_sympy(self) -> sp.Expr:
        if len(self.arguments) != 1 or self.name not in SYMPY_FUNCTIONS:
            raise TransformError(
                f"No SymPy equivalent for {self.to_string()}", "CONVERSION_ERROR"
            )
        return SYMPY_FUNCTIONS[self.name](self.arguments[0].to_sympy())


# ---------------------------------------------------------------------------
# Rule helpers shared by unary operators and single-argument function calls
# ---------------------------------------------------------------------------


def _differentiate_function(
    op: UnaryOperator, operand: SymbolicExpression, d_operand: SymbolicExpression
) -> SymbolicExpression:
    """Chain rule: f'(u) * du for the supported functions."""
    if op is UnaryOperator.SIN:
        outer = SymbolicUnaryOp(UnaryOperator.COS, operand.clone())
    elif op is UnaryOperator.COS:
        outer = SymbolicUnaryOp(NEGATIVE, SymbolicUnaryOp(UnaryOperator.SIN, operand.clone()))
    elif op is UnaryOperator.TAN:
        # sec^2(u) written as 1/cos(u)^2
        outer = SymbolicBinaryOp(
            DIVIDE,
            SymbolicNumber(1.0),
            SymbolicBinaryOp(
                POWER, SymbolicUnaryOp(UnaryOperator.COS, operand.clone()), SymbolicNumber(2.0)
            ),
        )
    elif op is UnaryOperator.LN:
        outer = SymbolicBinaryOp(DIVIDE, SymbolicNumber(1.0), operand.clone())
    elif op is UnaryOperator.SQRT:
        outer = SymbolicBinaryOp(
            DIVIDE,
            SymbolicNumber(1.0),
            SymbolicBinaryOp(
                MULTIPLY, SymbolicNumber(2.0), SymbolicUnaryOp(UnaryOperator.SQRT, operand.clone())
            ),
        )
    else:
        raise TransformError(f"Differentiation not implemented for {op.value}")
    return SymbolicBinaryOp(MULTIPLY, outer, d_operand)


def _integrate_function(
    op: UnaryOperator, operand: SymbolicExpression, variable: str
) -> SymbolicExpression:
    # Only the bare integration variable is recognized, compared by its text
    if operand.to_string() != variable:
        raise TransformError(
            f"Integration of {op.value}({operand.to_string()}) not implemented"
        )
    if op is UnaryOperator.SIN:
        return SymbolicUnaryOp(NEGATIVE, SymbolicUnaryOp(UnaryOperator.COS, SymbolicVariable(variable)))
    if op is UnaryOperator.COS:
        return SymbolicUnaryOp(UnaryOperator.SIN, SymbolicVariable(variable))
    if op is UnaryOperator.LN:
        # x*ln(x) - x
        return SymbolicBinaryOp(
            SUBTRACT,
            SymbolicBinaryOp(
                MULTIPLY,
                SymbolicVariable(variable),
                SymbolicUnaryOp(UnaryOperator.LN, SymbolicVariable(variable)),
            ),
            SymbolicVariable(variable),
        )
    raise TransformError(f"Integration not implemented for {op.value}")


def _constant_value(expression: SymbolicExpression) -> float:
    try:
        return expression.evaluate()
    except EvaluationError as e:
        raise TransformError(
            f"Cannot evaluate constant {expression.to_string()}: {e.message}", e.code
        ) from e


def _fold(func, *args) -> float:
    """Evaluate a constant subexpression during simplification."""
    try:
        return func(*args)
    except EvaluationError as e:
        raise TransformError(f"Cannot simplify: {e.message}", e.code) from e


def _simplify_binary(
    op: BinaryOperator, left: SymbolicExpression, right: SymbolicExpression
) -> SymbolicExpression:
    """Apply identities to a binary node whose operands are already simplified."""
    if op is ADD:
        if left.is_zero():
            return right
        if right.is_zero():
            return left
    elif op is SUBTRACT:
        if right.is_zero():
            return left
        if left.is_zero():
            return _simplify_unary(NEGATIVE, right)
    elif op is MULTIPLY:
        if left.is_zero() or right.is_zero():
            return SymbolicNumber(0.0)
        if left.is_one():
            return right
        if right.is_one():
            return left
    elif op is DIVIDE:
        if right.is_zero():
            raise TransformError("Division by zero", "DIVISION_BY_ZERO")
        if left.is_zero():
            return SymbolicNumber(0.0)
        if right.is_one():
            return left
    elif op is POWER:
        if right.is_zero():
            return SymbolicNumber(1.0)
        if right.is_one():
            return left
        if left.is_zero():
            return SymbolicNumber(0.0)
        if left.is_one():
            return SymbolicNumber(1.0)

    if isinstance(left, SymbolicNumber) and isinstance(right, SymbolicNumber):
        return SymbolicNumber(_fold(apply_binary, op, left.value, right.value))
    return SymbolicBinaryOp(op, left, right)


def _simplify_unary(op: UnaryOperator, operand: SymbolicExpression) -> SymbolicExpression:
    """Apply identities to a unary node whose operand is already simplified."""
    if op is POSITIVE:
        return operand
    if op is NEGATIVE:
        if operand.is_zero():
            return SymbolicNumber(0.0)
        if isinstance(operand, SymbolicUnaryOp) and operand.op is NEGATIVE:
            return operand.operand
    if isinstance(operand, SymbolicNumber):
        return SymbolicNumber(_fold(apply_unary, op, operand.value))
    return SymbolicUnaryOp(op, operand)


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------

# Operands printed next to a coefficient without parentheses
_JUXTAPOSABLE = (SymbolicVariable, SymbolicFunction, SymbolicUnaryOp)


def _multiplication_to_string(left: SymbolicExpression, right: SymbolicExpression) -> str:
    if isinstance(left, SymbolicNumber) and isinstance(right, SymbolicNumber):
        return format_literal(left.value * right.value)
    if isinstance(left, SymbolicNumber) and not right.is_constant():
        return _with_coefficient(left.value, right)
    if isinstance(right, SymbolicNumber) and not left.is_constant():
        return _with_coefficient(right.value, left)
    return f"({left.to_string()} * {right.to_string()})"


def _with_coefficient(coefficient: float, term: SymbolicExpression) -> str:
    text = term.to_string()
    if coefficient == 1.0:
        return text
    signed = isinstance(term, SymbolicUnaryOp) and term.op in (POSITIVE, NEGATIVE)
    if coefficient == -1.0:
        return f"-({text})" if signed else f"-{text}"
    if (signed or not isinstance(term, _JUXTAPOSABLE)) and not _is_grouped(text):
        text = f"({text})"
    return f"{format_literal(coefficient)}{text}"


def _is_grouped(text: str) -> bool:
    """True when the whole text is a single parenthesized group."""
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index != len(text) - 1:
                return False
    return True
