"""Naive equation solving and factoring on symbolic trees.

Both operations recognize a handful of shapes only. ``solve`` treats its
input as ``expression = 0`` and isolates a single linear occurrence of the
variable; ``factor`` splits products and the ``v^2 + v`` pattern.
"""

from __future__ import annotations

from .converter import parse_to_symbolic
from .logging_config import get_logger
from .operators import BinaryOperator, UnaryOperator
from .symbolic import (
    SymbolicBinaryOp,
    SymbolicExpression,
    SymbolicNumber,
    SymbolicUnaryOp,
    SymbolicVariable,
)
from .types import FactorResult, ParseError, TransformError, TransformResult

logger = get_logger("solver")


def _linear_coefficient(
    expression: SymbolicExpression, variable: str
) -> SymbolicExpression | None:
    """Coefficient ``a`` when expression is ``v``, ``a*v``, ``v*a`` or ``-v``."""
    if isinstance(expression, SymbolicVariable) and expression.name == variable:
        return SymbolicNumber(1.0)
    if isinstance(expression, SymbolicUnaryOp) and expression.op is UnaryOperator.NEGATIVE:
        if expression.operand == SymbolicVariable(variable):
            return SymbolicNumber(-1.0)
        return None
    if isinstance(expression, SymbolicBinaryOp) and expression.op is BinaryOperator.MULTIPLY:
        left, right = expression.left, expression.right
        if right == SymbolicVariable(variable) and left.is_constant():
            return left.clone()
        if left == SymbolicVariable(variable) and right.is_constant():
            return right.clone()
    return None


def solve_linear(expression: SymbolicExpression, variable: str) -> SymbolicExpression:
    """Solve ``expression = 0`` for ``variable``.

    The returned tree is not simplified.

    Raises:
        TransformError: If the equation has none of the supported shapes
    """
    try:
        simplified = expression.simplify()
    except TransformError as e:
        raise TransformError(f"Equation solving failed: {e.message}", e.code) from e
    if isinstance(simplified, SymbolicBinaryOp) and simplified.op in (
        BinaryOperator.ADD,
        BinaryOperator.SUBTRACT,
    ):
        adding = simplified.op is BinaryOperator.ADD
        left, right = simplified.left, simplified.right
        if left.is_constant():
            # c + f = 0 -> -c / f,  c - f = 0 -> c / f
            numerator = SymbolicUnaryOp(UnaryOperator.NEGATIVE, left.clone()) if adding else left.clone()
            return SymbolicBinaryOp(BinaryOperator.DIVIDE, numerator, right.clone())
        if right.is_constant():
            coefficient = _linear_coefficient(left, variable)
            if coefficient is not None:
                # a*v + c = 0 -> -c / a,  a*v - c = 0 -> c / a
                numerator = (
                    SymbolicUnaryOp(UnaryOperator.NEGATIVE, right.clone()) if adding else right.clone()
                )
                return SymbolicBinaryOp(BinaryOperator.DIVIDE, numerator, coefficient)
    raise TransformError(
        "Equation solving failed: Complex equation solving not implemented"
    )


def factor_expression(
    expression: SymbolicExpression, variable: str = "x"
) -> list[SymbolicExpression]:
    """Split a simplified expression into factors; unfactorable input is returned whole."""
    simplified = expression.simplify()
    if isinstance(simplified, SymbolicBinaryOp):
        if simplified.op is BinaryOperator.MULTIPLY:
            return [simplified.left.clone(), simplified.right.clone()]
        if (
            simplified.op is BinaryOperator.ADD
            and simplified.left.to_string() == f"({variable} ^ 2)"
            and simplified.right.to_string() == variable
        ):
            # v^2 + v -> v * (v + 1)
            return [
                SymbolicVariable(variable),
                SymbolicBinaryOp(
                    BinaryOperator.ADD, SymbolicVariable(variable), SymbolicNumber(1.0)
                ),
            ]
    return [simplified]


def solve_equation(expression: str, variable: str = "x") -> TransformResult:
    """Parse ``expression`` and solve ``expression = 0`` for ``variable``.

    Args:
        expression: Expression string (e.g., "2*x - 3")
        variable: Variable to solve for

    Returns:
        TransformResult whose result is the simplified solution

    Example:
        >>> solve_equation("2*x - 3").result
        '1.5'
    """
    try:
        tree = parse_to_symbolic(expression)
        raw = solve_linear(tree, variable)
        solution = raw.simplify()
    except ParseError as e:
        return TransformResult(ok=False, error=e.message, error_code=e.code)
    except TransformError as e:
        logger.debug(f"Solve failed for {expression!r}: {e.message}")
        return TransformResult(ok=False, error=e.message, error_code=e.code)
    except RecursionError:
        logger.warning(f"Recursion limit reached solving {expression[:50]!r}")
        return TransformResult(
            ok=False, error="Expression nested too deeply", error_code="TOO_DEEP"
        )
    return TransformResult(
        ok=True,
        expression=solution,
        result=solution.to_string(),
        unsimplified=raw.to_string(),
    )


def factor_text(expression: str, variable: str = "x") -> FactorResult:
    """Parse ``expression`` and factor it with respect to ``variable``."""
    try:
        factors = factor_expression(parse_to_symbolic(expression), variable)
    except (ParseError, TransformError) as e:
        return FactorResult(ok=False, error=e.message, error_code=e.code)
    except RecursionError:
        logger.warning(f"Recursion limit reached factoring {expression[:50]!r}")
        return FactorResult(
            ok=False, error="Expression nested too deeply", error_code="TOO_DEEP"
        )
    return FactorResult(
        ok=True, factors=factors, results=[factor.to_string() for factor in factors]
    )
