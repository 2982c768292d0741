"""Dedicated calculus operations module: expression strings in, results out."""

from __future__ import annotations

from . import config
from .converter import parse_to_symbolic
from .logging_config import get_logger
from .types import ParseError, TransformError, TransformResult

logger = get_logger("calculus")


def differentiate(expression: str, variable: str | None = None) -> TransformResult:
    """Differentiate an expression with respect to a variable.

    Args:
        expression: Expression string (e.g., "x^3")
        variable: Variable to differentiate with respect to (default: DEFAULT_VARIABLE)

    Returns:
        TransformResult with the simplified derivative as result
    """
    variable = variable or config.DEFAULT_VARIABLE
    try:
        tree = parse_to_symbolic(expression)
        raw = tree.differentiate(variable)
        derivative = raw.simplify()
    except ParseError as e:
        return TransformResult(ok=False, error=f"Parse error: {e.message}", error_code=e.code)
    except TransformError as e:
        return TransformResult(
            ok=False, error=f"Differentiation failed: {e.message}", error_code=e.code
        )
    except RecursionError:
        logger.warning(f"Recursion limit reached differentiating {expression[:50]!r}")
        return TransformResult(
            ok=False, error="Expression nested too deeply", error_code="TOO_DEEP"
        )
    logger.debug(f"d/d{variable} {expression} = {derivative.to_string()}")
    return TransformResult(
        ok=True,
        expression=derivative,
        result=derivative.to_string(),
        unsimplified=raw.to_string(),
    )


def integrate(expression: str, variable: str | None = None) -> TransformResult:
    """Integrate an expression with respect to a variable.

    Args:
        expression: Expression string (e.g., "sin(x)")
        variable: Variable to integrate with respect to (default: DEFAULT_VARIABLE)

    Returns:
        TransformResult with the simplified antiderivative as result
    """
    variable = variable or config.DEFAULT_VARIABLE
    try:
        tree = parse_to_symbolic(expression)
        raw = tree.integrate(variable)
        integral = raw.simplify()
    except ParseError as e:
        return TransformResult(ok=False, error=f"Parse error: {e.message}", error_code=e.code)
    except TransformError as e:
        return TransformResult(
            ok=False, error=f"Integration failed: {e.message}", error_code=e.code
        )
    except RecursionError:
        logger.warning(f"Recursion limit reached integrating {expression[:50]!r}")
        return TransformResult(
            ok=False, error="Expression nested too deeply", error_code="TOO_DEEP"
        )
    logger.debug(f"integral of {expression} d{variable} = {integral.to_string()}")
    return TransformResult(
        ok=True,
        expression=integral,
        result=integral.to_string(),
        unsimplified=raw.to_string(),
    )


def simplify_expression(expression: str) -> TransformResult:
    try:
        simplified = parse_to_symbolic(expression).simplify()
    except ParseError as e:
        return TransformResult(ok=False, error=f"Parse error: {e.message}", error_code=e.code)
    except TransformError as e:
        return TransformResult(
            ok=False, error=f"Simplification failed: {e.message}", error_code=e.code
        )
    except RecursionError:
        return TransformResult(
            ok=False, error="Expression nested too deeply", error_code="TOO_DEEP"
        )
    return TransformResult(ok=True, expression=simplified, result=simplified.to_string())
