"""Public API for Kalkulus - returns structured objects without side effects.

Every function here converts the package's exceptions into result objects;
nothing raised by the parser, evaluator or symbolic rules escapes.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from . import converter
from .ast_nodes import ASTNode
from .config import DEFAULT_VARIABLE
from .logging_config import get_logger
from .parser import parse_expression
from .solver import factor_expression, solve_linear
from .symbolic import SymbolicExpression
from .types import (
    EvalResult,
    EvaluationError,
    FactorResult,
    ParseError,
    ParseResult,
    TransformError,
    TransformResult,
)

logger = get_logger("api")

_TOO_DEEP = "Expression nested too deeply"


def parse(text: str) -> ParseResult:
    """Parse an expression string into an AST.

    Args:
        text: Expression string (e.g., "2x^2 + 1")

    Returns:
        ParseResult with the tree, or the error message, code and position

    Example:
        >>> from kalkulus_pkg.api import parse
        >>> parse("2 + 3 * 4").tree.to_string()
        '(2 + (3 * 4))'
        >>> parse("2 +").error_code
        'UNEXPECTED_END'
    """
    try:
        tree = parse_expression(text)
    except ParseError as e:
        logger.debug(f"Parse failed for {text!r}: {e.message}")
        return ParseResult(ok=False, error=e.message, error_code=e.code, position=e.position)
    except RecursionError:
        logger.warning(f"Recursion limit reached parsing {text[:50]!r}")
        return ParseResult(ok=False, error=_TOO_DEEP, error_code="TOO_DEEP")
    return ParseResult(ok=True, tree=tree)


def to_string(tree: ASTNode | SymbolicExpression) -> str:
    """Render either kind of tree in its canonical text form."""
    return tree.to_string()


def clone_tree(tree: ASTNode | SymbolicExpression) -> ASTNode | SymbolicExpression:
    return tree.clone()


def evaluate(
    tree: ASTNode | SymbolicExpression, variables: Mapping[str, float] | None = None
) -> EvalResult:
    """Evaluate a tree numerically with the given variable bindings.

    Example:
        >>> from kalkulus_pkg.api import evaluate, parse
        >>> evaluate(parse("2x").tree, {"x": 5}).value
        10.0
    """
    try:
        value = tree.evaluate(variables)
    except EvaluationError as e:
        return EvalResult(ok=False, error=e.message, error_code=e.code)
    except RecursionError:
        return EvalResult(ok=False, error=_TOO_DEEP, error_code="TOO_DEEP")
    return EvalResult(ok=True, value=value)


def evaluate_expression(
    text: str, variables: Mapping[str, float] | None = None
) -> EvalResult:
    """Parse and evaluate in one step; parse failures are reported like evaluation ones."""
    parsed = parse(text)
    if not parsed.ok:
        return EvalResult(ok=False, error=parsed.error, error_code=parsed.error_code)
    return evaluate(parsed.tree, variables)


def convert_to_symbolic(tree: ASTNode | None) -> TransformResult:
    """Convert a parsed AST to a symbolic tree."""
    return _transform(lambda: converter.convert_to_symbolic(tree), simplify_result=False)


def differentiate(
    expression: ASTNode | SymbolicExpression, variable: str = DEFAULT_VARIABLE
) -> TransformResult:
    """Differentiate with respect to ``variable``.

    The result carries the simplified derivative; ``unsimplified`` keeps the
    raw output of the differentiation rules.

    Example:
        >>> from kalkulus_pkg.api import differentiate, parse
        >>> differentiate(parse("x^2").tree, "x").result
        '2x'
    """
    return _transform(lambda: _as_symbolic(expression).differentiate(variable))


def integrate(
    expression: ASTNode | SymbolicExpression, variable: str = DEFAULT_VARIABLE
) -> TransformResult:
    """Integrate with respect to ``variable`` (no constant of integration).

    Example:
        >>> from kalkulus_pkg.api import integrate, parse
        >>> integrate(parse("x").tree, "x").result
        '((x ^ 2) / 2)'
    """
    return _transform(lambda: _as_symbolic(expression).integrate(variable))


def simplify(expression: ASTNode | SymbolicExpression) -> TransformResult:
    return _transform(lambda: _as_symbolic(expression).simplify(), simplify_result=False)


def solve(
    expression: ASTNode | SymbolicExpression, variable: str = DEFAULT_VARIABLE
) -> TransformResult:
    """Solve ``expression = 0`` for ``variable``.

    Example:
        >>> from kalkulus_pkg.api import parse, solve
        >>> solve(parse("2*x - 3").tree, "x").expression.evaluate()
        1.5
    """
    return _transform(lambda: solve_linear(_as_symbolic(expression), variable))


def factor(
    expression: ASTNode | SymbolicExpression, variable: str = "x"
) -> FactorResult:
    """Factor an expression.

    Example:
        >>> from kalkulus_pkg.api import factor, parse
        >>> factor(parse("x^2 + x").tree).results
        ['x', '(x + 1)']
    """
    try:
        factors = factor_expression(_as_symbolic(expression), variable)
    except TransformError as e:
        return FactorResult(ok=False, error=e.message, error_code=e.code)
    except RecursionError:
        return FactorResult(ok=False, error=_TOO_DEEP, error_code="TOO_DEEP")
    return FactorResult(
        ok=True, factors=factors, results=[item.to_string() for item in factors]
    )


def _as_symbolic(expression: Any) -> SymbolicExpression:
    if isinstance(expression, SymbolicExpression):
        return expression
    return converter.convert_to_symbolic(expression)


def _transform(
    operation: Callable[[], SymbolicExpression], simplify_result: bool = True
) -> TransformResult:
    """Run a symbolic operation, converting failures into a TransformResult."""
    try:
        raw = operation()
        final = raw.simplify() if simplify_result else raw
    except TransformError as e:
        logger.debug(f"Transformation failed: {e.message}")
        return TransformResult(ok=False, error=e.message, error_code=e.code)
    except RecursionError:
        logger.warning("Recursion limit reached during transformation")
        return TransformResult(ok=False, error=_TOO_DEEP, error_code="TOO_DEEP")
    return TransformResult(
        ok=True,
        expression=final,
        result=final.to_string(),
        unsimplified=raw.to_string() if simplify_result else None,
    )
