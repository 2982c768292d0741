"""Stateful facade: parse once, then run symbolic operations on the result."""

from __future__ import annotations

from .ast_nodes import ASTNode
from .config import DEFAULT_VARIABLE
from .converter import convert_to_symbolic
from .logging_config import get_logger
from .parser import parse_expression
from .solver import factor_expression, solve_linear
from .symbolic import SymbolicExpression, Variables
from .types import ParseError, TransformError

logger = get_logger("engine")


class SymbolicEngine:
    """Holds one symbolic expression and applies transformations to it.

    ``parse_from_string`` and ``parse_from_ast`` report failure through their
    boolean return value and ``last_error``; the operations raise
    ``TransformError`` (code ``NO_EXPRESSION`` when nothing is loaded).
    """

    def __init__(self) -> None:
        self._expression: SymbolicExpression | None = None
        self.last_error: str | None = None

    @property
    def has_expression(self) -> bool:
        return self._expression is not None

    @property
    def expression(self) -> SymbolicExpression:
        if self._expression is None:
            raise TransformError("No expression loaded", "NO_EXPRESSION")
        return self._expression

    def parse_from_string(self, text: str) -> bool:
        try:
            tree = parse_expression(text)
        except ParseError as e:
            self.last_error = f"Parse error: {e.message}"
            logger.debug(self.last_error)
            return False
        except RecursionError:
            self.last_error = "Parse error: Expression nested too deeply"
            logger.warning(self.last_error)
            return False
        return self.parse_from_ast(tree)

    def parse_from_ast(self, tree: ASTNode) -> bool:
        try:
            self._expression = convert_to_symbolic(tree)
        except TransformError as e:
            self.last_error = f"Conversion error: {e.message}"
            logger.debug(self.last_error)
            return False
        except RecursionError:
            self.last_error = "Conversion error: Expression nested too deeply"
            logger.warning(self.last_error)
            return False
        self.last_error = None
        return True

    def differentiate(self, variable: str = DEFAULT_VARIABLE) -> SymbolicExpression:
        return self.expression.differentiate(variable)

    def integrate(self, variable: str = DEFAULT_VARIABLE) -> SymbolicExpression:
        return self.expression.integrate(variable)

    def simplify(self) -> SymbolicExpression:
        return self.expression.simplify()

    def evaluate(self, variables: Variables = None) -> float:
        return self.expression.evaluate(variables)

    def solve(self, variable: str = DEFAULT_VARIABLE) -> SymbolicExpression:
        return solve_linear(self.expression, variable)

    def factor(self, variable: str = DEFAULT_VARIABLE) -> list[SymbolicExpression]:
        return factor_expression(self.expression, variable)

    def to_string(self) -> str:
        return self.expression.to_string()
