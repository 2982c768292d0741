"""Conversion from the parser's numeric AST to the symbolic tree."""

from __future__ import annotations

from functools import singledispatch

from .ast_nodes import (
    ASTNode,
    BinaryOpNode,
    FunctionNode,
    NumberNode,
    UnaryOpNode,
    VariableNode,
)
from .parser import parse_expression
from .symbolic import (
    SymbolicBinaryOp,
    SymbolicExpression,
    SymbolicFunction,
    SymbolicNumber,
    SymbolicUnaryOp,
    SymbolicVariable,
)
from .types import TransformError


@singledispatch
def convert_to_symbolic(node) -> SymbolicExpression:
    """Translate a numeric tree node by node into an equivalent symbolic tree."""
    if node is None:
        raise TransformError("Cannot convert an empty tree", "CONVERSION_ERROR")
    raise TransformError(
        f"Cannot convert a {type(node).__name__} to a symbolic expression",
        "CONVERSION_ERROR",
    )


@convert_to_symbolic.register(NumberNode)
def _(node: NumberNode) -> SymbolicExpression:
    return SymbolicNumber(node.value)


@convert_to_symbolic.register(VariableNode)
def _(node: VariableNode) -> SymbolicExpression:
    return SymbolicVariable(node.name)


@convert_to_symbolic.register(BinaryOpNode)
def _(node: BinaryOpNode) -> SymbolicExpression:
    return SymbolicBinaryOp(
        node.op, convert_to_symbolic(node.left), convert_to_symbolic(node.right)
    )


@convert_to_symbolic.register(UnaryOpNode)
def _(node: UnaryOpNode) -> SymbolicExpression:
    return SymbolicUnaryOp(node.op, convert_to_symbolic(node.operand))


@convert_to_symbolic.register(FunctionNode)
def _(node: FunctionNode) -> SymbolicExpression:
    return SymbolicFunction(
        node.name, tuple(convert_to_symbolic(arg) for arg in node.arguments)
    )


def parse_to_symbolic(expression: str) -> SymbolicExpression:
    """Parse an expression string straight into a symbolic tree.

    Raises:
        ParseError: If the text does not parse
    """
    tree: ASTNode = parse_expression(expression)
    return convert_to_symbolic(tree)
