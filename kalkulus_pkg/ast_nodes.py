"""Numeric expression tree (AST) produced by the parser.

Nodes are frozen dataclasses: once built they are never mutated, ``==``
compares structure, and ``clone()`` returns an independent deep copy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

from .operators import (
    BinaryOperator,
    UnaryOperator,
    apply_binary,
    apply_function,
    apply_unary,
    format_literal,
)
from .types import EvaluationError

Variables = Optional[Mapping[str, float]]


class ASTNode(ABC):
    """Base class of every numeric expression node."""

    @abstractmethod
    def to_string(self) -> str:
        pass

    @abstractmethod
    def evaluate(self, variables: Variables = None) -> float:
        pass

    @abstractmethod
    def clone(self) -> ASTNode:
        pass

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class NumberNode(ASTNode):
    value: float

    def to_string(self) -> str:
        return format_literal(self.value)

    def evaluate(self, variables: Variables = None) -> float:
        return self.value

    def clone(self) -> NumberNode:
        return NumberNode(self.value)


@dataclass(frozen=True)
class VariableNode(ASTNode):
    name: str

    def to_string(self) -> str:
        return self.name

    def evaluate(self, variables: Variables = None) -> float:
        if not variables or self.name not in variables:
            raise EvaluationError(
                f"Undefined variable: {self.name}", "UNDEFINED_VARIABLE"
            )
        return float(variables[self.name])

    def clone(self) -> VariableNode:
        return VariableNode(self.name)


@dataclass(frozen=True)
class BinaryOpNode(ASTNode):
    op: BinaryOperator
    left: ASTNode
    right: ASTNode

    def to_string(self) -> str:
        return f"({self.left.to_string()} {self.op.value} {self.right.to_string()})"

    def evaluate(self, variables: Variables = None) -> float:
        left_val = self.left.evaluate(variables)
        right_val = self.right.evaluate(variables)
        return apply_binary(self.op, left_val, right_val)

    def clone(self) -> BinaryOpNode:
        return BinaryOpNode(self.op, self.left.clone(), self.right.clone())


@dataclass(frozen=True)
class UnaryOpNode(ASTNode):
    op: UnaryOperator
    operand: ASTNode

    def to_string(self) -> str:
        if self.op.is_sign:
            return f"{self.op.value}{self.operand.to_string()}"
        return f"{self.op.value}({self.operand.to_string()})"

    def evaluate(self, variables: Variables = None) -> float:
        return apply_unary(self.op, self.operand.evaluate(variables))

    def clone(self) -> UnaryOpNode:
        return UnaryOpNode(self.op, self.operand.clone())


@dataclass(frozen=True)
class FunctionNode(ASTNode):
    name: str
    arguments: tuple[ASTNode, ...]

    def to_string(self) -> str:
        args = ", ".join(arg.to_string() for arg in self.arguments)
        return f"{self.name}({args})"

    def evaluate(self, variables: Variables = None) -> float:
        if len(self.arguments) != 1:
            raise EvaluationError(
                f"Function {self.name} expects 1 argument", "ARITY_ERROR"
            )
        return apply_function(self.name, [self.arguments[0].evaluate(variables)])

    def clone(self) -> FunctionNode:
        return FunctionNode(self.name, tuple(arg.clone() for arg in self.arguments))
