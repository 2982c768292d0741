"""Type definitions: error taxonomy and result dataclasses for the public API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ParseResult:
    """Result of parsing an expression string into an AST."""

    ok: bool
    tree: Any = None  # ASTNode on success
    error: str | None = None
    error_code: str | None = None
    position: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.tree is not None:
            result_dict["tree"] = self.tree.to_string()
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        if self.position is not None:
            result_dict["position"] = self.position
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return (
                f"ParseResult(ok=False, error={self.error!r}, "
                f"position={self.position!r})"
            )
        return f"ParseResult(ok=True, tree={self.tree.to_string()!r})"


@dataclass
class EvalResult:
    """Result of numerically evaluating a tree."""

    ok: bool
    value: float | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.value is not None:
            result_dict["value"] = self.value
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"EvalResult(ok=False, error={self.error!r})"
        return f"EvalResult(ok=True, value={self.value!r})"


@dataclass
class TransformResult:
    """Result of a symbolic transformation (differentiate, integrate, simplify, solve)."""

    ok: bool
    expression: Any = None  # SymbolicExpression on success
    result: str | None = None  # display form of the (simplified) expression
    unsimplified: str | None = None  # display form before simplification, if any
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.unsimplified is not None:
            result_dict["unsimplified"] = self.unsimplified
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"TransformResult(ok=False, error={self.error!r})"
        parts = [f"ok={self.ok}", f"result={self.result!r}"]
        if self.unsimplified is not None:
            parts.append(f"unsimplified={self.unsimplified!r}")
        return f"TransformResult({', '.join(parts)})"


@dataclass
class FactorResult:
    """Result of factoring an expression."""

    ok: bool
    factors: list[Any] | None = None  # SymbolicExpression factors
    results: list[str] | None = None  # display form of each factor
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.results is not None:
            result_dict["factors"] = self.results
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"FactorResult(ok=False, error={self.error!r})"
        return f"FactorResult(ok=True, factors={self.results!r})"


class ParseError(Exception):
    """Raised when the parser rejects its input."""

    def __init__(
        self, message: str, code: str = "PARSE_ERROR", position: int | None = None
    ):
        self.message = message
        self.code = code
        self.position = position
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EvaluationError(Exception):
    """Raised when numeric evaluation of a tree fails."""

    def __init__(self, message: str, code: str = "EVALUATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class TransformError(Exception):
    """Raised when a symbolic transformation cannot be carried out."""

    def __init__(self, message: str, code: str = "NOT_IMPLEMENTED"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message
