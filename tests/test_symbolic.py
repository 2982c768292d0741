"""Tests for symbolic differentiation, integration, simplification and printing."""

import math
import unittest

import pytest
import sympy as sp

from kalkulus_pkg.converter import parse_to_symbolic
from kalkulus_pkg.operators import BinaryOperator, UnaryOperator
from kalkulus_pkg.symbolic import (
    SymbolicBinaryOp,
    SymbolicFunction,
    SymbolicNumber,
    SymbolicUnaryOp,
    SymbolicVariable,
)
from kalkulus_pkg.types import TransformError

X = SymbolicVariable("x")


def diff(text, variable="x"):
    return parse_to_symbolic(text).differentiate(variable).simplify()


def integral(text, variable="x"):
    return parse_to_symbolic(text).integrate(variable).simplify()


def simplified(text):
    return parse_to_symbolic(text).simplify().to_string()


class TestDifferentiation(unittest.TestCase):
    def test_power_rule(self):
        self.assertEqual(diff("x^2").to_string(), "2x")
        self.assertEqual(diff("x^3").evaluate({"x": 2}), 12.0)

    def test_raw_power_rule_output(self):
        raw = parse_to_symbolic("x^2").differentiate("x")
        self.assertEqual(raw.to_string(), "2(x ^ 1)")

    def test_constants_and_variables(self):
        self.assertEqual(diff("5").to_string(), "0")
        self.assertEqual(diff("x").to_string(), "1")
        self.assertEqual(diff("y").to_string(), "0")
        self.assertEqual(diff("3x").to_string(), "3")

    def test_partial_derivative(self):
        self.assertEqual(diff("x*y").to_string(), "y")
        self.assertEqual(diff("x*y", "y").to_string(), "x")

    def test_sum_and_difference(self):
        self.assertEqual(diff("x^2 - 3x + 1").evaluate({"x": 4}), 5.0)

    def test_quotient_rule(self):
        self.assertEqual(diff("1/x").to_string(), "(-1 / (x ^ 2))")

    def test_trigonometric(self):
        self.assertEqual(diff("sin(x)").to_string(), "cos(x)")
        self.assertEqual(diff("cos(x)").to_string(), "-sin(x)")
        self.assertAlmostEqual(diff("tan(x)").evaluate({"x": 0}), 1.0)

    def test_ln_and_sqrt(self):
        self.assertEqual(diff("ln(x)").to_string(), "(1 / x)")
        self.assertAlmostEqual(diff("sqrt(x)").evaluate({"x": 4}), 0.25)

    def test_chain_rule(self):
        self.assertAlmostEqual(diff("sin(2x)").evaluate({"x": 0}), 2.0)
        self.assertAlmostEqual(diff("(x^2 + 1)^3").evaluate({"x": 1}), 24.0)

    def test_unary_operator_nodes(self):
        tree = SymbolicUnaryOp(UnaryOperator.SIN, X)
        self.assertEqual(tree.differentiate("x").simplify().to_string(), "cos(x)")
        negated = SymbolicUnaryOp(UnaryOperator.NEGATIVE, tree)
        self.assertEqual(negated.differentiate("x").simplify().to_string(), "-cos(x)")

    def test_unsupported_functions(self):
        for text in ("log(x)", "abs(x)", "log(x, 2)"):
            with self.subTest(text=text):
                with self.assertRaises(TransformError) as ctx:
                    parse_to_symbolic(text).differentiate("x")
                self.assertEqual(ctx.exception.code, "NOT_IMPLEMENTED")

    def test_unsupported_unary_operators(self):
        with self.assertRaises(TransformError):
            SymbolicUnaryOp(UnaryOperator.LOG, X).differentiate("x")
        with self.assertRaises(TransformError):
            SymbolicUnaryOp(UnaryOperator.ABS, X).differentiate("x")

    def test_variable_exponent(self):
        with self.assertRaises(TransformError):
            parse_to_symbolic("x^x").differentiate("x")
        with self.assertRaises(TransformError):
            parse_to_symbolic("2^x").differentiate("x")

    def test_input_is_not_modified(self):
        tree = parse_to_symbolic("x^2 + sin(x)")
        before = tree.clone()
        tree.differentiate("x")
        tree.simplify()
        self.assertEqual(tree, before)


class TestIntegration(unittest.TestCase):
    def test_variable(self):
        self.assertEqual(integral("x").to_string(), "((x ^ 2) / 2)")

    def test_reciprocal(self):
        self.assertEqual(integral("1/x").to_string(), "ln(x)")
        self.assertEqual(integral("x^-1").to_string(), "ln(x)")

    def test_constant(self):
        self.assertEqual(integral("5").to_string(), "5x")

    def test_power(self):
        self.assertEqual(integral("x^2").to_string(), "((x ^ 3) / 3)")

    def test_constant_multiple(self):
        self.assertEqual(integral("3x").to_string(), "3((x ^ 2) / 2)")
        self.assertEqual(integral("x*3").evaluate({"x": 2}), 6.0)

    def test_other_variable_is_constant(self):
        self.assertEqual(integral("y").to_string(), "(y * x)")

    def test_sum(self):
        self.assertEqual(integral("x + 1").to_string(), "(((x ^ 2) / 2) + x)")

    def test_negation(self):
        self.assertEqual(integral("-x").to_string(), "-((x ^ 2) / 2)")

    def test_trigonometric_and_log(self):
        self.assertEqual(integral("sin(x)").to_string(), "-cos(x)")
        self.assertEqual(integral("cos(x)").to_string(), "sin(x)")
        self.assertEqual(integral("ln(x)").to_string(), "((x * ln(x)) - x)")

    def test_unsupported_shapes(self):
        for text in ("x*y", "sin(2x)", "x/2", "1/(x+1)", "(x+1)^2", "2^x", "tan(x)", "log(x)"):
            with self.subTest(text=text):
                with self.assertRaises(TransformError) as ctx:
                    parse_to_symbolic(text).integrate("x")
                self.assertEqual(ctx.exception.code, "NOT_IMPLEMENTED")


class TestSimplification(unittest.TestCase):
    def test_additive_identities(self):
        self.assertEqual(simplified("x + 0"), "x")
        self.assertEqual(simplified("0 + x"), "x")
        self.assertEqual(simplified("x - 0"), "x")
        self.assertEqual(simplified("0 - x"), "-x")

    def test_multiplicative_identities(self):
        self.assertEqual(simplified("x * 1"), "x")
        self.assertEqual(simplified("1 * x"), "x")
        self.assertEqual(simplified("x * 0"), "0")
        self.assertEqual(simplified("0 * sin(x)"), "0")
        self.assertEqual(simplified("x / 1"), "x")
        self.assertEqual(simplified("0 / x"), "0")

    def test_power_identities(self):
        self.assertEqual(simplified("x ^ 0"), "1")
        self.assertEqual(simplified("x ^ 1"), "x")
        self.assertEqual(simplified("0 ^ x"), "0")
        self.assertEqual(simplified("1 ^ x"), "1")

    def test_unary_identities(self):
        self.assertEqual(simplified("+x"), "x")
        self.assertEqual(simplified("--x"), "x")
        self.assertEqual(simplified("-0"), "0")
        self.assertEqual(simplified("0 - -x"), "x")

    def test_constant_folding(self):
        self.assertEqual(simplified("2 + 3 * 4"), "14")
        self.assertEqual(simplified("sin(0)"), "0")
        self.assertEqual(simplified("-(2 + 3)"), "-5")
        self.assertEqual(simplified("x + 2 * 3"), "(x + 6)")

    def test_division_by_zero(self):
        for text in ("x / 0", "x / (1 - 1)"):
            with self.subTest(text=text):
                with self.assertRaises(TransformError) as ctx:
                    parse_to_symbolic(text).simplify()
                self.assertEqual(ctx.exception.code, "DIVISION_BY_ZERO")

    def test_folding_domain_error(self):
        with self.assertRaises(TransformError) as ctx:
            parse_to_symbolic("sqrt(-1) + x").simplify()
        self.assertEqual(ctx.exception.code, "DOMAIN_ERROR")

    def test_folding_arity_error(self):
        with self.assertRaises(TransformError) as ctx:
            parse_to_symbolic("log(2, 3)").simplify()
        self.assertEqual(ctx.exception.code, "ARITY_ERROR")

    def test_is_zero_is_literal_only(self):
        self.assertTrue(SymbolicNumber(0.0).is_zero())
        self.assertFalse(SymbolicUnaryOp(UnaryOperator.SIN, SymbolicNumber(0.0)).is_zero())
        self.assertFalse(SymbolicUnaryOp(UnaryOperator.COS, SymbolicNumber(0.0)).is_one())
        self.assertTrue(SymbolicNumber(1.0).is_one())


SIMPLIFY_CASES = [
    "x + 0",
    "0 - x",
    "0 - (0 - x)",
    "2x^2 + 3x - 1",
    "(x + 0) * (1 * y)",
    "sin(x)^1 + cos(0 * x)",
    "-(-(-x))",
    "x / 1 / 1",
    "0 - sin(x)",
    "2 * 3 * x",
    "(x * 1 + 0)^2 - 0",
]


class TestSimplificationProperties:
    @pytest.mark.parametrize("text", SIMPLIFY_CASES)
    def test_idempotent(self, text):
        once = parse_to_symbolic(text).simplify()
        assert once.simplify() == once

    @pytest.mark.parametrize("text", ["x^3", "sin(x) * x", "x / (x + 1)", "sqrt(x) - ln(x)"])
    def test_idempotent_on_derivatives(self, text):
        once = parse_to_symbolic(text).differentiate("x").simplify()
        assert once.simplify() == once

    @pytest.mark.parametrize("text", SIMPLIFY_CASES)
    def test_never_introduces_variables(self, text):
        tree = parse_to_symbolic(text)
        before = tree.to_sympy().free_symbols
        assert tree.simplify().to_sympy().free_symbols <= before

    @pytest.mark.parametrize("text", SIMPLIFY_CASES)
    def test_preserves_value(self, text):
        tree = parse_to_symbolic(text)
        bindings = {"x": 0.7, "y": -1.3}
        assert tree.simplify().evaluate(bindings) == pytest.approx(tree.evaluate(bindings))


class TestMultiplicationPrinting(unittest.TestCase):
    def mul(self, left, right):
        return SymbolicBinaryOp(BinaryOperator.MULTIPLY, left, right).to_string()

    def test_coefficients(self):
        self.assertEqual(self.mul(SymbolicNumber(2.0), X), "2x")
        self.assertEqual(self.mul(X, SymbolicNumber(2.0)), "2x")
        self.assertEqual(self.mul(SymbolicNumber(1.0), X), "x")
        self.assertEqual(self.mul(SymbolicNumber(-1.0), X), "-x")
        self.assertEqual(self.mul(SymbolicNumber(0.5), X), "0.5x")

    def test_sign_terms_are_grouped(self):
        negated = SymbolicUnaryOp(UnaryOperator.NEGATIVE, SymbolicFunction("sin", (X,)))
        self.assertEqual(self.mul(SymbolicNumber(2.0), negated), "2(-sin(x))")
        self.assertEqual(self.mul(negated, SymbolicNumber(3.0)), "3(-sin(x))")
        self.assertEqual(self.mul(SymbolicNumber(-1.0), negated), "-(-sin(x))")
        self.assertEqual(self.mul(SymbolicNumber(1.0), negated), "-sin(x)")

    def test_derivative_with_coefficient(self):
        self.assertEqual(diff("2cos(x)").to_string(), "2(-sin(x))")

    def test_number_product(self):
        self.assertEqual(self.mul(SymbolicNumber(2.0), SymbolicNumber(3.0)), "6")

    def test_grouping(self):
        sum_ = SymbolicBinaryOp(BinaryOperator.ADD, X, SymbolicNumber(1.0))
        self.assertEqual(self.mul(SymbolicNumber(2.0), sum_), "2(x + 1)")
        self.assertEqual(
            self.mul(SymbolicNumber(3.0), SymbolicFunction("sin", (X,))), "3sin(x)"
        )
        self.assertEqual(
            self.mul(SymbolicNumber(3.0), SymbolicUnaryOp(UnaryOperator.COS, X)), "3cos(x)"
        )

    def test_general_product(self):
        self.assertEqual(self.mul(X, SymbolicVariable("y")), "(x * y)")
        self.assertEqual(
            self.mul(SymbolicNumber(2.0), SymbolicUnaryOp(UnaryOperator.SIN, SymbolicNumber(1.0))),
            "(2 * sin(1))",
        )

    def test_other_operators(self):
        tree = SymbolicBinaryOp(BinaryOperator.POWER, X, SymbolicNumber(2.0))
        self.assertEqual(tree.to_string(), "(x ^ 2)")
        self.assertEqual(str(tree), "(x ^ 2)")


class TestValueSemantics(unittest.TestCase):
    def test_clone(self):
        tree = parse_to_symbolic("2x + sin(y)")
        copy = tree.clone()
        self.assertEqual(copy, tree)
        self.assertIsNot(copy.left, tree.left)

    def test_is_constant(self):
        self.assertTrue(parse_to_symbolic("sin(2) + 3").is_constant())
        self.assertFalse(parse_to_symbolic("2x").is_constant())
        self.assertFalse(parse_to_symbolic("log(2, y)").is_constant())

    def test_evaluate(self):
        self.assertEqual(parse_to_symbolic("x^2 + y").evaluate({"x": 2, "y": 1}), 5.0)
        self.assertAlmostEqual(parse_to_symbolic("sin(x)").evaluate({"x": math.pi / 2}), 1.0)


class TestToSympy(unittest.TestCase):
    def test_polynomial(self):
        x = sp.Symbol("x")
        self.assertEqual(parse_to_symbolic("2x^2 + sin(x)").to_sympy(), 2 * x**2 + sp.sin(x))

    def test_log_is_base_ten(self):
        x = sp.Symbol("x")
        self.assertEqual(parse_to_symbolic("log(x)").to_sympy(), sp.log(x, 10))

    def test_non_integral_number(self):
        self.assertEqual(SymbolicNumber(0.5).to_sympy(), sp.Float(0.5))

    def test_multi_argument_call_has_no_equivalent(self):
        with self.assertRaises(TransformError) as ctx:
            parse_to_symbolic("log(x, 2)").to_sympy()
        self.assertEqual(ctx.exception.code, "CONVERSION_ERROR")


if __name__ == "__main__":
    unittest.main()
