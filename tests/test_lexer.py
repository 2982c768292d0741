"""Unit tests for the tokenizer."""

import unittest

from kalkulus_pkg.lexer import Lexer, Token, TokenType, tokenize


def _types(text):
    return [token.type for token in tokenize(text)]


class TestTokenKinds(unittest.TestCase):
    def test_mixed_expression(self):
        self.assertEqual(
            _types("2x + sin(y)"),
            [
                TokenType.NUMBER,
                TokenType.VARIABLE,
                TokenType.PLUS,
                TokenType.FUNCTION,
                TokenType.LPAREN,
                TokenType.VARIABLE,
                TokenType.RPAREN,
                TokenType.END,
            ],
        )

    def test_single_character_operators(self):
        self.assertEqual(
            _types("+-*/^(),"),
            [
                TokenType.PLUS,
                TokenType.MINUS,
                TokenType.STAR,
                TokenType.SLASH,
                TokenType.CARET,
                TokenType.LPAREN,
                TokenType.RPAREN,
                TokenType.COMMA,
                TokenType.END,
            ],
        )

    def test_function_names_are_registry_members_only(self):
        tokens = tokenize("sin sinx ln lnx abs")
        self.assertEqual(
            [(t.type, t.text) for t in tokens[:-1]],
            [
                (TokenType.FUNCTION, "sin"),
                (TokenType.VARIABLE, "sinx"),
                (TokenType.FUNCTION, "ln"),
                (TokenType.VARIABLE, "lnx"),
                (TokenType.FUNCTION, "abs"),
            ],
        )

    def test_custom_function_registry(self):
        tokens = tokenize("f(x) sin", function_names=frozenset({"f"}))
        self.assertEqual(tokens[0].type, TokenType.FUNCTION)
        self.assertEqual(tokens[4].type, TokenType.VARIABLE)

    def test_identifier_with_digits_and_underscore(self):
        tokens = tokenize("_a1 b_2")
        self.assertEqual([t.text for t in tokens[:-1]], ["_a1", "b_2"])

    def test_unknown_character_becomes_invalid_token(self):
        tokens = tokenize("2 # 3")
        self.assertEqual(tokens[1], Token(TokenType.INVALID, "#", 2))

    def test_non_ascii_letters_are_invalid(self):
        self.assertEqual(tokenize("é")[0].type, TokenType.INVALID)


class TestNumbers(unittest.TestCase):
    def test_decimal_with_exponent(self):
        tokens = tokenize("3.14e-2")
        self.assertEqual(tokens[0], Token(TokenType.NUMBER, "3.14e-2", 0))
        self.assertEqual(tokens[1].type, TokenType.END)

    def test_leading_decimal_point(self):
        self.assertEqual(tokenize(".5")[0].text, ".5")

    def test_second_decimal_point_starts_new_number(self):
        tokens = tokenize("1.2.3")
        self.assertEqual([t.text for t in tokens[:-1]], ["1.2", ".3"])

    def test_exponent_marker_consumed_without_digits(self):
        tokens = tokenize("2e+x")
        self.assertEqual(tokens[0].text, "2e+")
        self.assertEqual(tokens[1].type, TokenType.VARIABLE)

    def test_upper_case_exponent(self):
        self.assertEqual(tokenize("1E5")[0].text, "1E5")


class TestPositionsAndState(unittest.TestCase):
    def test_positions_are_source_offsets(self):
        tokens = tokenize("a +\tb")
        self.assertEqual([t.position for t in tokens], [0, 2, 4, 5])

    def test_end_is_repeated(self):
        lexer = Lexer("x")
        lexer.next_token()
        self.assertEqual(lexer.next_token().type, TokenType.END)
        self.assertEqual(lexer.next_token().type, TokenType.END)

    def test_reset_rewinds(self):
        lexer = Lexer("x + 1")
        first = lexer.next_token()
        lexer.next_token()
        lexer.reset()
        self.assertEqual(lexer.next_token(), first)

    def test_empty_and_whitespace_input(self):
        self.assertEqual(_types(""), [TokenType.END])
        self.assertEqual(tokenize("  \n ")[0], Token(TokenType.END, "", 4))

    def test_describe(self):
        self.assertEqual(Token(TokenType.END, "", 3).describe(), "end of input")
        self.assertEqual(Token(TokenType.RPAREN, ")", 0).describe(), "')'")


if __name__ == "__main__":
    unittest.main()
