"""Centralized configuration for Kalkulus.

This module defines:
- The fixed registry of recognized function names
- Input validation limits (length, nesting depth)
- Output precision for numeric display
- The SymPy counterpart of every registered function
- Regex patterns used by the lexer/parser

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with KALKULUS_)
"""

import importlib.metadata
import os
import re

import sympy as sp

# Version is defined in pyproject.toml [project] section
try:
    VERSION = importlib.metadata.version("kalkulus")
except importlib.metadata.PackageNotFoundError:
    # Running from a source checkout
    VERSION = "1.0.0"

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("KALKULUS_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_EXPRESSION_DEPTH = int(
    os.getenv("KALKULUS_MAX_EXPRESSION_DEPTH", "100")
)  # nesting levels accepted by the parser

# Display configuration
OUTPUT_PRECISION = int(os.getenv("KALKULUS_OUTPUT_PRECISION", "6"))
DEFAULT_VARIABLE = os.getenv("KALKULUS_DEFAULT_VARIABLE", "x")

# Identifiers the lexer classifies as function names. Immutable for the
# lifetime of the process; pass a different set to Lexer/Parser if needed.
FUNCTION_NAMES = frozenset({"sin", "cos", "tan", "log", "ln", "sqrt", "abs"})

SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "log": lambda arg: sp.log(arg, 10),  # log is base 10 here
    "ln": sp.log,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Longest prefix of a lexed number literal that float() accepts
NUMBER_PREFIX_RE = re.compile(r"(?P<mantissa>\d*\.?\d*)(?:[eE][+-]?\d+)?")
