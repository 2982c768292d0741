"""Kalkulus package: expression parser, symbolic calculus engine, API and CLI."""

__all__ = [
    "config",
    "types",
    "logging_config",
    "operators",
    "lexer",
    "ast_nodes",
    "parser",
    "symbolic",
    "converter",
    "solver",
    "engine",
    "calculus",
    "api",
    "cli",
]

# Public API exports

__api_exports__ = [
    "parse",
    "to_string",
    "evaluate",
    "evaluate_expression",
    "clone_tree",
    "convert_to_symbolic",
    "differentiate",
    "integrate",
    "simplify",
    "solve",
    "factor",
]
