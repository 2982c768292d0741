"""Command line interface: one-shot ``-e`` mode and an interactive REPL."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from typing import Any, Callable

from . import api, calculus, config, solver
from .config import FUNCTION_NAMES, VAR_NAME_RE, VERSION
from .logging_config import get_logger, setup_logging
from .parser import format_number
from .types import FactorResult, TransformError, TransformResult

logger = get_logger("cli")

EXIT_COMMANDS = frozenset({"quit", "exit"})

_USAGE = {
    "parse": "parse <expression>",
    "eval": "eval <expression>",
    "diff": "diff <expression> [wrt <variable>]",
    "integrate": "integrate <expression> [wrt <variable>]",
    "simplify": "simplify <expression>",
    "solve": "solve <expression> [wrt <variable>]",
    "factor": "factor <expression> [wrt <variable>]",
    "all": "all <expression> [wrt <variable>]",
    "let": "let <name> = <expression>",
}


@dataclass
class Session:
    """Mutable REPL state: the default variable and the current bindings."""

    variable: str = field(default_factory=lambda: config.DEFAULT_VARIABLE)
    variables: dict[str, float] = field(default_factory=dict)


def _error(message: str, code: str | None = None) -> dict[str, Any]:
    res: dict[str, Any] = {"ok": False, "error": message}
    if code:
        res["error_code"] = code
    return res


def _canonical_form(result: TransformResult) -> str | None:
    """SymPy's rendering of a transformation result, used as a cross-check."""
    if not result.ok or result.expression is None:
        return None
    try:
        return str(result.expression.to_sympy())
    except (TransformError, TypeError, ValueError):
        logger.debug("No canonical form available", exc_info=True)
        return None


def _transform_dict(operation: str, result: TransformResult) -> dict[str, Any]:
    res = result.to_dict()
    res["type"] = "transform"
    res["operation"] = operation
    canonical = _canonical_form(result)
    if canonical is not None:
        res["canonical"] = canonical
    return res


def _factor_dict(result: FactorResult) -> dict[str, Any]:
    res = result.to_dict()
    res["type"] = "factor"
    return res


def _split_variable(argument: str, session: Session) -> tuple[str, str]:
    """Split ``<expression> wrt <variable>``; the session variable is the default."""
    expression, sep, variable = argument.rpartition(" wrt ")
    if not sep:
        return argument, session.variable
    variable = variable.strip()
    if not VAR_NAME_RE.match(variable) or variable in FUNCTION_NAMES:
        raise ValueError(f"Invalid variable name: {variable!r}")
    return expression.strip(), variable


def _evaluate(expression: str, session: Session) -> dict[str, Any]:
    result = api.evaluate_expression(expression, session.variables)
    res = result.to_dict()
    res["type"] = "value"
    if result.ok:
        res["result"] = format_number(result.value)
    return res


def _parse(expression: str, session: Session) -> dict[str, Any]:
    res = api.parse(expression).to_dict()
    res["type"] = "parse"
    return res


def _run_all(expression: str, variable: str, session: Session) -> dict[str, Any]:
    parsed = _parse(expression, session)
    if not parsed["ok"]:
        return parsed
    sections = {
        "Parsed": parsed,
        "Value": _evaluate(expression, session),
        "Derivative": _transform_dict("diff", calculus.differentiate(expression, variable)),
        "Integral": _transform_dict("integrate", calculus.integrate(expression, variable)),
        "Simplified": _transform_dict("simplify", calculus.simplify_expression(expression)),
        "Solution": _transform_dict("solve", solver.solve_equation(expression, variable)),
        "Factors": _factor_dict(solver.factor_text(expression, variable)),
    }
    return {"ok": True, "type": "all", "variable": variable, "sections": sections}


def _assign(argument: str, session: Session) -> dict[str, Any]:
    name, sep, expression = argument.partition("=")
    name = name.strip()
    if not sep or not expression.strip():
        return _error(f"Usage: {_USAGE['let']}")
    if not VAR_NAME_RE.match(name) or name in FUNCTION_NAMES:
        return _error(f"Invalid variable name: {name!r}", "INVALID_NAME")
    res = _evaluate(expression.strip(), session)
    if not res["ok"]:
        return res
    session.variables[name] = res["value"]
    logger.debug(f"Bound {name} = {res['value']!r}")
    return {
        "ok": True,
        "type": "assignment",
        "name": name,
        "value": res["value"],
        "result": f"{name} = {res['result']}",
    }


# Commands taking an expression and a target variable
_VARIABLE_COMMANDS: dict[str, Callable[[str, str], dict[str, Any]]] = {
    "diff": lambda e, v: _transform_dict("diff", calculus.differentiate(e, v)),
    "integrate": lambda e, v: _transform_dict("integrate", calculus.integrate(e, v)),
    "solve": lambda e, v: _transform_dict("solve", solver.solve_equation(e, v)),
    "factor": lambda e, v: _factor_dict(solver.factor_text(e, v)),
}


def handle_command(line: str, session: Session | None = None) -> dict[str, Any]:
    """Run one REPL command line and return its result dictionary.

    Args:
        line: Command line, e.g. "diff x^2" or a bare expression
        session: REPL state; a fresh one is used if omitted

    Returns:
        Result dictionary with at least "ok" and, on success, "type"
    """
    session = session if session is not None else Session()
    line = line.strip()
    if not line:
        return _error("Empty input. Please enter an expression or a command.")
    word, _, argument = line.partition(" ")
    command = word.lower()
    argument = argument.strip()

    if command == "help":
        return {"ok": True, "type": "help"}
    if command == "vars":
        return {"ok": True, "type": "variables", "variables": dict(session.variables)}
    if command not in _USAGE:
        return _evaluate(line, session)
    if not argument:
        return _error(f"Usage: {_USAGE[command]}")

    if command == "parse":
        return _parse(argument, session)
    if command == "eval":
        return _evaluate(argument, session)
    if command == "simplify":
        return _transform_dict("simplify", calculus.simplify_expression(argument))
    if command == "let":
        return _assign(argument, session)

    try:
        expression, variable = _split_variable(argument, session)
    except ValueError as e:
        return _error(str(e), "INVALID_NAME")
    if command == "all":
        return _run_all(expression, variable, session)
    return _VARIABLE_COMMANDS[command](expression, variable)


def _summary(res: dict[str, Any]) -> str:
    if not res.get("ok"):
        return f"Error: {res.get('error')}"
    typ = res.get("type")
    if typ == "parse":
        return res["tree"]
    if typ == "factor":
        return ", ".join(res.get("factors", []))
    return str(res.get("result"))


def print_result_pretty(res: dict[str, Any], output_format: str = "human") -> None:
    """Print result in specified format.

    Args:
        res: Result dictionary
        output_format: "json" for JSON output, "human" for human-readable
    """
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print("Error:", res.get("error"))
        return
    typ = res.get("type", "value")
    if typ == "help":
        print_help_text()
    elif typ == "variables":
        variables = res.get("variables", {})
        if not variables:
            print("No variables defined.")
        for name, value in sorted(variables.items()):
            print(f"{name} = {format_number(value)}")
    elif typ == "transform":
        print(res.get("result"))
        canonical = res.get("canonical")
        if canonical and canonical != res.get("result"):
            print(f"Canonical: {canonical}")
    elif typ == "factor":
        print("Factors:", _summary(res))
    elif typ == "all":
        print(f"Variable: {res.get('variable')}")
        for label, section in res.get("sections", {}).items():
            print(f"{label}: {_summary(section)}")
    else:
        print(_summary(res))


def print_help_text() -> None:
    """Print help text for REPL commands."""
    commands = "\n".join(f"  {usage}" for usage in _USAGE.values())
    functions = ", ".join(sorted(FUNCTION_NAMES))
    print(
        f"""Kalkulus version {VERSION}

Commands:
{commands}
  vars                     (list bound variables)
  help                     (show this text)
  quit, exit

A line that is not a command is evaluated as an expression.

Syntax:
  + - * / ^        (^ is right-associative, -2^2 is (-2)^2)
  2x, 3(x+1)       (implicit multiplication)
  {functions}
"""
    )


def repl_loop(output_format: str = "human", session: Session | None = None) -> None:
    """Interactive REPL loop with graceful interrupt handling."""
    try:
        import readline  # noqa: F401
    except ImportError:
        # readline not available on Windows - that's fine
        pass

    session = session if session is not None else Session()
    print("Kalkulus - type 'help' for commands, 'quit' to exit.")
    while True:
        try:
            raw = input(">>> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye.")
            break
        if not raw:
            continue
        if raw.lower() in EXIT_COMMANDS:
            print("Goodbye.")
            break
        print_result_pretty(handle_command(raw, session), output_format)


def _parse_binding(text: str) -> tuple[str, float]:
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not VAR_NAME_RE.match(name) or name in FUNCTION_NAMES:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    result = api.evaluate_expression(value.strip())
    if not result.ok:
        raise argparse.ArgumentTypeError(f"invalid value for {name}: {result.error}")
    return name, result.value


def _variable_name(text: str) -> str:
    if not VAR_NAME_RE.match(text) or text in FUNCTION_NAMES:
        raise argparse.ArgumentTypeError(f"invalid variable name: {text!r}")
    return text


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Kalkulus CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="kalkulus")
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Run one command line (e.g. \"diff x^2\") and exit",
        dest="eval_expr",
    )
    parser.add_argument(
        "--var",
        type=_variable_name,
        help=f"Default variable for calculus commands (default: {config.DEFAULT_VARIABLE})",
    )
    parser.add_argument(
        "--set",
        type=_parse_binding,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Bind a variable for evaluation (repeatable)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (significant digits)"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)
    if args.precision and args.precision > 0:
        config.OUTPUT_PRECISION = int(args.precision)
    if args.version:
        print(VERSION)
        return 0

    session = Session()
    if args.var:
        session.variable = args.var
    session.variables.update(dict(args.set))

    if args.eval_expr is not None:
        line = args.eval_expr.strip()
        # Remove ">>>" prompt if present
        if line.startswith(">>>"):
            line = line[3:].strip()
        res = handle_command(line, session)
        print_result_pretty(res, args.format)
        return 0 if res.get("ok") else 1

    repl_loop(args.format, session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main_entry())
