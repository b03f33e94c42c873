from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from lark import Tree

from .evaluator import evaluate
from .lexer_rd import Lexer
from .parser_rd import CarrionSyntaxError, parse_source
from .runtime import CrnError, CrnNone, CrnValue, CarrionRuntimeError, Environment, new_environment
from .utils import debug_py_trace_enabled

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

USAGE = """usage: carrion [--tokens] [--tree] [-v] [path | - | source]

With no argument an interactive shell is started. '-' reads the program
from stdin; an argument that is not an existing file is run as source.

  --tokens       print the token stream and exit
  --tree         print the parse tree and exit
  -v, --verbose  log debug diagnostics to stderr"""

def compile_source(src: str, file: str="<string>") -> Tree:
    """Tokenize and parse; raises CarrionSyntaxError on any syntax error."""
    return parse_source(src, file=file)

def run(src: str, env: Optional[Environment]=None, file: str="<string>") -> CrnValue:
    tree = compile_source(src, file=file)

    if env is None:
        env = new_environment()

    logger.debug("evaluating %s", file)
    return evaluate(tree, env)

def execute(src: str, env: Optional[Environment]=None, file: str="<string>") -> CrnValue:
    """Like run(), but syntax and runtime errors come back as a CrnError value."""
    try:
        return run(src, env, file=file)
    except CarrionSyntaxError as exc:
        return CrnError("Encountered parsing errors", details=[str(err) for err in exc.errors])
    except CarrionRuntimeError as exc:
        return CrnError(str(exc))

def report_syntax_error(exc: CarrionSyntaxError) -> None:
    print("Encountered parsing errors:", file=sys.stderr)

    for err in exc.errors:
        print(f"\t{err}", file=sys.stderr)

def report_runtime_error(exc: CarrionRuntimeError) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)

def run_source(src: str, file: str="<string>") -> int:
    """Run a whole program, print its value unless none; return the exit status."""
    try:
        value = run(src, file=file)
    except CarrionSyntaxError as exc:
        report_syntax_error(exc)
        return 1
    except CarrionRuntimeError as exc:
        report_runtime_error(exc)
        return 1

    if not isinstance(value, CrnNone):
        print(value)
    return 0

def run_file(path: str) -> int:
    source = Path(path).read_text(encoding="utf-8")
    return run_source(source, file=path)

def _load_source(arg: str) -> tuple[str, str]:
    """
    Resolve CLI input into (source text, file label).
    - "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data, "<stdin>"

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8"), str(candidate)

    return arg, "<string>"

def _dump_tokens(src: str, file: str) -> int:
    lexer = Lexer(src, file=file)

    for tok in lexer.tokenize():
        print(tok)

    return 1 if lexer.errors else 0

def _dump_tree(src: str, file: str) -> int:
    try:
        tree = compile_source(src, file=file)
    except CarrionSyntaxError as exc:
        report_syntax_error(exc)
        return 1

    print(tree.pretty())
    return 0

def main(argv: Optional[List[str]]=None) -> None:
    show_tokens = False
    show_tree = False
    verbose = False
    arg = None

    for token in sys.argv[1:] if argv is None else argv:
        if token == "--tokens":
            show_tokens = True
            continue

        if token == "--tree":
            show_tree = True
            continue

        if token in ("-v", "--verbose"):
            verbose = True
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return

        if token.startswith("--"):
            raise SystemExit(f"Unknown option: {token}")

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    if arg is None:
        from .repl import repl
        repl()
        return

    source, file = _load_source(arg)

    if show_tokens:
        raise SystemExit(_dump_tokens(source, file))

    if show_tree:
        raise SystemExit(_dump_tree(source, file))

    raise SystemExit(run_source(source, file=file))

if __name__ == "__main__":
    main()
