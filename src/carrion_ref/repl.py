"""Interactive REPL for Carrion, powered by prompt_toolkit."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings

from .lexer_rd import Lexer
from .parser_rd import CarrionSyntaxError
from .repl_highlight import CarrionLexer
from .runner import report_runtime_error, run
from .runtime import CrnNone, CarrionRuntimeError, Environment, new_environment
from .token_types import TT
from .utils import history_path

logger = logging.getLogger(__name__)

_EXIT_WORDS = {"quit", "exit"}
_HELP_WORDS = {"help", "scry"}

HELP_TOPICS = {
    "commands": """\
=== REPL Commands ===
  help, scry         List help topics
  help <topic>       Show one topic
  quit, exit         Leave the REPL
  Ctrl-C             Discard the current input
  Ctrl-D             Leave the REPL
  Up/Down            Navigate command history""",
    "syntax": """\
=== Basic Syntax ===
  Statements end at a newline
  Comments: // to end of line, /* block */, or a line starting with #
  A ':' followed by an indented block opens a block
  Numbers: 42, 3.14   Strings: "double" or 'single'
  Literals: true, false, none (keywords are case-insensitive)""",
    "variables": """\
=== Variables ===
  x = 5
  a, b, c = 1, 2, 3      bind positionally
  x, y = 0               bind the same value to both
  count += 1             also -=, *=, /=
  count++                also ++count, count--, --count""",
    "functions": """\
=== Spells ===
  spell add(a, b):
      return a + b
  Definitions bind a function value; calling user spells is not supported yet.""",
    "control": """\
=== Control Flow ===
  if score >= 90:
      "A"
  otherwise score >= 80:
      "B"
  else:
      "C"

  while n < 10:
      n += 1
  for ch in "raven":
      print(ch)
  stop / skip            leave / continue the innermost loop""",
    "data": """\
=== Data Structures ===
  numbers = [1, 2, 3]        numbers[0]  -> 1 (out of range is an error)
  person = {"name": "Odin"}  person["name"] -> Odin (missing key -> none)
  [0, *numbers]              splice a list into a list or call arguments""",
    "builtins": """\
=== Built-in Functions ===
  print(value, ...)    len(x)         type(x)      str(x)
  push(list, value)    pop(list)      keys(dict)   values(dict)
  push/pop return a new list and leave the argument untouched""",
}

_TOPIC_ORDER = list(HELP_TOPICS)


def help_text(topic: Optional[str] = None) -> str:
    """Topic listing, or the text of one topic (by name or number)."""
    if topic:
        key = topic.strip().lower()
        if key.isdigit() and 1 <= int(key) <= len(_TOPIC_ORDER):
            key = _TOPIC_ORDER[int(key) - 1]
        if key in HELP_TOPICS:
            return HELP_TOPICS[key]
        return f"No help topic '{topic}'. Type 'help' to list topics."

    lines = ["Available help topics:"]
    for idx, name in enumerate(_TOPIC_ORDER, start=1):
        lines.append(f"  {idx}. {name}")
    lines.append("Type 'help <topic>' to learn more.")
    return "\n".join(lines)


def _is_block_header(line: str) -> bool:
    """Return True if *line* ends with a block-opening colon (outside brackets)."""
    tokens = Lexer(line, file="<repl>", log_errors=False).tokenize()
    significant = [t for t in tokens if t.type not in (TT.NEWLINE, TT.INDENT, TT.DEDENT, TT.EOF)]

    if not significant or significant[-1].type != TT.COLON:
        return False

    depth = 0
    for tok in significant:
        if tok.type in (TT.LPAR, TT.LSQB, TT.LBRACE):
            depth += 1
        elif tok.type in (TT.RPAR, TT.RSQB, TT.RBRACE):
            depth = max(depth - 1, 0)

    return depth == 0


def _compute_indent(text: str) -> str:
    """Compute the auto-indent prefix for the next continuation line."""
    last = text.split("\n")[-1]
    existing = len(last) - len(last.lstrip())

    if _is_block_header(last):
        return " " * (existing + 4)

    if last.strip():
        return " " * existing

    return ""


def _handle_command(text: str) -> Optional[bool]:
    """None if *text* is source; False to leave; True when handled."""
    words = text.split()
    if not words:
        return True

    head = words[0].lower()

    if len(words) == 1 and head in _EXIT_WORDS:
        return False

    if head in _HELP_WORDS and len(words) <= 2:
        print(help_text(words[1] if len(words) == 2 else None))
        return True

    return None


def eval_submission(text: str, env: Environment) -> None:
    """Run one submission against the session environment and print the outcome."""
    try:
        value = run(text, env, file="<repl>")
    except CarrionSyntaxError as exc:
        print("Parsing Error(s):", file=sys.stderr)
        for err in exc.errors:
            print(f"\t{err}", file=sys.stderr)
        return
    except CarrionRuntimeError as exc:
        report_runtime_error(exc)
        return

    if not isinstance(value, CrnNone):
        print(value)


def _make_history() -> History:
    path = history_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
    except OSError as exc:
        logger.warning("history file %s unavailable (%s); using in-memory history", path, exc)
        return InMemoryHistory()

    return FileHistory(str(path))


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    env = new_environment()

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # Single line that does not open a block => accept.
        if "\n" not in text:
            if _is_block_header(text):
                buf.insert_text("\n" + _compute_indent(text))
                return

            buf.validate_and_handle()
            return

        # Multiline: an empty last line submits the block.
        lines = text.split("\n")
        if lines[-1].strip() == "":
            buf.text = "\n".join(lines[:-1])
            buf.cursor_position = len(buf.text)
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _compute_indent(text))

    session: PromptSession[str] = PromptSession(
        history=_make_history(),
        lexer=CarrionLexer(),
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("Welcome to the Carrion REPL!")
    print("Type 'help' or 'scry' for help and 'quit' or 'exit' to leave.")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        if not text.strip():
            continue

        handled = _handle_command(text)
        if handled is False:
            print("Farewell. May the All-Father bless your travels!")
            break
        if handled:
            continue

        eval_submission(text, env)
