"""
Lexer for Carrion - Recursive Descent Parser

Tokenizes Carrion source code into a stream of tokens.

Features:
- Single-pass tokenization, one Unicode character at a time
- Indentation-aware (emits INDENT/DEDENT)
- Position tracking (file, line, column)
- Never aborts: malformed input is reported and skipped
"""

import logging
from typing import List

from .token_types import TT, Tok, lookup_identifier

logger = logging.getLogger(__name__)

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(Exception):
    """Lexical problem recorded by the lexer (reported, never raised)"""

    def __init__(self, message: str, file: str = "<string>", line: int = 0, column: int = 0):
        self.message = message
        self.file = file
        self.line = line
        self.column = column
        super().__init__(f"{file}:{line}:{column}: {message}")


_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '0': '\0',
    '\\': '\\',
    "'": "'",
    '"': '"',
}

_OPENERS = (TT.LPAR, TT.LSQB, TT.LBRACE)
_CLOSERS = (TT.RPAR, TT.RSQB, TT.RBRACE)


def _is_digit(ch: str) -> bool:
    return ch != '' and '0' <= ch <= '9'


class Lexer:
    """
    Carrion lexer with indentation handling.

    Based on Python's indentation model:
    - Track stack of indentation levels (column widths)
    - Emit INDENT when level increases
    - Emit one DEDENT per popped level when it decreases
    - Newlines inside brackets continue the logical line
    """

    # Safety ceilings against pathological input
    MAX_NESTING_DEPTH = 50
    MAX_INDENT_WIDTH = 1000
    MAX_INDENT_SCAN = 1000
    MAX_DEDENTS = 20
    MAX_BLOCK_COMMENT = 10000

    TAB_WIDTH = 8

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('**', TT.POW),
        ('*=', TT.STAREQ),
        ('/=', TT.SLASHEQ),
        ('+=', TT.PLUSEQ),
        ('-=', TT.MINUSEQ),
        ('++', TT.INCR),
        ('--', TT.DECR),
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('<<', TT.LSHIFT),
        ('>>', TT.RSHIFT),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('=', TT.ASSIGN),
        ('!', TT.BANG),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (':', TT.COLON),
        ('@', TT.AT),
        ('&', TT.AMP),
        ('|', TT.PIPE),
        ('^', TT.CARET),
        ('~', TT.TILDE),
        ('#', TT.HASH),
    ]

    def __init__(self, source: str, file: str = "<string>", log_errors: bool = True):
        self.source = source
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.errors: List[LexError] = []
        self.log_errors = log_errors

        # Start of the lexeme being scanned
        self.start_pos = 0
        self.start_line = 1
        self.start_column = 1

        # Indentation tracking
        self.indent_stack = [0]
        self.at_line_start = True
        self.pending_dedents = 0
        self.bracket_depth = 0

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while not self.is_at_end():
            self.mark_start()
            self.scan_token()

        self.mark_start()

        # Dedents queued by the last line, then close every open level
        while self.pending_dedents > 0:
            self.pending_dedents -= 1
            self.emit(TT.DEDENT, '')

        while len(self.indent_stack) > 1:
            self.indent_stack.pop()
            self.emit(TT.DEDENT, '')

        self.emit(TT.EOF, '')
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        if self.pending_dedents > 0:
            self.pending_dedents -= 1
            self.emit(TT.DEDENT, '')
            return

        # Handle indentation at line start
        if self.at_line_start:
            self.at_line_start = False
            self.handle_indentation()
            return

        ch = self.peek()

        # Skip whitespace (not newlines)
        if ch in (' ', '\t', '\r'):
            self.advance()
            return

        # Newlines
        if ch == '\n':
            self.scan_newline()
            return

        # Comments
        if ch == '/' and self.peek(1) == '/':
            self.skip_line_comment()
            return
        if ch == '/' and self.peek(1) == '*':
            self.advance(2)
            self.skip_block_comment()
            return

        # String literals
        if ch in ('"', "'"):
            self.scan_string()
            return

        # Numbers
        if _is_digit(ch):
            self.scan_number()
            return

        # Identifiers and keywords
        if ch.isalpha() or ch == '_':
            self.scan_identifier()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Indentation Handling
    # ========================================================================

    def handle_indentation(self):
        """
        Handle indentation at start of a logical line.
        Emit INDENT/DEDENT tokens as needed.
        """
        if self.bracket_depth > 0:
            return

        indent = 0
        scanned = 0
        measured: List[str] = []

        while True:
            ch = self.peek()

            if ch == ' ':
                indent += 1
            elif ch == '\t':
                indent += self.TAB_WIDTH
            elif ch in ('\n', '\r', ''):
                # Blank line (or trailing whitespace at EOF)
                return
            elif ch == '#' or (ch == '/' and self.peek(1) == '/'):
                # Full-line comment
                self.skip_line_comment()
                return
            elif ch == '/' and self.peek(1) == '*':
                self.advance(2)
                self.skip_block_comment()
                if self.peek() in ('\n', ''):
                    return
                continue
            else:
                break

            measured.append(self.advance())
            scanned += 1

            if scanned > self.MAX_INDENT_SCAN:
                self.report("Excessive whitespace at line start")
                return

        if indent > self.MAX_INDENT_WIDTH:
            self.report("Indentation level too deep")
            return

        self.mark_start()
        current_indent = self.indent_stack[-1]

        if indent > current_indent:
            if len(self.indent_stack) >= self.MAX_NESTING_DEPTH:
                self.report(f"Maximum nesting depth ({self.MAX_NESTING_DEPTH}) exceeded")
                return

            self.indent_stack.append(indent)
            self.emit(TT.INDENT, ''.join(measured))

        elif indent < current_indent:
            # The stack is strictly increasing, so the levels to pop are on top
            popped = sum(1 for level in self.indent_stack if level > indent)
            target = self.indent_stack[-popped - 1]

            if target != indent:
                self.report(f"Inconsistent indentation level: column width {indent} matches no enclosing block")
                return

            if popped > self.MAX_DEDENTS:
                self.report("Too many dedent levels at once")
                return

            del self.indent_stack[-popped:]
            self.pending_dedents = popped - 1
            self.emit(TT.DEDENT, '')

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline character"""
        self.advance()

        # Inside brackets the logical line continues
        if self.bracket_depth > 0:
            return

        self.emit(TT.NEWLINE, '\n')
        self.at_line_start = True

    def scan_string(self):
        """Scan string literal: "..." or '...'"""
        quote = self.advance()
        chars: List[str] = []

        while not self.is_at_end() and self.peek() != quote:
            ch = self.advance()
            if ch == '\\' and not self.is_at_end():
                esc = self.advance()
                chars.append(_ESCAPES.get(esc, '\\' + esc))
            else:
                chars.append(ch)

        if self.is_at_end():
            self.report(f"Unterminated string starting at line {self.start_line}")
            return

        self.advance()  # Closing quote
        self.emit(TT.STRING, ''.join(chars))

    def scan_number(self):
        """Scan number literal"""
        token_type = TT.INTEGER

        while _is_digit(self.peek()):
            self.advance()

        # A trailing '.' without a digit after it is not part of the number
        if self.peek() == '.' and _is_digit(self.peek(1)):
            token_type = TT.FLOAT
            self.advance()
            while _is_digit(self.peek()):
                self.advance()

        self.emit(token_type, self.source[self.start_pos:self.pos])

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while self.peek().isalnum() or self.peek() == '_':
            self.advance()

        value = self.source[self.start_pos:self.pos]
        self.emit(lookup_identifier(value), value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)

                if op_type in _OPENERS:
                    self.bracket_depth += 1
                elif op_type in _CLOSERS:
                    self.bracket_depth = max(0, self.bracket_depth - 1)
                return

        ch = self.advance()
        self.report(f"Unexpected character {ch!r}, skipping")

    def skip_line_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', ''):
            self.advance()

    def skip_block_comment(self):
        """Skip the rest of a /* ... */ comment (opening already consumed)"""
        scanned = 0

        while not self.is_at_end():
            if self.peek() == '*' and self.peek(1) == '/':
                self.advance(2)
                return

            self.advance()
            scanned += 1

            if scanned > self.MAX_BLOCK_COMMENT:
                self.report("Block comment too long, stopping scan")
                return

        self.report("Unterminated block comment")

    # ========================================================================
    # Utilities
    # ========================================================================

    def is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character ('' past the end)"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return ''

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        start = self.pos
        for _ in range(n):
            if self.pos >= len(self.source):
                break
            ch = self.source[self.pos]
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return self.source[start:self.pos]

    def mark_start(self):
        self.start_pos = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def emit(self, token_type: TT, value: str):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            value=value,
            file=self.file,
            line=self.start_line,
            column=self.start_column,
        )
        self.tokens.append(tok)

    def report(self, message: str):
        """Record a lexical problem on the diagnostic channel"""
        err = LexError(message, self.file, self.start_line, self.start_column)
        self.errors.append(err)

        if self.log_errors:
            logger.warning("%s", err)

# ============================================================================
# Convenience
# ============================================================================

def tokenize(source: str, file: str = "<string>") -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, file=file)
    return lexer.tokenize()


if __name__ == '__main__':
    import sys

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    path = sys.argv[1] if len(sys.argv) > 1 else None
    if path:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    else:
        text = sys.stdin.read()

    for tok in tokenize(text, file=path or "<stdin>"):
        print(tok)
