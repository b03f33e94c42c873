"""
Recursive Descent Parser for Carrion

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent for statements, Pratt parsing for expressions
- AST: Lark Tree/Token nodes (labels listed in tree.py)

Syntax errors never abort the parse. Each one is recorded in
`Parser.errors`, the cursor is moved past the failure point, and parsing
resumes with the next statement.
"""

import logging
from enum import IntEnum
from typing import Dict, List, Optional

from lark import Tree, Token

from .token_types import TT, Tok, RESERVED
from .tree import Node, make_meta

logger = logging.getLogger(__name__)

# ============================================================================
# Errors
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

class CarrionSyntaxError(Exception):
    """Raised by parse_source() when the program has syntax errors"""
    def __init__(self, errors: List[ParseError]):
        self.errors = list(errors)
        super().__init__("\n".join(str(err) for err in self.errors))

# ============================================================================
# Precedence
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 0
    ASSIGN = 1
    OR = 2
    AND = 3
    EQUALITY = 4
    COMPARISON = 5
    TERM = 6
    FACTOR = 7
    EXPONENT = 8
    PREFIX = 9
    POSTFIX = 10
    CALL = 11
    INDEX = 12

PRECEDENCES: Dict[TT, Precedence] = {
    TT.OR: Precedence.OR,
    TT.AND: Precedence.AND,
    TT.EQ: Precedence.EQUALITY,
    TT.NEQ: Precedence.EQUALITY,
    TT.LT: Precedence.COMPARISON,
    TT.GT: Precedence.COMPARISON,
    TT.LTE: Precedence.COMPARISON,
    TT.GTE: Precedence.COMPARISON,
    TT.PLUS: Precedence.TERM,
    TT.MINUS: Precedence.TERM,
    TT.STAR: Precedence.FACTOR,
    TT.SLASH: Precedence.FACTOR,
    TT.MOD: Precedence.FACTOR,
    TT.POW: Precedence.EXPONENT,
    TT.INCR: Precedence.POSTFIX,
    TT.DECR: Precedence.POSTFIX,
    TT.LPAR: Precedence.CALL,
    TT.LSQB: Precedence.INDEX,
}

# Compound assignment token -> arithmetic operator it applies
COMPOUND_OPS: Dict[TT, str] = {
    TT.PLUSEQ: '+',
    TT.MINUSEQ: '-',
    TT.STAREQ: '*',
    TT.SLASHEQ: '/',
}

PREFIX_OPS: Dict[TT, str] = {
    TT.MINUS: '-',
    TT.NOT: 'not',
    TT.BANG: 'not',
    TT.INCR: '++',
    TT.DECR: '--',
}

INT64_MAX = 2 ** 63 - 1

# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Recursive descent parser for Carrion.

    Expression precedence (lowest to highest):
    1. assignment (statement level only)
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (<, >, <=, >=)
    6. additive (+, -)
    7. multiplicative (*, /, %)
    8. exponent (**)
    9. prefix (-, not, ++, --)
    10. postfix (++, --)
    11. call (f(x))
    12. index (a[i])
    """

    MAX_RECOVERIES = 1000
    MAX_OTHERWISE_CLAUSES = 50
    MAX_BLOCK_STATEMENTS = 100
    MAX_NESTING_DEPTH = 100

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, '')
        self.errors: List[ParseError] = []
        self.depth = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self._eof()

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens):
            self.pos += 1
        self.current = self.peek()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self.advance()

    def checkpoint(self) -> int:
        return self.pos

    def restore(self, pos: int) -> None:
        self.pos = pos
        self.current = self.peek()

    def _eof(self) -> Tok:
        if self.tokens:
            last = self.tokens[-1]
            return Tok(TT.EOF, '', last.file, last.line, last.column)
        return Tok(TT.EOF, '')

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > self.MAX_NESTING_DEPTH:
            raise ParseError("Program nested too deeply", self.current)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse_program(self) -> Tree:
        """Parse entire program, collecting syntax errors as it goes"""
        statements: List[Tree] = []

        while not self.check(TT.EOF):
            # Blank lines, and dedents left over after recovering inside a block
            if self.match(TT.NEWLINE, TT.DEDENT):
                continue

            start = self.pos
            try:
                if self.check(TT.INDENT):
                    raise ParseError("Unexpected indent", self.current)
                statements.append(self.parse_statement())
            except ParseError as err:
                self.errors.append(err)

                if len(self.errors) >= self.MAX_RECOVERIES:
                    self.errors.append(ParseError("Too many syntax errors, giving up", self.current))
                    break

                self.synchronize(start)

        logger.debug("parsed %d statement(s) with %d error(s)", len(statements), len(self.errors))
        return Tree('program', statements)

    def synchronize(self, start: int) -> None:
        """Skip past the failed statement: at least one token, then to end of line"""
        if self.pos == start:
            self.advance()

        while not self.check(TT.NEWLINE, TT.EOF):
            self.advance()

        self.match(TT.NEWLINE)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        Compound statements (spell, if, while, for) end with their block;
        simple statements must be followed by a newline, a dedent or EOF.
        """
        self._enter()
        try:
            if self.check(TT.SPELL):
                return self.parse_fn_stmt()
            if self.check(TT.IF):
                return self.parse_if_stmt()
            if self.check(TT.WHILE):
                return self.parse_while_stmt()
            if self.check(TT.FOR):
                return self.parse_for_stmt()

            if self.check(TT.RETURN):
                stmt = self.parse_return_stmt()
            elif self.check(TT.STOP):
                stmt = self.parse_loop_control('stopstmt')
            elif self.check(TT.SKIP):
                stmt = self.parse_loop_control('skipstmt')
            elif self.check(TT.ELSE, TT.OTHERWISE):
                raise ParseError(f"'{self.current.value}' without a matching 'if'", self.current)
            elif self.current.type in RESERVED:
                raise self._reserved_error(self.current)
            else:
                stmt = self.parse_expression_stmt()

            self.end_simple_statement()
            return stmt
        finally:
            self.depth -= 1

    def end_simple_statement(self) -> None:
        if self.match(TT.NEWLINE):
            return
        if self.check(TT.DEDENT, TT.EOF):
            return
        raise ParseError(f"Expected end of statement, got {self._describe(self.current)}", self.current)

    def parse_fn_stmt(self) -> Tree:
        """Parse function definition: spell name(params): body"""
        spell_tok = self.expect(TT.SPELL)
        name = self.expect(TT.IDENT, "Expected spell name after 'spell'")
        self.expect(TT.LPAR, "Expected '(' after spell name")

        params: List[Token] = []
        if not self.check(TT.RPAR):
            while True:
                param = self.expect(TT.IDENT, "Expected parameter name")
                params.append(self._ident(param))
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RPAR, "Expected ')' after parameters")
        self.expect(TT.COLON, "Expected ':' after spell signature")
        body = self.parse_block()

        return Tree('fndef', [self._ident(name), Tree('params', params), body], self._meta(spell_tok))

    def parse_return_stmt(self) -> Tree:
        """Parse return statement: return [expr]"""
        ret_tok = self.expect(TT.RETURN)

        if self.check(TT.NEWLINE, TT.DEDENT, TT.EOF):
            return Tree('returnstmt', [], self._meta(ret_tok))

        value = self.parse_expression(Precedence.LOWEST)
        return Tree('returnstmt', [value], self._meta(ret_tok))

    def parse_loop_control(self, label: str) -> Tree:
        """Parse stop/skip"""
        tok = self.advance()
        return Tree(label, [], self._meta(tok))

    def parse_if_stmt(self) -> Tree:
        """
        Parse if statement:
        if expr: body [otherwise expr: body]* [else: body]
        """
        if_tok = self.expect(TT.IF)
        cond = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.COLON, "Expected ':' after if condition.")
        children: List[Node] = [cond, self.parse_block()]

        clauses = 0
        while self._clause_follows(TT.OTHERWISE):
            clauses += 1
            if clauses > self.MAX_OTHERWISE_CLAUSES:
                raise ParseError(
                    f"Too many otherwise clauses: maximum {self.MAX_OTHERWISE_CLAUSES} allowed",
                    self.current,
                )

            self.advance()
            other_cond = self.parse_expression(Precedence.LOWEST)
            self.expect(TT.COLON, "Expected ':' after otherwise condition.")
            children.append(Tree('otherwise', [other_cond, self.parse_block()]))

        if self._clause_follows(TT.ELSE):
            self.advance()
            self.expect(TT.COLON, "Expected ':' after else.")
            children.append(Tree('elseclause', [self.parse_block()]))

        return Tree('ifstmt', children, self._meta(if_tok))

    def _clause_follows(self, token_type: TT) -> bool:
        """Look past blank lines for a continuation clause; rewind if absent"""
        mark = self.checkpoint()
        while self.match(TT.NEWLINE):
            pass

        if self.check(token_type):
            return True

        self.restore(mark)
        return False

    def parse_while_stmt(self) -> Tree:
        """Parse while loop: while expr: body"""
        while_tok = self.expect(TT.WHILE)
        cond = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.COLON, "Expected ':' after while condition.")
        body = self.parse_block()
        return Tree('whilestmt', [cond, body], self._meta(while_tok))

    def parse_for_stmt(self) -> Tree:
        """Parse for loop: for name in expr: body"""
        for_tok = self.expect(TT.FOR)
        var = self.expect(TT.IDENT, "Expected loop variable after 'for'")
        self.expect(TT.IN, "Expected 'in' after loop variable")
        iterable = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.COLON, "Expected ':' after for clause.")
        body = self.parse_block()
        return Tree('forstmt', [self._ident(var), iterable, body], self._meta(for_tok))

    def parse_expression_stmt(self) -> Tree:
        """
        Parse assignment or expression statement.

        Targets are parsed speculatively; when no '=' or compound operator
        follows them the cursor is rewound and the input is reparsed as a
        plain expression.
        """
        start_tok = self.current
        mark = self.checkpoint()

        targets: Optional[List[Node]]
        try:
            targets = [self.parse_expression(Precedence.ASSIGN)]
            while self.match(TT.COMMA):
                targets.append(self.parse_expression(Precedence.ASSIGN))
        except ParseError:
            targets = None

        if targets is not None and self.match(TT.ASSIGN):
            values = [self.parse_expression(Precedence.ASSIGN)]
            while self.match(TT.COMMA):
                values.append(self.parse_expression(Precedence.ASSIGN))

            value = values[0] if len(values) == 1 else Tree('list', values)
            return Tree('assignstmt', [Tree('targets', targets), value], self._meta(start_tok))

        if targets is not None and self.current.type in COMPOUND_OPS:
            op_tok = self.current
            if len(targets) != 1:
                raise ParseError("Compound assignment requires exactly one target", op_tok)

            self.advance()
            value = self.parse_expression(Precedence.ASSIGN)
            op = Token('OP', COMPOUND_OPS[op_tok.type], line=op_tok.line, column=op_tok.column)
            return Tree('compound_assign', [targets[0], op, value], self._meta(start_tok))

        self.restore(mark)
        expr = self.parse_expression(Precedence.LOWEST)
        return Tree('exprstmt', [expr], self._meta(start_tok))

    def parse_block(self) -> Tree:
        """
        Parse body after colon.

        Accepts:
        - Indented block: NEWLINE INDENT stmts DEDENT
        - Single statement on the same line: stmt
        """
        if self.check(TT.NEWLINE):
            while self.match(TT.NEWLINE):
                pass

            if not self.check(TT.INDENT):
                raise ParseError("Expected an indented block", self.current)
            self.advance()

            stmts: List[Tree] = []
            while not self.check(TT.DEDENT, TT.EOF):
                if self.match(TT.NEWLINE):
                    continue

                if len(stmts) >= self.MAX_BLOCK_STATEMENTS:
                    raise ParseError(
                        f"Block too large: maximum {self.MAX_BLOCK_STATEMENTS} statements allowed",
                        self.current,
                    )
                stmts.append(self.parse_statement())

            self.expect(TT.DEDENT, "Expected end of indented block")
            return Tree('block', stmts)

        if self.check(TT.EOF, TT.DEDENT, TT.INDENT):
            raise ParseError("Expected a statement after ':'", self.current)

        return Tree('block', [self.parse_statement()])

    # ========================================================================
    # Expressions - Precedence Climbing
    # ========================================================================

    def parse_expression(self, precedence: Precedence) -> Node:
        """Parse an expression whose operators bind tighter than `precedence`"""
        self._enter()
        try:
            left = self.parse_prefix()

            while precedence < self.current_precedence():
                left = self.parse_infix(left)

            return left
        finally:
            self.depth -= 1

    def current_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.current.type, Precedence.LOWEST)

    def parse_prefix(self) -> Node:
        """Dispatch on the current token to the matching prefix rule"""
        tok = self.current

        match tok.type:
            case TT.IDENT:
                self.advance()
                return self._ident(tok)
            case TT.INTEGER:
                return self.parse_integer()
            case TT.FLOAT:
                self.advance()
                return Tree('float', [Token('FLOAT', tok.value)])
            case TT.STRING:
                self.advance()
                return Tree('string', [Token('STRING', tok.value)])
            case TT.TRUE | TT.FALSE:
                self.advance()
                return Tree('bool', [Token('BOOL', 'true' if tok.type == TT.TRUE else 'false')])
            case TT.NONE:
                self.advance()
                return Tree('none', [])
            case TT.LPAR:
                return self.parse_grouped()
            case TT.LSQB:
                self.advance()
                return Tree('list', self.parse_expression_list(TT.RSQB, "]"))
            case TT.LBRACE:
                return self.parse_dict()

        if tok.type in PREFIX_OPS:
            self.advance()
            operand = self.parse_expression(Precedence.PREFIX)
            op = Token('OP', PREFIX_OPS[tok.type], line=tok.line, column=tok.column)
            return Tree('prefix', [op, operand])

        if tok.type in RESERVED:
            raise self._reserved_error(tok)

        raise ParseError(f"No prefix parsing function found for token {self._describe(tok)}", tok)

    def parse_infix(self, left: Node) -> Node:
        """Fold one infix/postfix/call/index continuation into `left`"""
        tok = self.current

        if tok.type == TT.LPAR:
            self.advance()
            args = self.parse_expression_list(TT.RPAR, ")")
            return Tree('call', [left, Tree('args', args)])

        if tok.type == TT.LSQB:
            self.advance()
            index = self.parse_expression(Precedence.LOWEST)
            self.expect(TT.RSQB, "Expected ']' after index")
            return Tree('index', [left, index])

        if tok.type in (TT.INCR, TT.DECR):
            self.advance()
            return Tree('postfix', [left, Token('OP', tok.value, line=tok.line, column=tok.column)])

        precedence = self.current_precedence()
        self.advance()
        right = self.parse_expression(precedence)
        op = Token('OP', tok.value.lower(), line=tok.line, column=tok.column)
        return Tree('infix', [left, op, right])

    def parse_integer(self) -> Tree:
        tok = self.advance()
        try:
            value = int(tok.value)
        except ValueError:
            value = None

        if value is None or value > INT64_MAX:
            raise ParseError(f"Could not parse '{tok.value}' as an integer.", tok)

        return Tree('int', [Token('INTEGER', tok.value)])

    def parse_grouped(self) -> Node:
        """Parse parenthesised expression: ( expr )"""
        self.expect(TT.LPAR)
        expr = self.parse_expression(Precedence.LOWEST)
        self.expect(TT.RPAR, "Expected ')' after expression")
        return expr

    def parse_dict(self) -> Tree:
        """Parse dict literal: { key: value, ... }"""
        self.expect(TT.LBRACE)
        pairs: List[Tree] = []

        while not self.check(TT.RBRACE):
            key = self.parse_expression(Precedence.LOWEST)
            self.expect(TT.COLON, "Expected ':' after dict key")
            value = self.parse_expression(Precedence.LOWEST)
            pairs.append(Tree('pair', [key, value]))

            if not self.match(TT.COMMA):
                break

        self.expect(TT.RBRACE, "Expected '}' after dict entries")
        return Tree('dict', pairs)

    def parse_expression_list(self, end: TT, closer: str) -> List[Node]:
        """
        Parse comma-separated elements up to `end` (already past the opener).
        `*expr` marks an element to be spliced in.
        """
        items: List[Node] = []

        while not self.check(end):
            if self.check(TT.STAR):
                self.advance()
                items.append(Tree('unpack', [self.parse_expression(Precedence.LOWEST)]))
            else:
                items.append(self.parse_expression(Precedence.LOWEST))

            if not self.match(TT.COMMA):
                break

        self.expect(end, f"Expected '{closer}'")
        return items

    # ========================================================================
    # Helpers
    # ========================================================================

    def _ident(self, tok: Tok) -> Token:
        return Token('IDENT', tok.value, line=tok.line, column=tok.column)

    def _meta(self, tok: Tok):
        return make_meta(tok.line, tok.column)

    def _describe(self, tok: Tok) -> str:
        if tok.value and not tok.value.isspace():
            return f"{tok.type.name} ('{tok.value}')"
        return tok.type.name

    def _reserved_error(self, tok: Tok) -> ParseError:
        return ParseError(f"'{tok.value}' is a reserved keyword and is not supported", tok)

# ============================================================================
# Convenience
# ============================================================================

def parse_source(source: str, file: str = "<string>") -> Tree:
    """
    Parse Carrion source code to AST.

    Raises CarrionSyntaxError carrying every recorded ParseError when the
    program is not syntactically valid.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source, file=file)

    parser = Parser(tokens)
    program = parser.parse_program()

    if parser.errors:
        raise CarrionSyntaxError(parser.errors)
    return program


if __name__ == '__main__':
    import sys

    args = [arg for arg in sys.argv[1:] if not arg.startswith('--')]

    if len(args) > 0 and args[0] != '-':
        with open(args[0], 'r', encoding='utf-8') as f:
            source = f.read()
    else:
        source = sys.stdin.read()

    try:
        tree = parse_source(source)
        print(tree.pretty())
    except CarrionSyntaxError as e:
        for err in e.errors:
            print(f"Parse error: {err}", file=sys.stderr)
        sys.exit(1)
