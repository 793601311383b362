from ast_nodes import (
    Program, Block, Assign, Display, Input, If, While, For,
    Number, Var, Negate, Paren, Binary, Compare,
)
from errors import TabscriptSyntaxError
from lexer import LexicalAnalyzer, TokenKind

RELATIONAL_OPS = {
    TokenKind.LT: "<",
    TokenKind.LE: "<=",
    TokenKind.GT: ">",
    TokenKind.GE: ">=",
    TokenKind.EQ: "=",
    TokenKind.EQEQ: "=",  # accepted as a synonym of =
    TokenKind.NE: "/=",
}

CONTROL_KEYWORDS = (TokenKind.IF, TokenKind.WHILE, TokenKind.FOR)
CLAUSE_KEYWORDS = (TokenKind.ELIF, TokenKind.ELSE)


def indent_level(line):
    # one tab, or four spaces, is one level; leftover spaces do not count
    tabs = 0
    spaces = 0
    for ch in line:
        if ch == "\t":
            tabs += 1
        elif ch == " ":
            spaces += 1
        else:
            break
    return tabs + spaces // 4


def describe_kind(kind):
    if kind is TokenKind.EOL:
        return "end of line"
    if kind is TokenKind.INT_LIT:
        return "INT_LIT"
    if kind is TokenKind.IDENTIFIER:
        return "IDENTIFIER"
    return f"{kind.name} '{kind.value}'"


def describe_token(tok):
    if tok.kind is TokenKind.EOL:
        return "end of line"
    return f"{tok.kind.name} '{tok.lexeme}'"


class Parser:
    """Recursive-descent parser over a list of source lines.

    The lexer is re-seeded for every line the parser visits. Simple
    statements own exactly one line; if/while/for own their header line plus
    every line of their nested blocks, and leave line_index on the first line
    they do not own.
    """

    def __init__(self, lines):
        self.lines = [ln.rstrip("\r\n") for ln in lines]
        self.lexer = LexicalAnalyzer()
        self.line_index = 0
        self.current_token = None

    # move to next token, but only if it matches what we expect
    def eat(self, kind):
        tok = self.current_token
        if tok.kind is not kind:
            raise TabscriptSyntaxError(
                f"Expected {describe_kind(kind)}, found {describe_token(tok)}", tok.row, tok.column
            )
        self.current_token = self.lexer.get_token()
        return tok

    def error_here(self, message):
        tok = self.current_token
        raise TabscriptSyntaxError(message, tok.row, tok.column)

    def load_line(self, index):
        self.lexer.analyze(self.lines[index], index)
        self.current_token = self.lexer.get_token()

    def on_current_line(self):
        return self.current_token is not None and self.current_token.row == self.line_index

    def end_line(self):
        self.eat(TokenKind.EOL)
        # an explicit ';' must be the last thing on the line
        if self.current_token.kind is not TokenKind.EOL:
            self.error_here(f"Unexpected {describe_token(self.current_token)} after ';'")
        self.line_index += 1

    def skip_blank_lines(self):
        while self.line_index < len(self.lines) and not self.lines[self.line_index].strip():
            self.line_index += 1

    def at_end(self):
        self.skip_blank_lines()
        return self.line_index >= len(self.lines)

    # ---------- TOP LEVEL ----------
    def parse(self):
        statements = []
        while not self.at_end():
            level = indent_level(self.lines[self.line_index])
            if level != 0:
                raise TabscriptSyntaxError(
                    f"Unexpected indentation at top level (found {level} levels)", self.line_index, 0
                )
            try:
                statements.append(self.statement(0))
            except RecursionError:
                raise self.too_deep() from None
        return Program(statements)

    def too_deep(self):
        tok = self.current_token
        if tok is None:
            return TabscriptSyntaxError("statement nested too deeply to parse", self.line_index)
        return TabscriptSyntaxError("statement nested too deeply to parse", tok.row, tok.column)

    # ---------- STATEMENTS ----------
    def statement(self, level):
        self.load_line(self.line_index)
        kind = self.current_token.kind

        if kind is TokenKind.IF:
            return self.if_statement(level)
        if kind is TokenKind.WHILE:
            return self.while_statement(level)
        if kind is TokenKind.FOR:
            return self.for_statement(level)
        if kind in CLAUSE_KEYWORDS:
            self.error_here(f"{kind.value} used without a preceding if")

        node = self.simple_statement()
        self.end_line()
        return node

    def simple_statement(self):
        kind = self.current_token.kind
        if kind is TokenKind.LET:
            return self.assign_statement()
        if kind is TokenKind.DISPLAY:
            return self.display_statement()
        if kind is TokenKind.INPUT:
            return self.input_statement()
        if kind in CONTROL_KEYWORDS:
            self.error_here(f"{kind.value} cannot follow ':' on the same line")
        self.error_here(f"Expected a statement, found {describe_token(self.current_token)}")

    def assign_statement(self):
        tok = self.eat(TokenKind.LET)
        name = self.eat(TokenKind.IDENTIFIER).lexeme
        self.eat(TokenKind.ASSIGN)
        node = Assign(name, self.expr())
        node.line = tok.row
        return node

    def display_statement(self):
        tok = self.eat(TokenKind.DISPLAY)
        node = Display(self.expr())
        node.line = tok.row
        return node

    def input_statement(self):
        tok = self.eat(TokenKind.INPUT)
        node = Input(self.eat(TokenKind.IDENTIFIER).lexeme)
        node.line = tok.row
        return node

    def if_statement(self, level):
        # Grammar:
        #   IF bool ':' suite (ELIF bool ':' suite)* (ELSE ':' suite)?
        # elif/else sit at the same level as the if, either on their own
        # lines or after an inline body on the same line.
        tok = self.eat(TokenKind.IF)
        branches = [(self.bool_expr(), self.suite(level))]
        else_block = None

        kind = self.next_clause(level)
        while kind is TokenKind.ELIF:
            self.eat(TokenKind.ELIF)
            branches.append((self.bool_expr(), self.suite(level)))
            kind = self.next_clause(level)

        if kind is TokenKind.ELSE:
            self.eat(TokenKind.ELSE)
            else_block = self.suite(level)
            if self.on_current_line():
                self.end_line()

        node = If(branches, else_block)
        node.line = tok.row
        return node

    def next_clause(self, level):
        # Returns ELIF/ELSE with current_token on it, or None when the chain is over.
        if self.on_current_line():
            if self.current_token.kind in CLAUSE_KEYWORDS:
                return self.current_token.kind
            self.end_line()

        if self.at_end() or indent_level(self.lines[self.line_index]) != level:
            return None
        self.load_line(self.line_index)
        if self.current_token.kind in CLAUSE_KEYWORDS:
            return self.current_token.kind
        return None

    def while_statement(self, level):
        tok = self.eat(TokenKind.WHILE)
        condition = self.bool_expr()
        body = self.suite(level)
        if self.on_current_line():
            self.end_line()
        node = While(condition, body)
        node.line = tok.row
        return node

    def for_statement(self, level):
        tok = self.eat(TokenKind.FOR)
        var_name = self.eat(TokenKind.IDENTIFIER).lexeme
        self.eat(TokenKind.IN)
        start_expr = self.expr()
        self.eat(TokenKind.RANGE)
        end_expr = self.expr()
        body = self.suite(level)
        if self.on_current_line():
            self.end_line()
        node = For(var_name, start_expr, end_expr, body)
        node.line = tok.row
        return node

    def suite(self, level):
        # ':' then either one simple statement on the same line, or an
        # indented block starting on the next line
        colon = self.eat(TokenKind.COLON)
        if self.current_token.kind is TokenKind.EOL:
            self.end_line()
            return self.block(level + 1, colon)

        node = Block([self.simple_statement()])
        node.line = colon.row
        return node

    def block(self, level, header):
        statements = []
        while not self.at_end():
            found = indent_level(self.lines[self.line_index])
            if found < level:
                break  # dedent
            if found > level:
                raise TabscriptSyntaxError(
                    f"Unexpected indentation: expected {level} levels, found {found}", self.line_index, 0
                )
            statements.append(self.statement(level))

        if not statements:
            where = "end of input" if self.at_end() else f"line {self.line_index + 1}"
            raise TabscriptSyntaxError(
                f"Expected an indented block after ':', found {where}", header.row, header.column
            )
        node = Block(statements)
        node.line = header.row
        return node

    # ---------- EXPRESSIONS ----------
    # bool_expr -> expr relop expr   (exactly one comparison)
    def bool_expr(self):
        left = self.expr()
        op_token = self.current_token
        if op_token.kind not in RELATIONAL_OPS:
            self.error_here(f"Expected a relational operator, found {describe_token(op_token)}")
        self.eat(op_token.kind)
        right = self.expr()
        node = Compare(left, RELATIONAL_OPS[op_token.kind], right)
        node.line = op_token.row
        return node

    # expr -> term ((+|-) term)*
    # `first` is an already-parsed leading factor (see paren_factor)
    def expr(self, first=None):
        node = self.term(first)

        while self.current_token.kind in (TokenKind.ADD, TokenKind.SUBTRACT):
            op_token = self.eat(self.current_token.kind)
            right = self.term()
            node = Binary(node, op_token.lexeme, right)
            node.line = op_token.row

        return node

    # term -> factor ((*|/) factor)*
    def term(self, first=None):
        node = self.factor() if first is None else first

        while self.current_token.kind in (TokenKind.MULTIPLY, TokenKind.DIVIDE):
            op_token = self.eat(self.current_token.kind)
            right = self.factor()
            node = Binary(node, op_token.lexeme, right)
            node.line = op_token.row

        return node

    # factor -> '(' expr ')' | '-' expr | INT_LIT | IDENTIFIER
    def factor(self):
        tok = self.current_token

        if tok.kind is TokenKind.LEFT_PAREN:
            return self.paren_factor()
        if tok.kind is TokenKind.SUBTRACT:
            # negates the whole expression that follows
            self.eat(TokenKind.SUBTRACT)
            node = Negate(self.expr())
        elif tok.kind is TokenKind.INT_LIT:
            self.eat(TokenKind.INT_LIT)
            node = Number(int(tok.lexeme))
        elif tok.kind is TokenKind.IDENTIFIER:
            self.eat(TokenKind.IDENTIFIER)
            node = Var(tok.lexeme)
        else:
            self.error_here(f"Expected a factor, found {describe_token(tok)}")

        node.line = tok.row
        return node

    def paren_factor(self):
        # A run of '(' is consumed in one loop: parse the innermost expression,
        # then close one level at a time, finishing each enclosing expression
        # with the closed group as its first factor.
        row = self.current_token.row
        depth = 0
        while self.current_token.kind is TokenKind.LEFT_PAREN:
            self.eat(TokenKind.LEFT_PAREN)
            depth += 1

        node = self.expr()
        for level in range(depth, 0, -1):
            self.eat(TokenKind.RIGHT_PAREN)
            node = Paren(node)
            node.line = row
            if level > 1:
                node = self.expr(node)
        return node


def parse(lines):
    return Parser(lines).parse()


def parse_source(text):
    return parse(text.splitlines())


def parse_expression(text):
    """Parse a single arithmetic expression (used by the REPL to auto-print)."""
    parser = Parser([text])
    parser.load_line(0)
    try:
        node = parser.expr()
    except RecursionError:
        raise parser.too_deep() from None
    parser.end_line()
    return node
