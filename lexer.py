import re
from enum import Enum

from errors import LexicalError


class TokenKind(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COLON = ":"
    ASSIGN = ":="
    RANGE = ".."
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "="
    NE = "/="
    EQEQ = "=="
    EOL = ";"
    LET = "let"
    DISPLAY = "display"
    INPUT = "input"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    WHILE = "while"
    FOR = "for"
    IN = "in"
    INT_LIT = "<int>"
    IDENTIFIER = "<identifier>"


KEYWORDS = {"let", "display", "input", "if", "elif", "else", "while", "for", "in"}

# fixed-spelling lexemes (operators, punctuation, keywords) -> kind
FIXED_LEXEMES = {
    kind.value: kind for kind in TokenKind if kind not in (TokenKind.INT_LIT, TokenKind.IDENTIFIER)
}

TWO_CHAR_OPERATORS = (":=", "<=", ">=", "==", "/=", "..")
SINGLE_CHAR_OPERATORS = "+-*/();:<>="

INT_RE = re.compile(r"[0-9]+")
IDENT_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

EOL_LEXEME = ";"


def classify(lexeme):
    """Map lexeme text to its TokenKind, or None if it is not a legal lexeme."""
    kind = FIXED_LEXEMES.get(lexeme)
    if kind is not None:
        return kind
    if INT_RE.fullmatch(lexeme):
        return TokenKind.INT_LIT
    if IDENT_RE.fullmatch(lexeme):
        return TokenKind.IDENTIFIER
    return None


class Token:
    __slots__ = ("_row", "_column", "_lexeme", "_kind")

    def __init__(self, row: int, column: int, lexeme: str):
        if not lexeme or lexeme.isspace():
            raise LexicalError("lexeme cannot be blank", row, column)
        if row < 0 or column < 0:
            raise LexicalError(f"negative token position ({row}, {column})", max(row, 0), max(column, 0))
        kind = classify(lexeme)
        if kind is None:
            raise LexicalError(f"invalid lexeme \"{lexeme}\"", row, column)
        self._row = row
        self._column = column
        self._lexeme = lexeme
        self._kind = kind

    @property
    def row(self) -> int:
        return self._row

    @property
    def column(self) -> int:
        return self._column

    @property
    def lexeme(self) -> str:
        return self._lexeme

    @property
    def kind(self) -> TokenKind:
        return self._kind

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self._row, self._column, self._lexeme) == (other._row, other._column, other._lexeme)

    def __hash__(self):
        return hash((self._row, self._column, self._lexeme))

    def __repr__(self):
        if self._kind in (TokenKind.INT_LIT, TokenKind.IDENTIFIER):
            return f"{self._kind.name}({self._lexeme})"
        return f"{self._kind.name}"


class LexicalAnalyzer:
    """Turns one source line at a time into tokens.

    Call analyze() with a line and its row, then pull tokens with get_token().
    Once the line is used up get_token() keeps returning the EOL token.
    """

    def __init__(self):
        self.tokens = []
        self.index = 0

    def analyze(self, line: str, row: int):
        self.text = line.strip()
        self.row = row
        self.pos = 0
        self.current_char = self.text[0] if self.text else None
        self.tokens = self.tokenize()
        self.index = 0
        return self.tokens

    def advance(self, n=1):
        self.pos += n
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek_char(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def read_number(self):
        start = self.pos
        while self.current_char is not None and "0" <= self.current_char <= "9":
            self.advance()
        return Token(self.row, start, self.text[start:self.pos])

    def read_word(self):
        start = self.pos
        while self.current_char is not None and (
            self.current_char.isascii() and (self.current_char.isalnum() or self.current_char == "_")
        ):
            self.advance()
        word = self.text[start:self.pos]
        # keywords are case-insensitive and stored in their canonical spelling
        if word.lower() in KEYWORDS:
            word = word.lower()
        return Token(self.row, start, word)

    def tokenize(self):
        tokens = []
        while self.current_char is not None:
            if self.current_char.isspace():
                self.skip_whitespace()
                continue

            start = self.pos
            pair = self.current_char + (self.peek_char() or "")
            if pair in TWO_CHAR_OPERATORS:
                self.advance(2)
                tokens.append(Token(self.row, start, pair))
                continue

            if self.current_char in SINGLE_CHAR_OPERATORS:
                ch = self.current_char
                self.advance()
                tokens.append(Token(self.row, start, ch))
                continue

            if "0" <= self.current_char <= "9":
                tokens.append(self.read_number())
                continue

            if self.current_char.isascii() and self.current_char.isalpha():
                tokens.append(self.read_word())
                continue

            # unknown character: Token() rejects it with its position
            ch = self.current_char
            self.advance()
            tokens.append(Token(self.row, start, ch))

        tokens.append(Token(self.row, len(self.text), EOL_LEXEME))
        return tokens

    def get_token(self) -> Token:
        if self.index >= len(self.tokens):
            return self.tokens[-1]
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def peek(self) -> Token:
        if self.index >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.index]
