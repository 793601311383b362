class TabscriptError(Exception):
    kind = "Error"

    def __init__(self, message: str, row: int | None = None, column: int | None = None):
        super().__init__(message)
        self.message = message
        self.row = row        # 0-based source line index
        self.column = column  # 0-based offset in the trimmed line

    def format(self, indent: str = "") -> str:
        if self.row is None:
            return f"{indent}{self.kind}: {self.message}"
        if self.column is None:
            return f"{indent}{self.kind} at line {self.row + 1}: {self.message}"
        return f"{indent}{self.kind} at line {self.row + 1}, col {self.column + 1}: {self.message}"

    def __str__(self) -> str:
        return self.format()


class LexicalError(TabscriptError):
    kind = "Lexical error"


class TabscriptSyntaxError(TabscriptError):
    kind = "Syntax error"


class TabscriptRuntimeError(TabscriptError):
    kind = "Runtime error"


class ArithmeticFault(TabscriptRuntimeError):
    kind = "Arithmetic fault"


class InputFormatFault(TabscriptRuntimeError):
    kind = "Input format fault"
