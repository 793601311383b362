class ASTNode:
    # Optional source line (0-based row). Parser sets this.
    line: int | None = None


# ---------- integer expressions ----------

class Number(ASTNode):
    def __init__(self, value):
        self.value = value


class Var(ASTNode):
    def __init__(self, name):
        self.name = name  # original spelling, folded by Memory on lookup


class Negate(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Paren(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Binary(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op  # one of + - * /
        self.right = right


# ---------- boolean expressions ----------

class Compare(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op  # one of < <= > >= = /=
        self.right = right


# ---------- statements ----------

class Block(ASTNode):
    def __init__(self, statements):
        self.statements = tuple(statements)


class Program(ASTNode):
    def __init__(self, statements):
        self.statements = tuple(statements)


class Assign(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value  # expression


class Display(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class Input(ASTNode):
    def __init__(self, name):
        self.name = name


class If(ASTNode):
    def __init__(self, branches, else_block=None):
        # branches: (Compare, Block) pairs, the if first then each elif in order
        self.branches = tuple(branches)
        self.else_block = else_block


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class For(ASTNode):
    def __init__(self, var_name, start_expr, end_expr, body):
        self.var_name = var_name
        self.start_expr = start_expr
        self.end_expr = end_expr
        self.body = body
