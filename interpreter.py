import re
import sys

from ast_nodes import (
    Program, Block, Assign, Display, Input, If, While, For,
    Number, Var, Negate, Paren, Binary, Compare,
)
from errors import ArithmeticFault, InputFormatFault, TabscriptRuntimeError
from memory import Memory

INT_INPUT_RE = re.compile(r"[+-]?[0-9]+")


def truncating_div(a: int, b: int) -> int:
    # integer division rounding toward zero (7 / -2 == -3)
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class Interpreter:
    def __init__(self, stdout=None, stdin=None, prompts: bool = True, trace: bool = False,
                 trace_stream=None, max_steps: int | None = None):
        self.stdout = sys.stdout if stdout is None else stdout
        self.stdin = sys.stdin if stdin is None else stdin
        self.prompts = prompts
        self.trace_enabled = trace
        self.trace_stream = sys.stderr if trace_stream is None else trace_stream
        self.max_steps = max_steps  # set to an int to guard against infinite loops
        self.steps = 0

    def run(self, program, memory=None):
        if not isinstance(program, Program):
            raise TypeError("Interpreter expects a Program node at the top")
        if memory is None:
            memory = Memory()
        self.steps = 0
        for stmt in program.statements:
            try:
                self.exec_stmt(stmt, memory)
            except RecursionError:
                raise TabscriptRuntimeError("program nested too deeply to execute", stmt.line) from None
        return memory

    def step(self, node):
        if self.max_steps is not None:
            self.steps += 1
            if self.steps > self.max_steps:
                raise TabscriptRuntimeError("Step limit exceeded (possible infinite loop)", node.line)
        if self.trace_enabled:
            line = "?" if node.line is None else node.line + 1
            print(f"TRACE line {line}: {node.__class__.__name__}", file=self.trace_stream)

    # -------- statements --------
    def exec_block(self, block, memory):
        for stmt in block.statements:
            self.exec_stmt(stmt, memory)

    def exec_stmt(self, node, memory):
        self.step(node)

        if isinstance(node, Assign):
            memory.put(node.name, self.eval_expr(node.value, memory))
            return

        if isinstance(node, Display):
            self.stdout.write(f"{self.eval_expr(node.expr, memory)}\n")
            return

        if isinstance(node, Input):
            memory.put(node.name, self.read_int(node))
            return

        if isinstance(node, If):
            for condition, body in node.branches:
                if self.eval_bool(condition, memory):
                    self.exec_block(body, memory)
                    return
            if node.else_block is not None:
                self.exec_block(node.else_block, memory)
            return

        if isinstance(node, While):
            while self.eval_bool(node.condition, memory):
                self.exec_block(node.body, memory)
            return

        if isinstance(node, For):
            # bounds are evaluated once; the loop variable lives in the global store
            start = self.eval_expr(node.start_expr, memory)
            end = self.eval_expr(node.end_expr, memory)
            for i in range(start, end + 1):
                memory.put(node.var_name, i)
                self.exec_block(node.body, memory)
            return

        if isinstance(node, Block):
            self.exec_block(node, memory)
            return

        raise TypeError(f"Unknown statement node: {node.__class__.__name__}")

    def read_int(self, node):
        if self.prompts:
            self.stdout.write(f"Enter value for {node.name}: ")
            self.stdout.flush()
        raw = self.stdin.readline()
        if raw == "":
            raise InputFormatFault(f"no input available for {node.name}", node.line)
        text = raw.strip()
        if not INT_INPUT_RE.fullmatch(text):
            raise InputFormatFault(f"invalid integer input \"{text}\" for {node.name}", node.line)
        return int(text)

    # -------- expressions --------
    def eval_expr(self, node, memory) -> int:
        # Post-order walk on an explicit work stack, so long operator chains
        # and deep parentheses are not bounded by Python's recursion limit.
        # Entries are (node, children_done); left is pushed last so it runs first.
        values = []
        work = [(node, False)]
        while work:
            node, children_done = work.pop()

            if isinstance(node, Number):
                values.append(node.value)
            elif isinstance(node, Var):
                values.append(memory.get(node.name))
            elif isinstance(node, Paren):
                work.append((node.expr, False))
            elif isinstance(node, Negate):
                if children_done:
                    values.append(-values.pop())
                else:
                    work.append((node, True))
                    work.append((node.expr, False))
            elif isinstance(node, Binary):
                if children_done:
                    b = values.pop()
                    a = values.pop()
                    values.append(self.apply_op(node, a, b))
                else:
                    work.append((node, True))
                    work.append((node.right, False))
                    work.append((node.left, False))
            else:
                raise TypeError(f"Unknown expression node: {node.__class__.__name__}")

        return values.pop()

    def apply_op(self, node, a: int, b: int) -> int:
        if node.op == "+":
            return a + b
        if node.op == "-":
            return a - b
        if node.op == "*":
            return a * b
        if node.op == "/":
            if b == 0:
                raise ArithmeticFault("division by zero", node.line)
            return truncating_div(a, b)
        raise ValueError(f"Unknown arithmetic operator: {node.op}")

    def eval_bool(self, node, memory) -> bool:
        if not isinstance(node, Compare):
            raise TypeError(f"Unknown boolean node: {node.__class__.__name__}")

        a = self.eval_expr(node.left, memory)
        b = self.eval_expr(node.right, memory)
        if node.op == "<":
            return a < b
        if node.op == "<=":
            return a <= b
        if node.op == ">":
            return a > b
        if node.op == ">=":
            return a >= b
        if node.op == "=":
            return a == b
        if node.op == "/=":
            return a != b
        raise ValueError(f"Unknown relational operator: {node.op}")


def execute(program, memory=None, **options):
    """Run a parsed program against memory (a fresh Memory if omitted) and return the store."""
    return Interpreter(**options).run(program, memory)
