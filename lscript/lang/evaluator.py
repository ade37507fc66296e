"""Tree-walking evaluator for lscript. Executes a tree.Program directly, without any intermediate form, against one flat
table of global variables.

Runtime values are plain Python ints and strs. Truthiness: a nonzero int or a non-empty str is true. Logical and
comparison operators always yield the int 0 or 1.

An Evaluator owns its variable table and streams, so independent Evaluators can run in isolation. A single Evaluator
is not safe to share between threads without external locking.
"""

import sys

from lscript.lang.config import Limits, recursion_room, unlimited_int_digits
from lscript.lang.error import ScriptRuntimeError
from lscript.lang.tree import Binary, Operator


def truthy(value):
    return value != 0 if isinstance(value, int) else value != ""


def render(value):
    """Printed form of a value: decimal for ints, verbatim for strs."""
    return str(value)


def int_divide(a, b):
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


COMPARISONS = {
    Operator.EQ: lambda a, b: a == b,
    Operator.NE: lambda a, b: a != b,
    Operator.LT: lambda a, b: a < b,
    Operator.LE: lambda a, b: a <= b,
    Operator.GT: lambda a, b: a > b,
    Operator.GE: lambda a, b: a >= b,
}

ARITHMETIC = {
    Operator.MINUS: lambda a, b: a - b,
    Operator.MUL: lambda a, b: a * b,
    Operator.DIV: int_divide,
}


class Evaluator:
    """Evaluates lscript trees. Variables persist across calls to run, so one Evaluator can serve a whole shell
    session.
    """

    def __init__(self, limits=None, stdin=None, stdout=None):
        self.limits = limits if limits is not None else Limits()
        self.variables = {}  # name: int | str

        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    def reset(self):
        """Forgets every variable, as before a fresh run."""
        self.variables.clear()

    def run(self, program):
        """Executes program for its side effects. Raises ScriptRuntimeError on the first runtime error, including a
        program nested too deeply for the call stack.
        """
        with recursion_room(self.limits.max_frames), unlimited_int_digits():
            try:
                self.evaluate(program)
            except RecursionError:
                raise ScriptRuntimeError("program nested too deeply", program) from None

    def evaluate(self, node):
        """Evaluates node and returns its value. Statements yield 0, except assignment and input which yield the value
        they stored.
        """
        return getattr(self, f"visit_{type(node).__name__}")(node)

    def _slot(self, name, node):
        """Implicitly declares name with value 0 if it does not exist yet."""
        if name not in self.variables:
            if len(self.variables) >= self.limits.max_vars:
                raise ScriptRuntimeError(f"variable limit of {self.limits.max_vars} exceeded", node)
            self.variables[name] = 0

    # expressions

    def visit_IntLiteral(self, node):
        return int(node.value)

    def visit_StringLiteral(self, node):
        return node.value

    def visit_Variable(self, node):
        try:
            return self.variables[node.name]
        except KeyError:
            raise ScriptRuntimeError(f"variable '{node.name}' is not defined", node) from None

    def visit_Unary(self, node):
        operand = self.evaluate(node.operand)

        if node.op is Operator.NOT:
            return int(not truthy(operand))

        if not isinstance(operand, int):
            raise ScriptRuntimeError(f"unary '{node.op.symbol}' operand is not int", node)
        return -operand if node.op is Operator.MINUS else operand

    def visit_Binary(self, node):
        # walk the left spine of a chain like a + b + c iteratively, then fold it back up in source order
        chain = []
        while isinstance(node, Binary):
            chain.append(node)
            node = node.left

        value = self.evaluate(node)
        for binary in reversed(chain):
            value = self._combine(binary, value)
        return value

    def _combine(self, node, left):
        """Applies binary node to its already evaluated left operand, evaluating the right one as needed."""
        op = node.op

        if op is Operator.AND:
            return int(truthy(left) and truthy(self.evaluate(node.right)))
        if op is Operator.OR:
            return int(truthy(left) or truthy(self.evaluate(node.right)))

        right = self.evaluate(node.right)

        if op is Operator.PLUS:
            if isinstance(left, int) and isinstance(right, int):
                return left + right
            return render(left) + render(right)

        if op in COMPARISONS:
            if isinstance(left, str) and isinstance(right, str):
                left, right = left.encode("utf-8"), right.encode("utf-8")
            elif not (isinstance(left, int) and isinstance(right, int)):
                raise ScriptRuntimeError(f"incompatible operand types for '{op.symbol}'", node)
            return int(COMPARISONS[op](left, right))

        if not (isinstance(left, int) and isinstance(right, int)):
            raise ScriptRuntimeError(f"arithmetic operand of '{op.symbol}' is not int", node)
        if op is Operator.DIV and right == 0:
            raise ScriptRuntimeError("division by zero", node)
        return ARITHMETIC[op](left, right)

    # statements

    def visit_Assign(self, node):
        value = self.evaluate(node.value)
        self._slot(node.name, node)
        self.variables[node.name] = value
        return value

    def visit_Output(self, node):
        out = self.stdout
        for idx, arg in enumerate(node.args):
            value = self.evaluate(arg)
            if idx:
                out.write(" ")
            out.write(render(value))
        out.write("\n")
        return 0

    def visit_Input(self, node):
        self._slot(node.name, node)

        out = self.stdout
        out.write(self.limits.input_prompt)
        out.flush()

        line = self.stdin.readline()
        if not line:
            raise ScriptRuntimeError("input failed: end of input stream", node)

        value = line[:-1] if line.endswith("\n") else line
        if value.endswith("\r"):
            value = value[:-1]
        self.variables[node.name] = value
        return value

    def visit_If(self, node):
        if truthy(self.evaluate(node.condition)):
            self.evaluate(node.then_branch)
        elif node.else_branch is not None:
            self.evaluate(node.else_branch)
        return 0

    def visit_Loop(self, node):
        iterations = 0
        while truthy(self.evaluate(node.condition)):
            if iterations >= self.limits.max_iterations:
                raise ScriptRuntimeError(f"loop exceeded maximum of {self.limits.max_iterations} iterations", node)
            self.evaluate(node.body)
            iterations += 1
        return 0

    def visit_Block(self, node):
        for statement in node.statements:
            self.evaluate(statement)
        return 0

    def visit_ExprStmt(self, node):
        self.evaluate(node.expr)
        return 0

    def visit_Program(self, node):
        return self.visit_Block(node)
