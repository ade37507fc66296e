"""Abstract syntax tree for lscript. One class per node kind; every node records the source position it was parsed
from so runtime errors can point back at it.

Children are plain owned references and the tree is never mutated once the parser returns it.
"""

from dataclasses import dataclass, fields
from enum import IntEnum, auto
from typing import List, Optional


class Operator(IntEnum):
    """Operator sub-tag of Unary and Binary nodes."""
    PLUS = auto()
    MINUS = auto()
    MUL = auto()
    DIV = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()

    @property
    def symbol(self):
        return SYMBOLS[self]


SYMBOLS = {
    Operator.PLUS: "+",
    Operator.MINUS: "-",
    Operator.MUL: "*",
    Operator.DIV: "/",
    Operator.EQ: "==",
    Operator.NE: "!=",
    Operator.LT: "<",
    Operator.LE: "<=",
    Operator.GT: ">",
    Operator.GE: ">=",
    Operator.AND: "&&",
    Operator.OR: "||",
    Operator.NOT: "!",
}


@dataclass
class Node:
    line: int
    col: int

    def children(self):
        """Child nodes in source order."""
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                yield from value

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Node>(<attr>=<value>, ..., nodes=[
            <Node>(<attr>=<value>, ..., nodes=[
                ...
                <Node>(<attr>=<value>)  # <-- if there are no children
            ])
        ])
        """
        attrs = []
        for field in fields(self):
            value = getattr(self, field.name)
            if field.name in ("line", "col") or value is None or isinstance(value, (Node, list)):
                continue
            attrs.append(f"{field.name}={value.name if isinstance(value, Operator) else repr(value)}")
        attrs.append(f"at={self.line}:{self.col}")

        result = f"{'    ' * indents}{type(self).__name__}({', '.join(attrs)}"
        children = list(self.children())
        if children:
            result += ", nodes=["
            for child in children:
                result += "\n" + child.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"


@dataclass
class IntLiteral(Node):
    value: str  # digit text as written


@dataclass
class StringLiteral(Node):
    value: str  # decoded contents


@dataclass
class Variable(Node):
    name: str


@dataclass
class Unary(Node):
    op: Operator
    operand: Node


@dataclass
class Binary(Node):
    op: Operator
    left: Node
    right: Node


@dataclass
class Assign(Node):
    name: str
    value: Node


@dataclass
class Output(Node):
    args: List[Node]


@dataclass
class Input(Node):
    name: str


@dataclass
class If(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node] = None


@dataclass
class Loop(Node):
    condition: Node
    body: Node


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class ExprStmt(Node):
    """Bare expression statement. Accepted by the grammar, evaluated, and its value thrown away."""
    expr: Node


@dataclass
class Program(Node):
    statements: List[Node]
