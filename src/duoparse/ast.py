"""AST node types shared by both language profiles.

The node set is closed: every construct of either grammar maps onto one of
these seven shapes, with ``Binary.operator`` doubling as the tag for control
constructs (``if``, ``while``, ``decl``, ...). No child is ever None; missing
branches are ``Literal("void", ...)`` and failed ones ``Literal("error", ...)``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Program:
    """Ordered node sequence: the root, a block, or a call's argument list."""

    children: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class ExprStatement:
    """Expression used as a statement."""

    expr: Node


@dataclass(frozen=True, slots=True)
class Assign:
    """Assignment: ':=' in the boolean profile, '=' or 'op=' in C++."""

    left: Node
    operator: str
    right: Node


@dataclass(frozen=True, slots=True)
class Binary:
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True)
class Unary:
    operator: str
    operand: Node


@dataclass(frozen=True, slots=True)
class Identifier:
    name: str
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Literal:
    """Leaf value; kind is number, string, char, bool, void or error."""

    kind: str
    value: str
    line: int
    column: int


Node = Program | ExprStatement | Assign | Binary | Unary | Identifier | Literal
