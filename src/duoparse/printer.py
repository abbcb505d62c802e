"""Human-readable renderings of token streams and ASTs."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from duoparse.ast import (
    Assign,
    Binary,
    ExprStatement,
    Identifier,
    Literal,
    Node,
    Program,
    Unary,
)
from duoparse.tokens import TRIVIA, Token


def format_tree(root: Node | None) -> str:
    """Render an AST as an indented box-drawing tree."""
    if root is None:
        return "<empty>\n"
    lines = [_label(root)]
    _format_children(root, "", lines)
    return "\n".join(lines) + "\n"


def dump_tree(root: Node | None, *, file: TextIO | None = None) -> None:
    """Print a human-readable AST tree to *file* (default: stdout)."""
    (file or sys.stdout).write(format_tree(root))


def format_tokens(tokens: Iterable[Token]) -> str:
    """One line per significant token: line:column, type, lexeme."""
    lines = []
    for tok in tokens:
        if tok.type in TRIVIA:
            continue
        lines.append(f"{tok.line}:{tok.column}\t{tok.type.name:<14}\t{tok.lexeme}")
    return "\n".join(lines) + "\n"


def dump_tokens(tokens: Iterable[Token], *, file: TextIO | None = None) -> None:
    (file or sys.stdout).write(format_tokens(tokens))


def _format_children(node: Node, prefix: str, lines: list[str]) -> None:
    children = _children(node)
    for i, child in enumerate(children):
        last = i == len(children) - 1
        lines.append(f"{prefix}{'└── ' if last else '├── '}{_label(child)}")
        _format_children(child, prefix + ("    " if last else "│   "), lines)


def _children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, Program):
        return node.children
    if isinstance(node, ExprStatement):
        return (node.expr,)
    if isinstance(node, (Assign, Binary)):
        return (node.left, node.right)
    if isinstance(node, Unary):
        return (node.operand,)
    return ()


def _label(node: Node) -> str:
    if isinstance(node, Program):
        return "Program"
    if isinstance(node, ExprStatement):
        return "ExprStmt"
    if isinstance(node, Assign):
        return f"Assign({node.operator})"
    if isinstance(node, Binary):
        return f"Bin({node.operator})"
    if isinstance(node, Unary):
        return f"Un({node.operator})"
    if isinstance(node, Identifier):
        return f"Id({node.name})"
    if isinstance(node, Literal):
        return f"{node.kind}({node.value})"
    raise TypeError(f"not an AST node: {type(node).__name__}")
