"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from duoparse.ast import Binary, Node, Program
from duoparse.lexer import tokenize
from duoparse.parser import ParseResult, parse
from duoparse.tokens import TRIVIA, LanguageProfile, Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns significant tokens (no EOF)."""

    def _lex(source: str, profile: LanguageProfile = LanguageProfile.CPP) -> list[Token]:
        tokens = tokenize(source, profile)
        # Strip trivia and the trailing EOF for convenience
        return [t for t in tokens if t.type not in TRIVIA and t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns the ParseResult."""

    def _parse(source: str, profile: LanguageProfile = LanguageProfile.CPP) -> ParseResult:
        return parse(source, profile)

    return _parse


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_lexemes(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token lexemes match the expected list."""
    actual = [t.lexeme for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def only_child(result: ParseResult) -> Node:
    """Return the single top-level node of a clean parse."""
    assert result.errors == (), f"Unexpected errors: {result.errors}"
    assert isinstance(result.program, Program)
    assert len(result.program.children) == 1, result.program.children
    return result.program.children[0]


def assert_binary(node: Node, operator: str) -> Binary:
    """Assert node is a Binary with the given operator and return it."""
    assert isinstance(node, Binary), f"Expected Binary, got {type(node).__name__}"
    assert node.operator == operator, f"Expected '{operator}', got '{node.operator}'"
    return node
