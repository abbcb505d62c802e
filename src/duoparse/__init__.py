"""Error-tolerant front end for a boolean assignment language and a C++ subset."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from duoparse.tokens import LanguageProfile

if TYPE_CHECKING:
    from duoparse.ast import Program
    from duoparse.errors import LexError, ParseError
    from duoparse.tokens import Token

__version__ = "0.1.0"

__all__ = ["Analysis", "LanguageProfile", "analyze"]


@dataclass(frozen=True, slots=True)
class Analysis:
    """Everything the front end produces for one source text."""

    tokens: tuple[Token, ...]
    lex_errors: tuple[LexError, ...]
    program: Program | None
    parse_errors: tuple[ParseError, ...]

    @property
    def ok(self) -> bool:
        """True only when neither stage reported a diagnostic."""
        return not self.lex_errors and not self.parse_errors


def analyze(source: str, profile: LanguageProfile = LanguageProfile.BOOLEAN) -> Analysis:
    """Tokenize and parse source text, keeping both diagnostic lists."""
    from duoparse.lexer import scan
    from duoparse.parser import parse_program

    tokens, lex_errors = scan(source, profile)
    result = parse_program(tokens, profile)
    return Analysis(tuple(tokens), lex_errors, result.program, result.errors)
