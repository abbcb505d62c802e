"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class LanguageProfile(Enum):
    """Selects the grammar and keyword set for one scan/parse."""

    BOOLEAN = "boolean"  # := assignments over or/xor/and/not
    CPP = "cpp"  # restricted C++ statements and expressions


class TokenType(Enum):
    # Content
    IDENTIFIER = auto()  # [A-Za-z_][A-Za-z0-9_]*
    NUMBER = auto()  # numeric literal, undecoded
    STRING = auto()  # "..."
    CHAR = auto()  # '...'
    BOOL_CHAR = auto()  # 'T' or 'F' (boolean profile)
    KEYWORD = auto()
    OPERATOR = auto()

    # Structural
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    SEMICOLON = auto()  # ;
    COMMA = auto()  # ,
    DOT = auto()  # .
    COLON = auto()  # :
    SCOPE = auto()  # ::
    ARROW = auto()  # ->
    ASSIGN_COLON = auto()  # := (boolean profile)

    # Trivia and directives
    PREPROCESSOR = auto()  # whole '#...' line
    COMMENT = auto()
    WHITESPACE = auto()

    UNKNOWN = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with its exact source text."""

    type: TokenType
    lexeme: str
    span: Span

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column


TRIVIA: frozenset[TokenType] = frozenset({TokenType.WHITESPACE, TokenType.COMMENT})

BOOLEAN_KEYWORDS: frozenset[str] = frozenset({"or", "xor", "and", "not"})

CPP_KEYWORDS: frozenset[str] = frozenset(
    {
        "alignas", "alignof", "and", "and_eq", "asm", "auto", "bitand", "bitor",
        "bool", "break", "case", "catch", "char", "char8_t", "char16_t", "char32_t",
        "class", "compl", "const", "constexpr", "const_cast", "continue", "decltype",
        "default", "delete", "do", "double", "dynamic_cast", "else", "enum",
        "explicit", "export", "extern", "false", "float", "for", "friend", "goto",
        "if", "inline", "int", "long", "mutable", "namespace", "new", "noexcept",
        "not", "not_eq", "nullptr", "operator", "or", "or_eq", "private",
        "protected", "public", "register", "reinterpret_cast", "return", "short",
        "signed", "sizeof", "static", "static_cast", "struct", "switch", "template",
        "this", "thread_local", "throw", "true", "try", "typedef", "typeid",
        "typename", "union", "unsigned", "using", "virtual", "void", "volatile",
        "wchar_t", "while", "xor", "xor_eq",
    }
)  # fmt: skip

KEYWORDS: dict[LanguageProfile, frozenset[str]] = {
    LanguageProfile.BOOLEAN: BOOLEAN_KEYWORDS,
    LanguageProfile.CPP: CPP_KEYWORDS,
}


def is_ident_start(ch: str) -> bool:
    """Return True if ch can start an identifier."""
    return ch.isascii() and (ch.isalpha() or ch == "_")


def is_ident_char(ch: str) -> bool:
    """Return True if ch can continue an identifier."""
    return ch.isascii() and (ch.isalnum() or ch == "_")


def is_digit(ch: str) -> bool:
    return ch != "" and ch in "0123456789"


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return ch != "" and ch in "0123456789abcdefABCDEF"


def is_binary_digit(ch: str) -> bool:
    return ch != "" and ch in "01"


DEFAULT_EXTENSIONS: dict[str, LanguageProfile] = {
    ".cpp": LanguageProfile.CPP,
    ".cc": LanguageProfile.CPP,
    ".cxx": LanguageProfile.CPP,
    ".hpp": LanguageProfile.CPP,
    ".h": LanguageProfile.CPP,
    ".bool": LanguageProfile.BOOLEAN,
    ".b14": LanguageProfile.BOOLEAN,
}


def profile_for_filename(
    name: str, extensions: dict[str, LanguageProfile] | None = None
) -> LanguageProfile | None:
    """Return the profile registered for name's suffix, or None if unknown."""
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS
    dot = name.rfind(".")
    if dot <= 0 or "/" in name[dot:]:
        return None
    return extensions.get(name[dot:].lower())
