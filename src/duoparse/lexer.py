"""duoparse lexer: converts source text into a flat token stream.

Scanning never stops on bad input: malformed fragments still produce a token
(``UNKNOWN`` or a truncated literal) and a ``LexError`` is recorded alongside.
"""

from __future__ import annotations

from duoparse.errors import LexError
from duoparse.tokens import (
    KEYWORDS,
    LanguageProfile,
    Position,
    Span,
    Token,
    TokenType,
    is_binary_digit,
    is_digit,
    is_hex_digit,
    is_ident_char,
    is_ident_start,
)


class Lexer:
    """Tokenize source text for one language profile.

    A lexer is single-use: construct one per source text and call
    :meth:`tokenize` once.
    """

    def __init__(self, source: str, profile: LanguageProfile = LanguageProfile.BOOLEAN) -> None:
        self._source = source
        self._profile = profile
        self._keywords = KEYWORDS[profile]
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._errors: list[LexError] = []
        self._done = False

    @property
    def errors(self) -> tuple[LexError, ...]:
        """Diagnostics recorded so far, in discovery order."""
        return tuple(self._errors)

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list, ending in EOF."""
        if self._done:
            raise RuntimeError("a Lexer can only tokenize once")
        self._done = True

        lex_step = self._lex_cpp if self._profile == LanguageProfile.CPP else self._lex_boolean
        while self._pos < len(self._source):
            lex_step()

        self._emit(TokenType.EOF, self._current_pos())
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, tt: TokenType, start: Position, end: Position | None = None) -> Token:
        """Emit a token covering source[start:end] (end defaults to the cursor)."""
        if end is None:
            end = self._current_pos()
        tok = Token(tt, self._source[start.offset : end.offset], Span(start, end))
        self._tokens.append(tok)
        return tok

    def _error(self, message: str, start: Position, end: Position | None = None) -> None:
        if end is None:
            end = self._current_pos()
        self._errors.append(LexError(message, Span(start, end)))

    def _at_line_start(self) -> bool:
        """True if only whitespace precedes the cursor on the current line."""
        idx = self._pos - 1
        while idx >= 0 and self._source[idx] != "\n":
            if not self._source[idx].isspace():
                return False
            idx -= 1
        return True

    # ------------------------------------------------------------------
    # Boolean profile
    # ------------------------------------------------------------------

    def _lex_boolean(self) -> None:
        ch = self._peek()

        if ch.isspace():
            self._lex_whitespace()
            return

        if is_ident_start(ch):
            self._lex_identifier()
            return

        if ch == ":":
            self._lex_colon_assign()
            return

        if ch == "'":
            self._lex_bool_char()
            return

        if ch in _BOOLEAN_PUNCTUATION:
            start = self._current_pos()
            self._advance()
            self._emit(_BOOLEAN_PUNCTUATION[ch], start)
            return

        self._lex_unknown()

    def _lex_colon_assign(self) -> None:
        start = self._current_pos()
        self._advance()  # consume ':'
        if self._peek() == "=":
            self._advance()
            self._emit(TokenType.ASSIGN_COLON, start)
            return
        # A bare ':' is not part of the boolean grammar
        self._error("unexpected ':' (only ':=' is allowed)", start)
        self._emit(TokenType.UNKNOWN, start)

    def _lex_bool_char(self) -> None:
        start = self._current_pos()
        self._advance()  # opening quote

        if self._peek() in ("T", "F") and self._peek(1) == "'":
            self._advance()
            self._advance()
            self._emit(TokenType.BOOL_CHAR, start)
            return

        # Skip to the next quote, newline or end of input
        while self._peek() not in ("'", "\n", ""):
            self._advance()
        if self._peek() == "'":
            self._advance()
        self._error("invalid boolean literal (expected 'T' or 'F')", start)
        self._emit(TokenType.UNKNOWN, start)

    # ------------------------------------------------------------------
    # C++ profile
    # ------------------------------------------------------------------

    def _lex_cpp(self) -> None:
        ch = self._peek()

        if ch.isspace():
            self._lex_whitespace()
            return

        if ch == "/" and self._peek(1) == "/":
            self._lex_line_comment()
            return

        if ch == "/" and self._peek(1) == "*":
            self._lex_block_comment()
            return

        if ch == "#" and self._at_line_start():
            self._lex_preprocessor()
            return

        if is_ident_start(ch):
            self._lex_identifier()
            return

        if is_digit(ch) or (ch == "." and is_digit(self._peek(1))):
            self._lex_number()
            return

        if ch in ('"', "'"):
            self._lex_quoted(ch)
            return

        if self._lex_operator():
            return

        self._lex_unknown()

    def _lex_line_comment(self) -> None:
        start = self._current_pos()
        while self._peek() not in ("\n", ""):
            self._advance()
        self._emit(TokenType.COMMENT, start)

    def _lex_block_comment(self) -> None:
        start = self._current_pos()
        self._advance()
        self._advance()
        # Unterminated block comments run to end of input
        while self._pos < len(self._source):
            if self._peek() == "*" and self._peek(1) == "/":
                self._advance()
                self._advance()
                break
            self._advance()
        self._emit(TokenType.COMMENT, start)

    def _lex_preprocessor(self) -> None:
        start = self._current_pos()
        while self._peek() not in ("\n", ""):
            self._advance()
        self._emit(TokenType.PREPROCESSOR, start)

    def _lex_quoted(self, quote: str) -> None:
        start = self._current_pos()
        self._advance()  # opening quote
        terminated = False
        while self._peek() not in ("\n", ""):
            ch = self._advance()
            if ch == "\\":
                # Escaped character is kept as-is, not interpreted
                if self._peek() not in ("\n", ""):
                    self._advance()
                continue
            if ch == quote:
                terminated = True
                break

        tt = TokenType.STRING if quote == '"' else TokenType.CHAR
        if not terminated:
            kind = "string" if tt == TokenType.STRING else "character"
            self._error(f"unterminated {kind} literal", start)
        self._emit(tt, start)

    def _lex_operator(self) -> bool:
        start = self._current_pos()

        for op in _MULTI_CHAR_OPERATORS:
            if self._source.startswith(op, self._pos):
                for _ in op:
                    self._advance()
                self._emit(_MULTI_CHAR_TYPES.get(op, TokenType.OPERATOR), start)
                return True

        ch = self._peek()
        if ch in _CPP_PUNCTUATION:
            self._advance()
            self._emit(_CPP_PUNCTUATION[ch], start)
            return True

        if ch in _SINGLE_CHAR_OPERATORS:
            self._advance()
            self._emit(TokenType.OPERATOR, start)
            return True

        return False

    # ------------------------------------------------------------------
    # Numbers (C++ profile)
    # ------------------------------------------------------------------

    def _lex_number(self) -> None:
        start = self._current_pos()

        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            prefix = self._advance() + self._advance()
            if not is_hex_digit(self._peek()):
                self._error(f"invalid hexadecimal literal: no digits after '{prefix}'", start)
            self._consume_digits(is_hex_digit)
        elif self._peek() == "0" and self._peek(1) in ("b", "B"):
            prefix = self._advance() + self._advance()
            if not is_binary_digit(self._peek()):
                self._error(f"invalid binary literal: no digits after '{prefix}'", start)
            self._consume_digits(is_binary_digit)
        else:
            self._consume_digits(is_digit)

            if self._peek() == ".":
                dot = self._current_pos()
                self._advance()
                if not is_digit(self._peek()):
                    self._error("invalid number: expected fractional digits after '.'", dot)
                self._consume_digits(is_digit)

            if self._peek() in ("e", "E"):
                exp = self._current_pos()
                self._advance()
                if self._peek() in ("+", "-"):
                    self._advance()
                if not is_digit(self._peek()):
                    self._error("invalid exponent: expected digits after 'e'", exp)
                self._consume_digits(is_digit)

            if self._peek() == "." and is_digit(self._peek(1)):
                self._lex_extra_fraction(start)
                return

        self._lex_number_suffix(start)
        self._emit(TokenType.NUMBER, start)

    def _lex_extra_fraction(self, start: Position) -> None:
        """Swallow '.digits' groups past the first fraction, keeping the valid prefix."""
        valid_end = self._current_pos()
        while self._peek() == "." and is_digit(self._peek(1)):
            self._advance()
            self._consume_digits(is_digit)
        self._error(
            "invalid number: more than one decimal point (only the first is used)",
            valid_end,
        )
        self._emit(TokenType.NUMBER, start, valid_end)

    def _lex_number_suffix(self, start: Position) -> None:
        suffix_start = self._current_pos()
        while self._peek() in _NUMBER_SUFFIX_CHARS:
            self._advance()
        suffix = self._source[suffix_start.offset : self._pos]

        has_int = any(c in "uUlL" for c in suffix)
        has_float = any(c in "fF" for c in suffix)
        if has_int and has_float:
            self._error(
                f"conflicting suffixes '{suffix}' "
                "(integer and floating-point suffixes cannot be mixed)",
                suffix_start,
            )

    def _consume_digits(self, is_valid) -> None:
        """Consume digits, allowing a ' separator between two valid digits."""
        while True:
            ch = self._peek()
            if is_valid(ch):
                self._advance()
            elif ch == "'" and is_valid(self._peek(1)):
                self._advance()
            else:
                return

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _lex_whitespace(self) -> None:
        start = self._current_pos()
        while self._peek() != "" and self._peek().isspace():
            self._advance()
        self._emit(TokenType.WHITESPACE, start)

    def _lex_identifier(self) -> None:
        start = self._current_pos()
        while is_ident_char(self._peek()):
            self._advance()
        tok_text = self._source[start.offset : self._pos]
        tt = TokenType.KEYWORD if tok_text in self._keywords else TokenType.IDENTIFIER
        self._emit(tt, start)

    def _lex_unknown(self) -> None:
        start = self._current_pos()
        ch = self._advance()
        self._error(f"unknown character {ch!r}", start)
        self._emit(TokenType.UNKNOWN, start)


# Module-level constants
_BOOLEAN_PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ";": TokenType.SEMICOLON,
}

_CPP_PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
}

# Longest first: three-character forms before their two-character prefixes
_MULTI_CHAR_OPERATORS: tuple[str, ...] = (
    "<<=", ">>=",
    "==", "!=", "<=", ">=", "++", "--", "&&", "||", "<<", ">>", "->", "::",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=",
)  # fmt: skip

_MULTI_CHAR_TYPES: dict[str, TokenType] = {
    "->": TokenType.ARROW,
    "::": TokenType.SCOPE,
}

_SINGLE_CHAR_OPERATORS: frozenset[str] = frozenset("+-*/%<>=!&|^~?")

_NUMBER_SUFFIX_CHARS: tuple[str, ...] = ("u", "U", "l", "L", "f", "F")


def scan(
    source: str, profile: LanguageProfile = LanguageProfile.BOOLEAN
) -> tuple[list[Token], tuple[LexError, ...]]:
    """Tokenize source text, returning the tokens and the lexical diagnostics."""
    lexer = Lexer(source, profile)
    tokens = lexer.tokenize()
    return tokens, lexer.errors


def tokenize(source: str, profile: LanguageProfile = LanguageProfile.BOOLEAN) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, profile).tokenize()
