"""Tests for token classification in both profiles."""

from __future__ import annotations

import pytest

from duoparse.lexer import Lexer, scan, tokenize
from duoparse.tokens import (
    BOOLEAN_KEYWORDS,
    LanguageProfile,
    TokenType,
    is_digit,
    is_hex_digit,
    is_ident_char,
    is_ident_start,
    profile_for_filename,
)

from tests.conftest import assert_lexemes, assert_types

A = LanguageProfile.BOOLEAN
B = LanguageProfile.CPP


class TestCharacterClasses:
    def test_ident_start(self) -> None:
        assert is_ident_start("a")
        assert is_ident_start("_")
        assert not is_ident_start("1")
        assert not is_ident_start("é")
        assert not is_ident_start("")

    def test_ident_char(self) -> None:
        assert is_ident_char("9")
        assert not is_ident_char("-")
        assert not is_ident_char("")

    def test_digits(self) -> None:
        assert is_digit("7")
        assert not is_digit("")
        assert not is_digit("a")
        assert is_hex_digit("F")
        assert not is_hex_digit("g")


class TestBooleanTokens:
    def test_assignment(self, lex) -> None:
        tokens = lex("x := 'T';", A)
        assert_types(
            tokens,
            [TokenType.IDENTIFIER, TokenType.ASSIGN_COLON, TokenType.BOOL_CHAR, TokenType.SEMICOLON],
        )
        assert_lexemes(tokens, ["x", ":=", "'T'", ";"])

    def test_keywords(self, lex) -> None:
        tokens = lex("or xor and not orange", A)
        assert [t.type for t in tokens[:4]] == [TokenType.KEYWORD] * 4
        assert tokens[4].type == TokenType.IDENTIFIER
        assert {t.lexeme for t in tokens[:4]} == BOOLEAN_KEYWORDS

    def test_cpp_keywords_are_identifiers(self, lex) -> None:
        tokens = lex("int while", A)
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.IDENTIFIER])

    def test_parens(self, lex) -> None:
        tokens = lex("(a)", A)
        assert_types(tokens, [TokenType.LPAREN, TokenType.IDENTIFIER, TokenType.RPAREN])

    def test_false_literal(self, lex) -> None:
        tokens = lex("'F'", A)
        assert_types(tokens, [TokenType.BOOL_CHAR])


class TestCppTokens:
    def test_keywords_and_identifiers(self, lex) -> None:
        tokens = lex("int count return true", B)
        assert_types(
            tokens,
            [TokenType.KEYWORD, TokenType.IDENTIFIER, TokenType.KEYWORD, TokenType.KEYWORD],
        )

    def test_structural(self, lex) -> None:
        tokens = lex("(){}[];,.:", B)
        assert_types(
            tokens,
            [
                TokenType.LPAREN,
                TokenType.RPAREN,
                TokenType.LBRACE,
                TokenType.RBRACE,
                TokenType.LBRACKET,
                TokenType.RBRACKET,
                TokenType.SEMICOLON,
                TokenType.COMMA,
                TokenType.DOT,
                TokenType.COLON,
            ],
        )

    def test_scope_and_arrow(self, lex) -> None:
        tokens = lex("std::x p->y", B)
        assert_types(
            tokens,
            [
                TokenType.IDENTIFIER,
                TokenType.SCOPE,
                TokenType.IDENTIFIER,
                TokenType.IDENTIFIER,
                TokenType.ARROW,
                TokenType.IDENTIFIER,
            ],
        )

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("a<<=b", ["a", "<<=", "b"]),
            ("a>>=b", ["a", ">>=", "b"]),
            ("a<<b", ["a", "<<", "b"]),
            ("a<=b", ["a", "<=", "b"]),
            ("a<b", ["a", "<", "b"]),
            ("i++", ["i", "++"]),
            ("a&&b||c", ["a", "&&", "b", "||", "c"]),
            ("x+=1", ["x", "+=", "1"]),
            ("!a", ["!", "a"]),
            ("a?b", ["a", "?", "b"]),
        ],
    )
    def test_longest_match(self, lex, source: str, expected: list[str]) -> None:
        assert_lexemes(lex(source, B), expected)

    def test_operators_are_operator_tokens(self, lex) -> None:
        tokens = lex("+ - * / % < > = ! & | ^ ~ ?", B)
        assert all(t.type == TokenType.OPERATOR for t in tokens)
        assert len(tokens) == 14


class TestTrivia:
    def test_whitespace_token_kept(self) -> None:
        tokens = tokenize("a  b", B)
        assert_types(
            tokens,
            [TokenType.IDENTIFIER, TokenType.WHITESPACE, TokenType.IDENTIFIER, TokenType.EOF],
        )
        assert tokens[1].lexeme == "  "

    def test_single_eof(self) -> None:
        tokens = tokenize("", A)
        assert_types(tokens, [TokenType.EOF])
        assert tokens[0].lexeme == ""

    def test_eof_position(self) -> None:
        tokens = tokenize("ab\ncd", B)
        eof = tokens[-1]
        assert eof.type == TokenType.EOF
        assert (eof.line, eof.column) == (2, 3)


class TestPositions:
    def test_line_and_column(self, lex) -> None:
        tokens = lex("x := a;\n  y := b;", A)
        y = tokens[4]
        assert y.lexeme == "y"
        assert (y.line, y.column) == (2, 3)

    def test_offsets_slice_source(self) -> None:
        source = "int x = 0x1F; // hi\nfloat y;"
        for tok in tokenize(source, B):
            assert source[tok.span.start.offset : tok.span.end.offset] == tok.lexeme


class TestLexerLifecycle:
    def test_tokenize_twice_raises(self) -> None:
        lexer = Lexer("x", A)
        lexer.tokenize()
        with pytest.raises(RuntimeError):
            lexer.tokenize()

    def test_scan_returns_errors_tuple(self) -> None:
        tokens, errors = scan("x := 'T';", A)
        assert tokens[-1].type == TokenType.EOF
        assert errors == ()


class TestProfileForFilename:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("main.cpp", B),
            ("MAIN.CPP", B),
            ("util.h", B),
            ("rules.bool", A),
            ("notes.txt", None),
            ("Makefile", None),
            (".cpp", None),
        ],
    )
    def test_builtin_mapping(self, name: str, expected) -> None:
        assert profile_for_filename(name) == expected

    def test_custom_mapping(self) -> None:
        assert profile_for_filename("a.bx", {".bx": A}) == A
        assert profile_for_filename("a.cpp", {".bx": A}) is None
