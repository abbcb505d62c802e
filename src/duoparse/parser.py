"""duoparse parser: converts a token stream into an AST.

Both grammars are recursive descent with panic-mode recovery: a syntax error
is recorded, a placeholder node stands in for the broken piece, and parsing
resumes at the next statement boundary. The ``_recovering`` latch keeps one
broken construct from producing a cascade of diagnostics; it is released
whenever a statement has been completed or skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

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
from duoparse.errors import ParseError
from duoparse.lexer import tokenize
from duoparse.tokens import TRIVIA, LanguageProfile, Position, Span, Token, TokenType


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of one parse: a best-effort Program plus syntactic diagnostics.

    ``program`` is None only when the parser hit an internal fault, which is
    then the last entry of ``errors``.
    """

    program: Program | None
    errors: tuple[ParseError, ...]

    @property
    def fatal(self) -> bool:
        return self.program is None


class Parser:
    """Recursive descent parser for both language profiles."""

    def __init__(
        self,
        tokens: Iterable[Token],
        profile: LanguageProfile = LanguageProfile.BOOLEAN,
    ) -> None:
        self._tokens = [t for t in tokens if t.type not in TRIVIA]
        if not self._tokens or self._tokens[-1].type != TokenType.EOF:
            end = self._tokens[-1].span.end if self._tokens else Position(1, 1, 0)
            self._tokens.append(Token(TokenType.EOF, "", Span(end, end)))
        self._profile = profile
        self._pos = 0
        self._recovering = False
        self._errors: list[ParseError] = []
        self._done = False

    def parse(self) -> ParseResult:
        """Parse the whole token stream into a Program."""
        if self._done:
            raise RuntimeError("a Parser can only parse once")
        self._done = True

        try:
            if self._profile == LanguageProfile.CPP:
                program = self._parse_cpp_program()
            else:
                program = self._parse_boolean_program()
        except Exception as exc:
            self._errors.append(ParseError(f"internal parser error: {exc}", None))
            return ParseResult(None, tuple(self._errors))

        return ParseResult(program, tuple(self._errors))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _at_operator(self, operators: Iterable[str]) -> bool:
        tok = self._peek()
        return tok.type == TokenType.OPERATOR and tok.lexeme in operators

    def _at_keyword(self, *words: str) -> bool:
        tok = self._peek()
        return tok.type == TokenType.KEYWORD and tok.lexeme in words

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _expect(self, tt: TokenType, message: str) -> bool:
        """Consume a token of type tt, or report it missing and carry on."""
        if self._at(tt):
            self._advance()
            return True
        self._error_expected(message)
        return False

    def _expect_semicolon(self, context: str) -> None:
        """Consume a statement-ending ';', resynchronizing when it is missing."""
        if self._at(TokenType.SEMICOLON):
            self._advance()
            return
        self._error_expected(f"expected ';' {context}")
        if not self._at(TokenType.RBRACE, TokenType.EOF):
            self._skip_to_semicolon()

    def _ensure_progress(self, before: int) -> None:
        if self._pos == before:
            self._advance()

    # ------------------------------------------------------------------
    # Diagnostics and recovery
    # ------------------------------------------------------------------

    def _error(self, message: str, tok: Token | None = None) -> None:
        if self._recovering:
            return
        self._recovering = True
        if tok is None:
            tok = self._peek()
        self._errors.append(ParseError(message, tok.span))

    def _error_expected(self, message: str) -> None:
        self._error(f"{message}, found {_describe(self._peek())}")

    def _skip_to_semicolon(self) -> None:
        """Skip past the next ';' outside any ()[]{} nesting.

        Unmatched closers are skipped without affecting the depth.
        """
        depth = 0
        while not self._at_eof():
            tok = self._advance()
            if tok.type in _OPENERS:
                depth += 1
            elif tok.type in _CLOSERS:
                depth = max(0, depth - 1)
            elif tok.type == TokenType.SEMICOLON and depth == 0:
                return

    def _parse_guarded(self, parse_one: Callable[[], Node | None]) -> Node | None:
        """Run one statement rule, reporting stack exhaustion as a diagnostic."""
        try:
            return parse_one()
        except RecursionError:
            self._recovering = False
            self._error("expression nested too deeply")
            self._skip_to_semicolon()
            return None

    # ------------------------------------------------------------------
    # Boolean profile
    # ------------------------------------------------------------------

    def _parse_boolean_program(self) -> Program:
        statements: list[Node] = []

        while not self._at_eof():
            if self._at(TokenType.SEMICOLON):
                self._advance()
                continue

            before = self._pos
            stmt = self._parse_guarded(self._parse_boolean_statement)
            if stmt is not None:
                statements.append(stmt)
            self._recovering = False
            self._ensure_progress(before)

        return Program(tuple(statements))

    def _parse_boolean_statement(self) -> Node | None:
        if not self._at(TokenType.IDENTIFIER):
            self._error_expected("expected identifier at start of assignment")
            self._skip_to_semicolon()
            return None
        name_tok = self._advance()

        if not self._at(TokenType.ASSIGN_COLON):
            self._error_expected(f"expected ':=' after '{name_tok.lexeme}'")
            self._skip_to_semicolon()
            return None
        self._advance()

        value = self._parse_boolean_expr()
        self._expect_semicolon("after assignment")
        target = Identifier(name_tok.lexeme, name_tok.line, name_tok.column)
        return Assign(target, ":=", value)

    def _parse_boolean_expr(self) -> Node:
        left = self._parse_boolean_term()
        while self._at_keyword("or", "xor"):
            op = self._advance()
            left = Binary(op.lexeme, left, self._parse_boolean_term())
        return left

    def _parse_boolean_term(self) -> Node:
        left = self._parse_boolean_factor()
        while self._at_keyword("and"):
            op = self._advance()
            left = Binary(op.lexeme, left, self._parse_boolean_factor())
        return left

    def _parse_boolean_factor(self) -> Node:
        if self._at_keyword("not"):
            op = self._advance()
            return Unary(op.lexeme, self._parse_boolean_factor())
        return self._parse_boolean_primary()

    def _parse_boolean_primary(self) -> Node:
        tok = self._peek()

        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(tok.lexeme, tok.line, tok.column)

        if tok.type == TokenType.BOOL_CHAR:
            self._advance()
            return Literal("bool", tok.lexeme, tok.line, tok.column)

        if tok.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_boolean_expr()
            self._expect(TokenType.RPAREN, "expected ')' to close parenthesized expression")
            return expr

        self._error_expected("expected boolean expression")
        if tok.type not in _BOOLEAN_SYNC:
            self._advance()
        return Literal("error", tok.lexeme, tok.line, tok.column)

    # ------------------------------------------------------------------
    # C++ profile: top level and declarations
    # ------------------------------------------------------------------

    def _parse_cpp_program(self) -> Program:
        items: list[Node] = []

        while not self._at_eof():
            if self._at(TokenType.PREPROCESSOR, TokenType.SEMICOLON):
                self._advance()
                continue

            if self._at_keyword("using"):
                self._skip_using()
                continue

            # Stray '}' left over from unparsed enclosing structure
            if self._at(TokenType.RBRACE):
                self._advance()
                continue

            before = self._pos
            item = self._parse_guarded(self._parse_statement)
            if item is not None:
                items.append(item)
            self._recovering = False
            self._ensure_progress(before)

        return Program(tuple(items))

    def _skip_using(self) -> None:
        while not self._at(TokenType.SEMICOLON, TokenType.EOF):
            self._advance()
        if self._at(TokenType.SEMICOLON):
            self._advance()

    def _at_type(self) -> bool:
        tok = self._peek()
        if tok.type == TokenType.KEYWORD:
            return tok.lexeme in _TYPE_KEYWORDS
        return tok.type == TokenType.IDENTIFIER and tok.lexeme == "vector"

    def _parse_type_name(self) -> Identifier:
        first = self._advance()
        words = [first.lexeme]
        # Multi-word builtin types: unsigned long, long double, ...
        while self._at(TokenType.KEYWORD) and self._peek().lexeme in _TYPE_KEYWORDS:
            words.append(self._advance().lexeme)
        self._skip_template_arguments()
        return Identifier(" ".join(words), first.line, first.column)

    def _skip_template_arguments(self) -> None:
        if not self._at_operator(("<",)):
            return
        depth = 0
        while not self._at_eof():
            tok = self._advance()
            if tok.type == TokenType.OPERATOR:
                depth += _ANGLE_DEPTH.get(tok.lexeme, 0)
            if depth <= 0:
                return

    def _parse_declaration(self) -> Node | None:
        type_node = self._parse_type_name()

        if not self._at(TokenType.IDENTIFIER):
            self._error_expected(f"expected name after type '{type_node.name}'")
            if not self._at(TokenType.RBRACE, TokenType.EOF):
                self._skip_to_semicolon()
            return None
        name_tok = self._advance()

        if self._at(TokenType.LPAREN):
            return self._parse_function_rest(type_node, name_tok)

        declarators = [self._parse_declarator(name_tok)]
        while self._at(TokenType.COMMA):
            self._advance()
            if not self._at(TokenType.IDENTIFIER):
                self._error_expected("expected name after ',' in declaration")
                break
            declarators.append(self._parse_declarator(self._advance()))

        self._expect_semicolon("after declaration")
        target = declarators[0] if len(declarators) == 1 else Program(tuple(declarators))
        return Binary("decl", type_node, target)

    def _parse_declarator(self, name_tok: Token) -> Node:
        name = Identifier(name_tok.lexeme, name_tok.line, name_tok.column)
        if self._at_operator(("=",)):
            self._advance()
            return Assign(name, "=", self._parse_expression())
        return name

    def _parse_function_rest(self, type_node: Identifier, name_tok: Token) -> Node:
        # Parameters are skipped as a balanced parenthesis group
        self._advance()  # consume '('
        depth = 1
        while not self._at_eof():
            if self._at(TokenType.LPAREN):
                depth += 1
            elif self._at(TokenType.RPAREN):
                depth -= 1
                if depth == 0:
                    break
            self._advance()

        error_node = Literal("error", name_tok.lexeme, name_tok.line, name_tok.column)
        if not self._expect(
            TokenType.RPAREN, f"expected ')' to close parameter list of '{name_tok.lexeme}'"
        ):
            return error_node

        name = Identifier(name_tok.lexeme, name_tok.line, name_tok.column)

        if self._at(TokenType.LBRACE):
            body = self._parse_block()
            return Binary("func-def", type_node, Binary("func-params-body", name, body))

        if self._at(TokenType.SEMICOLON):
            self._advance()
            return Binary("func-proto", type_node, name)

        self._error_expected(f"expected '{{' or ';' after declaration of '{name_tok.lexeme}'")
        self._skip_to_semicolon()
        return error_node

    # ------------------------------------------------------------------
    # C++ profile: statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Node | None:
        """Parse one statement; None for an empty or unrecoverable one."""
        if self._at(TokenType.SEMICOLON):
            self._advance()
            return None

        if self._at_type():
            return self._parse_declaration()

        if self._at(TokenType.LBRACE):
            return self._parse_block()

        tok = self._peek()
        if tok.type == TokenType.KEYWORD:
            handler = _STATEMENT_KEYWORDS.get(tok.lexeme)
            if handler is not None:
                return handler(self)

        expr = self._parse_expression()
        self._expect_semicolon("after expression")
        return ExprStatement(expr)

    def _parse_substatement(self, release: bool = True) -> Node:
        """Parse a branch or loop body; None becomes a void placeholder.

        With release set, diagnostics from the enclosing header no longer
        latch, so a separate failure in the body is still reported.
        """
        if release:
            self._recovering = False
        tok = self._peek()
        stmt = self._parse_statement()
        if stmt is None:
            return _void(tok)
        return stmt

    def _parse_block(self) -> Program:
        self._advance()  # consume '{'
        statements: list[Node] = []

        while not self._at(TokenType.RBRACE, TokenType.EOF):
            before = self._pos
            stmt = self._parse_guarded(self._parse_statement)
            if stmt is not None:
                statements.append(stmt)
            self._recovering = False
            self._ensure_progress(before)

        self._expect(TokenType.RBRACE, "expected '}' to close block")
        return Program(tuple(statements))

    def _parse_if(self) -> Node:
        self._advance()  # consume 'if'
        self._expect(TokenType.LPAREN, "expected '(' after 'if'")
        condition = self._parse_expression()
        closed = self._expect(TokenType.RPAREN, "expected ')' after if condition")
        then_branch = self._parse_substatement(closed)

        if self._at_keyword("else"):
            self._advance()
            else_branch = self._parse_substatement()
        else:
            else_branch = _void(self._peek())

        return Binary("if", condition, Binary("then-else", then_branch, else_branch))

    def _parse_while(self) -> Node:
        self._advance()  # consume 'while'
        self._expect(TokenType.LPAREN, "expected '(' after 'while'")
        condition = self._parse_expression()
        closed = self._expect(TokenType.RPAREN, "expected ')' after while condition")
        return Binary("while", condition, self._parse_substatement(closed))

    def _parse_do_while(self) -> Node:
        self._advance()  # consume 'do'
        body = self._parse_substatement()

        if self._at_keyword("while"):
            self._advance()
        else:
            self._error_expected("expected 'while' after do-while body")
        self._expect(TokenType.LPAREN, "expected '(' after 'while'")
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "expected ')' after do-while condition")
        self._expect_semicolon("after do-while statement")
        return Binary("do-while", condition, body)

    def _parse_for(self) -> Node:
        self._advance()  # consume 'for'
        self._expect(TokenType.LPAREN, "expected '(' after 'for'")

        init: Node
        if self._at(TokenType.SEMICOLON):
            init = _void(self._advance())
        elif self._at_type():
            tok = self._peek()
            init = self._parse_declaration() or _void(tok)
        else:
            init = self._parse_expression()
            self._expect(TokenType.SEMICOLON, "expected ';' after for initializer")

        if self._at(TokenType.SEMICOLON):
            condition = _void(self._advance())
        else:
            condition = self._parse_expression()
            self._expect(TokenType.SEMICOLON, "expected ';' after for condition")

        if self._at(TokenType.RPAREN):
            increment = _void(self._peek())
        else:
            increment = self._parse_expression()
        closed = self._expect(TokenType.RPAREN, "expected ')' after for clauses")

        body = self._parse_substatement(closed)
        header = Binary("for-header", init, Binary("for-cond", condition, increment))
        return Binary("for", header, body)

    def _parse_jump(self) -> Node:
        kw = self._advance()  # 'break' or 'continue'
        self._expect_semicolon(f"after '{kw.lexeme}'")
        return Unary(kw.lexeme, _void(kw))

    def _parse_return(self) -> Node:
        self._advance()  # consume 'return'
        if self._at(TokenType.SEMICOLON):
            value = _void(self._peek())
        else:
            value = self._parse_expression()
        self._expect_semicolon("after return statement")
        return Unary("return", value)

    # ------------------------------------------------------------------
    # C++ profile: expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Node:
        return self._parse_assignment()

    def _parse_assignment(self) -> Node:
        left = self._parse_binary()
        if self._at_operator(_ASSIGN_OPERATORS):
            op = self._advance()
            return Assign(left, op.lexeme, self._parse_assignment())
        return left

    def _parse_binary(self, min_precedence: int = 1) -> Node:
        """Precedence climbing over the binary operator table, left-associative."""
        left = self._parse_unary()
        while True:
            tok = self._peek()
            if tok.type != TokenType.OPERATOR:
                return left
            precedence = _BINARY_PRECEDENCE.get(tok.lexeme, 0)
            if precedence < min_precedence:
                return left
            self._advance()
            left = Binary(tok.lexeme, left, self._parse_binary(precedence + 1))

    def _parse_unary(self) -> Node:
        if self._at_operator(_PREFIX_OPERATORS):
            op = self._advance()
            return Unary(op.lexeme, self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> Node:
        expr = self._parse_primary()

        while True:
            tok = self._peek()

            if self._at_operator(("++", "--")):
                self._advance()
                expr = Unary(f"post{tok.lexeme}", expr)

            elif tok.type == TokenType.LBRACKET:
                self._advance()
                index = self._parse_expression()
                self._expect(TokenType.RBRACKET, "expected ']' after index")
                expr = Binary("[]", expr, index)

            elif tok.type in (TokenType.DOT, TokenType.ARROW):
                self._advance()
                if not self._at(TokenType.IDENTIFIER):
                    self._error_expected(f"expected member name after '{tok.lexeme}'")
                    return Binary(tok.lexeme, expr, _error_leaf(self._peek()))
                member = self._advance()
                expr = Binary(tok.lexeme, expr, Identifier(member.lexeme, member.line, member.column))

            elif tok.type == TokenType.LPAREN:
                expr = Binary("call", expr, self._parse_call_arguments())

            else:
                return expr

    def _parse_call_arguments(self) -> Program:
        self._advance()  # consume '('
        args: list[Node] = []
        while not self._at(TokenType.RPAREN, TokenType.EOF):
            args.append(self._parse_expression())
            if self._at(TokenType.COMMA):
                self._advance()
            elif not self._at(TokenType.RPAREN):
                break
        self._expect(TokenType.RPAREN, "expected ')' to close argument list")
        return Program(tuple(args))

    def _parse_primary(self) -> Node:
        tok = self._peek()

        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(tok.lexeme, tok.line, tok.column)

        if tok.type in _LITERAL_KINDS:
            self._advance()
            return Literal(_LITERAL_KINDS[tok.type], tok.lexeme, tok.line, tok.column)

        if self._at_keyword("true", "false"):
            self._advance()
            return Literal("bool", tok.lexeme, tok.line, tok.column)

        if tok.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "expected ')' to close parenthesized expression")
            return expr

        # Leave delimiters and operators for the enclosing construct
        if tok.type in _CPP_SYNC or tok.type == TokenType.OPERATOR:
            self._error_expected("expected expression")
            return _error_leaf(tok)

        self._advance()
        self._error(f"unexpected token {_describe(tok)}", tok)
        return _error_leaf(tok)


# Module-level constants
_OPENERS: frozenset[TokenType] = frozenset(
    {TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE}
)
_CLOSERS: frozenset[TokenType] = frozenset(
    {TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE}
)
_BOOLEAN_SYNC: frozenset[TokenType] = frozenset(
    {TokenType.SEMICOLON, TokenType.RPAREN, TokenType.EOF}
)
_CPP_SYNC: frozenset[TokenType] = frozenset(
    {
        TokenType.SEMICOLON,
        TokenType.COMMA,
        TokenType.RPAREN,
        TokenType.RBRACKET,
        TokenType.RBRACE,
        TokenType.EOF,
    }
)
_TYPE_KEYWORDS: frozenset[str] = frozenset(
    {"int", "float", "double", "char", "bool", "void", "long", "short", "unsigned", "signed", "auto"}
)
_ANGLE_DEPTH: dict[str, int] = {"<": 1, ">": -1, ">>": -2}
_LITERAL_KINDS: dict[TokenType, str] = {
    TokenType.NUMBER: "number",
    TokenType.STRING: "string",
    TokenType.CHAR: "char",
}

_ASSIGN_OPERATORS = frozenset({"=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>="})
_BINARY_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3,
    "<": 4, ">": 4, "<=": 4, ">=": 4, "<<": 4, ">>": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6, "%": 6,
}  # fmt: skip
_PREFIX_OPERATORS = frozenset({"!", "-", "+", "++", "--", "~", "&", "*"})

_STATEMENT_KEYWORDS: dict[str, Callable[[Parser], Node]] = {
    "if": Parser._parse_if,
    "while": Parser._parse_while,
    "do": Parser._parse_do_while,
    "for": Parser._parse_for,
    "break": Parser._parse_jump,
    "continue": Parser._parse_jump,
    "return": Parser._parse_return,
}


def _describe(tok: Token) -> str:
    if tok.type == TokenType.EOF:
        return "end of input"
    return f"'{tok.lexeme}'"


def _void(tok: Token) -> Literal:
    return Literal("void", "", tok.line, tok.column)


def _error_leaf(tok: Token) -> Literal:
    return Literal("error", tok.lexeme, tok.line, tok.column)


def parse_program(
    tokens: Iterable[Token], profile: LanguageProfile = LanguageProfile.BOOLEAN
) -> ParseResult:
    """Parse a token sequence (trivia is filtered) into a ParseResult."""
    return Parser(tokens, profile).parse()


def parse(source: str, profile: LanguageProfile = LanguageProfile.BOOLEAN) -> ParseResult:
    """Convenience function: tokenize and parse source text.

    Lexical diagnostics are dropped; use :func:`duoparse.analyze` to keep them.
    """
    return parse_program(tokenize(source, profile), profile)
