"""Monkey parser — Pratt (top-down operator precedence) over a token stream.

Errors are collected rather than raised: the parser always hands back a
(possibly partial) Program, and callers check `errors` before using it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import IntEnum

from .ast import (
    ArrayLiteral,
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    HashLiteral,
    Identifier,
    IfExpression,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
)
from .errors import MonkeyError, recursion_limit
from .tokens import (
    TK_ASSIGN,
    TK_ASTERISK,
    TK_BANG,
    TK_COLON,
    TK_COMMA,
    TK_ELSE,
    TK_EOF,
    TK_EQ,
    TK_FALSE,
    TK_FUNCTION,
    TK_GT,
    TK_IDENT,
    TK_IF,
    TK_ILLEGAL,
    TK_INT,
    TK_LBRACE,
    TK_LBRACKET,
    TK_LET,
    TK_LPAREN,
    TK_LT,
    TK_MINUS,
    TK_NOT_EQ,
    TK_PLUS,
    TK_RBRACE,
    TK_RBRACKET,
    TK_RETURN,
    TK_RPAREN,
    TK_SEMICOLON,
    TK_SLASH,
    TK_STRING,
    TK_TRUE,
    Lexer,
    Token,
)

logger = logging.getLogger(__name__)

INT64_MAX = 2**63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2  # ==
    LESSGREATER = 3  # > or <
    SUM = 4  # +
    PRODUCT = 5  # *
    PREFIX = 6  # -X or !X
    CALL = 7  # myFunction(X)
    INDEX = 8  # array[index]


PRECEDENCES: dict[str, Precedence] = {
    TK_EQ: Precedence.EQUALS,
    TK_NOT_EQ: Precedence.EQUALS,
    TK_LT: Precedence.LESSGREATER,
    TK_GT: Precedence.LESSGREATER,
    TK_PLUS: Precedence.SUM,
    TK_MINUS: Precedence.SUM,
    TK_ASTERISK: Precedence.PRODUCT,
    TK_SLASH: Precedence.PRODUCT,
    TK_LPAREN: Precedence.CALL,
    TK_LBRACKET: Precedence.INDEX,
}

PrefixParseFn = Callable[[], Expression | None]
InfixParseFn = Callable[[Expression], Expression | None]


class ParseError(MonkeyError):
    """All errors collected while parsing one input."""

    def __init__(self, errors: list[str]):
        super().__init__("\n".join(errors))
        self.errors: list[str] = list(errors)


# ── Tracing ──────────────────────────────────────────────────


def _tracing_enabled() -> bool:
    return "TRACE_PARSER" in os.environ


class _Tracer:
    """BEGIN/END log lines per parselet, indented by nesting depth."""

    def __init__(self, enabled: bool):
        self.enabled: bool = enabled
        self.level: int = 0

    @contextmanager
    def trace(self, msg: str) -> Iterator[None]:
        if not self.enabled:
            yield
            return
        self.level += 1
        logger.debug("%sBEGIN %s", "\t" * (self.level - 1), msg)
        try:
            yield
        finally:
            logger.debug("%sEND %s", "\t" * (self.level - 1), msg)
            self.level -= 1


class Parser:
    """Pratt parser for Monkey."""

    def __init__(self, lexer: Lexer, *, trace: bool | None = None):
        self.lexer: Lexer = lexer
        self.errors: list[str] = []
        self._tracer = _Tracer(_tracing_enabled() if trace is None else trace)

        self.prefix_parse_fns: dict[str, PrefixParseFn] = {
            TK_IDENT: self.parse_identifier,
            TK_INT: self.parse_integer_literal,
            TK_STRING: self.parse_string_literal,
            TK_TRUE: self.parse_boolean,
            TK_FALSE: self.parse_boolean,
            TK_BANG: self.parse_prefix_expression,
            TK_MINUS: self.parse_prefix_expression,
            TK_LPAREN: self.parse_grouped_expression,
            TK_IF: self.parse_if_expression,
            TK_FUNCTION: self.parse_function_literal,
            TK_LBRACKET: self.parse_array_literal,
            TK_LBRACE: self.parse_hash_literal,
        }
        self.infix_parse_fns: dict[str, InfixParseFn] = {
            TK_PLUS: self.parse_infix_expression,
            TK_MINUS: self.parse_infix_expression,
            TK_ASTERISK: self.parse_infix_expression,
            TK_SLASH: self.parse_infix_expression,
            TK_EQ: self.parse_infix_expression,
            TK_NOT_EQ: self.parse_infix_expression,
            TK_LT: self.parse_infix_expression,
            TK_GT: self.parse_infix_expression,
            TK_LPAREN: self.parse_call_expression,
            TK_LBRACKET: self.parse_index_expression,
        }

        # Read two tokens so current and peek are both set
        self.cur_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()

    # ── Helpers ──────────────────────────────────────────────

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, type_: str) -> bool:
        return self.cur_token.type == type_

    def peek_token_is(self, type_: str) -> bool:
        return self.peek_token.type == type_

    def expect_peek(self, type_: str) -> bool:
        if self.peek_token_is(type_):
            self.next_token()
            return True
        self.peek_error(type_)
        return False

    def peek_error(self, type_: str) -> None:
        self.errors.append(
            "expected next token to be "
            + type_
            + ", got "
            + self.peek_token.type
            + " instead"
        )

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    def no_prefix_parse_fn_error(self, tok: Token) -> None:
        if tok.type == TK_ILLEGAL and tok.literal.startswith('"'):
            self.errors.append("unterminated string literal")
            return
        self.errors.append("no prefix parse function for " + tok.type + " found")

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Program:
        program = Program()
        try:
            with recursion_limit():
                while not self.cur_token_is(TK_EOF):
                    stmt = self.parse_statement()
                    if stmt is not None:
                        program.statements.append(stmt)
                    self.next_token()
        except RecursionError:
            self.errors.append("expression nested too deeply")
        return program

    def parse_statement(self) -> Statement | None:
        if self.cur_token.type == TK_LET:
            return self.parse_let_statement()
        if self.cur_token.type == TK_RETURN:
            return self.parse_return_statement()
        return self.parse_expression_statement()

    # ── Statements ───────────────────────────────────────────

    def parse_let_statement(self) -> LetStatement | None:
        with self._tracer.trace("parse_let_statement"):
            tok = self.cur_token
            if not self.expect_peek(TK_IDENT):
                return None
            name = Identifier(self.cur_token, self.cur_token.literal)
            if not self.expect_peek(TK_ASSIGN):
                return None
            self.next_token()
            value = self.parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            if self.peek_token_is(TK_SEMICOLON):
                self.next_token()
            return LetStatement(tok, name, value)

    def parse_return_statement(self) -> ReturnStatement | None:
        with self._tracer.trace("parse_return_statement"):
            tok = self.cur_token
            self.next_token()
            value = self.parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            if self.peek_token_is(TK_SEMICOLON):
                self.next_token()
            return ReturnStatement(tok, value)

    def parse_expression_statement(self) -> ExpressionStatement | None:
        with self._tracer.trace("parse_expression_statement"):
            tok = self.cur_token
            expr = self.parse_expression(Precedence.LOWEST)
            if expr is None:
                return None
            if self.peek_token_is(TK_SEMICOLON):
                self.next_token()
            return ExpressionStatement(tok, expr)

    def parse_block_statement(self) -> BlockStatement:
        with self._tracer.trace("parse_block_statement"):
            block = BlockStatement(self.cur_token, [])
            self.next_token()
            while not self.cur_token_is(TK_RBRACE) and not self.cur_token_is(TK_EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    block.statements.append(stmt)
                self.next_token()
            if self.cur_token_is(TK_EOF):
                self.errors.append(
                    "expected next token to be " + TK_RBRACE + ", got EOF instead"
                )
            return block

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self, precedence: Precedence) -> Expression | None:
        with self._tracer.trace("parse_expression"):
            prefix = self.prefix_parse_fns.get(self.cur_token.type)
            if prefix is None:
                self.no_prefix_parse_fn_error(self.cur_token)
                return None
            left = prefix()
            if left is None:
                return None
            while (
                not self.peek_token_is(TK_SEMICOLON)
                and precedence < self.peek_precedence()
            ):
                infix = self.infix_parse_fns.get(self.peek_token.type)
                if infix is None:
                    return left
                self.next_token()
                left = infix(left)
                if left is None:
                    return None
            return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Expression | None:
        with self._tracer.trace("parse_integer_literal"):
            tok = self.cur_token
            value = int(tok.literal)
            if value > INT64_MAX:
                self.errors.append("could not parse " + tok.literal + " as integer")
                return None
            return IntegerLiteral(tok, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self.cur_token_is(TK_TRUE))

    def parse_prefix_expression(self) -> Expression | None:
        with self._tracer.trace("parse_prefix_expression"):
            tok = self.cur_token
            self.next_token()
            right = self.parse_expression(Precedence.PREFIX)
            if right is None:
                return None
            return PrefixExpression(tok, tok.literal, right)

    def parse_infix_expression(self, left: Expression) -> Expression | None:
        with self._tracer.trace("parse_infix_expression"):
            tok = self.cur_token
            precedence = self.cur_precedence()
            self.next_token()
            right = self.parse_expression(precedence)
            if right is None:
                return None
            return InfixExpression(tok, left, tok.literal, right)

    def parse_grouped_expression(self) -> Expression | None:
        with self._tracer.trace("parse_grouped_expression"):
            self.next_token()
            expr = self.parse_expression(Precedence.LOWEST)
            if expr is None:
                return None
            if not self.expect_peek(TK_RPAREN):
                return None
            return expr

    def parse_if_expression(self) -> Expression | None:
        with self._tracer.trace("parse_if_expression"):
            tok = self.cur_token
            self.next_token()
            condition = self.parse_expression(Precedence.LOWEST)
            if condition is None:
                return None
            if not self.expect_peek(TK_LBRACE):
                return None
            consequence = self.parse_block_statement()
            alternative: BlockStatement | None = None
            if self.peek_token_is(TK_ELSE):
                self.next_token()
                if not self.expect_peek(TK_LBRACE):
                    return None
                alternative = self.parse_block_statement()
            return IfExpression(tok, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression | None:
        with self._tracer.trace("parse_function_literal"):
            tok = self.cur_token
            if not self.expect_peek(TK_LPAREN):
                return None
            parameters = self.parse_function_parameters()
            if parameters is None:
                return None
            if not self.expect_peek(TK_LBRACE):
                return None
            body = self.parse_block_statement()
            return FunctionLiteral(tok, parameters, body)

    def parse_function_parameters(self) -> list[Identifier] | None:
        identifiers: list[Identifier] = []
        if self.peek_token_is(TK_RPAREN):
            self.next_token()
            return identifiers
        if not self.expect_peek(TK_IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))
        while self.peek_token_is(TK_COMMA):
            self.next_token()
            if not self.expect_peek(TK_IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))
        if not self.expect_peek(TK_RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: Expression) -> Expression | None:
        with self._tracer.trace("parse_call_expression"):
            tok = self.cur_token
            arguments = self.parse_expression_list(TK_RPAREN)
            if arguments is None:
                return None
            return CallExpression(tok, function, arguments)

    def parse_expression_list(self, end: str) -> list[Expression] | None:
        """Comma-separated expressions up to `end`; may be empty."""
        items: list[Expression] = []
        if self.peek_token_is(end):
            self.next_token()
            return items
        self.next_token()
        expr = self.parse_expression(Precedence.LOWEST)
        if expr is None:
            return None
        items.append(expr)
        while self.peek_token_is(TK_COMMA):
            self.next_token()
            self.next_token()
            expr = self.parse_expression(Precedence.LOWEST)
            if expr is None:
                return None
            items.append(expr)
        if not self.expect_peek(end):
            return None
        return items

    def parse_array_literal(self) -> Expression | None:
        with self._tracer.trace("parse_array_literal"):
            tok = self.cur_token
            elements = self.parse_expression_list(TK_RBRACKET)
            if elements is None:
                return None
            return ArrayLiteral(tok, elements)

    def parse_index_expression(self, left: Expression) -> Expression | None:
        with self._tracer.trace("parse_index_expression"):
            tok = self.cur_token
            self.next_token()
            index = self.parse_expression(Precedence.LOWEST)
            if index is None:
                return None
            if not self.expect_peek(TK_RBRACKET):
                return None
            return IndexExpression(tok, left, index)

    def parse_hash_literal(self) -> Expression | None:
        with self._tracer.trace("parse_hash_literal"):
            tok = self.cur_token
            pairs: list[tuple[Expression, Expression]] = []
            while not self.peek_token_is(TK_RBRACE):
                self.next_token()
                key = self.parse_expression(Precedence.LOWEST)
                if key is None:
                    return None
                if not self.expect_peek(TK_COLON):
                    return None
                self.next_token()
                value = self.parse_expression(Precedence.LOWEST)
                if value is None:
                    return None
                pairs.append((key, value))
                if not self.peek_token_is(TK_RBRACE) and not self.expect_peek(
                    TK_COMMA
                ):
                    return None
            if not self.expect_peek(TK_RBRACE):
                return None
            return HashLiteral(tok, pairs)


def parse_program(source: str) -> tuple[Program, list[str]]:
    """Parse Monkey source, returning the program and any collected errors."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors
