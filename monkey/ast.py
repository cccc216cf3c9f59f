"""Monkey AST — parse-time node definitions.

Every node keeps the token it was parsed from. Tokens are excluded from
equality so that two trees compare equal whenever their structure does,
regardless of where in the source they came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .tokens import Token


# ============================================================
# BASES
# ============================================================


class Node:
    """Base for all AST nodes."""

    def token_literal(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        from .emit import to_source

        return to_source(self)


@dataclass
class Statement(Node):
    """Base for all statements."""

    token: Token = field(compare=False, repr=False)

    def token_literal(self) -> str:
        return self.token.literal


@dataclass
class Expression(Node):
    """Base for all expressions."""

    token: Token = field(compare=False, repr=False)

    def token_literal(self) -> str:
        return self.token.literal


# ============================================================
# PROGRAM
# ============================================================


@dataclass
class Program(Node):
    """Root node: the statements of one source input, in order."""

    statements: list[Statement] = field(default_factory=list)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Identifier(Expression):
    value: str


@dataclass
class IntegerLiteral(Expression):
    value: int


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class Boolean(Expression):
    value: bool


@dataclass
class PrefixExpression(Expression):
    """<op><right>, where op is ! or -."""

    operator: str
    right: Expression


@dataclass
class InfixExpression(Expression):
    """<left> <op> <right>."""

    left: Expression
    operator: str
    right: Expression


@dataclass
class IfExpression(Expression):
    """if <cond> { ... } else { ... }; the alternative is optional."""

    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None


@dataclass
class FunctionLiteral(Expression):
    """fn(<params>) { <body> }."""

    parameters: list[Identifier]
    body: BlockStatement


@dataclass
class CallExpression(Expression):
    """<function>(<args>)."""

    function: Expression
    arguments: list[Expression]


@dataclass
class ArrayLiteral(Expression):
    elements: list[Expression]


@dataclass
class IndexExpression(Expression):
    """<left>[<index>]."""

    left: Expression
    index: Expression


@dataclass
class HashLiteral(Expression):
    """{k: v, ...}; pairs keep source order, keys are arbitrary expressions."""

    pairs: list[tuple[Expression, Expression]]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class LetStatement(Statement):
    """let <name> = <value>;"""

    name: Identifier
    value: Expression


@dataclass
class ReturnStatement(Statement):
    """return <value>;"""

    value: Expression


@dataclass
class ExpressionStatement(Statement):
    expression: Expression


@dataclass
class BlockStatement(Statement):
    """{ <statements> }, the body of if branches and functions."""

    statements: list[Statement]
