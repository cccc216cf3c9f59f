"""Monkey emitter — converts AST back into Monkey textual syntax.

Infix and prefix expressions come out fully parenthesized, so the output
doubles as a precedence check. The rendering is total over `monkey/ast.py`
and re-parses to a structurally equal tree.
"""

from __future__ import annotations

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
    Node,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
)


def to_source(node: Node) -> str:
    """Render any AST node back into Monkey source text."""
    return _Emitter().emit(node)


def statements_source(stmts: list[Statement]) -> str:
    """Render a statement sequence without surrounding braces."""
    return _Emitter().emit_statements(stmts)


class _Emitter:
    def emit(self, node: Node) -> str:
        if isinstance(node, Program):
            return self.emit_statements(node.statements)
        if isinstance(node, Statement):
            return self.emit_stmt(node)
        if isinstance(node, Expression):
            return self.emit_expr(node)
        raise TypeError("cannot emit " + type(node).__name__)

    # ── Statements ──────────────────────────────────────────

    def emit_statements(self, stmts: list[Statement]) -> str:
        parts: list[str] = []
        for i, st in enumerate(stmts):
            text = self.emit_stmt(st)
            # Separate a bare expression from whatever follows it
            if isinstance(st, ExpressionStatement) and i < len(stmts) - 1:
                text += ";"
            parts.append(text)
        return " ".join(parts)

    def emit_stmt(self, st: Statement) -> str:
        if isinstance(st, LetStatement):
            return (
                st.token_literal()
                + " "
                + self.emit_expr(st.name)
                + " = "
                + self.emit_expr(st.value)
                + ";"
            )
        if isinstance(st, ReturnStatement):
            return st.token_literal() + " " + self.emit_expr(st.value) + ";"
        if isinstance(st, ExpressionStatement):
            return self.emit_expr(st.expression)
        if isinstance(st, BlockStatement):
            return self.emit_block(st)
        raise TypeError("cannot emit statement " + type(st).__name__)

    def emit_block(self, block: BlockStatement) -> str:
        if not block.statements:
            return "{ }"
        return "{ " + self.emit_statements(block.statements) + " }"

    # ── Expressions ─────────────────────────────────────────

    def emit_expr(self, expr: Expression) -> str:
        if isinstance(expr, Identifier):
            return expr.value
        if isinstance(expr, IntegerLiteral):
            return str(expr.value)
        if isinstance(expr, StringLiteral):
            return '"' + expr.value + '"'
        if isinstance(expr, Boolean):
            return "true" if expr.value else "false"
        if isinstance(expr, PrefixExpression):
            return "(" + expr.operator + self.emit_expr(expr.right) + ")"
        if isinstance(expr, InfixExpression):
            return (
                "("
                + self.emit_expr(expr.left)
                + " "
                + expr.operator
                + " "
                + self.emit_expr(expr.right)
                + ")"
            )
        if isinstance(expr, IfExpression):
            out = "if " + self.emit_expr(expr.condition) + " "
            out += self.emit_block(expr.consequence)
            if expr.alternative is not None:
                out += " else " + self.emit_block(expr.alternative)
            return out
        if isinstance(expr, FunctionLiteral):
            params = ", ".join(self.emit_expr(p) for p in expr.parameters)
            return "fn(" + params + ") " + self.emit_block(expr.body)
        if isinstance(expr, CallExpression):
            args = ", ".join(self.emit_expr(a) for a in expr.arguments)
            return self.emit_expr(expr.function) + "(" + args + ")"
        if isinstance(expr, ArrayLiteral):
            return "[" + ", ".join(self.emit_expr(e) for e in expr.elements) + "]"
        if isinstance(expr, IndexExpression):
            return (
                "("
                + self.emit_expr(expr.left)
                + "["
                + self.emit_expr(expr.index)
                + "])"
            )
        if isinstance(expr, HashLiteral):
            pairs = [
                self.emit_expr(k) + ":" + self.emit_expr(v) for k, v in expr.pairs
            ]
            return "{" + ", ".join(pairs) + "}"
        raise TypeError("cannot emit expression " + type(expr).__name__)
