"""Monkey evaluator — tree-walking interpretation of the AST.

Runtime errors and `return` travel as values (Error, ReturnValue) rather
than exceptions. Every compound rule checks its sub-results and hands an
Error or ReturnValue back untouched; ReturnValue is unwrapped at the nearest
function call or at the end of the program.
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
from .builtins import BUILTINS
from .errors import recursion_limit
from .objects import (
    FALSE,
    NULL,
    TRUE,
    Array,
    Builtin,
    Environment,
    Error,
    Function,
    Hash,
    Hashable,
    HashKey,
    HashPair,
    Integer,
    ReturnValue,
    String,
    Value,
    is_unwinding,
    native_bool,
    wrap_int64,
)


def is_truthy(value: Value) -> bool:
    """Only false and null are falsy."""
    return value is not FALSE and value is not NULL


def _int_div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q


class Evaluator:
    """Evaluates AST nodes against an environment chain."""

    # ---- Entry points -------------------------------------------------------

    def eval(self, node: Node, env: Environment) -> Value:
        if isinstance(node, Program):
            return self.eval_program(node, env)
        if isinstance(node, Statement):
            return self._eval_stmt(node, env)
        if isinstance(node, Expression):
            return self._eval_expr(node, env)
        return Error("unknown node: " + type(node).__name__)

    def eval_program(self, program: Program, env: Environment) -> Value:
        result: Value = NULL
        for st in program.statements:
            result = self._eval_stmt(st, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, Error):
                return result
        return result

    # ---- Statements ---------------------------------------------------------

    def _eval_block(self, block: BlockStatement, env: Environment) -> Value:
        result: Value = NULL
        for st in block.statements:
            result = self._eval_stmt(st, env)
            # Leave ReturnValue wrapped so outer blocks stop too
            if isinstance(result, (ReturnValue, Error)):
                return result
        return result

    def _eval_stmt(self, st: Statement, env: Environment) -> Value:
        if isinstance(st, ExpressionStatement):
            return self._eval_expr(st.expression, env)

        if isinstance(st, LetStatement):
            val = self._eval_expr(st.value, env)
            if is_unwinding(val):
                return val
            env.set(st.name.value, val)
            return NULL

        if isinstance(st, ReturnStatement):
            val = self._eval_expr(st.value, env)
            if is_unwinding(val):
                return val
            return ReturnValue(val)

        if isinstance(st, BlockStatement):
            return self._eval_block(st, env)

        return Error("unknown statement: " + type(st).__name__)

    # ---- Expressions --------------------------------------------------------

    def _eval_expr(self, expr: Expression, env: Environment) -> Value:
        if isinstance(expr, IntegerLiteral):
            return Integer(expr.value)
        if isinstance(expr, StringLiteral):
            return String(expr.value)
        if isinstance(expr, Boolean):
            return native_bool(expr.value)

        if isinstance(expr, Identifier):
            return self._eval_identifier(expr, env)

        if isinstance(expr, PrefixExpression):
            right = self._eval_expr(expr.right, env)
            if is_unwinding(right):
                return right
            return self._eval_prefix(expr.operator, right)

        if isinstance(expr, InfixExpression):
            left = self._eval_expr(expr.left, env)
            if is_unwinding(left):
                return left
            right = self._eval_expr(expr.right, env)
            if is_unwinding(right):
                return right
            return self._eval_infix(expr.operator, left, right)

        if isinstance(expr, IfExpression):
            cond = self._eval_expr(expr.condition, env)
            if is_unwinding(cond):
                return cond
            if is_truthy(cond):
                return self._eval_block(expr.consequence, env)
            if expr.alternative is not None:
                return self._eval_block(expr.alternative, env)
            return NULL

        if isinstance(expr, FunctionLiteral):
            return Function(expr.parameters, expr.body, env)

        if isinstance(expr, CallExpression):
            fn = self._eval_expr(expr.function, env)
            if is_unwinding(fn):
                return fn
            args = self._eval_expressions(expr.arguments, env)
            if not isinstance(args, list):
                return args
            return self.apply_function(fn, args)

        if isinstance(expr, ArrayLiteral):
            elements = self._eval_expressions(expr.elements, env)
            if not isinstance(elements, list):
                return elements
            return Array(elements)

        if isinstance(expr, IndexExpression):
            left = self._eval_expr(expr.left, env)
            if is_unwinding(left):
                return left
            index = self._eval_expr(expr.index, env)
            if is_unwinding(index):
                return index
            return self._eval_index(left, index)

        if isinstance(expr, HashLiteral):
            return self._eval_hash_literal(expr, env)

        return Error("unknown expression: " + type(expr).__name__)

    def _eval_expressions(
        self, exprs: list[Expression], env: Environment
    ) -> list[Value] | Value:
        """Evaluate left to right, stopping at the first Error or ReturnValue."""
        result: list[Value] = []
        for e in exprs:
            val = self._eval_expr(e, env)
            if is_unwinding(val):
                return val
            result.append(val)
        return result

    def _eval_identifier(self, ident: Identifier, env: Environment) -> Value:
        val = env.get(ident.value)
        if val is not None:
            return val
        builtin = BUILTINS.get(ident.value)
        if builtin is not None:
            return builtin
        return Error("identifier not found: " + ident.value)

    # ---- Operators ----------------------------------------------------------

    def _eval_prefix(self, op: str, right: Value) -> Value:
        if op == "!":
            return FALSE if is_truthy(right) else TRUE
        if op == "-":
            if not isinstance(right, Integer):
                return Error("unknown operator: -" + right.type())
            return Integer(wrap_int64(-right.value))
        return Error("unknown operator: " + op + right.type())

    def _eval_infix(self, op: str, left: Value, right: Value) -> Value:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self._eval_integer_infix(op, left, right)
        if left.type() != right.type():
            return Error(
                "type mismatch: " + left.type() + " " + op + " " + right.type()
            )
        if isinstance(left, String) and isinstance(right, String):
            if op == "+":
                return String(left.value + right.value)
            return Error("unknown operator: STRING " + op + " STRING")
        # Remaining same-typed operands compare by identity; booleans and
        # null are singletons, so this is value equality for them.
        if op == "==":
            return native_bool(left is right)
        if op == "!=":
            return native_bool(left is not right)
        return Error(
            "unknown operator: " + left.type() + " " + op + " " + right.type()
        )

    def _eval_integer_infix(self, op: str, left: Integer, right: Integer) -> Value:
        a = left.value
        b = right.value
        if op == "+":
            return Integer(wrap_int64(a + b))
        if op == "-":
            return Integer(wrap_int64(a - b))
        if op == "*":
            return Integer(wrap_int64(a * b))
        if op == "/":
            if b == 0:
                return Error("division by zero")
            return Integer(wrap_int64(_int_div_trunc(a, b)))
        if op == "<":
            return native_bool(a < b)
        if op == ">":
            return native_bool(a > b)
        if op == "==":
            return native_bool(a == b)
        if op == "!=":
            return native_bool(a != b)
        return Error("unknown operator: INTEGER " + op + " INTEGER")

    # ---- Calls --------------------------------------------------------------

    def apply_function(self, fn: Value, args: list[Value]) -> Value:
        if isinstance(fn, Function):
            call_env = Environment.enclosed(fn.env)
            # Arity is not checked: missing arguments stay unbound, extras are dropped
            for i, param in enumerate(fn.parameters):
                if i < len(args):
                    call_env.set(param.value, args[i])
            result = self._eval_block(fn.body, call_env)
            if isinstance(result, ReturnValue):
                return result.value
            return result
        if isinstance(fn, Builtin):
            return fn.fn(args)
        return Error("not a function: " + fn.type())

    # ---- Indexing / hashes --------------------------------------------------

    def _eval_index(self, left: Value, index: Value) -> Value:
        if isinstance(left, Array) and isinstance(index, Integer):
            i = index.value
            if i < 0 or i >= len(left.elements):
                return NULL
            return left.elements[i]
        if isinstance(left, Hash):
            if not isinstance(index, Hashable):
                return Error("unusable as hash key: " + index.type())
            pair = left.pairs.get(index.hash_key())
            if pair is None:
                return NULL
            return pair.value
        return Error("index operator not supported: " + left.type())

    def _eval_hash_literal(self, lit: HashLiteral, env: Environment) -> Value:
        pairs: dict[HashKey, HashPair] = {}
        for key_expr, value_expr in lit.pairs:
            key = self._eval_expr(key_expr, env)
            if is_unwinding(key):
                return key
            if not isinstance(key, Hashable):
                return Error("unusable as hash key: " + key.type())
            value = self._eval_expr(value_expr, env)
            if is_unwinding(value):
                return value
            pairs[key.hash_key()] = HashPair(key, value)
        return Hash(pairs)


_EVALUATOR = Evaluator()


def evaluate(node: Node, env: Environment | None = None) -> Value:
    """Evaluate `node` in `env` (a fresh top-level frame when omitted)."""
    if env is None:
        env = Environment()
    try:
        with recursion_limit():
            return _EVALUATOR.eval(node, env)
    except RecursionError:
        return Error("maximum recursion depth exceeded")
