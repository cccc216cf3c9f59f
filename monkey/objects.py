"""Monkey runtime values, hash keys, and environments."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .ast import BlockStatement, Identifier
from .emit import statements_source


# Type tags, as reported by `type(x)` and in error messages
INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
STRING_OBJ = "STRING"
NULL_OBJ = "NULL"
ARRAY_OBJ = "ARRAY"
HASH_OBJ = "HASH"
FUNCTION_OBJ = "FUNCTION"
BUILTIN_OBJ = "BUILTIN"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"

_UINT64_MASK = 0xFFFFFFFFFFFFFFFF
_FNV_OFFSET_BASIS = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3


def wrap_int64(value: int) -> int:
    """Wrap an arbitrary Python int to signed 64-bit two's complement."""
    value &= _UINT64_MASK
    if value >= 1 << 63:
        value -= 1 << 64
    return value


def fnv1a_64(data: bytes) -> int:
    h = _FNV_OFFSET_BASIS
    for b in data:
        h ^= b
        h = (h * _FNV_PRIME) & _UINT64_MASK
    return h


# ============================================================
# Hash keys
# ============================================================


@dataclass(frozen=True)
class HashKey:
    """Canonical dictionary key: a type tag plus an unsigned 64-bit value."""

    type: str
    value: int


# ============================================================
# Values
# ============================================================


class Value:
    """A runtime value with a type tag."""

    def type(self) -> str:
        raise NotImplementedError

    def inspect(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.inspect()


class Hashable(Value):
    """A value that can be used as a hash key."""

    def hash_key(self) -> HashKey:
        raise NotImplementedError


@dataclass(eq=False)
class Integer(Hashable):
    value: int

    def type(self) -> str:
        return INTEGER_OBJ

    def inspect(self) -> str:
        return str(self.value)

    def hash_key(self) -> HashKey:
        return HashKey(INTEGER_OBJ, self.value & _UINT64_MASK)


@dataclass(eq=False)
class BooleanValue(Hashable):
    value: bool

    def type(self) -> str:
        return BOOLEAN_OBJ

    def inspect(self) -> str:
        return "true" if self.value else "false"

    def hash_key(self) -> HashKey:
        return HashKey(BOOLEAN_OBJ, 1 if self.value else 0)


@dataclass(eq=False)
class String(Hashable):
    value: str

    def type(self) -> str:
        return STRING_OBJ

    def inspect(self) -> str:
        return self.value

    def hash_key(self) -> HashKey:
        return HashKey(STRING_OBJ, fnv1a_64(self.value.encode("utf-8")))


class Null(Value):
    def type(self) -> str:
        return NULL_OBJ

    def inspect(self) -> str:
        return "null"

    def __repr__(self) -> str:
        return "Null()"


@dataclass(eq=False)
class Array(Value):
    elements: list[Value]

    def type(self) -> str:
        return ARRAY_OBJ

    def inspect(self) -> str:
        return "[" + ", ".join(e.inspect() for e in self.elements) + "]"


@dataclass(eq=False)
class HashPair:
    key: Value
    value: Value


@dataclass(eq=False)
class Hash(Value):
    # Insertion order of the dict is the source order of the literal.
    pairs: dict[HashKey, HashPair] = field(default_factory=dict)

    def type(self) -> str:
        return HASH_OBJ

    def inspect(self) -> str:
        parts: list[str] = []
        for pair in self.pairs.values():
            parts.append(pair.key.inspect() + ": " + pair.value.inspect())
        return "{" + ", ".join(parts) + "}"


@dataclass(eq=False)
class Function(Value):
    parameters: list[Identifier]
    body: BlockStatement
    env: Environment = field(repr=False)

    def type(self) -> str:
        return FUNCTION_OBJ

    def inspect(self) -> str:
        params = ", ".join(p.value for p in self.parameters)
        body = statements_source(self.body.statements)
        return "fn(" + params + ") {\n" + body + "\n}"


BuiltinFunction = Callable[[list[Value]], Value]


@dataclass(eq=False)
class Builtin(Value):
    name: str
    fn: BuiltinFunction = field(repr=False)

    def type(self) -> str:
        return BUILTIN_OBJ

    def inspect(self) -> str:
        return "builtin function"


@dataclass(eq=False)
class ReturnValue(Value):
    """Wraps the value of a `return` while it unwinds to the call boundary."""

    value: Value

    def type(self) -> str:
        return RETURN_VALUE_OBJ

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(eq=False)
class Error(Value):
    """Runtime error; aborts every enclosing evaluation unchanged."""

    message: str

    def type(self) -> str:
        return ERROR_OBJ

    def inspect(self) -> str:
        return "ERROR: " + self.message


# Interned singletons
TRUE = BooleanValue(True)
FALSE = BooleanValue(False)
NULL = Null()


def native_bool(value: bool) -> BooleanValue:
    return TRUE if value else FALSE


def is_unwinding(value: Value | None) -> bool:
    """True for the values that abort enclosing evaluation: Error and ReturnValue."""
    return isinstance(value, (Error, ReturnValue))


# ============================================================
# Environments
# ============================================================


class Environment:
    """One frame of name bindings, chained to its enclosing frame."""

    def __init__(self, outer: Environment | None = None):
        self.store: dict[str, Value] = {}
        self.outer: Environment | None = outer

    @classmethod
    def enclosed(cls, outer: Environment) -> Environment:
        return cls(outer)

    def get(self, name: str) -> Value | None:
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def set(self, name: str, value: Value) -> Value:
        self.store[name] = value
        return value

    def __repr__(self) -> str:
        return "Environment(" + ", ".join(self.store) + ")"
