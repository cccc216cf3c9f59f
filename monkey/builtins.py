"""Monkey built-in functions.

The table is fixed at import time and never mutated. Builtins validate
their own arity and argument types and report misuse as Error values.
"""

from __future__ import annotations

from .objects import (
    NULL,
    Array,
    Builtin,
    Error,
    Integer,
    String,
    Value,
)


def _wrong_arg_count(name: str, got: int, want: int) -> Error:
    return Error(
        "wrong number of arguments to `"
        + name
        + "`. got="
        + str(got)
        + ", want="
        + str(want)
    )


def _must_be_array(name: str, arg: Value) -> Error:
    return Error("argument to `" + name + "` must be ARRAY, got " + arg.type())


def _bi_len(args: list[Value]) -> Value:
    if len(args) != 1:
        return _wrong_arg_count("len", len(args), 1)
    x = args[0]
    if isinstance(x, String):
        return Integer(len(x.value.encode("utf-8")))
    if isinstance(x, Array):
        return Integer(len(x.elements))
    return Error("argument to `len` not supported, got " + x.type())


def _bi_type(args: list[Value]) -> Value:
    if len(args) != 1:
        return _wrong_arg_count("type", len(args), 1)
    return String(args[0].type())


def _bi_first(args: list[Value]) -> Value:
    if len(args) != 1:
        return _wrong_arg_count("first", len(args), 1)
    arr = args[0]
    if not isinstance(arr, Array):
        return _must_be_array("first", arr)
    if arr.elements:
        return arr.elements[0]
    return NULL


def _bi_last(args: list[Value]) -> Value:
    if len(args) != 1:
        return _wrong_arg_count("last", len(args), 1)
    arr = args[0]
    if not isinstance(arr, Array):
        return _must_be_array("last", arr)
    if arr.elements:
        return arr.elements[-1]
    return NULL


def _bi_rest(args: list[Value]) -> Value:
    if len(args) != 1:
        return _wrong_arg_count("rest", len(args), 1)
    arr = args[0]
    if not isinstance(arr, Array):
        return _must_be_array("rest", arr)
    if arr.elements:
        return Array(list(arr.elements[1:]))
    return NULL


def _bi_push(args: list[Value]) -> Value:
    if len(args) != 2:
        return _wrong_arg_count("push", len(args), 2)
    arr = args[0]
    if not isinstance(arr, Array):
        return _must_be_array("push", arr)
    return Array(arr.elements + [args[1]])


def _bi_puts(args: list[Value]) -> Value:
    for arg in args:
        print(arg.inspect())
    return NULL


BUILTINS: dict[str, Builtin] = {
    "len": Builtin("len", _bi_len),
    "type": Builtin("type", _bi_type),
    "first": Builtin("first", _bi_first),
    "last": Builtin("last", _bi_last),
    "rest": Builtin("rest", _bi_rest),
    "push": Builtin("push", _bi_push),
    "puts": Builtin("puts", _bi_puts),
}
