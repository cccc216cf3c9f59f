"""Monkey diagnostics shared by the parser, compiler and VM."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

# Python frames allowed while parsing, compiling or evaluating
RECURSION_LIMIT = 10000


class MonkeyError(Exception):
    """Base error for Monkey parsing, compilation and execution."""

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg: str = msg


@contextmanager
def recursion_limit(limit: int = RECURSION_LIMIT) -> Iterator[None]:
    """Raise the interpreter recursion limit to `limit` inside the block."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)
