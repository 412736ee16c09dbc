# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Key types for dynamic-values.

Variables are addressed by a :class:`Symbol`: a single character naming the
variable family (``'x'`` for poses, ``'l'`` for landmarks, ...) and a
non-negative integer index. Symbols are hashable and totally ordered by
``(char, index)``, which is the same order as their packed 64-bit integer
form ``(ord(char) << 56) | index``.

A :class:`TypedSymbol` additionally records the Python type of the value
stored under it, so that lookups through it are checked without the caller
restating the type.

Anything accepted as a key by the containers goes through :func:`as_key`:

    Symbol        -> itself
    TypedSymbol   -> its underlying Symbol
    str ("x12")   -> Symbol('x', 12)
    int (packed)  -> Symbol.from_key(...)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

CHR_BITS = 8
INDEX_BITS = 64 - CHR_BITS
INDEX_MASK = (1 << INDEX_BITS) - 1

_SYMBOL_RE = re.compile(r"^([A-Za-z])(\d+)$")


@dataclass(frozen=True, order=True)
class Symbol:
    """Character + index variable key."""

    char: str
    index: int

    def __post_init__(self) -> None:
        if not isinstance(self.char, str) or len(self.char) != 1:
            raise ValueError(f"Symbol char must be a single character, got {self.char!r}")
        if ord(self.char) >= (1 << CHR_BITS):
            raise ValueError(f"Symbol char {self.char!r} does not fit in {CHR_BITS} bits")
        if not isinstance(self.index, int) or isinstance(self.index, bool):
            raise TypeError(f"Symbol index must be an int, got {type(self.index).__name__}")
        if self.index < 0 or self.index > INDEX_MASK:
            raise ValueError(f"Symbol index out of range: {self.index}")

    @classmethod
    def parse(cls, text: str) -> "Symbol":
        match = _SYMBOL_RE.match(text.strip())
        if match is None:
            raise ValueError(f"Cannot parse {text!r} as a symbol (expected e.g. 'x1')")
        return cls(match.group(1), int(match.group(2)))

    @classmethod
    def from_key(cls, key: int) -> "Symbol":
        """Unpack a 64-bit integer key."""
        if key < 0:
            raise ValueError(f"Packed key must be non-negative, got {key}")
        return cls(chr(key >> INDEX_BITS), key & INDEX_MASK)

    def key(self) -> int:
        """Pack into a 64-bit integer key."""
        return (ord(self.char) << INDEX_BITS) | self.index

    def __str__(self) -> str:
        return f"{self.char}{self.index}"


@dataclass(frozen=True)
class TypedSymbol:
    """A Symbol that also names the type of the value stored under it."""

    value_type: type
    char: str
    index: int

    @property
    def symbol(self) -> Symbol:
        return Symbol(self.char, self.index)

    def __str__(self) -> str:
        return f"{self.char}{self.index}"


KeyLike = Union[Symbol, TypedSymbol, str, int]


def as_key(key: Any) -> Symbol:
    """Normalize any accepted key form to a :class:`Symbol`."""
    if isinstance(key, Symbol):
        return key
    if isinstance(key, TypedSymbol):
        return key.symbol
    if isinstance(key, str):
        return Symbol.parse(key)
    if isinstance(key, int) and not isinstance(key, bool):
        return Symbol.from_key(key)
    raise TypeError(f"Cannot use object of type {type(key).__name__} as a key")


def symbol(char: str, index: int) -> Symbol:
    return Symbol(char, index)
