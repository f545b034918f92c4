"""Seeded, platform-independent random numbers.

Seeds are strings. They are hashed with 32-bit FNV-1a and the hash drives a
mulberry32 generator, so the same seed yields the same sequence everywhere.
All arithmetic is done modulo 2**32 on unsigned values.
"""
from __future__ import annotations

from typing import Callable, List, TypeVar

from .errors import InvalidArgument
from .validation import assert_valid_seed, is_int

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193
_TWO_POW_32 = 4294967296


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def fnv1a_32(text: str) -> int:
    h = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        h ^= byte
        h = _imul(h, _FNV_PRIME)
    return h


def mulberry32(seed: int) -> Callable[[], float]:
    state = seed & _MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = _imul(state ^ (state >> 15), 1 | state)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32

    return next_float


class Rng:
    def __init__(self, seed: str) -> None:
        assert_valid_seed(seed)
        self.seed = seed
        self._next = mulberry32(fnv1a_32(seed))

    def next(self) -> float:
        return self._next()

    def next_int(self, max_exclusive: int) -> int:
        if not is_int(max_exclusive) or max_exclusive <= 0:
            raise InvalidArgument(f"invalid_max_exclusive: {max_exclusive!r} (must be a positive integer)")
        return int(self._next() * max_exclusive)


def create_rng(seed: str) -> Rng:
    return Rng(seed)


def shuffle_in_place(items: List[T], seed: str) -> None:
    # Fisher-Yates from the top down; changing the direction changes every board
    rng = create_rng(seed)
    for i in range(len(items) - 1, 0, -1):
        j = rng.next_int(i + 1)
        items[i], items[j] = items[j], items[i]
