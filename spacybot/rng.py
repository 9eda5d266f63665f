"""Uniform randomness source shared by the randomized transforms."""

from __future__ import annotations

import random
import threading
from abc import ABC, abstractmethod


class Rng(ABC):
    """Uniform integer source safe to call from concurrent queries."""

    @abstractmethod
    def randbelow(self, k: int) -> int:
        """Return an integer uniformly drawn from [0, k)."""

    @abstractmethod
    def uint64(self) -> int:
        """Return 64 uniformly random bits as a non-negative integer."""


class LockedRandom(Rng):
    """Rng backed by random.Random behind a lock."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def randbelow(self, k: int) -> int:
        if k <= 0:
            raise ValueError(f"randbelow() requires a positive bound, got {k}")
        with self._lock:
            return self._random.randrange(k)

    def uint64(self) -> int:
        with self._lock:
            return self._random.getrandbits(64)


_DEFAULT_RNG = LockedRandom()


def default_rng() -> Rng:
    """Return the process-wide Rng used when none is injected."""

    return _DEFAULT_RNG
