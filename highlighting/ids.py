"""
Highlight id generators.

Ids only need to be unique within one search call. Generators are plain
callables so tests can inject a deterministic one.
"""

import itertools
import random
import threading
import uuid


class UuidIdGenerator:
    """Random UUID4 hex ids (default)."""

    def __call__(self) -> str:
        return uuid.uuid4().hex


class SequentialIdGenerator:
    """Monotonic counter ids: "1", "2", ..."""

    def __init__(self, start: int = 1, prefix: str = ""):
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            return f"{self.prefix}{next(self._counter)}"


class RandomDigitsIdGenerator:
    """Digit-string ids in the style the highlighter UI has always received."""

    def __init__(self, seed: int = None):
        self._random = random.Random(seed)

    def __call__(self) -> str:
        return f"{self._random.random():.16f}"[2:]
