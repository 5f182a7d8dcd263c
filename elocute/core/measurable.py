"""
Measurable Entities
===================

Anything the distance cache can memoize: an integer ``uid``, a
``revision`` that changes whenever the entity's distance-relevant state
changes, and a non-negative ``distance`` to another entity of its kind.
"""

import itertools
from typing import Protocol, TypeVar


class Measurable(Protocol):
    """Structural type for nodes and clusters."""

    uid: int

    @property
    def revision(self) -> int:
        ...

    def distance(self, other) -> float:
        ...


T = TypeVar('T', bound=Measurable)


class IdAllocator:
    """
    Hands out increasing integer ids.

    One allocator per owner (a Word, a session); ids never leak between
    owners.
    """

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self.last = start - 1

    def next(self) -> int:
        self.last = next(self._counter)
        return self.last
