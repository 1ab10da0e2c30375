from __future__ import annotations


class MemoryMatchError(Exception):
    """Base class for errors raised by the memory match core."""


class InvalidConfiguration(MemoryMatchError, ValueError):
    """Pair count below the minimum, or a symbol alphabet too small to deal from."""


class InvalidIndex(MemoryMatchError, IndexError):
    """A tap referenced a position outside the dealt grid."""

    def __init__(self, index: object, size: int) -> None:
        super().__init__(f'card index {index!r} out of range for {size} cards')
        self.index = index
        self.size = size
