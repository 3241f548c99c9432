"""A thread-safe, append-only bucket of values with snapshot and clear support."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")

BLOCK_SIZE = 64
"""Number of values a single block can hold."""


class BlockFullError(Exception):
    """Raised when a value is pushed into a block that has no free slots."""

    def __init__(self, value: object) -> None:
        super().__init__("block is full")
        self.value = value


class Block(Generic[T]):
    """A fixed-size chunk of values.

    ``next`` points at the block that was filled before this one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._write = 0
        self._slots: list[T] = []
        self.next: Block[T] | None = None

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return (
            f"Block(block_size={BLOCK_SIZE}, write={self._write}, "
            f"len={len(self)}, has_next={self.next is not None})"
        )

    def next_len(self) -> int:
        """Length of the block written before this one, or 0 if there is none."""
        return 0 if self.next is None else len(self.next)

    def is_quiesced(self) -> bool:
        """Whether no writes to this block are in flight."""
        length = len(self)
        if length == BLOCK_SIZE:
            return True
        return min(self._write, BLOCK_SIZE) == length

    def data(self) -> list[T]:
        """A copy of the values written to this block, in write order."""
        return list(self._slots)

    def push(self, value: T) -> None:
        """Store ``value``; raise :class:`BlockFullError` if the block is full."""
        with self._lock:
            index = self._write
            self._write += 1
            if index >= BLOCK_SIZE:
                raise BlockFullError(value)
            self._slots.append(value)


class AtomicBucket(Generic[T]):
    """An unbounded bucket of values, stored as a chain of blocks.

    Values cannot be removed one at a time; the bucket is read as a whole.
    Blocks are visited newest first, while values within a block keep their
    original order: with blocks of four, ten pushed values read back as
    ``[8 9] [4 5 6 7] [0 1 2 3]``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tail: Block[T] | None = None

    def __repr__(self) -> str:
        return f"AtomicBucket(tail={self._tail!r})"

    def _blocks(self, start: Block[T] | None) -> Iterator[Block[T]]:
        block = start
        while block is not None:
            while not block.is_quiesced():
                pass
            yield block
            block = block.next

    def is_empty(self) -> bool:
        """Whether the bucket holds no values."""
        tail = self._tail
        if tail is None:
            return True
        # A freshly installed tail may be empty while the previous block is not.
        return len(tail) == 0 and tail.next_len() == 0

    def push(self, value: T) -> None:
        """Add a value to the bucket."""
        while True:
            tail = self._tail
            if tail is None:
                with self._lock:
                    if self._tail is None:
                        self._tail = Block()
                    tail = self._tail
            try:
                tail.push(value)
                return
            except BlockFullError:
                with self._lock:
                    if self._tail is tail:
                        fresh: Block[T] = Block()
                        fresh.next = tail
                        self._tail = fresh

    def data(self) -> list[T]:
        """All values in the bucket, newest block first."""
        values: list[T] = []
        self.data_with(values.extend)
        return values

    def data_with(self, func: Callable[[list[T]], object]) -> None:
        """Call ``func`` with the values of each block, newest block first."""
        for block in self._blocks(self._tail):
            func(block.data())

    def clear(self) -> None:
        """Remove every value from the bucket."""
        self.clear_with(lambda _values: None)

    def clear_with(self, func: Callable[[list[T]], object]) -> None:
        """Remove every value, calling ``func`` with the values of each removed block."""
        with self._lock:
            head = self._tail
            self._tail = None
        for block in self._blocks(head):
            func(block.data())