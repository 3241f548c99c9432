"""Cursor over a list of displayed items."""

from __future__ import annotations


class Selector:
    """Tracks which of ``length`` items is selected, wrapping at the ends."""

    def __init__(self) -> None:
        self.length = 0
        self.selected = 0

    def __repr__(self) -> str:
        return f"Selector(length={self.length}, selected={self.selected})"

    def _require_items(self) -> None:
        if self.length == 0:
            raise IndexError("selector has no items")

    def set_length(self, length: int) -> None:
        """Update the item count, returning to the top if the list shrank."""
        if length < self.length:
            self.selected = 0
        self.length = length

    def top(self) -> None:
        """Select the first item."""
        self.selected = 0

    def bottom(self) -> None:
        """Select the last item."""
        self._require_items()
        self.selected = self.length - 1

    def next(self) -> None:
        """Select the following item, wrapping to the first."""
        self._require_items()
        self.selected = 0 if self.selected >= self.length - 1 else self.selected + 1

    def previous(self) -> None:
        """Select the preceding item, wrapping to the last."""
        self._require_items()
        self.selected = self.length - 1 if self.selected == 0 else self.selected - 1