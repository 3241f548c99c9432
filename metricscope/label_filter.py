"""Decide which span fields become metric labels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from metricscope.keys import Label


class LabelFilter(ABC):
    """Decides whether a span field should be attached to a metric as a label."""

    @abstractmethod
    def should_include_label(self, name: str, label: Label) -> bool:
        """Whether ``label`` should be included in the key of the metric named ``name``."""


@dataclass(frozen=True)
class IncludeAll(LabelFilter):
    """A filter that lets every label through."""

    def should_include_label(self, name: str, label: Label) -> bool:
        """Always ``True``."""
        return True


class Allowlist(LabelFilter):
    """A filter that lets through only labels whose key is in a fixed set."""

    def __init__(self, allowed: Iterable[str]) -> None:
        self.label_names = frozenset(str(name) for name in allowed)

    def __repr__(self) -> str:
        return f"Allowlist({sorted(self.label_names)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Allowlist):
            return NotImplemented
        return self.label_names == other.label_names

    def __hash__(self) -> int:
        return hash(self.label_names)

    def should_include_label(self, name: str, label: Label) -> bool:
        """Whether the label's key is one of the allowed names."""
        return label.key in self.label_names