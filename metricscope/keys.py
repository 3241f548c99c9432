"""Metric keys: a name plus an ordered list of labels."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class Label:
    """A single key/value pair attached to a metric."""

    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key} = {self.value}"


LabelLike = Label | tuple[str, str]


def _to_label(item: LabelLike) -> Label:
    if isinstance(item, Label):
        return item
    key, value = item
    return Label(str(key), str(value))


@dataclass(frozen=True, order=True)
class Key:
    """Identifies a metric by name and labels.

    Labels keep the order they were given in; keys order by name, then labels.
    """

    name: str
    labels: tuple[Label, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(_to_label(item) for item in self.labels))

    def __str__(self) -> str:
        if not self.labels:
            return self.name
        return f"{self.name} [{', '.join(map(str, self.labels))}]"

    def with_labels(self, labels: Iterable[LabelLike]) -> Key:
        """A key with the same name and the given labels."""
        return Key(self.name, tuple(labels))