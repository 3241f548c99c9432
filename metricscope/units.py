"""Units of measurement that can be attached to a metric."""

from __future__ import annotations

from enum import Enum


class Unit(Enum):
    """A unit of measurement, identified by its canonical string name."""

    COUNT = "count"
    PERCENT = "percent"
    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"
    MICROSECONDS = "microseconds"
    NANOSECONDS = "nanoseconds"
    TEBIBYTES = "tebibytes"
    GIBIBYTES = "gibibytes"
    MEBIBYTES = "mebibytes"
    KIBIBYTES = "kibibytes"
    BYTES = "bytes"
    TERABITS_PER_SECOND = "terabits_per_second"
    GIGABITS_PER_SECOND = "gigabits_per_second"
    MEGABITS_PER_SECOND = "megabits_per_second"
    KILOBITS_PER_SECOND = "kilobits_per_second"
    BITS_PER_SECOND = "bits_per_second"
    COUNT_PER_SECOND = "count_per_second"

    @classmethod
    def from_string(cls, value: str) -> Unit | None:
        """The unit named ``value``, or ``None`` if there is no such unit."""
        try:
            return cls(value)
        except ValueError:
            return None

    def is_time_based(self) -> bool:
        """Whether the unit measures time."""
        return self in _TIME_UNITS

    def is_data_based(self) -> bool:
        """Whether the unit measures an amount of data."""
        return self in _DATA_UNITS

    def canonical_label(self) -> str:
        """The short label written after a value in this unit."""
        return _LABELS[self]


_TIME_UNITS = frozenset(
    {Unit.SECONDS, Unit.MILLISECONDS, Unit.MICROSECONDS, Unit.NANOSECONDS}
)

_DATA_UNITS = frozenset(
    {Unit.TEBIBYTES, Unit.GIBIBYTES, Unit.MEBIBYTES, Unit.KIBIBYTES, Unit.BYTES}
)

_LABELS = {
    Unit.COUNT: "",
    Unit.PERCENT: "%",
    Unit.SECONDS: "s",
    Unit.MILLISECONDS: "ms",
    Unit.MICROSECONDS: "μs",
    Unit.NANOSECONDS: "ns",
    Unit.TEBIBYTES: "TiB",
    Unit.GIBIBYTES: "GiB",
    Unit.MEBIBYTES: "MiB",
    Unit.KIBIBYTES: "KiB",
    Unit.BYTES: "B",
    Unit.TERABITS_PER_SECOND: "Tbps",
    Unit.GIGABITS_PER_SECOND: "Gbps",
    Unit.MEGABITS_PER_SECOND: "Mbps",
    Unit.KILOBITS_PER_SECOND: "kbps",
    Unit.BITS_PER_SECOND: "bps",
    Unit.COUNT_PER_SECOND: "/s",
}