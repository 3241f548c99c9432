"""In-memory store of observed metric values and their descriptions."""

from __future__ import annotations

import copy
import math
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum

from metricscope.keys import Key, Label
from metricscope.units import Unit

_U64 = 2**64


@dataclass(frozen=True)
class ClientState:
    """Connection state of an observer, with an optional reason when disconnected."""

    connected: bool
    message: str | None = None

    @classmethod
    def disconnected_with(cls, message: str | None = None) -> ClientState:
        """A disconnected state, optionally carrying a reason."""
        return cls(False, message)

    @classmethod
    def connected_now(cls) -> ClientState:
        """The connected state."""
        return cls(True)

    def __str__(self) -> str:
        if self.connected:
            return "connected"
        return "disconnected" if self.message is None else f"disconnected {self.message}"


class MetricKind(IntEnum):
    """The kind of a metric; kinds sort counter, gauge, histogram."""

    COUNTER = 1
    GAUGE = 2
    HISTOGRAM = 3


class Summary:
    """A quantile sketch with bounded relative error."""

    def __init__(self, alpha: float = 0.0001, min_value: float = 1e-9) -> None:
        if not 0.0 < alpha < 1.0:
            raise ValueError("alpha must be between 0 and 1")
        self._gamma = (1.0 + alpha) / (1.0 - alpha)
        self._log_gamma = math.log(self._gamma)
        self._min_value = min_value
        self._positive: dict[int, int] = {}
        self._negative: dict[int, int] = {}
        self._zeroes = 0
        self._count = 0
        self._min = math.inf
        self._max = -math.inf

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"Summary(count={self._count}, min={self._min}, max={self._max})"

    def _index(self, magnitude: float) -> int:
        return math.ceil(math.log(magnitude) / self._log_gamma)

    def _bucket_value(self, index: int) -> float:
        return 2.0 * self._gamma**index / (self._gamma + 1.0)

    def add(self, value: float) -> None:
        """Record a value."""
        value = float(value)
        if math.isnan(value):
            raise ValueError("cannot record NaN")
        self._count += 1
        self._min = min(self._min, value)
        self._max = max(self._max, value)
        magnitude = abs(value)
        if magnitude < self._min_value:
            self._zeroes += 1
            return
        buckets = self._positive if value > 0 else self._negative
        index = self._index(magnitude)
        buckets[index] = buckets.get(index, 0) + 1

    def quantile(self, q: float) -> float | None:
        """The approximate value at quantile ``q``, or ``None`` if empty or out of range."""
        if not 0.0 <= q <= 1.0 or self._count == 0:
            return None
        if q == 0.0:
            return self._min
        if q == 1.0:
            return self._max

        rank = q * (self._count - 1)
        seen = 0
        for index in sorted(self._negative, reverse=True):
            seen += self._negative[index]
            if seen > rank:
                return self._clamp(-self._bucket_value(index))
        seen += self._zeroes
        if seen > rank:
            return self._clamp(0.0)
        for index in sorted(self._positive):
            seen += self._positive[index]
            if seen > rank:
                return self._clamp(self._bucket_value(index))
        return self._max

    def _clamp(self, value: float) -> float:
        return min(max(value, self._min), self._max)

    def min(self) -> float:
        """The smallest recorded value, or infinity if none."""
        return self._min

    def max(self) -> float:
        """The largest recorded value, or negative infinity if none."""
        return self._max


MetricValue = int | float | Summary
LabelsLike = Mapping[str, str] | Iterable[Label | tuple[str, str]]


def _make_key(name: str, labels: LabelsLike) -> Key:
    items = labels.items() if isinstance(labels, Mapping) else labels
    converted = [item if isinstance(item, Label) else Label(*item) for item in items]
    converted.sort(key=lambda label: label.key)
    return Key(name, tuple(converted))


class MetricStore:
    """Thread-safe collection of metric values and their units and descriptions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._metrics: dict[tuple[MetricKind, Key], MetricValue] = {}
        self._metadata: dict[tuple[MetricKind, str], tuple[Unit | None, str | None]] = {}
        self.state = ClientState.disconnected_with()

    def describe(
        self,
        kind: MetricKind,
        name: str,
        unit: Unit | str | None,
        description: str | None,
    ) -> None:
        """Set the unit and description of every metric of ``kind`` named ``name``.

        A unit given as text that names no known unit is stored as no unit.
        """
        if isinstance(unit, str):
            unit = Unit.from_string(unit)
        with self._lock:
            self._metadata[(MetricKind(kind), name)] = (unit, description)

    def increment_counter(self, name: str, labels: LabelsLike, value: int) -> None:
        """Add ``value`` to a counter, creating it at zero."""
        slot = (MetricKind.COUNTER, _make_key(name, labels))
        with self._lock:
            self._metrics[slot] = (self._metrics.get(slot, 0) + int(value)) % _U64

    def set_counter(self, name: str, labels: LabelsLike, value: int) -> None:
        """Set a counter to ``value``."""
        slot = (MetricKind.COUNTER, _make_key(name, labels))
        with self._lock:
            self._metrics[slot] = int(value) % _U64

    def increment_gauge(self, name: str, labels: LabelsLike, value: float) -> None:
        """Add ``value`` to a gauge, creating it at zero."""
        slot = (MetricKind.GAUGE, _make_key(name, labels))
        with self._lock:
            self._metrics[slot] = self._metrics.get(slot, 0.0) + float(value)

    def decrement_gauge(self, name: str, labels: LabelsLike, value: float) -> None:
        """Subtract ``value`` from a gauge, creating it at zero."""
        slot = (MetricKind.GAUGE, _make_key(name, labels))
        with self._lock:
            self._metrics[slot] = self._metrics.get(slot, 0.0) - float(value)

    def set_gauge(self, name: str, labels: LabelsLike, value: float) -> None:
        """Set a gauge to ``value``."""
        slot = (MetricKind.GAUGE, _make_key(name, labels))
        with self._lock:
            self._metrics[slot] = float(value)

    def record_histogram(self, name: str, labels: LabelsLike, value: float) -> None:
        """Add ``value`` to a histogram's summary, creating it empty."""
        slot = (MetricKind.HISTOGRAM, _make_key(name, labels))
        with self._lock:
            summary = self._metrics.get(slot)
            if not isinstance(summary, Summary):
                summary = Summary()
                self._metrics[slot] = summary
            summary.add(value)

    def get_metrics(
        self,
    ) -> list[tuple[MetricKind, Key, MetricValue, Unit | None, str | None]]:
        """A snapshot of every metric as ``(kind, key, value, unit, description)``.

        Metrics are ordered by kind, then key.
        """
        with self._lock:
            snapshot = []
            for kind, key in sorted(self._metrics):
                value = self._metrics[(kind, key)]
                unit, description = self._metadata.get((kind, key.name), (None, None))
                snapshot.append((kind, key, copy.deepcopy(value), unit, description))
            return snapshot