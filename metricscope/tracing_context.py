"""Attach the fields of the active span to metrics as labels.

A :class:`Span` captures its fields, plus those of the span that was current
when it was created, and can record more fields later. While a span is entered,
a :class:`TracingContext` wrapped around a recorder adds the span's fields to
the key of every metric registered through it. Labels given on the metric
itself take precedence over span fields of the same name.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, Protocol

from metricscope.keys import Key, Label
from metricscope.label_filter import Allowlist, IncludeAll, LabelFilter
from metricscope.units import Unit


class _Empty:
    """Marks a span field that is declared but has no value yet."""

    _instance: _Empty | None = None

    def __new__(cls) -> _Empty:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = _Empty()
"""Value for a span field that is declared now and recorded later."""

_current: ContextVar[Span | None] = ContextVar("metricscope_current_span", default=None)


def _label_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    return repr(value)


def current_span() -> Span | None:
    """The innermost span entered in the current context, if any."""
    return _current.get()


class Span:
    """A named scope whose fields are used as labels for metrics emitted inside it.

    ``fields`` maps field names to values; :data:`EMPTY` declares a field without
    a value. Only declared fields can be recorded later. The span inherits the
    labels of the span that is current when it is created, its own fields
    taking precedence.
    """

    def __init__(self, name: str, fields: Mapping[str, Any] | None = None) -> None:
        self.name = name
        self.parent = current_span()
        self._lock = threading.Lock()
        self._tokens: list[Token[Span | None]] = []
        self._declared: set[str] = set()
        labels: dict[str, str] = {}
        for field_name, value in dict(fields or {}).items():
            self._declared.add(field_name)
            if value is not EMPTY:
                labels[field_name] = _label_value(value)
        if self.parent is not None:
            for key, value in self.parent.labels().items():
                labels.setdefault(key, value)
        self._labels = labels

    def __repr__(self) -> str:
        return f"Span(name={self.name!r}, labels={self._labels!r})"

    def record(self, name: str, value: Any) -> None:
        """Set a declared field, replacing any value it had; undeclared fields are ignored."""
        if name not in self._declared or value is EMPTY:
            return
        with self._lock:
            self._labels[name] = _label_value(value)

    def labels(self) -> dict[str, str]:
        """A copy of the span's labels, in the order they were first set."""
        with self._lock:
            return dict(self._labels)

    def __enter__(self) -> Span:
        self._tokens.append(_current.set(self))
        return self

    def __exit__(self, *args: object) -> None:
        _current.reset(self._tokens.pop())


class Recorder(Protocol):
    """What a recorder wrapped by :class:`TracingContext` must provide."""

    def describe_counter(self, name: str, unit: Unit | None, description: str) -> Any: ...

    def describe_gauge(self, name: str, unit: Unit | None, description: str) -> Any: ...

    def describe_histogram(self, name: str, unit: Unit | None, description: str) -> Any: ...

    def register_counter(self, key: Key, metadata: Any) -> Any: ...

    def register_gauge(self, key: Key, metadata: Any) -> Any: ...

    def register_histogram(self, key: Key, metadata: Any) -> Any: ...


@dataclass(frozen=True)
class TracingContextLayer:
    """Wraps recorders in a :class:`TracingContext` using a label filter."""

    label_filter: LabelFilter = field(default_factory=IncludeAll)

    @classmethod
    def all(cls) -> TracingContextLayer:
        """A layer that adds every span field as a label."""
        return cls(IncludeAll())

    @classmethod
    def only_allow(cls, allowed: Iterable[str]) -> TracingContextLayer:
        """A layer that adds only span fields whose names are in ``allowed``."""
        return cls(Allowlist(allowed))

    def layer(self, inner: Recorder) -> TracingContext:
        """Wrap ``inner``."""
        return TracingContext(inner, self.label_filter)


class TracingContext:
    """A recorder that adds the current span's labels to every registered metric key."""

    def __init__(self, inner: Recorder, label_filter: LabelFilter) -> None:
        self.inner = inner
        self.label_filter = label_filter

    def __repr__(self) -> str:
        return f"TracingContext(inner={self.inner!r}, label_filter={self.label_filter!r})"

    def _enhance_key(self, key: Key) -> Key | None:
        span = current_span()
        if span is None:
            return None
        span_labels = span.labels()
        if not span_labels:
            return None
        merged = {
            name: value
            for name, value in span_labels.items()
            if self.label_filter.should_include_label(key.name, Label(name, value))
        }
        for label in key.labels:
            merged[label.key] = label.value
        return key.with_labels(Label(name, value) for name, value in merged.items())

    def _key_for(self, key: Key) -> Key:
        enhanced = self._enhance_key(key)
        return key if enhanced is None else enhanced

    def describe_counter(self, name: str, unit: Unit | None, description: str) -> Any:
        """Pass a counter description to the wrapped recorder."""
        return self.inner.describe_counter(name, unit, description)

    def describe_gauge(self, name: str, unit: Unit | None, description: str) -> Any:
        """Pass a gauge description to the wrapped recorder."""
        return self.inner.describe_gauge(name, unit, description)

    def describe_histogram(self, name: str, unit: Unit | None, description: str) -> Any:
        """Pass a histogram description to the wrapped recorder."""
        return self.inner.describe_histogram(name, unit, description)

    def register_counter(self, key: Key, metadata: Any = None) -> Any:
        """Register a counter with the span's labels added to ``key``."""
        return self.inner.register_counter(self._key_for(key), metadata)

    def register_gauge(self, key: Key, metadata: Any = None) -> Any:
        """Register a gauge with the span's labels added to ``key``."""
        return self.inner.register_gauge(self._key_for(key), metadata)

    def register_histogram(self, key: Key, metadata: Any = None) -> Any:
        """Register a histogram with the span's labels added to ``key``."""
        return self.inner.register_histogram(self._key_for(key), metadata)