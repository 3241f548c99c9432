# metricscope

Building blocks for collecting, labelling and showing application metrics. Pure
Python, no dependencies outside the standard library.

## Modules

- `metricscope.bucket`: `AtomicBucket`, a thread-safe, append-only bucket of values
  stored as a chain of fixed-size `Block`s (64 values each). It can be read as a whole
  (`data`, `data_with`) or drained (`clear`, `clear_with`); blocks come back newest
  first, with values inside a block in the order they were pushed. `is_empty` tells
  whether it holds anything. A full `Block` raises `BlockFullError` on `push`.
- `metricscope.units`: the `Unit` enum (`Unit.from_string`, `is_time_based`,
  `is_data_based`, `canonical_label`).
- `metricscope.keys`: `Label` and `Key`, a metric name with an ordered tuple of labels.
- `metricscope.store`: `MetricStore`, a thread-safe store of counters, gauges and
  histogram `Summary` sketches keyed by `MetricKind`, name and labels, together with the
  unit and description given through `describe`. `get_metrics` returns a snapshot of
  `(kind, key, value, unit, description)` tuples ordered by kind, then key. Also holds
  `ClientState`, a simple connected/disconnected value with an optional reason.
- `metricscope.display`: readable text for values: `format_counter`, `format_gauge`,
  `format_data` (binary units up to PiB), `format_time`, `format_duration`, and
  `format_metric_line` for a name-and-labels left, value right line of a given width.
- `metricscope.selector`: `Selector`, the selected row of a list that wraps around at
  both ends (`next`, `previous`, `top`, `bottom`, `set_length`).
- `metricscope.label_filter`: `LabelFilter`, with `IncludeAll` and `Allowlist`.
- `metricscope.tracing_context`: `Span`, a context manager whose fields (and those of
  the span current when it was created) become labels on metrics registered while it is
  entered, through `TracingContextLayer` and `TracingContext`. `current_span()` returns
  the innermost entered span.
- `metricscope.crusher`: a producer/consumer stress test for `AtomicBucket`.

## Installation

```
pip install metricscope
```

## Examples

### Bucket

```python
from metricscope.bucket import AtomicBucket

bucket = AtomicBucket()
for value in range(100):
    bucket.push(value)

print(len(bucket.data()))          # 100

drained = []
bucket.clear_with(drained.extend)
print(sum(drained), bucket.is_empty())   # 4950 True
```

### Store and display

```python
from metricscope.display import format_counter, format_metric_line
from metricscope.store import MetricKind, MetricStore

store = MetricStore()
store.describe(MetricKind.COUNTER, "requests", "count", "Requests served")
store.increment_counter("requests", {"path": "/"}, 3)

for kind, key, value, unit, description in store.get_metrics():
    labels = [(label.key, label.value) for label in key.labels]
    print(format_metric_line(key.name, labels, f"total: {format_counter(value, unit)}", 40))
```

`format_duration(1_500_000)` gives `"1.5ms"`; `format_data(1536, Unit.BYTES)` gives
`"1.50 KiB"`.

### Span labels

`TracingContext` wraps any object that has `describe_counter`, `describe_gauge`,
`describe_histogram`, `register_counter`, `register_gauge` and `register_histogram`
methods, and passes each registered key on with the current span's fields added.
Labels given on the key win over span fields of the same name.

```python
from metricscope.keys import Key
from metricscope.tracing_context import Span, TracingContextLayer


class PrintingRecorder:
    def describe_counter(self, name, unit, description): ...
    def describe_gauge(self, name, unit, description): ...
    def describe_histogram(self, name, unit, description): ...
    def register_counter(self, key, metadata):
        print(key)
    def register_gauge(self, key, metadata):
        print(key)
    def register_histogram(self, key, metadata):
        print(key)


recorder = TracingContextLayer.all().layer(PrintingRecorder())

with Span("login", {"user": "ferris"}):
    recorder.register_counter(Key("login_attempts", [("service", "login_service")]), None)
# login_attempts [user = ferris, service = login_service]
```

`TracingContextLayer.only_allow(["env", "service"])` keeps only span fields with those
names. Fields declared with `tracing_context.EMPTY` can be filled in later with
`Span.record`.

## Stress test

```
metricscope-crusher --duration 10 --producers 4
```

Runs the given number of producer threads against one draining consumer for the given
number of seconds (default 60, one producer), then logs the totals and counts each side
reported; the two should agree. `metricscope-crusher --help` lists the options.

## What it does not do

The package does not connect to anything or receive metric events over the network,
and it has no terminal screen of its own. `MetricStore` is filled by calling its methods,
and `display` and `Selector` only produce text and selection state for a screen you
build yourself. There is also no global recorder: metrics reach a `TracingContext` only
when your code calls it.