"""Metric buckets, an in-memory metric store, span-field labelling and value formatting."""

__version__ = "0.1.0"

__all__ = [
    "bucket",
    "crusher",
    "display",
    "keys",
    "label_filter",
    "selector",
    "store",
    "tracing_context",
    "units",
]