"""Human-readable rendering of metric values."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable
from decimal import Decimal
from fractions import Fraction

from metricscope.units import Unit

_DATA_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")
_DATA_OFFSETS = {
    Unit.KIBIBYTES: 1,
    Unit.MEBIBYTES: 2,
    Unit.GIBIBYTES: 3,
    Unit.TEBIBYTES: 4,
}
_NANOS_PER_UNIT = {
    Unit.NANOSECONDS: 1,
    Unit.MICROSECONDS: 1_000,
    Unit.MILLISECONDS: 1_000_000,
    Unit.SECONDS: 1_000_000_000,
}
_MAX_DURATION_SECS = 2**64


def _plain(value: float) -> str:
    """Shortest round-tripping decimal text, without exponent or trailing ``.0``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _fixed2(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return f"{value:.2f}"


def _fmt_decimal(integer_part: int, fractional_part: int, divisor: int, precision: int) -> str:
    precision = min(precision, 9)
    digits: list[int] = []
    while fractional_part > 0 and len(digits) < precision:
        digits.append(fractional_part // divisor)
        fractional_part %= divisor
        divisor //= 10

    if fractional_part > 0 and fractional_part >= divisor * 5:
        carry = True
        for pos in reversed(range(len(digits))):
            if digits[pos] < 9:
                digits[pos] += 1
                carry = False
                break
            digits[pos] = 0
        if carry:
            integer_part += 1

    if not digits:
        return str(integer_part)
    fraction = "".join(map(str, digits)).rstrip("0")
    return f"{integer_part}.{fraction}"


def format_duration(nanos: int) -> str:
    """Render a duration in nanoseconds with a short unit and limited precision."""
    secs, sub_nanos = divmod(nanos, 1_000_000_000)
    if secs > 0:
        return _fmt_decimal(secs, sub_nanos, 100_000_000, 3) + "s"
    if nanos >= 1_000_000:
        return _fmt_decimal(nanos // 1_000_000, nanos % 1_000_000, 100_000, 2) + "ms"
    if nanos >= 1_000:
        return _fmt_decimal(nanos // 1_000, nanos % 1_000, 100, 1) + "µs"
    return _fmt_decimal(nanos, 0, 1, 0) + "ns"


def format_data(value: float, unit: Unit) -> str:
    """Render an amount of data scaled to the largest fitting binary unit."""
    value = float(value)
    unit_idx_max = len(_DATA_UNITS) - 1
    offset = _DATA_OFFSETS.get(unit, 0)

    if math.isnan(value) or value <= 0:
        exponent = 0
    elif math.isinf(value):
        exponent = unit_idx_max
    else:
        exponent = max(0, math.floor(math.log(value) / math.log(1024.0)))

    unit_idx = exponent + offset
    if unit_idx > unit_idx_max:
        exponent -= unit_idx - unit_idx_max
        unit_idx = unit_idx_max
    scaled = value / 1024.0**exponent
    return f"{_fixed2(scaled)} {_DATA_UNITS[unit_idx]}"


def format_time(value: float, unit: Unit) -> str:
    """Render a time value as a duration; non-time units are rendered plainly."""
    value = float(value)
    per_unit = _NANOS_PER_UNIT.get(unit)
    if per_unit is None:
        return _plain(value)

    adjusted = value if unit is Unit.SECONDS else value / (1_000_000_000 / per_unit)
    sign = "-" if adjusted < 0.0 else ""
    normalized = abs(adjusted)
    is_normal = math.isfinite(normalized) and normalized >= sys.float_info.min
    if not is_normal and normalized != 0.0:
        return _plain(value)
    if normalized >= _MAX_DURATION_SECS:
        raise OverflowError("value cannot be represented as a duration")

    nanos = round(Fraction(normalized) * 1_000_000_000)
    return sign + format_duration(nanos)


def format_counter(value: int, unit: Unit | None) -> str:
    """Render a counter value in the given unit."""
    if unit is None:
        return str(value)
    if unit.is_data_based():
        return format_data(float(value), unit)
    if unit.is_time_based():
        return format_duration(value * _NANOS_PER_UNIT[unit])
    return f"{value}{unit.canonical_label()}"


def format_gauge(value: float, unit: Unit | None) -> str:
    """Render a gauge or summary value in the given unit."""
    if unit is None:
        return _plain(value)
    if unit.is_data_based():
        return format_data(value, unit)
    if unit.is_time_based():
        return format_time(value, unit)
    return f"{_fixed2(value)}{unit.canonical_label()}"


def format_metric_line(
    name: str, labels: Iterable[tuple[str, str]], value_text: str, width: int
) -> str:
    """Lay out a metric name, its labels and its value across ``width`` characters.

    The name and labels are placed on the left and the value on the right; if
    there is no room the two are simply joined.
    """
    rendered = [f"{key} = {value}" for key, value in labels]
    display_name = f"{name} [{', '.join(rendered)}]" if rendered else name
    space = max(0, width - len(display_name) - len(value_text))
    return f"{display_name}{' ' * space}{value_text}"