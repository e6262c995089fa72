"""
Integer-cent arithmetic shared by the tariff calculators.

Percentages are applied through ``Decimal`` and rounded half up, never with
binary floats. Display helpers use the Austrian notation (``1.234,50``).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, Decimal]

_ONE = Decimal(1)


def round_half_up(value: Number) -> int:
    return int(Decimal(value).quantize(_ONE, rounding=ROUND_HALF_UP))


def round_to_ten(value: Number) -> int:
    """Statutory rounding to full 10 cents."""
    return round_half_up(Decimal(value) / 10) * 10


def half_to_ten(amount: Number) -> int:
    return round_to_ten(Decimal(amount) / 2)


def percent_of(amount: int, percent: Number) -> int:
    return round_half_up(Decimal(amount) * Decimal(percent) / 100)


def _group(whole: int) -> str:
    return f"{whole:,}".replace(",", ".")


def format_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    whole, rest = divmod(abs(int(cents)), 100)
    return f"{sign}{_group(whole)},{rest:02d}"


def format_euro(cents: int) -> str:
    return f"{format_cents(cents)} €"


def format_whole_euro(euros: int) -> str:
    return _group(int(euros))


def format_percent(value: Number) -> str:
    text = format(Decimal(value).normalize(), "f")
    return text.replace(".", ",")
