from __future__ import annotations

from decimal import Decimal, InvalidOperation

from kostennote.core.errors import InvalidInput
from kostennote.utils.money import round_half_up


def checked_cents(value, what: str = "monetary base") -> int:
    """Return ``value`` as whole cents; reject negative or non-finite amounts."""
    if isinstance(value, bool):
        raise InvalidInput(f"{what} must be an amount of cents, got {value!r}")
    try:
        number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidInput(f"{what} must be an amount of cents, got {value!r}") from exc
    if not number.is_finite() or number < 0:
        raise InvalidInput(f"{what} must be finite and non-negative, got {value!r}")
    return round_half_up(number)


def checked_count(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{what} must be a whole number, got {value!r}")
    if value < 0:
        raise InvalidInput(f"{what} must not be negative, got {value!r}")
    return value


def checked_multiplier(value) -> int:
    multiplier = checked_count(value, "ES multiplier")
    if multiplier > 2:
        raise InvalidInput(f"ES multiplier must be 0, 1 or 2, got {value!r}")
    return multiplier
