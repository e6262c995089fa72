from __future__ import annotations

__all__ = [
    "FeeCalculationError",
    "InvalidInput",
    "UnmappedServiceType",
    "TariffDataError",
]


class FeeCalculationError(Exception):
    """Base class for everything the fee core raises on purpose."""


class InvalidInput(FeeCalculationError, ValueError):
    """Malformed numeric input: negative amounts, negative durations, bad multipliers."""


class UnmappedServiceType(FeeCalculationError, LookupError):
    """A service tag that no billing branch handles (or the court type does not offer)."""


class TariffDataError(FeeCalculationError, RuntimeError):
    """Tariff schedule files are missing or malformed."""
