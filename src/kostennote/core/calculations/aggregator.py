from __future__ import annotations

from typing import Iterable

from kostennote.core.models.result import STANDARD_VAT_PERCENT, CalculatedLine, TotalResult
from kostennote.utils.money import percent_of


def aggregate(lines: Iterable[CalculatedLine]) -> TotalResult:
    """
    Sum a statement.

    Net covers every line except court fees, VAT is 20 % of the lines carrying
    a VAT rate, court fees are passed through untaxed.
    """
    lines = tuple(lines)
    net = sum(line.amount_cents for line in lines if not line.is_court_fee)
    court_fees = sum(line.amount_cents for line in lines if line.is_court_fee)
    taxable = sum(line.amount_cents for line in lines if line.vat_rate > 0)
    vat = percent_of(taxable, STANDARD_VAT_PERCENT)
    return TotalResult(
        lines=lines,
        net_cents=net,
        vat_cents=vat,
        court_fee_cents=court_fees,
        total_cents=net + vat + court_fees,
    )
