from __future__ import annotations

from dataclasses import dataclass
from datetime import date

COURT_FEE_SERVICE_ID = "ggg"
STANDARD_VAT_PERCENT = 20


@dataclass(frozen=True)
class CalculatedLine:
    date: date | None
    label: str
    section: str
    interval: str
    vat_rate: int
    amount_cents: int
    base_cents: int
    trace: str
    service_id: str

    @property
    def is_court_fee(self) -> bool:
        return self.service_id == COURT_FEE_SERVICE_ID


@dataclass(frozen=True)
class TotalResult:
    lines: tuple[CalculatedLine, ...]
    net_cents: int
    vat_cents: int
    court_fee_cents: int
    total_cents: int

    def lines_for(self, service_id: str) -> list[CalculatedLine]:
        return [line for line in self.lines if line.service_id == service_id]
