from __future__ import annotations

from typing import Iterable

from kostennote.core.calculations import court_fees
from kostennote.core.calculations.aggregator import aggregate
from kostennote.core.calculations.service_lines import calculate_service_lines
from kostennote.core.calculations.validation import checked_cents, checked_count
from kostennote.core.models.case import CaseParameters
from kostennote.core.models.result import COURT_FEE_SERVICE_ID, CalculatedLine, TotalResult
from kostennote.core.models.service import Service
from kostennote.core.models.tariff import TariffCatalog
from kostennote.utils.money import format_euro


class PricingEngine:
    """Turns case parameters and an ordered list of services into a fee statement."""

    def __init__(self, catalog: TariffCatalog | None = None):
        self.catalog = catalog

    def update_catalog(self, catalog: TariffCatalog | None) -> None:
        self.catalog = catalog

    def court_fee_line(self, case: CaseParameters, services: list[Service]) -> CalculatedLine | None:
        """
        The single court-fee line of a statement, or None.

        Automatic mode derives the post from the services and stays silent
        without any; manual mode uses the entered amount when it is positive.
        """
        base = checked_cents(case.base_cents)
        if not case.auto_court_fee:
            manual = checked_cents(case.manual_court_fee_cents, "manual court fee")
            if manual <= 0:
                return None
            return CalculatedLine(
                date=services[0].date if services else None,
                label="Pauschalgebühr (Manuell)",
                section="Tarifpost 1 GGG",
                interval="-",
                vat_rate=0,
                amount_cents=manual,
                base_cents=base,
                trace="Manuelle Eingabe",
                service_id=COURT_FEE_SERVICE_ID,
            )
        if not services:
            return None

        initiating = next((service for service in services if service.is_initiating_act), services[0])
        derived = court_fees.derive(services, case.procedure)
        fee = court_fees.court_fee(
            derived.post,
            base,
            checked_count(case.co_litigants, "co-litigant count"),
            on=initiating.date,
            catalog=self.catalog,
        )
        return CalculatedLine(
            date=initiating.date,
            label=f"Pauschalgebühr (GGG {derived.label})",
            section=f"GGG {derived.label}",
            interval=f"{derived.instance_label} - {fee.label}",
            vat_rate=0,
            amount_cents=fee.total_cents,
            base_cents=base,
            trace=fee.trace,
            service_id=COURT_FEE_SERVICE_ID,
        )

    def calculate(self, case: CaseParameters, services: Iterable[Service]) -> TotalResult:
        services = list(services)
        lines: list[CalculatedLine] = []
        court_fee = self.court_fee_line(case, services)
        if court_fee is not None:
            lines.append(court_fee)
        for service in services:
            lines.extend(calculate_service_lines(service, case, catalog=self.catalog))
        return aggregate(lines)

    @staticmethod
    def format_currency(cents: int) -> str:
        return format_euro(cents)
