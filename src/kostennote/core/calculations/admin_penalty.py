"""Administrative penalty proceedings (AHK § 13)."""

from __future__ import annotations

from typing import Iterable

from kostennote.core.calculations import surcharges
from kostennote.core.calculations.aggregator import aggregate
from kostennote.core.calculations.criminal import (
    ActLines,
    case_surcharge_lines,
    filing_fee_line,
    flat_rate_line,
    half_hour_fee,
    line_factory,
    ratg_act_lines,
)
from kostennote.core.calculations.tariff_lookup import base_fee
from kostennote.core.calculations.validation import checked_cents, checked_count, checked_multiplier
from kostennote.core.errors import UnmappedServiceType
from kostennote.core.models.criminal import (
    AdminPenaltyActType,
    AdminPenaltyCase,
    AdminPenaltyService,
    CourtType,
    PenaltyTier,
)
from kostennote.core.models.result import STANDARD_VAT_PERCENT, CalculatedLine, TotalResult
from kostennote.core.models.tariff import RatgPeriod, TariffCatalog, TariffTier
from kostennote.core.services.tariff_catalog import load_catalog, ratg_period_for
from kostennote.utils.money import format_euro

SECTION = "§ 13 AHK (§ 9 sinngemäß)"

_HEARING_KEYS = {
    AdminPenaltyActType.HEARING: ("hearing_first_instance",),
    AdminPenaltyActType.APPEAL_HEARING_FULL: ("appeal_hearing_full", "appeal_hearing"),
    AdminPenaltyActType.APPEAL_HEARING_SENTENCE: ("appeal_hearing_sentence", "appeal_hearing"),
}

_COMPLAINTS = (AdminPenaltyActType.COMPLAINT_FULL, AdminPenaltyActType.COMPLAINT_SENTENCE)

_RATG_TIERS = {
    AdminPenaltyActType.RATG_TP2: TariffTier.TP2,
    AdminPenaltyActType.RATG_TP3A: TariffTier.TP3A,
    AdminPenaltyActType.RATG_TP3B: TariffTier.TP3B,
    AdminPenaltyActType.RATG_TP7_2: TariffTier.TP7_2,
    AdminPenaltyActType.WAITING: TariffTier.TP7_2,
}


def penalty_base(case: AdminPenaltyCase, catalog: TariffCatalog) -> int:
    """Monetary base of the penalty tier, raised by the forfeiture value (§ 13 Abs 3)."""
    tier = PenaltyTier(case.tier)
    return catalog.ahk.admin_penalty_bases[tier.value] + checked_cents(case.forfeiture_cents, "forfeiture value")


def _hearing(service, act, rates: dict, court: CourtType, es_percent: int, vat_rate: int, sentence_only: bool) -> ActLines:
    rate = next((rates[key] for key in _HEARING_KEYS[act] if key in rates), None)
    if rate is None:
        raise UnmappedServiceType(f"{act.label} is not available before the {court.label}")
    make = line_factory(service, vat_rate)
    amount, trace = half_hour_fee(rate, service.units_of_duration)
    if sentence_only:
        trace += " (nur Strafhöhe)"
    result = ActLines([make(service.label or act.label, SECTION, court.label, amount, trace)], amount)
    es = flat_rate_line(make, amount, es_percent, min(service.es_multiplier, 1), section="§ 23 RATG (sinngemäß)")
    if es is not None:
        result.lines.append(es)
        result.basis_cents += es.amount_cents
    return result


def _complaint(
    service,
    act,
    rates: dict,
    court: CourtType,
    base_cents: int,
    es_percent: int,
    period: RatgPeriod,
    vat_rate: int,
    sentence_only: bool,
) -> ActLines:
    if sentence_only and "appeal_sentence" in rates:
        amount = rates["appeal_sentence"]
    elif "appeal_full" in rates:
        amount = rates["appeal_full"]
    elif "appeal" in rates:
        amount = rates["appeal"]
    else:
        amount = base_fee(base_cents, TariffTier.TP3B, period=period).amount_cents
    make = line_factory(service, vat_rate)
    scope = "(nur Strafhöhe)" if sentence_only else "(voll)"
    result = ActLines(
        [make(service.label or act.label, SECTION, court.label, amount, f"Beschwerde {scope}: {format_euro(amount)}")],
        amount,
    )
    es = flat_rate_line(make, amount, es_percent, service.es_multiplier, section="§ 23 RATG (sinngemäß)")
    if es is not None:
        result.lines.append(es)
        result.basis_cents += es.amount_cents
    if service.include_electronic_filing_fee:
        result.lines.append(filing_fee_line(make, period, service.electronic_filing_rate_override))
    return result


def calculate_admin_penalty_costs(
    case: AdminPenaltyCase,
    services: Iterable[AdminPenaltyService],
    *,
    catalog: TariffCatalog | None = None,
) -> TotalResult:
    catalog = catalog or load_catalog()
    services = list(services)
    base_cents = penalty_base(case, catalog)
    court = PenaltyTier(case.tier).court_type
    rates = catalog.ahk.courts[court.value]
    vat_rate = 0 if case.vat_free else STANDARD_VAT_PERCENT

    lines: list[CalculatedLine] = []
    basis = 0
    for service in services:
        try:
            act = AdminPenaltyActType(service.act_type)
        except ValueError as exc:
            raise UnmappedServiceType(f"Unknown administrative penalty act: {service.act_type!r}") from exc
        checked_multiplier(service.es_multiplier)
        checked_count(service.units_of_duration, "units of duration")
        period = ratg_period_for(service.date, catalog)
        es_percent = surcharges.es_percent(base_cents, period)
        sentence_only = service.sentence_only or act.sentence_only

        if act in _HEARING_KEYS:
            result = _hearing(service, act, rates, court, es_percent, vat_rate, sentence_only)
        elif act in _COMPLAINTS:
            result = _complaint(service, act, rates, court, base_cents, es_percent, period, vat_rate, sentence_only)
        else:
            result = ratg_act_lines(
                service,
                _RATG_TIERS[act],
                base_cents,
                period=period,
                vat_rate=vat_rate,
                label=act.label,
                section_suffix="§ 13 AHK",
            )
        lines.extend(result.lines)
        basis += result.basis_cents

    lines.extend(
        case_surcharge_lines(
            basis,
            co_defendants=case.co_defendants,
            success_percent=case.success_bonus_percent,
            ahk=catalog.ahk,
            day=services[0].date if services else None,
            vat_rate=vat_rate,
            prefix="vstraf",
            co_defendant_section="§ 13 AHK iVm § 10 Abs 3 AHK",
            success_section="§ 13 AHK",
            success_interval="Erfolg",
        )
    )
    return aggregate(lines)
