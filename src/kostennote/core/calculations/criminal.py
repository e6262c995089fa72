"""
Criminal proceedings under AHK §§ 9 and 10.

Acts of § 9 are priced from fixed bands per court type, hearings per half
hour. Acts billed under the RATG (§ 10) use the court type's fixed
monetary base. Co-defendant and success surcharges are computed once per
case over the cumulative basis of all acts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from kostennote.core.calculations import surcharges
from kostennote.core.calculations.aggregator import aggregate
from kostennote.core.calculations.tariff_lookup import base_fee, mileage_fee, travel_time_fee
from kostennote.core.calculations.validation import checked_count, checked_multiplier
from kostennote.core.errors import UnmappedServiceType
from kostennote.core.models.criminal import CourtType, CriminalActType, CriminalCase, CriminalService
from kostennote.core.models.result import STANDARD_VAT_PERCENT, CalculatedLine, TotalResult
from kostennote.core.models.service import FilingRate
from kostennote.core.models.tariff import AhkSchedule, HalfHourRate, RatgPeriod, TariffCatalog, TariffTier
from kostennote.core.services.tariff_catalog import load_catalog, ratg_period_for
from kostennote.utils.money import format_euro, format_whole_euro, percent_of

HEARING_DEFAULT_HALF_HOURS = 2

_AHK_KEYS = {
    CriminalActType.MAIN_HEARING: "hearing_first_instance",
    CriminalActType.ADVERSARIAL_EXAMINATION: "hearing_first_instance",
    CriminalActType.APPEAL_FULL: "appeal_full",
    CriminalActType.APPEAL_SENTENCE: "appeal_sentence",
    CriminalActType.APPEAL_HEARING_FULL: "appeal_hearing_full",
    CriminalActType.APPEAL_HEARING_SENTENCE: "appeal_hearing_sentence",
    CriminalActType.APPEAL: "appeal",
    CriminalActType.APPEAL_HEARING: "appeal_hearing",
    CriminalActType.NULLITY_APPEAL: "nullity_appeal",
    CriminalActType.NULLITY_HEARING: "nullity_hearing",
    CriminalActType.DETENTION_HEARING_FIRST: "detention_hearing_first",
    CriminalActType.FUNDAMENTAL_RIGHTS_COMPLAINT: "fundamental_rights_complaint",
    CriminalActType.DETENTION_COMPLAINT: "detention_complaint",
    CriminalActType.DETENTION_HEARING_SECOND: "detention_hearing_second",
}

_RATG_TIERS = {
    CriminalActType.RATG_TP2: TariffTier.TP2,
    CriminalActType.RATG_TP3A: TariffTier.TP3A,
    CriminalActType.RATG_TP3B: TariffTier.TP3B,
    CriminalActType.RATG_TP7_2: TariffTier.TP7_2,
    CriminalActType.WAITING: TariffTier.TP7_2,
}

_NULLITY_ACTS = (CriminalActType.NULLITY_APPEAL, CriminalActType.NULLITY_HEARING)


@dataclass
class ActLines:
    """Lines of one act and the share it contributes to the case-level surcharges."""

    lines: list[CalculatedLine]
    basis_cents: int = 0


def half_hour_fee(rate: HalfHourRate, half_hours: int) -> tuple[int, str]:
    half_hours = checked_count(half_hours, "hearing duration") or HEARING_DEFAULT_HALF_HOURS
    further = (half_hours - 1) * rate.subsequent
    total = rate.first + further
    trace = f"1. halbe Stunde: {format_euro(rate.first)}"
    if half_hours > 1:
        trace += f"\n{half_hours - 1} weitere ½ Std × {format_euro(rate.subsequent)} = {format_euro(further)}"
    trace += f"\nGesamt: {format_euro(total)}"
    return total, trace


def line_factory(service, vat_rate: int):
    def make(label, section, interval, amount, trace, base=0):
        return CalculatedLine(
            date=service.date,
            label=label,
            section=section,
            interval=interval,
            vat_rate=vat_rate,
            amount_cents=amount,
            base_cents=base,
            trace=trace,
            service_id=service.id,
        )

    return make


def flat_rate_line(make, amount: int, percent: int, multiplier: int, *, section: str, interval: str = "-", base: int = 0):
    if multiplier <= 0 or percent <= 0:
        return None
    effective = percent * multiplier
    es = percent_of(amount, effective)
    return make(
        f"Einheitssatz {effective}%", section, interval, es, f"{multiplier}× ES auf {format_euro(amount)}", base
    )


def filing_fee_line(make, period: RatgPeriod, override: FilingRate | None):
    amount, trace = surcharges.filing_fee(period, override=override)
    return make("ERV-Beitrag (§ 23a RATG)", "§ 23a RATG", "-", amount, trace)


def ratg_act_lines(
    service,
    tier: TariffTier,
    base_cents: int,
    *,
    period: RatgPeriod,
    vat_rate: int,
    label: str,
    section_suffix: str,
) -> ActLines:
    """An act billed under the RATG on a fixed base; time fees carry at most a single ES."""
    make = line_factory(service, vat_rate)
    tariff = base_fee(base_cents, tier, period=period)
    interval = f"BMGL € {format_whole_euro(base_cents // 100)}"
    if tier.is_commission:
        half_hours = max(1, checked_count(service.units_of_duration, "units of duration"))
        amount = tariff.amount_cents * half_hours
        trace = f"{tier.label} ({half_hours} × ½ Std.) bei {interval}: {format_euro(amount)}"
        multiplier = min(service.es_multiplier, 1)
    else:
        amount = tariff.amount_cents
        interval = tariff.label
        trace = f"{tier.label} bei {format_euro(base_cents)}: {format_euro(amount)}"
        multiplier = service.es_multiplier

    section = f"RATG {tier.label} ({section_suffix})"
    result = ActLines([make(service.label or label, section, interval, amount, trace, base_cents)], amount)
    es = flat_rate_line(
        make,
        amount,
        surcharges.es_percent(base_cents, period),
        multiplier,
        section="§ 23 RATG",
        interval=interval,
        base=base_cents,
    )
    if es is not None:
        result.lines.append(es)
        result.basis_cents += es.amount_cents
    if service.include_electronic_filing_fee and not tier.is_commission:
        result.lines.append(filing_fee_line(make, period, service.electronic_filing_rate_override))
    return result


def case_surcharge_lines(
    basis_cents: int,
    *,
    co_defendants: int,
    success_percent: int,
    ahk: AhkSchedule,
    day: date | None,
    vat_rate: int,
    prefix: str,
    co_defendant_section: str,
    success_section: str,
    success_interval: str,
) -> list[CalculatedLine]:
    """Co-defendant and success surcharges over the cumulative basis of a case."""
    co_defendant = surcharges.co_defendant_surcharge(basis_cents, co_defendants, ahk)
    bonus = surcharges.success_bonus(basis_cents, success_percent, ahk)
    lines = []
    if co_defendant.amount_cents > 0:
        lines.append(
            CalculatedLine(
                date=day,
                label=f"Streitgenossenzuschlag ({co_defendant.percent}%)",
                section=co_defendant_section,
                interval=f"{co_defendants} × {ahk.co_defendant_percent}%",
                vat_rate=vat_rate,
                amount_cents=co_defendant.amount_cents,
                base_cents=basis_cents,
                trace=co_defendant.trace,
                service_id=f"{prefix}_sg",
            )
        )
    if bonus.amount_cents > 0:
        lines.append(
            CalculatedLine(
                date=day,
                label=f"Erfolgszuschlag ({bonus.percent}%)",
                section=success_section,
                interval=success_interval,
                vat_rate=vat_rate,
                amount_cents=bonus.amount_cents,
                base_cents=basis_cents,
                trace=bonus.trace,
                service_id=f"{prefix}_erfolg",
            )
        )
    return lines


def _ahk_act_lines(
    service: CriminalService,
    court: CourtType,
    ahk: AhkSchedule,
    es_percent: int,
    period: RatgPeriod,
    vat_rate: int,
) -> ActLines:
    act = service.act_type
    try:
        rate = ahk.courts[court.value][_AHK_KEYS[act]]
    except KeyError as exc:
        raise UnmappedServiceType(f"{act.label} is not available before the {court.label}") from exc

    make = line_factory(service, vat_rate)
    hearing = isinstance(rate, HalfHourRate)
    if hearing:
        amount, trace = half_hour_fee(rate, service.units_of_duration)
    else:
        amount, trace = rate, f"{act.label}: {format_euro(rate)}"

    result = ActLines([make(service.label or act.label, "AHK § 9", court.label, amount, trace)], amount)
    if service.nullity_with_appeal and act in _NULLITY_ACTS:
        extra = surcharges.nullity_with_appeal_surcharge(amount, ahk)
        result.lines.append(
            make(f"Zuschlag NB + Berufung (+{extra.percent}%)", "AHK § 9 Abs 2", "-", extra.amount_cents, extra.trace)
        )
        result.basis_cents += extra.amount_cents

    es = flat_rate_line(make, amount, es_percent, service.es_multiplier, section="§ 23 RATG (sinngemäß)")
    if es is not None:
        result.lines.append(es)
        result.basis_cents += es.amount_cents

    if service.include_electronic_filing_fee and not hearing:
        result.lines.append(filing_fee_line(make, period, service.electronic_filing_rate_override))
    return result


def travel_act_lines(service: CriminalService, *, period: RatgPeriod, vat_rate: int) -> ActLines:
    """Kilometre allowance or travel time; neither carries ES nor enters the surcharge basis."""
    make = line_factory(service, vat_rate)
    act = CriminalActType(service.act_type)
    if act == CriminalActType.TRAVEL_COSTS:
        amount, trace = mileage_fee(service.kilometres, return_trip=service.return_trip, period=period)
        section, interval = "TP 9 Z 3 RATG", f"{service.kilometres} km"
    else:
        half_hours = service.units_of_duration or 1
        amount, trace = travel_time_fee(half_hours, period=period)
        section, interval = "TP 9 Z 4 RATG", f"{half_hours} × ½ Std"
    return ActLines([make(service.label or act.label, section, interval, amount, trace)])


def _validated(services: Iterable[CriminalService]) -> list[CriminalService]:
    services = list(services)
    for service in services:
        try:
            CriminalActType(service.act_type)
        except ValueError as exc:
            raise UnmappedServiceType(f"Unknown criminal act: {service.act_type!r}") from exc
        checked_multiplier(service.es_multiplier)
        checked_count(service.units_of_duration, "units of duration")
        checked_count(service.kilometres, "kilometres")
    return services


def calculate_criminal_costs(
    case: CriminalCase,
    services: Iterable[CriminalService],
    *,
    catalog: TariffCatalog | None = None,
) -> TotalResult:
    catalog = catalog or load_catalog()
    ahk = catalog.ahk
    services = _validated(services)
    court = CourtType(case.court_type)
    ratg_court = CourtType(case.detention_origin) if court == CourtType.HAFT and case.detention_origin else court
    base_cents = ahk.ratg_bases[ratg_court.value]
    vat_rate = 0 if case.vat_free else STANDARD_VAT_PERCENT

    lines: list[CalculatedLine] = []
    basis = 0
    for service in services:
        period = ratg_period_for(service.date, catalog)
        act = CriminalActType(service.act_type)
        if act.is_travel:
            result = travel_act_lines(service, period=period, vat_rate=vat_rate)
        elif act in _RATG_TIERS:
            result = ratg_act_lines(
                service,
                _RATG_TIERS[act],
                base_cents,
                period=period,
                vat_rate=vat_rate,
                label=act.label,
                section_suffix="§ 10 AHK",
            )
        else:
            es_percent = surcharges.es_percent(base_cents, period)
            result = _ahk_act_lines(service, court, ahk, es_percent, period, vat_rate)
        lines.extend(result.lines)
        basis += result.basis_cents

    lines.extend(
        case_surcharge_lines(
            basis,
            co_defendants=case.co_defendants,
            success_percent=case.success_bonus_percent,
            ahk=ahk,
            day=services[0].date if services else None,
            vat_rate=vat_rate,
            prefix="straf",
            co_defendant_section="§ 10 Abs 3 AHK",
            success_section="§ 10 AHK",
            success_interval="Freispruch/Einstellung",
        )
    )
    return aggregate(lines)
