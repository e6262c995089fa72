"""
Base fees of RATG Anlage 1 by monetary base and Tarifpost.

Up to the last tabulated threshold (10.170 €) the bracket value applies ("bis X"
includes X). Above it the fee grows by one step per started 1.450 € up to
34.820 €, one more step up to 36.340 €, then by a per-mille surcharge of the
excess (half rate beyond 363.360 €) rounded to 10 cents, capped at the tier
maximum. Letter tiers TP 5 / TP 6 use their own six brackets and steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from kostennote.core.calculations.validation import checked_cents, checked_count
from kostennote.core.models.service import CriminalVariant
from kostennote.core.models.tariff import HourCap, RatgPeriod, TariffCatalog, TariffTier
from kostennote.core.services.tariff_catalog import ratg_period_for
from kostennote.utils.money import (
    format_euro,
    format_percent,
    format_whole_euro,
    half_to_ten,
    percent_of,
    round_to_ten,
)

STEP_INTERVAL = 145_000
SEGMENT_1_END = 3_482_000
SEGMENT_2_END = 3_634_000
SEGMENT_2_STEP = 152_000
PER_MILLE_END = 36_336_000


@dataclass(frozen=True)
class TariffResult:
    amount_cents: int
    label: str
    trace: str
    period_id: str


@dataclass(frozen=True)
class HearingFee:
    amount_cents: int
    first_hour_cents: int
    subsequent_hour_cents: int
    hours: int
    label: str
    trace: str


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def _period(on: date | None, period: RatgPeriod | None, catalog: TariffCatalog | None) -> RatgPeriod:
    return period or ratg_period_for(on, catalog)


def base_fee(
    base_cents,
    tier: TariffTier,
    on: date | None = None,
    *,
    period: RatgPeriod | None = None,
    catalog: TariffCatalog | None = None,
) -> TariffResult:
    """Base fee for ``tier``; commission tiers return the rate per half hour."""
    amount = checked_cents(base_cents)
    tier = TariffTier(tier)
    period = _period(on, period, catalog)
    if tier.is_commission:
        return commission_rate(amount, tier, period=period)
    if tier.is_letter:
        return _letter_fee(amount, tier, period)

    spec = period.tier(tier)
    head = f"RATG {tier.label} ({period.bgbl})"
    for idx, threshold in enumerate(period.thresholds_eur):
        if amount <= threshold * 100:
            value = spec.brackets[idx]
            label = f"bis {format_whole_euro(threshold)} €"
            trace = f"{head}\nAnm. {idx + 1}: {label}\nBetrag: {format_euro(value)}"
            return TariffResult(value, label, trace, period.id)

    segment_start = period.thresholds_eur[-1] * 100
    total = spec.brackets[-1]
    lines = [head, f"Anm. {len(spec.brackets)} (Sockel): {format_euro(total)}"]

    steps = _ceil_div(min(amount, SEGMENT_1_END) - segment_start, STEP_INTERVAL)
    total += steps * spec.step
    lines.append(f"über 10.170 bis 34.820 €: {steps} × {format_euro(spec.step)} = {format_euro(steps * spec.step)}")

    if amount > SEGMENT_1_END:
        steps = _ceil_div(min(amount, SEGMENT_2_END) - SEGMENT_1_END, SEGMENT_2_STEP)
        total += steps * spec.step
        lines.append(f"über 34.820 bis 36.340 €: {steps} × {format_euro(spec.step)} = {format_euro(steps * spec.step)}")

    if amount > SEGMENT_2_END:
        lines.append(f"Sockel (36.340 €): {format_euro(total)}")
        surcharge = Decimal(min(amount, PER_MILLE_END) - SEGMENT_2_END) * spec.per_mille / 1000
        lines.append(f"über 36.340 bis 363.360 €: {format_percent(spec.per_mille)} vT")
        if amount > PER_MILLE_END:
            reduced = spec.per_mille / 2
            surcharge += Decimal(amount - PER_MILLE_END) * reduced / 1000
            lines.append(f"über 363.360 €: {format_percent(reduced)} vT")
        per_mille_total = round_to_ten(surcharge)
        total += per_mille_total
        lines.append(f"vT-Zuschlag: {format_euro(per_mille_total)}")

    if total > spec.max:
        lines.append(f"(Gekappt auf Anm. 13 Höchstbetrag: {format_euro(spec.max)})")
        total = spec.max

    if amount > SEGMENT_2_END:
        label = "über 36.340 €"
    elif amount > SEGMENT_1_END:
        label = "über 34.820 € bis 36.340 €"
    else:
        step_no = _ceil_div(amount - segment_start, STEP_INTERVAL)
        lower = period.thresholds_eur[-1] + (step_no - 1) * 1450
        upper = period.thresholds_eur[-1] + step_no * 1450
        label = f"über {format_whole_euro(lower)} € bis {format_whole_euro(upper)} €"
    return TariffResult(total, label, "\n".join(lines), period.id)


def _letter_fee(amount: int, tier: TariffTier, period: RatgPeriod) -> TariffResult:
    spec = period.tier(tier)
    head = f"RATG {tier.label} ({period.bgbl})"
    for idx, threshold in enumerate(period.letter_thresholds_eur):
        if amount <= threshold * 100:
            value = spec.brackets[idx]
            label = f"bis {format_whole_euro(threshold)} €"
            return TariffResult(value, label, f"{head}\n{label}\nBetrag: {format_euro(value)}", period.id)

    ceiling = period.letter_thresholds_eur[-1]
    steps = _ceil_div(amount - ceiling * 100, STEP_INTERVAL)
    total = spec.brackets[-1] + steps * spec.step
    trace = (
        f"{head}\nSockel (bis {format_whole_euro(ceiling)} €): {format_euro(spec.brackets[-1])}"
        f"\nüber {format_whole_euro(ceiling)} €: {steps} × {format_euro(spec.step)} = {format_euro(steps * spec.step)}"
    )
    if total > spec.max:
        trace += f"\n(Gekappt auf Höchstbetrag: {format_euro(spec.max)})"
        total = spec.max
    trace += f"\nGesamt: {format_euro(total)}"
    return TariffResult(total, f"über {format_whole_euro(ceiling)} €", trace, period.id)


def commission_rate(amount: int, tier: TariffTier, *, period: RatgPeriod) -> TariffResult:
    """TP 7/1 = TP 6 per half hour; TP 7/2 = twice that. Both capped."""
    letter = _letter_fee(amount, TariffTier.TP6, period)
    if tier == TariffTier.TP7_2:
        rate = min(letter.amount_cents * 2, period.tp7_2_max)
    else:
        rate = min(letter.amount_cents, period.tp7_1_max)
    trace = (
        f"RATG {tier.label} Kommission ({period.bgbl})\n"
        f"TP 6-Basis: {format_euro(letter.amount_cents)}\n"
        f"{tier.label} je ½ Std: {format_euro(rate)}"
    )
    return TariffResult(rate, letter.label, trace, period.id)


def _hour_cap(tier: TariffTier, period: RatgPeriod, class_action: bool) -> HourCap | None:
    spec = period.tier(tier)
    if class_action and spec.class_action_max is not None:
        return HourCap(first=spec.class_action_max, subsequent=half_to_ten(spec.class_action_max))
    return period.hearing_hour_caps.get(tier.value)


def hearing_fee(
    base_cents,
    tier: TariffTier,
    half_hours: int,
    *,
    period: RatgPeriod,
    class_action: bool = False,
    doubled: bool = False,
) -> HearingFee:
    """
    Tagsatzung remuneration: the first hour at the full rate, every further
    started hour at half the rate (rounded to 10 cents), each subject to the
    per-hour caps. ``doubled`` applies the TP 3C Abs III doubling.
    """
    half_hours = checked_count(half_hours, "hearing duration")
    tariff = base_fee(base_cents, tier, period=period)
    rate = tariff.amount_cents
    cap = _hour_cap(tier, period, class_action)
    first = rate if cap is None else min(rate, cap.first)
    subsequent = half_to_ten(rate) if cap is None else min(half_to_ten(rate), cap.subsequent)
    hours = max(1, _ceil_div(half_hours, 2))
    amount = first + (hours - 1) * subsequent

    lines = [f"Stundenlogik {tier.label} ({half_hours} × ½ Std = {hours} Std)", f"1. Std: {format_euro(first)}"]
    if cap is not None and rate > cap.first:
        lines[-1] += f" (Deckel {format_euro(cap.first)})"
    if hours > 1:
        lines.append(f"{hours - 1} × Folgestd: {format_euro(subsequent)}")
    if doubled:
        amount *= 2
        lines.append("EU-Verdoppelung gem. TP 3C Abs III")
    lines.append(f"Entlohnung: {format_euro(amount)}")
    return HearingFee(amount, first, subsequent, hours, tariff.label, "\n".join(lines))


def _cap_group(tier: TariffTier) -> str:
    return "TP2" if tier == TariffTier.TP2 else "TP3"


def hearing_waiting_fee(base_cents, tier: TariffTier, waiting_units: int, *, period: RatgPeriod) -> tuple[int, str]:
    """Waiting during a hearing: first half hour free, then ¼ of TP 2 per half hour, capped."""
    waiting_units = checked_count(waiting_units, "waiting units")
    billable = max(0, waiting_units - 1)
    quarter = round_to_ten(Decimal(base_fee(base_cents, TariffTier.TP2, period=period).amount_cents) / 4)
    cap = period.waiting_cap[_cap_group(tier)]
    per_unit = min(quarter, cap)
    amount = billable * per_unit
    trace = (
        f"Wartezeit: {waiting_units} × ½ Std (1. frei) → {billable} weitere"
        f"\n¼ TP 2 = {format_euro(quarter)}, Deckel {format_euro(cap)}: {billable} × {format_euro(per_unit)} = {format_euro(amount)}"
    )
    return amount, trace


def waiting_time_fee(base_cents, tier: TariffTier, units: int, *, period: RatgPeriod) -> tuple[int, str]:
    """
    Standalone Zuwarten: 25 % of the TP 2 rate per half hour. The cap is lower
    than for waiting during a hearing (6,00 € for TP 2, 17,90 € for TP 3).
    """
    units = checked_count(units, "waiting units") or 1
    tp2 = base_fee(base_cents, TariffTier.TP2, period=period).amount_cents
    cap = period.standalone_waiting_cap[_cap_group(tier)]
    per_unit = min(percent_of(tp2, 25), cap)
    amount = units * per_unit
    return amount, f"Zuwarten: {units} × {format_euro(per_unit)} ({_cap_group(tier)}-Deckel {format_euro(cap)})"


def cancellation_fee(base_cents, tier: TariffTier, *, period: RatgPeriod) -> tuple[int, str]:
    """Abberaumte Tagsatzung: half the TP 2 rate, capped."""
    tp2 = base_fee(base_cents, TariffTier.TP2, period=period).amount_cents
    cap = period.cancellation_cap[_cap_group(tier)]
    amount = min(percent_of(tp2, 50), cap)
    return amount, f"Abberaumt: {format_euro(amount)} ({_cap_group(tier)}-Deckel {format_euro(cap)})"


_VARIANT_LABELS = {
    CriminalVariant.PROSECUTION_DISTRICT: "Privatanklage BG",
    CriminalVariant.PROSECUTION_OTHER: "Privatanklage andere",
    CriminalVariant.MEDIA_ACT: "Mediengesetz",
    CriminalVariant.PRIVATE_PARTY_DISTRICT: "Privatbeteiligte BG",
    CriminalVariant.PRIVATE_PARTY_OTHER: "Privatbeteiligte andere",
    CriminalVariant.EXCLUDED_PUBLIC: "Ausschluss der Öffentlichkeit",
}


def criminal_fixed_basis(variant: CriminalVariant, period: RatgPeriod) -> int:
    if variant == CriminalVariant.PROSECUTION_DISTRICT:
        return period.criminal_fixed["district"]
    if variant == CriminalVariant.PRIVATE_PARTY_DISTRICT:
        return half_to_ten(period.criminal_fixed["district"])
    if variant == CriminalVariant.PRIVATE_PARTY_OTHER:
        return half_to_ten(period.criminal_fixed["other"])
    # other courts, media act and excluded public share the Abschnitt I Z 1 lit b basis
    return period.criminal_fixed["other"]


def criminal_fixed_fee(
    variant: CriminalVariant,
    *,
    hearing: bool,
    half_hours: int = 1,
    period: RatgPeriod,
) -> TariffResult:
    """TP 4: fixed amount for a pleading, first half hour + (n-1) × half rate for a hearing."""
    basis = criminal_fixed_basis(variant, period)
    name = _VARIANT_LABELS[variant]
    head = f"RATG TP 4 Strafsachen ({period.bgbl})\nVariante: {name}\nBasis: {format_euro(basis)}"
    if not hearing:
        return TariffResult(basis, f"{name} - Schriftsatz", f"{head}\nBetrag: {format_euro(basis)}", period.id)

    half_hours = max(1, checked_count(half_hours, "hearing duration"))
    further = half_to_ten(basis)
    amount = basis + (half_hours - 1) * further
    trace = (
        f"{head}\n1. ½ Std: {format_euro(basis)}\nWeitere ½ Std: {format_euro(further)}"
        f"\nDauer: {half_hours} × ½ Std\nGesamt: {format_euro(amount)}"
    )
    return TariffResult(amount, f"{name} - Hauptverhandlung", trace, period.id)


def _is_district(variant: CriminalVariant) -> bool:
    return variant in (CriminalVariant.PROSECUTION_DISTRICT, CriminalVariant.PRIVATE_PARTY_DISTRICT)


def criminal_waiting_fee(variant: CriminalVariant, waiting_units: int, *, period: RatgPeriod) -> tuple[int, str]:
    """TP 4 Anm. 3/4: first half hour free, then a fixed rate per further half hour."""
    waiting_units = checked_count(waiting_units, "waiting units")
    billable = max(0, waiting_units - 1)
    rate = period.criminal_waiting["district" if _is_district(variant) else "other"]
    amount = billable * rate
    trace = (
        f"Wartezeit: {waiting_units} × ½ Std (1. frei) → {billable} weitere"
        f"\n{billable} × {format_euro(rate)} = {format_euro(amount)}"
    )
    return amount, trace


def criminal_cancellation_fee(variant: CriminalVariant, *, period: RatgPeriod) -> TariffResult:
    group = "district" if _is_district(variant) else "other"
    amount = period.criminal_cancellation[group]
    name = _VARIANT_LABELS[variant]
    trace = f"RATG TP 4 Strafsachen ({period.bgbl})\nVariante: {name}\nAbberaumt: {format_euro(amount)}"
    return TariffResult(amount, f"{name} - Abberaumung", trace, period.id)


MEETING_SEGMENT_1_END = 2_067_000
MEETING_SEGMENT_2_END = 2_180_000


def _meeting_rate(amount: int, period: RatgPeriod) -> tuple[int, str, list[str]]:
    spec = period.meeting
    lines = [f"RATG TP 8 Besprechung ({period.bgbl})"]
    for idx, threshold in enumerate(spec.thresholds_eur):
        if amount <= threshold * 100:
            label = f"bis {format_whole_euro(threshold)} €"
            lines.append(f"{label}: {format_euro(spec.brackets[idx])}")
            return spec.brackets[idx], label, lines

    ceiling = spec.thresholds_eur[-1] * 100
    rate = spec.brackets[-1]
    lines.append(f"Sockel (bis {format_whole_euro(ceiling // 100)} €): {format_euro(rate)}")
    segments = (
        (ceiling, MEETING_SEGMENT_1_END, spec.steps[0]),
        (MEETING_SEGMENT_1_END, MEETING_SEGMENT_2_END, spec.steps[1]),
        (MEETING_SEGMENT_2_END, None, spec.steps[2]),
    )
    for start, end, step in segments:
        if amount <= start:
            break
        upper = amount if end is None else min(amount, end)
        steps = _ceil_div(upper - start, STEP_INTERVAL)
        rate += steps * step
        lines.append(f"über {format_whole_euro(start // 100)} €: {steps} × {format_euro(step)} = {format_euro(steps * step)}")
    if rate > spec.max:
        lines.append(f"(Gekappt auf Höchstbetrag: {format_euro(spec.max)})")
        rate = spec.max
    return rate, f"über {format_whole_euro(ceiling // 100)} €", lines


def meeting_fee(base_cents, half_hours: int, *, period: RatgPeriod) -> TariffResult:
    """TP 8 Besprechung: rate per started half hour from its own table, capped."""
    half_hours = max(1, checked_count(half_hours, "meeting duration"))
    rate, label, lines = _meeting_rate(checked_cents(base_cents), period)
    amount = rate * half_hours
    lines.append(f"{half_hours} × ½ Std × {format_euro(rate)} = {format_euro(amount)}")
    return TariffResult(amount, label, "\n".join(lines), period.id)


def short_meeting_fee(base_cents, *, period: RatgPeriod) -> TariffResult:
    """
    TP 8 Kurzform for meetings under ten minutes: 40 % of the standard half-hour
    rate rounded up to 10 cents, capped. A standard rate at its maximum gives
    the short-form maximum.
    """
    rate, label, lines = _meeting_rate(checked_cents(base_cents), period)
    short_max = period.meeting.short_max
    if rate >= period.meeting.max:
        amount = short_max
        lines.append(f"Kurzform-Höchstbetrag: {format_euro(amount)}")
    else:
        rounded = _ceil_div(rate * 4, 100) * 10
        amount = min(rounded, short_max)
        lines.append(f"40 % aufgerundet: {format_euro(rounded)}")
        if rounded > short_max:
            lines.append(f"(Gekappt auf Kurzform-Höchstbetrag: {format_euro(short_max)})")
    return TariffResult(amount, label, "\n".join(lines), period.id)


def travel_time_fee(half_hours: int, *, period: RatgPeriod) -> tuple[int, str]:
    """TP 9 Z 4 Zeitversäumnis per started half hour, no maximum."""
    half_hours = max(1, checked_count(half_hours, "travel time"))
    rate = period.travel.time_per_half_hour
    amount = half_hours * rate
    return amount, f"{half_hours} × ½ Std × {format_euro(rate)} = {format_euro(amount)}"


def travel_allowance(hours: int, *, period: RatgPeriod) -> tuple[int, str]:
    """TP 9 Z 1 lit c Reiseentschädigung per started hour."""
    hours = max(1, checked_count(hours, "travel hours"))
    rate = period.travel.allowance_per_hour
    amount = hours * rate
    return amount, f"{hours} Std × {format_euro(rate)} = {format_euro(amount)}"


def mileage_fee(kilometres: int, *, return_trip: bool = False, period: RatgPeriod) -> tuple[int, str]:
    kilometres = checked_count(kilometres, "kilometres")
    rate = period.travel.mileage_per_km
    distance = kilometres * 2 if return_trip else kilometres
    amount = distance * rate
    if return_trip:
        return amount, f"{kilometres} km × 2 (Hin + Rück) × {format_euro(rate)} = {format_euro(amount)}"
    return amount, f"{distance} km × {format_euro(rate)} = {format_euro(amount)}"
