from __future__ import annotations

from dataclasses import dataclass

from kostennote.core.calculations.validation import checked_cents, checked_count
from kostennote.core.errors import InvalidInput
from kostennote.core.models.service import ConnectionKind, FilingRate
from kostennote.core.models.tariff import AhkSchedule, CourtFeeSchedule, RatgPeriod
from kostennote.utils.money import format_euro, percent_of

CONNECTION_PERCENT = {
    ConnectionKind.PRELIMINARY: 50,
    ConnectionKind.RESIDENCE: 10,
    ConnectionKind.OTHER: 25,
}

CONNECTION_LABELS = {
    ConnectionKind.PRELIMINARY: "Vorabentscheidung",
    ConnectionKind.RESIDENCE: "e.V. Wohnort",
    ConnectionKind.OTHER: "e.V. andere",
}


@dataclass(frozen=True)
class Surcharge:
    percent: int
    amount_cents: int
    trace: str


def es_percent(base_cents, period: RatgPeriod) -> int:
    """Einheitssatz (§ 23 RATG): 60 % up to the threshold base, 50 % above."""
    if checked_cents(base_cents) <= period.es_threshold:
        return period.es_low_percent
    return period.es_high_percent


def _step(table: tuple[int, ...], count: int) -> int:
    if count >= len(table):
        return table[-1]
    return table[count]


def co_litigant_percent(count: int, period: RatgPeriod) -> int:
    """§ 15 RATG step table. Six to eight additional parties yield 0 %."""
    return _step(period.co_litigant_percent, checked_count(count, "co-litigant count"))


def court_fee_co_litigant_percent(count: int, schedule: CourtFeeSchedule) -> int:
    """§ 19a GGG: its own step table, counts above nine use the last step."""
    return _step(schedule.co_litigant_percent, checked_count(count, "co-litigant count"))


def connection_percent(kind: ConnectionKind | str | None) -> int:
    if kind is None:
        return 0
    try:
        return CONNECTION_PERCENT[ConnectionKind(kind)]
    except ValueError as exc:
        raise InvalidInput(f"Unknown connection surcharge kind: {kind!r}") from exc


def filing_fee(
    period: RatgPeriod,
    *,
    override: FilingRate | str | None = None,
    initiating: bool = False,
) -> tuple[int, str]:
    """ERV-Beitrag (§ 23a RATG). An explicit override wins over the initiating flag."""
    if override is None:
        initial = initiating
    else:
        try:
            initial = FilingRate(override) == FilingRate.INITIAL
        except ValueError as exc:
            raise InvalidInput(f"Unknown filing fee rate: {override!r}") from exc
    if initial:
        return period.filing_fee_initial, f"Ersteinbringungssatz: {format_euro(period.filing_fee_initial)}"
    return period.filing_fee_regular, f"Regulärer Satz (Folge/Übernahme): {format_euro(period.filing_fee_regular)}"


def co_defendant_surcharge(basis_cents: int, count: int, ahk: AhkSchedule) -> Surcharge:
    """§ 10 Abs 3 AHK: a fixed share per additional defendant, without upper limit."""
    count = checked_count(count, "co-defendant count")
    percent = count * ahk.co_defendant_percent
    amount = percent_of(basis_cents, percent)
    trace = (
        f"{count} weitere Person(en) × {ahk.co_defendant_percent}% = {percent}% "
        f"von {format_euro(basis_cents)} = {format_euro(amount)}"
    )
    return Surcharge(percent, amount, trace)


def success_bonus(basis_cents: int, percent: int, ahk: AhkSchedule) -> Surcharge:
    percent = checked_count(percent, "success bonus")
    if percent > ahk.success_bonus_max_percent:
        raise InvalidInput(
            f"success bonus must be between 0 and {ahk.success_bonus_max_percent} percent, got {percent}"
        )
    amount = percent_of(basis_cents, percent)
    return Surcharge(
        percent,
        amount,
        f"Erfolgszuschlag {percent}% von {format_euro(basis_cents)} = {format_euro(amount)}",
    )


def nullity_with_appeal_surcharge(amount_cents: int, ahk: AhkSchedule) -> Surcharge:
    """§ 9 Abs 2 AHK: nullity appeal combined with an appeal."""
    percent = ahk.nullity_with_appeal_percent
    amount = percent_of(amount_cents, percent)
    return Surcharge(
        percent,
        amount,
        f"NB + Berufung kombiniert: +{percent}% von {format_euro(amount_cents)} = {format_euro(amount)}",
    )
