"""
Court fees (Pauschalgebühren, GGG).

The post is derived from the billed acts: the highest instance among them
wins, the procedure category picks the family (execution posts of TP 4 or
the litigation posts TP 1 / TP 2 / TP 3).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from kostennote.core.calculations.surcharges import court_fee_co_litigant_percent
from kostennote.core.calculations.validation import checked_cents, checked_count
from kostennote.core.errors import UnmappedServiceType
from kostennote.core.models.case import ProcedureCategory
from kostennote.core.models.service import EnforcementFeeKind, Instance, Service
from kostennote.core.models.tariff import CourtFeeSchedule, SteppedPost, TariffCatalog
from kostennote.core.services.tariff_catalog import court_fee_schedule_for
from kostennote.utils.money import format_euro, format_percent, format_whole_euro, percent_of, round_half_up

logger = logging.getLogger(__name__)

LITIGATION_POSTS = {
    Instance.FIRST: "TP1_ZI",
    Instance.SECOND: "TP2",
    Instance.THIRD: "TP3_LIT_A",
}

EXECUTION_POSTS = {
    Instance.FIRST: "TP4_ZI_LIT_A",
    Instance.SECOND: "TP4_ZII_LIT_A",
    Instance.THIRD: "TP4_ZIII_LIT_A",
}

POST_LABELS = {
    "TP1_ZI": "TP 1 Z I",
    "TP2": "TP 2",
    "TP3_LIT_A": "TP 3 lit. a",
    "TP4_ZI_LIT_A": "TP 4 Z I lit. a",
    "TP4_ZII_LIT_A": "TP 4 Z II lit. a",
    "TP4_ZIII_LIT_A": "TP 4 Z III lit. a",
}


@dataclass(frozen=True)
class DerivedCourtFee:
    post: str
    instance: Instance
    label: str

    @property
    def instance_label(self) -> str:
        return f"{int(self.instance)}. Instanz"


@dataclass(frozen=True)
class CourtFeeResult:
    amount_cents: int
    surcharge_cents: int
    total_cents: int
    label: str
    trace: str
    schedule_id: str = ""


@dataclass(frozen=True)
class EnforcementFee:
    amount_cents: int
    label: str
    section: str
    trace: str
    schedule_id: str = ""


def derive(services: Iterable[Service], procedure: ProcedureCategory = ProcedureCategory.CIVIL) -> DerivedCourtFee:
    """Court-fee post for the highest instance reached by ``services``."""
    instance = max((service.kind.instance for service in services), default=Instance.FIRST)
    posts = EXECUTION_POSTS if ProcedureCategory(procedure) == ProcedureCategory.EXECUTION else LITIGATION_POSTS
    post = posts[instance]
    logger.debug("Derived court fee post %s (%s instance, %s)", post, int(instance), procedure)
    return DerivedCourtFee(post=post, instance=instance, label=POST_LABELS[post])


def _schedule(on: date | None, schedule: CourtFeeSchedule | None, catalog: TariffCatalog | None) -> CourtFeeSchedule:
    return schedule or court_fee_schedule_for(on, catalog)


def _bracket_label(thresholds: tuple[int, ...], index: int) -> str:
    if index == 0:
        return f"bis {format_whole_euro(thresholds[0])} €"
    return f"über {format_whole_euro(thresholds[index - 1])} bis {format_whole_euro(thresholds[index])} €"


def _stepped(key: str, post: SteppedPost, amount: int) -> tuple[int, str, str]:
    for idx, threshold in enumerate(post.thresholds_eur):
        if amount <= threshold * 100:
            label = _bracket_label(post.thresholds_eur, idx)
            fee = post.fees[idx]
            return fee, label, f"{key}: {format_euro(fee)} ({label})"

    top = post.thresholds_eur[-1]
    label = f"über {format_whole_euro(top)} €"
    if post.above_mode == "per_mille_of_excess":
        excess = amount - top * 100
        fee = post.above_addend + round_half_up(Decimal(excess) * post.above_rate / 1000)
        trace = f"{format_euro(post.above_addend)} + {format_percent(post.above_rate)}‰ × {format_euro(excess)}"
    else:
        fee = round_half_up(Decimal(amount) * post.above_rate / 100) + post.above_addend
        trace = f"{format_percent(post.above_rate)}% × {format_euro(amount)} + {format_euro(post.above_addend)}"
    return fee, label, trace


def _base_amount(post: str, amount: int, schedule: CourtFeeSchedule) -> tuple[int, str, str]:
    if post in schedule.stepped:
        return _stepped(post, schedule.stepped[post], amount)
    if post in schedule.proportional:
        spec = schedule.proportional[post]
        calculated = percent_of(amount, spec["percent"])
        fee = max(calculated, int(spec["minimum"]))
        trace = f"{spec['percent']}% × {format_euro(amount)} = {format_euro(calculated)}"
        label = f"{spec['percent']}% vom Streitwert"
        if calculated < fee:
            trace += f" → Mindestgebühr {format_euro(fee)}"
            label += " (Mindestgebühr)"
        return fee, label, trace
    if post in schedule.multiplied:
        spec = schedule.multiplied[post]
        base, base_label, _ = _base_amount(spec["of"], amount, schedule)
        fee = percent_of(base, spec["percent"])
        return fee, f"{base_label} ({spec['percent']}%)", f"{spec['percent']}% × {format_euro(base)}"
    raise UnmappedServiceType(f"Unknown court fee post: {post!r}")


def _with_surcharge(
    amount: int, label: str, trace: str, co_litigants: int, schedule: CourtFeeSchedule
) -> CourtFeeResult:
    percent = court_fee_co_litigant_percent(co_litigants, schedule)
    surcharge = percent_of(amount, percent)
    total = amount + surcharge
    if percent > 0:
        trace += (
            f"\n+ SGZ {percent}% ({co_litigants} Streitgenossen): {format_euro(surcharge)}"
            f"\n= Gesamt: {format_euro(total)}"
        )
    return CourtFeeResult(amount, surcharge, total, label, trace, schedule.id)


def court_fee(
    post: str,
    base_cents,
    co_litigants: int = 0,
    *,
    on: date | None = None,
    schedule: CourtFeeSchedule | None = None,
    catalog: TariffCatalog | None = None,
) -> CourtFeeResult:
    """Court fee of ``post`` at ``base_cents`` including the § 19a GGG co-litigant surcharge."""
    amount = checked_cents(base_cents)
    co_litigants = checked_count(co_litigants, "co-litigant count")
    schedule = _schedule(on, schedule, catalog)
    fee, label, trace = _base_amount(post, amount, schedule)
    return _with_surcharge(fee, label, trace, co_litigants, schedule)


def fixed_court_fee(
    post: str,
    co_litigants: int = 0,
    *,
    on: date | None = None,
    schedule: CourtFeeSchedule | None = None,
    catalog: TariffCatalog | None = None,
) -> CourtFeeResult:
    schedule = _schedule(on, schedule, catalog)
    try:
        spec = schedule.fixed[post]
    except KeyError as exc:
        raise UnmappedServiceType(f"Unknown fixed court fee post: {post!r}") from exc
    amount = int(spec["amount"])
    trace = f"{post}: {format_euro(amount)} ({spec['label']})"
    return _with_surcharge(amount, spec["label"], trace, checked_count(co_litigants, "co-litigant count"), schedule)


def half_court_fee(
    post: str,
    base_cents,
    co_litigants: int = 0,
    *,
    on: date | None = None,
    schedule: CourtFeeSchedule | None = None,
    catalog: TariffCatalog | None = None,
) -> CourtFeeResult:
    """Half of a stepped post (TP 1 Anm. 2, TP 2 / TP 3 Anm. 1a); the surcharge applies to the half."""
    schedule = _schedule(on, schedule, catalog)
    try:
        spec = schedule.half[post]
    except KeyError as exc:
        raise UnmappedServiceType(f"Unknown half court fee post: {post!r}") from exc
    full, label, _ = _base_amount(spec["of"], checked_cents(base_cents), schedule)
    half = round_half_up(Decimal(full) / 2)
    trace = f"{post}: {format_euro(full)} ÷ 2 = {format_euro(half)} ({spec['note']})"
    return _with_surcharge(half, f"{label} ({spec['note']})", trace, checked_count(co_litigants, "co-litigant count"), schedule)


def enforcement_fee(
    kind: EnforcementFeeKind | str,
    *,
    on: date | None = None,
    schedule: CourtFeeSchedule | None = None,
    catalog: TariffCatalog | None = None,
) -> EnforcementFee:
    """Vollzugsgebühr (§ 455 EO): a fixed amount per kind of enforcement, untaxed."""
    schedule = _schedule(on, schedule, catalog)
    try:
        spec = schedule.enforcement[EnforcementFeeKind(kind).value]
    except (ValueError, KeyError) as exc:
        raise UnmappedServiceType(f"Unknown enforcement fee kind: {kind!r}") from exc
    amount = int(spec["amount"])
    trace = f"{spec['label']} ({spec['section']}): {format_euro(amount)}"
    return EnforcementFee(amount, spec["label"], spec["section"], trace, schedule.id)
