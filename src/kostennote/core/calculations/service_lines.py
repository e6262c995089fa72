"""
Per-service line calculation for civil fee statements.

Every service runs through exactly one pipeline, chosen by its act kind:

* criminal-fixed (TP 4): fixed amounts (plus waiting for hearings), single ES
  at the criminal rate, no co-litigant surcharge;
* hearing: hourly remuneration plus waiting time, then ES and co-litigant
  surcharge;
* waiting / cancellation: share of the TP 2 rate, capped, then ES and
  co-litigant surcharge;
* meeting (TP 8): rate per half hour from its own table, co-litigant
  surcharge, no ES;
* travel (TP 9): time or allowance at fixed rates, nothing stacked on top;
* standard (pleadings, letters, commissions): tariff, caps, half-rate rule,
  connection surcharge, ES, co-litigant surcharge, filing fee, enforcement fee.

Within one service the lines come out as base, connection or waiting, ES,
co-litigant surcharge, filing fee, enforcement fee.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from kostennote.core.calculations import court_fees, surcharges
from kostennote.core.calculations.tariff_lookup import (
    base_fee,
    cancellation_fee,
    criminal_cancellation_fee,
    criminal_fixed_fee,
    criminal_waiting_fee,
    hearing_fee,
    hearing_waiting_fee,
    meeting_fee,
    short_meeting_fee,
    travel_allowance,
    travel_time_fee,
    waiting_time_fee,
)
from kostennote.core.calculations.validation import checked_cents, checked_count, checked_multiplier
from kostennote.core.models.case import CaseParameters
from kostennote.core.models.result import STANDARD_VAT_PERCENT, CalculatedLine
from kostennote.core.models.service import ActKind, ConnectionKind, Service, ServiceKind
from kostennote.core.models.tariff import RatgPeriod, TariffCatalog, TariffTier
from kostennote.core.services.tariff_catalog import ratg_period_for
from kostennote.utils.money import format_euro, percent_of, round_half_up

HEARING_DEFAULT_HALF_HOURS = 2
COMMISSION_DEFAULT_HALF_HOURS = 1

CLASS_ACTION_SECTIONS = {
    TariffTier.TP1: "TP 1 Abs IV",
    TariffTier.TP2: "TP 2 Abs III",
    TariffTier.TP3A: "TP 3A Abs IV",
    TariffTier.TP3B: "TP 3B Abs III",
    TariffTier.TP3C: "TP 3C Abs IV",
    TariffTier.TP5: "TP 5 (Verbandsklage)",
    TariffTier.TP6: "TP 6 (Verbandsklage)",
}


@dataclass(frozen=True)
class LineAccumulator:
    """Running bases of the surcharge stack of one service."""

    base_amount: int
    cumulative_before_surcharge: int
    cumulative_before_co_litigant: int

    @classmethod
    def start(cls, amount: int) -> "LineAccumulator":
        return cls(amount, amount, amount)

    def with_addon(self, amount: int) -> "LineAccumulator":
        return replace(
            self,
            cumulative_before_surcharge=self.cumulative_before_surcharge + amount,
            cumulative_before_co_litigant=self.cumulative_before_co_litigant + amount,
        )

    def with_flat_rate(self, amount: int) -> "LineAccumulator":
        return replace(self, cumulative_before_co_litigant=self.cumulative_before_co_litigant + amount)


@dataclass(frozen=True)
class _Context:
    service: Service
    kind: ServiceKind
    period: RatgPeriod
    base_cents: int
    parties: int
    vat_rate: int
    class_action: bool
    catalog: TariffCatalog | None = None

    def line(
        self,
        label: str,
        section: str,
        interval: str,
        amount: int,
        trace: str,
        *,
        base: int | None = None,
        vat_rate: int | None = None,
    ):
        return CalculatedLine(
            date=self.service.date,
            label=label,
            section=section,
            interval=interval,
            vat_rate=self.vat_rate if vat_rate is None else vat_rate,
            amount_cents=amount,
            base_cents=self.base_cents if base is None else base,
            trace=trace,
            service_id=self.service.id,
        )


def _context(service: Service, case: CaseParameters, catalog: TariffCatalog | None) -> _Context:
    kind = service.kind
    checked_multiplier(service.es_multiplier)
    checked_count(service.units_of_duration, "units of duration")
    checked_count(service.waiting_units, "waiting units")
    if service.custom_es_percent is not None:
        checked_count(service.custom_es_percent, "custom ES percent")
    if service.base_amount_override is not None:
        base = checked_cents(service.base_amount_override, "service monetary base")
    else:
        base = checked_cents(case.base_cents)
    if service.party_count_override is not None:
        parties = checked_count(service.party_count_override, "party count")
    else:
        parties = checked_count(case.co_litigants, "co-litigant count")
    return _Context(
        service=service,
        kind=kind,
        period=ratg_period_for(service.date, catalog),
        base_cents=base,
        parties=parties,
        vat_rate=0 if case.vat_free else STANDARD_VAT_PERCENT,
        class_action=case.class_action,
        catalog=catalog,
    )


def _flat_rate(ctx: _Context, acc: LineAccumulator, interval: str, *, percent: int, multiplier: int, note: str = ""):
    if multiplier <= 0 or percent <= 0:
        return acc, None
    effective = percent * multiplier
    amount = percent_of(acc.cumulative_before_surcharge, effective)
    trace = f"{multiplier}x {percent}% von {format_euro(acc.cumulative_before_surcharge)}"
    if note:
        trace = f"{note}: {trace}"
    line = ctx.line(f"Einheitssatz {effective}%", "§ 23 RATG", interval, amount, trace)
    return acc.with_flat_rate(amount), line


def _regular_flat_rate_percent(ctx: _Context) -> int:
    if ctx.service.custom_es_percent is not None:
        return ctx.service.custom_es_percent
    return surcharges.es_percent(ctx.base_cents, ctx.period)


def _co_litigant(ctx: _Context, acc: LineAccumulator) -> CalculatedLine | None:
    percent = surcharges.co_litigant_percent(ctx.parties, ctx.period)
    if percent <= 0:
        return None
    amount = percent_of(acc.cumulative_before_co_litigant, percent)
    return ctx.line(
        f"{percent}% Streitgenossenzuschlag",
        "§ 15 RATG",
        f"{ctx.parties} weitere Pers.",
        amount,
        f"{percent}% von {format_euro(acc.cumulative_before_co_litigant)}",
    )


def _filing_fee(ctx: _Context) -> CalculatedLine | None:
    if not ctx.service.include_electronic_filing_fee:
        return None
    amount, trace = surcharges.filing_fee(
        ctx.period,
        override=ctx.service.electronic_filing_rate_override,
        initiating=ctx.service.is_initiating_act,
    )
    return ctx.line("ERV-Beitrag (§ 23a RATG)", "§ 23a RATG", "-", amount, trace, base=0)


def _criminal_fixed(ctx: _Context) -> list[CalculatedLine]:
    act = ctx.kind.act
    hearing = act == ActKind.CRIMINAL_HEARING
    if act == ActKind.CRIMINAL_CANCELLATION:
        tariff = criminal_cancellation_fee(ctx.kind.variant, period=ctx.period)
    else:
        tariff = criminal_fixed_fee(
            ctx.kind.variant,
            hearing=hearing,
            half_hours=ctx.service.units_of_duration or HEARING_DEFAULT_HALF_HOURS,
            period=ctx.period,
        )
    lines = [ctx.line(ctx.service.label, ctx.kind.section, tariff.label, tariff.amount_cents, tariff.trace)]
    acc = LineAccumulator.start(tariff.amount_cents)

    if hearing and ctx.service.waiting_units:
        waiting, trace = criminal_waiting_fee(ctx.kind.variant, ctx.service.waiting_units, period=ctx.period)
        if waiting > 0:
            lines.append(
                ctx.line(
                    f"Wartezeit ({ctx.service.waiting_units} × ½ Std)", "TP 4 Wartezeit", tariff.label, waiting, trace
                )
            )
            acc = acc.with_addon(waiting)

    acc, es_line = _flat_rate(
        ctx,
        acc,
        "Strafsachen: nur einfacher ES",
        percent=ctx.period.es_criminal_percent,
        multiplier=min(ctx.service.es_multiplier, 1),
        note="TP 4 Strafsachen (§ 23 Abs 9 RATG)",
    )
    if es_line is not None:
        lines.append(es_line)
    if act == ActKind.CRIMINAL_PLEADING:
        erv = _filing_fee(ctx)
        if erv is not None:
            lines.append(erv)
    return lines


def _class_action_cap(ctx: _Context, tier: TariffTier, amount: int, trace: str) -> tuple[int, str]:
    cap = ctx.period.tier(tier).class_action_max
    if not ctx.class_action or cap is None or amount <= cap:
        return amount, trace
    return cap, f"{trace}\n(Gekappt gem. {CLASS_ACTION_SECTIONS.get(tier, tier.label)}: {format_euro(cap)})"


def _hearing(ctx: _Context) -> list[CalculatedLine]:
    tier = ctx.kind.tier
    half_hours = ctx.service.units_of_duration or HEARING_DEFAULT_HALF_HOURS
    fee = hearing_fee(
        ctx.base_cents,
        tier,
        half_hours,
        period=ctx.period,
        class_action=ctx.class_action,
        doubled=ctx.kind.doubled,
    )
    lines = [ctx.line(ctx.service.label, ctx.kind.section, fee.label, fee.amount_cents, fee.trace)]
    acc = LineAccumulator.start(fee.amount_cents)

    waiting_units = ctx.service.waiting_units
    if waiting_units:
        waiting, trace = hearing_waiting_fee(ctx.base_cents, tier, waiting_units, period=ctx.period)
        if waiting > 0:
            lines.append(
                ctx.line(f"Wartezeit ({waiting_units} × ½ Std)", f"{tier.label} Wartezeit", fee.label, waiting, trace)
            )
            acc = acc.with_addon(waiting)

    acc, es_line = _flat_rate(
        ctx,
        acc,
        fee.label,
        percent=_regular_flat_rate_percent(ctx),
        multiplier=ctx.service.es_multiplier,
        note="ES auf (Entlohnung + Wartezeit)",
    )
    if es_line is not None:
        lines.append(es_line)
    co_line = _co_litigant(ctx, acc)
    if co_line is not None:
        lines.append(co_line)
    return lines


def _waiting_or_cancellation(ctx: _Context) -> list[CalculatedLine]:
    tier = ctx.kind.tier
    tp2 = base_fee(ctx.base_cents, TariffTier.TP2, period=ctx.period)
    if ctx.kind.act == ActKind.WAITING:
        amount, trace = waiting_time_fee(ctx.base_cents, tier, ctx.service.waiting_units, period=ctx.period)
    else:
        amount, trace = cancellation_fee(ctx.base_cents, tier, period=ctx.period)
    lines = [ctx.line(ctx.service.label, ctx.kind.section, tp2.label, amount, trace)]
    acc = LineAccumulator.start(amount)
    acc, es_line = _flat_rate(
        ctx, acc, tp2.label, percent=_regular_flat_rate_percent(ctx), multiplier=ctx.service.es_multiplier
    )
    if es_line is not None:
        lines.append(es_line)
    co_line = _co_litigant(ctx, acc)
    if co_line is not None:
        lines.append(co_line)
    return lines


def _meeting(ctx: _Context) -> list[CalculatedLine]:
    if ctx.kind.short_form:
        tariff = short_meeting_fee(ctx.base_cents, period=ctx.period)
    else:
        tariff = meeting_fee(ctx.base_cents, ctx.service.units_of_duration, period=ctx.period)
    lines = [ctx.line(ctx.service.label, ctx.kind.section, tariff.label, tariff.amount_cents, tariff.trace)]
    co_line = _co_litigant(ctx, LineAccumulator.start(tariff.amount_cents))
    if co_line is not None:
        lines.append(co_line)
    return lines


def _travel(ctx: _Context) -> list[CalculatedLine]:
    half_hours = ctx.service.units_of_duration or 1
    if ctx.kind.act == ActKind.TRAVEL_TIME:
        amount, trace = travel_time_fee(half_hours, period=ctx.period)
        interval = f"{half_hours} × ½ Std"
    else:
        hours = -(-half_hours // 2)
        amount, trace = travel_allowance(hours, period=ctx.period)
        interval = f"{hours} Std"
    return [ctx.line(ctx.service.label, ctx.kind.section, interval, amount, trace, base=0)]


def _enforcement_fee(ctx: _Context) -> CalculatedLine | None:
    kind = ctx.service.enforcement_fee_kind
    if kind is None:
        return None
    fee = court_fees.enforcement_fee(kind, on=ctx.service.date, catalog=ctx.catalog)
    return ctx.line(f"Vollzugsgebühr ({fee.label})", fee.section, "-", fee.amount_cents, fee.trace, base=0, vat_rate=0)


def _standard(ctx: _Context) -> list[CalculatedLine]:
    kind = ctx.kind
    tier = kind.tier
    service = ctx.service
    tariff = base_fee(ctx.base_cents, tier, period=ctx.period)
    amount, trace = tariff.amount_cents, tariff.trace
    section = kind.section
    multiplier = service.es_multiplier

    if kind.act == ActKind.COMMISSION:
        half_hours = service.units_of_duration or COMMISSION_DEFAULT_HALF_HOURS
        amount = tariff.amount_cents * half_hours
        trace += f"\n{half_hours} × ½ Std = {format_euro(amount)}"
        multiplier = min(multiplier, 1)
    else:
        amount, trace = _class_action_cap(ctx, tier, amount, trace)
        if kind.half_rate or service.is_half_rate_rule:
            amount = round_half_up(Decimal(amount) / 2)
            if tier == TariffTier.TP3B:
                section = "TP 3B Abs Ia"
                trace += f"\nHalbe Entlohnung gem. TP 3B Abs Ia (§ 473a ZPO): {format_euro(amount)}"
            else:
                trace += f"\nHalbe Entlohnung (§ 473a ZPO): {format_euro(amount)}"

    lines = [ctx.line(service.label, section, tariff.label, amount, trace)]
    acc = LineAccumulator.start(amount)

    connection = surcharges.connection_percent(service.connection_surcharge_kind)
    if connection and kind.act == ActKind.PLEADING:
        extra = percent_of(amount, connection)
        lines.append(
            ctx.line(
                f"Verbindungsgebühr {connection}%",
                "§ 23 RATG",
                surcharges.CONNECTION_LABELS[ConnectionKind(service.connection_surcharge_kind)],
                extra,
                f"{connection}% von {format_euro(amount)}",
            )
        )
        acc = acc.with_addon(extra)

    if not tier.is_letter:
        acc, es_line = _flat_rate(
            ctx, acc, tariff.label, percent=_regular_flat_rate_percent(ctx), multiplier=multiplier
        )
        if es_line is not None:
            lines.append(es_line)

    co_line = _co_litigant(ctx, acc)
    if co_line is not None:
        lines.append(co_line)

    if kind.act == ActKind.PLEADING:
        erv = _filing_fee(ctx)
        if erv is not None:
            lines.append(erv)
        enforcement = _enforcement_fee(ctx)
        if enforcement is not None:
            lines.append(enforcement)
    return lines


_PIPELINES = {
    ActKind.CRIMINAL_PLEADING: _criminal_fixed,
    ActKind.CRIMINAL_HEARING: _criminal_fixed,
    ActKind.CRIMINAL_CANCELLATION: _criminal_fixed,
    ActKind.HEARING: _hearing,
    ActKind.WAITING: _waiting_or_cancellation,
    ActKind.CANCELLATION: _waiting_or_cancellation,
    ActKind.MEETING: _meeting,
    ActKind.TRAVEL_TIME: _travel,
    ActKind.TRAVEL_ALLOWANCE: _travel,
    ActKind.PLEADING: _standard,
    ActKind.COMMISSION: _standard,
}


def calculate_service_lines(
    service: Service,
    case: CaseParameters,
    *,
    catalog: TariffCatalog | None = None,
) -> list[CalculatedLine]:
    """Priced lines of one service; raises ``UnmappedServiceType`` for unknown tags."""
    ctx = _context(service, case, catalog)
    return _PIPELINES[ctx.kind.act](ctx)
