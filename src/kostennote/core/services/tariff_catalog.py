"""Loader for the versioned tariff schedules (RATG, GGG, AHK) in ``data/tariffs``."""

from __future__ import annotations

import functools
import json
import logging
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Sequence, TypeVar

from kostennote.core.errors import TariffDataError
from kostennote.core.models.tariff import (
    AhkSchedule,
    CourtFeeSchedule,
    HalfHourRate,
    HourCap,
    MeetingSpec,
    RatgPeriod,
    SteppedPost,
    TariffCatalog,
    TierSpec,
    TravelRates,
)

__all__ = [
    "TARIFF_DIR_ENV",
    "load_catalog",
    "clear_catalog_cache",
    "ratg_period_for",
    "court_fee_schedule_for",
]

logger = logging.getLogger(__name__)

TARIFF_DIR_ENV = "KOSTENNOTE_TARIFF_DIR"
_DEFAULT_DIR = Path(__file__).resolve().parents[2] / "data" / "tariffs"

_Dated = TypeVar("_Dated", RatgPeriod, CourtFeeSchedule)


def _resolve_dir(path: str | Path | None) -> Path:
    if path:
        return Path(path)
    candidate = os.getenv(TARIFF_DIR_ENV)
    if candidate:
        return Path(candidate)
    return _DEFAULT_DIR


def _parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    return date.fromisoformat(value)


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _ratg_from_payload(data: dict) -> RatgPeriod:
    tiers = {
        key: TierSpec(
            brackets=tuple(spec["brackets"]),
            step=int(spec["step"]),
            per_mille=_decimal(spec.get("per_mille", 0)),
            max=int(spec["max"]),
            class_action_max=spec.get("class_action_max"),
        )
        for key, spec in data["tiers"].items()
    }
    caps = {
        key: HourCap(first=int(cap["first"]), subsequent=int(cap["subsequent"]))
        for key, cap in data.get("hearing_hour_caps", {}).items()
    }
    meeting = data["meeting"]
    travel = data["travel"]
    flat_rate = data["flat_rate"]
    return RatgPeriod(
        id=data["id"],
        bgbl=data["bgbl"],
        valid_from=_parse_day(data["valid_from"]),
        valid_to=_parse_day(data.get("valid_to")),
        thresholds_eur=tuple(data["thresholds_eur"]),
        letter_thresholds_eur=tuple(data["letter_thresholds_eur"]),
        tiers=tiers,
        hearing_hour_caps=caps,
        tp7_1_max=int(data["commission"]["tp7_1_max"]),
        tp7_2_max=int(data["commission"]["tp7_2_max"]),
        waiting_cap=dict(data["waiting_cap"]),
        standalone_waiting_cap=dict(data["standalone_waiting_cap"]),
        cancellation_cap=dict(data["cancellation_cap"]),
        criminal_fixed=dict(data["criminal_fixed"]),
        criminal_waiting=dict(data["criminal_waiting"]),
        criminal_cancellation=dict(data["criminal_cancellation"]),
        meeting=MeetingSpec(
            thresholds_eur=tuple(meeting["thresholds_eur"]),
            brackets=tuple(meeting["brackets"]),
            steps=tuple(int(step) for step in meeting["steps"]),
            max=int(meeting["max"]),
            short_max=int(meeting["short_max"]),
        ),
        travel=TravelRates(
            time_per_half_hour=int(travel["time_per_half_hour"]),
            allowance_per_hour=int(travel["allowance_per_hour"]),
            mileage_per_km=int(travel["mileage_per_km"]),
        ),
        es_threshold=int(flat_rate["threshold"]),
        es_low_percent=int(flat_rate["low_percent"]),
        es_high_percent=int(flat_rate["high_percent"]),
        es_criminal_percent=int(flat_rate["criminal_percent"]),
        filing_fee_initial=int(data["filing_fee"]["initial"]),
        filing_fee_regular=int(data["filing_fee"]["regular"]),
        co_litigant_percent=tuple(data["co_litigant_percent"]),
    )


def _ggg_from_payload(data: dict) -> CourtFeeSchedule:
    stepped = {}
    for key, post in data["stepped"].items():
        above = post["above"]
        stepped[key] = SteppedPost(
            label=post["label"],
            thresholds_eur=tuple(post["thresholds_eur"]),
            fees=tuple(post["fees"]),
            above_mode=above["mode"],
            above_rate=_decimal(above["rate"]),
            above_addend=int(above["addend"]),
        )
    return CourtFeeSchedule(
        id=data["id"],
        bgbl=data["bgbl"],
        valid_from=_parse_day(data["valid_from"]),
        valid_to=_parse_day(data.get("valid_to")),
        co_litigant_percent=tuple(data["co_litigant_percent"]),
        stepped=stepped,
        proportional=dict(data.get("proportional", {})),
        multiplied=dict(data.get("multiplied", {})),
        fixed=dict(data.get("fixed", {})),
        half=dict(data.get("half", {})),
        enforcement=dict(data.get("enforcement", {})),
    )


def _ahk_from_payload(data: dict) -> AhkSchedule:
    courts: dict[str, dict] = {}
    for court, acts in data["courts"].items():
        parsed = {}
        for act, value in acts.items():
            if isinstance(value, list):
                parsed[act] = HalfHourRate(first=int(value[0]), subsequent=int(value[1]))
            else:
                parsed[act] = int(value)
        courts[court] = parsed
    return AhkSchedule(
        id=data["id"],
        valid_from=_parse_day(data["valid_from"]),
        ratg_bases=dict(data["ratg_bases"]),
        courts=courts,
        admin_penalty_bases=dict(data["admin_penalty_bases"]),
        co_defendant_percent=int(data["co_defendant_percent"]),
        success_bonus_max_percent=int(data["success_bonus_max_percent"]),
        nullity_with_appeal_percent=int(data["nullity_with_appeal_percent"]),
    )


def _read_payload(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    except OSError as exc:
        raise TariffDataError(f"Tariff file '{path}' cannot be read") from exc
    except json.JSONDecodeError as exc:
        raise TariffDataError(f"Tariff file '{path}' is not valid JSON") from exc


def _load_from_dir(base_dir: Path) -> TariffCatalog:
    if not base_dir.is_dir():
        raise TariffDataError(f"Tariff directory '{base_dir}' not found")

    ratg: list[RatgPeriod] = []
    ggg: list[CourtFeeSchedule] = []
    ahk: AhkSchedule | None = None
    for path in sorted(base_dir.glob("*.json")):
        data = _read_payload(path)
        kind = data.get("kind")
        try:
            if kind == "ratg":
                ratg.append(_ratg_from_payload(data))
            elif kind == "ggg":
                ggg.append(_ggg_from_payload(data))
            elif kind == "ahk":
                ahk = _ahk_from_payload(data)
            else:
                logger.warning("Skipping tariff file %s with unknown kind %r", path.name, kind)
                continue
        except (KeyError, TypeError, ValueError) as exc:
            raise TariffDataError(f"Tariff file '{path}' is missing or has malformed keys") from exc
        logger.debug("Loaded %s schedule from %s", kind, path.name)

    if not ratg or not ggg or ahk is None:
        raise TariffDataError(f"Tariff directory '{base_dir}' needs ratg, ggg and ahk schedules")

    ratg.sort(key=lambda period: period.valid_from)
    ggg.sort(key=lambda schedule: schedule.valid_from)
    return TariffCatalog(
        ratg_periods=tuple(ratg),
        court_fee_schedules=tuple(ggg),
        ahk=ahk,
        source=str(base_dir),
    )


@functools.lru_cache(maxsize=None)
def _cached_catalog(base_dir: Path) -> TariffCatalog:
    return _load_from_dir(base_dir)


def load_catalog(path: str | Path | None = None) -> TariffCatalog:
    """
    Load all tariff schedules from ``path``, ``$KOSTENNOTE_TARIFF_DIR`` or the bundled data.

    Catalogs are immutable and cached per directory.
    """

    return _cached_catalog(_resolve_dir(path).resolve())


def clear_catalog_cache() -> None:
    _cached_catalog.cache_clear()


def _select(entries: Sequence[_Dated], day: date | None, what: str) -> _Dated:
    if day is None:
        return entries[-1]
    for entry in reversed(entries):
        if entry.covers(day):
            return entry
    if day < entries[0].valid_from:
        logger.warning("No %s schedule for %s; using the oldest one (%s)", what, day, entries[0].id)
        return entries[0]
    logger.warning("No %s schedule covers %s; using the latest one (%s)", what, day, entries[-1].id)
    return entries[-1]


def ratg_period_for(day: date | None, catalog: TariffCatalog | None = None) -> RatgPeriod:
    """Attorney tariff period in force on ``day``; the current one when ``day`` is None."""
    catalog = catalog or load_catalog()
    return _select(catalog.ratg_periods, day, "RATG")


def court_fee_schedule_for(day: date | None, catalog: TariffCatalog | None = None) -> CourtFeeSchedule:
    catalog = catalog or load_catalog()
    return _select(catalog.court_fee_schedules, day, "GGG")
