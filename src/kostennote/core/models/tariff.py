from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class TariffTier(str, Enum):
    """Tarifposten of RATG Anlage 1 that are priced by the monetary base."""

    TP1 = "TP1"
    TP2 = "TP2"
    TP3A = "TP3A"
    TP3B = "TP3B"
    TP3C = "TP3C"
    TP5 = "TP5"
    TP6 = "TP6"
    TP7_1 = "TP7_1"
    TP7_2 = "TP7_2"

    @property
    def label(self) -> str:
        if self in (TariffTier.TP7_1, TariffTier.TP7_2):
            return "TP 7/" + self.value[-1]
        return "TP " + self.value[2:]

    @property
    def is_letter(self) -> bool:
        return self in (TariffTier.TP5, TariffTier.TP6)

    @property
    def is_commission(self) -> bool:
        return self in (TariffTier.TP7_1, TariffTier.TP7_2)


@dataclass(frozen=True)
class TierSpec:
    brackets: tuple[int, ...]
    step: int
    per_mille: Decimal
    max: int
    class_action_max: int | None = None


@dataclass(frozen=True)
class HourCap:
    first: int
    subsequent: int


@dataclass(frozen=True)
class MeetingSpec:
    """TP 8: own brackets up to 1.820 €, then three step segments."""

    thresholds_eur: tuple[int, ...]
    brackets: tuple[int, ...]
    steps: tuple[int, int, int]
    max: int
    short_max: int


@dataclass(frozen=True)
class TravelRates:
    time_per_half_hour: int  # TP 9 Z 4
    allowance_per_hour: int  # TP 9 Z 1 lit c
    mileage_per_km: int


@dataclass(frozen=True)
class RatgPeriod:
    """One valorisation period of the attorney tariff (RATG)."""

    id: str
    bgbl: str
    valid_from: date
    valid_to: date | None
    thresholds_eur: tuple[int, ...]
    letter_thresholds_eur: tuple[int, ...]
    tiers: dict[str, TierSpec]
    hearing_hour_caps: dict[str, HourCap]
    tp7_1_max: int
    tp7_2_max: int
    waiting_cap: dict[str, int]
    standalone_waiting_cap: dict[str, int]
    cancellation_cap: dict[str, int]
    criminal_fixed: dict[str, int]
    criminal_waiting: dict[str, int]
    criminal_cancellation: dict[str, int]
    meeting: MeetingSpec
    travel: TravelRates
    es_threshold: int
    es_low_percent: int
    es_high_percent: int
    es_criminal_percent: int
    filing_fee_initial: int
    filing_fee_regular: int
    co_litigant_percent: tuple[int, ...]

    def covers(self, day: date) -> bool:
        if day < self.valid_from:
            return False
        return self.valid_to is None or day <= self.valid_to

    def tier(self, tier: TariffTier | str) -> TierSpec:
        key = tier.value if isinstance(tier, TariffTier) else str(tier)
        return self.tiers[key]


@dataclass(frozen=True)
class SteppedPost:
    label: str
    thresholds_eur: tuple[int, ...]
    fees: tuple[int, ...]
    above_mode: str
    above_rate: Decimal
    above_addend: int


@dataclass(frozen=True)
class CourtFeeSchedule:
    """Pauschalgebühren of the court fee act (GGG)."""

    id: str
    bgbl: str
    valid_from: date
    valid_to: date | None
    co_litigant_percent: tuple[int, ...]
    stepped: dict[str, SteppedPost]
    proportional: dict[str, dict]
    multiplied: dict[str, dict]
    fixed: dict[str, dict]
    half: dict[str, dict]
    enforcement: dict[str, dict] = field(default_factory=dict)

    def covers(self, day: date) -> bool:
        if day < self.valid_from:
            return False
        return self.valid_to is None or day <= self.valid_to


@dataclass(frozen=True)
class HalfHourRate:
    first: int
    subsequent: int


@dataclass(frozen=True)
class AhkSchedule:
    """Fixed criminal bands (AHK §§ 9, 10, 13)."""

    id: str
    valid_from: date
    ratg_bases: dict[str, int]
    courts: dict[str, dict[str, int | HalfHourRate]]
    admin_penalty_bases: dict[str, int]
    co_defendant_percent: int
    success_bonus_max_percent: int
    nullity_with_appeal_percent: int


@dataclass(frozen=True)
class TariffCatalog:
    ratg_periods: tuple[RatgPeriod, ...]
    court_fee_schedules: tuple[CourtFeeSchedule, ...]
    ahk: AhkSchedule
    source: str = field(default="", compare=False)
