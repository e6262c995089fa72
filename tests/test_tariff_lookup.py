from datetime import date

import pytest

from kostennote.core.calculations.tariff_lookup import (
    base_fee,
    cancellation_fee,
    criminal_cancellation_fee,
    criminal_fixed_fee,
    criminal_waiting_fee,
    hearing_fee,
    hearing_waiting_fee,
    meeting_fee,
    mileage_fee,
    short_meeting_fee,
    travel_allowance,
    travel_time_fee,
    waiting_time_fee,
)
from kostennote.core.services.tariff_catalog import ratg_period_for
from kostennote.core.errors import InvalidInput
from kostennote.core.models.service import CriminalVariant
from kostennote.core.models.tariff import TariffTier
from kostennote.utils.money import half_to_ten, round_to_ten


@pytest.mark.parametrize(
    "base_cents, expected, label",
    [
        (0, 1790, "bis 40 €"),
        (4_000, 1790, "bis 40 €"),
        (4_001, 2660, "bis 70 €"),
        (500_000, 10460, "bis 5.450 €"),
        (1_017_000, 17380, "bis 10.170 €"),
    ],
)
def test_tp2_brackets_are_inclusive(period, base_cents, expected, label):
    result = base_fee(base_cents, TariffTier.TP2, period=period)

    assert result.amount_cents == expected
    assert result.label == label
    assert result.period_id == "RATG-2023"


def test_steps_above_top_bracket(period):
    first_step = base_fee(1_017_001, TariffTier.TP2, period=period)
    second_step = base_fee(1_200_000, TariffTier.TP2, period=period)

    assert first_step.amount_cents == 17380 + 1790
    assert second_step.amount_cents == 17380 + 2 * 1790
    assert second_step.label == "über 11.620 € bis 13.070 €"


def test_per_mille_segment_rounds_to_ten_cents(period):
    result = base_fee(100_000_000, TariffTier.TP3A, period=period)

    # 17 steps up to 34.820 €, one step up to 36.340 €, then 1 ‰ / 0,5 ‰
    assert result.amount_cents == 34660 + 18 * 3510 + 64530
    assert result.label == "über 36.340 €"
    assert "vT-Zuschlag" in result.trace


def test_tier_maximum_is_applied(period):
    result = base_fee(10_000_000_000, TariffTier.TP1, period=period)

    assert result.amount_cents == 31220
    assert "Gekappt" in result.trace


@pytest.mark.parametrize("tier", [TariffTier.TP1, TariffTier.TP2, TariffTier.TP3A, TariffTier.TP3B, TariffTier.TP3C])
def test_base_fee_is_monotone(period, tier):
    bases = [0, 3_999, 180_000, 1_016_999, 1_017_000, 1_017_001, 3_482_000, 3_500_000, 3_634_001, 36_336_000, 99_000_000]
    amounts = [base_fee(b, tier, period=period).amount_cents for b in bases]

    assert amounts == sorted(amounts)


def test_round_to_ten_is_idempotent():
    for value in (0, 4, 5, 14, 15, 1234, 99995):
        once = round_to_ten(value)
        assert round_to_ten(once) == once
    assert half_to_ten(4615) == 2310


@pytest.mark.parametrize("bad", [-1, float("nan"), float("inf"), "abc", True])
def test_invalid_base_is_rejected(period, bad):
    with pytest.raises(InvalidInput):
        base_fee(bad, TariffTier.TP2, period=period)


def test_letter_tiers(period):
    assert base_fee(291_000, TariffTier.TP5, period=period).amount_cents == 1080
    assert base_fee(291_001, TariffTier.TP5, period=period).amount_cents == 1410
    above = base_fee(500_000, TariffTier.TP6, period=period)
    assert above.amount_cents == 2160 + 2 * 660
    assert above.label == "über 2.910 €"


def test_commission_rates(period):
    assert base_fee(500_000, TariffTier.TP7_1, period=period).amount_cents == 3480
    assert base_fee(500_000, TariffTier.TP7_2, period=period).amount_cents == 6960
    # both are capped
    assert base_fee(10_000_000_000, TariffTier.TP7_1, period=period).amount_cents == 20820
    assert base_fee(10_000_000_000, TariffTier.TP7_2, period=period).amount_cents == 41640


def test_period_is_selected_by_date(catalog):
    old = base_fee(500_000, TariffTier.TP2, date(2020, 6, 1), catalog=catalog)
    new = base_fee(500_000, TariffTier.TP2, date(2024, 1, 1), catalog=catalog)

    assert old.amount_cents == 8710
    assert old.period_id == "RATG-2016"
    assert new.amount_cents == 10460


def test_hearing_fee_halves_further_hours(period):
    fee = hearing_fee(500_000, TariffTier.TP3A, 4, period=period)

    assert fee.first_hour_cents == 20820
    assert fee.subsequent_hour_cents == 10410
    assert fee.hours == 2
    assert fee.amount_cents == 31230


def test_hearing_fee_rounds_odd_half_hours_up(period):
    assert hearing_fee(500_000, TariffTier.TP3A, 3, period=period).hours == 2
    assert hearing_fee(500_000, TariffTier.TP3A, 1, period=period).amount_cents == 20820


def test_hearing_fee_class_action_caps(period):
    fee = hearing_fee(300_000_000, TariffTier.TP3A, 4, period=period, class_action=True)

    assert fee.first_hour_cents == 212370
    assert fee.subsequent_hour_cents == 106190
    assert fee.amount_cents == 212370 + 106190


def test_eu_hearing_is_doubled(period):
    single = hearing_fee(500_000, TariffTier.TP3C, 2, period=period)
    doubled = hearing_fee(500_000, TariffTier.TP3C, 2, period=period, doubled=True)

    assert doubled.amount_cents == 2 * single.amount_cents


def test_hearing_waiting_first_half_hour_free(period):
    assert hearing_waiting_fee(500_000, TariffTier.TP3A, 1, period=period)[0] == 0
    # quarter of TP 2 (2.620 €) is above the TP 3 cap
    assert hearing_waiting_fee(500_000, TariffTier.TP3A, 3, period=period)[0] == 2 * 1790
    assert hearing_waiting_fee(500_000, TariffTier.TP2, 3, period=period)[0] == 2 * 920


def test_standalone_waiting_and_cancellation(period):
    # standalone waiting has its own, lower TP 2 cap
    assert waiting_time_fee(500_000, TariffTier.TP2, 1, period=period)[0] == 600
    assert waiting_time_fee(500_000, TariffTier.TP2, 3, period=period)[0] == 3 * 600
    assert waiting_time_fee(500_000, TariffTier.TP3A, 0, period=period)[0] == 1790
    assert waiting_time_fee(4_000, TariffTier.TP2, 1, period=period)[0] == 448
    assert cancellation_fee(500_000, TariffTier.TP2, period=period)[0] == 1190
    assert cancellation_fee(500_000, TariffTier.TP3A, period=period)[0] == 3510
    assert cancellation_fee(4_000, TariffTier.TP2, period=period)[0] == 895


def test_criminal_fixed_fees(period):
    pleading = criminal_fixed_fee(CriminalVariant.PROSECUTION_DISTRICT, hearing=False, period=period)
    assert pleading.amount_cents == 18460

    excluded = criminal_fixed_fee(CriminalVariant.EXCLUDED_PUBLIC, hearing=False, period=period)
    assert excluded.amount_cents == 30760

    hearing = criminal_fixed_fee(CriminalVariant.PRIVATE_PARTY_DISTRICT, hearing=True, half_hours=3, period=period)
    assert hearing.amount_cents == 9230 + 2 * 4620


def test_criminal_waiting_and_cancellation(period):
    assert criminal_waiting_fee(CriminalVariant.PROSECUTION_DISTRICT, 1, period=period)[0] == 0
    assert criminal_waiting_fee(CriminalVariant.PROSECUTION_DISTRICT, 3, period=period)[0] == 2 * 920
    assert criminal_waiting_fee(CriminalVariant.MEDIA_ACT, 3, period=period)[0] == 2 * 1790

    assert criminal_cancellation_fee(CriminalVariant.PRIVATE_PARTY_DISTRICT, period=period).amount_cents == 1790
    assert criminal_cancellation_fee(CriminalVariant.PROSECUTION_OTHER, period=period).amount_cents == 3510


@pytest.mark.parametrize(
    "base_cents, rate",
    [
        (7_000, 1480),
        (50_000, 3510),
        (182_000, 5250),
        # 3 started steps of 1.450 € above 1.820 €
        (500_000, 8580),
        # 13 steps to 20.670 €, one to 21.800 €, then 3 at the reduced step
        (2_500_000, 22560),
        (300_000_000, 69290),
    ],
)
def test_meeting_rate_per_half_hour(period, base_cents, rate):
    assert meeting_fee(base_cents, 1, period=period).amount_cents == rate


def test_meeting_counts_half_hours(period):
    result = meeting_fee(500_000, 2, period=period)

    assert result.amount_cents == 17160
    assert result.label == "über 1.820 €"
    assert "2 × ½ Std" in result.trace
    assert meeting_fee(500_000, 0, period=period).amount_cents == 8580


def test_short_meeting_is_forty_percent_rounded_up(period):
    assert short_meeting_fee(500_000, period=period).amount_cents == 3440
    assert short_meeting_fee(7_000, period=period).amount_cents == 600
    assert short_meeting_fee(300_000_000, period=period).amount_cents == 27740


def test_meeting_uses_period_of_the_date(catalog):
    old = ratg_period_for(date(2022, 3, 1), catalog)

    assert meeting_fee(500_000, 1, period=old).amount_cents == 4370 + 3 * 920


def test_travel_rates(period):
    assert travel_time_fee(3, period=period)[0] == 10170
    assert travel_time_fee(0, period=period)[0] == 3390
    assert travel_allowance(2, period=period)[0] == 3580
    assert mileage_fee(40, period=period)[0] == 2000

    amount, trace = mileage_fee(40, return_trip=True, period=period)
    assert amount == 4000
    assert "Hin + Rück" in trace

    with pytest.raises(InvalidInput):
        mileage_fee(-5, period=period)
