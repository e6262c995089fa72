import pytest

from kostennote.core.calculations import surcharges
from kostennote.core.errors import InvalidInput
from kostennote.core.models.service import ConnectionKind, FilingRate


@pytest.mark.parametrize(
    "count, expected",
    [(0, 0), (1, 10), (2, 15), (3, 20), (4, 25), (5, 30), (6, 0), (7, 0), (8, 0), (9, 50), (12, 50)],
)
def test_co_litigant_table_keeps_gap(period, count, expected):
    assert surcharges.co_litigant_percent(count, period) == expected


@pytest.mark.parametrize("count, expected", [(0, 0), (1, 10), (6, 35), (8, 45), (9, 50), (20, 50)])
def test_court_fee_co_litigant_table(court_schedule, count, expected):
    assert surcharges.court_fee_co_litigant_percent(count, court_schedule) == expected


def test_negative_party_count_is_rejected(period):
    with pytest.raises(InvalidInput):
        surcharges.co_litigant_percent(-1, period)


def test_es_percent_threshold(period):
    assert surcharges.es_percent(1_017_000, period) == 60
    assert surcharges.es_percent(1_017_001, period) == 50


def test_connection_percent():
    assert surcharges.connection_percent(None) == 0
    assert surcharges.connection_percent(ConnectionKind.PRELIMINARY) == 50
    assert surcharges.connection_percent("wohnort") == 10
    assert surcharges.connection_percent(ConnectionKind.OTHER) == 25
    with pytest.raises(InvalidInput):
        surcharges.connection_percent("elsewhere")


def test_unknown_filing_rate(period):
    with pytest.raises(InvalidInput):
        surcharges.filing_fee(period, override="regular")


@pytest.mark.parametrize(
    "override, initiating, expected",
    [
        (None, True, 500),
        (None, False, 260),
        (FilingRate.INITIAL, False, 500),
        (FilingRate.FOLLOW_UP, True, 260),
        ("initial", False, 500),
        ("follow-up", True, 260),
    ],
)
def test_filing_fee_override_wins(period, override, initiating, expected):
    amount, _ = surcharges.filing_fee(period, override=override, initiating=initiating)
    assert amount == expected


def test_co_defendant_surcharge_is_uncapped(catalog):
    result = surcharges.co_defendant_surcharge(100_000, 5, catalog.ahk)

    assert result.percent == 150
    assert result.amount_cents == 150_000


def test_success_bonus_range(catalog):
    assert surcharges.success_bonus(95_200, 10, catalog.ahk).amount_cents == 9520
    assert surcharges.success_bonus(95_200, 0, catalog.ahk).amount_cents == 0
    with pytest.raises(InvalidInput):
        surcharges.success_bonus(95_200, 51, catalog.ahk)
    with pytest.raises(InvalidInput):
        surcharges.success_bonus(95_200, -5, catalog.ahk)
