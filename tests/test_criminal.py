from datetime import date

import pytest

from kostennote.core.calculations.criminal import calculate_criminal_costs, half_hour_fee
from kostennote.core.errors import InvalidInput, UnmappedServiceType
from kostennote.core.models.criminal import CourtType, CriminalActType, CriminalCase, CriminalService
from kostennote.core.models.service import FilingRate
from kostennote.core.models.tariff import HalfHourRate


def _service(act_type, sid="c1", **kwargs):
    kwargs.setdefault("date", date(2025, 6, 2))
    return CriminalService(id=sid, act_type=act_type, **kwargs)


def test_half_hour_fee_defaults_to_one_hour():
    amount, trace = half_hour_fee(HalfHourRate(first=23800, subsequent=11900), 0)

    assert amount == 35700
    assert "1 weitere ½ Std" in trace


def test_district_court_hearing_with_surcharges(catalog):
    case = CriminalCase(court_type=CourtType.BG, co_defendants=1, success_bonus_percent=10)
    hearing = _service(CriminalActType.MAIN_HEARING, units_of_duration=4)

    result = calculate_criminal_costs(case, [hearing], catalog=catalog)

    hearing_lines = result.lines_for("c1")
    assert [line.amount_cents for line in hearing_lines] == [59500, 35700]
    assert hearing_lines[0].interval == "Bezirksgericht"
    assert hearing_lines[1].label == "Einheitssatz 60%"

    # both surcharges run over the cumulative basis of 952,00 €
    (co_defendant,) = result.lines_for("straf_sg")
    (bonus,) = result.lines_for("straf_erfolg")
    assert co_defendant.amount_cents == 28560
    assert co_defendant.base_cents == 95200
    assert co_defendant.section == "§ 10 Abs 3 AHK"
    assert bonus.amount_cents == 9520
    assert bonus.section == "§ 10 AHK"

    assert result.court_fee_cents == 0
    assert result.net_cents == 59500 + 35700 + 28560 + 9520


def test_surcharges_are_computed_once_per_case(catalog):
    case = CriminalCase(court_type=CourtType.BG, co_defendants=2)
    services = [
        _service(CriminalActType.MAIN_HEARING, "c1", units_of_duration=2),
        _service(CriminalActType.APPEAL_SENTENCE, "c2"),
    ]

    result = calculate_criminal_costs(case, services, catalog=catalog)

    # (357 + 214,20) + (352 + 211,20) = 1.134,40 €, 60 % surcharge
    (co_defendant,) = result.lines_for("straf_sg")
    assert co_defendant.base_cents == 113440
    assert co_defendant.amount_cents == 68064


def test_filing_fee_only_on_written_acts(catalog):
    case = CriminalCase(court_type=CourtType.BG)
    services = [
        _service(CriminalActType.APPEAL_FULL, "c1", include_electronic_filing_fee=True),
        _service(CriminalActType.MAIN_HEARING, "c2", include_electronic_filing_fee=True),
        _service(
            CriminalActType.APPEAL_SENTENCE,
            "c3",
            include_electronic_filing_fee=True,
            electronic_filing_rate_override=FilingRate.INITIAL,
        ),
    ]

    result = calculate_criminal_costs(case, services, catalog=catalog)

    assert [line.amount_cents for line in result.lines_for("c1")][-1] == 260
    assert all("ERV" not in line.label for line in result.lines_for("c2"))
    assert [line.amount_cents for line in result.lines_for("c3")][-1] == 500


def test_nullity_appeal_combined_with_appeal(catalog):
    case = CriminalCase(court_type=CourtType.SCHOEFFEN)
    service = _service(CriminalActType.NULLITY_APPEAL, nullity_with_appeal=True)

    result = calculate_criminal_costs(case, [service], catalog=catalog)

    # the flat rate is taken from the act alone, not from the combination surcharge
    assert [line.amount_cents for line in result.lines] == [162000, 32400, 81000]
    assert result.lines[1].section == "AHK § 9 Abs 2"


def test_act_not_offered_before_court(catalog):
    case = CriminalCase(court_type=CourtType.BG)

    with pytest.raises(UnmappedServiceType):
        calculate_criminal_costs(case, [_service(CriminalActType.NULLITY_APPEAL)], catalog=catalog)


def test_unknown_act(catalog):
    case = CriminalCase(court_type=CourtType.BG)

    with pytest.raises(UnmappedServiceType):
        calculate_criminal_costs(case, [_service("STRAF_UNBEKANNT")], catalog=catalog)


def test_ratg_act_on_fixed_court_base(catalog):
    case = CriminalCase(court_type=CourtType.BG)
    service = _service(CriminalActType.RATG_TP2, include_electronic_filing_fee=True)

    result = calculate_criminal_costs(case, [service], catalog=catalog)

    assert [line.amount_cents for line in result.lines] == [17380, 10428, 260]
    assert result.lines[0].base_cents == 780000
    assert result.lines[0].section == "RATG TP 2 (§ 10 AHK)"


def test_ratg_commission_has_single_flat_rate_and_no_filing_fee(catalog):
    case = CriminalCase(court_type=CourtType.BG)
    service = _service(
        CriminalActType.RATG_TP7_2, units_of_duration=2, es_multiplier=2, include_electronic_filing_fee=True
    )

    lines = calculate_criminal_costs(case, [service], catalog=catalog).lines

    assert len(lines) == 2
    assert lines[1].amount_cents == round(lines[0].amount_cents * 0.6)


def test_detention_matters_use_origin_court_base(catalog):
    service = _service(CriminalActType.RATG_TP2)
    plain = calculate_criminal_costs(CriminalCase(court_type=CourtType.HAFT), [service], catalog=catalog)
    origin = calculate_criminal_costs(
        CriminalCase(court_type=CourtType.HAFT, detention_origin=CourtType.BG), [service], catalog=catalog
    )

    assert plain.lines[0].base_cents == 1800000
    assert origin.lines[0].base_cents == 780000


def test_vat_free_case(catalog):
    case = CriminalCase(court_type=CourtType.ER_GH, vat_free=True)
    result = calculate_criminal_costs(case, [_service(CriminalActType.APPEAL_FULL)], catalog=catalog)

    assert result.vat_cents == 0
    assert result.total_cents == result.net_cents


def test_vat_on_criminal_statement(catalog):
    case = CriminalCase(court_type=CourtType.ER_GH)
    result = calculate_criminal_costs(case, [_service(CriminalActType.APPEAL_FULL)], catalog=catalog)

    # 1.188 € + 50 % flat rate
    assert result.net_cents == 178200
    assert result.vat_cents == 35640


@pytest.mark.parametrize("percent", [51, -1])
def test_success_bonus_out_of_range(catalog, percent):
    case = CriminalCase(court_type=CourtType.BG, success_bonus_percent=percent)

    with pytest.raises(InvalidInput):
        calculate_criminal_costs(case, [_service(CriminalActType.APPEAL_FULL)], catalog=catalog)


def test_no_services_no_lines(catalog):
    result = calculate_criminal_costs(CriminalCase(court_type=CourtType.BG, co_defendants=3), [], catalog=catalog)

    assert result.lines == ()
    assert result.total_cents == 0


def test_detention_travel_stays_out_of_surcharge_basis(catalog):
    case = CriminalCase(court_type=CourtType.HAFT, co_defendants=1)
    services = [
        _service(CriminalActType.DETENTION_HEARING_FIRST, "c1", units_of_duration=2),
        _service(CriminalActType.TRAVEL_COSTS, "c2", kilometres=40, return_trip=True, es_multiplier=2),
        _service(CriminalActType.TRAVEL_TIME, "c3", units_of_duration=3),
    ]

    result = calculate_criminal_costs(case, services, catalog=catalog)

    assert [line.amount_cents for line in result.lines_for("c1")] == [54600, 27300]
    (mileage,) = result.lines_for("c2")
    (travel_time,) = result.lines_for("c3")
    assert mileage.amount_cents == 4000
    assert mileage.section == "TP 9 Z 3 RATG"
    assert "Hin + Rück" in mileage.trace
    assert travel_time.amount_cents == 10170
    assert travel_time.section == "TP 9 Z 4 RATG"
    # 30 % of hearing + ES only
    assert [line.amount_cents for line in result.lines_for("straf_sg")] == [24570]


def test_negative_kilometres(catalog):
    service = _service(CriminalActType.TRAVEL_COSTS, kilometres=-1)

    with pytest.raises(InvalidInput):
        calculate_criminal_costs(CriminalCase(court_type=CourtType.HAFT), [service], catalog=catalog)
