from datetime import date

import pytest

from kostennote.core.calculations.admin_penalty import calculate_admin_penalty_costs, penalty_base
from kostennote.core.errors import InvalidInput, UnmappedServiceType
from kostennote.core.models.criminal import AdminPenaltyActType, AdminPenaltyCase, AdminPenaltyService, PenaltyTier


def _service(act_type, sid="v1", **kwargs):
    kwargs.setdefault("date", date(2025, 6, 2))
    return AdminPenaltyService(id=sid, act_type=act_type, **kwargs)


def test_penalty_base_includes_forfeiture(catalog):
    assert penalty_base(AdminPenaltyCase(tier=PenaltyTier.Z1), catalog) == 780000
    assert penalty_base(AdminPenaltyCase(tier=PenaltyTier.Z1, forfeiture_cents=300000), catalog) == 1080000

    with pytest.raises(InvalidInput):
        penalty_base(AdminPenaltyCase(tier=PenaltyTier.Z1, forfeiture_cents=-1), catalog)


def test_hearing_carries_single_flat_rate(catalog):
    service = _service(AdminPenaltyActType.HEARING, units_of_duration=2, es_multiplier=2)

    result = calculate_admin_penalty_costs(AdminPenaltyCase(tier=PenaltyTier.Z1), [service], catalog=catalog)

    assert [line.amount_cents for line in result.lines] == [35700, 21420]
    assert result.lines[0].section == "§ 13 AHK (§ 9 sinngemäß)"
    assert result.lines[0].interval == "Bezirksgericht"


def test_forfeiture_lowers_flat_rate_percent(catalog):
    service = _service(AdminPenaltyActType.HEARING, units_of_duration=2)
    case = AdminPenaltyCase(tier=PenaltyTier.Z1, forfeiture_cents=300000)

    result = calculate_admin_penalty_costs(case, [service], catalog=catalog)

    assert result.lines[1].label == "Einheitssatz 50%"
    assert result.lines[1].amount_cents == 17850


def test_complaint_rates(catalog):
    sentence = calculate_admin_penalty_costs(
        AdminPenaltyCase(tier=PenaltyTier.Z1), [_service(AdminPenaltyActType.COMPLAINT_SENTENCE)], catalog=catalog
    )
    full = calculate_admin_penalty_costs(
        AdminPenaltyCase(tier=PenaltyTier.Z3), [_service(AdminPenaltyActType.COMPLAINT_FULL)], catalog=catalog
    )

    assert sentence.lines[0].amount_cents == 35200
    assert "(nur Strafhöhe)" in sentence.lines[0].trace
    assert full.lines[0].amount_cents == 80800
    assert full.lines[0].interval == "Schöffengericht"


def test_sentence_only_flag_on_full_complaint(catalog):
    service = _service(AdminPenaltyActType.COMPLAINT_FULL, sentence_only=True, es_multiplier=0)

    result = calculate_admin_penalty_costs(AdminPenaltyCase(tier=PenaltyTier.Z2), [service], catalog=catalog)

    assert [line.amount_cents for line in result.lines] == [59000]


def test_complaint_with_filing_fee(catalog):
    service = _service(AdminPenaltyActType.COMPLAINT_FULL, include_electronic_filing_fee=True)

    result = calculate_admin_penalty_costs(AdminPenaltyCase(tier=PenaltyTier.Z1), [service], catalog=catalog)

    assert [line.amount_cents for line in result.lines] == [71400, 42840, 260]


def test_appeal_hearing_falls_back_to_generic_rate(catalog):
    service = _service(AdminPenaltyActType.APPEAL_HEARING_SENTENCE, units_of_duration=1, es_multiplier=0)

    result = calculate_admin_penalty_costs(AdminPenaltyCase(tier=PenaltyTier.Z3), [service], catalog=catalog)

    assert [line.amount_cents for line in result.lines] == [80800]


def test_ratg_act_on_penalty_base(catalog):
    service = _service(AdminPenaltyActType.RATG_TP2)

    result = calculate_admin_penalty_costs(AdminPenaltyCase(tier=PenaltyTier.Z6A), [service], catalog=catalog)

    assert [line.amount_cents for line in result.lines] == [17380, 10428]
    assert result.lines[0].section == "RATG TP 2 (§ 13 AHK)"


def test_case_surcharges(catalog):
    case = AdminPenaltyCase(tier=PenaltyTier.Z1, co_defendants=1, success_bonus_percent=50)
    service = _service(AdminPenaltyActType.HEARING, units_of_duration=2)

    result = calculate_admin_penalty_costs(case, [service], catalog=catalog)

    (co_defendant,) = result.lines_for("vstraf_sg")
    (bonus,) = result.lines_for("vstraf_erfolg")
    assert co_defendant.amount_cents == 17136
    assert bonus.amount_cents == 28560
    assert result.net_cents == 35700 + 21420 + 17136 + 28560
    assert result.court_fee_cents == 0


def test_unknown_act(catalog):
    with pytest.raises(UnmappedServiceType):
        calculate_admin_penalty_costs(AdminPenaltyCase(tier=PenaltyTier.Z1), [_service("VSTRAF_X")], catalog=catalog)


def test_invalid_multiplier(catalog):
    with pytest.raises(InvalidInput):
        calculate_admin_penalty_costs(
            AdminPenaltyCase(tier=PenaltyTier.Z1), [_service(AdminPenaltyActType.HEARING, es_multiplier=3)], catalog=catalog
        )
