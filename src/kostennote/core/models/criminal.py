from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from kostennote.core.models.service import FilingRate


class CourtType(str, Enum):
    """AHK § 9 Abs 1 Z 1-5."""

    BG = "BG"
    ER_GH = "ER_GH"
    SCHOEFFEN = "SCHOEFFEN"
    GESCHWORENEN = "GESCHWORENEN"
    HAFT = "HAFT"

    @property
    def label(self) -> str:
        return _COURT_LABELS[self]


_COURT_LABELS = {
    CourtType.BG: "Bezirksgericht",
    CourtType.ER_GH: "Einzelrichter GH",
    CourtType.SCHOEFFEN: "Schöffengericht",
    CourtType.GESCHWORENEN: "Geschworenengericht",
    CourtType.HAFT: "Haftverfahren",
}


class CriminalActType(str, Enum):
    MAIN_HEARING = "STRAF_HV_1_INSTANZ"
    ADVERSARIAL_EXAMINATION = "STRAF_KONTRADIKTORISCHE_VERNEHMUNG"
    APPEAL_FULL = "STRAF_BERUFUNG_VOLL"
    APPEAL_SENTENCE = "STRAF_BERUFUNG_STRAFE"
    APPEAL_HEARING_FULL = "STRAF_BERUFUNG_VH_VOLL"
    APPEAL_HEARING_SENTENCE = "STRAF_BERUFUNG_VH_STRAFE"
    APPEAL = "STRAF_BERUFUNG"
    APPEAL_HEARING = "STRAF_BERUFUNG_VH"
    NULLITY_APPEAL = "STRAF_NICHTIGKEITSBESCHWERDE"
    NULLITY_HEARING = "STRAF_GERICHTSTAG_NB"
    DETENTION_HEARING_FIRST = "STRAF_HAFT_VH_1"
    FUNDAMENTAL_RIGHTS_COMPLAINT = "STRAF_HAFT_GRUNDRECHTSBESCHWERDE"
    DETENTION_COMPLAINT = "STRAF_HAFT_BESCHWERDE_SONST"
    DETENTION_HEARING_SECOND = "STRAF_HAFT_VH_2"
    RATG_TP2 = "STRAF_RATG_TP2"
    RATG_TP3A = "STRAF_RATG_TP3A"
    RATG_TP3B = "STRAF_RATG_TP3B"
    RATG_TP7_2 = "STRAF_RATG_TP7_2"
    WAITING = "STRAF_ZUWARTEN"
    TRAVEL_COSTS = "STRAF_REISEKOSTEN"
    TRAVEL_TIME = "STRAF_REISEZEIT"

    @property
    def label(self) -> str:
        return CRIMINAL_ACT_LABELS[self]

    @property
    def is_travel(self) -> bool:
        return self in (CriminalActType.TRAVEL_COSTS, CriminalActType.TRAVEL_TIME)


CRIMINAL_ACT_LABELS = {
    CriminalActType.MAIN_HEARING: "Hauptverhandlung 1. Instanz",
    CriminalActType.ADVERSARIAL_EXAMINATION: "Kontradiktorische Vernehmung",
    CriminalActType.APPEAL_FULL: "Berufung (voll)",
    CriminalActType.APPEAL_SENTENCE: "Berufung (nur Strafe)",
    CriminalActType.APPEAL_HEARING_FULL: "Berufungsverhandlung (voll)",
    CriminalActType.APPEAL_HEARING_SENTENCE: "Berufungsverhandlung (nur Strafe)",
    CriminalActType.APPEAL: "Berufung",
    CriminalActType.APPEAL_HEARING: "Berufungsverhandlung",
    CriminalActType.NULLITY_APPEAL: "Nichtigkeitsbeschwerde",
    CriminalActType.NULLITY_HEARING: "Gerichtstag Nichtigkeitsbeschwerde",
    CriminalActType.DETENTION_HEARING_FIRST: "Haftverhandlung 1. Instanz",
    CriminalActType.FUNDAMENTAL_RIGHTS_COMPLAINT: "Grundrechtsbeschwerde",
    CriminalActType.DETENTION_COMPLAINT: "Sonstige Beschwerde (Haft)",
    CriminalActType.DETENTION_HEARING_SECOND: "Haftverhandlung 2. Instanz",
    CriminalActType.RATG_TP2: "TP 2 RATG – Strafsachen",
    CriminalActType.RATG_TP3A: "TP 3A RATG – Strafsachen",
    CriminalActType.RATG_TP3B: "TP 3B RATG – Strafsachen",
    CriminalActType.RATG_TP7_2: "TP 7/2 RATG – Strafsachen",
    CriminalActType.WAITING: "TP 7/2 RATG – Zuwarten (§ 10 Abs 4)",
    CriminalActType.TRAVEL_COSTS: "Reisekosten (Kilometergeld)",
    CriminalActType.TRAVEL_TIME: "Reisezeit (TP 9 Z 4)",
}


@dataclass(frozen=True)
class CriminalService:
    id: str
    act_type: CriminalActType
    date: date | None = None
    label: str = ""
    units_of_duration: int = 0
    es_multiplier: int = 1
    include_electronic_filing_fee: bool = False
    electronic_filing_rate_override: FilingRate | None = None
    nullity_with_appeal: bool = False  # § 9 Abs 2: NB combined with Berufung
    kilometres: int = 0  # one way
    return_trip: bool = False


@dataclass(frozen=True)
class CriminalCase:
    court_type: CourtType
    co_defendants: int = 0
    success_bonus_percent: int = 0
    vat_free: bool = False
    detention_origin: CourtType | None = None  # base court for RATG acts in detention matters


class PenaltyTier(str, Enum):
    """AHK § 13 Abs 1 levels by threatened fine."""

    Z1 = "Z1"
    Z2 = "Z2"
    Z3 = "Z3"
    Z4 = "Z4"
    Z5 = "Z5"
    Z6A = "Z6A"
    Z6B = "Z6B"
    Z6C = "Z6C"

    @property
    def court_type(self) -> CourtType:
        return _PENALTY_COURTS[self]

    @property
    def label(self) -> str:
        return _PENALTY_LABELS[self]


_PENALTY_COURTS = {
    PenaltyTier.Z1: CourtType.BG,
    PenaltyTier.Z6A: CourtType.BG,
    PenaltyTier.Z2: CourtType.ER_GH,
    PenaltyTier.Z6B: CourtType.ER_GH,
    PenaltyTier.Z3: CourtType.SCHOEFFEN,
    PenaltyTier.Z5: CourtType.SCHOEFFEN,
    PenaltyTier.Z6C: CourtType.SCHOEFFEN,
    PenaltyTier.Z4: CourtType.GESCHWORENEN,
}

_PENALTY_LABELS = {
    PenaltyTier.Z1: "Geldstrafe bis € 730 (Z 1)",
    PenaltyTier.Z2: "Geldstrafe bis € 2.180 (Z 2)",
    PenaltyTier.Z3: "Geldstrafe € 2.180 – € 4.360 (Z 3)",
    PenaltyTier.Z4: "Geldstrafe über € 4.360 / + Haft (Z 4)",
    PenaltyTier.Z5: "Finanzstrafverfahren (Z 5)",
    PenaltyTier.Z6A: "Disziplinarverfahren leicht (Z 6)",
    PenaltyTier.Z6B: "Disziplinarverfahren mittel (Z 6)",
    PenaltyTier.Z6C: "Disziplinarverfahren schwer (Z 6)",
}


class AdminPenaltyActType(str, Enum):
    HEARING = "VSTRAF_VH_1_INSTANZ"
    APPEAL_HEARING_FULL = "VSTRAF_BERUFUNG_VH_VOLL"
    APPEAL_HEARING_SENTENCE = "VSTRAF_BERUFUNG_VH_STRAFE"
    COMPLAINT_FULL = "VSTRAF_BESCHWERDE_VOLL"
    COMPLAINT_SENTENCE = "VSTRAF_BESCHWERDE_STRAFE"
    RATG_TP2 = "VSTRAF_RATG_TP2"
    RATG_TP3A = "VSTRAF_RATG_TP3A"
    RATG_TP3B = "VSTRAF_RATG_TP3B"
    RATG_TP7_2 = "VSTRAF_RATG_TP7_2"
    WAITING = "VSTRAF_ZUWARTEN"

    @property
    def label(self) -> str:
        return ADMIN_PENALTY_ACT_LABELS[self]

    @property
    def sentence_only(self) -> bool:
        return self in (AdminPenaltyActType.APPEAL_HEARING_SENTENCE, AdminPenaltyActType.COMPLAINT_SENTENCE)


ADMIN_PENALTY_ACT_LABELS = {
    AdminPenaltyActType.HEARING: "Verhandlung 1. Instanz",
    AdminPenaltyActType.APPEAL_HEARING_FULL: "Berufungsverhandlung (volle Anfechtung)",
    AdminPenaltyActType.APPEAL_HEARING_SENTENCE: "Berufungsverhandlung (nur Strafhöhe)",
    AdminPenaltyActType.COMPLAINT_FULL: "Beschwerde (volle Anfechtung)",
    AdminPenaltyActType.COMPLAINT_SENTENCE: "Beschwerde (nur Strafhöhe)",
    AdminPenaltyActType.RATG_TP2: "TP 2 RATG – Kurze Anträge",
    AdminPenaltyActType.RATG_TP3A: "TP 3A RATG – Anträge",
    AdminPenaltyActType.RATG_TP3B: "TP 3B RATG – Beschwerden",
    AdminPenaltyActType.RATG_TP7_2: "TP 7/2 RATG – Kommission",
    AdminPenaltyActType.WAITING: "TP 7/2 RATG – Zuwarten",
}


@dataclass(frozen=True)
class AdminPenaltyService:
    id: str
    act_type: AdminPenaltyActType
    date: date | None = None
    label: str = ""
    units_of_duration: int = 0
    es_multiplier: int = 1
    include_electronic_filing_fee: bool = False
    electronic_filing_rate_override: FilingRate | None = None
    sentence_only: bool = False  # § 13 Abs 4


@dataclass(frozen=True)
class AdminPenaltyCase:
    tier: PenaltyTier
    forfeiture_cents: int = 0  # Verfallswert, added to the base (§ 13 Abs 3)
    co_defendants: int = 0
    success_bonus_percent: int = 0
    vat_free: bool = False
