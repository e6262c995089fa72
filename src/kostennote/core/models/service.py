from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum, IntEnum

from kostennote.core.errors import UnmappedServiceType
from kostennote.core.models.tariff import TariffTier


class ServiceType(str, Enum):
    """Billable act tags of a civil fee statement."""

    PLEADING_TP1 = "PLEADING_TP1"
    PLEADING_TP2 = "PLEADING_TP2"
    PLEADING_TP3A_I = "PLEADING_TP3A_I"
    PLEADING_TP3B = "PLEADING_TP3B"
    PLEADING_TP3B_IA = "PLEADING_TP3B_IA"
    PLEADING_TP3C = "PLEADING_TP3C"
    PLEADING_TP5 = "PLEADING_TP5"
    PLEADING_TP6 = "PLEADING_TP6"
    HEARING_TP2_II = "HEARING_TP2_II"
    HEARING_TP2_II_INSOLVENCY = "HEARING_TP2_II_INSOLVENCY"
    HEARING_TP3A_II = "HEARING_TP3A_II"
    INSPECTION_TP3A_III = "INSPECTION_TP3A_III"
    HEARING_TP3B_II = "HEARING_TP3B_II"
    HEARING_TP3C_II = "HEARING_TP3C_II"
    HEARING_TP3C_III = "HEARING_TP3C_III"
    WAITING_TIME = "WAITING_TIME"
    WAITING_TIME_TP3 = "WAITING_TIME_TP3"
    CANCELLED_HEARING = "CANCELLED_HEARING"
    CANCELLED_HEARING_TP3 = "CANCELLED_HEARING_TP3"
    COMMISSION_TP7_1 = "COMMISSION_TP7_1"
    COMMISSION_TP7_2 = "COMMISSION_TP7_2"
    PLEADING_TP4_PRIVATANKLAGE_BG = "PLEADING_TP4_PRIVATANKLAGE_BG"
    PLEADING_TP4_PRIVATANKLAGE_ANDERE = "PLEADING_TP4_PRIVATANKLAGE_ANDERE"
    PLEADING_TP4_MEDIENGESETZ = "PLEADING_TP4_MEDIENGESETZ"
    PLEADING_TP4_PRIVATBET_BG = "PLEADING_TP4_PRIVATBET_BG"
    PLEADING_TP4_PRIVATBET_ANDERE = "PLEADING_TP4_PRIVATBET_ANDERE"
    PLEADING_TP4_AUSGESCHL_OEFF = "PLEADING_TP4_AUSGESCHL_OEFF"
    HEARING_TP4_PRIVATANKLAGE_BG = "HEARING_TP4_PRIVATANKLAGE_BG"
    HEARING_TP4_PRIVATANKLAGE_ANDERE = "HEARING_TP4_PRIVATANKLAGE_ANDERE"
    HEARING_TP4_MEDIENGESETZ = "HEARING_TP4_MEDIENGESETZ"
    HEARING_TP4_PRIVATBET_BG = "HEARING_TP4_PRIVATBET_BG"
    HEARING_TP4_PRIVATBET_ANDERE = "HEARING_TP4_PRIVATBET_ANDERE"
    HEARING_TP4_AUSGESCHL_OEFF = "HEARING_TP4_AUSGESCHL_OEFF"
    CANCELLED_TP4_PRIVATANKLAGE_BG = "CANCELLED_TP4_PRIVATANKLAGE_BG"
    CANCELLED_TP4_PRIVATANKLAGE_ANDERE = "CANCELLED_TP4_PRIVATANKLAGE_ANDERE"
    CANCELLED_TP4_MEDIENGESETZ = "CANCELLED_TP4_MEDIENGESETZ"
    CANCELLED_TP4_PRIVATBET_BG = "CANCELLED_TP4_PRIVATBET_BG"
    CANCELLED_TP4_PRIVATBET_ANDERE = "CANCELLED_TP4_PRIVATBET_ANDERE"
    CANCELLED_TP4_AUSGESCHL_OEFF = "CANCELLED_TP4_AUSGESCHL_OEFF"
    MEETING_TP8 = "MEETING_TP8"
    MEETING_TP8_SHORT = "MEETING_TP8_SHORT"
    TRAVEL_TIME_TP9 = "TRAVEL_TIME_TP9"
    TRAVEL_ALLOWANCE_TP9 = "TRAVEL_ALLOWANCE_TP9"


class ActKind(str, Enum):
    PLEADING = "pleading"
    HEARING = "hearing"
    WAITING = "waiting"
    CANCELLATION = "cancellation"
    COMMISSION = "commission"
    CRIMINAL_PLEADING = "criminal_pleading"
    CRIMINAL_HEARING = "criminal_hearing"
    CRIMINAL_CANCELLATION = "criminal_cancellation"
    MEETING = "meeting"
    TRAVEL_TIME = "travel_time"
    TRAVEL_ALLOWANCE = "travel_allowance"

    @property
    def is_criminal(self) -> bool:
        return self in (ActKind.CRIMINAL_PLEADING, ActKind.CRIMINAL_HEARING, ActKind.CRIMINAL_CANCELLATION)

    @property
    def is_written(self) -> bool:
        return self in (ActKind.PLEADING, ActKind.CRIMINAL_PLEADING)


class Instance(IntEnum):
    FIRST = 1
    SECOND = 2
    THIRD = 3


class CriminalVariant(str, Enum):
    """TP 4 RATG: private prosecution and private party variants."""

    PROSECUTION_DISTRICT = "ANKLAGE_BG"
    PROSECUTION_OTHER = "ANKLAGE_ANDERE"
    MEDIA_ACT = "MEDIENGESETZ"
    PRIVATE_PARTY_DISTRICT = "PRIV_BG"
    PRIVATE_PARTY_OTHER = "PRIV_ANDERE"
    EXCLUDED_PUBLIC = "AUSGESCHL_OEFF"


class EnforcementFeeKind(str, Enum):
    """Vollzugsgebühr (§ 455 EO) charged with an application for enforcement."""

    MOVABLES = "FAHRNISEXEKUTION"
    RECEIVABLES = "FORDERUNGSEXEKUTION"
    PROPERTY_RIGHTS = "VERMOEGENSRECHTE"
    SURRENDER = "HERAUSGABE"
    FORCED_ADMINISTRATION = "ZWANGSVERWALTUNG"
    FORCED_SALE = "ZWANGSVERSTEIGERUNG"
    EVICTION = "RAEUMUNGSEXEKUTION"


class ConnectionKind(str, Enum):
    """Verbindungsgebühr for pleadings joined with other proceedings."""

    PRELIMINARY = "vorab"
    RESIDENCE = "wohnort"
    OTHER = "andere"


class FilingRate(str, Enum):
    """ERV-Beitrag rate: first filing in a matter or any follow-up filing."""

    INITIAL = "initial"
    FOLLOW_UP = "follow-up"


@dataclass(frozen=True)
class ServiceKind:
    act: ActKind
    tier: TariffTier | None
    instance: Instance
    section: str
    variant: CriminalVariant | None = None
    half_rate: bool = False
    doubled: bool = False
    short_form: bool = False


def _pleading(tier: TariffTier, instance: Instance, section: str, **extra) -> ServiceKind:
    return ServiceKind(ActKind.PLEADING, tier, instance, section, **extra)


def _hearing(tier: TariffTier, instance: Instance, section: str, **extra) -> ServiceKind:
    return ServiceKind(ActKind.HEARING, tier, instance, section, **extra)


def _criminal(act: ActKind, variant: CriminalVariant, section: str) -> ServiceKind:
    return ServiceKind(act, None, Instance.FIRST, section, variant=variant)


_T = TariffTier
_I = Instance
_V = CriminalVariant
_CP = ActKind.CRIMINAL_PLEADING
_CH = ActKind.CRIMINAL_HEARING
_CC = ActKind.CRIMINAL_CANCELLATION

SERVICE_KINDS: dict[ServiceType, ServiceKind] = {
    ServiceType.PLEADING_TP1: _pleading(_T.TP1, _I.FIRST, "TP 1"),
    ServiceType.PLEADING_TP2: _pleading(_T.TP2, _I.FIRST, "TP 2"),
    ServiceType.PLEADING_TP3A_I: _pleading(_T.TP3A, _I.FIRST, "TP 3A Abs I"),
    ServiceType.PLEADING_TP3B: _pleading(_T.TP3B, _I.SECOND, "TP 3B Abs I"),
    ServiceType.PLEADING_TP3B_IA: _pleading(_T.TP3B, _I.SECOND, "TP 3B Abs Ia", half_rate=True),
    ServiceType.PLEADING_TP3C: _pleading(_T.TP3C, _I.THIRD, "TP 3C Abs I"),
    ServiceType.PLEADING_TP5: _pleading(_T.TP5, _I.FIRST, "TP 5"),
    ServiceType.PLEADING_TP6: _pleading(_T.TP6, _I.FIRST, "TP 6"),
    ServiceType.HEARING_TP2_II: _hearing(_T.TP2, _I.FIRST, "TP 2 Abs II"),
    ServiceType.HEARING_TP2_II_INSOLVENCY: _hearing(_T.TP2, _I.FIRST, "TP 2 Abs II"),
    ServiceType.HEARING_TP3A_II: _hearing(_T.TP3A, _I.FIRST, "TP 3A Abs II"),
    ServiceType.INSPECTION_TP3A_III: _hearing(_T.TP3A, _I.FIRST, "TP 3A Abs III"),
    ServiceType.HEARING_TP3B_II: _hearing(_T.TP3B, _I.SECOND, "TP 3B Abs II"),
    ServiceType.HEARING_TP3C_II: _hearing(_T.TP3C, _I.THIRD, "TP 3C Abs II"),
    ServiceType.HEARING_TP3C_III: _hearing(_T.TP3C, _I.THIRD, "TP 3C Abs III (EuGH)", doubled=True),
    ServiceType.WAITING_TIME: ServiceKind(ActKind.WAITING, _T.TP2, _I.FIRST, "TP 2 Anmerkung 2"),
    ServiceType.WAITING_TIME_TP3: ServiceKind(ActKind.WAITING, _T.TP3A, _I.FIRST, "TP 3 Anmerkung 2"),
    ServiceType.CANCELLED_HEARING: ServiceKind(ActKind.CANCELLATION, _T.TP2, _I.FIRST, "TP 2 Anmerkung 3"),
    ServiceType.CANCELLED_HEARING_TP3: ServiceKind(ActKind.CANCELLATION, _T.TP3A, _I.FIRST, "TP 3 Anmerkung 3"),
    ServiceType.COMMISSION_TP7_1: ServiceKind(ActKind.COMMISSION, _T.TP7_1, _I.FIRST, "TP 7/1"),
    ServiceType.COMMISSION_TP7_2: ServiceKind(ActKind.COMMISSION, _T.TP7_2, _I.FIRST, "TP 7/2"),
    ServiceType.PLEADING_TP4_PRIVATANKLAGE_BG: _criminal(_CP, _V.PROSECUTION_DISTRICT, "TP 4/I/1a Schriftsatz"),
    ServiceType.PLEADING_TP4_PRIVATANKLAGE_ANDERE: _criminal(_CP, _V.PROSECUTION_OTHER, "TP 4/I/1b Schriftsatz"),
    ServiceType.PLEADING_TP4_MEDIENGESETZ: _criminal(_CP, _V.MEDIA_ACT, "TP 4/I/2 Schriftsatz"),
    ServiceType.PLEADING_TP4_PRIVATBET_BG: _criminal(_CP, _V.PRIVATE_PARTY_DISTRICT, "TP 4/II Schriftsatz"),
    ServiceType.PLEADING_TP4_PRIVATBET_ANDERE: _criminal(_CP, _V.PRIVATE_PARTY_OTHER, "TP 4/II Schriftsatz"),
    ServiceType.PLEADING_TP4_AUSGESCHL_OEFF: _criminal(_CP, _V.EXCLUDED_PUBLIC, "TP 4/III Schriftsatz"),
    ServiceType.HEARING_TP4_PRIVATANKLAGE_BG: _criminal(_CH, _V.PROSECUTION_DISTRICT, "TP 4/I/1a Verhandlung"),
    ServiceType.HEARING_TP4_PRIVATANKLAGE_ANDERE: _criminal(_CH, _V.PROSECUTION_OTHER, "TP 4/I/1b Verhandlung"),
    ServiceType.HEARING_TP4_MEDIENGESETZ: _criminal(_CH, _V.MEDIA_ACT, "TP 4/I/2 Verhandlung"),
    ServiceType.HEARING_TP4_PRIVATBET_BG: _criminal(_CH, _V.PRIVATE_PARTY_DISTRICT, "TP 4/II Verhandlung"),
    ServiceType.HEARING_TP4_PRIVATBET_ANDERE: _criminal(_CH, _V.PRIVATE_PARTY_OTHER, "TP 4/II Verhandlung"),
    ServiceType.HEARING_TP4_AUSGESCHL_OEFF: _criminal(_CH, _V.EXCLUDED_PUBLIC, "TP 4/III Verhandlung"),
    ServiceType.CANCELLED_TP4_PRIVATANKLAGE_BG: _criminal(_CC, _V.PROSECUTION_DISTRICT, "TP 4/I/1a Abberaumung"),
    ServiceType.CANCELLED_TP4_PRIVATANKLAGE_ANDERE: _criminal(_CC, _V.PROSECUTION_OTHER, "TP 4/I/1b Abberaumung"),
    ServiceType.CANCELLED_TP4_MEDIENGESETZ: _criminal(_CC, _V.MEDIA_ACT, "TP 4/I/2 Abberaumung"),
    ServiceType.CANCELLED_TP4_PRIVATBET_BG: _criminal(_CC, _V.PRIVATE_PARTY_DISTRICT, "TP 4/II Abberaumung"),
    ServiceType.CANCELLED_TP4_PRIVATBET_ANDERE: _criminal(_CC, _V.PRIVATE_PARTY_OTHER, "TP 4/II Abberaumung"),
    ServiceType.CANCELLED_TP4_AUSGESCHL_OEFF: _criminal(_CC, _V.EXCLUDED_PUBLIC, "TP 4/III Abberaumung"),
    ServiceType.MEETING_TP8: ServiceKind(ActKind.MEETING, None, _I.FIRST, "TP 8"),
    ServiceType.MEETING_TP8_SHORT: ServiceKind(ActKind.MEETING, None, _I.FIRST, "TP 8 (Kurzform)", short_form=True),
    ServiceType.TRAVEL_TIME_TP9: ServiceKind(ActKind.TRAVEL_TIME, None, _I.FIRST, "TP 9 Z 4"),
    ServiceType.TRAVEL_ALLOWANCE_TP9: ServiceKind(ActKind.TRAVEL_ALLOWANCE, None, _I.FIRST, "TP 9 Z 1 lit c"),
}


def kind_of(service_type: ServiceType | str) -> ServiceKind:
    """Resolve a tag to its (act, tier, instance) record."""
    try:
        return SERVICE_KINDS[ServiceType(service_type)]
    except (ValueError, KeyError) as exc:
        raise UnmappedServiceType(f"Unknown service type: {service_type!r}") from exc


@dataclass(frozen=True)
class Service:
    """A single billable act of a civil fee statement."""

    id: str
    type: ServiceType
    date: date | None = None
    label: str = ""
    base_amount_override: int | None = None  # cents, replaces the case base
    party_count_override: int | None = None
    units_of_duration: int = 0  # half hours; 0 = customary default
    waiting_units: int = 0
    es_multiplier: int = 1
    custom_es_percent: int | None = None
    include_electronic_filing_fee: bool = False
    electronic_filing_rate_override: FilingRate | None = None
    is_initiating_act: bool = False
    connection_surcharge_kind: ConnectionKind | None = None
    is_half_rate_rule: bool = False
    enforcement_fee_kind: EnforcementFeeKind | None = None

    @property
    def kind(self) -> ServiceKind:
        return kind_of(self.type)
