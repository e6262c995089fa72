from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProcedureCategory(str, Enum):
    CIVIL = "civil"
    EXECUTION = "execution"
    NON_CONTENTIOUS = "non_contentious"
    INSOLVENCY = "insolvency"
    OTHER = "other"


@dataclass(frozen=True)
class CaseParameters:
    """Case-level inputs shared by every service of a civil statement."""

    base_cents: int
    co_litigants: int = 0
    vat_free: bool = False
    procedure: ProcedureCategory = ProcedureCategory.CIVIL
    auto_court_fee: bool = True
    manual_court_fee_cents: int = 0
    class_action: bool = False  # Verbandsklage caps
