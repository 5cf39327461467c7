"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class LoanStatus(str, Enum):
    """Lifecycle of a loan application; everything but PENDING is terminal"""

    PENDING = "pending"
    INADMISSIBLE = "inadmissible"
    REJECTED = "rejected"
    APPROVED = "approved"

    @property
    def is_terminal(self) -> bool:
        return self is not LoanStatus.PENDING


@dataclass(frozen=True)
class DecisionPolicy:
    """Policy constants driving admissibility, scoring and status assignment"""

    debt_income_multiple: int = 20
    approval_threshold: int = 55
    score_offset: int = 60
    min_score: int = 1
    max_score: int = 100
    default_term_months: int = 24
    default_monthly_rate: Decimal = Decimal("0.019")


DEFAULT_POLICY = DecisionPolicy()


@dataclass(frozen=True)
class LoanApplication:
    """Consumer loan application as submitted by the applicant"""

    legal_id: str
    full_name: str
    email: str
    amount: Decimal
    term_months: int
    income: Optional[Decimal] = None
    application_id: Optional[int] = None  # Assigned by storage on registration


@dataclass(frozen=True)
class LoanDecision:
    """Admissibility and risk outcome for one application"""

    status: LoanStatus
    score: Optional[int] = None
    application_id: Optional[int] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AffordabilityPreview:
    """Non-binding estimate computed before an application is submitted"""

    monthly_payment: int
    monthly_rate: Decimal
    status: LoanStatus
    score: Optional[int] = None
    authoritative: bool = False
