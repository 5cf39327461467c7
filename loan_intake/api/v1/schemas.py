"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional
from pydantic import AliasChoices, BaseModel, EmailStr, Field

from loan_intake.domain.models import LoanApplication

TerminalStatus = Literal["inadmissible", "rejected", "approved"]
AnyStatus = Literal["pending", "inadmissible", "rejected", "approved"]


class LoanApplicationRequest(BaseModel):
    """Request body for POST /v1/loans/apply"""

    legal_id: str = Field(
        ...,
        min_length=3,
        max_length=12,
        validation_alias=AliasChoices("legal_id", "rut"),
        description="National identifier of the applicant",
    )
    full_name: str = Field(..., min_length=3, description="Applicant full name")
    email: EmailStr
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2, description="Requested amount")
    term_months: int = Field(..., gt=0, le=600, description="Repayment term in months")
    income: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2, description="Monthly income")

    def to_domain(self) -> LoanApplication:
        return LoanApplication(
            legal_id=self.legal_id.strip(),
            full_name=self.full_name.strip(),
            email=str(self.email),
            amount=self.amount,
            term_months=self.term_months,
            income=self.income,
        )


class LoanDecisionResponse(BaseModel):
    """Response for POST /v1/loans/apply and POST /v1/loans/{id}/decision"""

    application_id: int
    status: TerminalStatus
    score: Optional[int] = None


class LoanStatusResponse(BaseModel):
    """Response for GET /v1/loans/{id}/status"""

    application_id: int
    status: AnyStatus
    score: Optional[int] = None
    updated_at: Optional[datetime] = None


class PreviewRequest(BaseModel):
    """Request body for POST /v1/loans/preview"""

    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    term_months: int = Field(..., gt=0, le=600)
    income: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    monthly_rate: Optional[Decimal] = Field(None, ge=0, lt=1, description="Defaults to the policy rate")


class PreviewResponse(BaseModel):
    """Response for POST /v1/loans/preview (informational, never persisted)"""

    monthly_payment: int
    monthly_rate: float
    status: TerminalStatus
    score: Optional[int] = None
    authoritative: bool = False


class ErrorResponse(BaseModel):
    """Error body shared by all endpoints"""

    error: str
    details: Optional[Dict[str, List[str]]] = None
