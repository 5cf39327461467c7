"""Dependency injection for FastAPI endpoints"""

from decimal import Decimal
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from loan_intake.config import settings
from loan_intake.domain.models import DecisionPolicy
from loan_intake.infrastructure.database.session import get_db
from loan_intake.services.submission import LoanSubmissionService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_decision_policy() -> DecisionPolicy:
    """Provide decision policy built from configured constants"""
    return DecisionPolicy(
        debt_income_multiple=settings.debt_income_multiple,
        approval_threshold=settings.approval_threshold,
        score_offset=settings.score_offset,
        min_score=settings.min_score,
        max_score=settings.max_score,
        default_term_months=settings.default_term_months,
        default_monthly_rate=Decimal(str(settings.default_monthly_rate)),
    )


def get_submission_service(
    db: Session = Depends(get_db),
    policy: DecisionPolicy = Depends(get_decision_policy),
) -> LoanSubmissionService:
    """Provide submission workflow bound to the request's session"""
    return LoanSubmissionService(db, policy=policy)
