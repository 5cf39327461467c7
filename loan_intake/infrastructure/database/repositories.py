"""Data access layer for loan applications"""

from dataclasses import replace
from typing import List, Optional
from sqlalchemy.orm import Session
from loan_intake.infrastructure.database.models import LoanRequest
from loan_intake.domain.models import LoanApplication, LoanDecision, LoanStatus


class LoanApplicationRepository:
    """Repository for loan applications and their decisions"""

    def __init__(self, db: Session):
        self.db = db

    def register_pending(self, application: LoanApplication) -> LoanApplication:
        """Insert application at pending status and return it with its assigned ID"""
        db_request = LoanRequest(
            legal_id=application.legal_id,
            full_name=application.full_name,
            email=application.email,
            amount=application.amount,
            term_months=application.term_months,
            income=application.income,
            status=LoanStatus.PENDING.value,
        )
        self.db.add(db_request)
        self.db.flush()  # Get ID without committing
        return replace(application, application_id=db_request.id)

    def record_decision(self, application_id: int, decision: LoanDecision) -> bool:
        """Write terminal status and score back to the application row"""
        db_request = self._get(application_id)
        if db_request is None:
            return False

        db_request.status = decision.status.value
        db_request.score = decision.score
        self.db.flush()
        return True

    def get_application(self, application_id: int) -> Optional[LoanApplication]:
        """Rebuild the submitted application from its row"""
        db_request = self._get(application_id)
        if db_request is None:
            return None
        return _to_application(db_request)

    def get_status(self, application_id: int) -> Optional[LoanDecision]:
        """Fetch current status and score"""
        db_request = self._get(application_id)
        if db_request is None:
            return None
        return _to_decision(db_request)

    def list_pending(self, limit: int = 100) -> List[LoanApplication]:
        """Applications whose decision was never written, oldest first"""
        rows = (
            self.db.query(LoanRequest)
            .filter(LoanRequest.status == LoanStatus.PENDING.value)
            .order_by(LoanRequest.id.asc())
            .limit(limit)
            .all()
        )
        return [_to_application(row) for row in rows]

    def _get(self, application_id: int) -> Optional[LoanRequest]:
        return (
            self.db.query(LoanRequest)
            .filter(LoanRequest.id == application_id)
            .first()
        )


def _to_application(row: LoanRequest) -> LoanApplication:
    return LoanApplication(
        legal_id=row.legal_id,
        full_name=row.full_name,
        email=row.email,
        amount=row.amount,
        term_months=row.term_months,
        income=row.income,
        application_id=row.id,
    )


def _to_decision(row: LoanRequest) -> LoanDecision:
    return LoanDecision(
        status=LoanStatus(row.status),
        score=row.score,
        application_id=row.id,
        updated_at=row.updated_at,
    )
