"""GET /v1/loans/{application_id}/status - Fetch an application's decision"""

from fastapi import APIRouter, Depends, HTTPException

from loan_intake.api.v1.schemas import ErrorResponse, LoanStatusResponse
from loan_intake.api.dependencies import get_submission_service
from loan_intake.services.submission import LoanSubmissionService
from loan_intake.domain.exceptions import ApplicationNotFoundError

router = APIRouter()


@router.get(
    "/loans/{application_id}/status",
    response_model=LoanStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_loan_status(
    application_id: int,
    service: LoanSubmissionService = Depends(get_submission_service),
):
    """
    Retrieve current status and score of a loan application.

    Returns:
        Status (pending only while a decision write is outstanding) and score or null
    """
    try:
        decision = service.get_status(application_id)
    except ApplicationNotFoundError:
        raise HTTPException(status_code=404, detail="Application not found")

    return LoanStatusResponse(
        application_id=decision.application_id,
        status=decision.status.value,
        score=decision.score,
        updated_at=decision.updated_at,
    )
