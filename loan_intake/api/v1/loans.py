"""POST /v1/loans/apply - loan submission and decision endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from loan_intake.api.v1.schemas import ErrorResponse, LoanApplicationRequest, LoanDecisionResponse
from loan_intake.api.dependencies import get_request_id, get_submission_service
from loan_intake.services.submission import LoanSubmissionService
from loan_intake.domain.exceptions import ApplicationNotFoundError, PersistenceFailure
from loan_intake.domain.models import LoanDecision
from loan_intake.infrastructure.observability.metrics import record_decision
from loan_intake.infrastructure.observability.logging import log_decision

router = APIRouter()


@router.post(
    "/loans/apply",
    response_model=LoanDecisionResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def apply_for_loan(
    request_body: LoanApplicationRequest,
    request: Request,
    service: LoanSubmissionService = Depends(get_submission_service),
):
    """
    Submit a loan application and decide it synchronously.

    Flow:
    1. Register the application at pending
    2. Check admissibility (income present, amount within the debt multiple)
    3. Score admissible applications and approve or reject on the threshold
    4. Persist the terminal status and score
    5. Return the decision
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        decision = service.submit(request_body.to_domain())

    except PersistenceFailure as e:
        logging.error(
            f"Persistence failure: {e}",
            extra={"request_id": request_id, "application_id": e.application_id},
        )
        raise HTTPException(status_code=500, detail="Internal server error")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    _observe(decision, request_id, start_time)
    return _to_response(decision)


@router.post(
    "/loans/{application_id}/decision",
    response_model=LoanDecisionResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def complete_decision(
    application_id: int,
    request: Request,
    service: LoanSubmissionService = Depends(get_submission_service),
):
    """
    Complete the decision of an application left pending by a storage failure.

    Applications that already hold a terminal status are returned unchanged.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        decision = service.complete_pending(application_id)

    except ApplicationNotFoundError:
        raise HTTPException(status_code=404, detail="Application not found")

    except PersistenceFailure as e:
        logging.error(
            f"Persistence failure: {e}",
            extra={"request_id": request_id, "application_id": application_id},
        )
        raise HTTPException(status_code=500, detail="Internal server error")

    _observe(decision, request_id, start_time)
    return _to_response(decision)


def _observe(decision: LoanDecision, request_id: str, start_time: float) -> None:
    duration_ms = (time.time() - start_time) * 1000
    record_decision(decision.status.value, decision.score)
    log_decision(request_id, decision.application_id, decision.status.value, decision.score, duration_ms)


def _to_response(decision: LoanDecision) -> LoanDecisionResponse:
    return LoanDecisionResponse(
        application_id=decision.application_id,
        status=decision.status.value,
        score=decision.score,
    )
