"""POST /v1/loans/preview - Affordability preview before submission"""

from fastapi import APIRouter, Depends

from loan_intake.api.v1.schemas import PreviewRequest, PreviewResponse
from loan_intake.api.dependencies import get_decision_policy
from loan_intake.domain.models import DecisionPolicy
from loan_intake.domain.payments import build_affordability_preview

router = APIRouter()


@router.post("/loans/preview", response_model=PreviewResponse)
def preview_loan(
    request_body: PreviewRequest,
    policy: DecisionPolicy = Depends(get_decision_policy),
):
    """
    Estimate the monthly payment and the likely outcome of an application.

    Nothing is persisted and the result is not binding: only POST /v1/loans/apply
    produces an authoritative decision.
    """
    preview = build_affordability_preview(
        amount=request_body.amount,
        term_months=request_body.term_months,
        income=request_body.income,
        monthly_rate=request_body.monthly_rate,
        policy=policy,
    )

    return PreviewResponse(
        monthly_payment=preview.monthly_payment,
        monthly_rate=float(preview.monthly_rate),
        status=preview.status.value,
        score=preview.score,
        authoritative=preview.authoritative,
    )
