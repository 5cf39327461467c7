"""Monthly payment estimation for the affordability preview"""

from decimal import localcontext
from typing import Optional
from loan_intake.domain.models import (
    DEFAULT_POLICY,
    AffordabilityPreview,
    DecisionPolicy,
    LoanApplication,
)
from loan_intake.domain.scoring import decide
from loan_intake.utils.money import Number, round_half_up, to_decimal


def estimate_monthly_payment(
    principal: Optional[Number],
    term_months: Optional[int],
    monthly_rate: Optional[Number] = None,
    policy: DecisionPolicy = DEFAULT_POLICY,
) -> int:
    """
    Estimate the fixed monthly installment of an amortized loan.

    Requirements:
    - Zero or missing principal/term estimates nothing (0)
    - A zero rate is straight-line amortization: principal / term
    - Otherwise the standard annuity formula P * r / (1 - (1 + r)^-n)

    Args:
        principal: Amount borrowed
        term_months: Number of monthly installments
        monthly_rate: Interest rate per month (default: policy.default_monthly_rate)

    Example:
        1,500,000 over 24 months at 0% → 62,500
    """
    principal_value = to_decimal(principal)
    if not principal_value or not term_months:
        return 0

    rate = policy.default_monthly_rate if monthly_rate is None else to_decimal(monthly_rate)
    if rate == 0:
        return round_half_up(principal_value / term_months)

    # Enough digits that 1 + rate keeps the rate for any realistic input
    with localcontext() as ctx:
        ctx.prec = 60
        divisor = 1 - (1 + rate) ** -term_months
        if divisor == 0:
            # Rate too small to register at this precision: no interest accrues
            return round_half_up(principal_value / term_months)
        payment = principal_value * rate / divisor
        return round_half_up(payment)


def build_affordability_preview(
    amount: Number,
    term_months: int,
    income: Optional[Number] = None,
    monthly_rate: Optional[Number] = None,
    policy: DecisionPolicy = DEFAULT_POLICY,
) -> AffordabilityPreview:
    """
    Informational preview shown before submission.

    The status and score come from the authoritative engine but are never
    persisted; only a submitted application gets a binding decision.
    """
    rate = policy.default_monthly_rate if monthly_rate is None else to_decimal(monthly_rate)
    application = LoanApplication(
        legal_id="",
        full_name="",
        email="",
        amount=to_decimal(amount),
        term_months=term_months,
        income=None if income is None else to_decimal(income),
    )
    decision = decide(application, policy)

    return AffordabilityPreview(
        monthly_payment=estimate_monthly_payment(amount, term_months, rate, policy),
        monthly_rate=rate,
        status=decision.status,
        score=decision.score,
    )
