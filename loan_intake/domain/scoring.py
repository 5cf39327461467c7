"""Decision engine - admissibility, scoring and status assignment for loan applications

This module is the only authoritative implementation of the decision rules.
Previews (see payments.build_affordability_preview) call into it rather than
re-implementing any rule.
"""

from typing import Optional
from loan_intake.domain.models import (
    DEFAULT_POLICY,
    DecisionPolicy,
    LoanApplication,
    LoanDecision,
    LoanStatus,
)
from loan_intake.utils.money import Number, clamp, round_half_up, to_decimal


def is_admissible(
    income: Optional[Number],
    amount: Number,
    policy: DecisionPolicy = DEFAULT_POLICY,
) -> bool:
    """
    Admissibility gate applied before any scoring.

    Requirements:
    - Missing, zero or negative income is never admissible
    - Requested amount may not exceed income times the debt multiple (20 by default)
    """
    income_value = to_decimal(income)
    if income_value <= 0:
        return False
    return to_decimal(amount) <= income_value * policy.debt_income_multiple


def compute_score(
    income: Optional[Number],
    amount: Number,
    term_months: Optional[int],
    policy: DecisionPolicy = DEFAULT_POLICY,
) -> int:
    """
    Score an application from 1 (highest risk) to 100 (lowest risk).

    score = offset + income / (amount / term), rounded then clamped.

    Thresholds rationale:
    - offset = 60: typical applicants land near the approval threshold
    - income / monthly burden: the more times income covers the monthly
      installment, the higher the score
    - clamp [1, 100]: fixed-width score regardless of extreme inputs

    Raises:
        ValueError: if amount is not positive (the admissibility gate rules this out)
    """
    amount_value = to_decimal(amount)
    if amount_value <= 0:
        raise ValueError("amount must be positive to compute a score")

    term = term_months or policy.default_term_months
    monthly_burden = amount_value / term
    base = policy.score_offset + to_decimal(income) / monthly_burden

    return clamp(round_half_up(base), policy.min_score, policy.max_score)


def assign_status(score: int, policy: DecisionPolicy = DEFAULT_POLICY) -> LoanStatus:
    """Map an admissible application's score to its terminal status"""
    if score >= policy.approval_threshold:
        return LoanStatus.APPROVED
    return LoanStatus.REJECTED


def decide(application: LoanApplication, policy: DecisionPolicy = DEFAULT_POLICY) -> LoanDecision:
    """
    Main entry point: evaluate an application once and return its terminal decision.

    Flow:
    1. Inadmissible applications stop here with no score
    2. Otherwise compute the score
    3. Score at or above the approval threshold approves, anything lower rejects
    """
    if not is_admissible(application.income, application.amount, policy):
        return LoanDecision(
            status=LoanStatus.INADMISSIBLE,
            score=None,
            application_id=application.application_id,
        )

    score = compute_score(application.income, application.amount, application.term_months, policy)

    return LoanDecision(
        status=assign_status(score, policy),
        score=score,
        application_id=application.application_id,
    )
