"""Loan submission workflow: register, decide, record the decision"""

import logging
import time
from typing import Callable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loan_intake.config import settings
from loan_intake.domain.exceptions import ApplicationNotFoundError, PersistenceFailure
from loan_intake.domain.models import DEFAULT_POLICY, DecisionPolicy, LoanApplication, LoanDecision
from loan_intake.domain.scoring import decide
from loan_intake.infrastructure.database.repositories import LoanApplicationRepository
from loan_intake.infrastructure.observability.metrics import (
    decision_write_retry_counter,
    persistence_failure_counter,
)


class LoanSubmissionService:
    """Runs one application through the decision engine and persists the outcome"""

    def __init__(
        self,
        db: Session,
        policy: DecisionPolicy = DEFAULT_POLICY,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.db = db
        self.repository = LoanApplicationRepository(db)
        self.policy = policy
        self.max_retries = settings.decision_write_max_retries if max_retries is None else max_retries
        self.backoff_base = settings.decision_write_backoff_base if backoff_base is None else backoff_base
        self.sleep = sleep

    def submit(self, application: LoanApplication) -> LoanDecision:
        """
        Register a new application and decide it synchronously.

        Flow:
        1. Commit the application at pending so it can never be lost
        2. Evaluate admissibility, score and status
        3. Write the terminal decision, retrying storage errors

        Raises:
            PersistenceFailure: registration failed, or the decision write kept
                failing (the application then stays pending and can be completed
                later with complete_pending)
        """
        try:
            registered = self.repository.register_pending(application)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            persistence_failure_counter.labels(stage="register").inc()
            logging.error(f"Failed to register loan application: {e}")
            raise PersistenceFailure("Could not register loan application") from e

        decision = decide(registered, self.policy)
        return self._write_decision(registered.application_id, decision)

    def complete_pending(self, application_id: int) -> LoanDecision:
        """
        Decide an application left at pending by a failed decision write.

        Already decided applications are returned as stored; a terminal
        decision is never recomputed.
        """
        current = self.repository.get_status(application_id)
        if current is None:
            raise ApplicationNotFoundError(application_id)
        if current.status.is_terminal:
            return current

        application = self.repository.get_application(application_id)
        decision = decide(application, self.policy)
        return self._write_decision(application_id, decision)

    def recover_pending(self, limit: int = 100) -> List[LoanDecision]:
        """
        Complete every application still at pending, oldest first.

        An application whose decision write fails again is logged and left
        pending for the next sweep.
        """
        recovered = []
        for application in self.repository.list_pending(limit=limit):
            try:
                recovered.append(self.complete_pending(application.application_id))
            except PersistenceFailure as e:
                logging.error(
                    f"Pending application not recovered: {e}",
                    extra={"application_id": application.application_id},
                )

        if recovered:
            logging.info(f"Recovered {len(recovered)} pending loan applications")
        return recovered

    def get_status(self, application_id: int) -> LoanDecision:
        """Current status and score, or ApplicationNotFoundError"""
        decision = self.repository.get_status(application_id)
        if decision is None:
            raise ApplicationNotFoundError(application_id)
        return decision

    def _write_decision(self, application_id: Optional[int], decision: LoanDecision) -> LoanDecision:
        """
        Persist a terminal decision with retry logic.

        Retry strategy:
        - Exponential backoff: base, 2x base, 4x base... (base * 2^(attempt-1))
        - Retries on any SQLAlchemy error, up to max_retries attempts in total
        """
        attempt = 0
        while True:
            try:
                if not self.repository.record_decision(application_id, decision):
                    raise ApplicationNotFoundError(application_id)
                self.db.commit()
                return decision

            except SQLAlchemyError as e:
                self.db.rollback()
                attempt += 1

                if attempt >= self.max_retries:
                    persistence_failure_counter.labels(stage="decision").inc()
                    logging.error(
                        f"Giving up on decision write after {attempt} attempts: {e}",
                        extra={"application_id": application_id},
                    )
                    raise PersistenceFailure(
                        "Could not record loan decision", application_id=application_id
                    ) from e

                decision_write_retry_counter.inc()
                backoff = self.backoff_base * (2 ** (attempt - 1))
                logging.warning(
                    f"Decision write failed, retrying in {backoff}s: {e}",
                    extra={"application_id": application_id, "attempt": attempt},
                )
                self.sleep(backoff)
