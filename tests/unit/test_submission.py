"""Unit tests for the submission workflow and its storage failure handling"""

import pytest
from dataclasses import replace
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from loan_intake.domain.exceptions import ApplicationNotFoundError, PersistenceFailure
from loan_intake.domain.models import LoanApplication, LoanStatus
from loan_intake.infrastructure.database.models import LoanRequest
from loan_intake.infrastructure.database.repositories import LoanApplicationRepository
from loan_intake.services.submission import LoanSubmissionService


def _flaky(original, failures: int):
    """Wrap a repository method so its first `failures` calls raise a storage error"""
    calls = {"count": 0}

    def wrapper(self, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] <= failures:
            raise OperationalError("UPDATE loan_request", {}, Exception("connection lost"))
        return original(self, *args, **kwargs)

    return wrapper


@pytest.fixture
def sleeps() -> list:
    return []


@pytest.fixture
def service(db: Session, sleeps: list) -> LoanSubmissionService:
    return LoanSubmissionService(db, max_retries=3, backoff_base=1.0, sleep=sleeps.append)


def test_submit_persists_terminal_decision(
    db: Session, service: LoanSubmissionService, approvable_application: LoanApplication
):
    """Submission returns and stores the same terminal decision"""
    decision = service.submit(approvable_application)

    assert decision.application_id is not None
    assert decision.status is LoanStatus.APPROVED
    assert decision.score == 76

    row = db.query(LoanRequest).filter(LoanRequest.id == decision.application_id).one()
    assert row.status == "approved"
    assert row.score == 76
    assert row.legal_id == "12345678-9"


def test_submit_assigns_increasing_ids(service: LoanSubmissionService, approvable_application: LoanApplication):
    """Each submission gets a new, larger identifier"""
    first = service.submit(approvable_application)
    second = service.submit(approvable_application)

    assert second.application_id > first.application_id


def test_submit_inadmissible_has_no_score(db: Session, service: LoanSubmissionService, approvable_application):
    """Inadmissible applications are stored with a null score"""
    decision = service.submit(replace(approvable_application, income=None))

    stored = service.get_status(decision.application_id)
    assert stored.status is LoanStatus.INADMISSIBLE
    assert stored.score is None
    assert stored.updated_at is not None


def test_submit_retries_decision_write(
    monkeypatch, service: LoanSubmissionService, sleeps: list, approvable_application: LoanApplication
):
    """Transient storage errors are retried with exponential backoff"""
    monkeypatch.setattr(
        LoanApplicationRepository,
        "record_decision",
        _flaky(LoanApplicationRepository.record_decision, failures=2),
    )

    decision = service.submit(approvable_application)

    assert sleeps == [1.0, 2.0]
    assert service.get_status(decision.application_id).status is LoanStatus.APPROVED


def test_submit_leaves_pending_when_decision_write_keeps_failing(
    monkeypatch, db: Session, sleeps: list, approvable_application: LoanApplication
):
    """Exhausted retries surface a failure and the application stays visibly pending"""
    service = LoanSubmissionService(db, max_retries=3, backoff_base=1.0, sleep=sleeps.append)
    monkeypatch.setattr(
        LoanApplicationRepository,
        "record_decision",
        _flaky(LoanApplicationRepository.record_decision, failures=10),
    )

    with pytest.raises(PersistenceFailure) as exc_info:
        service.submit(approvable_application)

    application_id = exc_info.value.application_id
    assert application_id is not None
    assert sleeps == [1.0, 2.0]

    stored = service.get_status(application_id)
    assert stored.status is LoanStatus.PENDING
    assert stored.score is None

    # Storage recovers: the pending application can be completed
    monkeypatch.undo()
    completed = service.complete_pending(application_id)

    assert completed.status is LoanStatus.APPROVED
    assert completed.score == 76
    assert service.get_status(application_id).status is LoanStatus.APPROVED


def test_submit_registration_failure(monkeypatch, db: Session, service: LoanSubmissionService, approvable_application):
    """Nothing is stored when the application cannot be registered"""
    monkeypatch.setattr(
        LoanApplicationRepository,
        "register_pending",
        _flaky(LoanApplicationRepository.register_pending, failures=1),
    )

    with pytest.raises(PersistenceFailure) as exc_info:
        service.submit(approvable_application)

    assert exc_info.value.application_id is None
    assert db.query(LoanRequest).count() == 0


def test_complete_pending_returns_stored_terminal_decision(
    service: LoanSubmissionService, approvable_application: LoanApplication
):
    """A decided application is never re-decided"""
    decision = service.submit(approvable_application)

    again = service.complete_pending(decision.application_id)

    assert again.status is LoanStatus.APPROVED
    assert again.score == 76


def test_complete_pending_unknown_application(service: LoanSubmissionService):
    with pytest.raises(ApplicationNotFoundError):
        service.complete_pending(999)


def test_get_status_unknown_application(service: LoanSubmissionService):
    with pytest.raises(ApplicationNotFoundError):
        service.get_status(999)


def test_list_pending_only_returns_undecided(
    monkeypatch, db: Session, service: LoanSubmissionService, approvable_application: LoanApplication
):
    """Recovery listing skips decided applications"""
    decided = service.submit(approvable_application)

    monkeypatch.setattr(
        LoanApplicationRepository,
        "record_decision",
        _flaky(LoanApplicationRepository.record_decision, failures=10),
    )
    with pytest.raises(PersistenceFailure) as exc_info:
        service.submit(approvable_application)
    monkeypatch.undo()

    pending = LoanApplicationRepository(db).list_pending()

    assert [app.application_id for app in pending] == [exc_info.value.application_id]
    assert decided.application_id not in [app.application_id for app in pending]
    assert pending[0].income == approvable_application.income


def test_submit_explicit_single_attempt(monkeypatch, db: Session, sleeps: list, approvable_application):
    """max_retries=0 is honored instead of falling back to the configured value"""
    service = LoanSubmissionService(db, max_retries=0, backoff_base=1.0, sleep=sleeps.append)
    monkeypatch.setattr(
        LoanApplicationRepository,
        "record_decision",
        _flaky(LoanApplicationRepository.record_decision, failures=1),
    )

    with pytest.raises(PersistenceFailure):
        service.submit(approvable_application)

    assert service.max_retries == 0
    assert sleeps == []


def test_recover_pending_completes_stuck_applications(
    monkeypatch, db: Session, service: LoanSubmissionService, approvable_application: LoanApplication
):
    """Sweep decides every pending application and skips decided ones"""
    decided = service.submit(approvable_application)

    monkeypatch.setattr(
        LoanApplicationRepository,
        "record_decision",
        _flaky(LoanApplicationRepository.record_decision, failures=6),
    )
    stuck_ids = []
    for income in (approvable_application.income, None):
        with pytest.raises(PersistenceFailure) as exc_info:
            service.submit(replace(approvable_application, income=income))
        stuck_ids.append(exc_info.value.application_id)
    monkeypatch.undo()

    recovered = service.recover_pending()

    assert [d.application_id for d in recovered] == stuck_ids
    assert [d.status for d in recovered] == [LoanStatus.APPROVED, LoanStatus.INADMISSIBLE]
    assert service.get_status(decided.application_id).status is LoanStatus.APPROVED
    assert LoanApplicationRepository(db).list_pending() == []


def test_recover_pending_leaves_failures_pending(
    monkeypatch, db: Session, service: LoanSubmissionService, approvable_application: LoanApplication
):
    """An application that still cannot be written stays pending for the next sweep"""
    monkeypatch.setattr(
        LoanApplicationRepository,
        "record_decision",
        _flaky(LoanApplicationRepository.record_decision, failures=100),
    )
    with pytest.raises(PersistenceFailure) as exc_info:
        service.submit(approvable_application)

    assert service.recover_pending() == []
    assert service.get_status(exc_info.value.application_id).status is LoanStatus.PENDING
