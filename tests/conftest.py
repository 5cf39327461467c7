"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_intake.api.main import create_app
from loan_intake.infrastructure.database.models import Base
from loan_intake.infrastructure.database.session import get_db
from loan_intake.domain.models import LoanApplication


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db: Session) -> FastAPI:
    """FastAPI application wired to the test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def approvable_application() -> LoanApplication:
    """Income comfortably covers the monthly burden (score 76)"""
    return LoanApplication(
        legal_id="12345678-9",
        full_name="Ana Rojas",
        email="ana.rojas@example.com",
        amount=Decimal("1500000"),
        term_months=24,
        income=Decimal("1000000"),
    )


@pytest.fixture
def application_payload() -> dict:
    """Valid POST /v1/loans/apply body"""
    return {
        "legal_id": "12345678-9",
        "full_name": "Ana Rojas",
        "email": "ana.rojas@example.com",
        "amount": 1500000,
        "term_months": 24,
        "income": 1000000,
    }
