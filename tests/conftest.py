"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from bot_provisioning.api.main import create_app
from bot_provisioning.infrastructure.database.models import Base
from bot_provisioning.infrastructure.database.session import get_db
from bot_provisioning.domain.models import LoanRecord, LoanType


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed evaluation instant (midnight UTC) so day counts are exact
EVALUATED_AT = datetime(2026, 6, 30, tzinfo=timezone.utc)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def evaluated_at() -> datetime:
    return EVALUATED_AT


@pytest.fixture
def make_loan() -> Callable[..., LoanRecord]:
    """Build a loan that is a given number of days past due at EVALUATED_AT"""

    def _make_loan(
        days_past_due: Optional[int] = 0,
        outstanding_amount: float = 1_000_000,
        loan_type: LoanType = LoanType.GENERAL,
        loan_id: str = "loan-1",
    ) -> LoanRecord:
        maturity_date = None
        if days_past_due is not None:
            maturity_date = EVALUATED_AT.date() - timedelta(days=days_past_due)
        return LoanRecord(
            id=loan_id,
            outstanding_amount=outstanding_amount,
            principal_amount=outstanding_amount,
            interest_rate=0.18,
            loan_type=loan_type,
            disbursement_date=date(2025, 1, 1),
            maturity_date=maturity_date,
        )

    return _make_loan


@pytest.fixture
def sample_loans(make_loan) -> list[LoanRecord]:
    """Small mixed book: one loan per category plus a housing loan"""
    return [
        make_loan(0, 500_000, loan_id="current"),
        make_loan(10, 100_000, loan_id="esm"),
        make_loan(45, 1_000_000, loan_id="substandard"),
        make_loan(75, 400_000, loan_id="doubtful"),
        make_loan(120, 300_000, loan_id="loss"),
        make_loan(200, 2_000_000, LoanType.HOUSING_MICROFINANCE, loan_id="housing"),
    ]
