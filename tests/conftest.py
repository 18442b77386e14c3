"""Pytest configuration and shared fixtures for ClearPath tests.

This module provides database fixtures, data factories and a Flask client for
testing payoff logic, repositories and routes without touching the real app database.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from clearpath import create_app
from clearpath.models import Liability
from clearpath.services.debts import DebtAccount

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Create a session factory for repositories that expect Callable[[], Session]."""

    def factory() -> Session:
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def liability_factory(session_factory):
    """Factory for creating persisted liabilities.

    Returns:
        Callable: Function that creates and persists Liability instances
    """

    def _create_liability(
        name: str = "Test Card",
        balance: float = 1000.0,
        apr: float = 18.0,
        minimum_payment: float = 50.0,
        kind: str = "credit_card",
        due_day: int = 15,
    ) -> Liability:
        liability = Liability(
            name=name,
            kind=kind,
            balance=balance,
            apr=apr,
            minimum_payment=minimum_payment,
            due_day=due_day,
        )
        with session_factory() as session:
            session.add(liability)
            session.commit()
            session.refresh(liability)
        return liability

    return _create_liability


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "clearpath.db"
    monkeypatch.setenv("CLEARPATH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CLEARPATH_DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("CLEARPATH_SECRET_KEY", "test-secret")
    monkeypatch.delenv("CLEARPATH_DEFAULT_STRATEGY", raising=False)
    monkeypatch.delenv("CLEARPATH_DEFAULT_EXTRA_PAYMENT", raising=False)
    return create_app("testing")


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def sample_debts() -> list[DebtAccount]:
    """Three debts whose avalanche and snowball orders differ."""

    return [
        DebtAccount(id=1, name="Credit Card", balance=5000.0, apr=22.0, minimum_payment=150.0),
        DebtAccount(id=2, name="Medical Bill", balance=800.0, apr=0.0, minimum_payment=40.0),
        DebtAccount(id=3, name="Car Loan", balance=9000.0, apr=6.5, minimum_payment=250.0),
    ]

