import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy import create_engine

from database import Base


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_txn():
    """Plain-dict transaction records with sensible defaults."""
    counter = {"n": 0}

    def _make(amount, type="expense", description="item", date="2025-09-10", category="others", currency=None):
        counter["n"] += 1
        return {
            "id": counter["n"],
            "description": description,
            "amount": amount,
            "type": type,
            "date": date,
            "category": category,
            "currency": currency,
        }

    return _make
