from datetime import datetime
from sqlalchemy import create_engine, Column, Integer, String, Float, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import sessionmaker, declarative_base, relationship

import config

# Database Setup
# Default to local SQLite, but allow override for a hosted Postgres
DB_URL = config.DATABASE_URL


def make_engine(url: str):
    return create_engine(url, connect_args={"check_same_thread": False} if "sqlite" in url else {})


engine = make_engine(DB_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# --- Models ---

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, index=True)
    description = Column(String, nullable=False)
    amount = Column(Float, nullable=False)        # always non-negative, sign comes from type
    currency = Column(String, default=config.LOCAL_CURRENCY)
    type = Column(String, nullable=False)         # 'income' or 'expense'
    category = Column(String, default="others")
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)

class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    monthly_fee = Column(Float, default=0.0)
    currency = Column(String, default=config.LOCAL_CURRENCY)
    is_active = Column(Boolean, default=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    payments = relationship("ClientPayment", back_populates="client", cascade="all, delete-orphan")

    # Derived per period by store.list_clients, never persisted
    has_paid = False

class ClientPayment(Base):
    """A row means the client paid in that (year, month)."""
    __tablename__ = "client_payments"

    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), primary_key=True)
    year = Column(Integer, primary_key=True)
    month = Column(Integer, primary_key=True)
    paid_at = Column(DateTime, default=datetime.utcnow)

    client = relationship("Client", back_populates="payments")

class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, unique=True, nullable=False)
    target_amount = Column(Float, nullable=False)

class Vault(Base):
    __tablename__ = "vault"

    id = Column(Integer, primary_key=True)
    total = Column(Float, default=0.0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
