"""
store.py
--------
Database-backed stores for transactions, clients, the income goal and the
per-period client payment flags.

Input is validated before anything touches the session, so a rejected
submission never leaves a partial write behind.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
from categories import is_known
from currency import SUPPORTED_CURRENCIES, USD, is_usd_marked
from database import Client, ClientPayment, Goal, Transaction
from exceptions import InvalidInput
from summary import KINDS

logger = logging.getLogger(__name__)

CLIENT_FIELDS = ("name", "monthly_fee", "currency", "is_active", "notes")


class Period(NamedTuple):
    month: int
    year: int

    @classmethod
    def from_date(cls, value: Optional[date] = None) -> "Period":
        value = value or date.today()
        return cls(month=value.month, year=value.year)


class Snapshot(NamedTuple):
    transactions: list
    goal: Optional[Goal]
    clients: list


# --- Validation ---

def _require_text(value, field: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidInput(f"{field} is required", field=field)
    return text


def _parse_amount(value, field: str, allow_zero: bool = False) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInput(f"{field} is required", field=field)
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number", field=field)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number, got {value!r}", field=field) from None
    if math.isnan(amount) or math.isinf(amount):
        raise InvalidInput(f"{field} must be a finite number", field=field)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidInput(f"{field} must be {'non-negative' if allow_zero else 'positive'}", field=field)
    return amount


def _parse_currency(value) -> str:
    currency = str(value or config.LOCAL_CURRENCY).upper()
    if currency not in SUPPORTED_CURRENCIES:
        raise InvalidInput(f"Unsupported currency {value!r}", field="currency")
    return currency


def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database write failed")
        raise


# --- Transactions ---

def add_transaction(
    db: Session,
    description: str,
    amount,
    kind: str,
    category: str = "others",
    txn_date: Optional[date] = None,
    currency: Optional[str] = None,
    client_id: Optional[int] = None,
) -> Transaction:
    description = _require_text(description, "description")
    value = _parse_amount(amount, "amount")
    if kind not in KINDS:
        raise InvalidInput(f"Type must be one of {KINDS}, got {kind!r}", field="type")
    if currency is None:
        currency = USD if is_usd_marked(description) else config.LOCAL_CURRENCY
    currency = _parse_currency(currency)

    txn = Transaction(
        date=txn_date or date.today(),
        description=description,
        amount=value,
        currency=currency,
        type=kind,
        category=category if is_known(category) else "others",
        client_id=client_id,
    )
    db.add(txn)
    _commit(db)
    db.refresh(txn)
    logger.info("Transaction added", extra={"transaction_id": txn.id, "type": kind, "currency": currency})
    return txn


def list_transactions(db: Session) -> list[Transaction]:
    return db.query(Transaction).order_by(Transaction.date.desc(), Transaction.id.desc()).all()


def delete_transaction(db: Session, txn_id: int) -> bool:
    txn = db.get(Transaction, txn_id)
    if not txn:
        return False
    db.delete(txn)
    _commit(db)
    logger.info("Transaction deleted", extra={"transaction_id": txn_id})
    return True


# --- Clients ---

def add_client(db: Session, name: str, monthly_fee, currency: Optional[str] = None, notes: Optional[str] = None) -> Client:
    client = Client(
        name=_require_text(name, "name"),
        monthly_fee=_parse_amount(monthly_fee, "monthly_fee", allow_zero=True),
        currency=_parse_currency(currency),
        is_active=True,
        notes=notes or None,
    )
    db.add(client)
    _commit(db)
    db.refresh(client)
    client.has_paid = False
    logger.info("Client added", extra={"client_id": client.id})
    return client


def paid_client_ids(db: Session, period: Period) -> set[int]:
    rows = (
        db.query(ClientPayment.client_id)
        .filter(ClientPayment.year == period.year, ClientPayment.month == period.month)
        .all()
    )
    return {row[0] for row in rows}


def list_clients(db: Session, period: Optional[Period] = None) -> list[Client]:
    """Clients in creation order, each tagged with ``has_paid`` for ``period``."""
    period = period or Period.from_date()
    clients = db.query(Client).order_by(Client.created_at.asc(), Client.id.asc()).all()
    paid = paid_client_ids(db, period)
    for client in clients:
        client.has_paid = client.id in paid
    return clients


def update_client(db: Session, client_id: int, **fields) -> Optional[Client]:
    unknown = set(fields) - set(CLIENT_FIELDS)
    if unknown:
        raise InvalidInput(f"Cannot update {sorted(unknown)}", field=sorted(unknown)[0])

    changes = {}
    if "name" in fields:
        changes["name"] = _require_text(fields["name"], "name")
    if "monthly_fee" in fields:
        changes["monthly_fee"] = _parse_amount(fields["monthly_fee"], "monthly_fee", allow_zero=True)
    if "currency" in fields:
        changes["currency"] = _parse_currency(fields["currency"])
    if "is_active" in fields:
        changes["is_active"] = bool(fields["is_active"])
    if "notes" in fields:
        changes["notes"] = fields["notes"] or None

    client = db.get(Client, client_id)
    if not client:
        return None
    for key, value in changes.items():
        setattr(client, key, value)
    _commit(db)
    db.refresh(client)
    logger.info("Client updated", extra={"client_id": client_id, "fields": sorted(changes)})
    return client


def delete_client(db: Session, client_id: int) -> bool:
    client = db.get(Client, client_id)
    if not client:
        return False
    db.delete(client)
    _commit(db)
    logger.info("Client deleted", extra={"client_id": client_id})
    return True


def is_client_paid(db: Session, client_id: int, period: Period) -> bool:
    return db.get(ClientPayment, (client_id, period.year, period.month)) is not None


def set_client_paid(db: Session, client_id: int, period: Period, paid: bool = True) -> bool:
    existing = db.get(ClientPayment, (client_id, period.year, period.month))
    if paid and not existing:
        if not db.get(Client, client_id):
            raise InvalidInput(f"Unknown client {client_id}", field="client_id")
        db.add(ClientPayment(client_id=client_id, year=period.year, month=period.month, paid_at=datetime.utcnow()))
    elif not paid and existing:
        db.delete(existing)
    else:
        return paid
    _commit(db)
    logger.info("Client payment flag set", extra={"client_id": client_id, "period": tuple(period), "paid": paid})
    return paid


def toggle_client_paid(db: Session, client_id: int, period: Period) -> bool:
    return set_client_paid(db, client_id, period, not is_client_paid(db, client_id, period))


# --- Goal ---

def get_goal(db: Session, title: Optional[str] = None) -> Optional[Goal]:
    query = db.query(Goal)
    if title:
        query = query.filter(Goal.title == title)
    return query.order_by(Goal.id.asc()).first()


def upsert_goal(db: Session, title: str, target_amount) -> Goal:
    title = _require_text(title, "title")
    target = _parse_amount(target_amount, "target_amount")
    goal = db.query(Goal).filter(Goal.title == title).first()
    if not goal:
        goal = Goal(title=title, target_amount=target)
        db.add(goal)
    else:
        goal.target_amount = target
    _commit(db)
    db.refresh(goal)
    logger.info("Goal saved", extra={"goal_title": title, "target_amount": target})
    return goal


# --- Loading ---

def load_snapshot(db: Session, previous: Optional[Snapshot] = None, period: Optional[Period] = None) -> Snapshot:
    """
    Fetch transactions, goal and clients independently.

    A failing fetch is logged and keeps the matching field of ``previous``;
    the other two still refresh.
    """
    previous = previous or Snapshot(transactions=[], goal=None, clients=[])
    loaders = {
        "transactions": lambda: list_transactions(db),
        "goal": lambda: get_goal(db),
        "clients": lambda: list_clients(db, period),
    }

    fresh = previous._asdict()
    for name, load in loaders.items():
        try:
            fresh[name] = load()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to load %s, keeping previous data", name)
    return Snapshot(**fresh)
