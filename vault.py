"""Savings vault: a manually adjusted total kept apart from the ledger."""

from __future__ import annotations

import logging
import math

from sqlalchemy.orm import Session

from database import Vault
from exceptions import InvalidInput

logger = logging.getLogger(__name__)

VAULT_ID = 1
OPERATIONS = ("add", "subtract")


def apply_vault_operation(current: float, op: str, value) -> float:
    """New vault total after adding or subtracting ``value``. Never below zero."""
    if op not in OPERATIONS:
        raise InvalidInput(f"Unknown vault operation {op!r}", field="op")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Vault amount must be a number, got {value!r}", field="value") from None
    if math.isnan(amount) or math.isinf(amount) or amount <= 0:
        raise InvalidInput("Vault amount must be a positive number", field="value")

    if op == "add":
        return current + amount
    return max(0.0, current - amount)


def get_vault_total(db: Session) -> float:
    vault = db.get(Vault, VAULT_ID)
    return float(vault.total) if vault else 0.0


def adjust_vault(db: Session, op: str, value) -> float:
    # Last write wins; concurrent adjustments are not coordinated.
    vault = db.get(Vault, VAULT_ID)
    new_total = apply_vault_operation(float(vault.total) if vault else 0.0, op, value)
    if vault is None:
        vault = Vault(id=VAULT_ID, total=new_total)
        db.add(vault)
    else:
        vault.total = new_total
    db.commit()
    logger.info("Vault adjusted", extra={"op": op, "total": vault.total})
    return float(vault.total)
