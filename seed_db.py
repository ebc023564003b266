import logging
from datetime import date

import config
import store
from database import init_db, SessionLocal

logger = logging.getLogger(__name__)

SAMPLE_TRANSACTIONS = [
    {"description": "Monthly Salary", "amount": 2500, "kind": "income", "category": "salary"},
    {"description": "Rent", "amount": 800, "kind": "expense", "category": "housing"},
    {"description": "Groceries", "amount": 150, "kind": "expense", "category": "food"},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        if not store.get_goal(db):
            store.upsert_goal(db, config.DEFAULT_GOAL_TITLE, config.DEFAULT_GOAL_TARGET)
            print(f"Created goal '{config.DEFAULT_GOAL_TITLE}'.")

        # Check if transactions exist
        if store.list_transactions(db):
            print("Transactions already exist. Skipping seed.")
            return

        today = date.today()
        for i, row in enumerate(SAMPLE_TRANSACTIONS):
            store.add_transaction(db, txn_date=today.replace(day=i + 1), **row)
        print("Database initialized with sample transactions.")
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    seed()
