# summary.py — period filter, currency-adjusted totals and category breakdown

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

import config
from categories import category_name
from currency import to_local
from exceptions import InvalidConfiguration
from goals import track_goal

INCOME = "income"
EXPENSE = "expense"
KINDS = (INCOME, EXPENSE)

PERIOD_MODES = ("month", "year")
EXPENSE_SCOPES = ("view", "month")
CLIENT_STATUSES = ("all", "paid", "pending")

NO_DATA_LABEL = "No expenses"

TRANSACTION_COLUMNS = ["ID", "Date", "Description", "Amount", "Currency", "Type", "Category", "ClientID"]

_FIELD_MAP = {
    "ID": "id",
    "Date": "date",
    "Description": "description",
    "Amount": "amount",
    "Currency": "currency",
    "Type": "type",
    "Category": "category",
    "ClientID": "client_id",
}


def _field(record, name, default=None):
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def transactions_to_df(transactions: Iterable) -> pd.DataFrame:
    """Build a frame from ORM rows or plain dicts."""
    rows = [
        {col: _field(t, attr) for col, attr in _FIELD_MAP.items()}
        for t in transactions or []
    ]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def _prep(df: pd.DataFrame, rate: float) -> pd.DataFrame:
    """
    Prepares the transaction frame for reporting.

    Adds ``LocalAmount`` (amount in the reporting currency, unrounded),
    ``CategoryName`` and ``Month`` columns.
    """
    df = df.copy()
    df["Date"] = pd.to_datetime(df["Date"])
    df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce").fillna(0.0)
    df["Category"] = df["Category"].fillna("others").replace("", "others")
    df["LocalAmount"] = [
        to_local(amount, rate, currency=currency, description=desc)
        for amount, currency, desc in zip(df["Amount"], df["Currency"], df["Description"])
    ]
    df["CategoryName"] = [category_name(c) for c in df["Category"]]
    df["Month"] = df["Date"].dt.to_period("M").astype(str)
    return df


def prepare_transactions(transactions: Iterable, rate: float) -> pd.DataFrame:
    return _prep(transactions_to_df(transactions), rate)


def filter_period(df: pd.DataFrame, mode: str = "month", now: Optional[datetime] = None) -> pd.DataFrame:
    """
    Keep the rows dated inside the reference period.

    ``month`` needs both month and year to match ``now``; ``year`` only the year.
    """
    if mode not in PERIOD_MODES:
        raise InvalidConfiguration(f"Unknown period mode: {mode!r}")
    if df.empty:
        return df

    now = pd.Timestamp(now or datetime.now())
    dates = pd.to_datetime(df["Date"])
    mask = dates.dt.year == now.year
    if mode == "month":
        mask &= dates.dt.month == now.month
    return df[mask]


def _total(df: pd.DataFrame, kind: str) -> float:
    if df.empty:
        return 0.0
    return float(df.loc[df["Type"] == kind, "LocalAmount"].sum())


def projected_client_income(clients: Iterable, rate: float) -> float:
    """Sum of active clients' monthly fees, converted by each client's own currency."""
    total = 0.0
    for client in clients or []:
        if not _field(client, "is_active", False):
            continue
        total += to_local(_field(client, "monthly_fee", 0) or 0, rate, currency=_field(client, "currency"))
    return total


def aggregate(period_df: pd.DataFrame, clients: Iterable, rate: float) -> dict:
    """Reduce an already filtered, prepared frame and the client list to totals."""
    income = _total(period_df, INCOME)
    expense = _total(period_df, EXPENSE)
    projected_income = projected_client_income(clients, rate)
    return {
        "income": income,
        "expense": expense,
        "balance": income - expense,
        "projected_income": projected_income,
        "projected_expense": expense,
        "projected_balance": projected_income - expense,
    }


def summarize(
    df: pd.DataFrame,
    clients: Iterable,
    rate: float,
    mode: str = "month",
    now: Optional[datetime] = None,
    expense_scope: str = config.PROJECTED_EXPENSE_SCOPE,
) -> dict:
    """
    Totals for the selected period.

    ``expense_scope`` picks the expenses the projected balance is charged
    with: ``view`` uses the selected period, ``month`` always the current
    calendar month.
    """
    if expense_scope not in EXPENSE_SCOPES:
        raise InvalidConfiguration(f"Unknown projected expense scope: {expense_scope!r}")

    totals = aggregate(filter_period(df, mode, now), clients, rate)
    if expense_scope == "month" and mode != "month":
        month_expense = _total(filter_period(df, "month", now), EXPENSE)
        totals["projected_expense"] = month_expense
        totals["projected_balance"] = totals["projected_income"] - month_expense
    return totals


def category_breakdown(period_df: pd.DataFrame, placeholder: bool = True) -> dict:
    """
    Expense totals per category display name, largest first.

    An empty period yields ``{NO_DATA_LABEL: 0.0}`` unless ``placeholder`` is off.
    """
    expenses = period_df[period_df["Type"] == EXPENSE] if not period_df.empty else period_df
    if expenses.empty:
        return {NO_DATA_LABEL: 0.0} if placeholder else {}

    by_cat = expenses.groupby("CategoryName")["LocalAmount"].sum().sort_values(ascending=False)
    return {name: float(value) for name, value in by_cat.items()}


def filter_clients(clients: Iterable, status: str = "all") -> list:
    """Filter clients by their payment status in the current period."""
    if status not in CLIENT_STATUSES:
        raise InvalidConfiguration(f"Unknown client status filter: {status!r}")
    clients = list(clients or [])
    if status == "paid":
        return [c for c in clients if _field(c, "has_paid", False)]
    if status == "pending":
        return [c for c in clients if not _field(c, "has_paid", False)]
    return clients


def build_dashboard(
    transactions: Iterable,
    clients: Iterable,
    rate: float,
    target: float,
    mode: str = "month",
    now: Optional[datetime] = None,
    avg_fee: float = config.AVG_FEE_PER_CLIENT,
    expense_scope: str = config.PROJECTED_EXPENSE_SCOPE,
) -> dict:
    """Run the whole reporting pipeline over raw records."""
    clients = list(clients or [])
    df = prepare_transactions(transactions, rate)
    period_df = filter_period(df, mode, now)
    totals = summarize(df, clients, rate, mode=mode, now=now, expense_scope=expense_scope)
    return {
        "mode": mode,
        "rate": rate,
        "summary": totals,
        "goal": track_goal(totals["projected_income"], target, avg_fee=avg_fee),
        "categories": category_breakdown(period_df),
        "transactions": period_df,
    }
