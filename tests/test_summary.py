from datetime import datetime

import pytest

from exceptions import InvalidConfiguration
from summary import (
    NO_DATA_LABEL,
    aggregate,
    build_dashboard,
    category_breakdown,
    filter_clients,
    filter_period,
    prepare_transactions,
    projected_client_income,
    summarize,
)

NOW = datetime(2025, 9, 15)
RATE = 1200


def _client(fee, currency="ARS", active=True, paid=False, id=1):
    return {"id": id, "name": f"c{id}", "monthly_fee": fee, "currency": currency, "is_active": active, "has_paid": paid}


def test_usd_marked_expense_is_converted(make_txn):
    df = prepare_transactions(
        [make_txn(1000, description="coffee"), make_txn(10, description="book (USD)")],
        RATE,
    )
    assert list(df["LocalAmount"]) == [1000, 12000]

    totals = summarize(df, [], RATE, now=NOW)
    assert totals["expense"] == 13000
    assert totals["income"] == 0


def test_month_filter_needs_month_and_year(make_txn):
    txns = [
        make_txn(1, date="2025-09-01"),
        make_txn(2, date="2025-09-30"),
        make_txn(3, date="2024-09-10"),
        make_txn(4, date="2025-08-31"),
    ]
    df = prepare_transactions(txns, RATE)

    month = filter_period(df, "month", NOW)
    assert sorted(month["ID"]) == [1, 2]

    year = filter_period(df, "year", NOW)
    assert sorted(year["ID"]) == [1, 2, 4]


def test_filter_is_idempotent(make_txn):
    df = prepare_transactions([make_txn(1, date="2025-09-01"), make_txn(2, date="2025-01-01")], RATE)
    once = filter_period(df, "year", NOW)
    assert filter_period(once, "year", NOW).equals(once)


def test_filter_rejects_unknown_mode(make_txn):
    df = prepare_transactions([make_txn(1)], RATE)
    with pytest.raises(InvalidConfiguration):
        filter_period(df, "week", NOW)


def test_empty_ledger():
    df = prepare_transactions([], RATE)
    totals = summarize(df, [], RATE, now=NOW)
    assert totals == {
        "income": 0.0,
        "expense": 0.0,
        "balance": 0.0,
        "projected_income": 0.0,
        "projected_expense": 0.0,
        "projected_balance": 0.0,
    }
    assert category_breakdown(filter_period(df, "month", NOW)) == {NO_DATA_LABEL: 0.0}


def test_projected_income_uses_client_currency_and_active_flag():
    clients = [
        _client(300000, id=1),
        _client(100, currency="USD", id=2),
        _client(999999, active=False, id=3),
    ]
    assert projected_client_income(clients, RATE) == 300000 + 120000


def test_aggregate_balances(make_txn):
    df = prepare_transactions(
        [make_txn(500000, type="income"), make_txn(200000), make_txn(50, description="saas U$D")],
        RATE,
    )
    totals = aggregate(df, [_client(400000)], RATE)
    assert totals["income"] == 500000
    assert totals["expense"] == 260000
    assert totals["balance"] == 240000
    assert totals["projected_income"] == 400000
    assert totals["projected_balance"] == 140000


@pytest.fixture
def year_ledger(make_txn):
    return prepare_transactions(
        [
            make_txn(100000, date="2025-09-05"),
            make_txn(300000, date="2025-03-05"),
            make_txn(1000000, type="income", date="2025-03-01"),
        ],
        RATE,
    )


def test_projected_balance_view_scope_uses_selected_period(year_ledger):
    totals = summarize(year_ledger, [_client(600000)], RATE, mode="year", now=NOW, expense_scope="view")
    assert totals["expense"] == 400000
    assert totals["projected_expense"] == 400000
    assert totals["projected_balance"] == 200000


def test_projected_balance_month_scope_uses_current_month(year_ledger):
    totals = summarize(year_ledger, [_client(600000)], RATE, mode="year", now=NOW, expense_scope="month")
    assert totals["expense"] == 400000
    assert totals["projected_expense"] == 100000
    assert totals["projected_balance"] == 500000


def test_unknown_expense_scope(year_ledger):
    with pytest.raises(InvalidConfiguration):
        summarize(year_ledger, [], RATE, expense_scope="all-time")


def test_category_breakdown_only_expenses_with_other_fallback(make_txn):
    df = prepare_transactions(
        [
            make_txn(100, category="food"),
            make_txn(50, category="food"),
            make_txn(10, category="food", description="snack (usd)"),
            make_txn(70, category="mystery"),
            make_txn(5000, type="income", category="salary"),
        ],
        RATE,
    )
    assert category_breakdown(df) == {"Food": 12150.0, "Other": 70.0}


def test_category_breakdown_without_placeholder(make_txn):
    df = prepare_transactions([make_txn(5000, type="income")], RATE)
    assert category_breakdown(df) == {NO_DATA_LABEL: 0.0}
    assert category_breakdown(df, placeholder=False) == {}


def test_filter_clients_by_status():
    clients = [_client(1, id=1, paid=True), _client(1, id=2), _client(1, id=3, paid=True)]
    assert [c["id"] for c in filter_clients(clients, "paid")] == [1, 3]
    assert [c["id"] for c in filter_clients(clients, "pending")] == [2]
    assert len(filter_clients(clients, "all")) == 3
    with pytest.raises(InvalidConfiguration):
        filter_clients(clients, "late")


def test_build_dashboard(make_txn):
    board = build_dashboard(
        [make_txn(20000, date="2025-09-02", category="transport"), make_txn(1, date="2024-09-02")],
        [_client(750000)],
        RATE,
        3000000,
        now=NOW,
        avg_fee=300000,
    )
    assert board["summary"]["projected_income"] == 750000
    assert board["summary"]["expense"] == 20000
    assert board["goal"] == {"target": 3000000.0, "progress": 25, "missing": 2250000.0, "clients_needed": 8}
    assert board["categories"] == {"Transport": 20000.0}
    assert len(board["transactions"]) == 1
