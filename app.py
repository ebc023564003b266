import streamlit as st
import pandas as pd
import plotly.express as px
from pathlib import Path
import logging
import sys
import time
from datetime import date

# Add current directory to path
sys.path.append(str(Path(__file__).parent))

import config
import store
import vault
from advisor import request_advice
from categories import CATEGORIES, get_category
from currency import USD, fetch_usd_rate
from database import SessionLocal, init_db
from exceptions import InvalidInput
from goals import resolve_goal_target
from summary import NO_DATA_LABEL, build_dashboard, filter_clients

# --- Configuration ---
st.set_page_config(page_title="Freelance Finance Tracker", layout="wide", page_icon="💖")
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# --- Database Session ---
init_db()

if "db" not in st.session_state:
    st.session_state.db = SessionLocal()

def get_db():
    return st.session_state.db

# Live rate is fetched once per session; failures keep the default
if "usd_rate" not in st.session_state:
    st.session_state.usd_rate = fetch_usd_rate(default=config.DEFAULT_USD_RATE)

# --- Data Loading ---
def load_data():
    """Refresh the snapshot, keeping whatever part of the last one could not be reloaded."""
    snapshot = store.load_snapshot(get_db(), previous=st.session_state.get("snapshot"))
    st.session_state.snapshot = snapshot
    return snapshot


def money(value: float) -> str:
    return f"{config.LOCAL_CURRENCY}$ {value:,.0f}"


def handle_write(action, success_msg: str):
    """Run a store write, showing validation errors inline and anything else generically."""
    try:
        action()
    except InvalidInput as e:
        st.error(e.message)
        return False
    except Exception:
        logger.exception("Write failed")
        st.error("Could not save. Check your connection and try again.")
        return False
    st.success(success_msg)
    time.sleep(0.5)
    st.rerun()


# --- Main App ---
st.title("💖 Freelance Finance Tracker")

snapshot = load_data()
stored_target = snapshot.goal.target_amount if snapshot.goal else None
target = resolve_goal_target(stored_target)
goal_title = snapshot.goal.title if snapshot.goal else config.DEFAULT_GOAL_TITLE

# Sidebar
with st.sidebar:
    st.header("View")
    view_label = st.radio("Period", ["This month", "This year"], horizontal=True)
    mode = "month" if view_label == "This month" else "year"
    st.metric("USD rate", money(st.session_state.usd_rate))
    if st.button("🔄 Refresh rate", use_container_width=True):
        st.session_state.usd_rate = fetch_usd_rate(default=st.session_state.usd_rate)
        st.rerun()

    st.divider()
    st.header("🐷 Vault")
    st.metric("Saved", money(vault.get_vault_total(get_db())))
    vault_value = st.number_input("Amount", min_value=0.0, step=1000.0, key="vault_input")
    col_add, col_sub = st.columns(2)
    if col_add.button("➕ Add", use_container_width=True):
        handle_write(lambda: vault.adjust_vault(get_db(), "add", vault_value), "Added to vault.")
    if col_sub.button("➖ Take out", use_container_width=True):
        handle_write(lambda: vault.adjust_vault(get_db(), "subtract", vault_value), "Taken from vault.")

    st.divider()
    st.header("🎯 Goal")
    with st.form("goal_form"):
        new_title = st.text_input("Title", value=goal_title)
        new_target = st.number_input("Monthly target", min_value=0.0, value=float(target), step=100000.0)
        if st.form_submit_button("Save Goal"):
            handle_write(lambda: store.upsert_goal(get_db(), new_title, new_target), "Goal saved.")
    if stored_target is not None and stored_target != target:
        st.caption(f"Stored target {money(stored_target)} is below the minimum; using {money(target)}.")

board = build_dashboard(snapshot.transactions, snapshot.clients, st.session_state.usd_rate, target, mode=mode)
summary = board["summary"]
goal = board["goal"]

tab1, tab2, tab3 = st.tabs(["📊 Dashboard", "💳 Transactions", "🤝 Clients"])

with tab1:
    period_label = "this month" if mode == "month" else "this year"
    col1, col2, col3, col4 = st.columns(4)
    col1.metric(f"💰 Income ({period_label})", money(summary["income"]))
    col2.metric(f"💸 Spent ({period_label})", money(summary["expense"]), delta=f"-{money(summary['expense'])}", delta_color="inverse")
    col3.metric("🧾 Balance", money(summary["balance"]))
    col4.metric(
        "🔮 Projected Balance",
        money(summary["projected_balance"]),
        help="Income if every active client pays, minus expenses.",
    )

    st.subheader(f"🎯 {goal_title}")
    st.progress(goal["progress"] / 100, text=f"{goal['progress']}% of {money(goal['target'])}")
    g1, g2, g3 = st.columns(3)
    g1.metric("Projected income", money(summary["projected_income"]))
    g2.metric("Missing", money(goal["missing"]))
    g3.metric("Clients needed", f"~{goal['clients_needed']}", help=f"At {money(config.AVG_FEE_PER_CLIENT)} per client.")

    st.subheader("Spending by Category")
    by_cat = pd.DataFrame(list(board["categories"].items()), columns=["Category", "Amount"])
    if list(board["categories"]) == [NO_DATA_LABEL]:
        st.info("No expenses in this period.")
    else:
        fig = px.bar(by_cat, x="Category", y="Amount", color="Category", title=f"Expenses ({period_label})")
        fig.update_layout(showlegend=False, height=350)
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("✨ AI Tip")
    if st.button("Ask the advisor"):
        with st.spinner("Thinking..."):
            period_df = board["transactions"]
            st.session_state.ai_insight = request_advice(period_df)
    if st.session_state.get("ai_insight"):
        st.markdown(
            f"""
            <div style="padding:15px; background-color:#f5f3ff; border-radius:10px; border:1px solid #ddd6fe">
                {st.session_state.ai_insight.replace(chr(10), "<br>")}
            </div>
            """,
            unsafe_allow_html=True,
        )

with tab2:
    st.subheader("Add Transaction")
    with st.form("add_transaction", clear_on_submit=True):
        description = st.text_input("Description", help="Tag USD amounts with '(USD)' or pick USD below.")
        col1, col2, col3 = st.columns(3)
        amount = col1.number_input("Amount", min_value=0.0, step=100.0)
        kind = col2.selectbox("Type", ["expense", "income"])
        currency = col3.selectbox("Currency", [config.LOCAL_CURRENCY, USD])
        category = st.selectbox(
            "Category",
            [c.id for c in CATEGORIES],
            index=len(CATEGORIES) - 1,
            format_func=lambda cid: f"{get_category(cid).icon} {get_category(cid).name}",
        )
        client_options = {None: "—"} | {c.id: c.name for c in snapshot.clients}
        client_id = st.selectbox("Client", list(client_options), format_func=lambda k: client_options[k])

        if st.form_submit_button("Save"):
            handle_write(
                lambda: store.add_transaction(
                    get_db(), description, amount, kind,
                    category=category, txn_date=date.today(), currency=currency, client_id=client_id,
                ),
                "Transaction saved!",
            )

    st.subheader("Transaction Log")
    if not snapshot.transactions:
        st.info("No transactions.")
    else:
        search_term = st.text_input("Search")
        for t in snapshot.transactions:
            if search_term and search_term.lower() not in t.description.lower():
                continue
            cat = get_category(t.category)
            sign = "-" if t.type == "expense" else "+"
            col_a, col_b, col_c = st.columns([5, 2, 1])
            col_a.markdown(f"{cat.icon} **{t.description}**  \n{cat.name} • {t.date}")
            col_b.markdown(f"{sign} {t.currency}$ {t.amount:,.2f}")
            if col_c.button("🗑️", key=f"del_txn_{t.id}"):
                handle_write(lambda t_id=t.id: store.delete_transaction(get_db(), t_id), "Deleted.")

with tab3:
    st.subheader("Client Management")
    with st.form("add_client", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 2, 1])
        client_name = col1.text_input("Client name")
        fee = col2.number_input("Monthly fee", min_value=0.0, step=10000.0)
        fee_currency = col3.selectbox("Currency", [config.LOCAL_CURRENCY, USD])
        if st.form_submit_button("Add Client"):
            handle_write(lambda: store.add_client(get_db(), client_name, fee, currency=fee_currency), "Client added!")

    period = store.Period.from_date()
    status = st.radio("Show", ["all", "paid", "pending"], horizontal=True, format_func=str.title)
    visible_clients = filter_clients(snapshot.clients, status)

    if not visible_clients:
        st.info("No clients here yet.")
    for client in visible_clients:
        with st.container(border=True):
            col_a, col_b, col_c, col_d = st.columns([4, 2, 2, 1])
            col_a.markdown(f"**{client.name}**  \n{client.currency}$ {client.monthly_fee:,.0f} / month")
            active = col_b.toggle("Active", value=bool(client.is_active), key=f"active_{client.id}")
            if active != bool(client.is_active):
                handle_write(lambda c_id=client.id, a=active: store.update_client(get_db(), c_id, is_active=a), "Updated.")
            paid_label = "✅ Paid" if client.has_paid else f"Mark paid ({period.month}/{period.year})"
            if col_c.button(paid_label, key=f"paid_{client.id}"):
                handle_write(lambda c_id=client.id: store.toggle_client_paid(get_db(), c_id, period), "Payment updated.")
            if col_d.button("🗑️", key=f"del_client_{client.id}"):
                handle_write(lambda c_id=client.id: store.delete_client(get_db(), c_id), "Client removed.")
