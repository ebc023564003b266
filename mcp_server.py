"""Lightweight MCP-aligned server exposing finance tools over FastAPI."""

import logging
from contextlib import asynccontextmanager
import datetime as dt
from typing import List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

import config
import store
import vault
from advisor import request_advice
from currency import fetch_usd_rate
from database import SessionLocal, init_db
from exceptions import FinanceError
from goals import resolve_goal_target, track_goal
from summary import build_dashboard, filter_clients, filter_period, prepare_transactions

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

STATE = {"usd_rate": config.DEFAULT_USD_RATE}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    STATE["usd_rate"] = fetch_usd_rate(default=STATE["usd_rate"])
    yield


app = FastAPI(title="Finance MCP Server", version="0.2.0", lifespan=lifespan)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(FinanceError)
async def finance_error_handler(request: Request, exc: FinanceError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# --- Summary ---

class SummaryRequest(BaseModel):
    mode: Literal["month", "year"] = "month"
    expense_scope: Literal["view", "month"] = config.PROJECTED_EXPENSE_SCOPE
    usd_rate: Optional[float] = Field(None, gt=0, description="Override the live rate")


class GoalProgressResponse(BaseModel):
    target: float
    progress: int
    missing: float
    clients_needed: int


class SummaryResponse(BaseModel):
    mode: str
    usd_rate: float
    income: float
    expense: float
    balance: float
    projected_income: float
    projected_expense: float
    projected_balance: float
    goal: GoalProgressResponse
    categories: dict


@app.post("/tools/finance_summary", response_model=SummaryResponse)
async def finance_summary(req: SummaryRequest, db: Session = Depends(get_db)):
    snapshot = store.load_snapshot(db)
    rate = req.usd_rate or STATE["usd_rate"]
    target = resolve_goal_target(snapshot.goal.target_amount if snapshot.goal else None)
    board = build_dashboard(
        snapshot.transactions,
        snapshot.clients,
        rate,
        target,
        mode=req.mode,
        expense_scope=req.expense_scope,
    )
    return SummaryResponse(
        mode=board["mode"],
        usd_rate=rate,
        goal=GoalProgressResponse(**board["goal"]),
        categories=board["categories"],
        **board["summary"],
    )


class GoalProgressRequest(BaseModel):
    projected_income: float
    target_amount: float = Field(..., gt=0)
    avg_fee_per_client: float = Field(config.AVG_FEE_PER_CLIENT, gt=0)


@app.post("/tools/goal_progress", response_model=GoalProgressResponse)
async def goal_progress(req: GoalProgressRequest):
    return GoalProgressResponse(**track_goal(req.projected_income, req.target_amount, avg_fee=req.avg_fee_per_client))


class GoalRequest(BaseModel):
    title: str = config.DEFAULT_GOAL_TITLE
    target_amount: float


@app.put("/tools/goal")
async def save_goal(req: GoalRequest, db: Session = Depends(get_db)):
    goal = store.upsert_goal(db, req.title, req.target_amount)
    return {"title": goal.title, "target_amount": goal.target_amount}


# --- Transactions ---

class TransactionIn(BaseModel):
    description: str
    amount: float
    type: Literal["income", "expense"]
    category: str = "others"
    date: Optional[dt.date] = None
    currency: Optional[str] = None
    client_id: Optional[int] = None


class TransactionOut(BaseModel):
    id: int
    description: str
    amount: float
    currency: str
    type: str
    category: str
    date: dt.date
    client_id: Optional[int] = None

    model_config = {"from_attributes": True}


@app.get("/tools/transactions", response_model=List[TransactionOut])
async def get_transactions(db: Session = Depends(get_db)):
    return store.list_transactions(db)


@app.post("/tools/transactions", response_model=TransactionOut)
async def create_transaction(req: TransactionIn, db: Session = Depends(get_db)):
    return store.add_transaction(
        db,
        req.description,
        req.amount,
        req.type,
        category=req.category,
        txn_date=req.date,
        currency=req.currency,
        client_id=req.client_id,
    )


@app.delete("/tools/transactions/{txn_id}")
async def remove_transaction(txn_id: int, db: Session = Depends(get_db)):
    if not store.delete_transaction(db, txn_id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    return {"deleted": txn_id}


# --- Clients ---

class ClientIn(BaseModel):
    name: str
    monthly_fee: float
    currency: str = config.LOCAL_CURRENCY
    notes: Optional[str] = None


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    monthly_fee: Optional[float] = None
    currency: Optional[str] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class ClientOut(BaseModel):
    id: int
    name: str
    monthly_fee: float
    currency: str
    is_active: bool
    has_paid: bool = False
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


@app.get("/tools/clients", response_model=List[ClientOut])
async def get_clients(status: Literal["all", "paid", "pending"] = "all", db: Session = Depends(get_db)):
    return filter_clients(store.list_clients(db), status)


@app.post("/tools/clients", response_model=ClientOut)
async def create_client(req: ClientIn, db: Session = Depends(get_db)):
    return store.add_client(db, req.name, req.monthly_fee, currency=req.currency, notes=req.notes)


@app.patch("/tools/clients/{client_id}", response_model=ClientOut)
async def patch_client(client_id: int, req: ClientUpdate, db: Session = Depends(get_db)):
    client = store.update_client(db, client_id, **req.model_dump(exclude_unset=True))
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    client.has_paid = store.is_client_paid(db, client_id, store.Period.from_date())
    return client


@app.delete("/tools/clients/{client_id}")
async def remove_client(client_id: int, db: Session = Depends(get_db)):
    if not store.delete_client(db, client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    return {"deleted": client_id}


@app.post("/tools/clients/{client_id}/toggle_paid")
async def toggle_paid(client_id: int, db: Session = Depends(get_db)):
    period = store.Period.from_date()
    return {"client_id": client_id, "month": period.month, "year": period.year,
            "has_paid": store.toggle_client_paid(db, client_id, period)}


# --- Vault ---

class VaultRequest(BaseModel):
    op: Literal["add", "subtract"]
    value: float


class VaultResponse(BaseModel):
    total: float


@app.get("/tools/vault", response_model=VaultResponse)
async def get_vault(db: Session = Depends(get_db)):
    return VaultResponse(total=vault.get_vault_total(db))


@app.post("/tools/vault", response_model=VaultResponse)
async def adjust_vault(req: VaultRequest, db: Session = Depends(get_db)):
    return VaultResponse(total=vault.adjust_vault(db, req.op, req.value))


# --- Advice ---

class AdviceRequest(BaseModel):
    mode: Literal["month", "year"] = "month"


class AdviceResponse(BaseModel):
    advice: str


@app.post("/tools/advice", response_model=AdviceResponse)
async def advice(req: AdviceRequest, db: Session = Depends(get_db)):
    df = prepare_transactions(store.list_transactions(db), STATE["usd_rate"])
    return AdviceResponse(advice=request_advice(filter_period(df, req.mode)))


@app.get("/health")
async def health():
    return {"status": "ok", "usd_rate": STATE["usd_rate"]}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mcp_server:app", host="0.0.0.0", port=8001, reload=True)
