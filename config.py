import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# --- Storage ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///finance_tracker.db")

# --- Currency ---
LOCAL_CURRENCY = os.getenv("LOCAL_CURRENCY", "ARS")
DEFAULT_USD_RATE = float(os.getenv("DEFAULT_USD_RATE", "1200"))
USD_RATE_URL = os.getenv("USD_RATE_URL", "https://dolarapi.com/v1/dolares/blue")
USD_RATE_TIMEOUT = float(os.getenv("USD_RATE_TIMEOUT", "10"))

# --- Goal ---
DEFAULT_GOAL_TITLE = os.getenv("DEFAULT_GOAL_TITLE", "Monthly Earnings")
DEFAULT_GOAL_TARGET = float(os.getenv("DEFAULT_GOAL_TARGET", "3000000"))
# Stored targets below this are treated as invalid. 0 disables the check.
MIN_GOAL_TARGET = float(os.getenv("MIN_GOAL_TARGET", "1000000"))
AVG_FEE_PER_CLIENT = float(os.getenv("AVG_FEE_PER_CLIENT", "300000"))

# 'view' honors the selected period, 'month' always uses the current month
PROJECTED_EXPENSE_SCOPE = os.getenv("PROJECTED_EXPENSE_SCOPE", "view")

# --- AI advisor ---
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
