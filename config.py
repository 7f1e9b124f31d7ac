# config.py
"""
Application configuration.

Secrets and deployment-specific values come from the environment (.env is
loaded here); non-secret constants such as table names and cache TTLs live
alongside them so every module reads settings from one place.
"""
import os
from datetime import timedelta, timezone

from dotenv import load_dotenv

# Load .env
load_dotenv()

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./paytrack.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Row store backend: "sql" (relational sheet_rows table) or "sheets" (Google Sheets)
ROW_STORE_BACKEND = os.getenv("ROW_STORE_BACKEND", "sql").lower()

# Google Sheets
GOOGLE_SHEETS_SPREADSHEET_ID = os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID", "")
GOOGLE_SHEETS_SERVICE_ACCOUNT_JSON = os.getenv("GOOGLE_SHEETS_SERVICE_ACCOUNT_JSON", "").strip()
GOOGLE_SHEETS_SERVICE_ACCOUNT_PATH = os.getenv("GOOGLE_SHEETS_SERVICE_ACCOUNT_PATH", "").strip()
GOOGLE_SHEETS_TIMEOUT = float(os.getenv("GOOGLE_SHEETS_TIMEOUT", "15"))

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "24"))

# Discord ids that always become Admin on first login
DEFAULT_ADMINS = [
     discord_id.strip()
     for discord_id in os.getenv("DEFAULT_ADMINS", "180032303303491584").split(",")
     if discord_id.strip()
]

# Discord
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL", "")
DISCORD_CLIENT_ID = os.getenv("DISCORD_CLIENT_ID", "")
DISCORD_CLIENT_SECRET = os.getenv("DISCORD_CLIENT_SECRET", "")
DISCORD_REDIRECT_URI = os.getenv("DISCORD_REDIRECT_URI", "http://localhost:8000/api/auth/discord/callback")

# Cache
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

CACHE_TTL = {
     "seller_info": 600,    # 10 minutes
     "user_role": 1800,     # 30 minutes
     "payment_list": 120,   # 2 minutes
}

# HTTP
CORS_ORIGINS = [origin for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Table (sheet) names
TABLE_NAMES = {
     "payments": "Payment v2",
     "users": "Users",
     "seller_info": "Seller Info",
     "payment_logs": "Payment Logs",
     "payment_info": "Payment Info",
}

# Timestamps are written in a fixed GMT+3:30 offset
TIMEZONE = timezone(timedelta(hours=3, minutes=30))
TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"

DEFAULT_DUE_DATE = {"title": "Due Date", "hours": 24}

ROLES = ("Admin", "User")
