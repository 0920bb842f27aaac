# config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ------------------ Security ------------------
# Tokens are issued by the hosted auth provider; we only verify them.
SECRET_KEY = os.getenv("SECRET_KEY", "change-this-secret")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# ------------------ Database ------------------
raw_db_url = os.getenv("DATABASE_URL", "sqlite:///./fitbuddy.db")
# Enforce SSL connection to hosted Postgres
if raw_db_url.startswith("postgres") and "sslmode=" not in raw_db_url:
    DATABASE_URL = raw_db_url + "?sslmode=require"
else:
    DATABASE_URL = raw_db_url

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# ------------------ Coach (Gemini) ------------------
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
COACH_REQUEST_TIMEOUT = float(os.getenv("COACH_REQUEST_TIMEOUT", 30))
COACH_HISTORY_LIMIT = int(os.getenv("COACH_HISTORY_LIMIT", 10))

# ------------------ Onboarding ------------------
# Delay hints (ms) returned to the client; the server never sleeps.
ONBOARDING_GREETING_DELAY_MS = int(os.getenv("ONBOARDING_GREETING_DELAY_MS", 500))
ONBOARDING_STEP_DELAY_MS = int(os.getenv("ONBOARDING_STEP_DELAY_MS", 1000))
ONBOARDING_COMPLETE_DELAY_MS = int(os.getenv("ONBOARDING_COMPLETE_DELAY_MS", 2000))
