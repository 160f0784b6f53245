import os
from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./crm.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "4000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ERROR_LOG_PATH = os.getenv("ERROR_LOG_PATH", "errors.log")

# Listing / history limits
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))

# Session/auth secrets are passed through untouched; nothing in this service reads them.
SESSION_SECRET = os.getenv("SESSION_SECRET", "")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip()]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

# Base URL used by the client-side data views
API_BASE_URL = os.getenv("API_BASE_URL", f"http://localhost:{PORT}").rstrip("/")
