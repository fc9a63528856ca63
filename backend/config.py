import os
from dotenv import load_dotenv

load_dotenv()

# --- Storage ---
# "sql" → SQLAlchemy (SQLite file or PostgreSQL), "json" → single JSON document on disk
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql").strip().lower()

# Default to local SQLite, but prefer environment variable (for hosted Postgres)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/checkmate.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

JSON_STORE_PATH = os.getenv("JSON_STORE_PATH", "./data/checkmate.json")

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))  # 30 days

# --- Admin gate ---
# SHA-256 hex of the shared admin secret. The default is the digest of "admin123";
# generate a real one with: python admin_tools.py hash <secret>
ADMIN_PASSWORD_HASH = os.getenv(
    "ADMIN_PASSWORD_HASH",
    "240be518fabd2724ddb6f04eeb1da5967448d7e831c08c8fa822809f74c720a9",
).strip().lower()
ADMIN_TOKEN_EXPIRY_MINUTES = int(os.getenv("ADMIN_TOKEN_EXPIRY_MINUTES", "30"))

# --- Cache ---
SNAPSHOT_CACHE_TTL = int(os.getenv("SNAPSHOT_CACHE_TTL", "30"))  # seconds

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
