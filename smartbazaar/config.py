# smartbazaar/config.py
"""Runtime configuration read from the environment (and `.env` if present)."""
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("POSTGRES_URL") or os.getenv("DATABASE_URL", "sqlite:///./smartbazaar.db")

# Normalize SQLAlchemy URL scheme (SQLAlchemy 2.x doesn't accept 'postgres://')
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))

# settlement constants, in PKR
DELIVERY_CHARGE = Decimal(os.getenv("DELIVERY_CHARGE", "250"))
COMMISSION_RATE = Decimal(os.getenv("COMMISSION_RATE", "0.02"))

TX_MAX_ATTEMPTS = int(os.getenv("TX_MAX_ATTEMPTS", 3))
TX_RETRY_DELAY = float(os.getenv("TX_RETRY_DELAY", "0.05"))

LISTING_EXPIRY_DAYS = int(os.getenv("LISTING_EXPIRY_DAYS", 30))
ENABLE_SCHEDULER = os.getenv("ENABLE_SCHEDULER", "0") == "1"
