import os
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe); real environment wins
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def webhook_secret():
    # Read per request so the secret can be rotated without a restart
    return os.getenv("STRIPE_WEBHOOK_SECRET")


def public_url() -> str:
    return os.getenv("PUBLIC_URL", "http://localhost:3000").rstrip("/")


def tax_rate() -> Decimal:
    return Decimal(os.getenv("TAX_RATE", "0"))


def shipping_cost() -> Decimal:
    return Decimal(os.getenv("SHIPPING_COST", "9.99"))


def reject_stale_events() -> bool:
    return _flag("REJECT_STALE_EVENTS")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
