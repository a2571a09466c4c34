"""
Utility functions for the trip split ledger
"""
from __future__ import annotations
import os
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a unique record id"""
    return uuid.uuid4().hex


def now_iso() -> str:
    """Current UTC time as ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


def round_money(x: float) -> float:
    """Round a currency amount to cents for display and export"""
    return round(float(x), 2)


def safe_float(x: str, default: float = 0.0) -> float:
    """Convert value to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def app_dir() -> str:
    """
    Get application data directory: $TRIP_LEDGER_HOME or ~/.trip_ledger
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("TRIP_LEDGER_HOME") or os.path.expanduser("~/.trip_ledger")
    os.makedirs(path, exist_ok=True)
    return path
