"""
Settings and JSON (de)serialization for the trip split ledger
"""
from __future__ import annotations
import json
import os
from dataclasses import asdict, dataclass
from typing import List, Optional

from models import (
    ItemSplit,
    SettlementTransaction,
    SplitDetail,
    SplitPolicy,
    TransactionStatus,
    TransactionType,
)
from utils import app_dir, safe_float

SETTINGS_FILE = "settings.json"
SPLITS_KEY_PREFIX = "splits_"
LEDGER_KEY = "ledger_settlements"


@dataclass
class Settings:
    """Runtime settings; every field has a usable default"""
    data_dir: str = ""
    tolerance: float = 0.01  # allowed drift when checking share sums
    store_indent: Optional[int] = 2


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from JSON file, falling back to defaults"""
    path = path or os.path.join(app_dir(), SETTINGS_FILE)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        data = {}

    settings = Settings(
        data_dir=str(data.get("data_dir") or os.path.join(app_dir(), "data")),
        tolerance=safe_float(data.get("tolerance"), 0.01),
        store_indent=data.get("store_indent", 2),
    )
    return settings


def splits_key(trip_id: str) -> str:
    """Store key holding all ItemSplit records of a trip"""
    return f"{SPLITS_KEY_PREFIX}{trip_id}"


def split_to_dict(split: ItemSplit) -> dict:
    """Convert ItemSplit to dictionary for JSON serialization"""
    return {
        "itemId": split.item_id,
        "splitType": split.policy.value,
        "details": [
            {"userId": d.user_id, "userName": d.user_name, "share": d.share}
            for d in split.details
        ],
    }


def dict_to_split(d: dict) -> ItemSplit:
    """Convert dictionary from JSON to ItemSplit object"""
    details = [
        SplitDetail(
            user_id=str(x["userId"]),
            user_name=str(x.get("userName", "")),
            share=float(x.get("share", 0.0)),
        )
        for x in d.get("details", [])
    ]
    return ItemSplit(
        item_id=str(d["itemId"]),
        policy=SplitPolicy(d.get("splitType", SplitPolicy.EQUAL.value)),
        details=details,
    )


def splits_to_list(splits: List[ItemSplit]) -> list:
    return [split_to_dict(s) for s in splits]


def list_to_splits(data: list) -> List[ItemSplit]:
    return [dict_to_split(d) for d in data]


def transaction_to_dict(t: SettlementTransaction) -> dict:
    """Convert SettlementTransaction to dictionary for JSON serialization"""
    d = asdict(t)
    d["type"] = t.type.value
    d["status"] = t.status.value
    return d


def dict_to_transaction(d: dict) -> SettlementTransaction:
    """Convert dictionary from JSON to SettlementTransaction object"""
    return SettlementTransaction(
        id=str(d["id"]),
        trip_id=d.get("trip_id"),
        trip_name=d.get("trip_name", ""),
        from_user_id=str(d["from_user_id"]),
        from_user_name=d.get("from_user_name", ""),
        to_user_id=str(d["to_user_id"]),
        to_user_name=d.get("to_user_name", ""),
        amount=float(d["amount"]),
        timestamp=str(d["timestamp"]),
        type=TransactionType(d.get("type", TransactionType.EXPENSE.value)),
        status=TransactionStatus(d.get("status", TransactionStatus.COMPLETED.value)),
        description=d.get("description", ""),
    )
