"""
Data models for the trip split ledger
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SplitPolicy(str, Enum):
    """How SplitDetail.share is read for an item"""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "person"  # stored value kept from older saved splits


class TransactionType(str, Enum):
    EXPENSE = "expense"  # from owes to
    PAYMENT = "payment"  # from paid to


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Participant:
    """Person sharing costs on a trip"""
    id: str
    name: str


@dataclass
class Item:
    """Trip item; price is None until the item is priced"""
    id: str
    name: str
    price: Optional[float] = None
    quantity: float = 1

    @property
    def total(self) -> Optional[float]:
        if self.price is None:
            return None
        return float(self.price) * float(self.quantity)


@dataclass
class SplitDetail:
    """One participant's share of an item (percentage or amount, see policy)"""
    user_id: str
    user_name: str
    share: float


@dataclass
class ItemSplit:
    """Split configuration of a single item"""
    item_id: str
    policy: SplitPolicy
    details: List[SplitDetail] = field(default_factory=list)


@dataclass
class TripSplitSummary:
    """Per-participant totals; derived, never stored"""
    user_id: str
    user_name: str
    total_amount: float = 0.0
    item_count: int = 0


@dataclass(frozen=True)
class SettlementTransaction:
    """Ledger record of a payment event"""
    id: str
    trip_id: Optional[str]
    trip_name: str
    from_user_id: str
    from_user_name: str
    to_user_id: str
    to_user_name: str
    amount: float
    timestamp: str  # ISO-8601, UTC
    type: TransactionType = TransactionType.EXPENSE
    status: TransactionStatus = TransactionStatus.COMPLETED
    description: str = ""


@dataclass
class UserBalance:
    """Ledger position of one user across all completed transactions"""
    user_id: str
    user_name: str
    owes_amount: float = 0.0
    owed_amount: float = 0.0

    @property
    def net_balance(self) -> float:
        # positive -> others owe this user
        return self.owed_amount - self.owes_amount


@dataclass(frozen=True)
class Transfer:
    """Recommended payment to settle a debt"""
    from_user_id: str
    from_user_name: str
    to_user_id: str
    to_user_name: str
    amount: float
