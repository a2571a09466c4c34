"""
SplitLedger: trip split configuration and the global settlement ledger,
persisted through an injected Store.
"""
from __future__ import annotations
import logging
from dataclasses import replace
from typing import List, Optional

from computations import (
    apply_bulk_split,
    calculate_split_amounts,
    compute_payment_recommendations,
    compute_user_balances,
    create_equal_split,
    update_split,
    validate_bulk_split,
    validate_split,
)
from config import (
    LEDGER_KEY,
    Settings,
    dict_to_transaction,
    load_settings,
    list_to_splits,
    splits_key,
    splits_to_list,
    transaction_to_dict,
)
from exceptions import PersistenceError, TransactionError
from models import (
    Item,
    ItemSplit,
    Participant,
    SettlementTransaction,
    SplitDetail,
    SplitPolicy,
    TransactionStatus,
    TransactionType,
    Transfer,
    TripSplitSummary,
    UserBalance,
)
from store import JsonFileStore, Store
from utils import new_id, now_iso

logger = logging.getLogger(__name__)


class SplitLedger:
    """Split configuration per trip plus the append-only settlement ledger"""

    def __init__(self, store: Store, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or Settings()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SplitLedger":
        """Ledger backed by JSON files in the configured data dir"""
        settings = settings or load_settings()
        return cls(JsonFileStore(settings.data_dir, indent=settings.store_indent), settings)

    def _load(self, key: str):
        try:
            return self.store.load(key)
        except PersistenceError:
            raise
        except OSError as ex:
            logger.error("Store failed to load %s: %s", key, ex)
            raise PersistenceError(key, f"could not load: {ex}") from ex

    def _save(self, key: str, value) -> None:
        try:
            self.store.save(key, value)
        except PersistenceError:
            raise
        except OSError as ex:
            logger.error("Store failed to save %s: %s", key, ex)
            raise PersistenceError(key, f"could not save: {ex}") from ex

    # ---------- Split configuration ----------

    def create_equal_split(self, item_id: str, participants: List[Participant]) -> ItemSplit:
        return create_equal_split(item_id, participants)

    def update_split(
        self,
        splits: List[ItemSplit],
        item_id: str,
        policy: SplitPolicy,
        details: List[SplitDetail],
    ) -> List[ItemSplit]:
        return update_split(splits, item_id, policy, details)

    def load_split_config(self, trip_id: str) -> List[ItemSplit]:
        """Stored splits for a trip; [] when the trip has no custom splits"""
        key = splits_key(trip_id)
        data = self._load(key)
        if not data:
            return []
        try:
            return list_to_splits(data)
        except (AttributeError, KeyError, TypeError, ValueError) as ex:
            logger.error("Corrupt split config for trip %s: %s", trip_id, ex)
            raise PersistenceError(key, f"corrupt split config: {ex}") from ex

    def save_split_config(self, trip_id: str, splits: List[ItemSplit]) -> None:
        """Overwrite all splits stored for a trip"""
        self._save(splits_key(trip_id), splits_to_list(splits))
        logger.debug("Saved %d split(s) for trip %s", len(splits), trip_id)

    def has_custom_splits(self, trip_id: str) -> bool:
        return len(self.load_split_config(trip_id)) > 0

    def reset_splits(self, trip_id: str) -> None:
        """Drop custom splits; every item falls back to an equal split"""
        self.save_split_config(trip_id, [])
        logger.info("Reset splits for trip %s", trip_id)

    def commit_split(
        self,
        trip_id: str,
        item: Item,
        policy: SplitPolicy,
        details: List[SplitDetail],
    ) -> List[ItemSplit]:
        """
        Validate an edited split and store it.
        Raises ValidationError (store untouched) when the shares do not add up.
        """
        error = validate_split(policy, details, item.total, self.settings.tolerance)
        if error is not None:
            raise error
        splits = update_split(self.load_split_config(trip_id), item.id, policy, details)
        self.save_split_config(trip_id, splits)
        logger.info("Committed %s split for item %s on trip %s", SplitPolicy(policy).name, item.id, trip_id)
        return splits

    def commit_bulk_split(
        self,
        trip_id: str,
        items: List[Item],
        policy: SplitPolicy,
        details: List[SplitDetail],
        participants: List[Participant],
    ) -> List[ItemSplit]:
        """Validate one split and apply it to every priced item of a trip"""
        error = validate_bulk_split(policy, details, items, self.settings.tolerance)
        if error is not None:
            raise error
        splits = apply_bulk_split(self.load_split_config(trip_id), items, policy, details, participants)
        self.save_split_config(trip_id, splits)
        logger.info("Applied %s bulk split on trip %s", SplitPolicy(policy).name, trip_id)
        return splits

    def calculate_split_amounts(
        self,
        trip_id: str,
        items: List[Item],
        participants: List[Participant],
    ) -> List[TripSplitSummary]:
        """Per-participant totals from the trip's stored splits"""
        return calculate_split_amounts(items, participants, self.load_split_config(trip_id))

    # ---------- Ledger ----------

    def load_transactions(self) -> List[SettlementTransaction]:
        data = self._load(LEDGER_KEY)
        if not data:
            return []
        try:
            return [dict_to_transaction(d) for d in data]
        except (AttributeError, KeyError, TypeError, ValueError) as ex:
            logger.error("Corrupt settlement ledger: %s", ex)
            raise PersistenceError(LEDGER_KEY, f"corrupt ledger: {ex}") from ex

    def _save_transactions(self, transactions: List[SettlementTransaction]) -> None:
        self._save(LEDGER_KEY, [transaction_to_dict(t) for t in transactions])

    def _append(self, transaction: SettlementTransaction) -> SettlementTransaction:
        transactions = self.load_transactions()
        transactions.append(transaction)
        self._save_transactions(transactions)
        logger.info(
            "Recorded %s %s -> %s: %.2f",
            transaction.type.value,
            transaction.from_user_id,
            transaction.to_user_id,
            transaction.amount,
        )
        return transaction

    def create_settlement_transaction(
        self,
        trip_id: str,
        trip_name: str,
        from_user_id: str,
        from_user_name: str,
        to_user_id: str,
        to_user_name: str,
        amount: float,
    ) -> SettlementTransaction:
        """Record that from_user settled their share of a trip with to_user"""
        return self._append(SettlementTransaction(
            id=new_id(),
            trip_id=trip_id,
            trip_name=trip_name,
            from_user_id=from_user_id,
            from_user_name=from_user_name,
            to_user_id=to_user_id,
            to_user_name=to_user_name,
            amount=amount,
            timestamp=now_iso(),
            type=TransactionType.EXPENSE,
            status=TransactionStatus.COMPLETED,
            description=f"Expenses from trip to {trip_name}",
        ))

    def create_payment_transaction(
        self,
        from_user_id: str,
        from_user_name: str,
        to_user_id: str,
        to_user_name: str,
        amount: float,
        description: str = "Payment",
    ) -> SettlementTransaction:
        """Record a payment; stays pending until confirmed"""
        return self._append(SettlementTransaction(
            id=new_id(),
            trip_id=None,
            trip_name="",
            from_user_id=from_user_id,
            from_user_name=from_user_name,
            to_user_id=to_user_id,
            to_user_name=to_user_name,
            amount=amount,
            timestamp=now_iso(),
            type=TransactionType.PAYMENT,
            status=TransactionStatus.PENDING,
            description=description,
        ))

    def _resolve_payment(self, transaction_id: str, status: TransactionStatus) -> SettlementTransaction:
        transactions = self.load_transactions()
        for i, t in enumerate(transactions):
            if t.id != transaction_id:
                continue
            if t.type != TransactionType.PAYMENT or t.status != TransactionStatus.PENDING:
                raise TransactionError(
                    f"Transaction {transaction_id} is a {t.status.value} {t.type.value} and cannot change"
                )
            transactions[i] = replace(t, status=status)
            self._save_transactions(transactions)
            logger.info("Payment %s %s", transaction_id, status.value)
            return transactions[i]
        raise TransactionError(f"Unknown transaction {transaction_id}")

    def confirm_payment(self, transaction_id: str) -> SettlementTransaction:
        return self._resolve_payment(transaction_id, TransactionStatus.COMPLETED)

    def cancel_payment(self, transaction_id: str) -> SettlementTransaction:
        return self._resolve_payment(transaction_id, TransactionStatus.CANCELLED)

    def transactions_for_trip(self, trip_id: str) -> List[SettlementTransaction]:
        return [t for t in self.load_transactions() if t.trip_id == trip_id]

    def transactions_for_user(self, user_id: str) -> List[SettlementTransaction]:
        return [t for t in self.load_transactions() if user_id in (t.from_user_id, t.to_user_id)]

    def user_balances(self) -> List[UserBalance]:
        return compute_user_balances(self.load_transactions())

    def payment_recommendations(self) -> List[Transfer]:
        return compute_payment_recommendations(self.user_balances())
