"""
Business logic and computations for the trip split ledger.

Everything here is pure: lists of splits, items and transactions go in, new
values come out. Persistence lives in split_ledger.SplitLedger.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from exceptions import ValidationError
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
from utils import round_money

DEFAULT_TOLERANCE = 0.01


# ---------- Split configuration ----------

def create_equal_split(item_id: str, participants: List[Participant]) -> ItemSplit:
    """Equal split of an item over the given participants (100 / N each)"""
    valid = [p for p in participants if p is not None and p.id]
    if not valid:
        return ItemSplit(item_id=item_id, policy=SplitPolicy.EQUAL, details=[])

    share = 100.0 / len(valid)
    return ItemSplit(
        item_id=item_id,
        policy=SplitPolicy.EQUAL,
        details=[SplitDetail(p.id, p.name, share) for p in valid],
    )


def get_item_split(splits: List[ItemSplit], item_id: str) -> Optional[ItemSplit]:
    """Stored split for an item, or None"""
    return next((s for s in splits if s.item_id == item_id), None)


def update_split(
    splits: List[ItemSplit],
    item_id: str,
    policy: SplitPolicy,
    details: List[SplitDetail],
) -> List[ItemSplit]:
    """
    Return a new list with the split for item_id replaced in place, or
    appended if the item had none. Details are not validated here.
    """
    new_split = ItemSplit(item_id=item_id, policy=SplitPolicy(policy), details=list(details))
    out = list(splits)
    for i, s in enumerate(out):
        if s.item_id == item_id:
            out[i] = new_split
            return out
    out.append(new_split)
    return out


def resolve_item_split(
    splits: List[ItemSplit],
    item_id: str,
    participants: List[Participant],
) -> ItemSplit:
    """Stored split for the item, else an equal split over all participants"""
    stored = get_item_split(splits, item_id)
    if stored is not None:
        return stored
    return create_equal_split(item_id, participants)


# ---------- Amounts ----------

def share_total(details: Iterable[SplitDetail]) -> float:
    return sum(float(d.share) for d in details)


def to_contribution(detail: SplitDetail, policy: SplitPolicy, item_total: float) -> float:
    """Currency amount a detail contributes to an item of the given total"""
    if policy in (SplitPolicy.EQUAL, SplitPolicy.PERCENTAGE):
        return item_total * (float(detail.share) / 100.0)
    if policy == SplitPolicy.FIXED_AMOUNT:
        return float(detail.share)
    raise ValueError(f"Unknown split policy: {policy!r}")


def calculate_split_amounts(
    items: List[Item],
    participants: List[Participant],
    splits: List[ItemSplit],
) -> List[TripSplitSummary]:
    """
    Compute what each participant owes for a trip.
    Returns one summary per participant, in input order. Unpriced items are
    skipped; totals keep full precision (round at display time).
    """
    result = [TripSplitSummary(p.id, p.name) for p in participants]
    by_id: Dict[str, TripSplitSummary] = {}
    unique: List[Participant] = []
    for p, s in zip(participants, result):
        if s.user_id not in by_id:
            by_id[s.user_id] = s
            unique.append(p)
    # a repeated id keeps its first summary; later copies stay at zero

    for item in items:
        total = item.total
        if total is None:
            continue
        split = resolve_item_split(splits, item.id, unique)
        for detail in split.details:
            summary = by_id.get(detail.user_id)
            if summary is None:
                # detail for someone no longer on the trip
                continue
            summary.total_amount += to_contribution(detail, split.policy, total)
            summary.item_count += 1

    return result


def trip_total(items: List[Item]) -> float:
    """Sum of price * quantity over priced items"""
    return sum(item.total for item in items if item.total is not None)


# ---------- Validation ----------

def validate_split(
    policy: SplitPolicy,
    details: List[SplitDetail],
    item_total: Optional[float],
    tolerance: float = DEFAULT_TOLERANCE,
) -> Optional[ValidationError]:
    """
    Check a split before it is committed.
    Returns the ValidationError to show, or None when the split is valid.
    """
    policy = SplitPolicy(policy)
    if policy == SplitPolicy.PERCENTAGE:
        total = share_total(details)
        if abs(total - 100.0) > tolerance:
            return ValidationError(
                "percentages must sum to 100", policy=policy, expected=100.0, actual=total
            )
    elif policy == SplitPolicy.FIXED_AMOUNT:
        if item_total is None:
            return None
        total = share_total(details)
        if abs(total - item_total) > tolerance:
            return ValidationError(
                f"amounts must sum to {item_total:.2f}",
                policy=policy,
                expected=item_total,
                actual=total,
            )
    return None


# ---------- Interactive editing ----------

def _equalize(details: List[SplitDetail]) -> List[SplitDetail]:
    if not details:
        return []
    share = 100.0 / len(details)
    return [replace(d, share=share) for d in details]


def remove_participant(
    details: List[SplitDetail],
    policy: SplitPolicy,
    user_id: str,
) -> List[SplitDetail]:
    """
    Drop a participant from an item's split and rebalance what is left.
    Unknown user ids leave the split unchanged.
    """
    remaining = [d for d in details if d.user_id != user_id]
    if len(remaining) == len(details):
        return [replace(d) for d in details]
    if not remaining:
        return []

    policy = SplitPolicy(policy)
    if policy == SplitPolicy.EQUAL:
        return _equalize(remaining)
    if policy == SplitPolicy.PERCENTAGE:
        old_sum = share_total(remaining)
        if old_sum <= 0:
            return _equalize(remaining)
        factor = 100.0 / old_sum
        return [replace(d, share=float(d.share) * factor) for d in remaining]
    return [replace(d) for d in remaining]


def add_participant(
    details: List[SplitDetail],
    policy: SplitPolicy,
    participant: Participant,
) -> List[SplitDetail]:
    """
    Add a participant to an item's split.
    Equal splits are recomputed; percentage and fixed-amount splits get the
    newcomer at 0 and leave rebalancing to the user.
    """
    if any(d.user_id == participant.id for d in details):
        return [replace(d) for d in details]

    added = [replace(d) for d in details] + [SplitDetail(participant.id, participant.name, 0.0)]
    if SplitPolicy(policy) == SplitPolicy.EQUAL:
        return _equalize(added)
    return added


def change_policy(
    details: List[SplitDetail],
    policy: SplitPolicy,
    item_total: Optional[float],
) -> List[SplitDetail]:
    """Re-seed shares of the selected participants for a new policy"""
    if not details:
        return []
    if SplitPolicy(policy) == SplitPolicy.FIXED_AMOUNT:
        amount = (item_total or 0.0) / len(details)
        return [replace(d, share=amount) for d in details]
    return _equalize(details)


def set_share(details: List[SplitDetail], user_id: str, share: float) -> List[SplitDetail]:
    return [replace(d, share=float(share)) if d.user_id == user_id else replace(d) for d in details]


# ---------- Bulk split ----------

def validate_bulk_split(
    policy: SplitPolicy,
    details: List[SplitDetail],
    items: List[Item],
    tolerance: float = DEFAULT_TOLERANCE,
) -> Optional[ValidationError]:
    """Fixed amounts of a bulk split are checked against the whole trip"""
    return validate_split(policy, details, trip_total(items), tolerance)


def apply_bulk_split(
    splits: List[ItemSplit],
    items: List[Item],
    policy: SplitPolicy,
    details: List[SplitDetail],
    participants: List[Participant],
) -> List[ItemSplit]:
    """
    Apply one split to every priced item of a trip.
    Fixed amounts are given for the whole trip and scaled to each item's
    share of the trip total; on a zero-cost trip every amount becomes 0.
    """
    policy = SplitPolicy(policy)
    selected_ids = {d.user_id for d in details}
    selected = [p for p in participants if p.id in selected_ids]
    total = trip_total(items)

    out = list(splits)
    for item in items:
        item_total = item.total
        if item_total is None:
            continue
        if policy == SplitPolicy.EQUAL:
            eq = create_equal_split(item.id, selected)
            out = update_split(out, item.id, policy, eq.details)
        elif policy == SplitPolicy.PERCENTAGE:
            out = update_split(out, item.id, policy, [replace(d) for d in details])
        else:
            ratio = item_total / total if total > 0 else 0.0
            scaled = [replace(d, share=float(d.share) * ratio) for d in details]
            out = update_split(out, item.id, policy, scaled)
    return out


# ---------- Settlement ----------

def compute_trip_transfers(
    summaries: List[TripSplitSummary],
    payer_id: str,
    eps: float = DEFAULT_TOLERANCE,
) -> List[Transfer]:
    """
    Transfers after one participant paid for the whole trip: everyone else
    owes the payer their own total.
    """
    payer = next((s for s in summaries if s.user_id == payer_id), None)
    if payer is None:
        raise ValueError(f"Payer {payer_id!r} is not a trip participant")

    transfers = []
    for s in summaries:
        if s.user_id == payer_id or s.total_amount < eps:
            continue
        transfers.append(Transfer(
            s.user_id, s.user_name, payer.user_id, payer.user_name, round_money(s.total_amount)
        ))
    return transfers


def compute_user_balances(transactions: List[SettlementTransaction]) -> List[UserBalance]:
    """
    Balances over completed transactions, in order of first appearance.
    Expense: from owes to. Payment: from paid to, reducing from's debt.
    """
    balances: Dict[str, UserBalance] = {}
    for t in transactions:
        if t.status != TransactionStatus.COMPLETED:
            continue
        frm = balances.setdefault(t.from_user_id, UserBalance(t.from_user_id, t.from_user_name))
        to = balances.setdefault(t.to_user_id, UserBalance(t.to_user_id, t.to_user_name))
        amount = float(t.amount)
        if t.type == TransactionType.EXPENSE:
            frm.owes_amount += amount
            to.owed_amount += amount
        elif t.type == TransactionType.PAYMENT:
            frm.owed_amount += amount
            to.owes_amount += amount
    return list(balances.values())


def compute_payment_recommendations(
    balances: List[UserBalance],
    eps: float = DEFAULT_TOLERANCE,
) -> List[Transfer]:
    """
    Greedy settlement: largest debtors pay largest creditors.
    net > 0 creditor; net < 0 debtor.
    """
    creditors = [[b, b.net_balance] for b in balances if b.net_balance >= eps]
    debtors = [[b, -b.net_balance] for b in balances if b.net_balance <= -eps]
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, damt = debtors[i]
        creditor, camt = creditors[j]
        x = min(damt, camt)
        if x > 0:
            transfers.append(Transfer(
                debtor.user_id, debtor.user_name, creditor.user_id, creditor.user_name, round_money(x)
            ))
        debtors[i][1] = damt - x
        creditors[j][1] = camt - x
        if debtors[i][1] < eps:
            i += 1
        if creditors[j][1] < eps:
            j += 1

    return transfers
