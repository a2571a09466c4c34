"""
CSV export and import functionality for the trip split ledger
"""
from __future__ import annotations
import csv
from typing import List

from config import dict_to_transaction
from models import Item, SettlementTransaction, TripSplitSummary
from utils import round_money

TRANSACTION_COLUMNS = [
    'id', 'timestamp', 'type', 'status', 'trip_id', 'trip_name',
    'from_user_id', 'from_user_name', 'to_user_id', 'to_user_name', 'amount', 'description',
]


def export_split_summary_to_csv(
    trip_name: str,
    items: List[Item],
    summaries: List[TripSplitSummary],
    filepath: str,
) -> None:
    """
    Export a trip's items and per-participant totals to CSV.
    Layout: trip header, item rows, blank line, summary rows.
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['Trip', trip_name])
        writer.writerow([])

        writer.writerow(['item', 'quantity', 'price', 'total'])
        for item in items:
            total = item.total
            writer.writerow([
                item.name,
                item.quantity,
                '' if item.price is None else f"{item.price:.2f}",
                '' if total is None else f"{total:.2f}",
            ])
        writer.writerow([])

        writer.writerow(['participant', 'items', 'amount'])
        for s in summaries:
            writer.writerow([s.user_name, s.item_count, f"{round_money(s.total_amount):.2f}"])


def export_transactions_to_csv(transactions: List[SettlementTransaction], filepath: str) -> None:
    """Export ledger transactions to CSV file, one row per record"""
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(TRANSACTION_COLUMNS)
        for t in transactions:
            writer.writerow([
                t.id,
                t.timestamp,
                t.type.value,
                t.status.value,
                t.trip_id or '',
                t.trip_name,
                t.from_user_id,
                t.from_user_name,
                t.to_user_id,
                t.to_user_name,
                t.amount,
                t.description,
            ])


def import_transactions_from_csv(filepath: str) -> List[SettlementTransaction]:
    """
    Import ledger transactions from CSV file
    Returns list of SettlementTransaction objects
    """
    transactions = []

    with open(filepath, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            row = dict(row)
            row['trip_id'] = row.get('trip_id') or None
            transactions.append(dict_to_transaction(row))

    return transactions
