"""
Tests for CSV and Excel exports.
"""
import csv

import pytest
from openpyxl import load_workbook

from computations import calculate_split_amounts
from csv_handler import (
    export_split_summary_to_csv,
    export_transactions_to_csv,
    import_transactions_from_csv,
)
from excel_export import export_excel
from models import Item, ItemSplit, SplitDetail, SplitPolicy


@pytest.fixture
def trip_items(costco_items):
    return costco_items + [Item("i3", "Bread", price=None, quantity=1)]


def test_split_summary_csv(tmp_path, participants, trip_items):
    summaries = calculate_split_amounts(trip_items, participants, [])
    path = tmp_path / "summary.csv"

    export_split_summary_to_csv("Costco Run", trip_items, summaries, str(path))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Trip", "Costco Run"]
    assert rows[2] == ["item", "quantity", "price", "total"]
    assert rows[4] == ["Eggs", "2", "6.00", "12.00"]
    assert rows[5] == ["Bread", "1", "", ""]
    assert rows[-2:] == [["Alice", "2", "8.00"], ["Bob", "2", "8.00"]]


def test_transactions_csv_round_trip(tmp_path, ledger):
    ledger.create_settlement_transaction("t1", "Costco Run", "u2", "Bob", "u1", "Alice", 8.0)
    ledger.create_payment_transaction("u2", "Bob", "u1", "Alice", 8.0, description="Cash, thanks")
    path = tmp_path / "ledger.csv"

    export_transactions_to_csv(ledger.load_transactions(), str(path))

    assert import_transactions_from_csv(str(path)) == ledger.load_transactions()


def test_excel_export(tmp_path, ledger, participants, trip_items):
    splits = [ItemSplit("i1", SplitPolicy.PERCENTAGE, [SplitDetail("u1", "Alice", 100.0)])]
    summaries = calculate_split_amounts(trip_items, participants, splits)
    ledger.create_settlement_transaction("t1", "Costco Run", "u2", "Bob", "u1", "Alice", 6.0)
    path = tmp_path / "trip.xlsx"

    export_excel("Costco Run", trip_items, participants, splits, summaries, str(path),
                 transactions=ledger.load_transactions())

    wb = load_workbook(path)
    assert wb.sheetnames == ["Items", "Summary", "Ledger"]

    items = wb["Items"]
    assert [c.value for c in items[1]] == ["item", "policy", "quantity", "price", "total", "Alice", "Bob"]
    assert [c.value for c in items[2]] == ["Milk", "percentage", 1, 4, 4, 4, 0]
    assert [c.value for c in items[3]] == ["Eggs", "equal", 2, 6, 12, 6, 6]
    assert items.cell(4, 2).value == "unpriced"
    assert items.cell(5, 1).value == "TOTALS"
    assert items.cell(5, 6).value == "=SUM(F2:F4)"

    summary = wb["Summary"]
    assert [c.value for c in summary[2]] == ["Alice", 2, 10]
    assert [c.value for c in summary[3]] == ["Bob", 1, 6]

    assert wb["Ledger"].cell(2, 4).value == "Bob"


def test_excel_export_without_ledger(tmp_path, participants, costco_items):
    summaries = calculate_split_amounts(costco_items, participants, [])
    path = tmp_path / "trip.xlsx"

    export_excel("Costco Run", costco_items, participants, [], summaries, str(path))

    assert load_workbook(path).sheetnames == ["Items", "Summary"]
