"""
Excel export functionality for the trip split ledger
"""
from __future__ import annotations
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from computations import resolve_item_split, to_contribution
from models import Item, ItemSplit, Participant, SettlementTransaction, TripSplitSummary


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_excel(
    trip_name: str,
    items: List[Item],
    participants: List[Participant],
    splits: List[ItemSplit],
    summaries: List[TripSplitSummary],
    filepath: str,
    transactions: Optional[List[SettlementTransaction]] = None,
) -> None:
    """
    Export a trip's split to Excel file with sheets:
    - Items: one row per priced item, one amount column per participant
    - Summary: per-participant totals
    - Ledger: settlement records (when given)
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    # Items sheet
    ws = wb.create_sheet("Items")
    headers = ["item", "policy", "quantity", "price", "total"] + [p.name for p in participants]
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"

    index = {p.id: i for i, p in enumerate(participants)}
    for item in items:
        total = item.total
        if total is None:
            ws.append([item.name, "unpriced", item.quantity, None, None] + [None] * len(participants))
            ws.cell(ws.max_row, 1).font = Font(italic=True, color="808080")
            continue
        split = resolve_item_split(splits, item.id, participants)
        amounts = [0.0] * len(participants)
        for d in split.details:
            if d.user_id in index:
                amounts[index[d.user_id]] += to_contribution(d, split.policy, total)
        ws.append([item.name, split.policy.value, item.quantity, item.price, total] + amounts)

    if ws.max_row >= 2:
        ws.append(["TOTALS"] + [""] * (len(headers) - 1))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        # Using Excel formulas for better transparency
        for col in [5] + list(range(6, 6 + len(participants))):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"

    for r in range(2, ws.max_row + 1):
        for c in range(4, len(headers) + 1):
            ws.cell(r, c).number_format = "0.00"
    _autosize_columns(ws)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    ws.append(["Participant", "Items", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in summaries:
        ws.append([s.user_name, s.item_count, s.total_amount])
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 3).number_format = "0.00"
    _autosize_columns(ws)

    if transactions is not None:
        ws = wb.create_sheet("Ledger")
        ws.append(["Date", "Type", "Status", "From", "To", "Amount", "Description"])
        _style_header(ws, 1)
        ws.freeze_panes = "A2"
        for t in transactions:
            ws.append([
                t.timestamp, t.type.value, t.status.value,
                t.from_user_name, t.to_user_name, t.amount, t.description,
            ])
        for r in range(2, ws.max_row + 1):
            ws.cell(r, 6).number_format = "0.00"
        _autosize_columns(ws)

    wb.properties.title = trip_name

    wb.save(filepath)
