from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from core.services.coverage import PayStatus
from core.services.payroll import PayrollOverview

__all__ = ["build_coverage_workbook", "BASE_HEADERS"]

BASE_HEADERS = ["EMP ID", "Name", "Email", "Department", "Position"]
STATUS_HEADER = "Pay Status"
COVERED_MARK = "✓"

_STATUS_FILLS = {
    PayStatus.PAID: PatternFill("solid", fgColor="C6EFCE"),
    PayStatus.PENDING: PatternFill("solid", fgColor="FFEB9C"),
    PayStatus.UNKNOWN: PatternFill("solid", fgColor="E7E6E6"),
}


def build_coverage_workbook(overview: PayrollOverview) -> BytesIO:
    """Render a coverage overview as an xlsx workbook (one column per required month)."""
    months = list(overview.required_months)

    wb = Workbook()
    ws = wb.active
    ws.title = "Pay Status"

    thin = Side(style="thin", color="999999")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    bold = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center")

    if overview.period_selected:
        title = f"Pay period {overview.start.isoformat()} ~ {overview.end.isoformat()}"
    else:
        title = "Pay period not selected"
    ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=12)

    headers = BASE_HEADERS + [str(m) for m in months] + [STATUS_HEADER]
    for col, label in enumerate(headers, start=1):
        cell = ws.cell(row=2, column=col, value=label)
        cell.font = bold
        cell.alignment = center
        cell.border = border
        cell.fill = PatternFill("solid", fgColor="DDEBF7")

    row_idx = 3
    for item in overview.rows:
        values = [item.employee_id, item.name, item.email, item.department, item.position]
        have = overview.covered.get(item.employee_id, frozenset())
        values.extend(COVERED_MARK if m in have else "" for m in months)
        values.append(item.status.value)
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = border
            if col > len(BASE_HEADERS):
                cell.alignment = center
        ws.cell(row=row_idx, column=len(headers)).fill = _STATUS_FILLS[item.status]
        row_idx += 1

    counts = overview.counts
    footer = ", ".join(f"{status.value}: {counts[status.value]}" for status in PayStatus)
    ws.cell(row=row_idx + 1, column=1, value="Totals").font = bold
    ws.cell(row=row_idx + 1, column=2, value=footer)

    widths = [12, 24, 30, 18, 18] + [10] * len(months) + [12]
    for col, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width
    ws.freeze_panes = "B3"

    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio
