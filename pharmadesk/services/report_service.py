from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from pharmadesk.schemas.expiry import ExpiryFilters
from pharmadesk.services.expiry_service import filtered_expiry_rows

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EXPIRY_REPORT_COLUMNS = (
    ("Medicine", "medicine_name"),
    ("Batch", "batch_number"),
    ("Expiry Date", "expiry_date"),
    ("Days To Expiry", "days_to_expiry"),
    ("Status", "expiry_status"),
    ("Stock", "current_stock"),
    ("MRP", "mrp"),
    ("Estimated Loss", "estimated_loss"),
    ("Supplier", "supplier_name"),
)


def build_expiry_workbook(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Expiry Report"

    headers = [header for header, _ in EXPIRY_REPORT_COLUMNS]
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    total_loss = 0.0
    for row in rows:
        ws.append([row.get(key) for _, key in EXPIRY_REPORT_COLUMNS])
        total_loss += row.get("estimated_loss") or 0

    ws.append([])
    ws.append(["Total Value At Risk", None, None, None, None, None, None, round(total_loss, 2)])

    # autosize columns
    for index, header in enumerate(headers, start=1):
        col = get_column_letter(index)
        width = max(len(header), 10)
        for cell in ws[col]:
            if cell.value is not None:
                width = max(width, len(str(cell.value)))
        ws.column_dimensions[col].width = min(width + 2, 55)

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def export_expiry_report(db: Session, pharmacy_id: int, filters: ExpiryFilters, today=None) -> bytes:
    """The whole filtered expiry list as an XLSX workbook; page and limit are ignored."""
    rows = filtered_expiry_rows(db, pharmacy_id, filters, today=today)
    return build_expiry_workbook(rows)


__all__ = ["XLSX_MEDIA_TYPE", "build_expiry_workbook", "export_expiry_report"]
