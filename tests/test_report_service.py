import unittest
from io import BytesIO

from openpyxl import load_workbook

from pharmadesk.schemas.expiry import ExpiryFilters
from pharmadesk.services.report_service import build_expiry_workbook, export_expiry_report
from tests.support import expiry_in, make_purchase, memory_session_factory, seed_pharmacy


class ExpiryReportTest(unittest.TestCase):
    def test_export_contains_every_filtered_row(self):
        engine, Session = memory_session_factory()
        db = Session()
        try:
            pharmacy = seed_pharmacy(db)
            make_purchase(
                db,
                pharmacy.id,
                [
                    {"medicine_name": "Insulin", "quantity": 3, "expiry_date": expiry_in(12),
                     "batch_number": "IN1", "rate": 100},
                    {"medicine_name": "Saline", "quantity": 4, "expiry_date": expiry_in(45),
                     "batch_number": "SA1", "rate": 25},
                ],
                supplier_name="Cold Chain Ltd",
            )
            content = export_expiry_report(db, pharmacy.id, ExpiryFilters(page=1, limit=1))
        finally:
            db.close()
            engine.dispose()

        sheet = load_workbook(BytesIO(content)).active
        self.assertEqual(sheet.title, "Expiry Report")
        rows = list(sheet.iter_rows(values_only=True))
        self.assertEqual(rows[0][0], "Medicine")
        self.assertEqual([row[0] for row in rows[1:3]], ["Insulin", "Saline"])
        self.assertEqual(rows[1][4], "CRITICAL")
        self.assertEqual(rows[1][8], "Cold Chain Ltd")
        self.assertEqual(rows[-1][0], "Total Value At Risk")
        self.assertEqual(rows[-1][7], 400)

    def test_empty_report_keeps_headers(self):
        sheet = load_workbook(BytesIO(build_expiry_workbook([]))).active
        rows = list(sheet.iter_rows(values_only=True))
        self.assertEqual(rows[0][1], "Batch")
        self.assertEqual(rows[-1][0], "Total Value At Risk")


if __name__ == "__main__":
    unittest.main()
