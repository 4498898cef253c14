import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from pharmadesk.models import CurrentInventory, ExpiryAlert
from pharmadesk.services.medicine_references import is_medicine_referenced
from tests.support import expiry_in, make_purchase, memory_session_factory, seed_pharmacy


class MedicineReferenceTest(unittest.TestCase):
    def test_failed_lookup_counts_as_referenced(self):
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("db down"))
        with self.assertLogs("pharmadesk.services.medicine_references", level="ERROR"):
            self.assertTrue(is_medicine_referenced(db, 1))

    def test_unreferenced_medicine(self):
        engine, Session = memory_session_factory()
        db = Session()
        try:
            self.assertFalse(is_medicine_referenced(db, 12345))
        finally:
            db.close()
            engine.dispose()

    def test_inventory_row_is_a_reference(self):
        engine, Session = memory_session_factory()
        db = Session()
        try:
            pharmacy = seed_pharmacy(db)
            purchase = make_purchase(
                db,
                pharmacy.id,
                [{"medicine_name": "Stocked", "quantity": 2, "expiry_date": expiry_in(300)}],
            )
            medicine_id = purchase["items"][0]["medicine_id"]
            self.assertTrue(is_medicine_referenced(db, medicine_id))

            db.add(
                CurrentInventory(
                    pharmacy_id=pharmacy.id,
                    medicine_id=medicine_id,
                    batch_number="LOOSE",
                    expiry_date=purchase["items"][0]["expiry_date"],
                    current_stock=1,
                )
            )
            db.commit()
            self.assertTrue(is_medicine_referenced(db, medicine_id))
        finally:
            db.close()
            engine.dispose()

    def test_missing_alert_table_is_ignored(self):
        engine, Session = memory_session_factory(skip_tables=(ExpiryAlert.__tablename__,))
        db = Session()
        try:
            self.assertFalse(is_medicine_referenced(db, 1))
        finally:
            db.close()
            engine.dispose()


if __name__ == "__main__":
    unittest.main()
