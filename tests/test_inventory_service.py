import unittest

from pharmadesk.services.inventory_service import stock_summary
from tests.support import expiry_in, make_purchase, memory_session_factory, seed_pharmacy


class StockSummaryTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = memory_session_factory()
        self.db = Session()
        self.pharmacy = seed_pharmacy(self.db)
        make_purchase(
            self.db,
            self.pharmacy.id,
            [
                {"medicine_name": "Omeprazole", "quantity": 12, "expiry_date": expiry_in(40),
                 "batch_number": "OM1", "rate": 2},
                {"medicine_name": "Omeprazole", "quantity": 8, "expiry_date": expiry_in(90),
                 "batch_number": "OM2", "rate": 3},
                {"medicine_name": "Dolo", "quantity": 100, "expiry_date": expiry_in(300),
                 "batch_number": "D1", "rate": 1},
            ],
        )

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_rolls_up_batches_per_medicine(self):
        rows = stock_summary(self.db, self.pharmacy.id)
        self.assertEqual([row["medicine_name"] for row in rows], ["Dolo", "Omeprazole"])
        omeprazole = rows[1]
        self.assertEqual(omeprazole["total_stock"], 20)
        self.assertEqual(omeprazole["batch_count"], 2)
        self.assertEqual(omeprazole["nearest_expiry"].isoformat(), expiry_in(40))
        self.assertEqual(omeprazole["stock_value"], 48.0)

    def test_low_stock(self):
        rows = stock_summary(self.db, self.pharmacy.id, low_stock=True)
        self.assertEqual([row["medicine_name"] for row in rows], ["Omeprazole"])

    def test_search_and_pagination(self):
        self.assertEqual(len(stock_summary(self.db, self.pharmacy.id, search="dol")), 1)
        self.assertEqual(len(stock_summary(self.db, self.pharmacy.id, search="unknown")), 2)
        page_two = stock_summary(self.db, self.pharmacy.id, page=2, limit=1)
        self.assertEqual([row["medicine_name"] for row in page_two], ["Omeprazole"])

    def test_search_percent_is_literal(self):
        self.assertEqual(stock_summary(self.db, self.pharmacy.id, search="%"), [])


if __name__ == "__main__":
    unittest.main()
