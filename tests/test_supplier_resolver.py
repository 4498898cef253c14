import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from pharmadesk.models import PurchaseItem
from pharmadesk.services.supplier_resolver import resolve_supplier_name, resolve_supplier_names
from tests.support import expiry_in, make_purchase, memory_session_factory, seed_pharmacy


class SupplierResolverTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = memory_session_factory()
        self.db = Session()
        self.pharmacy = seed_pharmacy(self.db)
        self.expiry = expiry_in(120)
        self.item = {
            "medicine_name": "Vitamin C",
            "quantity": 10,
            "expiry_date": self.expiry,
            "batch_number": "VC1",
        }

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_most_recent_purchase_wins(self):
        older = make_purchase(self.db, self.pharmacy.id, [self.item], supplier_name="Old Co")
        newer = make_purchase(self.db, self.pharmacy.id, [self.item], supplier_name="New Co")
        stamp = datetime.now(timezone.utc)
        self.db.execute(
            update(PurchaseItem)
            .where(PurchaseItem.id == older["items"][0]["id"])
            .values(created_at=stamp - timedelta(days=2))
        )
        self.db.execute(
            update(PurchaseItem)
            .where(PurchaseItem.id == newer["items"][0]["id"])
            .values(created_at=stamp)
        )
        self.db.commit()

        medicine_id = newer["items"][0]["medicine_id"]
        name = resolve_supplier_name(self.db, self.pharmacy.id, medicine_id, "VC1", self.expiry)
        self.assertEqual(name, "New Co")

    def test_unmatched_key_is_unknown(self):
        purchase = make_purchase(self.db, self.pharmacy.id, [self.item])
        medicine_id = purchase["items"][0]["medicine_id"]
        names = resolve_supplier_names(
            self.db,
            self.pharmacy.id,
            [
                {"medicine_id": medicine_id, "batch_number": "VC1", "expiry_date": self.expiry},
                {"medicine_id": medicine_id, "batch_number": "NOPE", "expiry_date": self.expiry},
            ],
        )
        self.assertEqual(sorted(names.values()), ["Acme Pharma", "Unknown"])

    def test_empty_rows(self):
        self.assertEqual(resolve_supplier_names(self.db, self.pharmacy.id, []), {})

    def test_other_pharmacy_purchases_are_ignored(self):
        other = seed_pharmacy(self.db, "Other Pharmacy")
        ours = make_purchase(self.db, self.pharmacy.id, [self.item], supplier_name="A-Supplier")
        make_purchase(self.db, other.id, [self.item], supplier_name="B-Secret-Supplier")

        medicine_id = ours["items"][0]["medicine_id"]
        self.assertEqual(
            resolve_supplier_name(self.db, self.pharmacy.id, medicine_id, "VC1", self.expiry),
            "A-Supplier",
        )
        self.assertEqual(
            resolve_supplier_name(self.db, other.id, medicine_id, "VC1", self.expiry),
            "B-Secret-Supplier",
        )

    def test_many_keys_resolve_in_chunks(self):
        items = [
            {
                "medicine_name": "Vitamin C",
                "quantity": 1,
                "expiry_date": expiry_in(10 + n % 80),
                "batch_number": "BT{}".format(n),
            }
            for n in range(1200)
        ]
        purchase = make_purchase(self.db, self.pharmacy.id, items)
        rows = [
            {
                "medicine_id": line["medicine_id"],
                "batch_number": line["batch_number"],
                "expiry_date": line["expiry_date"],
            }
            for line in purchase["items"]
        ]

        names = resolve_supplier_names(self.db, self.pharmacy.id, rows)
        self.assertEqual(len(names), 1200)
        self.assertEqual(set(names.values()), {"Acme Pharma"})


if __name__ == "__main__":
    unittest.main()
