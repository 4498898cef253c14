import unittest
from datetime import datetime, timedelta, timezone

from pharmadesk.services.dashboard_service import dashboard_stats, relative_time
from tests.support import expiry_in, make_purchase, memory_session_factory, seed_pharmacy


class RelativeTimeTest(unittest.TestCase):
    def test_labels(self):
        now = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)
        cases = [
            (timedelta(seconds=20), "Just now"),
            (timedelta(minutes=1), "1 minute ago"),
            (timedelta(minutes=45), "45 minutes ago"),
            (timedelta(hours=1), "1 hour ago"),
            (timedelta(hours=23, minutes=59), "23 hours ago"),
            (timedelta(days=1), "1 day ago"),
            (timedelta(days=6), "6 days ago"),
        ]
        for delta, expected in cases:
            with self.subTest(delta=delta):
                self.assertEqual(relative_time(now - delta, now=now), expected)

    def test_naive_timestamps_are_utc(self):
        now = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(relative_time(datetime(2025, 5, 1, 10, 0), now=now), "2 hours ago")


class DashboardStatsTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = memory_session_factory()
        self.db = Session()
        self.pharmacy = seed_pharmacy(self.db)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_empty_pharmacy(self):
        stats = dashboard_stats(self.db, self.pharmacy.id)
        self.assertEqual(
            stats,
            {
                "total_medicines": 0,
                "todays_purchases": 0,
                "expiring_soon": 0,
                "stock_value": 0,
                "recent_activity": [],
            },
        )

    def test_counts_and_activity(self):
        make_purchase(
            self.db,
            self.pharmacy.id,
            [
                {"medicine_name": "Soon", "quantity": 10, "expiry_date": expiry_in(10), "rate": 2.4},
                {"medicine_name": "Later", "quantity": 5, "expiry_date": expiry_in(200), "rate": 10},
            ],
            supplier_name="Wellness Co",
        )
        stats = dashboard_stats(self.db, self.pharmacy.id)
        self.assertEqual(stats["total_medicines"], 2)
        self.assertEqual(stats["todays_purchases"], 74)
        self.assertEqual(stats["expiring_soon"], 1)
        self.assertEqual(stats["stock_value"], 74)

        activity = stats["recent_activity"]
        self.assertEqual(len(activity), 3)
        purchase_entries = [entry for entry in activity if entry["type"] == "purchase"]
        self.assertEqual(
            purchase_entries[0]["action"], "Soon purchased (15 units) from Wellness Co"
        )
        self.assertTrue(all(entry["time"] == "Just now" for entry in activity))


if __name__ == "__main__":
    unittest.main()
