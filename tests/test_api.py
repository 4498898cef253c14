import unittest

from fastapi import FastAPI
from fastapi.testclient import TestClient

from pharmadesk.dependencies import get_db
from pharmadesk.routers import (
    dashboard_router,
    expiry_router,
    health_router,
    inventory_router,
    medicines_router,
    purchases_router,
    suppliers_router,
)
from tests.support import expiry_in, memory_session_factory, seed_pharmacy


def build_app(Session):
    app = FastAPI()
    for router in (
        health_router,
        purchases_router,
        expiry_router,
        inventory_router,
        suppliers_router,
        medicines_router,
        dashboard_router,
    ):
        app.include_router(router)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


class ApiTest(unittest.TestCase):
    def setUp(self):
        self.engine, Session = memory_session_factory()
        db = Session()
        self.pharmacy_id = seed_pharmacy(db).id
        db.close()
        self.client = TestClient(build_app(Session))
        self.headers = {"X-Pharmacy-Id": str(self.pharmacy_id)}

    def tearDown(self):
        self.engine.dispose()

    def _create_purchase(self):
        response = self.client.post(
            "/purchases",
            headers=self.headers,
            json={
                "supplier_name": "Acme Pharma",
                "invoice_number": "INV-9",
                "items": [
                    {
                        "medicine_name": "Paracetamol",
                        "quantity": 100,
                        "expiry_date": expiry_in(20),
                        "batch_number": "PCM1",
                        "mrp": 10.5,
                        "rate": 8.5,
                    }
                ],
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_health_needs_no_scope(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_missing_scope_is_not_found(self):
        self.assertEqual(self.client.get("/purchases").status_code, 404)
        self.assertEqual(
            self.client.get("/purchases", headers={"X-Pharmacy-Id": "999"}).status_code, 404
        )

    def test_scope_from_query_parameter(self):
        response = self.client.get("/inventory", params={"pharmacy_id": self.pharmacy_id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_purchase_lifecycle(self):
        created = self._create_purchase()
        self.assertEqual(created["total_amount"], 850.0)
        item_id = created["items"][0]["id"]

        lines = self.client.get("/purchases", headers=self.headers).json()
        self.assertEqual(lines[0]["medicine_name"], "Paracetamol")

        updated = self.client.put(
            "/purchases",
            headers=self.headers,
            json={"purchase_item_id": item_id, "batch_number": "PCM2", "quantity": 10},
        )
        self.assertEqual(updated.status_code, 200, updated.text)
        self.assertEqual(updated.json()["batch_number"], "PCM2")
        self.assertEqual(updated.json()["supplier_name"], "Acme Pharma")

        expiry = self.client.get("/expiry", headers=self.headers).json()
        self.assertEqual(expiry["data"][0]["batch_number"], "PCM2")
        self.assertEqual(expiry["totalValueAtRisk"], 85.0)

        deleted = self.client.delete(
            "/purchases", headers=self.headers, params={"purchase_item_id": item_id}
        )
        self.assertEqual(
            deleted.json(), {"success": True, "purchase_deleted": True, "medicine_deleted": True}
        )
        self.assertEqual(self.client.get("/purchases", headers=self.headers).json(), [])

    def test_missing_item_id(self):
        self.assertEqual(
            self.client.put("/purchases", headers=self.headers, json={"quantity": 1}).status_code,
            400,
        )
        self.assertEqual(self.client.delete("/purchases", headers=self.headers).status_code, 400)
        self.assertEqual(
            self.client.delete(
                "/purchases", headers=self.headers, params={"purchase_item_id": 31337}
            ).status_code,
            404,
        )

    def test_invalid_purchase(self):
        response = self.client.post(
            "/purchases", headers=self.headers, json={"supplier_name": "X", "items": []}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Missing required fields")

    def test_stats_endpoints(self):
        self._create_purchase()
        stats = self.client.get("/purchases/stats", headers=self.headers).json()
        self.assertEqual(stats["totalEntries"], 1)

        expiry_stats = self.client.get(
            "/expiry", headers=self.headers, params={"type": "stats"}
        ).json()
        self.assertEqual(expiry_stats["expiringIn30Days"], 1)

        dashboard = self.client.get("/dashboard/stats", headers=self.headers).json()
        self.assertEqual(dashboard["total_medicines"], 1)

    def test_expiry_export(self):
        self._create_purchase()
        response = self.client.get("/expiry/export", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertIn("spreadsheetml", response.headers["content-type"])
        self.assertTrue(response.content.startswith(b"PK"))

    def test_bad_status_filter(self):
        response = self.client.get("/expiry", headers=self.headers, params={"status": "nope"})
        self.assertEqual(response.status_code, 400)

    def test_supplier_and_medicine_endpoints(self):
        created = self.client.post("/suppliers", headers=self.headers, json={"name": "Nova"})
        self.assertEqual(created.status_code, 201)
        renamed = self.client.put(
            "/suppliers",
            headers=self.headers,
            json={"supplier_id": created.json()["id"], "new_name": "Nova Labs"},
        )
        self.assertEqual(renamed.json()["supplier"]["name"], "Nova Labs")
        self.assertEqual(
            self.client.put("/suppliers", headers=self.headers, json={}).status_code, 400
        )

        medicine = self.client.post(
            "/medicines", headers=self.headers, json={"name": "Crocin", "manufacturer": "GSK"}
        )
        self.assertEqual(medicine.status_code, 201)
        self.assertEqual(
            self.client.post("/medicines", headers=self.headers, json={"name": "X"}).status_code,
            400,
        )
        listed = self.client.get("/medicines", headers=self.headers, params={"search": "croc"})
        self.assertEqual([m["name"] for m in listed.json()], ["Crocin"])


if __name__ == "__main__":
    unittest.main()
