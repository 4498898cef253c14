import argparse
from datetime import date, timedelta

from sqlalchemy import delete, select

from pharmadesk.core.logging import setup_logging
from pharmadesk.database import Base, engine, ensure_sqlite_schema
from pharmadesk.database.session import session_scope
from pharmadesk.models import (
    CurrentInventory,
    ExpiryAlert,
    Medicine,
    Pharmacy,
    Purchase,
    PurchaseItem,
    StockTransaction,
    Supplier,
    import_all_models,
)
from pharmadesk.schemas.purchase import PurchaseCreate
from pharmadesk.services.pharmacy_service import create_pharmacy
from pharmadesk.services.purchase_service import create_purchase


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a sample pharmacy with purchases.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def _expiry(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()

    with session_scope() as db:
        if args.reset:
            for model in (
                ExpiryAlert,
                StockTransaction,
                CurrentInventory,
                PurchaseItem,
                Purchase,
                Supplier,
                Medicine,
                Pharmacy,
            ):
                db.execute(delete(model))
            db.commit()

        has_pharmacy = db.execute(select(Pharmacy.id).limit(1)).first()
        if has_pharmacy:
            print("Seed skipped: a pharmacy already exists.")
            return

        pharmacy = create_pharmacy(
            db,
            "City Care Pharmacy",
            license_number="DL-2024-0001",
            city="Pune",
            state="Maharashtra",
        )
        db.commit()

        purchases = [
            {
                "supplier_name": "MedPlus Distributors",
                "invoice_number": "INV-1001",
                "items": [
                    {
                        "medicine_name": "Paracetamol 500mg",
                        "pack": "10x10",
                        "quantity": 100,
                        "expiry_date": _expiry(20),
                        "batch_number": "PCM2401",
                        "mrp": 10.5,
                        "rate": 8.5,
                    },
                    {
                        "medicine_name": "Amoxicillin 250mg",
                        "pack": "10x10",
                        "quantity": 40,
                        "expiry_date": _expiry(75),
                        "batch_number": "AMX2402",
                        "mrp": 62.0,
                        "rate": 48.0,
                    },
                ],
            },
            {
                "supplier_name": "HealthLine Pharma",
                "invoice_number": "INV-2001",
                "items": [
                    {
                        "medicine_name": "Cetirizine 10mg",
                        "quantity": 60,
                        "expiry_date": (date.today() + timedelta(days=400)).strftime("%Y-%m"),
                        "mrp": 18.0,
                        "rate": 12.0,
                    },
                ],
            },
        ]
        for payload in purchases:
            create_purchase(db, pharmacy.id, PurchaseCreate.model_validate(payload))
        print("Seed data created for pharmacy {}.".format(pharmacy.id))


if __name__ == "__main__":
    main()
