from datetime import date, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmadesk.database.base import Base
from pharmadesk.database.engine import configure_sqlite
from pharmadesk.models import import_all_models
from pharmadesk.schemas.purchase import PurchaseCreate
from pharmadesk.services.pharmacy_service import create_pharmacy
from pharmadesk.services.purchase_service import create_purchase


def memory_session_factory(*, skip_tables=()):
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine, memory=True)
    import_all_models()
    tables = [table for table in Base.metadata.sorted_tables if table.name not in skip_tables]
    Base.metadata.create_all(bind=engine, tables=tables)
    return engine, sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def seed_pharmacy(db, name="Test Pharmacy"):
    pharmacy = create_pharmacy(db, name)
    db.commit()
    return pharmacy


def expiry_in(days, today=None):
    return ((today or date.today()) + timedelta(days=days)).isoformat()


def make_purchase(db, pharmacy_id, items, supplier_name="Acme Pharma", invoice_number="INV-1"):
    payload = PurchaseCreate.model_validate(
        {
            "supplier_name": supplier_name,
            "invoice_number": invoice_number,
            "items": items,
        }
    )
    return create_purchase(db, pharmacy_id, payload)
