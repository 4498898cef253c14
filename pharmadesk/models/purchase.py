from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from pharmadesk.core.constants import PURCHASE_STATUS_RECEIVED
from pharmadesk.database.base import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)

    invoice_number = Column(String, nullable=False)
    invoice_date = Column(Date, nullable=False)
    purchase_date = Column(Date, nullable=False)

    # Always the sum of the live items; see services.purchase_totals.
    total_amount = Column(Float, nullable=False, default=0)
    status = Column(String, nullable=False, default=PURCHASE_STATUS_RECEIVED)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_purchases_pharmacy_date", "pharmacy_id", "purchase_date"),
    )


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)

    batch_number = Column(String, nullable=False)
    expiry_date = Column(Date, nullable=False)

    quantity = Column(Integer, nullable=False)
    free_quantity = Column(Integer, nullable=False, default=0)
    mrp = Column(Float, nullable=False, default=0)
    purchase_rate = Column(Float, nullable=False, default=0)

    discount_percentage = Column(Float, nullable=False, default=0)
    tax_percentage = Column(Float, nullable=False, default=0)
    gross_amount = Column(Float, nullable=False, default=0)
    net_amount = Column(Float, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_purchase_items_purchase", "purchase_id"),
        Index("idx_purchase_items_stock_key", "medicine_id", "batch_number", "expiry_date"),
    )


__all__ = ["Purchase", "PurchaseItem"]
