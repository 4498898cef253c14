from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from pharmadesk.database.base import Base


class CurrentInventory(Base):
    __tablename__ = "current_inventory"

    id = Column(Integer, primary_key=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    # NULL for rows that predate owner tracking; those match on the stock key.
    purchase_item_id = Column(Integer, ForeignKey("purchase_items.id", ondelete="CASCADE"))

    batch_number = Column(String, nullable=False)
    expiry_date = Column(Date, nullable=False)

    current_stock = Column(Integer, nullable=False, default=0)
    last_purchase_rate = Column(Float, nullable=False, default=0)
    current_mrp = Column(Float, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_inventory_stock_key", "medicine_id", "batch_number", "expiry_date"),
        Index("idx_inventory_pharmacy_expiry", "pharmacy_id", "expiry_date"),
        Index("idx_inventory_owner", "purchase_item_id"),
    )


__all__ = ["CurrentInventory"]
