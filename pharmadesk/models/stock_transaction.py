from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from pharmadesk.core.constants import TRANSACTION_TYPE_PURCHASE
from pharmadesk.database.base import Base


class StockTransaction(Base):
    __tablename__ = "stock_transactions"

    id = Column(Integer, primary_key=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    purchase_item_id = Column(Integer, ForeignKey("purchase_items.id", ondelete="CASCADE"))

    transaction_type = Column(String, nullable=False, default=TRANSACTION_TYPE_PURCHASE)
    batch_number = Column(String, nullable=False)
    expiry_date = Column(Date, nullable=False)

    quantity_in = Column(Integer, nullable=False, default=0)
    quantity_out = Column(Integer, nullable=False, default=0)
    rate = Column(Float, nullable=False, default=0)
    amount = Column(Float, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_transactions_stock_key", "medicine_id", "batch_number", "expiry_date"),
        Index("idx_transactions_owner", "purchase_item_id"),
    )


__all__ = ["StockTransaction"]
