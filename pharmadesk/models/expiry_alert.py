from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String

from pharmadesk.database.base import Base


class ExpiryAlert(Base):
    """Best-effort mirror of batch/expiry; callers tolerate the table missing."""

    __tablename__ = "expiry_alerts"

    id = Column(Integer, primary_key=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    purchase_item_id = Column(Integer, ForeignKey("purchase_items.id", ondelete="CASCADE"))

    batch_number = Column(String, nullable=False)
    expiry_date = Column(Date, nullable=False)
    alert_status = Column(String)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_expiry_alerts_stock_key", "medicine_id", "batch_number", "expiry_date"),
    )


__all__ = ["ExpiryAlert"]
