from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String

from pharmadesk.database.base import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id"), nullable=False)

    name = Column(String, nullable=False)
    contact_person = Column(String)
    phone = Column(String)
    email = Column(String)

    address = Column(String)
    city = Column(String)
    state = Column(String)
    pincode = Column(String)

    gst_number = Column(String)
    drug_license_number = Column(String)
    credit_days = Column(Integer, nullable=False, default=0)
    credit_limit = Column(Float, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_suppliers_pharmacy_name", "pharmacy_id", "name"),
    )


__all__ = ["Supplier"]
