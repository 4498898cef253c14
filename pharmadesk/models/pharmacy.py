from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from pharmadesk.database.base import Base


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    license_number = Column(String, nullable=False, default="")

    address = Column(String, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    state = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    email = Column(String)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


__all__ = ["Pharmacy"]
