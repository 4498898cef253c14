from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from pharmadesk.core.constants import DEFAULT_MANUFACTURER, DEFAULT_UNIT_TYPE
from pharmadesk.database.base import Base


class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    generic_name = Column(String, nullable=False, default="")
    manufacturer = Column(String, nullable=False, default=DEFAULT_MANUFACTURER)

    strength = Column(String)
    pack_size = Column(String)
    unit_type = Column(String, nullable=False, default=DEFAULT_UNIT_TYPE)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_medicines_name", "name"),
    )


__all__ = ["Medicine"]
