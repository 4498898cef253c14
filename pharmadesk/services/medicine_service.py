import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmadesk.core.constants import DEFAULT_UNIT_TYPE
from pharmadesk.core.errors import UpstreamStorageError, ValidationError
from pharmadesk.core.search import LIKE_ESCAPE, contains_pattern
from pharmadesk.models.medicine import Medicine
from pharmadesk.schemas.medicine import MedicineCreate

logger = logging.getLogger(__name__)


def list_medicines(db: Session, search=None, page: int = 1, limit: int = 50):
    sql = select(Medicine).where(Medicine.is_active.is_(True))
    if search and search.strip():
        pattern = contains_pattern(search)
        sql = sql.where(
            or_(
                Medicine.name.ilike(pattern, escape=LIKE_ESCAPE),
                Medicine.generic_name.ilike(pattern, escape=LIKE_ESCAPE),
                Medicine.manufacturer.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    sql = sql.order_by(Medicine.name, Medicine.id).offset((page - 1) * limit).limit(limit)
    return list(db.execute(sql).scalars().all())


def create_medicine(db: Session, payload: MedicineCreate) -> Medicine:
    name = (payload.name or "").strip()
    manufacturer = (payload.manufacturer or "").strip()
    if not name or not manufacturer:
        raise ValidationError("Name and manufacturer are required")

    medicine = Medicine(
        name=name,
        generic_name=(payload.generic_name or "").strip() or name,
        manufacturer=manufacturer,
        strength=payload.strength,
        pack_size=payload.pack_size,
        unit_type=payload.unit_type or DEFAULT_UNIT_TYPE,
        is_active=True,
    )
    try:
        db.add(medicine)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Medicine creation failed")
        raise UpstreamStorageError("Failed to create medicine") from exc
    db.refresh(medicine)
    return medicine
