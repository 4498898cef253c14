import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmadesk.core.errors import NotFoundError, UpstreamStorageError, ValidationError
from pharmadesk.core.search import LIKE_ESCAPE, contains_pattern
from pharmadesk.models.supplier import Supplier
from pharmadesk.schemas.supplier import SupplierCreate

logger = logging.getLogger(__name__)


def list_suppliers(db: Session, pharmacy_id: int, search=None, page: int = 1, limit: int = 50):
    sql = (
        select(Supplier)
        .where(Supplier.pharmacy_id == pharmacy_id)
        .where(Supplier.is_active.is_(True))
    )
    if search and search.strip():
        pattern = contains_pattern(search)
        sql = sql.where(
            or_(
                Supplier.name.ilike(pattern, escape=LIKE_ESCAPE),
                Supplier.contact_person.ilike(pattern, escape=LIKE_ESCAPE),
                Supplier.city.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    sql = sql.order_by(Supplier.name, Supplier.id).offset((page - 1) * limit).limit(limit)
    return list(db.execute(sql).scalars().all())


def create_supplier(db: Session, pharmacy_id: int, payload: SupplierCreate) -> Supplier:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Supplier name is required")

    values = payload.model_dump(exclude={"name"})
    supplier = Supplier(pharmacy_id=pharmacy_id, name=name, is_active=True, **values)
    try:
        db.add(supplier)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Supplier creation failed", extra={"pharmacy_id": pharmacy_id})
        raise UpstreamStorageError("Failed to create supplier") from exc
    db.refresh(supplier)
    return supplier


def rename_supplier(db: Session, pharmacy_id: int, supplier_id, new_name) -> dict:
    """Rename in place; purchases reference suppliers by id so nothing cascades."""
    new_name = (new_name or "").strip()
    if not supplier_id or not new_name:
        raise ValidationError("Supplier ID and new name are required")

    supplier = (
        db.execute(
            select(Supplier)
            .where(Supplier.id == supplier_id)
            .where(Supplier.pharmacy_id == pharmacy_id)
        )
        .scalars()
        .first()
    )
    if supplier is None:
        raise NotFoundError("Supplier not found")

    old_name = supplier.name
    try:
        supplier.name = new_name
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Supplier rename failed", extra={"pharmacy_id": pharmacy_id})
        raise UpstreamStorageError("Failed to update supplier") from exc

    db.refresh(supplier)
    logger.info("Supplier %s renamed %r -> %r", supplier.id, old_name, new_name)
    return {
        "supplier": supplier,
        "message": 'Supplier name updated from "{}" to "{}"'.format(old_name, new_name),
    }
