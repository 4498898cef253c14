import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmadesk.models.expiry_alert import ExpiryAlert
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.purchase import PurchaseItem
from pharmadesk.models.stock_transaction import StockTransaction

logger = logging.getLogger(__name__)

_REQUIRED_REFERENCE_TABLES = (PurchaseItem, CurrentInventory, StockTransaction)


def _has_reference(db: Session, model, medicine_id: int) -> bool:
    with db.begin_nested():
        row = db.execute(
            select(model.id).where(model.medicine_id == medicine_id).limit(1)
        ).first()
    return row is not None


def is_medicine_referenced(db: Session, medicine_id: int) -> bool:
    """True while any stock table still points at the medicine.

    A failed read on a required table counts as referenced, so a medicine is
    never deleted on incomplete information. expiry_alerts is optional and its
    errors are ignored.
    """
    for model in _REQUIRED_REFERENCE_TABLES:
        try:
            if _has_reference(db, model, medicine_id):
                return True
        except SQLAlchemyError:
            logger.exception(
                "Reference check on %s failed for medicine %s; keeping it.",
                model.__tablename__,
                medicine_id,
            )
            return True

    try:
        if _has_reference(db, ExpiryAlert, medicine_id):
            return True
    except SQLAlchemyError:
        logger.debug("expiry_alerts unavailable during reference check", exc_info=True)

    return False


__all__ = ["is_medicine_referenced"]
