import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from pharmadesk.models.purchase import Purchase, PurchaseItem

logger = logging.getLogger(__name__)


def _money(value) -> float:
    return round(float(value or 0), 2)


def line_amounts(quantity, purchase_rate, discount_percentage=0, tax_percentage=0):
    """Return ``(gross, net)`` for one line; discount and tax are % of gross."""
    gross = (quantity or 0) * (purchase_rate or 0)
    discount = gross * (discount_percentage or 0) / 100
    tax = gross * (tax_percentage or 0) / 100
    return _money(gross), _money(gross - discount + tax)


def item_amount(item) -> float:
    net_amount = getattr(item, "net_amount", None)
    if net_amount:
        return float(net_amount)
    return float((item.quantity or 0) * (item.purchase_rate or 0))


def purchase_total(items) -> float:
    return _money(sum(item_amount(item) for item in items))


def recalculate_purchase_total(db: Session, purchase_id: int):
    """Persist the purchase total from its live items.

    A purchase without items is deleted and None is returned.
    """
    db.flush()
    items = (
        db.execute(
            select(
                PurchaseItem.quantity,
                PurchaseItem.purchase_rate,
                PurchaseItem.net_amount,
            ).where(PurchaseItem.purchase_id == purchase_id)
        )
        .all()
    )
    if not items:
        db.execute(delete(Purchase).where(Purchase.id == purchase_id))
        logger.info("Purchase %s has no items left; removed.", purchase_id)
        return None

    total = purchase_total(items)
    db.execute(
        update(Purchase).where(Purchase.id == purchase_id).values(total_amount=total)
    )
    return total


__all__ = ["item_amount", "line_amounts", "purchase_total", "recalculate_purchase_total"]
