"""Keeps purchase items and their denormalised stock rows consistent.

Every purchase item owns one current_inventory row, one stock_transactions
row and, optionally, one expiry_alerts row. Rows written before owner tracking
carry no ``purchase_item_id`` and are matched on the stock key
``(medicine_id, batch_number, expiry_date)`` as it was before the change.

Both entry points run inside the caller's session and commit once. A storage
failure rolls everything back and surfaces as ``UpstreamStorageError``.
expiry_alerts statements run in savepoints and only log when they fail.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmadesk.core.dates import normalize_expiry_date
from pharmadesk.core.errors import NotFoundError, UpstreamStorageError, ValidationError
from pharmadesk.core.expiry_rules import classify_expiry
from pharmadesk.models.expiry_alert import ExpiryAlert
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.medicine import Medicine
from pharmadesk.models.purchase import Purchase, PurchaseItem
from pharmadesk.models.stock_transaction import StockTransaction
from pharmadesk.services.medicine_references import is_medicine_referenced
from pharmadesk.services.purchase_totals import line_amounts, recalculate_purchase_total
from pharmadesk.services.supplier_resolver import resolve_supplier_name

logger = logging.getLogger(__name__)

ITEM_FIELDS = ("quantity", "purchase_rate", "mrp", "batch_number", "expiry_date")
FINANCIAL_FIELDS = ("quantity", "purchase_rate", "mrp")

_INVENTORY_FIELD_MAP = {
    "batch_number": "batch_number",
    "expiry_date": "expiry_date",
    "quantity": "current_stock",
    "purchase_rate": "last_purchase_rate",
    "mrp": "current_mrp",
}
_TRANSACTION_FIELD_MAP = {
    "batch_number": "batch_number",
    "expiry_date": "expiry_date",
    "quantity": "quantity_in",
    "purchase_rate": "rate",
}


def owned_rows_clause(model, pharmacy_id, item_id, medicine_id, batch_number, expiry_date):
    """Rows owned by the item, or the pharmacy's unowned rows on the given stock key."""
    return and_(
        model.medicine_id == medicine_id,
        or_(
            model.purchase_item_id == item_id,
            and_(
                model.purchase_item_id.is_(None),
                model.pharmacy_id == pharmacy_id,
                model.batch_number == batch_number,
                model.expiry_date == expiry_date,
            ),
        ),
    )


def best_effort(db: Session, action: str, statement, item_id) -> bool:
    try:
        with db.begin_nested():
            db.execute(statement)
    except SQLAlchemyError:
        logger.warning(
            "Skipped %s for purchase item %s",
            action,
            item_id,
            exc_info=True,
            extra={"purchase_item_id": item_id},
        )
        return False
    return True


def _load_scoped_item(db: Session, pharmacy_id: int, item_id: int) -> PurchaseItem:
    item = (
        db.execute(
            select(PurchaseItem)
            .join(Purchase, Purchase.id == PurchaseItem.purchase_id)
            .where(PurchaseItem.id == item_id)
            .where(Purchase.pharmacy_id == pharmacy_id)
        )
        .scalars()
        .first()
    )
    if item is None:
        raise NotFoundError("Purchase item not found")
    return item


def _clean_changes(changes: dict) -> dict:
    cleaned = {key: value for key, value in changes.items() if value is not None}
    if "expiry_date" in cleaned:
        expiry = normalize_expiry_date(cleaned["expiry_date"])
        if expiry is None:
            raise ValidationError("expiry_date must be YYYY-MM-DD or YYYY-MM")
        cleaned["expiry_date"] = expiry
    if "medicine_name" in cleaned:
        name = str(cleaned["medicine_name"]).strip()
        if name:
            cleaned["medicine_name"] = name
        else:
            cleaned.pop("medicine_name")
    return cleaned


def _mapped(fields: dict, field_map: dict) -> dict:
    return {field_map[key]: value for key, value in fields.items() if key in field_map}


def build_item_detail(db: Session, item: PurchaseItem) -> dict:
    row = db.execute(
        select(
            Medicine.name,
            Medicine.generic_name,
            Purchase.pharmacy_id,
            Purchase.purchase_date,
            Purchase.invoice_number,
        )
        .select_from(PurchaseItem)
        .join(Purchase, Purchase.id == PurchaseItem.purchase_id)
        .join(Medicine, Medicine.id == PurchaseItem.medicine_id)
        .where(PurchaseItem.id == item.id)
    ).one()
    return {
        "id": item.id,
        "purchase_id": item.purchase_id,
        "medicine_id": item.medicine_id,
        "batch_number": item.batch_number,
        "expiry_date": item.expiry_date,
        "quantity": item.quantity,
        "free_quantity": item.free_quantity,
        "mrp": item.mrp,
        "purchase_rate": item.purchase_rate,
        "gross_amount": item.gross_amount,
        "net_amount": item.net_amount,
        "medicine_name": row.name,
        "generic_name": row.generic_name,
        "purchase_date": row.purchase_date,
        "invoice_number": row.invoice_number,
        "supplier_name": resolve_supplier_name(
            db, row.pharmacy_id, item.medicine_id, item.batch_number, item.expiry_date
        ),
    }


def _propagate_update(
    db: Session, pharmacy_id: int, item: PurchaseItem, old_batch, old_expiry, fields: dict
):
    inventory_values = _mapped(fields, _INVENTORY_FIELD_MAP)
    if inventory_values:
        db.execute(
            update(CurrentInventory)
            .where(
                owned_rows_clause(
                    CurrentInventory,
                    pharmacy_id,
                    item.id,
                    item.medicine_id,
                    old_batch,
                    old_expiry,
                )
            )
            .values(**inventory_values)
            .execution_options(synchronize_session=False)
        )

    transaction_values = _mapped(fields, _TRANSACTION_FIELD_MAP)
    if "quantity" in fields or "purchase_rate" in fields:
        # item already carries the merged new-or-old values
        transaction_values["amount"] = round(
            (item.quantity or 0) * (item.purchase_rate or 0), 2
        )
    if transaction_values:
        db.execute(
            update(StockTransaction)
            .where(
                owned_rows_clause(
                    StockTransaction,
                    pharmacy_id,
                    item.id,
                    item.medicine_id,
                    old_batch,
                    old_expiry,
                )
            )
            .values(**transaction_values)
            .execution_options(synchronize_session=False)
        )

    if "batch_number" in fields or "expiry_date" in fields:
        alert_values = {}
        if "batch_number" in fields:
            alert_values["batch_number"] = fields["batch_number"]
        if "expiry_date" in fields:
            alert_values["expiry_date"] = fields["expiry_date"]
            alert_values["alert_status"] = classify_expiry(fields["expiry_date"])[1]
        best_effort(
            db,
            "expiry alert update",
            update(ExpiryAlert)
            .where(
                owned_rows_clause(
                    ExpiryAlert, pharmacy_id, item.id, item.medicine_id, old_batch, old_expiry
                )
            )
            .values(**alert_values)
            .execution_options(synchronize_session=False),
            item.id,
        )


def update_purchase_item(db: Session, pharmacy_id: int, item_id: int, changes: dict) -> dict:
    changes = _clean_changes(changes)
    try:
        item = _load_scoped_item(db, pharmacy_id, item_id)
        old_batch = item.batch_number
        old_expiry = item.expiry_date

        medicine_name = changes.get("medicine_name")
        if medicine_name:
            db.execute(
                update(Medicine)
                .where(Medicine.id == item.medicine_id)
                .values(
                    name=medicine_name,
                    generic_name=medicine_name,
                    updated_at=datetime.now(timezone.utc),
                )
            )

        fields = {key: changes[key] for key in ITEM_FIELDS if key in changes}
        if fields:
            for key, value in fields.items():
                setattr(item, key, value)
            if "quantity" in fields or "purchase_rate" in fields:
                item.gross_amount, item.net_amount = line_amounts(
                    item.quantity,
                    item.purchase_rate,
                    item.discount_percentage,
                    item.tax_percentage,
                )
            db.flush()
            _propagate_update(db, pharmacy_id, item, old_batch, old_expiry, fields)

        if any(key in fields for key in FINANCIAL_FIELDS):
            recalculate_purchase_total(db, item.purchase_id)

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Purchase item update failed", extra={"purchase_item_id": item_id}
        )
        raise UpstreamStorageError("Failed to update purchase item") from exc

    logger.info(
        "Purchase item %s updated (%s)",
        item_id,
        ", ".join(sorted(changes)) or "no changes",
        extra={"pharmacy_id": pharmacy_id, "purchase_item_id": item_id},
    )
    db.refresh(item)
    return build_item_detail(db, item)


def delete_purchase_item(db: Session, pharmacy_id: int, item_id: int) -> dict:
    try:
        item = _load_scoped_item(db, pharmacy_id, item_id)
        purchase_id = item.purchase_id
        medicine_id = item.medicine_id
        batch_number = item.batch_number
        expiry_date = item.expiry_date

        db.execute(
            delete(PurchaseItem)
            .where(PurchaseItem.id == item_id)
            .execution_options(synchronize_session=False)
        )
        db.expunge(item)

        for model in (CurrentInventory, StockTransaction):
            db.execute(
                delete(model)
                .where(
                    owned_rows_clause(
                        model, pharmacy_id, item_id, medicine_id, batch_number, expiry_date
                    )
                )
                .execution_options(synchronize_session=False)
            )
        best_effort(
            db,
            "expiry alert delete",
            delete(ExpiryAlert)
            .where(
                owned_rows_clause(
                    ExpiryAlert, pharmacy_id, item_id, medicine_id, batch_number, expiry_date
                )
            )
            .execution_options(synchronize_session=False),
            item_id,
        )

        medicine_deleted = False
        if not is_medicine_referenced(db, medicine_id):
            db.execute(delete(Medicine).where(Medicine.id == medicine_id))
            medicine_deleted = True

        remaining_total = recalculate_purchase_total(db, purchase_id)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Purchase item delete failed", extra={"purchase_item_id": item_id}
        )
        raise UpstreamStorageError("Failed to delete purchase item") from exc

    purchase_deleted = remaining_total is None
    logger.info(
        "Purchase item %s deleted (purchase removed=%s, medicine removed=%s)",
        item_id,
        purchase_deleted,
        medicine_deleted,
        extra={"pharmacy_id": pharmacy_id, "purchase_item_id": item_id},
    )
    return {
        "success": True,
        "purchase_deleted": purchase_deleted,
        "medicine_deleted": medicine_deleted,
    }


__all__ = [
    "best_effort",
    "build_item_detail",
    "delete_purchase_item",
    "owned_rows_clause",
    "update_purchase_item",
]
