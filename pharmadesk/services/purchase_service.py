import logging
import time
from datetime import date

from sqlalchemy import exists, insert, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmadesk.core.constants import (
    AUTO_BATCH_PREFIX,
    AUTO_SUPPLIER_CONTACT,
    DEFAULT_MANUFACTURER,
    DEFAULT_UNIT_TYPE,
    PURCHASE_STATUS_RECEIVED,
    TRANSACTION_TYPE_PURCHASE,
    UNKNOWN_MEDICINE,
    UNKNOWN_SUPPLIER,
)
from pharmadesk.core.dates import normalize_expiry_date
from pharmadesk.core.errors import UpstreamStorageError, ValidationError
from pharmadesk.core.expiry_rules import classify_expiry
from pharmadesk.core.search import LIKE_ESCAPE, contains_pattern
from pharmadesk.models.expiry_alert import ExpiryAlert
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.medicine import Medicine
from pharmadesk.models.purchase import Purchase, PurchaseItem
from pharmadesk.models.stock_transaction import StockTransaction
from pharmadesk.models.supplier import Supplier
from pharmadesk.schemas.purchase import PurchaseCreate
from pharmadesk.services.cascade_service import best_effort
from pharmadesk.services.purchase_totals import line_amounts, recalculate_purchase_total

logger = logging.getLogger(__name__)

RECENT_PURCHASES_LIMIT = 10


def auto_batch_number() -> str:
    return "{}{}".format(AUTO_BATCH_PREFIX, int(time.time() * 1000))


def _has_items():
    return exists().where(PurchaseItem.purchase_id == Purchase.id)


def find_or_create_supplier(db: Session, pharmacy_id: int, name: str) -> Supplier:
    supplier = (
        db.execute(
            select(Supplier)
            .where(Supplier.pharmacy_id == pharmacy_id)
            .where(Supplier.name == name)
            .order_by(Supplier.id)
        )
        .scalars()
        .first()
    )
    if supplier is None:
        supplier = Supplier(
            pharmacy_id=pharmacy_id,
            name=name,
            contact_person=AUTO_SUPPLIER_CONTACT,
            is_active=True,
        )
        db.add(supplier)
        db.flush()
        logger.info("Created supplier %r", name, extra={"pharmacy_id": pharmacy_id})
    return supplier


def find_or_create_medicine(db: Session, name: str, pack_size=None) -> Medicine:
    medicine = (
        db.execute(select(Medicine).where(Medicine.name == name).order_by(Medicine.id))
        .scalars()
        .first()
    )
    if medicine is None:
        medicine = Medicine(
            name=name,
            generic_name=name,
            manufacturer=DEFAULT_MANUFACTURER,
            unit_type=DEFAULT_UNIT_TYPE,
            pack_size=pack_size,
            is_active=True,
        )
        db.add(medicine)
        db.flush()
        logger.info("Created medicine %r", name, extra={"medicine_id": medicine.id})
    return medicine


def _validate_purchase(payload: PurchaseCreate):
    supplier_name = (payload.supplier_name or "").strip()
    invoice_number = (payload.invoice_number or "").strip()
    if not supplier_name or not invoice_number or not payload.items:
        raise ValidationError("Missing required fields")

    prepared = []
    for index, item in enumerate(payload.items, start=1):
        medicine_name = (item.medicine_name or "").strip()
        if not medicine_name:
            raise ValidationError("Item {}: medicine_name is required".format(index))
        expiry = normalize_expiry_date(item.expiry_date)
        if expiry is None:
            raise ValidationError(
                "Item {}: expiry_date must be YYYY-MM-DD or YYYY-MM".format(index)
            )
        prepared.append((item, medicine_name, expiry))
    return supplier_name, invoice_number, prepared


def _add_item(db: Session, purchase: Purchase, item, medicine_name, expiry) -> PurchaseItem:
    medicine = find_or_create_medicine(db, medicine_name, pack_size=item.pack)
    batch_number = (item.batch_number or "").strip() or auto_batch_number()
    gross, net = line_amounts(item.quantity, item.purchase_rate)
    if item.amount is not None and abs(item.amount - net) > 0.01:
        logger.warning(
            "Line amount %s for %r differs from quantity x rate %s; using %s",
            item.amount,
            medicine_name,
            net,
            net,
            extra={"purchase_id": purchase.id},
        )

    purchase_item = PurchaseItem(
        purchase_id=purchase.id,
        medicine_id=medicine.id,
        batch_number=batch_number,
        expiry_date=expiry,
        quantity=item.quantity or 0,
        free_quantity=0,
        mrp=item.mrp or 0,
        purchase_rate=item.purchase_rate or 0,
        discount_percentage=0,
        tax_percentage=0,
        gross_amount=gross,
        net_amount=net,
    )
    db.add(purchase_item)
    db.flush()

    db.add(
        CurrentInventory(
            pharmacy_id=purchase.pharmacy_id,
            medicine_id=medicine.id,
            purchase_item_id=purchase_item.id,
            batch_number=batch_number,
            expiry_date=expiry,
            current_stock=purchase_item.quantity,
            last_purchase_rate=purchase_item.purchase_rate,
            current_mrp=purchase_item.mrp,
            is_active=True,
        )
    )
    db.add(
        StockTransaction(
            pharmacy_id=purchase.pharmacy_id,
            medicine_id=medicine.id,
            purchase_item_id=purchase_item.id,
            transaction_type=TRANSACTION_TYPE_PURCHASE,
            batch_number=batch_number,
            expiry_date=expiry,
            quantity_in=purchase_item.quantity,
            rate=purchase_item.purchase_rate,
            amount=gross,
        )
    )
    db.flush()

    status = classify_expiry(expiry)[1]
    if status != "NORMAL":
        best_effort(
            db,
            "expiry alert insert",
            insert(ExpiryAlert).values(
                pharmacy_id=purchase.pharmacy_id,
                medicine_id=medicine.id,
                purchase_item_id=purchase_item.id,
                batch_number=batch_number,
                expiry_date=expiry,
                alert_status=status,
            ),
            purchase_item.id,
        )
    return purchase_item


def create_purchase(db: Session, pharmacy_id: int, payload: PurchaseCreate) -> dict:
    supplier_name, invoice_number, prepared = _validate_purchase(payload)
    purchase_date = payload.purchase_date or date.today()

    try:
        supplier = find_or_create_supplier(db, pharmacy_id, supplier_name)
        purchase = Purchase(
            pharmacy_id=pharmacy_id,
            supplier_id=supplier.id,
            invoice_number=invoice_number,
            invoice_date=purchase_date,
            purchase_date=purchase_date,
            total_amount=0,
            status=PURCHASE_STATUS_RECEIVED,
        )
        db.add(purchase)
        db.flush()

        for item, medicine_name, expiry in prepared:
            _add_item(db, purchase, item, medicine_name, expiry)

        recalculate_purchase_total(db, purchase.id)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Purchase creation failed", extra={"pharmacy_id": pharmacy_id})
        raise UpstreamStorageError("Failed to create purchase") from exc

    logger.info(
        "Purchase %s created with %s item(s)",
        purchase.id,
        len(prepared),
        extra={"pharmacy_id": pharmacy_id, "purchase_id": purchase.id},
    )
    return load_purchase(db, purchase.id)


def load_purchase(db: Session, purchase_id: int) -> dict | None:
    row = db.execute(
        select(Purchase, Supplier.name.label("supplier_name"))
        .join(Supplier, Supplier.id == Purchase.supplier_id)
        .where(Purchase.id == purchase_id)
    ).first()
    if row is None:
        return None
    purchase = row.Purchase
    db.refresh(purchase)

    items = db.execute(
        select(PurchaseItem, Medicine.name, Medicine.generic_name)
        .join(Medicine, Medicine.id == PurchaseItem.medicine_id)
        .where(PurchaseItem.purchase_id == purchase_id)
        .order_by(PurchaseItem.id)
    ).all()

    return {
        "id": purchase.id,
        "pharmacy_id": purchase.pharmacy_id,
        "supplier_id": purchase.supplier_id,
        "supplier_name": row.supplier_name,
        "invoice_number": purchase.invoice_number,
        "invoice_date": purchase.invoice_date,
        "purchase_date": purchase.purchase_date,
        "total_amount": purchase.total_amount,
        "status": purchase.status,
        "items": [
            {
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
                "medicine_name": name,
                "generic_name": generic_name,
            }
            for item, name, generic_name in items
        ],
    }


def list_purchase_lines(
    db: Session,
    pharmacy_id: int,
    *,
    medicine_name=None,
    supplier_name=None,
    batch_number=None,
    purchase_date=None,
    page: int = 1,
    limit: int = 10,
) -> list[dict]:
    """Flattened purchase lines, newest purchase first.

    Filters apply per line before pagination, so a page never comes back
    short because another line of the same purchase failed to match.
    """
    sql = (
        select(
            Purchase.id.label("purchase_id"),
            Purchase.purchase_date,
            Purchase.invoice_number,
            Purchase.total_amount,
            PurchaseItem.id.label("purchase_item_id"),
            PurchaseItem.batch_number,
            PurchaseItem.quantity,
            PurchaseItem.purchase_rate,
            PurchaseItem.mrp,
            PurchaseItem.expiry_date,
            Medicine.name.label("medicine_name"),
            Medicine.generic_name,
            Medicine.manufacturer,
            Medicine.strength,
            Medicine.unit_type,
            Supplier.name.label("supplier_name"),
        )
        .join(PurchaseItem, PurchaseItem.purchase_id == Purchase.id)
        .outerjoin(Medicine, Medicine.id == PurchaseItem.medicine_id)
        .outerjoin(Supplier, Supplier.id == Purchase.supplier_id)
        .where(Purchase.pharmacy_id == pharmacy_id)
    )
    if purchase_date is not None:
        sql = sql.where(Purchase.purchase_date == purchase_date)
    if medicine_name and medicine_name.strip():
        pattern = contains_pattern(medicine_name)
        sql = sql.where(
            or_(
                Medicine.name.ilike(pattern, escape=LIKE_ESCAPE),
                Medicine.generic_name.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if batch_number and batch_number.strip():
        sql = sql.where(
            PurchaseItem.batch_number.ilike(contains_pattern(batch_number), escape=LIKE_ESCAPE)
        )
    if supplier_name and supplier_name.strip():
        sql = sql.where(
            Supplier.name.ilike(contains_pattern(supplier_name), escape=LIKE_ESCAPE)
        )

    sql = (
        sql.order_by(Purchase.created_at.desc(), Purchase.id.desc(), PurchaseItem.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )

    results = []
    for row in db.execute(sql).mappings():
        results.append(
            {
                "id": "{}-{}".format(row["purchase_id"], row["purchase_item_id"]),
                "purchase_id": row["purchase_id"],
                "purchase_item_id": row["purchase_item_id"],
                "medicine_name": row["medicine_name"] or UNKNOWN_MEDICINE,
                "generic_name": row["generic_name"] or "",
                "supplier_name": row["supplier_name"] or UNKNOWN_SUPPLIER,
                "batch_number": row["batch_number"] or "",
                "quantity": row["quantity"] or 0,
                "purchase_rate": row["purchase_rate"] or 0,
                "mrp": row["mrp"] or 0,
                "expiry_date": row["expiry_date"],
                "purchase_date": row["purchase_date"],
                "invoice_number": row["invoice_number"],
                "total_amount": row["total_amount"],
                "manufacturer": row["manufacturer"] or "",
                "strength": row["strength"] or "",
                "unit_type": row["unit_type"] or "",
            }
        )
    logger.debug(
        "Purchase search returned %s line(s)", len(results), extra={"pharmacy_id": pharmacy_id}
    )
    return results


def purchase_stats(db: Session, pharmacy_id: int, today=None) -> dict:
    today = today or date.today()
    month_start = today.replace(day=1)

    live = (
        select(Purchase.id, Purchase.supplier_id, Purchase.purchase_date, Purchase.total_amount)
        .where(Purchase.pharmacy_id == pharmacy_id)
        .where(_has_items())
    )
    purchases = db.execute(live).all()

    todays_total = sum(p.total_amount or 0 for p in purchases if p.purchase_date == today)
    month_total = sum(
        p.total_amount or 0 for p in purchases if month_start <= p.purchase_date <= today
    )
    suppliers = {p.supplier_id for p in purchases}

    recent = db.execute(
        select(Purchase, Supplier.name.label("supplier_name"))
        .outerjoin(Supplier, Supplier.id == Purchase.supplier_id)
        .where(Purchase.pharmacy_id == pharmacy_id)
        .where(_has_items())
        .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        .limit(RECENT_PURCHASES_LIMIT)
    ).all()

    items_by_purchase: dict[int, list] = {}
    recent_ids = [row.Purchase.id for row in recent]
    if recent_ids:
        item_rows = db.execute(
            select(PurchaseItem, Medicine.name.label("medicine_name"))
            .outerjoin(Medicine, Medicine.id == PurchaseItem.medicine_id)
            .where(PurchaseItem.purchase_id.in_(recent_ids))
            .order_by(PurchaseItem.id)
        ).all()
        for item, medicine_name in item_rows:
            items_by_purchase.setdefault(item.purchase_id, []).append((item, medicine_name))

    recent_purchases = []
    for row in recent:
        purchase = row.Purchase
        items = items_by_purchase.get(purchase.id, [])
        first_item, first_name = items[0] if items else (None, None)
        recent_purchases.append(
            {
                "id": purchase.id,
                "medicine_name": first_name or "Multiple Items",
                "supplier": row.supplier_name or UNKNOWN_SUPPLIER,
                "quantity": sum(item.quantity or 0 for item, _ in items),
                "rate": first_item.purchase_rate if first_item else 0,
                "mrp": first_item.mrp if first_item else 0,
                "expiry_date": first_item.expiry_date if first_item else None,
                "total": purchase.total_amount or 0,
                "purchase_date": purchase.purchase_date,
                "items_count": len(items),
            }
        )

    return {
        "todaysPurchases": round(todays_total, 2),
        "thisMonth": round(month_total, 2),
        "totalEntries": len(purchases),
        "differentSuppliers": len(suppliers),
        "recentPurchases": recent_purchases,
    }


__all__ = [
    "auto_batch_number",
    "create_purchase",
    "find_or_create_medicine",
    "find_or_create_supplier",
    "list_purchase_lines",
    "load_purchase",
    "purchase_stats",
]
