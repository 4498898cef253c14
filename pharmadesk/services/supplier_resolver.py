from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from pharmadesk.core.constants import UNKNOWN_SUPPLIER
from pharmadesk.core.dates import normalize_date
from pharmadesk.models.purchase import Purchase, PurchaseItem
from pharmadesk.models.supplier import Supplier

# SQLite caps expression depth at 1000; each key adds one OR term.
KEY_CHUNK_SIZE = 200


def stock_key(medicine_id, batch_number, expiry_date):
    return (medicine_id, batch_number, normalize_date(expiry_date))


def _chunks(values, size):
    for start in range(0, len(values), size):
        yield values[start: start + size]


def _latest_suppliers(db: Session, pharmacy_id: int, keys, resolved: dict):
    conditions = [
        and_(
            PurchaseItem.medicine_id == medicine_id,
            PurchaseItem.batch_number == batch_number,
            PurchaseItem.expiry_date == expiry_date,
        )
        for medicine_id, batch_number, expiry_date in keys
    ]
    sql = (
        select(
            PurchaseItem.medicine_id,
            PurchaseItem.batch_number,
            PurchaseItem.expiry_date,
            Supplier.name.label("supplier_name"),
        )
        .join(Purchase, Purchase.id == PurchaseItem.purchase_id)
        .join(Supplier, Supplier.id == Purchase.supplier_id)
        .where(Purchase.pharmacy_id == pharmacy_id)
        .where(PurchaseItem.medicine_id.in_({key[0] for key in keys}))
        .where(or_(*conditions))
        .order_by(PurchaseItem.created_at.desc(), PurchaseItem.id.desc())
    )

    matched = set()
    for row in db.execute(sql).mappings():
        key = stock_key(row["medicine_id"], row["batch_number"], row["expiry_date"])
        if key in matched or key not in resolved:
            continue
        matched.add(key)
        if row["supplier_name"]:
            resolved[key] = row["supplier_name"]


def resolve_supplier_names(db: Session, pharmacy_id: int, rows):
    """Map each (medicine, batch, expiry) key to its supplier name.

    Only purchases of ``pharmacy_id`` are considered. The most recently
    created matching purchase item wins (higher id on a tie). Keys without a
    matching purchase item map to "Unknown".
    """
    keys = []
    seen = set()
    for row in rows:
        key = stock_key(row["medicine_id"], row["batch_number"], row["expiry_date"])
        if key not in seen:
            seen.add(key)
            keys.append(key)

    resolved = {key: UNKNOWN_SUPPLIER for key in keys}
    for chunk in _chunks(keys, KEY_CHUNK_SIZE):
        _latest_suppliers(db, pharmacy_id, chunk, resolved)
    return resolved


def resolve_supplier_name(
    db: Session, pharmacy_id: int, medicine_id, batch_number, expiry_date
) -> str:
    row = {"medicine_id": medicine_id, "batch_number": batch_number, "expiry_date": expiry_date}
    names = resolve_supplier_names(db, pharmacy_id, [row])
    return names[stock_key(medicine_id, batch_number, expiry_date)]


__all__ = ["resolve_supplier_name", "resolve_supplier_names", "stock_key"]
