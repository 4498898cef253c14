from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pharmadesk.core.constants import UNKNOWN_SUPPLIER
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.medicine import Medicine
from pharmadesk.models.purchase import Purchase, PurchaseItem
from pharmadesk.models.stock_transaction import StockTransaction
from pharmadesk.models.supplier import Supplier

EXPIRING_SOON_DAYS = 30
RECENT_PURCHASE_ACTIVITY = 3
RECENT_TRANSACTION_ACTIVITY = 2
ACTIVITY_LIMIT = 5


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _plural(count: int, unit: str) -> str:
    return "{} {}{} ago".format(count, unit, "s" if count > 1 else "")


def relative_time(moment: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    minutes = int((_as_utc(now) - _as_utc(moment)).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    return _plural(hours // 24, "day")


def _purchase_activity(db: Session, pharmacy_id: int):
    purchases = db.execute(
        select(Purchase.id, Purchase.created_at, Supplier.name.label("supplier_name"))
        .outerjoin(Supplier, Supplier.id == Purchase.supplier_id)
        .where(Purchase.pharmacy_id == pharmacy_id)
        .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        .limit(RECENT_PURCHASE_ACTIVITY)
    ).all()

    activity = []
    for purchase in purchases:
        items = db.execute(
            select(PurchaseItem.quantity, Medicine.name)
            .join(Medicine, Medicine.id == PurchaseItem.medicine_id)
            .where(PurchaseItem.purchase_id == purchase.id)
            .order_by(PurchaseItem.id)
        ).all()
        units = sum(row.quantity or 0 for row in items)
        first_medicine = items[0].name if items else "items"
        activity.append(
            (
                purchase.created_at,
                {
                    "id": "purchase-{}".format(purchase.id),
                    "action": "{} purchased ({} units) from {}".format(
                        first_medicine, units, purchase.supplier_name or UNKNOWN_SUPPLIER
                    ),
                    "type": "purchase",
                },
            )
        )
    return activity


def _transaction_activity(db: Session, pharmacy_id: int):
    transactions = db.execute(
        select(
            StockTransaction.id,
            StockTransaction.transaction_type,
            StockTransaction.quantity_in,
            StockTransaction.created_at,
            Medicine.name.label("medicine_name"),
        )
        .join(Medicine, Medicine.id == StockTransaction.medicine_id)
        .where(StockTransaction.pharmacy_id == pharmacy_id)
        .order_by(StockTransaction.created_at.desc(), StockTransaction.id.desc())
        .limit(RECENT_TRANSACTION_ACTIVITY)
    ).all()
    return [
        (
            row.created_at,
            {
                "id": "transaction-{}".format(row.id),
                "action": "{} stock {} ({} units)".format(
                    row.medicine_name, row.transaction_type, row.quantity_in or 0
                ),
                "type": "inventory",
            },
        )
        for row in transactions
    ]


def dashboard_stats(db: Session, pharmacy_id: int, today=None, now=None) -> dict:
    today = today or date.today()
    now = now or datetime.now(timezone.utc)

    in_stock = (
        select(CurrentInventory)
        .where(CurrentInventory.pharmacy_id == pharmacy_id)
        .where(CurrentInventory.current_stock > 0)
        .subquery()
    )
    total_medicines = db.execute(
        select(func.count(func.distinct(in_stock.c.medicine_id)))
    ).scalar_one()
    expiring_soon = db.execute(
        select(func.count())
        .select_from(in_stock)
        .where(in_stock.c.expiry_date <= today + timedelta(days=EXPIRING_SOON_DAYS))
    ).scalar_one()
    stock_value = db.execute(
        select(
            func.coalesce(
                func.sum(
                    in_stock.c.current_stock * func.coalesce(in_stock.c.last_purchase_rate, 0)
                ),
                0,
            )
        )
    ).scalar_one()
    todays_purchases = db.execute(
        select(func.coalesce(func.sum(Purchase.total_amount), 0))
        .where(Purchase.pharmacy_id == pharmacy_id)
        .where(Purchase.purchase_date == today)
    ).scalar_one()

    activity = _purchase_activity(db, pharmacy_id) + _transaction_activity(db, pharmacy_id)
    activity.sort(key=lambda entry: _as_utc(entry[0]), reverse=True)
    recent_activity = []
    for created_at, entry in activity[:ACTIVITY_LIMIT]:
        entry["time"] = relative_time(created_at, now=now)
        recent_activity.append(entry)

    return {
        "total_medicines": total_medicines or 0,
        "todays_purchases": round(float(todays_purchases or 0)),
        "expiring_soon": expiring_soon or 0,
        "stock_value": round(float(stock_value or 0)),
        "recent_activity": recent_activity,
    }


__all__ = ["dashboard_stats", "relative_time"]
