from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from pharmadesk.config import get_settings
from pharmadesk.core.search import LIKE_ESCAPE, contains_pattern
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.medicine import Medicine


def stock_summary(
    db: Session,
    pharmacy_id: int,
    search=None,
    low_stock: bool = False,
    page: int = 1,
    limit: int = 50,
):
    """Active stock rolled up per medicine, ordered by medicine name."""
    total_stock = func.coalesce(func.sum(CurrentInventory.current_stock), 0)
    stock_value = func.coalesce(
        func.sum(
            CurrentInventory.current_stock
            * func.coalesce(CurrentInventory.last_purchase_rate, 0)
        ),
        0,
    )

    sql = (
        select(
            Medicine.id.label("medicine_id"),
            Medicine.name.label("medicine_name"),
            Medicine.generic_name,
            Medicine.manufacturer,
            Medicine.unit_type,
            total_stock.label("total_stock"),
            func.count(CurrentInventory.id).label("batch_count"),
            func.min(CurrentInventory.expiry_date).label("nearest_expiry"),
            stock_value.label("stock_value"),
        )
        .join(CurrentInventory, CurrentInventory.medicine_id == Medicine.id)
        .where(CurrentInventory.pharmacy_id == pharmacy_id)
        .where(CurrentInventory.is_active.is_(True))
        .group_by(
            Medicine.id,
            Medicine.name,
            Medicine.generic_name,
            Medicine.manufacturer,
            Medicine.unit_type,
        )
    )

    if search and search.strip():
        pattern = contains_pattern(search)
        sql = sql.where(
            or_(
                Medicine.name.ilike(pattern, escape=LIKE_ESCAPE),
                Medicine.generic_name.ilike(pattern, escape=LIKE_ESCAPE),
                Medicine.manufacturer.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if low_stock:
        sql = sql.having(total_stock <= get_settings().LOW_STOCK_THRESHOLD)

    offset = (max(page, 1) - 1) * limit
    rows = (
        db.execute(sql.order_by(Medicine.name, Medicine.id).offset(offset).limit(limit))
        .mappings()
        .all()
    )
    results = []
    for row in rows:
        item = dict(row)
        item["stock_value"] = round(float(item["stock_value"] or 0), 2)
        results.append(item)
    return results


__all__ = ["stock_summary"]
