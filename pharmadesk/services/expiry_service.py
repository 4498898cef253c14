import logging
import math
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from pharmadesk.config import get_settings
from pharmadesk.core.constants import (
    EXPIRED_LOOKBACK_DAYS,
    EXPIRY_STATS_WINDOWS,
    UNKNOWN_MEDICINE,
    UNKNOWN_SUPPLIER,
)
from pharmadesk.core.errors import ValidationError
from pharmadesk.core.expiry_rules import classify_expiry, describe_expiry, normalize_status
from pharmadesk.core.search import LIKE_ESCAPE, contains_pattern
from pharmadesk.models.inventory import CurrentInventory
from pharmadesk.models.medicine import Medicine
from pharmadesk.schemas.expiry import ExpiryFilters
from pharmadesk.services.supplier_resolver import resolve_supplier_names, stock_key

logger = logging.getLogger(__name__)


def _stock_query(pharmacy_id: int):
    return (
        select(
            CurrentInventory.id,
            CurrentInventory.medicine_id,
            CurrentInventory.batch_number,
            CurrentInventory.expiry_date,
            CurrentInventory.current_stock,
            CurrentInventory.last_purchase_rate,
            CurrentInventory.current_mrp,
            Medicine.name.label("medicine_name"),
        )
        .join(Medicine, Medicine.id == CurrentInventory.medicine_id)
        .where(CurrentInventory.pharmacy_id == pharmacy_id)
        .where(CurrentInventory.is_active.is_(True))
        .where(CurrentInventory.current_stock > 0)
    )


def estimated_loss(row) -> float:
    return (row["current_stock"] or 0) * (row["last_purchase_rate"] or 0)


def _value_at_risk(rows) -> float:
    return round(sum(estimated_loss(row) for row in rows), 2)


def expiry_stats(db: Session, pharmacy_id: int, today=None) -> dict:
    settings = get_settings()
    today = today or date.today()
    week_ago = today - timedelta(days=EXPIRED_LOOKBACK_DAYS)
    short_window, long_window = EXPIRY_STATS_WINDOWS
    in_short = today + timedelta(days=short_window)
    in_long = today + timedelta(days=long_window)

    rows = (
        db.execute(
            _stock_query(pharmacy_id)
            .where(CurrentInventory.expiry_date >= week_ago)
            .order_by(CurrentInventory.expiry_date, CurrentInventory.id)
        )
        .mappings()
        .all()
    )

    expired_this_week = [row for row in rows if week_ago <= row["expiry_date"] < today]
    upcoming = [row for row in rows if row["expiry_date"] >= today]
    within_short = [row for row in upcoming if row["expiry_date"] <= in_short]
    within_long = [row for row in upcoming if row["expiry_date"] <= in_long]

    recent_expiries = []
    for row in upcoming[: settings.EXPIRY_STATS_RECENT_LIMIT]:
        days, _status = classify_expiry(row["expiry_date"], today=today)
        recent_expiries.append(
            {
                "id": row["id"],
                "medicine_name": row["medicine_name"] or UNKNOWN_MEDICINE,
                "batch_number": row["batch_number"],
                "expiry_date": row["expiry_date"],
                "current_stock": row["current_stock"] or 0,
                "days_to_expiry": days,
                "supplier_name": UNKNOWN_SUPPLIER,
                "mrp": row["current_mrp"] or 0,
            }
        )

    stats = {
        "expiredThisWeek": len(expired_this_week),
        "expiringIn30Days": len(within_short),
        "expiringIn90Days": len(within_long),
        "valueAtRisk": _value_at_risk(within_long),
        "recentExpiries": recent_expiries,
    }
    logger.debug(
        "Expiry stats: %s expired, %s in 30d, %s in 90d",
        stats["expiredThisWeek"],
        stats["expiringIn30Days"],
        stats["expiringIn90Days"],
        extra={"pharmacy_id": pharmacy_id},
    )
    return stats


def _filtered_rows(db: Session, pharmacy_id: int, filters: ExpiryFilters, today: date):
    settings = get_settings()
    status = None
    if filters.status:
        status = normalize_status(filters.status)
        if status is None:
            raise ValidationError(
                "status must be one of EXPIRED, CRITICAL, WARNING, ALERT, NORMAL"
            )
    if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
        raise ValidationError("start_date must be on or before end_date")

    sql = _stock_query(pharmacy_id)
    if filters.medicine_name and filters.medicine_name.strip():
        sql = sql.where(
            Medicine.name.ilike(contains_pattern(filters.medicine_name), escape=LIKE_ESCAPE)
        )
    if filters.batch_number and filters.batch_number.strip():
        sql = sql.where(
            CurrentInventory.batch_number.ilike(
                contains_pattern(filters.batch_number), escape=LIKE_ESCAPE
            )
        )
    if filters.start_date:
        sql = sql.where(CurrentInventory.expiry_date >= filters.start_date)
    if filters.end_date:
        sql = sql.where(CurrentInventory.expiry_date <= filters.end_date)
    if not filters.has_specific_filters():
        days = filters.days if filters.days is not None else settings.EXPIRY_DEFAULT_DAYS
        sql = sql.where(CurrentInventory.expiry_date >= today).where(
            CurrentInventory.expiry_date <= today + timedelta(days=days)
        )

    rows = (
        db.execute(sql.order_by(CurrentInventory.expiry_date, CurrentInventory.id))
        .mappings()
        .all()
    )

    classified = []
    for row in rows:
        days, row_status = classify_expiry(row["expiry_date"], today=today)
        if status and row_status != status:
            continue
        classified.append((row, days, row_status))

    supplier_names = resolve_supplier_names(db, pharmacy_id, [row for row, _, _ in classified])
    supplier_query = (filters.supplier_name or "").strip().lower()

    results = []
    for row, days, row_status in classified:
        supplier_name = supplier_names.get(
            stock_key(row["medicine_id"], row["batch_number"], row["expiry_date"]),
            UNKNOWN_SUPPLIER,
        )
        if supplier_query and supplier_query not in supplier_name.lower():
            continue
        stock = row["current_stock"] or 0
        results.append(
            {
                "id": row["id"],
                "medicine_id": row["medicine_id"],
                "medicine_name": row["medicine_name"] or UNKNOWN_MEDICINE,
                "batch_number": row["batch_number"],
                "expiry_date": row["expiry_date"],
                "current_stock": stock,
                "quantity": stock,
                "days_to_expiry": days,
                "expiry_status": row_status,
                "expiry_label": describe_expiry(days),
                "estimated_loss": round(estimated_loss(row), 2),
                "supplier_name": supplier_name,
                "mrp": row["current_mrp"] or 0,
            }
        )
    return results


def filtered_expiry_rows(db: Session, pharmacy_id: int, filters: ExpiryFilters, today=None):
    """Every row matching the filters, unpaginated."""
    return _filtered_rows(db, pharmacy_id, filters, today or date.today())


def list_expiring(db: Session, pharmacy_id: int, filters: ExpiryFilters, today=None) -> dict:
    settings = get_settings()
    rows = filtered_expiry_rows(db, pharmacy_id, filters, today=today)

    page = max(filters.page or 1, 1)
    limit = min(max(filters.limit or 1, 1), settings.EXPIRY_MAX_PAGE_SIZE)
    offset = (page - 1) * limit
    total = len(rows)

    return {
        "data": rows[offset: offset + limit],
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit),
        "totalValueAtRisk": round(sum(row["estimated_loss"] for row in rows), 2),
    }


__all__ = ["estimated_loss", "expiry_stats", "filtered_expiry_rows", "list_expiring"]
