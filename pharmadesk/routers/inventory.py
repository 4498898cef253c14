from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmadesk.dependencies import get_db, get_pharmacy
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.services.inventory_service import stock_summary

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("")
def get_inventory(
    search: Optional[str] = Query(None),
    low_stock: bool = Query(False, alias="lowStock"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    return stock_summary(
        db, pharmacy.id, search=search, low_stock=low_stock, page=page, limit=limit
    )


__all__ = ["router"]
