from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from pharmadesk.core.errors import PharmacyError
from pharmadesk.dependencies import get_db, get_pharmacy
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.schemas.purchase import (
    PurchaseCreate,
    PurchaseItemDetail,
    PurchaseItemUpdate,
    PurchaseLineRead,
    PurchaseRead,
)
from pharmadesk.services.cascade_service import delete_purchase_item, update_purchase_item
from pharmadesk.services.purchase_service import (
    create_purchase,
    list_purchase_lines,
    purchase_stats,
)

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.get("/stats")
def get_purchase_stats(
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    return purchase_stats(db, pharmacy.id)


@router.get("", response_model=List[PurchaseLineRead])
def list_purchases(
    medicine_name: Optional[str] = Query(None),
    supplier_name: Optional[str] = Query(None),
    batch_number: Optional[str] = Query(None),
    purchase_date: Optional[date] = Query(None, alias="date"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    return list_purchase_lines(
        db,
        pharmacy.id,
        medicine_name=medicine_name,
        supplier_name=supplier_name,
        batch_number=batch_number,
        purchase_date=purchase_date,
        page=page,
        limit=limit,
    )


@router.post("", response_model=PurchaseRead, status_code=201)
def add_purchase(
    payload: PurchaseCreate,
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    try:
        return create_purchase(db, pharmacy.id, payload)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.put("", response_model=PurchaseItemDetail)
def edit_purchase_item(
    payload: PurchaseItemUpdate,
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    if payload.purchase_item_id is None:
        raise HTTPException(status_code=400, detail="Purchase item ID is required")
    try:
        return update_purchase_item(db, pharmacy.id, payload.purchase_item_id, payload.changes())
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.delete("")
def remove_purchase_item(
    purchase_item_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    if purchase_item_id is None:
        raise HTTPException(status_code=400, detail="Purchase item ID is required")
    try:
        return delete_purchase_item(db, pharmacy.id, purchase_item_id)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


__all__ = ["router"]
