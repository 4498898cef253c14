from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from pharmadesk.core.errors import PharmacyError
from pharmadesk.dependencies import get_db, get_pharmacy
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.schemas.supplier import SupplierCreate, SupplierRead, SupplierRename
from pharmadesk.services.supplier_service import create_supplier, list_suppliers, rename_supplier

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


@router.get("", response_model=List[SupplierRead])
def get_suppliers(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    return list_suppliers(db, pharmacy.id, search=search, page=page, limit=limit)


@router.post("", response_model=SupplierRead, status_code=201)
def add_supplier(
    payload: SupplierCreate,
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    try:
        return create_supplier(db, pharmacy.id, payload)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.put("")
def update_supplier_name(
    payload: SupplierRename,
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    try:
        result = rename_supplier(db, pharmacy.id, payload.supplier_id, payload.new_name)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return {
        "supplier": SupplierRead.model_validate(result["supplier"]),
        "message": result["message"],
    }


__all__ = ["router"]
