from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from pharmadesk.core.errors import PharmacyError
from pharmadesk.dependencies import get_db, get_pharmacy
from pharmadesk.schemas.medicine import MedicineCreate, MedicineRead
from pharmadesk.services.medicine_service import create_medicine, list_medicines

# Medicines are a shared catalogue; the scope check only rejects unknown pharmacies.
router = APIRouter(prefix="/medicines", tags=["Medicines"], dependencies=[Depends(get_pharmacy)])


@router.get("", response_model=List[MedicineRead])
def get_medicines(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return list_medicines(db, search=search, page=page, limit=limit)


@router.post("", response_model=MedicineRead, status_code=201)
def add_medicine(payload: MedicineCreate, db: Session = Depends(get_db)):
    try:
        return create_medicine(db, payload)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


__all__ = ["router"]
