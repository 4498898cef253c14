from datetime import date
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmadesk.core.errors import PharmacyError
from pharmadesk.dependencies import get_db, get_pharmacy
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.schemas.expiry import ExpiryFilters
from pharmadesk.services.expiry_service import expiry_stats, list_expiring
from pharmadesk.services.report_service import XLSX_MEDIA_TYPE, export_expiry_report

router = APIRouter(prefix="/expiry", tags=["Expiry"])


def expiry_filters(
    days: Optional[int] = Query(None, ge=0),
    status: Optional[str] = Query(None),
    medicine_name: Optional[str] = Query(None),
    batch_number: Optional[str] = Query(None),
    supplier_name: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1),
) -> ExpiryFilters:
    return ExpiryFilters(
        days=days,
        status=status,
        medicine_name=medicine_name,
        batch_number=batch_number,
        supplier_name=supplier_name,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/export")
def export_expiring(
    filters: ExpiryFilters = Depends(expiry_filters),
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    try:
        content = export_expiry_report(db, pharmacy.id, filters)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    filename = "expiry-report-{}.xlsx".format(date.today().isoformat())
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@router.get("")
def get_expiry(
    view: Optional[str] = Query(None, alias="type"),
    filters: ExpiryFilters = Depends(expiry_filters),
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    try:
        if view == "stats":
            return expiry_stats(db, pharmacy.id)
        return list_expiring(db, pharmacy.id, filters)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


__all__ = ["router"]
