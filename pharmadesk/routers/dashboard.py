from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmadesk.dependencies import get_db, get_pharmacy
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.services.dashboard_service import dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats")
def get_dashboard_stats(
    db: Session = Depends(get_db),
    pharmacy: Pharmacy = Depends(get_pharmacy),
):
    return dashboard_stats(db, pharmacy.id)


__all__ = ["router"]
