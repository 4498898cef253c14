from typing import Optional

from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from pharmadesk.config import get_settings
from pharmadesk.core.errors import PharmacyError
from pharmadesk.database.session import get_db
from pharmadesk.models.pharmacy import Pharmacy
from pharmadesk.services.pharmacy_service import resolve_pharmacy


def get_pharmacy(
    pharmacy_header: Optional[str] = Header(None, alias=get_settings().PHARMACY_HEADER),
    pharmacy_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> Pharmacy:
    settings = get_settings()
    try:
        return resolve_pharmacy(db, pharmacy_header, pharmacy_id, settings.DEFAULT_PHARMACY_ID)
    except PharmacyError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


__all__ = ["get_db", "get_pharmacy"]
