from sqlalchemy import select
from sqlalchemy.orm import Session

from pharmadesk.core.errors import NotFoundError, ValidationError
from pharmadesk.models.pharmacy import Pharmacy


def parse_pharmacy_id(value):
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValidationError("pharmacy id must be an integer.")


def get_pharmacy(db: Session, pharmacy_id) -> Pharmacy:
    pharmacy_id = parse_pharmacy_id(pharmacy_id)
    if pharmacy_id is None:
        raise NotFoundError("No pharmacy selected. Pass a pharmacy id or configure a default.")
    pharmacy = (
        db.execute(
            select(Pharmacy)
            .where(Pharmacy.id == pharmacy_id)
            .where(Pharmacy.is_active.is_(True))
        )
        .scalars()
        .first()
    )
    if pharmacy is None:
        raise NotFoundError("Pharmacy not found")
    return pharmacy


def resolve_pharmacy(db: Session, *candidates) -> Pharmacy:
    """First non-empty candidate wins (header, query, configured default)."""
    for candidate in candidates:
        pharmacy_id = parse_pharmacy_id(candidate)
        if pharmacy_id is not None:
            return get_pharmacy(db, pharmacy_id)
    return get_pharmacy(db, None)


def create_pharmacy(db: Session, name: str, **fields) -> Pharmacy:
    pharmacy = Pharmacy(name=name, is_active=True, **fields)
    db.add(pharmacy)
    db.flush()
    return pharmacy
