from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SupplierBase(BaseModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    gst_number: Optional[str] = None
    drug_license_number: Optional[str] = None
    credit_days: int = 0
    credit_limit: float = 0


class SupplierCreate(SupplierBase):
    pass


class SupplierRead(SupplierBase):
    id: int
    pharmacy_id: int
    name: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SupplierRename(BaseModel):
    supplier_id: Optional[int] = None
    new_name: Optional[str] = None
