from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MedicineCreate(BaseModel):
    name: Optional[str] = None
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    strength: Optional[str] = None
    pack_size: Optional[str] = None
    unit_type: Optional[str] = None


class MedicineRead(BaseModel):
    id: int
    name: str
    generic_name: str
    manufacturer: str
    strength: Optional[str] = None
    pack_size: Optional[str] = None
    unit_type: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
