from datetime import date
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PurchaseItemCreate(BaseModel):
    medicine_name: str
    pack: Optional[str] = None
    quantity: int = 0
    # ISO date or YYYY-MM (last day of that month).
    expiry_date: str
    batch_number: Optional[str] = None
    mrp: float = 0
    purchase_rate: float = Field(
        0,
        validation_alias=AliasChoices("rate", "purchase_rate"),
    )
    amount: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True)


class PurchaseCreate(BaseModel):
    supplier_name: Optional[str] = None
    invoice_number: Optional[str] = None
    purchase_date: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("date", "purchase_date"),
    )
    items: List[PurchaseItemCreate] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class PurchaseItemUpdate(BaseModel):
    purchase_item_id: Optional[int] = None
    medicine_name: Optional[str] = None
    quantity: Optional[int] = None
    purchase_rate: Optional[float] = None
    mrp: Optional[float] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude={"purchase_item_id"}, exclude_none=True)


class PurchaseItemRead(BaseModel):
    id: int
    purchase_id: int
    medicine_id: int
    batch_number: str
    expiry_date: date
    quantity: int
    free_quantity: int
    mrp: float
    purchase_rate: float
    gross_amount: float
    net_amount: float
    medicine_name: Optional[str] = None
    generic_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PurchaseRead(BaseModel):
    id: int
    pharmacy_id: int
    supplier_id: int
    supplier_name: str
    invoice_number: str
    invoice_date: date
    purchase_date: date
    total_amount: float
    status: str
    items: List[PurchaseItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PurchaseItemDetail(PurchaseItemRead):
    purchase_date: date
    invoice_number: str
    supplier_name: str


class PurchaseLineRead(BaseModel):
    id: str
    purchase_id: int
    purchase_item_id: int
    medicine_name: str
    generic_name: str
    supplier_name: str
    batch_number: str
    quantity: int
    purchase_rate: float
    mrp: float
    expiry_date: date
    purchase_date: date
    invoice_number: str
    total_amount: float
    manufacturer: str
    strength: str
    unit_type: str
