from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class ExpiryFilters:
    days: Optional[int] = None
    status: Optional[str] = None
    medicine_name: Optional[str] = None
    batch_number: Optional[str] = None
    supplier_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: int = 1
    limit: int = 50

    def has_specific_filters(self) -> bool:
        return any(
            (
                self.status,
                self.medicine_name,
                self.batch_number,
                self.supplier_name,
                self.start_date,
                self.end_date,
            )
        )
