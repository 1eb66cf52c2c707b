import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PurchaseItemIn(BaseModel):
    raw_material_id: int
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)


class PurchaseCreate(BaseModel):
    date: Optional[dt.date] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None
    items: List[PurchaseItemIn] = Field(default_factory=list)


class PurchaseItemRead(PurchaseItemIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    raw_material_name: str
    unit: str
    total: float


class PurchaseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    supplier: Optional[str] = None
    notes: Optional[str] = None
    total_amount: float
    items: List[PurchaseItemRead] = Field(default_factory=list)
