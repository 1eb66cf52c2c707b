from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RawMaterialBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    unit: str = Field(..., min_length=1, max_length=32, description="e.g. kg, L, pcs")
    stock: float = Field(0.0, ge=0)
    unit_cost: float = Field(0.0, ge=0)
    supplier: Optional[str] = None


class RawMaterialCreate(RawMaterialBase):
    pass


class RawMaterialUpdate(RawMaterialBase):
    pass


class RawMaterialRead(RawMaterialBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    # Consumption may push stock below zero in backorder mode
    stock: float
