from typing import List, Optional

from pydantic import BaseModel, Field


class IngredientIn(BaseModel):
    raw_material_id: int
    amount: float = Field(..., ge=0, description="Amount consumed per unit of product")


class RecipePreviewRequest(BaseModel):
    ingredients: List[IngredientIn] = Field(default_factory=list)


class CostLine(BaseModel):
    raw_material_id: int
    name: str
    unit: str
    amount: float
    unit_cost: float
    line_cost: float
    cost_share_pct: float


class CostBreakdown(BaseModel):
    product_id: Optional[int] = None
    ingredient_count: int
    total_cost: float
    items: List[CostLine] = Field(default_factory=list)
