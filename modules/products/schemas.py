from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from modules.recipes.schemas import IngredientIn


class IngredientRead(IngredientIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    raw_material_name: str
    unit: str


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = None
    price: float = Field(..., ge=0, description="Sale price")
    cost_price: float = Field(0.0, ge=0, description="Used only when manual_cost is set")
    manual_cost: bool = Field(False, description="Keep cost_price instead of the recipe rollup")
    stock: int = Field(0, ge=0)
    image: Optional[str] = None


class ProductCreate(ProductBase):
    ingredients: List[IngredientIn] = Field(default_factory=list)


class ProductUpdate(ProductCreate):
    pass


class ProductRead(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    cost_price: float
    ingredients: List[IngredientRead] = Field(default_factory=list)
