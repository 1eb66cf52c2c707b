from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CartLine(BaseModel):
    product_id: int = Field(..., validation_alias=AliasChoices("productId", "product_id"))
    quantity: int = Field(..., gt=0)


class CheckoutRequest(BaseModel):
    discount: Optional[float] = Field(0.0, ge=0)
    tax: Optional[float] = Field(0.0, ge=0)
    payment_method: Optional[str] = None
    cashier_name: Optional[str] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    items: List[CartLine] = Field(default_factory=list)


class CheckoutResponse(BaseModel):
    message: str
    transactionId: int


class TransactionItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    cost_price: float
    total_price: float
    profit: float


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: datetime
    subtotal: float
    discount: float
    tax: float
    total: float
    profit: float
    payment_method: str
    cashier_name: str
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    items: List[TransactionItemRead] = Field(default_factory=list)
