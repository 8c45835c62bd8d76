from pydantic import BaseModel, Field
from typing import List, Optional


class LineItem(BaseModel):
    id: str
    name: str
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)
    category: str
    image: Optional[str] = None


class SaveLocalCart(BaseModel):
    local_cart: List[LineItem]


class RemoveItemSchema(BaseModel):
    id: str


class UpdateQuantitySchema(BaseModel):
    id: str
    # zero or negative removes the line
    quantity: int


class CartView(BaseModel):
    items: List[LineItem]
    total_items: int
    total_price: float


__all__ = ["LineItem", "SaveLocalCart", "RemoveItemSchema",
           "UpdateQuantitySchema", "CartView"]
