from datetime import datetime
from enum import Enum
from pydantic import BaseModel, field_validator
from typing import List, Optional, Union


# order state the backend expects for a freshly placed order
INITIAL_ORDER_STATE = 0


class OrderItem(BaseModel):
    id: str
    name: str
    quantity: int
    price: float
    category: str


class CheckoutRequest(BaseModel):
    ordered_by: str
    state: int = INITIAL_ORDER_STATE
    room_number: str
    hall: str
    items: List[OrderItem]


class CheckoutResponse(BaseModel):
    success: bool
    orderId: Optional[Union[str, int]] = None
    message: Optional[str] = None

    @field_validator("orderId")
    @classmethod
    def order_id_as_text(cls, value):
        # some backends hand out numeric ids
        return None if value is None else str(value)


class CheckoutReason(str, Enum):
    OK = "ok"
    UNAUTHENTICATED = "unauthenticated"
    EMPTY_CART = "empty_cart"
    IN_PROGRESS = "in_progress"
    REJECTED = "rejected"
    TRANSPORT = "transport"


class CheckoutResult(BaseModel):
    success: bool
    reason: CheckoutReason
    order_id: Optional[str] = None
    total: Optional[float] = None
    message: Optional[str] = None

    def __bool__(self):
        return self.success


class OrderConfirmation(BaseModel):
    order_id: str
    total: str
    customer_email: str
    delivery_address: str
    estimated_delivery: datetime


__all__ = ["INITIAL_ORDER_STATE", "OrderItem", "CheckoutRequest", "CheckoutResponse",
           "CheckoutReason", "CheckoutResult", "OrderConfirmation"]
