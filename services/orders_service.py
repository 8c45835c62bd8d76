from datetime import datetime, timedelta, timezone
from typing import Optional

from microservices.orders_microservice import generate_order_id
from schemas.orders_schemas import OrderConfirmation
from schemas.user_schemas import SessionIdentity

DELIVERY_WINDOW = timedelta(hours=24)


def build_order_confirmation(identity: SessionIdentity, order_id: Optional[str] = None,
                             total: Optional[str] = None, now: Optional[datetime] = None) -> OrderConfirmation:
    # what the order confirmation page shows after a redirect from checkout
    now = now or datetime.now(timezone.utc)
    return OrderConfirmation(
        order_id=order_id or generate_order_id(),
        total=total or "0",
        customer_email=identity.email,
        delivery_address=f"Room {identity.room_number}, {identity.hall}",
        estimated_delivery=now + DELIVERY_WINDOW,
    )
