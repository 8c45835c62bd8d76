import logging
import time
from typing import Iterable
from urllib.parse import urlencode

import httpx

from schemas.cart_schemas import LineItem
from schemas.orders_schemas import CheckoutRequest, CheckoutResponse, CheckoutResult, OrderItem
from schemas.user_schemas import SessionIdentity

logger = logging.getLogger("cumall.orders")

CREATE_ORDER_PATH = "/orders/create"
CONFIRMATION_PATH = "/checkout/success"


class OrderBackendError(Exception):
    # backend unreachable or answered with something unreadable
    pass


def generate_order_id() -> str:
    return f"ORD-{int(time.time() * 1000)}"


def format_total(total: float) -> str:
    return f"{total:.2f}"


def build_checkout_request(identity: SessionIdentity, items: Iterable[LineItem]) -> CheckoutRequest:
    # images stay on the client
    return CheckoutRequest(
        ordered_by=identity.email,
        room_number=identity.room_number,
        hall=identity.hall,
        items=[OrderItem(**item.model_dump(exclude={"image"})) for item in items],
    )


async def submit_order(client: httpx.AsyncClient, order: CheckoutRequest, token: str) -> CheckoutResponse:
    # single POST, no retry
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }
    try:
        response = await client.post(CREATE_ORDER_PATH, json=order.model_dump(), headers=headers)
    except httpx.HTTPError as e:
        raise OrderBackendError(f"Order request failed: {e}") from e
    try:
        data = CheckoutResponse.model_validate(response.json())
    except ValueError as e:
        raise OrderBackendError(
            f"Unreadable order response (HTTP {response.status_code})") from e
    if response.is_error and data.success:
        raise OrderBackendError(
            f"Order backend answered HTTP {response.status_code}")
    logger.info("Order backend answered HTTP %s success=%s",
                response.status_code, data.success)
    return data


def confirmation_url(result: CheckoutResult) -> str:
    query = urlencode({"orderId": result.order_id, "total": format_total(result.total or 0)})
    return f"{CONFIRMATION_PATH}?{query}"
