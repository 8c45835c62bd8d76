import asyncio
import logging
from typing import Callable, Iterable, List, Optional

import httpx
from fastapi import HTTPException, Request
from pydantic import TypeAdapter

from config import settings
from microservices.notification_microservice import NotificationSink, notify
from microservices.orders_microservice import OrderBackendError, build_checkout_request, generate_order_id, submit_order
from schemas.cart_schemas import CartView, LineItem
from schemas.notification_schemas import Severity
from schemas.orders_schemas import CheckoutReason, CheckoutResult
from schemas.user_schemas import SessionIdentity

logger = logging.getLogger("cumall.cart")

cart_adapter = TypeAdapter(List[LineItem])

IdentityProvider = Callable[[], Optional[SessionIdentity]]
ClientFactory = Callable[[], httpx.AsyncClient]


def default_client_factory() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=settings.orders_api_url,
                             timeout=settings.checkout_timeout)


def serialize_cart(items: Iterable[LineItem]) -> str:
    return cart_adapter.dump_json(list(items), exclude_none=True).decode("utf-8")


class CartStore:
    # one line per product id, saved after every change. re-adding an id only
    # adds quantity, the rest of the line stays as first added

    def __init__(self, storage, identity_provider: IdentityProvider,
                 notification_sink: NotificationSink,
                 client_factory: ClientFactory = default_client_factory,
                 storage_key: str = settings.cart_storage_key):
        self.storage = storage
        self.storage_key = storage_key
        self.identity_provider = identity_provider
        self.notification_sink = notification_sink
        self.client_factory = client_factory
        self._checkout_lock = asyncio.Lock()
        self._items: List[LineItem] = self._hydrate()

    def _hydrate(self) -> List[LineItem]:
        # an unreadable saved cart counts as an empty one
        try:
            raw = self.storage.get(self.storage_key)
            if raw is None:
                return []
            saved = cart_adapter.validate_json(raw)
        except (ValueError, OSError) as e:
            logger.warning("Ignoring saved cart under %r: %s", self.storage_key, e)
            return []
        items: List[LineItem] = []
        for item in saved:
            existing = next((i for i in items if i.id == item.id), None)
            if existing:
                existing.quantity += item.quantity
            else:
                items.append(item)
        logger.debug("Hydrated %d cart lines", len(items))
        return items

    def _persist(self):
        # memory stays authoritative when the write fails
        try:
            self.storage.set(self.storage_key, serialize_cart(self._items))
        except OSError:
            logger.exception("Could not save cart under %r", self.storage_key)

    def _find(self, id: str) -> Optional[LineItem]:
        return next((item for item in self._items if item.id == id), None)

    def _notify(self, title: str, description: str, severity: Severity = Severity.DEFAULT):
        notify(self.notification_sink, title, description, severity)

    def _accumulate(self, item: LineItem) -> LineItem:
        existing = self._find(item.id)
        if existing:
            existing.quantity += item.quantity
            return existing
        line = item.model_copy()
        self._items.append(line)
        return line

    @property
    def items(self) -> List[LineItem]:
        return [item.model_copy() for item in self._items]

    @property
    def checkout_in_progress(self) -> bool:
        return self._checkout_lock.locked()

    def add_item(self, item: LineItem) -> LineItem:
        is_new = self._find(item.id) is None
        line = self._accumulate(item)
        self._persist()
        if is_new:
            self._notify("Added to Cart", f"{line.name} added to your cart")
        else:
            self._notify("Cart Updated", f"{line.name} quantity increased to {line.quantity}")
        return line.model_copy()

    def merge_items(self, items: Iterable[LineItem]) -> int:
        # hands a previously saved cart over to this one
        merged = 0
        for item in items:
            self._accumulate(item)
            merged += 1
        if merged:
            self._persist()
            self._notify("Cart Updated", f"{merged} saved items merged into your cart")
        return merged

    def remove_item(self, id: str) -> bool:
        line = self._find(id)
        if line is None:
            return False
        self._items = [item for item in self._items if item.id != id]
        self._persist()
        self._notify("Removed from Cart", f"{line.name} removed from your cart")
        return True

    def update_quantity(self, id: str, quantity: int) -> bool:
        if quantity <= 0:
            return self.remove_item(id)
        line = self._find(id)
        if line is None:
            return False
        line.quantity = quantity
        self._persist()
        return True

    def clear_cart(self):
        self._items = []
        self._persist()
        self._notify("Cart Cleared", "All items have been removed from your cart")

    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def total_price(self) -> float:
        return sum(item.price * item.quantity for item in self._items)

    def view(self) -> CartView:
        return CartView(items=self.items, total_items=self.total_items(),
                        total_price=self.total_price())

    def _fail(self, reason: CheckoutReason, title: str, message: str) -> CheckoutResult:
        self._notify(title, message, Severity.DESTRUCTIVE)
        return CheckoutResult(success=False, reason=reason, message=message)

    async def checkout(self) -> CheckoutResult:
        if self._checkout_lock.locked():
            # a second submission would order the same items twice
            return self._fail(CheckoutReason.IN_PROGRESS, "Checkout In Progress",
                              "Your order is already being placed")
        async with self._checkout_lock:
            return await self._checkout()

    async def _checkout(self) -> CheckoutResult:
        identity = self.identity_provider()
        if identity is None or not identity.token:
            return self._fail(CheckoutReason.UNAUTHENTICATED, "Authentication Required",
                              "Please login to complete your order")
        if not self._items:
            return self._fail(CheckoutReason.EMPTY_CART, "Empty Cart", "Your cart is empty")

        order = build_checkout_request(identity, self._items)
        total = self.total_price()
        logger.info("Submitting order for %s with %d lines", identity.email, len(order.items))
        try:
            async with self.client_factory() as client:
                response = await submit_order(client, order, identity.token)
        except OrderBackendError as e:
            logger.warning("Checkout failed for %s: %s", identity.email, e)
            return self._fail(CheckoutReason.TRANSPORT, "Checkout Error",
                              "An error occurred during checkout. Please try again.")

        if not response.success:
            logger.info("Order rejected for %s: %s", identity.email, response.message)
            return self._fail(CheckoutReason.REJECTED, "Checkout Failed",
                              response.message or "Could not complete your order")

        order_id = response.orderId or generate_order_id()
        self.clear_cart()
        self._notify("Order Placed Successfully", "Thank you for your purchase!")
        return CheckoutResult(success=True, reason=CheckoutReason.OK,
                              order_id=order_id, total=total)


def get_cart_store(request: Request) -> CartStore:
    store = getattr(request.app.state, "cart_store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="CartStore is not configured")
    return store
