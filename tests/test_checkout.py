import asyncio

import httpx
import pytest

from microservices.orders_microservice import confirmation_url
from schemas.orders_schemas import CheckoutReason
from services.auth_service import SessionIdentityProvider
from services.cart_service import CartStore
from storagemanager import MemoryStorage


@pytest.mark.asyncio
async def test_checkout_without_identity(storage, sink, backend, make_item):
    store = CartStore(storage, identity_provider=SessionIdentityProvider(),
                      notification_sink=sink, client_factory=backend.client_factory)
    store.add_item(make_item())

    result = await store.checkout()

    assert result.success is False
    assert not result
    assert result.reason == CheckoutReason.UNAUTHENTICATED
    assert backend.requests == []
    assert len(store.items) == 1
    assert sink.titles[-1] == "Authentication Required"


@pytest.mark.asyncio
async def test_checkout_empty_cart(store, sink, backend):
    result = await store.checkout()

    assert result.reason == CheckoutReason.EMPTY_CART
    assert backend.requests == []
    assert sink.titles[-1] == "Empty Cart"


@pytest.mark.asyncio
async def test_checkout_success(store, storage, sink, backend, make_item):
    store.add_item(make_item(quantity=1, price=100))

    result = await store.checkout()

    assert result.success is True
    assert result.order_id == "ORD-1"
    assert result.total == 100
    assert store.items == []
    assert storage.get("cart") == "[]"
    assert sink.titles[-2:] == ["Cart Cleared", "Order Placed Successfully"]
    assert confirmation_url(result) == "/checkout/success?orderId=ORD-1&total=100.00"


@pytest.mark.asyncio
async def test_checkout_sends_order_once(store, backend, make_item):
    store.add_item(make_item(id="p1", quantity=2, price=50, image="https://img.test/pen.png"))
    store.add_item(make_item(id="p2", name="Book", quantity=1, price=300, category="Books"))

    await store.checkout()

    assert len(backend.requests) == 1
    request = backend.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/orders/create"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert backend.sent_body() == {
        "ordered_by": "student@campus.edu",
        "state": 0,
        "room_number": "B12",
        "hall": "Daniel Hall",
        "items": [
            {"id": "p1", "name": "Pen", "quantity": 2, "price": 50, "category": "Stationery"},
            {"id": "p2", "name": "Book", "quantity": 1, "price": 300, "category": "Books"},
        ],
    }


@pytest.mark.asyncio
async def test_checkout_generates_order_id_when_missing(store, backend, make_item):
    backend.payload = {"success": True}
    store.add_item(make_item())

    result = await store.checkout()

    assert result.success is True
    assert result.order_id.startswith("ORD-")


@pytest.mark.asyncio
async def test_checkout_rejected_keeps_cart(store, sink, backend, make_item):
    backend.status_code = 400
    backend.payload = {"success": False, "message": "Pen is out of stock"}
    store.add_item(make_item(quantity=2))
    before = store.items

    result = await store.checkout()

    assert result.reason == CheckoutReason.REJECTED
    assert result.message == "Pen is out of stock"
    assert store.items == before
    assert sink.notifications[-1].description == "Pen is out of stock"
    assert sink.notifications[-1].severity.value == "destructive"


@pytest.mark.asyncio
async def test_checkout_rejected_without_message(store, backend, make_item):
    backend.payload = {"success": False}
    store.add_item(make_item())

    result = await store.checkout()

    assert result.message == "Could not complete your order"


@pytest.mark.asyncio
async def test_checkout_network_error_keeps_cart(store, sink, backend, make_item):
    backend.error = httpx.ConnectError("connection refused")
    store.add_item(make_item(quantity=1, price=100))
    before = store.items

    result = await store.checkout()

    assert result.success is False
    assert result.reason == CheckoutReason.TRANSPORT
    assert store.items == before
    assert sink.titles[-1] == "Checkout Error"


@pytest.mark.asyncio
async def test_checkout_timeout_is_transport_failure(store, backend, make_item):
    backend.error = httpx.ReadTimeout("timed out")
    store.add_item(make_item())

    result = await store.checkout()

    assert result.reason == CheckoutReason.TRANSPORT
    assert len(store.items) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, payload", [
    (502, b"<html>Bad Gateway</html>"),
    (200, b"not json"),
    (200, [1, 2, 3]),
    (500, {"success": True, "orderId": "ORD-5"}),
])
async def test_checkout_malformed_response(store, backend, make_item, status_code, payload):
    backend.status_code = status_code
    backend.payload = payload
    store.add_item(make_item())

    result = await store.checkout()

    assert result.reason == CheckoutReason.TRANSPORT
    assert len(store.items) == 1


@pytest.mark.asyncio
async def test_store_usable_after_failure(store, backend, make_item):
    backend.error = httpx.ConnectError("offline")
    store.add_item(make_item())
    assert not await store.checkout()

    backend.error = None
    result = await store.checkout()

    assert result.success is True
    assert len(backend.requests) == 2


@pytest.mark.asyncio
async def test_second_checkout_rejected_while_in_flight(storage, session, sink, make_item):
    started = asyncio.Event()
    release = asyncio.Event()
    calls = []

    async def slow_backend(request):
        calls.append(request)
        started.set()
        await release.wait()
        return httpx.Response(200, json={"success": True, "orderId": "ORD-9"})

    def client_factory():
        return httpx.AsyncClient(base_url="http://orders.test/api",
                                 transport=httpx.MockTransport(slow_backend))

    store = CartStore(storage, identity_provider=session, notification_sink=sink,
                      client_factory=client_factory)
    store.add_item(make_item())

    first = asyncio.create_task(store.checkout())
    await started.wait()
    assert store.checkout_in_progress

    second = await store.checkout()
    assert second.reason == CheckoutReason.IN_PROGRESS

    release.set()
    result = await first

    assert result.order_id == "ORD-9"
    assert len(calls) == 1
    assert not store.checkout_in_progress


class FullDiskStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.full = False

    def set(self, key, value):
        if self.full:
            raise OSError("disk full")
        super().set(key, value)


@pytest.mark.asyncio
async def test_checkout_accepted_when_cart_cannot_be_saved(session, sink, backend, make_item):
    storage = FullDiskStorage()
    store = CartStore(storage, identity_provider=session, notification_sink=sink,
                      client_factory=backend.client_factory)
    store.add_item(make_item(quantity=1, price=100))
    storage.full = True

    result = await store.checkout()

    assert result.success is True
    assert result.order_id == "ORD-1"
    assert store.items == []
    assert len(backend.requests) == 1
    assert sink.titles[-1] == "Order Placed Successfully"


@pytest.mark.asyncio
async def test_checkout_accepts_numeric_order_id(store, backend, make_item):
    backend.payload = {"success": True, "orderId": 12345}
    store.add_item(make_item(quantity=1, price=100))

    result = await store.checkout()

    assert result.success is True
    assert result.order_id == "12345"
    assert store.items == []
    assert confirmation_url(result) == "/checkout/success?orderId=12345&total=100.00"
