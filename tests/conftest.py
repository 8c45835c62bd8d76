import json

import httpx
import pytest

from schemas.cart_schemas import LineItem
from schemas.user_schemas import SessionIdentity
from services.auth_service import SessionIdentityProvider
from services.cart_service import CartStore
from storagemanager import MemoryStorage


class RecordingSink:
    def __init__(self):
        self.notifications = []

    def __call__(self, notification):
        self.notifications.append(notification)

    @property
    def titles(self):
        return [n.title for n in self.notifications]


class FakeOrderBackend:
    # answers through an httpx.MockTransport

    def __init__(self, status_code=200, payload=None, error=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {"success": True, "orderId": "ORD-1"}
        self.error = error
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, (bytes, str)):
            return httpx.Response(self.status_code, content=self.payload)
        return httpx.Response(self.status_code, json=self.payload)

    def client_factory(self):
        return httpx.AsyncClient(base_url="http://orders.test/api",
                                 transport=httpx.MockTransport(self.handler))

    def sent_body(self, index=0):
        return json.loads(self.requests[index].content)


def _make_item(id="p1", name="Pen", quantity=1, price=50, category="Stationery", image=None):
    return LineItem(id=id, name=name, quantity=quantity, price=price,
                    category=category, image=image)


@pytest.fixture
def identity():
    return SessionIdentity(email="student@campus.edu", roomNumber="B12",
                           hall="Daniel Hall", bearerToken="secret-token")


@pytest.fixture
def session(identity):
    return SessionIdentityProvider(identity)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def backend():
    return FakeOrderBackend()


@pytest.fixture
def store(storage, session, sink, backend):
    return CartStore(storage, identity_provider=session, notification_sink=sink,
                     client_factory=backend.client_factory)


@pytest.fixture
def make_item():
    return _make_item
