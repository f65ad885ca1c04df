import json

import pytest
from fastapi.testclient import TestClient

from gardencart.client.api_client import ApiClient
from gardencart.client.navigation import Navigator
from gardencart.server.main import create_app
from gardencart.services.auth_service import AuthState
from gardencart.services.cart_service import CartState
from gardencart.session_store import MemorySessionStore

TEST_BASE = "http://testserver/api"
FAKE_BASE = "http://fake/api"

GARDENER = {
    "name": "Rina Akter",
    "email": "rina@example.com",
    "password": "tulips123",
    "gardenType": "rooftop",
    "experienceLevel": "beginner",
    "location": "Dhaka",
}

ADDRESS = {
    "full_name": "Rina Akter",
    "phone": "01700000000",
    "address_line1": "House 12, Road 5",
    "city": "Dhaka",
    "district": "Dhaka",
}


class RecordingHttp:
    """Wraps a TestClient and remembers every (method, path) it was asked for."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url.split("/api", 1)[1]))
        return self.inner.request(method, url, **kwargs)

    def paths(self, method=None):
        return [p for m, p in self.calls if method is None or m == method]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self.content = b"" if payload is None else json.dumps(payload, default=str).encode()

    def json(self):
        return json.loads(self.content)


class FakeHttp:
    """
    requests-style transport driven by a route table.

    A route value is a payload dict, a FakeResponse, an exception instance
    (raised), or a callable taking the JSON body and returning any of those.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        path = url.split("/api", 1)[1]
        self.calls.append(
            {"method": method, "path": path, "headers": headers or {}, "json": json, "timeout": timeout}
        )
        handler = self.routes.get((method, path))
        if handler is None:
            return FakeResponse(404, {"message": "Not found"}, "Not Found")
        result = handler(json) if callable(handler) else handler
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(200, result)


def fake_login_routes(user_id="u1", email="rina@example.com"):
    return {
        ("POST", "/auth/login"): {
            "success": True,
            "data": {"token": "tok-123", "user": {"_id": user_id, "email": email, "name": "Rina"}},
        }
    }


def line(item_id, product_id, price, quantity, name="Item"):
    return {
        "_id": item_id,
        "product": {"_id": product_id, "name": name, "price": price, "stock": 10, "images": []},
        "quantity": quantity,
    }


@pytest.fixture
def app():
    return create_app("sqlite://", seed=True)


@pytest.fixture
def http(app):
    return RecordingHttp(TestClient(app))


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def navigator():
    return Navigator("/marketplace")


@pytest.fixture
def notices():
    return []


@pytest.fixture
def api(store, http, navigator, notices):
    return ApiClient(store, base_url=TEST_BASE, http=http, navigator=navigator, notify=notices.append)


@pytest.fixture
def auth(api):
    return AuthState(api)


@pytest.fixture
def cart(api, auth):
    return CartState(api, auth)


@pytest.fixture
def signed_in(auth):
    res = auth.register(dict(GARDENER))
    assert res.success, res.message
    return res.user


def product_id(api, sku):
    res = api.get("/marketplace/products", params={"size": 200})
    return next(p["_id"] for p in res["products"] if p["sku"] == sku)
