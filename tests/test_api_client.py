import pytest
import requests

from gardencart.client.api_client import SESSION_EXPIRED_NOTICE, ApiClient
from gardencart.client.endpoints import DiagnosisAPI, MarketplaceAPI
from gardencart.client.errors import (
    NETWORK_ERROR_MESSAGE,
    ApiNetworkError,
    ApiRequestError,
    ApiResponseError,
    SessionExpiredError,
)
from gardencart.client.navigation import Navigator
from gardencart.session_store import MemorySessionStore

from conftest import FAKE_BASE, FakeHttp, FakeResponse

USER = {"_id": "u1", "email": "rina@example.com"}


def _client(routes, path="/marketplace"):
    store = MemorySessionStore()
    http = FakeHttp(routes)
    notices = []
    nav = Navigator(path)
    api = ApiClient(store, base_url=FAKE_BASE, http=http, navigator=nav, notify=notices.append)
    return api, store, http, nav, notices


def test_bearer_header_only_when_token_present():
    api, store, http, _, _ = _client({("GET", "/marketplace/cart"): {"items": []}})
    api.get("/marketplace/cart")
    assert "Authorization" not in http.calls[-1]["headers"]

    store.set_session("tok-9", USER)
    api.get("/marketplace/cart")
    assert http.calls[-1]["headers"]["Authorization"] == "Bearer tok-9"
    assert http.calls[-1]["headers"]["Content-Type"] == "application/json"


def test_401_clears_session_notifies_and_redirects():
    api, store, _, nav, notices = _client(
        {("GET", "/auth/me"): FakeResponse(401, {"message": "Token expired"}, "Unauthorized")}
    )
    store.set_session("tok-9", USER)
    expired = []
    api.add_session_expired_listener(lambda: expired.append(True))

    with pytest.raises(SessionExpiredError) as exc:
        api.get("/auth/me")
    assert exc.value.status == 401
    assert exc.value.message == "Token expired"
    assert store.is_empty()
    assert expired == [True]
    assert notices == [SESSION_EXPIRED_NOTICE]
    assert nav.path == "/login"


def test_401_on_login_screen_does_not_redirect():
    api, store, _, nav, notices = _client(
        {("POST", "/auth/login"): FakeResponse(401, {"message": "Invalid email or password"})},
        path="/login",
    )
    with pytest.raises(SessionExpiredError):
        api.post("/auth/login", json={"email": "x", "password": "y"})
    assert nav.history == ["/login"]
    assert notices == []
    assert store.is_empty()


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/login", True),
        ("/login/", True),
        ("/register?next=/cart", True),
        ("/signup/step-2", True),
        ("/blog/login-tips", False),
        ("/loginhelp", False),
        ("/marketplace", False),
    ],
)
def test_auth_screen_matches_path_prefix(path, expected):
    assert Navigator(path).on_auth_screen() is expected


def test_401_on_page_mentioning_login_still_redirects():
    api, _, _, nav, notices = _client(
        {("GET", "/marketplace/cart"): FakeResponse(401, {"message": "expired"})},
        path="/blog/login-tips",
    )
    with pytest.raises(SessionExpiredError):
        api.get("/marketplace/cart")
    assert nav.path == "/login"
    assert len(notices) == 1


def test_error_status_carries_backend_message():
    api, *_ = _client({("POST", "/marketplace/cart/add"): FakeResponse(404, {"message": "Product not found"})})
    with pytest.raises(ApiResponseError) as exc:
        api.post("/marketplace/cart/add", json={"productId": "x", "quantity": 1})
    assert exc.value.status == 404
    assert exc.value.message == "Product not found"


def test_error_without_body_falls_back_to_reason():
    api, *_ = _client({("GET", "/marketplace/orders"): FakeResponse(503, None, "Service Unavailable")})
    with pytest.raises(ApiResponseError) as exc:
        api.get("/marketplace/orders")
    assert exc.value.message == "Service Unavailable"


def test_network_failure_is_rewritten():
    api, *_ = _client({("GET", "/marketplace/cart"): requests.exceptions.ConnectionError("refused")})
    with pytest.raises(ApiNetworkError) as exc:
        api.get("/marketplace/cart")
    assert exc.value.message == NETWORK_ERROR_MESSAGE
    assert isinstance(exc.value.cause, requests.exceptions.ConnectionError)


def test_timeout_counts_as_network_failure():
    api, *_ = _client({("GET", "/marketplace/cart"): requests.exceptions.ReadTimeout("slow")})
    with pytest.raises(ApiNetworkError):
        api.get("/marketplace/cart")


def test_request_setup_failure():
    api, *_ = _client({("GET", "/marketplace/cart"): requests.exceptions.InvalidURL("bad url")})
    with pytest.raises(ApiRequestError) as exc:
        api.get("/marketplace/cart")
    assert "bad url" in exc.value.message


def test_only_diagnosis_calls_set_a_timeout():
    api, _, http, _, _ = _client(
        {
            ("POST", "/diagnosis/identify"): {"success": True},
            ("POST", "/diagnosis/health"): {"success": True},
            ("GET", "/marketplace/cart"): {"items": []},
        }
    )
    MarketplaceAPI(api).get_cart()
    assert http.calls[-1]["timeout"] is None

    diag = DiagnosisAPI(api)
    diag.identify_plant("aGVsbG8=")
    assert http.calls[-1]["timeout"] == 30
    assert http.calls[-1]["json"] == {"imageBase64": "aGVsbG8="}
    diag.diagnose_plant_health("plant-1", "aGVsbG8=")
    assert http.calls[-1]["timeout"] == 30
    assert http.calls[-1]["json"]["plantId"] == "plant-1"
