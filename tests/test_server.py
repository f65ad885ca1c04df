from decimal import Decimal

from fastapi.testclient import TestClient

from gardencart.repositories.user_repo import UserRepository, verify_password
from gardencart.server.catalogue import _normalize_entry, seed_catalogue
from gardencart.server.main import create_app, purge_expired_tokens

from conftest import GARDENER


def _client(**kwargs):
    app = create_app("sqlite://", seed=True, **kwargs)
    return app, TestClient(app)


def _register(client):
    res = client.post("/api/auth/register", json=GARDENER)
    assert res.status_code == 201
    return res.json()["data"]


def _expired_token(app):
    db = app.state.SessionLocal()
    try:
        repo = UserRepository(db)
        token = repo.issue_token(repo.get_by_email(GARDENER["email"]), ttl_seconds=-1).token
        db.commit()
    finally:
        db.close()
    return token


def test_health_ok():
    _, client = _client()
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["db"] is True


def test_register_validation_errors():
    _, client = _client()
    res = client.post("/api/auth/register", json={"email": "nope", "password": "123"})
    assert res.status_code == 400
    assert res.json() == {
        "success": False,
        "errors": [
            "Name is required",
            "Please provide a valid email",
            "Password must be at least 6 characters",
        ],
    }


def test_duplicate_email():
    _, client = _client()
    _register(client)
    res = client.post("/api/auth/register", json=GARDENER)
    assert res.status_code == 409
    assert res.json()["message"] == "User already exists with this email"


def test_passwords_are_hashed():
    app, client = _client()
    _register(client)
    db = app.state.SessionLocal()
    try:
        user = UserRepository(db).get_by_email(GARDENER["email"])
        assert user.password_hash != GARDENER["password"]
        assert verify_password(GARDENER["password"], user.password_hash)
        assert not verify_password("wrong", user.password_hash)
    finally:
        db.close()


def test_bad_login():
    _, client = _client()
    _register(client)
    res = client.post(
        "/api/auth/login", json={"email": GARDENER["email"], "password": "not-it"}
    )
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Invalid email or password"}


def test_me_requires_token():
    app, client = _client()
    data = _register(client)

    assert client.get("/api/auth/me").status_code == 401
    ok = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == GARDENER["email"]

    expired = _expired_token(app)
    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401
    assert res.json()["message"] == "Not authorized, token invalid or expired"


def test_purge_expired_tokens():
    app, client = _client()
    data = _register(client)
    _expired_token(app)

    assert purge_expired_tokens(app) == 1
    assert purge_expired_tokens(app) == 0
    # live tokens survive
    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert res.status_code == 200


def test_catalogue_listing_and_search():
    _, client = _client()
    body = client.get("/api/marketplace/products").json()
    assert body["success"] is True
    assert body["total"] == 6
    found = client.get("/api/marketplace/products", params={"q": "monstera"}).json()
    assert [p["sku"] for p in found["products"]] == ["PLANT-MONST"]
    assert client.get("/api/marketplace/products/999999").status_code == 404


def test_cart_requires_token():
    _, client = _client()
    res = client.get("/api/marketplace/cart")
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Not authorized, no token"}


def test_seed_entry_normalization():
    entry = _normalize_entry({"id": "X-1", "title": "Neem Oil", "price": "199.5", "image": "neem.jpg"})
    assert entry["sku"] == "X-1"
    assert entry["name"] == "Neem Oil"
    assert entry["price"] == Decimal("199.5")
    assert entry["images"] == ["neem.jpg"]
    assert entry["stock"] == 0


def test_seed_is_idempotent():
    app, client = _client()
    db = app.state.SessionLocal()
    try:
        n = seed_catalogue(db, [{"sku": "SEED-TOM", "name": "Tomato Seeds", "price": 99}, {"name": "no sku"}])
    finally:
        db.close()
    assert n == 1
    body = client.get("/api/marketplace/products", params={"size": 200}).json()
    assert body["total"] == 6
    tomato = next(p for p in body["products"] if p["sku"] == "SEED-TOM")
    assert Decimal(str(tomato["price"])) == 99
