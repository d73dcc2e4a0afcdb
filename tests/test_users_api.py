import importlib

import pytest

fastapi = pytest.importorskip("fastapi")
TestClient = pytest.importorskip("fastapi.testclient").TestClient

from app.application.user_service import UserService
from app.infrastructure.db.memory_user_repository import InMemoryUserRepository
from app.infrastructure.security.auth import PasswordHasher, TokenIssuer

JANE = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane@x.com",
    "password": "secret123",
}


@pytest.fixture
def api():
    main = importlib.import_module("app.main")
    container = importlib.import_module("app.container")
    service = UserService(
        repository=InMemoryUserRepository(),
        token_issuer=TokenIssuer(secret="x" * 32),
        hasher=PasswordHasher(),
    )
    main.app.dependency_overrides[container.get_user_service] = lambda: service
    # No `with` block: the lifespan (and its database pool) never starts.
    yield TestClient(main.app), service
    main.app.dependency_overrides.clear()


def test_health(api):
    client, _ = api
    assert client.get("/health").json() == {"status": "ok"}


def test_register_then_list(api):
    client, _ = api

    created = client.post("/users", json=JANE)
    assert created.status_code == 200
    assert created.json() == {
        "status": "Success",
        "message": "User created successfully",
        "code": 201,
        "payload": None,
    }

    listed = client.get("/users").json()
    assert listed["status"] == "Success"
    assert listed["payload"] == [
        {"id": 1, "firstName": "Jane", "lastName": "Doe", "email": "jane@x.com", "role": "user"}
    ]


def test_register_missing_fields_returns_envelope(api):
    client, _ = api
    resp = client.post("/users", json={"email": "jane@x.com"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "Failure"
    assert body["code"] == 400
    assert body["message"] == "All fields are required"


def test_register_rejects_unknown_role(api):
    client, _ = api
    resp = client.post("/users", json={**JANE, "role": "root"})
    assert resp.status_code == 422


def test_register_duplicate_email(api):
    client, _ = api
    client.post("/users", json=JANE)
    body = client.post("/users", json=JANE).json()
    assert body["message"] == "User with this email already exists"


def test_login_flow(api):
    client, service = api
    client.post("/users", json=JANE)

    ok = client.post("/users/login", json={"email": "jane@x.com", "password": "secret123"}).json()
    assert ok["status"] == "Success"
    assert ok["code"] == 200
    assert service.token_issuer.decode(ok["payload"])["email"] == "jane@x.com"

    bad = client.post("/users/login", json={"email": "jane@x.com", "password": "bad"}).json()
    assert bad["message"] == "Invalid password"

    unknown = client.post("/users/login", json={"email": "no@x.com", "password": "bad"}).json()
    assert unknown["message"] == "User not found"


def test_list_empty_is_failure(api):
    client, _ = api
    body = client.get("/users").json()
    assert body["status"] == "Failure"
    assert body["message"] == "Error retrieving users"


@pytest.mark.parametrize(
    "method,expected",
    [
        ("get", "This action returns a #7 user"),
        ("patch", "This action updates a #7 user"),
        ("delete", "This action removes a #7 user"),
    ],
)
def test_single_user_routes_are_placeholders(api, method, expected):
    client, _ = api
    kwargs = {"json": {"firstName": "X"}} if method == "patch" else {}
    resp = getattr(client, method)("/users/7", **kwargs)
    assert resp.status_code == 200
    assert resp.text == expected
