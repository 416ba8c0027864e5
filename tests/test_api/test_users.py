import json

import pytest
from fastapi.testclient import TestClient

from useraccounts.config import Settings
from useraccounts.core.dependencies import get_user_store
from useraccounts.main import create_app


def register(client: TestClient, payload: dict) -> dict:
    response = client.post("/register", json=payload)
    assert response.status_code == 201
    return response.json()["newUser"]


def test_register_then_get_user(test_client: TestClient, registration: dict):
    """A fresh registration is retrievable by id with matching fields."""
    new_user = register(test_client, registration)
    assert new_user["id"]
    assert new_user["username"] == "ana"
    assert new_user["email"] == "ana@example.com"

    response = test_client.get(f"/users/{new_user['id']}")
    assert response.status_code == 200
    assert response.json() == {"user": new_user}


def test_register_duplicate_email_conflicts(test_client: TestClient, registration: dict):
    register(test_client, registration)

    response = test_client.post("/register", json={**registration, "username": "other"})
    assert response.status_code == 409
    assert response.json() == {"error": "This email has already been registered"}


@pytest.mark.parametrize("missing", ["username", "email", "password"])
def test_register_missing_field(test_client: TestClient, registration: dict, missing: str):
    payload = {k: v for k, v in registration.items() if k != missing}
    response = test_client.post("/register", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "All fields are required"}


def test_register_empty_string_counts_as_missing(test_client: TestClient, registration: dict):
    response = test_client.post("/register", json={**registration, "password": ""})
    assert response.status_code == 400


def test_register_without_body(test_client: TestClient):
    response = test_client.post("/register")
    assert response.status_code == 400


def test_register_with_malformed_json(test_client: TestClient):
    response = test_client.post(
        "/register", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "All fields are required"}


def test_register_accepts_form_body(test_client: TestClient, registration: dict):
    response = test_client.post("/register", data=registration)
    assert response.status_code == 201
    assert response.json()["newUser"]["email"] == "ana@example.com"


def test_login_success_returns_same_user(test_client: TestClient, registration: dict):
    new_user = register(test_client, registration)

    response = test_client.post("/login", json={"email": "ana@example.com", "password": "s3cret"})
    assert response.status_code == 200
    assert response.json()["user"] == new_user


def test_login_wrong_password(test_client: TestClient, registration: dict):
    register(test_client, registration)

    response = test_client.post("/login", json={"email": "ana@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_login_unknown_email(test_client: TestClient):
    response = test_client.post("/login", json={"email": "ghost@example.com", "password": "x"})
    assert response.status_code == 401


def test_login_missing_fields(test_client: TestClient):
    response = test_client.post("/login", json={"email": "ana@example.com"})
    assert response.status_code == 400
    assert response.json() == {"error": "Please provide all required parameters"}


def test_update_unknown_user(test_client: TestClient, registration: dict):
    response = test_client.put("/users/does-not-exist", json=registration)
    assert response.status_code == 404
    assert response.json() == {"error": "No user with id does-not-exist"}


def test_update_existing_user(test_client: TestClient, registration: dict):
    new_user = register(test_client, registration)
    changes = {"username": "ana2", "email": "ana2@example.com", "password": "changed"}

    response = test_client.put(f"/users/{new_user['id']}", json=changes)
    assert response.status_code == 200
    updated = response.json()["updatedUser"]
    assert updated == {"id": new_user["id"], **changes}

    fetched = test_client.get(f"/users/{new_user['id']}").json()["user"]
    assert fetched == updated

    login = test_client.post("/login", json={"email": "ana2@example.com", "password": "changed"})
    assert login.status_code == 200


def test_update_missing_fields(test_client: TestClient, registration: dict):
    new_user = register(test_client, registration)
    response = test_client.put(f"/users/{new_user['id']}", json={"username": "only"})
    assert response.status_code == 400
    assert response.json() == {"error": "Please provide all required parameters"}


def test_delete_then_get_is_not_found(test_client: TestClient, registration: dict):
    new_user = register(test_client, registration)

    response = test_client.delete(f"/users/{new_user['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}

    response = test_client.get(f"/users/{new_user['id']}")
    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


def test_delete_unknown_user(test_client: TestClient):
    response = test_client.delete("/users/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "User does not exist"}


def test_list_users(test_client: TestClient, registration: dict):
    response = test_client.get("/users")
    assert response.status_code == 404
    assert response.json() == {"message": "No users at this time"}

    new_user = register(test_client, registration)
    response = test_client.get("/users")
    assert response.status_code == 200
    assert response.json() == {"totalUsers": 1, "allUsers": [new_user]}


def test_store_failure_returns_500(test_settings, user_store):
    """Unexpected store errors surface their message with a 500."""

    class BrokenStore(type(user_store)):
        async def find_all(self):
            raise RuntimeError("store offline")

    app = create_app(settings=test_settings, store=BrokenStore())
    with TestClient(app) as client:
        response = client.get("/users")
    assert response.status_code == 500
    assert response.json() == {"error": "store offline"}


def test_dependency_override_swaps_store(test_settings, user_store, registration):
    app = create_app(settings=test_settings)
    app.dependency_overrides[get_user_store] = lambda: user_store
    with TestClient(app) as client:
        client.post("/register", json=registration)
    assert user_store.count() == 1
    app.dependency_overrides.clear()


def test_security_headers_and_health(test_client: TestClient):
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["store"] == "memory"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_register_coerces_numbers_to_strings(test_client: TestClient):
    payload = {"username": 5, "email": "five@example.com", "password": 123}

    response = test_client.post("/register", json=payload)
    assert response.status_code == 201
    new_user = response.json()["newUser"]
    assert new_user["username"] == "5"
    assert new_user["password"] == "123"

    login = test_client.post("/login", json={"email": "five@example.com", "password": 123})
    assert login.status_code == 200
    assert login.json()["user"] == new_user


def test_register_non_string_value_is_server_error(test_client: TestClient, registration: dict):
    response = test_client.post("/register", json={**registration, "username": True})
    assert response.status_code == 500
    assert "error" in response.json()


def test_register_json_array_counts_as_empty(test_client: TestClient):
    response = test_client.post("/register", json=[1, 2])
    assert response.status_code == 400
    assert response.json() == {"error": "All fields are required"}


def test_register_ignores_non_json_content_type(test_client: TestClient, registration: dict, user_store):
    response = test_client.post(
        "/register", content=json.dumps(registration), headers={"content-type": "text/plain"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "All fields are required"}
    assert user_store.count() == 0


def test_database_backend_with_hashed_passwords(tmp_path, registration: dict):
    """The SQL store serves the full lifecycle through the app lifespan."""
    settings = Settings(
        _env_file=None,
        user_store_backend="database",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'users.db'}",
        hash_passwords=True,
        log_level="WARNING",
    )
    app = create_app(settings=settings)

    with TestClient(app) as client:
        response = client.post("/register", json=registration)
        assert response.status_code == 201
        new_user = response.json()["newUser"]
        assert new_user["password"] != registration["password"]

        login = client.post("/login", json={"email": "ana@example.com", "password": "s3cret"})
        assert login.status_code == 200
        assert login.json()["user"]["id"] == new_user["id"]

        changes = {"username": "ana2", "email": "ana2@example.com", "password": "changed"}
        response = client.put(f"/users/{new_user['id']}", json=changes)
        assert response.status_code == 200

        login = client.post("/login", json={"email": "ana2@example.com", "password": "changed"})
        assert login.status_code == 200
        old_login = client.post("/login", json={"email": "ana2@example.com", "password": "s3cret"})
        assert old_login.status_code == 401

        assert client.get("/health").json()["store"] == "database"

        response = client.delete(f"/users/{new_user['id']}")
        assert response.status_code == 200
        assert client.get(f"/users/{new_user['id']}").status_code == 404
