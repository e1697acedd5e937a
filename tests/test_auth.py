from fastapi.testclient import TestClient

from app.main import create_app
from tests.helpers import login, make_settings, register


def test_register_returns_user_without_password(client):
    r = register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    user = body["user"]
    assert user["_id"].startswith("u_")
    assert user["email"] == "alice@depot.test"
    assert user["empId"] == "E100"
    assert user["role"] == "truck-driver"
    assert "password" not in user
    assert "passwordHash" not in user


def test_register_role_defaults_to_employee(client):
    r = client.post("/register", json={"name": "A", "email": "a@x.com", "password": "p", "empId": "E1"})
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "employee"


def test_register_duplicate_email_is_case_insensitive(client):
    first = register(client, email="dup@depot.test")
    second = register(client, email="DUP@Depot.Test", emp_id="E101")
    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"success": False, "message": "Email already registered"}


def test_register_missing_fields(client):
    r = client.post("/register", json={})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["errors"] == ["name required", "email required", "password required", "empId required"]


def test_register_empty_string_counts_as_missing(client):
    r = register(client, password="")
    assert r.status_code == 400
    assert r.json()["errors"] == ["password required"]


def test_register_accepts_form_encoded_body(client):
    r = client.post(
        "/register",
        data={"name": "Form User", "email": "form@depot.test", "password": "pw", "empId": "E900"},
    )
    assert r.status_code == 201
    assert r.json()["user"]["name"] == "Form User"


def test_register_malformed_json(client):
    r = client.post("/register", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Malformed JSON body"}


def test_login_success_stamps_last_login(client):
    register(client)
    r = login(client)
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["email"] == "alice@depot.test"
    assert user["lastLogin"] is not None


def test_login_email_is_case_insensitive(client):
    register(client)
    r = login(client, email="ALICE@depot.test")
    assert r.status_code == 200


def test_login_wrong_password_and_unknown_email_look_the_same(client):
    register(client)
    wrong_password = login(client, password="nope")
    unknown_email = login(client, email="nobody@depot.test")
    for r in (wrong_password, unknown_email):
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Invalid credentials"}


def test_login_missing_fields(client):
    r = client.post("/login", json={"email": "alice@depot.test"})
    assert r.status_code == 400
    assert r.json()["errors"] == ["password required"]


def test_login_rejects_employee_without_password(client, store):
    # created through the admin path: no credential stored
    client.post("/employees", json={"name": "Bob", "email": "bob@depot.test", "empId": "E200"})
    r = login(client, email="bob@depot.test", password="anything")
    assert r.status_code == 400


def test_register_login_list_end_to_end(client):
    r = client.post("/register", json={"name": "A", "email": "a@x.com", "password": "p", "empId": "E1"})
    assert r.status_code == 201
    assert "password" not in r.json()["user"]

    r = client.post("/login", json={"email": "a@x.com", "password": "p"})
    assert r.status_code == 200
    assert r.json()["user"]["lastLogin"]

    r = client.get("/employees")
    assert r.status_code == 200
    emails = [e["email"] for e in r.json()["employees"]]
    assert emails == ["a@x.com"]


def test_logout_acknowledges(client):
    r = client.post("/logout")
    assert r.status_code == 200
    assert r.json() == {"success": True}


def test_logout_stamps_last_logout(client, store):
    user_id = register(client).json()["user"]["_id"]
    r = client.post("/logout", json={"userId": user_id})
    assert r.status_code == 200
    assert store.get_employee(user_id).last_logout is not None


def test_logout_unknown_user_still_acknowledges(client):
    r = client.post("/logout", json={"userId": "u_missing"})
    assert r.status_code == 200


def test_external_auth_register_and_login(tmp_path, store):
    settings = make_settings(tmp_path, AUTH_MODE="external")
    client = TestClient(create_app(settings, store=store))

    r = client.post("/register", json={"name": "Ext", "email": "ext@depot.test", "empId": "E500", "role": "depot-employee"})
    assert r.status_code == 201
    user_id = r.json()["user"]["_id"]
    assert store.get_employee(user_id).password_hash is None

    r = client.post("/login", json={"userId": user_id})
    assert r.status_code == 200
    assert r.json()["user"]["lastLogin"] is not None

    r = client.post("/login", json={"email": "EXT@depot.test"})
    assert r.status_code == 200


def test_external_auth_login_unknown_user(tmp_path, store):
    settings = make_settings(tmp_path, AUTH_MODE="external")
    client = TestClient(create_app(settings, store=store))

    r = client.post("/login", json={"userId": "u_missing"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid credentials"

    r = client.post("/login", json={})
    assert r.status_code == 400
    assert r.json()["message"] == "userId or email required"


def test_numeric_password_registers_and_logs_in(client):
    r = client.post("/register", json={"name": "A", "email": "a@x.com", "password": 1234, "empId": "E1"})
    assert r.status_code == 201
    r = client.post("/login", json={"email": "a@x.com", "password": 1234})
    assert r.status_code == 200
    assert r.json()["user"]["lastLogin"] is not None


def test_register_rejects_form_body_that_is_not_utf8(client):
    r = client.post(
        "/register",
        content=b"name=\xff\xfe&email=a",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Malformed form body"}


def test_logout_without_store_still_acknowledges(settings):
    client = TestClient(create_app(settings))
    r = client.post("/logout", json={"userId": "u_123"})
    assert r.status_code == 200
    assert r.json() == {"success": True}


def test_client_errors_are_logged(client, caplog):
    with caplog.at_level("INFO", logger="app.core.errors"):
        client.post("/login", json={"email": "nobody@depot.test", "password": "x"})
        client.post("/register", json={})
    messages = [rec.getMessage() for rec in caplog.records if rec.name == "app.core.errors"]
    assert any("POST /login -> 400" in m for m in messages)
    assert any("POST /register -> 400" in m and "name required" in m for m in messages)
