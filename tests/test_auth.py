# tests/test_auth.py
import logging
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from bson.objectid import ObjectId
from fastapi.testclient import TestClient

from conftest import SECRET
from errors import AuthenticationFailed
from security import create_token, decode_token, hash_password, verify_password


def test_hash_and_verify_password():
    hashed = hash_password("password1", rounds=4)
    assert hashed != "password1"
    assert verify_password("password1", hashed)
    assert not verify_password("password2", hashed)


def test_hash_is_salted():
    assert hash_password("password1", rounds=4) != hash_password("password1", rounds=4)


def test_verify_against_garbage_hash():
    assert not verify_password("password1", "plain-text")


def test_token_roundtrip_claims():
    claims = decode_token(create_token("a@b.com", SECRET), SECRET)
    assert claims["authorized"] is True
    assert claims["user_id"] == "a@b.com"


def test_decode_rejects_wrong_secret():
    with pytest.raises(AuthenticationFailed):
        decode_token(create_token("a@b.com", SECRET), "other-secret")


def test_decode_rejects_expired_token():
    token = create_token("a@b.com", SECRET, expires_minutes=-1)
    with pytest.raises(AuthenticationFailed) as exc:
        decode_token(token, SECRET)
    assert exc.value.message == "Token expired"


def _forge(claims):
    claims = {"exp": datetime.now(timezone.utc) + timedelta(minutes=5), **claims}
    return {"Authorization": "Bearer " + jwt.encode(claims, SECRET, algorithm="HS256")}


def test_delete_requires_authorized_claim(client, auth_headers, product_payload):
    ids = client.post("/products", json=product_payload, headers=auth_headers).json()
    r = client.delete(f"/products/{ids[0]}", headers=_forge({"authorized": False, "user_id": "a@b.com"}))
    assert r.status_code == 403
    r = client.delete(f"/products/{ids[0]}", headers=_forge({"user_id": "a@b.com"}))
    assert r.status_code == 403
    assert client.get(f"/products/{ids[0]}").status_code == 200


def test_delete_without_token(client):
    assert client.delete(f"/products/{ObjectId()}").status_code == 401


def test_expired_token_on_protected_route(client, product_payload):
    headers = {"Authorization": "Bearer " + create_token("a@b.com", SECRET, expires_minutes=-1)}
    r = client.post("/products", json=product_payload, headers=headers)
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


def test_correlation_id_is_echoed_or_generated(client):
    r = client.get("/products", headers={"X-Request-Id": "abc123"})
    assert r.headers["X-Request-Id"] == "abc123"
    r = client.get("/products")
    assert len(r.headers["X-Request-Id"]) == 12


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "Connected"


def test_unhandled_error_is_still_logged(app, caplog):
    def boom():
        raise RuntimeError("boom")

    app.add_api_route("/boom", boom)
    caplog.set_level(logging.INFO, logger="middleware")
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/boom", headers={"X-Request-Id": "req-boom"})
    assert r.status_code == 500
    lines = [rec.getMessage() for rec in caplog.records if rec.name == "middleware"]
    assert any("req-boom" in line and "/boom" in line and " 500 " in line for line in lines)


def test_importing_main_builds_no_app():
    import main

    assert not hasattr(main, "app")
