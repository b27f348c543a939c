from __future__ import annotations

from fastapi.testclient import TestClient

from platewatch.app import app
from platewatch.auth.users import authenticate, register_user

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "alice", "password": "alice123"})


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_success_voter():
    resp = client.post("/auth/login", json={"username": "alice", "password": "alice123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"] == {"username": "alice", "role": "voter", "display_name": "Alice"}


def test_login_success_admin():
    resp = client.post("/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"username": "alice", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"username": "nobody", "password": "x"})
    assert resp.status_code == 401


def test_login_rejects_empty_fields():
    resp = client.post("/auth/login", json={"username": "", "password": ""})
    assert resp.status_code == 422


def test_auth_me_when_logged_in():
    _login_user(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "alice"


def test_auth_me_not_logged_in():
    c = TestClient(app)
    assert c.get("/auth/me").status_code == 401


def test_logout():
    _login_user(client)
    resp = client.post("/auth/logout")
    assert resp.json()["status"] == "logged_out"
    assert client.get("/auth/me").status_code == 401


def test_logout_drops_guest_ballot_key():
    c = TestClient(app)
    rid = c.get("/restaurants").json()["restaurants"][0]["id"]
    c.post("/votes/overall", json={"restaurant_id": rid})
    c.post("/auth/logout")
    assert c.get("/votes/me").json()["record"]["overall_top_pick"] is None


def test_register_user():
    register_user("carol", "carol123")
    assert authenticate("carol", "carol123")["role"] == "voter"
    assert authenticate("carol", "nope") is None


# ── Public routes ────────────────────────────────────────────────────────


def test_public_routes_need_no_login():
    c = TestClient(app)
    assert c.get("/health").json() == {"status": "ok"}
    assert c.get("/leaderboard").status_code == 200
    assert c.get("/restaurants").status_code == 200
    assert c.get("/sync/status").json()["mode"] == "local"


def test_metadata():
    body = client.get("/metadata").json()
    assert body["location"] == "Albuquerque, New Mexico"
    assert body["categories"] == sorted(body["categories"])
    assert "BBQ" in body["categories"]
    assert body["restaurant_count"] == 20


def test_unknown_category_page():
    assert client.get("/leaderboard/Nope").status_code == 404
