from ostsee.api.routers import auth as auth_router
from ostsee.main import app
from ostsee.services.auth.auth0 import AuthUser


class StubVerifier:
    def user_from_tokens(self, tokens):
        assert tokens == {"id_token": "x"}
        return AuthUser(sub="auth0|9", email="admin@example.org", roles=["admin"])


def test_login_sets_state_and_redirects(client):
    resp = client.get("/api/auth/login", params={"returnUrl": "/admin"}, follow_redirects=False)
    assert resp.status_code == 302
    assert "/authorize?" in resp.headers["location"]
    state = resp.cookies["csrfState"]
    assert f"state={state}" in resp.headers["location"]


def test_login_ignores_foreign_return_url(client):
    resp = client.get("/api/auth/login", params={"returnUrl": "//evil.example"}, follow_redirects=False)
    assert "returnUrl%3D%252F&" in resp.headers["location"]
    assert "evil" not in resp.headers["location"]


def test_callback_rejects_state_mismatch(client):
    client.cookies.set("csrfState", "expected")
    resp = client.get("/api/auth/callback", params={"code": "c", "state": "other"}, follow_redirects=False)
    assert resp.status_code == 403


def test_callback_sets_session(client, monkeypatch):
    monkeypatch.setattr(auth_router.auth0, "exchange_code", lambda settings, code, redirect: {"id_token": "x"})
    app.dependency_overrides[auth_router.get_token_verifier] = lambda: StubVerifier()
    client.cookies.set("csrfState", "s1")
    resp = client.get("/api/auth/callback", params={"code": "c", "state": "s1", "returnUrl": "/admin"},
                      follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/admin"
    assert "session" in resp.cookies
    assert client.get("/api/admin/me").json()["email"] == "admin@example.org"


def test_logout_clears_session(client, admin_cookies):
    for name, value in admin_cookies.items():
        client.cookies.set(name, value)
    resp = client.get("/api/auth/logout", follow_redirects=False)
    assert resp.status_code == 302
    assert "/v2/logout?" in resp.headers["location"]
