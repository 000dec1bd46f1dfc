"""Tests for the login / register / logout pages."""

from app.core.config import get_settings
from app.models.session import UserSession
from app.models.user import User


def test_home_shows_landing_page_when_anonymous(client):
    response = client.get("/")

    assert response.status_code == 200
    assert 'href="/login"' in response.text


def test_home_redirects_logged_in_user(alice_client):
    response = alice_client.get("/", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_register_then_login(client, db):
    response = client.post(
        "/register", data={"username": "alice", "password": "pw1"}, follow_redirects=False
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert db.query(User).filter(User.username == "alice").count() == 1

    response = client.post(
        "/login", data={"username": "alice", "password": "pw1"}, follow_redirects=False
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert client.cookies.get(get_settings().session_cookie_name)

    dashboard = client.get("/dashboard")
    assert dashboard.status_code == 200
    assert "Welcome, alice!" in dashboard.text


def test_register_duplicate_username(client):
    client.post("/register", data={"username": "alice", "password": "pw1"})

    response = client.post("/register", data={"username": "alice", "password": "pw2"})

    assert response.status_code == 409
    assert "already taken" in response.text


def test_register_missing_fields(client):
    response = client.post("/register", data={"username": "alice"})

    assert response.status_code == 400
    assert "required" in response.text


def test_login_failures_are_generic(client):
    client.post("/register", data={"username": "alice", "password": "pw1"})

    wrong_password = client.post("/login", data={"username": "alice", "password": "pw2"})
    unknown_user = client.post("/login", data={"username": "mallory", "password": "pw1"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert "Invalid username or password." in wrong_password.text
    assert "Invalid username or password." in unknown_user.text
    assert client.cookies.get(get_settings().session_cookie_name) is None


def test_session_cookie_attributes(client):
    client.post("/register", data={"username": "alice", "password": "pw1"})

    response = client.post(
        "/login", data={"username": "alice", "password": "pw1"}, follow_redirects=False
    )

    cookie = response.headers["set-cookie"]
    assert "HttpOnly" in cookie
    assert "Max-Age=2592000" in cookie
    assert "Secure" not in cookie


def test_session_cookie_is_secure_in_production(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "environment", "production")
    client.post("/register", data={"username": "alice", "password": "pw1"})

    response = client.post(
        "/login", data={"username": "alice", "password": "pw1"}, follow_redirects=False
    )

    assert "Secure" in response.headers["set-cookie"]


def test_logout_destroys_session(alice_client, db):
    assert db.query(UserSession).count() == 1

    response = alice_client.get("/logout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert db.query(UserSession).count() == 0
    assert alice_client.get("/dashboard", follow_redirects=False).headers["location"] == "/login"


def test_protected_pages_redirect_to_login(client):
    for path in ["/dashboard", "/folders", "/folders/create", "/folders/1", "/upload", "/files/1"]:
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 303, path
        assert response.headers["location"] == "/login"


def test_forged_session_cookie_is_rejected(client):
    client.cookies.set(get_settings().session_cookie_name, "forged-token")

    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
