from conftest import PASSWORD, signin, signup


def test_signup_and_signin(client):
    user_id = signup(client, "Ana@Example.com", "Ana")
    signin(client, "ana@example.com")

    me = client.get("/auth/me").get_json()
    assert me["id"] == user_id
    assert me["email"] == "ana@example.com"
    assert me["name"] == "Ana"


def test_signup_rejects_duplicate_email(client):
    signup(client, "ana@example.com")
    resp = client.post("/auth/signup", json={"email": "ana@example.com", "password": PASSWORD, "name": "Ana"})
    assert resp.status_code == 409


def test_signup_validation(client):
    resp = client.post("/auth/signup", json={"email": "nope", "password": PASSWORD, "name": "Ana"})
    assert resp.status_code == 400

    resp = client.post("/auth/signup", json={"email": "ana@example.com", "password": PASSWORD, "name": " "})
    assert resp.get_json()["error"] == "Name is required"

    resp = client.post("/auth/signup", json={"email": "ana@example.com", "password": "short", "name": "Ana"})
    assert resp.status_code == 400
    assert resp.get_json()["details"]


def test_signin_with_wrong_password(client):
    signup(client, "ana@example.com")
    resp = client.post("/auth/signin", json={"email": "ana@example.com", "password": "wrongpass1"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid email or password"


def test_me_requires_session(client):
    assert client.get("/auth/me").status_code == 401


def test_signout_revokes_session(client):
    signup(client, "ana@example.com")
    headers = signin(client, "ana@example.com")

    assert client.post("/auth/signout", headers=headers).status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["database"] is True
    assert resp.headers["X-Frame-Options"] == "DENY"
