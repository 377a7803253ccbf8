from core.database.models import Account
from core.security.roles import Role


# ---- health ----

def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["message"] == "FCF Motors API"


# ---- auth ----

def test_register_login_and_profile(client):
    registered = client.post("/api/auth/register", json={
        "username": "kari",
        "email": "kari@example.com",
        "password": "password123",
        "confirm_password": "password123",
    })
    assert registered.status_code == 200
    assert registered.json()["data"]["account"]["role_names"] == ["USER"]

    login = client.post("/api/auth/login", json={"username": "kari", "password": "password123"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]
    assert "session" in login.cookies

    me = client.get("/api/account/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["account"]["username"] == "kari"
    assert "password_hash" not in me.json()["data"]["account"]


def test_bad_login_is_401(client, make_account):
    make_account("kari")

    response = client.post("/api/auth/login", json={"username": "kari", "password": "nope-nope"})

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "AUTHENTICATION_REQUIRED"


def test_missing_session_is_401(client):
    response = client.get("/api/account/me")

    assert response.status_code == 401
    assert response.json()["error"] == "Authentication required"


def test_garbage_token_is_401(client):
    response = client.get("/api/account/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_forgot_and_reset_password(client, db, email, make_account):
    account = make_account("kari")

    assert client.post("/api/auth/forgot-password", json={"email": "kari@example.com"}).status_code == 200
    db.refresh(account)
    token = account.reset_token

    assert client.get(f"/api/auth/reset-password/{token}").json()["data"]["valid"] is True
    reset = client.post("/api/auth/reset-password", json={
        "token": token, "password": "brand-new-pass", "confirm_password": "brand-new-pass"
    })
    assert reset.status_code == 200
    assert client.post("/api/auth/login", json={"username": "kari", "password": "brand-new-pass"}).status_code == 200


def test_forgot_password_for_unknown_email_is_404(client):
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"


# ---- listings ----

def test_private_listing_requires_private_role(client, make_account, auth_headers):
    user = make_account("kari")
    payload = {"brand": "Volvo", "model": "V70", "price": "5000.00"}

    forbidden = client.post("/api/private/listing", json=payload, headers=auth_headers(user))
    assert forbidden.status_code == 403

    assert client.post("/api/account/me/private", headers=auth_headers(user)).status_code == 200
    created = client.post("/api/private/listing", json=payload, headers=auth_headers(user))
    assert created.status_code == 200
    assert created.json()["data"]["listing"]["seller_type"] == "PRIVATE"

    second = client.post("/api/private/listing", json=payload, headers=auth_headers(user))
    assert second.status_code == 409
    assert second.json()["error_code"] == "ALREADY_HAS_CAR"


def test_search_over_http(client, make_account, make_listing):
    make_listing(make_account("a"), price="8000.00", brand="Volvo")
    make_listing(make_account("b"), price="22000.00", brand="Tesla")

    response = client.get("/api/listings", params={"brand": "volvo"})
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["listings"][0]["brand"] == "Volvo"
    assert data["has_more"] is False

    bad = client.get("/api/listings", params={"min_price": 10, "max_price": 5})
    assert bad.status_code == 422
    assert bad.json()["error_code"] == "INVALID_REQUEST"


def test_missing_listing_is_404(client):
    response = client.get("/api/listings/4242")

    assert response.status_code == 404
    assert response.json()["details"] == {"resource": "Listing", "id": 4242}


# ---- admin ----

def test_admin_routes_require_admin(client, make_account, auth_headers):
    user = make_account("kari")
    admin = make_account("root", roles=(Role.ADMIN, Role.USER))

    assert client.get("/api/admin/users", headers=auth_headers(user)).status_code == 403

    response = client.get("/api/admin/users", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["data"]["total"] == 2


def test_admin_edits_roles(client, db, make_account, auth_headers):
    user = make_account("kari")
    admin = make_account("root", roles=(Role.ADMIN,))

    response = client.put(
        f"/api/admin/users/{user.id}", json={"roles": ["user", "dealer"]}, headers=auth_headers(admin)
    )
    assert response.json()["data"]["account"]["role_names"] == ["USER", "DEALER"]

    unknown = client.put(
        f"/api/admin/users/{user.id}", json={"roles": ["wizard"]}, headers=auth_headers(admin)
    )
    assert unknown.status_code == 422


def test_admin_deletes_user_but_not_self(client, db, make_account, make_listing, auth_headers):
    user = make_account("kari")
    make_listing(user)
    admin = make_account("root", roles=(Role.ADMIN,))

    assert client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers(admin)).status_code == 422
    assert client.delete(f"/api/admin/users/{user.id}", headers=auth_headers(admin)).status_code == 200
    assert db.query(Account).filter(Account.username == "kari").first() is None


def test_admin_plan_management_and_sweep(client, make_account, auth_headers):
    admin = make_account("root", roles=(Role.ADMIN,))
    headers = auth_headers(admin)

    created = client.post("/api/admin/plans", json={"name": "Pro", "price": "99.00", "max_featured_cars": 5}, headers=headers)
    plan_id = created.json()["data"]["plan"]["id"]

    discounted = client.post(
        f"/api/admin/plans/{plan_id}/discount", json={"percent": 50, "expiry": "2999-01-01"}, headers=headers
    )
    assert discounted.json()["data"]["plan"]["current_price"] == 49.5

    plans = client.get("/api/subscriptions/plans").json()["data"]["plans"]
    assert [p["name"] for p in plans] == ["Pro"]

    sweep = client.post("/api/admin/subscriptions/sweep", headers=headers)
    assert sweep.json()["data"] == {"renewed": 0, "expired": 0, "downgraded": 0}
