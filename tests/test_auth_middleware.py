# tests/test_auth_middleware.py
import base64
import json

from jose import jwt

from conftest import auth_header


def _b64(data: dict | bytes) -> str:
    raw = data if isinstance(data, bytes) else json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def test_unsigned_manager_token_is_rejected(client, customer):
    # Three base64 segments with a bogus signature, claiming manager role
    header = _b64({"alg": "HS256", "typ": "JWT"})
    payload = _b64({"userId": customer.id, "email": customer.email, "role": "manager"})
    token = f"{header}.{payload}.{_b64(b'manager-token-signature')}"

    response = client.get(
        "/api/products/users",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid or expired token"}


def test_token_signed_with_other_secret_is_rejected(client, manager):
    token = jwt.encode(
        {"sub": str(manager.id), "email": manager.email},
        "not-the-secret",
        algorithm="HS256",
    )
    response = client.get(
        "/api/products/users",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


def test_role_claim_in_signed_token_is_ignored(client, customer):
    # Even a correctly signed token cannot grant a role the DB does not have
    token = jwt.encode(
        {"sub": str(customer.id), "email": customer.email, "role": "manager"},
        "test-secret",
        algorithm="HS256",
    )
    response = client.get(
        "/api/products/users",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Manager access required"


def test_manager_endpoint_requires_token(client):
    response = client.get("/api/products/orders")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_manager_token_is_accepted(client, manager_headers):
    response = client.get("/api/products/orders", headers=manager_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "orders": []}


def test_token_for_deleted_user_is_rejected(client, session, customer):
    headers = auth_header(customer)
    session.delete(customer)
    session.commit()

    response = client.get("/api/auth/profile", headers=headers)
    assert response.status_code == 401


def test_disabled_account_is_rejected(client, session, customer, customer_headers):
    customer.status = "disabled"
    session.add(customer)
    session.commit()

    response = client.get("/api/auth/profile", headers=customer_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Account is disabled"
