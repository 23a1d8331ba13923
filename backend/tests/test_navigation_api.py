import os
import time

import jwt
import pytest
from fastapi import status
from fastapi.testclient import TestClient

# Ensure required environment variables are present for module imports.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-backoffice-suite")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")

from backoffice.config import settings  # noqa: E402
from backoffice.dependencies import get_policy  # noqa: E402
from backoffice.main import app  # noqa: E402


def make_token(*role_names: str, expires_in: int = 300, **claims: object) -> str:
    payload: dict[str, object] = {
        "sub": "user-1",
        "exp": int(time.time()) + expires_in,
        "user": {
            "_id": "user-1",
            "name": "Dana",
            "email": "dana@example.com",
            "type": "employee",
            "status": "active",
            "roles": [{"_id": f"r-{name}", "name": name} for name in role_names],
        },
    }
    payload.update(claims)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def auth_headers(*role_names: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(*role_names)}"}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_capabilities_require_token(client: TestClient) -> None:
    response = client.get("/session/capabilities")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == {
        "code": "AUTH_ERROR",
        "message": "Authentication failed",
        "details": "Not authenticated",
    }


def test_capabilities_reject_bad_signature(client: TestClient) -> None:
    token = jwt.encode(
        {"sub": "user-1", "user": {"roles": []}},
        "another-secret-key-for-the-backoffice-suite",
        algorithm="HS256",
    )
    response = client.get("/session/capabilities", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["details"] == "Invalid token"


def test_capabilities_reject_expired_token(client: TestClient) -> None:
    token = make_token("ADMIN", expires_in=-60)
    response = client.get("/session/capabilities", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["details"] == "Token has expired"


def test_capabilities_reject_token_without_user_claim(client: TestClient) -> None:
    token = jwt.encode({"sub": "user-1"}, settings.secret_key, algorithm=settings.algorithm)
    response = client.get("/session/capabilities", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_capabilities_reject_malformed_user_claim(client: TestClient) -> None:
    token = make_token("SALES", user={"_id": "user-1", "type": "robot", "roles": []})
    response = client.get("/session/capabilities", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["details"] == "Invalid token payload"


def test_capabilities_for_sales(client: TestClient) -> None:
    response = client.get("/session/capabilities", headers=auth_headers("sales", "manager"))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["roles"] == ["SALES"]
    assert body["is_admin"] is False
    assert "dashboard" not in body["accessible_pages"]
    assert body["features"]["customers"]["delete"] is False
    assert body["can_view_cost_price"] is False


def test_capabilities_for_admin(client: TestClient) -> None:
    body = client.get("/session/capabilities", headers=auth_headers("Admin")).json()
    assert body["is_admin"] is True
    assert body["can_approve_expenses"] is True
    assert len(body["accessible_pages"]) == 14


def test_permission_check(client: TestClient) -> None:
    response = client.get(
        "/session/permissions/check",
        params={"page": "inventory", "feature": "inventory", "action": "add"},
        headers=auth_headers("SALES"),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"allowed": False}

    response = client.get(
        "/session/permissions/check",
        params={"page": "inventory", "feature": "inventory", "action": "view"},
        headers=auth_headers("SALES"),
    )
    assert response.json() == {"allowed": True}


def test_permission_check_without_selector_only_admits_admin(client: TestClient) -> None:
    response = client.get("/session/permissions/check", headers=auth_headers("SALES"))
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"allowed": False}

    response = client.get("/session/permissions/check", headers=auth_headers("ADMIN"))
    assert response.json() == {"allowed": True}


def test_permission_check_rejects_unknown_action(client: TestClient) -> None:
    response = client.get(
        "/session/permissions/check",
        params={"feature": "customers", "action": "approve"},
        headers=auth_headers("FINANCE"),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_navigation_for_finance(client: TestClient) -> None:
    body = client.get("/navigation", headers=auth_headers("FINANCE")).json()
    assert [item["page"] for item in body["items"]] == [
        "customers",
        "invoices",
        "expenses",
        "analytics",
        "invoiceRequests",
    ]
    assert body["items"][-1]["path"] == "/admin/invoice-requests"
    assert body["landing"] == "/admin/customers"


def test_navigation_without_roles_falls_back(client: TestClient) -> None:
    body = client.get("/navigation", headers=auth_headers("guest")).json()
    assert body["items"] == []
    assert body["landing"] == f"/admin/{settings.landing_fallback_page}"


def test_admin_index_redirects_to_landing(client: TestClient) -> None:
    response = client.get("/admin", headers=auth_headers("ADMIN"), follow_redirects=False)
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    assert response.headers["location"] == "/admin/dashboard"


def test_admin_page_allowed(client: TestClient) -> None:
    response = client.get("/admin/invoice-requests", headers=auth_headers("SALES"))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["page"] == "invoiceRequests"
    assert body["path"] == "/admin/invoice-requests"
    assert body["capabilities"]["roles"] == ["SALES"]


def test_admin_page_hidden_redirects_to_fallback(client: TestClient) -> None:
    response = client.get(
        "/admin/inventory", headers=auth_headers("FINANCE"), follow_redirects=False
    )
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    assert response.headers["location"] == f"/admin/{settings.rbac_fallback_page}"


def test_admin_fallback_page_hidden_is_forbidden(client: TestClient) -> None:
    response = client.get(
        f"/admin/{settings.rbac_fallback_page}",
        headers=auth_headers("guest"),
        follow_redirects=False,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["code"] == "PERMISSION_DENIED"


def test_admin_unknown_page(client: TestClient) -> None:
    response = client.get("/admin/payroll", headers=auth_headers("ADMIN"))
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_policy_dependency_can_be_overridden(client: TestClient) -> None:
    from backoffice.auth.policy_table import ROLE_PERMISSIONS, PolicyTable

    injected = PolicyTable(ROLE_PERMISSIONS)
    calls: list[int] = []

    def override() -> PolicyTable:
        calls.append(1)
        return injected

    app.dependency_overrides[get_policy] = override
    try:
        response = client.get("/navigation", headers=auth_headers("SALES"))
    finally:
        app.dependency_overrides.pop(get_policy, None)
    assert response.status_code == status.HTTP_200_OK
    assert calls
