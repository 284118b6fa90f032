"""Integration tests for the Identity FastAPI endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.api.routes import router, verification_router
from protean.integrations.fastapi import register_exception_handlers
from shared.access import register_access_handlers

ROOT = {"X-Actor-Id": "root-1", "X-Actor-Type": "super_admin"}
ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Type": "admin", "X-Actor-Permissions": "order.view"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(router)
    app.include_router(verification_router)
    register_exception_handlers(app)
    register_access_handlers(app)
    return TestClient(app)


def _register(client, headers=None, **overrides):
    body = {"email": "hala@example.com", "name": "Hala"}
    body.update(overrides)
    return client.post("/accounts", json=body, headers=headers or {})


def _me(account_id):
    return {"X-Actor-Id": account_id, "X-Actor-Type": "customer"}


class TestRegistration:
    def test_customer_signs_up(self, client):
        response = _register(client)
        assert response.status_code == 201
        account_id = response.json()["account_id"]

        data = client.get(f"/accounts/{account_id}", headers=_me(account_id)).json()
        assert data["email"] == "hala@example.com"
        assert data["account_type"] == "customer"

    def test_duplicate_email_is_400(self, client):
        _register(client)
        assert _register(client, email="HALA@example.com").status_code == 400

    def test_admin_account_needs_super_admin(self, client):
        assert _register(client, account_type="admin").status_code == 403
        assert _register(client, headers=ADMIN, account_type="admin").status_code == 403
        assert _register(client, headers=ROOT, account_type="admin").status_code == 201


class TestAccountAccess:
    def test_other_customer_cannot_read_account(self, client):
        account_id = _register(client).json()["account_id"]
        response = client.get(f"/accounts/{account_id}", headers=_me("someone-else"))
        assert response.status_code == 403

    def test_admin_reads_any_account(self, client):
        account_id = _register(client).json()["account_id"]
        assert client.get(f"/accounts/{account_id}", headers=ADMIN).status_code == 200

    def test_customer_cannot_set_own_discount(self, client):
        account_id = _register(client).json()["account_id"]
        response = client.put(f"/accounts/{account_id}/profile", json={"discount_percent": 50}, headers=_me(account_id))
        assert response.status_code == 403

    def test_unknown_account_is_404(self, client):
        assert client.get("/accounts/missing", headers=ADMIN).status_code == 404


class TestPermissionEndpoints:
    def test_super_admin_grants_permission(self, client):
        admin_id = _register(client, headers=ROOT, email="ops@example.com", account_type="admin").json()["account_id"]

        response = client.post(f"/accounts/{admin_id}/permissions", json={"permission": "order.manage"}, headers=ROOT)
        assert response.status_code == 200

        holders = client.get("/accounts/permissions/order.manage", headers=ADMIN).json()["account_ids"]
        assert admin_id in holders

    def test_admin_cannot_grant(self, client):
        admin_id = _register(client, headers=ROOT, email="ops@example.com", account_type="admin").json()["account_id"]
        response = client.post(f"/accounts/{admin_id}/permissions", json={"permission": "order.manage"}, headers=ADMIN)
        assert response.status_code == 403

    def test_unknown_permission_is_400(self, client):
        admin_id = _register(client, headers=ROOT, email="ops@example.com", account_type="admin").json()["account_id"]
        response = client.post(f"/accounts/{admin_id}/permissions", json={"permission": "nope"}, headers=ROOT)
        assert response.status_code == 400

    def test_catalogue(self, client):
        permissions = client.get("/accounts/permissions", headers=ADMIN).json()["permissions"]
        assert {"code": "payout.manage", "description": "Approve and settle vendor payouts"} in permissions


class TestAddressEndpoints:
    def test_add_address(self, client):
        account_id = _register(client).json()["account_id"]
        response = client.post(
            f"/accounts/{account_id}/addresses",
            json={"street": "4 Al Seef", "city": "Dubai", "country": "UAE"},
            headers=_me(account_id),
        )
        assert response.status_code == 201

        addresses = client.get(f"/accounts/{account_id}", headers=_me(account_id)).json()["addresses"]
        assert addresses[0]["is_default"] is True


class TestPhoneVerificationEndpoints:
    def test_full_flow(self, client):
        verification_id = client.post("/phone-verifications", json={"phone": "+971501234567"}).json()[
            "verification_id"
        ]
        wrong = client.post(f"/phone-verifications/{verification_id}/verify", json={"code": "000000"})
        assert wrong.status_code == 400

        right = client.post(f"/phone-verifications/{verification_id}/verify", json={"code": "123456"})
        assert right.status_code == 200
        assert right.json()["verified"] is True

    def test_configure_fake_sender(self, client):
        response = client.post("/phone-verifications/sms/configure", json={"should_succeed": False})
        assert response.status_code == 200
        assert response.json()["sender"] == "FakeSmsSender"

        assert client.post("/phone-verifications", json={"phone": "+971501234567"}).status_code == 400
