"""
API key lifecycle and the admin-only key endpoints
"""

import asyncio
from datetime import datetime, timedelta, timezone

from app.config import settings
from app.models import ApiKey
from app.services.api_key_service import ApiKeyService

class TestApiKeyService:
    """Test cases for generating and validating keys"""

    def test_generate_format(self, db_session):
        key = asyncio.run(ApiKeyService(db_session).generate("Lab system"))

        assert key.startswith("his_")
        assert len(key) == 52
        record = db_session.query(ApiKey).one()
        assert record.owner == "Lab system"
        assert record.expires_at is None

    def test_generate_with_expiry(self, db_session):
        asyncio.run(ApiKeyService(db_session).generate("Pharmacy", expires_in_days=7))
        assert db_session.query(ApiKey).one().expires_at is not None

    def test_validate_stamps_last_used(self, db_session):
        service = ApiKeyService(db_session)
        key = asyncio.run(service.generate("Lab system"))

        assert asyncio.run(service.validate(key)) is True
        record = db_session.query(ApiKey).one()
        db_session.refresh(record)
        assert record.last_used is not None

    def test_master_key(self, db_session):
        assert asyncio.run(ApiKeyService(db_session).validate(settings.API_MASTER_KEY)) is True

    def test_unknown_key(self, db_session):
        assert asyncio.run(ApiKeyService(db_session).validate("his_" + "0" * 48)) is False
        assert asyncio.run(ApiKeyService(db_session).validate("")) is False

    def test_revoked_key(self, db_session):
        service = ApiKeyService(db_session)
        key = asyncio.run(service.generate("Lab system"))

        assert asyncio.run(service.revoke(key)) is True
        assert asyncio.run(service.validate(key)) is False
        assert asyncio.run(service.revoke(key)) is False

    def test_expired_key(self, db_session):
        db_session.add(ApiKey(
            key="his_expired",
            owner="Old integration",
            expires_at=datetime.now(timezone.utc) - timedelta(days=1),
        ))
        db_session.commit()

        assert asyncio.run(ApiKeyService(db_session).validate("his_expired")) is False

    def test_list_excludes_revoked(self, db_session):
        service = ApiKeyService(db_session)
        keep = asyncio.run(service.generate("Keep"))
        drop = asyncio.run(service.generate("Drop"))
        asyncio.run(service.revoke(drop))

        assert [k.key for k in asyncio.run(service.list_keys())] == [keep]

class TestApiKeyEndpoints:
    """Test cases for /api/keys"""

    def test_requires_session(self, client, db_session):
        assert client.get("/api/keys").status_code == 401
        assert client.post("/api/keys", json={"owner": "x"}).status_code == 401

    def test_requires_admin(self, client, doctor, auth_headers):
        response = client.get("/api/keys", headers=auth_headers(doctor))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_create_requires_owner(self, client, admin, auth_headers):
        response = client.post("/api/keys", json={}, headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Owner name is required"

    def test_create_list_revoke(self, client, admin, auth_headers):
        headers = auth_headers(admin)

        created = client.post("/api/keys", json={"owner": "Lab system", "expiresInDays": 30}, headers=headers)
        assert created.status_code == 200
        key = created.json()["api_key"]
        assert key.startswith("his_")

        # The new key opens the read-only endpoints
        assert client.get("/api/clients", headers={"x-api-key": key}).status_code == 200

        listed = client.get("/api/keys", headers=headers).json()["keys"]
        assert [k["owner"] for k in listed] == ["Lab system"]
        assert listed[0]["last_used"] is not None

        revoked = client.request("DELETE", "/api/keys", json={"apiKey": key}, headers=headers)
        assert revoked.status_code == 200
        assert client.get("/api/keys", headers=headers).json()["keys"] == []
        assert client.get("/api/clients", headers={"x-api-key": key}).status_code == 401

    def test_revoke_requires_key(self, client, admin, auth_headers):
        response = client.request("DELETE", "/api/keys", json={}, headers=auth_headers(admin))
        assert response.status_code == 400

    def test_revoke_unknown_key(self, client, admin, auth_headers):
        response = client.request("DELETE", "/api/keys", json={"apiKey": "his_missing"}, headers=auth_headers(admin))
        assert response.status_code == 404
