"""
Client actions and the read-only client REST endpoints
"""

import asyncio
from datetime import date

import pytest

from app.actions import client_actions
from app.models import Client, ProgramEnrollment
from app.schemas.common import ErrorCode
from app.services.activity_logger import ActivityLogger
from app.config import settings

MASTER_KEY = settings.API_MASTER_KEY

def new_client(**overrides):
    form = {
        "first_name": "Grace",
        "last_name": "Achieng",
        "date_of_birth": "1985-02-11",
        "gender": "female",
        "national_id": "30112233",
        "phone": "0722000111",
        "email": "grace@example.com",
        "address": "Kisumu",
    }
    form.update(overrides)
    return form

class TestClientActions:
    """Test cases for client server actions"""

    def test_create_client(self, db_session, nurse):
        result = asyncio.run(client_actions.create_client(nurse, db_session, new_client()))

        assert result.success is True
        assert result.message == "Client registered successfully"
        assert result.data.first_name == "Grace"
        assert result.data.date_of_birth == date(1985, 2, 11)
        assert result.data.created_by_id == nurse.id

    def test_create_client_validation(self, db_session, doctor):
        result = asyncio.run(client_actions.create_client(
            doctor, db_session, new_client(first_name="  ", gender="unknown")
        ))

        assert result.success is False
        assert result.code == ErrorCode.VALIDATION_ERROR
        assert result.details["first_name"] == ["First name is required"]
        assert "gender" in result.details
        assert db_session.query(Client).count() == 0

    def test_blank_optional_fields_stored_as_null(self, db_session, doctor):
        result = asyncio.run(client_actions.create_client(doctor, db_session, new_client(email="", phone=" ")))

        assert result.success is True
        assert result.data.email is None
        assert result.data.phone is None

    def test_get_client_with_enrollments(self, db_session, doctor, make_client, make_program):
        record = make_client()
        program = make_program()
        db_session.add(ProgramEnrollment(
            client_id=record.id, program_id=program.id, enrollment_date=date(2024, 1, 5), status="active"
        ))
        db_session.commit()

        result = asyncio.run(client_actions.get_client(doctor, db_session, record.id))

        assert result.success is True
        assert result.data["client"].id == record.id
        assert [e.program_name for e in result.data["enrollments"]] == ["HIV Care"]

    def test_get_client_not_found(self, db_session, doctor):
        result = asyncio.run(client_actions.get_client(doctor, db_session, 404))

        assert result.code == ErrorCode.NOT_FOUND
        assert result.http_status == 404

    def test_get_clients_listing(self, db_session, nurse, make_client):
        for i in range(12):
            make_client(f"Client{i}", "Listing")

        result = asyncio.run(client_actions.get_clients(nurse, db_session, page=2, page_size=5))

        assert len(result.data) == 5
        assert result.meta.total_records == 12
        assert result.meta.total_pages == 3
        assert result.meta.search_tier is None

    def test_get_clients_search(self, db_session, nurse, make_client):
        make_client("Alice", "Smith", phone="0712345678")
        make_client("Bob", "Jones")

        result = asyncio.run(client_actions.get_clients(nurse, db_session, search="0712345678"))

        assert [c.first_name for c in result.data] == ["Alice"]
        assert result.meta.search_tier == "numeric"
        assert result.meta.total_records == 1

    def test_update_client(self, db_session, nurse, make_client):
        record = make_client()
        version = record.version

        result = asyncio.run(client_actions.update_client(nurse, db_session, record.id, {"phone": "0733000999"}))

        assert result.success is True
        assert result.data.phone == "0733000999"
        assert result.data.first_name == "Alice"
        assert result.data.version == version + 1

    def test_update_client_rejects_null_required_field(self, db_session, nurse, make_client):
        record = make_client()

        result = asyncio.run(client_actions.update_client(nurse, db_session, record.id, {"first_name": None}))

        assert result.code == ErrorCode.VALIDATION_ERROR
        db_session.refresh(record)
        assert record.first_name == "Alice"

    def test_update_missing_client(self, db_session, nurse):
        result = asyncio.run(client_actions.update_client(nurse, db_session, 999, {"phone": "1"}))
        assert result.code == ErrorCode.NOT_FOUND

    def test_doctor_deletes_client_and_enrollments(self, db_session, doctor, make_client, make_program):
        record = make_client()
        program = make_program()
        db_session.add(ProgramEnrollment(
            client_id=record.id, program_id=program.id, enrollment_date=date(2024, 1, 5)
        ))
        db_session.commit()

        result = asyncio.run(client_actions.delete_client(doctor, db_session, record.id))

        assert result.success is True
        assert db_session.query(Client).count() == 0
        assert db_session.query(ProgramEnrollment).count() == 0

    @pytest.mark.parametrize("role_fixture", ["nurse", "admin"])
    def test_only_doctors_delete(self, request, db_session, make_client, role_fixture):
        session = request.getfixturevalue(role_fixture)
        record = make_client()

        result = asyncio.run(client_actions.delete_client(session, db_session, record.id))

        assert result.code == ErrorCode.FORBIDDEN
        assert db_session.query(Client).count() == 1

    def test_delete_missing_client(self, db_session, doctor):
        result = asyncio.run(client_actions.delete_client(doctor, db_session, 999))
        assert result.code == ErrorCode.NOT_FOUND

class TestClientRestApi:
    """Test cases for GET /api/clients"""

    def test_requires_key_or_session(self, client, make_client):
        make_client()
        response = client.get("/api/clients")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_master_key(self, client, make_client):
        make_client()
        response = client.get("/api/clients", headers={"x-api-key": MASTER_KEY})

        assert response.status_code == 200
        body = response.json()
        assert body["clients"][0]["first_name"] == "Alice"
        assert body["pagination"]["total_records"] == 1
        assert body["pagination"]["has_next_page"] is False

    def test_session(self, client, make_client, nurse, auth_headers):
        make_client()
        response = client.get("/api/clients", headers=auth_headers(nurse))
        assert response.status_code == 200

    def test_invalid_key_rejected_even_with_session(self, client, make_client, doctor, auth_headers):
        make_client()
        headers = {**auth_headers(doctor), "x-api-key": "his_not_a_real_key"}

        response = client.get("/api/clients", headers=headers)
        assert response.status_code == 401

    def test_pagination_and_search(self, client, make_client):
        for i in range(3):
            make_client(f"Peter{i}", "Kamau")
        make_client("Alice", "Smith")

        response = client.get(
            "/api/clients?page=1&pageSize=2&search=Kamau", headers={"x-api-key": MASTER_KEY}
        )
        body = response.json()
        assert len(body["clients"]) == 2
        assert body["pagination"]["total_records"] == 3
        assert body["pagination"]["has_next_page"] is True

    def test_detail(self, client, make_client, make_program, db_session):
        record = make_client(emergency_contact_name="John Smith", emergency_contact_phone="0700111222")
        program = make_program(name="TB Treatment", code="TB")
        db_session.add(ProgramEnrollment(
            client_id=record.id, program_id=program.id, enrollment_date=date(2024, 3, 1)
        ))
        db_session.commit()

        response = client.get(f"/api/clients/{record.id}", headers={"x-api-key": MASTER_KEY})

        assert response.status_code == 200
        body = response.json()
        assert body["client"]["emergency_contact"]["name"] == "John Smith"
        assert body["enrollments"][0]["program_name"] == "TB Treatment"

    def test_detail_not_found(self, client, db_session):
        response = client.get("/api/clients/999", headers={"x-api-key": MASTER_KEY})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Client not found"

    def test_access_is_recorded(self, client, make_client, db_session):
        make_client()
        client.get("/api/clients", headers={"x-api-key": MASTER_KEY})
        client.get("/api/clients", headers={"x-api-key": "his_bogus"})

        entries = ActivityLogger(db_session).get_recent_activities()
        assert {(e.status_code, e.actor) for e in entries} == {(200, "api-key:master"), (401, None)}
        assert all(e.endpoint == "/api/clients" for e in entries)
