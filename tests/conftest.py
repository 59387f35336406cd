"""
Shared fixtures: an in-memory database, a TestClient wired to it and staff
users of every role.
"""

import os
from datetime import date

# Settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GOOGLE_CLIENT_ID"] = "test-google-client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-google-client-secret"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["API_KEY"] = "test-master-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth.auth_handler import auth_handler
from app.database import Base, get_db
from app.models import Client, HealthProgram, User
from app.schemas.user import SessionUser
from main import app

MASTER_KEY = "test-master-key"
PASSWORD = "password123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Fresh schema per test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db_session):
    """TestClient sharing the test's database session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(db_session):
    def _make_user(role="Doctor", email=None, name=None, password=PASSWORD):
        user = User(
            name=name or f"Test {role}",
            email=email or f"{role.lower()}@example.com",
            hashed_password=auth_handler.get_password_hash(password) if password else None,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user

def as_session(user) -> SessionUser:
    return SessionUser(id=user.id, email=user.email, name=user.name, role=user.role)

@pytest.fixture
def admin(make_user):
    return as_session(make_user("Admin"))

@pytest.fixture
def doctor(make_user):
    return as_session(make_user("Doctor"))

@pytest.fixture
def nurse(make_user):
    return as_session(make_user("Nurse"))

@pytest.fixture
def auth_headers():
    """Bearer header carrying a session token for the given session user"""
    def _headers(session: SessionUser) -> dict:
        return {"Authorization": f"Bearer {auth_handler.create_session_token(session)}"}
    return _headers

@pytest.fixture
def make_client(db_session):
    def _make_client(first_name="Alice", last_name="Smith", **fields):
        fields.setdefault("date_of_birth", date(1990, 5, 17))
        fields.setdefault("gender", "female")
        record = Client(first_name=first_name, last_name=last_name, **fields)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record
    return _make_client

@pytest.fixture
def make_program(db_session):
    def _make_program(name="HIV Care", code="HIV", active=True, required_fields=None, description=None):
        program = HealthProgram(
            name=name,
            code=code,
            description=description or f"{name} program",
            active=active,
            required_fields=required_fields or [],
        )
        db_session.add(program)
        db_session.commit()
        db_session.refresh(program)
        return program
    return _make_program
