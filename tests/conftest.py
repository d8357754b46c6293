import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import get_db
from app.models import Base, User
from auth.jwt_handler import create_access_token
from auth.security import hash_password
from main import app

TEST_PASSWORD = "password123"


@dataclass
class TestUser:
    __test__ = False

    id: str
    name: str
    email: str
    headers: Dict[str, str]


@pytest.fixture(scope="session")
def password_hash() -> str:
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db, password_hash):
    """Factory creating committed users with ready-made auth headers."""
    counter = {"n": 0}

    def _make(name: str = None) -> TestUser:
        counter["n"] += 1
        name = name or f"User {counter['n']}"
        email = f"user{counter['n']}@example.com"
        user = User(name=name, email=email, password=password_hash)
        db.add(user)
        db.commit()
        token = create_access_token({"sub": user.id})
        return TestUser(
            id=user.id,
            name=name,
            email=email,
            headers={"Authorization": f"Bearer {token}"},
        )

    return _make


@pytest.fixture
def owner(make_user):
    return make_user("Owner")


@pytest.fixture
def member(make_user):
    return make_user("Member")


@pytest.fixture
def outsider(make_user):
    return make_user("Outsider")


@pytest.fixture
def create_project(client):
    def _create(user: TestUser, team_members=None, title="Test Project") -> dict:
        body = {"title": title, "description": "This is a test project"}
        if team_members is not None:
            body["teamMembers"] = team_members
        response = client.post("/api/projects", json=body, headers=user.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["project"]

    return _create


@pytest.fixture
def create_task(client):
    def _create(user: TestUser, project_id: str, assigned_to: str, **overrides) -> dict:
        body = {
            "title": "Write docs",
            "description": "Document the public endpoints",
            "projectId": project_id,
            "assignedTo": assigned_to,
        }
        body.update(overrides)
        response = client.post("/api/tasks", json=body, headers=user.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["task"]

    return _create
