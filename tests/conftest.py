import json
from typing import Any, Dict, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from roadmap_api.app.core.config import settings
from roadmap_api.app.core.db import Database, get_connection, init_db
from roadmap_api.app.core.security import create_access_token
from roadmap_api.app.main import app
from roadmap_api.app.services.user_client import UsersClient, get_users_client

USERS_BASE_URL = "http://users.test/api/v1"


class FakeUsersService:
    """Routes for ``httpx.MockTransport``: path -> response or exception."""

    def __init__(self) -> None:
        self.routes: Dict[str, Any] = {}
        self.requests: list = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.routes.get(request.url.path)
        if outcome is None:
            return httpx.Response(404, json={"error": "User not found."})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def client(self) -> UsersClient:
        return UsersClient(USERS_BASE_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture(name="db_path")
def db_path_fixture(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file with migrations applied."""
    path = tmp_path / "roadmap_test.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    init_db()
    return path


@pytest.fixture(name="db")
def db_fixture(db_path):
    db = Database(get_connection())
    yield db
    db.close()


@pytest.fixture(name="users_service")
def users_service_fixture():
    return FakeUsersService()


@pytest.fixture(name="client")
def client_fixture(db_path, users_service):
    app.dependency_overrides[get_users_client] = users_service.client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(user_id: int) -> Dict[str, str]:
    token = create_access_token({"user_id": user_id})
    return {"Authorization": f"Bearer {token}"}


def add_roadmap(
    db: Database,
    owner_id: int,
    *,
    roadmap_id: Optional[int] = None,
    name: str = "Backend roadmap",
    description: str = "Learn the backend",
    is_public: bool = True,
    data: Any = None,
) -> int:
    """Insert a roadmap row; ``roadmap_id`` forces a specific id."""
    stored_data = data if data is None or isinstance(data, str) else json.dumps(data)
    cursor = db.conn.execute(
        """
        INSERT INTO roadmaps (id, name, description, owner_id, is_public, data, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            roadmap_id,
            name,
            description,
            owner_id,
            int(is_public),
            stored_data,
            "2024-01-02T03:04:05",
            "2024-02-03T04:05:06",
        ),
    )
    db.conn.commit()
    return cursor.lastrowid


def add_issue(
    db: Database,
    roadmap_id: int,
    user_id: int,
    *,
    issue_id: Optional[int] = None,
    title: str = "Broken link",
) -> int:
    cursor = db.conn.execute(
        "INSERT INTO issues (id, roadmap_id, user_id, title, content) VALUES (?, ?, ?, ?, ?)",
        (issue_id, roadmap_id, user_id, title, ""),
    )
    db.conn.commit()
    return cursor.lastrowid


def add_tag(db: Database, roadmap_id: int, name: str) -> int:
    return db.insert("roadmap_tags", {"roadmap_id": roadmap_id, "name": name})
