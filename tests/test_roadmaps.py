import threading

import httpx
from fastapi.testclient import TestClient

from roadmap_api.app.core.db import Database, get_connection, get_db
from roadmap_api.app.main import app
from tests.conftest import add_issue, add_roadmap, add_tag


def test_get_roadmap_full_view(client: TestClient, db):
    """Full view renders ids and counts as decimal strings"""
    rid = add_roadmap(db, owner_id=3, data={"nodes": [1, 2]}, is_public=False)
    add_issue(db, rid, user_id=3)
    add_issue(db, rid, user_id=4)

    response = client.get(f"/api/v1/roadmaps/{rid}")

    assert response.status_code == 200
    assert response.json() == {
        "id": str(rid),
        "name": "Backend roadmap",
        "description": "Learn the backend",
        "ownerId": "3",
        "issueCount": "2",
        "createdAt": "2024-01-02T03:04:05",
        "updatedAt": "2024-02-03T04:05:06",
        "isPublic": False,
        "data": {"nodes": [1, 2]},
    }


def test_get_roadmap_has_no_star_or_progress_fields(client: TestClient, db):
    rid = add_roadmap(db, owner_id=3)

    body = client.get(f"/api/v1/roadmaps/{rid}").json()

    assert "starCount" not in body
    assert "progress" not in body
    assert body["issueCount"] == "0"


def test_get_roadmap_non_json_data_returned_as_is(client: TestClient, db):
    rid = add_roadmap(db, owner_id=3, data="plain text payload")

    body = client.get(f"/api/v1/roadmaps/{rid}").json()

    assert body["data"] == "plain text payload"


def test_large_ids_rendered_exactly(client: TestClient, db):
    big_id = 2**53 + 1
    add_roadmap(db, owner_id=2**60, roadmap_id=big_id)

    body = client.get(f"/api/v1/roadmaps/{big_id}").json()

    assert body["id"] == "9007199254740993"
    assert body["ownerId"] == str(2**60)


def test_issue_count_only_counts_matching_roadmap(client: TestClient, db):
    first = add_roadmap(db, owner_id=1)
    second = add_roadmap(db, owner_id=1)
    for _ in range(3):
        add_issue(db, first, user_id=2)
    add_issue(db, second, user_id=2)

    assert client.get(f"/api/v1/roadmaps/{first}").json()["issueCount"] == "3"
    assert client.get(f"/api/v1/roadmaps/{second}/mini").json()["issueCount"] == "1"


def test_get_roadmap_mini_view(client: TestClient, db):
    rid = add_roadmap(db, owner_id=3, data={"secret": True})
    add_issue(db, rid, user_id=3)

    response = client.get(f"/api/v1/roadmaps/{rid}/mini")

    assert response.status_code == 200
    assert response.json() == {
        "id": str(rid),
        "name": "Backend roadmap",
        "description": "Learn the backend",
        "issueCount": "1",
        "ownerId": "3",
    }


def test_missing_roadmap_is_not_found_for_every_read(client: TestClient, users_service):
    for path in ("", "/mini", "/tags", "/owner", "/owner/mini"):
        response = client.get(f"/api/v1/roadmaps/7{path}")
        assert response.status_code == 404, path
        assert response.json() == {"error": "Roadmap does not exist."}
    # Owner lookups must not reach the users service for missing roadmaps
    assert users_service.requests == []


def test_invalid_roadmap_id_is_bad_request(client: TestClient):
    for bad in ("abc", "0", "-4", "1.5", "%20"):
        response = client.get(f"/api/v1/roadmaps/{bad}")
        assert response.status_code == 400, bad
        assert "error" in response.json()


def test_get_tags_in_insertion_order(client: TestClient, db):
    rid = add_roadmap(db, owner_id=1)
    other = add_roadmap(db, owner_id=1)
    add_tag(db, rid, "python")
    add_tag(db, other, "rust")
    add_tag(db, rid, "async")
    add_tag(db, rid, "backend")

    response = client.get(f"/api/v1/roadmaps/{rid}/tags")

    assert response.status_code == 200
    assert response.json() == {"tags": ["python", "async", "backend"]}


def test_get_tags_empty_is_success(client: TestClient, db):
    rid = add_roadmap(db, owner_id=1)

    response = client.get(f"/api/v1/roadmaps/{rid}/tags")

    assert response.status_code == 200
    assert response.json() == {"tags": []}


def test_get_owner_forwards_users_service_response(client: TestClient, db, users_service):
    rid = add_roadmap(db, owner_id=3)
    profile = {"id": "3", "name": "Ada", "bio": "Writes roadmaps"}
    users_service.routes["/api/v1/users/3"] = httpx.Response(200, json=profile)

    response = client.get(f"/api/v1/roadmaps/{rid}/owner")

    assert response.status_code == 200
    assert response.json() == profile
    assert [r.url.path for r in users_service.requests] == ["/api/v1/users/3"]


def test_get_owner_forwards_non_200_success_status(client: TestClient, db, users_service):
    rid = add_roadmap(db, owner_id=3)
    users_service.routes["/api/v1/users/3"] = httpx.Response(203, json={"id": "3"})

    response = client.get(f"/api/v1/roadmaps/{rid}/owner")

    assert response.status_code == 203
    assert response.json() == {"id": "3"}


def test_get_owner_mini_uses_mini_profile(client: TestClient, db, users_service):
    rid = add_roadmap(db, owner_id=3)
    users_service.routes["/api/v1/users/3"] = httpx.Response(200, json={"full": True})
    users_service.routes["/api/v1/users/3/mini"] = httpx.Response(200, json={"id": "3", "name": "Ada"})

    response = client.get(f"/api/v1/roadmaps/{rid}/owner/mini")

    assert response.status_code == 200
    assert response.json() == {"id": "3", "name": "Ada"}
    assert [r.url.path for r in users_service.requests] == ["/api/v1/users/3/mini"]


def test_get_owner_remote_error_status_is_generic_500(client: TestClient, db, users_service):
    rid = add_roadmap(db, owner_id=3)
    users_service.routes["/api/v1/users/3"] = httpx.Response(
        404, json={"error": "User not found.", "internal": "stack"}
    )

    response = client.get(f"/api/v1/roadmaps/{rid}/owner")

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred."}


def test_get_owner_transport_error_is_generic_500(client: TestClient, db, users_service):
    rid = add_roadmap(db, owner_id=3)
    users_service.routes["/api/v1/users/3/mini"] = httpx.ConnectError("connection refused")

    response = client.get(f"/api/v1/roadmaps/{rid}/owner/mini")

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred."}


def test_get_owner_non_json_body_is_generic_500(client: TestClient, db, users_service):
    rid = add_roadmap(db, owner_id=3)
    users_service.routes["/api/v1/users/3"] = httpx.Response(200, text="<html>oops</html>")

    response = client.get(f"/api/v1/roadmaps/{rid}/owner")

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred."}


def test_ids_beyond_storage_range_are_bad_request(client: TestClient, db, users_service):
    huge = "99999999999999999999"
    for path in ("", "/mini", "/tags", "/owner", "/owner/mini"):
        response = client.get(f"/api/v1/roadmaps/{huge}{path}")
        assert response.status_code == 400, path
        assert response.json() == {"error": "Roadmap id is invalid."}
    assert users_service.requests == []


def test_storage_calls_run_off_the_event_loop(client: TestClient, db):
    rid = add_roadmap(db, owner_id=3)
    add_tag(db, rid, "python")
    loop_threads = set()
    storage_threads = set()

    class RecordingDatabase(Database):
        def get(self, collection, record_id):
            storage_threads.add(threading.get_ident())
            return super().get(collection, record_id)

        def get_all_where(self, collection, field, value):
            storage_threads.add(threading.get_ident())
            return super().get_all_where(collection, field, value)

    async def recording_db():
        loop_threads.add(threading.get_ident())
        recording = RecordingDatabase(get_connection())
        try:
            yield recording
        finally:
            recording.close()

    app.dependency_overrides[get_db] = recording_db
    response = client.get(f"/api/v1/roadmaps/{rid}/tags")
    del app.dependency_overrides[get_db]

    assert response.json() == {"tags": ["python"]}
    assert storage_threads
    assert not storage_threads & loop_threads
