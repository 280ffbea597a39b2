# tests/test_http_api.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from task_tracker.connectors.http_api import create_app, start_http_in_background


@pytest.fixture()
def client(state) -> TestClient:
    return TestClient(create_app(state))


def _post(client: TestClient, path: str, **body):
    return client.post(path, json=body)


def test_create_get_update_task(client: TestClient) -> None:
    r = _post(client, "/tasks", name="Write docs", start_time="2024-05-01T10:00:00", duration=30)
    assert r.status_code == 201
    task_id = r.json()["id"]

    r = client.get(f"/tasks/{task_id}")
    assert r.status_code == 200
    data = r.json()
    assert data["kind"] == "TASK"
    assert data["status"] == "NEW"
    assert data["duration"] == 30
    assert data["end_time"] == "2024-05-01T10:30:00"

    r = _post(client, "/tasks", id=task_id, name="Write docs", status="DONE")
    assert r.status_code == 200
    assert r.json() == {"id": task_id}
    assert client.get(f"/tasks/{task_id}").json()["status"] == "DONE"


def test_error_mapping(client: TestClient) -> None:
    _post(client, "/tasks", name="a", start_time="2024-05-01T10:00:00", duration=30)

    # SchedulingConflict -> 406
    r = _post(client, "/tasks", name="b", start_time="2024-05-01T10:15:00", duration=30)
    assert r.status_code == 406
    assert "overlaps" in r.json()["detail"]

    # NotFound on update -> 404
    assert _post(client, "/tasks", id=99, name="ghost").status_code == 404

    # InvalidArgument -> 400
    assert _post(client, "/tasks", name="   ").status_code == 400
    assert _post(client, "/subtasks", name="orphan", epic_id=42).status_code == 400

    # Absent lookups / deletes -> 404
    assert client.get("/tasks/99").status_code == 404
    assert client.get("/epics/99").status_code == 404
    assert client.delete("/subtasks/99").status_code == 404

    # Schema violations stay with FastAPI
    assert _post(client, "/tasks", name="neg", duration=-5).status_code == 422


def test_epic_rollup_over_http(client: TestClient) -> None:
    epic_id = _post(client, "/epics", name="Release").json()["id"]
    s1 = _post(client, "/subtasks", name="Tag", epic_id=epic_id, status="DONE").json()["id"]
    _post(
        client,
        "/subtasks",
        name="Announce",
        epic_id=epic_id,
        start_time="2024-05-01T12:00:00",
        duration=15,
    )

    epic = client.get(f"/epics/{epic_id}").json()
    assert epic["status"] == "IN_PROGRESS"
    assert epic["start_time"] == "2024-05-01T12:00:00"
    assert epic["end_time"] == "2024-05-01T12:15:00"
    assert epic["subtask_ids"] == [s1, s1 + 1]

    # Status sent for an epic is not part of its schema and has no effect.
    r = _post(client, "/epics", id=epic_id, name="Launch", status="DONE")
    assert r.status_code == 200
    epic = client.get(f"/epics/{epic_id}").json()
    assert (epic["name"], epic["status"]) == ("Launch", "IN_PROGRESS")

    subs = client.get(f"/epics/{epic_id}/subtasks").json()
    assert [s["name"] for s in subs] == ["Tag", "Announce"]
    assert all(s["epic_id"] == epic_id for s in subs)

    assert client.delete(f"/epics/{epic_id}").status_code == 200
    assert client.get("/subtasks").json() == []


def test_history_and_prioritized(client: TestClient) -> None:
    a = _post(client, "/tasks", name="A", start_time="2024-05-01T15:00:00").json()["id"]
    b = _post(client, "/tasks", name="B", start_time="2024-05-01T09:00:00").json()["id"]

    client.get(f"/tasks/{a}")
    client.get(f"/tasks/{b}")
    client.get(f"/tasks/{a}")

    assert [i["id"] for i in client.get("/history").json()] == [b, a]
    assert [i["id"] for i in client.get("/prioritized").json()] == [b, a]

    client.delete(f"/tasks/{a}")
    assert [i["id"] for i in client.get("/history").json()] == [b]


def test_bulk_deletes(client: TestClient) -> None:
    _post(client, "/tasks", name="t")
    epic_id = _post(client, "/epics", name="e").json()["id"]
    _post(client, "/subtasks", name="s", epic_id=epic_id)

    assert client.delete("/subtasks").status_code == 200
    assert client.get(f"/epics/{epic_id}").json()["subtask_ids"] == []

    assert client.delete("/tasks").status_code == 200
    assert client.get("/tasks").json() == []

    assert client.delete("/epics").status_code == 200
    assert client.get("/epics").json() == []


def test_aware_start_time_is_accepted(client: TestClient) -> None:
    r = _post(client, "/tasks", name="utc", start_time="2024-05-01T10:00:00Z", duration=10)
    assert r.status_code == 201
    data = client.get("/tasks").json()[0]
    assert data["start_time"] is not None
    assert not data["start_time"].endswith("Z")


def test_background_runner_respects_disabled_flag(state) -> None:
    assert start_http_in_background(state) is None
