"""
Tests for the HTTP API and the service layer behind it.

Tests:
- Service and catalog endpoints
- Session lifecycle
- Edits, settings and moves, with their error status codes
- Solving, with and without applying the solution
"""

import pytest
from fastapi.testclient import TestClient

from ..api import ArenaAPIService, SessionNotFound, create_app
from ..api.schemas import EditRequest, SolveRequest
from ..config import Settings


@pytest.fixture
def service():
    return ArenaAPIService()


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service, settings=Settings()))


@pytest.fixture
def session_id(client):
    response = client.post("/api/v1/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def _place(client, session_id, *placements):
    for placement in placements:
        response = client.post(
            f"/api/v1/sessions/{session_id}/edits", json={"placement": placement}
        )
        assert response.status_code == 200, response.json()


class TestService:
    """The service layer without HTTP."""

    def test_solve(self, service):
        session = service.create_session()
        service.apply_edit(session.session_id, EditRequest(placement="c2 124"))
        service.apply_edit(session.session_id, EditRequest(column=3, rows=[3]))
        response = service.solve(session.session_id, SolveRequest(request="solve in 3"))
        assert response.success
        assert response.moves == ["r3 -1"]
        assert response.mode == "solve in 3"
        assert response.stats.depth == 1

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFound):
            service.get_session("missing")

    def test_edit_needs_a_target(self, service):
        session = service.create_session()
        response = service.apply_edit(session.session_id, EditRequest(rows=[1]))
        assert response.error_code.value == "VALIDATION_ERROR"


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0", "env": "development"}

    def test_catalog(self, client):
        data = client.get("/api/v1/catalog").json()
        assert data["name"] == "default"
        assert [shape["name"] for shape in data["shapes"]][-1] == "hammer_block"


class TestSessions:
    def test_create_and_get(self, client, session_id):
        data = client.get(f"/api/v1/sessions/{session_id}").json()
        assert data["arena"]["enemy_count"] == 0
        assert sorted(data["arena"]["tools"]) == ["hammer", "iron_boots"]
        assert client.get("/api/v1/sessions").json()["count"] == 1

    def test_end(self, client, session_id):
        assert client.delete(f"/api/v1/sessions/{session_id}").json()["success"]
        response = client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"


class TestArenaEndpoints:
    def test_edit(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/edits",
            json={"column": 3, "rows": [3], "requirement": "H"},
        )
        assert response.status_code == 200
        enemies = response.json()["arena"]["enemies"]
        assert enemies == [{"ring": 3, "column": 3, "requirement": "hammer", "group": None}]

    def test_occupied_cell(self, client, session_id):
        _place(client, session_id, "c2 12")
        response = client.post(f"/api/v1/sessions/{session_id}/edits", json={"placement": "c2 2"})
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "OCCUPIED_CELL"
        assert body["details"] == {"session_id": session_id}

    def test_invalid_placement(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/edits", json={"placement": "c2"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_NOTATION"

    def test_group_count(self, client, session_id):
        response = client.put(f"/api/v1/sessions/{session_id}/groups", json={"count": 2})
        assert response.json()["arena"]["group_count"] == 2
        response = client.put(f"/api/v1/sessions/{session_id}/groups", json={"count": -1})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_GROUP_COUNT"

    def test_tools(self, client, session_id):
        response = client.put(
            f"/api/v1/sessions/{session_id}/tools", json={"tool": "hammer", "present": False}
        )
        assert response.json()["arena"]["tools"] == ["iron_boots"]
        response = client.put(f"/api/v1/sessions/{session_id}/tools", json={"tool": "shield"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_TOOL"

    def test_move(self, client, session_id):
        _place(client, session_id, "c1 1")
        response = client.post(f"/api/v1/sessions/{session_id}/moves", json={"move": "r1 2"})
        assert response.json()["arena"]["enemies"][0]["column"] == 3
        response = client.post(f"/api/v1/sessions/{session_id}/moves", json={"move": "r1"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_NOTATION"

    def test_clear(self, client, session_id):
        _place(client, session_id, "c1 1")
        response = client.post(f"/api/v1/sessions/{session_id}/clear")
        assert response.json()["arena"]["enemy_count"] == 0


class TestSolveEndpoint:
    def test_solve(self, client, session_id):
        _place(client, session_id, "c2 124", "c3 3")
        response = client.post(f"/api/v1/sessions/{session_id}/solve", json={"request": "solve in 1"})
        assert response.status_code == 200
        data = response.json()
        assert data["moves"] == ["r3 -1"]
        assert data["text"] == "r3 -1"
        assert data["length"] == 1

    def test_already_solved(self, client, session_id):
        _place(client, session_id, "c2 1234")
        data = client.post(f"/api/v1/sessions/{session_id}/solve", json={"kind": "fast"}).json()
        assert data["moves"] == []
        assert data["text"] == "Arena is already solved!"

    def test_no_solution_within_bound(self, client, session_id):
        _place(client, session_id, "c2 124", "c3 3")
        response = client.post(f"/api/v1/sessions/{session_id}/solve", json={"bound": 0})
        assert response.status_code == 422
        assert response.json()["error_code"] == "NO_SOLUTION_WITHIN_BOUND"

    def test_apply(self, client, session_id):
        _place(client, session_id, "c2 124", "c3 3")
        response = client.post(
            f"/api/v1/sessions/{session_id}/solve", json={"request": "solve", "apply": True}
        )
        columns = {enemy["column"] for enemy in response.json()["arena"]["enemies"]}
        assert columns == {2}
        session = client.get(f"/api/v1/sessions/{session_id}").json()
        assert session["executed_moves"] == ["r3 -1"]

    def test_invalid_request(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/solve", json={"request": "solve slow"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_NOTATION"

    def test_negative_bound_rejected(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/solve", json={"bound": -1})
        assert response.status_code == 422
