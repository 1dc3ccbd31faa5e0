import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from src.api.errors import PersistenceError
from src.api.generate_openapi import generate_openapi
from src.api.main import create_app
from src.api.store import NotesStore


@pytest.fixture
def store(tmp_path):
    return NotesStore(tmp_path / "notes.json")


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


def create_note(client, **payload):
    res = client.post("/api/notes", json=payload)
    assert res.status_code == 201
    return res.json()["data"]


def assert_note_shape(note: dict):
    assert set(note) == {"id", "title", "content", "createdAt", "updatedAt"}
    for key in note:
        assert isinstance(note[key], str)
    # Timestamps are ISO8601 strings
    datetime.fromisoformat(note["createdAt"].replace("Z", "+00:00"))
    datetime.fromisoformat(note["updatedAt"].replace("Z", "+00:00"))


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "ok"
        assert data["message"] == "Service is healthy"
        assert "timestamp" in data
        assert "environment" in data


class TestStartup:
    def test_store_is_opened_from_settings(self, tmp_path, monkeypatch):
        data_file = tmp_path / "nested" / "notes.json"
        monkeypatch.setenv("NOTES_DATA_FILE", str(data_file))

        with TestClient(create_app()) as client:
            res = client.get("/api/notes")
        assert res.status_code == 200
        assert [n["title"] for n in res.json()["data"]] == ["Welcome to Notes", "Second Note"]
        assert data_file.exists()

    def test_routes_without_store_fail_clearly(self, tmp_path, monkeypatch):
        data_file = tmp_path / "notes.json"
        monkeypatch.setenv("NOTES_DATA_FILE", str(data_file))

        # Lifespan not run: no store is opened
        client = TestClient(create_app())
        with pytest.raises(RuntimeError, match="store not initialised"):
            client.get("/api/notes")
        assert not data_file.exists()


class TestNotesCRUD:
    def test_list_returns_seeded_notes(self, client):
        res = client.get("/api/notes")
        assert res.status_code == 200
        notes = res.json()["data"]
        assert len(notes) == 2
        for note in notes:
            assert_note_shape(note)

    def test_create_note(self, client):
        res = client.post("/api/notes", json={"title": " Buy milk ", "content": "2 litres"})
        assert res.status_code == 201
        note = res.json()["data"]
        assert_note_shape(note)
        assert note["title"] == "Buy milk"
        assert note["content"] == "2 litres"
        assert note["createdAt"] == note["updatedAt"]

        listed = client.get("/api/notes").json()["data"]
        assert listed[0] == note
        assert len(listed) == 3

    def test_create_without_content(self, client):
        note = create_note(client, title="Title only")
        assert note["content"] == ""

    def test_get_note_and_not_found(self, client):
        note = create_note(client, title="Read book")

        res_get = client.get(f"/api/notes/{note['id']}")
        assert res_get.status_code == 200
        assert res_get.json()["data"] == note

        res_404 = client.get("/api/notes/does-not-exist")
        assert res_404.status_code == 404
        assert res_404.json() == {"error": "Note not found"}

    def test_put_partial_update(self, client):
        note = create_note(client, title="Initial", content="A")

        res = client.put(f"/api/notes/{note['id']}", json={"content": "B"})
        assert res.status_code == 200
        updated = res.json()["data"]
        assert updated["title"] == "Initial"
        assert updated["content"] == "B"
        assert updated["createdAt"] == note["createdAt"]
        assert updated["updatedAt"] >= note["updatedAt"]

    def test_patch_title(self, client):
        note = create_note(client, title="Partial", content="X")

        res = client.patch(f"/api/notes/{note['id']}", json={"title": "Partial Updated"})
        assert res.status_code == 200
        patched = res.json()["data"]
        assert patched["title"] == "Partial Updated"
        assert patched["content"] == "X"

    def test_update_not_found(self, client):
        before = client.get("/api/notes").json()["data"]
        for method in (client.put, client.patch):
            res = method("/api/notes/424242", json={"title": "Nope"})
            assert res.status_code == 404
            assert res.json() == {"error": "Note not found"}
        assert client.get("/api/notes").json()["data"] == before

    def test_delete_note(self, client):
        note = create_note(client, title="ToDelete")

        res_del = client.delete(f"/api/notes/{note['id']}")
        assert res_del.status_code == 200
        assert res_del.json()["data"] == note

        assert client.get(f"/api/notes/{note['id']}").status_code == 404
        res_again = client.delete(f"/api/notes/{note['id']}")
        assert res_again.status_code == 404
        assert res_again.json() == {"error": "Note not found"}


class TestValidationErrors:
    def test_create_blank_title(self, client):
        res = client.post("/api/notes", json={"title": "  ", "content": "x"})
        assert res.status_code == 400
        assert res.json() == {
            "error": "Validation failed",
            "details": ["title is required and must be a non-empty string"],
        }
        assert len(client.get("/api/notes").json()["data"]) == 2

    def test_create_reports_every_violation(self, client):
        res = client.post("/api/notes", json={"title": 7, "content": 123})
        assert res.status_code == 400
        assert res.json()["details"] == [
            "title is required and must be a non-empty string",
            "content must be a string",
        ]

    def test_create_null_content(self, client):
        res = client.post("/api/notes", json={"title": "ok", "content": None})
        assert res.status_code == 400
        assert res.json()["details"] == ["content must be a string"]

    def test_create_without_body(self, client):
        res = client.post("/api/notes")
        assert res.status_code == 400
        assert res.json()["details"] == ["title is required and must be a non-empty string"]

    def test_update_invalid_fields(self, client):
        note = create_note(client, title="Keep", content="me")
        res = client.put(f"/api/notes/{note['id']}", json={"title": "", "content": False})
        assert res.status_code == 400
        assert res.json()["details"] == [
            "title must be a non-empty string when provided",
            "content must be a string when provided",
        ]
        assert client.get(f"/api/notes/{note['id']}").json()["data"] == note

    def test_malformed_json_body(self, client):
        res = client.post(
            "/api/notes",
            content="{bad json",
            headers={"Content-Type": "application/json"},
        )
        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "Request validation failed"
        assert isinstance(body["details"], list)


class TestServerErrors:
    def test_write_failure_is_opaque_500(self, client, store, monkeypatch):
        def fail(notes):
            raise PersistenceError("Failed to write notes file /secret/path")

        monkeypatch.setattr(store, "_write", fail)
        res = client.post("/api/notes", json={"title": "lost"})
        assert res.status_code == 500
        assert res.json() == {"error": "Internal Server Error"}
        assert len(client.get("/api/notes").json()["data"]) == 2


class TestOpenAPI:
    def test_generate_openapi(self, tmp_path):
        out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
        with open(out, encoding="utf-8") as f:
            schema = json.load(f)
        assert "/api/notes" in schema["paths"]
        assert "/api/notes/{note_id}" in schema["paths"]
        assert {t["name"] for t in schema["tags"]} >= {"health", "notes"}
