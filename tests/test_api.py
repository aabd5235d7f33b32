from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notepad.api.main import create_app
from notepad.data.provider import NotePadProvider
from notepad.data.schema import DEFAULT_CATEGORY_ID


@pytest.fixture
def client(provider: NotePadProvider) -> TestClient:
    return TestClient(create_app(provider))


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_insert_query_update_delete_note(client: TestClient) -> None:
    resp = client.post("/content/notes", json={"title": "A", "note": "body"})
    assert resp.status_code == 201
    path = resp.json()["path"]
    assert path == "notes/1"

    rows = client.get(f"/content/{path}").json()
    assert rows[0]["title"] == "A"
    assert rows[0]["category_id"] == DEFAULT_CATEGORY_ID

    resp = client.put(f"/content/{path}", json={"values": {"title": "B"}})
    assert resp.json() == {"count": 1}

    rows = client.get(
        "/content/notes",
        params={"projection": "_id,title", "selection": "title = ?", "selection_args": ["B"]},
    ).json()
    assert rows == [{"_id": 1, "title": "B"}]

    assert client.delete(f"/content/{path}").json() == {"count": 1}
    assert client.get("/content/notes").json() == []


def test_category_rules_map_to_status_codes(client: TestClient) -> None:
    assert client.post("/content/categories", json={}).status_code == 400
    assert client.delete("/content/categories/1").status_code == 400
    assert client.delete("/content/categories").status_code == 400
    assert (
        client.put("/content/categories/1", json={"values": {"title": "X"}}).status_code
        == 400
    )
    assert client.post("/content/notes/1", json={}).status_code == 405


def test_delete_category_over_http(client: TestClient) -> None:
    assert client.post("/content/categories", json={"title": "Work"}).json() == {
        "path": "categories/2"
    }
    client.post("/content/notes", json={"title": "A", "category_id": 2})

    assert client.delete("/content/categories/2").json() == {"count": 1}
    rows = client.get("/content/notes").json()
    assert rows[0]["category_id"] == DEFAULT_CATEGORY_ID


def test_unknown_paths_are_404(client: TestClient) -> None:
    assert client.get("/content/bogus/path").status_code == 404
    assert client.post("/content/bogus/path", json={}).status_code == 404
    assert client.get("/types/bogus/path").status_code == 404
    assert client.get("/export/notes/5").status_code == 404
    assert client.get("/content/notes/99999999999999999999").status_code == 404


def test_bad_column_and_constraint_errors(client: TestClient) -> None:
    assert client.get("/content/notes", params={"projection": "nope"}).status_code == 400
    resp = client.post("/content/notes", json={"category_id": 42})
    assert resp.status_code == 409


def test_types(client: TestClient, provider: NotePadProvider) -> None:
    resp = client.get("/types/notes/categories/1/notes")
    assert resp.json() == {"type": provider.contract.notes_content_type}


def test_export_streams_plain_text(client: TestClient) -> None:
    client.post("/content/notes", json={"title": "Title", "note": "Body"})

    resp = client.get("/export/notes/1")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == "Title\n\nBody\n"

    assert client.get("/export/notes/1", params={"mime": "image/*"}).status_code == 405
