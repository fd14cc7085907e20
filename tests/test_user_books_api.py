from datetime import datetime, timedelta

import pytest


@pytest.fixture
def headers(register):
    headers, _ = register("reader")
    return headers


def add(client, headers, volume_id="X123", **extra):
    return client.post("/user-books", headers=headers, json={"google_books_id": volume_id, **extra})


def test_library_requires_auth(client):
    assert client.get("/user-books").status_code == 401
    assert client.post("/user-books", json={"google_books_id": "X123"}).status_code == 401


def test_add_finish_remove(client, headers):
    response = add(client, headers)
    assert response.status_code == 201
    entry = response.json()
    assert entry["status"] == "WANT_TO_READ"
    assert entry["current_page"] == 0
    assert entry["progress_percentage"] == 0
    assert entry["book"]["google_books_id"] == "X123"
    assert entry["book"]["published_date"] == "1965-08-01"
    book_id = entry["book_id"]

    response = client.patch(f"/user-books/{book_id}/progress", headers=headers, json={"current_page": 200})
    assert response.status_code == 200
    entry = response.json()
    assert entry["status"] == "FINISHED"
    assert entry["finished_at"] is not None
    assert entry["progress_percentage"] == 100

    response = client.delete(f"/user-books/{book_id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Book removed from library successfully"}

    response = client.get(f"/user-books/{book_id}", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "Book not found in your library", "error": "not_found"}

    assert client.delete(f"/user-books/{book_id}", headers=headers).status_code == 404


def test_add_twice_conflicts(client, headers):
    assert add(client, headers).status_code == 201
    response = add(client, headers)
    assert response.status_code == 409
    assert response.json()["detail"] == "Book already exists in your library"


def test_add_unknown_volume(client, headers):
    response = add(client, headers, "does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Book not found"


def test_invalid_payloads(client, headers):
    assert add(client, headers, status="SKIMMED").status_code == 422
    book_id = add(client, headers).json()["book_id"]

    url = f"/user-books/{book_id}/progress"
    assert client.patch(url, headers=headers, json={"rating": 6}).status_code == 422
    assert client.patch(url, headers=headers, json={"current_page": -1}).status_code == 422

    response = client.patch(url, headers=headers, json={"current_page": 500})
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert response.json()["detail"] == "Current page cannot exceed total pages (200)"


def test_list_and_stats(client, headers):
    first = add(client, headers, "X123").json()
    add(client, headers, "Y456", status="READING", is_favorite=True)

    client.patch(f"/user-books/{first['book_id']}/progress", headers=headers,
                 json={"status": "FINISHED", "rating": 4})

    response = client.get("/user-books", headers=headers, params={"limit": 1})
    page = response.json()
    assert page["total"] == 2
    assert page["total_pages"] == 2
    assert len(page["books"]) == 1

    reading = client.get("/user-books", headers=headers, params={"status": "READING"}).json()
    assert [b["book"]["title"] for b in reading["books"]] == ["Solaris"]

    assert client.get("/user-books", headers=headers, params={"limit": 101}).status_code == 422

    stats = client.get("/user-books/stats", headers=headers).json()
    assert stats["total_books"] == 2
    assert stats["finished"] == 1
    assert stats["currently_reading"] == 1
    assert stats["by_status"]["FINISHED"] == 1
    assert stats["favorites"] == 1
    assert stats["average_rating"] == 4.0
    assert stats["total_pages_read"] == 200


def test_libraries_are_private(client, headers, register):
    book_id = add(client, headers).json()["book_id"]
    other, _ = register("someone-else")

    assert client.get(f"/user-books/{book_id}", headers=other).status_code == 404
    assert client.get("/user-books", headers=other).json()["total"] == 0
    assert add(client, other).status_code == 201


def test_catalog_routes(client):
    response = client.get("/books/search", params={"q": "dune"})
    assert response.status_code == 200
    assert response.json()["total_items"] == 3
    assert response.json()["items"][0]["volume_info"]["page_count"] == 200

    assert client.get("/books/search").status_code == 422

    response = client.get("/books/advanced-search", params={"title": "Dune"})
    assert response.status_code == 200
    response = client.get("/books/advanced-search")
    assert response.status_code == 400

    response = client.get("/books/X123")
    assert response.json()["volume_info"]["title"] == "Dune"
    assert client.get("/books/unknown").status_code == 404


def test_timestamps_carry_utc_offset(client, headers):
    entry = add(client, headers, status="READING").json()
    for field in ("started_at", "created_at", "updated_at"):
        value = datetime.fromisoformat(entry[field].replace("Z", "+00:00"))
        assert value.utcoffset() == timedelta(0)

    me = client.get("/users/me", headers=headers).json()
    assert datetime.fromisoformat(me["created_at"].replace("Z", "+00:00")).tzinfo is not None
