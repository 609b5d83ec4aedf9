from datetime import date

from fastapi import status

from mediatracker.models import DailyReading


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_register_and_login(client):
    resp = client.post(
        "/api/register", json={"email": "a@example.com", "password": "pw123456", "username": "alice"}
    )
    assert resp.status_code == status.HTTP_200_OK
    body = resp.json()
    assert body["user"]["username"] == "alice"
    assert body["token"]

    resp = client.post("/api/login", json={"email": "a@example.com", "password": "pw123456"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "a@example.com"

    resp = client.post("/api/login", json={"email": "a@example.com", "password": "wrong"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid credentials"


def test_register_rejects_duplicates_and_missing_fields(client, register):
    register("alice")
    resp = client.post(
        "/api/register", json={"email": "alice@example.com", "password": "x", "username": "other"}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Email or username already exists"

    resp = client.post("/api/register", json={"email": "b@example.com"})
    assert resp.status_code == 400


def test_requires_token(client):
    assert client.get("/api/media").status_code == 401
    resp = client.get("/api/media", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_media_crud(client, register):
    headers = register("alice")

    resp = client.get("/api/media", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == []

    payload = {"title": "Dune", "type": "book", "status": "readlist", "total_pages": 412}
    resp = client.post("/api/media", json=payload, headers=headers)
    assert resp.status_code == 200
    created = resp.json()
    assert created["message"] == "Media item added successfully"
    item_id = created["id"]

    resp = client.get("/api/media", params={"status": "readlist"}, headers=headers)
    items = resp.json()
    assert len(items) == 1
    assert items[0]["title"] == "Dune"
    assert items[0]["is_finished"] is False
    assert items[0]["date_completed"] is None

    update = {"title": "Dune", "type": "book", "status": "read", "pages_read": 412, "is_finished": True, "rating": 5}
    resp = client.put(f"/api/media/{item_id}", json=update, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Media item updated successfully"}

    resp = client.get(f"/api/media/{item_id}", headers=headers)
    assert resp.json()["date_completed"] is not None

    resp = client.delete(f"/api/media/{item_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Media item deleted successfully"}
    assert client.get(f"/api/media/{item_id}", headers=headers).status_code == 404


def test_media_validation(client, register):
    headers = register("alice")
    bad = [
        {"title": "", "type": "book", "status": "readlist"},
        {"title": "Dune", "type": "podcast", "status": "readlist"},
        {"title": "Dune", "type": "book", "status": "shelf"},
        {"title": "Dune", "type": "book", "status": "readlist", "rating": 7},
    ]
    for payload in bad:
        resp = client.post("/api/media", json=payload, headers=headers)
        assert resp.status_code == 400, payload
        assert "error" in resp.json()

    assert client.get("/api/media", params={"type": "podcast"}, headers=headers).status_code == 400
    # empty filters mean "all"
    assert client.get("/api/media", params={"type": "", "status": ""}, headers=headers).status_code == 200


def test_other_users_items_look_missing(client, register):
    alice = register("alice")
    bob = register("bob")
    item_id = client.post(
        "/api/media", json={"title": "Alien", "type": "movie", "status": "watchlist"}, headers=alice
    ).json()["id"]

    update = {"title": "mine now", "type": "movie", "status": "watched", "is_finished": True}
    resp = client.put(f"/api/media/{item_id}", json=update, headers=bob)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Media item not found"
    assert client.get(f"/api/media/{item_id}", headers=bob).status_code == 404
    assert client.get("/api/media", headers=bob).json() == []

    # bob's delete is a quiet no-op
    assert client.delete(f"/api/media/{item_id}", headers=bob).status_code == 200
    assert client.get(f"/api/media/{item_id}", headers=alice).status_code == 200


def test_delete_nonexistent_succeeds(client, register):
    headers = register("alice")
    resp = client.delete("/api/media/424242", headers=headers)
    assert resp.status_code == 200


def test_finishing_book_counts_once(client, register):
    headers = register("alice")
    item_id = client.post(
        "/api/media", json={"title": "Dune", "type": "book", "status": "readlist"}, headers=headers
    ).json()["id"]
    finished = {"title": "Dune", "type": "book", "status": "read", "is_finished": True}

    client.put(f"/api/media/{item_id}", json=finished, headers=headers)
    assert client.get("/api/stats/annual", headers=headers).json()["books_read"] == 1

    client.put(f"/api/media/{item_id}", json=finished, headers=headers)
    assert client.get("/api/stats/annual", headers=headers).json()["books_read"] == 1

    board = client.get("/api/leaderboard/annual/books_read", headers=headers).json()
    assert board == [{"username": "alice", "profile_picture": None, "count": 1}]


def test_daily_reading_and_leaderboard(client, register):
    alice = register("alice")
    bob = register("bob")
    assert client.post("/api/reading/daily", json={"pages": 20}, headers=bob).json() == {
        "message": "Daily reading updated successfully"
    }
    client.post("/api/reading/daily", json={"pages": 15}, headers=bob)
    client.post("/api/reading/daily", json={"pages": 10}, headers=alice)

    mine = client.get("/api/reading/daily", headers=bob).json()
    assert mine == {"date": date.today().isoformat(), "pages_read": 35}

    board = client.get("/api/leaderboard/daily-reading", headers=alice).json()
    assert board == [
        {"username": "bob", "profile_picture": None, "pages_read": 35},
        {"username": "alice", "profile_picture": None, "pages_read": 10},
    ]


def test_annual_leaderboard_invalid_category(client, register):
    headers = register("alice")
    resp = client.get("/api/leaderboard/annual/invalid_cat", headers=headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid category"}


def test_leaderboards_skip_inactive_users(client, register):
    headers = register("alice")
    assert client.get("/api/leaderboard/daily-reading", headers=headers).json() == []
    assert client.get("/api/leaderboard/annual/movies_watched", headers=headers).json() == []


def test_oversized_integers_are_bad_input(client, register):
    headers = register("alice")
    resp = client.post("/api/reading/daily", json={"pages": 10**20}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Validation error"

    resp = client.post(
        "/api/media",
        json={"title": "Dune", "type": "book", "status": "readlist", "total_pages": 2**63},
        headers=headers,
    )
    assert resp.status_code == 400

    item_id = client.post(
        "/api/media", json={"title": "Dune", "type": "book", "status": "readlist"}, headers=headers
    ).json()["id"]
    update = {"title": "Dune", "type": "book", "status": "read", "pages_read": 2**63}
    assert client.put(f"/api/media/{item_id}", json=update, headers=headers).status_code == 400

    # the largest storable value is still accepted
    resp = client.post("/api/reading/daily", json={"pages": 2**63 - 1}, headers=headers)
    assert resp.status_code == 200


def test_storage_failure_is_a_generic_500(app, client, register):
    headers = register("alice")
    DailyReading.__table__.drop(app.state.db.engine)  # type: ignore[attr-defined]

    resp = client.post("/api/reading/daily", json={"pages": 10}, headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}

    # later requests are served normally
    resp = client.post("/api/media", json={"title": "Alien", "type": "movie", "status": "watchlist"}, headers=headers)
    assert resp.status_code == 200
