from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from api.core.errors import PersistenceFailure
from api.core.feed import upstream_page
from api.core.models import Match
from api.db.store import get_store
from api.main import app
from api.routes.movies import get_catalog
from tests.helpers import FakeCatalog, make_movie


@pytest.fixture
def client(store):
    catalog = FakeCatalog(
        pages={
            upstream_page(1, date.today()): [
                make_movie(1, ["Drama"], 7.0),
                make_movie(2, ["Horror"], 5.0),
            ]
        }
    )
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: catalog
    with TestClient(app) as test_client:
        test_client.catalog = catalog
        yield test_client
    app.dependency_overrides.clear()


def _swipe(client, user_id, movie_id, action, movie=None):
    body = {"user_id": user_id, "movie_id": movie_id, "action": action}
    if movie is not None:
        body["movie"] = movie.model_dump()
    return client.post("/api/swipe", json=body)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_get_movies_returns_ranked_feed(client):
    resp = client.get("/api/movies", params={"user_id": "user1", "page": 1})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["upstream_page"] == upstream_page(1, date.today())
    assert [m["id"] for m in body["movies"]] == [1, 2]
    assert body["movies"][0]["streaming"]["netflix"] is True


def test_get_movies_rejects_unknown_user(client):
    resp = client.get("/api/movies", params={"user_id": "user9"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Invalid user"


def test_get_movies_rejects_page_zero(client):
    assert client.get("/api/movies", params={"page": 0}).status_code == 422


def test_get_movies_without_catalog_is_empty(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: None
    with TestClient(app) as test_client:
        resp = test_client.get("/api/movies", params={"user_id": "user2"})
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json()["movies"] == []


def test_swipe_flow_creates_match_and_hides_movie(client):
    movie = make_movie(1, ["Drama"], 7.0)

    first = _swipe(client, "user1", 1, "like", movie)
    second = _swipe(client, "user2", 1, "like", movie)

    assert first.json() == {"success": True, "accepted": True, "is_match": False}
    assert second.json() == {"success": True, "accepted": True, "is_match": True}

    feed = client.get("/api/movies", params={"user_id": "user1"}).json()
    assert [m["id"] for m in feed["movies"]] == [2]

    matches = client.get("/api/matches").json()["matches"]
    assert [m["movie_id"] for m in matches] == [1]
    assert matches[0]["movie"]["title"] == "Movie 1"


def test_swipe_invalid_user_and_action(client):
    assert _swipe(client, "ghost", 1, "like").status_code == 404
    assert _swipe(client, "user1", 1, "love").status_code == 422


def test_swipe_reports_persistence_failure(client, store, monkeypatch):
    def _fail(state):
        raise PersistenceFailure("disk full")

    monkeypatch.setattr(store, "_write", _fail)
    resp = _swipe(client, "user1", 1, "like")

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to persist state"
    assert store.snapshot().users["user1"].liked == set()


def test_matches_endpoint_purges_expired(client, store):
    with store.transaction() as state:
        state.matches.append(Match(movie_id=5, created_at=1))

    assert client.get("/api/matches").json()["matches"] == []
    assert store.snapshot().matches == []


def test_poll_matches_returns_new_matches_and_server_time(client, store):
    _swipe(client, "user1", 1, "like")
    _swipe(client, "user2", 1, "like")
    created = store.snapshot().matches[0].created_at

    first = client.get("/api/matches/poll", params={"user_id": "user1", "since": 0}).json()
    assert [m["movie_id"] for m in first["matches"]] == [1]
    assert first["server_time"] >= created

    second = client.get(
        "/api/matches/poll",
        params={"user_id": "user1", "since": first["server_time"]},
    ).json()
    assert second["matches"] == []


def test_poll_matches_rejects_unknown_user(client):
    resp = client.get("/api/matches/poll", params={"user_id": "user3"})
    assert resp.status_code == 404


def test_user_read_and_rename(client):
    resp = client.post("/api/user", json={"user_id": "user2", "name": "  Sam "})
    assert resp.json() == {"success": True}

    user = client.get("/api/user", params={"user_id": "user2"}).json()["user"]
    assert user["display_name"] == "Sam"
    assert user["liked"] == []
    assert user["preferences"] == {"genre_weights": {}, "avg_rating_affinity": 0.0}


def test_user_unknown_is_404(client):
    assert client.get("/api/user", params={"user_id": "x"}).status_code == 404
    resp = client.post("/api/user", json={"user_id": "x", "name": "Y"})
    assert resp.status_code == 404


def test_user_preferences_reflect_likes(client):
    _swipe(client, "user1", 42, "like", make_movie(42, ["Drama"], 7.5))
    _swipe(client, "user1", 43, "like", make_movie(43, ["Drama"], 8.5))

    user = client.get("/api/user", params={"user_id": "user1"}).json()["user"]
    assert sorted(user["liked"]) == [42, 43]
    assert user["preferences"]["genre_weights"] == {"Drama": 2.0}
    assert user["preferences"]["avg_rating_affinity"] == pytest.approx(8.0)


def test_movie_lookup(client):
    assert client.get("/api/movie", params={"id": 2}).json()["movie"]["id"] == 2
    assert client.get("/api/movie", params={"id": 404}).status_code == 404


def test_get_movies_without_catalog_rejects_unknown_user(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_catalog] = lambda: None
    with TestClient(app) as test_client:
        resp = test_client.get("/api/movies", params={"user_id": "user9"})
    app.dependency_overrides.clear()

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Invalid user"


def test_swipe_rejects_snapshot_for_other_movie(client, store):
    resp = _swipe(client, "user1", 1, "like", make_movie(999, ["Horror"], 2.0))
    assert resp.status_code == 422
    assert store.snapshot().users["user1"].liked == set()


def test_match_keeps_all_genres_but_shows_three(client, store):
    movie = make_movie(1, ["Drama", "Comedy", "Action", "Horror"], 7.0)
    _swipe(client, "user1", 1, "like", movie)
    _swipe(client, "user2", 1, "like", movie)

    matches = client.get("/api/matches").json()["matches"]
    assert matches[0]["movie"]["genres"] == ["Drama", "Comedy", "Action"]
    assert store.snapshot().matches[0].movie.genres == movie.genres
    weights = store.snapshot().users["user1"].preferences.genre_weights
    assert set(weights) == {"Drama", "Comedy", "Action", "Horror"}
