"""Favorites routes — auth gate before persistence, CRUD for the signed-in user, probes."""

from pathlib import Path

import pytest

from app.api.dependencies import get_backend
from tests.services.counting_backend import CountingBackend

FAVORITES = "/api/v1/movies/favorites"

PROTECTED_CALLS = [
    ("GET", FAVORITES, None),
    ("POST", FAVORITES, {"ghibli_movie_id": "m1", "title": "Porco Rosso"}),
    ("DELETE", f"{FAVORITES}/m1", None),
    ("GET", f"{FAVORITES}/m1", None),
]


@pytest.fixture
def counting(test_app, file_store):
    backend = CountingBackend(file_store)
    test_app.dependency_overrides[get_backend] = lambda: backend
    return backend


# --- Auth gate --------------------------------------------------------------

@pytest.mark.parametrize("method,url,body", PROTECTED_CALLS)
async def test_anonymous_call_is_rejected_before_persistence(
    client, counting, method, url, body,
):
    response = await client.request(method, url, json=body)
    assert response.status_code == 401
    error = response.json()["error"]
    assert error["code"] == "UNAUTHORIZED"
    assert error["message"] == "Please login (10001)"
    assert counting.calls == []


@pytest.mark.parametrize("method,url,body", PROTECTED_CALLS)
async def test_invalid_cookie_is_rejected_before_persistence(
    client, test_app, counting, method, url, body,
):
    client.cookies.set(test_app.state.settings.session_cookie_name, "tampered")
    response = await client.request(method, url, json=body)
    assert response.status_code == 401
    assert counting.calls == []


async def test_token_for_unknown_user_is_rejected(client, test_app, tokens, counting):
    client.cookies.set(
        test_app.state.settings.session_cookie_name,
        tokens.create_session_token("nobody"),
    )
    response = await client.get(FAVORITES)
    assert response.status_code == 401
    assert counting.calls == ["get_user_by_open_id"]


# --- Signed in --------------------------------------------------------------

async def test_add_list_check_remove(client, signed_in):
    created = await client.post(FAVORITES, json={
        "ghibli_movie_id": "58611129",
        "title": "My Neighbor Totoro",
        "description": "Two sisters move to the country...",
        "release_date": "1988",
        "running_time": "86",
    })
    assert created.status_code == 201
    assert created.json() == {"success": True}

    listing = (await client.get(FAVORITES)).json()
    assert len(listing) == 1
    assert listing[0]["ghibli_movie_id"] == "58611129"
    assert listing[0]["movie_title"] == "My Neighbor Totoro"
    assert listing[0]["running_time"] == "86"
    assert listing[0]["user_id"] == signed_in.id

    status = (await client.get(f"{FAVORITES}/58611129")).json()
    assert status == {"ghibli_movie_id": "58611129", "favorited": True}

    removed = await client.delete(f"{FAVORITES}/58611129")
    assert removed.status_code == 200
    assert removed.json() == {"success": True}
    assert (await client.get(FAVORITES)).json() == []
    status = (await client.get(f"{FAVORITES}/58611129")).json()
    assert status["favorited"] is False


async def test_remove_unknown_movie_succeeds(client, signed_in):
    response = await client.delete(f"{FAVORITES}/never-added")
    assert response.status_code == 200
    assert response.json() == {"success": True}


async def test_list_is_oldest_first(client, signed_in):
    for movie_id in ("b", "a", "c"):
        await client.post(FAVORITES, json={"ghibli_movie_id": movie_id})
    listing = (await client.get(FAVORITES)).json()
    assert [f["ghibli_movie_id"] for f in listing] == ["b", "a", "c"]


async def test_blank_movie_id_is_validation_error(client, signed_in):
    response = await client.post(FAVORITES, json={"ghibli_movie_id": "   "})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_overlong_release_date_is_validation_error(client, signed_in):
    response = await client.post(FAVORITES, json={
        "ghibli_movie_id": "m1", "release_date": "1988-04-16T00:00",
    })
    assert response.status_code == 400


# --- Probes -----------------------------------------------------------------

async def test_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_readiness_reports_file_fallback(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ready", "checks": {"database": "file_fallback"},
    }


async def test_readiness_not_ready_for_malformed_file(client, settings):
    Path(settings.dev_db_path).write_text("{}")
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json() == {
        "status": "not_ready", "reason": "file_store_unreadable",
    }


# --- Storage failures ---------------------------------------------------------

async def test_unreadable_store_returns_503_without_internal_details(
    client, signed_in, settings, tmp_path,
):
    data_file = Path(settings.dev_db_path)
    data_file.unlink()
    data_file.mkdir()

    response = await client.get(FAVORITES)
    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "PERSISTENCE_FAILURE"
    assert error["message"] == "Persistence read failed: Dataset file unreadable"
    assert error["context"]["backend"] == "file"
    assert str(tmp_path) not in response.text
    assert "Errno" not in response.text


async def test_malformed_store_returns_503_not_500(client, signed_in, settings):
    Path(settings.dev_db_path).write_text('{"users": []}')
    response = await client.get(FAVORITES)
    assert response.status_code == 503
    assert response.json()["error"]["message"].endswith("Dataset file malformed")
