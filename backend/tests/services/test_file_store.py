"""File-backed store — document layout, counters, atomic rewrite, corruption handling."""

import json

import pytest

from app.core.domain_types import MovieData, UserUpsert
from app.core.errors import PersistenceFailureError
from app.infrastructure.file_store import FileBackedStore


def _upsert(open_id, **values):
    return UserUpsert(open_id=open_id, insert_values=values, update_values=values)


async def test_missing_file_is_initialized_on_first_use(tmp_path):
    path = tmp_path / "nested" / "server_data.json"
    store = FileBackedStore(path)
    assert await store.list_favorites(1) == []
    assert json.loads(path.read_text()) == {
        "users": [], "favorites": [], "next_user_id": 1, "next_favorite_id": 1,
    }


async def test_counters_increase_monotonically(file_store):
    await file_store.upsert_user(_upsert("a"))
    await file_store.upsert_user(_upsert("b"))
    await file_store.add_favorite(1, "m1", MovieData())
    await file_store.add_favorite(1, "m2", MovieData())
    await file_store.remove_favorite(1, "m2")
    await file_store.add_favorite(1, "m3", MovieData())

    document = json.loads(file_store.path.read_text())
    assert [u["id"] for u in document["users"]] == [1, 2]
    assert [f["id"] for f in document["favorites"]] == [1, 3]
    assert document["next_user_id"] == 3
    assert document["next_favorite_id"] == 4


async def test_update_does_not_consume_user_id(file_store):
    await file_store.upsert_user(_upsert("a", name="First"))
    await file_store.upsert_user(_upsert("a", name="Second"))
    document = json.loads(file_store.path.read_text())
    assert len(document["users"]) == 1
    assert document["users"][0]["name"] == "Second"
    assert document["next_user_id"] == 2


async def test_remove_without_match_leaves_file_untouched(file_store):
    await file_store.add_favorite(1, "m1", MovieData())
    before = file_store.path.read_text()
    mtime = file_store.path.stat().st_mtime_ns
    await file_store.remove_favorite(1, "missing")
    assert file_store.path.read_text() == before
    assert file_store.path.stat().st_mtime_ns == mtime


async def test_rewrite_leaves_no_temp_files(file_store):
    await file_store.add_favorite(1, "m1", MovieData())
    await file_store.add_favorite(1, "m2", MovieData())
    leftovers = [p for p in file_store.path.parent.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


async def test_corrupt_document_raises_persistence_failure(tmp_path):
    path = tmp_path / "server_data.json"
    path.write_text("{not json")
    store = FileBackedStore(path)
    with pytest.raises(PersistenceFailureError) as exc_info:
        await store.list_favorites(1)
    assert exc_info.value.operation == "read"
    assert path.read_text() == "{not json"
    assert str(tmp_path) not in exc_info.value.message
    assert "Expecting" not in exc_info.value.message


async def test_health_check_reports_corruption(tmp_path):
    path = tmp_path / "server_data.json"
    store = FileBackedStore(path)
    assert await store.health_check() is True
    path.write_text("[]]")
    assert await store.health_check() is False


async def test_data_survives_new_store_instance(tmp_path):
    path = tmp_path / "server_data.json"
    await FileBackedStore(path).upsert_user(_upsert("u1", name="Nausicaä"))
    user = await FileBackedStore(path).get_user_by_open_id("u1")
    assert user.name == "Nausicaä"


@pytest.mark.parametrize("document", [
    {},
    [],
    {"users": [], "next_user_id": 1, "next_favorite_id": 1},
    {"users": [], "favorites": [], "next_user_id": "1", "next_favorite_id": 1},
    {"users": {}, "favorites": [], "next_user_id": 1, "next_favorite_id": 1},
])
async def test_wrongly_shaped_document_is_persistence_failure(tmp_path, document):
    path = tmp_path / "server_data.json"
    path.write_text(json.dumps(document))
    store = FileBackedStore(path)
    assert await store.health_check() is False
    with pytest.raises(PersistenceFailureError) as exc_info:
        await store.list_favorites(1)
    assert exc_info.value.message == "Persistence read failed: Dataset file malformed"
    assert json.loads(path.read_text()) == document


async def test_unreadable_path_error_hides_filesystem_details(tmp_path):
    path = tmp_path / "server_data.json"
    path.mkdir()
    store = FileBackedStore(path)
    with pytest.raises(PersistenceFailureError) as exc_info:
        await store.is_favorited(1, "m1")
    body = exc_info.value.to_response()["error"]
    assert body["message"] == "Persistence read failed: Dataset file unreadable"
    assert body["context"] == {"user_id": None, "backend": "file"}


async def test_empty_plan_is_accepted(file_store):
    await file_store.upsert_user(UserUpsert("u1", {"name": "Lin"}, {}))
    await file_store.upsert_user(UserUpsert("u1", {"name": "Haku"}, {}))
    user = await file_store.get_user_by_open_id("u1")
    assert user.name == "Lin"
