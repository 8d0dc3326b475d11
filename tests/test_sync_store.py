import pytest

from app.services.sync_store import (
    FAVORITE_KEYS,
    StoreTable,
    SyncStore,
    classify,
    group_by_table,
    to_stored_value,
)


def test_favorite_keys_route_to_favorites_table():
    for key in ("favoriteSongs", "currentFavoriteIndex", "favoritePlayMode", "favoritePlaybackTime"):
        assert classify(key) is StoreTable.FAVORITES
    assert len(FAVORITE_KEYS) == 4


def test_other_keys_route_to_playback_table():
    for key in ("volume", "currentSong", "favorite", "FavoriteSongs", ""):
        assert classify(key) is StoreTable.PLAYBACK


def test_group_by_table_keeps_every_table():
    groups = group_by_table(["volume", "favoriteSongs", "playMode"])
    assert groups[StoreTable.PLAYBACK] == ["volume", "playMode"]
    assert groups[StoreTable.FAVORITES] == ["favoriteSongs"]
    assert group_by_table([]) == {StoreTable.PLAYBACK: [], StoreTable.FAVORITES: []}


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        ("80", "80"),
        (80, "80"),
        (0.5, "0.5"),
        (3.0, "3"),
        (True, "true"),
        (False, "false"),
        ([1, 2, 3], "[1,2,3]"),
        ({"a": 1}, '{"a":1}'),
    ],
)
def test_to_stored_value(value, expected):
    assert to_stored_value(value) == expected


@pytest.mark.asyncio
async def test_write_then_read_across_both_tables(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    updated = await store.write({"volume": "80", "favoriteSongs": "[1,2,3]"})
    assert updated == 2

    data = await store.read(["volume", "favoriteSongs"])
    assert data == {"volume": "80", "favoriteSongs": "[1,2,3]"}


@pytest.mark.asyncio
async def test_read_marks_missing_keys_as_none(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    await store.write({"volume": "80"})

    data = await store.read(["volume", "currentSong", "favoritePlayMode"])
    assert data == {"volume": "80", "currentSong": None, "favoritePlayMode": None}


@pytest.mark.asyncio
async def test_read_without_keys_returns_everything_for_user(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    await store.write({"volume": "80", "favoriteSongs": "[]", "playMode": "loop"})
    await SyncStore(sessionmaker, "u2").write({"volume": "10"})

    assert await store.read() == {"volume": "80", "favoriteSongs": "[]", "playMode": "loop"}


@pytest.mark.asyncio
async def test_write_overwrites_existing_value(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    await store.write({"volume": "80", "favoritePlaybackTime": "12"})
    await store.write({"volume": "30", "favoritePlaybackTime": None})

    assert await store.read(["volume", "favoritePlaybackTime"]) == {
        "volume": "30",
        "favoritePlaybackTime": "",
    }


@pytest.mark.asyncio
async def test_write_skips_empty_keys(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    assert await store.write({}) == 0
    assert await store.write({"": "x", "volume": 5}) == 1
    assert await store.read() == {"volume": "5"}


@pytest.mark.asyncio
async def test_delete_then_read_returns_none(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    await store.write({"volume": "80", "favoriteSongs": "[1]", "playMode": "shuffle"})

    deleted = await store.delete(["volume", "favoriteSongs"])
    assert deleted == 2
    assert await store.read(["volume", "favoriteSongs"]) == {"volume": None, "favoriteSongs": None}
    assert await store.read() == {"playMode": "shuffle"}


@pytest.mark.asyncio
async def test_delete_counts_submitted_keys_and_ignores_invalid(sessionmaker):
    store = SyncStore(sessionmaker, "u1")
    assert await store.delete([]) == 0
    assert await store.delete(["", 3, None, "neverStored"]) == 1


@pytest.mark.asyncio
async def test_users_do_not_see_each_other(sessionmaker):
    await SyncStore(sessionmaker, "u1").write({"volume": "80"})
    other = SyncStore(sessionmaker, "u2")
    assert await other.read(["volume"]) == {"volume": None}
    await other.delete(["volume"])
    assert await SyncStore(sessionmaker, "u1").read(["volume"]) == {"volume": "80"}
