"""Per-user key/value persistence for player state.

Keys are split across two tables by name: the closed set in
FAVORITE_KEYS lives in favorites_store, everything else in playback_store.
"""
import asyncio
import enum
import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.sql import func

from app.database import create_tables, upsert
from app.models import FavoriteEntry, PlaybackEntry

logger = logging.getLogger(__name__)

FAVORITE_KEYS = frozenset(
    {
        "favoriteSongs",
        "currentFavoriteIndex",
        "favoritePlayMode",
        "favoritePlaybackTime",
    }
)


class StoreTable(enum.Enum):
    PLAYBACK = "playback_store"
    FAVORITES = "favorites_store"

    @property
    def model(self):
        return FavoriteEntry if self is StoreTable.FAVORITES else PlaybackEntry


def classify(key: str) -> StoreTable:
    return StoreTable.FAVORITES if key in FAVORITE_KEYS else StoreTable.PLAYBACK


def group_by_table(keys: Iterable[str]) -> Dict[StoreTable, List[str]]:
    groups: Dict[StoreTable, List[str]] = {table: [] for table in StoreTable}
    for key in keys:
        groups[classify(key)].append(key)
    return groups


def to_stored_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


class SyncStore:
    def __init__(self, sessionmaker: async_sessionmaker, user_id: str):
        self.sessionmaker = sessionmaker
        self.user_id = user_id

    @property
    def engine(self):
        return self.sessionmaker.kw["bind"]

    async def ensure_tables(self):
        await create_tables(
            self.engine,
            tables=[table.model.__table__ for table in StoreTable],
        )

    async def _select(self, table: StoreTable, keys: Optional[List[str]] = None) -> List[tuple]:
        model = table.model
        stmt = select(model.key, model.value).where(model.user_id == self.user_id)
        if keys is not None:
            stmt = stmt.where(model.key.in_(keys))
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            return list(result.all())

    async def read(self, keys: Optional[List[str]] = None) -> Dict[str, Optional[str]]:
        """Fetch stored values.

        With no keys, every record of the user across both tables is returned.
        With keys, each requested key is present in the result, None when
        nothing is stored under it.
        """
        await self.ensure_tables()
        data: Dict[str, Optional[str]] = {}
        rows: List[tuple] = []
        if keys:
            for table, table_keys in group_by_table(keys).items():
                if table_keys:
                    rows.extend(await self._select(table, table_keys))
            for key in keys:
                data[key] = None
        else:
            for table in StoreTable:
                rows.extend(await self._select(table))

        for key, value in rows:
            data[key] = value
        return data

    async def _run_batch(self, statements: list):
        async with self.sessionmaker() as db:
            async with db.begin():
                for stmt in statements:
                    await db.execute(stmt)

    async def _run_grouped(self, build, keys: Iterable[str]):
        """Run one transaction per table, all tables concurrently"""
        batches = []
        for table, table_keys in group_by_table(keys).items():
            if table_keys:
                batches.append(self._run_batch([build(table, key) for key in table_keys]))
        await asyncio.gather(*batches)

    async def write(self, data: Mapping[str, Any]) -> int:
        entries = {key: to_stored_value(value) for key, value in data.items() if key}
        if not entries:
            return 0
        await self.ensure_tables()

        def build(table: StoreTable, key: str):
            return self._upsert_statement(table, key, entries[key])

        await self._run_grouped(build, entries.keys())
        logger.debug(f"Stored {len(entries)} keys for user {self.user_id}")
        return len(entries)

    def _upsert_statement(self, table: StoreTable, key: str, value: str):
        return upsert(
            self.engine,
            table.model,
            {"user_id": self.user_id, "key": key, "value": value, "updated_at": func.now()},
            index_elements=["user_id", "key"],
            update_columns=["value", "updated_at"],
        )

    async def delete(self, keys: List[str]) -> int:
        keys = [key for key in keys if isinstance(key, str) and key]
        if not keys:
            return 0
        await self.ensure_tables()

        def build(table: StoreTable, key: str):
            model = table.model
            return delete(model).where(model.user_id == self.user_id, model.key == key)

        await self._run_grouped(build, keys)
        logger.debug(f"Deleted {len(keys)} keys for user {self.user_id}")
        return len(keys)
