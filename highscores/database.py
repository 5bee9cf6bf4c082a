"""
Database operations for the leaderboard.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import aiosqlite

from .errors import StorageError
from .models import PlayerRecord, SubmissionRecord

logger = logging.getLogger(__name__)

DEFAULT_PLAYERS_LIMIT = 200
DEFAULT_RESULTS_LIMIT = 1000

_RECORD_COLUMNS = (
    "name, best_time, created_at, country, region, city, city_lat_long, source_ip"
)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _record_values(record: PlayerRecord) -> tuple:
    return (
        record.name,
        record.best_time,
        record.created_at,
        record.country,
        record.region,
        record.city,
        record.city_lat_long,
        record.source_ip,
    )


def _row_to_record(row: Any) -> PlayerRecord:
    name, best_time, created_at, country, region, city, city_lat_long, source_ip = row
    return PlayerRecord(
        name=name,
        best_time=best_time,
        created_at=created_at or "",
        country=country or "",
        region=region or "",
        city=city or "",
        city_lat_long=city_lat_long or "",
        source_ip=source_ip or "",
    )


class RecordStore:
    """Persists best scores per player identity and the full submission history."""

    def __init__(
        self,
        db_path: str,
        timeout: float = 5.0,
    ) -> None:
        self.db_path = db_path
        self.timeout = timeout

    def _connect(self) -> aiosqlite.Connection:
        return aiosqlite.connect(self.db_path, timeout=self.timeout)

    async def init_db(self) -> None:
        """
        Initialize the SQLite database schema and indexes.

        @raise StorageError: If the database cannot be opened or created
        """
        try:
            async with self._connect() as db:
                # WAL lets the listing endpoints read while a submission writes
                await db.execute("PRAGMA journal_mode=WAL")
                await db.execute("PRAGMA synchronous=NORMAL")

                await db.execute("""
                    CREATE TABLE IF NOT EXISTS players (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        best_time INTEGER NOT NULL,
                        created_at TEXT NOT NULL,
                        country TEXT NOT NULL DEFAULT '',
                        region TEXT NOT NULL DEFAULT '',
                        city TEXT NOT NULL DEFAULT '',
                        city_lat_long TEXT NOT NULL DEFAULT '',
                        source_ip TEXT NOT NULL DEFAULT ''
                    )
                """)
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS results (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        best_time INTEGER NOT NULL,
                        created_at TEXT NOT NULL,
                        country TEXT NOT NULL DEFAULT '',
                        region TEXT NOT NULL DEFAULT '',
                        city TEXT NOT NULL DEFAULT '',
                        city_lat_long TEXT NOT NULL DEFAULT '',
                        source_ip TEXT NOT NULL DEFAULT ''
                    )
                """)

                await db.execute("""
                    CREATE INDEX IF NOT EXISTS idx_players_best_time
                    ON players(best_time ASC, created_at ASC)
                """)
                await db.execute("""
                    CREATE INDEX IF NOT EXISTS idx_results_best_time
                    ON results(best_time ASC, created_at ASC)
                """)

                await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(
                f"Can't initialize database {self.db_path}: {e}", operation="init_db"
            ) from e

        logger.info("Database ready at %s", self.db_path)

    async def upsert_best(
        self,
        identity_key: str,
        record: PlayerRecord,
    ) -> bool:
        """
        Store a submission, keeping only the best time per identity.

        The player row is inserted when absent and overwritten only when the
        new time is strictly lower. The submission is appended to the history
        either way. Both happen in one immediate transaction, so concurrent
        submissions for the same identity cannot lose a better time.

        @param identity_key: Player identity (name + source IP)
        @param record: Record to store; created_at is stamped here
        @return: True if the player row was written, False if the old one was kept
        @raise StorageError: On any database failure
        """
        record = record.stamped(_utcnow())

        try:
            async with self._connect() as db:
                await db.execute("BEGIN IMMEDIATE")

                cursor = await db.execute(
                    "SELECT best_time FROM players WHERE id = ?",
                    (identity_key,),
                )
                existing = await cursor.fetchone()

                updated = False

                if existing is None:
                    logger.info("Saving Player[%s]=%s", identity_key, record)
                    await db.execute(
                        f"INSERT INTO players (id, {_RECORD_COLUMNS}) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        (identity_key, *_record_values(record)),
                    )
                    updated = True
                elif record.best_time < existing[0]:
                    logger.info("Updating Player[%s]=%s", identity_key, record)
                    await db.execute(
                        "UPDATE players SET name = ?, best_time = ?, created_at = ?, "
                        "country = ?, region = ?, city = ?, city_lat_long = ?, "
                        "source_ip = ? WHERE id = ?",
                        (*_record_values(record), identity_key),
                    )
                    updated = True
                else:
                    logger.debug(
                        "Time %d for %s not better than existing %d",
                        record.best_time,
                        identity_key,
                        existing[0],
                    )

                await db.execute(
                    f"INSERT INTO results ({_RECORD_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    _record_values(record),
                )

                await db.commit()
                return updated
        except aiosqlite.Error as e:
            raise StorageError(
                f"Can't save player[{identity_key}]: {e}", operation="upsert_best"
            ) from e

    async def find_player(
        self,
        identity_key: str,
    ) -> Optional[PlayerRecord]:
        """
        Look up the stored best record for one identity.

        @param identity_key: Player identity (name + source IP)
        @return: PlayerRecord, or None if the identity has never submitted
        @raise StorageError: On any database failure
        """
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    f"SELECT {_RECORD_COLUMNS} FROM players WHERE id = ?",
                    (identity_key,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(
                f"Can't load player[{identity_key}]: {e}", operation="find_player"
            ) from e

        return _row_to_record(row) if row else None

    async def list_top_players(
        self,
        limit: int = DEFAULT_PLAYERS_LIMIT,
    ) -> List[PlayerRecord]:
        """
        Get the best record per identity, fastest first.

        @param limit: Maximum number of entries to return (default 200)
        @return: List of PlayerRecord ordered by ascending best_time
        @raise StorageError: On any database failure
        """
        return await self._list("players", limit)

    async def list_all_submissions(
        self,
        limit: int = DEFAULT_RESULTS_LIMIT,
    ) -> List[SubmissionRecord]:
        """
        Get the raw submission history, fastest first.

        @param limit: Maximum number of entries to return (default 1000)
        @return: List of SubmissionRecord ordered by ascending best_time
        @raise StorageError: On any database failure
        """
        return await self._list("results", limit)

    async def _list(
        self,
        table: str,
        limit: int,
    ) -> List[PlayerRecord]:
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    f"""
                    SELECT {_RECORD_COLUMNS}
                    FROM {table}
                    ORDER BY best_time ASC, created_at ASC
                    LIMIT ?
                """,
                    (limit,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(
                f"Can't load {table} from database: {e}", operation=f"list_{table}"
            ) from e

        return [_row_to_record(row) for row in rows]
