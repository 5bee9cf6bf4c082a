import pytest

from highscores.config import LeaderboardConfig
from highscores.database import RecordStore
from highscores.errors import StorageError
from highscores.server import LeaderboardServer

CONFIG_ENV_VARS = (
    "LEADERBOARD_TITLE",
    "HOST",
    "PORT",
    "DB_PATH",
    "PLAYERS_LIMIT",
    "RESULTS_LIMIT",
    "LOG_LEVEL",
    "CORS_ENABLED",
)


class FailingStore:
    """Store double whose every operation fails like a broken database."""

    def __init__(self):
        self.calls = []

    async def upsert_best(self, identity_key, record):
        self.calls.append(("upsert_best", identity_key, record))
        raise StorageError("disk I/O error", operation="upsert_best")

    async def list_top_players(self, limit):
        self.calls.append(("list_top_players", limit))
        raise StorageError("disk I/O error", operation="list_players")

    async def list_all_submissions(self, limit):
        self.calls.append(("list_all_submissions", limit))
        raise StorageError("disk I/O error", operation="list_results")


class StaticStore:
    """Store double returning fixed records and recording every call."""

    def __init__(self, records=None):
        self.records = records or []
        self.calls = []

    async def upsert_best(self, identity_key, record):
        self.calls.append(("upsert_best", identity_key, record))
        return True

    async def list_top_players(self, limit):
        self.calls.append(("list_top_players", limit))
        return self.records

    async def list_all_submissions(self, limit):
        self.calls.append(("list_all_submissions", limit))
        return self.records


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(tmp_path):
    return LeaderboardConfig(str(tmp_path / "config.json"), create_if_missing=False)


@pytest.fixture
async def store(tmp_path):
    record_store = RecordStore(str(tmp_path / "highscores.db"))
    await record_store.init_db()
    return record_store


@pytest.fixture
def make_client(aiohttp_client, config):
    async def _make(record_store):
        server = LeaderboardServer(config, store=record_store)
        return await aiohttp_client(server.build_app())

    return _make


@pytest.fixture
async def client(make_client, store):
    return await make_client(store)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def static_store():
    return StaticStore()
