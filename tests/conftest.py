import sys, os

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# ⚙️ Tests nie gegen die lokale qure.db laufen lassen
os.environ.setdefault("DATABASE_URL", "sqlite://")

from models.kv_entry import KVEntry  # noqa: E402
from utils.kv_store import MemoryKeyValueStore, SQLKeyValueStore  # noqa: E402
from utils.qr_storage import HistoryStore  # noqa: E402


class FailingKeyValueStore:
    """Speicher, der bei Lesen und/oder Schreiben einen Fehler wirft."""

    def __init__(self, fail_get: bool = True, fail_set: bool = True, data=None):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.data = dict(data or {})
        self.set_calls = 0

    async def get(self, key):
        if self.fail_get:
            raise OSError("storage unavailable")
        return self.data.get(key)

    async def set(self, key, value):
        self.set_calls += 1
        if self.fail_set:
            raise OSError("disk full")
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    KVEntry.__table__.create(bind=engine, checkfirst=True)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def kv(session_factory):
    return SQLKeyValueStore(session_factory)


@pytest.fixture
def memory_kv():
    return MemoryKeyValueStore()


@pytest_asyncio.fixture
async def store(kv):
    """HistoryStore auf einer frischen In-Memory-Datenbank."""
    return HistoryStore(kv)


@pytest.fixture
def client(kv):
    """TestClient mit eigenem Speicher statt der globalen Instanzen."""
    from main import app
    from routes.utils import get_history_store, get_kv_store

    history_store = HistoryStore(kv)
    app.dependency_overrides[get_kv_store] = lambda: kv
    app.dependency_overrides[get_history_store] = lambda: history_store

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.pop(get_kv_store, None)
    app.dependency_overrides.pop(get_history_store, None)


@pytest.fixture
def failing_kv():
    return FailingKeyValueStore
