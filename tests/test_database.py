"""
Tests for DatabaseManager connection handling under concurrent callers.
The psycopg2 pool is replaced by an in-memory pool that fails the way a real
one does when more connections are requested than it holds.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from unittest.mock import MagicMock, patch

import pytest
from psycopg2 import pool

from app.config import settings
from app.core.database import DatabaseManager
from app.core.exceptions import DatabaseException

POOL_SIZE = 3


class CountingPool:
    """Hands out mock connections and raises PoolError once maxconn are checked out."""

    def __init__(self, minconn, maxconn, dsn):
        self.maxconn = maxconn
        self.closed = False
        self.checked_out = 0
        self.peak = 0
        self._lock = threading.Lock()

    def getconn(self):
        with self._lock:
            if self.checked_out >= self.maxconn:
                raise pool.PoolError("connection pool exhausted")
            self.checked_out += 1
            self.peak = max(self.peak, self.checked_out)
        return MagicMock()

    def putconn(self, connection):
        with self._lock:
            self.checked_out -= 1

    def closeall(self):
        self.closed = True


@pytest.fixture
def manager():
    DatabaseManager._instance = None
    with patch.object(settings, "DB_POOL_SIZE", POOL_SIZE), \
            patch.object(settings, "DB_POOL_TIMEOUT", 5.0), \
            patch("app.core.database.pool.ThreadedConnectionPool", CountingPool), \
            patch("app.core.database.extras.register_uuid"):
        manager = DatabaseManager()
        yield manager
        manager.close_pool()


def test_more_callers_than_connections_all_succeed(manager):
    def hold_connection(_):
        with manager.get_connection():
            time.sleep(0.01)
        return True

    with ThreadPoolExecutor(max_workers=POOL_SIZE * 4) as executor:
        results = list(executor.map(hold_connection, range(POOL_SIZE * 16)))

    assert all(results)
    assert manager._pool.peak <= POOL_SIZE
    assert manager._pool.checked_out == 0


def test_connection_returned_after_failure(manager):
    with pytest.raises(DatabaseException):
        with manager.get_connection():
            raise RuntimeError("driver fell over")

    for _ in range(POOL_SIZE + 1):
        with manager.get_connection():
            pass

    assert manager._pool.checked_out == 0


def test_waiting_for_connection_times_out(manager):
    with patch.object(settings, "DB_POOL_TIMEOUT", 0.05), ExitStack() as held:
        for _ in range(POOL_SIZE):
            held.enter_context(manager.get_connection())

        with pytest.raises(DatabaseException) as exc_info:
            with manager.get_connection():
                pass

    assert exc_info.value.message == "Timed out waiting for a database connection"
    assert manager._pool.checked_out == 0


def test_singleton_created_once_across_threads():
    DatabaseManager._instance = None
    try:
        with patch.object(
            DatabaseManager, "_initialize_pool", side_effect=lambda: time.sleep(0.05)
        ) as initialize:
            with ThreadPoolExecutor(max_workers=8) as executor:
                managers = list(executor.map(lambda _: DatabaseManager(), range(8)))

        assert initialize.call_count == 1
        assert len({id(m) for m in managers}) == 1
    finally:
        DatabaseManager._instance = None
