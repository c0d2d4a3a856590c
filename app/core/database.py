"""
Database connection and management module.
Handles the pooled PostgreSQL connection used by the master record store.
"""

from psycopg2 import pool, connect, IntegrityError
import psycopg2.extras as extras
from psycopg2.extensions import connection as Connection, ISOLATION_LEVEL_AUTOCOMMIT, parse_dsn
from contextlib import contextmanager
from typing import Generator, Optional, Dict, Any, Sequence
import logging
import threading
import time

from app.config import settings
from app.core.exceptions import AppException, DatabaseException
from app.core.logging_config import log_database_query

logger = logging.getLogger(__name__)

class DatabaseManager:
    """Manages the application database connection pool."""

    _instance: Optional["DatabaseManager"] = None
    _instance_lock = threading.Lock()
    _pool: Optional[pool.ThreadedConnectionPool] = None
    # One slot per pooled connection; callers wait here instead of exhausting the pool
    _slots: Optional[threading.BoundedSemaphore] = None

    def __new__(cls):
        """Singleton pattern for DatabaseManager."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    instance = super(DatabaseManager, cls).__new__(cls)
                    instance._initialize_pool()
                    cls._instance = instance
        return cls._instance

    def _ensure_database_exists(self) -> None:
        """Create the application database if the server does not have it yet."""
        dsn_params = parse_dsn(settings.DATABASE_URL)
        database_name = dsn_params.get("dbname")
        if not database_name:
            raise DatabaseException("DATABASE_URL must name a database")

        admin_params = {**dsn_params, "dbname": "postgres"}

        try:
            conn = connect(**admin_params)
            conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
            cursor = conn.cursor()

            try:
                cursor.execute(
                    "SELECT 1 FROM pg_database WHERE datname = %s",
                    (database_name,)
                )
                if cursor.fetchone():
                    logger.info(f"Database '{database_name}' already exists")
                    return

                logger.info(f"Creating database '{database_name}'...")
                cursor.execute(f'CREATE DATABASE "{database_name}"')
                logger.info("Database created successfully")

            finally:
                cursor.close()
                conn.close()

        except Exception as e:
            logger.error(f"Failed to ensure database exists: {str(e)}")
            raise DatabaseException(f"Database initialization failed: {str(e)}")

    def _initialize_pool(self) -> None:
        """Initialize the connection pool."""
        try:
            if settings.DB_AUTO_CREATE:
                self._ensure_database_exists()

            self._pool = pool.ThreadedConnectionPool(
                minconn=settings.DB_POOL_MIN,
                maxconn=settings.DB_POOL_SIZE,
                dsn=settings.DATABASE_URL
            )
            self._slots = threading.BoundedSemaphore(settings.DB_POOL_SIZE)
            logger.info("Database connection pool initialized successfully")
        except DatabaseException:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize database pool: {str(e)}")
            raise DatabaseException(f"Database pool initialization failed: {str(e)}")

    @contextmanager
    def get_connection(self) -> Generator[Connection, None, None]:
        """
        Get a pooled connection; commits on success, rolls back on failure.

        When every connection is checked out the caller waits up to
        DB_POOL_TIMEOUT seconds for one to be returned.

        Application exceptions and integrity errors propagate unchanged so callers
        can classify them; anything else is wrapped in DatabaseException.
        """
        if not self._pool or not self._slots:
            raise DatabaseException("Connection pool not initialized")

        slots = self._slots
        if not slots.acquire(timeout=settings.DB_POOL_TIMEOUT):
            logger.error("Timed out waiting for a database connection")
            raise DatabaseException(
                "Timed out waiting for a database connection",
                details={"timeout_seconds": settings.DB_POOL_TIMEOUT}
            )

        connection = None
        try:
            connection = self._pool.getconn()
            extras.register_uuid(conn_or_curs=connection)
            yield connection
            connection.commit()

        except (AppException, IntegrityError):
            if connection:
                connection.rollback()
            raise
        except Exception as e:
            if connection:
                connection.rollback()
            logger.error(f"Database error: {str(e)}")
            raise DatabaseException(f"Database operation failed: {str(e)}")
        finally:
            if connection and self._pool:
                self._pool.putconn(connection)
            slots.release()

    def execute_query(
        self,
        query: str,
        params: Sequence[Any] = (),
        fetch_one: bool = False,
        fetch: bool = True,
        table: str = "master_records"
    ):
        """
        Execute a single statement in its own transaction.

        Args:
            query: SQL query string
            params: Query parameters
            fetch_one: Return only the first row (or None)
            fetch: Return rows at all; when False the affected row count is returned
            table: Table name recorded in the query log

        Returns:
            Rows as dictionaries, a single row, or a row count
        """
        started = time.time()
        with self.get_connection() as conn:
            cursor = conn.cursor(cursor_factory=extras.RealDictCursor)
            try:
                cursor.execute(query, params)
                if not fetch:
                    return cursor.rowcount
                if fetch_one:
                    row = cursor.fetchone()
                    return dict(row) if row is not None else None
                return [dict(row) for row in cursor.fetchall()]
            finally:
                cursor.close()
                log_database_query(
                    logger,
                    query_type=query.strip().split(None, 1)[0].upper(),
                    table=table,
                    duration_ms=(time.time() - started) * 1000
                )

    def get_pool_status(self) -> Dict[str, Any]:
        """Get status of the connection pool."""
        return {
            "initialized": self._pool is not None,
            "closed": bool(self._pool.closed) if self._pool else True,
            "max_connections": settings.DB_POOL_SIZE,
        }

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool:
            self._pool.closeall()
            logger.info("Database connection pool closed")
        self._pool = None
        self._slots = None
        DatabaseManager._instance = None

def get_db_manager() -> DatabaseManager:
    """Get DatabaseManager singleton instance."""
    return DatabaseManager()
