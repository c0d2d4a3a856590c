"""
Shared fixtures.

Environment is set before any app module is imported so Settings picks it up.
"""

import os
import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

os.environ["ENABLE_FILE_LOGGING"] = "false"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_DEFAULT_PASSWORD"] = "admin123"
os.environ["CODE_UNIQUE_PER_TYPE"] = "false"
if os.environ.get("TEST_DATABASE_URL"):
    os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]

import pytest

from app.core.auth_service import AuthService


def build_row(master_type: str = "city", **overrides):
    """A master_records row as RealDictCursor returns it."""
    now = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    row = {
        "id": uuid.uuid4(),
        "master_type": master_type,
        "name": "Pune",
        "description": None,
        "code": None,
        "status": "active",
        "sort_order": 0,
        "is_default": False,
        "is_popular": False,
        "metadata": {},
        "parent_id": None,
        "parent_type": None,
        "category": None,
        "icon": None,
        "color": None,
        "numeric_value": None,
        "unit": None,
        "min_value": None,
        "max_value": None,
        "state": None,
        "country": None,
        "longitude": None,
        "latitude": None,
        "timezone": None,
        "pin_codes": None,
        "attributes": {},
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_row():
    return build_row


@pytest.fixture
def db():
    """MagicMock DatabaseManager handed to the master record store."""
    manager = MagicMock()
    with patch("app.core.master_record_store.get_db_manager", return_value=manager):
        yield manager


@pytest.fixture
def auth_headers():
    tokens = AuthService.login("admin@trelax.com", "admin123")["tokens"]
    return {"Authorization": f"Bearer {tokens['access_token']}"}
