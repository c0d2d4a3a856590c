"""
Tests for the builder and agent directories: service behaviour against a mocked
DatabaseManager and the HTTP endpoints with the services patched.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from psycopg2 import errors

import main
from app.api.routes import agent_routes, builder_routes
from app.core.agent_service import AgentService
from app.core.builder_service import BuilderService
from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.schemas.directory import AgentCreate, AgentUpdate, BuilderCreate, BuilderUpdate, DirectoryQuery

client = TestClient(main.app)


def builder_row(**overrides):
    now = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    row = {
        "id": uuid.uuid4(),
        "name": "ABC Builders",
        "description": None,
        "website": "https://abcbuilders.example",
        "contact_email": None,
        "contact_phone": None,
        "logo": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def directory_db():
    manager = MagicMock()
    with patch("app.core.directory_service.get_db_manager", return_value=manager):
        yield manager


# ============================================================================
# Service
# ============================================================================

def test_builder_create_inserts_given_columns(directory_db):
    directory_db.execute_query.return_value = builder_row()

    record = BuilderService().create(
        BuilderCreate(name="ABC Builders", website="https://abcbuilders.example")
    )

    query, values = directory_db.execute_query.call_args.args
    assert "INSERT INTO builders (id, name, website)" in query
    assert values[1:] == ["ABC Builders", "https://abcbuilders.example"]
    assert directory_db.execute_query.call_args.kwargs["table"] == "builders"
    assert isinstance(record["id"], str)
    assert record["created_at"] == "2024-01-15T10:30:00+00:00"


def test_duplicate_builder_name_is_conflict(directory_db):
    directory_db.execute_query.side_effect = errors.UniqueViolation(
        'duplicate key value violates unique constraint "uq_builders_name"'
    )

    with pytest.raises(ConflictException) as exc_info:
        BuilderService().create(BuilderCreate(name="ABC Builders"))

    assert exc_info.value.status_code == 409
    assert exc_info.value.details == {"field": "name", "value": "ABC Builders"}


def test_agent_create_defaults_to_active(directory_db):
    directory_db.execute_query.return_value = {"id": uuid.uuid4(), "name": "John Doe", "is_active": True}

    AgentService().create(AgentCreate(name="John Doe", license_number="RE123456"))

    query, values = directory_db.execute_query.call_args.args
    assert "INSERT INTO agents (id, name, license_number, is_active)" in query
    assert values[-1] is True


@pytest.mark.parametrize("record_id", ["not-a-uuid", "42"])
def test_malformed_id_is_400(directory_db, record_id):
    with pytest.raises(ValidationException):
        AgentService().find_by_id(record_id)

    directory_db.execute_query.assert_not_called()


@pytest.mark.parametrize("operation", ["find_by_id", "remove"])
def test_unknown_id_is_not_found(directory_db, operation):
    directory_db.execute_query.return_value = None
    record_id = str(uuid.uuid4())

    with pytest.raises(NotFoundException) as exc_info:
        getattr(BuilderService(), operation)(record_id)

    assert exc_info.value.details["resource_id"] == record_id


def test_update_unknown_id_is_not_found(directory_db):
    directory_db.execute_query.return_value = None

    with pytest.raises(NotFoundException):
        BuilderService().update(str(uuid.uuid4()), BuilderUpdate(logo="https://cdn.example/logo.png"))


def test_update_sets_only_sent_fields(directory_db):
    record_id = str(uuid.uuid4())
    directory_db.execute_query.return_value = builder_row(contact_phone="+91-9876543210")

    BuilderService().update(record_id, BuilderUpdate(contact_phone="+91-9876543210"))

    query, values = directory_db.execute_query.call_args.args
    assert "SET contact_phone = %s, updated_at = NOW()" in query
    assert values == ["+91-9876543210", record_id]


def test_builder_update_cannot_clear_name(directory_db):
    with pytest.raises(ValidationException) as exc_info:
        BuilderService().update(str(uuid.uuid4()), BuilderUpdate(name=None))

    assert exc_info.value.details == {"fields": ["name"]}
    directory_db.execute_query.assert_not_called()


def test_agent_update_cannot_clear_active_flag(directory_db):
    with pytest.raises(ValidationException):
        AgentService().update(str(uuid.uuid4()), AgentUpdate(is_active=None))

    directory_db.execute_query.assert_not_called()


def test_empty_update_returns_current_entry(directory_db):
    row = builder_row()
    directory_db.execute_query.return_value = row

    record = BuilderService().update(str(row["id"]), BuilderUpdate())

    query, _ = directory_db.execute_query.call_args.args
    assert query.startswith("SELECT")
    assert record["name"] == "ABC Builders"


def test_remove_deletes_row(directory_db):
    record_id = str(uuid.uuid4())
    directory_db.execute_query.return_value = {"id": uuid.UUID(record_id)}

    BuilderService().remove(record_id)

    query, values = directory_db.execute_query.call_args.args
    assert query == "DELETE FROM builders WHERE id = %s RETURNING id"
    assert values == (record_id,)


def test_find_all_searches_and_pages(directory_db):
    directory_db.execute_query.side_effect = [{"total": 12}, [builder_row()]]

    result = AgentService().find_all(DirectoryQuery(page=2, limit=5, search="50%"))

    count_query, count_values = directory_db.execute_query.call_args_list[0].args
    assert "license_number ILIKE %s" in count_query
    assert count_values == ["%50\\%%"] * 4
    _, list_values = directory_db.execute_query.call_args_list[1].args
    assert list_values[-2:] == [5, 5]
    assert result["pagination"] == {"page": 2, "limit": 5, "total": 12}


def test_directory_table_ddl_has_unique_name():
    statements = BuilderService().table_ddl()

    assert "CREATE TABLE IF NOT EXISTS builders" in statements[0]
    assert "contact_email VARCHAR(255)" in statements[0]
    assert statements[1] == "CREATE UNIQUE INDEX IF NOT EXISTS uq_builders_name ON builders (name)"


# ============================================================================
# Routes
# ============================================================================

def test_builders_require_token():
    response = client.get("/api/v1/builders")

    assert response.status_code == 401


def test_create_builder(auth_headers):
    record = {"id": str(uuid.uuid4()), "name": "ABC Builders"}
    with patch.object(builder_routes.builder_service, "create", return_value=record):
        response = client.post(
            "/api/v1/builders", json={"name": "ABC Builders"}, headers=auth_headers
        )

    assert response.status_code == 201
    assert response.json()["message"] == "Builder created successfully"


def test_create_builder_with_bad_email_is_400(auth_headers):
    response = client.post(
        "/api/v1/builders",
        json={"name": "ABC Builders", "contact_email": "invalid-email-format"},
        headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_create_agent_without_name_is_400(auth_headers):
    response = client.post(
        "/api/v1/agents", json={"description": "Experienced"}, headers=auth_headers
    )

    assert response.status_code == 400


def test_duplicate_agent_is_409(auth_headers):
    with patch.object(
        agent_routes.agent_service, "create",
        side_effect=ConflictException(
            "Agent with name 'John Doe' already exists",
            details={"field": "name", "value": "John Doe"}
        )
    ):
        response = client.post("/api/v1/agents", json={"name": "John Doe"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_unknown_agent_is_404(auth_headers):
    record_id = str(uuid.uuid4())
    with patch.object(
        agent_routes.agent_service, "find_by_id",
        side_effect=NotFoundException("Agent", record_id)
    ):
        response = client.get(f"/api/v1/agents/{record_id}", headers=auth_headers)

    assert response.status_code == 404


def test_list_builders(auth_headers):
    result = {
        "records": [{"id": str(uuid.uuid4()), "name": "ABC Builders"}],
        "pagination": {"page": 1, "limit": 10, "total": 1},
    }
    with patch.object(builder_routes.builder_service, "find_all", return_value=result):
        response = client.get("/api/v1/builders", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["pagination"]["total_pages"] == 1


def test_delete_agent(auth_headers):
    record_id = str(uuid.uuid4())
    with patch.object(agent_routes.agent_service, "remove") as remove:
        response = client.delete(f"/api/v1/agents/{record_id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Agent deleted successfully"
    remove.assert_called_once_with(record_id)


def test_builders_have_no_statistics_route(auth_headers, directory_db):
    response = client.get("/api/v1/builders/statistics", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Builder id: statistics"
    directory_db.execute_query.assert_not_called()
