"""
Directory Service.
CRUD over the standalone builder and agent tables. Directory entries have no
status lifecycle: remove deletes the row.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from psycopg2 import IntegrityError, errors
from pydantic import BaseModel

from app.core.database import get_db_manager
from app.core.exceptions import (
    AppException,
    ConflictException,
    DatabaseException,
    NotFoundException,
    ValidationException,
)
from app.core.master_record_query_builder import MasterRecordQueryBuilder as QB
from app.schemas.directory import DirectoryQuery

logger = logging.getLogger(__name__)


class DirectoryService:
    """Base class for one directory table; subclasses name the table and its columns."""

    table: str
    label: str
    # Writable columns besides name and description
    columns: Sequence[str] = ()
    search_columns: Sequence[str] = ("name", "description")
    # Columns an update may not set to null
    required_fields: Sequence[str] = ("name",)
    # Column definitions for `columns`, spliced into CREATE TABLE
    column_ddl: str = ""

    @property
    def name_index(self) -> str:
        return f"uq_{self.table}_name"

    @property
    def writable_columns(self) -> List[str]:
        return ["name", "description", *self.columns]

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def table_ddl(self) -> List[str]:
        return [
            f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id UUID PRIMARY KEY,
                    name VARCHAR(100) NOT NULL,
                    description VARCHAR(500),
                    {self.column_ddl},
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
            """,
            f"CREATE UNIQUE INDEX IF NOT EXISTS {self.name_index} ON {self.table} (name)",
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def parse_id(self, record_id: Any) -> str:
        try:
            return str(uuid.UUID(str(record_id)))
        except (ValueError, TypeError, AttributeError):
            raise ValidationException(
                f"Invalid {self.label} id: {record_id}",
                details={"id": str(record_id)}
            )

    @staticmethod
    def to_record(row: Dict[str, Any]) -> Dict[str, Any]:
        record = {}
        for key, value in row.items():
            if isinstance(value, uuid.UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            record[key] = value
        return record

    def _execute(
        self,
        operation: str,
        query: str,
        params: Sequence[Any],
        fields: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        """Run one statement and classify any failure for `operation`."""
        try:
            return get_db_manager().execute_query(query, params, table=self.table, **kwargs)
        except errors.UniqueViolation:
            name = (fields or {}).get("name")
            raise ConflictException(
                f"{self.label} with name '{name}' already exists",
                details={"field": "name", "value": name}
            )
        except IntegrityError as e:
            raise ValidationException(f"Invalid {self.label} data: {str(e).strip()}")
        except AppException:
            raise
        except Exception as e:
            logger.error(f"Failed to {operation} {self.label}: {str(e)}")
            raise DatabaseException(f"Failed to {operation} {self.label}: {str(e)}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, data: BaseModel) -> Dict[str, Any]:
        """
        Insert a directory entry.

        Raises:
            ConflictException: If an entry with the same name exists
        """
        fields = data.model_dump(mode="json", exclude_none=True)
        record = {"id": str(uuid.uuid4())}
        record.update({key: fields[key] for key in self.writable_columns if key in fields})

        query = f"""
            INSERT INTO {self.table} ({', '.join(record)})
            VALUES ({', '.join(['%s'] * len(record))})
            RETURNING *
        """
        row = self._execute("create", query, list(record.values()), fields=fields, fetch_one=True)

        logger.info(f"Created {self.label} '{row['name']}' ({row['id']})")
        return self.to_record(row)

    def find_all(self, query: DirectoryQuery) -> Dict[str, Any]:
        where_sql = ""
        values: List[Any] = []
        if query.search:
            search_sql, values = QB.search(query.search, self.search_columns)
            where_sql = f"WHERE {search_sql}"

        total = self._execute(
            "list",
            f"SELECT COUNT(*) AS total FROM {self.table} {where_sql}",
            values,
            fetch_one=True
        )["total"]

        rows = self._execute(
            "list",
            f"""
                SELECT * FROM {self.table}
                {where_sql}
                ORDER BY name ASC, id ASC
                LIMIT %s OFFSET %s
            """,
            values + [query.limit, (query.page - 1) * query.limit]
        )

        return {
            "records": [self.to_record(row) for row in rows],
            "pagination": {"page": query.page, "limit": query.limit, "total": total},
        }

    def find_by_id(self, record_id: Any) -> Dict[str, Any]:
        normalized_id = self.parse_id(record_id)
        row = self._execute(
            "retrieve",
            f"SELECT * FROM {self.table} WHERE id = %s",
            (normalized_id,),
            fetch_one=True
        )
        if row is None:
            raise NotFoundException(self.label, str(record_id))
        return self.to_record(row)

    def update(self, record_id: Any, data: BaseModel) -> Dict[str, Any]:
        """
        Apply a partial update.

        Raises:
            ValidationException: If the id is malformed or a required field is sent as null
            NotFoundException: If no entry has the id
            ConflictException: If the new name belongs to another entry
        """
        normalized_id = self.parse_id(record_id)
        fields = data.model_dump(mode="json", exclude_unset=True)

        cleared = [key for key in self.required_fields if key in fields and fields[key] is None]
        if cleared:
            raise ValidationException(
                f"{self.label} {', '.join(cleared)} cannot be null",
                details={"fields": cleared}
            )

        columns = {key: fields[key] for key in self.writable_columns if key in fields}
        if not columns:
            return self.find_by_id(normalized_id)

        set_sql = ", ".join(f"{column} = %s" for column in columns)
        row = self._execute(
            "update",
            f"""
                UPDATE {self.table}
                SET {set_sql}, updated_at = NOW()
                WHERE id = %s
                RETURNING *
            """,
            list(columns.values()) + [normalized_id],
            fields=fields,
            fetch_one=True
        )
        if row is None:
            raise NotFoundException(self.label, str(record_id))

        logger.info(f"Updated {self.label} {normalized_id}: {sorted(columns)}")
        return self.to_record(row)

    def remove(self, record_id: Any) -> None:
        normalized_id = self.parse_id(record_id)
        row = self._execute(
            "remove",
            f"DELETE FROM {self.table} WHERE id = %s RETURNING id",
            (normalized_id,),
            fetch_one=True
        )
        if row is None:
            raise NotFoundException(self.label, str(record_id))

        logger.info(f"Deleted {self.label} {normalized_id}")
