"""
Master Record Store.
Generic create/read/update/soft-delete/list/statistics operations over the shared
master_records table, bound to one master type at construction time.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from psycopg2 import IntegrityError, errors

from app.core.database import get_db_manager
from app.core.exceptions import (
    AppException,
    ConflictException,
    DatabaseException,
    NotFoundException,
    ValidationException,
)
from app.core.master_record_query_builder import (
    CODE_UNIQUE_INDEX,
    NAME_UNIQUE_INDEX,
    NOT_ARCHIVED,
    TYPE_CODE_UNIQUE_INDEX,
    WRITABLE_COLUMNS,
    Condition,
    MasterRecordQueryBuilder,
)
from app.core.responses import ResponseHandler
from app.schemas.master_record import MasterQuery, MasterStatus, MasterType

logger = logging.getLogger(__name__)

QB = MasterRecordQueryBuilder

BASE_SEARCH_EXPRESSIONS = ("name", "description", "code")

# Fields a caller can never write through the store.
SYSTEM_FIELDS = {"id", "type", "master_type", "attributes", "created_at", "updated_at"}

CORE_FIELDS = (
    "name",
    "description",
    "code",
    "status",
    "sort_order",
    "is_default",
    "is_popular",
    "metadata",
)


class MasterRecordStore:
    """Repository for one logical master table inside master_records."""

    def __init__(
        self,
        master_type: MasterType,
        usage_check: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        self.master_type = master_type
        self.usage_check = usage_check
        self.label = master_type.value.replace("_", " ").title()

    # ------------------------------------------------------------------
    # Row / field mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _format_value(value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    def to_record(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert a master_records row into the public record shape.

        Core fields are always present; type-specific columns only when set.
        Attributes are flattened into the record and longitude/latitude become
        a [longitude, latitude] coordinates pair.
        """
        record: Dict[str, Any] = {
            "id": self._format_value(row["id"]),
            "type": row["master_type"],
        }
        for field in CORE_FIELDS:
            record[field] = row.get(field)
        if record["metadata"] is None:
            record["metadata"] = {}

        for column in WRITABLE_COLUMNS:
            if column in CORE_FIELDS or column in ("longitude", "latitude"):
                continue
            value = row.get(column)
            if value is not None:
                record[column] = self._format_value(value)

        if row.get("longitude") is not None and row.get("latitude") is not None:
            record["coordinates"] = [row["longitude"], row["latitude"]]

        for key, value in (row.get("attributes") or {}).items():
            record.setdefault(key, value)

        record["created_at"] = self._format_value(row.get("created_at"))
        record["updated_at"] = self._format_value(row.get("updated_at"))
        return record

    @staticmethod
    def split_fields(fields: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Split caller fields into real columns and attributes.

        Returns:
            Tuple of (columns, attributes)
        """
        columns: Dict[str, Any] = {}
        attributes: Dict[str, Any] = {}

        for key, value in fields.items():
            if key in SYSTEM_FIELDS:
                continue
            if key == "coordinates":
                longitude, latitude = value if value is not None else (None, None)
                columns["longitude"] = longitude
                columns["latitude"] = latitude
            elif key in WRITABLE_COLUMNS:
                columns[key] = value
            else:
                attributes[key] = value

        return columns, attributes

    def parse_id(self, record_id: Any, label: Optional[str] = None) -> str:
        """
        Normalize a record id.

        Raises:
            ValidationException: If the id is not a UUID
        """
        try:
            return str(uuid.UUID(str(record_id)))
        except (ValueError, TypeError, AttributeError):
            raise ValidationException(
                f"Invalid {label or self.label} id: {record_id}",
                details={"id": str(record_id)}
            )

    # ------------------------------------------------------------------
    # Execution and error classification
    # ------------------------------------------------------------------

    def _conflict_from(self, error: IntegrityError, fields: Dict[str, Any]) -> AppException:
        message = str(error)

        if isinstance(error, errors.UniqueViolation):
            if NAME_UNIQUE_INDEX in message:
                field = "name"
            elif CODE_UNIQUE_INDEX in message or TYPE_CODE_UNIQUE_INDEX in message:
                field = "code"
            else:
                return ConflictException(f"{self.label} already exists")

            value = fields.get(field)
            return ConflictException(
                f"{self.label} with {field} '{value}' already exists",
                details={"field": field, "value": value}
            )

        if isinstance(error, errors.ForeignKeyViolation):
            return ValidationException(
                f"{self.label} references a record that does not exist",
                details={"parent_id": fields.get("parent_id")}
            )

        first_line = message.strip().splitlines()[0] if message.strip() else "integrity error"
        return ValidationException(f"Invalid {self.label} data: {first_line}")

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
            return get_db_manager().execute_query(query, params, **kwargs)
        except IntegrityError as e:
            raise self._conflict_from(e, fields or {})
        except DatabaseException as e:
            logger.error(f"Failed to {operation} {self.label}: {e.message}")
            raise DatabaseException(f"Failed to {operation} {self.label}: {e.message}")
        except AppException:
            raise
        except Exception as e:
            logger.error(f"Failed to {operation} {self.label}: {str(e)}")
            raise DatabaseException(f"Failed to {operation} {self.label}: {str(e)}")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a record of this store's type. Any `type` in fields is ignored.

        Raises:
            ConflictException: If a non-archived record already holds the name or code
        """
        columns, attributes = self.split_fields(fields)
        if columns.get("status") == MasterStatus.ARCHIVED.value:
            raise ValidationException(f"Cannot create an archived {self.label}")

        record = {
            "id": str(uuid.uuid4()),
            "master_type": self.master_type.value,
            **columns,
            "attributes": attributes,
        }

        query, values = QB.build_insert_query(record)
        row = self._execute("create", query, values, fields=fields, fetch_one=True)

        logger.info(f"Created {self.label} '{row['name']}' ({row['id']})")
        return self.to_record(row)

    def find_by_id(self, record_id: Any) -> Dict[str, Any]:
        """
        Fetch one non-archived record of this type.

        Raises:
            ValidationException: If the id is malformed
            NotFoundException: If no such record exists
        """
        normalized_id = self.parse_id(record_id)
        row = self._execute(
            "retrieve",
            QB.build_select_by_id_query(),
            (normalized_id, self.master_type.value),
            fetch_one=True
        )
        if row is None:
            raise NotFoundException(self.label, str(record_id))
        return self.to_record(row)

    def update(self, record_id: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update. The type never changes and status cannot become archived.

        Raises:
            ValidationException: If the id is malformed or the update tries to archive
            NotFoundException: If no non-archived record has the id
            ConflictException: If the new name or code collides with another record
        """
        normalized_id = self.parse_id(record_id)
        columns, attributes = self.split_fields(fields)

        if columns.get("status") == MasterStatus.ARCHIVED.value:
            raise ValidationException(
                f"Use delete to archive a {self.label}",
                details={"field": "status"}
            )

        if not columns and not attributes:
            return self.find_by_id(normalized_id)

        query, values = QB.build_update_query(
            normalized_id, self.master_type.value, columns, attributes
        )
        row = self._execute("update", query, values, fields=fields, fetch_one=True)
        if row is None:
            raise NotFoundException(self.label, str(record_id))

        logger.info(f"Updated {self.label} {normalized_id}: {sorted(fields.keys())}")
        return self.to_record(row)

    def remove(self, record_id: Any) -> Dict[str, Any]:
        """
        Soft delete: run the usage check, then archive.

        Raises:
            NotFoundException: If the record does not exist or is already archived
        """
        record = self.find_by_id(record_id)

        if self.usage_check is not None:
            self.usage_check(record)

        row = self._execute(
            "remove",
            QB.build_archive_query(),
            (record["id"], self.master_type.value),
            fetch_one=True
        )
        if row is None:
            raise NotFoundException(self.label, str(record_id))

        logger.info(f"Archived {self.label} '{row['name']}' ({record['id']})")
        return self.to_record(row)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def status_condition(status: Optional[Any]) -> Condition:
        """Archived records are hidden unless explicitly requested."""
        if status is None:
            return NOT_ARCHIVED, []
        return QB.equals("status", getattr(status, "value", status))

    def find_all(
        self,
        query: MasterQuery,
        conditions: Sequence[Optional[Condition]] = (),
        search_expressions: Sequence[str] = (),
        order: Optional[Tuple[str, Sequence[Any]]] = None
    ) -> Dict[str, Any]:
        """
        Paginated, filtered listing.

        Args:
            query: Common list options (page, limit, search, status, flags, sorting)
            conditions: Extra type-specific filter conditions
            search_expressions: Extra SQL expressions the search term is matched against
            order: Optional (ORDER BY clause, params) replacing the sort_by ordering

        Returns:
            {"records": [...], "pagination": {page, limit, total, total_pages}}
        """
        all_conditions: List[Optional[Condition]] = list(conditions)
        all_conditions.append(self.status_condition(query.status))

        if query.is_default is not None:
            all_conditions.append(QB.equals("is_default", query.is_default))
        if query.is_popular is not None:
            all_conditions.append(QB.equals("is_popular", query.is_popular))
        if query.search:
            all_conditions.append(
                QB.search(query.search, list(BASE_SEARCH_EXPRESSIONS) + list(search_expressions))
            )

        if order is None:
            order_by = QB.build_order_by(query.sort_by, query.sort_order)
            order_params: Sequence[Any] = ()
        else:
            order_by, order_params = order

        count_query, count_values = QB.build_count_query(self.master_type.value, all_conditions)
        count_row = self._execute("list", count_query, count_values, fetch_one=True)
        total = count_row["total"] if count_row else 0

        offset = (query.page - 1) * query.limit
        list_query, list_values = QB.build_list_query(
            self.master_type.value,
            all_conditions,
            order_by,
            limit=query.limit,
            offset=offset,
            order_params=order_params
        )
        rows = self._execute("list", list_query, list_values)

        return {
            "records": [self.to_record(row) for row in rows],
            "pagination": {
                "page": query.page,
                "limit": query.limit,
                "total": total,
                "total_pages": ResponseHandler.total_pages(total, query.limit),
            },
        }

    def find_where(
        self,
        conditions: Sequence[Optional[Condition]],
        sort_by: str = "sort_order",
        sort_order: str = "asc",
        limit: Optional[int] = None,
        order: Optional[Tuple[str, Sequence[Any]]] = None
    ) -> List[Dict[str, Any]]:
        """Unpaginated query over non-archived records."""
        all_conditions = [(NOT_ARCHIVED, [])] + list(conditions)
        if order is None:
            order_by = QB.build_order_by(sort_by, sort_order)
            order_params: Sequence[Any] = ()
        else:
            order_by, order_params = order

        query, values = QB.build_list_query(
            self.master_type.value,
            all_conditions,
            order_by,
            limit=limit,
            order_params=order_params
        )
        rows = self._execute("query", query, values)
        return [self.to_record(row) for row in rows]

    def find_by_parent(self, parent_id: Any, parent_label: str = "parent") -> List[Dict[str, Any]]:
        normalized_id = self.parse_id(parent_id, label=parent_label)
        return self.find_where([QB.equals("parent_id", normalized_id)], sort_by="name")

    def find_by_category(self, category: str) -> List[Dict[str, Any]]:
        return self.find_where([QB.equals("category", category)])

    def find_popular(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Active records flagged popular."""
        return self.find_where(
            [QB.equals("is_popular", True), QB.equals("status", MasterStatus.ACTIVE.value)],
            limit=limit
        )

    def find_in_range(
        self,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        expression: str = "numeric_value"
    ) -> List[Dict[str, Any]]:
        return self.find_where(
            [QB.numeric_range(expression, min_value, max_value)],
            sort_by="numeric_value"
        )

    def find_near(
        self,
        longitude: float,
        latitude: float,
        radius: float,
        limit: Optional[int] = None,
        conditions: Sequence[Optional[Condition]] = ()
    ) -> List[Dict[str, Any]]:
        """Records within `radius` meters of the point, nearest first."""
        distance_sql, distance_params = QB.distance_expression(longitude, latitude)
        return self.find_where(
            [QB.within_radius(longitude, latitude, radius)] + list(conditions),
            limit=limit,
            order=(f"ORDER BY {distance_sql} ASC, id ASC", distance_params)
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def count_by(
        self,
        expression: str,
        conditions: Sequence[Optional[Condition]] = ()
    ) -> Dict[str, int]:
        """Non-archived record counts grouped by an expression; NULL groups are dropped."""
        query, values = QB.build_group_count_query(self.master_type.value, expression, conditions)
        rows = self._execute("aggregate", query, values)
        return {str(row["key"]): row["count"] for row in rows if row["key"] is not None}

    def aggregate(
        self,
        selects: Dict[str, str],
        conditions: Sequence[Optional[Condition]] = ()
    ) -> Dict[str, Any]:
        query, values = QB.build_aggregate_query(self.master_type.value, selects, conditions)
        row = self._execute("aggregate", query, values, fetch_one=True)
        return dict(row) if row else {alias: None for alias in selects}

    def get_statistics(self, category_expression: Optional[str] = None) -> Dict[str, Any]:
        """
        Counts of non-archived records, flags and statuses.

        Args:
            category_expression: Column or expression to break the counts down by
        """
        query, values = QB.build_statistics_query(self.master_type.value)
        row = self._execute("aggregate", query, values, fetch_one=True) or {}

        statistics: Dict[str, Any] = {
            "total": row.get("total", 0),
            "active": row.get("active", 0),
            "inactive": row.get("inactive", 0),
            "popular": row.get("popular", 0),
            "default": row.get("default", 0),
            "by_status": {
                MasterStatus.ACTIVE.value: row.get("active", 0),
                MasterStatus.INACTIVE.value: row.get("inactive", 0),
                MasterStatus.ARCHIVED.value: row.get("archived", 0),
            },
        }

        if category_expression:
            statistics["by_category"] = self.count_by(category_expression)

        return statistics
