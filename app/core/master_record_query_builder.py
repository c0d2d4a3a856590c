"""
Master Record Query Builder - SQL query construction.
Centralized query building with parameterized queries for the shared master_records table.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from psycopg2.extras import Json

from app.core.exceptions import ValidationException

MASTER_RECORDS_TABLE = "master_records"

NAME_UNIQUE_INDEX = "uq_master_records_type_name"
CODE_UNIQUE_INDEX = "uq_master_records_code"
TYPE_CODE_UNIQUE_INDEX = "uq_master_records_type_code"

EARTH_RADIUS_METERS = 6371000

# Real columns of master_records that callers may write.
# Anything else a service hands to the store is kept in the attributes JSONB column.
WRITABLE_COLUMNS = (
    "name",
    "description",
    "code",
    "status",
    "sort_order",
    "is_default",
    "is_popular",
    "metadata",
    "parent_id",
    "parent_type",
    "category",
    "icon",
    "color",
    "numeric_value",
    "unit",
    "min_value",
    "max_value",
    "state",
    "country",
    "longitude",
    "latitude",
    "timezone",
    "pin_codes",
)

JSON_COLUMNS = ("metadata", "attributes")

SORTABLE_FIELDS = {
    "sort_order": "sort_order",
    "name": "name",
    "code": "code",
    "status": "status",
    "created_at": "created_at",
    "updated_at": "updated_at",
    "numeric_value": "numeric_value",
    "state": "state",
    "country": "country",
    "category": "category",
}

NOT_ARCHIVED = "status <> 'archived'"

Condition = Tuple[str, List[Any]]


class MasterRecordQueryBuilder:
    """Builds SQL queries for master record operations."""

    # ------------------------------------------------------------------
    # Condition helpers
    # ------------------------------------------------------------------

    @staticmethod
    def equals(column: str, value: Any) -> Condition:
        return f"{column} = %s", [value]

    @staticmethod
    def attribute_equals(key: str, value: Any) -> Condition:
        """Match a key stored in the attributes JSONB column."""
        return "attributes @> %s::jsonb", [Json({key: value})]

    @staticmethod
    def attribute_contains_any(key: str, values: Sequence[str]) -> Condition:
        """Match records whose attributes[key] array shares at least one element with values."""
        return "(attributes -> %s) ?| %s", [key, list(values)]

    @staticmethod
    def escape_like(term: str) -> str:
        return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

    @staticmethod
    def ilike(expression: str, term: str) -> Condition:
        """Case-insensitive contains match."""
        return f"{expression} ILIKE %s", [f"%{MasterRecordQueryBuilder.escape_like(term)}%"]

    @staticmethod
    def numeric_range(
        expression: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None
    ) -> Optional[Condition]:
        """Inclusive range; None when neither bound is given."""
        clauses = []
        params: List[Any] = []
        if min_value is not None:
            clauses.append(f"{expression} >= %s")
            params.append(min_value)
        if max_value is not None:
            clauses.append(f"{expression} <= %s")
            params.append(max_value)
        if not clauses:
            return None
        return " AND ".join(clauses), params

    @staticmethod
    def array_contains(column: str, value: Any) -> Condition:
        return f"%s = ANY({column})", [value]

    @staticmethod
    def distance_expression(longitude: float, latitude: float) -> Condition:
        """Haversine great-circle distance in meters from the given point."""
        sql = (
            f"(2 * {EARTH_RADIUS_METERS} * ASIN(LEAST(1, SQRT("
            "POWER(SIN(RADIANS(latitude - %s) / 2), 2) + "
            "COS(RADIANS(%s)) * COS(RADIANS(latitude)) * "
            "POWER(SIN(RADIANS(longitude - %s) / 2), 2)"
            "))))"
        )
        return sql, [latitude, latitude, longitude]

    @staticmethod
    def within_radius(longitude: float, latitude: float, radius: float) -> Condition:
        distance_sql, params = MasterRecordQueryBuilder.distance_expression(longitude, latitude)
        return (
            f"longitude IS NOT NULL AND latitude IS NOT NULL AND {distance_sql} <= %s",
            params + [radius],
        )

    @staticmethod
    def search(term: str, expressions: Sequence[str]) -> Condition:
        """OR together a case-insensitive contains match over every expression."""
        pattern = f"%{MasterRecordQueryBuilder.escape_like(term)}%"
        clauses = [f"{expression} ILIKE %s" for expression in expressions]
        return f"({' OR '.join(clauses)})", [pattern] * len(clauses)

    @staticmethod
    def build_where(master_type: str, conditions: Sequence[Optional[Condition]]) -> Condition:
        """
        Combine the type discriminator with caller conditions.

        Args:
            master_type: Discriminator value every query is scoped to
            conditions: (sql, params) pairs; None entries are skipped

        Returns:
            Tuple of (where_sql, values)
        """
        clauses = ["master_type = %s"]
        values: List[Any] = [master_type]
        for condition in conditions:
            if condition is None:
                continue
            sql, params = condition
            clauses.append(f"({sql})")
            values.extend(params)
        return f"WHERE {' AND '.join(clauses)}", values

    @staticmethod
    def build_order_by(sort_by: str, sort_order: str) -> str:
        """
        ORDER BY clause from whitelisted fields. The id tie-break keeps paging stable.

        Raises:
            ValidationException: If the sort field is not sortable
        """
        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise ValidationException(
                f"Cannot sort by '{sort_by}'",
                details={"sortable_fields": sorted(SORTABLE_FIELDS)}
            )
        direction = "DESC" if sort_order == "desc" else "ASC"
        return f"ORDER BY {column} {direction} NULLS LAST, id {direction}"

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    @staticmethod
    def adapt_value(column: str, value: Any) -> Any:
        if column in JSON_COLUMNS and value is not None:
            return Json(value)
        return value

    @staticmethod
    def build_insert_query(record: Dict[str, Any]) -> Tuple[str, List[Any]]:
        """
        Build INSERT query with parameterized values.

        Args:
            record: Column values including id and master_type

        Returns:
            Tuple of (query, values)
        """
        columns = list(record.keys())
        values = [MasterRecordQueryBuilder.adapt_value(col, record[col]) for col in columns]

        query = f"""
            INSERT INTO {MASTER_RECORDS_TABLE}
            ({', '.join(columns)})
            VALUES ({', '.join(['%s'] * len(columns))})
            RETURNING *
        """

        return query, values

    @staticmethod
    def build_select_by_id_query() -> str:
        """Select one non-archived record of a type by id."""
        return f"""
            SELECT * FROM {MASTER_RECORDS_TABLE}
            WHERE id = %s AND master_type = %s AND {NOT_ARCHIVED}
        """

    @staticmethod
    def build_update_query(
        record_id: str,
        master_type: str,
        columns: Dict[str, Any],
        attributes: Dict[str, Any]
    ) -> Tuple[str, List[Any]]:
        """
        Build UPDATE query. Attributes are merged into the stored JSONB document;
        master_type is never part of the SET list.

        Returns:
            Tuple of (query, values)
        """
        set_clauses = [f"{col} = %s" for col in columns.keys()]
        values = [MasterRecordQueryBuilder.adapt_value(col, val) for col, val in columns.items()]

        if attributes:
            set_clauses.append("attributes = attributes || %s::jsonb")
            values.append(Json(attributes))

        set_clauses.append("updated_at = NOW()")
        values.extend([record_id, master_type])

        query = f"""
            UPDATE {MASTER_RECORDS_TABLE}
            SET {', '.join(set_clauses)}
            WHERE id = %s AND master_type = %s AND {NOT_ARCHIVED}
            RETURNING *
        """

        return query, values

    @staticmethod
    def build_archive_query() -> str:
        """Soft delete: archived is terminal and hidden from every default lookup."""
        return f"""
            UPDATE {MASTER_RECORDS_TABLE}
            SET status = 'archived', updated_at = NOW()
            WHERE id = %s AND master_type = %s AND {NOT_ARCHIVED}
            RETURNING *
        """

    @staticmethod
    def build_list_query(
        master_type: str,
        conditions: Sequence[Optional[Condition]],
        order_by: str,
        limit: Optional[int] = None,
        offset: int = 0,
        order_params: Sequence[Any] = ()
    ) -> Tuple[str, List[Any]]:
        """
        Build paginated list query with filters.

        Args:
            master_type: Discriminator value
            conditions: Filter conditions
            order_by: Complete ORDER BY clause
            limit: Records limit, None for all
            offset: Records offset
            order_params: Parameters referenced by the ORDER BY clause

        Returns:
            Tuple of (query, values)
        """
        where_sql, values = MasterRecordQueryBuilder.build_where(master_type, conditions)
        values.extend(order_params)

        paging_sql = ""
        if limit is not None:
            paging_sql = "LIMIT %s OFFSET %s"
            values.extend([limit, offset])

        query = f"""
            SELECT * FROM {MASTER_RECORDS_TABLE}
            {where_sql}
            {order_by}
            {paging_sql}
        """

        return query, values

    @staticmethod
    def build_count_query(
        master_type: str,
        conditions: Sequence[Optional[Condition]]
    ) -> Tuple[str, List[Any]]:
        where_sql, values = MasterRecordQueryBuilder.build_where(master_type, conditions)

        query = f"""
            SELECT COUNT(*) AS total FROM {MASTER_RECORDS_TABLE}
            {where_sql}
        """

        return query, values

    @staticmethod
    def build_statistics_query(master_type: str) -> Tuple[str, List[Any]]:
        """Status and flag counts for one master type in a single pass."""
        query = f"""
            SELECT
                COUNT(*) FILTER (WHERE {NOT_ARCHIVED}) AS total,
                COUNT(*) FILTER (WHERE status = 'active') AS active,
                COUNT(*) FILTER (WHERE status = 'inactive') AS inactive,
                COUNT(*) FILTER (WHERE status = 'archived') AS archived,
                COUNT(*) FILTER (WHERE is_popular AND {NOT_ARCHIVED}) AS popular,
                COUNT(*) FILTER (WHERE is_default AND {NOT_ARCHIVED}) AS "default"
            FROM {MASTER_RECORDS_TABLE}
            WHERE master_type = %s
        """
        return query, [master_type]

    @staticmethod
    def build_group_count_query(
        master_type: str,
        expression: str,
        conditions: Sequence[Optional[Condition]] = ()
    ) -> Tuple[str, List[Any]]:
        """Count non-archived records grouped by an expression, largest group first."""
        where_sql, values = MasterRecordQueryBuilder.build_where(
            master_type, [(NOT_ARCHIVED, [])] + list(conditions)
        )

        query = f"""
            SELECT {expression} AS key, COUNT(*) AS count
            FROM {MASTER_RECORDS_TABLE}
            {where_sql}
            GROUP BY 1
            ORDER BY count DESC, key ASC
        """

        return query, values

    @staticmethod
    def build_aggregate_query(
        master_type: str,
        selects: Dict[str, str],
        conditions: Sequence[Optional[Condition]] = ()
    ) -> Tuple[str, List[Any]]:
        """
        Build a single-row aggregate over non-archived records.

        Args:
            master_type: Discriminator value
            selects: Output alias mapped to an aggregate SQL expression
            conditions: Extra filter conditions
        """
        where_sql, values = MasterRecordQueryBuilder.build_where(
            master_type, [(NOT_ARCHIVED, [])] + list(conditions)
        )
        select_sql = ", ".join(f'{expression} AS "{alias}"' for alias, expression in selects.items())

        query = f"""
            SELECT {select_sql}
            FROM {MASTER_RECORDS_TABLE}
            {where_sql}
        """

        return query, values
