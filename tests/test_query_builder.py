"""Tests for MasterRecordQueryBuilder SQL and parameters."""

import pytest
from psycopg2.extras import Json

from app.core.exceptions import ValidationException
from app.core.master_record_query_builder import MasterRecordQueryBuilder as QB
from app.schemas.master_record import SortDirection


def test_ilike_escapes_wildcards():
    sql, params = QB.ilike("name", "50%_off")
    assert sql == "name ILIKE %s"
    assert params == ["%50\\%\\_off%"]


def test_numeric_range_bounds():
    assert QB.numeric_range("numeric_value") is None
    assert QB.numeric_range("numeric_value", min_value=2) == ("numeric_value >= %s", [2])
    assert QB.numeric_range("numeric_value", 1, 3) == (
        "numeric_value >= %s AND numeric_value <= %s",
        [1, 3],
    )


def test_search_matches_every_expression():
    sql, params = QB.search("pune", ["name", "description", "code"])
    assert sql == "(name ILIKE %s OR description ILIKE %s OR code ILIKE %s)"
    assert params == ["%pune%"] * 3


def test_where_is_scoped_to_type_and_skips_missing_conditions():
    where_sql, values = QB.build_where("floor", [None, QB.equals("unit", "Floor")])
    assert where_sql == "WHERE master_type = %s AND (unit = %s)"
    assert values == ["floor", "Floor"]


def test_order_by_has_id_tie_break():
    assert QB.build_order_by("name", "asc") == "ORDER BY name ASC NULLS LAST, id ASC"
    assert QB.build_order_by("numeric_value", SortDirection.DESC) == (
        "ORDER BY numeric_value DESC NULLS LAST, id DESC"
    )


def test_order_by_rejects_unknown_field():
    with pytest.raises(ValidationException) as exc_info:
        QB.build_order_by("name; DROP TABLE master_records", "asc")
    assert exc_info.value.status_code == 400


def test_insert_wraps_json_columns():
    query, values = QB.build_insert_query({
        "id": "3f0c5a52-5d0e-4d7b-9d43-2a1d1c7e9b11",
        "master_type": "city",
        "name": "Pune",
        "metadata": {"source": "import"},
        "attributes": {"district": "Pune"},
    })

    assert "INSERT INTO master_records" in query
    assert "RETURNING *" in query
    assert values[:3] == ["3f0c5a52-5d0e-4d7b-9d43-2a1d1c7e9b11", "city", "Pune"]
    assert isinstance(values[3], Json) and values[3].adapted == {"source": "import"}
    assert isinstance(values[4], Json) and values[4].adapted == {"district": "Pune"}


def test_update_never_touches_master_type_and_merges_attributes():
    query, values = QB.build_update_query(
        "record-id", "city", {"name": "Poona"}, {"district": "Pune"}
    )

    set_clause = query.split("SET", 1)[1].split("WHERE", 1)[0]
    assert "master_type" not in set_clause
    assert "attributes = attributes || %s::jsonb" in set_clause
    assert "status <> 'archived'" in query
    assert values[0] == "Poona"
    assert values[1].adapted == {"district": "Pune"}
    assert values[-2:] == ["record-id", "city"]


def test_archive_only_hits_live_records():
    query = QB.build_archive_query()
    assert "SET status = 'archived'" in query
    assert "status <> 'archived'" in query.split("WHERE", 1)[1]


def test_within_radius_parameters():
    sql, params = QB.within_radius(73.85, 18.52, 5000)
    assert sql.startswith("longitude IS NOT NULL AND latitude IS NOT NULL")
    assert "ASIN" in sql
    assert params == [18.52, 18.52, 73.85, 5000]


def test_list_query_appends_paging_after_order_params():
    query, values = QB.build_list_query(
        "city",
        [("status <> 'archived'", [])],
        "ORDER BY name ASC, id ASC",
        limit=10,
        offset=20,
        order_params=[1.5],
    )
    assert "LIMIT %s OFFSET %s" in query
    assert values == ["city", 1.5, 10, 20]


def test_list_query_without_limit_returns_everything():
    query, values = QB.build_list_query("city", [], "ORDER BY name ASC, id ASC")
    assert "LIMIT" not in query
    assert values == ["city"]


def test_group_count_excludes_archived():
    query, values = QB.build_group_count_query("amenity", "category")
    assert "SELECT category AS key" in query
    assert "(status <> 'archived')" in query
    assert values == ["amenity"]
