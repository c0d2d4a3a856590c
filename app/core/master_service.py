"""
Master Service base.
Shared behaviour for the per-type master data services; each subclass binds one
master type and layers its own fields, filters, named queries and statistics.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from app.core.exceptions import ValidationException
from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder
from app.core.master_record_store import MasterRecordStore
from app.schemas.master_record import MasterQuery, MasterType, NumericRangeQuery

logger = logging.getLogger(__name__)

QB = MasterRecordQueryBuilder

# NOT NULL columns of master_records that a partial update may still send as null
CORE_REQUIRED_FIELDS = ("name", "status", "sort_order", "is_default", "is_popular", "metadata")


class MasterService(ABC):
    """Base class for master data services."""

    master_type: MasterType
    # Extra SQL expressions matched by the free-text search
    search_expressions: Sequence[str] = ()
    # Column used for the by_category statistics breakdown
    category_expression: Optional[str] = None
    # Type-specific fields a record must always carry
    required_fields: Sequence[str] = ()

    def __init__(self):
        self.store = MasterRecordStore(self.master_type, usage_check=self.check_usage_before_delete)
        self.label = self.store.label

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Raise an AppException to block archiving a record that is still referenced."""

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return fields

    def build_conditions(self, query: MasterQuery) -> List[Optional[Condition]]:
        return []

    def build_order(self, query: MasterQuery) -> Optional[Tuple[str, Sequence[Any]]]:
        return None

    def extra_statistics(self) -> Dict[str, Any]:
        return {}

    def reject_cleared_fields(self, fields: Dict[str, Any]) -> None:
        """
        A partial update may leave a field out but may not set a required one to null.

        Raises:
            ValidationException: If a required field is sent as null
        """
        cleared = [
            key for key in (*CORE_REQUIRED_FIELDS, *self.required_fields)
            if key in fields and fields[key] is None
        ]
        if cleared:
            raise ValidationException(
                f"{self.label} {', '.join(cleared)} cannot be null",
                details={"fields": cleared}
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, data: BaseModel) -> Dict[str, Any]:
        fields = data.model_dump(mode="json", exclude_none=True)
        fields = self.prepare_create(fields)
        return self.store.create(fields)

    def find_all(self, query: MasterQuery) -> Dict[str, Any]:
        return self.store.find_all(
            query,
            conditions=self.build_conditions(query),
            search_expressions=self.search_expressions,
            order=self.build_order(query)
        )

    def find_by_id(self, record_id: str) -> Dict[str, Any]:
        return self.store.find_by_id(record_id)

    def update(self, record_id: str, data: BaseModel) -> Dict[str, Any]:
        fields = data.model_dump(mode="json", exclude_unset=True)
        self.reject_cleared_fields(fields)
        fields = self.prepare_update(record_id, fields)
        return self.store.update(record_id, fields)

    def remove(self, record_id: str) -> Dict[str, Any]:
        return self.store.remove(record_id)

    def get_statistics(self) -> Dict[str, Any]:
        statistics = self.store.get_statistics(self.category_expression)
        statistics.update(self.extra_statistics())
        return statistics

    def find_popular(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self.store.find_popular(limit)

    # ------------------------------------------------------------------
    # Helpers shared by subclasses
    # ------------------------------------------------------------------

    @staticmethod
    def attribute_text(key: str) -> str:
        """SQL expression reading a text attribute."""
        return f"(attributes ->> '{key}')"

    @staticmethod
    def numeric_conditions(query: NumericRangeQuery) -> List[Optional[Condition]]:
        """min_value/max_value/unit filters shared by the numeric-valued types."""
        conditions: List[Optional[Condition]] = [
            QB.numeric_range("numeric_value", query.min_value, query.max_value)
        ]
        if query.unit:
            conditions.append(QB.equals("LOWER(unit)", query.unit.lower()))
        return conditions

    def unit_after_update(self, record_id: str, fields: Dict[str, Any]) -> Optional[str]:
        """Unit the record carries once `fields` are applied."""
        if fields.get("unit"):
            return fields["unit"]
        return self.find_by_id(record_id).get("unit")

    def find_by_attribute(
        self,
        key: str,
        value: Any,
        sort_by: str = "sort_order"
    ) -> List[Dict[str, Any]]:
        return self.store.find_where([QB.attribute_equals(key, value)], sort_by=sort_by)
