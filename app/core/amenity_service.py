"""
Amenity Service.
Categorized amenities with tags, an importance level and availability flags.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from app.core.exceptions import ValidationException
from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_service import MasterService
from app.schemas.master_record import MasterType
from app.schemas.masters import AmenityQuery

logger = logging.getLogger(__name__)

AVAILABILITY_KINDS = ("residential", "commercial", "luxury", "basic")


class AmenityService(MasterService):
    """Service for amenity master data."""

    master_type = MasterType.AMENITY
    required_fields = ("category",)
    category_expression = "category"
    search_expressions = ("category", "(attributes -> 'tags')::text")

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Amenities are not referenced by other master types."""

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if fields.get("tags"):
            fields["tags"] = self._normalize_tags(fields["tags"])
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if fields.get("tags"):
            fields["tags"] = self._normalize_tags(fields["tags"])
        return fields

    @staticmethod
    def _normalize_tags(tags: Sequence[str]) -> List[str]:
        """Lower-case, trimmed, de-duplicated, original order kept."""
        normalized = []
        for tag in tags:
            value = tag.strip().lower()
            if value and value not in normalized:
                normalized.append(value)
        return normalized

    def build_conditions(self, query: AmenityQuery) -> List[Optional[Condition]]:
        conditions: List[Optional[Condition]] = []
        if query.category:
            conditions.append(QB.equals("category", query.category.value))
        if query.importance_level is not None:
            conditions.append(QB.attribute_equals("importance_level", query.importance_level))
        return conditions

    def find_by_category(self, category: str) -> List[Dict[str, Any]]:
        return self.store.find_by_category(category)

    def find_by_importance(self, level: int) -> List[Dict[str, Any]]:
        return self.find_by_attribute("importance_level", level, sort_by="name")

    def find_by_availability(self, kind: str) -> List[Dict[str, Any]]:
        """Amenities available for residential, commercial, luxury or basic projects."""
        if kind not in AVAILABILITY_KINDS:
            raise ValidationException(
                f"Unknown availability '{kind}'",
                details={"allowed": list(AVAILABILITY_KINDS)}
            )
        return self.find_by_attribute("availability", {kind: True})

    def find_by_tags(self, tags: Sequence[str]) -> List[Dict[str, Any]]:
        """Amenities carrying at least one of the tags."""
        normalized = self._normalize_tags(tags)
        if not normalized:
            raise ValidationException("At least one tag is required", details={"field": "tags"})
        return self.store.find_where([QB.attribute_contains_any("tags", normalized)])

    def extra_statistics(self) -> Dict[str, Any]:
        return {
            "by_importance": self.store.count_by(self.attribute_text("importance_level")),
        }
