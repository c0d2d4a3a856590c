"""
Property Type Service.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_service import MasterService
from app.schemas.master_record import MasterType
from app.schemas.masters import PropertyTypeCategory, PropertyTypeQuery

logger = logging.getLogger(__name__)


class PropertyTypeService(MasterService):
    """Service for property type master data."""

    master_type = MasterType.PROPERTY_TYPE
    required_fields = ("category",)
    category_expression = "category"
    search_expressions = ("category", "(attributes -> 'suitable_for')::text")

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Property types are not referenced by other master types."""

    def build_conditions(self, query: PropertyTypeQuery) -> List[Optional[Condition]]:
        if query.category:
            return [QB.equals("category", query.category.value)]
        return []

    def find_by_category(self, category: str) -> List[Dict[str, Any]]:
        return self.store.find_by_category(category)

    def find_residential(self) -> List[Dict[str, Any]]:
        return self.store.find_by_category(PropertyTypeCategory.RESIDENTIAL.value)

    def find_commercial(self) -> List[Dict[str, Any]]:
        return self.store.find_by_category(PropertyTypeCategory.COMMERCIAL.value)

    def extra_statistics(self) -> Dict[str, Any]:
        return {
            "by_popularity_rating": self.store.count_by(self.attribute_text("popularity_rating")),
        }
