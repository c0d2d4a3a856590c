"""
Tower Service.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_service import MasterService
from app.schemas.master_record import MasterStatus, MasterType
from app.schemas.masters import TowerQuery

logger = logging.getLogger(__name__)


class TowerService(MasterService):
    """Service for tower master data."""

    master_type = MasterType.TOWER
    required_fields = ("numeric_value",)
    search_expressions = ("(attributes ->> 'tower_type')", "(attributes ->> 'display_name')")

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Towers are not referenced by other master types."""

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if not fields.get("display_name"):
            fields["display_name"] = f"{fields.get('unit') or 'Tower'} {fields['numeric_value']}"
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if fields.get("numeric_value") is not None and not fields.get("display_name"):
            unit = self.unit_after_update(record_id, fields)
            fields["display_name"] = f"{unit or 'Tower'} {fields['numeric_value']}"
        return fields

    def build_conditions(self, query: TowerQuery) -> List[Optional[Condition]]:
        conditions = self.numeric_conditions(query)
        if query.tower_type:
            conditions.append(QB.attribute_equals("tower_type", query.tower_type.value))
        return conditions

    def find_by_type(self, tower_type: str) -> List[Dict[str, Any]]:
        return self.find_by_attribute("tower_type", tower_type, sort_by="numeric_value")

    def find_active(self) -> List[Dict[str, Any]]:
        """Towers flagged operational whose record is active."""
        return self.store.find_where(
            [
                QB.attribute_equals("is_active", True),
                QB.equals("status", MasterStatus.ACTIVE.value),
            ],
            sort_by="numeric_value"
        )

    def find_in_range(self, min_value: Optional[int], max_value: Optional[int]) -> List[Dict[str, Any]]:
        return self.store.find_in_range(min_value, max_value)

    def extra_statistics(self) -> Dict[str, Any]:
        totals = self.store.aggregate({
            "total_units": "COALESCE(SUM((attributes ->> 'total_units')::numeric), 0)",
        })
        return {
            "by_tower_type": self.store.count_by(self.attribute_text("tower_type")),
            "total_units": int(totals.get("total_units") or 0),
        }
