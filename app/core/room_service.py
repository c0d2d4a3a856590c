"""
Room Service.
Room configurations keyed by bedroom count (1 BHK, 2 BHK, ...).
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_service import MasterService
from app.schemas.master_record import MasterType
from app.schemas.masters import RoomQuery

logger = logging.getLogger(__name__)


class RoomService(MasterService):
    master_type = MasterType.ROOM
    required_fields = ("numeric_value",)
    search_expressions = ("(attributes ->> 'room_type')", "(attributes -> 'features')::text")

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Room configurations are not referenced by other master types."""

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if not fields.get("display_name"):
            fields["display_name"] = f"{fields['numeric_value']} {fields.get('unit') or 'BHK'}"
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if fields.get("numeric_value") is not None and not fields.get("display_name"):
            unit = self.unit_after_update(record_id, fields)
            fields["display_name"] = f"{fields['numeric_value']} {unit or 'BHK'}"
        return fields

    def build_conditions(self, query: RoomQuery) -> List[Optional[Condition]]:
        conditions = self.numeric_conditions(query)
        if query.room_type:
            conditions.append(QB.attribute_equals("room_type", query.room_type.value))
        return conditions

    def find_by_type(self, room_type: str) -> List[Dict[str, Any]]:
        return self.find_by_attribute("room_type", room_type, sort_by="numeric_value")

    def find_in_range(self, min_value: Optional[int], max_value: Optional[int]) -> List[Dict[str, Any]]:
        return self.store.find_in_range(min_value, max_value)

    def extra_statistics(self) -> Dict[str, Any]:
        return {
            "by_room_type": self.store.count_by(self.attribute_text("room_type")),
            "by_popularity_rating": self.store.count_by(self.attribute_text("popularity_rating")),
        }
