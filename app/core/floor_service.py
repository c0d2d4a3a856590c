"""
Floor Service.
Floors are identified by their floor number: 0 is the ground floor and
negative numbers are basement levels.
"""

import logging
from typing import Any, Dict, List, Optional

from app.core.exceptions import NotFoundException
from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_service import MasterService
from app.schemas.master_record import MasterType
from app.schemas.masters import FloorQuery

logger = logging.getLogger(__name__)

PRICE_MULTIPLIER = "(attributes ->> 'price_multiplier')::numeric"
IS_AVAILABLE = "COALESCE((attributes ->> 'is_available')::boolean, TRUE)"


def ordinal(number: int) -> str:
    """English ordinal: 1st, 2nd, 3rd, 4th, 11th, 12th, 13th, 21st, 102nd."""
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def floor_display_name(floor_number: int) -> str:
    if floor_number == 0:
        return "Ground Floor"
    if floor_number < 0:
        return f"Basement {abs(floor_number)}"
    return f"{ordinal(floor_number)} Floor"


class FloorService(MasterService):
    """Service for floor master data."""

    master_type = MasterType.FLOOR
    required_fields = ("numeric_value",)
    search_expressions = (
        "(attributes ->> 'display_name')",
        "(attributes ->> 'floor_type')",
        "(attributes ->> 'usage')",
    )

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Floors are not referenced by other master types."""

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if not fields.get("display_name"):
            fields["display_name"] = floor_display_name(fields["numeric_value"])
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        # A renumbered floor gets a fresh display name unless one is supplied
        if fields.get("numeric_value") is not None and not fields.get("display_name"):
            fields["display_name"] = floor_display_name(fields["numeric_value"])
        return fields

    def build_conditions(self, query: FloorQuery) -> List[Optional[Condition]]:
        conditions = self.numeric_conditions(query)
        if query.floor_type:
            conditions.append(QB.attribute_equals("floor_type", query.floor_type.value))
        if query.usage:
            conditions.append(QB.attribute_equals("usage", query.usage.value))
        return conditions

    def find_by_type(self, floor_type: str) -> List[Dict[str, Any]]:
        return self.find_by_attribute("floor_type", floor_type, sort_by="numeric_value")

    def find_by_usage(self, usage: str) -> List[Dict[str, Any]]:
        return self.find_by_attribute("usage", usage, sort_by="numeric_value")

    def find_available(self) -> List[Dict[str, Any]]:
        return self.store.find_where([(IS_AVAILABLE, [])], sort_by="numeric_value")

    def find_in_range(self, min_floor: Optional[int], max_floor: Optional[int]) -> List[Dict[str, Any]]:
        return self.store.find_in_range(min_floor, max_floor)

    def find_basement(self) -> List[Dict[str, Any]]:
        """Basement levels from B1 downwards."""
        return self.store.find_where(
            [QB.numeric_range("numeric_value", max_value=-1)],
            sort_by="numeric_value",
            sort_order="desc"
        )

    def find_ground(self) -> Dict[str, Any]:
        floors = self.store.find_where([QB.equals("numeric_value", 0)], limit=1)
        if not floors:
            raise NotFoundException(self.label, "ground floor")
        return floors[0]

    def find_upper(self) -> List[Dict[str, Any]]:
        return self.store.find_where(
            [QB.numeric_range("numeric_value", min_value=1)],
            sort_by="numeric_value"
        )

    def find_premium(self) -> List[Dict[str, Any]]:
        """Floors priced above the base rate, highest multiplier first."""
        return self.store.find_where(
            [(f"{PRICE_MULTIPLIER} > 1", [])],
            order=(f"ORDER BY {PRICE_MULTIPLIER} DESC, numeric_value ASC, id ASC", ())
        )

    def extra_statistics(self) -> Dict[str, Any]:
        totals = self.store.aggregate({
            "available": f"COUNT(*) FILTER (WHERE {IS_AVAILABLE})",
            "unavailable": f"COUNT(*) FILTER (WHERE NOT {IS_AVAILABLE})",
            "min_floor": "MIN(numeric_value)",
            "max_floor": "MAX(numeric_value)",
            "basement_floors": "COUNT(*) FILTER (WHERE numeric_value < 0)",
            "ground_floors": "COUNT(*) FILTER (WHERE numeric_value = 0)",
            "upper_floors": "COUNT(*) FILTER (WHERE numeric_value > 0)",
            "average_price_multiplier": f"AVG({PRICE_MULTIPLIER})",
        })
        average_multiplier = totals.get("average_price_multiplier")

        return {
            "by_floor_type": self.store.count_by(self.attribute_text("floor_type")),
            "by_usage": self.store.count_by(self.attribute_text("usage")),
            "availability": {
                "available": totals.get("available") or 0,
                "unavailable": totals.get("unavailable") or 0,
            },
            "floor_range": {
                "min": totals.get("min_floor"),
                "max": totals.get("max_floor"),
                "basement_floors": totals.get("basement_floors") or 0,
                "ground_floors": totals.get("ground_floors") or 0,
                "upper_floors": totals.get("upper_floors") or 0,
            },
            "average_price_multiplier": (
                round(float(average_multiplier), 2) if average_multiplier is not None else None
            ),
        }
