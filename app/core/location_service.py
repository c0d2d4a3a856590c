"""
Location Service.
Locations belong to a city; the parent city must exist and not be archived.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.core.exceptions import NotFoundException, ValidationException
from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_record_store import MasterRecordStore
from app.core.master_service import MasterService
from app.schemas.master_record import MasterType
from app.schemas.masters import LocationQuery

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_RADIUS_METERS = 50000


class LocationService(MasterService):
    """Service for location master data."""

    master_type = MasterType.LOCATION
    required_fields = ("parent_id",)
    search_expressions = (
        "(attributes ->> 'area')",
        "(attributes ->> 'pincode')",
        "(attributes -> 'landmarks')::text",
    )

    def __init__(self):
        super().__init__()
        self.city_store = MasterRecordStore(MasterType.CITY)

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """No other master type references locations."""

    def validate_parent_city(self, parent_id: Any) -> Dict[str, Any]:
        """
        Resolve the parent city.

        Raises:
            ValidationException: If the id is malformed or no non-archived city has it
        """
        try:
            return self.city_store.find_by_id(parent_id)
        except NotFoundException:
            logger.warning(f"Rejected location with unknown parent city {parent_id}")
            raise ValidationException(
                f"Parent city not found or archived: {parent_id}",
                details={"parent_id": str(parent_id)}
            )

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        city = self.validate_parent_city(fields.get("parent_id"))
        fields["parent_id"] = city["id"]
        fields["parent_type"] = MasterType.CITY.value
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if fields.get("parent_id") is None:
            return fields

        city = self.validate_parent_city(fields["parent_id"])
        fields["parent_id"] = city["id"]
        fields["parent_type"] = MasterType.CITY.value
        return fields

    def build_conditions(self, query: LocationQuery) -> List[Optional[Condition]]:
        conditions: List[Optional[Condition]] = []

        if query.parent_id:
            parent_id = self.store.parse_id(query.parent_id, label="City")
            conditions.append(QB.equals("parent_id", parent_id))
        if query.location_type:
            conditions.append(QB.attribute_equals("location_type", query.location_type.value))
        if query.location_category:
            conditions.append(QB.attribute_equals("location_category", query.location_category.value))
        if query.pincode:
            conditions.append(QB.attribute_equals("pincode", query.pincode))

        if query.longitude is not None:
            conditions.append(QB.within_radius(
                query.longitude,
                query.latitude,
                query.radius or DEFAULT_LOCATION_RADIUS_METERS
            ))

        return conditions

    def build_order(self, query: LocationQuery) -> Optional[Tuple[str, Sequence[Any]]]:
        if query.longitude is None:
            return None
        distance_sql, params = QB.distance_expression(query.longitude, query.latitude)
        return f"ORDER BY {distance_sql} ASC, id ASC", params

    def find_by_city(self, city_id: str) -> List[Dict[str, Any]]:
        return self.store.find_by_parent(city_id, parent_label="City")

    def find_by_type(self, location_type: str) -> List[Dict[str, Any]]:
        return self.find_by_attribute("location_type", location_type, sort_by="name")

    def find_near(
        self,
        longitude: float,
        latitude: float,
        radius: Optional[float] = None,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        return self.store.find_near(
            longitude, latitude, radius or DEFAULT_LOCATION_RADIUS_METERS, limit=limit
        )

    def extra_statistics(self) -> Dict[str, Any]:
        return {
            "by_location_type": self.store.count_by(self.attribute_text("location_type")),
            "by_location_category": self.store.count_by(self.attribute_text("location_category")),
            "by_city": self.store.count_by("parent_id::text"),
        }
