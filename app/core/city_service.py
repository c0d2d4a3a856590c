"""
City Service.
Cities carry state/country, optional coordinates and pin codes, and support
proximity search.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.core.master_record_query_builder import Condition, MasterRecordQueryBuilder as QB
from app.core.master_service import MasterService
from app.schemas.master_record import MasterType
from app.schemas.masters import CityQuery

logger = logging.getLogger(__name__)

DEFAULT_CITY_RADIUS_METERS = 100000

AVERAGE_PRICE = "(attributes ->> 'average_property_price')::numeric"


class CityService(MasterService):
    """Service for city master data."""

    master_type = MasterType.CITY
    required_fields = ("state", "country")
    search_expressions = (
        "state",
        "country",
        "(attributes ->> 'district')",
        "array_to_string(pin_codes, ' ')",
    )

    def check_usage_before_delete(self, record: Dict[str, Any]) -> None:
        """Archiving a city leaves its locations untouched; nothing blocks it."""

    def prepare_create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields.setdefault("pin_codes", [])
        if fields.get("state_code"):
            fields["state_code"] = fields["state_code"].upper()
        if fields.get("country_code"):
            fields["country_code"] = fields["country_code"].upper()
        return fields

    def prepare_update(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        for key in ("state_code", "country_code"):
            if fields.get(key):
                fields[key] = fields[key].upper()
        return fields

    def build_conditions(self, query: CityQuery) -> List[Optional[Condition]]:
        conditions: List[Optional[Condition]] = []

        if query.state:
            conditions.append(QB.ilike("state", query.state))
        if query.country:
            conditions.append(QB.ilike("country", query.country))
        if query.pin_code:
            conditions.append(QB.array_contains("pin_codes", query.pin_code))
        if query.state_code:
            conditions.append(QB.attribute_equals("state_code", query.state_code.upper()))
        if query.country_code:
            conditions.append(QB.attribute_equals("country_code", query.country_code.upper()))

        conditions.append(
            QB.numeric_range(AVERAGE_PRICE, query.min_property_price, query.max_property_price)
        )

        if query.longitude is not None:
            conditions.append(QB.within_radius(
                query.longitude,
                query.latitude,
                query.radius or DEFAULT_CITY_RADIUS_METERS
            ))

        return conditions

    def build_order(self, query: CityQuery) -> Optional[Tuple[str, Sequence[Any]]]:
        """Proximity searches are ordered nearest first."""
        if query.longitude is None:
            return None
        distance_sql, params = QB.distance_expression(query.longitude, query.latitude)
        return f"ORDER BY {distance_sql} ASC, id ASC", params

    def find_by_state(self, state: str) -> List[Dict[str, Any]]:
        return self.store.find_where([QB.equals("LOWER(state)", state.lower())], sort_by="name")

    def find_by_country(self, country: str) -> List[Dict[str, Any]]:
        return self.store.find_where([QB.equals("LOWER(country)", country.lower())], sort_by="name")

    def find_near(
        self,
        longitude: float,
        latitude: float,
        radius: Optional[float] = None,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        return self.store.find_near(
            longitude, latitude, radius or DEFAULT_CITY_RADIUS_METERS, limit=limit
        )

    def extra_statistics(self) -> Dict[str, Any]:
        totals = self.store.aggregate({
            "popular_cities_count": "COUNT(*) FILTER (WHERE is_popular)",
            "cities_with_real_estate_data": "COUNT(*) FILTER (WHERE attributes ? 'average_property_price')",
            "average_property_price": f"AVG({AVERAGE_PRICE})",
        })
        average_price = totals.get("average_property_price")

        return {
            "by_state": self.store.count_by("state"),
            "by_country": self.store.count_by("country"),
            "popular_cities_count": totals.get("popular_cities_count") or 0,
            "cities_with_real_estate_data": totals.get("cities_with_real_estate_data") or 0,
            "average_property_price": round(float(average_price), 2) if average_price is not None else None,
        }
