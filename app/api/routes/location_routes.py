"""
Location API Routes.
"""

from fastapi import APIRouter, Depends, Query
from typing import Annotated, Any, Dict
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.config import settings
from app.core.exceptions import AppException
from app.core.location_service import LocationService
from app.schemas.master_record import GeoQuery
from app.schemas.masters import LocationCreate, LocationQuery, LocationType, LocationUpdate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/locations",
    tags=["Masters - Locations"],
    dependencies=[Depends(get_current_user)]
)

location_service = LocationService()


@router.get("/popular", response_model=Dict[str, Any])
def get_popular_locations(limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE)):
    try:
        return records_response(
            location_service.find_popular(limit),
            "Popular locations retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_popular_locations", e)


@router.get("/by-city/{city_id}", response_model=Dict[str, Any])
def get_locations_by_city(city_id: str):
    """All non-archived locations of a city, by name."""
    try:
        return records_response(
            location_service.find_by_city(city_id),
            "Locations retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_locations_by_city", e)


@router.get("/by-type/{location_type}", response_model=Dict[str, Any])
def get_locations_by_type(location_type: LocationType):
    try:
        return records_response(
            location_service.find_by_type(location_type.value),
            f"{location_type.value} locations retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_locations_by_type", e)


@router.get("/near", response_model=Dict[str, Any])
def get_locations_near(
    point: Annotated[GeoQuery, Query()],
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE)
):
    """Locations within `radius` meters (default 50 km) of a point, nearest first."""
    try:
        return records_response(
            location_service.find_near(point.longitude, point.latitude, point.radius, limit),
            "Nearby locations retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_locations_near", e)


register_crud_routes(
    router,
    service=location_service,
    create_model=LocationCreate,
    update_model=LocationUpdate,
    query_model=LocationQuery,
    label="Location",
    plural_label="Locations"
)
