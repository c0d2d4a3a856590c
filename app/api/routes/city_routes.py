"""
City API Routes.
"""

from fastapi import APIRouter, Depends, Query
from typing import Annotated, Any, Dict
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.config import settings
from app.core.city_service import CityService
from app.core.exceptions import AppException
from app.schemas.master_record import GeoQuery
from app.schemas.masters import CityCreate, CityQuery, CityUpdate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/cities",
    tags=["Masters - Cities"],
    dependencies=[Depends(get_current_user)]
)

city_service = CityService()


@router.get("/popular", response_model=Dict[str, Any])
def get_popular_cities(limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE)):
    """Active cities flagged as popular."""
    try:
        return records_response(
            city_service.find_popular(limit),
            "Popular cities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_popular_cities", e)


@router.get("/by-state/{state}", response_model=Dict[str, Any])
def get_cities_by_state(state: str):
    try:
        return records_response(
            city_service.find_by_state(state),
            f"Cities in {state} retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_cities_by_state", e)


@router.get("/by-country/{country}", response_model=Dict[str, Any])
def get_cities_by_country(country: str):
    try:
        return records_response(
            city_service.find_by_country(country),
            f"Cities in {country} retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_cities_by_country", e)


@router.get("/near", response_model=Dict[str, Any])
def get_cities_near(
    point: Annotated[GeoQuery, Query()],
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE)
):
    """
    Cities within `radius` meters (default 100 km) of a point, nearest first.
    """
    try:
        return records_response(
            city_service.find_near(point.longitude, point.latitude, point.radius, limit),
            "Nearby cities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_cities_near", e)


register_crud_routes(
    router,
    service=city_service,
    create_model=CityCreate,
    update_model=CityUpdate,
    query_model=CityQuery,
    label="City",
    plural_label="Cities"
)
