"""
Amenity API Routes.
"""

from fastapi import APIRouter, Depends, Path, Query
from typing import Any, Dict, List
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.config import settings
from app.core.amenity_service import AmenityService
from app.core.exceptions import AppException
from app.schemas.masters import AmenityCategory, AmenityCreate, AmenityQuery, AmenityUpdate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/amenities",
    tags=["Masters - Amenities"],
    dependencies=[Depends(get_current_user)]
)

amenity_service = AmenityService()


@router.get("/popular", response_model=Dict[str, Any])
def get_popular_amenities(limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE)):
    try:
        return records_response(
            amenity_service.find_popular(limit),
            "Popular amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_popular_amenities", e)


@router.get("/category/{category}", response_model=Dict[str, Any])
def get_amenities_by_category(category: AmenityCategory):
    try:
        return records_response(
            amenity_service.find_by_category(category.value),
            f"{category.value} amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_amenities_by_category", e)


@router.get("/importance/{level}", response_model=Dict[str, Any])
def get_amenities_by_importance(level: int = Path(..., ge=1, le=5)):
    try:
        return records_response(
            amenity_service.find_by_importance(level),
            f"Amenities with importance {level} retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_amenities_by_importance", e)


@router.get("/residential", response_model=Dict[str, Any])
def get_residential_amenities():
    try:
        return records_response(
            amenity_service.find_by_availability("residential"),
            "Residential amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_residential_amenities", e)


@router.get("/commercial", response_model=Dict[str, Any])
def get_commercial_amenities():
    try:
        return records_response(
            amenity_service.find_by_availability("commercial"),
            "Commercial amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_commercial_amenities", e)


@router.get("/luxury", response_model=Dict[str, Any])
def get_luxury_amenities():
    try:
        return records_response(
            amenity_service.find_by_availability("luxury"),
            "Luxury amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_luxury_amenities", e)


@router.get("/basic", response_model=Dict[str, Any])
def get_basic_amenities():
    try:
        return records_response(
            amenity_service.find_by_availability("basic"),
            "Basic amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_basic_amenities", e)


@router.get("/search/tags", response_model=Dict[str, Any])
def search_amenities_by_tags(tags: List[str] = Query(...)):
    """Amenities carrying at least one of the given tags (`?tags=gym&tags=pool`)."""
    try:
        return records_response(
            amenity_service.find_by_tags(tags),
            "Amenities retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("search_amenities_by_tags", e)


register_crud_routes(
    router,
    service=amenity_service,
    create_model=AmenityCreate,
    update_model=AmenityUpdate,
    query_model=AmenityQuery,
    label="Amenity",
    plural_label="Amenities"
)
