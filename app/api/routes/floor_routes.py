"""
Floor API Routes.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.core.exceptions import AppException, ValidationException
from app.core.floor_service import FloorService
from app.core.responses import ResponseHandler
from app.schemas.masters import FloorCreate, FloorQuery, FloorType, FloorUpdate, FloorUsage
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/floors",
    tags=["Masters - Floors"],
    dependencies=[Depends(get_current_user)]
)

floor_service = FloorService()


@router.get("/by-type/{floor_type}", response_model=Dict[str, Any])
def get_floors_by_type(floor_type: FloorType):
    try:
        return records_response(
            floor_service.find_by_type(floor_type.value),
            f"{floor_type.value} floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_floors_by_type", e)


@router.get("/usage/{usage}", response_model=Dict[str, Any])
def get_floors_by_usage(usage: FloorUsage):
    try:
        return records_response(
            floor_service.find_by_usage(usage.value),
            f"{usage.value} floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_floors_by_usage", e)


@router.get("/available", response_model=Dict[str, Any])
def get_available_floors():
    try:
        return records_response(
            floor_service.find_available(),
            "Available floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_available_floors", e)


@router.get("/range", response_model=Dict[str, Any])
def get_floors_in_range(
    min_floor: Optional[int] = Query(None, description="Lowest floor number, inclusive"),
    max_floor: Optional[int] = Query(None, description="Highest floor number, inclusive")
):
    try:
        if min_floor is not None and max_floor is not None and min_floor > max_floor:
            raise ValidationException("min_floor cannot be greater than max_floor")

        return records_response(
            floor_service.find_in_range(min_floor, max_floor),
            "Floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_floors_in_range", e)


@router.get("/basement", response_model=Dict[str, Any])
def get_basement_floors():
    """Basement levels from B1 downwards."""
    try:
        return records_response(
            floor_service.find_basement(),
            "Basement floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_basement_floors", e)


@router.get("/ground", response_model=Dict[str, Any])
def get_ground_floor():
    try:
        return ResponseHandler.success(
            data=floor_service.find_ground(),
            message="Ground floor retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_ground_floor", e)


@router.get("/upper", response_model=Dict[str, Any])
def get_upper_floors():
    try:
        return records_response(
            floor_service.find_upper(),
            "Upper floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_upper_floors", e)


@router.get("/premium", response_model=Dict[str, Any])
def get_premium_floors():
    """Floors with a price multiplier above 1, highest first."""
    try:
        return records_response(
            floor_service.find_premium(),
            "Premium floors retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_premium_floors", e)


register_crud_routes(
    router,
    service=floor_service,
    create_model=FloorCreate,
    update_model=FloorUpdate,
    query_model=FloorQuery,
    label="Floor",
    plural_label="Floors"
)
