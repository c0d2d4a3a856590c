"""
Property Type API Routes.
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.core.exceptions import AppException
from app.core.property_type_service import PropertyTypeService
from app.schemas.masters import (
    PropertyTypeCategory,
    PropertyTypeCreate,
    PropertyTypeQuery,
    PropertyTypeUpdate,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/property-types",
    tags=["Masters - Property Types"],
    dependencies=[Depends(get_current_user)]
)

property_type_service = PropertyTypeService()


@router.get("/category/{category}", response_model=Dict[str, Any])
def get_property_types_by_category(category: PropertyTypeCategory):
    try:
        return records_response(
            property_type_service.find_by_category(category.value),
            f"{category.value} property types retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_property_types_by_category", e)


@router.get("/residential", response_model=Dict[str, Any])
def get_residential_property_types():
    try:
        return records_response(
            property_type_service.find_residential(),
            "Residential property types retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_residential_property_types", e)


@router.get("/commercial", response_model=Dict[str, Any])
def get_commercial_property_types():
    try:
        return records_response(
            property_type_service.find_commercial(),
            "Commercial property types retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_commercial_property_types", e)


register_crud_routes(
    router,
    service=property_type_service,
    create_model=PropertyTypeCreate,
    update_model=PropertyTypeUpdate,
    query_model=PropertyTypeQuery,
    label="Property type",
    plural_label="Property types"
)
