"""
Washroom API Routes.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.core.exceptions import AppException, ValidationException
from app.core.washroom_service import WashroomService
from app.schemas.masters import WashroomCreate, WashroomQuery, WashroomType, WashroomUpdate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/washrooms",
    tags=["Masters - Washrooms"],
    dependencies=[Depends(get_current_user)]
)

washroom_service = WashroomService()


@router.get("/by-type/{washroom_type}", response_model=Dict[str, Any])
def get_washrooms_by_type(washroom_type: WashroomType):
    try:
        return records_response(
            washroom_service.find_by_type(washroom_type.value),
            f"{washroom_type.value} washrooms retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_washrooms_by_type", e)


@router.get("/range", response_model=Dict[str, Any])
def get_washrooms_in_range(
    min_value: Optional[int] = Query(None, description="Fewest bathrooms, inclusive"),
    max_value: Optional[int] = Query(None, description="Most bathrooms, inclusive")
):
    try:
        if min_value is not None and max_value is not None and min_value > max_value:
            raise ValidationException("min_value cannot be greater than max_value")

        return records_response(
            washroom_service.find_in_range(min_value, max_value),
            "Washrooms retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_washrooms_in_range", e)


register_crud_routes(
    router,
    service=washroom_service,
    create_model=WashroomCreate,
    update_model=WashroomUpdate,
    query_model=WashroomQuery,
    label="Washroom",
    plural_label="Washrooms"
)
