"""
Room API Routes.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.core.exceptions import AppException, ValidationException
from app.core.room_service import RoomService
from app.schemas.masters import RoomCreate, RoomQuery, RoomType, RoomUpdate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/rooms",
    tags=["Masters - Rooms"],
    dependencies=[Depends(get_current_user)]
)

room_service = RoomService()


@router.get("/by-type/{room_type}", response_model=Dict[str, Any])
def get_rooms_by_type(room_type: RoomType):
    try:
        return records_response(
            room_service.find_by_type(room_type.value),
            f"{room_type.value} rooms retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_rooms_by_type", e)


@router.get("/range", response_model=Dict[str, Any])
def get_rooms_in_range(
    min_value: Optional[int] = Query(None, description="Fewest bedrooms, inclusive"),
    max_value: Optional[int] = Query(None, description="Most bedrooms, inclusive")
):
    try:
        if min_value is not None and max_value is not None and min_value > max_value:
            raise ValidationException("min_value cannot be greater than max_value")

        return records_response(
            room_service.find_in_range(min_value, max_value),
            "Rooms retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_rooms_in_range", e)


register_crud_routes(
    router,
    service=room_service,
    create_model=RoomCreate,
    update_model=RoomUpdate,
    query_model=RoomQuery,
    label="Room",
    plural_label="Rooms"
)
