"""
Tower API Routes.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes, records_response, unexpected_error
from app.core.exceptions import AppException, ValidationException
from app.core.tower_service import TowerService
from app.schemas.masters import TowerCreate, TowerQuery, TowerType, TowerUpdate
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/masters/towers",
    tags=["Masters - Towers"],
    dependencies=[Depends(get_current_user)]
)

tower_service = TowerService()


@router.get("/by-type/{tower_type}", response_model=Dict[str, Any])
def get_towers_by_type(tower_type: TowerType):
    try:
        return records_response(
            tower_service.find_by_type(tower_type.value),
            f"{tower_type.value} towers retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_towers_by_type", e)


@router.get("/active", response_model=Dict[str, Any])
def get_active_towers():
    try:
        return records_response(
            tower_service.find_active(),
            "Active towers retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_active_towers", e)


@router.get("/range", response_model=Dict[str, Any])
def get_towers_in_range(
    min_value: Optional[int] = Query(None, description="Lowest tower number, inclusive"),
    max_value: Optional[int] = Query(None, description="Highest tower number, inclusive")
):
    try:
        if min_value is not None and max_value is not None and min_value > max_value:
            raise ValidationException("min_value cannot be greater than max_value")

        return records_response(
            tower_service.find_in_range(min_value, max_value),
            "Towers retrieved successfully"
        )
    except AppException:
        raise
    except Exception as e:
        raise unexpected_error("get_towers_in_range", e)


register_crud_routes(
    router,
    service=tower_service,
    create_model=TowerCreate,
    update_model=TowerUpdate,
    query_model=TowerQuery,
    label="Tower",
    plural_label="Towers"
)
