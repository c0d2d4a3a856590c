"""
Builder API Routes.
"""

from fastapi import APIRouter, Depends
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes
from app.core.builder_service import BuilderService
from app.schemas.directory import BuilderCreate, BuilderUpdate, DirectoryQuery

router = APIRouter(
    prefix="/builders",
    tags=["Builders"],
    dependencies=[Depends(get_current_user)]
)

builder_service = BuilderService()

register_crud_routes(
    router,
    service=builder_service,
    create_model=BuilderCreate,
    update_model=BuilderUpdate,
    query_model=DirectoryQuery,
    label="Builder",
    plural_label="Builders",
    with_statistics=False
)
