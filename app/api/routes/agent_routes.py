"""
Agent API Routes.
"""

from fastapi import APIRouter, Depends
from app.api.dependencies import get_current_user
from app.api.routes.master_routes import register_crud_routes
from app.core.agent_service import AgentService
from app.schemas.directory import AgentCreate, AgentUpdate, DirectoryQuery

router = APIRouter(
    prefix="/agents",
    tags=["Agents"],
    dependencies=[Depends(get_current_user)]
)

agent_service = AgentService()

register_crud_routes(
    router,
    service=agent_service,
    create_model=AgentCreate,
    update_model=AgentUpdate,
    query_model=DirectoryQuery,
    label="Agent",
    plural_label="Agents",
    with_statistics=False
)
