"""
Master Data API Routes.
Registers the CRUD endpoints every master type shares: create, paginated list,
statistics, get by id, partial update and soft delete. The builder and agent
directories reuse them without statistics.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Annotated, Any, Dict, List, Type, Union
from pydantic import BaseModel
from app.core.directory_service import DirectoryService
from app.core.master_service import MasterService
from app.core.responses import ResponseHandler
from app.core.exceptions import AppException
from app.api.dependencies import get_current_user
import logging

logger = logging.getLogger(__name__)


def unexpected_error(operation: str, error: Exception) -> HTTPException:
    logger.error(f"Unexpected error in {operation}: {str(error)}")
    return HTTPException(status_code=500, detail="Internal server error")


def records_response(records: List[Dict[str, Any]], message: str) -> Dict[str, Any]:
    """Envelope for unpaginated named queries."""
    return ResponseHandler.success(data=records, message=message)


def register_crud_routes(
    router: APIRouter,
    service: Union[MasterService, DirectoryService],
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    query_model: Type[BaseModel],
    label: str,
    plural_label: str,
    with_statistics: bool = True
) -> APIRouter:
    """
    Add the shared CRUD endpoints to a master type's router.

    Call this after the type's named queries are registered so fixed paths
    such as /popular are matched before /{record_id}.
    """

    @router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
    def create_record(
        data: create_model,
        current_user: Dict = Depends(get_current_user)
    ):
        try:
            record = service.create(data)
            logger.info(f"{label} {record['id']} created by {current_user['email']}")
            return ResponseHandler.success(
                data=record,
                message=f"{label} created successfully",
                status_code=status.HTTP_201_CREATED
            )
        except AppException:
            raise
        except Exception as e:
            raise unexpected_error(f"create {label}", e)

    @router.get("", response_model=Dict[str, Any])
    def list_records(query: Annotated[query_model, Query()]):
        try:
            result = service.find_all(query)
            pagination = result["pagination"]
            return ResponseHandler.list_response(
                data=result["records"],
                page=pagination["page"],
                limit=pagination["limit"],
                total=pagination["total"],
                message=f"{plural_label} retrieved successfully"
            )
        except AppException:
            raise
        except Exception as e:
            raise unexpected_error(f"list {plural_label}", e)

    if with_statistics:
        @router.get("/statistics", response_model=Dict[str, Any])
        def get_statistics():
            try:
                return ResponseHandler.success(
                    data=service.get_statistics(),
                    message=f"{label} statistics retrieved successfully"
                )
            except AppException:
                raise
            except Exception as e:
                raise unexpected_error(f"{label} statistics", e)

    @router.get("/{record_id}", response_model=Dict[str, Any])
    def get_record(record_id: str):
        try:
            return ResponseHandler.success(
                data=service.find_by_id(record_id),
                message=f"{label} retrieved successfully"
            )
        except AppException:
            raise
        except Exception as e:
            raise unexpected_error(f"get {label}", e)

    @router.patch("/{record_id}", response_model=Dict[str, Any])
    def update_record(
        record_id: str,
        data: update_model,
        current_user: Dict = Depends(get_current_user)
    ):
        try:
            record = service.update(record_id, data)
            logger.info(f"{label} {record_id} updated by {current_user['email']}")
            return ResponseHandler.success(data=record, message=f"{label} updated successfully")
        except AppException:
            raise
        except Exception as e:
            raise unexpected_error(f"update {label}", e)

    @router.delete("/{record_id}", response_model=Dict[str, Any])
    def delete_record(
        record_id: str,
        current_user: Dict = Depends(get_current_user)
    ):
        """Master records are archived and hidden from every lookup; directory entries are removed."""
        try:
            service.remove(record_id)
            logger.info(f"{label} {record_id} deleted by {current_user['email']}")
            return ResponseHandler.success(data=None, message=f"{label} deleted successfully")
        except AppException:
            raise
        except Exception as e:
            raise unexpected_error(f"delete {label}", e)

    return router
