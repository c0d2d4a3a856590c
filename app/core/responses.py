"""
Standardized API response handler module.
Provides consistent response format across all endpoints.
"""

import math
from typing import Any, Dict, List, Optional
from datetime import datetime

class ResponseHandler:
    """Utility class for generating standardized responses."""

    @staticmethod
    def success(
        data: Any = None,
        message: Optional[str] = None,
        status_code: int = 200
    ) -> Dict[str, Any]:
        """
        Create a success response.

        Args:
            data: Response data
            message: Human-readable outcome
            status_code: HTTP status code

        Returns:
            Standardized success response dictionary
        """
        return {
            "success": True,
            "data": data,
            "message": message,
            "metadata": {
                "timestamp": datetime.utcnow().isoformat(),
                "status_code": status_code
            }
        }

    @staticmethod
    def list_response(
        data: List[Any],
        page: int,
        limit: int,
        total: int,
        message: Optional[str] = None,
        status_code: int = 200
    ) -> Dict[str, Any]:
        """
        Create a list response with pagination.

        Args:
            data: List of records
            page: Current page number
            limit: Records per page
            total: Total number of matching records
            message: Human-readable outcome
            status_code: HTTP status code

        Returns:
            Standardized list response dictionary
        """
        return {
            "success": True,
            "data": data,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": ResponseHandler.total_pages(total, limit)
            },
            "message": message,
            "metadata": {
                "timestamp": datetime.utcnow().isoformat(),
                "status_code": status_code
            }
        }

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        """Number of pages needed to show `total` records `limit` at a time."""
        return math.ceil(total / limit) if limit > 0 else 0

    @staticmethod
    def error(
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create an error response.

        Args:
            code: Error code
            message: Error message
            status_code: HTTP status code
            details: Additional error details

        Returns:
            Standardized error response dictionary
        """
        return {
            "success": False,
            "message": message,
            "error": {
                "code": code,
                "message": message,
                "details": details or {}
            },
            "metadata": {
                "timestamp": datetime.utcnow().isoformat(),
                "status_code": status_code
            }
        }
