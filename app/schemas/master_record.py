"""
Pydantic schemas shared by every master data type.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.config import settings


class MasterType(str, Enum):
    """Discriminator for the logical master tables stored in master_records."""
    CITY = "city"
    LOCATION = "location"
    AMENITY = "amenity"
    FLOOR = "floor"
    TOWER = "tower"
    PROPERTY_TYPE = "property_type"
    ROOM = "room"
    WASHROOM = "washroom"


class MasterStatus(str, Enum):
    """Lifecycle state. ARCHIVED is the soft-delete terminal state."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class EditableStatus(str, Enum):
    """Statuses a caller may set directly; archiving goes through delete."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def validate_coordinates(value: Optional[List[float]]) -> Optional[List[float]]:
    """Coordinates are [longitude, latitude] within valid geographic bounds."""
    if value is None:
        return value
    if len(value) != 2:
        raise ValueError("Coordinates must have exactly 2 elements: [longitude, latitude]")
    longitude, latitude = value
    if not -180 <= longitude <= 180:
        raise ValueError("Longitude must be between -180 and 180")
    if not -90 <= latitude <= 90:
        raise ValueError("Latitude must be between -90 and 90")
    return value


class MasterRecordCreate(BaseModel):
    """Fields every master record accepts on create. Unknown keys such as `type` are ignored."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    description: Optional[str] = Field(None, max_length=500)
    code: Optional[str] = Field(None, min_length=1, max_length=20, description="Unique code")
    status: EditableStatus = Field(EditableStatus.ACTIVE)
    sort_order: int = Field(0, ge=0, le=9999)
    is_default: bool = False
    is_popular: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class MasterRecordUpdate(BaseModel):
    """Partial update; only fields the caller sends are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    status: Optional[EditableStatus] = None
    sort_order: Optional[int] = Field(None, ge=0, le=9999)
    is_default: Optional[bool] = None
    is_popular: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class MasterQuery(BaseModel):
    """Query-string options understood by every list endpoint."""

    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Records per page"
    )
    search: Optional[str] = Field(None, max_length=100, description="Case-insensitive text search")
    status: Optional[MasterStatus] = Field(None, description="Defaults to every non-archived status")
    is_default: Optional[bool] = None
    is_popular: Optional[bool] = None
    sort_by: str = Field("sort_order", description="Field to sort by")
    sort_order: SortDirection = SortDirection.ASC

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class NumericRangeQuery(MasterQuery):
    min_value: Optional[int] = Field(None, description="Lowest numeric value, inclusive")
    max_value: Optional[int] = Field(None, description="Highest numeric value, inclusive")
    unit: Optional[str] = Field(None, max_length=20)


class GeoQuery(BaseModel):
    """Centre point and radius for proximity searches."""

    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    radius: Optional[float] = Field(None, gt=0, description="Radius in meters")
