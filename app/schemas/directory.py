"""
Pydantic schemas for the builder and agent directories.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.config import settings


class DirectoryEntryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class DirectoryEntryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class DirectoryQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    search: Optional[str] = Field(None, max_length=100, description="Matches name or description")

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


# ============================================================================
# Builder
# ============================================================================

class BuilderFields(BaseModel):
    website: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    logo: Optional[str] = Field(None, max_length=500, description="Logo URL")


class BuilderCreate(BuilderFields, DirectoryEntryCreate):
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "ABC Builders",
                "description": "Residential developer",
                "website": "https://abcbuilders.example",
                "contact_email": "info@abcbuilders.example",
                "contact_phone": "+91-9876543210"
            }
        }
    )


class BuilderUpdate(BuilderFields, DirectoryEntryUpdate):
    pass


# ============================================================================
# Agent
# ============================================================================

class AgentFields(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)
    license_number: Optional[str] = Field(None, max_length=50)
    profile_image: Optional[str] = Field(None, max_length=500, description="Profile image URL")


class AgentCreate(AgentFields, DirectoryEntryCreate):
    is_active: bool = True


class AgentUpdate(AgentFields, DirectoryEntryUpdate):
    is_active: Optional[bool] = None
