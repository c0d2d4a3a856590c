"""
Pydantic schemas for authentication endpoints.
"""

from pydantic import BaseModel, Field, EmailStr, ConfigDict

class LoginRequest(BaseModel):
    """Request schema for admin login."""

    email: EmailStr = Field(..., description="Admin email")
    password: str = Field(..., min_length=6, description="Admin password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "admin@trelax.com",
                "password": "admin123"
            }
        }
    )

class AdminProfile(BaseModel):
    """Public view of an admin account."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool = True

class TokenPair(BaseModel):
    access_token: str
    token_type: str = "bearer"

class LoginResponse(BaseModel):
    """Response schema for successful admin login."""

    user: AdminProfile
    tokens: TokenPair

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {
                    "id": "admin1",
                    "email": "admin@trelax.com",
                    "first_name": "Admin",
                    "last_name": "User",
                    "role": "admin",
                    "is_active": True
                },
                "tokens": {
                    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                    "token_type": "bearer"
                }
            }
        }
    )
