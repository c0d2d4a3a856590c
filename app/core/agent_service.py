"""
Agent Service.
"""

from app.core.directory_service import DirectoryService


class AgentService(DirectoryService):
    """Service for the real estate agent directory."""

    table = "agents"
    label = "Agent"
    columns = ("email", "phone", "address", "license_number", "profile_image", "is_active")
    search_columns = ("name", "description", "email", "license_number")
    required_fields = ("name", "is_active")
    column_ddl = """
        email VARCHAR(255),
        phone VARCHAR(30),
        address VARCHAR(500),
        license_number VARCHAR(50),
        profile_image VARCHAR(500),
        is_active BOOLEAN NOT NULL DEFAULT TRUE
    """
