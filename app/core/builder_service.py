"""
Builder Service.
Real estate developers referenced by listings.
"""

from app.core.directory_service import DirectoryService


class BuilderService(DirectoryService):
    table = "builders"
    label = "Builder"
    columns = ("website", "contact_email", "contact_phone", "logo")
    column_ddl = """
        website VARCHAR(255),
        contact_email VARCHAR(255),
        contact_phone VARCHAR(30),
        logo VARCHAR(500)
    """
