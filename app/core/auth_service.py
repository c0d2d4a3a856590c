"""
Authentication Service.
Admins are predefined accounts; there is no registration flow.
"""

from typing import Dict, Any, List, Optional
import logging

from app.config import settings
from app.core.exceptions import AuthenticationException
from app.core.security import JWTHandler, PasswordHandler

logger = logging.getLogger(__name__)


ADMIN_ACCOUNTS: List[Dict[str, str]] = [
    {
        "id": "admin1",
        "email": "admin@trelax.com",
        "first_name": "Admin",
        "last_name": "User",
        "role": "admin",
    },
    {
        "id": "admin2",
        "email": "superadmin@trelax.com",
        "first_name": "Super",
        "last_name": "Admin",
        "role": "super_admin",
    },
    {
        "id": "admin3",
        "email": "manager@trelax.com",
        "first_name": "Manager",
        "last_name": "User",
        "role": "admin",
    },
]


class AuthService:
    """Authentication against the static admin accounts."""

    _password_hash: Optional[str] = None

    @classmethod
    def _get_password_hash(cls) -> str:
        # Hashed lazily so importing the module stays cheap
        if cls._password_hash is None:
            cls._password_hash = PasswordHandler.hash_password(settings.ADMIN_DEFAULT_PASSWORD)
        return cls._password_hash

    @staticmethod
    def _public_profile(admin: Dict[str, str]) -> Dict[str, Any]:
        return {
            "id": admin["id"],
            "email": admin["email"],
            "first_name": admin["first_name"],
            "last_name": admin["last_name"],
            "role": admin["role"],
            "is_active": True,
        }

    @staticmethod
    def _find_admin(admin_id: Optional[str] = None, email: Optional[str] = None) -> Optional[Dict[str, str]]:
        for admin in ADMIN_ACCOUNTS:
            if admin_id is not None and admin["id"] == admin_id:
                return admin
            if email is not None and admin["email"].lower() == email.lower():
                return admin
        return None

    @classmethod
    def validate_user(cls, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the admin profile for valid credentials, None otherwise."""
        admin = cls._find_admin(email=email)
        if not admin:
            return None

        if not PasswordHandler.verify_password(password, cls._get_password_hash()):
            return None

        return cls._public_profile(admin)

    @classmethod
    def login(cls, email: str, password: str) -> Dict[str, Any]:
        """
        Login an admin and issue a JWT access token.

        Raises:
            AuthenticationException: If the email/password pair is not valid
        """
        admin = cls.validate_user(email, password)
        if not admin:
            logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationException("Invalid email or password")

        access_token = JWTHandler.create_access_token(admin)
        logger.info(f"Admin logged in: {admin['email']}")

        return {
            "user": admin,
            "tokens": {
                "access_token": access_token,
                "token_type": "bearer",
            },
        }

    @classmethod
    def get_profile(cls, admin_id: str) -> Dict[str, Any]:
        admin = cls._find_admin(admin_id=admin_id)
        if not admin:
            raise AuthenticationException("Admin not found")
        return cls._public_profile(admin)

    @classmethod
    def refresh_token(cls, admin_id: str) -> Dict[str, Any]:
        """Issue a fresh access token for an already authenticated admin."""
        profile = cls.get_profile(admin_id)
        return {
            "access_token": JWTHandler.create_access_token(profile),
            "token_type": "bearer",
        }

    @classmethod
    def resolve_token(cls, token: str) -> Dict[str, Any]:
        """Decode a bearer token and return the admin it belongs to."""
        payload = JWTHandler.verify_token(token)
        admin_id = payload.get("sub")
        if not admin_id:
            raise AuthenticationException("Invalid token: missing subject")
        return cls.get_profile(admin_id)
