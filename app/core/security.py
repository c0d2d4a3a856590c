"""
Security and authentication utilities.
Handles JWT access tokens and password hashing for admin accounts.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import jwt
from passlib.context import CryptContext
import logging

from app.config import settings
from app.core.exceptions import AuthenticationException

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

class JWTHandler:
    """Handles JWT token creation and validation."""

    @staticmethod
    def create_access_token(
        admin: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a signed access token for an admin account.

        The payload carries `sub` (admin id), `email` and `role`.
        """
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + (expires_delta or timedelta(hours=settings.JWT_EXPIRATION_HOURS))

        payload = {
            "sub": admin["id"],
            "email": admin["email"],
            "role": admin["role"],
            "iat": issued_at,
            "exp": expire,
        }

        try:
            return jwt.encode(
                payload,
                settings.JWT_SECRET_KEY,
                algorithm=settings.JWT_ALGORITHM
            )
        except Exception as e:
            logger.error(f"Token creation failed: {str(e)}")
            raise AuthenticationException("Failed to create authentication token")

    @staticmethod
    def verify_token(token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Raises:
            AuthenticationException: If token is expired, tampered with or malformed
        """
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationException("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationException("Invalid token")

class PasswordHandler:
    """Handles password hashing and verification."""

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)
