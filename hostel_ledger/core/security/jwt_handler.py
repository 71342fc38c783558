"""
JWT token management utilities.

Staff sessions are issued elsewhere; this service only verifies the
signed access tokens it is handed and, for tooling and tests, mints them.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from hostel_ledger.config.settings import settings
from hostel_ledger.core.exceptions import InvalidTokenError
from hostel_ledger.core.logging import get_logger
from hostel_ledger.models.base.enums import UserRole

logger = get_logger(__name__)


class TokenClaims:
    """Verified identity carried by an access token."""

    __slots__ = ("user_id", "role", "hostel_id")

    def __init__(self, user_id: int, role: UserRole, hostel_id: Optional[int]):
        self.user_id = user_id
        self.role = role
        self.hostel_id = hostel_id

    def __repr__(self) -> str:
        return f"TokenClaims(user_id={self.user_id}, role={self.role.value}, hostel_id={self.hostel_id})"


class JWTManager:
    """
    JWT token manager for authentication.

    Tokens carry ``sub`` (user id), ``role`` and ``hostelId`` claims.
    """

    DEFAULT_ACCESS_TOKEN_EXPIRE_HOURS = 12

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_hours: int = DEFAULT_ACCESS_TOKEN_EXPIRE_HOURS,
    ):
        """
        Initialize JWT manager.

        Args:
            secret_key: Secret key for signing tokens (defaults to settings)
            algorithm: JWT algorithm (defaults to settings)
            access_token_expire_hours: Access token expiration in hours
        """
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.access_token_expire_hours = access_token_expire_hours

    def create_access_token(
        self,
        user_id: int,
        role: UserRole,
        hostel_id: Optional[int] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: Staff user identifier
            role: Staff role
            hostel_id: Hostel the user belongs to (None for Super-Admins)
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(hours=self.access_token_expire_hours))

        payload = {
            "sub": str(user_id),
            "role": UserRole(role).value,
            "hostelId": hostel_id,
            "iat": now,
            "exp": expire,
            "jti": secrets.token_hex(16),
        }

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug("Access token created", extra={'user_id': user_id})
        return token

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode JWT token.

        Args:
            token: JWT token to verify

        Returns:
            Decoded token payload

        Raises:
            InvalidTokenError: If the token is expired, tampered with or malformed
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("Token verification failed: token expired")
            raise InvalidTokenError()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Token verification failed: {e}")
            raise InvalidTokenError()

    def decode_claims(self, token: str) -> TokenClaims:
        """
        Verify a token and extract the staff identity from it.

        Raises:
            InvalidTokenError: If verification fails or a claim is unusable
        """
        payload = self.verify_token(token)
        try:
            user_id = int(payload["sub"])
            role = UserRole.parse(payload["role"])
            raw_hostel = payload.get("hostelId")
            hostel_id = int(raw_hostel) if raw_hostel not in (None, "") else None
        except (KeyError, TypeError, ValueError):
            logger.warning("Token verification failed: malformed claims")
            raise InvalidTokenError()
        return TokenClaims(user_id=user_id, role=role, hostel_id=hostel_id)


jwt_manager = JWTManager()


__all__ = ["JWTManager", "TokenClaims", "jwt_manager"]
