"""
Security utilities: access-token verification.
"""

from hostel_ledger.core.security.jwt_handler import JWTManager, TokenClaims, jwt_manager

__all__ = ["JWTManager", "TokenClaims", "jwt_manager"]
