"""
Security utilities for authorization
Verifies bearer JWT access tokens and checks permissions
"""

from typing import Dict, Any
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings
from .exceptions import UnauthorizedException, ForbiddenException

# Security scheme
security = HTTPBearer()


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            return payload
        except JWTError:
            raise UnauthorizedException(
                detail="Invalid authentication credentials",
                error_code="INVALID_TOKEN"
            )


# Dependency to get current user from token
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Dict[str, Any]:
    """Extract and validate user from JWT token"""
    payload = SecurityUtils.decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise UnauthorizedException(detail="Invalid token type", error_code="INVALID_TOKEN_TYPE")

    return {
        "id": payload.get("sub"),
        "role": payload.get("role"),
        "email": payload.get("email"),
        "permissions": payload.get("permissions") or [],
    }


def require_permission(permission: str):
    """Dependency factory checking a permission claim; admins pass every check"""
    async def permission_checker(current_user: dict = Depends(get_current_user)):
        if current_user.get("role") != "admin" and permission not in current_user["permissions"]:
            raise ForbiddenException(detail="Insufficient permissions")
        return current_user
    return permission_checker


require_analytics_read = require_permission(settings.ANALYTICS_PERMISSION)
