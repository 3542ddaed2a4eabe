"""
Authentication dependency
Validates session JWTs (HS256, AUTH_SECRET) and provides the requester identity

Sessions are issued elsewhere; this module only verifies them.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import Unauthorized


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: str
    name: Optional[str] = None
    role: str = "CUSTOMER"


def decode_session_token(token: str) -> dict:
    """
    Decode and validate a session JWT.

    Expected payload:
    {
        "sub": "user_id",
        "email": "buyer@example.com",
        "name": "Buyer",
        "role": "CUSTOMER",
        "exp": 1234567890
    }
    """
    if not settings.AUTH_SECRET:
        raise Unauthorized("Authentication is not configured")

    try:
        return jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise Unauthorized("Token has expired")
        raise Unauthorized("Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise Unauthorized("Authentication required")

    payload = decode_session_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")

    if not user_id or not email:
        raise Unauthorized("Invalid token payload: missing user id or email")

    return TokenUser(
        id=str(user_id),
        email=email,
        name=payload.get("name"),
        role=payload.get("role", "CUSTOMER")
    )
