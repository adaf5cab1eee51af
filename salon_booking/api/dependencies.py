# ============================================================================
# FILE: salon_booking/api/dependencies.py
# JWT authentication dependencies; tokens are issued by the auth service
# ============================================================================
from dataclasses import dataclass
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from salon_booking.config.settings import get_settings

ROLES = {"CUSTOMER", "EMPLOYEE", "OWNER", "ADMIN"}

# JWT security for user authentication
jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token",
    auto_error=False
)


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller as asserted by the access token"""
    user_id: int
    role: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary with claims (should include 'sub' with user_id and 'role')
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise _unauthorized(f"Could not validate credentials: {str(e)}")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    return payload


def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(jwt_security)
) -> CurrentUser:
    """
    Dependency to get the caller from the bearer token.

    Usage in routes:
        @router.get("/bookings/mine")
        def my_bookings(current_user: CurrentUser = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = verify_access_token(credentials.credentials)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid user ID in token")

    role = str(payload.get("role", "CUSTOMER")).upper()
    if role not in ROLES:
        raise _unauthorized("Invalid role in token")

    return CurrentUser(user_id=user_id, role=role)


def require_role(*roles: str):
    """
    Dependency factory that admits only callers holding one of ``roles``.

    Usage in routes:
        @router.post("/bookings/cancel")
        def cancel(current_user: CurrentUser = Depends(require_role("CUSTOMER"))):
            ...
    """
    allowed = frozenset(role.upper() for role in roles)

    def _check_role(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(sorted(allowed))}"
            )
        return current_user

    return _check_role


require_customer = require_role("CUSTOMER")
require_stylist = require_role("EMPLOYEE")
require_owner = require_role("OWNER")
