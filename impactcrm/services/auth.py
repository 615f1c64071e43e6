"""Bearer-token verification and tenant resolution for API requests.

Users authenticate against an external identity provider; this service only
verifies the signed JWT it issues and maps the ``sub`` claim to an
organization membership.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from impactcrm.config import settings
from impactcrm.exceptions import TenantResolutionError
from impactcrm.services.tenancy import TenantContext, resolve_tenant

# Security event logger
security_logger = logging.getLogger("impactcrm.security")

# Tokens are issued by the identity provider; tokenUrl is documentation only
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

ACCESS_TOKEN_EXPIRE_MINUTES = 120


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT access token.

    Used by tests and local tooling; production tokens come from the
    identity provider and are signed with the same shared secret.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "jti": str(uuid.uuid4())})
    if settings.jwt_audience and "aud" not in to_encode:
        to_encode["aud"] = settings.jwt_audience
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_user_id(token: str) -> str | None:
    """Return the ``sub`` claim of a valid token, or None."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"verify_aud": settings.jwt_audience is not None},
        )
    except JWTError as e:
        security_logger.warning("Rejected bearer token: %s", str(e))
        return None
    subject = payload.get("sub")
    return str(subject) if subject else None


async def get_current_user_id(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> str:
    """Require a valid bearer token - raises 401 otherwise."""
    user_id = decode_user_id(token) if token else None
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


async def get_tenant(
    user_id: Annotated[str, Depends(get_current_user_id)],
) -> TenantContext:
    """Resolve the caller's organization - raises 403 without a membership."""
    try:
        return await resolve_tenant(user_id)
    except TenantResolutionError:
        security_logger.warning("Request without organization membership: user_id=%s", user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not a member of any organization",
        ) from None


async def require_writer(
    tenant: Annotated[TenantContext, Depends(get_tenant)],
) -> TenantContext:
    """Require a role that may create records (admin or member)."""
    if not tenant.can_write:
        security_logger.info(
            "Write denied for viewer: user_id=%s, org=%s",
            tenant.user_id,
            tenant.organization_id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Viewers cannot import records",
        )
    return tenant


# Type aliases for dependency injection
RequireTenant = Annotated[TenantContext, Depends(get_tenant)]
RequireWriter = Annotated[TenantContext, Depends(require_writer)]
