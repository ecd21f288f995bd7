from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, Query, status

from onboarding.core.auth import roles_from_claims, validate_token
from onboarding.core.config import settings
from onboarding.core.errors import ForbiddenError
from onboarding.models.auth import RequestContext, UserInfo, ViewMode

logger = logging.getLogger(__name__)


def _dev_user() -> UserInfo:
    roles = [r.strip().lower() for r in settings.DEV_USER_ROLES.split(",") if r.strip()]
    return UserInfo(
        id=settings.DEV_USER_EMAIL,
        name=settings.DEV_USER_NAME,
        email=settings.DEV_USER_EMAIL,
        roles=roles,
    )


async def get_current_user(authorization: str | None = Header(None)) -> UserInfo:
    if not authorization or not authorization.startswith("Bearer "):
        if not settings.auth_configured and settings.DEV_USER_EMAIL:
            return _dev_user()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]
    try:
        claims = await validate_token(token, settings.AZURE_AD_TENANT_ID, settings.AZURE_AD_CLIENT_ID)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return UserInfo(
        id=claims.get("oid"),
        name=claims.get("name"),
        email=claims.get("preferred_username"),
        roles=roles_from_claims(claims),
    )


def require_role(*roles: str):
    async def _check_role(user: UserInfo = Depends(get_current_user)) -> UserInfo:
        if not user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(roles)}",
            )
        return user

    return _check_role


require_supervisor = require_role("supervisor", "admin")


async def get_request_context(
    mode: str | None = Query(None),
    user: UserInfo = Depends(get_current_user),
) -> RequestContext:
    return RequestContext(mode=ViewMode.parse(mode), user=user)


async def get_edit_context(
    ctx: RequestContext = Depends(get_request_context),
    user: UserInfo = Depends(require_supervisor),
) -> RequestContext:
    """Context for content editors; employee mode never writes."""
    if ctx.read_only:
        raise ForbiddenError("Employee view is read-only.")
    return ctx
