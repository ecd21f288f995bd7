"""Azure AD bearer tokens: JWKS lookup and claim validation."""

from __future__ import annotations

import logging
import time
from typing import Any

import aiohttp
from fastapi import HTTPException, status
from jose import jwk, jwt
from jose.constants import Algorithms
from jose.exceptions import ExpiredSignatureError, JWSSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger(__name__)

_JWKS_TTL_SECONDS = 24 * 60 * 60
_JWKS_URL = "https://login.microsoftonline.com/{tenant}/discovery/v2.0/keys"

# tenant id -> (fetched_at, jwks)
_jwks_cache: dict[str, tuple[float, dict[str, Any]]] = {}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_jwks(tenant_id: str) -> dict[str, Any]:
    cached = _jwks_cache.get(tenant_id)
    now = time.time()
    if cached and now - cached[0] < _JWKS_TTL_SECONDS:
        return cached[1]

    url = _JWKS_URL.format(tenant=tenant_id)
    logger.info("Fetching JWKS from %s", url)
    try:
        timeout = aiohttp.ClientTimeout(total=15)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                jwks = await response.json()
    except (aiohttp.ClientError, TimeoutError) as e:
        logger.error("JWKS fetch failed: %s", e)
        if cached:
            logger.warning("Serving stale JWKS for tenant %s", tenant_id)
            return cached[1]
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not fetch JWKS: {e}",
        ) from e

    _jwks_cache[tenant_id] = (now, jwks)
    return jwks


async def find_signing_key(token: str, tenant_id: str) -> dict[str, Any]:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as e:
        raise _unauthorized(f"Invalid token header: {e}") from e

    if not kid:
        raise _unauthorized("Token has no 'kid' in header")

    jwks = await get_jwks(tenant_id)
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    raise _unauthorized(f"No matching signing key for kid: {kid}")


async def validate_token(token: str, tenant_id: str, client_id: str) -> dict[str, Any]:
    if not tenant_id or not client_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing Azure AD configuration",
        )

    key_data = await find_signing_key(token, tenant_id)
    algorithm = key_data.get("alg", Algorithms.RS256)
    public_key = jwk.construct(key_data, algorithm=algorithm)

    issuers = [
        f"https://login.microsoftonline.com/{tenant_id}/v2.0",
        f"https://sts.windows.net/{tenant_id}/",
    ]
    audiences = [client_id, f"api://{client_id}"]
    options = {"require_exp": True, "require_iss": True, "require_aud": True}

    last_error: Exception | None = None
    for issuer in issuers:
        for audience in audiences:
            try:
                return jwt.decode(
                    token,
                    public_key,
                    algorithms=[algorithm],
                    audience=audience,
                    issuer=issuer,
                    options=options,
                )
            except ExpiredSignatureError as e:
                raise _unauthorized("Token is expired") from e
            except JWSSignatureError as e:
                raise _unauthorized("Invalid token signature") from e
            except (JWTClaimsError, JWTError) as e:
                last_error = e

    message = str(last_error).lower() if last_error else ""
    if "audience" in message:
        raise _unauthorized(f"Invalid token audience. Expected one of: {audiences}")
    if "issuer" in message:
        raise _unauthorized(f"Invalid token issuer. Expected one of: {issuers}")
    raise _unauthorized("Invalid authentication credentials")


def roles_from_claims(payload: dict[str, Any]) -> list[str]:
    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        return []
    return [str(r).lower() for r in roles if isinstance(r, str | int)]
