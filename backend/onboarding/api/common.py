"""Helpers shared by the proxy routes and the view endpoints."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from onboarding.core.errors import NO_STORE, InvalidRequestError
from onboarding.services.function_client import UpstreamResponse, function_client

BODYLESS_STATUSES = frozenset({204, 205, 304})


async def require_upstream_config() -> None:
    """Fail every proxied call with a configuration error before any I/O."""
    function_client.check_configured()


async def read_json_body(request: Request, *, strict: bool = False) -> Any:
    raw = await request.body()
    if not raw.strip():
        if strict:
            raise InvalidRequestError("Request body must be valid JSON.")
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        if strict:
            raise InvalidRequestError("Request body must be valid JSON.") from e
        return {}


def relay(response: UpstreamResponse, status_code: int | None = None) -> Response:
    """Mirror an upstream answer to the caller, never cacheable."""
    status_code = status_code or response.status
    if status_code in BODYLESS_STATUSES:
        return Response(status_code=status_code, headers=NO_STORE)
    return Response(
        content=response.body,
        status_code=status_code,
        media_type=response.content_type or "application/json",
        headers=NO_STORE,
    )


def no_store(content: Any, status_code: int = 200) -> Response:
    return JSONResponse(content=jsonable_encoder(content), status_code=status_code, headers=NO_STORE)
