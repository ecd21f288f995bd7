"""Error taxonomy shared by the proxy routes and the view endpoints.

Every error renders as a small JSON envelope. The shapes match what the
front end already parses: ``error`` is always present, the remaining keys
depend on the failure class.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


class OnboardingError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def envelope(self) -> dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(OnboardingError):
    """A required setting is missing; raised before any network call."""

    def envelope(self) -> dict[str, Any]:
        return {"error": "Unhandled error", "message": self.message}


class InvalidRequestError(OnboardingError):
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(OnboardingError):
    status_code = status.HTTP_403_FORBIDDEN


class UpstreamUnreachableError(OnboardingError):
    status_code = status.HTTP_502_BAD_GATEWAY

    def envelope(self) -> dict[str, Any]:
        return {"error": "Function unreachable", "detail": self.message}


class UpstreamCallError(OnboardingError):
    """The Azure Function answered with a non-2xx status."""

    def __init__(self, upstream_status: int, details: Any) -> None:
        super().__init__(f"Azure Function call failed ({upstream_status})")
        self.upstream_status = upstream_status
        self.details = details

    def envelope(self) -> dict[str, Any]:
        return {
            "error": "Azure Function call failed",
            "status": self.upstream_status,
            "details": self.details,
        }


class UpstreamPayloadError(OnboardingError):
    """A 2xx upstream answer whose body is not the JSON we expected."""

    def __init__(self, function: str, body: str, message: str | None = None) -> None:
        super().__init__(message or f"Invalid JSON from {function}")
        self.body = body

    def envelope(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.body[:500]}


class VersionConflictError(OnboardingError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, expected: int | None, current: int | None) -> None:
        super().__init__("Document was changed by someone else; reload before saving")
        self.expected = expected
        self.current = current

    def envelope(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "expectedVersion": self.expected,
            "currentVersion": self.current,
        }


async def onboarding_error_handler(request: Request, exc: OnboardingError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("%s %s -> %d %s: %s", request.method, request.url.path, exc.status_code, type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.envelope(), headers=NO_STORE)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Unhandled error", "message": str(exc)},
        headers=NO_STORE,
    )
