"""Gateway to the Azure Functions app that owns all SharePoint-backed state.

One attempt per call: no retries. The function key travels both as the
``code`` query parameter and as the ``x-functions-key`` header.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

import aiohttp

from onboarding.core.config import Settings, settings
from onboarding.core.errors import (
    ConfigurationError,
    UpstreamCallError,
    UpstreamPayloadError,
    UpstreamUnreachableError,
)
from onboarding.core.logging import redact_url

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "x-ms-client-principal-name"


@dataclass
class UpstreamResponse:
    status: int
    body: bytes = b""
    content_type: str | None = None
    function: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self, default: Any = None) -> Any:
        if not self.body.strip():
            return default
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise UpstreamPayloadError(self.function or "Azure Function", self.text) from e

    def details(self) -> Any:
        """Parsed JSON when the body is JSON, the raw text otherwise."""
        try:
            return json.loads(self.body) if self.body.strip() else self.text
        except ValueError:
            return self.text


def ensure_ok(response: UpstreamResponse) -> UpstreamResponse:
    if not response.ok:
        raise UpstreamCallError(response.status, response.details())
    return response


class FunctionClient:
    def __init__(self, config: Settings) -> None:
        self.settings = config
        self.initialized = False

    async def initialize(self, config: Settings) -> None:
        self.settings = config
        if not config.functions_configured:
            logger.warning("AZURE_FUNCTION_BASE_URL/AZURE_FUNCTION_CODE missing; upstream calls will fail with 500")
        self.initialized = True

    async def close(self) -> None:
        self.initialized = False

    def _require(self, name: str) -> str:
        value = getattr(self.settings, name, "")
        if not value:
            raise ConfigurationError(f"Missing env var: {name}")
        return value

    def check_configured(self) -> None:
        self._require("AZURE_FUNCTION_BASE_URL")
        self._require("AZURE_FUNCTION_CODE")

    def build_url(
        self,
        function: str,
        *,
        segment: str | int | None = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[str, str]:
        base = self._require("AZURE_FUNCTION_BASE_URL").rstrip("/")
        key = self._require("AZURE_FUNCTION_CODE")

        url = f"{base}/api/{function}"
        if segment is not None:
            url += "/" + quote(str(segment), safe="")

        query = {k: v for k, v in (params or {}).items() if v is not None}
        query["code"] = key
        return f"{url}?{urlencode(query)}", key

    async def request(
        self,
        method: str,
        function: str,
        *,
        segment: str | int | None = None,
        params: dict[str, Any] | None = None,
        content: bytes | None = None,
        json_body: Any = None,
        content_type: str | None = None,
        key_in_header: bool = True,
        principal: str | None = None,
    ) -> UpstreamResponse:
        url, key = self.build_url(function, segment=segment, params=params)

        headers: dict[str, str] = {}
        if key_in_header:
            headers["x-functions-key"] = key
        if principal:
            headers[PRINCIPAL_HEADER] = principal
        if json_body is not None:
            content = json.dumps(json_body).encode("utf-8")
        if content is not None:
            headers["Content-Type"] = content_type or "application/json"

        response = await self.send(method, url, headers=headers, content=content)
        response.function = function
        return response

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> UpstreamResponse:
        logger.info("%s %s", method, redact_url(url))

        timeout = aiohttp.ClientTimeout(total=self.settings.UPSTREAM_TIMEOUT_SECONDS)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=headers, data=content) as response:
                    body = await response.read()
                    return UpstreamResponse(
                        status=response.status,
                        body=body,
                        content_type=response.headers.get("Content-Type"),
                    )
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("%s %s unreachable: %s", method, redact_url(url), e)
            raise UpstreamUnreachableError(str(e) or type(e).__name__) from e


function_client = FunctionClient(settings)
