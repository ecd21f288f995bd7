"""People search against the directory function, with caching and typeahead sessions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlencode

from cachetools import TTLCache

from onboarding.core.config import Settings, settings
from onboarding.core.errors import OnboardingError
from onboarding.models.directory import DirectoryUser
from onboarding.services.function_client import FunctionClient, function_client

logger = logging.getLogger(__name__)


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_user(raw: Any) -> DirectoryUser | None:
    if not isinstance(raw, dict):
        return None
    user_id = str(raw.get("id") or "").strip()
    display_name = str(raw.get("displayName") or raw.get("name") or "").strip()
    if not user_id or not display_name:
        return None

    upn = _clean(raw.get("userPrincipalName"))
    return DirectoryUser(
        id=user_id,
        displayName=display_name,
        mail=_clean(raw.get("mail")) or upn,
        userPrincipalName=upn,
        jobTitle=_clean(raw.get("jobTitle")),
    )


def _new_cache(config: Settings) -> TTLCache:
    return TTLCache(maxsize=config.DIRECTORY_CACHE_SIZE, ttl=config.DIRECTORY_CACHE_TTL_SECONDS)


class DirectoryService:
    def __init__(self, client: FunctionClient, config: Settings) -> None:
        self.client = client
        self.settings = config
        self.cache = _new_cache(config)
        self.initialized = False

    async def initialize(self, config: Settings) -> None:
        self.settings = config
        self.cache = _new_cache(config)
        self.initialized = True
        logger.info("Directory search ready (min query length %d)", config.DIRECTORY_MIN_QUERY_LENGTH)

    async def close(self) -> None:
        self.cache.clear()
        self.initialized = False

    @property
    def min_length(self) -> int:
        return self.settings.DIRECTORY_MIN_QUERY_LENGTH

    def search_url(self, query: str) -> str:
        base = self.settings.DIRECTORY_SEARCH_URL
        if not base:
            base = f"{self.settings.AZURE_FUNCTION_BASE_URL.rstrip('/')}/api/DirectoryUserSearch"
        params = {"q": query}
        if self.settings.AZURE_FUNCTION_KEY:
            params["code"] = self.settings.AZURE_FUNCTION_KEY
        return f"{base}?{urlencode(params)}"

    async def _fetch(self, query: str) -> list[Any] | None:
        """Upstream result list, or ``None`` when the search failed."""
        try:
            response = await self.client.send("GET", self.search_url(query), headers={"Accept": "application/json"})
            if not response.ok:
                logger.error("Directory search failed with %d: %s", response.status, response.text[:200])
                return None
            data = response.json(default=[])
        except OnboardingError as e:
            logger.error("Directory search error for %r: %s", query, e.message)
            return None

        if not isinstance(data, list):
            logger.error("Directory search for %r returned %s, expected a list", query, type(data).__name__)
            return None
        return data

    async def fetch_raw(self, query: str) -> list[Any]:
        """Upstream result list for ``query``; short queries and every failure yield ``[]``."""
        q = (query or "").strip()
        if len(q) < self.min_length:
            return []
        return await self._fetch(q) or []

    async def search(self, query: str) -> list[DirectoryUser]:
        q = (query or "").strip()
        if len(q) < self.min_length:
            return []

        cached = self.cache.get(q)
        if cached is not None:
            return cached

        raw = await self._fetch(q)
        if raw is None:
            return []

        users = [u for u in map(normalize_user, raw) if u is not None]
        self.cache[q] = users
        return users


class DirectoryTypeahead:
    """One picker session: debounced searches, superseded searches cancelled."""

    def __init__(
        self,
        service: DirectoryService,
        on_results: Callable[[str, list[DirectoryUser]], Awaitable[None]],
        debounce_seconds: float | None = None,
    ) -> None:
        self.service = service
        self.on_results = on_results
        self.debounce_seconds = (
            service.settings.DIRECTORY_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.cache: dict[str, list[DirectoryUser]] = {}
        self._pending: asyncio.Task | None = None

    async def submit(self, query: str) -> None:
        self.cancel()
        q = (query or "").strip()
        if len(q) < self.service.min_length:
            await self.on_results(q, [])
            return
        self._pending = asyncio.create_task(self._run(q))

    async def _run(self, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        results = self.cache.get(query)
        if results is None:
            results = await self.service.search(query)
            self.cache[query] = results
        await self.on_results(query, results)

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def wait(self) -> None:
        if self._pending is not None:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass


directory_service = DirectoryService(function_client, settings)
