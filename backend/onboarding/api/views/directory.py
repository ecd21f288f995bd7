from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from onboarding.core.dependencies import get_current_user
from onboarding.models.auth import UserInfo
from onboarding.models.directory import DirectoryUser
from onboarding.services.directory import DirectoryTypeahead, directory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/directory", tags=["views"])


@router.websocket("/typeahead")
async def typeahead(websocket: WebSocket, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    """People picker session: send ``{"q": "..."}``, receive ``{"query", "results"}``."""
    await websocket.accept()

    async def send_results(query: str, results: list[DirectoryUser]) -> None:
        await websocket.send_json({"query": query, "results": [u.model_dump() for u in results]})

    session = DirectoryTypeahead(directory_service, send_results)
    try:
        while True:
            message = await websocket.receive_json()
            query = message.get("q", "") if isinstance(message, dict) else ""
            await session.submit(str(query or ""))
    except WebSocketDisconnect:
        logger.debug("Typeahead session closed for %s", user.principal)
    finally:
        session.cancel()
