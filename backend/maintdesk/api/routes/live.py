"""
Live View WebSockets

Streams a page projection to the console and re-sends it whenever the
underlying collection changes. The store subscription lives exactly as long
as the socket.
"""

import asyncio
from typing import Any, Optional, Tuple
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool

from ...domain.errors import AuthenticationError, AuthorizationError, DomainError, ValidationError
from ...repositories.store_factory import get_record_store
from ...services.live_view import create_live_view
from ...utils.jwt import get_current_admin
from ...utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()

CLOSE_UNAUTHORIZED = 4401
CLOSE_FORBIDDEN = 4403
CLOSE_BAD_REQUEST = 4400


def _error_payload(error: Exception) -> dict:
    if isinstance(error, DomainError):
        return {"type": "error", **error.to_dict()}
    return {"type": "error", "error": {"code": "INTERNAL_ERROR", "message": "Live view failed", "details": {}}}


async def stop_sender(task: "asyncio.Task[None]", view: str) -> None:
    """Cancel the sender and collect its outcome so failures are logged"""
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.warning(f"Live view sender for {view} failed: {e}", extra={"view": view})


@router.websocket("/live/{view}")
async def live_view_ws(websocket: WebSocket, view: str, token: Optional[str] = None):
    """
    Query parameters other than ``token`` are the view's filters
    (mode, category, type, location, status, start_date, end_date, search,
    page, page_size).
    """
    try:
        actor = get_current_admin(token or "")
    except AuthenticationError:
        await websocket.close(code=CLOSE_UNAUTHORIZED)
        return
    except AuthorizationError:
        await websocket.close(code=CLOSE_FORBIDDEN)
        return

    params = {key: value for key, value in websocket.query_params.items() if key != "token"}
    try:
        projection = create_live_view(get_record_store(), view, params)
    except ValidationError:
        await websocket.close(code=CLOSE_BAD_REQUEST)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[Tuple[str, Any]]" = asyncio.Queue()

    # Store listeners may fire on any thread
    projection.add_listener(lambda result: loop.call_soon_threadsafe(queue.put_nowait, ("snapshot", result)))
    projection.add_error_listener(lambda error: loop.call_soon_threadsafe(queue.put_nowait, ("error", error)))

    async def sender() -> None:
        while True:
            kind, payload = await queue.get()
            if kind == "snapshot":
                await websocket.send_json(jsonable_encoder({"type": "snapshot", "view": view, "data": payload}))
            else:
                await websocket.send_json(jsonable_encoder(_error_payload(payload)))

    send_task = asyncio.create_task(sender())
    logger.info(f"Live view connected: {view} ({actor.email})", extra={"view": view, "actor_email": actor.email})
    try:
        await run_in_threadpool(projection.start)
        while True:
            data = await websocket.receive_text()
            if data and data.strip().lower() in {"ping", "keepalive"}:
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info(f"Live view disconnected: {view}", extra={"view": view})
    finally:
        await stop_sender(send_task, view)
        await run_in_threadpool(projection.close)
