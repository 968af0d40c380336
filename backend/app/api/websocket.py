"""WebSocket endpoints for live financials panels"""
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import Dict, Optional, Set
from datetime import datetime
import asyncio
import structlog

from app.models.database import get_session_factory
from app.schemas.ledger import FinancialsResponse
from app.services.errors import AppError
from app.services.financials import FinancialsPanel, FinancialsService
from app.services.financials_view import FinancialsView, parse_filters

logger = structlog.get_logger()

router = APIRouter()


class ConnectionManager:
    """Tracks open financials views per startup and reloads them on change"""

    def __init__(self):
        self.views: Dict[int, Dict[WebSocket, FinancialsView]] = {}
        self._message_queue: asyncio.Queue = asyncio.Queue()
        self._notify_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._tasks: Dict[WebSocket, Set[asyncio.Task]] = {}

    async def start(self):
        """Start the notification worker"""
        if self._notify_task is None:
            self._message_queue = asyncio.Queue()
            self._notify_task = asyncio.create_task(self._notify_worker())
            logger.info("WebSocket notification worker started")

    async def stop(self):
        """Stop the notification worker"""
        if self._notify_task:
            self._notify_task.cancel()
            self._notify_task = None

    async def _notify_worker(self):
        """Background worker reloading every view of a changed startup"""
        while True:
            try:
                startup_id = await self._message_queue.get()
                for websocket, view in list(self.views.get(startup_id, {}).items()):
                    self.spawn(websocket, view.refresh())
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Notification worker error", error=str(e))

    async def connect(self, websocket: WebSocket, startup_id: int, view: FinancialsView):
        await websocket.accept()
        self.views.setdefault(startup_id, {})[websocket] = view
        logger.info("WebSocket connected", startup_id=startup_id, total_connections=self.connection_count())

    def disconnect(self, websocket: WebSocket, startup_id: int):
        for task in self._tasks.pop(websocket, set()):
            task.cancel()
        views = self.views.get(startup_id, {})
        views.pop(websocket, None)
        if not views:
            self.views.pop(startup_id, None)
        logger.info("WebSocket disconnected", startup_id=startup_id, total_connections=self.connection_count())

    async def notify_changed(self, startup_id: int):
        """Queue a full reload for every open view of this startup"""
        if startup_id in self.views:
            await self._message_queue.put(startup_id)

    def spawn(self, websocket: WebSocket, load) -> asyncio.Task:
        """Run a view load in the background, reporting failures to the client"""
        async def run():
            try:
                await load
            except AppError as e:
                await self.send_personal(websocket, {"type": "error", "message": str(e)})
            except Exception as e:
                logger.error("Financials load failed", error=str(e), error_type=type(e).__name__)
                await self.send_personal(websocket, {"type": "error", "message": "Failed to load financials"})

        task = asyncio.create_task(run())
        self._pending.add(task)
        self._tasks.setdefault(websocket, set()).add(task)
        task.add_done_callback(lambda done: self._forget(websocket, done, load))
        return task

    def _forget(self, websocket: WebSocket, task: asyncio.Task, load):
        self._pending.discard(task)
        tasks = self._tasks.get(websocket)
        if tasks is not None:
            tasks.discard(task)
            if not tasks:
                self._tasks.pop(websocket, None)
        if task.cancelled() and asyncio.iscoroutine(load):
            # A load cancelled before it started was never awaited
            load.close()

    async def send_personal(self, websocket: WebSocket, message: dict):
        """Send message to a specific connection"""
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.warning("Failed to send to websocket", error=str(e))

    def connection_count(self) -> int:
        return sum(len(views) for views in self.views.values())

    def get_stats(self) -> dict:
        """Get connection statistics"""
        return {
            "active_connections": self.connection_count(),
            "startups_watched": len(self.views),
            "queue_size": self._message_queue.qsize(),
            "pending_loads": len(self._pending),
        }


# Global connection manager
manager = ConnectionManager()


@router.websocket("/ws/startups/{startup_id}/financials")
async def financials_endpoint(
    websocket: WebSocket,
    startup_id: int,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    Live financials panel for one startup.

    The server pushes {"type": "financials", "data": {...}} after every
    applied load. Supported client messages:
    - {"type": "set_filters", "entity": "all", "year": "2024"}
    - {"type": "refresh"}
    - {"type": "ping"}
    """
    async def load(filters) -> FinancialsPanel:
        async with session_factory() as db:
            return await FinancialsService(db).load(startup_id, filters)

    async def push(panel: FinancialsPanel):
        await manager.send_personal(websocket, {
            "type": "financials",
            "data": FinancialsResponse.from_panel(panel).model_dump(mode="json"),
            "timestamp": datetime.utcnow().isoformat(),
        })

    view = FinancialsView(load, on_update=push)
    await manager.connect(websocket, startup_id, view)
    manager.spawn(websocket, view.refresh())

    try:
        while True:
            data = await websocket.receive_json()
            msg_type = data.get("type")

            if msg_type == "set_filters":
                try:
                    filters = parse_filters(data.get("entity"), data.get("year"))
                except AppError as e:
                    await manager.send_personal(websocket, {"type": "error", "message": str(e)})
                    continue
                manager.spawn(websocket, view.set_filters(entity=filters.entity, year=filters.year))

            elif msg_type == "refresh":
                manager.spawn(websocket, view.refresh())

            elif msg_type == "ping":
                await manager.send_personal(websocket, {"type": "pong"})

            else:
                await manager.send_personal(websocket, {
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}",
                })

    except WebSocketDisconnect:
        manager.disconnect(websocket, startup_id)
    except Exception as e:
        logger.error("WebSocket error", startup_id=startup_id, error=str(e))
        manager.disconnect(websocket, startup_id)


@router.get("/ws/stats")
async def websocket_stats():
    """Get WebSocket connection statistics"""
    return manager.get_stats()


websocket_router = router
