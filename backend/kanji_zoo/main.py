import asyncio
import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings, setup_logging
from .events import Event, WebSocketGateway
from .game import GameController, SessionActor
from .schemas import SessionSnapshotOut
from .timers import LoopScheduler

logger = logging.getLogger(__name__)


async def _pump(ws: WebSocket, outbox: "asyncio.Queue[Event]") -> None:
    while True:
        event = await outbox.get()
        try:
            await ws.send_json(event.to_wire())
        except (WebSocketDisconnect, RuntimeError, OSError):
            # socket closed under us; the reader side reports the disconnect
            return


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    actor = SessionActor()
    gateway = WebSocketGateway()
    controller = GameController(gateway, LoopScheduler(actor.submit), settings)
    gateway.on_command(lambda conn_id, message: actor.submit(controller.handle, conn_id, message))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        actor.start()
        logger.info("session actor started")
        try:
            yield
        finally:
            await actor.stop()
            logger.info("session actor stopped")

    app = FastAPI(title="Kanji Zoo API", lifespan=lifespan)
    app.state.settings = settings
    app.state.actor = actor
    app.state.gateway = gateway
    app.state.controller = controller

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/api/session", response_model=SessionSnapshotOut)
    async def get_session():
        return controller.snapshot()

    @app.websocket("/ws")
    async def ws_endpoint(ws: WebSocket):
        await ws.accept()
        conn_id = uuid.uuid4().hex
        outbox = gateway.connect(conn_id)
        writer = asyncio.create_task(_pump(ws, outbox))
        logger.info("[ws] connected %s (%d open)", conn_id, gateway.connection_count)

        try:
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                text = frame.get("text")
                if text is None:
                    logger.debug("[ws] %s sent a binary frame", conn_id)
                    continue
                try:
                    message = json.loads(text)
                except ValueError:
                    logger.debug("[ws] %s sent non-JSON frame", conn_id)
                    continue
                gateway.receive(conn_id, message)
        except WebSocketDisconnect:
            pass
        finally:
            gateway.disconnect(conn_id)
            actor.submit(controller.disconnect, conn_id)
            writer.cancel()
            await asyncio.gather(writer, return_exceptions=True)
            logger.info("[ws] disconnected %s", conn_id)

    return app


app = create_app()
