import json
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from api.routes import auth, health, projects, tasks
from app.config import settings
from app.db import init_db
from app.errors import register_exception_handlers
from app.logger import get_logger, setup_logging
from app.notifier import relay

logger = get_logger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    logger.info(f"Starting project tracker ({settings.app_env})...")

    init_db()

    yield

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Project Tracker",
        description="Multi-user project and task tracker with team-based access control",
        version="1.0.0",
        lifespan=app_lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(projects.router)
    app.include_router(tasks.router)

    @app.websocket("/ws")
    async def live_updates(websocket: WebSocket):
        """Live update channel; client updates are relayed to the other clients."""
        connection_id = await relay.connect(websocket)
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    logger.debug(f"Ignoring malformed message from client {connection_id}")
                    continue
                if isinstance(message, dict):
                    await relay.handle_client_message(connection_id, message)
        except WebSocketDisconnect:
            pass
        finally:
            relay.disconnect(connection_id)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
