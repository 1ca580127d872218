"""
Message board server.

A FastAPI application with a Socket.IO server in front of it. The Socket.IO
server owns the real-time channel; HTTP requests that are not Socket.IO
traffic are passed through to FastAPI.
"""
import logging
from typing import Optional

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from msgboard.core.config import Settings, get_settings
from msgboard.core.events import EventDispatcher
from msgboard.routers import board
from msgboard.services.messages import MessageStore
from msgboard.services.settings import RuntimeSettings, SettingsGateway
from msgboard.socketio.namespaces.main import BoardNamespace
from msgboard.socketio.server import create_server
from msgboard.socketio.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def create_namespace(settings: Settings) -> BoardNamespace:
    """Build the board's stores and the namespace that serves them."""
    dispatcher = EventDispatcher()
    gateway = SettingsGateway(RuntimeSettings.from_config(settings), dispatcher)
    messages = MessageStore(seed=settings.seed_messages)
    rate_limiter = RateLimiter(gateway.messages_interval_length, gateway.messages_per_interval)

    if not gateway.secret:
        logger.warning("No admin secret configured; admin features are disabled")

    return BoardNamespace(messages, rate_limiter, gateway, dispatcher)


def create_api(namespace: BoardNamespace) -> FastAPI:
    """Create the HTTP application serving read-only board endpoints."""
    api = FastAPI(
        title="Message Board API",
        version="1.0.0",
        description="Real-time message board. Live traffic uses Socket.IO at `/socket.io`.",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    api.state.namespace = namespace
    api.state.messages = namespace.messages

    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    api.include_router(board.router)
    return api


def create_app(settings: Optional[Settings] = None) -> socketio.ASGIApp:
    """Create the combined Socket.IO + FastAPI ASGI application."""
    settings = settings or get_settings()

    sio = create_server(settings)
    namespace = create_namespace(settings)
    sio.register_namespace(namespace)

    api = create_api(namespace)
    logger.info(f"Message board ready ({len(namespace.messages)} seed messages)")
    return socketio.ASGIApp(sio, other_asgi_app=api, socketio_path='socket.io')


def run():
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    uvicorn.run(
        "msgboard.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
