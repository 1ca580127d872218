"""
Socket.IO AsyncServer configuration for the message board.

This module sets up the Socket.IO server with:
- CORS configuration from settings
- the in-memory client manager (single process; sessions are not shared
  between nodes)
- ASGI integration for use with Uvicorn
"""
import logging
from typing import Union

import socketio

from msgboard.core.config import Settings

logger = logging.getLogger(__name__)


def _get_cors_origins(settings: Settings) -> Union[str, list[str]]:
    """
    Get CORS allowed origins from settings.

    Returns '*' for all origins or a list of origins parsed from the
    comma-separated setting.
    """
    value = (settings.cors_allowed_origins or '').strip()
    if value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_server(settings: Settings) -> socketio.AsyncServer:
    """Create the Socket.IO AsyncServer."""
    cors_origins = _get_cors_origins(settings)

    sio = socketio.AsyncServer(
        async_mode='asgi',
        cors_allowed_origins=cors_origins,
        logger=False,
        engineio_logger=False,
    )

    logger.info(f"Socket.IO server initialized (CORS origins: {cors_origins})")
    return sio
