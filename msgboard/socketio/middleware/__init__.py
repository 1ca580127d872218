"""Socket.IO middleware for authentication."""

from .auth import (
    ADMIN_ROOM,
    AUTH_ERROR,
    admin_required,
    extract_credential,
    identity_room,
    parse_cookies,
    verify_credential,
)

__all__ = [
    'ADMIN_ROOM',
    'AUTH_ERROR',
    'admin_required',
    'extract_credential',
    'identity_room',
    'parse_cookies',
    'verify_credential',
]
