"""
Socket.IO authentication middleware for the message board.

Admin privilege is carried by a signed JWT (HS256) supplied in the ``auth``
cookie, or in the ``token`` key of the Socket.IO connect auth dict. The
verification key is the runtime ``secret`` setting.

Privilege is never trusted beyond a single operation: every admin handler
is wrapped in ``admin_required``, which re-verifies the credential captured
at connect time before the handler runs.
"""
import functools
import logging
from typing import Optional

import jwt
from asgiref.sync import sync_to_async
from starlette.requests import cookie_parser

logger = logging.getLogger(__name__)

ADMIN_ROOM = 'admin'
AUTH_ERROR = 'Invalid auth token'
JWT_ALGORITHMS = ['HS256']


def identity_room(identity: str) -> str:
    """Room that every connection of one identity joins."""
    return f'identity:{identity}'


def parse_cookies(environ: Optional[dict]) -> dict[str, str]:
    """
    Extract cookies from the ASGI/WSGI environ of a Socket.IO connection.

    Uses Starlette's lenient parser, so one malformed cookie (a JSON value,
    a value with spaces) does not hide the others.

    Returns:
        Mapping of cookie name to value. Empty if there is no cookie header.
    """
    header = (environ or {}).get('HTTP_COOKIE', '')
    if not header:
        return {}
    return cookie_parser(header)


def extract_credential(cookies: dict, auth: Optional[dict] = None) -> Optional[str]:
    """Pick the admin token from the ``auth`` cookie or the connect auth dict."""
    token = cookies.get('auth')
    if not token and auth and isinstance(auth, dict):
        token = auth.get('token')
    return token or None


async def verify_credential(token: Optional[str], secret: Optional[str]) -> Optional[dict]:
    """
    Verify a signed admin token.

    Args:
        token: Encoded JWT
        secret: HS256 verification key

    Returns:
        Decoded claims if the token is valid, None otherwise
    """
    if not token or not secret:
        return None
    return await _decode_jwt(token, secret)


@sync_to_async
def _decode_jwt(token: str, secret: str) -> Optional[dict]:
    try:
        return jwt.decode(token, secret, algorithms=JWT_ALGORITHMS)
    except jwt.ExpiredSignatureError:
        logger.debug("JWT validation failed: token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"JWT validation failed: {e}")
        return None


def admin_required(handler):
    """
    Guard an admin event handler of a ``BoardNamespace``.

    The credential captured at connect time is verified again against the
    current secret. On failure the session loses its claims, leaves the
    admin room, receives an ``error`` event, and the handler's ack is
    ``{'error': 'Invalid auth token'}``. The handler itself is not run.
    """
    @functools.wraps(handler)
    async def wrapper(self, sid: str, *args):
        session = await self.get_session(sid)
        credential = session.get('credential')
        claims = await verify_credential(credential, self.settings.secret)

        # Session may have changed while verification was suspended
        session = await self.get_session(sid)

        if claims is None:
            was_admin = session.get('claims') is not None
            session['claims'] = None
            await self.save_session(sid, session)
            if was_admin:
                await self.leave_room(sid, ADMIN_ROOM)

            logger.warning(f"Admin request '{handler.__name__}' refused for {sid}: {AUTH_ERROR}")
            await self.emit('error', {
                'type': 'error',
                'event': handler.__name__.removeprefix('on_').replace('_', ' '),
                'message': AUTH_ERROR,
            }, to=sid)
            return {'error': AUTH_ERROR}

        if session.get('claims') is None:
            await self.enter_room(sid, ADMIN_ROOM)
        session['claims'] = claims
        await self.save_session(sid, session)

        return await handler(self, sid, *args)

    return wrapper
