"""
Main Socket.IO namespace for the message board.

Handles every client connection on the default namespace ('/').

Each connection is identified by the ``id`` cookie (a self-declared browser
session key, used only for room scoping and rate limiting) and joins the
``identity:<id>`` room straight away. Admin verification runs in the
background; a connection with a valid token additionally joins the ``admin``
room and may use the admin events, each of which re-verifies the token.

## Events (Client -> Server), with acknowledgement payloads

- add message (text) -> (delivered, rate entry)
- meta -> rate entry
- get messages [admin] -> list of messages, most recent first
- add message admin (text) [admin] -> delivered
- edit message (message) [admin] -> success
- delete message (id) [admin] -> id
- get settings [admin] -> settings without secret
- set settings (partial settings) [admin] -> changed
- add notification ({title, text}) [admin] -> notification

## Events (Server -> Client)

- new message - everyone
- meta - the sender's identity room only
- edit message, delete message, settings change, add notification - everyone
- error - the offending connection only
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import socketio
from pydantic import ValidationError

from msgboard.core.events import BoardEvent, EventDispatcher
from msgboard.schemas import Notification
from msgboard.services.messages import MessageStore
from msgboard.services.settings import SettingsGateway
from msgboard.socketio.middleware.auth import (
    ADMIN_ROOM,
    admin_required,
    extract_credential,
    identity_room,
    parse_cookies,
    verify_credential,
)
from msgboard.socketio.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class BoardNamespace(socketio.AsyncNamespace):
    """
    Message board namespace.

    Shared state (messages, rate limiter, settings) is injected so that
    several namespaces or tests can run against isolated stores.

    Session data stored:
    - identity: value of the ``id`` cookie ('' when absent)
    - credential: admin token captured at connect time (if it verified)
    - claims: decoded token claims while the connection is privileged
    - connected_at: ISO timestamp
    """

    def __init__(
        self,
        messages: MessageStore,
        rate_limiter: RateLimiter,
        settings: SettingsGateway,
        dispatcher: Optional[EventDispatcher] = None,
        namespace: str = '/',
    ):
        super().__init__(namespace)
        self.messages = messages
        self.rate_limiter = rate_limiter
        self.settings = settings
        self.dispatcher = dispatcher if dispatcher is not None else settings.dispatcher
        self.connection_count = 0

        self.dispatcher.on(
            BoardEvent.SETTINGS_CHANGE, self._on_per_interval_change, field='messagesPerInterval'
        )
        self.dispatcher.on(
            BoardEvent.SETTINGS_CHANGE, self._on_interval_length_change, field='messagesIntervalLength'
        )

    async def trigger_event(self, event: str, *args):
        """Route event names with spaces ('add message') to ``on_add_message``."""
        return await super().trigger_event(event.replace(' ', '_'), *args)

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None):
        """
        Handle client connection.

        Joins the identity room immediately and starts admin verification
        in the background, so base features never wait on it.
        """
        cookies = parse_cookies(environ)
        identity = cookies.get('id', '')
        credential = extract_credential(cookies, auth)

        await self.save_session(sid, {
            'identity': identity,
            'credential': None,
            'claims': None,
            'connected_at': datetime.now(timezone.utc).isoformat(),
        })

        if identity:
            await self.enter_room(sid, identity_room(identity))

        self.connection_count += 1
        logger.info(
            f"Client connected: {sid}, identity={identity or 'none'} "
            f"(total: {self.connection_count})"
        )

        if credential:
            self.server.start_background_task(self._establish_admin, sid, credential)

        return True

    async def on_disconnect(self, sid: str, reason=None):
        """Handle client disconnection. Rate limit entries are kept."""
        self.connection_count = max(0, self.connection_count - 1)
        logger.info(f"Client disconnected: {sid} (total: {self.connection_count})")

    async def _establish_admin(self, sid: str, credential: str):
        """Verify the connect-time token and grant admin privileges."""
        claims = await verify_credential(credential, self.settings.secret)
        if claims is None:
            logger.debug(f"Connection {sid} stays anonymous: admin token rejected")
            return

        try:
            session = await self.get_session(sid)
        except KeyError:
            logger.debug(f"Connection {sid} went away during admin verification")
            return

        session['credential'] = credential
        session['claims'] = claims
        await self.save_session(sid, session)
        await self.enter_room(sid, ADMIN_ROOM)
        logger.info(f"Admin privileges granted to {sid} (sub={claims.get('sub')})")

    # =========================================================================
    # Base events
    # =========================================================================

    async def on_add_message(self, sid: str, text=None):
        """Submit a public message, subject to the identity's rate limit."""
        session = await self.get_session(sid)
        identity = session.get('identity', '')

        delivered = await self.submit_message(identity, text)
        entry = self.rate_limiter.status(identity)

        await self._emit_meta(sid, identity, entry)
        return delivered, entry

    async def on_meta(self, sid: str, data=None):
        """Peek at the caller's rate limit status without consuming quota."""
        session = await self.get_session(sid)
        return self.rate_limiter.status(session.get('identity', ''))

    # =========================================================================
    # Admin events
    # =========================================================================

    @admin_required
    async def on_get_messages(self, sid: str, data=None):
        return self.messages.list()

    @admin_required
    async def on_add_message_admin(self, sid: str, text=None):
        return await self.broadcast_message(text)

    @admin_required
    async def on_edit_message(self, sid: str, message=None):
        success = self.messages.edit(message)
        if success:
            await self.emit('edit message', self.messages.get(message['id']))
        return success

    @admin_required
    async def on_delete_message(self, sid: str, message_id=None):
        self.messages.delete(message_id)
        await self.emit('delete message', message_id)
        return message_id

    @admin_required
    async def on_get_settings(self, sid: str, data=None):
        return self.settings.read()

    @admin_required
    async def on_set_settings(self, sid: str, partial=None):
        changed = self.settings.write(partial)
        if changed:
            await self.emit('settings change', self.settings.read())
        return changed

    @admin_required
    async def on_add_notification(self, sid: str, data=None):
        try:
            notification = Notification.model_validate(data if isinstance(data, dict) else {})
        except ValidationError as e:
            logger.debug(f"Rejected notification from {sid}: {e}")
            return False

        payload = notification.to_dict()
        await self.emit('add notification', payload)
        return payload

    # =========================================================================
    # Operations
    # =========================================================================

    async def submit_message(self, identity: str, text) -> bool:
        """
        Store and broadcast a message on behalf of ``identity``.

        Returns:
            False if the identity is rate limited or the text was rejected.
        """
        entry = self.rate_limiter.get_or_create(identity)
        if not entry.can:
            logger.debug(f"Rate limited message from identity '{identity}'")
            return False

        message = self.messages.add(text, self.settings.max_message_length)
        if message is None:
            return False

        self.rate_limiter.update(entry)
        await self.emit('new message', message.to_dict())
        return True

    async def broadcast_message(self, text) -> bool:
        """Store and broadcast a message without any rate limiting."""
        message = self.messages.add(text, self.settings.max_message_length)
        if message is None:
            return False

        await self.emit('new message', message.to_dict())
        return True

    async def _emit_meta(self, sid: str, identity: str, entry: dict):
        """Send rate limit status to the sender's identity only."""
        room = identity_room(identity) if identity else sid
        await self.emit('meta', entry, room=room)

    def _on_per_interval_change(self, per_interval: int):
        self.rate_limiter = self.rate_limiter.update_per_timeframe(per_interval)
        logger.info(f"Rate limiter quota set to {per_interval} messages per interval")

    def _on_interval_length_change(self, interval_length: float):
        self.rate_limiter = self.rate_limiter.update_interval_length(interval_length)
        logger.info(f"Rate limiter interval set to {interval_length}s")
