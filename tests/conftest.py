"""
Shared pytest fixtures for message board tests.

Provides isolated stores, a controllable clock, a recording stand-in for the
Socket.IO server and helpers for minting admin tokens.
"""
import asyncio
import os
import time
from collections import defaultdict
from typing import AsyncGenerator

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing the app
os.environ.setdefault('MSGBOARD_SECRET', 'test-secret')
os.environ.setdefault('MSGBOARD_MESSAGES_PER_INTERVAL', '3')
os.environ.setdefault('MSGBOARD_MESSAGES_INTERVAL_LENGTH', '60')

from msgboard.core.events import EventDispatcher
from msgboard.main import create_api
from msgboard.services.messages import MessageStore
from msgboard.services.settings import RuntimeSettings, SettingsGateway
from msgboard.socketio.namespaces.main import BoardNamespace
from msgboard.socketio.utils.rate_limiter import RateLimiter

SECRET = 'test-secret'


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeServer:
    """Records what a namespace asks the Socket.IO server to do."""

    def __init__(self):
        self.sessions: dict[str, dict] = {}
        self.rooms: dict[str, set] = defaultdict(set)
        self.emitted: list[dict] = []
        self.tasks: list[asyncio.Task] = []

    async def get_session(self, sid, namespace=None):
        if sid not in self.sessions:
            raise KeyError('Session not found')
        return self.sessions[sid]

    async def save_session(self, sid, session, namespace=None):
        self.sessions[sid] = session

    async def enter_room(self, sid, room, namespace=None):
        self.rooms[room].add(sid)

    async def leave_room(self, sid, room, namespace=None):
        self.rooms[room].discard(sid)

    async def emit(self, event, data=None, to=None, room=None, skip_sid=None,
                   namespace=None, callback=None, ignore_queue=False):
        self.emitted.append({'event': event, 'data': data, 'to': to or room})

    def start_background_task(self, target, *args, **kwargs):
        task = asyncio.ensure_future(target(*args, **kwargs))
        self.tasks.append(task)
        return task

    async def drain(self):
        """Wait for every background task started so far."""
        tasks, self.tasks = self.tasks, []
        await asyncio.gather(*tasks)

    def events(self, name: str) -> list[dict]:
        return [e for e in self.emitted if e['event'] == name]


def make_token(secret: str = SECRET, expires_in: float = 3600, **claims) -> str:
    """Mint an HS256 admin token."""
    payload = {'sub': 'admin', 'exp': int(time.time() + expires_in), **claims}
    return jwt.encode(payload, secret, algorithm='HS256')


def make_environ(identity: str = None, token: str = None) -> dict:
    """Build a connect environ with the board's cookies."""
    cookies = []
    if identity is not None:
        cookies.append(f'id={identity}')
    if token is not None:
        cookies.append(f'auth={token}')
    return {'HTTP_COOKIE': '; '.join(cookies)} if cookies else {}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatcher():
    return EventDispatcher()


@pytest.fixture
def gateway(dispatcher):
    initial = RuntimeSettings(
        messages_per_interval=3,
        messages_interval_length=60,
        max_message_length=20,
        secret=SECRET,
    )
    return SettingsGateway(initial, dispatcher)


@pytest.fixture
def store():
    return MessageStore()


@pytest.fixture
def rate_limiter(gateway, clock):
    return RateLimiter(gateway.messages_interval_length, gateway.messages_per_interval, clock=clock)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def namespace(store, rate_limiter, gateway, dispatcher, server):
    ns = BoardNamespace(store, rate_limiter, gateway, dispatcher)
    ns.server = server
    return ns


@pytest_asyncio.fixture
async def connect(namespace, server):
    """Connect a client and wait for admin verification to finish."""
    async def _connect(sid: str, identity: str = None, token: str = None, auth: dict = None):
        accepted = await namespace.trigger_event('connect', sid, make_environ(identity, token), auth)
        await server.drain()
        return accepted

    return _connect


@pytest_asyncio.fixture
async def client(namespace) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the board API."""
    async with AsyncClient(
        transport=ASGITransport(app=create_api(namespace)),
        base_url="http://test",
    ) as ac:
        yield ac
