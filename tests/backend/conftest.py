import asyncio
import json
import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketDisconnect
from tortoise import Tortoise

from business_hub.core import db as db_module
from business_hub.core.security import create_access_token, hash_password
from business_hub.main import app
from business_hub.models.user import User
from business_hub.services.credits import today


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database for service-level tests that don't go through HTTP.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create users directly via ORM.
    The balance is stamped as already reset today unless `last_reset` says otherwise.
    """

    async def _create_user(
        password: str = "UserPass!23",
        credits: int = 50,
        email: str | None = None,
        role: str = "user",
        display_name: str | None = None,
        last_reset="today",
    ) -> tuple[User, str]:
        handle = uuid.uuid4().hex[:6]
        user = await User.create(
            email=email or f"{handle}@example.com",
            display_name=display_name or f"User {handle}",
            password_hash=hash_password(password),
            role=role,
            credits=credits,
            credits_last_reset=today() if last_reset == "today" else last_reset,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def create_admin(create_user):
    """
    Factory fixture to create admin users for privileged endpoints.
    """

    async def _create_admin(password: str = "AdminPass!23") -> tuple[User, str]:
        return await create_user(password=password, email="admin@example.com", role="admin")

    return _create_admin


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the sign-in endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/signin",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


class FakeWebSocket:
    """
    Stand-in for a Starlette WebSocket, driven directly on the test's event loop.

    Queued client frames are handed out by receive_text; once the queue is
    empty the connection reports a disconnect. Passing `hold` keeps it open
    until that event is set, like a browser tab left idle.
    """

    def __init__(self, user: User | None = None, frames=None, hold: asyncio.Event | None = None):
        self.query_params = {"token": create_access_token(str(user.id), user.role)} if user else {}
        self.cookies = {}
        self.incoming = [json.dumps(f) if isinstance(f, dict) else f for f in (frames or [])]
        self.sent: list[dict] = []
        self.accepted = False
        self.closed_code = None
        self.hold = hold

    async def accept(self):
        self.accepted = True

    async def receive_text(self) -> str:
        if not self.incoming:
            if self.hold is not None:
                await self.hold.wait()
            raise WebSocketDisconnect(code=1001)
        return self.incoming.pop(0)

    async def send_text(self, text: str):
        self.sent.append(json.loads(text))

    async def close(self, code: int = 1000):
        self.closed_code = code

    def of_type(self, kind: str) -> list[dict]:
        return [m for m in self.sent if m.get("type") == kind]


@pytest.fixture
def fake_ws():
    return FakeWebSocket
