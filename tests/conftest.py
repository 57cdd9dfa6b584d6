import json
import os

# Settings are read once at import time, so the environment must be set first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_MAX_ATTEMPTS", "3")
os.environ.setdefault("WEBHOOK_URL", "http://webhook.test/generate")

import fakeredis
import httpx
import pytest
from dependency_injector import providers

from api.features.content.client import GenerationClient
from api.shared.entities.registry import BaseEntity
from infra.resources import DatabaseResource, RedisResource

WEBHOOK_URL = "http://webhook.test/generate"
API = "/api/v1"


class FakeWebhook:
    """Scripted stand-in for the generation webhook.

    Queued outcomes are served in order; once the queue is empty every call
    gets ``default``. An outcome is either ``(status, body)`` where a ``str``
    body is sent as text and anything else as JSON, or an exception to raise.
    """

    def __init__(self):
        self.queue = []
        self.default = (200, {"text": "generated"})
        self.requests = []

    def respond(self, *outcomes):
        self.queue.extend(outcomes)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        outcome = self.queue.pop(0) if self.queue else self.default
        if isinstance(outcome, Exception):
            raise outcome
        status, body = outcome
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def webhook():
    return FakeWebhook()


@pytest.fixture
def generation_client(webhook):
    return GenerationClient(
        webhook_url=WEBHOOK_URL, transport=httpx.MockTransport(webhook.handler)
    )


@pytest.fixture
async def database(tmp_path):
    resource = DatabaseResource(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await resource.init()
    async with resource.engine.begin() as conn:
        await conn.run_sync(BaseEntity.metadata.create_all)
    yield resource
    await resource.shutdown()


@pytest.fixture
async def session(database):
    session = database.get_session()
    yield session
    await session.close()


@pytest.fixture
async def redis_resource():
    client = fakeredis.FakeAsyncRedis(
        server=fakeredis.FakeServer(), decode_responses=True
    )
    resource = RedisResource("redis://localhost:6379/0", client=client)
    yield resource
    await resource.disconnect()


@pytest.fixture
async def app(database, redis_resource, generation_client):
    from api.main import create_fastapi_app

    application = create_fastapi_app()
    container = application.container
    container.infrastructure.database.override(providers.Object(database))
    container.infrastructure.redis_db.override(providers.Object(redis_resource))
    container.services.generation_client.override(providers.Object(generation_client))
    yield application
    container.unwire()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user over HTTP; returns ``(auth headers, user payload)``."""

    async def _register(email="alice@mail.com", name="Alice", password="password123"):
        response = await client.post(
            f"{API}/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {"Authorization": f"Bearer {data['access_token']}"}, data["user"]

    return _register
