import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./leasehub-test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["PAYMENT_SIMULATION_DELAY_SECONDS"] = "0"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["MAIL_SERVER"] = ""
os.environ["DEFAULT_ADMIN_EMAIL"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from leasehub.core.database import Database
from leasehub.main import create_app


class RecordingNotifier:
    """Collects welcome notifications instead of sending mail."""

    def __init__(self):
        self.sent = []

    async def send_welcome(self, email: str, name: str) -> bool:
        self.sent.append((email, name))
        return True


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'leasehub.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(database, notifier):
    # ASGITransport does not run the lifespan, so the state is wired here
    return create_app(database=database, notifier=notifier)


@pytest.fixture
async def make_client(app):
    """Factory for clients with their own cookie jar, one per simulated user."""
    clients = []

    def _make() -> AsyncClient:
        client = AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://testserver",
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


@pytest.fixture
def client(make_client):
    return make_client()
