"""
Shared fixtures.

Every test gets its own SQLite file under ``tmp_path``.  ``client``
runs the application's startup (migrations) and yields a
``TestClient``; ``ctx`` is the ``AppContext`` of that application so
tests can seed records directly through the services.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from perilla_api.app.core.config import DatabaseConfig, Settings, SystemConfig
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.security import create_access_token
from perilla_api.app.main import create_app
from perilla_api.app.schemas.entry import EntryCreate, EntryType

SECRET = "test-session-secret"
PASSWORD = "correct horse"


def run(coro):
    """Run a service coroutine from synchronous test code."""
    return asyncio.run(coro)


def make_entry(ctx: AppContext, entry_id: str, entry_type: EntryType = EntryType.user, **fields):
    password = PASSWORD if entry_type == EntryType.user else None
    return run(ctx.entries.create_entry(EntryCreate(id=entry_id, type=entry_type, password=password, **fields)))


def auth(entry_id: str) -> dict:
    token = create_access_token(entry_id, SECRET, 3600)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def config(tmp_path):
    return SystemConfig(
        db=DatabaseConfig(url="perilla.db"),
        session_secret=SECRET,
        base_dir=str(tmp_path),
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(log_file="", frontend_path=str(tmp_path / "frontend"))


@pytest.fixture
def context(config, settings):
    """A standalone, initialised context for service level tests."""
    ctx = AppContext.from_config(config, settings)
    ctx.init()
    yield ctx
    ctx.close()


@pytest.fixture
def app(config, settings):
    return create_app(config, settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def ctx(app, client):
    return app.state.context


@pytest.fixture
def admin(ctx):
    """A system administrator."""
    make_entry(ctx, "root")
    run(ctx.systemmaps.add("root"))
    return "root"
