"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


@pytest.fixture
def api_client(engine, test_db_url):
    """FastAPI test client with test database.

    Initializes the global database via init_db inside the TestClient's
    own event loop so route handlers can use get_session_factory().
    The engine fixture ensures tables exist before this runs.
    """
    from studio.db import close_db, init_db
    from studio.main import create_app

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Test lifespan - initialize DB in TestClient's event loop."""
        # Reset global so init_db creates a fresh engine in THIS loop
        import studio.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        app.state.shutting_down = False
        await init_db(test_db_url)
        yield
        await close_db()

    with TestClient(create_app(lifespan_handler=test_lifespan)) as client:
        yield client


@pytest.fixture
def create_project(api_client):
    """POST a project and return its JSON body."""

    def _create(**fields):
        payload = {"name": "Test project", **fields}
        response = api_client.post("/api/projects/", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _create
