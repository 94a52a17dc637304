"""
Shared fixtures: a fresh in-memory SQLite app per test, driven by a
controllable clock for token issuance and expiry checks.
"""
from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from todo_api.config import Settings
from todo_api.main import create_app
from tests._helpers.clock import FakeClock
from tests._helpers.constants import TEST_GOOGLE_CLIENT_ID, TEST_SECRET


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        APP_ENV="test",
        JWT_SECRET_KEY=TEST_SECRET,
        JWT_ISSUER="todo-api-tests",
        JWT_AUDIENCE="todo-client-tests",
        DATABASE_URL="sqlite://",
        GOOGLE_CLIENT_ID=TEST_GOOGLE_CLIENT_ID,
    )


@pytest.fixture
def app(settings: Settings, clock: FakeClock) -> FastAPI:
    return create_app(settings, clock=clock)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c
