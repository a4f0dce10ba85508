from __future__ import annotations

import random
from datetime import date

import pytest
from fastapi.testclient import TestClient

from agriinsight.core.config import Settings
from agriinsight.main import create_app
from agriinsight.services.agronomy import RandomAgronomicDataProvider

START_DATE = date(2024, 2, 27)


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        secret_key="test-secret",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'agriinsight-test.db'}",
        password_hash_rounds=4,
        max_forecast_days=30,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> RandomAgronomicDataProvider:
    return RandomAgronomicDataProvider(rng=random.Random(1234), today=lambda: START_DATE)


@pytest.fixture
def app(settings, clock, provider):
    return create_app(settings, data_provider=provider, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


@pytest.fixture
def register(client):
    def _register(username: str = "alice", password: str = "pw1", email: str = "a@x.com"):
        return client.post("/auth/register", json={"username": username, "password": password, "email": email})

    return _register


@pytest.fixture
def logged_in(client, register):
    assert register().status_code == 201
    response = client.post("/auth/login", json={"username": "alice", "password": "pw1"})
    assert response.status_code == 200
    return client
