import pytest
from fastapi.testclient import TestClient

from config import Settings
from server import create_app

UPSTREAM = "https://forum.test/"


@pytest.fixture
def settings() -> Settings:
    return Settings(UPSTREAM_BASE_URL=UPSTREAM, UPSTREAM_TIMEOUT_SECONDS=2.0)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)
