import pytest
from fastapi.testclient import TestClient

from designs.core_settings import Settings
from designs.infrastructure.db import Database
from designs.main import create_app


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", LOG_LEVEL="WARNING")


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    db.init_models()
    yield db
    db.dispose()


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app):
    return TestClient(app)
