"""
API test fixtures: an app built from test settings, with the use-case
dependencies swapped for in-memory doubles.
"""

import pytest
from fastapi.testclient import TestClient

from citenly.config.settings import Settings, get_settings
from citenly.core.app_factory import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, CRON_SECRET=None, DEBUG=False, ENVIRONMENT="test")


@pytest.fixture
def app(settings: Settings):
    application = create_app(settings)
    application.dependency_overrides[get_settings] = lambda: settings
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    # Outside a `with` block the lifespan (hourly scheduler) never starts
    return TestClient(app)
