"""
Plant production API - test configuration and fixtures
"""
from datetime import datetime

import pytest

from plantdash.app import create_app
from plantdash.config import TestingConfig

FROZEN_NOW = datetime(2026, 3, 18, 14, 37, 12)
API_KEY = "test-key"


@pytest.fixture
def now() -> datetime:
    return FROZEN_NOW


@pytest.fixture
def app():
    """App wired to the mock generator and a frozen clock"""
    return create_app(TestingConfig, clock=lambda: FROZEN_NOW)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"X-API-Key": API_KEY}
