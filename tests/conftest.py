"""Shared fixtures.

Region routes run against :class:`InMemoryRegionRepository`; authentication
is replaced by a fixed owner so no database is needed. ``auth_client`` keeps
real token handling and swaps only the user store.
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-maps-key")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from geofence.api.deps import get_region_repository, get_user_repository
from geofence.auth.jwt import get_current_user
from geofence.main import create_app
from geofence.services.regions import RegionService
from tests.fakes import InMemoryRegionRepository, InMemoryUserRepository


@pytest.fixture
def repository():
    return InMemoryRegionRepository()


@pytest.fixture
def owner(repository):
    return repository.add_user()


@pytest.fixture
def service(repository):
    return RegionService(repository)


@pytest.fixture
def app(repository, owner):
    app = create_app()
    app.dependency_overrides[get_region_repository] = lambda: repository
    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(
        id=owner.id, name=owner.name, email=owner.email
    )
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def anonymous_client(repository):
    app = create_app()
    app.dependency_overrides[get_region_repository] = lambda: repository
    return TestClient(app)


@pytest.fixture
def users(repository):
    return InMemoryUserRepository(repository)


@pytest.fixture
def auth_client(repository, users):
    """Client with real JWT auth; the lifespan builds the app's geocoder."""
    app = create_app()
    app.dependency_overrides[get_region_repository] = lambda: repository
    app.dependency_overrides[get_user_repository] = lambda: users
    with TestClient(app) as client:
        yield client
