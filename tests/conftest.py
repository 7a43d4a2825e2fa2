"""
pytest configuration and fixtures
"""

import pytest
from fastapi.testclient import TestClient

from app import create_app
from rpc.registry import ProcedureRegistry, get_registry
from rpc.procedures.users import build_user_procedures
from fakes import InMemoryUsersService, FakePool


@pytest.fixture
def users_service():
    """Fresh in-memory users table per test"""
    return InMemoryUsersService()


@pytest.fixture
def registry(users_service):
    """Registry wired to the in-memory users service"""
    return ProcedureRegistry().register("user", build_user_procedures(users_service))


@pytest.fixture
def api_client(registry):
    """TestClient for the app with the registry swapped for the in-memory one"""
    app = create_app(manage_database=False)
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as client:
        yield client


@pytest.fixture
def fake_pool():
    return FakePool()
