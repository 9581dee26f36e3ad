"""Pytest configuration and fixtures for test suite."""

import os
import sys
from pathlib import Path

import pytest

# Set test environment BEFORE any other imports
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_DRIVER", "sqlite+aiosqlite")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from datetime import date  # noqa: E402

from tests.helpers.factories import make_engineer, make_manager, make_project  # noqa: E402
from tests.helpers.memory_store import MemoryStore  # noqa: E402


def _reset_cached_globals():
    """Reset cached settings and the JWT secret so env changes take effect."""
    from config.database import get_database_settings
    from config.settings import get_settings
    import rbac.jwt as jwt_module

    get_settings.cache_clear()
    get_database_settings.cache_clear()
    jwt_module._jwt_secret_cache = None


@pytest.fixture(autouse=True)
def reset_cached_globals():
    """Reset module globals before and after each test."""
    _reset_cached_globals()
    yield
    _reset_cached_globals()


# =============================================================================
# IN-MEMORY STORE FIXTURES
# =============================================================================

TODAY = date(2025, 7, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def manager(store):
    user = make_manager()
    store.db.users[user.id] = user
    return user


@pytest.fixture
def engineer(store):
    user = make_engineer(skills=["React", "Node.js"])
    store.db.users[user.id] = user
    return user


@pytest.fixture
def part_time_engineer(store):
    user = make_engineer(name="Charlie Engineer", max_capacity=50, skills=["DevOps", "AWS"])
    store.db.users[user.id] = user
    return user


@pytest.fixture
def project(store, manager):
    proj = make_project(manager.id, required_skills=["React", "TypeScript"])
    store.db.projects[proj.id] = proj
    return proj
