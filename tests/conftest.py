"""Shared test fixtures for Family Organizer API tests.

Tests run in-process against the FastAPI app through httpx's ASGITransport.
Each test starts from an empty TinyDB file in a temporary data directory.
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Set test environment before importing the app
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="family-organizer-tests-")
os.environ["LOG_LEVEL"] = "WARNING"

from family_organizer.services.database import db  # noqa: E402
from tests.factories import create_family, create_member  # noqa: E402


# =============================================================================
# Database Fixture
# =============================================================================

@pytest.fixture(autouse=True)
def clean_db():
    """Start every test from empty tables"""
    db.initialize()
    db.db.drop_tables()
    yield db
    db.db.drop_tables()


# =============================================================================
# Test Client Fixture
# =============================================================================

@pytest_asyncio.fixture
async def test_client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client calling the app in-process"""
    from family_organizer.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# =============================================================================
# Family Fixtures
# =============================================================================

@pytest.fixture
def family():
    """A family with one admin, one adult and one child"""
    fam = create_family(name="Test Family")
    return {
        "family": fam,
        "admin": create_member(fam["id"], role="ADMIN", display_name="Admin Parent"),
        "adult": create_member(fam["id"], role="ADULT", display_name="Other Parent"),
        "child": create_member(fam["id"], role="CHILD", display_name="Kid"),
    }


@pytest.fixture
def other_family():
    """A second, unrelated family"""
    fam = create_family(name="Neighbours")
    return {
        "family": fam,
        "admin": create_member(fam["id"], role="ADMIN", display_name="Neighbour"),
    }
