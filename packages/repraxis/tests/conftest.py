"""
Pytest fixtures for RePraxis tests.

Provides a small relationship graph shared by the query tests.
"""

import pytest

from repraxis import FactDatabase

# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def db() -> FactDatabase:
    """Empty fact database."""
    return FactDatabase()


@pytest.fixture
def relationship_db() -> FactDatabase:
    """Astrid's relationships with reputation scores and a spouse tag on britt."""
    db = FactDatabase()
    db.insert("astrid.relationships.jordan.reputation!30")
    db.insert("astrid.relationships.jordan.tags.rivalry")
    db.insert("astrid.relationships.britt.reputation!-10")
    db.insert("astrid.relationships.britt.tags.ex_lover")
    db.insert("astrid.relationships.lee.reputation!20")
    db.insert("astrid.relationships.lee.tags.friend")
    db.insert("player.relationships.jordan.reputation!-20")
    db.insert("britt.relationships.player.tags.spouse")
    db.insert("player.relationships.britt.tags.spouse")
    return db
