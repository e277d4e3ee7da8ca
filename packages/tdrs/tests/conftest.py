"""
Pytest fixtures for social engine tests.

Provides an engine with a small cast:
- traits for agents (attractive, confident, shy, jealous) and
  relationships (friends, rivals, crush)
- one "character" agent type with Confidence
- character -> character relationships with Friendship and Romance
"""

import pytest

from tdrs import (
    AgentSchema,
    RelationshipSchema,
    SocialEngine,
    StatModifierData,
    StatSchema,
    Trait,
    TraitType,
    get_settings,
)

# =============================================================================
# HELPERS
# =============================================================================


def _make_traits() -> list[Trait]:
    return [
        Trait("attractive", TraitType.AGENT, description="[owner] is attractive"),
        Trait(
            "confident",
            TraitType.AGENT,
            modifiers=(StatModifierData("Confidence", 20),),
            conflicting_traits={"shy"},
        ),
        Trait("shy", TraitType.AGENT),
        Trait("jealous", TraitType.AGENT),
        Trait(
            "friends",
            TraitType.RELATIONSHIP,
            description="[owner] and [target] are friends",
            modifiers=(StatModifierData("Friendship", 10),),
            conflicting_traits={"rivals"},
        ),
        Trait(
            "rivals",
            TraitType.RELATIONSHIP,
            modifiers=(StatModifierData("Friendship", -15),),
        ),
        Trait("crush", TraitType.RELATIONSHIP, modifiers=(StatModifierData("Romance", 5),)),
    ]


def _make_engine() -> SocialEngine:
    engine = SocialEngine()

    for trait in _make_traits():
        engine.add_trait(trait)

    engine.add_agent_schema(
        AgentSchema("character", stats=(StatSchema("Confidence", 50, 0, 100),))
    )
    engine.add_relationship_schema(
        RelationshipSchema(
            "character",
            "character",
            stats=(
                StatSchema("Friendship", 0, -100, 100),
                StatSchema("Romance", 0, -100, 100),
            ),
        )
    )
    return engine


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached; start and finish every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine() -> SocialEngine:
    """Engine with definitions registered and no agents."""
    return _make_engine()


@pytest.fixture
def cast_engine() -> SocialEngine:
    """Engine with astrid, jordan and lee; astrid relates to jordan and lee."""
    engine = _make_engine()
    for uid in ("astrid", "jordan", "lee"):
        engine.add_agent("character", uid)
    engine.add_relationship("astrid", "jordan")
    engine.add_relationship("astrid", "lee")
    return engine
