"""
tdrs/agent.py - Agents and agent schemas

An agent is a character in the simulation. Its traits live in the fact
database as "<uid>.traits.<trait_id>". Relationships are owned by the
engine; an agent looks up its outgoing and incoming relationships there.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import SocialEntity
from .modifiers import RelationshipModifier
from .stats import StatSchema
from .traits import TraitType

if TYPE_CHECKING:
    from .engine import SocialEngine
    from .relationship import Relationship

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentSchema:
    """Default stats and traits for one agent type."""

    agent_type: str
    stats: tuple[StatSchema, ...] = ()
    traits: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "stats", tuple(self.stats))
        object.__setattr__(self, "traits", tuple(self.traits))


class Agent(SocialEntity):
    """A character with stats, traits and directed relationships."""

    trait_type = TraitType.AGENT

    def __init__(self, engine: SocialEngine, uid: str, agent_type: str):
        super().__init__(engine)
        self.uid = uid
        self.agent_type = agent_type
        self._relationship_modifiers: list[RelationshipModifier] = []

    @property
    def fact_prefix(self) -> str:
        return self.uid

    def render_description(self, template: str) -> str:
        return template.replace("[owner]", self.uid)

    @property
    def outgoing_relationships(self) -> dict[str, Relationship]:
        """Relationships this agent owns, keyed by target uid."""
        return self.engine.outgoing_relationships(self.uid)

    @property
    def incoming_relationships(self) -> dict[str, Relationship]:
        """Relationships targeting this agent, keyed by owner uid."""
        return self.engine.incoming_relationships(self.uid)

    # -------------------------------------------------------------------------
    # Relationship modifiers
    # -------------------------------------------------------------------------

    @property
    def relationship_modifiers(self) -> list[RelationshipModifier]:
        return list(self._relationship_modifiers)

    def add_relationship_modifier(self, modifier: RelationshipModifier) -> None:
        """Project a modifier onto this agent's relationships."""
        self._relationship_modifiers.append(modifier)
        self.reevaluate()

    def remove_relationship_modifier(self, modifier: RelationshipModifier) -> bool:
        for index, existing in enumerate(self._relationship_modifiers):
            if existing is modifier:
                del self._relationship_modifiers[index]
                self.reevaluate()
                return True
        return False

    def tick_relationship_modifiers(self) -> None:
        for modifier in list(self._relationship_modifiers):
            modifier.update(self)
            if modifier.has_expired(self):
                logger.debug("Relationship modifier expired on %s: %s", self, modifier.description)
                self._relationship_modifiers.remove(modifier)

    # -------------------------------------------------------------------------
    # Time and rules
    # -------------------------------------------------------------------------

    def tick(self) -> None:
        self.tick_traits()
        self.tick_modifiers()
        self.tick_relationship_modifiers()
        self.reevaluate()

    def reevaluate(self) -> None:
        self.reevaluate_relationships()

    def reevaluate_relationships(self) -> None:
        """Re-run social rules on every relationship touching this agent."""
        for relationship in list(self.outgoing_relationships.values()):
            relationship.reevaluate_social_rules()

        for relationship in list(self.incoming_relationships.values()):
            relationship.reevaluate_social_rules()

    def reevaluate_relationship(self, target_uid: str) -> None:
        self.engine.get_relationship(self.uid, target_uid).reevaluate_social_rules()

    def __str__(self) -> str:
        return self.uid

    def __repr__(self) -> str:
        return f"Agent({self.uid!r}, {self.agent_type!r})"
