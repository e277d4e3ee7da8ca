"""
tdrs/engine.py - SocialEngine orchestration

The SocialEngine owns everything: the fact database, the trait, rule, event
and effect registries, the agent and relationship schemas, and every agent
and relationship. Entities refer to each other by uid and resolve through
the engine.

Example:
    engine = SocialEngine()
    engine.add_agent_schema(AgentSchema("character", stats=(StatSchema("Confidence", 50, 0, 100),)))
    engine.add_relationship_schema(
        RelationshipSchema("character", "character", stats=(StatSchema("Romance", 0, -100, 100),))
    )
    engine.add_social_rule(SocialRule(
        "attracted", preconditions=("?target.traits.attractive",),
        modifiers=(StatModifierData("Romance", 12),),
    ))

    engine.add_agent("character", "astrid")
    engine.add_agent("character", "jordan")
    rel = engine.add_relationship("astrid", "jordan")

    engine.get_agent("jordan").add_trait("attractive")
    rel.stats.get_stat("Romance").value  # 12.0
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from repraxis import DBQuery, FactDatabase

from .agent import Agent, AgentSchema
from .default_effects import register_default_effects
from .effects import EffectContext, EffectLibrary
from .errors import (
    AgentNotFoundError,
    DuplicateEntityError,
    EffectInstantiationError,
    RelationshipNotFoundError,
    SchemaNotFoundError,
)
from .relationship import Relationship, RelationshipSchema
from .social_events import SocialEvent, SocialEventLibrary
from .social_rules import SocialRule, SocialRuleLibrary
from .traits import Trait, TraitLibrary

logger = logging.getLogger(__name__)


class SocialEngine:
    """Top-level owner of the simulation state."""

    def __init__(self):
        self.db = FactDatabase()
        self.trait_library = TraitLibrary()
        self.social_rules = SocialRuleLibrary()
        self.social_event_library = SocialEventLibrary()
        self.effect_library = EffectLibrary()
        register_default_effects(self.effect_library)

        self._agents: dict[str, Agent] = {}
        # owner uid -> target uid -> relationship
        self._relationships: dict[str, dict[str, Relationship]] = {}
        # target uid -> owner uid -> relationship
        self._incoming: dict[str, dict[str, Relationship]] = {}
        self._agent_schemas: dict[str, AgentSchema] = {}
        self._relationship_schemas: dict[tuple[str, str], RelationshipSchema] = {}

    # =========================================================================
    # Registries
    # =========================================================================

    def add_trait(self, trait: Trait) -> None:
        self.trait_library.add_trait(trait)

    def add_social_event(self, event: SocialEvent) -> None:
        self.social_event_library.add_social_event(event)

    def add_social_rule(self, rule: SocialRule) -> None:
        """Register a rule and apply it to existing relationships."""
        self.social_rules.add_rule(rule)
        self.reevaluate_relationships()

    def remove_social_rule(self, rule_id: str) -> bool:
        if not self.social_rules.remove_rule(rule_id):
            return False
        self.reevaluate_relationships()
        return True

    def add_agent_schema(self, schema: AgentSchema) -> None:
        self._agent_schemas[schema.agent_type] = schema

    def get_agent_schema(self, agent_type: str) -> AgentSchema:
        try:
            return self._agent_schemas[agent_type]
        except KeyError:
            raise SchemaNotFoundError(f"No schema found for agent type: {agent_type}") from None

    def add_relationship_schema(self, schema: RelationshipSchema) -> None:
        self._relationship_schemas[(schema.owner_type, schema.target_type)] = schema

    def get_relationship_schema(self, owner_type: str, target_type: str) -> RelationshipSchema:
        try:
            return self._relationship_schemas[(owner_type, target_type)]
        except KeyError:
            raise SchemaNotFoundError(
                f"No relationship schema found for owner type {owner_type} "
                f"and target type {target_type}"
            ) from None

    # =========================================================================
    # Agents
    # =========================================================================

    @property
    def agents(self) -> list[Agent]:
        return list(self._agents.values())

    def add_agent(self, agent_type: str, uid: str) -> Agent:
        """Create an agent from its type's schema.

        Raises:
            SchemaNotFoundError: If the agent type has no schema.
            DuplicateEntityError: If the uid is taken.
        """
        schema = self.get_agent_schema(agent_type)

        if uid in self._agents:
            raise DuplicateEntityError(f"Agent already exists with ID: {uid}")

        agent = Agent(self, uid, agent_type)
        self._agents[uid] = agent
        self.db.insert(uid)

        for entry in schema.stats:
            agent.stats.add_stat(entry.stat, entry.create_stat())

        for trait_id in schema.traits:
            agent.add_trait(trait_id)

        logger.info("Added agent %s (%s)", uid, agent_type)
        return agent

    def get_agent(self, uid: str) -> Agent:
        try:
            return self._agents[uid]
        except KeyError:
            raise AgentNotFoundError(f"Agent not found with ID: {uid}") from None

    def has_agent(self, uid: str) -> bool:
        return uid in self._agents

    def remove_agent(self, uid: str) -> bool:
        """Remove an agent and every relationship it owns or is targeted by."""
        if uid not in self._agents:
            return False

        # Snapshot before removing
        doomed = list(self.outgoing_relationships(uid).values())
        doomed += list(self.incoming_relationships(uid).values())

        for relationship in doomed:
            self.remove_relationship(relationship.owner_uid, relationship.target_uid)

        self.db.delete(uid)
        del self._agents[uid]

        logger.info("Removed agent %s", uid)
        return True

    # =========================================================================
    # Relationships
    # =========================================================================

    @property
    def relationships(self) -> list[Relationship]:
        return [
            relationship
            for targets in self._relationships.values()
            for relationship in targets.values()
        ]

    def outgoing_relationships(self, uid: str) -> dict[str, Relationship]:
        return dict(self._relationships.get(uid, {}))

    def incoming_relationships(self, uid: str) -> dict[str, Relationship]:
        return dict(self._incoming.get(uid, {}))

    def add_relationship(self, owner_uid: str, target_uid: str) -> Relationship:
        """Create a relationship from the owner/target types' schema.

        Raises:
            AgentNotFoundError: If either agent does not exist.
            SchemaNotFoundError: If no schema covers the two agent types.
            DuplicateEntityError: If the relationship already exists.
        """
        owner = self.get_agent(owner_uid)
        target = self.get_agent(target_uid)
        schema = self.get_relationship_schema(owner.agent_type, target.agent_type)

        if self.has_relationship(owner_uid, target_uid):
            raise DuplicateEntityError(
                f"Relationship already exists from {owner_uid} to {target_uid}"
            )

        relationship = Relationship(self, owner_uid, target_uid)
        self._relationships.setdefault(owner_uid, {})[target_uid] = relationship
        self._incoming.setdefault(target_uid, {})[owner_uid] = relationship
        self.db.insert(relationship.fact_prefix)

        for entry in schema.stats:
            relationship.stats.add_stat(entry.stat, entry.create_stat())

        for trait_id in schema.traits:
            relationship.add_trait(trait_id)

        relationship.reevaluate_social_rules()

        logger.info("Added relationship %s -> %s", owner_uid, target_uid)
        return relationship

    def get_relationship(self, owner_uid: str, target_uid: str) -> Relationship:
        try:
            return self._relationships[owner_uid][target_uid]
        except KeyError:
            raise RelationshipNotFoundError(
                f"No relationship found from {owner_uid} to {target_uid}"
            ) from None

    def has_relationship(self, owner_uid: str, target_uid: str) -> bool:
        return target_uid in self._relationships.get(owner_uid, {})

    def remove_relationship(self, owner_uid: str, target_uid: str) -> bool:
        if not self.has_relationship(owner_uid, target_uid):
            return False

        relationship = self._relationships[owner_uid].pop(target_uid)
        if not self._relationships[owner_uid]:
            del self._relationships[owner_uid]

        self._incoming[target_uid].pop(owner_uid, None)
        if not self._incoming[target_uid]:
            del self._incoming[target_uid]

        self.db.delete(relationship.fact_prefix)

        logger.info("Removed relationship %s -> %s", owner_uid, target_uid)
        return True

    # =========================================================================
    # Simulation
    # =========================================================================

    def dispatch_event(self, event_name: str, agent_uids: Sequence[str]) -> None:
        """Run a social event with its roles bound to the given agents.

        Raises:
            SocialEventNotFoundError: If no event has this name and role count.
            EffectInstantiationError: If any effect cannot be created or
                applied.
        """
        event = self.social_event_library.find(event_name, agent_uids)
        bindings = dict(zip(event.roles, agent_uids))
        ctx = EffectContext(self, event.description, bindings)

        logger.info("Dispatching event %s with %s", event.symbol, bindings)

        for response in event.responses:
            result = DBQuery(response.preconditions).run(self.db, bindings)

            if not result.success:
                continue

            # A role-less event with no preconditions still fires once
            for binding_set in result.bindings or [{}]:
                scoped_ctx = ctx.with_bindings(binding_set)
                if response.description:
                    scoped_ctx = scoped_ctx.with_description(response.description)

                try:
                    effects = [
                        self.effect_library.create_instance(scoped_ctx, effect_string)
                        for effect_string in response.effects
                    ]
                    for effect in effects:
                        effect.apply()
                except Exception as exc:
                    raise EffectInstantiationError(event_name, str(exc)) from exc

                logger.debug("Applied %d effects: %s", len(effects), scoped_ctx.description)

    def tick(self) -> None:
        """Advance every agent, then every relationship, one time step."""
        for agent in self.agents:
            agent.tick()

        for relationship in self.relationships:
            relationship.tick()

    def reevaluate_relationships(self) -> None:
        for relationship in self.relationships:
            relationship.reevaluate_social_rules()

    def reset(self) -> None:
        """Drop all agents, relationships and facts. Definitions stay."""
        self._agents.clear()
        self._relationships.clear()
        self._incoming.clear()
        self.db.clear()
        logger.info("Engine reset")
