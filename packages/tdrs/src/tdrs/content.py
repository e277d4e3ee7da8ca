"""
tdrs/content.py - YAML content files for the social engine

A content file declares the definitions a simulation needs (traits,
schemas, social rules and events) and, optionally, an initial cast of
agents, relationships and extra facts.

Example file:

    traits:
      - id: attractive
        type: agent
        description: "[owner] is attractive"
      - id: friends
        type: relationship
        modifiers:
          - {stat: Friendship, value: 10}

    agent_schemas:
      - agent_type: character
        stats:
          - {stat: Confidence, base_value: 50, min_value: 0, max_value: 100}

    relationship_schemas:
      - owner_type: character
        target_type: character
        stats:
          - {stat: Friendship, base_value: 0, min_value: -100, max_value: 100}
          - {stat: Romance, base_value: 0, min_value: -100, max_value: 100}

    social_rules:
      - rule_id: attracted
        description: "[owner] is attracted to [target]"
        preconditions: ["?target.traits.attractive"]
        modifiers:
          - {stat: Romance, value: 12}

    social_events:
      - name: befriend
        roles: ["?initiator", "?target"]
        description: "[initiator] befriended [target]"
        responses:
          - effects: ["AddRelationshipTrait ?initiator ?target friends"]

    agents:
      - {uid: astrid, agent_type: character, traits: [attractive]}
      - {uid: jordan, agent_type: character}

    relationships:
      - {owner: jordan, target: astrid}

    facts:
      - "astrid.location!library"

Usage:
    from tdrs.content import apply_content, load_content_file

    engine = SocialEngine()
    apply_content(engine, load_content_file("content.yaml"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .agent import AgentSchema
from .relationship import RelationshipSchema
from .social_events import SocialEvent, SocialEventResponse
from .social_rules import SocialRule
from .stats import StatModifierData, StatModifierType, StatSchema
from .traits import Trait, TraitType

if TYPE_CHECKING:
    from .engine import SocialEngine

logger = logging.getLogger(__name__)


class _ContentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StatSchemaModel(_ContentModel):
    stat: str
    base_value: float = 0
    min_value: float | None = None
    max_value: float | None = None
    is_discrete: bool = False

    def build(self) -> StatSchema:
        return StatSchema(
            self.stat, self.base_value, self.min_value, self.max_value, self.is_discrete
        )


class StatModifierModel(_ContentModel):
    """A stat modifier; `type` is flat, percent_add or percent_multiply."""

    stat: str
    value: float
    modifier_type: StatModifierType = Field(default=StatModifierType.FLAT, alias="type")

    @field_validator("modifier_type", mode="before")
    @classmethod
    def parse_modifier_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return StatModifierType[value.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown modifier type '{value}'. "
                    f"Expected one of: {', '.join(t.name.lower() for t in StatModifierType)}"
                ) from None
        return value

    def build(self) -> StatModifierData:
        return StatModifierData(self.stat, self.value, self.modifier_type)


class TraitModel(_ContentModel):
    trait_id: str = Field(alias="id")
    trait_type: TraitType = Field(alias="type")
    name: str = ""
    description: str = ""
    modifiers: list[StatModifierModel] = Field(default_factory=list)
    conflicts_with: list[str] = Field(default_factory=list)

    def build(self) -> Trait:
        return Trait(
            trait_id=self.trait_id,
            trait_type=self.trait_type,
            name=self.name,
            description=self.description,
            modifiers=tuple(m.build() for m in self.modifiers),
            conflicting_traits=frozenset(self.conflicts_with),
        )


class AgentSchemaModel(_ContentModel):
    agent_type: str
    stats: list[StatSchemaModel] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)

    def build(self) -> AgentSchema:
        return AgentSchema(self.agent_type, tuple(s.build() for s in self.stats), tuple(self.traits))


class RelationshipSchemaModel(_ContentModel):
    owner_type: str
    target_type: str
    stats: list[StatSchemaModel] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)

    def build(self) -> RelationshipSchema:
        return RelationshipSchema(
            self.owner_type,
            self.target_type,
            tuple(s.build() for s in self.stats),
            tuple(self.traits),
        )


class SocialRuleModel(_ContentModel):
    rule_id: str
    description: str = ""
    preconditions: list[str] = Field(default_factory=list)
    modifiers: list[StatModifierModel] = Field(default_factory=list)

    def build(self) -> SocialRule:
        return SocialRule(
            self.rule_id,
            self.description,
            self.preconditions,
            tuple(m.build() for m in self.modifiers),
        )


class SocialEventResponseModel(_ContentModel):
    preconditions: list[str] = Field(default_factory=list)
    effects: list[str] = Field(default_factory=list)
    description: str = ""


class SocialEventModel(_ContentModel):
    name: str
    roles: list[str]
    description: str = ""
    responses: list[SocialEventResponseModel] = Field(default_factory=list)

    @field_validator("roles")
    @classmethod
    def check_roles(cls, roles: list[str]) -> list[str]:
        for role in roles:
            if not role.startswith("?"):
                raise ValueError(f"Event role '{role}' must be a variable (start with '?')")
        return roles

    def build(self) -> SocialEvent:
        return SocialEvent(
            self.name,
            tuple(self.roles),
            self.description,
            tuple(
                SocialEventResponse(tuple(r.preconditions), tuple(r.effects), r.description)
                for r in self.responses
            ),
        )


class AgentModel(_ContentModel):
    uid: str
    agent_type: str
    traits: list[str] = Field(default_factory=list)


class RelationshipModel(_ContentModel):
    owner: str
    target: str
    relationship_type: str | None = None
    traits: list[str] = Field(default_factory=list)


class ContentFile(_ContentModel):
    """Top-level content file."""

    traits: list[TraitModel] = Field(default_factory=list)
    agent_schemas: list[AgentSchemaModel] = Field(default_factory=list)
    relationship_schemas: list[RelationshipSchemaModel] = Field(default_factory=list)
    social_rules: list[SocialRuleModel] = Field(default_factory=list)
    social_events: list[SocialEventModel] = Field(default_factory=list)
    agents: list[AgentModel] = Field(default_factory=list)
    relationships: list[RelationshipModel] = Field(default_factory=list)
    facts: list[str] = Field(default_factory=list)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_content_file(path: str | Path) -> ContentFile:
    """Load and validate a content file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the content is malformed.
    """
    path = Path(path)
    content = ContentFile.model_validate(_load_yaml(path))

    logger.info(
        "Loaded content from %s: %d traits, %d rules, %d events, %d agents",
        path,
        len(content.traits),
        len(content.social_rules),
        len(content.social_events),
        len(content.agents),
    )
    return content


def apply_content(engine: SocialEngine, content: ContentFile) -> None:
    """Register definitions, then create the cast.

    Facts are inserted before relationships so social rules that depend on
    them see them when the relationships are first evaluated.
    """
    for trait in content.traits:
        engine.add_trait(trait.build())

    for agent_schema in content.agent_schemas:
        engine.add_agent_schema(agent_schema.build())

    for relationship_schema in content.relationship_schemas:
        engine.add_relationship_schema(relationship_schema.build())

    for rule in content.social_rules:
        engine.social_rules.add_rule(rule.build())

    for event in content.social_events:
        engine.add_social_event(event.build())

    for agent_entry in content.agents:
        agent = engine.add_agent(agent_entry.agent_type, agent_entry.uid)
        for trait_id in agent_entry.traits:
            agent.add_trait(trait_id)

    for fact in content.facts:
        engine.db.insert(fact)

    for relationship_entry in content.relationships:
        relationship = engine.add_relationship(relationship_entry.owner, relationship_entry.target)
        if relationship_entry.relationship_type and not relationship.set_relationship_type(
            relationship_entry.relationship_type
        ):
            logger.warning(
                "Could not set type %s on %s", relationship_entry.relationship_type, relationship
            )
        for trait_id in relationship_entry.traits:
            relationship.add_trait(trait_id)

    engine.reevaluate_relationships()

    logger.info(
        "Applied content: %d agents, %d relationships",
        len(engine.agents),
        len(engine.relationships),
    )
