"""
tdrs - Social simulation engine built on a RePraxis fact database

Agents and the directed relationships between them carry stats and traits.
Traits are mirrored into the engine's fact database, and social rules query
that database to decide which stat modifiers apply to each relationship.
Social events run conditional effects such as adding traits or stat buffs.

This module provides:
- Stats with flat, additive-percent and multiplicative-percent modifiers
- Trait definitions with conflicts and durations
- Agents, relationships and their schemas
- Social rules and agent-projected relationship modifiers
- Social events and the effect factory registry
- YAML content loading

Example:
    from tdrs import SocialEngine, apply_content, load_content_file

    engine = SocialEngine()
    apply_content(engine, load_content_file("content.yaml"))
    engine.dispatch_event("befriend", ["astrid", "jordan"])
    engine.tick()
"""

from .agent import Agent, AgentSchema
from .content import ContentFile, apply_content, load_content_file
from .default_effects import DEFAULT_EFFECT_FACTORIES, register_default_effects
from .effects import Effect, EffectContext, EffectFactory, EffectLibrary
from .engine import SocialEngine
from .entity import SocialEntity
from .errors import (
    AgentNotFoundError,
    DuplicateEntityError,
    EffectArgumentError,
    EffectFactoryNotFoundError,
    EffectInstantiationError,
    RelationshipNotFoundError,
    SchemaNotFoundError,
    SocialEventNotFoundError,
    SocialRuleNotFoundError,
    StatNotFoundError,
    TDRSError,
    TraitNotFoundError,
    TraitTypeError,
)
from .modifiers import Modifier, ModifierCollection, ModifierDirection, RelationshipModifier
from .relationship import ActiveSocialRuleEntry, Relationship, RelationshipSchema
from .settings import TDRSSettings, get_settings
from .social_events import SocialEvent, SocialEventLibrary, SocialEventResponse
from .social_rules import SocialRule, SocialRuleLibrary
from .stats import (
    Stat,
    StatManager,
    StatModifier,
    StatModifierData,
    StatModifierType,
    StatSchema,
)
from .traits import Trait, TraitInstance, TraitLibrary, TraitManager, TraitType

__all__ = [
    # Engine
    "SocialEngine",
    "SocialEntity",
    "Agent",
    "AgentSchema",
    "Relationship",
    "RelationshipSchema",
    "ActiveSocialRuleEntry",
    # Stats
    "Stat",
    "StatManager",
    "StatModifier",
    "StatModifierData",
    "StatModifierType",
    "StatSchema",
    # Traits
    "Trait",
    "TraitType",
    "TraitInstance",
    "TraitLibrary",
    "TraitManager",
    # Modifiers
    "Modifier",
    "ModifierCollection",
    "ModifierDirection",
    "RelationshipModifier",
    # Rules and events
    "SocialRule",
    "SocialRuleLibrary",
    "SocialEvent",
    "SocialEventResponse",
    "SocialEventLibrary",
    # Effects
    "Effect",
    "EffectContext",
    "EffectFactory",
    "EffectLibrary",
    "DEFAULT_EFFECT_FACTORIES",
    "register_default_effects",
    # Content and settings
    "ContentFile",
    "load_content_file",
    "apply_content",
    "TDRSSettings",
    "get_settings",
    # Errors
    "TDRSError",
    "AgentNotFoundError",
    "RelationshipNotFoundError",
    "TraitNotFoundError",
    "StatNotFoundError",
    "SchemaNotFoundError",
    "SocialRuleNotFoundError",
    "SocialEventNotFoundError",
    "EffectFactoryNotFoundError",
    "TraitTypeError",
    "DuplicateEntityError",
    "EffectArgumentError",
    "EffectInstantiationError",
]
