"""
tdrs/relationship.py - Directed relationships between agents

A relationship from owner to target has its own stats and traits. Its facts
live under "<owner>.relationships.<target>", e.g.

    astrid.relationships.jordan.traits.friends
    astrid.relationships.jordan.type!friends

Social rules and agents' RelationshipModifiers are recomputed from scratch
on every re-evaluation, so their effects follow the facts they depend on.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import SocialEntity
from .errors import TraitNotFoundError, TraitTypeError
from .modifiers import ModifierDirection, RelationshipModifier
from .social_rules import SocialRule
from .stats import StatSchema
from .traits import Trait, TraitType

if TYPE_CHECKING:
    from .agent import Agent
    from .engine import SocialEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelationshipSchema:
    """Default stats and traits for relationships between two agent types."""

    owner_type: str
    target_type: str
    stats: tuple[StatSchema, ...] = ()
    traits: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "stats", tuple(self.stats))
        object.__setattr__(self, "traits", tuple(self.traits))


@dataclass(frozen=True)
class ActiveSocialRuleEntry:
    """A social rule currently applying to a relationship."""

    rule: SocialRule
    description: str


class Relationship(SocialEntity):
    """Directed relationship from an owner agent to a target agent."""

    trait_type = TraitType.RELATIONSHIP

    def __init__(self, engine: SocialEngine, owner_uid: str, target_uid: str):
        super().__init__(engine)
        self.owner_uid = owner_uid
        self.target_uid = target_uid
        self.relationship_type: Trait | None = None
        self._active_social_rules: list[ActiveSocialRuleEntry] = []
        self._active_relationship_modifiers: list[RelationshipModifier] = []

    @property
    def owner(self) -> Agent:
        return self.engine.get_agent(self.owner_uid)

    @property
    def target(self) -> Agent:
        return self.engine.get_agent(self.target_uid)

    @property
    def uid(self) -> str:
        return f"{self.owner_uid}->{self.target_uid}"

    @property
    def fact_prefix(self) -> str:
        return f"{self.owner_uid}.relationships.{self.target_uid}"

    @property
    def active_social_rules(self) -> list[ActiveSocialRuleEntry]:
        return list(self._active_social_rules)

    @property
    def active_relationship_modifiers(self) -> list[RelationshipModifier]:
        return list(self._active_relationship_modifiers)

    def render_description(self, template: str) -> str:
        return template.replace("[owner]", self.owner_uid).replace("[target]", self.target_uid)

    # -------------------------------------------------------------------------
    # Relationship type
    # -------------------------------------------------------------------------

    def set_relationship_type(self, trait_id: str) -> bool:
        """Replace the relationship's type trait (e.g. friends, rivals).

        Returns:
            False if the new trait could not be attached. The previous type,
            if any, is kept in that case.

        Raises:
            TraitNotFoundError: If the trait is not in the library.
            TraitTypeError: If the trait is not a relationship trait.
        """
        previous = self.relationship_type

        if previous is not None:
            self.remove_trait(previous.trait_id)

        try:
            added = self.add_trait(trait_id)
        except (TraitNotFoundError, TraitTypeError):
            self._restore_type(previous)
            raise

        if not added:
            self._restore_type(previous)
            return False

        self._assign_type(self.traits.get_trait(trait_id).trait)
        return True

    def _assign_type(self, trait: Trait) -> None:
        self.relationship_type = trait
        self.engine.db.insert(f"{self.fact_prefix}.type!{trait.trait_id}")

    def _restore_type(self, previous: Trait | None) -> None:
        if previous is not None and self.add_trait(previous.trait_id):
            self._assign_type(previous)

    def _after_trait_removed(self, trait: Trait) -> None:
        if self.relationship_type is not None and self.relationship_type.trait_id == trait.trait_id:
            self.relationship_type = None
            self.engine.db.delete(f"{self.fact_prefix}.type!{trait.trait_id}")

    # -------------------------------------------------------------------------
    # Social rules
    # -------------------------------------------------------------------------

    def reevaluate(self) -> None:
        self.reevaluate_social_rules()

    def reevaluate_social_rules(self) -> None:
        """Recompute every rule-sourced and agent-sourced modifier."""
        for entry in self._active_social_rules:
            entry.rule.remove_modifiers(self)
        self._active_social_rules = []

        for modifier in self._active_relationship_modifiers:
            self.stats.remove_modifiers_from_source(modifier)
        self._active_relationship_modifiers = []

        for rule in self.engine.social_rules.rules:
            if not rule.check_preconditions(self):
                continue

            rule.apply_modifiers(self)
            self._active_social_rules.append(
                ActiveSocialRuleEntry(rule, rule.render_description(self))
            )
            logger.debug("Social rule %s active on %s", rule.rule_id, self)

        for modifier in self._candidate_relationship_modifiers():
            if not modifier.check_preconditions(self):
                continue

            self._apply_relationship_modifier(modifier)
            self._active_relationship_modifiers.append(modifier)

    def _candidate_relationship_modifiers(self) -> list[RelationshipModifier]:
        candidates = []

        if self.engine.has_agent(self.owner_uid):
            candidates.extend(
                m
                for m in self.owner.relationship_modifiers
                if m.direction is ModifierDirection.OUTGOING
            )

        if self.engine.has_agent(self.target_uid):
            candidates.extend(
                m
                for m in self.target.relationship_modifiers
                if m.direction is ModifierDirection.INCOMING
            )

        return candidates

    def _apply_relationship_modifier(self, modifier: RelationshipModifier) -> None:
        for data in modifier.modifiers:
            if not self.stats.has_stat(data.stat):
                logger.warning(
                    "Relationship modifier skipped missing stat %s on %s", data.stat, self
                )
                continue
            self.stats.get_stat(data.stat).add_modifier(data.create_instance(source=modifier))

    def __str__(self) -> str:
        return f"Relationship({self.owner_uid}, {self.target_uid})"

    __repr__ = __str__
