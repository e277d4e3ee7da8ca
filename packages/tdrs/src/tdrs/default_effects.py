"""
tdrs/default_effects.py - Built-in effect factories

Every SocialEngine registers these:

    AddAgentTrait ?agent trait [duration]
    RemoveAgentTrait ?agent trait
    AddRelationshipTrait ?owner ?target trait [duration]
    RemoveRelationshipTrait ?owner ?target trait
    AddAgentStatBuff ?agent stat value [duration]
    AddRelationshipStatBuff ?owner ?target stat value [duration]
    IncrementAgentBaseStat ?agent stat value
    IncreaseRelationshipStat ?owner ?target stat value
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .effects import Effect, EffectContext, EffectFactory, EffectLibrary
from .errors import EffectArgumentError
from .stats import StatModifier, StatModifierType

if TYPE_CHECKING:
    from .agent import Agent
    from .entity import SocialEntity
    from .relationship import Relationship

logger = logging.getLogger(__name__)


# =============================================================================
# ARGUMENT HELPERS
# =============================================================================


def _check_arity(effect_name: str, args: list[str], minimum: int, maximum: int) -> None:
    if minimum <= len(args) <= maximum:
        return

    expected = str(minimum) if minimum == maximum else f"{minimum} to {maximum}"
    raise EffectArgumentError(
        f"Incorrect number of arguments for '{effect_name} {' '.join(args)}'. "
        f"Expected {expected} but was {len(args)}."
    )


def _parse_int(effect_name: str, value: str, position: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise EffectArgumentError(
            f"{effect_name}: expected integer as argument {position} but was '{value}'"
        ) from None


def _parse_number(effect_name: str, value: str, position: int) -> float:
    try:
        return float(value)
    except ValueError:
        raise EffectArgumentError(
            f"{effect_name}: expected number as argument {position} but was '{value}'"
        ) from None


def _resolve_agent(ctx: EffectContext, argument: str) -> Agent:
    uid = ctx.resolve(argument)
    if not ctx.engine.has_agent(uid):
        raise EffectArgumentError(f"No Agent found with ID: {uid}")
    return ctx.engine.get_agent(uid)


def _resolve_relationship(ctx: EffectContext, owner_arg: str, target_arg: str) -> Relationship:
    owner_uid = ctx.resolve(owner_arg)
    target_uid = ctx.resolve(target_arg)
    if not ctx.engine.has_relationship(owner_uid, target_uid):
        raise EffectArgumentError(f"No relationship found from {owner_uid} to {target_uid}.")
    return ctx.engine.get_relationship(owner_uid, target_uid)


def _check_stat(effect_name: str, entity: SocialEntity, stat: str) -> None:
    if not entity.stats.has_stat(stat):
        raise EffectArgumentError(f"{effect_name}: {entity} has no stat named '{stat}'")


# =============================================================================
# EFFECTS
# =============================================================================


@dataclass
class AddTrait(Effect):
    entity: SocialEntity
    trait_id: str
    duration: int = -1
    description: str = ""

    def apply(self) -> None:
        self.entity.add_trait(self.trait_id, self.duration, self.description)


@dataclass
class RemoveTrait(Effect):
    entity: SocialEntity
    trait_id: str

    def apply(self) -> None:
        self.entity.remove_trait(self.trait_id)


@dataclass
class AddStatBuff(Effect):
    """Attach a FLAT stat modifier that ages with the entity's ticks."""

    entity: SocialEntity
    stat: str
    value: float
    duration: int = -1

    def apply(self) -> None:
        modifier = StatModifier(
            self.stat, self.value, StatModifierType.FLAT, duration=self.duration, source=self
        )
        self.entity.add_modifier(modifier)


@dataclass
class IncreaseBaseStat(Effect):
    """Permanently shift a stat's base value."""

    entity: SocialEntity
    stat: str
    value: float

    def apply(self) -> None:
        stat = self.entity.stats.get_stat(self.stat)
        stat.base_value = stat.base_value + self.value


# =============================================================================
# FACTORIES
# =============================================================================


class AddAgentTraitFactory(EffectFactory):
    effect_name = "AddAgentTrait"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 2, 3)
        agent = _resolve_agent(ctx, args[0])
        duration = _parse_int(self.effect_name, args[2], 3) if len(args) > 2 else -1
        return AddTrait(agent, args[1], duration, ctx.description)


class RemoveAgentTraitFactory(EffectFactory):
    effect_name = "RemoveAgentTrait"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 2, 2)
        return RemoveTrait(_resolve_agent(ctx, args[0]), args[1])


class AddRelationshipTraitFactory(EffectFactory):
    effect_name = "AddRelationshipTrait"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 3, 4)
        relationship = _resolve_relationship(ctx, args[0], args[1])
        duration = _parse_int(self.effect_name, args[3], 4) if len(args) > 3 else -1
        return AddTrait(relationship, args[2], duration, ctx.description)


class RemoveRelationshipTraitFactory(EffectFactory):
    effect_name = "RemoveRelationshipTrait"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 3, 3)
        return RemoveTrait(_resolve_relationship(ctx, args[0], args[1]), args[2])


class AddAgentStatBuffFactory(EffectFactory):
    effect_name = "AddAgentStatBuff"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 3, 4)
        agent = _resolve_agent(ctx, args[0])
        _check_stat(self.effect_name, agent, args[1])
        value = _parse_number(self.effect_name, args[2], 3)
        duration = _parse_int(self.effect_name, args[3], 4) if len(args) > 3 else -1
        return AddStatBuff(agent, args[1], value, duration)


class AddRelationshipStatBuffFactory(EffectFactory):
    effect_name = "AddRelationshipStatBuff"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 4, 5)
        relationship = _resolve_relationship(ctx, args[0], args[1])
        _check_stat(self.effect_name, relationship, args[2])
        value = _parse_number(self.effect_name, args[3], 4)
        duration = _parse_int(self.effect_name, args[4], 5) if len(args) > 4 else -1
        return AddStatBuff(relationship, args[2], value, duration)


class IncrementAgentBaseStatFactory(EffectFactory):
    effect_name = "IncrementAgentBaseStat"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 3, 3)
        agent = _resolve_agent(ctx, args[0])
        _check_stat(self.effect_name, agent, args[1])
        return IncreaseBaseStat(agent, args[1], _parse_number(self.effect_name, args[2], 3))


class IncreaseRelationshipStatFactory(EffectFactory):
    effect_name = "IncreaseRelationshipStat"

    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        _check_arity(self.effect_name, args, 4, 4)
        relationship = _resolve_relationship(ctx, args[0], args[1])
        _check_stat(self.effect_name, relationship, args[2])
        return IncreaseBaseStat(
            relationship, args[2], _parse_number(self.effect_name, args[3], 4)
        )


DEFAULT_EFFECT_FACTORIES: tuple[type[EffectFactory], ...] = (
    AddAgentTraitFactory,
    RemoveAgentTraitFactory,
    AddRelationshipTraitFactory,
    RemoveRelationshipTraitFactory,
    AddAgentStatBuffFactory,
    AddRelationshipStatBuffFactory,
    IncrementAgentBaseStatFactory,
    IncreaseRelationshipStatFactory,
)


def register_default_effects(library: EffectLibrary) -> None:
    """Add one instance of every built-in factory to the library."""
    for factory_cls in DEFAULT_EFFECT_FACTORIES:
        library.add_effect_factory(factory_cls())
    logger.debug("Registered %d default effect factories", len(DEFAULT_EFFECT_FACTORIES))
