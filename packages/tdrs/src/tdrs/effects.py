"""
tdrs/effects.py - Event effects and the effect factory registry

Social events describe their consequences as effect strings such as

    AddRelationshipTrait ?initiator ?target friends 5

The first token names a factory in the EffectLibrary; the rest are passed
to the factory as arguments. Factories resolve "?role" arguments through the
EffectContext bindings and return an Effect whose apply() does the work.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import EffectArgumentError, EffectFactoryNotFoundError

if TYPE_CHECKING:
    from .engine import SocialEngine

logger = logging.getLogger(__name__)


class EffectContext:
    """Engine access and variable bindings for one effect instantiation.

    Example:
        ctx = EffectContext(engine, "[initiator] insulted [target]",
                            {"?initiator": "astrid", "?target": "jordan"})
        ctx.description  # "astrid insulted jordan"
    """

    def __init__(
        self,
        engine: SocialEngine,
        description_template: str = "",
        bindings: Mapping[str, Any] | None = None,
    ):
        self.engine = engine
        self.description_template = description_template
        self.bindings: dict[str, Any] = dict(bindings or {})

    @property
    def description(self) -> str:
        """Template with each [role] replaced by the value bound to ?role."""
        description = self.description_template
        for name, value in self.bindings.items():
            description = description.replace(f"[{name.lstrip('?')}]", str(value))
        return description

    def with_bindings(self, bindings: Mapping[str, Any]) -> EffectContext:
        """New context with `bindings` merged over the current ones."""
        return EffectContext(self.engine, self.description_template, {**self.bindings, **bindings})

    def with_description(self, description_template: str) -> EffectContext:
        return EffectContext(self.engine, description_template, self.bindings)

    def resolve(self, argument: str) -> str:
        """Return the bound value for a "?role" argument as a string.

        Raises:
            EffectArgumentError: If the variable is not bound.
        """
        if not argument.startswith("?"):
            return argument
        if argument not in self.bindings:
            raise EffectArgumentError(f"No value bound for variable '{argument}'")
        return str(self.bindings[argument])


class Effect(ABC):
    """A single consequence of a social event."""

    @abstractmethod
    def apply(self) -> None:
        """Carry out the effect."""


class EffectFactory(ABC):
    """Creates Effects from effect string arguments."""

    #: Name used as the first token of effect strings
    effect_name: str = ""

    @abstractmethod
    def create_instance(self, ctx: EffectContext, args: list[str]) -> Effect:
        """Build an effect.

        Raises:
            EffectArgumentError: If the arguments are invalid.
        """


class EffectLibrary:
    """Registry of effect factories keyed by effect name."""

    def __init__(self):
        self._factories: dict[str, EffectFactory] = {}

    @property
    def factories(self) -> list[EffectFactory]:
        return list(self._factories.values())

    def add_effect_factory(self, factory: EffectFactory) -> None:
        self._factories[factory.effect_name] = factory

    def get_effect_factory(self, effect_name: str) -> EffectFactory:
        try:
            return self._factories[effect_name]
        except KeyError:
            raise EffectFactoryNotFoundError(
                f"Cannot find effect factory for: {effect_name}"
            ) from None

    def has_effect_factory(self, effect_name: str) -> bool:
        return effect_name in self._factories

    def create_instance(self, ctx: EffectContext, effect_string: str) -> Effect:
        """Split an effect string and hand the arguments to its factory."""
        parts = effect_string.split()
        if not parts:
            raise EffectArgumentError("Effect string is empty")

        factory = self.get_effect_factory(parts[0])
        logger.debug("Creating effect: %s", effect_string)
        return factory.create_instance(ctx, parts[1:])
