"""
tdrs/entity.py - Shared behavior of agents and relationships

Both kinds of entity own stats, traits and modifiers, mirror their traits
into the fact database, and re-run social rules whenever a trait changes.
Subclasses supply the fact path prefix, the trait type they accept, how
trait descriptions are filled in, and what re-evaluation means for them.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from .errors import TraitTypeError
from .modifiers import Modifier, ModifierCollection
from .stats import StatManager, StatModifierData
from .traits import Trait, TraitInstance, TraitManager, TraitType

if TYPE_CHECKING:
    from .engine import SocialEngine

logger = logging.getLogger(__name__)

TraitCallback = Callable[["SocialEntity", Trait], None]


class SocialEntity(ABC):
    """Base class for Agent and Relationship."""

    #: Kind of trait this entity accepts
    trait_type: TraitType

    def __init__(self, engine: SocialEngine):
        self.engine = engine
        self.traits = TraitManager()
        self.stats = StatManager()
        self.modifiers = ModifierCollection()
        self._on_trait_added: list[TraitCallback] = []
        self._on_trait_removed: list[TraitCallback] = []

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def fact_prefix(self) -> str:
        """Sentence under which this entity's facts live."""

    @abstractmethod
    def render_description(self, template: str) -> str:
        """Fill [owner]/[target] placeholders for this entity."""

    @abstractmethod
    def reevaluate(self) -> None:
        """Re-run the social rules that depend on this entity."""

    def _after_trait_removed(self, trait: Trait) -> None:
        return None

    # -------------------------------------------------------------------------
    # Trait callbacks
    # -------------------------------------------------------------------------

    def on_trait_added(self, callback: TraitCallback) -> Callable[[], None]:
        """Call `callback(entity, trait)` after a trait is attached."""
        return _subscribe(self._on_trait_added, callback)

    def on_trait_removed(self, callback: TraitCallback) -> Callable[[], None]:
        """Call `callback(entity, trait)` after a trait is detached."""
        return _subscribe(self._on_trait_removed, callback)

    # -------------------------------------------------------------------------
    # Traits
    # -------------------------------------------------------------------------

    def trait_fact(self, trait_id: str) -> str:
        return f"{self.fact_prefix}.traits.{trait_id}"

    def add_trait(self, trait_id: str, duration: int = -1, description: str = "") -> bool:
        """Attach a trait from the engine's library.

        Returns:
            False if the trait is already attached or conflicts with an
            attached trait.

        Raises:
            TraitNotFoundError: If the trait is not in the library.
            TraitTypeError: If the trait is for the other kind of entity.
        """
        trait = self.engine.trait_library.get_trait(trait_id)

        if trait.trait_type is not self.trait_type:
            raise TraitTypeError(
                f"Trait ({trait_id}) must be of type '{self.trait_type.value}' to be added to {self}."
            )

        if not self.traits.add_trait(
            trait, description or self.render_description(trait.description), duration
        ):
            return False

        instance = self.traits.get_trait(trait_id)
        self._apply_trait_modifiers(trait.modifiers, instance)
        self.engine.db.insert(self.trait_fact(trait_id))

        logger.debug("Added trait %s to %s", trait_id, self)

        for callback in list(self._on_trait_added):
            callback(self, trait)

        self.reevaluate()
        return True

    def remove_trait(self, trait_id: str) -> bool:
        """Detach a trait. Returns False if it was not attached."""
        if not self.traits.has_trait(trait_id):
            return False

        instance = self.traits.get_trait(trait_id)
        self.traits.remove_trait(trait_id)
        self.stats.remove_modifiers_from_source(instance)
        self.engine.db.delete(self.trait_fact(trait_id))
        self._after_trait_removed(instance.trait)

        logger.debug("Removed trait %s from %s", trait_id, self)

        for callback in list(self._on_trait_removed):
            callback(self, instance.trait)

        self.reevaluate()
        return True

    def has_trait(self, trait_id: str) -> bool:
        return self.traits.has_trait(trait_id)

    def _apply_trait_modifiers(
        self, modifiers: tuple[StatModifierData, ...], instance: TraitInstance
    ) -> None:
        for data in modifiers:
            if not self.stats.has_stat(data.stat):
                logger.warning(
                    "Trait %s skipped modifier for missing stat %s on %s",
                    instance.trait_id,
                    data.stat,
                    self,
                )
                continue
            self.stats.get_stat(data.stat).add_modifier(data.create_instance(source=instance))

    # -------------------------------------------------------------------------
    # Modifiers
    # -------------------------------------------------------------------------

    def add_modifier(self, modifier: Modifier) -> None:
        self.modifiers.add(modifier)
        modifier.apply(self)

    def remove_modifier(self, modifier: Modifier) -> bool:
        if not self.modifiers.remove(modifier):
            return False
        modifier.remove(self)
        return True

    # -------------------------------------------------------------------------
    # Time
    # -------------------------------------------------------------------------

    def tick(self) -> None:
        """Advance one time step, then re-run dependent social rules."""
        self.tick_traits()
        self.tick_modifiers()
        self.reevaluate()

    def tick_traits(self) -> None:
        for instance in self.traits.traits:
            instance.tick()
            if instance.has_expired:
                logger.debug("Trait %s expired on %s", instance.trait_id, self)
                self.remove_trait(instance.trait_id)

    def tick_modifiers(self) -> None:
        for modifier in self.modifiers:
            modifier.update(self)
            if modifier.has_expired(self):
                logger.debug("Modifier expired on %s: %s", self, modifier.description)
                self.remove_modifier(modifier)


def _subscribe(callbacks: list, callback: Callable) -> Callable[[], None]:
    callbacks.append(callback)

    def unsubscribe() -> None:
        if callback in callbacks:
            callbacks.remove(callback)

    return unsubscribe
