"""
tdrs/traits.py - Trait definitions and per-entity trait tracking

A Trait is an immutable definition shared through the TraitLibrary. When a
trait is attached to an agent or relationship it becomes a TraitInstance
with a resolved description and an optional countdown.

Conflicts are symmetric: a trait cannot be added if it lists an existing
trait as conflicting, or if an existing trait lists it.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .errors import TraitNotFoundError
from .stats import StatModifierData


class TraitType(str, Enum):
    """Which kind of entity a trait can be attached to."""

    AGENT = "agent"
    RELATIONSHIP = "relationship"


@dataclass(frozen=True)
class Trait:
    """Immutable trait definition.

    The description may contain [owner] and [target] placeholders that are
    filled in when the trait is attached.
    """

    trait_id: str
    trait_type: TraitType
    name: str = ""
    description: str = ""
    modifiers: tuple[StatModifierData, ...] = ()
    conflicting_traits: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "trait_type", TraitType(self.trait_type))
        object.__setattr__(self, "modifiers", tuple(self.modifiers))
        object.__setattr__(self, "conflicting_traits", frozenset(self.conflicting_traits))
        if not self.name:
            object.__setattr__(self, "name", self.trait_id)

    def conflicts_with(self, other: Trait) -> bool:
        return (
            other.trait_id in self.conflicting_traits
            or self.trait_id in other.conflicting_traits
        )


class TraitInstance:
    """A trait attached to a specific entity."""

    def __init__(self, trait: Trait, description: str, duration: int = -1):
        self.trait = trait
        self.description = description
        self.duration = duration
        self.has_duration = duration > 0

    @property
    def trait_id(self) -> str:
        return self.trait.trait_id

    @property
    def has_expired(self) -> bool:
        return self.has_duration and self.duration <= 0

    def tick(self) -> None:
        if self.has_duration:
            self.duration -= 1

    def __repr__(self) -> str:
        return f"TraitInstance({self.trait_id!r}, duration={self.duration})"


class TraitManager:
    """Traits currently attached to one entity, keyed by trait id."""

    def __init__(self):
        self._traits: dict[str, TraitInstance] = {}

    @property
    def traits(self) -> list[TraitInstance]:
        return list(self._traits.values())

    def has_trait(self, trait_id: str) -> bool:
        return trait_id in self._traits

    def get_trait(self, trait_id: str) -> TraitInstance:
        try:
            return self._traits[trait_id]
        except KeyError:
            raise TraitNotFoundError(f"Could not find trait instance for '{trait_id}'") from None

    def has_conflicting_trait(self, trait: Trait) -> bool:
        return any(trait.conflicts_with(instance.trait) for instance in self._traits.values())

    def can_add_trait(self, trait: Trait) -> bool:
        if trait.trait_id in self._traits:
            return False
        return not self.has_conflicting_trait(trait)

    def add_trait(self, trait: Trait, description: str = "", duration: int = -1) -> bool:
        """Attach a trait. Returns False on a duplicate or a conflict."""
        if not self.can_add_trait(trait):
            return False

        self._traits[trait.trait_id] = TraitInstance(
            trait, description or trait.description, duration
        )
        return True

    def remove_trait(self, trait_id: str) -> bool:
        return self._traits.pop(trait_id, None) is not None

    def __contains__(self, trait_id: str) -> bool:
        return trait_id in self._traits

    def __len__(self) -> int:
        return len(self._traits)


class TraitLibrary:
    """Registry of every trait definition."""

    def __init__(self, traits: Iterable[Trait] = ()):
        self._traits: dict[str, Trait] = {}
        for trait in traits:
            self.add_trait(trait)

    @property
    def traits(self) -> list[Trait]:
        return list(self._traits.values())

    def add_trait(self, trait: Trait) -> None:
        self._traits[trait.trait_id] = trait

    def get_trait(self, trait_id: str) -> Trait:
        try:
            return self._traits[trait_id]
        except KeyError:
            raise TraitNotFoundError(f"Trait not found for {trait_id}") from None

    def has_trait(self, trait_id: str) -> bool:
        return trait_id in self._traits
