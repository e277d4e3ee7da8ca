"""
tdrs/modifiers.py - Entity-level modifiers

A Modifier is something attached to an agent or relationship that changes
it while active and is aged once per tick. Two kinds exist:

- StatModifier (see stats.py): a timed or permanent stat buff
- RelationshipModifier: a bundle of stat modifiers an agent projects onto
  its outgoing or incoming relationships while preconditions hold
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from repraxis import DBQuery

if TYPE_CHECKING:
    from .entity import SocialEntity
    from .relationship import Relationship
    from .stats import StatModifierData


class Modifier(ABC):
    """Something attached to a social entity for some number of ticks.

    Subclasses expose a `source` attribute used for bulk removal.
    """

    source: Any = None

    @abstractmethod
    def has_expired(self, entity: SocialEntity) -> bool:
        """Return True once the modifier should be detached."""

    @abstractmethod
    def apply(self, entity: SocialEntity) -> None:
        """Apply the modifier's effects to the entity."""

    @abstractmethod
    def remove(self, entity: SocialEntity) -> None:
        """Undo the modifier's effects on the entity."""

    @abstractmethod
    def update(self, entity: SocialEntity) -> None:
        """Advance one time step."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human readable summary."""


class ModifierCollection:
    """Ordered set of active modifiers on one entity."""

    def __init__(self):
        self._modifiers: list[Modifier] = []

    @property
    def modifiers(self) -> list[Modifier]:
        return list(self._modifiers)

    def add(self, modifier: Modifier) -> None:
        self._modifiers.append(modifier)

    def has(self, modifier: Modifier) -> bool:
        return any(m is modifier for m in self._modifiers)

    def remove(self, modifier: Modifier) -> bool:
        for index, existing in enumerate(self._modifiers):
            if existing is modifier:
                del self._modifiers[index]
                return True
        return False

    def remove_all_from_source(self, source: Any) -> list[Modifier]:
        """Detach every modifier from `source` and return them."""
        removed = [m for m in self._modifiers if m.source is source]
        self._modifiers = [m for m in self._modifiers if m.source is not source]
        return removed

    def __iter__(self) -> Iterator[Modifier]:
        return iter(list(self._modifiers))

    def __len__(self) -> int:
        return len(self._modifiers)


class ModifierDirection(str, Enum):
    """Which of an agent's relationships a RelationshipModifier targets."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"


class RelationshipModifier(Modifier):
    """Stat modifiers an agent projects onto its relationships.

    An OUTGOING modifier on agent A affects every relationship A owns; an
    INCOMING one affects every relationship that targets A. The stat
    modifiers only apply to relationships whose preconditions pass, with
    ?owner and ?target bound to the relationship's endpoints.

    Example:
        charming = RelationshipModifier(
            description="[owner] finds [target] charming",
            preconditions=("?target.traits.attractive",),
            direction=ModifierDirection.OUTGOING,
            modifiers=(StatModifierData("Romance", 5),),
            duration=3,
        )
        agent.add_relationship_modifier(charming)
    """

    def __init__(
        self,
        description: str,
        preconditions: Sequence[str],
        direction: ModifierDirection | str,
        modifiers: Sequence[StatModifierData],
        duration: int = -1,
        source: Any = None,
    ):
        self._description = description
        self.preconditions = tuple(preconditions)
        self.direction = ModifierDirection(direction)
        self.modifiers = tuple(modifiers)
        self.duration = duration
        self.has_duration = duration > 0
        self.source = source

    def check_preconditions(self, relationship: Relationship) -> bool:
        result = DBQuery(self.preconditions).run(
            relationship.engine.db,
            {"?owner": relationship.owner_uid, "?target": relationship.target_uid},
        )
        return result.success

    def has_expired(self, entity: SocialEntity) -> bool:
        return self.has_duration and self.duration <= 0

    def apply(self, entity: SocialEntity) -> None:
        # Stat changes land on relationships during rule re-evaluation
        return None

    def remove(self, entity: SocialEntity) -> None:
        return None

    def update(self, entity: SocialEntity) -> None:
        if self.has_duration:
            self.duration -= 1

    @property
    def description(self) -> str:
        return self._description

    def __repr__(self) -> str:
        return f"RelationshipModifier({self._description!r}, {self.direction.value})"
