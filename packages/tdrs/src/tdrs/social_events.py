"""
tdrs/social_events.py - Named events with conditional responses

An event is identified by its name and role count ("insult/2"). Dispatching
binds the roles to agent uids in order; each response whose preconditions
pass applies its effect strings once per resulting binding.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .errors import SocialEventNotFoundError


@dataclass(frozen=True)
class SocialEventResponse:
    """Effects applied when the preconditions hold."""

    preconditions: tuple[str, ...] = ()
    effects: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "preconditions", tuple(self.preconditions))
        object.__setattr__(self, "effects", tuple(self.effects))


@dataclass(frozen=True)
class SocialEvent:
    """A named event with ordered roles such as ("?initiator", "?target")."""

    name: str
    roles: tuple[str, ...]
    description: str = ""
    responses: tuple[SocialEventResponse, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "roles", tuple(self.roles))
        object.__setattr__(self, "responses", tuple(self.responses))

    @property
    def cardinality(self) -> int:
        return len(self.roles)

    @property
    def symbol(self) -> str:
        return event_symbol(self.name, self.cardinality)

    def __str__(self) -> str:
        return self.symbol


def event_symbol(name: str, cardinality: int) -> str:
    return f"{name}/{cardinality}"


class SocialEventLibrary:
    """Registry of events keyed by "name/role-count"."""

    def __init__(self, events: Iterable[SocialEvent] = ()):
        self._events: dict[str, SocialEvent] = {}
        for event in events:
            self.add_social_event(event)

    @property
    def events(self) -> list[SocialEvent]:
        return list(self._events.values())

    def add_social_event(self, event: SocialEvent) -> None:
        self._events[event.symbol] = event

    def get_social_event(self, symbol: str) -> SocialEvent:
        try:
            return self._events[symbol]
        except KeyError:
            raise SocialEventNotFoundError(f"No social event found for: {symbol}") from None

    def find(self, name: str, agents: Sequence[str]) -> SocialEvent:
        return self.get_social_event(event_symbol(name, len(agents)))
