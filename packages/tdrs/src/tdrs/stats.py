"""
tdrs/stats.py - Numeric stats with layered modifiers

A Stat is a base value plus an ordered list of modifiers. The final value
is recomputed lazily whenever something changed:

1. start from the base value
2. add every FLAT modifier
3. sum each consecutive run of PERCENT_ADD modifiers, then scale once
4. scale by each PERCENT_MULTIPLY modifier independently
5. clamp to [min, max], floor if discrete, round to significant figures

Example:
    stat = Stat(25, 0, 100)
    stat.add_modifier(StatModifier("Romance", -0.15, StatModifierType.PERCENT_MULTIPLY))
    stat.add_modifier(StatModifier("Romance", 0.50, StatModifierType.PERCENT_MULTIPLY))
    stat.value   # 31.9 (25 * 0.85 * 1.5 = 31.875)
"""
from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable

from .errors import StatNotFoundError
from .modifiers import Modifier
from .settings import get_settings

if TYPE_CHECKING:
    from .entity import SocialEntity

StatObserver = Callable[[float], None]


class StatModifierType(IntEnum):
    """Modifier kinds. The value doubles as the default application order."""

    FLAT = 100
    PERCENT_ADD = 200
    PERCENT_MULTIPLY = 300


@dataclass(frozen=True)
class StatSchema:
    """Initial configuration of one stat on an agent or relationship."""

    stat: str
    base_value: float
    min_value: float | None = None
    max_value: float | None = None
    is_discrete: bool = False

    def create_stat(self) -> Stat:
        return Stat(self.base_value, self.min_value, self.max_value, self.is_discrete)


@dataclass(frozen=True)
class StatModifierData:
    """Template for a modifier declared by a trait or social rule."""

    stat: str
    value: float
    modifier_type: StatModifierType = StatModifierType.FLAT

    def create_instance(self, source: Any = None, duration: int = -1) -> StatModifier:
        return StatModifier(
            self.stat, self.value, self.modifier_type, duration=duration, source=source
        )


@dataclass(eq=False)
class StatModifier(Modifier):
    """A live modifier attached to a stat.

    Modifiers compare by identity so two equal-looking modifiers from
    different sources can be removed independently. A positive duration
    counts down once per update(); -1 means permanent.

    Added to an entity's ModifierCollection, it acts as a timed stat buff
    on that entity.
    """

    stat: str
    value: float
    modifier_type: StatModifierType
    duration: int = -1
    source: Any = None
    order: int = -1
    has_duration: bool = field(init=False, default=False)

    def __post_init__(self):
        self.modifier_type = StatModifierType(self.modifier_type)
        if self.order < 0:
            self.order = int(self.modifier_type)
        self.has_duration = self.duration > 0

    def has_expired(self, entity: SocialEntity | None = None) -> bool:
        return self.has_duration and self.duration <= 0

    def apply(self, entity: SocialEntity) -> None:
        entity.stats.get_stat(self.stat).add_modifier(self)

    def remove(self, entity: SocialEntity) -> None:
        entity.stats.get_stat(self.stat).remove_modifier(self)

    def update(self, entity: SocialEntity | None = None) -> None:
        """Advance one time step."""
        if self.has_duration:
            self.duration -= 1

    @property
    def description(self) -> str:
        if self.modifier_type is StatModifierType.FLAT:
            return f"Add {self.value:g} to {self.stat}"
        if self.modifier_type is StatModifierType.PERCENT_ADD:
            return f"Add {self.value * 100:g}% to {self.stat}"
        return f"Scales {self.stat} to {(1 + self.value) * 100:g}%"


def round_significant(value: float, digits: int) -> float:
    """Round to a number of significant figures (e.g. 31.875 -> 31.9)."""
    if value == 0 or not math.isfinite(value):
        return float(value)
    return float(f"{value:.{digits}g}")


class Stat:
    """A numeric value recomputed from its base value and modifiers."""

    def __init__(
        self,
        base_value: float,
        min_value: float | None = None,
        max_value: float | None = None,
        is_discrete: bool = False,
    ):
        settings = get_settings()

        self._base_value = base_value
        self._min_value = settings.stat_min_value if min_value is None else min_value
        self._max_value = settings.stat_max_value if max_value is None else max_value
        self._is_discrete = is_discrete
        self._precision = settings.stat_round_precision
        self._modifiers: list[StatModifier] = []
        self._observers: list[StatObserver] = []
        self._value = float(base_value)
        self._normalized = 0.0
        self._is_dirty = True

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def base_value(self) -> float:
        return self._base_value

    @base_value.setter
    def base_value(self, value: float) -> None:
        self._base_value = value
        self._mark_dirty()

    @property
    def value(self) -> float:
        if self._is_dirty:
            self._recalculate()
        return self._value

    @property
    def normalized(self) -> float:
        """Value scaled to [0, 1] across the stat's range."""
        if self._is_dirty:
            self._recalculate()
        return self._normalized

    @property
    def min_value(self) -> float:
        return self._min_value

    @property
    def max_value(self) -> float:
        return self._max_value

    @property
    def is_discrete(self) -> bool:
        return self._is_discrete

    @property
    def modifiers(self) -> list[StatModifier]:
        return list(self._modifiers)

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: StatObserver) -> Callable[[], None]:
        """Call `callback(new_value)` after every change.

        Returns:
            A function that removes the subscription.
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _mark_dirty(self) -> None:
        self._is_dirty = True
        if self._observers:
            value = self.value
            for callback in list(self._observers):
                callback(value)

    # -------------------------------------------------------------------------
    # Modifiers
    # -------------------------------------------------------------------------

    def add_modifier(self, modifier: StatModifier) -> None:
        self._modifiers.append(modifier)
        # list.sort is stable, so equal orders keep insertion order
        self._modifiers.sort(key=lambda m: m.order)
        self._mark_dirty()

    def remove_modifier(self, modifier: StatModifier) -> bool:
        for index, existing in enumerate(self._modifiers):
            if existing is modifier:
                del self._modifiers[index]
                self._mark_dirty()
                return True
        return False

    def remove_modifiers_from_source(self, source: Any) -> bool:
        remaining = [m for m in self._modifiers if m.source is not source]

        if len(remaining) == len(self._modifiers):
            return False

        self._modifiers = remaining
        self._mark_dirty()
        return True

    def _recalculate(self) -> None:
        final_value = float(self._base_value)
        percent_add_sum = 0.0
        modifiers = self._modifiers

        for index, modifier in enumerate(modifiers):
            if modifier.modifier_type is StatModifierType.FLAT:
                final_value += modifier.value

            elif modifier.modifier_type is StatModifierType.PERCENT_ADD:
                percent_add_sum += modifier.value
                is_last_in_run = (
                    index + 1 >= len(modifiers)
                    or modifiers[index + 1].modifier_type is not StatModifierType.PERCENT_ADD
                )
                if is_last_in_run:
                    final_value *= 1 + percent_add_sum
                    percent_add_sum = 0.0

            elif modifier.modifier_type is StatModifierType.PERCENT_MULTIPLY:
                final_value *= 1 + modifier.value

        final_value = max(self._min_value, min(self._max_value, final_value))

        if self._is_discrete:
            final_value = math.floor(final_value)

        final_value = round_significant(final_value, self._precision)

        value_range = self._max_value - self._min_value
        if value_range == 0:
            self._normalized = 0.0
        else:
            self._normalized = round_significant(
                (final_value - self._min_value) / value_range, self._precision
            )

        self._value = final_value
        self._is_dirty = False

    def __repr__(self) -> str:
        return (
            f"Stat(value={self.value}, base={self._base_value}, "
            f"range=[{self._min_value}, {self._max_value}], modifiers={len(self._modifiers)})"
        )


class StatManager:
    """Named stats owned by one agent or relationship."""

    def __init__(self):
        self._stats: dict[str, Stat] = {}

    @property
    def stats(self) -> Mapping[str, Stat]:
        return dict(self._stats)

    def add_stat(self, name: str, stat: Stat) -> None:
        self._stats[name] = stat

    def get_stat(self, name: str) -> Stat:
        try:
            return self._stats[name]
        except KeyError:
            raise StatNotFoundError(f"Could not find stat for {name}") from None

    def has_stat(self, name: str) -> bool:
        return name in self._stats

    def remove_modifiers_from_source(self, source: Any) -> bool:
        """Remove every modifier from `source` on every stat."""
        removed = False
        for stat in self._stats.values():
            if stat.remove_modifiers_from_source(source):
                removed = True
        return removed

    def __iter__(self) -> Iterator[str]:
        return iter(self._stats)

    def __len__(self) -> int:
        return len(self._stats)
