"""
tdrs/social_rules.py - Precondition-driven relationship modifiers

A social rule is a query plus the stat modifiers it grants. Every
relationship runs every rule's query with ?owner and ?target bound to its
endpoints; while the query succeeds, the rule's modifiers sit on the
relationship's stats with the rule itself as their source.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from repraxis import DBQuery

from .errors import SocialRuleNotFoundError
from .stats import StatModifierData

if TYPE_CHECKING:
    from .relationship import Relationship

logger = logging.getLogger(__name__)


class SocialRule:
    """A conditional bundle of relationship stat modifiers.

    Example:
        rule = SocialRule(
            rule_id="attracted_to_attractive",
            description="[owner] is attracted to [target]",
            preconditions=("?target.traits.attractive",),
            modifiers=(StatModifierData("Romance", 12),),
        )
    """

    def __init__(
        self,
        rule_id: str,
        description: str = "",
        preconditions: Sequence[str] = (),
        modifiers: Sequence[StatModifierData] = (),
    ):
        self.rule_id = rule_id
        self.description = description
        self.preconditions = tuple(preconditions)
        self.modifiers = tuple(modifiers)
        self._query = DBQuery(self.preconditions)

    def check_preconditions(self, relationship: Relationship) -> bool:
        result = self._query.run(
            relationship.engine.db,
            {"?owner": relationship.owner_uid, "?target": relationship.target_uid},
        )
        return result.success

    def apply_modifiers(self, relationship: Relationship) -> None:
        for data in self.modifiers:
            if not relationship.stats.has_stat(data.stat):
                logger.warning(
                    "Social rule %s skipped modifier for missing stat %s on %s",
                    self.rule_id,
                    data.stat,
                    relationship,
                )
                continue
            relationship.stats.get_stat(data.stat).add_modifier(data.create_instance(source=self))

    def remove_modifiers(self, relationship: Relationship) -> None:
        relationship.stats.remove_modifiers_from_source(self)

    def render_description(self, relationship: Relationship) -> str:
        return self.description.replace("[owner]", relationship.owner_uid).replace(
            "[target]", relationship.target_uid
        )

    def __repr__(self) -> str:
        return f"SocialRule({self.rule_id!r})"


class SocialRuleLibrary:
    """Registered social rules in insertion order."""

    def __init__(self, rules: Iterable[SocialRule] = ()):
        self._rules: dict[str, SocialRule] = {}
        for rule in rules:
            self.add_rule(rule)

    @property
    def rules(self) -> list[SocialRule]:
        return list(self._rules.values())

    def add_rule(self, rule: SocialRule) -> None:
        self._rules[rule.rule_id] = rule

    def has_rule(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def get_rule(self, rule_id: str) -> SocialRule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise SocialRuleNotFoundError(f"Social rule not found for {rule_id}") from None

    def remove_rule(self, rule_id: str) -> bool:
        return self._rules.pop(rule_id, None) is not None

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self._rules)
