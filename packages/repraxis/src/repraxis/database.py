"""
repraxis/database.py - In-memory fact tree

Facts are sentences stored as root-to-leaf paths. Shared prefixes share
nodes, so "astrid.traits.kind" and "astrid.traits.brave" hang off the same
"astrid" and "traits" nodes.

Example:
    db = FactDatabase()
    db.insert("astrid.relationships.jordan.reputation!30")
    db.insert("astrid.relationships.jordan.reputation!10")  # replaces 30

    db.assert_fact("astrid.relationships.jordan.reputation!10")  # True
    db.assert_fact("astrid.relationships.jordan.reputation!30")  # False
"""
from __future__ import annotations

import logging
from collections.abc import Iterator

from .errors import NodeCardinalityError, NodeTypeError
from .nodes import FactNode, NodeCardinality
from .parsing import parse_sentence

logger = logging.getLogger(__name__)


class FactDatabase:
    """Stores sentences as a tree rooted at a MANY-cardinality "root" node."""

    def __init__(self):
        self._root = FactNode.of_symbol("root", NodeCardinality.MANY)

    @property
    def root(self) -> FactNode:
        return self._root

    def insert(self, sentence: str) -> None:
        """Add a sentence to the tree.

        Inserting below a ONE-cardinality node replaces whatever child it
        had before.

        Raises:
            NodeTypeError: If the sentence contains a variable.
            NodeCardinalityError: If an existing segment was stored with a
                different cardinality.
        """
        subtree = self._root

        for token in parse_sentence(sentence):
            if token.is_variable:
                raise NodeTypeError(
                    f"Found variable {token.symbol} in sentence '({sentence})'. "
                    "Sentence cannot contain variables when inserting a value."
                )

            if subtree.has_child(token.symbol):
                existing = subtree.get_child(token.symbol)
                if existing.cardinality is not token.cardinality:
                    raise NodeCardinalityError(
                        f"Cardinality mismatch on {token.symbol} in sentence '{sentence}'."
                    )
                subtree = existing
                continue

            if subtree.cardinality is NodeCardinality.ONE:
                subtree.clear_children()

            node = token.copy()
            subtree.add_child(node)
            subtree = node

        logger.debug("Inserted fact: %s", sentence)

    def assert_fact(self, sentence: str) -> bool:
        """Return True if the sentence is stored.

        Matching stops at the last segment, so the final node's cardinality
        is ignored. Every intermediate segment must match in cardinality.

        Raises:
            NodeTypeError: If the sentence contains a variable.
        """
        tokens = parse_sentence(sentence)
        current = self._root

        for index, token in enumerate(tokens):
            if token.is_variable:
                raise NodeTypeError(
                    f"Found variable {token.symbol} in sentence '({sentence})'. "
                    "Sentence cannot contain variables when retrieving a value."
                )

            if not current.has_child(token.symbol):
                return False

            if index == len(tokens) - 1:
                return True

            current = current.get_child(token.symbol)

            if current.cardinality is not token.cardinality:
                return False

        return True

    def delete(self, sentence: str) -> bool:
        """Remove the final segment of a sentence along with its subtree.

        Returns False if the final segment does not exist.

        Raises:
            NodeTypeError: If the sentence contains a variable.
            MissingNodeError: If an intermediate segment does not exist.
        """
        tokens = parse_sentence(sentence)

        for token in tokens:
            if token.is_variable:
                raise NodeTypeError(
                    f"Found variable {token.symbol} in sentence '({sentence})'. "
                    "Sentence cannot contain variables when deleting a value."
                )

        current = self._root
        for token in tokens[:-1]:
            current = current.get_child(token.symbol)

        removed = current.remove_child(tokens[-1].symbol)
        if removed:
            logger.debug("Deleted fact: %s", sentence)
        return removed

    def clear(self) -> None:
        """Remove every fact."""
        self._root.clear_children()
        logger.debug("Cleared fact database")

    def facts(self) -> list[str]:
        """All stored root-to-leaf sentences, in insertion order."""
        return list(self._iter_leaf_paths(self._root, ""))

    def _iter_leaf_paths(self, node: FactNode, prefix: str) -> Iterator[str]:
        for child in node.children:
            segment = child.symbol
            if "." in segment or "!" in segment:
                segment = f"[{segment}]"
            path = f"{prefix}{segment}"
            if not child.children:
                yield path
            else:
                delimiter = "!" if child.cardinality is NodeCardinality.ONE else "."
                yield from self._iter_leaf_paths(child, path + delimiter)

    def __contains__(self, sentence: str) -> bool:
        return self.assert_fact(sentence)

    def __len__(self) -> int:
        return len(self.facts())

    def __repr__(self) -> str:
        return f"FactDatabase(facts={len(self)})"
