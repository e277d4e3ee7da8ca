"""
repraxis/unification.py - Matching sentences against the fact tree

Unification walks the tree one sentence segment at a time and returns every
way the sentence's variables can be bound to stored nodes.

Key operations:
- unify(db, sentence): all bindings for one sentence
- unify_all(db, state, sentences): join the bindings of several sentences
  with the bindings a query has already accumulated

A binding is a dict of variable name -> stored FactNode.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from .nodes import FactNode
from .parsing import parse_sentence

if TYPE_CHECKING:
    from .database import FactDatabase
    from .query import QueryState

# Type alias for one set of variable bindings
Bindings = dict[str, FactNode]


def unify(db: FactDatabase, sentence: str) -> list[Bindings]:
    """Find all bindings for the variables in a sentence.

    Breadth-first: the frontier starts at the root, and each segment either
    binds a variable to every child of every frontier node, or keeps only
    children whose symbol matches. Cardinality is not checked here.

    Bindings that contain no variables are dropped, so a sentence without
    variables always unifies to an empty list.

    Example:
        db.insert("astrid.traits.kind")
        db.insert("jordan.traits.kind")
        unify(db, "?who.traits.kind")
        # [{"?who": astrid}, {"?who": jordan}]
    """
    frontier: list[tuple[Bindings, FactNode]] = [({}, db.root)]

    for token in parse_sentence(sentence):
        next_frontier: list[tuple[Bindings, FactNode]] = []

        for bindings, subtree in frontier:
            if token.is_variable:
                for child in subtree.children:
                    next_frontier.append(({**bindings, token.symbol: child}, child))
            elif subtree.has_child(token.symbol):
                next_frontier.append((bindings, subtree.get_child(token.symbol)))

        frontier = next_frontier

    return [bindings for bindings, _ in frontier if bindings]


def _compatible(existing: Bindings, candidate: Bindings) -> bool:
    for name, node in candidate.items():
        if name in existing and not existing[name].equal_to(node):
            return False
    return True


def unify_all(db: FactDatabase, state: QueryState, sentences: list[str]) -> list[Bindings]:
    """Join each sentence's bindings into the state's existing bindings.

    With no accumulated bindings, a sentence's results are taken as-is.
    Otherwise every accumulated binding is paired with every new binding
    that agrees on the variables they share, and the pair is merged.
    Empty bindings are dropped from the result.
    """
    accumulated = [dict(bindings) for bindings in state.bindings]

    for sentence in sentences:
        unified = unify(db, sentence)

        if not accumulated:
            accumulated = [dict(bindings) for bindings in unified]
            continue

        accumulated = [
            {**candidate, **existing}
            for existing in accumulated
            for candidate in unified
            if _compatible(existing, candidate)
        ]

    return [bindings for bindings in accumulated if bindings]
