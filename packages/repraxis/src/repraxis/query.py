"""
repraxis/query.py - Query clauses and the DBQuery runner

A query is an ordered list of clauses evaluated left to right over a
QueryState. Each clause narrows (or, for the first variable clause, creates)
the set of variable bindings. The first failing clause stops the query.

Clause shapes (split on whitespace outside "[...]" literals):
- "<sentence>"            assert the sentence, binding its variables
- "not <sentence>"        require the sentence to never hold
- "<op> <lhs> <rhs>"      compare two values, op in eq neq lt gt lte gte

Example:
    result = (
        DBQuery()
        .where("astrid.relationships.?other.reputation!?r")
        .where("gte ?r 10")
        .run(db)
    )
    result.success    # True
    result.bindings   # [{"?other": "jordan", "?r": 30}, {"?other": "lee", "?r": 20}]
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from .database import FactDatabase
from .errors import UnrecognizedClauseError
from .nodes import FactNode
from .parsing import bind_sentence, has_variables, node_from_any, parse_sentence
from .unification import Bindings, unify_all

logger = logging.getLogger(__name__)


# =============================================================================
# STATE AND RESULTS
# =============================================================================


@dataclass
class QueryState:
    """Intermediate state threaded through query clauses."""

    success: bool
    bindings: list[Bindings] = field(default_factory=list)

    def __post_init__(self):
        self.bindings = [dict(bindings) for bindings in self.bindings]

    def to_result(self) -> QueryResult:
        if not self.success:
            return QueryResult(False, [])

        return QueryResult(
            True,
            [
                {name: node.value for name, node in bindings.items()}
                for bindings in self.bindings
            ],
        )


@dataclass
class QueryResult:
    """Final outcome of a query, with bindings converted to raw values."""

    success: bool
    bindings: list[dict[str, Any]] = field(default_factory=list)

    def limit_to_vars(self, variables: Sequence[str]) -> QueryResult:
        """Keep only the named variables in each binding.

        Variables missing from a binding map to None. Asking for no
        variables yields a successful result with no bindings.
        """
        if not self.success:
            return QueryResult(False, [])

        if not variables:
            return QueryResult(True, [])

        return QueryResult(
            True,
            [{name: bindings.get(name) for name in variables} for bindings in self.bindings],
        )

    def __bool__(self) -> bool:
        return self.success


def _failed() -> QueryState:
    return QueryState(False, [])


# =============================================================================
# EXPRESSIONS
# =============================================================================


class QueryExpression(ABC):
    """One clause of a query."""

    @abstractmethod
    def evaluate(self, db: FactDatabase, state: QueryState) -> QueryState:
        """Return the state after applying this clause."""


class AssertExpression(QueryExpression):
    """A bare sentence that must hold in the database.

    With variables, the sentence is joined against existing bindings and
    each surviving binding is checked again by asserting the fully bound
    sentence. The second check matters when one variable appears twice in
    the same sentence.
    """

    def __init__(self, statement: str):
        self.statement = statement

    def evaluate(self, db: FactDatabase, state: QueryState) -> QueryState:
        if not has_variables(self.statement):
            if not db.assert_fact(self.statement):
                return _failed()
            return state

        bindings = unify_all(db, state, [self.statement])

        valid = [b for b in bindings if db.assert_fact(bind_sentence(self.statement, b))]

        if not valid:
            return _failed()

        return QueryState(True, valid)


class NotExpression(QueryExpression):
    """A sentence that must not hold for any existing binding."""

    def __init__(self, statement: str):
        self.statement = statement

    def evaluate(self, db: FactDatabase, state: QueryState) -> QueryState:
        if not has_variables(self.statement):
            if db.assert_fact(self.statement):
                return _failed()
            return state

        # Nothing bound yet: the sentence must have no solutions at all
        if not state.bindings:
            if unify_all(db, state, [self.statement]):
                return _failed()
            return state

        valid = [b for b in state.bindings if not self._holds_for(db, b)]

        if not valid:
            return _failed()

        return QueryState(True, valid)

    def _holds_for(self, db: FactDatabase, bindings: Bindings) -> bool:
        sentence = bind_sentence(self.statement, bindings)

        if has_variables(sentence):
            return bool(unify_all(db, QueryState(True, []), [sentence]))

        return db.assert_fact(sentence)


_COMPARATORS: dict[str, Callable[[FactNode, FactNode], bool]] = {
    "eq": FactNode.equal_to,
    "neq": FactNode.not_equal_to,
    "lt": FactNode.less_than,
    "gt": FactNode.greater_than,
    "lte": FactNode.less_than_equal_to,
    "gte": FactNode.greater_than_equal_to,
}


class CompareExpression(QueryExpression):
    """Compare two single-segment operands for every existing binding.

    Raises:
        UnrecognizedClauseError: If the operator is unknown or an operand has
            more than one segment.
        NodeTypeError: If the operator is not defined for the operand types.
    """

    def __init__(self, op: str, lhs: str, rhs: str):
        if op not in _COMPARATORS:
            raise UnrecognizedClauseError(f"Unrecognized comparison operator in '{op} {lhs} {rhs}'.")

        for operand in (lhs, rhs):
            if len(parse_sentence(operand)) > 1:
                raise UnrecognizedClauseError(
                    "Comparator expression may only be single variables, symbols, or constants. "
                    f"{operand} has too many parts."
                )

        self.op = op
        self.lhs = lhs
        self.rhs = rhs

    def evaluate(self, db: FactDatabase, state: QueryState) -> QueryState:
        if not state.bindings:
            return _failed()

        valid = [b for b in state.bindings if self._compare(b)]

        if not valid:
            return _failed()

        return QueryState(True, valid)

    def _compare(self, bindings: Bindings) -> bool:
        left = parse_sentence(bind_sentence(self.lhs, bindings))[0]
        right = parse_sentence(bind_sentence(self.rhs, bindings))[0]
        return _COMPARATORS[self.op](left, right)


# =============================================================================
# CLAUSE PARSING
# =============================================================================


def split_clause(clause: str) -> list[str]:
    """Split a clause on whitespace, keeping "[...]" literals intact."""
    parts: list[str] = []
    current: list[str] = []
    in_literal = False

    for char in clause:
        if char == "[":
            in_literal = True
        elif char == "]":
            in_literal = False

        if char.isspace() and not in_literal:
            if current:
                parts.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        parts.append("".join(current))

    return parts


def parse_clause(clause: str) -> QueryExpression:
    """Build the expression for a single clause string.

    Raises:
        UnrecognizedClauseError: If the clause has no recognized shape.
    """
    parts = split_clause(clause)

    if len(parts) == 1:
        return AssertExpression(parts[0])

    if len(parts) == 2 and parts[0] == "not":
        return NotExpression(parts[1])

    if len(parts) == 3:
        return CompareExpression(*parts)

    raise UnrecognizedClauseError(f"Unrecognized query expression '{clause}'.")


# =============================================================================
# DBQUERY
# =============================================================================


RawBindings = Mapping[str, Any]


@dataclass(frozen=True)
class DBQuery:
    """An immutable, reusable query.

    where() never modifies the query it is called on, so a base query can be
    shared and extended in several directions.
    """

    clauses: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "clauses", tuple(self.clauses))

    def where(self, clause: str) -> DBQuery:
        return DBQuery(self.clauses + (clause,))

    def run(
        self,
        db: FactDatabase,
        bindings: RawBindings | Sequence[RawBindings] | None = None,
    ) -> QueryResult:
        """Evaluate the clauses in order against a database.

        Args:
            db: Database to query
            bindings: Initial variable values, either one mapping or a list
                of mappings of variable name -> raw string or number

        Returns:
            QueryResult with raw values. Clause failure is reported through
            QueryResult.success, never raised.
        """
        state = QueryState(True, _convert_bindings(bindings))

        for clause in self.clauses:
            state = parse_clause(clause).evaluate(db, state)

            if not state.success:
                logger.debug("Query failed at clause: %s", clause)
                break

        return state.to_result()


def _convert_bindings(bindings: RawBindings | Sequence[RawBindings] | None) -> list[Bindings]:
    if bindings is None:
        return []

    if isinstance(bindings, Mapping):
        bindings = [bindings]

    return [
        {name: node_from_any(value) for name, value in entry.items()}
        for entry in bindings
    ]
