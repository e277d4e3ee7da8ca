"""
repraxis - In-memory fact database with a small query language

Facts are sentences such as "astrid.relationships.jordan.reputation!30",
stored as paths in a tree. Queries are lists of clauses that bind
variables against the stored facts.

This module provides:
- Sentence parsing into typed nodes
- A fact tree with ONE/MANY cardinality segments
- Breadth-first unification
- Assert, not and comparison clauses
- Immutable, reusable queries

Example:
    from repraxis import DBQuery, FactDatabase

    db = FactDatabase()
    db.insert("astrid.relationships.jordan.reputation!30")
    db.insert("astrid.relationships.lee.reputation!20")

    result = (
        DBQuery()
        .where("astrid.relationships.?other.reputation!?r")
        .where("gt ?r 25")
        .run(db)
    )
    print(result.bindings)  # [{"?other": "jordan", "?r": 30}]
"""

from .database import FactDatabase
from .errors import (
    MissingNodeError,
    NodeCardinalityError,
    NodeTypeError,
    RePraxisError,
    SentenceParseError,
    UnrecognizedClauseError,
)
from .nodes import FactNode, NodeCardinality, NodeType
from .parsing import bind_sentence, has_variables, node_from_any, node_from_string, parse_sentence
from .query import (
    AssertExpression,
    CompareExpression,
    DBQuery,
    NotExpression,
    QueryExpression,
    QueryResult,
    QueryState,
)
from .unification import unify, unify_all

__all__ = [
    # Nodes
    "FactNode",
    "NodeType",
    "NodeCardinality",
    # Parsing
    "parse_sentence",
    "node_from_string",
    "node_from_any",
    "has_variables",
    "bind_sentence",
    # Database
    "FactDatabase",
    # Unification
    "unify",
    "unify_all",
    # Queries
    "DBQuery",
    "QueryState",
    "QueryResult",
    "QueryExpression",
    "AssertExpression",
    "NotExpression",
    "CompareExpression",
    # Errors
    "RePraxisError",
    "SentenceParseError",
    "NodeTypeError",
    "NodeCardinalityError",
    "MissingNodeError",
    "UnrecognizedClauseError",
]
