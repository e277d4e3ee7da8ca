"""
repraxis/parsing.py - Sentence parsing and binding

A sentence is a path through the fact tree:

    astrid.relationships.jordan.reputation!30

- "." ends a segment whose node may have MANY children
- "!" ends a segment whose node holds exactly ONE child
- "[...]" protects a literal value so "." and "!" inside it are kept
- a segment starting with "?" is a variable

The last segment is always MANY since nothing follows it.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from .errors import NodeTypeError, SentenceParseError
from .nodes import FactNode, NodeCardinality


def node_from_string(token: str, cardinality: NodeCardinality) -> FactNode:
    """Create a node from a single sentence segment.

    Variables start with "?". Otherwise integer parsing is tried first,
    then float parsing, and anything else is a symbol. Whole-number floats
    such as "30.0" become INT nodes.
    """
    if token.startswith("?"):
        return FactNode.of_variable(token, cardinality)

    try:
        return FactNode.of_int(int(token), cardinality)
    except ValueError:
        pass

    try:
        numeric = float(token)
    except ValueError:
        return FactNode.of_symbol(token, cardinality)

    # "nan" and "inf" are symbols, not numbers
    if not math.isfinite(numeric):
        return FactNode.of_symbol(token, cardinality)

    if numeric.is_integer():
        return FactNode.of_int(numeric, cardinality)

    return FactNode.of_float(numeric, cardinality)


def node_from_any(value: Any) -> FactNode:
    """Convert a raw binding value supplied by a caller into a node.

    Numbers (and numeric-looking strings) become INT or FLOAT nodes, other
    strings become SYMBOL nodes. Bound inputs can never be variables.

    Raises:
        NodeTypeError: If the value is not a string or a number.
    """
    # bool is an int subclass, so True and False become 1 and 0
    if isinstance(value, int):
        return FactNode.of_int(value, NodeCardinality.NONE)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise NodeTypeError(f"Cannot convert ({value}) of type float to node")
        if value.is_integer():
            return FactNode.of_int(value, NodeCardinality.NONE)
        return FactNode.of_float(value, NodeCardinality.NONE)

    if isinstance(value, str):
        node = node_from_string(value, NodeCardinality.NONE)
        if node.is_variable:
            return FactNode.of_symbol(value, NodeCardinality.NONE)
        return node

    raise NodeTypeError(
        f"Cannot convert ({value!r}) of type {type(value).__name__} to node"
    )


def parse_sentence(sentence: str) -> list[FactNode]:
    """Split a sentence into typed nodes.

    Raises:
        SentenceParseError: If a '[' literal is never closed.

    Example:
        parse_sentence("a.b![c.d]")
        # [Symbol a (MANY), Symbol b (ONE), Symbol "c.d" (MANY)]
    """
    nodes: list[FactNode] = []
    current = []
    in_literal = False

    for char in sentence:
        if char == "[":
            in_literal = True
        elif char == "]":
            in_literal = False
        elif char in ".!" and not in_literal:
            cardinality = NodeCardinality.ONE if char == "!" else NodeCardinality.MANY
            nodes.append(node_from_string("".join(current), cardinality))
            current = []
        else:
            current.append(char)

    if in_literal:
        raise SentenceParseError(f"Could not find closing ']' for value in: '{sentence}'")

    nodes.append(node_from_string("".join(current), NodeCardinality.MANY))

    return nodes


def has_variables(sentence: str) -> bool:
    """Return True if any segment of the sentence is a variable."""
    return any(node.is_variable for node in parse_sentence(sentence))


def _escape_symbol(symbol: str) -> str:
    if "." in symbol or "!" in symbol:
        return f"[{symbol}]"
    return symbol


def bind_sentence(sentence: str, bindings: Mapping[str, FactNode]) -> str:
    """Substitute bound variables into a sentence.

    Unbound variables are kept as-is. Each segment keeps its original
    delimiter, so "a.?x!?y" bound with {?x: b, ?y: 3} becomes "a.b!3".
    """
    nodes = parse_sentence(sentence)
    parts = []

    for index, node in enumerate(nodes):
        if node.is_variable and node.symbol in bindings:
            parts.append(_escape_symbol(bindings[node.symbol].symbol))
        else:
            parts.append(_escape_symbol(node.symbol))

        if index < len(nodes) - 1:
            parts.append("!" if node.cardinality is NodeCardinality.ONE else ".")

    return "".join(parts)
