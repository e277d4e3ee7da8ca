"""
repraxis/nodes.py - Typed nodes of the fact tree

Every segment of a sentence becomes a FactNode. A node is a tagged value:
- VARIABLE: query placeholder (e.g. "?other"), never stored
- SYMBOL: plain string constant (e.g. "astrid", "Toph Beifong")
- INT: integer constant (e.g. 30, -10)
- FLOAT: floating point constant (e.g. 0.5)

Nodes also form the fact tree itself. A node's cardinality controls how many
children it may own:
- NONE: no children (loose values, e.g. converted query bindings)
- ONE: exactly one child, replaced on insert ("a!b")
- MANY: any number of keyed children ("a.b")

Comparison operators are dispatched on the pair of node types in one place,
so every legal and illegal combination is visible in _compare_order().
"""
from __future__ import annotations

import locale
import weakref
from enum import Enum
from typing import Any

from .errors import MissingNodeError, NodeCardinalityError, NodeTypeError, RePraxisError


class NodeType(Enum):
    """Discriminant for the value a node carries."""

    VARIABLE = 0
    SYMBOL = 1
    INT = 2
    FLOAT = 3


class NodeCardinality(Enum):
    """How many children a node may own."""

    NONE = 0
    ONE = 1
    MANY = 2


_NUMERIC_TYPES = frozenset({NodeType.INT, NodeType.FLOAT})


def _symbol_for(node_type: NodeType, value: Any) -> str:
    if node_type is NodeType.INT:
        return str(value)
    if node_type is NodeType.FLOAT:
        return repr(value)
    return value


class FactNode:
    """A typed value that can also act as a node in the fact tree.

    Example:
        node = FactNode.of_int(30, NodeCardinality.MANY)
        node.symbol      # "30"
        node.value       # 30
        node.less_than(FactNode.of_float(30.5))  # True
    """

    def __init__(
        self,
        node_type: NodeType,
        value: Any,
        cardinality: NodeCardinality = NodeCardinality.MANY,
    ):
        self.node_type = node_type
        self.value = value
        self.cardinality = cardinality
        self.symbol: str = _symbol_for(node_type, value)
        self._children: dict[str, FactNode] = {}
        self._parent: weakref.ref[FactNode] | None = None

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def of_variable(cls, name: str, cardinality: NodeCardinality = NodeCardinality.MANY) -> FactNode:
        return cls(NodeType.VARIABLE, name, cardinality)

    @classmethod
    def of_symbol(cls, value: str, cardinality: NodeCardinality = NodeCardinality.MANY) -> FactNode:
        return cls(NodeType.SYMBOL, value, cardinality)

    @classmethod
    def of_int(cls, value: int | float, cardinality: NodeCardinality = NodeCardinality.MANY) -> FactNode:
        # int() truncates toward zero
        return cls(NodeType.INT, int(value), cardinality)

    @classmethod
    def of_float(cls, value: float, cardinality: NodeCardinality = NodeCardinality.MANY) -> FactNode:
        return cls(NodeType.FLOAT, float(value), cardinality)

    def copy(self) -> FactNode:
        """Copy the value and cardinality, without children or parent."""
        return FactNode(self.node_type, self.value, self.cardinality)

    # -------------------------------------------------------------------------
    # Tree structure
    # -------------------------------------------------------------------------

    @property
    def is_variable(self) -> bool:
        return self.node_type is NodeType.VARIABLE

    @property
    def children(self) -> list[FactNode]:
        return list(self._children.values())

    @property
    def parent(self) -> FactNode | None:
        if self._parent is None:
            return None
        return self._parent()

    def add_child(self, node: FactNode) -> None:
        """Attach a child node keyed by its symbol.

        Raises:
            NodeCardinalityError: If this node cannot hold another child.
            RePraxisError: If the node already belongs to another parent.
        """
        if self.cardinality is NodeCardinality.NONE:
            raise NodeCardinalityError(
                f"Cannot add child '{node.symbol}' to node '{self.symbol}' with cardinality NONE"
            )

        if self.cardinality is NodeCardinality.ONE and self._children:
            raise NodeCardinalityError(
                f"Cannot add additional child '{node.symbol}' to node '{self.symbol}' "
                f"with cardinality ONE"
            )

        if node.parent is not None:
            raise RePraxisError(f"Node '{node.symbol}' already has a parent.")

        self._children[node.symbol] = node
        node._parent = weakref.ref(self)

    def remove_child(self, symbol: str) -> bool:
        """Detach the child with the given symbol. Returns True if one existed."""
        child = self._children.pop(symbol, None)
        if child is None:
            return False
        child._parent = None
        return True

    def get_child(self, symbol: str) -> FactNode:
        try:
            return self._children[symbol]
        except KeyError:
            raise MissingNodeError(symbol) from None

    def has_child(self, symbol: str) -> bool:
        return symbol in self._children

    def clear_children(self) -> None:
        """Discard the whole subtree below this node."""
        for child in self._children.values():
            child._parent = None
            child.clear_children()
        self._children.clear()

    @property
    def path(self) -> str:
        """Sentence leading from the database root to this node."""
        parent = self.parent
        if parent is None or (parent.parent is None and parent.symbol == "root"):
            return self.symbol
        delimiter = "!" if parent.cardinality is NodeCardinality.ONE else "."
        return f"{parent.path}{delimiter}{self.symbol}"

    # -------------------------------------------------------------------------
    # Comparisons
    # -------------------------------------------------------------------------

    def equal_to(self, other: FactNode) -> bool:
        """Type-then-value equality. Different types are never equal."""
        return self.node_type is other.node_type and self.value == other.value

    def not_equal_to(self, other: FactNode) -> bool:
        return not self.equal_to(other)

    def less_than(self, other: FactNode) -> bool:
        return _compare_order("lt", self, other) < 0

    def less_than_equal_to(self, other: FactNode) -> bool:
        return _compare_order("lte", self, other) <= 0

    def greater_than(self, other: FactNode) -> bool:
        return _compare_order("gt", self, other) > 0

    def greater_than_equal_to(self, other: FactNode) -> bool:
        return _compare_order("gte", self, other) >= 0

    def __repr__(self) -> str:
        return f"FactNode({self.node_type.name}, {self.symbol!r})"

    def __str__(self) -> str:
        return self.symbol


def _compare_order(op: str, left: FactNode, right: FactNode) -> int:
    """Three-way comparison for ordering operators.

    Defined for INT/FLOAT pairs (mixed allowed) and SYMBOL/SYMBOL pairs.
    Anything involving a VARIABLE, or a SYMBOL against a number, raises.
    """
    left_type, right_type = left.node_type, right.node_type

    if left_type in _NUMERIC_TYPES and right_type in _NUMERIC_TYPES:
        return (left.value > right.value) - (left.value < right.value)

    if left_type is NodeType.SYMBOL and right_type is NodeType.SYMBOL:
        result = locale.strcoll(left.value, right.value)
        return (result > 0) - (result < 0)

    raise NodeTypeError(
        f"{op} not defined between nodes of type {left_type.name} and {right_type.name}"
    )
