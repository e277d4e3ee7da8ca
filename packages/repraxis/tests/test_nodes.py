"""Tests for typed fact nodes and comparison dispatch."""

import pytest

from repraxis import (
    FactNode,
    MissingNodeError,
    NodeCardinality,
    NodeCardinalityError,
    NodeType,
    NodeTypeError,
    RePraxisError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _int(value: int) -> FactNode:
    return FactNode.of_int(value, NodeCardinality.NONE)


def _float(value: float) -> FactNode:
    return FactNode.of_float(value, NodeCardinality.NONE)


def _sym(value: str) -> FactNode:
    return FactNode.of_symbol(value, NodeCardinality.NONE)


def _var(name: str) -> FactNode:
    return FactNode.of_variable(name, NodeCardinality.NONE)


# ---------------------------------------------------------------------------
# Tests: Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    """Node values, symbols and types."""

    def test_int_symbol(self):
        node = FactNode.of_int(30)
        assert node.node_type is NodeType.INT
        assert node.symbol == "30"
        assert node.value == 30

    def test_int_truncates(self):
        assert FactNode.of_int(3.9).value == 3
        assert FactNode.of_int(-3.9).value == -3

    def test_float_symbol(self):
        node = FactNode.of_float(0.5)
        assert node.node_type is NodeType.FLOAT
        assert node.symbol == "0.5"

    def test_variable(self):
        node = FactNode.of_variable("?other")
        assert node.is_variable
        assert node.symbol == "?other"

    def test_copy_drops_children(self):
        parent = FactNode.of_symbol("a")
        parent.add_child(FactNode.of_symbol("b"))

        clone = parent.copy()

        assert clone.symbol == "a"
        assert clone.children == []
        assert clone.cardinality is NodeCardinality.MANY


# ---------------------------------------------------------------------------
# Tests: Tree structure
# ---------------------------------------------------------------------------


class TestTree:
    """Children, parents and cardinality enforcement."""

    def test_add_and_get_child(self):
        parent = FactNode.of_symbol("a")
        child = FactNode.of_symbol("b")
        parent.add_child(child)

        assert parent.has_child("b")
        assert parent.get_child("b") is child
        assert child.parent is parent

    def test_missing_child_raises(self):
        with pytest.raises(MissingNodeError):
            FactNode.of_symbol("a").get_child("nope")

    def test_missing_child_is_key_error(self):
        with pytest.raises(KeyError):
            FactNode.of_symbol("a").get_child("nope")

    def test_one_cardinality_rejects_second_child(self):
        parent = FactNode.of_symbol("a", NodeCardinality.ONE)
        parent.add_child(FactNode.of_symbol("b"))

        with pytest.raises(NodeCardinalityError):
            parent.add_child(FactNode.of_symbol("c"))

    def test_none_cardinality_rejects_children(self):
        with pytest.raises(NodeCardinalityError):
            _sym("a").add_child(_sym("b"))

    def test_reparenting_raises(self):
        first = FactNode.of_symbol("a")
        second = FactNode.of_symbol("c")
        child = FactNode.of_symbol("b")
        first.add_child(child)

        with pytest.raises(RePraxisError):
            second.add_child(child)

    def test_remove_child(self):
        parent = FactNode.of_symbol("a")
        child = FactNode.of_symbol("b")
        parent.add_child(child)

        assert parent.remove_child("b") is True
        assert parent.remove_child("b") is False
        assert child.parent is None

    def test_clear_children_detaches_subtree(self):
        parent = FactNode.of_symbol("a")
        child = FactNode.of_symbol("b")
        grandchild = FactNode.of_symbol("c")
        parent.add_child(child)
        child.add_child(grandchild)

        parent.clear_children()

        assert parent.children == []
        assert child.children == []
        assert child.parent is None


# ---------------------------------------------------------------------------
# Tests: Comparisons
# ---------------------------------------------------------------------------


class TestEquality:
    """Type-then-value equality never raises."""

    def test_same_type_same_value(self):
        assert _int(3).equal_to(_int(3))
        assert _sym("a").equal_to(_sym("a"))

    def test_different_types_not_equal(self):
        assert not _int(3).equal_to(_float(3.0))
        assert _int(3).not_equal_to(_sym("3"))

    def test_variable_equality(self):
        assert not _var("?x").equal_to(_int(1))
        assert _var("?x").not_equal_to(_sym("?y"))


class TestOrdering:
    """Ordering is defined for numeric pairs and symbol pairs only."""

    def test_int_vs_int(self):
        assert _int(1).less_than(_int(2))
        assert _int(2).greater_than(_int(1))
        assert _int(2).less_than_equal_to(_int(2))
        assert _int(2).greater_than_equal_to(_int(2))

    def test_mixed_numeric(self):
        assert _int(30).less_than(_float(30.5))
        assert _float(29.5).less_than(_int(30))
        assert _float(2.0).greater_than_equal_to(_int(2))

    def test_symbol_vs_symbol(self):
        assert _sym("apple").less_than(_sym("banana"))
        assert _sym("banana").greater_than(_sym("apple"))

    def test_symbol_vs_number_raises(self):
        with pytest.raises(NodeTypeError):
            _sym("a").less_than(_int(1))

        with pytest.raises(NodeTypeError):
            _int(1).greater_than(_sym("a"))

    def test_variable_never_ordered(self):
        with pytest.raises(NodeTypeError):
            _var("?x").less_than(_int(1))

        with pytest.raises(NodeTypeError):
            _int(1).greater_than_equal_to(_var("?x"))

    def test_error_names_operator(self):
        with pytest.raises(NodeTypeError, match="lte not defined"):
            _sym("a").less_than_equal_to(_float(1.5))
