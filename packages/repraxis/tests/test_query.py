"""Tests for unification, query clauses and DBQuery."""

import pytest

from repraxis import (
    DBQuery,
    FactDatabase,
    NodeTypeError,
    QueryResult,
    QueryState,
    UnrecognizedClauseError,
    unify,
    unify_all,
)

# ---------------------------------------------------------------------------
# Tests: Unification
# ---------------------------------------------------------------------------


class TestUnify:
    """Breadth-first unification against the fact tree."""

    def test_binds_each_child(self, relationship_db: FactDatabase):
        bindings = unify(relationship_db, "astrid.relationships.?other")
        others = sorted(b["?other"].symbol for b in bindings)
        assert others == ["britt", "jordan", "lee"]

    def test_no_variables_yields_nothing(self, relationship_db: FactDatabase):
        assert unify(relationship_db, "astrid.relationships.jordan") == []

    def test_no_match(self, relationship_db: FactDatabase):
        assert unify(relationship_db, "nobody.relationships.?other") == []

    def test_multiple_variables(self, relationship_db: FactDatabase):
        bindings = unify(relationship_db, "?owner.relationships.?other.reputation!?r")
        assert len(bindings) == 4
        assert all(set(b) == {"?owner", "?other", "?r"} for b in bindings)

    def test_unify_all_joins_on_shared_variables(self, relationship_db: FactDatabase):
        bindings = unify_all(
            relationship_db,
            QueryState(True, []),
            ["astrid.relationships.?other", "player.relationships.?other"],
        )
        others = sorted(b["?other"].symbol for b in bindings)
        assert others == ["britt", "jordan"]

    def test_unify_all_drops_incompatible(self, relationship_db: FactDatabase):
        bindings = unify_all(
            relationship_db,
            QueryState(True, []),
            ["astrid.relationships.?other.tags.friend", "player.relationships.?other"],
        )
        assert bindings == []


# ---------------------------------------------------------------------------
# Tests: Assert clauses
# ---------------------------------------------------------------------------


class TestAssertClause:
    """Single-sentence clauses."""

    def test_ground_assert_passes_through(self, relationship_db: FactDatabase):
        result = DBQuery().where("astrid.relationships.jordan").run(relationship_db)

        assert result.success
        assert result.bindings == []

    def test_ground_assert_fails(self, relationship_db: FactDatabase):
        result = DBQuery().where("astrid.relationships.nobody").run(relationship_db)
        assert not result.success

    def test_variables_bound_to_raw_values(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other.reputation!?r")
            .run(relationship_db)
        )

        assert result.success
        as_pairs = sorted((b["?other"], b["?r"]) for b in result.bindings)
        assert as_pairs == [("britt", -10), ("jordan", 30), ("lee", 20)]

    def test_repeated_variable_must_agree(self, db: FactDatabase):
        db.insert("likes.a.a")
        db.insert("likes.a.b")
        db.insert("likes.c.c")

        result = DBQuery().where("likes.?x.?x").run(db)

        assert result.success
        assert sorted(b["?x"] for b in result.bindings) == ["a", "c"]

    def test_input_bindings_restrict(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other.reputation!?r")
            .run(relationship_db, {"?other": "lee"})
        )

        assert result.bindings == [{"?other": "lee", "?r": 20}]

    def test_list_of_input_bindings(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other.reputation!?r")
            .run(relationship_db, [{"?other": "lee"}, {"?other": "jordan"}])
        )

        assert sorted(b["?r"] for b in result.bindings) == [20, 30]

    def test_string_literal_round_trip(self, db: FactDatabase):
        db.insert("player.name![Dr. Who]")

        result = DBQuery().where("player.name!?name").run(db)

        assert result.bindings == [{"?name": "Dr. Who"}]

        result = DBQuery().where("player.name![Dr. Who]").run(db)
        assert result.success


# ---------------------------------------------------------------------------
# Tests: Not clauses
# ---------------------------------------------------------------------------


class TestNotClause:
    """Negation, scoped unification and compound negation."""

    def test_ground_not(self, relationship_db: FactDatabase):
        assert DBQuery().where("not astrid.relationships.nobody").run(relationship_db).success
        assert not DBQuery().where("not astrid.relationships.lee").run(relationship_db).success

    def test_first_clause_not_requires_no_solutions(self, relationship_db: FactDatabase):
        assert not DBQuery().where("not astrid.relationships.?x").run(relationship_db).success
        assert DBQuery().where("not nobody.relationships.?x").run(relationship_db).success

    def test_filters_existing_bindings(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other")
            .where("not astrid.relationships.?other.tags.rivalry")
            .run(relationship_db)
        )

        assert sorted(b["?other"] for b in result.bindings) == ["britt", "lee"]

    def test_compound_negation(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other")
            .where("not astrid.relationships.?other.reputation!30")
            .where("not ?other.relationships.?others_spouse.tags.spouse")
            .run(relationship_db)
        )

        assert result.success
        assert result.bindings == [{"?other": "lee"}]

    def test_all_filtered_fails(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other")
            .where("not astrid.relationships.?other.reputation!?r")
            .run(relationship_db)
        )
        assert not result.success


# ---------------------------------------------------------------------------
# Tests: Comparison clauses
# ---------------------------------------------------------------------------


class TestCompareClause:
    """eq neq lt gt lte gte."""

    def test_unification_completeness(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?other.reputation!?r")
            .where("gte ?r 10")
            .run(relationship_db)
        )

        assert result.success
        assert len(result.bindings) == 2
        assert sorted(b["?other"] for b in result.bindings) == ["jordan", "lee"]

    @pytest.mark.parametrize(
        "clause,expected",
        [
            ("eq ?r 20", ["lee"]),
            ("neq ?r 20", ["britt", "jordan"]),
            ("lt ?r 20", ["britt"]),
            ("gt ?r 20", ["jordan"]),
            ("lte ?r 20", ["britt", "lee"]),
        ],
    )
    def test_operators(self, relationship_db: FactDatabase, clause: str, expected: list):
        result = (
            DBQuery()
            .where("astrid.relationships.?other.reputation!?r")
            .where(clause)
            .run(relationship_db)
        )

        assert sorted(b["?other"] for b in result.bindings) == expected

    def test_compare_two_variables(self, relationship_db: FactDatabase):
        result = (
            DBQuery()
            .where("astrid.relationships.?a.reputation!?ra")
            .where("astrid.relationships.?b.reputation!?rb")
            .where("gt ?ra ?rb")
            .run(relationship_db)
        )

        pairs = sorted((b["?a"], b["?b"]) for b in result.bindings)
        assert pairs == [("jordan", "britt"), ("jordan", "lee"), ("lee", "britt")]

    def test_variables_without_bindings_fail(self, db: FactDatabase):
        assert not DBQuery().where("eq ?x 1").run(db).success

    def test_constants_without_bindings_fail(self, db: FactDatabase):
        db.insert("a")

        assert not DBQuery().where("lt 1 2").run(db).success
        assert not DBQuery().where("a").where("lt 1 2").run(db).success

    def test_whole_float_binding_matches_int_fact(self, db: FactDatabase):
        db.insert("astrid.reputation![30.0]")

        result = DBQuery().where("astrid.reputation!?r").run(db, {"?r": 30.0})
        assert result.success

        result = (
            DBQuery()
            .where("astrid.reputation!?r")
            .where("eq ?r 30")
            .run(db, {"?r": 30.0})
        )
        assert result.success
        assert result.bindings == [{"?r": 30}]

    def test_type_mismatch_raises(self, relationship_db: FactDatabase):
        query = (
            DBQuery()
            .where("astrid.relationships.?other.reputation!?r")
            .where("lt ?other 10")
        )

        with pytest.raises(NodeTypeError):
            query.run(relationship_db)

    def test_too_many_parts_raises(self, relationship_db: FactDatabase):
        query = DBQuery().where("astrid.relationships.?other").where("eq ?other a.b")

        with pytest.raises(UnrecognizedClauseError, match="too many parts"):
            query.run(relationship_db)


# ---------------------------------------------------------------------------
# Tests: DBQuery
# ---------------------------------------------------------------------------


class TestDBQuery:
    """Query immutability, short-circuiting and clause shapes."""

    def test_empty_query_on_empty_db(self, db: FactDatabase):
        result = DBQuery().run(db)

        assert result.success
        assert result.bindings == []

    def test_where_returns_new_query(self):
        base = DBQuery()
        extended = base.where("a.b")

        assert base.clauses == ()
        assert extended.clauses == ("a.b",)
        assert extended is not base

    def test_short_circuit_skips_bad_clauses(self, db: FactDatabase):
        # The second clause would raise if it were evaluated
        result = DBQuery().where("missing.fact").where("bogus a b c d").run(db)
        assert not result.success

    @pytest.mark.parametrize("clause", ["maybe a.b", "a b c d", "foo ?x ?y"])
    def test_unrecognized_clause(self, db: FactDatabase, clause: str):
        with pytest.raises(UnrecognizedClauseError):
            DBQuery().where(clause).run(db)

    def test_literal_with_spaces_is_one_token(self, db: FactDatabase):
        db.insert("player.name![Toph Beifong]")

        result = DBQuery().where("player.name![Toph Beifong]").run(db)
        assert result.success

        result = DBQuery().where("player.name!?n").where("eq ?n [Toph Beifong]").run(db)
        assert result.bindings == [{"?n": "Toph Beifong"}]


class TestQueryResult:
    """limit_to_vars projection."""

    def test_limit_to_vars(self):
        result = QueryResult(True, [{"?a": 1, "?b": 2}, {"?a": 3, "?b": 4}])
        assert result.limit_to_vars(["?a"]).bindings == [{"?a": 1}, {"?a": 3}]

    def test_limit_to_no_vars(self):
        limited = QueryResult(True, [{"?a": 1}]).limit_to_vars([])
        assert limited.success
        assert limited.bindings == []

    def test_limit_failed_result(self):
        limited = QueryResult(False, []).limit_to_vars(["?a"])
        assert not limited.success
