"""Tests for stats and the modifier pipeline."""

import pytest

from tdrs import (
    ModifierCollection,
    Stat,
    StatManager,
    StatModifier,
    StatModifierData,
    StatModifierType,
    StatNotFoundError,
    StatSchema,
)
from tdrs.stats import round_significant


def _flat(value: float, **kwargs) -> StatModifier:
    return StatModifier("Test", value, StatModifierType.FLAT, **kwargs)


def _percent_add(value: float, **kwargs) -> StatModifier:
    return StatModifier("Test", value, StatModifierType.PERCENT_ADD, **kwargs)


def _percent_multiply(value: float, **kwargs) -> StatModifier:
    return StatModifier("Test", value, StatModifierType.PERCENT_MULTIPLY, **kwargs)


# =============================================================================
# PIPELINE
# =============================================================================


class TestStatPipeline:
    """Final value computation."""

    def test_base_value_only(self):
        assert Stat(25, 0, 100).value == 25

    def test_percent_multiply_chain(self):
        """25 * 0.85 * 1.5 = 31.875, kept to three significant figures."""
        stat = Stat(25, 0, 100)
        stat.add_modifier(_percent_multiply(-0.15))
        stat.add_modifier(_percent_multiply(0.50))
        assert stat.value == pytest.approx(31.9)

    def test_flat_modifiers_add(self):
        stat = Stat(10, 0, 100)
        stat.add_modifier(_flat(5))
        stat.add_modifier(_flat(-2))
        assert stat.value == 13

    def test_consecutive_percent_add_is_summed(self):
        """Two +50% modifiers double the value rather than compounding."""
        stat = Stat(100, 0, 1000)
        stat.add_modifier(_percent_add(0.5))
        stat.add_modifier(_percent_add(0.5))
        assert stat.value == 200

    def test_percent_multiply_applies_after_percent_add(self):
        stat = Stat(100, 0, 1000)
        stat.add_modifier(_percent_multiply(0.5))
        stat.add_modifier(_percent_add(0.5))
        stat.add_modifier(_percent_add(0.5))
        assert stat.value == 300

    def test_flat_applies_before_percent_regardless_of_insertion(self):
        stat = Stat(10, 0, 100)
        stat.add_modifier(_percent_multiply(1.0))
        stat.add_modifier(_flat(10))
        assert stat.value == 40

    def test_custom_order_overrides_type(self):
        stat = Stat(10, 0, 100)
        stat.add_modifier(_percent_multiply(1.0))
        stat.add_modifier(_flat(10, order=400))
        assert stat.value == 30

    def test_clamped_to_range(self):
        stat = Stat(90, 0, 100)
        stat.add_modifier(_flat(50))
        assert stat.value == 100

        stat.add_modifier(_flat(-500))
        assert stat.value == 0

    def test_rounded_to_significant_figures(self):
        assert Stat(1 / 3, 0, 1).value == 0.333


class TestDiscreteStats:
    """Discrete stats are clamped and floored."""

    def test_floor(self):
        assert Stat(45.5, 0, 100, is_discrete=True).value == 45

    def test_clamp_then_floor(self):
        assert Stat(123, 0, 50, is_discrete=True).value == 50

    def test_modifiers_floor_result(self):
        stat = Stat(10, 0, 100, is_discrete=True)
        stat.add_modifier(_percent_multiply(0.15))
        assert stat.value == 11


class TestNormalized:
    """Value scaled to the stat's range."""

    def test_midpoint(self):
        assert Stat(50, 0, 100).normalized == 0.5

    def test_negative_range(self):
        assert Stat(0, -100, 100).normalized == 0.5

    def test_zero_width_range(self):
        assert Stat(5, 5, 5).normalized == 0.0

    def test_follows_modifiers(self):
        stat = Stat(25, 0, 100)
        stat.add_modifier(_flat(25))
        assert stat.normalized == 0.5


class TestStatDefaults:
    """Unbounded stats fall back to configured limits."""

    def test_default_range(self):
        stat = Stat(0)
        assert stat.min_value == -999999
        assert stat.max_value == 999999

    def test_range_from_environment(self, monkeypatch):
        monkeypatch.setenv("TDRS_STAT_MAX_VALUE", "10")
        from tdrs import get_settings

        get_settings.cache_clear()
        stat = Stat(50)
        assert stat.max_value == 10
        assert stat.value == 10

    def test_precision_from_environment(self, monkeypatch):
        monkeypatch.setenv("TDRS_STAT_ROUND_PRECISION", "5")
        from tdrs import get_settings

        get_settings.cache_clear()
        assert Stat(1 / 3, 0, 1).value == 0.33333


# =============================================================================
# MODIFIER MANAGEMENT
# =============================================================================


class TestModifierManagement:
    """Adding and removing modifiers."""

    def test_remove_by_identity(self):
        stat = Stat(10, 0, 100)
        first = _flat(5)
        second = _flat(5)
        stat.add_modifier(first)
        stat.add_modifier(second)

        assert stat.remove_modifier(first)
        assert stat.value == 15
        assert stat.modifiers == [second]

    def test_remove_missing_returns_false(self):
        assert not Stat(10, 0, 100).remove_modifier(_flat(5))

    def test_remove_from_source(self):
        source = object()
        stat = Stat(10, 0, 100)
        stat.add_modifier(_flat(5, source=source))
        stat.add_modifier(_flat(3, source=source))
        stat.add_modifier(_flat(1))

        assert stat.remove_modifiers_from_source(source)
        assert stat.value == 11
        assert not stat.remove_modifiers_from_source(source)

    def test_base_value_change_recomputes(self):
        stat = Stat(10, 0, 100)
        stat.add_modifier(_flat(5))
        stat.base_value = 20
        assert stat.value == 25


class TestObservers:
    """Change callbacks."""

    def test_called_with_new_value(self):
        stat = Stat(10, 0, 100)
        seen = []
        stat.subscribe(seen.append)

        stat.add_modifier(_flat(5))
        stat.base_value = 0

        assert seen == [15, 5]

    def test_unsubscribe(self):
        stat = Stat(10, 0, 100)
        seen = []
        unsubscribe = stat.subscribe(seen.append)
        unsubscribe()

        stat.add_modifier(_flat(5))
        assert seen == []


# =============================================================================
# MODIFIERS AND SCHEMAS
# =============================================================================


class TestStatModifier:
    """Modifier durations and descriptions."""

    def test_permanent_never_expires(self):
        modifier = _flat(1)
        for _ in range(10):
            modifier.update()
        assert not modifier.has_expired()

    def test_duration_counts_down(self):
        modifier = _flat(1, duration=2)
        modifier.update()
        assert not modifier.has_expired()
        modifier.update()
        assert modifier.has_expired()

    def test_default_order_is_type(self):
        assert _percent_add(0.1).order == 200

    @pytest.mark.parametrize(
        "modifier,expected",
        [
            (StatModifier("Romance", 5, StatModifierType.FLAT), "Add 5 to Romance"),
            (StatModifier("Romance", 0.25, StatModifierType.PERCENT_ADD), "Add 25% to Romance"),
            (
                StatModifier("Romance", 0.5, StatModifierType.PERCENT_MULTIPLY),
                "Scales Romance to 150%",
            ),
        ],
    )
    def test_description(self, modifier, expected):
        assert modifier.description == expected

    def test_data_creates_sourced_instance(self):
        source = object()
        modifier = StatModifierData("Romance", 12).create_instance(source=source, duration=3)
        assert modifier.source is source
        assert modifier.duration == 3
        assert modifier.modifier_type is StatModifierType.FLAT


class TestStatManager:
    """Named stat lookup."""

    def test_schema_creates_stat(self):
        manager = StatManager()
        manager.add_stat("Confidence", StatSchema("Confidence", 50, 0, 100).create_stat())
        assert manager.has_stat("Confidence")
        assert manager.get_stat("Confidence").value == 50
        assert list(manager) == ["Confidence"]

    def test_missing_stat_raises(self):
        with pytest.raises(StatNotFoundError):
            StatManager().get_stat("Missing")

    def test_missing_stat_is_key_error(self):
        with pytest.raises(KeyError):
            StatManager().get_stat("Missing")

    def test_remove_modifiers_from_source_across_stats(self):
        source = object()
        manager = StatManager()
        manager.add_stat("A", Stat(0, 0, 100))
        manager.add_stat("B", Stat(0, 0, 100))
        manager.get_stat("A").add_modifier(StatModifier("A", 5, StatModifierType.FLAT, source=source))
        manager.get_stat("B").add_modifier(StatModifier("B", 5, StatModifierType.FLAT, source=source))

        assert manager.remove_modifiers_from_source(source)
        assert manager.get_stat("A").value == 0
        assert manager.get_stat("B").value == 0


class TestRoundSignificant:
    @pytest.mark.parametrize(
        "value,digits,expected",
        [
            (31.875, 3, 31.9),
            (0.0, 3, 0.0),
            (123456, 3, 123000),
            (-0.0012345, 2, -0.0012),
        ],
    )
    def test_round(self, value, digits, expected):
        assert round_significant(value, digits) == pytest.approx(expected)


class TestModifierCollection:
    """Entity-level modifier bookkeeping."""

    def test_add_has_remove(self):
        collection = ModifierCollection()
        modifier = _flat(1)
        collection.add(modifier)

        assert collection.has(modifier)
        assert len(collection) == 1
        assert collection.remove(modifier)
        assert not collection.has(modifier)
        assert not collection.remove(modifier)

    def test_remove_all_from_source(self):
        source = object()
        collection = ModifierCollection()
        sourced = [_flat(1, source=source), _flat(2, source=source)]
        for modifier in sourced:
            collection.add(modifier)
        collection.add(_flat(3))

        assert collection.remove_all_from_source(source) == sourced
        assert len(collection) == 1

    def test_iteration_tolerates_removal(self):
        collection = ModifierCollection()
        modifiers = [_flat(1), _flat(2)]
        for modifier in modifiers:
            collection.add(modifier)

        for modifier in collection:
            collection.remove(modifier)

        assert len(collection) == 0
