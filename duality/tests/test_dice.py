"""
Tests for dice primitives.

Tests:
- Dice expression parsing
- Advantage/disadvantage d6 collapse
- Literal vs rolled amounts
- Seeded reproducibility
"""

import random

import pytest

from ..engine_core.dice import (
    DiceExpression,
    DiceFormatError,
    DiceRoller,
    parse_dice_expression,
)


class TestParseDiceExpression:
    """Tests for parse_dice_expression."""

    def test_plain(self):
        assert parse_dice_expression("1d8") == DiceExpression(count=1, sides=8)

    def test_modifiers(self):
        assert parse_dice_expression("2d6+3") == DiceExpression(2, 6, 3)
        assert parse_dice_expression("1d10-1") == DiceExpression(1, 10, -1)

    def test_whitespace_and_case(self):
        """Spaces and upper-case D are tolerated."""
        assert parse_dice_expression(" 2D6 + 1 ") == DiceExpression(2, 6, 1)

    @pytest.mark.parametrize("text", ["d6", "1d", "abc", "1d6+", "2x6", "", "1d0", "0d6"])
    def test_invalid(self, text):
        with pytest.raises(DiceFormatError):
            parse_dice_expression(text)

    def test_non_string(self):
        with pytest.raises(DiceFormatError):
            parse_dice_expression(8)

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_dice_expression("nope")

    def test_str_round_trip(self):
        assert str(DiceExpression(1, 8, -1)) == "1d8-1"
        assert str(DiceExpression(3, 4, 2)) == "3d4+2"
        assert str(DiceExpression(1, 12)) == "1d12"

    def test_max_value(self):
        assert DiceExpression(2, 8, 5).max_value == 16


class TestDiceRoller:
    """Tests for DiceRoller."""

    def test_roll_expression(self, rng):
        rng.push(3, 5)
        result = DiceRoller(rng).roll_expression("2d6+1")

        assert result.rolls == [3, 5]
        assert result.total == 9
        assert result.to_dict() == {
            "expression": "2d6+1",
            "rolls": [3, 5],
            "modifier": 1,
            "total": 9,
        }

    def test_modifier_roll_advantage_keeps_highest(self, rng):
        rng.push(2, 5, 3)
        assert DiceRoller(rng).modifier_roll(3) == 5

    def test_modifier_roll_disadvantage_is_negative(self, rng):
        rng.push(4, 1)
        assert DiceRoller(rng).modifier_roll(-2) == -4

    def test_modifier_roll_zero_rolls_nothing(self, rng):
        assert DiceRoller(rng).modifier_roll(0) == 0
        assert rng.calls == []

    def test_resolve_literal(self, rng):
        roller = DiceRoller(rng)
        assert roller.resolve_amount(3) == (3, [])
        assert roller.resolve_amount("4") == (4, [])
        assert rng.calls == []

    def test_resolve_dice(self, rng):
        rng.push(2)
        assert DiceRoller(rng).resolve_amount("1d4") == (2, [2])

    def test_resolve_rejects_bool(self, rng):
        with pytest.raises(DiceFormatError):
            DiceRoller(rng).resolve_amount(True)

    def test_seeded_rolls_repeat(self):
        """Two rollers with the same seed produce the same sequence."""
        first = DiceRoller(random.Random(42)).roll_n(12, 20)
        second = DiceRoller(random.Random(42)).roll_n(12, 20)
        assert first == second
        assert all(1 <= r <= 12 for r in first)
