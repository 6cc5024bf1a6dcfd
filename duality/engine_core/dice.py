"""
Dice Primitives - Uniform draws, advantage d6s and dice expressions.

Every random draw in the engine goes through a DiceRoller. The roller
wraps an injectable random.Random so a session (or a test) can replay
the exact same sequence of rolls from a seed.

Supports:
- roll_n(sides, count): independent uniform draws in [1, sides]
- modifier_roll(net): best-of-batch d6, sign-matched to net
- Dice expressions: "1d8", "2d6+3", "1d10-1"
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random
import re


_DICE_PATTERN = re.compile(r"(\d+)d(\d+)(?:([+-])(\d+))?")


class DiceFormatError(ValueError):
    """Raised when a dice expression cannot be parsed."""


@dataclass(frozen=True)
class DiceExpression:
    """
    A parsed dice expression of the form <count>d<sides>[+/-<modifier>].

    Examples:
        DiceExpression(count=1, sides=8, modifier=2)   # "1d8+2"
        DiceExpression(count=2, sides=6)               # "2d6"
    """
    count: int
    sides: int
    modifier: int = 0

    @property
    def max_value(self) -> int:
        """Highest possible dice total, ignoring the modifier."""
        return self.count * self.sides

    def __str__(self) -> str:
        text = f"{self.count}d{self.sides}"
        if self.modifier > 0:
            text += f"+{self.modifier}"
        elif self.modifier < 0:
            text += str(self.modifier)
        return text


def parse_dice_expression(text: str) -> DiceExpression:
    """
    Parse a dice expression like '1d8+2'.

    Raises:
        DiceFormatError: If the text is not a dice expression or
            count/sides are below 1.
    """
    if not isinstance(text, str):
        raise DiceFormatError(f"Invalid dice format: {text!r}")

    cleaned = text.replace(" ", "").lower()
    match = _DICE_PATTERN.fullmatch(cleaned)
    if not match:
        raise DiceFormatError(f"Invalid dice format: {text}")

    count = int(match.group(1))
    sides = int(match.group(2))
    modifier = int(match.group(4) or 0)
    if match.group(3) == "-":
        modifier = -modifier

    if count < 1 or sides < 1:
        raise DiceFormatError(f"Dice count and sides must be at least 1: {text}")

    return DiceExpression(count=count, sides=sides, modifier=modifier)


@dataclass
class RollResult:
    """Outcome of rolling a dice expression."""
    expression: DiceExpression
    rolls: list[int] = field(default_factory=list)

    @property
    def dice_total(self) -> int:
        return sum(self.rolls)

    @property
    def total(self) -> int:
        return self.dice_total + self.expression.modifier

    def to_dict(self) -> dict:
        return {
            "expression": str(self.expression),
            "rolls": list(self.rolls),
            "modifier": self.expression.modifier,
            "total": self.total,
        }


class DiceRoller:
    """
    Source of every die roll in the engine.

    Usage:
        roller = DiceRoller(random.Random(42))
        hope, fear = roller.roll_n(12, 2)
        bonus = roller.modifier_roll(2)      # best of 2d6
        damage = roller.roll_expression("1d8+2")
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def roll_die(self, sides: int) -> int:
        """Roll a single die."""
        return self.rng.randint(1, sides)

    def roll_n(self, sides: int, count: int = 1) -> list[int]:
        """Roll `count` independent dice of `sides` faces."""
        return [self.roll_die(sides) for _ in range(count)]

    def modifier_roll(self, net: int) -> int:
        """
        Collapse advantage/disadvantage into one signed d6.

        Rolls |net| d6 and keeps the highest; positive net adds it,
        negative net subtracts it, zero rolls nothing.
        """
        if net == 0:
            return 0
        best = max(self.roll_n(6, abs(net)))
        return best if net > 0 else -best

    def roll_expression(self, expression: str | DiceExpression) -> RollResult:
        """Roll a dice expression (string or parsed)."""
        if isinstance(expression, str):
            expression = parse_dice_expression(expression)
        rolls = self.roll_n(expression.sides, expression.count)
        return RollResult(expression=expression, rolls=rolls)

    def resolve_amount(self, value: int | str) -> tuple[int, list[int]]:
        """
        Resolve a literal integer or a dice expression to an amount.

        Returns (amount, rolls). Rolls is empty for literals.
        """
        if isinstance(value, bool):
            raise DiceFormatError(f"Invalid amount: {value!r}")
        if isinstance(value, int):
            return value, []
        text = str(value).strip()
        if text.lstrip("-").isdigit():
            return int(text), []
        result = self.roll_expression(text)
        return result.total, result.rolls
