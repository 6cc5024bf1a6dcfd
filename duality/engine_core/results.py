"""
Operation Results - Serializable summaries returned by engine operations.

Engines mutate the GameState they are given and return one of these.
Results never hold a reference to the state itself; to_dict() gives
the JSON object the bridge narrates from.

Result kinds:
- OperationResult: generic mutator result (success, change log, sub-state)
- RollActionResult: duality roll outcome and resource deltas
- DamageRollResult: weapon damage roll with breakdown
- DamageResult: HP loss after thresholds and armor
- AdversaryAttackResult: d20 attack against evasion
- FearSpendResult: GM Fear spend
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DualityOutcome(str, Enum):
    """Outcome tags of a duality roll."""
    CRIT_SUCCESS = "critSuccess"
    SUCCESS_HOPE = "successHope"
    SUCCESS_FEAR = "successFear"
    FAILURE_HOPE = "failureHope"
    FAILURE_FEAR = "failureFear"


class ThresholdBand(str, Enum):
    """Damage bands and the HP each one costs."""
    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"
    SEVERE = "severe"
    MASSIVE = "massive"

    @property
    def hp_loss(self) -> int:
        return {
            ThresholdBand.NONE: 0,
            ThresholdBand.MINOR: 1,
            ThresholdBand.MAJOR: 2,
            ThresholdBand.SEVERE: 3,
            ThresholdBand.MASSIVE: 4,
        }[self]


@dataclass
class OperationResult:
    """
    Result of a state-mutating operation.

    Contains:
    - Whether the operation succeeded (soft failures set success=False)
    - Human-readable change log
    - Updated sub-state, keyed by its wire name
    - Optional note explaining a soft failure
    """
    success: bool = True
    changes: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    note: str | None = None

    @classmethod
    def failure(cls, note: str, data: dict[str, Any] | None = None) -> OperationResult:
        """Create a soft-failure result. No state was changed."""
        return cls(success=False, note=note, data=data or {})

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "changes": list(self.changes)}
        if self.note:
            result["note"] = self.note
        result.update(self.data)
        return result


@dataclass
class RollActionResult:
    """Outcome of a duality roll."""
    result: DualityOutcome
    succeeded: bool
    total: int
    hope_die: int
    fear_die: int
    modifier_roll: int
    attribute_modifier: int
    hope_gained: int = 0
    fear_gained: int = 0
    stress_cleared: int = 0
    spotlight_to_gm: bool = False
    experience_used: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result.value,
            "succeeded": self.succeeded,
            "total": self.total,
            "rolls": {"hope": self.hope_die, "fear": self.fear_die},
            "modifierRoll": self.modifier_roll,
            "attributeModifier": self.attribute_modifier,
            "hopeGained": self.hope_gained,
            "fearGained": self.fear_gained,
            "stressCleared": self.stress_cleared,
            "spotlightToGM": self.spotlight_to_gm,
            "experienceUsed": self.experience_used,
        }


@dataclass
class DamageRollResult:
    """Weapon damage roll."""
    total: int
    rolls: list[int]
    max_damage: int = 0
    fear_bonus_rolls: list[int] = field(default_factory=list)
    sneak_attack_rolls: list[int] = field(default_factory=list)
    breakdown: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "rolls": list(self.rolls),
            "maxDamage": self.max_damage,
            "fearBonusRolls": list(self.fear_bonus_rolls),
            "sneakAttackRolls": list(self.sneak_attack_rolls),
            "breakdown": self.breakdown,
        }


@dataclass
class DamageResult:
    """Damage applied to the player."""
    hp_lost: int
    armor_used: bool
    damage_after_reduction: int
    new_vulnerable: bool
    death_check: bool
    threshold_reached: ThresholdBand
    damage_type: str = "physical"
    deactivated_features: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hpLost": self.hp_lost,
            "armorUsed": self.armor_used,
            "damageAfterReduction": self.damage_after_reduction,
            "newVulnerable": self.new_vulnerable,
            "deathCheck": self.death_check,
            "thresholdReached": self.threshold_reached.value,
            "damageType": self.damage_type,
            "deactivatedFeatures": list(self.deactivated_features),
        }


@dataclass
class AdversaryAttackResult:
    """An adversary's d20 attack."""
    hit: bool
    is_critical: bool
    attack_roll: int
    modifier_roll: int
    total: int
    target_evasion: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "hit": self.hit,
            "isCritical": self.is_critical,
            "attackRoll": self.attack_roll,
            "modifierRoll": self.modifier_roll,
            "total": self.total,
            "targetEvasion": self.target_evasion,
        }


@dataclass
class FearSpendResult:
    """GM Fear spend."""
    success: bool
    new_total: int
    effect: str
    spotlight_to_gm: bool = False
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "newTotal": self.new_total,
            "effect": self.effect,
            "spotlightToGM": self.spotlight_to_gm,
        }
        if self.description:
            result["description"] = self.description
        return result
