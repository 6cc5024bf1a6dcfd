"""
Engine Core - Session state and deterministic rules resolution.

The engine is the runtime that:
1. Holds a session's GameState
2. Draws every die from an injectable DiceRoller
3. Resolves duality rolls, damage and adversary attacks
4. Runs the Hope / Fear / Stress / Armor economies
5. Manages features, equipment, inventory and domain cards
6. Renders the state as a fixed textual digest
"""

from .state import (
    GameState,
    PlayerState,
    GMState,
    SceneState,
    Resource,
    Thresholds,
    Experience,
    DomainCard,
    InventoryItem,
    Weapon,
    Armor,
    Equipment,
    Feature,
    FeatureCost,
    TierStep,
    TRAITS,
    make_key,
    create_default_game_state,
)
from .dice import DiceRoller, DiceExpression, DiceFormatError, parse_dice_expression
from .results import (
    OperationResult,
    RollActionResult,
    DamageRollResult,
    DamageResult,
    AdversaryAttackResult,
    FearSpendResult,
    DualityOutcome,
    ThresholdBand,
)
from .engine import GameEngine
from .projection import render_state

__all__ = [
    "GameState",
    "PlayerState",
    "GMState",
    "SceneState",
    "Resource",
    "Thresholds",
    "Experience",
    "DomainCard",
    "InventoryItem",
    "Weapon",
    "Armor",
    "Equipment",
    "Feature",
    "FeatureCost",
    "TierStep",
    "TRAITS",
    "make_key",
    "create_default_game_state",
    "DiceRoller",
    "DiceExpression",
    "DiceFormatError",
    "parse_dice_expression",
    "OperationResult",
    "RollActionResult",
    "DamageRollResult",
    "DamageResult",
    "AdversaryAttackResult",
    "FearSpendResult",
    "DualityOutcome",
    "ThresholdBand",
    "GameEngine",
    "render_state",
]
