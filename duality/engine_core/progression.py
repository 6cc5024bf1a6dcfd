"""
Progression - Level-gated tiers for features with a progression table.

A feature's level_progression is a sparse mapping
required-level -> TierStep. The step in effect is the one with the
highest required level not above the character's level; below every
key the feature sits at tier 1 with one bonus die.
"""

from __future__ import annotations

from .state import PlayerState, Feature, TierStep


def resolve_tier(level_progression: dict[int, TierStep], level: int) -> TierStep:
    """Pick the step for `level` from a progression table."""
    qualifying = [required for required in level_progression if required <= level]
    if not qualifying:
        return TierStep(tier=1, damage_dice=1)
    return level_progression[max(qualifying)]


def apply_feature_progression(feature: Feature, level: int) -> str | None:
    """
    Bring one feature in line with its table.

    Returns a change-log line, or None when nothing changed.
    """
    if not feature.level_progression:
        return None

    step = resolve_tier(feature.level_progression, level)
    if step.tier == feature.tier and step.damage_dice == feature.damage_dice:
        return None

    old_tier = feature.tier
    feature.tier = step.tier
    feature.damage_dice = step.damage_dice
    return (
        f"{feature.name}: tier {old_tier}→{step.tier} "
        f"({step.damage_dice} bonus dice)"
    )


def apply_progression(player: PlayerState) -> list[str]:
    """Recompute every feature with a progression table for the current level."""
    changes = []
    for feature in player.features:
        change = apply_feature_progression(feature, player.level)
        if change:
            changes.append(change)
    return changes
