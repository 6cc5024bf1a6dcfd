"""
Feature Lifecycle - Inactive <-> Active state machine for features.

Transitions:
    Inactive --activate (cost paid)--> Active      bonus applied once
    Active   --deactivate----------->  Inactive    bonus reverted once
    Active   --trigger "hit"/"rest"->  Inactive    bonus reverted once

Activation is atomic: if the cost cannot be paid nothing changes and
the caller receives a note. Activating an Active feature, or
deactivating an Inactive one, is a no-op.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import PlayerState, Feature
from .resources import adjust_hope, set_resource


TRIGGER_HIT = "hit"
TRIGGER_REST = "rest"


@dataclass
class TransitionOutcome:
    """Result of a single lifecycle transition."""
    changed: bool
    message: str
    note: str | None = None


def _apply_stat_delta(player: PlayerState, stat: str, delta: int) -> None:
    if stat == "evasion":
        player.evasion += delta
    elif stat == "proficiency":
        player.proficiency += delta
    elif stat == "majorThreshold":
        player.thresholds.major += delta
    elif stat == "severeThreshold":
        player.thresholds.severe += delta


def _can_pay(player: PlayerState, feature: Feature) -> bool:
    cost = feature.cost
    if cost is None or cost.amount <= 0:
        return True
    if cost.resource == "hope":
        return player.hope >= cost.amount
    if cost.resource == "stress":
        return player.stress.current + cost.amount <= player.stress.max
    if cost.resource == "armor":
        return player.armor.current >= cost.amount
    return False


def _pay(player: PlayerState, feature: Feature) -> None:
    cost = feature.cost
    if cost is None or cost.amount <= 0:
        return
    if cost.resource == "hope":
        adjust_hope(player, -cost.amount)
    elif cost.resource == "stress":
        set_resource(player.stress, player.stress.current + cost.amount)
    elif cost.resource == "armor":
        set_resource(player.armor, player.armor.current - cost.amount)


def activate(player: PlayerState, feature: Feature) -> TransitionOutcome:
    """Move a feature to Active, paying its cost and applying its bonus."""
    if feature.active:
        return TransitionOutcome(False, f"{feature.name} already active")

    if not _can_pay(player, feature):
        cost = feature.cost
        return TransitionOutcome(
            False,
            f"{feature.name} not activated",
            note=f"insufficient_{cost.resource}",
        )

    _pay(player, feature)
    for stat, delta in feature.bonus.items():
        _apply_stat_delta(player, stat, delta)
    feature.applied_bonus = dict(feature.bonus)
    feature.active = True

    message = f"{feature.name} activated"
    if feature.cost and feature.cost.amount > 0:
        message += f" (spent {feature.cost.amount} {feature.cost.resource})"
    return TransitionOutcome(True, message)


def deactivate(player: PlayerState, feature: Feature, reason: str = "ended") -> TransitionOutcome:
    """Move a feature to Inactive, reverting exactly what activation applied."""
    if not feature.active:
        return TransitionOutcome(False, f"{feature.name} already inactive")

    for stat, delta in feature.applied_bonus.items():
        _apply_stat_delta(player, stat, -delta)
    feature.applied_bonus = {}
    feature.active = False
    return TransitionOutcome(True, f"{feature.name} deactivated ({reason})")


def fire_trigger(player: PlayerState, trigger: str) -> list[str]:
    """
    Deactivate every active feature subscribed to `trigger`.

    Returns the names of the features that were deactivated.
    """
    deactivated = []
    for feature in player.features:
        if feature.active and trigger in feature.deactivate_on:
            deactivate(player, feature, reason=trigger)
            deactivated.append(feature.name)
    return deactivated
