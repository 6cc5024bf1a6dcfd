"""
Resource Economy - Clamping rules shared by every engine.

HP, Stress and Armor are bounded tracks, Hope has a floor but no
ceiling, Fear lives in [0, FEAR_CAP]. Helpers return the amount that
actually changed so callers can report real deltas rather than
requested ones.
"""

from __future__ import annotations

from .state import Resource, PlayerState, GMState


FEAR_CAP = 12


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def set_resource(resource: Resource, value: int) -> int:
    """Set a track's current value, clamped to [0, max]. Returns the delta."""
    old = resource.current
    resource.current = clamp(value, 0, resource.max)
    return resource.current - old


def adjust_resource(resource: Resource, delta: int) -> int:
    """Shift a track by delta, clamped. Returns the delta actually applied."""
    return set_resource(resource, resource.current + delta)


def set_resource_max(resource: Resource, new_max: int) -> None:
    """Change a track's maximum and re-clamp its current value."""
    resource.max = max(0, new_max)
    resource.current = clamp(resource.current, 0, resource.max)


def set_hope(player: PlayerState, value: int) -> int:
    old = player.hope
    player.hope = max(0, value)
    return player.hope - old


def adjust_hope(player: PlayerState, delta: int) -> int:
    return set_hope(player, player.hope + delta)


def adjust_fear(gm: GMState, delta: int) -> int:
    """Shift the GM's Fear pool, clamped to [0, FEAR_CAP]."""
    old = gm.fear
    gm.fear = clamp(gm.fear + delta, 0, FEAR_CAP)
    return gm.fear - old


def adjust_gold(player: PlayerState, delta: int) -> int:
    old = player.gold
    player.gold = max(0, player.gold + delta)
    return player.gold - old


def describe_change(label: str, old: int, new: int) -> str:
    return f"{label}: {old}→{new}"
