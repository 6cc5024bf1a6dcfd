"""
State Projection - Fixed textual digest of a GameState for prompts.

render_state() is a pure function of the state. Section order and
headers are part of the contract with prompt consumers:

    ## PLAYER, ## ATTRIBUTES, ## BACKGROUND, ## EQUIPMENT, ## FEATURES,
    ## DOMAIN CARDS, ## INVENTORY, ## EXPERIENCES, ## CONDITIONS,
    ## LOCATION, ## GM, ## SCENE
"""

from __future__ import annotations

from .state import GameState, PlayerState, TRAITS
from .resources import FEAR_CAP


SECTION_HEADERS = (
    "PLAYER",
    "ATTRIBUTES",
    "BACKGROUND",
    "EQUIPMENT",
    "FEATURES",
    "DOMAIN CARDS",
    "INVENTORY",
    "EXPERIENCES",
    "CONDITIONS",
    "LOCATION",
    "GM",
    "SCENE",
)

NONE_TEXT = "(none)"


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def _player_lines(player: PlayerState) -> list[str]:
    name = player.name or "(unnamed)"
    class_text = f" | Class: {player.character_class}" if player.character_class else ""
    return [
        f"Name: {name} | Level: {player.level}{class_text}",
        f"HP: {player.hp.current}/{player.hp.max} | "
        f"Stress: {player.stress.current}/{player.stress.max} | "
        f"Hope: {player.hope} | "
        f"Armor: {player.armor.current}/{player.armor.max}",
        f"Evasion: {player.evasion} | "
        f"Thresholds: Major {player.thresholds.major} / Severe {player.thresholds.severe} | "
        f"Proficiency: {player.proficiency} | Gold: {player.gold}",
    ]


def _attribute_lines(player: PlayerState) -> list[str]:
    traits = list(TRAITS) + sorted(t for t in player.attributes if t not in TRAITS)
    return [" | ".join(
        f"{trait.capitalize()} {_signed(player.attributes.get(trait, 0))}"
        for trait in traits
    )]


def _equipment_lines(player: PlayerState) -> list[str]:
    lines = []
    for slot, weapon in player.equipment.weapons.items():
        if weapon is None:
            lines.append(f"{slot.capitalize()}: {NONE_TEXT}")
            continue
        status = "equipped" if weapon.equipped else "carried"
        lines.append(
            f"{slot.capitalize()}: {weapon.name} ({weapon.damage}, "
            f"{weapon.trait}, {weapon.range}, {status})"
        )
    armor = player.equipment.armor
    if armor is None:
        lines.append(f"Armor: {NONE_TEXT}")
    else:
        status = "equipped" if armor.equipped else "carried"
        lines.append(
            f"Armor: {armor.name} (score {armor.armor_score}, "
            f"thresholds {armor.thresholds.major}/{armor.thresholds.severe}, "
            f"evasion {_signed(armor.evasion_bonus)}, {status})"
        )
    return lines


def _feature_lines(player: PlayerState) -> list[str]:
    lines = []
    for feature in player.features:
        status = "ACTIVE" if feature.active else "inactive"
        line = f"- {feature.name} [{status}, tier {feature.tier}]"
        if feature.is_sneak_attack or feature.level_progression:
            line += f" {feature.damage_dice}d6"
        if feature.description:
            line += f": {feature.description}"
        lines.append(line)
    return lines or [NONE_TEXT]


def _domain_card_lines(player: PlayerState) -> list[str]:
    lines = [
        f"- {card.name} (level {card.level} {card.type})"
        + (f": {card.description}" if card.description else "")
        for card in player.domain_cards
    ]
    return lines or [NONE_TEXT]


def _inventory_lines(player: PlayerState) -> list[str]:
    lines = []
    for item in player.inventory:
        line = f"- {item.name}"
        if item.quantity > 1:
            line += f" x{item.quantity}"
        if item.effect:
            line += f" [{item.effect} {item.effect_value}]"
        if item.description:
            line += f": {item.description}"
        lines.append(line)
    return lines or [NONE_TEXT]


def _experience_lines(player: PlayerState) -> list[str]:
    lines = [
        f"- {exp.name}" + (" (used)" if exp.used else "")
        for exp in player.experiences
    ]
    return lines or [NONE_TEXT]


def render_state(state: GameState) -> str:
    """Render the full state as a section-headed digest."""
    player = state.player
    scene = state.scene

    sections = {
        "PLAYER": _player_lines(player),
        "ATTRIBUTES": _attribute_lines(player),
        "BACKGROUND": [player.background or NONE_TEXT],
        "EQUIPMENT": _equipment_lines(player),
        "FEATURES": _feature_lines(player),
        "DOMAIN CARDS": _domain_card_lines(player),
        "INVENTORY": _inventory_lines(player),
        "EXPERIENCES": _experience_lines(player),
        "CONDITIONS": [", ".join(player.conditions) or NONE_TEXT],
        "LOCATION": [player.current_location or NONE_TEXT],
        "GM": [
            f"Fear: {state.gm.fear}/{FEAR_CAP} | "
            f"Spotlight: {'GM' if state.gm.has_spotlight else 'Player'}"
        ],
        "SCENE": [
            f"Scene: {scene.current_scene or NONE_TEXT}",
            f"Description: {scene.scene_description or NONE_TEXT}",
            f"Active quests: {', '.join(scene.active_quests) or NONE_TEXT}",
        ],
    }

    blocks = []
    for header in SECTION_HEADERS:
        blocks.append("\n".join([f"## {header}"] + sections[header]))
    return "\n\n".join(blocks)
