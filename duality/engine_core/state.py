"""
Game State - The per-session entity graph (player, GM, scene).

Design principles:
- One GameState per session, owned by the session store
- Serializable: to_dict() yields the JSON snapshot handed to the bridge
- Deterministic: the same state always produces the same snapshot
- Lookups by stable key: display names are for presentation only
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
import re


TRAITS = ("agility", "strength", "finesse", "instinct", "presence", "knowledge")

# Stats a feature bonus may touch, by their wire name
BONUS_STATS = ("evasion", "proficiency", "majorThreshold", "severeThreshold")

WEAPON_SLOTS = ("primary", "secondary")


def make_key(name: str) -> str:
    """Normalize a display name into a stable lookup key."""
    return re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")


@dataclass
class Resource:
    """A bounded resource track (HP, Stress, Armor)."""
    current: int
    max: int

    def to_dict(self) -> dict[str, int]:
        return {"current": self.current, "max": self.max}


@dataclass
class Thresholds:
    """Damage thresholds separating minor/major/severe hits."""
    major: int = 5
    severe: int = 10

    def to_dict(self) -> dict[str, int]:
        return {"major": self.major, "severe": self.severe}


@dataclass
class Experience:
    """A named trait bonus, usable once until the next rest."""
    name: str
    used: bool = False

    @property
    def key(self) -> str:
        return make_key(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "used": self.used}


@dataclass
class DomainCard:
    """A domain card in the loadout. Cards have no usage limit."""
    name: str
    type: str = "ability"
    level: int = 1
    description: str = ""

    @property
    def key(self) -> str:
        return make_key(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "level": self.level,
            "description": self.description,
        }


@dataclass
class InventoryItem:
    """
    An inventory entry.

    Consumables declare an effect (clearStress, heal, gainHope,
    restoreArmor) and an effect_value that is either a literal
    integer or a dice expression such as "1d4".
    """
    name: str
    description: str = ""
    quantity: int = 1
    effect: str | None = None
    effect_value: int | str | None = None

    @property
    def key(self) -> str:
        return make_key(self.name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "quantity": self.quantity,
        }
        if self.effect is not None:
            data["effect"] = self.effect
            data["effectValue"] = self.effect_value
        return data


@dataclass
class Weapon:
    """A weapon that can occupy the primary or secondary slot."""
    name: str
    damage: str = "1d6"  # Dice expression
    trait: str = "strength"
    range: str = "melee"
    equipped: bool = False

    @property
    def key(self) -> str:
        return make_key(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "damage": self.damage,
            "trait": self.trait,
            "range": self.range,
            "equipped": self.equipped,
        }


@dataclass
class Armor:
    """Worn armor. Its stats reach the player only through a threshold sync."""
    name: str
    thresholds: Thresholds = field(default_factory=Thresholds)
    armor_score: int = 3
    evasion_bonus: int = 0
    equipped: bool = False

    @property
    def key(self) -> str:
        return make_key(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "thresholds": self.thresholds.to_dict(),
            "armorScore": self.armor_score,
            "evasionBonus": self.evasion_bonus,
            "equipped": self.equipped,
        }


@dataclass
class Equipment:
    """Weapon slots and the armor slot."""
    weapons: dict[str, Weapon | None] = field(
        default_factory=lambda: {slot: None for slot in WEAPON_SLOTS}
    )
    armor: Armor | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "weapons": {
                slot: (weapon.to_dict() if weapon else None)
                for slot, weapon in self.weapons.items()
            },
            "armor": self.armor.to_dict() if self.armor else None,
        }


@dataclass
class TierStep:
    """One entry of a feature's level progression table."""
    tier: int = 1
    damage_dice: int = 1

    def to_dict(self) -> dict[str, int]:
        return {"tier": self.tier, "damageDice": self.damage_dice}


@dataclass
class FeatureCost:
    """Resource cost paid when a feature is activated."""
    resource: str = "hope"
    amount: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"resource": self.resource, "amount": self.amount}


@dataclass
class Feature:
    """
    A class/subclass/ancestry feature.

    Passive features only carry text (and optionally a progression
    table). Activated features move Inactive -> Active by paying their
    cost and applying their bonus once; they revert on deactivation or
    on one of their deactivate_on triggers ("hit", "rest").
    """
    name: str
    description: str = ""
    kind: str = "passive"  # passive, activated, sneak_attack
    active: bool = False
    tier: int = 1
    damage_dice: int = 1
    level_progression: dict[int, TierStep] = field(default_factory=dict)
    cost: FeatureCost | None = None
    bonus: dict[str, int] = field(default_factory=dict)
    deactivate_on: list[str] = field(default_factory=list)
    applied_bonus: dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return make_key(self.name)

    @property
    def is_sneak_attack(self) -> bool:
        return self.kind == "sneak_attack" or self.key == "sneak_attack"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
            "active": self.active,
            "tier": self.tier,
            "damageDice": self.damage_dice,
        }
        if self.level_progression:
            data["levelProgression"] = {
                str(level): step.to_dict()
                for level, step in sorted(self.level_progression.items())
            }
        if self.cost:
            data["cost"] = self.cost.to_dict()
        if self.bonus:
            data["bonus"] = dict(self.bonus)
        if self.deactivate_on:
            data["deactivateOn"] = list(self.deactivate_on)
        if self.applied_bonus:
            data["appliedBonus"] = dict(self.applied_bonus)
        return data


@dataclass
class PlayerState:
    """
    The single player character of a session.

    Invariants maintained by the engine:
    - 0 <= current <= max for hp, stress and armor
    - hope >= 0, gold >= 0, level >= 1, proficiency >= 1
    - thresholds.major < thresholds.severe
    """
    name: str = ""
    level: int = 1
    hp: Resource = field(default_factory=lambda: Resource(current=10, max=10))
    stress: Resource = field(default_factory=lambda: Resource(current=5, max=5))
    hope: int = 0
    armor: Resource = field(default_factory=lambda: Resource(current=3, max=3))
    evasion: int = 10
    thresholds: Thresholds = field(default_factory=Thresholds)
    proficiency: int = 1
    conditions: list[str] = field(default_factory=list)
    experiences: list[Experience] = field(default_factory=list)
    attributes: dict[str, int] = field(default_factory=lambda: {t: 0 for t in TRAITS})
    domain_cards: list[DomainCard] = field(default_factory=list)
    inventory: list[InventoryItem] = field(default_factory=list)
    equipment: Equipment = field(default_factory=Equipment)
    features: list[Feature] = field(default_factory=list)
    character_class: str = ""
    background: str = ""
    current_location: str = ""
    gold: int = 0

    # Evasion currently contributed by synced armor
    armor_evasion_applied: int = 0

    def find_feature(self, name: str) -> Feature | None:
        key = make_key(name)
        return next((f for f in self.features if f.key == key), None)

    def find_item(self, name: str) -> InventoryItem | None:
        key = make_key(name)
        return next((i for i in self.inventory if i.key == key), None)

    def find_domain_card(self, name: str) -> DomainCard | None:
        key = make_key(name)
        return next((c for c in self.domain_cards if c.key == key), None)

    def find_experience(self, name: str) -> Experience | None:
        key = make_key(name)
        return next((e for e in self.experiences if e.key == key), None)

    def sneak_attack_feature(self) -> Feature | None:
        return next((f for f in self.features if f.is_sneak_attack), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "level": self.level,
            "hp": self.hp.to_dict(),
            "stress": self.stress.to_dict(),
            "hope": self.hope,
            "armor": self.armor.to_dict(),
            "evasion": self.evasion,
            "thresholds": self.thresholds.to_dict(),
            "proficiency": self.proficiency,
            "conditions": list(self.conditions),
            "experiences": [e.to_dict() for e in self.experiences],
            "attributes": dict(self.attributes),
            "domain_cards": [c.to_dict() for c in self.domain_cards],
            "inventory": [i.to_dict() for i in self.inventory],
            "equipment": self.equipment.to_dict(),
            "features": [f.to_dict() for f in self.features],
            "class": self.character_class,
            "background": self.background,
            "currentLocation": self.current_location,
            "gold": self.gold,
        }


@dataclass
class GMState:
    """GM-side resources."""
    fear: int = 0
    has_spotlight: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"fear": self.fear, "hasSpotlight": self.has_spotlight}


@dataclass
class SceneState:
    """The current scene and quest log."""
    current_scene: str = ""
    scene_description: str = ""
    active_quests: list[str] = field(default_factory=list)
    completed_quests: list[str] = field(default_factory=list)
    countdowns: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentScene": self.current_scene,
            "sceneDescription": self.scene_description,
            "activeQuests": list(self.active_quests),
            "completedQuests": list(self.completed_quests),
            "countdowns": deepcopy(self.countdowns),
        }


@dataclass
class GameState:
    """
    Complete state of one session.

    This is the canonical state that the engine operates on.
    All state changes go through GameEngine operations.
    """
    session_id: str
    player: PlayerState = field(default_factory=PlayerState)
    gm: GMState = field(default_factory=GMState)
    scene: SceneState = field(default_factory=SceneState)

    # Language-tutoring counters, carried but not interpreted by the rules
    language_corrections: int = 0
    vocabulary_introduced: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player.to_dict(),
            "gm": self.gm.to_dict(),
            "scene": self.scene.to_dict(),
            "sessionId": self.session_id,
            "languageCorrections": self.language_corrections,
            "vocabularyIntroduced": list(self.vocabulary_introduced),
        }

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)


def create_default_game_state(session_id: str) -> GameState:
    """Create the state a session starts with on first reference."""
    return GameState(session_id=session_id)
