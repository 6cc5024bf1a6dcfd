"""
Tool Catalog - Typed arguments and handlers for every engine operation.

The orchestration bridge calls operations by name with a JSON object.
Each tool has:
- name: the operation name the LLM sees
- description: what the LLM is told the tool does
- args: a pydantic model (or a discriminated union of sub-commands)
  validating the JSON object at the boundary
- handler: maps validated arguments onto a GameEngine call

Argument objects use camelCase on the wire ("weaponDice", "isCritical");
snake_case names are accepted as well.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..engine_core.dice import parse_dice_expression
from ..engine_core.engine import GameEngine
from ..engine_core.state import (
    TRAITS,
    InventoryItem,
    Weapon,
    Armor,
    DomainCard,
    Feature,
    FeatureCost,
    TierStep,
    Thresholds,
)


class ToolArgs(BaseModel):
    """Base class for all tool arguments."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def engine_kwargs(self) -> dict[str, Any]:
        """Arguments as engine keyword arguments, omitting unset optionals."""
        return self.model_dump(exclude_none=True)


def _check_dice(value: Optional[str]) -> Optional[str]:
    if value is not None:
        parse_dice_expression(value)
    return value


# =============================================================================
# Definitions carried inside sub-commands
# =============================================================================

class ThresholdsInput(ToolArgs):
    major: Annotated[int, Field(ge=1)]
    severe: Annotated[int, Field(ge=2)]

    @model_validator(mode="after")
    def _ordered(self):
        if self.major >= self.severe:
            raise ValueError("major threshold must be below severe threshold")
        return self

    def to_thresholds(self) -> Thresholds:
        return Thresholds(major=self.major, severe=self.severe)


class ItemInput(ToolArgs):
    """An inventory item. A bare string is accepted as the item name."""

    name: Annotated[str, Field(min_length=1)]
    description: str = ""
    quantity: Annotated[int, Field(ge=1)] = 1
    effect: Optional[str] = None
    effect_value: Optional[Union[int, str]] = None

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("effect_value")
    @classmethod
    def _dice_or_int(cls, value):
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            _check_dice(value)
        return value

    def to_item(self) -> InventoryItem:
        return InventoryItem(
            name=self.name,
            description=self.description,
            quantity=self.quantity,
            effect=self.effect,
            effect_value=self.effect_value,
        )


class WeaponInput(ToolArgs):
    name: Annotated[str, Field(min_length=1)]
    damage: str = "1d6"
    trait: str = "strength"
    range: str = "melee"

    @field_validator("damage")
    @classmethod
    def _damage_is_dice(cls, value: str) -> str:
        return _check_dice(value)

    def to_weapon(self) -> Weapon:
        return Weapon(name=self.name, damage=self.damage, trait=self.trait.lower(), range=self.range)


class ArmorInput(ToolArgs):
    name: Annotated[str, Field(min_length=1)]
    thresholds: ThresholdsInput
    armor_score: Annotated[int, Field(ge=0)] = 3
    evasion_bonus: int = 0

    def to_armor(self) -> Armor:
        return Armor(
            name=self.name,
            thresholds=self.thresholds.to_thresholds(),
            armor_score=self.armor_score,
            evasion_bonus=self.evasion_bonus,
        )


class DomainCardInput(ToolArgs):
    name: Annotated[str, Field(min_length=1)]
    type: str = "ability"
    level: Annotated[int, Field(ge=1)] = 1
    description: str = ""

    def to_card(self) -> DomainCard:
        return DomainCard(name=self.name, type=self.type, level=self.level, description=self.description)


class TierStepInput(ToolArgs):
    tier: Annotated[int, Field(ge=1)] = 1
    damage_dice: Annotated[int, Field(ge=1)] = 1


class FeatureCostInput(ToolArgs):
    resource: Literal["hope", "stress", "armor"] = "hope"
    amount: Annotated[int, Field(ge=0)] = 1


class FeatureInput(ToolArgs):
    name: Annotated[str, Field(min_length=1)]
    description: str = ""
    kind: Literal["passive", "activated", "sneak_attack"] = "passive"
    damage_dice: Annotated[int, Field(ge=1)] = 1
    level_progression: dict[Annotated[int, Field(ge=1)], TierStepInput] = Field(default_factory=dict)
    cost: Optional[FeatureCostInput] = None
    bonus: dict[
        Literal["evasion", "proficiency", "majorThreshold", "severeThreshold"],
        Annotated[int, Field(ge=0)],
    ] = Field(default_factory=dict)
    deactivate_on: list[Literal["hit", "rest"]] = Field(default_factory=list)

    def to_feature(self) -> Feature:
        return Feature(
            name=self.name,
            description=self.description,
            kind=self.kind,
            damage_dice=self.damage_dice,
            level_progression={
                level: TierStep(tier=step.tier, damage_dice=step.damage_dice)
                for level, step in self.level_progression.items()
            },
            cost=FeatureCost(resource=self.cost.resource, amount=self.cost.amount) if self.cost else None,
            bonus=dict(self.bonus),
            deactivate_on=list(dict.fromkeys(self.deactivate_on)),
        )


# =============================================================================
# Flat tool arguments
# =============================================================================

class EmptyArgs(ToolArgs):
    """Arguments for tools that take none."""


class UpdatePlayerArgs(ToolArgs):
    """Arguments for update_player."""

    hp: Optional[int] = None
    stress: Optional[int] = None
    hope: Optional[int] = None
    armor: Optional[int] = None
    add_condition: Optional[str] = None
    remove_condition: Optional[str] = None
    clear_all_conditions: bool = False
    mark_experience: Optional[str] = None
    add_experience: Optional[str] = None
    remove_experience: Optional[str] = None
    clear_stress: Optional[Annotated[int, Field(ge=0)]] = None
    name: Optional[str] = None
    level: Optional[Annotated[int, Field(ge=1)]] = None
    location: Optional[str] = None
    character_class: Optional[str] = Field(default=None, alias="class")
    background: Optional[str] = None
    evasion: Optional[int] = None
    proficiency: Optional[Annotated[int, Field(ge=1)]] = None
    max_hp: Optional[Annotated[int, Field(ge=0)]] = None
    max_stress: Optional[Annotated[int, Field(ge=0)]] = None
    max_armor: Optional[Annotated[int, Field(ge=0)]] = None
    major_threshold: Optional[Annotated[int, Field(ge=1)]] = None
    severe_threshold: Optional[Annotated[int, Field(ge=1)]] = None


class UpdateAttributesArgs(ToolArgs):
    """Arguments for update_attributes: any subset of the six traits."""

    agility: Optional[int] = None
    strength: Optional[int] = None
    finesse: Optional[int] = None
    instinct: Optional[int] = None
    presence: Optional[int] = None
    knowledge: Optional[int] = None

    def values(self) -> dict[str, int]:
        data = self.model_dump(exclude_none=True)
        return {trait: data[trait] for trait in TRAITS if trait in data}


class RollActionArgs(ToolArgs):
    """Arguments for roll_action."""

    trait: str
    difficulty: int
    modifier: int = 0
    experience_bonus: Annotated[int, Field(ge=0)] = 0
    advantage: Annotated[int, Field(ge=0)] = 0
    disadvantage: Annotated[int, Field(ge=0)] = 0
    use_experience: Optional[str] = None

    @field_validator("trait")
    @classmethod
    def _normalize_trait(cls, value: str) -> str:
        return value.strip().lower()


class RollDamageArgs(ToolArgs):
    """Arguments for roll_damage."""

    weapon_dice: Optional[str] = None
    proficiency: Optional[Annotated[int, Field(ge=1)]] = None
    is_critical: bool = False
    fear_bonus: Annotated[int, Field(ge=0)] = 0
    is_sneak_attack: bool = False
    ally_in_melee: bool = False


class DealDamageArgs(ToolArgs):
    """Arguments for deal_damage_to_player."""

    damage: Annotated[int, Field(ge=0)]
    damage_type: Literal["physical", "magic"] = "physical"
    can_use_armor: bool = True
    resistance: bool = False
    immunity: bool = False
    direct: bool = False


class AdversaryAttackArgs(ToolArgs):
    """Arguments for make_adversary_attack."""

    attack_bonus: int
    target_evasion: Optional[int] = None
    advantage: Annotated[int, Field(ge=0)] = 0
    disadvantage: Annotated[int, Field(ge=0)] = 0


class SpendFearArgs(ToolArgs):
    """Arguments for spend_fear."""

    amount: Annotated[int, Field(ge=1)]
    purpose: str
    description: str = ""


class RestArgs(ToolArgs):
    """Arguments for rest."""

    rest_type: Literal["short", "long"] = "short"


class UpdateSceneArgs(ToolArgs):
    """Arguments for update_scene."""

    scene: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    add_quest: Optional[str] = None
    complete_quest: Optional[str] = None
    remove_quest: Optional[str] = None


class TrackLanguageArgs(ToolArgs):
    """Arguments for track_language."""

    corrections: int = 0
    new_vocabulary: list[str] = Field(default_factory=list)


class RollDiceArgs(ToolArgs):
    """Arguments for roll_dice."""

    sides: Annotated[int, Field(ge=2, le=100)]
    count: Annotated[int, Field(ge=1, le=100)] = 1
    modifier: int = 0


# =============================================================================
# Sub-command arguments (discriminated on "action")
# =============================================================================

class AddItemCommand(ToolArgs):
    action: Literal["add"]
    item: ItemInput


class RemoveItemCommand(ToolArgs):
    action: Literal["remove"]
    name: str


class UseItemCommand(ToolArgs):
    action: Literal["use"]
    name: str


class GoldCommand(ToolArgs):
    action: Literal["gold"]
    amount: int


InventoryCommand = Annotated[
    Union[AddItemCommand, RemoveItemCommand, UseItemCommand, GoldCommand],
    Field(discriminator="action"),
]


class EquipWeaponCommand(ToolArgs):
    action: Literal["equip_weapon"]
    slot: Literal["primary", "secondary"] = "primary"
    weapon: Optional[WeaponInput] = None


class UnequipWeaponCommand(ToolArgs):
    action: Literal["unequip_weapon"]
    slot: Literal["primary", "secondary"] = "primary"


class EquipArmorCommand(ToolArgs):
    action: Literal["equip_armor"]
    armor: Optional[ArmorInput] = None


class UnequipArmorCommand(ToolArgs):
    action: Literal["unequip_armor"]


class SyncThresholdsCommand(ToolArgs):
    action: Literal["sync_thresholds"]


EquipmentCommand = Annotated[
    Union[
        EquipWeaponCommand,
        UnequipWeaponCommand,
        EquipArmorCommand,
        UnequipArmorCommand,
        SyncThresholdsCommand,
    ],
    Field(discriminator="action"),
]


class AddDomainCardCommand(ToolArgs):
    action: Literal["add"]
    card: DomainCardInput


class RemoveDomainCardCommand(ToolArgs):
    action: Literal["remove"]
    name: str


class UseDomainCardCommand(ToolArgs):
    action: Literal["use"]
    name: str


DomainCardCommand = Annotated[
    Union[AddDomainCardCommand, RemoveDomainCardCommand, UseDomainCardCommand],
    Field(discriminator="action"),
]


class AddFeatureCommand(ToolArgs):
    action: Literal["add"]
    feature: FeatureInput


class RemoveFeatureCommand(ToolArgs):
    action: Literal["remove"]
    name: str


class ActivateFeatureCommand(ToolArgs):
    action: Literal["activate"]
    name: str


class DeactivateFeatureCommand(ToolArgs):
    action: Literal["deactivate"]
    name: str


class RecomputeFeaturesCommand(ToolArgs):
    action: Literal["recompute"]


FeatureCommand = Annotated[
    Union[
        AddFeatureCommand,
        RemoveFeatureCommand,
        ActivateFeatureCommand,
        DeactivateFeatureCommand,
        RecomputeFeaturesCommand,
    ],
    Field(discriminator="action"),
]


# =============================================================================
# Registry
# =============================================================================

@dataclass
class Tool:
    """A named engine operation the bridge can invoke."""
    name: str
    description: str
    adapter: TypeAdapter
    handler: Callable[[GameEngine, Any], Any]

    def parse(self, arguments: dict[str, Any]) -> Any:
        """Validate raw JSON arguments. Raises pydantic.ValidationError."""
        return self.adapter.validate_python(arguments or {})

    def json_schema(self) -> dict[str, Any]:
        return self.adapter.json_schema(by_alias=True)


TOOL_REGISTRY: dict[str, Tool] = {}


def tool(name: str, description: str, args_type: Any):
    """Decorator to register a tool handler."""

    def wrap(fn: Callable[[GameEngine, Any], Any]):
        TOOL_REGISTRY[name] = Tool(
            name=name,
            description=description,
            adapter=TypeAdapter(args_type),
            handler=fn,
        )
        return fn

    return wrap


@tool("get_state", "Get the full current game state.", EmptyArgs)
def _get_state(engine: GameEngine, args: EmptyArgs):
    return engine.get_state()


@tool(
    "update_player",
    "Update player stats, conditions, experiences and character details. "
    "HP, stress and armor are clamped to [0, max].",
    UpdatePlayerArgs,
)
def _update_player(engine: GameEngine, args: UpdatePlayerArgs):
    return engine.update_player(**args.engine_kwargs())


@tool("update_attributes", "Set trait modifiers (agility, strength, finesse, instinct, presence, knowledge).", UpdateAttributesArgs)
def _update_attributes(engine: GameEngine, args: UpdateAttributesArgs):
    return engine.update_attributes(args.values())


@tool(
    "roll_action",
    "Make a duality roll (Hope d12 + Fear d12 + modifiers) against a difficulty. "
    "Applies Hope, Fear, Stress and spotlight changes.",
    RollActionArgs,
)
def _roll_action(engine: GameEngine, args: RollActionArgs):
    return engine.roll_action(**args.engine_kwargs())


@tool(
    "roll_damage",
    "Roll weapon damage: dice x proficiency + modifier, with critical, Fear bonus and sneak attack dice.",
    RollDamageArgs,
)
def _roll_damage(engine: GameEngine, args: RollDamageArgs):
    return engine.roll_damage(**args.engine_kwargs())


@tool(
    "deal_damage_to_player",
    "Apply damage to the player through thresholds, armor, resistance and immunity.",
    DealDamageArgs,
)
def _deal_damage(engine: GameEngine, args: DealDamageArgs):
    return engine.deal_damage_to_player(**args.engine_kwargs())


@tool(
    "make_adversary_attack",
    "Roll an adversary attack (d20 + attack bonus) against the player's evasion.",
    AdversaryAttackArgs,
)
def _adversary_attack(engine: GameEngine, args: AdversaryAttackArgs):
    return engine.make_adversary_attack(**args.engine_kwargs())


@tool(
    "spend_fear",
    "Spend GM Fear for spotlight, damage, advantage or an ability.",
    SpendFearArgs,
)
def _spend_fear(engine: GameEngine, args: SpendFearArgs):
    return engine.spend_fear(args.amount, args.purpose, args.description)


@tool(
    "update_features",
    "Add, remove, activate or deactivate a feature, or recompute level progression.",
    FeatureCommand,
)
def _update_features(engine: GameEngine, command):
    if isinstance(command, AddFeatureCommand):
        return engine.add_feature(command.feature.to_feature())
    if isinstance(command, RemoveFeatureCommand):
        return engine.remove_feature(command.name)
    if isinstance(command, ActivateFeatureCommand):
        return engine.activate_feature(command.name)
    if isinstance(command, DeactivateFeatureCommand):
        return engine.deactivate_feature(command.name)
    return engine.recompute_progression()


@tool(
    "update_equipment",
    "Equip or unequip weapons and armor, or sync armor thresholds onto the player.",
    EquipmentCommand,
)
def _update_equipment(engine: GameEngine, command):
    if isinstance(command, EquipWeaponCommand):
        weapon = command.weapon.to_weapon() if command.weapon else None
        return engine.equip_weapon(command.slot, weapon)
    if isinstance(command, UnequipWeaponCommand):
        return engine.unequip_weapon(command.slot)
    if isinstance(command, EquipArmorCommand):
        armor = command.armor.to_armor() if command.armor else None
        return engine.equip_armor(armor)
    if isinstance(command, UnequipArmorCommand):
        return engine.unequip_armor()
    return engine.sync_thresholds()


@tool("update_domain_cards", "Add, remove or use a domain card.", DomainCardCommand)
def _update_domain_cards(engine: GameEngine, command):
    if isinstance(command, AddDomainCardCommand):
        return engine.add_domain_card(command.card.to_card())
    if isinstance(command, RemoveDomainCardCommand):
        return engine.remove_domain_card(command.name)
    return engine.use_domain_card(command.name)


@tool(
    "update_inventory",
    "Add, remove or use an inventory item, or change gold.",
    InventoryCommand,
)
def _update_inventory(engine: GameEngine, command):
    if isinstance(command, AddItemCommand):
        return engine.add_item(command.item.to_item())
    if isinstance(command, RemoveItemCommand):
        return engine.remove_item(command.name)
    if isinstance(command, UseItemCommand):
        return engine.use_item(command.name)
    return engine.change_gold(command.amount)


@tool("rest", "Take a short or long rest.", RestArgs)
def _rest(engine: GameEngine, args: RestArgs):
    return engine.rest(args.rest_type)


@tool("update_scene", "Update the current scene, location and quest log.", UpdateSceneArgs)
def _update_scene(engine: GameEngine, args: UpdateSceneArgs):
    return engine.update_scene(**args.engine_kwargs())


@tool("track_language", "Track language-learning corrections and new vocabulary.", TrackLanguageArgs)
def _track_language(engine: GameEngine, args: TrackLanguageArgs):
    return engine.track_language(args.corrections, args.new_vocabulary)


@tool("roll_dice", "Roll dice with no rules attached (d4 to d100).", RollDiceArgs)
def _roll_dice(engine: GameEngine, args: RollDiceArgs):
    return engine.roll_dice(args.sides, args.count, args.modifier)


def get_tool(name: str) -> Tool | None:
    return TOOL_REGISTRY.get(name)
