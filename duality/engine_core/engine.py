"""
Game Engine - One method per game mechanic, applied to one GameState.

The engine is the single point of rules-driven mutation:
- It mutates the GameState it was constructed with, in place
- It draws every random number from its DiceRoller
- It returns serializable results and never keeps a copy of the state

Atomicity across failures is the caller's job: the session service runs
each operation against a clone and only commits it on success.

Failure modes:
- Invalid input (bad dice expression, crossing thresholds) raises ValueError
- Unaffordable costs (Fear, Hope) return a result with success=False
- Unknown names (items, features, cards, experiences) are silent no-ops
"""

from __future__ import annotations
import logging

from .dice import DiceRoller, RollResult, DiceExpression
from .state import GameState, PlayerState, Experience, Feature, InventoryItem, Weapon, Armor, DomainCard
from .resources import (
    set_resource,
    adjust_resource,
    set_resource_max,
    set_hope,
    adjust_hope,
    adjust_fear,
    describe_change,
)
from .results import (
    OperationResult,
    RollActionResult,
    DamageRollResult,
    DamageResult,
    AdversaryAttackResult,
    FearSpendResult,
    DualityOutcome,
)
from . import combat, features as lifecycle, loadout
from .progression import apply_progression, apply_feature_progression


logger = logging.getLogger(__name__)


FEAR_PURPOSE_EFFECTS = {
    "spotlight": "spotlight_kept",
    "damage": "damage_bonus",
    "advantage": "advantage_gained",
    "ability": "ability_activated",
}

REST_TYPES = ("short", "long")


class GameEngine:
    """
    Rules engine bound to one session's state.

    Usage:
        engine = GameEngine(state, DiceRoller(random.Random(7)))
        result = engine.roll_action(trait="agility", difficulty=12)
        print(result.to_dict())
    """

    def __init__(self, state: GameState, roller: DiceRoller | None = None):
        self.state = state
        self.roller = roller or DiceRoller()

    @property
    def player(self) -> PlayerState:
        return self.state.player

    # =========================================================================
    # Snapshot
    # =========================================================================

    def get_state(self) -> dict:
        """Full JSON snapshot of the session."""
        return self.state.to_dict()

    def _player_summary(self) -> dict:
        player = self.player
        return {
            "level": player.level,
            "hp": player.hp.to_dict(),
            "stress": player.stress.to_dict(),
            "hope": player.hope,
            "armor": player.armor.to_dict(),
            "evasion": player.evasion,
            "thresholds": player.thresholds.to_dict(),
            "proficiency": player.proficiency,
            "conditions": list(player.conditions),
            "experiences": [e.to_dict() for e in player.experiences],
        }

    # =========================================================================
    # Player
    # =========================================================================

    def update_player(
        self,
        *,
        hp: int | None = None,
        stress: int | None = None,
        hope: int | None = None,
        armor: int | None = None,
        add_condition: str | None = None,
        remove_condition: str | None = None,
        clear_all_conditions: bool = False,
        mark_experience: str | None = None,
        add_experience: str | None = None,
        remove_experience: str | None = None,
        clear_stress: int | None = None,
        name: str | None = None,
        level: int | None = None,
        location: str | None = None,
        character_class: str | None = None,
        background: str | None = None,
        evasion: int | None = None,
        proficiency: int | None = None,
        max_hp: int | None = None,
        max_stress: int | None = None,
        max_armor: int | None = None,
        major_threshold: int | None = None,
        severe_threshold: int | None = None,
    ) -> OperationResult:
        """
        Set player stats and bookkeeping fields.

        Maximums are applied before current values, so setting both in
        one call clamps against the new maximum. A level change
        recomputes feature progression.

        Raises:
            ValueError: If the update would break a player invariant.
        """
        player = self.player

        new_major = player.thresholds.major if major_threshold is None else major_threshold
        new_severe = player.thresholds.severe if severe_threshold is None else severe_threshold
        if new_major >= new_severe:
            raise ValueError(
                f"Major threshold ({new_major}) must be below severe threshold ({new_severe})"
            )
        if level is not None and level < 1:
            raise ValueError(f"Level must be at least 1, got {level}")
        if proficiency is not None and proficiency < 1:
            raise ValueError(f"Proficiency must be at least 1, got {proficiency}")

        changes: list[str] = []

        for label, resource, new_max in (
            ("max hp", player.hp, max_hp),
            ("max stress", player.stress, max_stress),
            ("max armor", player.armor, max_armor),
        ):
            if new_max is not None:
                set_resource_max(resource, new_max)
                changes.append(f"{label}: {resource.max}")

        for label, resource, value in (
            ("hp", player.hp, hp),
            ("stress", player.stress, stress),
            ("armor", player.armor, armor),
        ):
            if value is not None:
                old = resource.current
                set_resource(resource, value)
                changes.append(describe_change(label, old, resource.current))

        if hope is not None:
            old = player.hope
            set_hope(player, hope)
            changes.append(describe_change("hope", old, player.hope))

        if add_condition and add_condition not in player.conditions:
            player.conditions.append(add_condition)
            changes.append(f"condition added: {add_condition}")

        if remove_condition and remove_condition in player.conditions:
            player.conditions.remove(remove_condition)
            changes.append(f"condition removed: {remove_condition}")

        if clear_all_conditions and player.conditions:
            cleared = ", ".join(player.conditions)
            player.conditions = []
            changes.append(f"all conditions cleared: {cleared}")

        if add_experience and player.find_experience(add_experience) is None:
            player.experiences.append(Experience(name=add_experience))
            changes.append(f"experience added: {add_experience}")

        if remove_experience:
            exp = player.find_experience(remove_experience)
            if exp is not None:
                player.experiences.remove(exp)
                changes.append(f"experience removed: {exp.name}")

        if mark_experience:
            exp = player.find_experience(mark_experience)
            if exp is not None:
                exp.used = True
                changes.append(f"experience marked as used: {exp.name}")

        if clear_stress:
            old = player.stress.current
            adjust_resource(player.stress, -clear_stress)
            changes.append(f"stress cleared: {old}→{player.stress.current}")

        if name:
            player.name = name
            changes.append(f"name set: {name}")

        if character_class:
            player.character_class = character_class
            changes.append(f"class set: {character_class}")

        if background:
            player.background = background
            changes.append("background set")

        if location:
            player.current_location = location
            changes.append(f"location: {location}")

        if evasion is not None:
            player.evasion = evasion
            changes.append(f"evasion: {evasion}")

        if proficiency is not None:
            player.proficiency = proficiency
            changes.append(f"proficiency: {proficiency}")

        if major_threshold is not None:
            player.thresholds.major = major_threshold
            changes.append(f"major threshold: {major_threshold}")

        if severe_threshold is not None:
            player.thresholds.severe = severe_threshold
            changes.append(f"severe threshold: {severe_threshold}")

        if level is not None and level != player.level:
            old = player.level
            player.level = level
            changes.append(describe_change("level", old, level))
            changes.extend(apply_progression(player))

        return OperationResult(changes=changes, data={"newState": self._player_summary()})

    def update_attributes(self, values: dict[str, int]) -> OperationResult:
        """Set trait modifiers. Trait names are case-normalized."""
        changes = []
        for trait, value in values.items():
            key = trait.lower()
            old = self.player.attributes.get(key, 0)
            self.player.attributes[key] = value
            if old != value:
                changes.append(describe_change(key, old, value))
        return OperationResult(changes=changes, data={"attributes": dict(self.player.attributes)})

    # =========================================================================
    # Action resolution
    # =========================================================================

    def roll_action(
        self,
        trait: str,
        difficulty: int,
        modifier: int = 0,
        experience_bonus: int = 0,
        advantage: int = 0,
        disadvantage: int = 0,
        use_experience: str | None = None,
    ) -> RollActionResult:
        """
        Make a duality roll: Hope d12 + Fear d12 + modifiers vs difficulty.

        Advantage and disadvantage each roll their own best-of-batch d6;
        they are not cancelled against each other first.
        """
        player, gm = self.player, self.state.gm

        hope_die = self.roller.roll_die(12)
        fear_die = self.roller.roll_die(12)

        attribute_modifier = player.attributes.get(trait.lower(), 0)
        modifier_roll = (
            self.roller.modifier_roll(advantage)
            + self.roller.modifier_roll(-disadvantage)
        )
        total = (
            hope_die + fear_die + modifier + experience_bonus
            + modifier_roll + attribute_modifier
        )
        succeeded = total >= difficulty

        hope_gained = fear_gained = stress_cleared = 0
        if hope_die == fear_die:
            outcome = DualityOutcome.CRIT_SUCCESS
            hope_gained = adjust_hope(player, 1)
            fear_gained = adjust_fear(gm, 1)
            stress_cleared = -adjust_resource(player.stress, -1)
            spotlight_to_gm = False
        elif succeeded and hope_die > fear_die:
            outcome = DualityOutcome.SUCCESS_HOPE
            hope_gained = adjust_hope(player, 1)
            spotlight_to_gm = False
        elif succeeded:
            outcome = DualityOutcome.SUCCESS_FEAR
            fear_gained = adjust_fear(gm, 1)
            spotlight_to_gm = True
        elif hope_die > fear_die:
            outcome = DualityOutcome.FAILURE_HOPE
            hope_gained = adjust_hope(player, 1)
            spotlight_to_gm = True
        else:
            outcome = DualityOutcome.FAILURE_FEAR
            fear_gained = adjust_fear(gm, 1)
            spotlight_to_gm = True

        gm.has_spotlight = spotlight_to_gm

        experience_used = None
        if use_experience and experience_bonus > 0:
            exp = player.find_experience(use_experience)
            if exp is not None and not exp.used:
                exp.used = True
                experience_used = exp.name

        logger.debug(
            "Duality roll %s: hope=%d fear=%d total=%d vs %d",
            outcome.value, hope_die, fear_die, total, difficulty,
        )

        return RollActionResult(
            result=outcome,
            succeeded=succeeded,
            total=total,
            hope_die=hope_die,
            fear_die=fear_die,
            modifier_roll=modifier_roll,
            attribute_modifier=attribute_modifier,
            hope_gained=hope_gained,
            fear_gained=fear_gained,
            stress_cleared=stress_cleared,
            spotlight_to_gm=spotlight_to_gm,
            experience_used=experience_used,
        )

    # =========================================================================
    # Combat
    # =========================================================================

    def roll_damage(
        self,
        weapon_dice: str | None = None,
        proficiency: int | None = None,
        is_critical: bool = False,
        fear_bonus: int = 0,
        is_sneak_attack: bool = False,
        ally_in_melee: bool = False,
    ) -> DamageRollResult:
        return combat.roll_damage(
            self.player,
            self.roller,
            weapon_dice=weapon_dice,
            proficiency=proficiency,
            is_critical=is_critical,
            fear_bonus=fear_bonus,
            is_sneak_attack=is_sneak_attack,
            ally_in_melee=ally_in_melee,
        )

    def deal_damage_to_player(
        self,
        damage: int,
        damage_type: str = "physical",
        can_use_armor: bool = True,
        resistance: bool = False,
        immunity: bool = False,
        direct: bool = False,
    ) -> DamageResult:
        return combat.deal_damage(
            self.player,
            damage,
            damage_type=damage_type,
            can_use_armor=can_use_armor,
            resistance=resistance,
            immunity=immunity,
            direct=direct,
        )

    def make_adversary_attack(
        self,
        attack_bonus: int,
        target_evasion: int | None = None,
        advantage: int = 0,
        disadvantage: int = 0,
    ) -> AdversaryAttackResult:
        """Adversary attack; targets the player's evasion unless told otherwise."""
        if target_evasion is None:
            target_evasion = self.player.evasion
        return combat.adversary_attack(
            self.roller,
            attack_bonus=attack_bonus,
            target_evasion=target_evasion,
            advantage=advantage,
            disadvantage=disadvantage,
        )

    # =========================================================================
    # Fear economy
    # =========================================================================

    def spend_fear(self, amount: int, purpose: str, description: str = "") -> FearSpendResult:
        """
        Spend GM Fear.

        Not enough Fear is a soft failure: nothing changes and the
        result carries effect="insufficient_fear".
        """
        gm = self.state.gm
        if gm.fear < amount:
            return FearSpendResult(
                success=False,
                new_total=gm.fear,
                effect="insufficient_fear",
                description=description,
            )

        adjust_fear(gm, -amount)
        if purpose == "spotlight":
            gm.has_spotlight = True
        effect = FEAR_PURPOSE_EFFECTS.get(purpose, purpose or "unknown")

        return FearSpendResult(
            success=True,
            new_total=gm.fear,
            effect=effect,
            spotlight_to_gm=purpose == "spotlight",
            description=description,
        )

    # =========================================================================
    # Features
    # =========================================================================

    def _features_result(self, changes: list[str], note: str | None = None, success: bool = True) -> OperationResult:
        return OperationResult(
            success=success,
            changes=changes,
            note=note,
            data={
                "features": [f.to_dict() for f in self.player.features],
                "newState": self._player_summary(),
            },
        )

    def add_feature(self, feature: Feature) -> OperationResult:
        if self.player.find_feature(feature.name) is not None:
            return self._features_result([])
        self.player.features.append(feature)
        changes = [f"feature added: {feature.name}"]
        change = apply_feature_progression(feature, self.player.level)
        if change:
            changes.append(change)
        return self._features_result(changes)

    def remove_feature(self, name: str) -> OperationResult:
        feature = self.player.find_feature(name)
        if feature is None:
            return self._features_result([])
        changes = []
        outcome = lifecycle.deactivate(self.player, feature, reason="removed")
        if outcome.changed:
            changes.append(outcome.message)
        self.player.features.remove(feature)
        changes.append(f"feature removed: {feature.name}")
        return self._features_result(changes)

    def activate_feature(self, name: str) -> OperationResult:
        feature = self.player.find_feature(name)
        if feature is None:
            return self._features_result([])
        outcome = lifecycle.activate(self.player, feature)
        if outcome.note:
            return self._features_result([], note=outcome.note, success=False)
        return self._features_result([outcome.message] if outcome.changed else [])

    def deactivate_feature(self, name: str) -> OperationResult:
        feature = self.player.find_feature(name)
        if feature is None:
            return self._features_result([])
        outcome = lifecycle.deactivate(self.player, feature)
        return self._features_result([outcome.message] if outcome.changed else [])

    def recompute_progression(self) -> OperationResult:
        return self._features_result(apply_progression(self.player))

    # =========================================================================
    # Inventory, equipment, domain cards
    # =========================================================================

    def _inventory_result(self, changes: list[str]) -> OperationResult:
        return OperationResult(
            changes=changes,
            data={
                "inventory": [i.to_dict() for i in self.player.inventory],
                "gold": self.player.gold,
            },
        )

    def add_item(self, item: InventoryItem) -> OperationResult:
        return self._inventory_result(loadout.add_item(self.player, item))

    def remove_item(self, name: str) -> OperationResult:
        return self._inventory_result(loadout.remove_item(self.player, name))

    def use_item(self, name: str) -> OperationResult:
        return self._inventory_result(loadout.use_item(self.player, self.roller, name))

    def change_gold(self, delta: int) -> OperationResult:
        return self._inventory_result(loadout.change_gold(self.player, delta))

    def _equipment_result(self, changes: list[str]) -> OperationResult:
        player = self.player
        return OperationResult(
            changes=changes,
            data={
                "equipment": player.equipment.to_dict(),
                "thresholds": player.thresholds.to_dict(),
                "armor": player.armor.to_dict(),
                "evasion": player.evasion,
            },
        )

    def equip_weapon(self, slot: str, weapon: Weapon | None = None) -> OperationResult:
        return self._equipment_result(loadout.equip_weapon(self.player, slot, weapon))

    def unequip_weapon(self, slot: str) -> OperationResult:
        return self._equipment_result(loadout.unequip_weapon(self.player, slot))

    def equip_armor(self, armor: Armor | None = None) -> OperationResult:
        return self._equipment_result(loadout.equip_armor(self.player, armor))

    def unequip_armor(self) -> OperationResult:
        return self._equipment_result(loadout.unequip_armor(self.player))

    def sync_thresholds(self) -> OperationResult:
        return self._equipment_result(loadout.sync_thresholds(self.player))

    def _domain_cards_result(self, changes: list[str]) -> OperationResult:
        return OperationResult(
            changes=changes,
            data={"domain_cards": [c.to_dict() for c in self.player.domain_cards]},
        )

    def add_domain_card(self, card: DomainCard) -> OperationResult:
        return self._domain_cards_result(loadout.add_domain_card(self.player, card))

    def remove_domain_card(self, name: str) -> OperationResult:
        return self._domain_cards_result(loadout.remove_domain_card(self.player, name))

    def use_domain_card(self, name: str) -> OperationResult:
        return self._domain_cards_result(loadout.use_domain_card(self.player, name))

    # =========================================================================
    # Rest
    # =========================================================================

    def rest(self, rest_type: str = "short") -> OperationResult:
        """
        Take a short or long rest.

        Short: repair all armor, clear 1d4 stress, GM gains 1d4 Fear.
        Long: restore HP and armor, clear all stress, GM gains 1d4+1 Fear.
        Both refresh experiences and end features that last until a rest.
        """
        if rest_type not in REST_TYPES:
            raise ValueError(f"Unknown rest type: {rest_type}")

        player, gm = self.player, self.state.gm
        changes = [f"{rest_type} rest"]

        if rest_type == "long":
            old = player.hp.current
            set_resource(player.hp, player.hp.max)
            changes.append(describe_change("hp", old, player.hp.current))

        old = player.armor.current
        set_resource(player.armor, player.armor.max)
        changes.append(describe_change("armor", old, player.armor.current))

        old = player.stress.current
        if rest_type == "long":
            set_resource(player.stress, 0)
        else:
            cleared = self.roller.roll_die(4)
            adjust_resource(player.stress, -cleared)
        changes.append(describe_change("stress", old, player.stress.current))

        fear_roll = self.roller.roll_die(4) + (1 if rest_type == "long" else 0)
        old = gm.fear
        fear_gained = adjust_fear(gm, fear_roll)
        changes.append(describe_change("fear", old, gm.fear))

        refreshed = [exp.name for exp in player.experiences if exp.used]
        for exp in player.experiences:
            exp.used = False
        if refreshed:
            changes.append(f"experiences refreshed: {', '.join(refreshed)}")

        deactivated = lifecycle.fire_trigger(player, lifecycle.TRIGGER_REST)
        changes.extend(f"{name} deactivated (rest)" for name in deactivated)

        return OperationResult(
            changes=changes,
            data={
                "newState": self._player_summary(),
                "fearGained": fear_gained,
                "deactivatedFeatures": deactivated,
            },
        )

    # =========================================================================
    # Scene and pass-through counters
    # =========================================================================

    def update_scene(
        self,
        scene: str | None = None,
        description: str | None = None,
        location: str | None = None,
        add_quest: str | None = None,
        complete_quest: str | None = None,
        remove_quest: str | None = None,
    ) -> OperationResult:
        state = self.state
        changes = []
        if scene:
            state.scene.current_scene = scene
            changes.append(f"scene: {scene}")
        if description:
            state.scene.scene_description = description
            changes.append("scene description updated")
        if location:
            state.player.current_location = location
            changes.append(f"location: {location}")
        if add_quest and add_quest not in state.scene.active_quests:
            state.scene.active_quests.append(add_quest)
            changes.append(f"quest added: {add_quest}")
        if complete_quest and complete_quest in state.scene.active_quests:
            state.scene.active_quests.remove(complete_quest)
            state.scene.completed_quests.append(complete_quest)
            changes.append(f"quest completed: {complete_quest}")
        if remove_quest and remove_quest in state.scene.active_quests:
            state.scene.active_quests.remove(remove_quest)
            changes.append(f"quest removed: {remove_quest}")
        return OperationResult(changes=changes, data={"scene": state.scene.to_dict()})

    def track_language(self, corrections: int = 0, new_vocabulary: list[str] | None = None) -> OperationResult:
        state = self.state
        changes = []
        if corrections:
            state.language_corrections = max(0, state.language_corrections + corrections)
            changes.append(f"language corrections: {state.language_corrections}")
        for word in new_vocabulary or []:
            if word not in state.vocabulary_introduced:
                state.vocabulary_introduced.append(word)
                changes.append(f"vocabulary introduced: {word}")
        return OperationResult(
            changes=changes,
            data={
                "languageCorrections": state.language_corrections,
                "vocabularyIntroduced": list(state.vocabulary_introduced),
            },
        )

    def roll_dice(self, sides: int, count: int = 1, modifier: int = 0) -> RollResult:
        """Free-form roll with no rules attached."""
        return self.roller.roll_expression(
            DiceExpression(count=count, sides=sides, modifier=modifier)
        )
