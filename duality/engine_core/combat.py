"""
Combat - Damage rolls, threshold damage and adversary attacks.

Damage roll:
    dice x proficiency + static modifier
    + dice maximum on a critical ("roll + guaranteed max", not double dice)
    + 1d4 per Fear spent for bonus damage
    + sneak attack d6s when a sneak attack feature applies

Damage taken:
    immunity -> nothing happens
    resistance -> halve (floor) before thresholds
    armor -> one slot per hit, drops the hit exactly one band
    band -> HP lost: massive 4, severe 3, major 2, minor 1, none 0
"""

from __future__ import annotations

from .dice import DiceRoller, parse_dice_expression, DiceFormatError
from .state import PlayerState, Thresholds
from .resources import set_resource
from .results import DamageRollResult, DamageResult, AdversaryAttackResult, ThresholdBand
from .features import fire_trigger, TRIGGER_HIT


def classify_damage(damage: int, thresholds: Thresholds) -> ThresholdBand:
    """Map a damage amount to its threshold band."""
    if damage >= thresholds.severe * 2:
        return ThresholdBand.MASSIVE
    if damage >= thresholds.severe:
        return ThresholdBand.SEVERE
    if damage >= thresholds.major:
        return ThresholdBand.MAJOR
    if damage > 0:
        return ThresholdBand.MINOR
    return ThresholdBand.NONE


def mitigate_with_armor(damage: int, thresholds: Thresholds) -> int:
    """
    Reduce a hit that reached at least the major threshold by one band.

    The reduction is fixed by the thresholds, not by how far the hit
    overshot them.
    """
    major, severe = thresholds.major, thresholds.severe
    if damage >= severe:
        return max(damage - (severe - major), major - 1)
    return max(damage - major, 0)


def roll_damage(
    player: PlayerState,
    roller: DiceRoller,
    weapon_dice: str | None = None,
    proficiency: int | None = None,
    is_critical: bool = False,
    fear_bonus: int = 0,
    is_sneak_attack: bool = False,
    ally_in_melee: bool = False,
) -> DamageRollResult:
    """
    Roll weapon damage.

    Falls back to the equipped primary weapon when no dice are given,
    and to the player's proficiency when none is given.

    Raises:
        DiceFormatError: If no usable dice expression is available.
    """
    if weapon_dice is None:
        weapon = player.equipment.weapons.get("primary")
        if weapon is None or not weapon.equipped:
            raise DiceFormatError("No weapon dice given and no primary weapon equipped")
        weapon_dice = weapon.damage
    expression = parse_dice_expression(weapon_dice)

    if proficiency is None:
        proficiency = player.proficiency

    rolls = roller.roll_n(expression.sides, expression.count)
    proficiency_damage = sum(rolls) * proficiency
    total = proficiency_damage + expression.modifier

    breakdown = f"{expression.count}d{expression.sides}×{proficiency}"
    if expression.modifier > 0:
        breakdown += f"+{expression.modifier}"
    elif expression.modifier < 0:
        breakdown += str(expression.modifier)

    max_damage = expression.max_value if is_critical else 0
    if max_damage:
        total += max_damage
        breakdown += f"+{max_damage}(max)"

    fear_bonus_rolls = roller.roll_n(4, fear_bonus) if fear_bonus > 0 else []
    if fear_bonus_rolls:
        total += sum(fear_bonus_rolls)
        breakdown += f"+{sum(fear_bonus_rolls)}(fear)"

    sneak_attack_rolls: list[int] = []
    sneak_feature = player.sneak_attack_feature()
    if sneak_feature and (is_sneak_attack or ally_in_melee):
        sneak_attack_rolls = roller.roll_n(6, max(1, sneak_feature.damage_dice))
        total += sum(sneak_attack_rolls)
        breakdown += f"+{sum(sneak_attack_rolls)}(sneak)"

    return DamageRollResult(
        total=total,
        rolls=rolls,
        max_damage=max_damage,
        fear_bonus_rolls=fear_bonus_rolls,
        sneak_attack_rolls=sneak_attack_rolls,
        breakdown=breakdown,
    )


def deal_damage(
    player: PlayerState,
    damage: int,
    damage_type: str = "physical",
    can_use_armor: bool = True,
    resistance: bool = False,
    immunity: bool = False,
    direct: bool = False,
) -> DamageResult:
    """Apply incoming damage to the player through thresholds and armor."""
    if immunity:
        return DamageResult(
            hp_lost=0,
            armor_used=False,
            damage_after_reduction=0,
            new_vulnerable=player.stress.current == 0,
            death_check=player.hp.current == 0,
            threshold_reached=ThresholdBand.NONE,
            damage_type=damage_type,
        )

    final_damage = max(0, damage)
    if resistance:
        final_damage = final_damage // 2

    armor_used = False
    if (
        can_use_armor
        and not direct
        and player.armor.current > 0
        and final_damage >= player.thresholds.major
    ):
        armor_used = True
        set_resource(player.armor, player.armor.current - 1)
        final_damage = mitigate_with_armor(final_damage, player.thresholds)

    band = classify_damage(final_damage, player.thresholds)
    hp_lost = band.hp_loss
    set_resource(player.hp, player.hp.current - hp_lost)

    deactivated = fire_trigger(player, TRIGGER_HIT) if hp_lost > 0 else []

    return DamageResult(
        hp_lost=hp_lost,
        armor_used=armor_used,
        damage_after_reduction=final_damage,
        new_vulnerable=player.stress.current == 0,
        death_check=player.hp.current == 0,
        threshold_reached=band,
        damage_type=damage_type,
        deactivated_features=deactivated,
    )


def adversary_attack(
    roller: DiceRoller,
    attack_bonus: int,
    target_evasion: int,
    advantage: int = 0,
    disadvantage: int = 0,
) -> AdversaryAttackResult:
    """
    Resolve an adversary attack: d20 + bonus against evasion.

    Advantage and disadvantage cancel before any d6 is rolled.
    A natural 20 always hits.
    """
    attack_roll = roller.roll_die(20)

    modifier_roll = 0
    if advantage > 0 or disadvantage > 0:
        modifier_roll = roller.modifier_roll(advantage - disadvantage)

    total = attack_roll + attack_bonus + modifier_roll
    is_critical = attack_roll == 20

    return AdversaryAttackResult(
        hit=total >= target_evasion or is_critical,
        is_critical=is_critical,
        attack_roll=attack_roll,
        modifier_roll=modifier_roll,
        total=total,
        target_evasion=target_evasion,
    )
