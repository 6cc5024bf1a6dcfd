"""
Loadout - Inventory, equipment and domain card mutators.

All lookups go through stable keys. Naming something that is not
there is a silent no-op: the operation succeeds with nothing in the
change log, so a mistaken name never breaks the narrative.
"""

from __future__ import annotations

from .dice import DiceRoller
from .state import PlayerState, InventoryItem, Weapon, Armor, DomainCard, WEAPON_SLOTS
from .resources import adjust_resource, adjust_hope, adjust_gold, set_resource_max, describe_change


CONSUMABLE_EFFECTS = ("clearStress", "heal", "gainHope", "restoreArmor")


# =============================================================================
# Inventory
# =============================================================================

def add_item(player: PlayerState, item: InventoryItem) -> list[str]:
    player.inventory.append(item)
    suffix = f" x{item.quantity}" if item.quantity > 1 else ""
    return [f"item added: {item.name}{suffix}"]


def remove_item(player: PlayerState, name: str) -> list[str]:
    item = player.find_item(name)
    if item is None:
        return []
    player.inventory.remove(item)
    return [f"item removed: {item.name}"]


def _consume(player: PlayerState, item: InventoryItem) -> str:
    item.quantity -= 1
    if item.quantity <= 0:
        player.inventory.remove(item)
        return f"{item.name} consumed"
    return f"{item.name} consumed ({item.quantity} left)"


def use_item(player: PlayerState, roller: DiceRoller, name: str) -> list[str]:
    """
    Use an inventory item: apply its effect, then consume one of it.

    The effect value may be a literal integer or a dice expression.
    """
    item = player.find_item(name)
    if item is None:
        return []

    changes = []
    if item.effect in CONSUMABLE_EFFECTS:
        amount, rolls = roller.resolve_amount(
            item.effect_value if item.effect_value is not None else 1
        )
        rolled = f" (rolled {rolls})" if rolls else ""

        if item.effect == "clearStress":
            old = player.stress.current
            adjust_resource(player.stress, -amount)
            changes.append(describe_change("stress", old, player.stress.current) + rolled)
        elif item.effect == "heal":
            old = player.hp.current
            adjust_resource(player.hp, amount)
            changes.append(describe_change("hp", old, player.hp.current) + rolled)
        elif item.effect == "gainHope":
            old = player.hope
            adjust_hope(player, amount)
            changes.append(describe_change("hope", old, player.hope) + rolled)
        elif item.effect == "restoreArmor":
            old = player.armor.current
            adjust_resource(player.armor, amount)
            changes.append(describe_change("armor", old, player.armor.current) + rolled)

    changes.append(_consume(player, item))
    return changes


def change_gold(player: PlayerState, delta: int) -> list[str]:
    old = player.gold
    adjust_gold(player, delta)
    if player.gold == old:
        return []
    return [describe_change("gold", old, player.gold)]


# =============================================================================
# Equipment
# =============================================================================

def equip_weapon(player: PlayerState, slot: str, weapon: Weapon | None = None) -> list[str]:
    """
    Equip the weapon in `slot`, replacing it first if a new one is given.
    """
    if slot not in WEAPON_SLOTS:
        return []
    if weapon is not None:
        player.equipment.weapons[slot] = weapon
    current = player.equipment.weapons.get(slot)
    if current is None or current.equipped:
        return []
    current.equipped = True
    return [f"{slot} weapon equipped: {current.name}"]


def unequip_weapon(player: PlayerState, slot: str) -> list[str]:
    current = player.equipment.weapons.get(slot)
    if current is None or not current.equipped:
        return []
    current.equipped = False
    return [f"{slot} weapon unequipped: {current.name}"]


def equip_armor(player: PlayerState, armor: Armor | None = None) -> list[str]:
    changes = []
    if armor is not None:
        if player.equipment.armor is not None and player.equipment.armor.equipped:
            changes.extend(unequip_armor(player))
        player.equipment.armor = armor
    current = player.equipment.armor
    if current is None or current.equipped:
        return changes
    current.equipped = True
    changes.append(f"armor equipped: {current.name}")
    return changes


def unequip_armor(player: PlayerState) -> list[str]:
    """Take armor off, withdrawing the evasion it contributed."""
    current = player.equipment.armor
    if current is None or not current.equipped:
        return []
    current.equipped = False
    changes = [f"armor unequipped: {current.name}"]
    if player.armor_evasion_applied:
        old = player.evasion
        player.evasion -= player.armor_evasion_applied
        player.armor_evasion_applied = 0
        changes.append(describe_change("evasion", old, player.evasion))
    return changes


def sync_thresholds(player: PlayerState) -> list[str]:
    """
    Copy the equipped armor's stats onto the player's live stats.

    Thresholds and armor score are copied. The evasion bonus replaces
    whatever a previous sync applied, so repeated syncs are idempotent.
    """
    armor = player.equipment.armor
    if armor is None or not armor.equipped:
        return []

    changes = []
    if player.thresholds.to_dict() != armor.thresholds.to_dict():
        player.thresholds.major = armor.thresholds.major
        player.thresholds.severe = armor.thresholds.severe
        changes.append(
            f"thresholds: major {armor.thresholds.major} / severe {armor.thresholds.severe}"
        )

    if player.armor.max != armor.armor_score:
        old = player.armor.max
        set_resource_max(player.armor, armor.armor_score)
        changes.append(describe_change("max armor", old, player.armor.max))

    if player.armor_evasion_applied != armor.evasion_bonus:
        old = player.evasion
        player.evasion += armor.evasion_bonus - player.armor_evasion_applied
        player.armor_evasion_applied = armor.evasion_bonus
        changes.append(describe_change("evasion", old, player.evasion))

    return changes


# =============================================================================
# Domain cards
# =============================================================================

def add_domain_card(player: PlayerState, card: DomainCard) -> list[str]:
    if player.find_domain_card(card.name) is not None:
        return []
    player.domain_cards.append(card)
    return [f"domain card added: {card.name}"]


def remove_domain_card(player: PlayerState, name: str) -> list[str]:
    card = player.find_domain_card(name)
    if card is None:
        return []
    player.domain_cards.remove(card)
    return [f"domain card removed: {card.name}"]


def use_domain_card(player: PlayerState, name: str) -> list[str]:
    """Domain cards can be used any number of times; nothing is marked."""
    card = player.find_domain_card(name)
    if card is None:
        return []
    text = f"domain card used: {card.name}"
    if card.description:
        text += f" - {card.description}"
    return [text]
