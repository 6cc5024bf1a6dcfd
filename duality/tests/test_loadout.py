"""
Tests for inventory, equipment and domain cards.
"""

from ..engine_core.state import InventoryItem, Weapon, Armor, Thresholds, DomainCard


class TestInventory:
    """Tests for inventory mutators."""

    def test_add_and_remove(self, engine):
        engine.add_item(InventoryItem(name="Rope", quantity=2))
        result = engine.remove_item("rope")

        assert result.changes == ["item removed: Rope"]
        assert result.data["inventory"] == []

    def test_remove_unknown_is_noop(self, engine):
        result = engine.remove_item("Lantern")
        assert result.success
        assert result.changes == []

    def test_use_healing_potion(self, engine, rng):
        player = engine.state.player
        player.hp.current = 4
        engine.add_item(InventoryItem(name="Minor Health Potion", effect="heal", effect_value="1d4"))

        rng.push(3)
        result = engine.use_item("minor health potion")

        assert player.hp.current == 7
        assert player.inventory == []
        assert result.changes == ["hp: 4→7 (rolled [3])", "Minor Health Potion consumed"]

    def test_use_decrements_quantity(self, engine):
        player = engine.state.player
        player.stress.current = 4
        engine.add_item(InventoryItem(name="Calming Tea", quantity=2, effect="clearStress", effect_value=2))

        result = engine.use_item("Calming Tea")

        assert player.stress.current == 2
        assert player.find_item("Calming Tea").quantity == 1
        assert "Calming Tea consumed (1 left)" in result.changes

    def test_use_hope_and_armor_effects(self, engine):
        player = engine.state.player
        player.armor.current = 0
        engine.add_item(InventoryItem(name="Charm", effect="gainHope", effect_value=2))
        engine.add_item(InventoryItem(name="Patch Kit", effect="restoreArmor"))

        engine.use_item("Charm")
        engine.use_item("Patch Kit")

        assert player.hope == 2
        assert player.armor.current == 1

    def test_use_plain_item_consumes_it(self, engine):
        engine.add_item(InventoryItem(name="Torch"))
        result = engine.use_item("Torch")
        assert result.changes == ["Torch consumed"]

    def test_gold(self, engine):
        engine.change_gold(10)
        result = engine.change_gold(-15)

        assert result.data["gold"] == 0
        assert result.changes == ["gold: 10→0"]


class TestEquipment:
    """Tests for weapon and armor slots."""

    def test_equip_weapon(self, engine):
        result = engine.equip_weapon("primary", Weapon(name="Longsword", damage="1d10"))

        assert result.changes == ["primary weapon equipped: Longsword"]
        weapons = result.data["equipment"]["weapons"]
        assert weapons["primary"]["equipped"] is True
        assert weapons["secondary"] is None

    def test_unequip_weapon_keeps_it_in_slot(self, engine):
        engine.equip_weapon("secondary", Weapon(name="Dagger", damage="1d4"))
        engine.unequip_weapon("secondary")

        weapon = engine.state.player.equipment.weapons["secondary"]
        assert weapon.name == "Dagger"
        assert weapon.equipped is False

    def test_unknown_slot_is_noop(self, engine):
        assert engine.equip_weapon("tertiary", Weapon(name="Club")).changes == []

    def test_sync_thresholds_copies_armor(self, engine):
        player = engine.state.player
        armor = Armor(name="Chainmail", thresholds=Thresholds(major=7, severe=15), armor_score=4, evasion_bonus=-1)
        engine.equip_armor(armor)

        engine.sync_thresholds()

        assert player.thresholds.to_dict() == {"major": 7, "severe": 15}
        assert player.armor.max == 4
        assert player.evasion == 9

    def test_sync_is_idempotent(self, engine):
        player = engine.state.player
        engine.equip_armor(Armor(name="Leather", thresholds=Thresholds(6, 13), evasion_bonus=1))

        engine.sync_thresholds()
        second = engine.sync_thresholds()

        assert player.evasion == 11
        assert second.changes == []

    def test_unequip_armor_withdraws_evasion(self, engine):
        player = engine.state.player
        engine.equip_armor(Armor(name="Leather", thresholds=Thresholds(6, 13), evasion_bonus=1))
        engine.sync_thresholds()

        engine.unequip_armor()

        assert player.evasion == 10
        assert player.armor_evasion_applied == 0

    def test_sync_without_armor_is_noop(self, engine):
        assert engine.sync_thresholds().changes == []

    def test_swapping_armor(self, engine):
        player = engine.state.player
        engine.equip_armor(Armor(name="Leather", thresholds=Thresholds(6, 13), evasion_bonus=1))
        engine.sync_thresholds()
        engine.equip_armor(Armor(name="Plate", thresholds=Thresholds(9, 19), armor_score=5, evasion_bonus=-2))
        engine.sync_thresholds()

        assert player.equipment.armor.name == "Plate"
        assert player.evasion == 8
        assert player.thresholds.major == 9


class TestDomainCards:
    """Tests for the domain card loadout."""

    def test_add_use_remove(self, engine):
        card = DomainCard(name="Book of Ava", type="grimoire", level=1, description="Power Push")
        assert engine.add_domain_card(card).changes == ["domain card added: Book of Ava"]

        used = engine.use_domain_card("book of ava")
        assert used.changes == ["domain card used: Book of Ava - Power Push"]

        removed = engine.remove_domain_card("Book of Ava")
        assert removed.data["domain_cards"] == []

    def test_duplicate_add_is_noop(self, engine):
        engine.add_domain_card(DomainCard(name="Rune Ward"))
        result = engine.add_domain_card(DomainCard(name="rune ward"))

        assert result.changes == []
        assert len(result.data["domain_cards"]) == 1

    def test_cards_are_reusable(self, engine):
        engine.add_domain_card(DomainCard(name="Rune Ward"))
        engine.use_domain_card("Rune Ward")
        assert engine.use_domain_card("Rune Ward").changes
