"""
Tests for the textual state digest.
"""

from ..engine_core.projection import render_state, SECTION_HEADERS
from ..engine_core.state import Feature, InventoryItem, Weapon


class TestRenderState:
    """Tests for render_state."""

    def test_headers_in_order(self, state):
        text = render_state(state)
        positions = [text.index(f"## {header}\n") for header in SECTION_HEADERS]
        assert positions == sorted(positions)
        assert text.startswith("## PLAYER\n")

    def test_empty_sections_say_none(self, state):
        text = render_state(state)
        assert "## INVENTORY\n(none)" in text
        assert "## CONDITIONS\n(none)" in text

    def test_reflects_state(self, state):
        player = state.player
        player.name = "Marlowe"
        player.hope = 4
        player.attributes["finesse"] = 2
        player.conditions.append("Hidden")
        player.inventory.append(InventoryItem(name="Rope", quantity=2))
        player.features.append(Feature(name="Sneak Attack", active=True, tier=2, damage_dice=2))
        player.equipment.weapons["primary"] = Weapon(name="Dagger", damage="1d8", trait="finesse", equipped=True)
        state.gm.fear = 3
        state.gm.has_spotlight = True

        text = render_state(state)

        assert "Name: Marlowe | Level: 1" in text
        assert "Hope: 4" in text
        assert "Finesse +2" in text
        assert "- Rope x2" in text
        assert "- Sneak Attack [ACTIVE, tier 2] 2d6" in text
        assert "Primary: Dagger (1d8, finesse, melee, equipped)" in text
        assert "Fear: 3/12 | Spotlight: GM" in text
        assert "## CONDITIONS\nHidden" in text

    def test_pure(self, state):
        before = state.to_dict()
        assert render_state(state) == render_state(state)
        assert state.to_dict() == before
