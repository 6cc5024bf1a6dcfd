"""
Tests for the tool service and tool argument validation.

Tests:
- Tool dispatch and result envelope
- Boundary validation (camelCase and snake_case, sub-commands)
- Atomicity on failure
- Tool definitions for LLM registration
"""

import pytest

from ..api.service import ToolArgumentError, UnknownToolError
from ..api.tools import TOOL_REGISTRY


EXPECTED_TOOLS = {
    "get_state",
    "update_player",
    "update_attributes",
    "roll_action",
    "roll_damage",
    "deal_damage_to_player",
    "make_adversary_attack",
    "spend_fear",
    "update_features",
    "update_equipment",
    "update_domain_cards",
    "update_inventory",
    "rest",
    "update_scene",
    "track_language",
    "roll_dice",
}


class TestToolCalls:
    """Tests for ToolService.call."""

    def test_registry_is_complete(self):
        assert set(TOOL_REGISTRY) == EXPECTED_TOOLS

    def test_unknown_session_is_provisioned(self, service):
        result = service.call("fresh", "get_state", {})

        assert result.output["player"]["hp"] == {"current": 10, "max": 10}
        assert result.state_changed is False
        assert "fresh" in service.list_sessions()

    def test_envelope(self, scripted_service, rng):
        rng.push(10, 4)
        result = scripted_service.call("s1", "roll_action", {"trait": "agility", "difficulty": 12})
        data = result.to_dict()

        assert data["name"] == "roll_action"
        assert data["parameters"] == {"trait": "agility", "difficulty": 12}
        assert data["output"]["result"] == "successHope"
        assert data["stateChanged"] is True
        assert data["gameState"]["player"]["hope"] == 1

    def test_camel_case_arguments(self, scripted_service, rng):
        rng.push(5)
        result = scripted_service.call(
            "s1", "roll_damage", {"weaponDice": "1d8", "proficiency": 2, "isCritical": True},
        )
        assert result.output["total"] == 18
        assert result.output["breakdown"] == "1d8×2+8(max)"

    def test_snake_case_arguments(self, scripted_service, rng):
        rng.push(5)
        result = scripted_service.call(
            "s1", "roll_damage", {"weapon_dice": "1d8", "is_critical": True},
        )
        assert result.output["total"] == 13

    def test_update_player_class_alias(self, service):
        result = service.call("s1", "update_player", {"class": "Rogue", "maxHp": 12, "hp": 12})

        player = result.game_state["player"]
        assert player["class"] == "Rogue"
        assert player["hp"] == {"current": 12, "max": 12}

    def test_sub_command_inventory(self, scripted_service, rng):
        scripted_service.call("s1", "update_player", {"hp": 4})
        scripted_service.call(
            "s1", "update_inventory",
            {"action": "add", "item": {"name": "Potion", "effect": "heal", "effectValue": "1d4"}},
        )
        rng.push(2)
        result = scripted_service.call("s1", "update_inventory", {"action": "use", "name": "potion"})

        assert result.output["inventory"] == []
        assert result.game_state["player"]["hp"]["current"] == 6

    def test_inventory_accepts_bare_item_name(self, service):
        result = service.call("s1", "update_inventory", {"action": "add", "item": "Rope"})
        assert result.output["inventory"][0]["name"] == "Rope"

    def test_sub_command_equipment(self, service):
        service.call("s1", "update_equipment", {
            "action": "equip_armor",
            "armor": {"name": "Leather", "thresholds": {"major": 6, "severe": 13}, "evasionBonus": 1},
        })
        result = service.call("s1", "update_equipment", {"action": "sync_thresholds"})

        assert result.output["thresholds"] == {"major": 6, "severe": 13}
        assert result.output["evasion"] == 11

    def test_sub_command_features(self, service):
        service.call("s1", "update_player", {"hope": 5})
        service.call("s1", "update_features", {
            "action": "add",
            "feature": {
                "name": "Rally",
                "kind": "activated",
                "cost": {"resource": "hope", "amount": 3},
                "bonus": {"evasion": 2},
                "deactivateOn": ["hit"],
            },
        })
        result = service.call("s1", "update_features", {"action": "activate", "name": "Rally"})

        assert result.output["success"] is True
        assert result.game_state["player"]["hope"] == 2
        assert result.game_state["player"]["evasion"] == 12

    def test_feature_progression_keys(self, service):
        service.call("s1", "update_features", {
            "action": "add",
            "feature": {
                "name": "Sneak Attack",
                "kind": "sneak_attack",
                "levelProgression": {"2": {"tier": 2, "damageDice": 2}},
            },
        })
        result = service.call("s1", "update_player", {"level": 3})
        feature = result.game_state["player"]["features"][0]
        assert feature["tier"] == 2
        assert feature["damageDice"] == 2

    def test_sub_command_domain_cards(self, service):
        result = service.call("s1", "update_domain_cards", {
            "action": "add", "card": {"name": "Rune Ward", "type": "spell"},
        })
        assert result.output["domain_cards"][0]["type"] == "spell"

    def test_soft_failure_is_not_an_error(self, service):
        result = service.call("s1", "spend_fear", {"amount": 5, "purpose": "spotlight"})

        assert result.output["success"] is False
        assert result.output["effect"] == "insufficient_fear"
        assert result.state_changed is False


class TestValidation:
    """Invalid calls raise and leave the state untouched."""

    def test_unknown_tool(self, service):
        with pytest.raises(UnknownToolError):
            service.call("s1", "cast_fireball", {})

    def test_unknown_tool_is_key_error(self, service):
        with pytest.raises(KeyError):
            service.call("s1", "cast_fireball", {})

    @pytest.mark.parametrize("tool,arguments", [
        ("roll_action", {"trait": "agility"}),
        ("roll_action", {"trait": "agility", "difficulty": "hard"}),
        ("spend_fear", {"amount": 0, "purpose": "spotlight"}),
        ("rest", {"restType": "nap"}),
        ("update_player", {"level": 0}),
        ("update_inventory", {"action": "juggle"}),
        ("update_inventory", {"name": "Rope"}),
        ("update_equipment", {"action": "equip_armor", "armor": {"name": "Bad", "thresholds": {"major": 9, "severe": 4}}}),
        ("update_features", {"action": "add", "feature": {"name": "X", "bonus": {"evasion": -2}}}),
        ("update_features", {"action": "add", "feature": {"name": "X", "bonus": {"luck": 1}}}),
        ("update_equipment", {"action": "equip_weapon", "weapon": {"name": "Odd", "damage": "two dice"}}),
    ])
    def test_invalid_arguments(self, service, tool, arguments):
        before = service.get_state("s1")
        with pytest.raises(ToolArgumentError):
            service.call("s1", tool, arguments)
        assert service.get_state("s1") == before

    def test_argument_error_lists_fields(self, service):
        with pytest.raises(ToolArgumentError) as exc_info:
            service.call("s1", "roll_action", {"trait": "agility"})
        assert exc_info.value.tool_name == "roll_action"
        assert any("difficulty" in err["loc"] for err in exc_info.value.errors)

    def test_engine_rejection_rolls_back(self, service):
        before = service.get_state("s1")
        with pytest.raises(ValueError):
            service.call("s1", "update_player", {"hp": 3, "majorThreshold": 20})
        assert service.get_state("s1") == before

    def test_bad_dice_rolls_back(self, service):
        service.call("s1", "update_player", {"hope": 2})
        before = service.get_state("s1")
        with pytest.raises(ValueError):
            service.call("s1", "roll_damage", {"weaponDice": "sword"})
        assert service.get_state("s1") == before


class TestServiceState:
    """Tests for reads and definitions."""

    def test_get_state_is_idempotent(self, service):
        service.call("s1", "update_player", {"hp": 7})
        assert service.get_state("s1") == service.get_state("s1")
        assert service.call("s1", "get_state").state_changed is False

    def test_render_state(self, service):
        service.call("s1", "update_scene", {"scene": "Harbor"})
        text = service.render_state("s1")
        assert text.startswith("## PLAYER")
        assert "Scene: Harbor" in text

    def test_tool_definitions(self, service):
        definitions = {d["name"]: d for d in service.tool_definitions()}

        assert set(definitions) == EXPECTED_TOOLS
        roll = definitions["roll_action"]["parameters"]
        assert "difficulty" in roll["required"]
        assert "experienceBonus" in roll["properties"]

        inventory = definitions["update_inventory"]["parameters"]
        assert "oneOf" in inventory or "anyOf" in inventory

    def test_sessions_are_independent(self, service):
        service.call("a", "update_player", {"hp": 1})
        assert service.get_state("b")["player"]["hp"]["current"] == 10

    def test_end_and_cleanup(self, service):
        service.create_session("a")
        assert service.end_session("a") is True
        assert service.end_session("a") is False

        stale = service.create_session("b")
        stale.last_access -= 7200
        assert service.cleanup(3600) == ["b"]
        assert service.list_sessions() == []
