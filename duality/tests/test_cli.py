"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main


class TestCLI:
    """Tests for duality tools / call."""

    def test_tools(self, capsys):
        main(["tools"])
        out = capsys.readouterr().out
        assert "roll_action" in out
        assert "update_inventory" in out

    def test_call(self, capsys):
        main(["call", "roll_dice", "--args", '{"sides": 6, "count": 3}', "--seed", "5"])
        data = json.loads(capsys.readouterr().out)

        assert data["expression"] == "3d6"
        assert len(data["rolls"]) == 3

    def test_call_is_reproducible(self, capsys):
        main(["call", "roll_action", "--args", '{"trait": "agility", "difficulty": 12}', "--seed", "9"])
        first = capsys.readouterr().out
        main(["call", "roll_action", "--args", '{"trait": "agility", "difficulty": 12}', "--seed", "9"])
        assert capsys.readouterr().out == first

    def test_call_with_summary(self, capsys):
        main(["call", "update_scene", "--args", '{"scene": "Harbor"}', "--summary"])
        out = capsys.readouterr().out
        assert "## SCENE" in out
        assert "Scene: Harbor" in out

    def test_invalid_arguments_exit(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["call", "spend_fear", "--args", '{"amount": 0, "purpose": "x"}'])
        assert exc_info.value.code == 2

    def test_unknown_tool_exit(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["call", "cast_fireball"])
        assert exc_info.value.code == 1

    def test_bad_json_exit(self):
        with pytest.raises(SystemExit):
            main(["call", "get_state", "--args", "{not json"])
