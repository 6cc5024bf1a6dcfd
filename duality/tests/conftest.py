"""
Pytest fixtures for Duality tests.
"""

import random

import pytest

from ..engine_core.state import GameState, create_default_game_state
from ..engine_core.dice import DiceRoller
from ..engine_core.engine import GameEngine
from ..session import SessionManager
from ..api.service import ToolService


class ScriptedRandom(random.Random):
    """
    random.Random whose randint() returns queued values in order.

    Lets a test decide every die face:
        rng.push(7, 7)   # hope d12, fear d12 -> critical
    """

    def __init__(self):
        super().__init__(0)
        self.queue: list[int] = []
        self.calls: list[tuple[int, int]] = []

    def push(self, *values: int) -> None:
        self.queue.extend(values)

    def randint(self, a: int, b: int) -> int:
        assert self.queue, f"no scripted roll left for randint({a}, {b})"
        value = self.queue.pop(0)
        assert a <= value <= b, f"scripted roll {value} outside [{a}, {b}]"
        self.calls.append((a, b))
        return value


@pytest.fixture
def rng() -> ScriptedRandom:
    """Dice source with scripted faces."""
    return ScriptedRandom()


@pytest.fixture
def state() -> GameState:
    """A fresh default session state."""
    return create_default_game_state("test_session")


@pytest.fixture
def engine(state: GameState, rng: ScriptedRandom) -> GameEngine:
    """Engine bound to the default state and scripted dice."""
    return GameEngine(state, DiceRoller(rng))


@pytest.fixture
def service() -> ToolService:
    """Service whose sessions roll real, seeded dice."""
    return ToolService(session_manager=SessionManager())


@pytest.fixture
def scripted_service(rng: ScriptedRandom) -> ToolService:
    """Service whose sessions all share the scripted dice."""
    return ToolService(session_manager=SessionManager(rng_factory=lambda seed: rng))
