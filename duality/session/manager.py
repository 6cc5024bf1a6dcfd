"""
Session Manager - Owns every session's GameState.

LIFECYCLE:
1. A session id is referenced for the first time -> a session with the
   default GameState is created (no "unknown session" error exists)
2. Each operation runs under the session's lock, against a clone of the
   state; the clone replaces the stored state only if the operation
   completes
3. The host ends the session explicitly, or stale sessions are evicted
   after a time-to-live

PERSISTENCE RULES:
- In-memory only, nothing survives a process restart
- Sessions are independent; operations on different sessions may run
  in parallel

RANDOMNESS:
- Each session owns a random.Random, optionally seeded, so a session's
  rolls can be replayed exactly
"""

from __future__ import annotations
from dataclasses import dataclass, field
from contextlib import contextmanager
from typing import Any, Callable, Iterator
import logging
import random
import threading
import time
import uuid

from ..engine_core.state import GameState, create_default_game_state
from ..engine_core.dice import DiceRoller
from ..engine_core.engine import GameEngine


logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One play-through: the canonical state plus its dice and lock.

    The state is replaced wholesale on every committed operation;
    readers never observe a half-applied operation.
    """
    session_id: str
    state: GameState
    rng: random.Random
    created_at: float
    last_access: float
    seed: int | None = None
    operation_count: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def touch(self) -> None:
        self.last_access = time.time()

    def snapshot(self) -> dict[str, Any]:
        """JSON snapshot of the current committed state."""
        return self.state.to_dict()

    @contextmanager
    def transaction(self) -> Iterator[GameEngine]:
        """
        Run one operation atomically.

        Yields an engine bound to a clone of the state. If the block
        raises, the clone is discarded and the stored state is left
        exactly as it was.
        """
        with self.lock:
            working = self.state.clone()
            engine = GameEngine(working, DiceRoller(self.rng))
            yield engine
            self.state = working
            self.operation_count += 1
            self.touch()


class SessionManager:
    """
    Registry of live sessions.

    Responsibilities:
    - Create sessions (explicitly, or lazily on first reference)
    - Hand out sessions by id
    - End sessions and evict stale ones

    No persistence - sessions are in-memory only.
    """

    def __init__(self, rng_factory: Callable[[int | None], random.Random] | None = None):
        self._sessions: dict[str, Session] = {}
        self._registry_lock = threading.Lock()
        self._rng_factory = rng_factory or random.Random

    def create_session(
        self,
        session_id: str | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a new session with the default game state.

        Args:
            session_id: Opaque id chosen by the caller (generated if omitted)
            seed: Optional seed for the session's dice

        Returns:
            The new Session (an existing one is returned unchanged if the
            id is already registered)
        """
        with self._registry_lock:
            session_id = session_id or str(uuid.uuid4())
            existing = self._sessions.get(session_id)
            if existing is not None:
                return existing

            now = time.time()
            session = Session(
                session_id=session_id,
                state=create_default_game_state(session_id),
                rng=self._rng_factory(seed),
                created_at=now,
                last_access=now,
                seed=seed,
            )
            self._sessions[session_id] = session

        logger.info("Session created: %s (seed=%s)", session_id, seed)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by id without creating it."""
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> Session:
        """Get a session, provisioning a default one on first reference."""
        session = self._sessions.get(session_id)
        if session is None:
            session = self.create_session(session_id)
        session.touch()
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop its state.

        Returns True if the session existed.
        """
        with self._registry_lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info(
            "Session ended: %s (%s, %d operations)",
            session_id, reason, session.operation_count,
        )
        return True

    def list_active_sessions(self) -> list[str]:
        """List ids of live sessions."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: float = 3600) -> list[str]:
        """
        End sessions not touched for more than max_age_seconds.

        Called periodically by the host to free memory. Returns the ids
        that were evicted.
        """
        now = time.time()
        stale = [
            session_id
            for session_id, session in list(self._sessions.items())
            if now - session.last_access > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
