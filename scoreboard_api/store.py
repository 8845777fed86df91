# scoreboard_api/store.py
from __future__ import annotations

import copy
import logging
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from scoreboard_api import engine
from scoreboard_api.commands import Command
from scoreboard_api.errors import NotFoundError
from scoreboard_api.models import MatchState

logger = logging.getLogger(__name__)

PersistFn = Callable[[MatchState], None]
Listener = Callable[[str, Dict[str, Any]], None]


class MatchRegistry:
    """
    In-memory home of live matches (sufficient for single-instance deploys).

    One lock per match id serialises writers; different matches never wait on
    each other. A command runs against a copy of the stored match, which is
    persisted, committed and only then broadcast. Any failure before the
    commit leaves the stored match untouched.
    """

    def __init__(self, persist: Optional[PersistFn] = None) -> None:
        self._matches: Dict[str, MatchState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._persist = persist
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _broadcast(self, event: str, state: MatchState) -> None:
        payload = state.to_dict()
        for listener in self._listeners:
            listener(event, payload)

    def _save(self, state: MatchState) -> None:
        if self._persist is None:
            return
        try:
            self._persist(state)
        except Exception:
            logger.exception("match %s: persistence failed, change not committed", state.match_id)
            raise

    def _lock_for(self, match_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(match_id)
        if lock is None:
            raise NotFoundError("Match not found")
        return lock

    def create(self, team_a: str, team_b: str, **kwargs: Any) -> MatchState:
        match_id = uuid.uuid4().hex
        state = engine.create_match(match_id, team_a, team_b, **kwargs)
        self._save(state)

        with self._guard:
            self._matches[match_id] = state
            self._locks[match_id] = threading.Lock()

        logger.info("match %s created: %s vs %s", match_id, team_a, team_b)
        self._broadcast("matchCreated", state)
        return state

    def get(self, match_id: str) -> MatchState:
        """Read-only view of the last committed state."""
        with self._lock_for(match_id):
            return self._matches[match_id]

    def apply(self, match_id: str, command: Command) -> Tuple[MatchState, str]:
        with self._lock_for(match_id):
            working = copy.deepcopy(self._matches[match_id])
            message = engine.dispatch(working, command)
            self._save(working)
            self._matches[match_id] = working
            # Broadcast under the lock so observers see updates in commit order
            self._broadcast("matchUpdate", working)
        return working, message

    def clear(self) -> None:
        with self._guard:
            self._matches.clear()
            self._locks.clear()
