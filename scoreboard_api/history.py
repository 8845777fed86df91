# scoreboard_api/history.py
from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import List, Optional

from scoreboard_api.config import HISTORY_LIMIT
from scoreboard_api.errors import InvalidStateError, NoHistoryError
from scoreboard_api.models import HistoryEntry, MatchState, PlayerEntry, RestorePoint, Side

logger = logging.getLogger(__name__)


def capture_restore_point(state: MatchState) -> RestorePoint:
    return RestorePoint(
        status=state.status,
        current_innings=state.current_innings,
        squad_a=copy.deepcopy(state.squad_a),
        squad_b=copy.deepcopy(state.squad_b),
        striker=state.striker,
        non_striker=state.non_striker,
        bowler=state.bowler,
        players_tracked=state.players_tracked,
        current_over_balls=list(state.current_over_balls),
        recent_overs=copy.deepcopy(state.recent_overs),
        fall_of_wickets=list(state.fall_of_wickets),
    )


def begin_entry(state: MatchState, team: Side, action: str) -> HistoryEntry:
    """Snapshot taken before an action touches the match."""
    return HistoryEntry(
        timestamp=datetime.now(timezone.utc),
        team=team,
        action=action,
        before=state.score_for(team).snapshot(),
        restore=capture_restore_point(state),
    )


def commit_entry(state: MatchState, entry: HistoryEntry) -> None:
    entry.after = state.score_for(entry.team).snapshot()
    state.history.append(entry)
    if len(state.history) > HISTORY_LIMIT:
        del state.history[: len(state.history) - HISTORY_LIMIT]


def _merge_squad(current: List[PlayerEntry], saved: List[PlayerEntry]) -> List[PlayerEntry]:
    """
    Puts back the figures a player had at the restore point while keeping the
    squad as it is now: players added or dropped since (and renames) survive
    the undo.
    """
    saved_by_id = {p.player_id: p for p in saved}
    merged: List[PlayerEntry] = []
    for p in current:
        old = saved_by_id.get(p.player_id)
        if old is None:
            merged.append(p)
            continue
        restored = copy.deepcopy(old)
        restored.name = p.name
        merged.append(restored)
    return merged


def _listed(state: MatchState, side: Side, player_id: Optional[str]) -> Optional[str]:
    return player_id if state.find_player(side, player_id) is not None else None


def _sync_crease_flags(state: MatchState) -> None:
    at_crease = {state.striker, state.non_striker} - {None}
    for p in state.squad_for(state.batting_team):
        p.is_current_batsman = p.player_id in at_crease
        p.is_on_strike = p.player_id == state.striker
        p.is_current_bowler = False
    for p in state.squad_for(state.bowling_team):
        p.is_current_batsman = False
        p.is_on_strike = False
        p.is_current_bowler = p.player_id == state.bowler


def pop_entry(state: MatchState) -> HistoryEntry:
    if not state.history:
        raise NoHistoryError("No actions to undo")

    last = state.history[-1]
    if last.restore is not None and last.restore.current_innings != state.current_innings:
        raise InvalidStateError("Cannot undo an action from the previous innings")

    entry = state.history.pop()
    state.set_score(entry.team, entry.before.snapshot())

    restore = entry.restore
    if restore is not None:
        state.status = restore.status
        state.squad_a = _merge_squad(state.squad_a, restore.squad_a)
        state.squad_b = _merge_squad(state.squad_b, restore.squad_b)
        state.striker = _listed(state, state.batting_team, restore.striker)
        state.non_striker = _listed(state, state.batting_team, restore.non_striker)
        state.bowler = _listed(state, state.bowling_team, restore.bowler)
        state.players_tracked = restore.players_tracked
        _sync_crease_flags(state)
        state.current_over_balls = list(restore.current_over_balls)
        state.recent_overs = copy.deepcopy(restore.recent_overs)
        state.fall_of_wickets = list(restore.fall_of_wickets)

    logger.info("match %s: undid %r for team %s", state.match_id, entry.action, entry.team)
    return entry
