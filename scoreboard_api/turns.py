# scoreboard_api/turns.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from scoreboard_api.errors import InvalidStateError, NotFoundError, ValidationError
from scoreboard_api.models import BATSMAN_SLOTS, MatchState, PlayerEntry, Side

logger = logging.getLogger(__name__)


def new_player_id() -> str:
    return uuid.uuid4().hex


def resolve_player(
    state: MatchState,
    side: Side,
    player_id: Optional[str],
    name: Optional[str],
) -> PlayerEntry:
    """
    Finds a squad entry by stable id, falling back to display name for
    players the caller only knows by name. Unseen players are added to the
    squad with zero-valued stats.
    """
    squad = state.squad_for(side)

    if player_id is not None:
        found = state.find_player(side, player_id)
        if found is not None:
            return found
        if not name:
            raise NotFoundError(f"Player {player_id} is not in squad {side}")
    elif not name:
        raise ValidationError("A player needs a player_id or a name")
    else:
        for p in squad:
            if p.name == name:
                return p

    entry = PlayerEntry(player_id=player_id or new_player_id(), name=name.strip())
    squad.append(entry)
    logger.debug("match %s: added %s (%s) to squad %s", state.match_id, entry.name, entry.player_id, side)
    return entry


def _sync_strike_flags(state: MatchState) -> None:
    for p in state.squad_for(state.batting_team):
        p.is_on_strike = p.player_id is not None and p.player_id == state.striker


def swap_strike(state: MatchState, *, over_end: bool = False) -> bool:
    """
    Exchanges the striker and non-striker. Runs and manual switches need both
    batters at the crease; at the end of an over a lone non-striker (striker
    dismissed on the last ball) moves across to face.

    Returns True when the slots changed.
    """
    if state.non_striker is None:
        return False
    if state.striker is None and not over_end:
        return False
    state.striker, state.non_striker = state.non_striker, state.striker
    _sync_strike_flags(state)
    return True


def require_striker(state: MatchState) -> None:
    """Once players are being tracked, every delivery needs a batter on strike."""
    if state.players_tracked and state.striker is None:
        raise InvalidStateError("No striker selected; select a batsman before the next ball")


def select_batsman(
    state: MatchState,
    slot: str,
    player_id: Optional[str] = None,
    name: Optional[str] = None,
) -> PlayerEntry:
    if slot not in BATSMAN_SLOTS:
        raise ValidationError(f"position must be one of {', '.join(BATSMAN_SLOTS)}, got {slot!r}")

    side = state.batting_team
    player = resolve_player(state, side, player_id, name)
    if player.is_out:
        raise InvalidStateError(f"{player.name} is already out")

    if slot == "striker":
        if state.non_striker == player.player_id:
            state.non_striker = None
        previous = state.striker
        state.striker = player.player_id
    else:
        if state.striker == player.player_id:
            state.striker = None
        previous = state.non_striker
        state.non_striker = player.player_id

    # Substitution: the batter leaving the slot is no longer at the crease
    if previous is not None and previous != player.player_id:
        replaced = state.find_player(side, previous)
        if replaced is not None:
            replaced.is_current_batsman = False

    player.is_current_batsman = True
    state.players_tracked = True
    _sync_strike_flags(state)
    return player


def select_bowler(
    state: MatchState,
    player_id: Optional[str] = None,
    name: Optional[str] = None,
) -> PlayerEntry:
    side = state.bowling_team
    bowler = resolve_player(state, side, player_id, name)

    for p in state.squad_for(side):
        p.is_current_bowler = False
    bowler.is_current_bowler = True

    state.bowler = bowler.player_id
    state.players_tracked = True
    return bowler


def clear_striker(state: MatchState) -> None:
    striker = state.find_player(state.batting_team, state.striker)
    if striker is not None:
        striker.is_current_batsman = False
        striker.is_on_strike = False
    state.striker = None


def release_bowler(state: MatchState) -> None:
    bowler = state.find_player(state.bowling_team, state.bowler)
    if bowler is not None:
        bowler.is_current_bowler = False
    state.bowler = None


def reset_turns(state: MatchState) -> None:
    """Clears every slot and crease flag for both squads (new innings)."""
    for side in ("A", "B"):
        for p in state.squad_for(side):
            p.is_current_batsman = False
            p.is_on_strike = False
            p.is_current_bowler = False
    state.striker = None
    state.non_striker = None
    state.bowler = None
    state.players_tracked = False
