# scoreboard_api/engine.py
"""
Cricket live-scoring state machine.

Every mutation of a MatchState goes through the functions in this module.
The aggregate is passed in explicitly and changed in place; callers that need
all-or-nothing semantics across persistence (see store.MatchRegistry) work on
a copy.

Lifecycle: SCHEDULED -> LIVE (first ball) -> COMPLETED (terminal).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from scoreboard_api import ledger, over_tracker, player_stats, turns
from scoreboard_api.commands import (
    BallEvent,
    Command,
    CompleteMatch,
    EndOver,
    Extra,
    OverrideScore,
    PlayerRef,
    Runs,
    SelectBatsman,
    SelectBowler,
    SetSquad,
    SwapInnings,
    SwitchStrike,
    TossCall,
    Undo,
    Wicket,
)
from scoreboard_api.config import BALLS_PER_OVER, DEFAULT_TOTAL_OVERS
from scoreboard_api.errors import InvalidStateError, ValidationError
from scoreboard_api.history import begin_entry, commit_entry, pop_entry
from scoreboard_api.models import (
    OUT_TYPES,
    SIDES,
    TOSS_DECISIONS,
    MatchState,
    PlayerEntry,
    Side,
    Toss,
    other_side,
)
from scoreboard_api.overs_math import overs_to_balls

logger = logging.getLogger(__name__)


# -----------------------
# Helpers
# -----------------------
def _ensure_not_completed(state: MatchState) -> None:
    if state.status == "COMPLETED":
        raise InvalidStateError("Cannot update a completed match")


def _side(team: str) -> Side:
    if team not in SIDES:
        raise ValidationError('Team must be either "A" or "B" for score updates')
    return team  # type: ignore[return-value]


def _build_squad(state: MatchState, side: Side, players: Iterable[PlayerRef]) -> list[PlayerEntry]:
    """New squad list; players already known (by id, then name) keep their figures."""
    squad: list[PlayerEntry] = []
    renames: list[tuple[PlayerEntry, str]] = []
    seen: set[str] = set()

    for ref in players:
        if ref.player_id is None and not ref.name:
            raise ValidationError("Every squad entry needs a player_id or a name")

        existing = state.find_player(side, ref.player_id)
        if existing is None and ref.player_id is None:
            existing = next((p for p in state.squad_for(side) if p.name == ref.name), None)

        if existing is not None:
            entry = existing
            if ref.name and ref.name != existing.name:
                renames.append((existing, ref.name))
        else:
            entry = PlayerEntry(player_id=ref.player_id or turns.new_player_id(), name=(ref.name or "").strip())

        if entry.player_id in seen:
            raise ValidationError(f"Duplicate player in squad: {entry.name or entry.player_id}")
        seen.add(entry.player_id)
        squad.append(entry)

    for entry, name in renames:
        entry.name = name
    return squad


# -----------------------
# Creation
# -----------------------
def create_match(
    match_id: str,
    team_a: str,
    team_b: str,
    *,
    total_overs: Optional[int] = None,
    venue: Optional[str] = None,
    scheduled_at: Optional[datetime] = None,
    squad_a: Iterable[PlayerRef] = (),
    squad_b: Iterable[PlayerRef] = (),
) -> MatchState:
    if not team_a or not team_b:
        raise ValidationError("Both teamA and teamB are required")
    if team_a == team_b:
        raise ValidationError("A team cannot play against itself")

    overs = total_overs if total_overs is not None else DEFAULT_TOTAL_OVERS
    if overs <= 0:
        raise ValidationError("totalOvers must be positive")

    state = MatchState(
        match_id=match_id,
        team_a=team_a,
        team_b=team_b,
        total_overs=overs,
        venue=venue,
        scheduled_at=scheduled_at,
    )
    state.squad_a = _build_squad(state, "A", squad_a)
    state.squad_b = _build_squad(state, "B", squad_b)
    return state


# -----------------------
# Toss
# -----------------------
def apply_toss(state: MatchState, winner: Optional[str], decision: Optional[str]) -> None:
    """
    Records the toss and derives the side batting first.
    winner=None clears a previously recorded toss.
    """
    if state.status != "SCHEDULED":
        raise InvalidStateError("Toss can only be recorded before the first ball")

    if winner is None:
        state.toss = Toss()
        return

    if winner not in (state.team_a, state.team_b):
        raise ValidationError(f"Toss winner {winner!r} is not playing this match")
    if decision not in TOSS_DECISIONS:
        raise ValidationError(f"Toss decision must be one of {', '.join(TOSS_DECISIONS)}")

    winner_side: Side = "A" if winner == state.team_a else "B"
    state.toss = Toss(winner=winner, decision=decision, conducted_at=datetime.now(timezone.utc))  # type: ignore[arg-type]
    state.batting_team = winner_side if decision == "BAT" else other_side(winner_side)
    logger.info("match %s: toss won by %s, chose to %s", state.match_id, winner, decision.lower())


# -----------------------
# Ball-by-ball
# -----------------------
def _action_label(event: BallEvent) -> str:
    if isinstance(event, Runs):
        return f"+{event.runs} runs"
    if isinstance(event, Wicket):
        return "Wicket"
    return event.extra_type


def _validate_ball_event(state: MatchState, event: BallEvent) -> Side:
    _ensure_not_completed(state)
    team = _side(event.team)
    score = state.score_for(team)

    if isinstance(event, Runs):
        ledger.validate_runs(event.runs)
    elif isinstance(event, Wicket):
        if event.out_type not in OUT_TYPES:
            raise ValidationError(f"Unknown outType: {event.out_type!r}")
        ledger.ensure_wicket_available(score)
    elif isinstance(event, Extra):
        ledger.validate_extra(event.extra_type)
    else:
        raise ValidationError(f"Not a ball event: {event!r}")

    if team != state.batting_team:
        raise InvalidStateError(f"Team {team} is not batting (batting team is {state.batting_team})")
    turns.require_striker(state)
    return team


def apply_ball_event(state: MatchState, event: BallEvent) -> None:
    team = _validate_ball_event(state, event)
    score = state.score_for(team)
    entry = begin_entry(state, team, _action_label(event))

    if state.status == "SCHEDULED":
        state.status = "LIVE"
        logger.info("match %s is now LIVE", state.match_id)

    if isinstance(event, Runs):
        ledger.add_runs(score, event.runs)
        player_stats.credit_striker(state, event.runs)
        player_stats.charge_bowler(state, event.runs)
        over_tracker.record_delivery(state, score, str(event.runs), legal=True, runs_run=event.runs)

    elif isinstance(event, Wicket):
        ledger.record_wicket(score)
        player_stats.credit_striker(state, 0)
        player_stats.charge_bowler(state, 0, wicket=player_stats.bowler_gets_wicket(event.out_type))
        player_stats.dismiss_striker(state, event.out_type, event.out_by)
        over_tracker.record_delivery(state, score, over_tracker.WICKET, legal=True)

    else:
        extra_type = event.extra_type
        run_value = ledger.record_extra(score, extra_type)
        legal = ledger.is_legal_extra(extra_type)  # type: ignore[arg-type]
        if legal:
            # byes / leg-byes: the batter faced the ball, the bowler is not charged
            player_stats.credit_striker(state, 0)
            player_stats.charge_bowler(state, 0)
        else:
            player_stats.charge_bowler(
                state,
                run_value,
                legal=False,
                wide=extra_type == "WIDE",
                no_ball=extra_type == "NOBALL",
            )
        over_tracker.record_delivery(
            state,
            score,
            over_tracker.EXTRA_LABELS[extra_type],
            legal=legal,
            runs_run=run_value if legal else 0,
        )

    commit_entry(state, entry)
    logger.debug(
        "match %s: %s -> %s/%s (%s ov)",
        state.match_id, entry.action, score.runs, score.wickets, score.overs,
    )


def undo_last(state: MatchState) -> None:
    _ensure_not_completed(state)
    pop_entry(state)


# -----------------------
# Innings / turns
# -----------------------
def swap_innings(state: MatchState) -> None:
    _ensure_not_completed(state)
    if state.current_innings != 1:
        raise InvalidStateError("Innings already swapped; this match has two innings")

    first_innings = state.score_for(state.batting_team)
    state.target = first_innings.runs + 1
    state.batting_team = other_side(state.batting_team)
    state.current_innings = 2

    turns.reset_turns(state)
    state.current_over_balls = []
    state.recent_overs = []
    logger.info("match %s: innings swapped, %s need %s", state.match_id, state.batting_team, state.target)


def select_batsman(state: MatchState, player: PlayerRef, slot: str) -> PlayerEntry:
    _ensure_not_completed(state)
    return turns.select_batsman(state, slot, player.player_id, player.name)


def select_bowler(state: MatchState, player: PlayerRef) -> PlayerEntry:
    _ensure_not_completed(state)
    return turns.select_bowler(state, player.player_id, player.name)


def switch_strike(state: MatchState) -> None:
    _ensure_not_completed(state)
    if not turns.swap_strike(state):
        logger.debug("match %s: strike unchanged, only one batter at the crease", state.match_id)


def end_over(state: MatchState) -> None:
    """Hands the ball back at an over boundary so the next bowler can be picked."""
    _ensure_not_completed(state)
    score = state.score_for(state.batting_team)
    if score.balls_in_over != 0 or state.current_over_balls:
        raise InvalidStateError("Over in progress; it ends after six legal deliveries")
    turns.release_bowler(state)


def set_squad(state: MatchState, team: str, players: Iterable[PlayerRef]) -> None:
    _ensure_not_completed(state)
    side = _side(team)
    squad = _build_squad(state, side, players)
    ids = {p.player_id for p in squad}

    if side == "A":
        state.squad_a = squad
    else:
        state.squad_b = squad

    # Slots pointing at players dropped from the squad are vacated
    if side == state.batting_team:
        if state.striker not in ids:
            state.striker = None
        if state.non_striker not in ids:
            state.non_striker = None
    elif state.bowler not in ids:
        state.bowler = None


def override_score(
    state: MatchState,
    team: str,
    *,
    runs: Optional[int] = None,
    wickets: Optional[int] = None,
    overs: Optional[str] = None,
) -> None:
    """Administrative correction of a team total; undoable like a ball event."""
    _ensure_not_completed(state)
    side = _side(team)
    if runs is None and wickets is None and overs is None:
        raise ValidationError("override needs at least one of runs, wickets, overs")

    balls = None
    if overs is not None:
        try:
            balls = overs_to_balls(overs)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    score = state.score_for(side)
    rewrites_over = balls is not None and balls != score.balls and side == state.batting_team
    if rewrites_over and balls % BALLS_PER_OVER != 0:
        raise ValidationError("Overs of the batting side can only be overridden to a completed over, e.g. 12.0")

    entry = begin_entry(state, side, "Score override")
    ledger.override_score(score, runs=runs, wickets=wickets, balls=balls)

    # The strip restarts at the over boundary the count was moved to
    if rewrites_over:
        state.current_over_balls = []

    commit_entry(state, entry)
    logger.info("match %s: team %s score overridden to %s/%s (%s ov)", state.match_id, side, score.runs, score.wickets, score.overs)


# -----------------------
# Completion
# -----------------------
def complete_match(state: MatchState) -> None:
    _ensure_not_completed(state)
    state.status = "COMPLETED"

    if state.score_a.runs > state.score_b.runs:
        state.winner, state.result = state.team_a, "WIN"
    elif state.score_b.runs > state.score_a.runs:
        state.winner, state.result = state.team_b, "WIN"
    else:
        state.winner, state.result = None, "TIE"

    logger.info("match %s completed: result=%s winner=%s", state.match_id, state.result, state.winner)


# -----------------------
# Command dispatch
# -----------------------
def dispatch(state: MatchState, command: Command) -> str:
    """Applies one command to the match and returns a short status message."""
    if isinstance(command, (Runs, Wicket, Extra)):
        apply_ball_event(state, command)
        return "Score updated"
    if isinstance(command, Undo):
        undo_last(state)
        return "Last action undone"
    if isinstance(command, TossCall):
        apply_toss(state, command.winner, command.decision)
        return "Toss recorded"
    if isinstance(command, SelectBatsman):
        select_batsman(state, command.player, command.slot)
        return "Batsman selected"
    if isinstance(command, SelectBowler):
        select_bowler(state, command.player)
        return "Bowler selected"
    if isinstance(command, SwitchStrike):
        switch_strike(state)
        return "Strike switched"
    if isinstance(command, EndOver):
        end_over(state)
        return "Over ended"
    if isinstance(command, SwapInnings):
        swap_innings(state)
        return "Innings swapped"
    if isinstance(command, SetSquad):
        set_squad(state, command.team, command.players)
        return "Squads updated"
    if isinstance(command, OverrideScore):
        override_score(state, command.team, runs=command.runs, wickets=command.wickets, overs=command.overs)
        return "Score overridden"
    if isinstance(command, CompleteMatch):
        complete_match(state)
        return "Match completed"
    raise ValidationError(f"Unknown command: {command!r}")
