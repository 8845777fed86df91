# scoreboard_api/player_stats.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from scoreboard_api.models import NON_BOWLER_DISMISSALS, FallOfWicket, MatchState, PlayerEntry
from scoreboard_api.turns import clear_striker


def current_striker(state: MatchState) -> Optional[PlayerEntry]:
    return state.find_player(state.batting_team, state.striker)


def current_bowler(state: MatchState) -> Optional[PlayerEntry]:
    return state.find_player(state.bowling_team, state.bowler)


def credit_striker(state: MatchState, runs: int, *, legal: bool = True) -> None:
    """
    Batting figures for one delivery. `runs` are runs off the bat only;
    extras never reach the batter's column.
    """
    striker = current_striker(state)
    if striker is None:
        return

    striker.runs_scored += runs
    if legal:
        striker.balls_faced += 1
    if runs == 4:
        striker.fours += 1
    elif runs == 6:
        striker.sixes += 1


def charge_bowler(
    state: MatchState,
    runs_conceded: int,
    *,
    legal: bool = True,
    wide: bool = False,
    no_ball: bool = False,
    wicket: bool = False,
) -> None:
    bowler = current_bowler(state)
    if bowler is None:
        return

    bowler.runs_conceded += runs_conceded
    if legal:
        bowler.balls_bowled += 1
    if wide:
        bowler.wides += 1
    if no_ball:
        bowler.no_balls += 1
    if wicket:
        bowler.wickets_taken += 1


def credit_maiden(state: MatchState) -> None:
    bowler = current_bowler(state)
    if bowler is not None:
        bowler.maidens += 1


def bowler_gets_wicket(out_type: str) -> bool:
    return out_type not in NON_BOWLER_DISMISSALS


def dismiss_striker(state: MatchState, out_type: str, out_by: Optional[str] = None) -> FallOfWicket:
    """
    Marks the striker out, clears the striker slot and records the fall of
    wicket. Must run after the ledger has counted the wicket.
    """
    score = state.score_for(state.batting_team)
    striker = current_striker(state)
    bowler = current_bowler(state)

    if striker is not None:
        striker.is_out = True
        striker.out_type = out_type
        if out_by is not None:
            striker.out_by = out_by
        elif bowler is not None and bowler_gets_wicket(out_type):
            striker.out_by = bowler.name
        else:
            striker.out_by = ""

    fow = FallOfWicket(
        team=state.batting_team,
        wicket_number=score.wickets,
        player_id=striker.player_id if striker else None,
        player_name=striker.name if striker else "",
        runs=striker.runs_scored if striker else 0,
        balls=striker.balls_faced if striker else 0,
        team_score=score.runs,
        team_overs=score.overs,
        dismissal_type=out_type,
        timestamp=datetime.now(timezone.utc),
    )
    state.fall_of_wickets.append(fow)

    clear_striker(state)
    return fow
