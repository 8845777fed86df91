# scoreboard_api/over_tracker.py
from __future__ import annotations

import logging
from typing import List, Optional

from scoreboard_api.config import BALLS_PER_OVER, OVER_BUFFER_LIMIT
from scoreboard_api.models import MatchState, OverSummary, Score
from scoreboard_api.player_stats import credit_maiden
from scoreboard_api.turns import swap_strike

logger = logging.getLogger(__name__)

# Outcome labels shown in the current-over strip
WICKET = "W"
WIDE = "Wd"
NO_BALL = "Nb"
BYE = "B"
LEG_BYE = "Lb"

EXTRA_LABELS = {"WIDE": WIDE, "NOBALL": NO_BALL, "BYE": BYE, "LEGBYE": LEG_BYE}
ILLEGAL_LABELS = frozenset({WIDE, NO_BALL})


def push_outcome(state: MatchState, label: str) -> None:
    state.current_over_balls.append(label)
    if len(state.current_over_balls) > OVER_BUFFER_LIMIT:
        del state.current_over_balls[: len(state.current_over_balls) - OVER_BUFFER_LIMIT]


def legal_balls(outcomes: List[str]) -> int:
    return sum(1 for o in outcomes if o not in ILLEGAL_LABELS)


def runs_conceded(outcomes: List[str]) -> int:
    """Runs charged to the bowler: runs off the bat, wides and no-balls."""
    total = 0
    for o in outcomes:
        if o.isdigit():
            total += int(o)
        elif o in ILLEGAL_LABELS:
            total += 1
    return total


def team_runs(outcomes: List[str]) -> int:
    return runs_conceded(outcomes) + sum(1 for o in outcomes if o in (BYE, LEG_BYE))


def complete_over(state: MatchState, score: Score) -> OverSummary:
    """
    Closes the over that the last legal ball finished: summarises it, credits
    a maiden, hands strike to the other end and clears the strip.
    """
    outcomes = list(state.current_over_balls)
    summary = OverSummary(
        over_number=score.balls // BALLS_PER_OVER,
        runs=team_runs(outcomes),
        wickets=outcomes.count(WICKET),
        balls=outcomes,
    )
    state.recent_overs.append(summary)

    if runs_conceded(outcomes) == 0:
        credit_maiden(state)

    swap_strike(state, over_end=True)
    state.current_over_balls = []
    logger.debug("match %s: over %s complete (%s runs)", state.match_id, summary.over_number, summary.runs)
    return summary


def record_delivery(
    state: MatchState,
    score: Score,
    label: str,
    *,
    legal: bool,
    runs_run: int = 0,
) -> Optional[OverSummary]:
    """
    Adds one delivery to the current over. `runs_run` is what the batters ran
    (bat runs, byes, leg-byes): an odd number on a legal ball swaps strike.

    Returns the over summary when this ball completed the over.
    """
    push_outcome(state, label)
    if not legal:
        return None

    if runs_run % 2 == 1:
        swap_strike(state)

    if score.balls % BALLS_PER_OVER == 0:
        return complete_over(state, score)
    return None
