# scoreboard_api/ledger.py
from __future__ import annotations

from scoreboard_api.config import MAX_WICKETS
from scoreboard_api.errors import InvalidStateError, ValidationError
from scoreboard_api.models import EXTRA_TYPES, ExtraType, Score

MAX_RUNS_PER_BALL = 7

# Run value and whether the extra is a legal delivery
EXTRA_RULES = {
    "WIDE": (1, False),
    "NOBALL": (1, False),
    "BYE": (1, True),
    "LEGBYE": (1, True),
}


def validate_runs(runs: int) -> int:
    # bool is an int subclass; True must not count as a single
    if isinstance(runs, bool) or not isinstance(runs, int):
        raise ValidationError(f"runs must be an integer, got {runs!r}")
    if runs < 0 or runs > MAX_RUNS_PER_BALL:
        raise ValidationError(f"runs must be between 0 and {MAX_RUNS_PER_BALL}, got {runs}")
    return runs


def validate_extra(extra_type: str) -> ExtraType:
    if extra_type not in EXTRA_TYPES:
        raise ValidationError(f"Unknown extraType: {extra_type!r} (expected one of {', '.join(EXTRA_TYPES)})")
    return extra_type  # type: ignore[return-value]


def is_legal_extra(extra_type: ExtraType) -> bool:
    return EXTRA_RULES[extra_type][1]


def add_ball(score: Score) -> None:
    """One legal delivery; the 6th ball of an over rolls into the next whole over."""
    score.balls += 1


def add_runs(score: Score, runs: int) -> None:
    validate_runs(runs)
    score.runs += runs
    add_ball(score)


def ensure_wicket_available(score: Score) -> None:
    if score.wickets >= MAX_WICKETS:
        raise InvalidStateError(f"Innings already has {MAX_WICKETS} wickets")


def record_wicket(score: Score) -> None:
    ensure_wicket_available(score)
    score.wickets += 1
    add_ball(score)


def record_extra(score: Score, extra_type: str) -> int:
    """
    Applies a one-run extra to the score and returns the run value.

    WIDE / NOBALL do not consume a legal ball; BYE / LEGBYE do.
    """
    extra_type = validate_extra(extra_type)
    run_value, legal = EXTRA_RULES[extra_type]

    score.runs += run_value
    if extra_type == "WIDE":
        score.extras.wides += run_value
    elif extra_type == "NOBALL":
        score.extras.no_balls += run_value
    elif extra_type == "BYE":
        score.extras.byes += run_value
    else:
        score.extras.leg_byes += run_value

    if legal:
        add_ball(score)
    return run_value


def override_score(score: Score, *, runs: int | None = None, wickets: int | None = None, balls: int | None = None) -> None:
    """Administrative correction of a team total (fields left as None are kept)."""
    if runs is not None:
        if runs < 0:
            raise ValidationError("runs cannot be negative")
    if wickets is not None:
        if wickets < 0 or wickets > MAX_WICKETS:
            raise ValidationError(f"wickets must be between 0 and {MAX_WICKETS}")
    if balls is not None and balls < 0:
        raise ValidationError("overs cannot be negative")

    if runs is not None:
        score.runs = runs
    if wickets is not None:
        score.wickets = wickets
    if balls is not None:
        score.balls = balls
