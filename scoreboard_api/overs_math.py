# scoreboard_api/overs_math.py
from __future__ import annotations

from typing import Optional, Union

from scoreboard_api.config import BALLS_PER_OVER

OversLike = Union[str, int]


def overs_to_balls(overs: OversLike) -> int:
    """Legal-ball count for an overs figure as shown on a scorecard: "12.3" -> 75."""
    text = str(overs).strip()
    whole, _, part = text.partition(".")
    if not whole.isdigit() or (part and not part.isdigit()):
        raise ValueError(f"Invalid overs: {overs!r}")

    in_over = int(part) if part else 0
    if in_over >= BALLS_PER_OVER:
        raise ValueError(f"Invalid overs: {overs!r} (balls after the point must be 0-{BALLS_PER_OVER - 1})")
    return int(whole) * BALLS_PER_OVER + in_over


def balls_to_overs(balls: int) -> float:
    """
    Display form of a legal-ball count: 13 -> 2.1, 6 -> 1.0.
    """
    if balls < 0:
        raise ValueError("Balls cannot be negative")
    complete_overs, balls_in_over = divmod(balls, BALLS_PER_OVER)
    return float(f"{complete_overs}.{balls_in_over}")


def run_rate(runs: int, balls: int) -> float:
    if balls <= 0:
        return 0.0
    return runs / (balls / BALLS_PER_OVER)


def required_run_rate(target: Optional[int], runs: int, balls: int, total_overs: int) -> Optional[float]:
    """
    Runs per over still needed by the chasing side.

    Returns None when there is no target yet, and 0.0 once the target is
    reached. If no balls are left the remaining runs are returned as-is.
    """
    if target is None:
        return None

    runs_needed = target - runs
    if runs_needed <= 0:
        return 0.0

    balls_left = total_overs * BALLS_PER_OVER - balls
    if balls_left <= 0:
        return float(runs_needed)
    return runs_needed / (balls_left / BALLS_PER_OVER)
