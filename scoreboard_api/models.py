from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from scoreboard_api.config import BALLS_PER_OVER
from scoreboard_api.overs_math import balls_to_overs, required_run_rate, run_rate


# -----------------------------
# Enumerations
# -----------------------------
Side = Literal["A", "B"]
MatchStatus = Literal["SCHEDULED", "LIVE", "COMPLETED"]
MatchResultType = Literal["WIN", "TIE"]
ExtraType = Literal["WIDE", "NOBALL", "BYE", "LEGBYE"]
TossDecision = Literal["BAT", "BOWL"]
BatsmanSlot = Literal["striker", "nonStriker"]

SIDES = ("A", "B")
EXTRA_TYPES = ("WIDE", "NOBALL", "BYE", "LEGBYE")
TOSS_DECISIONS = ("BAT", "BOWL")
BATSMAN_SLOTS = ("striker", "nonStriker")
OUT_TYPES = ("BOWLED", "CAUGHT", "LBW", "RUN_OUT", "STUMPED", "HIT_WICKET", "RETIRED")

# Dismissals that do not go to the bowler's wicket column
NON_BOWLER_DISMISSALS = frozenset({"RUN_OUT", "RETIRED"})


def other_side(side: Side) -> Side:
    return "B" if side == "A" else "A"


# -----------------------------
# Team score
# -----------------------------
@dataclass
class Extras:
    wides: int = 0
    no_balls: int = 0
    byes: int = 0
    leg_byes: int = 0

    @property
    def total(self) -> int:
        return self.wides + self.no_balls + self.byes + self.leg_byes


@dataclass
class Score:
    """
    Running total for one side.

    `balls` counts every legal delivery of the innings (overs * 6 + balls);
    `overs` is the display form, e.g. 13 legal balls -> 2.1.
    """
    runs: int = 0
    wickets: int = 0
    balls: int = 0
    extras: Extras = field(default_factory=Extras)

    @property
    def overs(self) -> float:
        return balls_to_overs(self.balls)

    @property
    def balls_in_over(self) -> int:
        return self.balls % BALLS_PER_OVER

    def snapshot(self) -> Score:
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runs": self.runs,
            "wickets": self.wickets,
            "overs": self.overs,
            "balls": self.balls_in_over,
            "legal_balls": self.balls,
            "extras": {
                "wides": self.extras.wides,
                "no_balls": self.extras.no_balls,
                "byes": self.extras.byes,
                "leg_byes": self.extras.leg_byes,
                "total": self.extras.total,
            },
        }


# -----------------------------
# Squad entry
# -----------------------------
@dataclass
class PlayerEntry:
    player_id: str
    name: str

    # Batting
    runs_scored: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False
    out_type: Optional[str] = None
    out_by: str = ""
    is_current_batsman: bool = False
    is_on_strike: bool = False

    # Bowling
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets_taken: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = 0
    is_current_bowler: bool = False

    @property
    def overs_bowled(self) -> float:
        return balls_to_overs(self.balls_bowled)

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return round(self.runs_scored * 100 / self.balls_faced, 2)

    @property
    def economy(self) -> float:
        return round(run_rate(self.runs_conceded, self.balls_bowled), 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "runs_scored": self.runs_scored,
            "balls_faced": self.balls_faced,
            "fours": self.fours,
            "sixes": self.sixes,
            "strike_rate": self.strike_rate,
            "is_out": self.is_out,
            "out_type": self.out_type,
            "out_by": self.out_by,
            "is_current_batsman": self.is_current_batsman,
            "is_on_strike": self.is_on_strike,
            "balls_bowled": self.balls_bowled,
            "overs_bowled": self.overs_bowled,
            "runs_conceded": self.runs_conceded,
            "wickets_taken": self.wickets_taken,
            "maidens": self.maidens,
            "wides": self.wides,
            "no_balls": self.no_balls,
            "economy": self.economy,
            "is_current_bowler": self.is_current_bowler,
        }


# -----------------------------
# Records
# -----------------------------
@dataclass(frozen=True)
class FallOfWicket:
    team: Side
    wicket_number: int
    player_id: Optional[str]
    player_name: str
    runs: int
    balls: int
    team_score: int
    team_overs: float
    dismissal_type: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team": self.team,
            "wicket_number": self.wicket_number,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "runs": self.runs,
            "balls": self.balls,
            "team_score": self.team_score,
            "team_overs": self.team_overs,
            "dismissal_type": self.dismissal_type,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class OverSummary:
    over_number: int
    runs: int
    wickets: int
    balls: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "over_number": self.over_number,
            "runs": self.runs,
            "wickets": self.wickets,
            "balls": list(self.balls),
        }


@dataclass
class RestorePoint:
    """Everything besides the team score that a single action can change."""
    status: MatchStatus
    current_innings: int
    squad_a: List[PlayerEntry]
    squad_b: List[PlayerEntry]
    striker: Optional[str]
    non_striker: Optional[str]
    bowler: Optional[str]
    players_tracked: bool
    current_over_balls: List[str]
    recent_overs: List[OverSummary]
    fall_of_wickets: List[FallOfWicket]


@dataclass
class HistoryEntry:
    timestamp: datetime
    team: Side
    action: str
    before: Score
    after: Optional[Score] = None
    restore: Optional[RestorePoint] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "team": self.team,
            "action": self.action,
            "before": self.before.to_dict(),
            "after": self.after.to_dict() if self.after is not None else None,
        }


@dataclass
class Toss:
    winner: Optional[str] = None
    decision: Optional[TossDecision] = None
    conducted_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winner": self.winner,
            "decision": self.decision,
            "conducted_at": self.conducted_at.isoformat() if self.conducted_at else None,
        }


# -----------------------------
# Aggregate root
# -----------------------------
@dataclass
class MatchState:
    match_id: str
    team_a: str
    team_b: str
    sport: str = "CRICKET"
    status: MatchStatus = "SCHEDULED"
    total_overs: int = 20
    venue: Optional[str] = None
    scheduled_at: Optional[datetime] = None

    score_a: Score = field(default_factory=Score)
    score_b: Score = field(default_factory=Score)
    current_innings: int = 1
    batting_team: Side = "A"
    target: Optional[int] = None
    toss: Toss = field(default_factory=Toss)

    squad_a: List[PlayerEntry] = field(default_factory=list)
    squad_b: List[PlayerEntry] = field(default_factory=list)

    # Turn slots hold player ids from the batting / bowling squads
    striker: Optional[str] = None
    non_striker: Optional[str] = None
    bowler: Optional[str] = None
    players_tracked: bool = False

    current_over_balls: List[str] = field(default_factory=list)
    recent_overs: List[OverSummary] = field(default_factory=list)
    fall_of_wickets: List[FallOfWicket] = field(default_factory=list)
    history: List[HistoryEntry] = field(default_factory=list)

    winner: Optional[str] = None
    result: Optional[MatchResultType] = None

    @property
    def bowling_team(self) -> Side:
        return other_side(self.batting_team)

    def team_ref(self, side: Side) -> str:
        return self.team_a if side == "A" else self.team_b

    def score_for(self, side: Side) -> Score:
        return self.score_a if side == "A" else self.score_b

    def set_score(self, side: Side, score: Score) -> None:
        if side == "A":
            self.score_a = score
        else:
            self.score_b = score

    def squad_for(self, side: Side) -> List[PlayerEntry]:
        return self.squad_a if side == "A" else self.squad_b

    def find_player(self, side: Side, player_id: Optional[str]) -> Optional[PlayerEntry]:
        if player_id is None:
            return None
        for p in self.squad_for(side):
            if p.player_id == player_id:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        batting = self.score_for(self.batting_team)
        rrr = required_run_rate(self.target, batting.runs, batting.balls, self.total_overs)

        def _name(side: Side, player_id: Optional[str]) -> Optional[str]:
            p = self.find_player(side, player_id)
            return p.name if p else None

        return {
            "match_id": self.match_id,
            "sport": self.sport,
            "team_a": self.team_a,
            "team_b": self.team_b,
            "status": self.status,
            "total_overs": self.total_overs,
            "venue": self.venue,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "score_a": self.score_a.to_dict(),
            "score_b": self.score_b.to_dict(),
            "current_innings": self.current_innings,
            "batting_team": self.batting_team,
            "target": self.target,
            "current_run_rate": round(run_rate(batting.runs, batting.balls), 2),
            "required_run_rate": round(rrr, 2) if rrr is not None else None,
            "toss": self.toss.to_dict(),
            "squad_a": [p.to_dict() for p in self.squad_a],
            "squad_b": [p.to_dict() for p in self.squad_b],
            "current_batsmen": {
                "striker": self.striker,
                "striker_name": _name(self.batting_team, self.striker),
                "non_striker": self.non_striker,
                "non_striker_name": _name(self.batting_team, self.non_striker),
            },
            "current_bowler": self.bowler,
            "current_bowler_name": _name(self.bowling_team, self.bowler),
            "current_over_balls": list(self.current_over_balls),
            "recent_overs": [o.to_dict() for o in self.recent_overs],
            "fall_of_wickets": [f.to_dict() for f in self.fall_of_wickets],
            "history": [h.to_dict() for h in self.history],
            "winner": self.winner,
            "result": self.result,
        }
