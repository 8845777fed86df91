# scoreboard_api/commands.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from scoreboard_api.errors import ValidationError
from scoreboard_api.models import SIDES


# -----------------------------
# Ball events
# -----------------------------
@dataclass(frozen=True)
class Runs:
    team: str
    runs: int


@dataclass(frozen=True)
class Wicket:
    team: str
    out_type: str = "BOWLED"
    out_by: Optional[str] = None


@dataclass(frozen=True)
class Extra:
    team: str
    extra_type: str


# -----------------------------
# Administrative commands
# -----------------------------
@dataclass(frozen=True)
class PlayerRef:
    player_id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class TossCall:
    # winner=None resets the toss
    winner: Optional[str] = None
    decision: Optional[str] = None


@dataclass(frozen=True)
class SelectBatsman:
    slot: str
    player: PlayerRef


@dataclass(frozen=True)
class SelectBowler:
    player: PlayerRef


@dataclass(frozen=True)
class SwitchStrike:
    pass


@dataclass(frozen=True)
class EndOver:
    pass


@dataclass(frozen=True)
class SwapInnings:
    pass


@dataclass(frozen=True)
class SetSquad:
    team: str
    players: Tuple[PlayerRef, ...]


@dataclass(frozen=True)
class OverrideScore:
    team: str
    runs: Optional[int] = None
    wickets: Optional[int] = None
    overs: Optional[str] = None


@dataclass(frozen=True)
class CompleteMatch:
    pass


BallEvent = Union[Runs, Wicket, Extra]
Command = Union[
    Runs, Wicket, Extra, Undo, TossCall, SelectBatsman, SelectBowler,
    SwitchStrike, EndOver, SwapInnings, SetSquad, OverrideScore, CompleteMatch,
]


# -----------------------------
# Request payload -> Command
# -----------------------------
def _team(payload: Dict[str, Any]) -> str:
    team = payload.get("team")
    if team not in SIDES:
        raise ValidationError('Team must be either "A" or "B" for score updates')
    return team


def _player_ref(raw: Any, id_key: str, name_key: str) -> PlayerRef:
    if not isinstance(raw, dict):
        raise ValidationError(f"Expected an object with {id_key}/{name_key}")
    ref = PlayerRef(player_id=raw.get(id_key), name=raw.get(name_key))
    if ref.player_id is None and not ref.name:
        raise ValidationError(f"{id_key} or {name_key} is required")
    return ref


def _squad(raw: Any) -> Tuple[PlayerRef, ...]:
    if not isinstance(raw, list):
        raise ValidationError("Squad must be a list of players")
    players: List[PlayerRef] = []
    for item in raw:
        if isinstance(item, str):
            players.append(PlayerRef(name=item))
        else:
            players.append(_player_ref(item, "playerId", "playerName"))
    return tuple(players)


def _operations(payload: Dict[str, Any]) -> List[str]:
    ops: List[str] = []
    if payload.get("runs") is not None:
        ops.append("runs")
    if payload.get("isWicket"):
        ops.append("isWicket")
    if payload.get("extraType") is not None:
        ops.append("extraType")
    if payload.get("isUndo"):
        ops.append("isUndo")
    # toss=None is meaningful (reset), so presence is what counts
    if "toss" in payload:
        ops.append("toss")
    for key in ("selectBatsman", "selectBowler", "squadA", "squadB", "override", "status"):
        if payload.get(key) is not None:
            ops.append(key)
    for key in ("switchStrike", "endOver", "swapInnings"):
        if payload.get(key):
            ops.append(key)
    return ops


def command_from_payload(payload: Dict[str, Any]) -> Command:
    """
    Builds exactly one Command from an update request body.

    A body naming more than one operation is rejected instead of picking one
    by precedence.
    """
    ops = _operations(payload)
    if not ops:
        raise ValidationError("No scoring operation in request")
    if len(ops) > 1:
        raise ValidationError(f"Request names more than one operation: {', '.join(ops)}")

    op = ops[0]

    if op == "runs":
        return Runs(team=_team(payload), runs=payload["runs"])

    if op == "isWicket":
        return Wicket(
            team=_team(payload),
            out_type=payload.get("outType") or "BOWLED",
            out_by=payload.get("outBy"),
        )

    if op == "extraType":
        return Extra(team=_team(payload), extra_type=payload["extraType"])

    if op == "isUndo":
        return Undo()

    if op == "toss":
        toss = payload["toss"]
        if toss is None:
            return TossCall()
        if not isinstance(toss, dict):
            raise ValidationError("toss must be an object with winner and decision")
        return TossCall(winner=toss.get("winner"), decision=toss.get("decision"))

    if op == "selectBatsman":
        raw = payload["selectBatsman"]
        ref = _player_ref(raw, "playerId", "playerName")
        return SelectBatsman(slot=raw.get("position") or "striker", player=ref)

    if op == "selectBowler":
        return SelectBowler(player=_player_ref(payload["selectBowler"], "bowlerId", "bowlerName"))

    if op in ("squadA", "squadB"):
        return SetSquad(team=op[-1], players=_squad(payload[op]))

    if op == "override":
        raw = payload["override"]
        if not isinstance(raw, dict):
            raise ValidationError("override must be an object with runs/wickets/overs")
        overs = raw.get("overs")
        return OverrideScore(
            team=_team(payload),
            runs=raw.get("runs"),
            wickets=raw.get("wickets"),
            overs=str(overs) if overs is not None else None,
        )

    if op == "status":
        if payload["status"] != "COMPLETED":
            raise ValidationError(f"Unsupported status change: {payload['status']!r}")
        return CompleteMatch()

    if op == "switchStrike":
        return SwitchStrike()
    if op == "endOver":
        return EndOver()
    return SwapInnings()
