# main.py (cricket live scoring)
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from scoreboard_api.commands import PlayerRef, command_from_payload
from scoreboard_api.config import LOG_LEVEL, validate_config
from scoreboard_api.errors import (
    InvalidStateError,
    NoHistoryError,
    NotFoundError,
    ScoringError,
    ValidationError,
)
from scoreboard_api.store import MatchRegistry

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Live Scoring API",
    version="0.1.0",
    description="Ball-by-ball cricket scoring: match state, player figures and undo history",
)

registry = MatchRegistry()


@app.on_event("startup")
def on_startup():
    validate_config()


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


# -----------------------
# Helpers
# -----------------------
def _http_error(e: ScoringError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidStateError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (ValidationError, NoHistoryError)):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def _squad_refs(players: list[SquadPlayerIn]) -> list[PlayerRef]:
    return [PlayerRef(player_id=p.playerId, name=p.playerName) for p in players]


# -----------------------
# Create
# -----------------------
class SquadPlayerIn(BaseModel):
    playerId: str | None = None
    playerName: str | None = None


class CreateMatchRequest(BaseModel):
    teamA: str = Field(..., description="Team A reference, e.g. a department id")
    teamB: str = Field(..., description="Team B reference")
    scheduledAt: datetime | None = None
    venue: str | None = None
    totalOvers: int | None = Field(None, ge=1, le=90)
    squadA: list[SquadPlayerIn] = Field(default_factory=list)
    squadB: list[SquadPlayerIn] = Field(default_factory=list)


@app.post("/api/matches/cricket/create", status_code=201)
def create_match(req: CreateMatchRequest):
    try:
        state = registry.create(
            req.teamA.strip(),
            req.teamB.strip(),
            total_overs=req.totalOvers,
            venue=req.venue,
            scheduled_at=req.scheduledAt,
            squad_a=_squad_refs(req.squadA),
            squad_b=_squad_refs(req.squadB),
        )
    except ScoringError as e:
        raise _http_error(e)
    return {"success": True, "data": state.to_dict()}


# -----------------------
# Update (one operation per request)
# -----------------------
class TossIn(BaseModel):
    winner: str
    decision: Literal["BAT", "BOWL"]


class SelectBatsmanIn(BaseModel):
    playerId: str | None = None
    playerName: str | None = None
    position: Literal["striker", "nonStriker"] = "striker"


class SelectBowlerIn(BaseModel):
    bowlerId: str | None = None
    bowlerName: str | None = None


class OverrideIn(BaseModel):
    runs: int | None = Field(None, ge=0)
    wickets: int | None = Field(None, ge=0, le=10)
    overs: str | None = Field(None, description="e.g. 12.3")


class UpdateScoreRequest(BaseModel):
    matchId: str
    team: str | None = Field(None, description="A or B")

    # Ball events
    runs: int | None = Field(None, description="Runs off the bat, 0-7")
    isWicket: bool | None = None
    outType: str | None = None
    outBy: str | None = None
    extraType: str | None = Field(None, description="WIDE, NOBALL, BYE or LEGBYE")

    # Administration
    isUndo: bool | None = None
    toss: TossIn | None = None
    selectBatsman: SelectBatsmanIn | None = None
    selectBowler: SelectBowlerIn | None = None
    switchStrike: bool | None = None
    endOver: bool | None = None
    swapInnings: bool | None = None
    squadA: list[SquadPlayerIn] | None = None
    squadB: list[SquadPlayerIn] | None = None
    override: OverrideIn | None = None
    status: Literal["COMPLETED"] | None = None


@app.put("/api/matches/cricket/update")
def update_score(req: UpdateScoreRequest):
    payload: Dict[str, Any] = req.model_dump(exclude_unset=True)
    match_id = payload.pop("matchId")

    try:
        command = command_from_payload(payload)
        state, message = registry.apply(match_id, command)
    except ScoringError as e:
        logger.info("match %s: rejected update: %s", match_id, e)
        raise _http_error(e)

    return {"success": True, "message": message, "data": state.to_dict()}


# -----------------------
# Read
# -----------------------
@app.get("/api/matches/cricket/{match_id}")
def get_match(match_id: str):
    try:
        state = registry.get(match_id)
    except NotFoundError as e:
        raise _http_error(e)
    return {"success": True, "data": state.to_dict()}


@app.get("/api/matches/cricket/{match_id}/history")
def get_history(match_id: str):
    try:
        state = registry.get(match_id)
    except NotFoundError as e:
        raise _http_error(e)
    return {
        "success": True,
        "count": len(state.history),
        "data": [h.to_dict() for h in reversed(state.history)],
    }
