"""
Pytest fixtures for the cricket scoring engine and API.
"""

import pytest

from scoreboard_api import engine
from scoreboard_api.commands import PlayerRef, Runs
from scoreboard_api.store import MatchRegistry


# ==================== Engine Fixtures ====================

@pytest.fixture
def match():
    """A freshly scheduled match, team A batting, no players tracked."""
    return engine.create_match("m-1", "TEAM_A", "TEAM_B")


@pytest.fixture
def tracked_match(match):
    """Team A batting with Alice on strike, Bob at the other end and Zed bowling."""
    engine.select_batsman(match, PlayerRef(name="Alice"), "striker")
    engine.select_batsman(match, PlayerRef(name="Bob"), "nonStriker")
    engine.select_bowler(match, PlayerRef(name="Zed"))
    return match


def player(state, name, side="A"):
    return next(p for p in state.squad_for(side) if p.name == name)


def striker_name(state):
    p = state.find_player(state.batting_team, state.striker)
    return p.name if p else None


def bowl_runs(state, *values, team="A"):
    for v in values:
        engine.apply_ball_event(state, Runs(team=team, runs=v))


# ==================== Registry Fixtures ====================

@pytest.fixture
def registry():
    return MatchRegistry()


# ==================== API Fixtures ====================

@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    import main

    main.registry.clear()
    with TestClient(main.app) as c:
        yield c
    main.registry.clear()
