"""Tests for the match state machine: scenarios, undo, toss, innings and completion."""

import pytest

from conftest import bowl_runs, player, striker_name

from scoreboard_api import engine
from scoreboard_api.commands import (
    CompleteMatch,
    EndOver,
    Extra,
    OverrideScore,
    PlayerRef,
    Runs,
    SwapInnings,
    SwitchStrike,
    Undo,
    Wicket,
)
from scoreboard_api.config import HISTORY_LIMIT
from scoreboard_api.errors import (
    InvalidStateError,
    NoHistoryError,
    ValidationError,
)


def _score(state, side="A"):
    s = state.score_for(side)
    return (s.runs, s.wickets, s.overs)


class TestCreateMatch:
    def test_new_match_is_scheduled_and_empty(self, match):
        assert match.status == "SCHEDULED"
        assert match.current_innings == 1
        assert match.batting_team == "A"
        assert match.total_overs == 20
        assert _score(match, "A") == _score(match, "B") == (0, 0, 0.0)

    def test_same_team_twice(self):
        with pytest.raises(ValidationError):
            engine.create_match("m", "X", "X")

    def test_initial_squads_get_ids(self):
        state = engine.create_match(
            "m", "X", "Y",
            squad_a=[PlayerRef(name="Alice"), PlayerRef(player_id="p-2", name="Bob")],
        )
        assert [p.name for p in state.squad_a] == ["Alice", "Bob"]
        assert state.squad_a[0].player_id
        assert state.squad_a[1].player_id == "p-2"


class TestScenario:
    def test_four_wide_wicket(self, tracked_match):
        engine.apply_ball_event(tracked_match, Runs(team="A", runs=4))
        assert _score(tracked_match) == (4, 0, 0.1)

        engine.apply_ball_event(tracked_match, Extra(team="A", extra_type="WIDE"))
        assert _score(tracked_match) == (5, 0, 0.1)

        engine.apply_ball_event(tracked_match, Wicket(team="A"))
        assert _score(tracked_match) == (5, 1, 0.2)
        assert tracked_match.striker is None

        fow = tracked_match.fall_of_wickets[-1]
        assert fow.wicket_number == 1
        assert fow.player_name == "Alice"
        assert (fow.runs, fow.balls) == (4, 2)
        assert (fow.team_score, fow.team_overs) == (5, 0.2)
        assert fow.dismissal_type == "BOWLED"

    def test_undo_is_lifo(self, tracked_match):
        engine.apply_ball_event(tracked_match, Runs(team="A", runs=4))
        engine.apply_ball_event(tracked_match, Extra(team="A", extra_type="WIDE"))
        engine.apply_ball_event(tracked_match, Wicket(team="A"))

        engine.undo_last(tracked_match)
        assert _score(tracked_match) == (5, 0, 0.1)
        assert len(tracked_match.history) == 2
        assert tracked_match.history[-1].action == "WIDE"

        engine.undo_last(tracked_match)
        assert _score(tracked_match) == (4, 0, 0.1)
        assert tracked_match.score_a.extras.wides == 0

    def test_untracked_scoring_still_works(self, match):
        engine.apply_ball_event(match, Runs(team="A", runs=4))
        engine.apply_ball_event(match, Extra(team="A", extra_type="WIDE"))
        engine.apply_ball_event(match, Wicket(team="A"))
        assert _score(match) == (5, 1, 0.2)
        assert match.fall_of_wickets[-1].player_id is None
        assert match.squad_a == []


class TestBallEventRules:
    def test_first_ball_goes_live(self, match):
        bowl_runs(match, 0)
        assert match.status == "LIVE"

    def test_wrong_side(self, match):
        with pytest.raises(InvalidStateError):
            engine.apply_ball_event(match, Runs(team="B", runs=1))
        assert match.history == []
        assert match.status == "SCHEDULED"

    def test_unknown_side(self, match):
        with pytest.raises(ValidationError):
            engine.apply_ball_event(match, Runs(team="C", runs=1))

    def test_invalid_runs_leave_no_trace(self, tracked_match):
        with pytest.raises(ValidationError):
            engine.apply_ball_event(tracked_match, Runs(team="A", runs=8))
        assert tracked_match.history == []
        assert player(tracked_match, "Alice").balls_faced == 0
        assert tracked_match.current_over_balls == []

    def test_unknown_out_type(self, tracked_match):
        with pytest.raises(ValidationError):
            engine.apply_ball_event(tracked_match, Wicket(team="A", out_type="TIMED_OUT_ISH"))

    def test_eleventh_wicket_rejected(self, match):
        match.score_a.wickets = 10
        match.score_a.balls = 90
        with pytest.raises(InvalidStateError):
            engine.apply_ball_event(match, Wicket(team="A"))
        assert match.score_a.wickets == 10
        assert match.score_a.balls == 90
        assert match.history == []

    def test_wickets_never_exceed_ten(self, match):
        for _ in range(10):
            engine.apply_ball_event(match, Wicket(team="A"))
        assert match.score_a.wickets == 10
        with pytest.raises(InvalidStateError):
            engine.apply_ball_event(match, Wicket(team="A"))
        assert match.score_a.wickets == 10

    def test_striker_must_be_reselected_after_wicket(self, tracked_match):
        engine.apply_ball_event(tracked_match, Wicket(team="A"))
        with pytest.raises(InvalidStateError):
            bowl_runs(tracked_match, 1)
        assert tracked_match.score_a.balls == 1

        engine.select_batsman(tracked_match, PlayerRef(name="Carol"), "striker")
        bowl_runs(tracked_match, 1)
        assert player(tracked_match, "Carol").runs_scored == 1


class TestUndo:
    def test_empty_history(self, match):
        with pytest.raises(NoHistoryError):
            engine.undo_last(match)

    @pytest.mark.parametrize(
        "event",
        [
            Runs(team="A", runs=3),
            Wicket(team="A", out_type="CAUGHT", out_by="Keeper"),
            Extra(team="A", extra_type="NOBALL"),
            Extra(team="A", extra_type="LEGBYE"),
        ],
    )
    def test_round_trip_restores_score(self, tracked_match, event):
        bowl_runs(tracked_match, 2, 4)
        before = tracked_match.score_a.snapshot()
        engine.apply_ball_event(tracked_match, event)
        engine.undo_last(tracked_match)
        assert tracked_match.score_a == before

    def test_undo_wicket_restores_players(self, tracked_match):
        bowl_runs(tracked_match, 0)
        engine.apply_ball_event(tracked_match, Wicket(team="A"))
        engine.undo_last(tracked_match)

        alice = player(tracked_match, "Alice")
        assert not alice.is_out
        assert alice.balls_faced == 1
        assert striker_name(tracked_match) == "Alice"
        assert player(tracked_match, "Zed", "B").wickets_taken == 0
        assert tracked_match.fall_of_wickets == []
        assert tracked_match.current_over_balls == ["0"]

    def test_undo_over_completion(self, tracked_match):
        bowl_runs(tracked_match, 0, 0, 0, 0, 0, 0)
        assert player(tracked_match, "Zed", "B").maidens == 1
        engine.undo_last(tracked_match)
        assert player(tracked_match, "Zed", "B").maidens == 0
        assert tracked_match.current_over_balls == ["0"] * 5
        assert tracked_match.recent_overs == []
        assert striker_name(tracked_match) == "Alice"

    def test_undo_keeps_later_squad_changes(self, tracked_match):
        bowl_runs(tracked_match, 0)
        zed = player(tracked_match, "Zed", "B")
        engine.set_squad(tracked_match, "B", [PlayerRef(player_id=zed.player_id), PlayerRef(name="Yan")])

        engine.undo_last(tracked_match)

        assert [p.name for p in tracked_match.squad_b] == ["Zed", "Yan"]
        assert player(tracked_match, "Zed", "B").balls_bowled == 0
        assert tracked_match.bowler == zed.player_id
        assert player(tracked_match, "Zed", "B").is_current_bowler

    def test_undo_keeps_players_dropped_after_the_ball(self, tracked_match):
        bowl_runs(tracked_match, 0)
        alice = player(tracked_match, "Alice")
        engine.set_squad(tracked_match, "A", [PlayerRef(player_id=alice.player_id)])

        engine.undo_last(tracked_match)

        assert [p.name for p in tracked_match.squad_a] == ["Alice"]
        assert tracked_match.non_striker is None
        assert tracked_match.striker == alice.player_id
        assert player(tracked_match, "Alice").balls_faced == 0

    def test_undo_wicket_after_new_batter_came_in(self, tracked_match):
        engine.apply_ball_event(tracked_match, Wicket(team="A"))
        engine.select_batsman(tracked_match, PlayerRef(name="Carol"), "striker")

        engine.undo_last(tracked_match)

        carol = player(tracked_match, "Carol")
        assert striker_name(tracked_match) == "Alice"
        assert player(tracked_match, "Alice").is_current_batsman
        assert not carol.is_current_batsman
        assert not carol.is_on_strike

    def test_undo_first_ball_returns_to_scheduled(self, match):
        bowl_runs(match, 1)
        engine.undo_last(match)
        assert match.status == "SCHEDULED"

    def test_history_is_bounded(self, match):
        bowl_runs(match, *([0] * (HISTORY_LIMIT + 5)))
        assert len(match.history) == HISTORY_LIMIT
        # oldest five were evicted
        assert match.history[0].before.balls == 5

    def test_history_records_before_and_after(self, match):
        bowl_runs(match, 6)
        entry = match.history[-1]
        assert entry.team == "A"
        assert entry.action == "+6 runs"
        assert (entry.before.runs, entry.after.runs) == (0, 6)

    def test_undo_rejected_on_completed_match(self, match):
        bowl_runs(match, 1)
        engine.complete_match(match)
        with pytest.raises(InvalidStateError):
            engine.undo_last(match)


class TestToss:
    def test_winner_bats(self, match):
        engine.apply_toss(match, "TEAM_B", "BAT")
        assert match.batting_team == "B"
        assert match.toss.winner == "TEAM_B"
        assert match.toss.conducted_at is not None

    def test_winner_bowls(self, match):
        engine.apply_toss(match, "TEAM_B", "BOWL")
        assert match.batting_team == "A"

    def test_toss_replaced_and_reset(self, match):
        engine.apply_toss(match, "TEAM_A", "BOWL")
        engine.apply_toss(match, "TEAM_A", "BAT")
        assert match.batting_team == "A"
        assert match.toss.decision == "BAT"
        engine.apply_toss(match, None, None)
        assert match.toss.winner is None

    def test_toss_does_not_touch_score(self, match):
        engine.apply_toss(match, "TEAM_B", "BAT")
        assert match.history == []
        assert _score(match, "B") == (0, 0, 0.0)

    def test_invalid_toss(self, match):
        with pytest.raises(ValidationError):
            engine.apply_toss(match, "SOMEONE", "BAT")
        with pytest.raises(ValidationError):
            engine.apply_toss(match, "TEAM_A", "FIELD")

    def test_toss_after_first_ball(self, match):
        bowl_runs(match, 0)
        with pytest.raises(InvalidStateError):
            engine.apply_toss(match, "TEAM_B", "BAT")


class TestInnings:
    def test_swap_sets_target_and_resets_turns(self, tracked_match):
        bowl_runs(tracked_match, 4, 6, 1)
        engine.swap_innings(tracked_match)

        assert tracked_match.target == 12
        assert tracked_match.batting_team == "B"
        assert tracked_match.current_innings == 2
        assert tracked_match.striker is None
        assert tracked_match.non_striker is None
        assert tracked_match.bowler is None
        assert tracked_match.current_over_balls == []
        assert not player(tracked_match, "Zed", "B").is_current_bowler

    def test_second_innings_scoring(self, tracked_match):
        bowl_runs(tracked_match, 4)
        engine.swap_innings(tracked_match)
        engine.select_batsman(tracked_match, PlayerRef(name="Zed"), "striker")
        engine.select_bowler(tracked_match, PlayerRef(name="Alice"))
        bowl_runs(tracked_match, 2, team="B")
        assert _score(tracked_match, "B") == (2, 0, 0.1)
        assert player(tracked_match, "Zed", "B").runs_scored == 2
        assert player(tracked_match, "Alice", "A").runs_conceded == 2

    def test_only_two_innings(self, match):
        engine.swap_innings(match)
        with pytest.raises(InvalidStateError):
            engine.swap_innings(match)

    def test_cannot_undo_into_previous_innings(self, match):
        bowl_runs(match, 4)
        engine.swap_innings(match)
        with pytest.raises(InvalidStateError):
            engine.undo_last(match)
        assert match.score_a.runs == 4


class TestCompletion:
    def test_higher_score_wins(self, match):
        match.score_a.runs = 150
        match.score_b.runs = 120
        engine.complete_match(match)
        assert match.status == "COMPLETED"
        assert match.winner == "TEAM_A"
        assert match.result == "WIN"

    def test_chasing_side_wins(self, match):
        match.score_b.runs = 10
        engine.complete_match(match)
        assert match.winner == "TEAM_B"

    def test_tie_has_no_winner(self, match):
        match.score_a.runs = match.score_b.runs = 99
        engine.complete_match(match)
        assert match.winner is None
        assert match.result == "TIE"

    @pytest.mark.parametrize(
        "command",
        [
            Runs(team="A", runs=1),
            Extra(team="A", extra_type="WIDE"),
            Wicket(team="A"),
            SwapInnings(),
            SwitchStrike(),
            EndOver(),
            OverrideScore(team="A", runs=1),
            CompleteMatch(),
        ],
    )
    def test_completed_match_is_frozen(self, match, command):
        engine.complete_match(match)
        with pytest.raises(InvalidStateError):
            engine.dispatch(match, command)


class TestOverride:
    def test_override_is_undoable(self, match):
        bowl_runs(match, 1)
        engine.override_score(match, "A", runs=100, wickets=3, overs="12.0")
        assert _score(match) == (100, 3, 12.0)
        assert match.history[-1].action == "Score override"
        assert match.current_over_balls == []

        engine.undo_last(match)
        assert _score(match) == (1, 0, 0.1)
        assert match.current_over_balls == ["1"]

    def test_batting_side_overs_must_end_an_over(self, match):
        bowl_runs(match, 1, 2)
        with pytest.raises(ValidationError):
            engine.override_score(match, "A", runs=40, overs="7.2")
        assert _score(match) == (3, 0, 0.2)
        assert match.current_over_balls == ["1", "2"]
        assert len(match.history) == 2

    def test_override_keeps_strip_in_step_with_ledger(self, match):
        bowl_runs(match, 1, 2)
        engine.override_score(match, "A", overs="3.0")
        bowl_runs(match, 4)
        legal = [b for b in match.current_over_balls if b not in ("Wd", "Nb")]
        assert len(legal) == match.score_a.balls_in_over == 1

    def test_runs_only_override_keeps_strip(self, match):
        bowl_runs(match, 1, 2)
        engine.override_score(match, "A", runs=10, overs="0.2")
        assert match.current_over_balls == ["1", "2"]

    def test_bowling_side_any_overs(self, match):
        engine.override_score(match, "B", runs=88, overs="7.2")
        assert _score(match, "B") == (88, 0, 7.2)

    def test_override_bad_overs(self, match):
        with pytest.raises(ValidationError):
            engine.override_score(match, "A", overs="12.7")
        assert match.history == []

    def test_override_needs_a_field(self, match):
        with pytest.raises(ValidationError):
            engine.override_score(match, "A")


class TestDispatch:
    def test_messages(self, tracked_match):
        assert engine.dispatch(tracked_match, Runs(team="A", runs=2)) == "Score updated"
        assert engine.dispatch(tracked_match, SwitchStrike()) == "Strike switched"
        assert engine.dispatch(tracked_match, Undo()) == "Last action undone"

    def test_unknown_command(self, match):
        with pytest.raises(ValidationError):
            engine.dispatch(match, object())
