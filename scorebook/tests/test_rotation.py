"""Tests for strike and over rotation."""

from __future__ import annotations

from scorebook.data.ball_event import ExtrasType, WicketType
from scorebook.state.rotation import Rotation, derive_rotation, runs_to_rotate
from scorebook.tests.conftest import make_ball


class TestStrikeRotation:
    def test_no_events(self):
        assert derive_rotation(None, 0) == Rotation()

    def test_dot_ball_keeps_strike(self):
        rot = derive_rotation(make_ball(runs=0), legal_balls=1)
        assert rot.striker_id == "bat_1"
        assert rot.non_striker_id == "bat_2"
        assert rot.bowler_id == "bowl_1"
        assert rot.last_bowler_id == "bowl_1"

    def test_single_swaps_strike(self):
        rot = derive_rotation(make_ball(runs=1), legal_balls=3)
        assert rot.striker_id == "bat_2"
        assert rot.non_striker_id == "bat_1"

    def test_two_runs_keep_strike(self):
        rot = derive_rotation(make_ball(runs=2), legal_balls=3)
        assert rot.striker_id == "bat_1"

    def test_wide_extras_count_toward_rotation(self):
        # One-run wide (the penalty run only) is odd
        rot = derive_rotation(make_ball(extras=ExtrasType.WIDE, extras_runs=1), legal_balls=2)
        assert rot.striker_id == "bat_2"
        # Wide plus one run taken is even
        rot = derive_rotation(make_ball(extras=ExtrasType.WIDE, extras_runs=2), legal_balls=2)
        assert rot.striker_id == "bat_1"

    def test_no_ball_adds_bat_runs_and_extras(self):
        event = make_ball(runs=2, extras=ExtrasType.NO_BALL, extras_runs=1)
        assert runs_to_rotate(event) == 3
        assert derive_rotation(event, legal_balls=2).striker_id == "bat_2"

    def test_byes_do_not_rotate(self):
        event = make_ball(extras=ExtrasType.BYE, extras_runs=1)
        assert runs_to_rotate(event) == 0
        assert derive_rotation(event, legal_balls=2).striker_id == "bat_1"


class TestOverBoundary:
    def test_end_of_over_swaps_and_clears_bowler(self):
        rot = derive_rotation(make_ball(runs=0, ball=6), legal_balls=6)
        assert rot.striker_id == "bat_2"
        assert rot.non_striker_id == "bat_1"
        assert rot.bowler_id is None
        assert rot.last_bowler_id == "bowl_1"

    def test_odd_run_on_last_ball_is_double_swap(self):
        rot = derive_rotation(make_ball(runs=1, ball=6), legal_balls=12)
        assert rot.striker_id == "bat_1"
        assert rot.non_striker_id == "bat_2"
        assert rot.bowler_id is None

    def test_wide_after_sixth_ball_still_end_of_over(self):
        # Legal count stays at 6: the wide is treated as ending the over again
        rot = derive_rotation(make_ball(extras=ExtrasType.WIDE, extras_runs=1), legal_balls=6)
        assert rot.bowler_id is None
        assert rot.striker_id == "bat_1"


class TestWicketOverride:
    def test_striker_out_mid_over(self):
        rot = derive_rotation(make_ball(wicket=WicketType.BOWLED), legal_balls=3)
        assert rot.striker_id is None
        assert rot.non_striker_id == "bat_2"
        assert rot.bowler_id == "bowl_1"

    def test_striker_out_on_last_ball_without_out_player(self):
        rot = derive_rotation(make_ball(wicket=WicketType.BOWLED, ball=6), legal_balls=6)
        assert rot.striker_id is None
        assert rot.bowler_id is None

    def test_named_batter_out_on_last_ball_keeps_partner_on_strike(self):
        event = make_ball(wicket=WicketType.CAUGHT, out="bat_1", ball=6)
        rot = derive_rotation(event, legal_balls=6)
        assert rot.striker_id == "bat_2"
        assert rot.non_striker_id is None
        assert rot.bowler_id is None

    def test_non_striker_run_out_after_crossing(self):
        # Single attempted, batters crossed, then bat_1 run out at the far end
        event = make_ball(runs=1, wicket=WicketType.RUN_OUT, out="bat_1")
        rot = derive_rotation(event, legal_balls=2)
        assert rot.striker_id == "bat_2"
        assert rot.non_striker_id is None

    def test_non_striker_run_out_without_runs(self):
        event = make_ball(wicket=WicketType.RUN_OUT, out="bat_2")
        rot = derive_rotation(event, legal_balls=2)
        assert rot.striker_id == "bat_1"
        assert rot.non_striker_id is None
