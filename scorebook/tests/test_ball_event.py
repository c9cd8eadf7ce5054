"""Tests for the ball event model and validation."""

from __future__ import annotations

import pytest

from scorebook.data.ball_event import (
    BallEvent,
    ExtrasType,
    WicketType,
    validate_event,
)
from scorebook.errors import ValidationError
from scorebook.tests.conftest import make_ball


class TestExtrasAndWicketParsing:
    def test_extras_wire_codes(self):
        assert ExtrasType.parse("WD") is ExtrasType.WIDE
        assert ExtrasType.parse("NB") is ExtrasType.NO_BALL
        assert ExtrasType.parse("B") is ExtrasType.BYE
        assert ExtrasType.parse("LB") is ExtrasType.LEG_BYE
        assert ExtrasType.parse(None) is ExtrasType.NONE
        assert ExtrasType.parse("") is ExtrasType.NONE

    def test_extras_names_accepted(self):
        assert ExtrasType.parse("wide") is ExtrasType.WIDE
        assert ExtrasType.parse("leg_bye") is ExtrasType.LEG_BYE

    def test_unknown_extras_rejected(self):
        with pytest.raises(ValidationError):
            ExtrasType.parse("PEN")

    def test_wicket_labels(self):
        assert WicketType.parse("runout") is WicketType.RUN_OUT
        assert WicketType.parse("run_out") is WicketType.RUN_OUT
        assert WicketType.parse("Hit Wicket") is WicketType.HIT_WICKET
        assert WicketType.parse(None) is WicketType.NONE

    def test_unknown_wicket_rejected(self):
        with pytest.raises(ValidationError):
            WicketType.parse("timed out")

    def test_bowler_credit(self):
        assert WicketType.CAUGHT.credits_bowler
        assert WicketType.HIT_WICKET.credits_bowler
        assert not WicketType.RUN_OUT.credits_bowler
        assert not WicketType.RETIRED.credits_bowler


class TestBallEvent:
    def test_legal_delivery(self):
        assert make_ball(runs=1).is_legal_delivery
        assert make_ball(extras=ExtrasType.BYE, extras_runs=1).is_legal_delivery
        assert make_ball(extras=ExtrasType.LEG_BYE, extras_runs=1).is_legal_delivery
        assert not make_ball(extras=ExtrasType.WIDE, extras_runs=1).is_legal_delivery
        assert not make_ball(extras=ExtrasType.NO_BALL, extras_runs=1).is_legal_delivery

    def test_bowler_charged_runs(self):
        assert make_ball(runs=2, extras=ExtrasType.NO_BALL, extras_runs=1).bowler_charged_runs == 3
        assert make_ball(extras=ExtrasType.WIDE, extras_runs=5).bowler_charged_runs == 5
        assert make_ball(extras=ExtrasType.BYE, extras_runs=4).bowler_charged_runs == 0

    def test_dismissed_player_defaults_to_striker(self):
        assert make_ball(wicket=WicketType.BOWLED).dismissed_player_id == "bat_1"
        assert make_ball(wicket=WicketType.RUN_OUT, out="bat_2").dismissed_player_id == "bat_2"
        assert make_ball(runs=1).dismissed_player_id is None

    def test_events_are_immutable(self):
        event = make_ball(runs=1)
        with pytest.raises(AttributeError):
            event.runs_scored = 4  # type: ignore[misc]

    def test_from_dict_wire_shape(self):
        event = BallEvent.from_dict({
            "inningsId": "inn_9",
            "strikerId": "s",
            "nonStrikerId": "ns",
            "bowlerId": "b",
            "runsScored": 0,
            "extrasType": "WD",
            "extrasRuns": 1,
            "isWicket": False,
            "overNumber": 3,
            "ballNumber": 2,
        })
        assert event.extras_type is ExtrasType.WIDE
        assert event.over_ball_str == "3.2"
        assert event.to_dict()["extrasType"] == "WD"
        assert event.to_dict()["wicketType"] is None

    def test_from_dict_missing_field(self):
        with pytest.raises(ValidationError, match="bowlerId"):
            BallEvent.from_dict({"inningsId": "i", "strikerId": "s", "nonStrikerId": "n"})

    def test_from_dict_rejects_negative_runs(self):
        with pytest.raises(ValidationError):
            BallEvent.from_dict({
                "inningsId": "i",
                "strikerId": "s",
                "nonStrikerId": "n",
                "bowlerId": "b",
                "runsScored": -1,
            })


class TestValidation:
    def test_valid_event_passes(self):
        validate_event(make_ball(runs=4))
        validate_event(make_ball(wicket=WicketType.CAUGHT, assister="f"))

    def test_negative_extras_runs(self):
        with pytest.raises(ValidationError):
            validate_event(make_ball(extras=ExtrasType.BYE, extras_runs=-2))

    def test_extras_runs_without_type(self):
        with pytest.raises(ValidationError):
            validate_event(make_ball(extras_runs=1))

    def test_missing_bowler(self):
        with pytest.raises(ValidationError, match="bowler"):
            validate_event(make_ball(bowler=""))

    def test_same_batter_at_both_ends(self):
        with pytest.raises(ValidationError):
            validate_event(make_ball(striker="x", non_striker="x"))

    def test_wicket_type_without_wicket(self):
        event = BallEvent(
            innings_id="i",
            striker_id="s",
            non_striker_id="n",
            bowler_id="b",
            wicket_type=WicketType.BOWLED,
        )
        with pytest.raises(ValidationError):
            validate_event(event)

    def test_out_player_must_be_at_crease(self):
        with pytest.raises(ValidationError, match="not at the crease"):
            validate_event(make_ball(wicket=WicketType.RUN_OUT, out="bat_9"))
