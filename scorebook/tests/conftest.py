"""Shared test fixtures for scorebook tests."""

from __future__ import annotations

from typing import Optional

import pytest

from scorebook.config import MatchDefaults, ScorerConfig, StorageConfig
from scorebook.data.ball_event import BallEvent, ExtrasType, WicketType
from scorebook.data.event_log import InMemoryEventLog
from scorebook.data.match import Match
from scorebook.service import ScoringService


@pytest.fixture
def scorer_config() -> ScorerConfig:
    """Standard test configuration."""
    return ScorerConfig(
        match=MatchDefaults(overs_limit=20, roster_size=11),
        storage=StorageConfig(in_memory=True),
    )


@pytest.fixture
def store() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture
def service(store: InMemoryEventLog, scorer_config: ScorerConfig) -> ScoringService:
    return ScoringService(store, scorer_config)


@pytest.fixture
def small_match(service: ScoringService) -> Match:
    """Two-over match between four-player sides; Thunder bat first."""
    return service.create_match(
        team_a="Thunder",
        team_a_players=["Ava", "Ben", "Cal", "Dev"],
        team_b="Strikers",
        team_b_players=["Wes", "Xan", "Yaz", "Zed"],
        overs_limit=2,
        toss_winner="Thunder",
        toss_choice="bat",
    )


def make_ball(
    runs: int = 0,
    extras: ExtrasType = ExtrasType.NONE,
    extras_runs: int = 0,
    striker: str = "bat_1",
    non_striker: str = "bat_2",
    bowler: str = "bowl_1",
    wicket: Optional[WicketType] = None,
    out: Optional[str] = None,
    assister: Optional[str] = None,
    over: int = 0,
    ball: int = 1,
    innings_id: str = "inn_1",
) -> BallEvent:
    """Create a delivery for testing; `wicket` makes it a wicket ball."""
    return BallEvent(
        innings_id=innings_id,
        striker_id=striker,
        non_striker_id=non_striker,
        bowler_id=bowler,
        runs_scored=runs,
        extras_type=extras,
        extras_runs=extras_runs,
        is_wicket=wicket is not None,
        wicket_type=wicket or WicketType.NONE,
        out_player_id=out,
        assister_id=assister,
        over_number=over,
        ball_number=ball,
    )


def legal_over(runs: list[int], bowler: str = "bowl_1", over: int = 0) -> list[BallEvent]:
    """Six legal deliveries by one bowler, batters fixed as bat_1/bat_2."""
    return [
        make_ball(runs=r, bowler=bowler, over=over, ball=i + 1)
        for i, r in enumerate(runs)
    ]


def player_id(match: Match, name: str) -> str:
    for team in match.teams:
        for p in team.players:
            if p.name == name:
                return p.player_id
    raise KeyError(name)
