"""
Derived innings statistics.

A MatchStats snapshot is the engine's only output. It is rebuilt from
the event log on every read and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import BallEvent


def overs_from_balls(balls: int) -> float:
    """Tenths-of-an-over display value: 15 balls -> 2.3, not 2.5."""
    return balls // BALLS_PER_OVER + (balls % BALLS_PER_OVER) / 10


def overs_str(balls: int) -> str:
    return f"{balls // BALLS_PER_OVER}.{balls % BALLS_PER_OVER}"


@dataclass
class BatterStats:
    player_id: str
    name: str = "Batter"
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False
    dismissal: Optional[str] = None
    wicket_type: Optional[str] = None

    @property
    def strike_rate(self) -> float:
        return (self.runs / self.balls * 100) if self.balls > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.player_id,
            "name": self.name,
            "runs": self.runs,
            "balls": self.balls,
            "fours": self.fours,
            "sixes": self.sixes,
            "isOut": self.is_out,
            "dismissal": self.dismissal,
            "wicketType": self.wicket_type,
        }


@dataclass
class BowlerStats:
    player_id: str
    name: str = "Bowler"
    balls: int = 0  # Legal deliveries only
    runs: int = 0
    wickets: int = 0
    wides: int = 0
    no_balls: int = 0
    overs: float = 0.0
    economy: str = "0.00"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.player_id,
            "name": self.name,
            "balls": self.balls,
            "runs": self.runs,
            "wickets": self.wickets,
            "wides": self.wides,
            "noBalls": self.no_balls,
            "overs": self.overs,
            "economy": self.economy,
        }


@dataclass
class ExtrasStats:
    total: int = 0
    wide: int = 0
    noball: int = 0
    bye: int = 0
    legbye: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "wide": self.wide,
            "noball": self.noball,
            "bye": self.bye,
            "legbye": self.legbye,
        }


@dataclass(frozen=True)
class LastWicket:
    """Final figures of the most recently dismissed batter."""
    player_id: str
    name: str
    dismissal: Optional[str]
    runs: int
    balls: int
    fours: int
    sixes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.player_id,
            "name": self.name,
            "dismissal": self.dismissal,
            "runs": self.runs,
            "balls": self.balls,
            "fours": self.fours,
            "sixes": self.sixes,
        }


@dataclass
class MatchStats:
    """Live scorecard for the current innings.

    A None current striker, non-striker or bowler means a selection is
    required before the next ball can be recorded.
    """

    score: int = 0
    wickets: int = 0
    balls: int = 0  # Legal deliveries
    overs: float = 0.0
    batters: dict[str, BatterStats] = field(default_factory=dict)
    bowlers: dict[str, BowlerStats] = field(default_factory=dict)
    extras: ExtrasStats = field(default_factory=ExtrasStats)

    current_striker_id: Optional[str] = None
    current_non_striker_id: Optional[str] = None
    current_bowler_id: Optional[str] = None
    last_bowler_id: Optional[str] = None
    last_wicket: Optional[LastWicket] = None

    current_over: list[BallEvent] = field(default_factory=list)

    @property
    def overs_display(self) -> str:
        return overs_str(self.balls)

    @property
    def run_rate(self) -> float:
        overs = self.balls / BALLS_PER_OVER
        return self.score / overs if overs > 0 else 0.0

    @property
    def needs_selection(self) -> bool:
        return (
            self.current_striker_id is None
            or self.current_non_striker_id is None
            or self.current_bowler_id is None
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "wickets": self.wickets,
            "balls": self.balls,
            "overs": self.overs,
            "batters": {k: v.to_dict() for k, v in self.batters.items()},
            "bowlers": {k: v.to_dict() for k, v in self.bowlers.items()},
            "extras": self.extras.to_dict(),
            "currentStrikerId": self.current_striker_id,
            "currentNonStrikerId": self.current_non_striker_id,
            "currentBowlerId": self.current_bowler_id,
            "lastBowlerId": self.last_bowler_id,
            "lastWicket": self.last_wicket.to_dict() if self.last_wicket else None,
            "currentOver": [e.to_dict() for e in self.current_over],
        }
