"""
Ball-by-ball event data model.

Defines the canonical delivery record that the event log stores and
the stats engine folds. Events are immutable once created; the only
way to remove one is to delete the newest event of its innings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from scorebook.errors import ValidationError


class ExtrasType(Enum):
    NONE = ""
    WIDE = "WD"
    NO_BALL = "NB"
    BYE = "B"
    LEG_BYE = "LB"

    @classmethod
    def parse(cls, value: Any) -> "ExtrasType":
        """Accept a wire code ("WD"), an enum name ("wide") or None."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        text = str(value).strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValidationError(f"Unknown extras type: {value!r}")


class WicketType(Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "runout"
    STUMPED = "stumped"
    HIT_WICKET = "hitwicket"
    RETIRED = "retired"
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> "WicketType":
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.NONE
        text = str(value).strip().lower().replace(" ", "").replace("_", "")
        for member in cls:
            if text == member.value:
                return member
        raise ValidationError(f"Unknown wicket type: {value!r}")

    @property
    def credits_bowler(self) -> bool:
        """Run-outs and retirements are never the bowler's wicket."""
        return self in BOWLER_WICKETS


BOWLER_WICKETS = frozenset({
    WicketType.BOWLED,
    WicketType.CAUGHT,
    WicketType.LBW,
    WicketType.STUMPED,
    WicketType.HIT_WICKET,
})

ILLEGAL_EXTRAS = frozenset({ExtrasType.WIDE, ExtrasType.NO_BALL})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BallEvent:
    """A single delivery in an innings."""

    innings_id: str
    striker_id: str
    non_striker_id: str
    bowler_id: str

    runs_scored: int = 0  # Off the bat
    extras_type: ExtrasType = ExtrasType.NONE
    extras_runs: int = 0  # Never credited to the striker

    is_wicket: bool = False
    wicket_type: WicketType = WicketType.NONE
    out_player_id: Optional[str] = None  # Defaults to striker
    assister_id: Optional[str] = None  # Catcher / keeper / fielder

    # Display only, stamped when the ball is recorded
    over_number: int = 0  # 0-indexed
    ball_number: int = 1  # 1-6 within the over

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    sequence: int = 0  # Position in the innings log, assigned on append
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def is_legal_delivery(self) -> bool:
        return self.extras_type not in ILLEGAL_EXTRAS

    @property
    def total_runs(self) -> int:
        return self.runs_scored + self.extras_runs

    @property
    def bowler_charged_runs(self) -> int:
        """Runs conceded by the bowler: bat runs plus wides/no-ball extras."""
        if self.extras_type in ILLEGAL_EXTRAS:
            return self.runs_scored + self.extras_runs
        return self.runs_scored

    @property
    def dismissed_player_id(self) -> Optional[str]:
        if not self.is_wicket:
            return None
        return self.out_player_id or self.striker_id

    @property
    def over_ball_str(self) -> str:
        """Human-readable over.ball string, e.g. '5.3'."""
        return f"{self.over_number}.{self.ball_number}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.event_id,
            "inningsId": self.innings_id,
            "sequence": self.sequence,
            "timestamp": self.timestamp.isoformat(),
            "strikerId": self.striker_id,
            "nonStrikerId": self.non_striker_id,
            "bowlerId": self.bowler_id,
            "runsScored": self.runs_scored,
            "extrasType": self.extras_type.value or None,
            "extrasRuns": self.extras_runs,
            "isWicket": self.is_wicket,
            "wicketType": (
                self.wicket_type.value if self.wicket_type != WicketType.NONE else None
            ),
            "outPlayerId": self.out_player_id,
            "assisterId": self.assister_id,
            "overNumber": self.over_number,
            "ballNumber": self.ball_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BallEvent":
        """Build and validate an event from the camelCase wire shape."""
        try:
            kwargs: dict[str, Any] = dict(
                innings_id=str(data["inningsId"]),
                striker_id=str(data["strikerId"]),
                non_striker_id=str(data["nonStrikerId"]),
                bowler_id=str(data["bowlerId"]),
                runs_scored=int(data.get("runsScored") or 0),
                extras_type=ExtrasType.parse(data.get("extrasType")),
                extras_runs=int(data.get("extrasRuns") or 0),
                is_wicket=bool(data.get("isWicket", False)),
                wicket_type=WicketType.parse(data.get("wicketType")),
                out_player_id=data.get("outPlayerId") or None,
                assister_id=data.get("assisterId") or None,
                over_number=int(data.get("overNumber") or 0),
                ball_number=int(data.get("ballNumber") or 1),
                sequence=int(data.get("sequence") or 0),
            )
        except ValidationError:
            raise
        except KeyError as exc:
            raise ValidationError(f"Missing field: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed ball event: {exc}") from exc

        if data.get("id"):
            kwargs["event_id"] = str(data["id"])
        if data.get("timestamp"):
            kwargs["timestamp"] = datetime.fromisoformat(str(data["timestamp"]))

        event = cls(**kwargs)
        validate_event(event)
        return event


def validate_event(event: BallEvent) -> None:
    """Reject a malformed event before it reaches the log.

    Raises:
        ValidationError: describing the first problem found.
    """
    if event.runs_scored < 0:
        raise ValidationError(f"runs_scored must be >= 0, got {event.runs_scored}")
    if event.extras_runs < 0:
        raise ValidationError(f"extras_runs must be >= 0, got {event.extras_runs}")
    if not isinstance(event.extras_type, ExtrasType):
        raise ValidationError(f"Unknown extras type: {event.extras_type!r}")
    if not isinstance(event.wicket_type, WicketType):
        raise ValidationError(f"Unknown wicket type: {event.wicket_type!r}")
    if event.extras_type == ExtrasType.NONE and event.extras_runs:
        raise ValidationError("extras_runs given without an extras type")

    for label, player_id in (
        ("striker", event.striker_id),
        ("non-striker", event.non_striker_id),
        ("bowler", event.bowler_id),
    ):
        if not player_id:
            raise ValidationError(f"A {label} must be selected")
    if event.striker_id == event.non_striker_id:
        raise ValidationError("Striker and non-striker must be different players")

    if not event.is_wicket:
        if event.wicket_type != WicketType.NONE:
            raise ValidationError("wicket_type given on a ball that is not a wicket")
        return

    if event.out_player_id and event.out_player_id not in (
        event.striker_id,
        event.non_striker_id,
    ):
        raise ValidationError(
            f"Dismissed player {event.out_player_id} is not at the crease"
        )
