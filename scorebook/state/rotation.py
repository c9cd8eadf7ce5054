"""
Strike and over rotation.

Who is on strike, who is at the other end and who bowls next are
derived from the last event alone plus the innings' legal-ball count.
Replaying every historical swap would double-apply them; only the
terminal transition matters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import BallEvent, ILLEGAL_EXTRAS


@dataclass(frozen=True)
class Rotation:
    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None  # None -> pick a bowler for the new over
    last_bowler_id: Optional[str] = None


def runs_to_rotate(event: BallEvent) -> int:
    """Runs the batters ran (or were awarded) on this delivery.

    Byes and leg-byes do not count here; wide and no-ball extras do.
    """
    if event.extras_type in ILLEGAL_EXTRAS:
        return event.runs_scored + event.extras_runs
    return event.runs_scored


def is_over_complete(legal_balls: int) -> bool:
    return legal_balls > 0 and legal_balls % BALLS_PER_OVER == 0


def derive_rotation(last_event: Optional[BallEvent], legal_balls: int) -> Rotation:
    """Next-ball positions after `last_event`.

    `legal_balls` is the number of legal deliveries in the whole innings
    so far, including `last_event`.
    """
    if last_event is None:
        return Rotation()

    striker: Optional[str] = last_event.striker_id
    non_striker: Optional[str] = last_event.non_striker_id
    bowler: Optional[str] = last_event.bowler_id

    if runs_to_rotate(last_event) % 2 != 0:
        striker, non_striker = non_striker, striker

    # Odd runs off the last ball of the over swap twice: net no change
    if is_over_complete(legal_balls):
        striker, non_striker = non_striker, striker
        bowler = None

    # Without an explicit dismissed player the striker's slot is vacated
    if last_event.is_wicket:
        out_id = last_event.out_player_id
        if out_id is not None and out_id == non_striker:
            non_striker = None
        else:
            striker = None

    return Rotation(
        striker_id=striker,
        non_striker_id=non_striker,
        bowler_id=bowler,
        last_bowler_id=last_event.bowler_id,
    )
