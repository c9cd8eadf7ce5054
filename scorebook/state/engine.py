"""
Innings State Engine.

Recomputes the whole live scorecard from the ordered event log of the
current innings on every read. Nothing is carried between calls, so
undo (deleting the newest event) needs no compensation: the next read
simply folds the shorter log.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Optional, Sequence

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import BallEvent
from scorebook.state.accumulator import NameLookup, fold
from scorebook.state.dismissal import resolve_dismissal, snapshot_last_wicket
from scorebook.state.match_stats import LastWicket, MatchStats
from scorebook.state.rotation import derive_rotation

logger = logging.getLogger(__name__)


def compute_stats(
    events: Sequence[BallEvent],
    name_of: Optional[NameLookup] = None,
) -> MatchStats:
    """Fold the innings log into a single scorecard snapshot.

    Args:
        events: every event of one innings, in log order.
        name_of: optional player-name lookup used for display text only.
    """
    stats = fold(events, name_of)
    last_event = events[-1] if events else None

    rotation = derive_rotation(last_event, stats.balls)
    stats.current_striker_id = rotation.striker_id
    stats.current_non_striker_id = rotation.non_striker_id
    stats.current_bowler_id = rotation.bowler_id
    stats.last_bowler_id = rotation.last_bowler_id

    if last_event is not None and last_event.is_wicket:
        stats.last_wicket = _last_wicket(stats, last_event, name_of)

    stats.current_over = current_over(events)

    logger.debug(
        "Computed %d/%d (%s ov) from %d events",
        stats.score, stats.wickets, stats.overs_display, len(events),
    )
    return stats


def _last_wicket(
    stats: MatchStats,
    event: BallEvent,
    name_of: Optional[NameLookup],
) -> LastWicket:
    out_id = event.dismissed_player_id
    batter = stats.batters.get(out_id)
    if batter is not None:
        return snapshot_last_wicket(batter)

    # Dismissed without facing a ball
    lookup = name_of or (lambda _pid: None)
    bowler = stats.bowlers[event.bowler_id]
    return LastWicket(
        player_id=out_id,
        name=lookup(out_id) or "Batter",
        dismissal=resolve_dismissal(
            event.wicket_type,
            bowler.name,
            lookup(event.assister_id) if event.assister_id else None,
        ),
        runs=0,
        balls=0,
        fours=0,
        sixes=0,
    )


def current_over(events: Sequence[BallEvent]) -> list[BallEvent]:
    """Events stamped with the same over number as the newest event."""
    if not events:
        return []
    over = events[-1].over_number
    return [e for e in events if e.over_number == over]


def over_timeline(events: Sequence[BallEvent]) -> "OrderedDict[int, list[BallEvent]]":
    """Whole innings grouped by over number, in over order."""
    grouped: dict[int, list[BallEvent]] = {}
    for e in events:
        grouped.setdefault(e.over_number, []).append(e)
    return OrderedDict(sorted(grouped.items()))


def dismissed_players(events: Sequence[BallEvent]) -> set[str]:
    """Every player dismissed in the innings, whether or not they faced."""
    return {e.dismissed_player_id for e in events if e.is_wicket}


def previous_over_bowler(events: Sequence[BallEvent], legal_balls: int) -> Optional[str]:
    """Bowler of the last completed over while the next one is being opened.

    Returns None mid-over. Wides and no-balls bowled at the start of the new
    over leave the legal count on the boundary, so the lookup goes by the
    stamped over number rather than the newest event.
    """
    if legal_balls == 0 or legal_balls % BALLS_PER_OVER:
        return None
    previous = legal_balls // BALLS_PER_OVER - 1
    for e in reversed(events):
        if e.over_number == previous:
            return e.bowler_id
    return None
