"""
Stat Accumulator.

Folds an innings event log into score, wickets, extras and per-player
batting and bowling figures. Pure and total: any well-formed sequence
produces a result, and an empty one produces all-zero stats.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import BallEvent, ExtrasType
from scorebook.state.dismissal import resolve_dismissal
from scorebook.state.match_stats import (
    BatterStats,
    BowlerStats,
    MatchStats,
    overs_from_balls,
)

NameLookup = Callable[[str], Optional[str]]


def fold(
    events: Iterable[BallEvent],
    name_of: Optional[NameLookup] = None,
) -> MatchStats:
    """Accumulate innings totals and player figures in log order.

    `name_of` resolves display names at read time, so a renamed player
    shows the new name without any figure changing.
    """
    lookup = name_of or (lambda _pid: None)
    stats = MatchStats()

    for event in events:
        batter = stats.batters.get(event.striker_id)
        if batter is None:
            batter = BatterStats(
                player_id=event.striker_id,
                name=lookup(event.striker_id) or "Batter",
            )
            stats.batters[event.striker_id] = batter

        bowler = stats.bowlers.get(event.bowler_id)
        if bowler is None:
            bowler = BowlerStats(
                player_id=event.bowler_id,
                name=lookup(event.bowler_id) or "Bowler",
            )
            stats.bowlers[event.bowler_id] = bowler

        legal = event.is_legal_delivery

        # Batting
        batter.runs += event.runs_scored
        if legal:
            batter.balls += 1
        if event.runs_scored == 4:
            batter.fours += 1
        elif event.runs_scored == 6:
            batter.sixes += 1

        # Extras
        _add_extras(stats, bowler, event)
        stats.score += event.runs_scored + event.extras_runs

        # Bowling
        bowler.runs += event.bowler_charged_runs
        if legal:
            bowler.balls += 1
            stats.balls += 1

        if event.is_wicket:
            _apply_wicket(stats, bowler, event, lookup)

    stats.overs = overs_from_balls(stats.balls)
    for b in stats.bowlers.values():
        b.overs = overs_from_balls(b.balls)
        b.economy = _economy(b.runs, b.balls)

    return stats


def _add_extras(stats: MatchStats, bowler: BowlerStats, event: BallEvent) -> None:
    if event.extras_type == ExtrasType.NONE:
        return

    extras = stats.extras
    extras.total += event.extras_runs
    if event.extras_type == ExtrasType.WIDE:
        extras.wide += event.extras_runs
        bowler.wides += 1
    elif event.extras_type == ExtrasType.NO_BALL:
        extras.noball += event.extras_runs
        bowler.no_balls += 1
    elif event.extras_type == ExtrasType.BYE:
        extras.bye += event.extras_runs
    elif event.extras_type == ExtrasType.LEG_BYE:
        extras.legbye += event.extras_runs


def _apply_wicket(
    stats: MatchStats,
    bowler: BowlerStats,
    event: BallEvent,
    lookup: NameLookup,
) -> None:
    stats.wickets += 1

    # A non-striker run out before facing has no batting entry to mark
    out = stats.batters.get(event.dismissed_player_id)
    if out is not None:
        out.is_out = True
        out.wicket_type = event.wicket_type.value
        out.dismissal = resolve_dismissal(
            event.wicket_type,
            bowler.name,
            lookup(event.assister_id) if event.assister_id else None,
        )

    if event.wicket_type.credits_bowler:
        bowler.wickets += 1


def _economy(runs: int, balls: int) -> str:
    """Runs per over to two decimals, "0.00" before any legal ball."""
    overs = balls / BALLS_PER_OVER
    return f"{runs / overs:.2f}" if overs > 0 else "0.00"
