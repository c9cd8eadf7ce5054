"""
Dismissal text for the scorecard.
"""

from __future__ import annotations

from typing import Optional

from scorebook.data.ball_event import WicketType
from scorebook.state.match_stats import BatterStats, LastWicket


def resolve_dismissal(
    wicket_type: WicketType,
    bowler_name: Optional[str],
    assister_name: Optional[str] = None,
) -> str:
    """Scorecard line for a wicket, e.g. 'c Smith b Jones'."""
    if wicket_type == WicketType.BOWLED:
        return f"b {bowler_name}"
    if wicket_type == WicketType.CAUGHT:
        return f"c {assister_name or 'field'} b {bowler_name}"
    if wicket_type == WicketType.LBW:
        return f"lbw b {bowler_name}"
    if wicket_type == WicketType.STUMPED:
        return f"st {assister_name or 'keeper'} b {bowler_name}"
    if wicket_type == WicketType.RUN_OUT:
        return f"run out ({assister_name or 'field'})"
    if wicket_type == WicketType.NONE:
        return "Out"
    return wicket_type.value


def snapshot_last_wicket(batter: BatterStats) -> LastWicket:
    return LastWicket(
        player_id=batter.player_id,
        name=batter.name,
        dismissal=batter.dismissal,
        runs=batter.runs,
        balls=batter.balls,
        fours=batter.fours,
        sixes=batter.sixes,
    )
