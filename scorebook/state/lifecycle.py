"""
Innings and match completion rules.

The engine only reports these conditions. Creating the second innings
is the scoring service's job, and only after `next_innings` agrees.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from scorebook.config import BALLS_PER_OVER
from scorebook.data.match import Innings, Match, new_id
from scorebook.errors import StateError
from scorebook.state.match_stats import MatchStats

logger = logging.getLogger(__name__)

IN_PROGRESS = "in_progress"
WON_BY_WICKETS = "won_by_wickets"
WON_BY_RUNS = "won_by_runs"
TIED = "tied"


@dataclass(frozen=True)
class MatchOutcome:
    finished: bool
    message: str
    result: str = IN_PROGRESS
    winner: Optional[str] = None
    margin: int = 0
    target: Optional[int] = None


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def is_all_out(stats: MatchStats, roster_size: int) -> bool:
    """The last batter has no partner once roster_size - 1 are out."""
    return stats.wickets >= roster_size - 1


def is_overs_exhausted(stats: MatchStats, overs_limit: int) -> bool:
    return stats.balls >= overs_limit * BALLS_PER_OVER


def is_innings_complete(stats: MatchStats, roster_size: int, overs_limit: int) -> bool:
    return is_all_out(stats, roster_size) or is_overs_exhausted(stats, overs_limit)


def target_for(first_innings: MatchStats) -> int:
    return first_innings.score + 1


def match_outcome(
    innings1_stats: MatchStats,
    innings2_stats: Optional[MatchStats],
    roster_size: int,
    overs_limit: Optional[int] = None,
    batting_first: str = "Batting first",
    chasing: str = "Chasing team",
) -> MatchOutcome:
    """Decide the match from both innings' stats.

    A successful chase ends the match at once, whatever overs remain.
    Otherwise the match is only decided once the second innings is
    complete; with no `overs_limit` only all-out completes it.
    """
    if innings2_stats is None:
        return MatchOutcome(finished=False, message="First innings in progress")

    target = target_for(innings1_stats)
    second = innings2_stats

    if second.score >= target:
        wickets_left = roster_size - 1 - second.wickets
        return MatchOutcome(
            finished=True,
            message=f"{chasing} won by {_plural(wickets_left, 'wicket')}",
            result=WON_BY_WICKETS,
            winner=chasing,
            margin=wickets_left,
            target=target,
        )

    complete = is_all_out(second, roster_size) or (
        overs_limit is not None and is_overs_exhausted(second, overs_limit)
    )
    if not complete:
        runs_needed = target - second.score
        message = f"{chasing} need {_plural(runs_needed, 'run')}"
        if overs_limit is not None:
            balls_left = overs_limit * BALLS_PER_OVER - second.balls
            message += f" from {_plural(balls_left, 'ball')}"
        return MatchOutcome(finished=False, message=message, target=target)

    if second.score == innings1_stats.score:
        return MatchOutcome(finished=True, message="Match Tied!", result=TIED, target=target)

    margin = innings1_stats.score - second.score
    return MatchOutcome(
        finished=True,
        message=f"{batting_first} won by {_plural(margin, 'run')}",
        result=WON_BY_RUNS,
        winner=batting_first,
        margin=margin,
        target=target,
    )


def next_innings(match: Match, current_stats: MatchStats, roster_size: int) -> Innings:
    """Build the second innings record, teams swapped.

    Raises:
        StateError: if the second innings already exists or the first
            innings is not complete.
    """
    current = match.current_innings
    if current is None or current.innings_number >= 2 or match.innings_by_number(2):
        raise StateError(
            "Cannot start next innings. It may already be started or match finished."
        )
    if not is_innings_complete(current_stats, roster_size, match.overs_limit):
        raise StateError(
            f"Innings 1 is not complete ({current_stats.score}/{current_stats.wickets} "
            f"after {current_stats.overs_display} of {match.overs_limit} overs)"
        )

    logger.debug("Innings 1 complete at %d/%d", current_stats.score, current_stats.wickets)
    return Innings(
        innings_id=new_id(),
        match_id=match.match_id,
        batting_team_id=current.bowling_team_id,
        bowling_team_id=current.batting_team_id,
        innings_number=2,
    )


def can_start_next_innings(match: Match, current_stats: MatchStats, roster_size: int) -> bool:
    try:
        next_innings(match, current_stats, roster_size)
    except StateError:
        return False
    return True
