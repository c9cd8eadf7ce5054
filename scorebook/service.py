"""
Scoring service.

Coordinates match setup, ball recording, undo, player renames and the
innings transition on top of an EventLog. Every read recomputes the
scorecard from the log; the service holds no derived state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from scorebook.config import ScorerConfig
from scorebook.data.ball_event import (
    BallEvent,
    ExtrasType,
    WicketType,
    validate_event,
)
from scorebook.data.event_log import EventLog
from scorebook.data.match import Innings, Match, Player, Team, new_id
from scorebook.errors import StateError, ValidationError
from scorebook.state.engine import (
    compute_stats,
    dismissed_players,
    over_timeline,
    previous_over_bowler,
)
from scorebook.state.lifecycle import (
    MatchOutcome,
    is_all_out,
    is_overs_exhausted,
    match_outcome,
    next_innings,
)
from scorebook.state.match_stats import MatchStats

logger = logging.getLogger(__name__)

TOSS_CHOICES = ("bat", "field")


@dataclass
class MatchView:
    """Everything a scoreboard needs for one poll."""

    match: Match
    stats: MatchStats
    first_innings_stats: Optional[MatchStats]
    all_out: bool
    overs_exhausted: bool
    outcome: MatchOutcome

    @property
    def innings_complete(self) -> bool:
        return self.all_out or self.overs_exhausted

    @property
    def can_score(self) -> bool:
        return not (self.innings_complete or self.outcome.finished)

    def to_dict(self) -> dict[str, Any]:
        match = self.match
        return {
            "id": match.match_id,
            "name": match.name,
            "oversLimit": match.overs_limit,
            "tossWinner": match.toss_winner,
            "tossChoice": match.toss_choice,
            "status": "completed" if self.outcome.finished else match.status,
            "teams": [
                {
                    "id": t.team_id,
                    "name": t.name,
                    "players": [{"id": p.player_id, "name": p.name} for p in t.players],
                }
                for t in match.teams
            ],
            "innings": [
                {
                    "id": i.innings_id,
                    "inningsNumber": i.innings_number,
                    "battingTeamId": i.batting_team_id,
                    "bowlingTeamId": i.bowling_team_id,
                }
                for i in match.innings
            ],
            "liveScore": self.stats.to_dict(),
            "inningsComplete": self.innings_complete,
            "result": {
                "finished": self.outcome.finished,
                "message": self.outcome.message,
                "target": self.outcome.target,
            },
        }


class ScoringService:
    """Match operations over an event log."""

    def __init__(self, store: EventLog, config: Optional[ScorerConfig] = None):
        self._store = store
        self._config = config or ScorerConfig()

    # ── Setup ────────────────────────────────────────────────────────

    def create_match(
        self,
        team_a: str,
        team_a_players: Sequence[str],
        team_b: str,
        team_b_players: Sequence[str],
        overs_limit: Optional[int] = None,
        name: Optional[str] = None,
        toss_winner: Optional[str] = None,
        toss_choice: Optional[str] = None,
    ) -> Match:
        """Create both rosters and the first innings.

        The toss winner bats if they chose to bat, otherwise fields.
        Without a recognised toss winner team A bats first.
        """
        overs_limit = overs_limit or self._config.match.overs_limit
        if overs_limit <= 0:
            raise ValidationError(f"overs_limit must be positive, got {overs_limit}")
        if not team_a or not team_b or team_a == team_b:
            raise ValidationError("Two teams with distinct names are required")
        if toss_choice is not None and toss_choice not in TOSS_CHOICES:
            raise ValidationError(f"toss_choice must be one of {TOSS_CHOICES}")

        match_id = new_id()
        teams = [
            _build_team(team_a, team_a_players),
            _build_team(team_b, team_b_players),
        ]
        first, second = teams
        if toss_winner == team_b:
            first, second = second, first
        if toss_winner in (team_a, team_b) and toss_choice == "field":
            first, second = second, first

        match = Match(
            match_id=match_id,
            name=name or f"{team_a} vs {team_b}",
            overs_limit=overs_limit,
            teams=teams,
            innings=[Innings(
                innings_id=new_id(),
                match_id=match_id,
                batting_team_id=first.team_id,
                bowling_team_id=second.team_id,
                innings_number=1,
            )],
            toss_winner=toss_winner,
            toss_choice=toss_choice,
        )
        self._store.save_match(match)
        logger.info(
            "Created match %s: %s (%d overs), %s bat first",
            match_id, match.name, overs_limit, first.name,
        )
        return match

    # ── Reads ────────────────────────────────────────────────────────

    def get_match(self, match_id: str) -> Match:
        match = self._store.get_match(match_id)
        if match is None:
            raise ValidationError(f"Match {match_id} not found")
        return match

    def innings_stats(self, match: Match, innings: Innings) -> MatchStats:
        return compute_stats(self._store.list_events(innings.innings_id), match.player_name)

    def live_score(self, match_id: str) -> MatchView:
        """Recompute the scorecard of the current innings and the result."""
        match = self.get_match(match_id)
        current = match.current_innings
        stats = self.innings_stats(match, current)
        roster = self._roster_size(match, current.batting_team_id)

        first_stats = None
        outcome = MatchOutcome(finished=False, message="First innings in progress")
        if current.innings_number == 2:
            first = match.innings_by_number(1)
            first_stats = self.innings_stats(match, first)
            outcome = match_outcome(
                first_stats,
                stats,
                roster,
                match.overs_limit,
                batting_first=match.team(first.batting_team_id).name,
                chasing=match.team(current.batting_team_id).name,
            )

        return MatchView(
            match=match,
            stats=stats,
            first_innings_stats=first_stats,
            all_out=is_all_out(stats, roster),
            overs_exhausted=is_overs_exhausted(stats, match.overs_limit),
            outcome=outcome,
        )

    def timeline(self, match_id: str) -> dict[int, list[BallEvent]]:
        match = self.get_match(match_id)
        return over_timeline(self._store.list_events(match.current_innings.innings_id))

    # ── Mutations ────────────────────────────────────────────────────

    def record_ball(
        self,
        match_id: str,
        striker_id: str,
        non_striker_id: str,
        bowler_id: str,
        runs: int = 0,
        extras_type: Any = None,
        extras_runs: int = 0,
        is_wicket: bool = False,
        wicket_type: Any = None,
        out_player_id: Optional[str] = None,
        assister_id: Optional[str] = None,
    ) -> BallEvent:
        """Validate one delivery and append it to the current innings.

        Raises:
            ValidationError: malformed event or players not in the
                batting/bowling rosters.
            StateError: the innings or the match is already over.
        """
        view = self.live_score(match_id)
        if not view.can_score:
            raise StateError(
                view.outcome.message if view.outcome.finished else "Innings is complete"
            )

        match = view.match
        innings = match.current_innings
        stats = view.stats

        event = BallEvent(
            innings_id=innings.innings_id,
            striker_id=striker_id,
            non_striker_id=non_striker_id,
            bowler_id=bowler_id,
            runs_scored=int(runs),
            extras_type=ExtrasType.parse(extras_type),
            extras_runs=int(extras_runs),
            is_wicket=bool(is_wicket),
            wicket_type=WicketType.parse(wicket_type),
            out_player_id=out_player_id or (striker_id if is_wicket else None),
            assister_id=assister_id,
            over_number=stats.balls // 6,
            ball_number=stats.balls % 6 + 1,
        )
        validate_event(event)
        self._check_selection(match, innings, stats, event)

        stored = self._store.append_event(event)
        logger.info(
            "Recorded %s in match %s: %d%s%s",
            stored.over_ball_str,
            match_id,
            stored.total_runs,
            f" {stored.extras_type.name}" if stored.extras_type != ExtrasType.NONE else "",
            " WICKET" if stored.is_wicket else "",
        )
        return stored

    def undo_last(self, match_id: str) -> BallEvent:
        """Delete the newest event of the current innings.

        Raises:
            StateError: if the current innings has no events.
        """
        match = self.get_match(match_id)
        removed = self._store.delete_last_event(match.current_innings.innings_id)
        logger.info("Undid %s (%s) in match %s", removed.over_ball_str, removed.event_id, match_id)
        return removed

    def rename_player(self, player_id: str, name: str) -> Player:
        """Correct a player's name. Figures are keyed by id and unaffected."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Player name must not be empty")
        player = self._store.rename_player(player_id, name)
        logger.info("Updating player %s to name: %s", player_id, name)
        return player

    def start_next_innings(self, match_id: str) -> Innings:
        """Create innings 2 with batting and bowling sides swapped.

        Raises:
            StateError: innings 2 exists already or innings 1 is incomplete.
        """
        match = self.get_match(match_id)
        current = match.current_innings
        stats = self.innings_stats(match, current)
        innings = next_innings(match, stats, self._roster_size(match, current.batting_team_id))
        self._store.add_innings(innings)
        logger.info(
            "Innings 2 started in match %s, target %d", match_id, stats.score + 1
        )
        return innings

    # ── Helpers ──────────────────────────────────────────────────────

    def _roster_size(self, match: Match, team_id: str) -> int:
        team = match.team(team_id)
        if team is None or not team.players:
            return self._config.match.roster_size
        return team.roster_size

    def _check_selection(
        self,
        match: Match,
        innings: Innings,
        stats: MatchStats,
        event: BallEvent,
    ) -> None:
        batting = match.team(innings.batting_team_id)
        bowling = match.team(innings.bowling_team_id)
        events = self._store.list_events(innings.innings_id)
        dismissed = dismissed_players(events)

        for pid in (event.striker_id, event.non_striker_id):
            if not batting.has_player(pid):
                raise ValidationError(f"Player {pid} is not in the batting side {batting.name}")
            if pid in dismissed:
                raise ValidationError(f"{match.player_name(pid)} is already out")
        if not bowling.has_player(event.bowler_id):
            raise ValidationError(
                f"Player {event.bowler_id} is not in the bowling side {bowling.name}"
            )
        if event.assister_id and not bowling.has_player(event.assister_id):
            raise ValidationError(f"Fielder {event.assister_id} is not in the bowling side")

        # A new over cannot go to whoever bowled the previous one
        if event.bowler_id == previous_over_bowler(events, stats.balls):
            raise ValidationError(
                f"{match.player_name(event.bowler_id)} bowled the previous over"
            )


def _build_team(name: str, player_names: Sequence[str]) -> Team:
    names = [n.strip() for n in player_names if n and n.strip()]
    if len(names) < 2:
        raise ValidationError(f"Team {name} needs at least two players")
    team_id = new_id()
    return Team(
        team_id=team_id,
        name=name,
        players=[Player(player_id=new_id(), name=n, team_id=team_id) for n in names],
    )
