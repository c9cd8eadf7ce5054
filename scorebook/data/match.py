"""
Match, team and innings records.

Rosters are fixed when the match is created. Player names can be
corrected later; nothing else about a player changes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Player:
    player_id: str
    name: str
    team_id: str


@dataclass
class Team:
    team_id: str
    name: str
    players: list[Player] = field(default_factory=list)

    @property
    def roster_size(self) -> int:
        return len(self.players)

    def player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def has_player(self, player_id: str) -> bool:
        return self.player(player_id) is not None


@dataclass
class Innings:
    innings_id: str
    match_id: str
    batting_team_id: str
    bowling_team_id: str
    innings_number: int  # 1 or 2


@dataclass
class Match:
    """Pre-match metadata plus the innings created so far."""

    match_id: str
    name: str
    overs_limit: int
    teams: list[Team] = field(default_factory=list)
    innings: list[Innings] = field(default_factory=list)
    toss_winner: Optional[str] = None
    toss_choice: Optional[str] = None  # bat / field
    status: str = "live"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def current_innings(self) -> Optional[Innings]:
        return self.innings[-1] if self.innings else None

    def innings_by_number(self, number: int) -> Optional[Innings]:
        for inn in self.innings:
            if inn.innings_number == number:
                return inn
        return None

    def team(self, team_id: str) -> Optional[Team]:
        for t in self.teams:
            if t.team_id == team_id:
                return t
        return None

    def player(self, player_id: str) -> Optional[Player]:
        for t in self.teams:
            p = t.player(player_id)
            if p is not None:
                return p
        return None

    def player_name(self, player_id: str) -> Optional[str]:
        p = self.player(player_id)
        return p.name if p else None
