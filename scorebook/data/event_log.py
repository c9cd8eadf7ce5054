"""
Event log and match record storage.

Provides an abstraction over the durable store for ball events and match
setup records. The stats engine trusts the log's order absolutely, so
every implementation serialises appends per innings and makes
delete-most-recent exclusive with respect to any in-flight append.

Undo is log truncation: the newest event is deleted, never compensated.
"""

from __future__ import annotations

import copy
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Optional

from scorebook.data.ball_event import BallEvent, ExtrasType, WicketType
from scorebook.data.match import Innings, Match, Player, Team
from scorebook.errors import StateError, ValidationError

logger = logging.getLogger(__name__)


class EventLog(ABC):
    """Abstract base class for the innings event log and match records."""

    @abstractmethod
    def append_event(self, event: BallEvent) -> BallEvent:
        """Append an event to its innings; returns it with `sequence` set."""

    @abstractmethod
    def delete_last_event(self, innings_id: str) -> BallEvent:
        """Remove and return the newest event of an innings.

        Raises:
            StateError: if the innings has no events.
        """

    @abstractmethod
    def list_events(self, innings_id: str) -> list[BallEvent]:
        """All events of an innings in log order."""

    @abstractmethod
    def save_match(self, match: Match) -> None:
        """Store a newly created match with its teams and innings."""

    @abstractmethod
    def get_match(self, match_id: str) -> Optional[Match]:
        """Load a match with teams, rosters and innings."""

    @abstractmethod
    def add_innings(self, innings: Innings) -> Innings:
        """Store a new innings.

        Raises:
            StateError: if the match already has an innings with that number.
        """

    @abstractmethod
    def rename_player(self, player_id: str, name: str) -> Player:
        """Correct a player's name. Raises ValidationError if unknown."""

    def close(self) -> None:
        """Release any resources held by the store."""


class InMemoryEventLog(EventLog):
    """Process-local store for tests, demos and single-session scoring."""

    def __init__(self) -> None:
        self._events: dict[str, list[BallEvent]] = {}
        self._matches: dict[str, Match] = {}
        self._lock = threading.Lock()

    def append_event(self, event: BallEvent) -> BallEvent:
        with self._lock:
            log = self._events.setdefault(event.innings_id, [])
            next_seq = log[-1].sequence + 1 if log else 1
            stored = replace(event, sequence=next_seq)
            log.append(stored)
        logger.debug("Appended %s to innings %s", stored.over_ball_str, event.innings_id)
        return stored

    def delete_last_event(self, innings_id: str) -> BallEvent:
        with self._lock:
            log = self._events.get(innings_id)
            if not log:
                raise StateError("No plays to undo")
            return log.pop()

    def list_events(self, innings_id: str) -> list[BallEvent]:
        with self._lock:
            return list(self._events.get(innings_id, []))

    def save_match(self, match: Match) -> None:
        with self._lock:
            if match.match_id in self._matches:
                raise ValidationError(f"Match {match.match_id} already exists")
            self._matches[match.match_id] = copy.deepcopy(match)

    def get_match(self, match_id: str) -> Optional[Match]:
        with self._lock:
            match = self._matches.get(match_id)
            return copy.deepcopy(match) if match else None

    def add_innings(self, innings: Innings) -> Innings:
        with self._lock:
            match = self._matches.get(innings.match_id)
            if match is None:
                raise ValidationError(f"Match {innings.match_id} not found")
            if match.innings_by_number(innings.innings_number) is not None:
                raise StateError(
                    f"Innings {innings.innings_number} already exists for this match"
                )
            match.innings.append(copy.deepcopy(innings))
        return innings

    def rename_player(self, player_id: str, name: str) -> Player:
        with self._lock:
            for match in self._matches.values():
                player = match.player(player_id)
                if player is not None:
                    player.name = name
                    return copy.deepcopy(player)
        raise ValidationError(f"Player {player_id} not found")


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        name TEXT,
        overs_limit INTEGER NOT NULL,
        toss_winner TEXT,
        toss_choice TEXT,
        status TEXT,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        match_id TEXT NOT NULL REFERENCES matches(id),
        name TEXT NOT NULL,
        position INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL REFERENCES teams(id),
        name TEXT NOT NULL,
        position INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS innings (
        id TEXT PRIMARY KEY,
        match_id TEXT NOT NULL REFERENCES matches(id),
        batting_team_id TEXT NOT NULL,
        bowling_team_id TEXT NOT NULL,
        innings_number INTEGER NOT NULL,
        UNIQUE (match_id, innings_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ball_events (
        id TEXT PRIMARY KEY,
        innings_id TEXT NOT NULL REFERENCES innings(id),
        sequence INTEGER NOT NULL,
        timestamp TEXT NOT NULL,
        striker_id TEXT NOT NULL,
        non_striker_id TEXT NOT NULL,
        bowler_id TEXT NOT NULL,
        runs_scored INTEGER NOT NULL,
        extras_type TEXT NOT NULL,
        extras_runs INTEGER NOT NULL,
        is_wicket INTEGER NOT NULL,
        wicket_type TEXT NOT NULL,
        out_player_id TEXT,
        assister_id TEXT,
        over_number INTEGER NOT NULL,
        ball_number INTEGER NOT NULL,
        UNIQUE (innings_id, sequence)
    )
    """,
)


class SQLiteEventLog(EventLog):
    """SQLite-backed store so a match survives across CLI invocations.

    One connection is shared behind a lock; every append and delete runs
    in its own transaction.
    """

    def __init__(self, database_path: str = "scorebook.db"):
        self.database_path = database_path
        self._conn = sqlite3.connect(database_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize_database()

    def _initialize_database(self) -> None:
        with self._lock, self._conn:
            for statement in SCHEMA:
                self._conn.execute(statement)
        logger.debug("SQLite event log ready at %s", self.database_path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ── Ball events ──────────────────────────────────────────────────

    def append_event(self, event: BallEvent) -> BallEvent:
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT COALESCE(MAX(sequence), 0) FROM ball_events WHERE innings_id = ?",
                (event.innings_id,),
            ).fetchone()
            stored = replace(event, sequence=row[0] + 1)
            self._conn.execute(
                """
                INSERT INTO ball_events
                (id, innings_id, sequence, timestamp, striker_id, non_striker_id,
                 bowler_id, runs_scored, extras_type, extras_runs, is_wicket,
                 wicket_type, out_player_id, assister_id, over_number, ball_number)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.event_id,
                    stored.innings_id,
                    stored.sequence,
                    stored.timestamp.isoformat(),
                    stored.striker_id,
                    stored.non_striker_id,
                    stored.bowler_id,
                    stored.runs_scored,
                    stored.extras_type.value,
                    stored.extras_runs,
                    int(stored.is_wicket),
                    stored.wicket_type.value,
                    stored.out_player_id,
                    stored.assister_id,
                    stored.over_number,
                    stored.ball_number,
                ),
            )
        return stored

    def delete_last_event(self, innings_id: str) -> BallEvent:
        with self._lock, self._conn:
            row = self._conn.execute(
                """
                SELECT * FROM ball_events WHERE innings_id = ?
                ORDER BY sequence DESC LIMIT 1
                """,
                (innings_id,),
            ).fetchone()
            if row is None:
                raise StateError("No plays to undo")
            self._conn.execute("DELETE FROM ball_events WHERE id = ?", (row["id"],))
        return _row_to_event(row)

    def list_events(self, innings_id: str) -> list[BallEvent]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM ball_events WHERE innings_id = ? ORDER BY sequence ASC",
                (innings_id,),
            ).fetchall()
        return [_row_to_event(r) for r in rows]

    # ── Match records ────────────────────────────────────────────────

    def save_match(self, match: Match) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    """
                    INSERT INTO matches
                    (id, name, overs_limit, toss_winner, toss_choice, status, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        match.match_id,
                        match.name,
                        match.overs_limit,
                        match.toss_winner,
                        match.toss_choice,
                        match.status,
                        match.created_at.isoformat(),
                    ),
                )
                for t_pos, team in enumerate(match.teams):
                    self._conn.execute(
                        "INSERT INTO teams (id, match_id, name, position) VALUES (?, ?, ?, ?)",
                        (team.team_id, match.match_id, team.name, t_pos),
                    )
                    self._conn.executemany(
                        "INSERT INTO players (id, team_id, name, position) VALUES (?, ?, ?, ?)",
                        [
                            (p.player_id, team.team_id, p.name, p_pos)
                            for p_pos, p in enumerate(team.players)
                        ],
                    )
                for inn in match.innings:
                    self._insert_innings(inn)
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"Could not save match {match.match_id}: {exc}") from exc

    def get_match(self, match_id: str) -> Optional[Match]:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM matches WHERE id = ?", (match_id,)
            ).fetchone()
            if row is None:
                return None
            team_rows = self._conn.execute(
                "SELECT * FROM teams WHERE match_id = ? ORDER BY position", (match_id,)
            ).fetchall()
            teams = []
            for t in team_rows:
                player_rows = self._conn.execute(
                    "SELECT * FROM players WHERE team_id = ? ORDER BY position", (t["id"],)
                ).fetchall()
                teams.append(Team(
                    team_id=t["id"],
                    name=t["name"],
                    players=[
                        Player(player_id=p["id"], name=p["name"], team_id=t["id"])
                        for p in player_rows
                    ],
                ))
            innings_rows = self._conn.execute(
                "SELECT * FROM innings WHERE match_id = ? ORDER BY innings_number",
                (match_id,),
            ).fetchall()

        return Match(
            match_id=row["id"],
            name=row["name"],
            overs_limit=row["overs_limit"],
            teams=teams,
            innings=[
                Innings(
                    innings_id=i["id"],
                    match_id=i["match_id"],
                    batting_team_id=i["batting_team_id"],
                    bowling_team_id=i["bowling_team_id"],
                    innings_number=i["innings_number"],
                )
                for i in innings_rows
            ],
            toss_winner=row["toss_winner"],
            toss_choice=row["toss_choice"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def add_innings(self, innings: Innings) -> Innings:
        try:
            with self._lock, self._conn:
                self._insert_innings(innings)
        except sqlite3.IntegrityError as exc:
            raise StateError(
                f"Innings {innings.innings_number} already exists for this match"
            ) from exc
        return innings

    def _insert_innings(self, innings: Innings) -> None:
        self._conn.execute(
            """
            INSERT INTO innings
            (id, match_id, batting_team_id, bowling_team_id, innings_number)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                innings.innings_id,
                innings.match_id,
                innings.batting_team_id,
                innings.bowling_team_id,
                innings.innings_number,
            ),
        )

    def rename_player(self, player_id: str, name: str) -> Player:
        with self._lock, self._conn:
            cur = self._conn.execute(
                "UPDATE players SET name = ? WHERE id = ?", (name, player_id)
            )
            if cur.rowcount == 0:
                raise ValidationError(f"Player {player_id} not found")
            row = self._conn.execute(
                "SELECT * FROM players WHERE id = ?", (player_id,)
            ).fetchone()
        return Player(player_id=row["id"], name=row["name"], team_id=row["team_id"])


def _row_to_event(row: sqlite3.Row) -> BallEvent:
    return BallEvent(
        event_id=row["id"],
        innings_id=row["innings_id"],
        sequence=row["sequence"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        striker_id=row["striker_id"],
        non_striker_id=row["non_striker_id"],
        bowler_id=row["bowler_id"],
        runs_scored=row["runs_scored"],
        extras_type=ExtrasType(row["extras_type"]),
        extras_runs=row["extras_runs"],
        is_wicket=bool(row["is_wicket"]),
        wicket_type=WicketType(row["wicket_type"]),
        out_player_id=row["out_player_id"],
        assister_id=row["assister_id"],
        over_number=row["over_number"],
        ball_number=row["ball_number"],
    )


def open_event_log(database_path: Optional[str] = None) -> EventLog:
    """SQLite store at `database_path`, or an in-memory store when None."""
    if database_path is None:
        return InMemoryEventLog()
    return SQLiteEventLog(database_path)
