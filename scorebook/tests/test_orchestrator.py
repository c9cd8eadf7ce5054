"""Tests for the command line entry point."""

from __future__ import annotations

import json

import pytest

from scorebook.data.event_log import InMemoryEventLog
from scorebook.errors import ValidationError
from scorebook.orchestrator import format_scorecard, main, resolve_player, run_demo
from scorebook.service import ScoringService


class TestDemo:
    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_demo_plays_to_a_result(self, seed: int):
        service = ScoringService(InMemoryEventLog())
        view = run_demo(service, overs=3, seed=seed)

        assert view.match.current_innings.innings_number == 2
        assert view.outcome.finished
        stats = view.stats
        assert stats.score == sum(b.runs for b in stats.batters.values()) + stats.extras.total
        assert stats.balls == sum(b.balls for b in stats.bowlers.values())


class TestResolvePlayer:
    def test_by_name_or_id(self, service: ScoringService, small_match):
        ava = resolve_player(small_match, "ava")
        assert small_match.player_name(ava) == "Ava"
        assert resolve_player(small_match, ava) == ava
        assert resolve_player(small_match, None) is None

    def test_unknown_name(self, small_match):
        with pytest.raises(ValidationError):
            resolve_player(small_match, "Nobody")


def test_scorecard_text(service: ScoringService, small_match):
    service.record_ball(
        small_match.match_id,
        striker_id=resolve_player(small_match, "Ava"),
        non_striker_id=resolve_player(small_match, "Ben"),
        bowler_id=resolve_player(small_match, "Wes"),
        runs=4,
    )
    text = format_scorecard(service.live_score(small_match.match_id))
    assert "Thunder 4/0" in text
    assert "SR" in text
    assert "400.0" in text
    assert "This over: 4" in text
    assert "Next ball: Ava to face Wes" in text


def test_cli_session(tmp_path, capsys):
    db = str(tmp_path / "cli.db")
    main([
        "--db", db, "new",
        "--team-a", "Thunder", "--players-a", "Ava,Ben,Cal",
        "--team-b", "Strikers", "--players-b", "Wes,Xan,Yaz",
        "--overs", "2",
    ])
    match_id = capsys.readouterr().out.strip()

    main(["--db", db, "ball", match_id, "--striker", "Ava", "--non-striker", "Ben",
          "--bowler", "Wes", "--runs", "1"])
    main(["--db", db, "ball", match_id, "--extras", "WD", "--extras-runs", "1"])
    capsys.readouterr()

    main(["--db", db, "show", match_id, "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["liveScore"]["score"] == 2
    assert data["liveScore"]["extras"]["wide"] == 1
    assert data["inningsComplete"] is False

    main(["--db", db, "undo", match_id])
    assert "Removed ball 0.2" in capsys.readouterr().out


def test_cli_reports_errors(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--db", str(tmp_path / "cli.db"), "undo", "missing"])
    assert exc.value.code == 1
