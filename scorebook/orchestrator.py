"""
Scorebook command line.

Main entry point for scoring a match from the terminal. Matches are kept
in a SQLite event log so each command can run as a separate process.

Usage:
    python -m scorebook.orchestrator new --team-a Thunder --players-a "A,B,C" \\
        --team-b Strikers --players-b "X,Y,Z" --overs 5
    python -m scorebook.orchestrator ball <match_id> --striker A --non-striker B \\
        --bowler X --runs 4
    python -m scorebook.orchestrator undo <match_id>
    python -m scorebook.orchestrator show <match_id> [--json]
    python -m scorebook.orchestrator demo
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from typing import Optional

from scorebook.config import FORMAT_OVERS, MatchFormat, ScorerConfig
from scorebook.data.event_log import open_event_log
from scorebook.data.match import Match, Player
from scorebook.errors import ScorebookError, ValidationError
from scorebook.service import MatchView, ScoringService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("scorebook.orchestrator")


def resolve_player(match: Match, ref: Optional[str]) -> Optional[str]:
    """Accept a player id or a (case-insensitive) player name."""
    if not ref:
        return None
    if match.player(ref) is not None:
        return ref
    hits: list[Player] = [
        p for t in match.teams for p in t.players if p.name.lower() == ref.lower()
    ]
    if len(hits) != 1:
        raise ValidationError(f"No unique player matching {ref!r}")
    return hits[0].player_id


def format_scorecard(view: MatchView) -> str:
    """Plain-text scoreboard for one innings."""
    match = view.match
    stats = view.stats
    innings = match.current_innings
    batting = match.team(innings.batting_team_id)
    name = match.player_name

    lines = [
        "=" * 60,
        f"{match.name} - innings {innings.innings_number}",
        "=" * 60,
        f"{batting.name} {stats.score}/{stats.wickets} "
        f"({stats.overs_display}/{match.overs_limit} ov, RR {stats.run_rate:.2f})",
    ]
    if view.first_innings_stats is not None:
        lines.append(f"Target: {view.first_innings_stats.score + 1}")
    lines.append("")

    lines.append(f"{'Batter':<24}{'R':>5}{'B':>5}{'4s':>5}{'6s':>5}{'SR':>8}")
    for b in stats.batters.values():
        marker = "*" if b.player_id == stats.current_striker_id else " "
        lines.append(
            f"{marker}{b.name:<23}{b.runs:>5}{b.balls:>5}{b.fours:>5}{b.sixes:>5}"
            f"{b.strike_rate:>8.1f}"
            + (f"  {b.dismissal}" if b.is_out else "")
        )
    e = stats.extras
    lines.append(
        f"Extras {e.total} (wd {e.wide}, nb {e.noball}, b {e.bye}, lb {e.legbye})"
    )
    lines.append("")

    lines.append(f"{'Bowler':<24}{'O':>6}{'R':>5}{'W':>5}{'Econ':>7}")
    for bw in stats.bowlers.values():
        lines.append(
            f"{bw.name:<24}{bw.overs:>6.1f}{bw.runs:>5}{bw.wickets:>5}{bw.economy:>7}"
        )
    lines.append("")

    if stats.last_wicket is not None:
        lw = stats.last_wicket
        lines.append(f"Last wicket: {lw.name} {lw.dismissal} {lw.runs} ({lw.balls})")
    if stats.current_over:
        lines.append(
            "This over: " + " ".join(_ball_symbol(ev) for ev in stats.current_over)
        )

    if view.outcome.finished:
        lines.append(f"RESULT: {view.outcome.message}")
    elif view.innings_complete:
        lines.append(
            "Innings complete: "
            + ("All Batters Dismissed" if view.all_out else "Maximum Overs Reached")
        )
    else:
        if innings.innings_number == 2:
            lines.append(view.outcome.message)
        waiting = []
        if stats.current_striker_id is None:
            waiting.append("striker")
        if stats.current_non_striker_id is None:
            waiting.append("non-striker")
        if stats.current_bowler_id is None:
            waiting.append("bowler")
        if waiting:
            lines.append("Select: " + ", ".join(waiting))
        else:
            lines.append(
                f"Next ball: {name(stats.current_striker_id)} to face "
                f"{name(stats.current_bowler_id)}"
            )
    return "\n".join(lines)


def _ball_symbol(event) -> str:
    if event.is_wicket:
        return "W"
    code = event.extras_type.value
    runs = event.total_runs
    return f"{runs}{code.lower()}" if code else str(runs)


def cmd_new(service: ScoringService, args: argparse.Namespace) -> None:
    overs = args.overs
    if overs is None and args.format:
        overs = FORMAT_OVERS[MatchFormat(args.format)]
    match = service.create_match(
        team_a=args.team_a,
        team_a_players=args.players_a.split(","),
        team_b=args.team_b,
        team_b_players=args.players_b.split(","),
        overs_limit=overs,
        name=args.name,
        toss_winner=args.toss_winner,
        toss_choice=args.toss_choice,
    )
    print(match.match_id)


def cmd_ball(service: ScoringService, args: argparse.Namespace) -> None:
    match = service.get_match(args.match_id)
    current = service.live_score(args.match_id).stats
    striker = resolve_player(match, args.striker) or current.current_striker_id
    non_striker = resolve_player(match, args.non_striker) or current.current_non_striker_id
    bowler = resolve_player(match, args.bowler) or current.current_bowler_id

    service.record_ball(
        args.match_id,
        striker_id=striker,
        non_striker_id=non_striker,
        bowler_id=bowler,
        runs=args.runs,
        extras_type=args.extras,
        extras_runs=args.extras_runs,
        is_wicket=args.wicket is not None,
        wicket_type=args.wicket,
        out_player_id=resolve_player(match, args.out),
        assister_id=resolve_player(match, args.fielder),
    )
    print(format_scorecard(service.live_score(args.match_id)))


def cmd_show(service: ScoringService, args: argparse.Namespace) -> None:
    view = service.live_score(args.match_id)
    if args.json:
        print(json.dumps(view.to_dict(), indent=2, default=str))
    else:
        print(format_scorecard(view))


def cmd_undo(service: ScoringService, args: argparse.Namespace) -> None:
    removed = service.undo_last(args.match_id)
    print(f"Removed ball {removed.over_ball_str}")
    print(format_scorecard(service.live_score(args.match_id)))


def cmd_rename(service: ScoringService, args: argparse.Namespace) -> None:
    player = service.rename_player(args.player_id, args.name)
    print(f"{player.player_id} -> {player.name}")


def cmd_next_innings(service: ScoringService, args: argparse.Namespace) -> None:
    service.start_next_innings(args.match_id)
    print(format_scorecard(service.live_score(args.match_id)))


def run_demo(service: ScoringService, overs: int, seed: Optional[int] = None) -> MatchView:
    """Score a synthetic match end to end through the service."""
    rng = random.Random(seed)

    logger.info("=" * 60)
    logger.info("SCOREBOOK - DEMO MODE")
    logger.info("=" * 60)

    match = service.create_match(
        team_a="Thunder",
        team_a_players=[f"Thunder_{i}" for i in range(1, 12)],
        team_b="Strikers",
        team_b_players=[f"Strikers_{i}" for i in range(1, 12)],
        overs_limit=overs,
        toss_winner="Thunder",
        toss_choice="bat",
    )
    match_id = match.match_id

    while True:
        view = service.live_score(match_id)
        if view.outcome.finished:
            break
        if view.innings_complete:
            if view.match.current_innings.innings_number == 2:
                break
            print(format_scorecard(view))
            service.start_next_innings(match_id)
            continue
        _bowl_random_ball(service, view, rng)

    print(format_scorecard(view))
    return view


def _bowl_random_ball(service: ScoringService, view: MatchView, rng: random.Random) -> None:
    stats = view.stats
    match = view.match
    innings = match.current_innings
    batting = match.team(innings.batting_team_id)
    bowling = match.team(innings.bowling_team_id)

    # Batting order: next players who have not batted yet
    at_crease = {stats.current_striker_id, stats.current_non_striker_id}
    waiting = [
        p.player_id for p in batting.players
        if p.player_id not in stats.batters and p.player_id not in at_crease
    ]
    striker = stats.current_striker_id or waiting.pop(0)
    non_striker = stats.current_non_striker_id or waiting.pop(0)

    bowler = stats.current_bowler_id
    opened = [ev for ev in stats.current_over if ev.over_number == stats.balls // 6]
    if bowler is None and opened:
        # Over opened with a wide or no-ball
        bowler = opened[-1].bowler_id
    if bowler is None:
        attack = [p.player_id for p in bowling.players[-5:]]
        bowler = rng.choice([b for b in attack if b != stats.last_bowler_id])

    r = rng.random()
    kwargs: dict = {}
    if r < 0.30:
        kwargs = {"runs": 0}
    elif r < 0.55:
        kwargs = {"runs": 1}
    elif r < 0.65:
        kwargs = {"runs": 2}
    elif r < 0.75:
        kwargs = {"runs": 4}
    elif r < 0.80:
        kwargs = {"runs": 6}
    elif r < 0.84:
        kwargs = {"extras_type": "WD", "extras_runs": 1}
    elif r < 0.86:
        kwargs = {"extras_type": "NB", "extras_runs": 1, "runs": rng.choice([0, 1, 4])}
    elif r < 0.89:
        kwargs = {"extras_type": rng.choice(["B", "LB"]), "extras_runs": 1}
    else:
        kwargs = {
            "is_wicket": True,
            "wicket_type": rng.choice(["bowled", "caught", "lbw", "runout"]),
        }
        if kwargs["wicket_type"] == "caught":
            kwargs["assister_id"] = rng.choice(bowling.players).player_id

    service.record_ball(
        match.match_id,
        striker_id=striker,
        non_striker_id=non_striker,
        bowler_id=bowler,
        **kwargs,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ball-by-ball cricket scorer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scorebook.orchestrator demo --overs 5
  python -m scorebook.orchestrator show <match_id> --json
        """,
    )
    parser.add_argument("--db", type=str, help="SQLite event log path (default from env)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Create a match and its first innings")
    p.add_argument("--team-a", required=True)
    p.add_argument("--players-a", required=True, help="Comma-separated roster")
    p.add_argument("--team-b", required=True)
    p.add_argument("--players-b", required=True, help="Comma-separated roster")
    p.add_argument("--overs", type=int, help="Overs per innings")
    p.add_argument("--format", choices=[f.value for f in MatchFormat], help="Overs preset")
    p.add_argument("--name")
    p.add_argument("--toss-winner")
    p.add_argument("--toss-choice", choices=["bat", "field"])
    p.set_defaults(func=cmd_new)

    p = sub.add_parser("ball", help="Record one delivery")
    p.add_argument("match_id")
    p.add_argument("--striker", help="Defaults to the current striker")
    p.add_argument("--non-striker", help="Defaults to the current non-striker")
    p.add_argument("--bowler", help="Defaults to the current bowler")
    p.add_argument("--runs", type=int, default=0, help="Runs off the bat")
    p.add_argument("--extras", choices=["WD", "NB", "B", "LB"])
    p.add_argument("--extras-runs", type=int, default=0)
    p.add_argument(
        "--wicket",
        choices=["bowled", "caught", "lbw", "runout", "stumped", "hitwicket", "retired"],
    )
    p.add_argument("--out", help="Dismissed batter (defaults to striker)")
    p.add_argument("--fielder", help="Catcher, keeper or run-out fielder")
    p.set_defaults(func=cmd_ball)

    p = sub.add_parser("undo", help="Delete the most recent delivery")
    p.add_argument("match_id")
    p.set_defaults(func=cmd_undo)

    p = sub.add_parser("rename", help="Correct a player's name")
    p.add_argument("player_id")
    p.add_argument("name")
    p.set_defaults(func=cmd_rename)

    p = sub.add_parser("next-innings", help="Start the second innings")
    p.add_argument("match_id")
    p.set_defaults(func=cmd_next_innings)

    p = sub.add_parser("show", help="Print the live scorecard")
    p.add_argument("match_id")
    p.add_argument("--json", action="store_true", help="Print the JSON view")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("demo", help="Simulate a match in memory")
    p.add_argument("--overs", type=int, default=5)
    p.add_argument("--seed", type=int)
    p.set_defaults(func=None)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = ScorerConfig.from_env()

    logging.getLogger().setLevel(logging.DEBUG if args.verbose else config.log_level)

    if args.command == "demo":
        store = open_event_log(None)
    else:
        store = open_event_log(
            None if config.storage.in_memory else (args.db or config.storage.db_path)
        )
    service = ScoringService(store, config)

    try:
        if args.command == "demo":
            run_demo(service, overs=args.overs, seed=args.seed)
        else:
            args.func(service, args)
    except ScorebookError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
