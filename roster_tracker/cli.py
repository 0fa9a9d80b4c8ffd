import argparse
import json
import sys
from dataclasses import asdict
from typing import List, Optional

from . import config
from .fortnite_api import FortniteClient
from .matches import project_matches
from .models import RankingRecord
from .rankings import get_tournament_rankings
from .roster import RosterError, find_roster_player, load_roster
from .windows import list_tournaments


def print_tournaments(client: FortniteClient, limit: int) -> None:
    tournaments = list_tournaments(client, limit=limit)
    print('SUMMARY_TABLE_START')
    header = f"{'Date':10} {'Event':55} {'Window':55}"
    print(header)
    print('-' * len(header))
    for t in tournaments:
        print(f"{t.display_date or '-':10} {t.event_name[:55]:55} {t.event_window_id[:55]:55}")
    print('REPORT_JSON_START')
    print(json.dumps([asdict(t) for t in tournaments], indent=2))


def print_rankings(rankings: List[RankingRecord]) -> None:
    print('SUMMARY_TABLE_START')
    header = f"{'Rank':>6} {'Player':20} {'Points':>8} {'Kills':>6} {'Wins':>5} {'Matches':>7}"
    print(header)
    print('-' * len(header))
    for r in rankings:
        print(f"{r.rank:6d} {r.player:20} {r.points:8.0f} {r.kills:6d} {r.wins:5d} {r.matches:7d}")
    # print JSON report with sentinel so tests can reliably capture
    print('REPORT_JSON_START')
    print(json.dumps([r.to_dict() for r in rankings], indent=2))


def print_matches(record: RankingRecord) -> None:
    details = project_matches(record)
    print('SUMMARY_TABLE_START')
    header = f"{'Time':10} {'Placement':>9} {'Kills':>6}  Match"
    print(header)
    print('-' * len(header))
    for m in details:
        print(f"{m.time:10} {m.placement:9d} {m.kills:6d}  {m.match_id}")
    print('REPORT_JSON_START')
    print(json.dumps([asdict(m) for m in details], indent=2))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog='roster_tracker')
    parser.add_argument('--roster', dest='roster_path', default=config.ROSTER_PATH,
                        help='Path to a roster JSON file (list of {id, username, name})')
    parser.add_argument('--cache-dir', default=config.CACHE_DIR, help='Directory to cache API responses')
    sub = parser.add_subparsers(dest='cmd')

    tour = sub.add_parser('tournaments', help='List recent tournament windows')
    tour.add_argument('--limit', type=int, default=config.TOURNAMENT_LIMIT)

    rank = sub.add_parser('rankings', help='Roster rankings for one window (real or *_Cumulative)')
    rank.add_argument('--event', required=True, help='Event id')
    rank.add_argument('--window', required=True, help='Event window id')

    match = sub.add_parser('matches', help="Match-by-match results for one roster player")
    match.add_argument('--event', required=True, help='Event id')
    match.add_argument('--window', required=True, help='Event window id')
    match.add_argument('--player', required=True, help='Roster player name, username or account id')

    args = parser.parse_args(argv)
    if args.cmd is None:
        parser.print_help()
        return 0

    try:
        roster = load_roster(args.roster_path)
    except RosterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = FortniteClient.from_env()
    if client is None:
        print(f"Error: {config.API_KEY_ENV} is not set; no data available", file=sys.stderr)
        return 1
    client.cache_dir = args.cache_dir

    if args.cmd == 'tournaments':
        print_tournaments(client, args.limit)
        return 0

    if args.cmd == 'rankings':
        print_rankings(get_tournament_rankings(args.event, args.window, client=client, roster=roster))
        return 0

    player = find_roster_player(args.player, roster)
    if player is None:
        print(f"Error: no roster player matches {args.player!r}", file=sys.stderr)
        return 1
    rankings = get_tournament_rankings(args.event, args.window, client=client, roster=roster)
    record = next((r for r in rankings if r.account_id == player.id), None)
    if record is None:
        print(f"{player.name} has no result in {args.window}")
        return 0
    print_matches(record)
    return 0


if __name__ == '__main__':
    sys.exit(main())
