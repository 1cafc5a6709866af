#!/usr/bin/env python3
"""
mlbv: Watch or list MLB games from your shell.

- Lists the day's schedule (or a range of days) with scores, feeds and highlights
- Resolves a team's game into an MLB.tv stream and hands it to a media player
- Plays condensed games and recaps without logging in

Note: Uses MLB StatsAPI schedule + the MLB.tv media gateway.
"""

from __future__ import annotations
import argparse, sys
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import requests

from mlbv import config as appconfig
from mlbv.display import DisplayMode, colorize, format_schedule_table, format_schedules, warn
from mlbv.errors import MlbvError
from mlbv.http import http_session
from mlbv.logging_config import configure_logging
from mlbv.player import handle_playback_url
from mlbv.schedule import HighlightType, fetch_schedule_by_date, fetch_schedule_by_range
from mlbv.session import AuthSession
from mlbv.streams import FeedType, MediaType, find_highlight_playback_url, pick_highlight_url, resolve_playback_url
from mlbv.teams import Team, resolve_team
from mlbv.token_cache import TokenCache

DATE_FORMATS = ("%Y-%m-%d", "%m-%d-%Y", "%m/%d/%Y")
EARLIEST_ARCHIVE_YEAR = 2022

# --- modes --------------------------------------------------------------------

@dataclass(frozen=True)
class InitConfig:
    pass


@dataclass(frozen=True)
class PlayStream:
    team: Team
    day: date
    media_type: MediaType
    feed_type: FeedType | None
    game_number: int | None


@dataclass(frozen=True)
class PlayCondensedGame:
    team: Team
    day: date
    game_number: int | None


@dataclass(frozen=True)
class PlayRecap:
    team: Team | None
    day: date
    game_number: int | None


@dataclass(frozen=True)
class ShowRange:
    start: date
    end: date


@dataclass(frozen=True)
class ShowDay:
    day: date


Mode = InitConfig | PlayStream | PlayCondensedGame | PlayRecap | ShowRange | ShowDay

# --- argument types -----------------------------------------------------------

def game_date(s: str) -> date:
    for fmt in DATE_FORMATS:
        try:
            d = datetime.strptime(s, fmt).date()
        except ValueError:
            continue
        if d.year < EARLIEST_ARCHIVE_YEAR:
            raise argparse.ArgumentTypeError("MLB.tv archives only go back to the start of 2022.")
        return d
    raise argparse.ArgumentTypeError(f"Invalid date format: '{s}'; expected YYYY-MM-DD")


def team_arg(s: str) -> Team:
    try:
        return resolve_team(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def feed_arg(s: str) -> FeedType:
    try:
        return FeedType.parse(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="mlbv", description="Command-line utility for MLB.tv and the MLB stats API")
    ap.add_argument("--init", action="store_true", help="Re-initialize the config file (prompts for credentials)")
    ap.add_argument("-t", "--team", type=team_arg, help="Team code, name or id (e.g. wsh, nym, bos)")
    when = ap.add_mutually_exclusive_group()
    when.add_argument("-d", "--date", type=game_date, help="YYYY-MM-DD, MM-DD-YYYY or MM/DD/YYYY (default: today)")
    when.add_argument("--tomorrow", action="store_true", help="Shortcut: tomorrow's games")
    when.add_argument("--yesterday", action="store_true", help="Shortcut: yesterday's games")
    when.add_argument("--days", type=int, help="Number of days to list; negative goes back from today")
    ap.add_argument("-f", "--feed", type=feed_arg, help="Preferred feed (home, away, national)")
    ap.add_argument("--audio", action="store_true", help="Prefer audio broadcasts")
    ap.add_argument("-g", "--game-number", type=int, help="Game 1 or 2 of a doubleheader")
    highlights = ap.add_mutually_exclusive_group()
    highlights.add_argument("--condensed", action="store_true", help="Play the condensed game (needs --team)")
    highlights.add_argument("--recap", action="store_true", help="Play recaps: one team's, or every game of the day")
    ap.add_argument("--url", action="store_true", help="Print the stream URL instead of launching a player")
    scores = ap.add_mutually_exclusive_group()
    scores.add_argument("--scores", action="store_true", help="Show scores in schedule tables")
    scores.add_argument("--no-scores", action="store_true", help="Hide scores in schedule tables")
    ap.add_argument("--no-color", action="store_true", help="Disable ANSI color")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv)")
    return ap


def resolve_mode(ap: argparse.ArgumentParser, args: argparse.Namespace, today: date) -> Mode:
    if args.init:
        return InitConfig()

    if args.date:
        day = args.date
    elif args.yesterday:
        day = today - timedelta(days=1)
    elif args.tomorrow:
        day = today + timedelta(days=1)
    else:
        day = today

    if args.days is not None and args.team:
        ap.error("--days cannot be combined with --team")
    if args.days is not None and (args.condensed or args.recap):
        ap.error("--days cannot be combined with --condensed or --recap")

    if args.condensed:
        if not args.team:
            ap.error("--condensed requires --team")
        return PlayCondensedGame(team=args.team, day=day, game_number=args.game_number)

    if args.recap:
        return PlayRecap(team=args.team, day=day, game_number=args.game_number)

    if args.team:
        # Assume video unless audio is asked for
        media_type = MediaType.AUDIO if args.audio else MediaType.VIDEO
        return PlayStream(
            team=args.team, day=day, media_type=media_type,
            feed_type=args.feed, game_number=args.game_number,
        )

    if args.days is not None:
        offset = today + timedelta(days=args.days)
        return ShowRange(start=min(today, offset), end=max(today, offset))

    return ShowDay(day=day)

# --- runners ------------------------------------------------------------------

def run(mode: Mode, args: argparse.Namespace, cfg: appconfig.AppConfig) -> int:
    color = not args.no_color
    if args.scores:
        scores = True
    elif args.no_scores:
        scores = False
    else:
        scores = cfg.display.scores
    player = cfg.stream.video_player
    display_mode = DisplayMode.from_terminal_width()

    if isinstance(mode, InitConfig):
        path = appconfig.init_config()
        # a token issued for the old credentials must not outlive them
        TokenCache(appconfig.token_cache_path()).clear()
        print(f"Wrote config to {path}")
        return 0

    if isinstance(mode, PlayStream):
        creds = appconfig.ensure_credentials(cfg)
        auth = AuthSession(cache=TokenCache(appconfig.token_cache_path()))
        authorized = auth.authorize(creds.username, creds.password)
        url = resolve_playback_url(
            authorized, mode.team, mode.day, mode.media_type,
            feed_type=mode.feed_type, game_number=mode.game_number,
            language=cfg.stream.language or None,
        )
        if url is None:
            warn(f"Nothing to play for the {mode.team.name} on {mode.day}", color)
            return 0
        handle_playback_url(url, args.url, player)
        return 0

    session = http_session()

    if isinstance(mode, PlayCondensedGame):
        url = find_highlight_playback_url(
            session, mode.team, mode.day, HighlightType.CONDENSED_GAME, mode.game_number
        )
        if url is None:
            warn(f"No condensed game for the {mode.team.name} on {mode.day}", color)
            return 0
        handle_playback_url(url, args.url, player)
        return 0

    if isinstance(mode, PlayRecap):
        if mode.team is not None:
            url = find_highlight_playback_url(session, mode.team, mode.day, HighlightType.RECAP, mode.game_number)
            if url is None:
                warn(f"No recap for the {mode.team.name} on {mode.day}", color)
                return 0
            handle_playback_url(url, args.url, player)
            return 0
        return play_all_recaps(session, mode.day, args.url, player, color)

    if isinstance(mode, ShowRange):
        schedules = fetch_schedule_by_range(session, mode.start, mode.end)
        if not schedules:
            print(f"No games scheduled between {mode.start} and {mode.end}")
            return 0
        print(format_schedules(schedules, scores, cfg.display.favorite_teams, color, display_mode))
        return 0

    schedule = fetch_schedule_by_date(session, mode.day)
    if schedule is None:
        print(f"No games scheduled for {mode.day}")
        return 0
    print(format_schedule_table(schedule, scores, cfg.display.favorite_teams, color, display_mode))
    return 0


def play_all_recaps(session: requests.Session, day: date, print_url: bool, player: str | None, color: bool) -> int:
    schedule = fetch_schedule_by_date(session, day)
    if schedule is None:
        print(f"No games scheduled for {day}")
        return 0

    recaps: list[tuple[str, str]] = []
    for g in schedule.games:
        url = pick_highlight_url(g, HighlightType.RECAP)
        if url:
            recaps.append((f"{g.teams.away.team.name} at {g.teams.home.team.name}", url))

    print(f"Found {len(recaps)} recap(s) for {day}:")
    for label, _ in recaps:
        print(f"    {label}")
    for label, url in recaps:
        if not print_url:
            print(colorize(color, f"Playing: {label}", "32"))
        handle_playback_url(url, print_url, player)
    return 0

# --- cli ----------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    mode = resolve_mode(ap, args, date.today())
    color = not args.no_color

    configure_logging(args.verbose)
    try:
        cfg = appconfig.load_config()
        if args.verbose == 0:
            configure_logging(0, cfg.logging.level)
        return run(mode, args, cfg)
    except MlbvError as e:
        print(colorize(color, f"Error: {e}", "31"), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nBye.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
