from __future__ import annotations

import enum
import shutil
import sys
from datetime import datetime

from mlbv.schedule import DaySchedule, GameRecord
from mlbv.teams import find_by_id

FULL_COLUMNS = ("Matchup", "Series", "Score", "State", "Feeds", "Highlights")
COMPACT_COLUMNS = ("Matchup", "Score", "State", "Feeds")
# Below this many columns the full table wraps.
COMPACT_WIDTH = 120


class DisplayMode(enum.Enum):
    FULL = "full"
    COMPACT = "compact"

    @classmethod
    def from_terminal_width(cls, columns: int | None = None) -> DisplayMode:
        if columns is None:
            columns = shutil.get_terminal_size((COMPACT_WIDTH, 24)).columns
        return cls.COMPACT if columns < COMPACT_WIDTH else cls.FULL

    @property
    def columns(self) -> tuple[str, ...]:
        return COMPACT_COLUMNS if self is DisplayMode.COMPACT else FULL_COLUMNS

# --- tiny helpers -------------------------------------------------------------

def colorize(enabled: bool, s: str, fg: str = "37") -> str:
    # cheap ANSI: fg expects '31'..'37'
    if not enabled:
        return s
    return f"\x1b[{fg}m{s}\x1b[0m"


def warn(msg: str, color: bool = True):
    print(colorize(color, f"⚠ {msg}", "33"), file=sys.stderr)


def game_time_local(g: GameRecord) -> str:
    gd = g.game_date.replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(gd).astimezone().strftime("%I:%M %p").lower()
    except ValueError:
        return "TBD"


def team_code(team_id: int, fallback: str) -> str:
    t = find_by_id(team_id)
    return t.code if t else fallback


def feeds_label(g: GameRecord) -> str:
    feeds = sorted({
        b.orientation for b in g.broadcasts
        if b.kind == "TV" and b.available_for_streaming
    })
    return ", ".join(feeds)


def highlights_label(g: GameRecord) -> str:
    titles = sorted(h.title for h in g.highlights)
    return ", ".join(titles) if titles else "None"


def score_label(g: GameRecord, scores: bool) -> str:
    if not scores:
        return ""
    ls = g.linescore
    if ls is None:
        return "-"
    away = ls.teams.away.runs if ls.teams.away.runs is not None else 0
    home = ls.teams.home.runs if ls.teams.home.runs is not None else 0
    return f"{away}-{home}"


def game_row(g: GameRecord, scores: bool = True, mode: DisplayMode = DisplayMode.FULL) -> tuple[str, ...]:
    away = g.teams.away.team
    home = g.teams.home.team
    state = g.status.detailed_state or g.status.abstract_game_state
    if mode is DisplayMode.COMPACT:
        matchup = f"{game_time_local(g)} {team_code(away.id, away.name)} @ {team_code(home.id, home.name)}"
        return (matchup, score_label(g, scores), state, feeds_label(g))

    matchup = f"{game_time_local(g)} - {away.name} at {home.name}"
    if g.series_game_number and g.games_in_series:
        series = f"{g.series_game_number}/{g.games_in_series}"
    else:
        series = ""
    return (matchup, series, score_label(g, scores), state, feeds_label(g), highlights_label(g))


def format_schedule_table(
    schedule: DaySchedule,
    scores: bool = True,
    favorites: list[str] | None = None,
    color: bool = True,
    mode: DisplayMode = DisplayMode.FULL,
) -> str:
    columns = mode.columns
    score_col = columns.index("Score")
    header = (f"{schedule.day.isoformat()} {schedule.day.strftime('%A')}",) + columns[1:]
    rows = [game_row(g, scores, mode) for g in schedule.games]
    widths = [max(len(r[i]) for r in [header, *rows]) for i in range(len(columns))]

    def fmt(r: tuple[str, ...]) -> str:
        cells = []
        for i, cell in enumerate(r):
            # scores read better right-aligned
            cells.append(cell.rjust(widths[i]) if i == score_col else cell.ljust(widths[i]))
        return " │ ".join(cells).rstrip()

    fav = {f.lower() for f in favorites or []}
    lines = [fmt(header), "─" * len(fmt(header))]
    for g, r in zip(schedule.games, rows):
        line = fmt(r)
        names = {g.teams.home.team.name.lower(), g.teams.away.team.name.lower()}
        if fav & names:
            line = colorize(color, line, "33")
        lines.append(line)
    return "\n".join(lines)


def format_schedules(
    schedules: list[DaySchedule],
    scores: bool = True,
    favorites: list[str] | None = None,
    color: bool = True,
    mode: DisplayMode = DisplayMode.FULL,
) -> str:
    # blank line between days
    return "\n\n".join(format_schedule_table(s, scores, favorites, color, mode) for s in schedules)
