from __future__ import annotations

import enum
import logging
from datetime import date

import requests
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mlbv.errors import GameNumberNotFound, InvalidGameNumber, NoGameAvailable, UnexpectedApiShape
from mlbv.http import parse_model, send
from mlbv.teams import Team

logger = logging.getLogger(__name__)

API = "https://statsapi.mlb.com/api"
SCHEDULE = f"{API}/v1/schedule"
HYDRATE = ",".join([
    "broadcasts(all)",
    "game(content(media(epg)),editorial(preview,recap))",
    "linescore",
    "team",
    "probablePitcher(note)",
])


class StatsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- wire models ---------------------------------------------------------------

class GameStatus(StatsModel):
    abstract_game_state: str
    detailed_state: str = ""
    coded_game_state: str = ""
    status_code: str = ""

    @property
    def is_live(self) -> bool:
        return self.abstract_game_state == "Live"


class GameTeam(StatsModel):
    id: int
    name: str


class GameTeamStats(StatsModel):
    team: GameTeam
    score: int | None = None


class Matchup(StatsModel):
    home: GameTeamStats
    away: GameTeamStats


class Score(StatsModel):
    runs: int | None = None
    hits: int | None = None
    errors: int | None = None


class ScoreTeams(StatsModel):
    home: Score = Field(default_factory=Score)
    away: Score = Field(default_factory=Score)


class Linescore(StatsModel):
    current_inning: int | None = None
    inning_half: str | None = None
    teams: ScoreTeams = Field(default_factory=ScoreTeams)


class BroadcastMediaState(StatsModel):
    media_state_code: str = ""


class Broadcast(StatsModel):
    kind: str = Field(default="", alias="type")
    name: str = ""
    language: str = ""
    is_national: bool = False
    home_away: str = ""
    available_for_streaming: bool = False
    media_state: BroadcastMediaState | None = None

    @property
    def orientation(self) -> str:
        return "national" if self.is_national else self.home_away

    @property
    def is_off(self) -> bool:
        return self.media_state is not None and self.media_state.media_state_code == "MEDIA_OFF"


class HighlightPlayback(StatsModel):
    name: str = ""
    url: str


class HighlightItem(StatsModel):
    headline: str = ""
    playbacks: list[HighlightPlayback] = Field(default_factory=list)


class HighlightGroup(StatsModel):
    title: str
    items: list[HighlightItem] = Field(default_factory=list)


class GameMedia(StatsModel):
    epg_alternate: list[HighlightGroup] | None = None


class GameContent(StatsModel):
    media: GameMedia | None = None


class GameRecord(StatsModel):
    game_pk: int
    game_date: str = ""
    game_number: int = 1
    games_in_series: int | None = None
    series_game_number: int | None = None
    status: GameStatus
    teams: Matchup
    linescore: Linescore | None = None
    broadcasts: list[Broadcast] = Field(default_factory=list)
    content: GameContent | None = None

    def involves(self, team: Team) -> bool:
        return team.id in (self.teams.home.team.id, self.teams.away.team.id)

    @property
    def highlights(self) -> list[HighlightGroup]:
        if self.content is None or self.content.media is None:
            return []
        return self.content.media.epg_alternate or []


class DaySchedule(StatsModel):
    day: date = Field(alias="date")
    games: list[GameRecord] = Field(default_factory=list)


class ScheduleResponse(StatsModel):
    dates: list[DaySchedule] = Field(default_factory=list)
    total_games: int | None = None


class HighlightType(enum.Enum):
    CONDENSED_GAME = "Extended Highlights"
    RECAP = "Daily Recap"


# --- fetching ------------------------------------------------------------------

def fetch_schedule(session: requests.Session, start_date: date, end_date: date) -> ScheduleResponse:
    params = {
        "sportId": 1,
        "startDate": start_date.isoformat(),
        "endDate": end_date.isoformat(),
        "hydrate": HYDRATE,
    }
    r = send(session, "GET", SCHEDULE, "Schedule fetch", params=params, headers={"Accept": "application/json"})
    return parse_model(r, ScheduleResponse, "schedule")


def fetch_schedule_by_range(session: requests.Session, start_date: date, end_date: date) -> list[DaySchedule] | None:
    resp = fetch_schedule(session, start_date, end_date)
    # No games scheduled means no dates come back at all.
    return resp.dates or None


def fetch_schedule_by_date(session: requests.Session, day: date) -> DaySchedule | None:
    resp = fetch_schedule(session, day, day)
    if not resp.dates:
        return None
    if len(resp.dates) > 1:
        raise UnexpectedApiShape(f"Expected 1 date but got {len(resp.dates)}; possible API change")
    return resp.dates[0]


def find_team_games(schedule: DaySchedule, team: Team) -> list[GameRecord] | None:
    games = [g for g in schedule.games if g.involves(team)]
    return games or None


# --- selection -----------------------------------------------------------------

def select_game(games: list[GameRecord], game_number: int | None = None) -> GameRecord:
    """
    Pick one game out of a team's games for a single day.

    A lone game is returned as-is. For a doubleheader an explicit ``game_number``
    (1 or 2) must match a game's ``game_number`` exactly; without one, a live
    game wins, then game 1, then whatever is listed first.
    """
    if not games:
        raise NoGameAvailable("No game available to select")
    if len(games) == 1:
        return games[0]

    if game_number is not None:
        if game_number not in (1, 2):
            logger.warning("Invalid game number: %s", game_number)
            raise InvalidGameNumber(f"Invalid game number {game_number}; expected 1 or 2")
        logger.debug("Requested game number %s", game_number)
        for g in games:
            if g.game_number == game_number:
                return g
        raise GameNumberNotFound(f"No game {game_number} found among {len(games)} games")

    logger.debug("Doubleheader detected but no game number specified")
    for g in games:
        if g.status.is_live:
            logger.info("Game %s is currently live; defaulting to live broadcast", g.game_number)
            return g
    for g in games:
        if g.game_number == 1:
            logger.info("Defaulting to game 1")
            return g
    return games[0]
