from __future__ import annotations

import enum
import logging
from datetime import date
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from mlbv import queries
from mlbv.errors import GraphQLParseFailure, GraphQLRequestFailure, TransportError, UnsuccessfulStatus
from mlbv.http import send
from mlbv.schedule import GameRecord, HighlightType, fetch_schedule_by_date, find_team_games, select_game
from mlbv.session import AuthorizedSession
from mlbv.teams import Team

logger = logging.getLogger(__name__)

MEDIA_GATEWAY_URL = "https://media-gateway.mlb.com/graphql"
BAMSDK_VERSION = "3.4"
BAMSDK_PLATFORM = "macintosh"
ORIGIN = "https://www.mlb.com"
CONTENT_SEARCH_LIMIT = 16
PLAYBACK_PREFERENCE = ("mp4Avc", "hlsCloud")

M = TypeVar("M", bound=BaseModel)


class FeedType(str, enum.Enum):
    HOME = "HOME"
    AWAY = "AWAY"
    NATIONAL = "NETWORK"

    @classmethod
    def parse(cls, s: str) -> FeedType:
        try:
            return {"home": cls.HOME, "away": cls.AWAY, "national": cls.NATIONAL}[s.strip().lower()]
        except KeyError:
            raise ValueError(f"Invalid feed type: {s}; expected 'home', 'away' or 'national'") from None


class MediaType(str, enum.Enum):
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"


class GatewayModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MediaState(GatewayModel):
    state: str
    media_type: str


class StreamCandidate(GatewayModel):
    media_id: str
    feed_type: str
    language: str = ""
    call_sign: str = ""
    media_state: MediaState

    @property
    def is_off(self) -> bool:
        return self.media_state.state == "OFF"


class ContentSearchResults(GatewayModel):
    total: int | None = None
    content: list[StreamCandidate] = Field(default_factory=list)


class InitSessionResults(GatewayModel):
    device_id: str
    session_id: str


class PlaybackGrant(GatewayModel):
    url: str
    token: str | None = None
    expiration: str | None = None
    cdn: str | None = None


class InitPlaybackSessionResults(GatewayModel):
    playback_session_id: str | None = None
    playback: PlaybackGrant


# --- feed resolution -----------------------------------------------------------

def _matching(
    candidates: list[StreamCandidate],
    media_type: MediaType,
    feed_type: FeedType,
    language: str | None,
) -> StreamCandidate | None:
    for c in candidates:
        if (
            c.feed_type == feed_type.value
            and c.media_state.media_type == media_type.value
            and not c.is_off
            and (language is None or c.language == language)
        ):
            return c
    return None


def feed_tiers(media_type: MediaType, feed_type: FeedType) -> list[tuple[MediaType, FeedType, str]]:
    # Order matters: a national broadcast of the requested media beats audio of the team's own feed.
    return [
        (media_type, feed_type, "Found feed matching user preferences"),
        (media_type, FeedType.NATIONAL, "Home/away feed not found; falling back to national"),
        (MediaType.AUDIO, feed_type, "Video feed not found; user may be blacked out; trying audio"),
    ]


def find_best_feed(
    candidates: list[StreamCandidate],
    media_type: MediaType,
    feed_type: FeedType,
    language: str | None = "en",
) -> StreamCandidate | None:
    for m_type, f_type, message in feed_tiers(media_type, feed_type):
        stream = _matching(candidates, m_type, f_type, language)
        if stream is not None:
            logger.info("%s (%s %s)", message, f_type.name, m_type.name)
            return stream
        logger.debug("No streams found for %s %s", f_type.name, m_type.name)

    for c in candidates:
        if not c.is_off:
            logger.warning("Couldn't find stream matching preferences; grabbing first available")
            return c
    logger.debug("No active streams among %d candidates", len(candidates))
    return None


def default_feed_type(game: GameRecord, team: Team) -> FeedType:
    return FeedType.HOME if game.teams.home.team.id == team.id else FeedType.AWAY


# --- media gateway -------------------------------------------------------------

class MediaGatewayClient:
    """The three GraphQL operations needed to turn a gamePk into a stream URL."""

    def __init__(self, authorized: AuthorizedSession):
        self.http = authorized.http
        self.access_token = authorized.token.access_token

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "x-bamsdk-version": BAMSDK_VERSION,
            "x-bamsdk-platform": BAMSDK_PLATFORM,
            "Origin": ORIGIN,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _post(self, operation: str, query: str, variables: dict[str, Any], model: type[M]) -> M:
        body = {"operationName": operation, "query": query, "variables": variables}
        try:
            r = send(self.http, "POST", MEDIA_GATEWAY_URL, operation, json=body, headers=self._headers())
        except (TransportError, UnsuccessfulStatus) as e:
            raise GraphQLRequestFailure(f"{operation} request failed: {e}") from e

        try:
            payload = r.json()
        except ValueError as e:
            raise GraphQLParseFailure(f"Failed to decode {operation} response: {e}") from e
        data = (payload.get("data") or {}).get(operation) if isinstance(payload, dict) else None
        if data is None:
            errors = payload.get("errors") if isinstance(payload, dict) else None
            messages = "; ".join(str(e.get("message", e)) for e in errors or [] if isinstance(e, dict))
            raise GraphQLParseFailure(f"{operation} returned no data{': ' + messages if messages else ''}")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise GraphQLParseFailure(f"Failed to parse {operation} response: {e}") from e

    def content_search(self, game_pk: int) -> list[StreamCandidate]:
        search = (
            f'GamePk={game_pk} AND ContentType="GAME" RETURNING '
            "HomeTeamId, HomeTeamName, AwayTeamId, AwayTeamName, Date, "
            "MediaType, ContentExperience, MediaState, PartnerCallLetters"
        )
        variables = {"limit": CONTENT_SEARCH_LIMIT, "query": search}
        results = self._post("contentSearch", queries.CONTENT_SEARCH, variables, ContentSearchResults)
        logger.debug("contentSearch for %s returned %d feeds", game_pk, len(results.content))
        return results.content

    def init_session(self) -> tuple[str, str]:
        variables = {"device": {}, "clientType": "WEB"}
        results = self._post("initSession", queries.INIT_SESSION, variables, InitSessionResults)
        return results.session_id, results.device_id

    def init_playback_session(self, media_id: str) -> PlaybackGrant:
        # A fresh device/session pair for every playback request.
        session_id, device_id = self.init_session()
        variables = {
            "adCapabilities": ["GOOGLE_STANDALONE_AD_PODS"],
            "deviceId": device_id,
            "mediaId": media_id,
            "quality": "PLACEHOLDER",
            "sessionId": session_id,
        }
        results = self._post(
            "initPlaybackSession", queries.INIT_PLAYBACK_SESSION, variables, InitPlaybackSessionResults
        )
        return results.playback


# --- pipelines -----------------------------------------------------------------

def resolve_playback_url(
    authorized: AuthorizedSession,
    team: Team,
    day: date,
    media_type: MediaType,
    feed_type: FeedType | None = None,
    game_number: int | None = None,
    language: str | None = "en",
) -> str | None:
    schedule = fetch_schedule_by_date(authorized.http, day)
    team_games = find_team_games(schedule, team) if schedule else None
    if not team_games:
        logger.info("No games found for the %s on %s", team.name, day)
        return None

    game = select_game(team_games, game_number)
    if feed_type is None:
        feed_type = default_feed_type(game, team)

    gateway = MediaGatewayClient(authorized)
    candidates = gateway.content_search(game.game_pk)
    stream = find_best_feed(candidates, media_type, feed_type, language)
    if stream is None:
        logger.warning("No streams available; user may not have access to this content")
        return None

    grant = gateway.init_playback_session(stream.media_id)
    return grant.url


def pick_highlight_url(game: GameRecord, highlight_type: HighlightType) -> str | None:
    for group in game.highlights:
        if group.title != highlight_type.value:
            continue
        for item in group.items:
            if not item.playbacks:
                continue
            by_name = {p.name: p.url for p in item.playbacks}
            for name in PLAYBACK_PREFERENCE:
                if name in by_name:
                    return by_name[name]
            return item.playbacks[0].url
    return None


def find_highlight_playback_url(
    session: requests.Session,
    team: Team,
    day: date,
    highlight_type: HighlightType,
    game_number: int | None = None,
) -> str | None:
    schedule = fetch_schedule_by_date(session, day)
    team_games = find_team_games(schedule, team) if schedule else None
    if not team_games:
        logger.info("No games found for the %s on %s", team.name, day)
        return None

    game = select_game(team_games, game_number)
    url = pick_highlight_url(game, highlight_type)
    if url is None:
        logger.warning("No %s available yet for the %s on %s", highlight_type.value, team.name, day)
    return url
