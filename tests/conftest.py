from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

OKTA_JS = 'var x=1;const e={production:{clientId:"0oa3e1nutA1HLzAKG356",issuer:"https://ids.mlb.com"}};'
AUTHORIZE_HTML = (
    "<html><script>\n"
    "var data = {};\n"
    "data.code = 'abc\\x2Ddef';\n"
    "data.state = 'xyz';\n"
    "</script></html>"
)
TOKEN_BODY = {
    "token_type": "Bearer",
    "expires_in": 3600,
    "access_token": "access-123",
    "scope": "openid profile email",
    "id_token": "id-456",
}


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)
        self.encoding = None
        self.headers: dict[str, str] = {}

    def json(self) -> Any:
        return json.loads(self.text)


@dataclass
class Call:
    method: str
    url: str
    kwargs: dict[str, Any]


@dataclass
class FakeHttp:
    """Stands in for requests.Session; routes by method + URL prefix."""

    routes: list[tuple[str, str, Any]] = field(default_factory=list)
    calls: list[Call] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    def add(self, method: str, url: str, responder: Any) -> FakeHttp:
        self.routes.append((method, url, responder))
        return self

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(Call(method, url, kwargs))
        for m, prefix, responder in self.routes:
            if m == method and url.startswith(prefix):
                if isinstance(responder, BaseException):
                    raise responder
                if callable(responder):
                    return responder(method, url, kwargs)
                return responder
        raise AssertionError(f"unexpected request {method} {url}")

    def calls_to(self, prefix: str) -> list[Call]:
        return [c for c in self.calls if c.url.startswith(prefix)]


def graphql(responses: dict[str, FakeResponse]) -> Callable[[str, str, dict], FakeResponse]:
    def respond(method: str, url: str, kwargs: dict) -> FakeResponse:
        return responses[kwargs["json"]["operationName"]]
    return respond


def make_game(
    game_pk: int,
    home: tuple[int, str] = (141, "Toronto Blue Jays"),
    away: tuple[int, str] = (147, "New York Yankees"),
    state: str = "Preview",
    game_number: int = 1,
    broadcasts: list[dict] | None = None,
    highlights: list[dict] | None = None,
) -> dict:
    game = {
        "gamePk": game_pk,
        "gameDate": "2024-10-01T23:07:00Z",
        "gameNumber": game_number,
        "gamesInSeries": 3,
        "seriesGameNumber": 1,
        "status": {
            "abstractGameState": state,
            "detailedState": {"Live": "In Progress"}.get(state, state),
            "codedGameState": state[0],
            "statusCode": state[0],
        },
        "teams": {
            "home": {"team": {"id": home[0], "name": home[1], "link": "/api/v1/teams/x"}, "score": 3},
            "away": {"team": {"id": away[0], "name": away[1], "link": "/api/v1/teams/y"}, "score": 2},
        },
        "linescore": {
            "currentInning": 9,
            "inningHalf": "Bottom",
            "teams": {"home": {"runs": 3, "hits": 8, "errors": 0}, "away": {"runs": 2, "hits": 6, "errors": 1}},
        },
        "broadcasts": broadcasts or [],
    }
    if highlights is not None:
        game["content"] = {"link": "/x", "media": {"epgAlternate": highlights, "freeGame": False}}
    return game


def make_schedule(*days: tuple[str, list[dict]]) -> dict:
    return {
        "totalGames": sum(len(games) for _, games in days),
        "dates": [{"date": d, "games": games} for d, games in days],
    }


def make_stream(media_id: str, feed_type: str, media_type: str = "VIDEO", state: str = "ON", language: str = "en") -> dict:
    return {
        "mediaId": media_id,
        "feedType": feed_type,
        "language": language,
        "callSign": "SNET",
        "mediaState": {"state": state, "mediaType": media_type, "contentExperience": "ANY"},
    }


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()
