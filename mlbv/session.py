from __future__ import annotations

import base64
import enum
import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import requests
from pydantic import BaseModel, ConfigDict, Field

from mlbv.errors import (
    AuthFailure,
    InvalidAuthTransition,
    ResponseParseError,
    TokenExchangeFailure,
    UnsuccessfulStatus,
)
from mlbv.http import http_session, parse_model, send
from mlbv.scrape import OktaScraper, ScrapeStrategy
from mlbv.token_cache import SessionToken, TokenCache, utcnow

logger = logging.getLogger(__name__)

AUTHN_URL = "https://ids.mlb.com/api/v1/authn"
MLB_OKTA_URL = "https://www.mlbstatic.com/mlb.com/vendor/mlb-okta/mlb-okta.js"
OKTA_AUTHORIZE_URL = "https://ids.mlb.com/oauth2/aus1m088yK07noBfh356/v1/authorize"
OKTA_TOKEN_URL = "https://ids.mlb.com/oauth2/aus1m088yK07noBfh356/v1/token"
REDIRECT_URI = "https://www.mlb.com/login"


class AuthState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CODE_RECEIVED = "code_received"
    AUTHORIZED = "authorized"


class AuthnResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_token: str = Field(alias="sessionToken")


@dataclass(frozen=True)
class Pkce:
    verifier: str
    challenge: str

    @classmethod
    def generate(cls) -> Pkce:
        verifier = secrets.token_urlsafe(32)
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
        return cls(verifier=verifier, challenge=challenge)


@dataclass(frozen=True)
class AuthorizedSession:
    """HTTP session plus the bearer token every media-gateway call needs."""

    http: requests.Session
    token: SessionToken


class AuthSession:
    """
    Okta login for mlb.com, as an explicit state machine:

        UNAUTHENTICATED --authenticate()--> AUTHENTICATED
        AUTHENTICATED --fetch_authorization_code()--> CODE_RECEIVED
        CODE_RECEIVED --exchange_token()--> AUTHORIZED

    Calling a step from any other state raises InvalidAuthTransition.
    ``authorize()`` runs the whole chain unless the cache holds a valid token.
    """

    def __init__(
        self,
        http: requests.Session | None = None,
        cache: TokenCache | None = None,
        scraper: ScrapeStrategy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.http = http if http is not None else http_session()
        self.cache = cache
        self.scraper = scraper or OktaScraper()
        self.clock = clock
        self.state = AuthState.UNAUTHENTICATED
        self.token: SessionToken | None = None
        self._session_token: str | None = None
        self._client_id: str | None = None
        self._code: str | None = None
        self._pkce: Pkce | None = None

    def _expect(self, state: AuthState, step: str) -> None:
        if self.state is not state:
            raise InvalidAuthTransition(f"{step}() requires state {state.value}, session is {self.state.value}")

    def authenticate(self, username: str, password: str) -> AuthSession:
        self._expect(AuthState.UNAUTHENTICATED, "authenticate")
        body = {
            "username": username,
            "password": password,
            "options": {
                "multiOptionalFactorEnroll": False,
                "warnBeforePasswordExpired": True,
            },
        }
        try:
            r = send(self.http, "POST", AUTHN_URL, "Okta login", json=body)
            authn = parse_model(r, AuthnResponse, "Okta login")
        except UnsuccessfulStatus as e:
            raise AuthFailure(
                f"Login rejected (http {e.status}); check credentials, or disable a VPN if one is active"
            ) from e
        except ResponseParseError as e:
            raise AuthFailure(f"Login response had no session token: {e}") from e
        logger.info("Logged in to mlb.com as %s", username)
        self._session_token = authn.session_token
        self.state = AuthState.AUTHENTICATED
        return self

    def fetch_client_id(self) -> str:
        r = send(self.http, "GET", MLB_OKTA_URL, "Okta JS bundle")
        return self.scraper.extract_client_id(r.text)

    def fetch_authorization_code(self) -> AuthSession:
        self._expect(AuthState.AUTHENTICATED, "fetch_authorization_code")
        client_id = self.fetch_client_id()
        logger.debug("Okta client id: %s", client_id)

        pkce = Pkce.generate()
        params = {
            "client_id": client_id,
            "response_type": "code",
            "response_mode": "okta_post_message",
            "scope": "openid profile email",
            "redirect_uri": REDIRECT_URI,
            "state": secrets.token_urlsafe(48),
            "nonce": secrets.token_urlsafe(48),
            "code_challenge": pkce.challenge,
            "code_challenge_method": "S256",
            "sessionToken": self._session_token,
        }
        r = send(self.http, "GET", OKTA_AUTHORIZE_URL, "Okta authorize", params=params)
        r.encoding = "utf-8"
        self._code = self.scraper.extract_authorization_code(r.text)
        self._client_id = client_id
        self._pkce = pkce
        self.state = AuthState.CODE_RECEIVED
        return self

    def exchange_token(self) -> AuthSession:
        self._expect(AuthState.CODE_RECEIVED, "exchange_token")
        form = {
            "client_id": self._client_id,
            "redirect_uri": REDIRECT_URI,
            "grant_type": "authorization_code",
            "code_verifier": self._pkce.verifier,
            "code": self._code,
        }
        try:
            r = send(
                self.http, "POST", OKTA_TOKEN_URL, "Okta token exchange",
                data=form, headers={"Accept": "application/json"},
            )
        except UnsuccessfulStatus as e:
            raise TokenExchangeFailure(f"Token exchange rejected (http {e.status})") from e
        token = parse_model(r, SessionToken, "Okta token exchange")
        self.token = token.with_expiry(self.clock())
        # The code and verifier are single use.
        self._code = None
        self._pkce = None
        self.state = AuthState.AUTHORIZED
        return self

    def authorized(self) -> AuthorizedSession:
        self._expect(AuthState.AUTHORIZED, "authorized")
        return AuthorizedSession(http=self.http, token=self.token)

    def authorize(self, username: str, password: str) -> AuthorizedSession:
        if self.state is AuthState.AUTHORIZED and self.token.is_valid(self.clock()):
            return self.authorized()

        cached = self.cache.load() if self.cache else None
        if cached is not None and cached.is_valid(self.clock()):
            logger.info("Using cached mlb.com token (expires %s)", cached.expires_at)
            self.token = cached
            self.state = AuthState.AUTHORIZED
            return self.authorized()

        logger.info("No valid cached token; signing in")
        self.state = AuthState.UNAUTHENTICATED
        self.authenticate(username, password).fetch_authorization_code().exchange_token()
        if self.cache:
            self.cache.save(self.token)
        return self.authorized()
