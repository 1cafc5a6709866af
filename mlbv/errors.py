from __future__ import annotations


class MlbvError(Exception):
    """Base for every failure the resolver reports to the user."""


# --- http ----------------------------------------------------------------------

class TransportError(MlbvError):
    pass


class UnsuccessfulStatus(MlbvError):
    def __init__(self, label: str, status: int, body: str = ""):
        self.label = label
        self.status = status
        self.body = body
        super().__init__(f"{label} returned http {status}")


class ResponseParseError(MlbvError):
    pass


class UnexpectedApiShape(MlbvError):
    pass


# --- auth ----------------------------------------------------------------------

class AuthError(MlbvError):
    pass


class AuthFailure(AuthError):
    pass


class TokenExchangeFailure(AuthError):
    pass


class InvalidAuthTransition(AuthError):
    pass


class ScrapePatternNotFound(AuthError):
    pass


class ClientIdNotFound(ScrapePatternNotFound):
    pass


class AuthorizationCodeNotFound(ScrapePatternNotFound):
    pass


# --- selection -----------------------------------------------------------------

class SelectionError(MlbvError):
    pass


class NoGameAvailable(SelectionError):
    pass


class InvalidGameNumber(SelectionError):
    pass


class GameNumberNotFound(SelectionError):
    pass


# --- media gateway -------------------------------------------------------------

class GraphQLError(MlbvError):
    pass


class GraphQLRequestFailure(GraphQLError):
    pass


class GraphQLParseFailure(GraphQLError):
    pass


# --- local collaborators -------------------------------------------------------

class ConfigError(MlbvError):
    pass


class PlayerError(MlbvError):
    pass
