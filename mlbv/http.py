from __future__ import annotations

import logging
from typing import Any, TypeVar

import requests
from pydantic import BaseModel

from mlbv.errors import ResponseParseError, TransportError, UnsuccessfulStatus

logger = logging.getLogger(__name__)

UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 20

M = TypeVar("M", bound=BaseModel)


def http_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({
        "User-Agent": UA,
        "Accept-Encoding": "gzip, deflate, br",
    })
    return s


def send(session: requests.Session, method: str, url: str, label: str, **kwargs: Any) -> requests.Response:
    """Issue one request; transport failures and non-2xx replies become typed errors."""
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
    logger.debug("%s: %s %s", label, method, url)
    try:
        r = session.request(method, url, **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"{label} failed: {e}") from e
    if not 200 <= r.status_code < 300:
        logger.debug("%s: http %s body=%s", label, r.status_code, r.text[:200])
        raise UnsuccessfulStatus(label, r.status_code, r.text[:200])
    return r


def parse_model(response: requests.Response, model: type[M], label: str) -> M:
    # requests' JSONDecodeError and pydantic's ValidationError are both ValueErrors
    try:
        return model.model_validate(response.json())
    except ValueError as e:
        raise ResponseParseError(f"Failed to parse {label} response: {e}") from e
