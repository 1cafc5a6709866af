from __future__ import annotations

import re
from typing import Protocol

from mlbv.errors import AuthorizationCodeNotFound, ClientIdNotFound


class ScrapeStrategy(Protocol):
    """Pulls the Okta client id and authorization code out of upstream markup."""

    def extract_client_id(self, text: str) -> str: ...

    def extract_authorization_code(self, text: str) -> str: ...


class OktaScraper:
    CLIENT_ID_RE = re.compile(r'production:\{clientId:"([^"]+)",')
    # e.g.  data.code = 'an_okta_code\x2Dwith_escapes';
    AUTH_CODE_RE = re.compile(r"data\.code\s*=\s*'([^']+)'")

    def extract_client_id(self, text: str) -> str:
        m = self.CLIENT_ID_RE.search(text)
        if not m:
            raise ClientIdNotFound("clientId not found in Okta JS bundle")
        return m.group(1)

    def extract_authorization_code(self, text: str) -> str:
        m = self.AUTH_CODE_RE.search(text)
        if not m:
            raise AuthorizationCodeNotFound("Authorization code not found in okta_post_message response")
        try:
            return unescape_js(m.group(1))
        except UnicodeDecodeError as e:
            raise AuthorizationCodeNotFound(f"Authorization code has a malformed escape: {e}") from e


def unescape_js(s: str) -> str:
    return s.encode("utf-8").decode("unicode_escape")
