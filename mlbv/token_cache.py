from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# A token this close to expiry is treated as already expired.
EXPIRY_MARGIN = timedelta(seconds=60)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionToken(BaseModel):
    token_type: str
    access_token: str
    scope: str
    id_token: str
    expires_in: int
    expires_at: datetime | None = None

    def with_expiry(self, now: datetime | None = None) -> SessionToken:
        # The token endpoint only reports a relative lifetime.
        now = now or utcnow()
        return self.model_copy(update={"expires_at": now + timedelta(seconds=self.expires_in)})

    def is_valid(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or utcnow()
        return now + EXPIRY_MARGIN < self.expires_at


class TokenCache:
    """Single bearer token persisted as JSON at ``path``."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> SessionToken | None:
        if not self.path.exists():
            logger.debug("No cached token at %s", self.path)
            return None
        try:
            token = SessionToken.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable token cache %s (%s)", self.path, e)
            return None
        if token.expires_at is None:
            logger.warning("Ignoring cached token without expiry at %s", self.path)
            return None
        return token

    def save(self, token: SessionToken) -> None:
        if token.expires_at is None:
            raise ValueError("refusing to cache a token without expires_at")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file and swap it in; concurrent runs are last-writer-wins.
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".token-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(token.model_dump_json())
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug("Cached token at %s (expires %s)", self.path, token.expires_at)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
